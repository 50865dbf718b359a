from __future__ import annotations

import json

import pytest

from src.atis.cli import main

PROFILE = "config/facility.example.yaml"
METAR = "KJFK 011251Z 25010G18KT 10SM FEW030 BKN250 22/12 A3002"


@pytest.fixture(autouse=True)
def _no_navdata(monkeypatch):
    monkeypatch.delenv("ATIS_AIRPORTS_JSON", raising=False)
    monkeypatch.delenv("ATIS_NAVAIDS_JSON", raising=False)


def test_json_output(capsys) -> None:
    code = main(["--profile", PROFILE, "--preset", "WEATHER_ONLY", "--metar", METAR, "--letter", "d", "--json"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["station"] == "KJFK"
    assert payload["letter"] == "D"
    assert payload["text"].startswith("KJFK INFO D 1251Z. 25010G18KT.")
    assert payload["text"].count("ADVS") == 1
    assert "INFORMATION DELTA" in payload["voice"]
    assert [d["kind"] for d in payload["diagnostics"]] == ["airport"]


def test_text_output_only(capsys) -> None:
    code = main(["--profile", PROFILE, "--preset", "WEATHER_ONLY", "--metar", METAR, "--output", "text"])

    assert code == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 1
    assert "INFO A 1251Z" in lines[0]


def test_invalid_letter(capsys) -> None:
    assert main(["--profile", PROFILE, "--preset", "WEATHER_ONLY", "--metar", METAR, "--letter", "1"]) == 2
    assert "Invalid ATIS letter" in capsys.readouterr().err


def test_unknown_preset(capsys) -> None:
    assert main(["--profile", PROFILE, "--preset", "IFR", "--metar", METAR]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_missing_profile(tmp_path, capsys) -> None:
    assert main(["--profile", str(tmp_path / "missing.yaml"), "--preset", "VFR"]) == 2

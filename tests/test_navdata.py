import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.atis.navdata import Airport, NavDataRepository, Navaid

AIRPORTS = [
    {"ID": "KJFK", "Name": "John F  Kennedy\nIntl", "Lat": 40.64, "Lon": -73.78},
    {"ID": "kjfk", "Name": "Duplicate", "Lat": 0, "Lon": 0},
    {"ID": "KLGA", "Name": "La Guardia", "Lat": "40.78", "Lon": "-73.87"},
    {"ID": "", "Name": "No identifier"},
    "not an object",
]
NAVAIDS = [{"ID": "CRI", "Name": "Canarsie", "Lat": 40.61, "Lon": -73.82}]


def _write_json(path, data) -> str:
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_lookups_are_case_insensitive() -> None:
    navdata = NavDataRepository(airports=[Airport("KJFK", "Kennedy")], navaids=[Navaid("CRI", "Canarsie")])

    assert navdata.get_airport("kjfk").name == "Kennedy"
    assert navdata.get_navaid(" cri ").name == "Canarsie"
    assert navdata.get_airport("KBOS") is None
    assert navdata.get_navaid(None) is None
    assert (navdata.airport_count, navdata.navaid_count) == (1, 1)


@pytest.mark.asyncio
async def test_load_from_files(tmp_path) -> None:
    navdata = NavDataRepository()

    await navdata.load(_write_json(tmp_path / "airports.json", AIRPORTS), _write_json(tmp_path / "navaids.json", NAVAIDS))

    assert navdata.airport_count == 2
    kjfk = navdata.get_airport("KJFK")
    assert kjfk.name == "John F Kennedy Intl"
    assert kjfk.latitude == pytest.approx(40.64)
    assert navdata.get_airport("KLGA").longitude == pytest.approx(-73.87)
    assert navdata.get_navaid("CRI").name == "Canarsie"


@pytest.mark.asyncio
async def test_unreadable_source_keeps_existing_table(tmp_path) -> None:
    navdata = NavDataRepository(airports=[Airport("KJFK", "Kennedy")])
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    await navdata.load(str(tmp_path / "missing.json"), str(broken))

    assert navdata.get_airport("KJFK").name == "Kennedy"
    assert navdata.navaid_count == 0


@pytest.mark.asyncio
async def test_load_over_http() -> None:
    mock_response = AsyncMock()
    mock_response.status = 200
    mock_response.text = AsyncMock(return_value=json.dumps(NAVAIDS))

    mock_request_cm = AsyncMock()
    mock_request_cm.__aenter__ = AsyncMock(return_value=mock_response)
    mock_request_cm.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_request_cm)

    mock_session_cm = MagicMock()
    mock_session_cm.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session_cm.__aexit__ = AsyncMock(return_value=None)

    navdata = NavDataRepository()
    with patch("aiohttp.ClientSession", return_value=mock_session_cm):
        await navdata.load(navaids="https://navdata.test/navaids.json")

    assert navdata.get_navaid("CRI").name == "Canarsie"
    assert navdata.airport_count == 0
    assert mock_session.get.call_args.args[0] == "https://navdata.test/navaids.json"


@pytest.mark.asyncio
async def test_http_error_keeps_existing_table() -> None:
    mock_response = AsyncMock()
    mock_response.status = 404

    mock_request_cm = AsyncMock()
    mock_request_cm.__aenter__ = AsyncMock(return_value=mock_response)
    mock_request_cm.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_request_cm)

    mock_session_cm = MagicMock()
    mock_session_cm.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session_cm.__aexit__ = AsyncMock(return_value=None)

    navdata = NavDataRepository(navaids=[Navaid("CRI", "Canarsie")])
    with patch("aiohttp.ClientSession", return_value=mock_session_cm):
        await navdata.load(navaids="https://navdata.test/navaids.json")

    assert navdata.get_navaid("CRI").name == "Canarsie"

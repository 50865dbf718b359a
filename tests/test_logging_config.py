from __future__ import annotations

import logging

import pytest
import structlog

import src.logging_config as logging_config
from src.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch):
    monkeypatch.delenv("ATIS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("ATIS_LOG_JSON", raising=False)
    root_level = logging.getLogger().level
    aiohttp_level = logging.getLogger("aiohttp").level
    yield
    structlog.reset_defaults()
    logging.getLogger().setLevel(root_level)
    logging.getLogger("aiohttp").setLevel(aiohttp_level)


def test_configure_logging_sets_levels() -> None:
    configure_logging("warning")
    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("aiohttp").level == logging.WARNING
    assert structlog.is_configured()


def test_configure_logging_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("ATIS_LOG_LEVEL", "debug")
    monkeypatch.setenv("ATIS_LOG_JSON", "1")
    configure_logging()
    assert logging.getLogger().level == logging.DEBUG
    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_module_exposes_only_configure_logging() -> None:
    public = [name for name in vars(logging_config) if not name.startswith("_") and callable(getattr(logging_config, name))]
    assert "configure_logging" in public
    assert "get_logger" not in public

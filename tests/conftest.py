"""
Shared pytest fixtures for the METAR decoder and ATIS renderer tests.
"""

import pytest

from src.atis.config import parse_station_config
from src.weather.decoder import MetarDecoder
from src.weather.repository import StaticMetarRepository

KJFK_METAR = "KJFK 011251Z 25010G18KT 10SM FEW030 BKN250 22/12 A3002"


@pytest.fixture
def decoder():
    return MetarDecoder()


@pytest.fixture
def kjfk_station():
    """KJFK with stock formatting and two presets."""
    return parse_station_config(
        {
            "identifier": "KJFK",
            "name": "Kennedy",
            "presets": {
                "WX": {"template": "[FACILITY] INFO [ATIS_LETTER] [TIME]. [WX]"},
                "FIELDS": {"template": "[WIND]. [VIS]. [CLOUDS]. [TEMP]. [DEW]. [PRESSURE]. [CLOSING]"},
            },
        }
    )


@pytest.fixture
def eddf_station():
    """A non-FAA station with a transition level table."""
    return parse_station_config(
        {
            "identifier": "EDDF",
            "name": "Frankfurt",
            "presets": {"MAIN": "[FACILITY] INFORMATION [ATIS_LETTER]. [WX] [TL]"},
            "format": {
                "transition_level": {
                    "values": [
                        {"low": 978, "high": 1013, "altitude": 60},
                        {"low": 1014, "high": 1050, "altitude": 50},
                    ]
                }
            },
        }
    )


@pytest.fixture
def kjfk_metar(decoder):
    return decoder.parse(KJFK_METAR)


@pytest.fixture
def metar_repository():
    return StaticMetarRepository(
        {
            "KJFK": KJFK_METAR,
            "KLGA": "KLGA 011251Z 24008KT 10SM FEW040 21/11 A3001",
            "KEWR": "KEWR 011251Z 23009KT 10SM SCT045 23/12 A2999",
        }
    )

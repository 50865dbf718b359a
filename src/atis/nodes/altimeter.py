"""
Altimeter setting renderer.

Both inHg and hPa are derived from the reported unit. Templates may reference
other stations' altimeter settings with ``{altimeter|ICAO}``; those values are
fetched concurrently by ``fetch_secondary_altimeters`` before rendering and
passed in as a read-only snapshot.
"""

import asyncio
import math
import re
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from src.weather.entities import DecodedMetar
from src.weather.value import Unit, Value

from ..config import StationConfig
from ..speech import serial_format
from .base import Node, fill

logger = structlog.get_logger(__name__)

_RE_QFE = re.compile(r"\{qfe\|(\d+)\}", re.IGNORECASE)
_RE_SECONDARY = re.compile(r"\{altimeter\|(\w{4})\}", re.IGNORECASE)

# Four-letter modifiers that are not station identifiers.
_RESERVED_MODIFIERS = {"INHG", "TEXT"}

# Approximately 1 hPa per 30 ft.
PRESSURE_LAPSE_RATE_FEET = 30.0


def pressure_units(value: Value) -> Tuple[float, int]:
    """Return ``(inhg, hpa)`` for a pressure reported in either unit."""
    if value.unit == Unit.MERCURY_INCH:
        inhg = value.actual_value / 100.0
        return inhg, int(math.floor(inhg * 33.86))
    hpa = int(value.actual_value)
    return math.floor(value.actual_value * 0.02953 * 100) / 100.0, hpa


def calculate_qfe(qnh_hpa: float, elevation_feet: float) -> int:
    return int(qnh_hpa - elevation_feet / PRESSURE_LAPSE_RATE_FEET)


def secondary_stations(*templates: Optional[str]) -> List[str]:
    """Distinct station identifiers referenced as ``{altimeter|ICAO}``, in order of appearance."""
    stations: List[str] = []
    for template in templates:
        for found in _RE_SECONDARY.finditer(template or ""):
            icao = found.group(1).upper()
            if icao not in _RESERVED_MODIFIERS and icao not in stations:
                stations.append(icao)
    return stations


async def fetch_secondary_altimeters(metar_repository, stations: Iterable[str]) -> Tuple[Dict[str, Value], Dict[str, str]]:
    """Fetch each station's pressure concurrently.

    Returns the resolved values and a mapping of station to failure reason.
    Failed or missing stations are simply absent from the values.
    """
    stations = list(stations)
    if not stations:
        return {}, {}

    results = await asyncio.gather(
        *(metar_repository.get_metar(icao) for icao in stations),
        return_exceptions=True,
    )
    values: Dict[str, Value] = {}
    failures: Dict[str, str] = {}
    for icao, result in zip(stations, results):
        if isinstance(result, BaseException):
            logger.warning("Secondary altimeter lookup failed", station=icao, error=str(result))
            failures[icao] = str(result) or type(result).__name__
        elif result is None or result.pressure is None or result.pressure.value is None:
            failures[icao] = "no altimeter setting available"
        else:
            values[icao] = result.pressure.value
    return values, failures


class AltimeterNode(Node):
    name = "PRESSURE"

    def __init__(self, secondary_altimeters: Optional[Dict[str, Value]] = None):
        self.secondary_altimeters = dict(secondary_altimeters or {})

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        pressure = metar.pressure
        if pressure is None or pressure.value is None:
            return "", ""

        fmt = station.format.altimeter
        value = pressure.value
        inhg, hpa = pressure_units(value)

        text = fill(
            fmt.template.text,
            {
                "altimeter": str(int(value.actual_value)),
                "altimeter|inhg": f"{inhg:05.2f}",
                "altimeter|hpa": str(hpa),
                "altimeter|text": f"{int(value.actual_value):04d}",
            },
        )
        text = _RE_QFE.sub(lambda m: str(calculate_qfe(hpa, int(m.group(1)))), text)
        text = _RE_SECONDARY.sub(lambda m: self._secondary(m.group(1), spoken=False), text)

        voice = fill(
            fmt.template.voice,
            {
                "altimeter": serial_format(str(int(value.actual_value))),
                "altimeter|inhg": serial_format(f"{inhg:05.2f}", fmt.pronounce_decimal),
                "altimeter|hpa": serial_format(str(hpa)),
                "altimeter|text": serial_format(f"{int(value.actual_value):04d}"),
            },
        )
        voice = _RE_QFE.sub(lambda m: serial_format(str(calculate_qfe(hpa, int(m.group(1))))), voice)
        voice = _RE_SECONDARY.sub(lambda m: self._secondary(m.group(1), spoken=True), voice)
        return text, voice

    def _secondary(self, icao: str, spoken: bool) -> str:
        value = self.secondary_altimeters.get(icao.upper())
        if value is None:
            return ""
        digits = str(int(value.actual_value))
        return serial_format(digits) if spoken else digits

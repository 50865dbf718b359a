from typing import Tuple

from src.weather.entities import DecodedMetar

from ..config import StationConfig
from ..speech import serial_format
from .base import Node, fill


class TransitionLevelNode(Node):
    """Transition level from the facility's QNH range table (non-FAA stations only)."""

    name = "TL"
    terminate_voice = False

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        if station.is_faa_atis or metar.pressure is None or metar.pressure.value is None:
            return "", ""

        fmt = station.format.transition_level
        qnh = metar.pressure.value.actual_value
        for level in fmt.values:
            if level.low <= qnh <= level.high:
                values = {"trl": str(level.altitude), "trl|text": serial_format(str(level.altitude))}
                return fill(fmt.template.text, values), fill(fmt.template.voice, values)
        return "", ""

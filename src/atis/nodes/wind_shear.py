import re
from typing import List, Tuple

from src.weather.entities import DecodedMetar

from ..config import StationConfig
from ..speech import serial_number
from .base import Node, fill

_RE_RUNWAY = re.compile(r"(\d{2})([LCR]?)")
_SIDES = {"L": " LEFT", "R": " RIGHT", "C": " CENTER"}


class WindShearNode(Node):
    name = "WS"

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        fmt = station.format.wind_shear
        if metar.windshear_all_runways:
            return fmt.all_runway_text, fmt.all_runway_voice

        texts: List[str] = []
        voices: List[str] = []
        for runway in metar.windshear_runways:
            texts.append(fill(fmt.runway_text, {"runway": runway}))
            found = _RE_RUNWAY.match(runway)
            if found:
                spoken = serial_number(int(found.group(1)), leading_zero=True) + _SIDES.get(found.group(2), "")
                voices.append(fill(fmt.runway_voice, {"runway": spoken}))
        return " ".join(texts), ", ".join(voices)

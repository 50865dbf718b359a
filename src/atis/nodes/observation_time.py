from typing import Tuple

from src.weather.entities import DecodedMetar

from ..config import StationConfig
from ..speech import serial_format
from .base import Node, fill

SPECIAL_TEXT = "SPECIAL"


class ObservationTimeNode(Node):
    """Observation time; ``{special}`` expands only off the standard update minutes."""

    name = "TIME"

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        if metar.hour is None or metar.minute is None:
            return "", ""

        fmt = station.format.observation_time
        standard = fmt.standard_update_times
        special = SPECIAL_TEXT if standard is not None and metar.minute not in standard else ""

        day = f"{metar.day:02d}" if metar.day is not None else ""
        hours = f"{metar.hour:02d}"
        minutes = f"{metar.minute:02d}"
        text = fill(
            fmt.template.text,
            {
                "time": hours + minutes,
                "day": day,
                "hours": hours,
                "hour": hours,
                "minutes": minutes,
                "minute": minutes,
                "special": special,
            },
        )
        voice = fill(
            fmt.template.voice,
            {
                "time": f"{serial_format(hours)} {serial_format(minutes)}",
                "day": serial_format(day) or "",
                "hours": serial_format(hours),
                "hour": serial_format(hours),
                "minutes": serial_format(minutes),
                "minute": serial_format(minutes),
                "special": special,
            },
        )
        return text, voice

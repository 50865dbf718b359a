import re
from typing import List, Tuple

from src.weather.entities import DecodedMetar

from ..config import StationConfig
from ..speech import group_form, serial_format
from .base import Node

_RE_RVR = re.compile(r"^R([0-3]\d)(L|C|R)?/(M|P)?(\d{4})(V|VP)?(\d{4})?(FT)?(?:/?(U|D|N))?$")

_SIDES = {"L": "left", "R": "right", "C": "center"}


class RunwayVisualRangeNode(Node):
    """RVR per runway, e.g. ``Runway two seven left R-V-R six hundred Going Up``."""

    name = "RVR"

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        fmt = station.format.runway_visual_range
        tendencies = {
            "N": fmt.neutral_tendency,
            "U": fmt.going_up_tendency,
            "D": fmt.going_down_tendency,
        }
        texts: List[str] = []
        voices: List[str] = []

        for rvr in metar.runways_visual_range:
            found = _RE_RVR.match(rvr.raw_value or "")
            if not found:
                continue
            texts.append(rvr.raw_value)

            prefix = found.group(3) or ""
            low = int(found.group(4))
            words: List[str] = []
            if found.group(5) == "V":
                high = int(found.group(6))
                if prefix == "M":
                    words.append(f"variable from less than {group_form(low)} to {group_form(high)}")
                else:
                    words.append(f"variable between {group_form(low)} and {group_form(high)}")
            elif found.group(5) == "VP":
                high = int(found.group(6))
                if prefix == "M":
                    words.append(f"variable from less than {group_form(low)} to greater than {group_form(high)}")
                else:
                    words.append(f"{group_form(low)} variable to greater than {group_form(high)}")
            elif prefix == "M":
                words.append(f"less than {group_form(low)}")
            elif prefix == "P":
                words.append(f"more than {group_form(low)}")
            else:
                words.append(group_form(low))

            tendency = tendencies.get(found.group(8) or "", "")
            if tendency:
                words.append(tendency)

            side = _SIDES.get(found.group(2) or "", "")
            voices.append(f"Runway {serial_format(found.group(1))} {side} R-V-R {' '.join(words)}.")

        return " ".join(texts), " ".join(voices).rstrip(".")

from typing import List, Tuple

from src.weather.entities import DecodedMetar, Visibility
from src.weather.value import Unit

from ..config import StationConfig
from ..speech import group_form, word_string
from .base import Node, fill

# Statute-mile raw groups spoken as fractions.
FRACTIONS = {
    "M1/4SM": "less than one quarter.",
    "1 1/8SM": "one and one eighth.",
    "1 1/4SM": "one and one quarter.",
    "1 3/8SM": "one and three eighths.",
    "1 1/2SM": "one and one half.",
    "1 5/8SM": "one and five eighths.",
    "1 3/4SM": "one and three quarters.",
    "1 7/8SM": "one and seven eighths.",
    "2 1/4SM": "two and one quarter.",
    "2 1/2SM": "two and one half.",
    "2 3/4SM": "two and three quarters.",
    "1/16SM": "one sixteenth.",
    "1/8SM": "one eighth.",
    "3/16SM": "three sixteenths.",
    "1/4SM": "one quarter.",
    "5/16SM": "five sixteenths.",
    "3/8SM": "three eighths.",
    "1/2SM": "one half.",
    "5/8SM": "five eighths.",
    "3/4SM": "three quarters.",
    "7/8SM": "seven eighths.",
}

UNLIMITED_METERS = 9999


def _is_unlimited(visibility: Visibility) -> bool:
    prevailing = visibility.prevailing_visibility
    return prevailing is not None and prevailing.unit == Unit.METER and int(prevailing.actual_value) == UNLIMITED_METERS


def _kilometers(meters: float) -> str:
    km = meters / 1000
    return str(int(km)) if float(km).is_integer() else f"{km:g}"


class VisibilityNode(Node):
    name = "VIS"

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        visibility = metar.visibility
        if visibility is None:
            return "", ""
        # //// decodes to an empty Visibility
        if not visibility.cavok and not visibility.raw_value and visibility.prevailing_visibility is None:
            return "", ""
        fmt = station.format.visibility
        return self._text(visibility, station, fmt.template.text), self._voice(visibility, station, fmt.template.voice)

    @staticmethod
    def _text(visibility: Visibility, station: StationConfig, template) -> str:
        if template is None:
            return ""
        if visibility.cavok:
            return "CAVOK"
        if _is_unlimited(visibility):
            return station.format.visibility.unlimited_visibility_text
        if visibility.raw_value:
            return fill(template, {"visibility": visibility.raw_value})
        return ""

    @staticmethod
    def _voice(visibility: Visibility, station: StationConfig, template) -> str:
        if template is None:
            return ""
        if visibility.cavok:
            return "CAV-OK"

        fmt = station.format.visibility
        parts: List[str] = []
        prevailing = visibility.prevailing_visibility
        if prevailing is not None and prevailing.unit == Unit.METER:
            if _is_unlimited(visibility):
                return fmt.unlimited_visibility_voice
            if visibility.minimum_visibility_direction:
                if visibility.minimum_visibility is not None:
                    minimum = int(visibility.minimum_visibility.actual_value)
                    label = fmt.compass_label(visibility.minimum_visibility_direction)
                    if label:
                        parts.append(f"{label} {group_form(minimum)}")
                if fmt.include_visibility_suffix:
                    parts.append("kilometers" if prevailing.actual_value > fmt.meters_cutoff else "meters")
            elif prevailing.actual_value > fmt.meters_cutoff:
                suffix = "kilometers" if fmt.include_visibility_suffix else ""
                parts.append(f"{_kilometers(prevailing.actual_value)} {suffix}")
            else:
                suffix = "meters" if fmt.include_visibility_suffix else ""
                parts.append(f"{word_string(int(prevailing.actual_value))} {suffix}")
        elif visibility.raw_value and "/" in visibility.raw_value:
            parts.append(FRACTIONS.get(visibility.raw_value, ""))
        elif prevailing is not None:
            parts.append(str(int(prevailing.actual_value)))

        parts = [p for p in parts if p]
        if not parts:
            return ""
        return fill(template, {"visibility": ", ".join(parts)})

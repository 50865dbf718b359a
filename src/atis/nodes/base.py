"""
Base classes for ATIS field renderers ("nodes").

Each node maps one decoded METAR field plus the facility's format section to a
``RenderedNode`` holding the printable (text) and spoken (voice) fragments.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from src.weather.entities import DecodedMetar

from ..config import StationConfig


class AtisRenderError(Exception):
    """A node could not render its field; the builder degrades it to empty output."""


class UnmappedWeatherCodeError(AtisRenderError):
    """A present or recent weather code has no spoken descriptor."""

    def __init__(self, code: str):
        super().__init__(f"No spoken descriptor for weather code {code!r}")
        self.code = code


@dataclass(frozen=True)
class RenderedNode:
    text: str = ""
    voice: str = ""


def fill(template: Optional[str], values: Dict[str, str]) -> str:
    """Replace ``{placeholder}`` tokens case-insensitively, in insertion order."""
    if template is None:
        return ""
    result = template
    for name, value in values.items():
        pattern = re.compile(re.escape("{" + name + "}"), re.IGNORECASE)
        result = pattern.sub(lambda _m, v=value: v, result)
    return result


class Node(ABC):
    """Renderer for one ATIS field.

    Subclasses implement ``parse`` returning raw ``(text, voice)``; ``render``
    adds the sentence stop every voice fragment carries into the preset.
    """

    name: str = ""
    terminate_voice: bool = True

    def render(self, metar: DecodedMetar, station: StationConfig) -> RenderedNode:
        text, voice = self.parse(metar, station)
        voice = voice or ""
        if voice and self.terminate_voice:
            voice += "."
        return RenderedNode(text=text or "", voice=voice)

    @abstractmethod
    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        """Return ``(text, voice)`` for this field; empty strings when absent."""

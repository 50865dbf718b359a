from ..config import StationConfig
from ..speech import phonetic
from .base import RenderedNode, fill


def render_closing(station: StationConfig, letter: str) -> RenderedNode:
    """Closing statement for ``letter``; empty when either template is unset."""
    template = station.format.closing_statement.template
    if not template.text or not template.voice:
        return RenderedNode()

    values = {"letter": letter.upper(), "letter|word": phonetic(letter)}
    return RenderedNode(text=fill(template.text, values), voice=fill(template.voice, values))

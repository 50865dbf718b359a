"""
Preset placeholder substitution.

A preset is free text with placeholders in four forms: ``[NAME]``, ``$NAME``,
``[NAME:VOX]`` and ``$NAME:VOX``. NAME is a variable's primary name or one of
its aliases. The ``:VOX`` forms always take the voice value, even in the text
ATIS. Unknown names are left in the output untouched.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .config import StationConfig

_RE_PLACEHOLDER = re.compile(r"\[([A-Z0-9_]+)(:VOX)?\]|\$([A-Z0-9_]+)(:VOX)?")
_RE_CONTRACTION_WORD = re.compile(r"@?(\w+)")

_RE_NAVDATA_PREFIX = re.compile(r"\+([A-Z0-9]{3,4})")
_RE_WHITESPACE = re.compile(r"\s+")
_RE_GROUP_BRACES = re.compile(r"\{(-?[,0-9]+)\}")
_RE_CARET_RUNWAY = re.compile(r"(?<![\w\d])\^((?:0?[1-9]|[1-2][0-9]|3[0-6])(?:[LRC]?))(?![\w\d])")

_RE_DUPLICATE_PUNCTUATION = re.compile(r"[!?.]*([!?.])")
_RE_SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([.,!\":])")


@dataclass
class AtisVariable:
    find: str
    text_replace: str
    voice_replace: str
    aliases: List[str] = field(default_factory=list)

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.find, *self.aliases)


def index_variables(variables: Iterable[AtisVariable]) -> Dict[str, AtisVariable]:
    """Map every primary name and alias to its variable; the first definition of a name wins."""
    index: Dict[str, AtisVariable] = {}
    for variable in variables:
        for name in variable.names:
            index.setdefault(name, variable)
    return index


def substitute_variables(template: str, variables: Iterable[AtisVariable], voice: bool) -> str:
    index = index_variables(variables)

    def replace(found: "re.Match[str]") -> str:
        name = found.group(1) or found.group(3)
        vox = bool(found.group(2) or found.group(4))
        variable = index.get(name)
        if variable is None:
            return found.group(0)
        return variable.voice_replace if (voice or vox) else variable.text_replace

    return _RE_PLACEHOLDER.sub(replace, template or "")


def replace_contractions(text: str, station: StationConfig, voice: bool) -> str:
    """Replace ``@NAME`` (or bare ``NAME``) words that name a facility contraction."""

    def replace(found: "re.Match[str]") -> str:
        contraction = station.contractions.get(found.group(1))
        if contraction is None:
            return found.group(0)
        return contraction.voice if voice else contraction.text

    return _RE_CONTRACTION_WORD.sub(replace, text or "")


def clean_duplicate_punctuation(text: str) -> str:
    text = _RE_DUPLICATE_PUNCTUATION.sub(r"\1", text)
    return _RE_SPACE_BEFORE_PUNCTUATION.sub(r"\1", text)


def remove_text_parsing_characters(text: str) -> str:
    """Strip the voice-only markup (``+IDENT``, ``{123}``, ``*``, ``^27L``) from a text ATIS."""
    text = _RE_NAVDATA_PREFIX.sub(r"\1", text)
    text = _RE_WHITESPACE.sub(" ", text)
    text = _RE_GROUP_BRACES.sub(r"\1", text)
    text = text.replace("*", "")
    return _RE_CARET_RUNWAY.sub(r"\1", text)

"""
Text-to-speech normalizer for the merged voice ATIS.

``TtsNormalizer.passes`` is an ordered list of ``(name, function)`` pairs.
Each pass sees only the previous pass's output, and numeric passes come after
every pass that spells numbers out, so spelled words are never re-read.
"""

import re
from typing import Callable, List, Optional, Tuple

from .config import StationConfig
from .diagnostics import CONTRACTION, NAVDATA, Diagnostic, record
from .speech import alphanumeric_word_group, group_form, runway_words, serial_format, serial_number

_RE_CONTRACTION = re.compile(r"@([A-Z][A-Z_]*)")
_RE_NAVDATA = re.compile(r"\+([A-Z0-9]{3,4})")
_RE_ZULU = re.compile(r"([0-9])([0-9])([0-9])([0-8])Z")
_RE_VHF = re.compile(r"(1\d\d\.\d\d?\d?)")
_RE_LETTERS = re.compile(r"\*([A-Z]{1,2}[0-9]{0,2})")
_RE_TAXIWAY = re.compile(r"\bTWY ([A-Z]{1,2}[0-9]{0,2})\b")
_RE_TAXIWAYS = re.compile(r"\bTWYS ([A-Z]{1,2}[0-9]{0,2})\b")
_RE_RUNWAY = re.compile(r"\b(RY|RWY|RWYS|RUNWAY|RUNWAYS)\s?([0-9]{1,2})([LRC]?)\b")
_RE_CARET_RUNWAY = re.compile(r"(?<![\w\d])\^(0[1-9]|1[0-9]|2[0-9]|3[0-6]|[1-9])([RLC]?)(?![\w\d])")
_RE_GROUP_STAR = re.compile(r"\*(-?[0-9][,0-9]*)")
_RE_GROUP_BRACES = re.compile(r"\{(-?[0-9][,0-9]*)\}")
_RE_SERIAL = re.compile(r"([+-])?([0-9]+\.[0-9]+|[0-9]+|\.[0-9]+)(?![^{]*\})")
_RE_DUPLICATE_PUNCTUATION = re.compile(r"[!?.]*([!?.])")
_RE_SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([.,!\":])")
_RE_WHITESPACE = re.compile(r"\s+")
_RE_SPACE_COMMA = re.compile(r"\s,")

_SIDES = {"L": "left", "R": "right", "C": "center"}

TtsPass = Tuple[str, Callable[[str], str]]


def _group(found: "re.Match[str]") -> str:
    return group_form(int(found.group(1).replace(",", "")))


class TtsNormalizer:
    """Turns an upper-cased voice ATIS into synthesis-ready text.

    Unresolved ``@CONTRACTION`` and ``+IDENT`` references are recorded in
    ``diagnostics`` (reset on every ``normalize`` call).
    """

    def __init__(self, station: StationConfig, navdata=None):
        self.station = station
        self.navdata = navdata
        self.diagnostics: List[Diagnostic] = []
        self.passes: List[TtsPass] = [
            ("contractions", self.expand_contractions),
            ("navdata", self.expand_navdata),
            ("zulu_times", self.expand_zulu_times),
            ("vhf_frequencies", self.expand_frequencies),
            ("letters", self.expand_letters),
            ("taxiways", self.expand_taxiways),
            ("runways", self.expand_runways),
            ("caret_runways", self.expand_caret_runways),
            ("group_numbers", self.expand_group_numbers),
            ("serial_numbers", self.expand_serial_numbers),
            ("strip_markers", self.strip_markers),
            ("punctuation", self.clean_punctuation),
        ]

    def normalize(self, text: str) -> str:
        self.diagnostics = []
        for _name, apply in self.passes:
            text = apply(text)
        return text

    def expand_contractions(self, text: str) -> str:
        def replace(found: "re.Match[str]") -> str:
            contraction = self.station.contractions.get(found.group(1))
            if contraction is None:
                record(self.diagnostics, CONTRACTION, "Unknown contraction removed", found.group(0))
                return ""
            return contraction.voice

        return _RE_CONTRACTION.sub(replace, text)

    def expand_navdata(self, text: str) -> str:
        for ident in dict.fromkeys(_RE_NAVDATA.findall(text)):
            name = self._navdata_name(ident)
            if name is None:
                record(self.diagnostics, NAVDATA, "Identifier not found in nav data", ident)
                continue
            pattern = re.compile(r"(?<![\w\d])" + re.escape("+" + ident) + r"(?![\w\d])")
            text = pattern.sub(lambda _m, n=name: n, text)
        return text

    def _navdata_name(self, ident: str) -> Optional[str]:
        if self.navdata is None:
            return None
        navaid = self.navdata.get_navaid(ident)
        if navaid is not None:
            return navaid.name
        airport = self.navdata.get_airport(ident)
        if airport is not None:
            return airport.name
        return None

    @staticmethod
    def expand_zulu_times(text: str) -> str:
        return _RE_ZULU.sub(lambda m: " ".join(serial_format(d) for d in m.groups()) + " zulu", text)

    def expand_frequencies(self, text: str) -> str:
        return _RE_VHF.sub(lambda m: serial_format(m.group(1), self.station.use_decimal_terminology), text)

    @staticmethod
    def expand_letters(text: str) -> str:
        return _RE_LETTERS.sub(lambda m: alphanumeric_word_group(m.group(0)), text).strip()

    @staticmethod
    def expand_taxiways(text: str) -> str:
        text = _RE_TAXIWAY.sub(lambda m: f"TWY {alphanumeric_word_group(m.group(1))}", text)
        return _RE_TAXIWAYS.sub(lambda m: f"TWYS {alphanumeric_word_group(m.group(1))}", text)

    def expand_runways(self, text: str) -> str:
        leading_zero = not self.station.is_faa_atis

        def replace(found: "re.Match[str]") -> str:
            return runway_words(
                int(found.group(2)),
                found.group(3),
                prefix=True,
                plural=found.group(1) in ("RWYS", "RUNWAYS"),
                leading_zero=leading_zero,
            )

        return _RE_RUNWAY.sub(replace, text)

    def expand_caret_runways(self, text: str) -> str:
        leading_zero = not self.station.is_faa_atis

        def replace(found: "re.Match[str]") -> str:
            spoken = serial_number(int(found.group(1)), leading_zero=leading_zero)
            return f"{spoken} {_SIDES.get(found.group(2), '')}".strip()

        return _RE_CARET_RUNWAY.sub(replace, text)

    @staticmethod
    def expand_group_numbers(text: str) -> str:
        text = _RE_GROUP_STAR.sub(_group, text)
        return _RE_GROUP_BRACES.sub(_group, text)

    def expand_serial_numbers(self, text: str) -> str:
        return _RE_SERIAL.sub(
            lambda m: serial_format(m.group(0), self.station.use_decimal_terminology) or "",
            text,
        )

    @staticmethod
    def strip_markers(text: str) -> str:
        text = _RE_GROUP_BRACES.sub(r"\1", text)
        text = _RE_NAVDATA.sub(r"\1", text)
        return text.replace("*", "")

    @staticmethod
    def clean_punctuation(text: str) -> str:
        text = _RE_DUPLICATE_PUNCTUATION.sub(r"\1 ", text)
        text = _RE_SPACE_BEFORE_PUNCTUATION.sub(r"\1 ", text)
        text = _RE_WHITESPACE.sub(" ", text)
        text = _RE_SPACE_COMMA.sub(",", text)
        text = text.replace("&", "and")
        return text.upper()

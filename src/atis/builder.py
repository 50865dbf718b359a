"""
ATIS builder: turns a decoded METAR plus a facility preset into a text ATIS
and a voice ATIS.

Rendering is fail-soft. A field that cannot be rendered, a cross-station
lookup that fails, or missing nav data each degrade to an empty substitution
and add a ``Diagnostic`` to the result instead of aborting the broadcast.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import Dict, List, Union

import structlog
from prometheus_client import Counter

from src.weather.entities import DecodedMetar

from .config import Preset, StationConfig
from .diagnostics import AIRPORT, ALTIMETER_LOOKUP, PRESSURE_LOOKUP, RENDER_ERROR, Diagnostic, record
from .nodes import (
    NODE_TABLE,
    AltimeterNode,
    RenderedNode,
    fetch_secondary_altimeters,
    render_closing,
    secondary_stations,
)
from .speech import phonetic, serial_format
from .tts import TtsNormalizer
from .variables import (
    AtisVariable,
    clean_duplicate_punctuation,
    remove_text_parsing_characters,
    replace_contractions,
    substitute_variables,
)

logger = structlog.get_logger(__name__)

_BUILDS_COUNTER = Counter(
    "atis_builds_total",
    "ATIS renders by output kind",
    labelnames=("kind",),
)

_RE_PRESSURE_PLACEHOLDER = re.compile(r"\[PRESSURE_(\w{4})\]", re.IGNORECASE)
_RE_WHITESPACE = re.compile(r"\s+")

# Order of the fields in the full weather string.
_WX_ORDER = ("WIND", "VIS", "RVR", "PRESENT_WX", "CLOUDS", "TEMP", "DEW", "PRESSURE", "RECENT_WX", "WS", "TREND")


@dataclass
class AtisResult:
    text: str
    diagnostics: List[Diagnostic] = field(default_factory=list)


@dataclass
class AtisBuild:
    text: str
    voice: str
    diagnostics: List[Diagnostic] = field(default_factory=list)


class AtisBuilder:
    def __init__(self, metar_repository, navdata_repository=None, speech_scheduler=None):
        self._metar_repository = metar_repository
        self._navdata = navdata_repository
        self._speech_scheduler = speech_scheduler

    async def build_text_atis(
        self, station: StationConfig, preset: Union[Preset, str], letter: str, metar: DecodedMetar
    ) -> AtisResult:
        preset = self._resolve_preset(station, preset)
        diagnostics: List[Diagnostic] = []
        variables = await self._gather_variables(station, preset, letter, metar, diagnostics)
        text = await self._create_text_atis(station, preset, letter, variables, diagnostics)
        return AtisResult(text=text, diagnostics=diagnostics)

    async def build_voice_atis(
        self, station: StationConfig, preset: Union[Preset, str], letter: str, metar: DecodedMetar
    ) -> AtisResult:
        preset = self._resolve_preset(station, preset)
        diagnostics: List[Diagnostic] = []
        variables = await self._gather_variables(station, preset, letter, metar, diagnostics)
        voice = await self._create_voice_atis(station, preset, letter, variables, diagnostics)
        await self._schedule_speech(station, voice)
        return AtisResult(text=voice, diagnostics=diagnostics)

    async def build(
        self, station: StationConfig, preset: Union[Preset, str], letter: str, metar: DecodedMetar
    ) -> AtisBuild:
        """Render both outputs from a single pass over the METAR."""
        preset = self._resolve_preset(station, preset)
        diagnostics: List[Diagnostic] = []
        variables = await self._gather_variables(station, preset, letter, metar, diagnostics)
        text = await self._create_text_atis(station, preset, letter, variables, diagnostics)
        voice = await self._create_voice_atis(station, preset, letter, variables, diagnostics)
        await self._schedule_speech(station, voice)
        logger.info(
            "ATIS built",
            station=station.identifier,
            preset=preset.name,
            letter=letter,
            diagnostics=len(diagnostics),
        )
        return AtisBuild(text=text, voice=voice, diagnostics=diagnostics)

    @staticmethod
    def _resolve_preset(station: StationConfig, preset: Union[Preset, str]) -> Preset:
        if isinstance(preset, Preset):
            return preset
        return station.preset(preset)

    async def _schedule_speech(self, station: StationConfig, voice: str) -> None:
        if self._speech_scheduler is None or not station.use_text_to_speech:
            return
        await self._speech_scheduler.request(station.identifier, voice)

    async def _create_voice_atis(
        self,
        station: StationConfig,
        preset: Preset,
        letter: str,
        variables: List[AtisVariable],
        diagnostics: List[Diagnostic],
    ) -> str:
        template = replace_contractions(preset.template, station, voice=True)
        template = await self._resolve_pressure_placeholders(template, spoken=True, diagnostics=diagnostics)
        template = substitute_variables(template, variables, voice=True)

        if not preset.has_closing_variable and station.format.closing_statement.auto_include_closing_statement:
            template = f"{template} {render_closing(station, letter).voice}"

        normalizer = TtsNormalizer(station, self._navdata)
        voice = normalizer.normalize(template.upper())
        diagnostics.extend(normalizer.diagnostics)

        _BUILDS_COUNTER.labels(kind="voice").inc()
        return clean_duplicate_punctuation(voice).strip()

    async def _create_text_atis(
        self,
        station: StationConfig,
        preset: Preset,
        letter: str,
        variables: List[AtisVariable],
        diagnostics: List[Diagnostic],
    ) -> str:
        template = replace_contractions(preset.template, station, voice=False)
        template = substitute_variables(template, variables, voice=False)
        template = await self._resolve_pressure_placeholders(template, spoken=False, diagnostics=diagnostics)

        if not preset.has_closing_variable and station.format.closing_statement.auto_include_closing_statement:
            template = f"{template} {render_closing(station, letter).text}"

        _BUILDS_COUNTER.labels(kind="text").inc()
        return remove_text_parsing_characters(template).strip()

    async def _resolve_pressure_placeholders(
        self, template: str, spoken: bool, diagnostics: List[Diagnostic]
    ) -> str:
        """Replace every ``[PRESSURE_ICAO]`` with that station's altimeter setting.

        One lookup per placeholder runs concurrently; results are substituted
        by match span, right to left. If any lookup raises, every placeholder
        in the group is removed.
        """
        matches = list(_RE_PRESSURE_PLACEHOLDER.finditer(template))
        if not matches:
            return template

        results = await asyncio.gather(
            *(self._pressure_value(m.group(1).upper(), spoken, diagnostics) for m in matches),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for match, result in zip(matches, results):
                if isinstance(result, BaseException):
                    logger.warning("Pressure lookup failed", station=match.group(1).upper(), error=str(result))
            record(diagnostics, PRESSURE_LOOKUP, f"Cross-station pressure lookup failed: {failures[0]}")
            return _RE_PRESSURE_PLACEHOLDER.sub("", template)

        for match, value in reversed(list(zip(matches, results))):
            template = template[: match.start()] + value + template[match.end():]
        return template

    async def _pressure_value(self, icao: str, spoken: bool, diagnostics: List[Diagnostic]) -> str:
        metar = await self._metar_repository.get_metar(icao)
        if metar is None or metar.pressure is None or metar.pressure.value is None:
            record(diagnostics, PRESSURE_LOOKUP, "No altimeter setting available", icao)
            return ""
        digits = str(int(metar.pressure.value.actual_value))
        return serial_format(digits) if spoken else digits

    async def _gather_variables(
        self,
        station: StationConfig,
        preset: Preset,
        letter: str,
        metar: DecodedMetar,
        diagnostics: List[Diagnostic],
    ) -> List[AtisVariable]:
        facility_id, facility_name = self._facility(station, diagnostics)
        nodes = await self._render_nodes(station, metar, diagnostics)

        wx_voice = " ".join(nodes[name].voice for name in _WX_ORDER)
        wx_text = " ".join(
            nodes[name].text
            if name != "TEMP"
            else nodes["TEMP"].text + ("/" if nodes["TEMP"].text or nodes["DEW"].text else "") + nodes["DEW"].text
            for name in _WX_ORDER
            if name != "DEW"
        )

        conditions_text, conditions_voice = self._airport_conditions(station, preset)
        notams_text, notams_voice = self._notams(station, preset)

        variables = [
            AtisVariable("FACILITY", facility_id, facility_name),
            AtisVariable("ATIS_LETTER", letter.upper(), phonetic(letter), ["LETTER", "ATIS_CODE", "ID"]),
            AtisVariable("TIME", nodes["TIME"].text, nodes["TIME"].voice, ["OBS_TIME", "OBSTIME"]),
            AtisVariable("WIND", nodes["WIND"].text, nodes["WIND"].voice, ["SURFACE_WIND"]),
            AtisVariable("RVR", nodes["RVR"].text, nodes["RVR"].voice),
            AtisVariable("VIS", nodes["VIS"].text, nodes["VIS"].voice, ["PREVAILING_VISIBILITY"]),
            AtisVariable("PRESENT_WX", nodes["PRESENT_WX"].text, nodes["PRESENT_WX"].voice, ["PRESENT_WEATHER"]),
            AtisVariable("CLOUDS", nodes["CLOUDS"].text, nodes["CLOUDS"].voice),
            AtisVariable("TEMP", nodes["TEMP"].text, nodes["TEMP"].voice),
            AtisVariable("DEW", nodes["DEW"].text, nodes["DEW"].voice),
            AtisVariable("PRESSURE", nodes["PRESSURE"].text, nodes["PRESSURE"].voice, ["QNH"]),
            AtisVariable(
                "WX",
                _RE_WHITESPACE.sub(" ", wx_text).strip(),
                _RE_WHITESPACE.sub(" ", wx_voice),
                ["FULL_WX_STRING"],
            ),
            AtisVariable("ARPT_COND", conditions_text, conditions_voice, ["ARRDEP"]),
            AtisVariable("NOTAMS", notams_text, notams_voice),
            AtisVariable("TREND", nodes["TREND"].text, nodes["TREND"].voice),
            AtisVariable("RECENT_WX", nodes["RECENT_WX"].text, nodes["RECENT_WX"].voice),
            AtisVariable("WS", nodes["WS"].text, nodes["WS"].voice),
        ]
        if not station.is_faa_atis:
            variables.append(AtisVariable("TL", nodes["TL"].text, nodes["TL"].voice))

        closing = render_closing(station, letter)
        variables.append(AtisVariable("CLOSING", closing.text, closing.voice))
        return variables

    def _facility(self, station: StationConfig, diagnostics: List[Diagnostic]):
        airport = self._navdata.get_airport(station.identifier) if self._navdata is not None else None
        if airport is None:
            record(diagnostics, AIRPORT, "Airport not found in nav data; using facility configuration", station.identifier)
            return station.identifier, station.name or station.identifier
        return airport.id, airport.name

    async def _render_nodes(
        self, station: StationConfig, metar: DecodedMetar, diagnostics: List[Diagnostic]
    ) -> Dict[str, RenderedNode]:
        altimeter_template = station.format.altimeter.template
        secondary, failures = await fetch_secondary_altimeters(
            self._metar_repository,
            secondary_stations(altimeter_template.text, altimeter_template.voice),
        )
        for icao, reason in failures.items():
            record(diagnostics, ALTIMETER_LOOKUP, reason, icao)

        rendered: Dict[str, RenderedNode] = {}
        for name, node_cls in NODE_TABLE.items():
            node = AltimeterNode(secondary) if node_cls is AltimeterNode else node_cls()
            rendered[name] = self._render_node(node, metar, station, diagnostics)
        return rendered

    @staticmethod
    def _render_node(node, metar: DecodedMetar, station: StationConfig, diagnostics: List[Diagnostic]) -> RenderedNode:
        try:
            return node.render(metar, station)
        except Exception as e:
            logger.warning("Field render failed", field=node.name, station=station.identifier, error=str(e))
            record(diagnostics, RENDER_ERROR, str(e), node.name)
            return RenderedNode()

    @staticmethod
    def _airport_conditions(station: StationConfig, preset: Preset):
        definitions = ". ".join(d.text for d in station.airport_condition_definitions if d.enabled)
        if not preset.airport_conditions and not definitions:
            return "", ""

        if station.airport_conditions_before_free_text:
            parts = [definitions, preset.airport_conditions]
        else:
            parts = [preset.airport_conditions, definitions]
        conditions = clean_duplicate_punctuation(" ".join(p for p in parts if p and p.strip()))

        text = remove_text_parsing_characters(replace_contractions(conditions, station, voice=False))
        voice = replace_contractions(conditions, station, voice=True)
        return text, voice

    @staticmethod
    def _notams(station: StationConfig, preset: Preset):
        definitions = ". ".join(d.text for d in station.notam_definitions if d.enabled)
        if not preset.notams and not definitions:
            return "", ""

        if station.notams_before_free_text:
            parts = [definitions, preset.notams]
        else:
            parts = [preset.notams, definitions]
        notams = clean_duplicate_punctuation(". ".join(p for p in parts if p and p.strip())).strip() + " "

        template = station.format.notams.template
        text = voice = ""
        if template.text is not None:
            text = re.sub(re.escape("{notams}"), lambda _m: notams, template.text, flags=re.IGNORECASE)
            text = remove_text_parsing_characters(replace_contractions(text, station, voice=False))
        if template.voice is not None:
            voice = re.sub(re.escape("{notams}"), lambda _m: notams, template.voice, flags=re.IGNORECASE)
            voice = replace_contractions(voice, station, voice=True)
        return text, voice

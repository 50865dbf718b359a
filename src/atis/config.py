"""
Facility configuration: per-field ATIS templates and options.

A facility profile is a YAML file (see ``config/facility.example.yaml``) with a
``station`` section describing the ATIS station and its formatting, plus an
optional ``services`` section for the METAR and nav-data collaborators. Every
option has a default that mirrors the stock ATIS format, so an empty
``format`` section renders a standard broadcast.

Profiles are validated once at load time; malformed templates or options
raise ``ConfigurationError`` instead of surfacing during a render.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from src.config.loaders import load_yaml_with_local_override, resolve_config_path

_DATA_DIR = Path(__file__).parent / "data"

# {name}, {name|modifier}, {name:3}
_RE_PLACEHOLDER = re.compile(r"^[A-Za-z_]+(\|[A-Za-z0-9_]+)?(:[0-9]+)?$")


class ConfigurationError(ValueError):
    """Raised when a facility profile cannot be loaded or validated."""


@lru_cache(maxsize=1)
def _default_weather_descriptors() -> Tuple[Tuple[str, str], ...]:
    with open(_DATA_DIR / "weather_descriptors.yaml", "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return tuple((str(k), str(v)) for k, v in raw.items())


def load_weather_descriptors() -> Dict[str, str]:
    """Stock spoken descriptors keyed by full METAR weather code (``-RA``, ``VCSH``, ...)."""
    return dict(_default_weather_descriptors())


@dataclass(frozen=True)
class Template:
    text: Optional[str] = None
    voice: Optional[str] = None


@dataclass(frozen=True)
class MagneticVariation:
    enabled: bool = False
    magnetic_degrees: int = 0


@dataclass(frozen=True)
class TransitionLevelRange:
    low: int
    high: int
    altitude: int


@dataclass(frozen=True)
class Contraction:
    text: str = ""
    voice: str = ""


@dataclass(frozen=True)
class StaticDefinition:
    text: str
    enabled: bool = True


@dataclass(frozen=True)
class Preset:
    name: str
    template: str = ""
    airport_conditions: str = ""
    notams: str = ""

    @property
    def has_closing_variable(self) -> bool:
        return any(token in self.template for token in ("[CLOSING]", "$CLOSING", "[CLOSING:VOX]", "$CLOSING:VOX"))


def _parse_template(value: Any, where: str) -> Template:
    if isinstance(value, str):
        value = {"text": value, "voice": value}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{where}: expected a mapping with 'text' and 'voice'")
    unknown = set(value) - {"text", "voice"}
    if unknown:
        raise ConfigurationError(f"{where}: unknown template keys {sorted(unknown)}")
    text = value.get("text")
    voice = value.get("voice")
    for label, s in (("text", text), ("voice", voice)):
        if s is not None:
            _validate_template_string(str(s), f"{where}.{label}")
    return Template(
        text=str(text) if text is not None else None,
        voice=str(voice) if voice is not None else None,
    )


def _validate_template_string(s: str, where: str) -> None:
    depth = 0
    start = 0
    for i, ch in enumerate(s):
        if ch == "{":
            if depth:
                raise ConfigurationError(f"{where}: nested '{{' at position {i} in {s!r}")
            depth = 1
            start = i
        elif ch == "}":
            if not depth:
                raise ConfigurationError(f"{where}: unmatched '}}' at position {i} in {s!r}")
            depth = 0
            if not _RE_PLACEHOLDER.match(s[start + 1:i]):
                raise ConfigurationError(f"{where}: malformed placeholder {s[start:i + 1]!r}")
    if depth:
        raise ConfigurationError(f"{where}: unterminated placeholder in {s!r}")


def _parse_bool(value: Any, where: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "on", "1", "false", "no", "off", "0"):
        return value.strip().lower() in ("true", "yes", "on", "1")
    raise ConfigurationError(f"{where}: expected a boolean, got {value!r}")


def _parse_int(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{where}: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{where}: expected an integer, got {value!r}") from None


def _parse_float(value: Any, where: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{where}: expected a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{where}: expected a number, got {value!r}") from None


def _parse_str(value: Any, where: str) -> str:
    if isinstance(value, (dict, list)):
        raise ConfigurationError(f"{where}: expected a string")
    return "" if value is None else str(value)


def _parse_optional_str(value: Any, where: str) -> Optional[str]:
    return None if value is None else _parse_str(value, where)


def _parse_minutes(value: Any, where: str) -> Optional[Tuple[int, ...]]:
    if value is None:
        return None
    if not isinstance(value, list):
        value = [value]
    minutes = tuple(_parse_int(v, where) for v in value)
    for minute in minutes:
        if not 0 <= minute <= 59:
            raise ConfigurationError(f"{where}: minute {minute} out of range")
    return minutes


def _parse_str_tuple(value: Any, where: str) -> Tuple[str, ...]:
    if not isinstance(value, list):
        raise ConfigurationError(f"{where}: expected a list")
    return tuple(_parse_str(v, where).upper() for v in value)


def _parse_str_map(value: Any, where: str) -> Dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigurationError(f"{where}: expected a mapping")
    return {str(k).upper(): _parse_str(v, f"{where}.{k}") for k, v in value.items()}


def _parse_template_map(value: Any, where: str) -> Dict[str, Template]:
    if not isinstance(value, dict):
        raise ConfigurationError(f"{where}: expected a mapping")
    return {str(k).upper(): _parse_template(v, f"{where}.{k}") for k, v in value.items()}


def _parse_transition_levels(value: Any, where: str) -> Tuple[TransitionLevelRange, ...]:
    if not isinstance(value, list):
        raise ConfigurationError(f"{where}: expected a list")
    ranges = []
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigurationError(f"{where}[{i}]: expected a mapping with low, high and altitude")
        try:
            ranges.append(
                TransitionLevelRange(
                    low=_parse_int(item["low"], f"{where}[{i}].low"),
                    high=_parse_int(item["high"], f"{where}[{i}].high"),
                    altitude=_parse_int(item["altitude"], f"{where}[{i}].altitude"),
                )
            )
        except KeyError as e:
            raise ConfigurationError(f"{where}[{i}]: missing {e.args[0]!r}") from None
    return tuple(ranges)


def _merged(parser: Callable[[Any, str], Dict[str, Any]]) -> Callable[[Any, str, Dict[str, Any]], Dict[str, Any]]:
    """Mapping options extend the defaults rather than replace them."""

    def parse(value: Any, where: str, default: Dict[str, Any]) -> Dict[str, Any]:
        merged = dict(default)
        merged.update(parser(value, where))
        return merged

    return parse


def _opt(default: Any = None, *, parse: Optional[Callable] = None, merge: Optional[Callable] = None, factory=None):
    metadata = {}
    if parse is not None:
        metadata["parse"] = parse
    if merge is not None:
        metadata["merge"] = merge
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


@dataclass(frozen=True)
class ObservationTimeFormat:
    template: Template = Template("{time}Z", "{time} ZULU {special}")
    standard_update_times: Optional[Tuple[int, ...]] = _opt(None, parse=_parse_minutes)


@dataclass(frozen=True)
class SurfaceWindFormat:
    speak_leading_zero: bool = False
    magnetic_variation: MagneticVariation = MagneticVariation()
    standard: Template = Template("{wind_dir}{wind_spd}KT", "WIND {wind_dir} AT {wind_spd}")
    standard_gust: Template = Template(
        "{wind_dir}{wind_spd}G{wind_gust}KT", "WIND {wind_dir} AT {wind_spd} GUSTS {wind_gust}"
    )
    variable: Template = Template("VRB{wind_spd}KT", "WIND VARIABLE AT {wind_spd}")
    variable_gust: Template = Template("VRB{wind_spd}G{wind_gust}KT", "WIND VARIABLE AT {wind_spd} GUSTS {wind_gust}")
    variable_direction: Template = Template("{wind_vmin}V{wind_vmax}", "WIND VARIABLE BETWEEN {wind_vmin} AND {wind_vmax}")
    calm: Template = Template("{wind}", "WIND CALM")
    calm_wind_speed: int = 2


@dataclass(frozen=True)
class VisibilityFormat:
    template: Template = Template("{visibility}", "VISIBILITY {visibility}")
    north: str = "to the north"
    north_east: str = "to the north-east"
    east: str = "to the east"
    south_east: str = "to the south-east"
    south: str = "to the south"
    south_west: str = "to the south-west"
    west: str = "to the west"
    north_west: str = "to the north-west"
    unlimited_visibility_voice: str = "visibility 10 kilometers or more"
    unlimited_visibility_text: str = "VIS 10KM"
    include_visibility_suffix: bool = True
    meters_cutoff: int = 5000

    def compass_label(self, direction: str) -> str:
        labels = {
            "N": self.north,
            "NE": self.north_east,
            "E": self.east,
            "SE": self.south_east,
            "S": self.south,
            "SW": self.south_west,
            "W": self.west,
            "NW": self.north_west,
        }
        return labels.get(direction, "")


@dataclass(frozen=True)
class RunwayVisualRangeFormat:
    neutral_tendency: str = "Neutral"
    going_up_tendency: str = "Going Up"
    going_down_tendency: str = "Going Down"


@dataclass(frozen=True)
class PresentWeatherFormat:
    template: Template = Template("{weather}", "{weather}")
    light_intensity: Template = Template("-", "light")
    moderate_intensity: Template = Template("", "")
    heavy_intensity: Template = Template("+", "heavy")
    vicinity: Template = Template("VC", "in the vicinity")
    descriptors: Dict[str, str] = _opt(
        factory=load_weather_descriptors, parse=_parse_str_map, merge=_merged(_parse_str_map)
    )


@dataclass(frozen=True)
class RecentWeatherFormat:
    template: Template = Template("RECENT WEATHER {weather}", "RECENT WEATHER {weather}")


def _default_cloud_types() -> Dict[str, Template]:
    return {
        "FEW": Template("FEW{altitude}", "few clouds at {altitude}"),
        "SCT": Template("SCT{altitude}{convective}", "{altitude} scattered {convective}"),
        "BKN": Template("BKN{altitude}{convective}", "{altitude} broken {convective}"),
        "OVC": Template("OVC{altitude}{convective}", "{altitude} overcast {convective}"),
        "VV": Template("VV{altitude}", "indefinite ceiling {altitude}"),
        "NSC": Template("NSC", "no significant clouds"),
        "NCD": Template("NCD", "no clouds detected"),
        "CLR": Template("CLR", "sky clear below one-two thousand"),
        "SKC": Template("SKC", "sky clear"),
    }


@dataclass(frozen=True)
class CloudsFormat:
    template: Template = Template("{clouds}", "{clouds}")
    identify_ceiling_layer: bool = True
    identify_ceiling_layer_text_atis: bool = False
    text_atis_ceiling_prefix: str = "CIG"
    cloud_ceiling_layer_types: Tuple[str, ...] = _opt(("BKN", "OVC"), parse=_parse_str_tuple)
    convert_to_metric: bool = False
    is_altitude_in_hundreds: bool = False
    undetermined_layer_altitude: Template = Template("undetermined", "undetermined")
    automatic_cb_detection: Template = Template("//////CB", "RADAR DETECTED C-B CLOUDS")
    types: Dict[str, Template] = _opt(
        factory=_default_cloud_types, parse=_parse_template_map, merge=_merged(_parse_template_map)
    )
    convective_types: Dict[str, str] = _opt(
        factory=lambda: {"CB": "cumulonimbus", "TCU": "towering cumulus"},
        parse=_parse_str_map,
        merge=_merged(_parse_str_map),
    )


@dataclass(frozen=True)
class TemperatureFormat:
    template: Template = Template("{temp}", "TEMPERATURE {temp}")
    use_plus_prefix: bool = False
    speak_leading_zero: bool = False


@dataclass(frozen=True)
class DewpointFormat:
    template: Template = Template("{dewpoint}", "DEWPOINT {dewpoint}")
    use_plus_prefix: bool = False
    speak_leading_zero: bool = False


@dataclass(frozen=True)
class AltimeterFormat:
    template: Template = Template("A{altimeter} ({altimeter|text})", "ALTIMETER {altimeter}")
    pronounce_decimal: bool = False


@dataclass(frozen=True)
class TransitionLevelFormat:
    template: Template = Template("TRANSITION LEVEL {trl}", "TRANSITION LEVEL {trl}")
    values: Tuple[TransitionLevelRange, ...] = _opt((), parse=_parse_transition_levels)


@dataclass(frozen=True)
class TrendFormat:
    nosig_text: str = "NOSIG"
    nosig_voice: str = "NO SIGNIFICANT CHANGES"
    becoming_text: str = "BECMG"
    becoming_voice: str = "BECOMING"
    temporary_text: str = "TEMPO"
    temporary_voice: str = "TEMPORARY"
    not_available_text: Optional[str] = _opt(None, parse=_parse_optional_str)
    not_available_voice: Optional[str] = _opt(None, parse=_parse_optional_str)


@dataclass(frozen=True)
class WindShearFormat:
    runway_text: str = "WS R{runway}"
    runway_voice: str = "WIND SHEAR RUNWAY {runway}"
    all_runway_text: str = "WS ALL RWY"
    all_runway_voice: str = "WIND SHEAR ALL RUNWAYS"


@dataclass(frozen=True)
class NotamsFormat:
    template: Template = Template("NOTAMS... {notams}", "NOTICES TO AIR MISSIONS: {notams}")


@dataclass(frozen=True)
class ClosingStatementFormat:
    template: Template = Template(
        "...ADVS YOU HAVE INFO {letter}.", "ADVISE ON INITIAL CONTACT, YOU HAVE INFORMATION {letter|word}"
    )
    auto_include_closing_statement: bool = True


@dataclass(frozen=True)
class AtisFormat:
    observation_time: ObservationTimeFormat = ObservationTimeFormat()
    surface_wind: SurfaceWindFormat = SurfaceWindFormat()
    visibility: VisibilityFormat = VisibilityFormat()
    runway_visual_range: RunwayVisualRangeFormat = RunwayVisualRangeFormat()
    present_weather: PresentWeatherFormat = _opt(factory=PresentWeatherFormat)
    recent_weather: RecentWeatherFormat = RecentWeatherFormat()
    clouds: CloudsFormat = _opt(factory=CloudsFormat)
    temperature: TemperatureFormat = TemperatureFormat()
    dewpoint: DewpointFormat = DewpointFormat()
    altimeter: AltimeterFormat = AltimeterFormat()
    transition_level: TransitionLevelFormat = TransitionLevelFormat()
    trend: TrendFormat = TrendFormat()
    wind_shear: WindShearFormat = WindShearFormat()
    notams: NotamsFormat = NotamsFormat()
    closing_statement: ClosingStatementFormat = ClosingStatementFormat()


@dataclass(frozen=True)
class StationConfig:
    identifier: str
    name: str = ""
    atis_type: str = "combined"
    faa_atis: Optional[bool] = None
    use_decimal_terminology: bool = False
    use_text_to_speech: bool = True
    code_range: Tuple[str, str] = ("A", "Z")
    contractions: Dict[str, Contraction] = field(default_factory=dict)
    airport_condition_definitions: Tuple[StaticDefinition, ...] = ()
    notam_definitions: Tuple[StaticDefinition, ...] = ()
    airport_conditions_before_free_text: bool = False
    notams_before_free_text: bool = False
    presets: Dict[str, Preset] = field(default_factory=dict)
    format: AtisFormat = field(default_factory=AtisFormat)

    @property
    def is_faa_atis(self) -> bool:
        """US stations (K or P prefix) unless overridden by ``faa_atis``."""
        if self.faa_atis is not None:
            return self.faa_atis
        return self.identifier.startswith(("K", "P"))

    def preset(self, name: str) -> Preset:
        try:
            return self.presets[name]
        except KeyError:
            raise ConfigurationError(
                f"Preset {name!r} not defined for {self.identifier}; available: {sorted(self.presets)}"
            ) from None


@dataclass(frozen=True)
class ServiceSettings:
    metar_url: str = "https://metar.vatsim.net/metar.php"
    user_agent: str = "atis-render/0.1"
    timeout_seconds: float = 10.0
    cache_ttl_seconds: int = 300
    airports: Optional[str] = None
    navaids: Optional[str] = None
    speech_debounce_seconds: float = 5.0


@dataclass(frozen=True)
class FacilityProfile:
    station: StationConfig
    services: ServiceSettings = ServiceSettings()


def _build_section(cls, raw: Any, where: str):
    """Build a frozen format section from a YAML mapping, starting from its defaults."""
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{where}: expected a mapping")

    defaults = cls()
    known = {f.name: f for f in fields(cls)}
    kwargs: Dict[str, Any] = {}
    for key, value in raw.items():
        name = str(key)
        f = known.get(name)
        if f is None:
            raise ConfigurationError(f"{where}: unknown option {name!r}")
        path = f"{where}.{name}"
        current = getattr(defaults, name)
        if "merge" in f.metadata:
            kwargs[name] = f.metadata["merge"](value, path, current)
        elif "parse" in f.metadata:
            kwargs[name] = f.metadata["parse"](value, path)
        elif isinstance(current, Template):
            kwargs[name] = _parse_template(value, path)
        elif isinstance(current, MagneticVariation):
            kwargs[name] = _build_section(MagneticVariation, value, path)
        elif isinstance(current, bool):
            kwargs[name] = _parse_bool(value, path)
        elif isinstance(current, int):
            kwargs[name] = _parse_int(value, path)
        elif isinstance(current, str):
            kwargs[name] = _parse_str(value, path)
        else:
            kwargs[name] = _build_section(type(current), value, path)
    return cls(**kwargs)


def _parse_definitions(value: Any, where: str) -> Tuple[StaticDefinition, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigurationError(f"{where}: expected a list")
    definitions = []
    for i, item in enumerate(value):
        if isinstance(item, str):
            definitions.append(StaticDefinition(text=item))
        elif isinstance(item, dict) and "text" in item:
            definitions.append(
                StaticDefinition(
                    text=_parse_str(item["text"], f"{where}[{i}].text"),
                    enabled=_parse_bool(item.get("enabled", True), f"{where}[{i}].enabled"),
                )
            )
        else:
            raise ConfigurationError(f"{where}[{i}]: expected a string or a mapping with 'text'")
    return tuple(definitions)


def _parse_contractions(value: Any, where: str) -> Dict[str, Contraction]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{where}: expected a mapping of variable name to text/voice")
    contractions = {}
    for key, item in value.items():
        name = str(key).lstrip("@").upper()
        if not re.match(r"^[A-Z0-9_]+$", name):
            raise ConfigurationError(f"{where}: invalid contraction variable name {key!r}")
        if isinstance(item, str):
            contractions[name] = Contraction(text=item, voice=item)
        elif isinstance(item, dict):
            contractions[name] = Contraction(
                text=_parse_str(item.get("text"), f"{where}.{key}.text"),
                voice=_parse_str(item.get("voice"), f"{where}.{key}.voice"),
            )
        else:
            raise ConfigurationError(f"{where}.{key}: expected a string or a mapping")
    return contractions


def _parse_presets(value: Any, where: str) -> Dict[str, Preset]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{where}: expected a mapping of preset name to preset")
    presets = {}
    for name, item in value.items():
        if isinstance(item, str):
            item = {"template": item}
        if not isinstance(item, dict):
            raise ConfigurationError(f"{where}.{name}: expected a mapping")
        presets[str(name)] = Preset(
            name=str(name),
            template=_parse_str(item.get("template"), f"{where}.{name}.template"),
            airport_conditions=_parse_str(item.get("airport_conditions"), f"{where}.{name}.airport_conditions"),
            notams=_parse_str(item.get("notams"), f"{where}.{name}.notams"),
        )
    return presets


def parse_station_config(raw: Dict[str, Any]) -> StationConfig:
    """Build a ``StationConfig`` from the ``station`` section of a profile."""
    if not isinstance(raw, dict):
        raise ConfigurationError("station: expected a mapping")

    identifier = str(raw.get("identifier") or "").strip().upper()
    if not re.match(r"^[A-Z0-9]{3,4}$", identifier):
        raise ConfigurationError(f"station.identifier: invalid ICAO identifier {raw.get('identifier')!r}")

    code_range = raw.get("code_range") or ["A", "Z"]
    if (
        not isinstance(code_range, list)
        or len(code_range) != 2
        or not all(isinstance(c, str) and len(c) == 1 and c.isalpha() for c in code_range)
    ):
        raise ConfigurationError("station.code_range: expected two letters, e.g. [A, Z]")

    faa_atis = raw.get("faa_atis")
    return StationConfig(
        identifier=identifier,
        name=_parse_str(raw.get("name"), "station.name"),
        atis_type=_parse_str(raw.get("atis_type") or "combined", "station.atis_type").lower(),
        faa_atis=None if faa_atis is None else _parse_bool(faa_atis, "station.faa_atis"),
        use_decimal_terminology=_parse_bool(raw.get("use_decimal_terminology", False), "station.use_decimal_terminology"),
        use_text_to_speech=_parse_bool(raw.get("use_text_to_speech", True), "station.use_text_to_speech"),
        code_range=(code_range[0].upper(), code_range[1].upper()),
        contractions=_parse_contractions(raw.get("contractions"), "station.contractions"),
        airport_condition_definitions=_parse_definitions(
            raw.get("airport_conditions"), "station.airport_conditions"
        ),
        notam_definitions=_parse_definitions(raw.get("notams"), "station.notams"),
        airport_conditions_before_free_text=_parse_bool(
            raw.get("airport_conditions_before_free_text", False), "station.airport_conditions_before_free_text"
        ),
        notams_before_free_text=_parse_bool(raw.get("notams_before_free_text", False), "station.notams_before_free_text"),
        presets=_parse_presets(raw.get("presets"), "station.presets"),
        format=_build_section(AtisFormat, raw.get("format"), "station.format"),
    )


def _parse_services(raw: Any) -> ServiceSettings:
    if raw is None:
        return ServiceSettings()
    if not isinstance(raw, dict):
        raise ConfigurationError("services: expected a mapping")
    metar = raw.get("metar") if isinstance(raw.get("metar"), dict) else {}
    navdata = raw.get("navdata") if isinstance(raw.get("navdata"), dict) else {}
    speech = raw.get("speech") if isinstance(raw.get("speech"), dict) else {}
    defaults = ServiceSettings()

    timeout = metar.get("timeout_seconds")
    timeout_f = (
        defaults.timeout_seconds if timeout is None else _parse_float(timeout, "services.metar.timeout_seconds")
    )
    ttl = metar.get("cache_ttl_seconds")
    ttl_i = defaults.cache_ttl_seconds if ttl is None else _parse_int(ttl, "services.metar.cache_ttl_seconds")
    debounce = speech.get("debounce_seconds")
    debounce_f = (
        defaults.speech_debounce_seconds
        if debounce is None
        else _parse_float(debounce, "services.speech.debounce_seconds")
    )

    return ServiceSettings(
        metar_url=str(metar.get("url") or defaults.metar_url),
        user_agent=str(metar.get("user_agent") or defaults.user_agent),
        timeout_seconds=max(1.0, timeout_f),
        cache_ttl_seconds=max(0, ttl_i),
        airports=navdata.get("airports"),
        navaids=navdata.get("navaids"),
        speech_debounce_seconds=max(0.0, debounce_f),
    )


def load_profile(path: str) -> FacilityProfile:
    """Load a facility profile (plus its ``.local.yaml`` override, if present)."""
    resolved = resolve_config_path(path)
    try:
        raw = load_yaml_with_local_override(resolved)
    except (FileNotFoundError, yaml.YAMLError) as e:
        raise ConfigurationError(str(e)) from e
    if not isinstance(raw, dict) or "station" not in raw:
        raise ConfigurationError(f"{resolved}: missing 'station' section")
    return FacilityProfile(station=parse_station_config(raw["station"]), services=_parse_services(raw.get("services")))


def load_station_config(path: str) -> StationConfig:
    return load_profile(path).station

"""Chunk decoders: each one consumes a single field group from the front of a METAR.

Every decoder matches an anchored regex against the remaining report and
returns the unconsumed suffix plus the decoded fields, keyed by the
``DecodedMetar`` attribute they populate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Tuple

from .entities import (
    CloudAmount,
    CloudLayer,
    CloudType,
    MetarType,
    Pressure,
    RunwayVisualRange,
    SurfaceWind,
    Tendency,
    TrendForecast,
    TrendForecastType,
    Visibility,
    WeatherPhenomenon,
)
from .errors import MetarChunkDecoderError, Messages
from .value import Unit, Value

CARAC_PATTERN = "TS|FZ|SH|BL|DR|MI|BC|PR"
TYPE_PATTERN = "DZ|RA|SN|SG|PL|DS|GR|GS|UP|IC|FG|BR|SA|DU|HZ|FU|VA|PY|DU|PO|SQ|FC|DS|SS|//"

_WEATHER_GROUP = f"(([-+]|VC)?({CARAC_PATTERN})?({TYPE_PATTERN})?({TYPE_PATTERN})?({TYPE_PATTERN})? )?"
_CLOUD_LAYER = "(VV|FEW|SCT|BKN|OVC|///)([0-9]{3}|///)(CB|TCU|///)?"
_RVR_RUNWAY = "R([0-9]{2}[LCR]?)/([PM]?([0-9]{4})V)?[PM]?([0-9]{4})(FT)?/?([UDN]?)"
_WS_RUNWAY = "WS R(WY)?([0-9]{2}[LCR]?)"

_RE_REPORT_TYPE = re.compile(r"^((METAR|SPECI)( COR)?) ")
_RE_ICAO = re.compile(r"^([A-Z0-9]{4}) ")
_RE_DATETIME = re.compile(r"^([0-9]{2})([0-9]{2})([0-9]{2})Z ")
_RE_STATUS = re.compile(r"^([A-Z]+) ")
_RE_SURFACE_WIND = re.compile(
    r"^([0-9]{3}|VRB|///)P?([/0-9]{2,3}|//)(GP?([0-9]{2,3}))?(KT|MPS|KPH)( ([0-9]{3})V([0-9]{3}))?( )"
)
_RE_VISIBILITY = re.compile(
    r"^(CAVOK|([0-9]{4})(NDV)?( ([0-9]{4})(N|NE|E|SE|S|SW|W|NW)?)?"
    r"|M?([0-9]{0,2}) ?(([1357])/(2|4|8|16))?SM|////)( )"
)
_RE_RVR = re.compile(f"^(({_RVR_RUNWAY}) )+")
_RE_RVR_SINGLE = re.compile(f"^(({_RVR_RUNWAY}) )")
_RE_PRESENT_WEATHER = re.compile(f"^{_WEATHER_GROUP}{_WEATHER_GROUP}{_WEATHER_GROUP}")
_RE_CLOUD = re.compile(
    f"^((NSC|NCD|CLR|SKC)|({_CLOUD_LAYER})( {_CLOUD_LAYER})?( {_CLOUD_LAYER})?( {_CLOUD_LAYER})?)( )"
)
_RE_TEMPERATURE = re.compile(r"^(M?[0-9]{2})?/(M?[0-9]{2})?( )")
_RE_PRESSURE = re.compile(r"^((Q|A)(////|[0-9]{4}))( )")
_RE_RECENT_WEATHER = re.compile(
    f"^RE({CARAC_PATTERN})?({TYPE_PATTERN})?({TYPE_PATTERN})?({TYPE_PATTERN})? "
)
_RE_WIND_SHEAR = re.compile(f"^(WS ALL RWY|({_WS_RUNWAY})( {_WS_RUNWAY})?( {_WS_RUNWAY})?)( )")
_RE_TREND = re.compile(
    r"^(?:TREND )?(TEMPO|BECMG|NOSIG) "
    r"((?:(?:AT|FM|TL)[0-9]{4} )*)"
    r"((?:(?!(?:TEMPO|BECMG|NOSIG|RMK) )\S+ )*)"
)
_RE_TREND_TIME = re.compile(r"(AT|FM|TL)([0-9]{4})")

_CLOUD_AMOUNTS = {
    "FEW": CloudAmount.FEW,
    "SCT": CloudAmount.SCATTERED,
    "BKN": CloudAmount.BROKEN,
    "OVC": CloudAmount.OVERCAST,
    "VV": CloudAmount.VERTICAL_VISIBILITY,
    "NSC": CloudAmount.NO_SIGNIFICANT_CLOUDS,
    "NCD": CloudAmount.NO_CLOUDS_DETECTED,
    "CLR": CloudAmount.CLEAR,
    "SKC": CloudAmount.SKY_CLEAR,
}

_CLOUD_TYPES = {
    "CB": CloudType.CUMULONIMBUS,
    "TCU": CloudType.TOWERING_CUMULUS,
    "///": CloudType.CANNOT_MEASURE,
}

_SPEED_UNITS = {
    "KT": Unit.KNOT,
    "KPH": Unit.KILOMETER_PER_HOUR,
    "MPS": Unit.METER_PER_SECOND,
}

_TENDENCIES = {
    "U": Tendency.UPWARD,
    "D": Tendency.DOWNWARD,
    "N": Tendency.NO_CHANGE,
}

_TREND_TYPES = {
    "BECMG": TrendForecastType.BECOMING,
    "TEMPO": TrendForecastType.TEMPORARY,
    "NOSIG": TrendForecastType.NO_SIGNIFICANT_CHANGES,
}


def consume_one_chunk(remaining: str) -> str:
    """Drop the first space-separated token of ``remaining``."""
    next_space = remaining.find(" ")
    if next_space > 0:
        return remaining[next_space + 1:]
    return remaining


def _valid_qfu(runway: str) -> bool:
    qfu = Value.to_int(runway)
    return qfu is not None and 1 <= qfu <= 36


@dataclass
class ChunkResult:
    remaining: str
    fields: Dict[str, Any] = field(default_factory=dict)


class ChunkDecoder:
    """Base class for the decoders in the chain."""

    name = "chunk"
    _pattern: Pattern[str]

    def regex(self) -> Pattern[str]:
        return self._pattern

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        raise NotImplementedError

    def _consume(self, remaining: str) -> Tuple[str, Optional["re.Match[str]"]]:
        match = self._pattern.match(remaining)
        if match is None:
            return remaining, None
        return remaining[match.end():], match

    def _error(self, message: str, remaining: str, new_remaining: str, *, hard: bool = False) -> MetarChunkDecoderError:
        return MetarChunkDecoderError(message, remaining, new_remaining, self.name, hard=hard)


class ReportTypeChunkDecoder(ChunkDecoder):
    name = "report_type"
    _pattern = _RE_REPORT_TYPE

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        report_type = MetarType.NULL
        if found:
            report_type = {
                "METAR": MetarType.METAR,
                "SPECI": MetarType.SPECI,
                "METAR COR": MetarType.METAR_COR,
                "SPECI COR": MetarType.SPECI_COR,
            }.get(found.group(1), MetarType.NULL)
        return ChunkResult(new_remaining, {"type": report_type})


class IcaoChunkDecoder(ChunkDecoder):
    name = "icao"
    _pattern = _RE_ICAO

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        if not found:
            raise self._error(Messages.ICAO_NOT_FOUND, remaining, new_remaining)
        return ChunkResult(new_remaining, {"icao": found.group(1)})


class DatetimeChunkDecoder(ChunkDecoder):
    name = "datetime"
    _pattern = _RE_DATETIME

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        if not found:
            raise self._error(Messages.BAD_DAY_HOUR_MINUTE, remaining, new_remaining)

        day, hour, minute = (int(found.group(i)) for i in (1, 2, 3))
        if not (1 <= day <= 31 and 0 <= hour <= 23 and 0 <= minute <= 59):
            raise self._error(Messages.INVALID_DAY_HOUR_MINUTE_RANGES, remaining, new_remaining, hard=True)

        return ChunkResult(
            new_remaining,
            {
                "day": day,
                "hour": hour,
                "minute": minute,
                "time": f"{hour:02d}:{minute:02d} UTC",
            },
        )


class ReportStatusChunkDecoder(ChunkDecoder):
    name = "report_status"
    _pattern = _RE_STATUS

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        status = ""
        if found:
            status = found.group(1)
            if len(status) != 3 and status != "AUTO":
                raise self._error(Messages.INVALID_REPORT_STATUS, remaining, new_remaining)

        if status == "NIL" and new_remaining.strip():
            raise self._error(Messages.NO_INFORMATION_EXPECTED_AFTER_NIL, remaining, new_remaining, hard=True)

        return ChunkResult(new_remaining, {"status": status})


class SurfaceWindChunkDecoder(ChunkDecoder):
    name = "surface_wind"
    _pattern = _RE_SURFACE_WIND

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        if not found:
            raise self._error(Messages.BAD_FORMAT_FOR_SURFACE_WIND, remaining, new_remaining)

        direction, speed = found.group(1), found.group(2)
        if direction == "///" and speed == "//":
            raise self._error(Messages.NO_SURFACE_WIND_INFORMATION_MEASURED, remaining, new_remaining)

        speed_unit = _SPEED_UNITS.get(found.group(5), Unit.NONE)
        wind = SurfaceWind(
            mean_speed=Value.new_int_value(speed, speed_unit),
            speed_unit=speed_unit,
            raw_value=found.group(0).strip(),
        )

        if direction == "VRB":
            wind.variable_direction = True
            wind.mean_direction = None
        else:
            mean_direction = Value.new_int_value(direction, Unit.DEGREE)
            if mean_direction is not None and not 0 <= mean_direction.actual_value <= 360:
                raise self._error(Messages.INVALID_WIND_DIRECTION, remaining, new_remaining)
            wind.mean_direction = mean_direction

        if found.group(6):
            minimum = Value(float(int(found.group(7))), Unit.DEGREE)
            maximum = Value(float(int(found.group(8))), Unit.DEGREE)
            for bound in (minimum, maximum):
                if not 0 <= bound.actual_value <= 360:
                    raise self._error(Messages.INVALID_WIND_DIRECTION_VARIATIONS, remaining, new_remaining)
            wind.direction_variations = (minimum, maximum)

        if found.group(4):
            wind.speed_variations = Value.new_int_value(found.group(4), speed_unit)

        return ChunkResult(new_remaining, {"surface_wind": wind})


class VisibilityChunkDecoder(ChunkDecoder):
    name = "visibility"
    _pattern = _RE_VISIBILITY

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        if not found:
            raise self._error(Messages.BAD_FORMAT_FOR_VISIBILITY, remaining, new_remaining)

        visibility = Visibility()
        chunk = found.group(1)
        if chunk == "CAVOK":
            visibility.cavok = True
        elif chunk != "////":
            visibility.raw_value = chunk
            if found.group(2):
                visibility.prevailing_visibility = Value(float(found.group(2)), Unit.METER)
                if found.group(4):
                    visibility.minimum_visibility = Value(float(found.group(5)), Unit.METER)
                    visibility.minimum_visibility_direction = found.group(6) or None
                visibility.ndv = bool(found.group(3))
            else:
                miles = 0.0
                if found.group(7):
                    miles += int(found.group(7))
                if found.group(9) and found.group(10):
                    miles += int(found.group(9)) / int(found.group(10))
                visibility.prevailing_visibility = Value(miles, Unit.STATUTE_MILE)

        return ChunkResult(new_remaining, {"cavok": visibility.cavok, "visibility": visibility})


class RunwayVisualRangeChunkDecoder(ChunkDecoder):
    name = "runway_visual_range"
    _pattern = _RE_RVR

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        if not found:
            return ChunkResult(new_remaining)

        runways: List[RunwayVisualRange] = []
        part = found.group(0)
        while True:
            single = _RE_RVR_SINGLE.match(part)
            if single is None:
                break
            part = part[single.end():]

            runway = single.group(3)
            if not _valid_qfu(runway):
                raise self._error(
                    Messages.INVALID_RUNWAY_QFU_RUNWAY_VISUAL_RANGE, remaining, new_remaining, hard=True
                )

            unit = Unit.FEET if single.group(7) == "FT" else Unit.METER
            observation = RunwayVisualRange(
                runway=runway,
                past_tendency=_TENDENCIES.get(single.group(8), Tendency.NONE),
                raw_value=single.group(2),
            )
            if single.group(5):
                observation.variable = True
                observation.visual_range_interval = (
                    Value(float(int(single.group(5))), unit),
                    Value(float(int(single.group(6))), unit),
                )
            else:
                observation.visual_range = Value(float(int(single.group(6))), unit)
            runways.append(observation)

        return ChunkResult(new_remaining, {"runways_visual_range": runways})


class PresentWeatherChunkDecoder(ChunkDecoder):
    name = "present_weather"
    _pattern = _RE_PRESENT_WEATHER

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        phenomena: List[WeatherPhenomenon] = []
        if found:
            # Six capture groups per weather group.
            for i in (1, 7, 13):
                raw = found.group(i)
                if not raw or not raw.strip() or found.group(i + 3) == "//":
                    continue
                phenomenon = WeatherPhenomenon(
                    intensity_proximity=found.group(i + 1) or "",
                    characteristics=found.group(i + 2) or "",
                    raw_value=raw.strip(),
                )
                for k in (3, 4, 5):
                    if found.group(i + k):
                        phenomenon.types.append(found.group(i + k))
                phenomena.append(phenomenon)
        return ChunkResult(new_remaining, {"present_weather": phenomena})


class CloudChunkDecoder(ChunkDecoder):
    name = "clouds"
    _pattern = _RE_CLOUD

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        if not found and not with_cavok:
            raise self._error(Messages.BAD_FORMAT_FOR_CLOUDS, remaining, new_remaining)

        layers: List[CloudLayer] = []
        if found and found.group(2):
            layers.append(CloudLayer(amount=_CLOUD_AMOUNTS[found.group(2)], raw_value=found.group(2)))
        elif found:
            # Four capture groups per layer, first layer at group 3.
            for i in (3, 7, 11, 15):
                layer_raw = found.group(i)
                if not layer_raw:
                    continue
                layer = CloudLayer(
                    amount=_CLOUD_AMOUNTS.get(found.group(i + 1), CloudAmount.NONE),
                    type=_CLOUD_TYPES.get(found.group(i + 3) or "", CloudType.NONE),
                    raw_value=layer_raw.strip(),
                )
                height = Value.to_int(found.group(i + 2))
                if height is not None:
                    layer.base_height = Value(float(height), Unit.FEET)
                layers.append(layer)

        return ChunkResult(new_remaining, {"clouds": layers})


class TemperatureChunkDecoder(ChunkDecoder):
    name = "temperature"
    _pattern = _RE_TEMPERATURE

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        fields: Dict[str, Any] = {}
        if found:
            if found.group(1):
                fields["air_temperature"] = Value.new_int_value(found.group(1), Unit.DEGREE_CELSIUS)
            if found.group(2):
                fields["dew_point_temperature"] = Value.new_int_value(found.group(2), Unit.DEGREE_CELSIUS)
        return ChunkResult(new_remaining, fields)


class PressureChunkDecoder(ChunkDecoder):
    name = "pressure"
    _pattern = _RE_PRESSURE

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        if not found:
            raise self._error(Messages.ATMOSPHERIC_PRESSURE_NOT_FOUND, remaining, new_remaining)

        pressure = Pressure(raw_value=found.group(1))
        if found.group(3) != "////":
            unit = Unit.HECTOPASCAL if found.group(2) == "Q" else Unit.MERCURY_INCH
            pressure.value = Value(float(int(found.group(3))), unit)
        return ChunkResult(new_remaining, {"pressure": pressure})


class RecentWeatherChunkDecoder(ChunkDecoder):
    name = "recent_weather"
    _pattern = _RE_RECENT_WEATHER

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        if not found:
            return ChunkResult(new_remaining)

        weather = WeatherPhenomenon(characteristics=found.group(1) or "", raw_value=found.group(0).strip())
        for k in (2, 3, 4):
            if found.group(k):
                weather.types.append(found.group(k))
        return ChunkResult(new_remaining, {"recent_weather": weather})


class WindShearChunkDecoder(ChunkDecoder):
    name = "wind_shear"
    _pattern = _RE_WIND_SHEAR

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        new_remaining, found = self._consume(remaining)
        if not found:
            return ChunkResult(new_remaining)

        if found.group(1) == "WS ALL RWY":
            return ChunkResult(new_remaining, {"windshear_all_runways": True, "windshear_runways": []})

        runways: List[str] = []
        # Three capture groups per runway, first runway at group 2.
        for k in (2, 5, 8):
            if not found.group(k):
                continue
            runway = found.group(k + 2)
            if not _valid_qfu(runway):
                raise self._error(
                    Messages.INVALID_RUNWAY_QFU_RUNWAY_VISUAL_RANGE, remaining, new_remaining, hard=True
                )
            runways.append(runway)
        return ChunkResult(new_remaining, {"windshear_all_runways": False, "windshear_runways": runways})


class TrendChunkDecoder(ChunkDecoder):
    """Decodes up to two trend groups (``BECMG``, ``TEMPO`` or ``NOSIG``).

    The forecast body is kept as raw text; ``MetarDecoder.decode_forecast``
    turns it into wind, visibility, weather and cloud fields.
    """

    name = "trend"
    _pattern = _RE_TREND

    def parse(self, remaining: str, with_cavok: bool = False) -> ChunkResult:
        fields: Dict[str, Any] = {}
        new_remaining = remaining
        for key in ("trend_forecast", "trend_forecast_additional"):
            new_remaining, found = self._consume(new_remaining)
            if not found:
                break
            fields[key] = self._build(found)
        return ChunkResult(new_remaining, fields)

    @staticmethod
    def _build(found: "re.Match[str]") -> TrendForecast:
        trend = TrendForecast(
            change_indicator=_TREND_TYPES[found.group(1)],
            forecast=found.group(3).strip(),
            raw_value=found.group(0).strip(),
        )
        for prefix, hhmm in _RE_TREND_TIME.findall(found.group(2)):
            if prefix == "AT":
                trend.at_time = hhmm
            elif prefix == "FM":
                trend.from_time = hhmm
            else:
                trend.until_time = hhmm
        return trend


DECODER_CHAIN: Tuple[ChunkDecoder, ...] = (
    ReportTypeChunkDecoder(),
    IcaoChunkDecoder(),
    DatetimeChunkDecoder(),
    ReportStatusChunkDecoder(),
    SurfaceWindChunkDecoder(),
    VisibilityChunkDecoder(),
    RunwayVisualRangeChunkDecoder(),
    PresentWeatherChunkDecoder(),
    CloudChunkDecoder(),
    TemperatureChunkDecoder(),
    PressureChunkDecoder(),
    RecentWeatherChunkDecoder(),
    WindShearChunkDecoder(),
    TrendChunkDecoder(),
)

FORECAST_CHAIN: Tuple[ChunkDecoder, ...] = (
    SurfaceWindChunkDecoder(),
    VisibilityChunkDecoder(),
    PresentWeatherChunkDecoder(),
    CloudChunkDecoder(),
)

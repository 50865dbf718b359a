from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .errors import MetarChunkDecoderError
from .value import Unit, Value


class MetarType(Enum):
    NULL = "NULL"
    METAR = "METAR"
    SPECI = "SPECI"
    METAR_COR = "METAR COR"
    SPECI_COR = "SPECI COR"


class Tendency(Enum):
    NONE = ""
    UPWARD = "U"
    DOWNWARD = "D"
    NO_CHANGE = "N"


class CloudAmount(Enum):
    NONE = "///"
    FEW = "FEW"
    SCATTERED = "SCT"
    BROKEN = "BKN"
    OVERCAST = "OVC"
    VERTICAL_VISIBILITY = "VV"
    NO_SIGNIFICANT_CLOUDS = "NSC"
    NO_CLOUDS_DETECTED = "NCD"
    CLEAR = "CLR"
    SKY_CLEAR = "SKC"


class CloudType(Enum):
    NONE = ""
    CUMULONIMBUS = "CB"
    TOWERING_CUMULUS = "TCU"
    CANNOT_MEASURE = "///"


class TrendForecastType(Enum):
    NONE = ""
    BECOMING = "BECMG"
    TEMPORARY = "TEMPO"
    NO_SIGNIFICANT_CHANGES = "NOSIG"


@dataclass
class SurfaceWind:
    mean_direction: Optional[Value] = None  # None when VRB
    variable_direction: bool = False
    mean_speed: Optional[Value] = None
    speed_variations: Optional[Value] = None  # gust
    direction_variations: Optional[Tuple[Value, Value]] = None
    speed_unit: Unit = Unit.KNOT
    raw_value: str = ""


@dataclass
class Visibility:
    cavok: bool = False
    prevailing_visibility: Optional[Value] = None
    minimum_visibility: Optional[Value] = None
    minimum_visibility_direction: Optional[str] = None
    ndv: bool = False
    raw_value: str = ""


@dataclass
class RunwayVisualRange:
    runway: str = ""
    visual_range: Optional[Value] = None
    visual_range_interval: Optional[Tuple[Value, Value]] = None
    variable: bool = False
    past_tendency: Tendency = Tendency.NONE
    raw_value: str = ""


@dataclass
class WeatherPhenomenon:
    intensity_proximity: str = ""
    characteristics: str = ""
    types: List[str] = field(default_factory=list)
    raw_value: str = ""

    @property
    def code(self) -> str:
        """Full METAR code, e.g. ``+SHRA`` or ``VCTS``."""
        return f"{self.intensity_proximity}{self.characteristics}{''.join(self.types)}"


@dataclass
class CloudLayer:
    amount: CloudAmount = CloudAmount.NONE
    base_height: Optional[Value] = None  # hundreds of feet
    type: CloudType = CloudType.NONE
    raw_value: str = ""


@dataclass
class Pressure:
    value: Optional[Value] = None  # None for Q//// and A////
    raw_value: str = ""


@dataclass
class TrendForecast:
    change_indicator: TrendForecastType = TrendForecastType.NONE
    at_time: Optional[str] = None
    from_time: Optional[str] = None
    until_time: Optional[str] = None
    forecast: str = ""
    raw_value: str = ""


_CEILING_AMOUNTS = (CloudAmount.BROKEN, CloudAmount.OVERCAST)


@dataclass
class DecodedMetar:
    """Result of decoding one METAR; decoding problems are kept in ``decoding_exceptions``."""

    raw_metar: str = ""
    decoding_exceptions: List[MetarChunkDecoderError] = field(default_factory=list)
    type: MetarType = MetarType.NULL
    icao: str = ""
    day: Optional[int] = None
    time: str = ""
    hour: Optional[int] = None
    minute: Optional[int] = None
    status: str = ""
    surface_wind: Optional[SurfaceWind] = None
    visibility: Optional[Visibility] = None
    cavok: bool = False
    runways_visual_range: List[RunwayVisualRange] = field(default_factory=list)
    present_weather: List[WeatherPhenomenon] = field(default_factory=list)
    clouds: List[CloudLayer] = field(default_factory=list)
    air_temperature: Optional[Value] = None
    dew_point_temperature: Optional[Value] = None
    pressure: Optional[Pressure] = None
    recent_weather: Optional[WeatherPhenomenon] = None
    windshear_all_runways: Optional[bool] = None
    windshear_runways: List[str] = field(default_factory=list)
    trend_forecast: Optional[TrendForecast] = None
    trend_forecast_additional: Optional[TrendForecast] = None

    @property
    def is_valid(self) -> bool:
        return not self.decoding_exceptions

    @property
    def ceiling(self) -> Optional[CloudLayer]:
        """Lowest broken or overcast layer with a base above the surface."""
        candidates = [
            layer
            for layer in self.clouds
            if layer.amount in _CEILING_AMOUNTS
            and layer.base_height is not None
            and layer.base_height.actual_value > 0
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda layer: layer.base_height.actual_value)

    def add_decoding_exception(self, error: MetarChunkDecoderError) -> None:
        self.decoding_exceptions.append(error)

"""METAR decoding: typed values, decoded entities, chunk decoders and the METAR repository."""

from .decoder import MetarDecoder, clean_metar
from .entities import (
    CloudAmount,
    CloudLayer,
    CloudType,
    DecodedMetar,
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
from .repository import MetarRepository, StaticMetarRepository
from .value import Unit, UnitConversionError, Value

__all__ = [
    "CloudAmount",
    "CloudLayer",
    "CloudType",
    "DecodedMetar",
    "Messages",
    "MetarChunkDecoderError",
    "MetarDecoder",
    "MetarRepository",
    "MetarType",
    "Pressure",
    "RunwayVisualRange",
    "StaticMetarRepository",
    "SurfaceWind",
    "Tendency",
    "TrendForecast",
    "TrendForecastType",
    "Unit",
    "UnitConversionError",
    "Value",
    "Visibility",
    "WeatherPhenomenon",
    "clean_metar",
]

"""
Trend forecast renderer.

The change indicator and FM/TL/AT times are spoken from the trend format
words; the forecast body is decoded separately and rendered through the
surface wind, visibility, present weather and cloud renderers so that it
follows the facility's own templates.
"""

from typing import List, Optional, Tuple

from src.weather.decoder import MetarDecoder
from src.weather.entities import DecodedMetar, TrendForecast, TrendForecastType

from ..config import StationConfig, TrendFormat
from ..speech import serial_format
from .base import Node
from .clouds import CloudsNode
from .surface_wind import SurfaceWindNode
from .visibility import VisibilityNode
from .weather import PresentWeatherNode

_FORECAST_NODES = (SurfaceWindNode(), VisibilityNode(), PresentWeatherNode(), CloudsNode())


def _indicator(trend: TrendForecast, fmt: TrendFormat) -> Tuple[str, str]:
    if trend.change_indicator == TrendForecastType.BECOMING:
        return fmt.becoming_text, fmt.becoming_voice
    if trend.change_indicator == TrendForecastType.TEMPORARY:
        return fmt.temporary_text, fmt.temporary_voice
    if trend.change_indicator == TrendForecastType.NO_SIGNIFICANT_CHANGES:
        return fmt.nosig_text, fmt.nosig_voice
    return "", ""


def _spoken_time(hhmm: str) -> Optional[str]:
    try:
        return serial_format(str(int(hhmm)))
    except ValueError:
        return None


class TrendNode(Node):
    name = "TREND"

    def __init__(self, decoder: Optional[MetarDecoder] = None):
        self._decoder = decoder or MetarDecoder()

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        fmt = station.format.trend
        if metar.trend_forecast is None:
            return fmt.not_available_text or "", fmt.not_available_voice or ""

        texts: List[str] = []
        voices: List[str] = []
        self._render_trend(metar.trend_forecast, station, texts, voices, first=True)
        if metar.trend_forecast_additional is not None:
            self._render_trend(metar.trend_forecast_additional, station, texts, voices, first=False)
        return " ".join(t for t in texts if t), " ".join(v for v in voices if v)

    def _render_trend(
        self,
        trend: TrendForecast,
        station: StationConfig,
        texts: List[str],
        voices: List[str],
        first: bool,
    ) -> None:
        text, voice = _indicator(trend, station.format.trend)
        if text or voice:
            texts.append(text)
            voices.append(f"TREND, {voice}" if first else voice)

        for prefix, spoken, hhmm in (
            ("FM", "FROM", trend.from_time),
            ("TL", "UNTIL", trend.until_time),
            ("AT", "AT", trend.at_time),
        ):
            if hhmm is None:
                continue
            words = _spoken_time(hhmm)
            if words:
                voices.append(f"{spoken} {words}")
            texts.append(prefix + hhmm)

        if not trend.forecast:
            return
        forecast = self._decoder.decode_forecast(trend.forecast)
        for node in _FORECAST_NODES:
            rendered = node.render(forecast, station)
            if rendered.text or rendered.voice:
                texts.append(rendered.text)
                voices.append(rendered.voice)

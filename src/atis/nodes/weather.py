"""Present and recent weather renderers.

Spoken phrases come from the facility descriptor table, keyed by the full
METAR code (``-SHRA``). Codes missing from the table are composed from their
parts (intensity, characteristics, precipitation types, vicinity); a part
with no word at all raises ``UnmappedWeatherCodeError``.
"""

from typing import Dict, List, Tuple

from src.weather.entities import DecodedMetar, WeatherPhenomenon

from ..config import PresentWeatherFormat, StationConfig
from .base import Node, UnmappedWeatherCodeError, fill

PART_WORDS: Dict[str, str] = {
    # characteristics
    "MI": "shallow",
    "BC": "patches",
    "PR": "partial",
    "DR": "low drifting",
    "BL": "blowing",
    "SH": "showers",
    "TS": "thunderstorm",
    "FZ": "freezing",
    # precipitation
    "DZ": "drizzle",
    "RA": "rain",
    "SN": "snow",
    "SG": "snow grains",
    "PL": "ice pellets",
    "GR": "hail",
    "GS": "small hail",
    "UP": "unknown precipitation",
    "IC": "ice crystals",
    # obscuration
    "BR": "mist",
    "FG": "fog",
    "FU": "smoke",
    "VA": "volcanic ash",
    "DU": "widespread dust",
    "SA": "sand",
    "HZ": "haze",
    "PY": "spray",
    # other
    "PO": "dust whirls",
    "SQ": "squalls",
    "FC": "funnel cloud",
    "SS": "sandstorm",
    "DS": "duststorm",
}


def _part(code: str, descriptors: Dict[str, str]) -> str:
    word = descriptors.get(code) or PART_WORDS.get(code)
    if not word:
        raise UnmappedWeatherCodeError(code)
    return word


def spoken_weather(weather: WeatherPhenomenon, fmt: PresentWeatherFormat) -> str:
    code = weather.code
    if code in fmt.descriptors:
        return fmt.descriptors[code]

    words: List[str] = []
    if weather.intensity_proximity == "-":
        words.append(fmt.light_intensity.voice or "")
    elif weather.intensity_proximity == "+":
        words.append(fmt.heavy_intensity.voice or "")
    else:
        words.append(fmt.moderate_intensity.voice or "")

    if weather.characteristics:
        words.append(_part(weather.characteristics, fmt.descriptors))
    words.extend(_part(t, fmt.descriptors) for t in weather.types)

    if weather.intensity_proximity == "VC":
        words.append(fmt.vicinity.voice or "")

    if not any(words):
        raise UnmappedWeatherCodeError(code)
    return " ".join(w for w in words if w)


class PresentWeatherNode(Node):
    name = "PRESENT_WX"

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        if not metar.present_weather:
            return "", ""

        fmt = station.format.present_weather
        texts = [w.raw_value or w.code for w in metar.present_weather]
        voices = [spoken_weather(w, fmt) for w in metar.present_weather]

        text = fill(fmt.template.text, {"weather": " ".join(texts).strip()})
        voice = fill(fmt.template.voice, {"weather": ", ".join(voices).strip(", ")})
        return text, voice


class RecentWeatherNode(Node):
    name = "RECENT_WX"

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        weather = metar.recent_weather
        if weather is None:
            return "", ""

        fmt = station.format.recent_weather
        # RE prefix is not part of the code
        text = weather.characteristics + "".join(weather.types)
        voice = spoken_weather(weather, station.format.present_weather)
        if not voice:
            return "", ""
        return fill(fmt.template.text, {"weather": text}), fill(fmt.template.voice, {"weather": voice})

from typing import Dict, List, Optional, Tuple

from src.weather.entities import DecodedMetar, SurfaceWind
from src.weather.value import Unit, Value, to_kts, to_mps

from ..config import StationConfig, Template
from ..speech import apply_mag_var, serial_format
from .base import Node, fill

_SPOKEN_UNITS = {
    Unit.KILOMETER_PER_HOUR: ("kilometer per hour", "kilometers per hour"),
    Unit.METER_PER_SECOND: ("meter per second", "meters per second"),
    Unit.KNOT: ("knot", "knots"),
}

_TEXT_UNITS = {
    Unit.KILOMETER_PER_HOUR: "KPH",
    Unit.METER_PER_SECOND: "MPS",
    Unit.KNOT: "KT",
}


def _number(value: Optional[float], width: int) -> str:
    if value is None:
        return ""
    return f"{int(value):0{width}d}" if width else str(int(value))


def _spoken(value: Optional[float], leading_zero: bool) -> str:
    if value is None:
        return ""
    return serial_format(_number(value, 2 if leading_zero else 0)) or ""


class SurfaceWindNode(Node):
    """Surface wind.

    The primary template is picked from gust/variable/calm; a variable
    direction without gust and a direction-variation interval each add their
    own fragment after it.
    """

    name = "WIND"

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        wind = metar.surface_wind
        if wind is None:
            return "", ""

        fmt = station.format.surface_wind
        templates: List[Template] = []

        if wind.speed_variations is not None:
            templates.append(fmt.variable_gust if wind.variable_direction else fmt.standard_gust)
        elif wind.mean_direction is not None:
            speed = wind.mean_speed.actual_value if wind.mean_speed is not None else None
            calm = (wind.mean_direction.actual_value == 0 and speed == 0) or (
                speed is not None and speed <= fmt.calm_wind_speed
            )
            templates.append(fmt.calm if calm else fmt.standard)

        if wind.speed_variations is None and wind.mean_speed is not None and wind.variable_direction:
            templates.append(fmt.variable)

        if wind.direction_variations is not None:
            templates.append(fmt.variable_direction)

        text_values = self._text_values(wind, station)
        voice_values = self._voice_values(wind, station)
        text = " ".join(fill(t.text, text_values) for t in templates).rstrip(" ")
        voice = ", ".join(fill(t.voice, voice_values) for t in templates).rstrip(", ")
        return text, voice

    @staticmethod
    def _directions(wind: SurfaceWind, station: StationConfig) -> Tuple[int, Optional[int], Optional[int]]:
        magvar = station.format.surface_wind.magnetic_variation
        mean = apply_mag_var(
            wind.mean_direction.actual_value if wind.mean_direction is not None else 0,
            magvar.enabled,
            magvar.magnetic_degrees,
        )
        vmin = vmax = None
        if wind.direction_variations is not None:
            vmin = apply_mag_var(wind.direction_variations[0].actual_value, magvar.enabled, magvar.magnetic_degrees)
            vmax = apply_mag_var(wind.direction_variations[1].actual_value, magvar.enabled, magvar.magnetic_degrees)
        return mean, vmin, vmax

    @staticmethod
    def _speeds(wind: SurfaceWind) -> Dict[str, Optional[float]]:
        def raw(value: Optional[Value]) -> Optional[float]:
            return value.actual_value if value is not None else None

        return {
            "wind_spd": raw(wind.mean_speed),
            "wind_spd|kt": to_kts(wind.mean_speed),
            "wind_spd|mps": to_mps(wind.mean_speed),
            "wind_gust": raw(wind.speed_variations),
            "wind_gust|kt": to_kts(wind.speed_variations),
            "wind_gust|mps": to_mps(wind.speed_variations),
        }

    def _text_values(self, wind: SurfaceWind, station: StationConfig) -> Dict[str, str]:
        mean, vmin, vmax = self._directions(wind, station)
        values = {"wind_dir": f"{mean:03d}"}
        values.update({k: _number(v, 2) for k, v in self._speeds(wind).items()})
        values["wind_vmin"] = f"{vmin:03d}" if vmin is not None else ""
        values["wind_vmax"] = f"{vmax:03d}" if vmax is not None else ""
        values["wind_unit"] = _TEXT_UNITS.get(wind.speed_unit, "")
        values["wind"] = wind.raw_value or ""
        return values

    def _voice_values(self, wind: SurfaceWind, station: StationConfig) -> Dict[str, str]:
        leading_zero = station.format.surface_wind.speak_leading_zero
        mean, vmin, vmax = self._directions(wind, station)
        values = {"wind_dir": serial_format(f"{mean:03d}")}
        values.update({k: _spoken(v, leading_zero) for k, v in self._speeds(wind).items()})
        values["wind_vmin"] = serial_format(f"{vmin:03d}") if vmin is not None else ""
        values["wind_vmax"] = serial_format(f"{vmax:03d}") if vmax is not None else ""
        values["wind_unit"] = self._spoken_unit(wind.mean_speed)
        values["wind"] = ""
        return values

    @staticmethod
    def _spoken_unit(speed: Optional[Value]) -> str:
        if speed is None or speed.unit not in _SPOKEN_UNITS:
            return ""
        singular, plural = _SPOKEN_UNITS[speed.unit]
        return plural if speed.actual_value > 1 else singular

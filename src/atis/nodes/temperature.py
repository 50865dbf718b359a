from typing import Optional, Tuple

from src.weather.entities import DecodedMetar
from src.weather.value import Value

from ..config import StationConfig, Template
from ..speech import serial_format
from .base import Node, fill


def temperature_text(value: Value) -> str:
    """``M`` prefix for negatives, two digits: -3 -> "M03"."""
    degrees = int(value.actual_value)
    return ("M" if degrees < 0 else "") + f"{abs(degrees):02d}"


def temperature_voice(value: Value, use_plus_prefix: bool, speak_leading_zero: bool) -> str:
    degrees = int(value.actual_value)
    digits = f"{abs(degrees):02d}" if speak_leading_zero else str(abs(degrees))
    if degrees < 0:
        sign = "minus "
    else:
        sign = "plus " if use_plus_prefix else ""
    return sign + serial_format(digits)


class _TemperatureBase(Node):
    placeholder = ""
    missing_voice = ""

    def _format(self, station: StationConfig):
        raise NotImplementedError

    def _value(self, metar: DecodedMetar) -> Optional[Value]:
        raise NotImplementedError

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        value = self._value(metar)
        if value is None:
            return "", self.missing_voice

        fmt = self._format(station)
        template: Template = fmt.template
        text = fill(template.text, {self.placeholder: temperature_text(value)})
        voice = fill(
            template.voice,
            {self.placeholder: temperature_voice(value, fmt.use_plus_prefix, fmt.speak_leading_zero)},
        )
        return text, voice


class TemperatureNode(_TemperatureBase):
    name = "TEMP"
    placeholder = "temp"
    missing_voice = "Temperature missing"

    def _format(self, station: StationConfig):
        return station.format.temperature

    def _value(self, metar: DecodedMetar) -> Optional[Value]:
        return metar.air_temperature


class DewpointNode(_TemperatureBase):
    name = "DEW"
    placeholder = "dewpoint"
    missing_voice = "Dewpoint missing"

    def _format(self, station: StationConfig):
        return station.format.dewpoint

    def _value(self, metar: DecodedMetar) -> Optional[Value]:
        return metar.dew_point_temperature

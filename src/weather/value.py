"""Numeric quantities carried by a decoded METAR, tagged with their unit."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class Unit(Enum):
    """Measurement unit of a decoded value."""
    NONE = "N/A"
    DEGREE_CELSIUS = "deg C"
    DEGREE = "deg"
    KNOT = "kt"
    METER_PER_SECOND = "m/s"
    KILOMETER_PER_HOUR = "km/h"
    METER = "m"
    FEET = "ft"
    STATUTE_MILE = "SM"
    HECTOPASCAL = "hPa"
    MERCURY_INCH = "inHg"


class UnitConversionError(ValueError):
    """Raised when a value is converted to a unit outside its family."""


# Factor to the base unit of each family (m/s, m, hPa).
_SPEED_FACTORS: Dict[Unit, float] = {
    Unit.METER_PER_SECOND: 1.0,
    Unit.KILOMETER_PER_HOUR: 0.277778,
    Unit.KNOT: 0.51444,
}

_LENGTH_FACTORS: Dict[Unit, float] = {
    Unit.METER: 1.0,
    Unit.FEET: 0.3048,
    Unit.STATUTE_MILE: 1609.34,
}

_PRESSURE_FACTORS: Dict[Unit, float] = {
    Unit.HECTOPASCAL: 1.0,
    Unit.MERCURY_INCH: 33.86389,
}

_FAMILIES = (_SPEED_FACTORS, _LENGTH_FACTORS, _PRESSURE_FACTORS)

_RE_NON_DIGIT = re.compile(r"[^0-9-]")


def _family_of(unit: Unit) -> Optional[Dict[Unit, float]]:
    for family in _FAMILIES:
        if unit in family:
            return family
    return None


@dataclass(frozen=True)
class Value:
    actual_value: float
    unit: Unit = Unit.NONE

    def get_converted_value(self, unit: Unit) -> float:
        """Convert to ``unit``, rounded to 3 decimal places.

        Raises UnitConversionError when the two units do not share a family.
        """
        if unit == self.unit:
            return round(float(self.actual_value), 3)

        family = _family_of(self.unit)
        if family is None or unit not in family:
            raise UnitConversionError(f"Cannot convert {self.unit.value} to {unit.value}")

        base = float(self.actual_value) * family[self.unit]
        return round(base / family[unit], 3)

    @staticmethod
    def to_int(text: Optional[str]) -> Optional[int]:
        """Parse a METAR integer token (``M05`` is -5, ``P49`` is 49)."""
        if text is None:
            return None
        cleaned = text.replace("P", "").replace("M", "-")
        cleaned = _RE_NON_DIGIT.sub("", cleaned)
        if not cleaned or cleaned == "-":
            return None
        try:
            return int(cleaned)
        except ValueError:
            return None

    @staticmethod
    def new_int_value(text: Optional[str], unit: Unit) -> Optional["Value"]:
        number = Value.to_int(text)
        if number is None:
            return None
        return Value(float(number), unit)

    def __str__(self) -> str:
        if float(self.actual_value).is_integer():
            return str(int(self.actual_value))
        return f"{self.actual_value:g}"


def to_kts(value: Optional[Value]) -> Optional[int]:
    if value is None:
        return None
    if value.unit == Unit.KILOMETER_PER_HOUR:
        return int(value.actual_value * 0.539957)
    if value.unit == Unit.METER_PER_SECOND:
        return int(value.actual_value * 1.94384)
    return int(value.actual_value)


def to_mps(value: Optional[Value]) -> Optional[int]:
    if value is None:
        return None
    if value.unit == Unit.KNOT:
        return int(value.actual_value * 0.514444)
    if value.unit == Unit.KILOMETER_PER_HOUR:
        return int(value.actual_value * 0.277778)
    return int(value.actual_value)


def to_kph(value: Optional[Value]) -> Optional[int]:
    if value is None:
        return None
    if value.unit == Unit.KNOT:
        return int(value.actual_value * 1.852)
    if value.unit == Unit.METER_PER_SECOND:
        return int(value.actual_value * 3.6)
    return int(value.actual_value)

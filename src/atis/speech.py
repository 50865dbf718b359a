"""Aviation English pronunciation helpers (numbers, letters, runways, headings)."""

from __future__ import annotations

import re
from typing import Optional, Union

_UNITS = (
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine",
    "ten", "eleven", "twelve", "thirteen", "fourteen", "fifteen", "sixteen", "seventeen", "eighteen", "nineteen",
)

_TENS = ("zero", "ten", "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety")

# Radiotelephony digits: "niner", and 10-19 spoken digit by digit.
_RT_UNITS = (
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "niner",
    "one zero", "one one", "one two", "one three", "one four", "one five", "one six", "one seven", "one eight",
    "one niner",
)

_ICAO_PHONETIC = {
    "A": "Alpha",
    "B": "Bravo",
    "C": "Charlie",
    "D": "Delta",
    "E": "Echo",
    "F": "Foxtrot",
    "G": "Golf",
    "H": "Hotel",
    "I": "India",
    "J": "Juliet",
    "K": "Kilo",
    "L": "Lima",
    "M": "Mike",
    "N": "November",
    "O": "Oscar",
    "P": "Papa",
    "Q": "Quebec",
    "R": "Romeo",
    "S": "Sierra",
    "T": "Tango",
    "U": "Uniform",
    "V": "Victor",
    "W": "Whiskey",
    "X": "X-Ray",
    "Y": "Yankee",
    "Z": "Zulu",
}

_RUNWAY_SIDES = {"L": "left", "R": "right", "C": "center"}

_RE_SERIAL_NUMBER = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")


def group_form(value: int) -> str:
    """Natural grouping: 1250 -> "one thousand two hundred and fifty"."""
    number = int(value)
    if number == 0:
        return "zero"
    if number < 0:
        return "minus " + group_form(abs(number))

    words = ""
    for size, label in ((1_000_000, "million"), (1000, "thousand"), (100, "hundred")):
        if number // size > 0:
            words += f"{group_form(number // size)} {label} "
            number %= size

    if number > 0:
        if words:
            words += "and "
        if number < 20:
            words += _UNITS[number]
        else:
            words += _TENS[number // 10]
            if number % 10 > 0:
                words += "-" + _UNITS[number % 10]
    return words.strip()


def word_string(value: int) -> str:
    """Radiotelephony form: 25 -> "two five", 3000 -> "three thousand", 9 -> "niner"."""
    number = int(value)
    if number == 0:
        return "zero"
    if number < 0:
        return "minus " + word_string(abs(number))

    words = ""
    for size, label in ((1_000_000, "million"), (1000, "thousand"), (100, "hundred")):
        if number // size > 0:
            words += f"{word_string(number // size)} {label} "
            number %= size

    if number > 0:
        if number < 20:
            words += _RT_UNITS[number]
        else:
            words += f"{_RT_UNITS[number // 10]} {_RT_UNITS[number % 10]}"
    return words.rstrip(" ")


def serial_format(number: Optional[str], use_decimal_terminology: bool = False) -> Optional[str]:
    """Digit by digit: "118.05" -> "one one eight point zero five".

    Anything that is not a plain signed decimal is returned unchanged.
    """
    if not number or not _RE_SERIAL_NUMBER.match(number):
        return number

    negative = number.startswith("-")
    parts = []
    for part in (number[1:] if negative else number).split("."):
        parts.append(" ".join(word_string(int(ch)) for ch in part))

    result = (" decimal " if use_decimal_terminology else " point ").join(parts)
    return "minus " + result if negative else result


def serial_number(value: Union[int, float], leading_zero: bool = False) -> str:
    """Digit by digit for integers: 7 -> "zero seven" when ``leading_zero``."""
    number = int(value)
    words = []
    if number < 10 and leading_zero:
        words.append("zero")
    words.extend(word_string(int(ch)) for ch in str(abs(number)))
    return ("minus " if number < 0 else "") + " ".join(words)


def phonetic(letter: str) -> str:
    return _ICAO_PHONETIC.get((letter or "").upper(), "")


def alphanumeric_word_group(value: str) -> str:
    """Letters phonetically, then the digits in group form: "A12" -> "Alpha twelve"."""
    letters = " ".join(_ICAO_PHONETIC[ch] for ch in value.upper() if ch in _ICAO_PHONETIC)
    digits = "".join(ch for ch in value if ch.isdigit())
    if not digits:
        return letters
    return f"{letters} {group_form(int(digits))}"


def runway_words(
    number: int,
    designator: str = "",
    *,
    prefix: bool = False,
    plural: bool = False,
    leading_zero: bool = False,
) -> str:
    """Upper-case spoken runway, e.g. " RUNWAY TWO SEVEN LEFT"."""
    words = ""
    if leading_zero and number < 10:
        words += "zero "
    if 1 <= number <= 36:
        words += word_string(number)

    side = _RUNWAY_SIDES.get(designator, "")
    if prefix:
        result = f" {'runways' if plural else 'runway'} {words} {side}"
    else:
        result = f" {words} {side}"
    return result.upper()


def apply_mag_var(degrees: int, enabled: bool, mag_var: Optional[int] = None) -> int:
    """Apply a magnetic variation to a true heading, normalised to (0, 360]."""
    degrees = int(degrees)
    if not enabled or mag_var is None or degrees == 0:
        return degrees

    degrees += mag_var
    if degrees <= 0:
        degrees += 360
    elif degrees > 360:
        degrees -= 360
    return degrees

from __future__ import annotations

from src.atis.speech import (
    alphanumeric_word_group,
    apply_mag_var,
    group_form,
    phonetic,
    runway_words,
    serial_format,
    serial_number,
    word_string,
)


def test_group_form() -> None:
    assert group_form(0) == "zero"
    assert group_form(21) == "twenty-one"
    assert group_form(600) == "six hundred"
    assert group_form(1250) == "one thousand two hundred and fifty"
    assert group_form(-3) == "minus three"


def test_word_string_uses_radiotelephony_digits() -> None:
    assert word_string(9) == "niner"
    assert word_string(12) == "one two"
    assert word_string(25) == "two five"
    assert word_string(3000) == "three thousand"
    assert word_string(25000) == "two five thousand"


def test_serial_format() -> None:
    assert serial_format("118.05") == "one one eight point zero five"
    assert serial_format("118.05", use_decimal_terminology=True) == "one one eight decimal zero five"
    assert serial_format("09") == "zero niner"
    assert serial_format("-5") == "minus five"


def test_serial_format_leaves_non_numbers_alone() -> None:
    assert serial_format("A1") == "A1"
    assert serial_format("") == ""
    assert serial_format(None) is None


def test_serial_number() -> None:
    assert serial_number(27) == "two seven"
    assert serial_number(7, leading_zero=True) == "zero seven"
    assert serial_number(7) == "seven"


def test_phonetic() -> None:
    assert phonetic("a") == "Alpha"
    assert phonetic("X") == "X-Ray"
    assert phonetic("") == ""


def test_alphanumeric_word_group() -> None:
    assert alphanumeric_word_group("A12") == "Alpha twelve"
    assert alphanumeric_word_group("B") == "Bravo"


def test_runway_words() -> None:
    assert runway_words(27, "L", prefix=True) == " RUNWAY TWO SEVEN LEFT"
    assert runway_words(4, "R", prefix=True, plural=True, leading_zero=True) == " RUNWAYS ZERO FOUR RIGHT"
    assert runway_words(31, "C") == " THREE ONE CENTER"


def test_apply_mag_var_wraps_into_range() -> None:
    assert apply_mag_var(250, True, -13) == 237
    assert apply_mag_var(5, True, -10) == 355
    assert apply_mag_var(355, True, 10) == 5
    assert apply_mag_var(250, False, -13) == 250
    assert apply_mag_var(0, True, 10) == 0

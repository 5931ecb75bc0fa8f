from __future__ import annotations

import re
from functools import partial
from typing import Callable

REQUIRED_FIELDS = ("ecl", "pid", "eyr", "hcl", "byr", "iyr", "hgt")
IGNORED_FIELDS = {"cid"}

YEAR_RANGES = {
    "byr": (1920, 2002),
    "iyr": (2010, 2020),
    "eyr": (2020, 2030),
}
HEIGHT_RANGES = {
    "cm": (150, 193),
    "in": (59, 76),
}
EYE_COLORS = {"amb", "blu", "brn", "gry", "grn", "hzl", "oth"}

# Up to 19 significant digits, the width of a signed 64-bit integer.
INTEGER_PATTERN = re.compile(r"(?P<sign>[+-]?)0*(?P<digits>[0-9]{1,19})")
HAIR_COLOR_PATTERN = re.compile(r"#[0-9a-f]{6}")
PASSPORT_ID_PATTERN = re.compile(r"[0-9]{9}")

REASON_MISSING_SEPARATOR = "missing_separator"
REASON_IGNORED_FIELD = "ignored_field"
REASON_UNKNOWN_FIELD = "unknown_field"
REASON_NOT_AN_INTEGER = "not_an_integer"
REASON_OUT_OF_RANGE = "value_out_of_range"
REASON_PATTERN_MISMATCH = "pattern_mismatch"
REASON_NOT_ALLOWED = "not_an_allowed_value"
REASON_INVALID_HEIGHT_UNIT = "invalid_height_unit"


def parse_int(value: str) -> int | None:
    # int() alone would also accept whitespace, underscores and non-ASCII digits.
    match = INTEGER_PATTERN.fullmatch(value)
    if not match:
        return None
    return int(match.group("sign") + match.group("digits"))


def _range_reason(value: str, bounds: tuple[int, int]) -> str | None:
    number = parse_int(value)
    if number is None:
        return REASON_NOT_AN_INTEGER
    low, high = bounds
    if not low <= number <= high:
        return REASON_OUT_OF_RANGE
    return None


def _pattern_reason(value: str, pattern: re.Pattern[str]) -> str | None:
    if not pattern.fullmatch(value):
        return REASON_PATTERN_MISMATCH
    return None


def _eye_color_reason(value: str) -> str | None:
    if value not in EYE_COLORS:
        return REASON_NOT_ALLOWED
    return None


def height_reason(value: str) -> str | None:
    if len(value) < 2:
        return REASON_INVALID_HEIGHT_UNIT
    number_part, unit = value[:-2], value[-2:]
    bounds = HEIGHT_RANGES.get(unit)
    if bounds is None:
        return REASON_INVALID_HEIGHT_UNIT
    return _range_reason(number_part, bounds)


FIELD_CHECKS: dict[str, Callable[[str], str | None]] = {
    "byr": partial(_range_reason, bounds=YEAR_RANGES["byr"]),
    "iyr": partial(_range_reason, bounds=YEAR_RANGES["iyr"]),
    "eyr": partial(_range_reason, bounds=YEAR_RANGES["eyr"]),
    "hcl": partial(_pattern_reason, pattern=HAIR_COLOR_PATTERN),
    "pid": partial(_pattern_reason, pattern=PASSPORT_ID_PATTERN),
    "ecl": _eye_color_reason,
    "hgt": height_reason,
}


def field_reason(key: str, value: str | None) -> str | None:
    """Return why ``key:value`` does not count toward a valid record, or None if it does.

    ``value`` is None when the token had no colon.
    """
    if value is None:
        return REASON_MISSING_SEPARATOR
    if key in IGNORED_FIELDS:
        return REASON_IGNORED_FIELD
    check = FIELD_CHECKS.get(key)
    if check is None:
        return REASON_UNKNOWN_FIELD
    return check(value)


def field_is_valid(key: str, value: str | None) -> bool:
    return field_reason(key, value) is None


def valid_height(value: str) -> bool:
    return height_reason(value) is None

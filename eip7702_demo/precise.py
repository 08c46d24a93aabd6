"""
Fixed-point helpers for token amounts.

Token contracts store amounts as integers scaled by ``10 ** decimals``.
These helpers move between the human string form ("0.01") and that
scaled integer form.
"""

import re

DIGITS = re.compile(r"[0-9]+")


class ParseError(ValueError):
    """Raised when an amount string holds anything but digits and one '.'"""


def to_int_by_precise(value: str, precise: int) -> int:
    """
    Scale a decimal string up to an integer amount.

    A value without a fractional part is treated as having the fraction
    "0", so to_int_by_precise("5", 2) == 500. Fraction digits beyond
    ``precise`` are kept rather than truncated:
    to_int_by_precise("0.123", 2) == 123.
    """
    value = value.strip()
    whole, sep, fraction = value.partition(".")
    if not sep:
        fraction = "0"

    effective = max(precise - len(fraction), 0)

    digits = whole + fraction
    if not DIGITS.fullmatch(digits):
        raise ParseError(f"invalid amount: {value!r}")

    scaled = int(digits)
    if effective > 0:
        scaled *= 10 ** effective
    return scaled


def to_string_by_precise(value: int | None, precise: int) -> str:
    """Whole-token count of a scaled amount; the fraction is dropped."""
    if value is None:
        return "0"
    return str(value // 10 ** max(precise, 0))


def format_units(value: int | None, precise: int) -> str:
    """
    Render a scaled amount as a decimal string, e.g. 1500000000000000000
    with 18 decimals becomes "1.5".
    """
    if value is None:
        return "0"
    precise = max(precise, 0)
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10 ** precise)
    if precise == 0:
        return f"{sign}{whole}"
    fraction_str = str(fraction).rjust(precise, "0").rstrip("0")
    if not fraction_str:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{fraction_str}"

"""
Value coercion helpers shared by the cleaners.

Every helper returns None instead of raising when a value cannot be
converted, so callers decide whether that is a fill, a null-out or a
constraint failure.
"""

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from src.core.models import is_missing

_INT_PATTERN = re.compile(r"^[+-]?\d+$")

ISO_DATE_FORMAT = "%Y-%m-%d"

# strptime directives mapped to the shape of the text they accept
_DATE_DIRECTIVES = {
    "%d": r"\d{1,2}",
    "%m": r"\d{1,2}",
    "%Y": r"\d{4}",
    "%y": r"\d{2}",
    "%H": r"\d{1,2}",
    "%M": r"\d{1,2}",
    "%S": r"\d{1,2}",
    "%b": r"[A-Za-z]{3}",
    "%B": r"[A-Za-z]+",
}


def quantize(value: Decimal, precision: int = 2) -> Decimal:
    """Round half-up to a fixed number of decimal places."""
    return value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


def to_decimal(value: Any, precision: int | None = None) -> Decimal | None:
    """
    Convert a value to Decimal.

    Args:
        value: int, float, Decimal or numeric text
        precision: Optional decimal places to round to

    Returns:
        Decimal, or None when the value is missing or not numeric
    """
    if is_missing(value) or isinstance(value, bool):
        return None

    try:
        if isinstance(value, Decimal):
            number = value
        elif isinstance(value, int):
            number = Decimal(value)
        elif isinstance(value, float):
            number = Decimal(repr(value))
        elif isinstance(value, str):
            number = Decimal(value.strip().replace(",", ""))
        else:
            return None

        if not number.is_finite():
            return None
        if precision is not None:
            number = quantize(number, precision)
        return number
    except InvalidOperation:
        return None


def to_int(value: Any) -> int | None:
    """Convert a value to int; integral decimals such as "3.0" are accepted."""
    if is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_PATTERN.match(value.strip()):
        return int(value.strip())

    number = to_decimal(value)
    if number is None or number != number.to_integral_value():
        return None
    return int(number)


def to_number(value: Any) -> int | Decimal | None:
    """Convert to int when the value is integral text or int, else to Decimal."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and _INT_PATTERN.match(value.strip()):
        return int(value.strip())
    return to_decimal(value)


def date_format_pattern(date_format: str) -> re.Pattern:
    """Build a regex matching the shape of text produced by a strptime format."""
    parts = []
    idx = 0
    while idx < len(date_format):
        directive = date_format[idx:idx + 2]
        if directive in _DATE_DIRECTIVES:
            parts.append(_DATE_DIRECTIVES[directive])
            idx += 2
        elif date_format[idx] == "%":
            parts.append(".+?")
            idx += 2
        else:
            parts.append(re.escape(date_format[idx]))
            idx += 1
    return re.compile("^" + "".join(parts) + "$")


def parse_date_text(text: str, date_format: str = "%d-%m-%Y") -> date | None:
    """
    Parse date text written in the source format or in ISO form.

    ISO ("2024-02-14") is how cleaned dates are serialized by the file
    writers, so output read back as text parses to the same date.
    """
    for fmt in dict.fromkeys((date_format, ISO_DATE_FORMAT)):
        try:
            return datetime.strptime(text.strip(), fmt).date()
        except ValueError:
            continue
    return None


def to_date(value: Any, date_format: str = "%d-%m-%Y") -> date | None:
    """Parse a value into a calendar date using a fixed format (or ISO)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if is_missing(value) or not isinstance(value, str):
        return None
    return parse_date_text(value, date_format)

"""
Anomaly correctors - repair or null out present-but-invalid values.
"""

import re
from datetime import date, datetime
from re import Pattern
from typing import Any

from src.core.models import is_missing

from .base_cleaner import BaseCleaner
from .coercion import ISO_DATE_FORMAT, date_format_pattern, parse_date_text, to_number


class SignCorrector(BaseCleaner):
    """
    Replaces negative values of a field expected to be non-negative
    with their absolute value.
    """

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        changed = set()
        for position, record in enumerate(records):
            number = to_number(record.get(self.field_name))
            if number is None or number >= 0:
                continue
            record[self.field_name] = abs(number)
            changed.add(position)

        return changed, {"sign_corrected": len(changed)}

    @property
    def rule_type(self) -> str:
        return "non_negative"


class PatternCorrector(BaseCleaner):
    """
    Sets values that do not match a structural pattern to None.

    Parameters:
    - pattern: Regular expression pattern (string or compiled Pattern)
    - flags: Optional regex flags (e.g., re.IGNORECASE)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        pattern = self.parameters.get("pattern")
        if not pattern:
            raise ValueError("PatternCorrector requires 'pattern' parameter")

        flags = self.parameters.get("flags", 0)

        try:
            if isinstance(pattern, str):
                self.pattern: Pattern = re.compile(pattern, flags)
            elif isinstance(pattern, Pattern):
                self.pattern = pattern
            else:
                raise ValueError(f"Pattern must be string or compiled Pattern, got {type(pattern)}")
        except re.error as e:
            raise ValueError(f"Invalid regex pattern: {e}")

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        changed = set()
        for position, record in enumerate(records):
            value = record.get(self.field_name)
            if value is None:
                continue

            value_str = value if isinstance(value, str) else str(value)
            if is_missing(value_str) or not self.pattern.match(value_str.strip()):
                record[self.field_name] = None
                changed.add(position)

        return changed, {"nulled": len(changed), "pattern": self.pattern.pattern}

    @property
    def rule_type(self) -> str:
        return "pattern"


class CalendarDateCorrector(BaseCleaner):
    """
    Validates and parses textual dates using a fixed source format.

    Text shaped like the format but naming a day that does not exist
    (e.g. "30-02-2024") is set to None before parsing, as is any text the
    format cannot parse. Everything else becomes a datetime.date.
    ISO text ("2024-02-14"), the form the file writers produce for cleaned
    dates, is accepted as well.
    Values that are already dates are left as they are.

    Parameters:
    - date_format: strptime format of the source text (default "%d-%m-%Y")
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.date_format = self.parameters.get("date_format", "%d-%m-%Y")
        self._shapes = [date_format_pattern(fmt) for fmt in dict.fromkeys((self.date_format, ISO_DATE_FORMAT))]

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        changed = set()
        counts = {"parsed": 0, "invalid_calendar": 0, "unparseable": 0, "blank": 0}

        for position, record in enumerate(records):
            value = record.get(self.field_name)
            if value is None or (isinstance(value, date) and not isinstance(value, datetime)):
                continue

            if isinstance(value, datetime):
                record[self.field_name] = value.date()
                counts["parsed"] += 1
            elif isinstance(value, str) and not is_missing(value):
                text = value.strip()
                parsed = parse_date_text(text, self.date_format)
                record[self.field_name] = parsed
                if parsed is not None:
                    counts["parsed"] += 1
                elif any(shape.match(text) for shape in self._shapes):
                    counts["invalid_calendar"] += 1
                else:
                    counts["unparseable"] += 1
            elif is_missing(value):
                record[self.field_name] = None
                counts["blank"] += 1
            else:
                record[self.field_name] = None
                counts["unparseable"] += 1

            changed.add(position)

        return changed, counts

    @property
    def rule_type(self) -> str:
        return "calendar_date"

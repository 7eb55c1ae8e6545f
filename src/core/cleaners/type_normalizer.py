"""
Type normalization - provisional relaxation, final typed coercion and
constraint enforcement.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.core.models import SALES_COLUMNS, SalesRecord, is_missing

from .base_cleaner import BaseCleaner, ConstraintViolationError
from .coercion import to_date, to_decimal, to_int


class TypeRelaxer(BaseCleaner):
    """
    Provisional relaxation of a field before cleaning.

    Rows hold plain Python values, so there is no column type to widen;
    blank strings are turned into explicit None so every later stage sees
    a single representation of an absent value.
    """

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        changed = set()
        for position, record in enumerate(records):
            value = record.get(self.field_name)
            if isinstance(value, str) and is_missing(value):
                record[self.field_name] = None
                changed.add(position)

        return changed, {"blank_to_null": len(changed)}

    @property
    def rule_type(self) -> str:
        return "relax"


class TypeNormalizer(BaseCleaner):
    """
    Coerces a field into its final type.

    Supported types:
    - "int" / "integer"
    - "decimal" (rounded to `precision` places, default 2)
    - "date" (text parsed with `date_format`)
    - "str" / "string" (stripped; blank becomes None)

    Values that cannot be coerced become None and are counted as
    coercion failures.
    """

    TYPE_MAPPING = {
        "integer": int,
        "int": int,
        "decimal": Decimal,
        "date": date,
        "string": str,
        "str": str,
    }

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        expected_type = self.parameters.get("type")
        if not expected_type:
            raise ValueError("TypeNormalizer requires 'type' parameter")

        self.expected_type = self.TYPE_MAPPING.get(str(expected_type).lower())
        if not self.expected_type:
            raise ValueError(f"Unsupported type: {expected_type}")

        self.precision = self.parameters.get("precision", 2)
        self.date_format = self.parameters.get("date_format", "%d-%m-%Y")

    def _coerce(self, value: Any) -> Any:
        if self.expected_type is int:
            return to_int(value)
        if self.expected_type is Decimal:
            return to_decimal(value, self.precision)
        if self.expected_type is date:
            return to_date(value, self.date_format)
        if is_missing(value):
            return None
        return str(value).strip()

    @staticmethod
    def _same(a: Any, b: Any) -> bool:
        # str() distinguishes Decimal("30") from Decimal("30.00")
        return type(a) is type(b) and str(a) == str(b)

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        changed = set()
        failures = 0
        for position, record in enumerate(records):
            value = record.get(self.field_name)
            coerced = self._coerce(value)
            if coerced is None and not is_missing(value):
                failures += 1
            if not self._same(value, coerced):
                record[self.field_name] = coerced
                changed.add(position)

        return changed, {"coerced": len(changed), "coercion_failures": failures}

    @property
    def rule_type(self) -> str:
        return "type"


class ConstraintEnforcer(BaseCleaner):
    """
    Enforces the final schema: required fields, SalesRecord types and
    checks, and primary-key uniqueness.

    Never changes a row; the first violation raises
    ConstraintViolationError naming the constraint and the record.

    Parameters:
    - required_fields: Fields that must be present on every record
    """

    def __init__(self, field_name: str = "transaction_id", parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.required_fields = self.parameters.get("required_fields", [])

    def _check_record(self, record: dict[str, Any]) -> None:
        record_id = record.get(self.field_name)

        for name in [self.field_name, *self.required_fields]:
            if is_missing(record.get(name)):
                raise ConstraintViolationError(f"NOT NULL {name}", record_id, "value is missing")

        try:
            SalesRecord.model_validate({column: record.get(column) for column in SALES_COLUMNS})
        except PydanticValidationError as e:
            error = e.errors()[0]
            field = error["loc"][0] if error["loc"] else None
            if field is None:
                constraint = "CHECK total_amount = price * quantity"
            elif is_missing(record.get(field)):
                constraint = f"NOT NULL {field}"
            else:
                constraint = f"CHECK {field} ({error['type']})"
            raise ConstraintViolationError(constraint, record_id, error["msg"]) from e

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        seen: set[Any] = set()
        for record in records:
            self._check_record(record)

            key = record.get(self.field_name)
            if key in seen:
                raise ConstraintViolationError(
                    f"PRIMARY KEY {self.field_name}", key, "duplicate key value"
                )
            seen.add(key)

        return set(), {"checked": len(records)}

    @property
    def rule_type(self) -> str:
        return "constraints"

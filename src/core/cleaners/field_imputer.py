"""
Field imputers - fill missing values with constants, partition means or derived values.

A value is missing when it is None or a blank string.
"""

import statistics
from collections.abc import Callable
from decimal import Decimal
from functools import reduce
from typing import Any

from src.core.models import ImputationRule, is_missing

from .base_cleaner import BaseCleaner, ImputationError
from .coercion import quantize, to_decimal


class ConstantImputer(BaseCleaner):
    """
    Replaces missing values with a fixed literal.

    Parameters:
    - value: Literal fill value (e.g. "Unknown")
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        if self.parameters.get("value") is None:
            raise ValueError("ConstantImputer requires 'value' parameter")
        self.value = self.parameters["value"]

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        changed = set()
        for position, record in enumerate(records):
            if is_missing(record.get(self.field_name)):
                record[self.field_name] = self.value
                changed.add(position)

        return changed, {"filled": len(changed), "value": self.value}

    @property
    def rule_type(self) -> str:
        return "constant"


class ValueStandardizer(BaseCleaner):
    """
    Maps spelling variants of a categorical value onto one canonical value.

    Parameters:
    - mapping: {canonical value: [variants]}
    - case_sensitive: Match variants exactly (default True)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        mapping = self.parameters.get("mapping")
        if not mapping:
            raise ValueError("ValueStandardizer requires 'mapping' parameter")

        self.case_sensitive = self.parameters.get("case_sensitive", True)
        self._lookup: dict[str, str] = {}
        for canonical, variants in mapping.items():
            if isinstance(variants, str):
                variants = [variants]
            for variant in variants:
                key = self._normalize(variant)
                if key in self._lookup and self._lookup[key] != canonical:
                    raise ValueError(
                        f"Variant '{variant}' maps to both '{self._lookup[key]}' and '{canonical}'"
                    )
                self._lookup[key] = canonical

    def _normalize(self, value: str) -> str:
        value = value.strip()
        return value if self.case_sensitive else value.casefold()

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        changed = set()
        mapped: dict[str, int] = {}
        for position, record in enumerate(records):
            value = record.get(self.field_name)
            if not isinstance(value, str) or is_missing(value):
                continue

            canonical = self._lookup.get(self._normalize(value))
            if canonical is not None and canonical != value:
                record[self.field_name] = canonical
                changed.add(position)
                mapped[value] = mapped.get(value, 0) + 1

        return changed, {"standardized": len(changed), "variants": mapped}

    @property
    def rule_type(self) -> str:
        return "standardize"


class PartitionedMeanImputer(BaseCleaner):
    """
    Fills missing numeric values with the mean of their partition.

    Means are computed from non-missing rows only and rounded half-up to
    the rule's precision. Partitions without any non-missing value use the
    configured fallback policy. Text that does not parse as a number
    counts as missing.

    Parameters: see ImputationRule (partition_field, fallback,
    fallback_value, precision)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        params = {k: v for k, v in self.parameters.items() if k not in ("field_name", "strategy")}
        self.rule = ImputationRule(field_name=field_name, strategy="partitioned_mean", **params)

    def _partition_key(self, record: dict[str, Any]) -> str | None:
        value = record.get(self.rule.partition_field)
        if is_missing(value):
            return None
        return str(value).strip()

    def _fallback(self, partition: str | None, global_mean: Decimal | None) -> Decimal:
        if self.rule.fallback == "error":
            raise ImputationError(
                self.field_name,
                f"partition {self.rule.partition_field}={partition!r} has no values to average"
            )
        if self.rule.fallback == "constant":
            return quantize(Decimal(str(self.rule.fallback_value)), self.rule.precision)
        if global_mean is None:
            raise ImputationError(self.field_name, "no non-missing values to compute a global mean")
        return global_mean

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        values_by_partition: dict[str | None, list[Decimal]] = {}
        all_values: list[Decimal] = []
        missing_rows: list[int] = []

        for position, record in enumerate(records):
            value = to_decimal(record.get(self.field_name))
            if value is None:
                missing_rows.append(position)
                continue
            values_by_partition.setdefault(self._partition_key(record), []).append(value)
            all_values.append(value)

        means = {
            partition: quantize(sum(values) / len(values), self.rule.precision)
            for partition, values in values_by_partition.items()
        }
        global_mean = None
        global_median = None
        if all_values:
            global_mean = quantize(sum(all_values) / len(all_values), self.rule.precision)
            global_median = quantize(statistics.median(all_values), self.rule.precision)

        changed = set()
        filled_by_partition: dict[str, int] = {}
        fallback_used = 0
        for position in missing_rows:
            record = records[position]
            partition = self._partition_key(record)
            if partition in means:
                fill = means[partition]
            else:
                fill = self._fallback(partition, global_mean)
                fallback_used += 1

            record[self.field_name] = fill
            changed.add(position)
            filled_by_partition[str(partition)] = filled_by_partition.get(str(partition), 0) + 1

        return changed, {
            "filled": len(changed),
            "filled_by_partition": filled_by_partition,
            "partition_means": {str(p): str(m) for p, m in means.items()},
            "global_mean": str(global_mean) if global_mean is not None else None,
            "global_median": str(global_median) if global_median is not None else None,
            "fallback_used": fallback_used,
        }

    @property
    def rule_type(self) -> str:
        return "partitioned_mean"


def _product(values: list[Decimal]) -> Decimal:
    return reduce(lambda a, b: a * b, values, Decimal(1))


def _sum(values: list[Decimal]) -> Decimal:
    return sum(values, Decimal(0))


class DerivedImputer(BaseCleaner):
    """
    Computes a field from other fields of the same record.

    The field is overwritten whenever it is missing or differs from the
    derived value (exact Decimal comparison after rounding). Records whose
    inputs are missing are skipped.

    Parameters:
    - inputs: Source field names
    - formula: "product", "sum" or a callable taking the list of Decimals
    - precision: Decimal places of the derived value (default 2)
    - input_precision: Optional mapping of input field to the decimal places
      it will be stored with; inputs are rounded to it before deriving so
      the stored total matches the stored inputs
    """

    FORMULAS: dict[str, Callable[[list[Decimal]], Decimal]] = {
        "product": _product,
        "sum": _sum,
    }

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.inputs = self.parameters.get("inputs")
        if not self.inputs:
            raise ValueError("DerivedImputer requires 'inputs' parameter")

        formula = self.parameters.get("formula", "product")
        if callable(formula):
            self.formula = formula
        elif formula in self.FORMULAS:
            self.formula = self.FORMULAS[formula]
        else:
            raise ValueError(f"Unsupported formula: {formula}")

        self.precision = self.parameters.get("precision", 2)
        self.input_precision = self.parameters.get("input_precision") or {}

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        changed = set()
        filled = 0
        recomputed = 0
        skipped = 0

        for position, record in enumerate(records):
            inputs = [to_decimal(record.get(name), self.input_precision.get(name)) for name in self.inputs]
            if any(value is None for value in inputs):
                skipped += 1
                continue

            derived = quantize(self.formula(inputs), self.precision)
            current = to_decimal(record.get(self.field_name))
            if current is None:
                filled += 1
            elif current != derived:
                recomputed += 1
            else:
                continue

            record[self.field_name] = derived
            changed.add(position)

        return changed, {
            "filled": filled,
            "recomputed": recomputed,
            "skipped_missing_inputs": skipped,
        }

    @property
    def rule_type(self) -> str:
        return "derived"

"""
DuplicateResolver - keeps one representative record per composite-key group.
"""

from collections.abc import Callable
from typing import Any

from src.core.models import is_missing

from .base_cleaner import BaseCleaner
from .coercion import to_int

OrderKey = Callable[[dict[str, Any]], Any]


def _normalize_key_value(value: Any) -> Any:
    if is_missing(value):
        return None
    as_int = to_int(value)
    if as_int is not None:
        return as_int
    return str(value).strip()


def order_by_field(field_name: str) -> OrderKey:
    """
    Build an ascending sort key on one field.

    Numeric values sort before text, and missing values sort last.
    """

    def key(record: dict[str, Any]) -> tuple:
        value = _normalize_key_value(record.get(field_name))
        if value is None:
            return (2, "")
        if isinstance(value, int):
            return (0, value)
        return (1, value)

    return key


class DuplicateResolver(BaseCleaner):
    """
    Ranks records within duplicate-key groups and retains rank 1.

    Equivalent to ROW_NUMBER() OVER (PARTITION BY <keys> ORDER BY <order>)
    followed by deleting every row with a rank above 1. Ties under the
    ordering keep input order, so the first-seen row wins.

    Parameters:
    - key_fields: Fields forming the composite key
    - order_by: Callable returning a sort key for a record
    """

    def __init__(self, key_fields: list[str], order_by: OrderKey | None = None):
        if not key_fields:
            raise ValueError("DuplicateResolver requires at least one key field")

        super().__init__("+".join(key_fields), {"key_fields": list(key_fields)})
        self.key_fields = list(key_fields)
        self.order_by = order_by or order_by_field(self.key_fields[0])

    def _group_key(self, record: dict[str, Any]) -> tuple:
        # Missing key values group together, as NULLs do in a SQL partition
        return tuple(_normalize_key_value(record.get(f)) for f in self.key_fields)

    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        """
        Drop every record ranked below first in its key group.

        Args:
            records: Working copy of the dataset rows (replaced in place)

        Returns:
            Tuple of (positions of dropped rows, detail counts)
        """
        groups: dict[tuple, list[int]] = {}
        for position, record in enumerate(records):
            groups.setdefault(self._group_key(record), []).append(position)

        keep: set[int] = set()
        duplicate_groups = 0
        for positions in groups.values():
            if len(positions) > 1:
                duplicate_groups += 1
            ranked = sorted(positions, key=lambda p: self.order_by(records[p]))
            keep.add(ranked[0])

        dropped = {p for p in range(len(records)) if p not in keep}
        records[:] = [records[p] for p in sorted(keep)]

        return dropped, {
            "duplicate_groups": duplicate_groups,
            "dropped": len(dropped),
        }

    @property
    def rule_type(self) -> str:
        return "deduplicate"

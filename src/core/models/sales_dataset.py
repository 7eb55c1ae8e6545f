"""
SalesDataset - the owned record set passed through the cleaning stages.
"""

import copy
from contextlib import contextmanager
from typing import Any, Iterator

from src.utils.validation import validate_source_id

from .sales_record import SALES_COLUMNS


def is_missing(value: Any) -> bool:
    """Return True for None and blank strings."""
    return value is None or (isinstance(value, str) and value.strip() == "")


class SalesDataset:
    """
    A fully materialized set of sales records owned by one pipeline run.

    Stages never mutate `records` directly: they work on the copy yielded by
    `transaction()`, which replaces the committed records only when the
    block exits cleanly.
    """

    def __init__(self, records: list[dict[str, Any]], source_id: str = "in_memory"):
        """
        Initialize dataset.

        Args:
            records: Rows as dictionaries keyed by column name
            source_id: Name of the source the rows came from; it labels
                       metrics and log records, so it must be a plain identifier

        Raises:
            ValidationError: If source_id is empty or has unsafe characters
        """
        self.source_id = validate_source_id(source_id)
        self._records = [self._with_all_columns(r) for r in records]

    @staticmethod
    def _with_all_columns(record: dict[str, Any]) -> dict[str, Any]:
        row = {column: record.get(column) for column in SALES_COLUMNS}
        # Keep unknown columns so adapters can round-trip them
        for key, value in record.items():
            if key not in row:
                row[key] = value
        return row

    @property
    def records(self) -> list[dict[str, Any]]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self._records)

    @contextmanager
    def transaction(self) -> Iterator[list[dict[str, Any]]]:
        """
        Yield a working copy of the records and commit it on success.

        The copy is a list; stages may mutate rows in place or replace the
        list contents (deduplication). On any exception the committed
        records are left untouched and the exception propagates.
        """
        working = copy.deepcopy(self._records)
        yield working
        self._records = working

    def missing_counts(self, columns: list[str] | None = None) -> dict[str, int]:
        """Count missing (null or blank) values per column."""
        columns = columns or SALES_COLUMNS
        return {
            column: sum(1 for record in self._records if is_missing(record.get(column)))
            for column in columns
        }

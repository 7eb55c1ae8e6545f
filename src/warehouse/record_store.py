"""
Record store adapters: where the pipeline loads rows from and writes them back to.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any


class RecordStore(ABC):
    """
    Abstract tabular source/target for sales records.

    Implementations load every row at once (the dataset is small and
    fully materialized) and save the cleaned rows atomically where the
    backing store supports it.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier of the source, used as source_id in reports."""
        pass

    @abstractmethod
    def load(self) -> list[dict[str, Any]]:
        """Load all rows as dictionaries keyed by column name."""
        pass

    @abstractmethod
    def save(self, records: list[dict[str, Any]]) -> int:
        """
        Replace the stored rows with the given records.

        Returns:
            Number of records written
        """
        pass


class InMemoryRecordStore(RecordStore):
    """Keeps rows in a Python list (tests, notebooks, dry runs)."""

    def __init__(self, records: list[dict[str, Any]] | None = None, name: str = "in_memory"):
        self._name = name
        self.records = copy.deepcopy(records or [])

    @property
    def name(self) -> str:
        return self._name

    def load(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self.records)

    def save(self, records: list[dict[str, Any]]) -> int:
        self.records = copy.deepcopy(records)
        return len(self.records)

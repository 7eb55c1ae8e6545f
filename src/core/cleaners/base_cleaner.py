"""
Base cleaner interface for all cleaning rules.

All cleaners must inherit from BaseCleaner and implement the apply() method.
"""

from abc import ABC, abstractmethod
from typing import Any


class CleaningError(Exception):
    """Raised when a cleaning stage cannot complete."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"[{stage}] {message}")


class ImputationError(CleaningError):
    """Raised when a fill value cannot be resolved (e.g. empty partition with fallback=error)."""

    def __init__(self, field_name: str, message: str):
        self.field_name = field_name
        super().__init__("impute_numeric", f"{field_name}: {message}")


class ConstraintViolationError(CleaningError):
    """Raised when a cleaned record breaks a final schema constraint."""

    def __init__(self, constraint: str, record_id: Any, message: str):
        self.constraint = constraint
        self.record_id = record_id
        super().__init__(
            "enforce_constraints",
            f"{constraint} violated by record {record_id!r}: {message}"
        )


class BaseCleaner(ABC):
    """
    Abstract base class for all cleaners.

    A cleaner repairs one field across the whole record set and reports
    which row positions it changed. Cleaners must be idempotent: applying
    one to its own output changes nothing.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        """
        Initialize cleaner.

        Args:
            field_name: Name of the field to clean
            parameters: Rule-specific parameters (e.g., value for constant fill)
        """
        self.field_name = field_name
        self.parameters = parameters or {}

    @abstractmethod
    def apply(self, records: list[dict[str, Any]]) -> tuple[set[int], dict[str, Any]]:
        """
        Clean the field in place across all records.

        Args:
            records: Working copy of the dataset rows

        Returns:
            Tuple of (positions of changed rows, per-rule detail counts)
        """
        pass

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Return the rule type identifier."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"

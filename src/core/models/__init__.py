"""
Core data models for the retail sales cleaning pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .cleaning_report import CleaningReport, StageResult
from .imputation_rule import ImputationRule
from .sales_dataset import SalesDataset, is_missing
from .sales_record import SALES_COLUMNS, SalesRecord

__all__ = [
    "SALES_COLUMNS",
    "SalesRecord",
    "SalesDataset",
    "ImputationRule",
    "StageResult",
    "CleaningReport",
    "is_missing",
]

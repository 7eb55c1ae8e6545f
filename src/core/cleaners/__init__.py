"""
Cleaning rule implementations.

Provides the duplicate resolver, field imputers, anomaly correctors and
type normalization used by the pipeline stages.
"""

from .anomaly_corrector import CalendarDateCorrector, PatternCorrector, SignCorrector
from .base_cleaner import BaseCleaner, CleaningError, ConstraintViolationError, ImputationError
from .duplicate_resolver import DuplicateResolver, order_by_field
from .field_imputer import ConstantImputer, DerivedImputer, PartitionedMeanImputer, ValueStandardizer
from .type_normalizer import ConstraintEnforcer, TypeNormalizer, TypeRelaxer

__all__ = [
    "BaseCleaner",
    "CleaningError",
    "ImputationError",
    "ConstraintViolationError",
    "DuplicateResolver",
    "order_by_field",
    "ConstantImputer",
    "ValueStandardizer",
    "PartitionedMeanImputer",
    "DerivedImputer",
    "SignCorrector",
    "PatternCorrector",
    "CalendarDateCorrector",
    "TypeRelaxer",
    "TypeNormalizer",
    "ConstraintEnforcer",
]

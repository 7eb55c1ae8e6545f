"""
Rule engine for turning a cleaning configuration into ordered pipeline stages.

The engine instantiates cleaners from the configuration and groups them
into named stages in the fixed order the pipeline requires:
standardize before default-fill, correct anomalies before deriving
dependent fields, impute before type narrowing.
"""

import time
from typing import Any

from src.core.cleaners import (
    BaseCleaner,
    CalendarDateCorrector,
    ConstantImputer,
    ConstraintEnforcer,
    DerivedImputer,
    DuplicateResolver,
    PartitionedMeanImputer,
    PatternCorrector,
    SignCorrector,
    TypeNormalizer,
    TypeRelaxer,
    ValueStandardizer,
)
from src.core.cleaners.duplicate_resolver import OrderKey
from src.core.models import ImputationRule, StageResult

from .rule_config import CleaningConfig

STAGE_ORDER = [
    "deduplicate",
    "relax_types",
    "impute_categories",
    "standardize_values",
    "fill_defaults",
    "impute_numeric",
    "correct_negative_values",
    "derive_fields",
    "validate_dates",
    "validate_patterns",
    "normalize_types",
    "enforce_constraints",
]


class CleaningStage:
    """
    A named group of cleaners applied together.

    rows_affected counts each row once, however many of the stage's
    cleaners touched it.
    """

    def __init__(self, name: str, cleaners: list[BaseCleaner]):
        self.name = name
        self.cleaners = cleaners

    def run(self, records: list[dict[str, Any]]) -> StageResult:
        """
        Apply every cleaner of the stage to the records in place.

        Args:
            records: Working copy of the dataset rows

        Returns:
            StageResult with the union of changed rows and per-field details
        """
        started = time.perf_counter()
        changed: set[int] = set()
        details: dict[str, Any] = {}

        for cleaner in self.cleaners:
            rows, cleaner_details = cleaner.apply(records)
            changed |= rows
            details[cleaner.field_name] = cleaner_details

        return StageResult(
            stage=self.name,
            rows_affected=len(changed),
            details=details,
            duration_seconds=round(time.perf_counter() - started, 6),
        )

    def __repr__(self) -> str:
        return f"CleaningStage(name={self.name}, cleaners={self.cleaners})"


class RuleEngine:
    """
    Builds the ordered cleaning stages from a CleaningConfig.
    """

    IMPUTER_REGISTRY = {
        "constant": ConstantImputer,
        "partitioned_mean": PartitionedMeanImputer,
        "derived": DerivedImputer,
    }

    def __init__(self, config: CleaningConfig, order_by: OrderKey | None = None):
        """
        Initialize the rule engine.

        Args:
            config: Cleaning configuration
            order_by: Sort key deciding which duplicate survives
                      (defaults to ascending primary key, then input order)
        """
        self.config = config
        self.order_by = order_by
        self.stages: list[CleaningStage] = []
        self._build_stages()

    def _imputer(self, rule: ImputationRule) -> BaseCleaner:
        imputer_class = self.IMPUTER_REGISTRY.get(rule.strategy)
        if not imputer_class:
            raise ValueError(f"Unknown imputation strategy: {rule.strategy}")

        parameters = rule.model_dump(exclude={"field_name", "strategy"})
        if rule.strategy == "derived":
            parameters["input_precision"] = {
                name: self.config.decimal_precision
                for name in rule.inputs or []
                if self.config.field_types.get(name) == "decimal"
            }
        return imputer_class(rule.field_name, parameters)

    def _build_stages(self) -> None:
        """Build cleaner instances grouped by stage in STAGE_ORDER."""
        config = self.config

        builders = {
            "deduplicate": lambda: [DuplicateResolver(config.dedup_keys, self.order_by)],
            "relax_types": lambda: [TypeRelaxer(f) for f in config.relaxed_fields],
            "impute_categories": lambda: [
                ConstantImputer(f, {"value": v}) for f, v in config.categorical_defaults.items()
            ],
            "standardize_values": lambda: [
                ValueStandardizer(f, rule.model_dump()) for f, rule in config.standardize.items()
            ],
            "fill_defaults": lambda: [
                ConstantImputer(f, {"value": v}) for f, v in config.defaults.items()
            ],
            "impute_numeric": lambda: [self._imputer(rule) for rule in config.imputation],
            "correct_negative_values": lambda: [
                SignCorrector(f) for f in config.non_negative_fields
            ],
            "derive_fields": lambda: [self._imputer(rule) for rule in config.derived],
            "validate_dates": lambda: [
                CalendarDateCorrector(f, {"date_format": fmt}) for f, fmt in config.date_fields.items()
            ],
            "validate_patterns": lambda: [
                PatternCorrector(f, {"pattern": p}) for f, p in config.patterns.items()
            ],
            "normalize_types": lambda: [
                TypeNormalizer(f, {
                    "type": t,
                    "precision": config.decimal_precision,
                    "date_format": config.date_fields.get(f, "%d-%m-%Y"),
                })
                for f, t in config.field_types.items()
            ],
            "enforce_constraints": lambda: [
                ConstraintEnforcer(config.primary_key, {"required_fields": config.required_fields})
            ],
        }

        for name in STAGE_ORDER:
            try:
                cleaners = builders[name]()
            except ValueError as e:
                raise ValueError(f"Failed to create cleaners for stage '{name}': {e}") from e
            self.stages.append(CleaningStage(name, cleaners))

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded rules.

        Returns:
            Dictionary with stage order and cleaner counts
        """
        return {
            "stages": [stage.name for stage in self.stages],
            "total_rules": sum(len(stage.cleaners) for stage in self.stages),
            "rules_by_type": self._count_by_type(),
        }

    def _count_by_type(self) -> dict[str, int]:
        """Count cleaners by rule type."""
        counts: dict[str, int] = {}
        for stage in self.stages:
            for cleaner in stage.cleaners:
                counts[cleaner.rule_type] = counts.get(cleaner.rule_type, 0) + 1
        return counts

"""
Cleaning rule configuration management.

Loads cleaning rules from YAML files and provides utilities
for building rule configurations in code.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.core.models import SALES_COLUMNS, ImputationRule


class StandardizationRule(BaseModel):
    """Many-to-one mapping of spelling variants onto canonical values."""

    mapping: dict[str, list[str]]
    case_sensitive: bool = True


def _default_field_types() -> dict[str, str]:
    return {
        "transaction_id": "int",
        "customer_id": "int",
        "customer_name": "str",
        "email": "str",
        "purchase_date": "date",
        "product_id": "int",
        "category": "str",
        "price": "decimal",
        "quantity": "int",
        "total_amount": "decimal",
        "payment_method": "str",
        "delivery_status": "str",
        "customer_address": "str",
    }


class CleaningConfig(BaseModel):
    """
    Parameters for every pipeline stage.

    The defaults reproduce the retail sales cleaning workflow.
    """

    dedup_keys: list[str] = Field(default_factory=lambda: ["transaction_id", "customer_id"])
    relaxed_fields: list[str] = Field(default_factory=lambda: ["customer_id", "price"])
    categorical_defaults: dict[str, str] = Field(default_factory=lambda: {"category": "Unknown"})
    standardize: dict[str, StandardizationRule] = Field(
        default_factory=lambda: {
            "payment_method": StandardizationRule(
                mapping={"Credit Card": ["creditcard", "CC", "credit"]}
            )
        }
    )
    defaults: dict[str, str] = Field(
        default_factory=lambda: {
            "delivery_status": "Not Delivered",
            "customer_address": "Not Available",
            "payment_method": "Cash",
            "customer_name": "User",
        }
    )
    imputation: list[ImputationRule] = Field(
        default_factory=lambda: [
            ImputationRule(
                field_name="price",
                strategy="partitioned_mean",
                partition_field="category",
                fallback="global_mean",
            )
        ]
    )
    non_negative_fields: list[str] = Field(
        default_factory=lambda: ["quantity", "price", "total_amount"]
    )
    derived: list[ImputationRule] = Field(
        default_factory=lambda: [
            ImputationRule(
                field_name="total_amount",
                strategy="derived",
                inputs=["price", "quantity"],
                formula="product",
            )
        ]
    )
    date_fields: dict[str, str] = Field(default_factory=lambda: {"purchase_date": "%d-%m-%Y"})
    patterns: dict[str, str] = Field(default_factory=lambda: {"email": r"^[^@\s]+@[^@\s]+$"})
    field_types: dict[str, str] = Field(default_factory=_default_field_types)
    decimal_precision: int = Field(2, ge=0)
    primary_key: str = "transaction_id"
    required_fields: list[str] = Field(
        default_factory=lambda: [
            "customer_id",
            "customer_name",
            "category",
            "price",
            "quantity",
            "total_amount",
            "payment_method",
            "delivery_status",
            "customer_address",
        ]
    )

    @field_validator("imputation")
    @classmethod
    def check_imputation_strategies(cls, v):
        """Derived rules belong in 'derived', which runs after anomaly correction."""
        for rule in v:
            if rule.strategy == "derived":
                raise ValueError(f"Rule for '{rule.field_name}' is derived; list it under 'derived'")
        return v

    @field_validator("derived")
    @classmethod
    def check_derived_strategies(cls, v):
        for rule in v:
            if rule.strategy != "derived":
                raise ValueError(f"Rule for '{rule.field_name}' under 'derived' must use strategy 'derived'")
        return v

    @field_validator("field_types")
    @classmethod
    def check_field_types_cover_schema(cls, v):
        missing = [column for column in SALES_COLUMNS if column not in v]
        if missing:
            raise ValueError(f"field_types is missing columns: {missing}")
        return v


class RuleConfigLoader:
    """
    Loads cleaning rules from YAML configuration files.

    Expected YAML format (every section optional; omitted sections keep
    their defaults):
    ```yaml
    dedup_keys: [transaction_id, customer_id]

    defaults:
      delivery_status: Not Delivered
      payment_method: Cash

    standardize:
      payment_method:
        mapping:
          Credit Card: [creditcard, CC, credit]

    imputation:
      - field_name: price
        strategy: partitioned_mean
        partition_field: category
        fallback: global_mean
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the rule config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load_config(self) -> CleaningConfig:
        """
        Load and parse cleaning rules from YAML file.

        Returns:
            CleaningConfig for the pipeline

        Raises:
            ValueError: If YAML is invalid or a rule is malformed
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping of sections")

        unknown = set(config) - set(CleaningConfig.model_fields)
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

        try:
            return CleaningConfig.model_validate(config)
        except ValidationError as e:
            raise ValueError(f"Invalid cleaning configuration in {self.config_path}: {e}") from e


class RuleConfigBuilder:
    """
    Programmatically build rule configurations (for testing or dynamic rules).

    Starts from the default configuration unless a base is supplied.
    """

    def __init__(self, base: CleaningConfig | None = None):
        """Initialize from a base configuration."""
        self._values: dict[str, Any] = (base or CleaningConfig()).model_dump()

    def with_dedup_keys(self, *key_fields: str) -> "RuleConfigBuilder":
        """Set the composite duplicate key."""
        self._values["dedup_keys"] = list(key_fields)
        return self

    def add_default(self, field_name: str, value: str) -> "RuleConfigBuilder":
        """Add a constant fill for a field."""
        self._values["defaults"][field_name] = value
        return self

    def add_standardization(
        self,
        field_name: str,
        canonical: str,
        variants: list[str],
        case_sensitive: bool = True
    ) -> "RuleConfigBuilder":
        """Map variants of a field value onto a canonical value."""
        rule = self._values["standardize"].setdefault(
            field_name, {"mapping": {}, "case_sensitive": case_sensitive}
        )
        rule["mapping"][canonical] = list(variants)
        rule["case_sensitive"] = case_sensitive
        return self

    def set_partitioned_mean(
        self,
        field_name: str,
        partition_field: str,
        fallback: str = "global_mean",
        fallback_value: float | None = None,
        precision: int = 2
    ) -> "RuleConfigBuilder":
        """Replace the imputation rule for a field with a partitioned mean."""
        rules = [r for r in self._values["imputation"] if r["field_name"] != field_name]
        rules.append({
            "field_name": field_name,
            "strategy": "partitioned_mean",
            "partition_field": partition_field,
            "fallback": fallback,
            "fallback_value": fallback_value,
            "precision": precision,
        })
        self._values["imputation"] = rules
        return self

    def set_pattern(self, field_name: str, pattern: str) -> "RuleConfigBuilder":
        """Add or replace a validation pattern."""
        self._values["patterns"][field_name] = pattern
        return self

    def set_date_format(self, field_name: str, date_format: str) -> "RuleConfigBuilder":
        """Add or replace a date field and its source format."""
        self._values["date_fields"][field_name] = date_format
        return self

    def build(self) -> CleaningConfig:
        """Build and return the cleaning configuration."""
        return CleaningConfig.model_validate(self._values)

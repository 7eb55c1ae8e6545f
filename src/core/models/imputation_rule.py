"""
ImputationRule model describing how a missing field value is filled.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


class ImputationRule(BaseModel):
    """
    Maps a field to a fill strategy.

    Attributes:
        field_name: Field to fill
        strategy: "constant", "partitioned_mean" or "derived"
        value: Literal used by the constant strategy
        partition_field: Grouping field for the partitioned_mean strategy
        inputs: Source fields for the derived strategy
        formula: How the derived strategy combines its inputs
        fallback: Policy for partitions without data
            ("global_mean", "constant" or "error")
        fallback_value: Value used when fallback is "constant"
        precision: Decimal places for numeric fills
    """

    field_name: str = Field(..., min_length=1)
    strategy: Literal["constant", "partitioned_mean", "derived"]
    value: Any = None
    partition_field: str | None = None
    inputs: list[str] = Field(default_factory=list)
    formula: Literal["product", "sum"] = "product"
    fallback: Literal["global_mean", "constant", "error"] = "global_mean"
    fallback_value: float | None = None
    precision: int = Field(2, ge=0, le=6)

    @model_validator(mode="after")
    def check_strategy_parameters(self) -> "ImputationRule":
        """Validate that each strategy carries the parameters it needs."""
        if self.strategy == "constant" and self.value is None:
            raise ValueError("constant strategy requires 'value'")
        if self.strategy == "partitioned_mean" and not self.partition_field:
            raise ValueError("partitioned_mean strategy requires 'partition_field'")
        if self.strategy == "derived" and not self.inputs:
            raise ValueError("derived strategy requires 'inputs'")
        if self.fallback == "constant" and self.fallback_value is None:
            raise ValueError("fallback 'constant' requires 'fallback_value'")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "field_name": "price",
                "strategy": "partitioned_mean",
                "partition_field": "category",
                "fallback": "global_mean",
                "precision": 2
            }
        }

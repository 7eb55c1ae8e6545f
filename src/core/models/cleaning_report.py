"""
StageResult and CleaningReport models describing the outcome of a cleaning run (ephemeral).
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class StageResult(BaseModel):
    """
    Outcome of one pipeline stage.

    Attributes:
        stage: Stage name
        rows_affected: Number of rows the stage changed (or dropped)
        details: Per-field counts and reference statistics
        duration_seconds: Wall-clock time spent in the stage
    """

    stage: str = Field(..., min_length=1)
    rows_affected: int = Field(0, ge=0)
    details: dict[str, Any] = Field(default_factory=dict)
    duration_seconds: float = Field(0.0, ge=0.0)


class CleaningReport(BaseModel):
    """
    Summary of a full pipeline run, for verification and audit.

    Attributes:
        source_id: Name of the dataset that was cleaned
        input_records: Records loaded from the source
        output_records: Records after cleaning
        stages: Stage results in execution order
        completeness_before: Missing values per field before cleaning
        completeness_after: Missing values per field after cleaning
        started_at: When the run started
    """

    source_id: str
    input_records: int = Field(0, ge=0)
    output_records: int = Field(0, ge=0)
    stages: list[StageResult] = Field(default_factory=list)
    completeness_before: dict[str, int] = Field(default_factory=dict)
    completeness_after: dict[str, int] = Field(default_factory=dict)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict[str, int]:
        """Map stage name to rows affected."""
        return {result.stage: result.rows_affected for result in self.stages}

    @property
    def total_changes(self) -> int:
        return sum(result.rows_affected for result in self.stages)

    def get_stage(self, stage: str) -> StageResult | None:
        for result in self.stages:
            if result.stage == stage:
                return result
        return None

    def completeness_pct(self) -> float:
        """Percentage of non-missing cells after cleaning."""
        if not self.completeness_after or self.output_records == 0:
            return 100.0
        total_cells = self.output_records * len(self.completeness_after)
        missing = sum(self.completeness_after.values())
        return round(100.0 * (total_cells - missing) / total_cells, 2)

    class Config:
        json_schema_extra = {
            "example": {
                "source_id": "raw_sales",
                "input_records": 943,
                "output_records": 940,
                "stages": [
                    {"stage": "deduplicate", "rows_affected": 3},
                    {"stage": "impute_categories", "rows_affected": 12}
                ],
                "completeness_before": {"category": 12, "price": 9},
                "completeness_after": {"category": 0, "price": 0}
            }
        }

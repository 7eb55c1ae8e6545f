"""
Cleaning pipeline orchestration.

Coordinates the flow: load → run stages in order → report → save
"""

from pathlib import Path

from src.core.cleaners import ConstraintViolationError
from src.core.cleaners.duplicate_resolver import OrderKey
from src.core.models import CleaningReport, SalesDataset
from src.core.rules import CleaningConfig, RuleConfigLoader, RuleEngine
from src.observability.logger import get_logger, log_operation
from src.observability.metrics import MetricsCollector
from src.warehouse.record_store import RecordStore

logger = get_logger(__name__)

DEFAULT_RULES_PATH = "config/cleaning_rules.yaml"


class CleaningPipeline:
    """
    Orchestrates the cleaning stages over a SalesDataset.

    Flow:
    1. Record missing-value counts and input size
    2. Run each stage on a working copy, committing only on success
    3. Collect per-stage results into a CleaningReport
    4. Record final counts and metrics

    A stage that raises leaves the dataset as the previous stage committed
    it; the error propagates and no later stage runs.
    """

    def __init__(
        self,
        config: CleaningConfig | None = None,
        rules_path: str | None = None,
        order_by: OrderKey | None = None,
        metrics: MetricsCollector | None = None
    ):
        """
        Initialize cleaning pipeline.

        Args:
            config: Cleaning configuration (loaded from rules_path if None)
            rules_path: Path to cleaning rules YAML file
            order_by: Sort key deciding which duplicate survives
            metrics: Metrics collector (a new one if None)
        """
        if config is None:
            self.rules_path = rules_path or DEFAULT_RULES_PATH
            if Path(self.rules_path).exists():
                config = RuleConfigLoader(self.rules_path).load_config()
            else:
                logger.warning(f"Cleaning rules file not found: {self.rules_path}, using defaults")
                config = CleaningConfig()
        else:
            self.rules_path = rules_path

        self.config = config
        self.rule_engine = RuleEngine(config, order_by=order_by)
        self.metrics = metrics or MetricsCollector()

        logger.info(
            "Initialized cleaning pipeline",
            extra=self.rule_engine.get_rule_summary()
        )

    def run(self, dataset: SalesDataset) -> CleaningReport:
        """
        Clean a dataset in place.

        Args:
            dataset: Records to clean; holds the cleaned records afterwards

        Returns:
            CleaningReport with rows affected per stage

        Raises:
            CleaningError: If a stage cannot complete (ImputationError,
                           ConstraintViolationError)
        """
        report = CleaningReport(
            source_id=dataset.source_id,
            input_records=len(dataset),
            completeness_before=dataset.missing_counts(),
        )

        try:
            for stage in self.rule_engine.stages:
                with log_operation(
                    f"Stage {stage.name}", logger=logger, source_id=dataset.source_id, stage=stage.name
                ) as op:
                    with dataset.transaction() as working:
                        result = stage.run(working)
                    op.add_fields(rows_affected=result.rows_affected, details=result.details)

                report.stages.append(result)
                self.metrics.record_stage(dataset.source_id, result)
        except Exception as e:
            if isinstance(e, ConstraintViolationError):
                self.metrics.record_constraint_violation(e.constraint)
            self.metrics.record_run(report, success=False)
            raise

        report.output_records = len(dataset)
        report.completeness_after = dataset.missing_counts()
        self.metrics.record_run(report, success=True)

        logger.info(
            "Cleaning run complete",
            extra={
                "source_id": dataset.source_id,
                "input_records": report.input_records,
                "output_records": report.output_records,
                "rows_affected": report.as_dict(),
                "completeness_pct": report.completeness_pct(),
            }
        )

        return report

    def run_store(
        self,
        source: RecordStore,
        target: RecordStore | None = None,
        dry_run: bool = False
    ) -> CleaningReport:
        """
        Load records from a store, clean them and save the result.

        Args:
            source: Store to load raw records from
            target: Store to save cleaned records to (defaults to source)
            dry_run: Clean and report without saving

        Returns:
            CleaningReport for the run
        """
        target = target or source

        with log_operation("Load records", logger=logger, source_id=source.name):
            dataset = SalesDataset(source.load(), source_id=source.name)

        report = self.run(dataset)

        if dry_run:
            logger.info(f"Dry run: not saving {len(dataset)} records to {target.name}")
            return report

        with log_operation("Save records", logger=logger, target=target.name):
            target.save(dataset.records)

        return report

"""
Prometheus metrics collection for retail-sales-cleaning

This module provides metrics instrumentation for monitoring
cleaning runs: rows changed per stage, stage latency and failures.
"""
import os

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from src.core.models import CleaningReport, StageResult

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# STAGE METRICS
# =======================

# Rows changed (or dropped) per stage
stage_rows_affected_total = Counter(
    name="cleaning_stage_rows_affected_total",
    documentation="Total number of rows changed or dropped by a cleaning stage",
    labelnames=["source_id", "stage"],
    registry=REGISTRY,
)

# Stage duration histogram
stage_duration_seconds = Histogram(
    name="cleaning_stage_duration_seconds",
    documentation="Time spent in each cleaning stage in seconds",
    labelnames=["stage"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

# =======================
# RUN METRICS
# =======================

# Pipeline runs counter
runs_total = Counter(
    name="cleaning_runs_total",
    documentation="Total number of cleaning runs",
    labelnames=["source_id", "status"],  # status: success, failure
    registry=REGISTRY,
)

# Record counts before and after cleaning
records = Gauge(
    name="cleaning_records",
    documentation="Number of records in the dataset",
    labelnames=["source_id", "phase"],  # phase: input, output
    registry=REGISTRY,
)

# Fatal constraint violations
constraint_violations_total = Counter(
    name="cleaning_constraint_violations_total",
    documentation="Total number of constraint violations that aborted a run",
    labelnames=["constraint"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Content type for Prometheus metrics"""
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: int | None = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """Set a gauge metric value"""
    gauge.labels(**labels).set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """Observe a value in a histogram metric"""
    histogram.labels(**labels).observe(value)


# =======================
# METRICS COLLECTOR CLASS
# =======================

class MetricsCollector:
    """
    Metrics collector for the cleaning pipeline.

    Gives the orchestrator one place to report stage and run outcomes.
    """

    def record_stage(self, source_id: str, result: StageResult) -> None:
        """
        Record the outcome of one stage.

        Args:
            source_id: Dataset name
            result: Stage result
        """
        increment_counter(
            stage_rows_affected_total, result.rows_affected, source_id=source_id, stage=result.stage
        )
        observe_histogram(stage_duration_seconds, result.duration_seconds, stage=result.stage)

    def record_run(self, report: CleaningReport, success: bool = True) -> None:
        """
        Record a finished (or aborted) run.

        Args:
            report: Report of the run so far
            success: Whether every stage completed
        """
        status = "success" if success else "failure"
        increment_counter(runs_total, 1, source_id=report.source_id, status=status)
        set_gauge(records, report.input_records, source_id=report.source_id, phase="input")
        if success:
            set_gauge(records, report.output_records, source_id=report.source_id, phase="output")

    def record_constraint_violation(self, constraint: str) -> None:
        """Record a fatal constraint violation."""
        increment_counter(constraint_violations_total, 1, constraint=constraint)

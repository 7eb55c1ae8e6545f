"""
Unit tests for structured logging.
"""

import io
import json
import logging

import pytest

from src.observability.logger import (
    CustomJsonFormatter,
    configure_logging,
    get_logger,
    log_operation,
    setup_logger,
)


def capture(logger: logging.Logger) -> io.StringIO:
    """Point the logger's handler at a buffer."""
    stream = io.StringIO()
    logger.handlers[0].setStream(stream)
    return stream


class TestLogger:
    """Tests for logger setup"""

    def test_json_output_has_context_fields(self):
        logger = setup_logger("src.test_json", level="INFO", format_type="json")
        stream = capture(logger)

        logger.info("stage done", extra={"stage": "fill_defaults", "rows_affected": 4})

        entry = json.loads(stream.getvalue())
        assert entry["message"] == "stage done"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "src.test_json"
        assert entry["stage"] == "fill_defaults"
        assert entry["rows_affected"] == 4

    def test_text_format(self):
        logger = setup_logger("src.test_text", format_type="text")
        assert not isinstance(logger.handlers[0].formatter, CustomJsonFormatter)

    def test_get_logger_reuses_handlers(self):
        first = get_logger("src.test_reuse")
        second = get_logger("src.test_reuse")
        assert first is second
        assert len(second.handlers) == 1

    def test_configure_logging_switches_format(self):
        logger = get_logger("src.test_switch")
        configure_logging(format_type="text")
        assert not isinstance(logger.handlers[0].formatter, CustomJsonFormatter)
        configure_logging(format_type="json")
        assert isinstance(logger.handlers[0].formatter, CustomJsonFormatter)


class TestLogOperation:
    """Tests for log_operation"""

    def test_logs_start_and_completion(self):
        logger = setup_logger("src.test_operation", format_type="json")
        stream = capture(logger)

        with log_operation("Stage deduplicate", logger=logger, stage="deduplicate"):
            pass

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert entries[0]["message"] == "Starting: Stage deduplicate"
        assert entries[1]["status"] == "success"
        assert entries[1]["stage"] == "deduplicate"
        assert "duration_seconds" in entries[1]

    def test_logs_failure_and_reraises(self):
        logger = setup_logger("src.test_operation_error", format_type="json")
        stream = capture(logger)

        with pytest.raises(ValueError):
            with log_operation("Stage impute_numeric", logger=logger):
                raise ValueError("no values")

        failure = json.loads(stream.getvalue().splitlines()[-1])
        assert failure["status"] == "error"
        assert failure["error_type"] == "ValueError"

    def test_added_fields_only_on_completion(self):
        logger = setup_logger("src.test_operation_fields", format_type="json")
        stream = capture(logger)

        with log_operation("Stage fill_defaults", logger=logger, stage="fill_defaults") as op:
            op.add_fields(rows_affected=4)

        start, done = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert "rows_affected" not in start
        assert done["rows_affected"] == 4
        assert done["stage"] == "fill_defaults"

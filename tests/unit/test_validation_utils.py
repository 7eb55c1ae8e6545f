"""
Unit tests for input validation utilities and CLI store parsing.
"""

import pytest

from src.cli.clean_cli import build_parser, parse_store
from src.utils.validation import (
    ValidationError,
    sanitize_sql_identifier,
    validate_file_path,
    validate_source_id,
    validate_table_name,
)


class TestValidateSourceId:
    """Tests for validate_source_id"""

    def test_valid_ids(self):
        assert validate_source_id(" raw_sales ") == "raw_sales"
        assert validate_source_id("sales-2024.csv") == "sales-2024.csv"

    @pytest.mark.parametrize("value", ["", "   ", "bad id", "a/b", None])
    def test_invalid_ids(self, value):
        with pytest.raises(ValidationError):
            validate_source_id(value)


class TestSqlIdentifiers:
    """Tests for SQL identifier validation"""

    def test_valid_identifier(self):
        assert sanitize_sql_identifier("sales2") == "sales2"

    @pytest.mark.parametrize("value", ["1sales", "sales; DROP TABLE x", "drop", "a" * 64])
    def test_invalid_identifier(self, value):
        with pytest.raises(ValidationError):
            sanitize_sql_identifier(value)

    def test_schema_qualified_table(self):
        assert validate_table_name("public.sales2") == "public.sales2"

    @pytest.mark.parametrize("value", ["a.b.c", "public.", "public.table", ""])
    def test_invalid_table(self, value):
        with pytest.raises(ValidationError):
            validate_table_name(value)

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)


class TestValidateFilePath:
    """Tests for validate_file_path"""

    def test_valid_path(self):
        assert validate_file_path("/data/raw_sales.csv") == "/data/raw_sales.csv"

    @pytest.mark.parametrize("value", ["../../etc/passwd", "data/*.csv", "a\x00b", ""])
    def test_invalid_path(self, value):
        with pytest.raises(ValidationError):
            validate_file_path(value)

    def test_wildcards_allowed_when_requested(self):
        assert validate_file_path("data/*.csv", allow_wildcards=True) == "data/*.csv"


class TestParseStore:
    """Tests for CLI store arguments"""

    @pytest.mark.parametrize("spec,expected", [
        ("csv:data/raw_sales.csv", ("csv", "data/raw_sales.csv")),
        ("parquet:out/clean", ("parquet", "out/clean")),
        ("table:public.raw_sales", ("table", "public.raw_sales")),
    ])
    def test_valid_stores(self, spec, expected):
        assert parse_store(spec) == expected

    @pytest.mark.parametrize("spec", ["raw_sales.csv", "xlsx:file.xlsx", "csv:", "csv:../secret.csv"])
    def test_invalid_stores(self, spec):
        with pytest.raises(ValidationError):
            parse_store(spec)

    def test_run_arguments(self):
        args = build_parser().parse_args([
            "run", "--source", "csv:in.csv", "--target", "table:sales2", "--dry-run",
        ])
        assert args.command == "run"
        assert args.target == "table:sales2"
        assert args.dry_run is True
        assert args.rules == "config/cleaning_rules.yaml"
        assert args.primary_key == "transaction_id"

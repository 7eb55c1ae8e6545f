"""
Integration tests for the Spark file record store.
"""

import os
from datetime import date
from decimal import Decimal

import pytest

from src.batch.file_store import SparkFileRecordStore
from src.batch.pipeline import CleaningPipeline
from src.core.models import SALES_COLUMNS
from src.core.rules import CleaningConfig
from src.core.schema import CLEAN_SALES_SCHEMA, RAW_SALES_SCHEMA


@pytest.mark.integration
class TestSparkFileRecordStore:
    """Tests for SparkFileRecordStore"""

    def test_load_csv_as_text(self, spark_session, test_data_dir):
        store = SparkFileRecordStore(spark_session, os.path.join(test_data_dir, "dirty_sales.csv"))
        rows = store.load()

        assert len(rows) == 7
        assert store.name == "dirty_sales"
        assert rows[0]["transaction_id"] == "1001"
        assert rows[0]["quantity"] == "-3"
        assert rows[0]["total_amount"] is None

    def test_clean_csv_to_parquet(self, spark_session, test_data_dir, tmp_path):
        """Test a dirty CSV is cleaned into a typed parquet output"""
        source = SparkFileRecordStore(spark_session, os.path.join(test_data_dir, "dirty_sales.csv"))
        target = SparkFileRecordStore(spark_session, str(tmp_path / "clean"), file_format="parquet")

        report = CleaningPipeline(config=CleaningConfig()).run_store(source, target)
        assert report.output_records == 6

        df = spark_session.read.parquet(str(tmp_path / "clean"))
        assert [f.name for f in df.schema] == SALES_COLUMNS
        assert [f.dataType for f in df.schema] == [f.dataType for f in CLEAN_SALES_SCHEMA]
        rows = {r["transaction_id"]: r.asDict() for r in df.collect()}

        assert rows[1001]["quantity"] == 3
        assert rows[1001]["total_amount"] == Decimal("30.00")
        assert rows[1002]["payment_method"] == "Credit Card"
        assert rows[1003]["price"] == Decimal("20.00")
        assert rows[1003]["payment_method"] == "Cash"
        assert rows[1004]["purchase_date"] is None
        assert rows[1004]["email"] is None
        assert rows[1005]["category"] == "Unknown"
        assert rows[1006]["purchase_date"] == date(2024, 3, 8)

    def test_parquet_output_is_clean(self, spark_session, test_data_dir, tmp_path):
        """Test re-cleaning the typed output changes nothing"""
        pipeline = CleaningPipeline(config=CleaningConfig())
        pipeline.run_store(
            SparkFileRecordStore(spark_session, os.path.join(test_data_dir, "dirty_sales.csv")),
            SparkFileRecordStore(spark_session, str(tmp_path / "clean"), file_format="parquet"),
        )

        report = pipeline.run_store(
            SparkFileRecordStore(spark_session, str(tmp_path / "clean"), file_format="parquet"),
            dry_run=True,
        )
        assert report.total_changes == 0

    def test_write_csv(self, spark_session, test_data_dir, tmp_path):
        CleaningPipeline(config=CleaningConfig()).run_store(
            SparkFileRecordStore(spark_session, os.path.join(test_data_dir, "dirty_sales.csv")),
            SparkFileRecordStore(spark_session, str(tmp_path / "clean_csv"), file_format="csv"),
        )

        df = spark_session.read.option("header", "true").schema(RAW_SALES_SCHEMA).csv(str(tmp_path / "clean_csv"))
        rows = {r["transaction_id"]: r for r in df.collect()}
        assert df.count() == 6
        assert rows["1001"]["total_amount"] == "30.00"
        assert rows["1002"]["purchase_date"] == "2024-03-01"

    def test_unsupported_format(self, spark_session):
        with pytest.raises(ValueError):
            SparkFileRecordStore(spark_session, "data.xlsx", file_format="xlsx")

    def test_missing_column_rejected(self, spark_session, tmp_path):
        path = tmp_path / "short.csv"
        path.write_text("transaction_id,customer_id\n1,2\n")

        with pytest.raises(ValueError, match="missing sales columns"):
            SparkFileRecordStore(spark_session, str(path)).load()

    def test_columns_matched_by_header(self, spark_session, tmp_path):
        """Test reordered and extra columns are projected onto the table order"""
        header = list(reversed(SALES_COLUMNS)) + ["note"]
        values = {column: str(i) for i, column in enumerate(SALES_COLUMNS)}
        values["note"] = "ignored"
        path = tmp_path / "reordered.csv"
        path.write_text(",".join(header) + "\n" + ",".join(values[c] for c in header) + "\n")

        rows = SparkFileRecordStore(spark_session, str(path)).load()

        assert list(rows[0]) == SALES_COLUMNS
        assert rows[0]["transaction_id"] == "0"
        assert rows[0]["customer_address"] == "12"

    def test_csv_output_recleans_without_losing_dates(self, spark_session, test_data_dir, tmp_path):
        """Test cleaning the written CSV again keeps every purchase date"""
        pipeline = CleaningPipeline(config=CleaningConfig())
        pipeline.run_store(
            SparkFileRecordStore(spark_session, os.path.join(test_data_dir, "dirty_sales.csv")),
            SparkFileRecordStore(spark_session, str(tmp_path / "clean_csv"), file_format="csv"),
        )

        source = SparkFileRecordStore(spark_session, str(tmp_path / "clean_csv"), file_format="csv")
        target = SparkFileRecordStore(spark_session, str(tmp_path / "reclean"), file_format="parquet")
        report = pipeline.run_store(source, target)

        date_counts = report.get_stage("validate_dates").details["purchase_date"]
        assert date_counts["invalid_calendar"] == 0
        assert date_counts["unparseable"] == 0

        rows = {r["transaction_id"]: r for r in spark_session.read.parquet(str(tmp_path / "reclean")).collect()}
        assert rows[1002]["purchase_date"] == date(2024, 3, 1)
        assert rows[1006]["purchase_date"] == date(2024, 3, 8)
        assert rows[1004]["purchase_date"] is None

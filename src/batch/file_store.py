"""
File-backed record store using Spark.
"""

from pathlib import Path
from typing import Any

from pyspark.sql import SparkSession

from src.observability.logger import get_logger
from src.warehouse.record_store import RecordStore

from .readers import SUPPORTED_FORMATS, FileReader
from .writers import FileWriter

logger = get_logger(__name__)


class SparkFileRecordStore(RecordStore):
    """
    Loads sales records from a CSV/JSON/Parquet file and saves the cleaned
    table to an output directory.

    CSV and JSON are read with every column as text; Parquet keeps the
    types stored in the file.
    """

    def __init__(self, spark: SparkSession, path: str, file_format: str = "csv"):
        """
        Initialize file store.

        Args:
            spark: Active Spark session
            path: Input file, or output directory when used as a target
            file_format: Format (csv, json, parquet)
        """
        if file_format.lower() not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported file format: {file_format}")

        self.spark = spark
        self.path = path
        self.file_format = file_format.lower()
        self.file_reader = FileReader(spark)
        self.file_writer = FileWriter(spark)

    @property
    def name(self) -> str:
        return Path(self.path).stem or self.path

    def load(self) -> list[dict[str, Any]]:
        df = self.file_reader.read(self.path, file_format=self.file_format)
        rows = [row.asDict() for row in df.collect()]
        logger.info(f"Loaded {len(rows)} rows from {self.path}")
        return rows

    def save(self, records: list[dict[str, Any]]) -> int:
        count = self.file_writer.write(records, self.path, file_format=self.file_format)
        logger.info(f"Wrote {count} rows to {self.path}")
        return count

"""
Batch file writer for cleaned records.

Writes the typed sales schema through Spark as a single-partition output.
"""

from typing import Any

from pyspark.sql import DataFrame, SparkSession

from src.core.models import SALES_COLUMNS
from src.core.schema import CLEAN_SALES_SCHEMA


class FileWriter:
    """
    Writes cleaned records to CSV, JSON or Parquet.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize file writer.

        Args:
            spark: Active Spark session
        """
        self.spark = spark

    def to_dataframe(self, records: list[dict[str, Any]]) -> DataFrame:
        """
        Convert cleaned records into a DataFrame with the typed schema.

        Args:
            records: Cleaned rows (ints, Decimals, dates, strings)

        Returns:
            Spark DataFrame
        """
        rows = [tuple(record.get(column) for column in SALES_COLUMNS) for record in records]
        return self.spark.createDataFrame(rows, schema=CLEAN_SALES_SCHEMA)

    def write(
        self,
        records: list[dict[str, Any]],
        path: str,
        file_format: str = "csv",
        mode: str = "overwrite"
    ) -> int:
        """
        Write records to a path.

        Args:
            records: Cleaned rows
            path: Output directory (Spark writes part files into it)
            file_format: Format (csv, json, parquet)
            mode: Spark save mode

        Returns:
            Number of records written

        Raises:
            ValueError: If file format is unsupported
        """
        writer = self.to_dataframe(records).coalesce(1).write.mode(mode)

        if file_format.lower() == "csv":
            writer.option("header", "true").option("dateFormat", "yyyy-MM-dd").csv(path)
        elif file_format.lower() == "json":
            writer.json(path)
        elif file_format.lower() == "parquet":
            writer.parquet(path)
        else:
            raise ValueError(f"Unsupported file format: {file_format}")

        return len(records)

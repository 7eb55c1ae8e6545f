"""
Sales file reader for the supported formats (CSV, JSON, Parquet).
"""

from pyspark.sql import DataFrame, SparkSession

from src.core.schema import RAW_SALES_SCHEMA

from .csv_reader import CSVReader, select_sales_columns

SUPPORTED_FORMATS = ("csv", "json", "parquet")


class FileReader:
    """
    Dispatches to a format-specific read and returns the sales columns.

    CSV and JSON values are read as text. Parquet keeps the types stored
    in the file, so a previously cleaned table reads back typed.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize file reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark
        self.csv_reader = CSVReader(spark)

    def read(self, file_path: str, file_format: str = "csv") -> DataFrame:
        """
        Read a sales file into a Spark DataFrame.

        Args:
            file_path: Path to file
            file_format: Format (csv, json, parquet)

        Returns:
            Spark DataFrame with the sales columns in table order

        Raises:
            ValueError: If the format is unsupported or a column is missing
        """
        file_format = file_format.lower()
        if file_format == "csv":
            return self.csv_reader.read(file_path)
        elif file_format == "json":
            df = self.spark.read.schema(RAW_SALES_SCHEMA).json(file_path)
        elif file_format == "parquet":
            df = self.spark.read.parquet(file_path)
        else:
            raise ValueError(f"Unsupported file format: {file_format}")

        return select_sales_columns(df, file_path)

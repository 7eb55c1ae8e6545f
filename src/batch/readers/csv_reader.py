"""
CSV reader for raw sales exports.
"""

from pyspark.sql import DataFrame, SparkSession

from src.core.models import SALES_COLUMNS
from src.observability.logger import get_logger

logger = get_logger(__name__)


def select_sales_columns(df: DataFrame, source: str) -> DataFrame:
    """
    Project a DataFrame onto the sales columns, in table order.

    Args:
        df: DataFrame read from a file
        source: Path the DataFrame came from (for messages)

    Returns:
        DataFrame with exactly the sales columns

    Raises:
        ValueError: If a sales column is missing from the file
    """
    missing = [column for column in SALES_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"{source} is missing sales columns: {missing}")

    extra = [column for column in df.columns if column not in SALES_COLUMNS]
    if extra:
        logger.warning(f"Ignoring columns not in the sales table: {extra}", extra={"path": source})

    return df.select(*SALES_COLUMNS)


class CSVReader:
    """
    Reads sales CSV files with Spark, keeping every value as text.

    Schema inference stays off, so values such as "N/A" or "30-02-2024"
    reach the cleaners as written. Columns are matched by header name,
    not position.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize CSV reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark

    def read(self, file_path: str, delimiter: str = ",") -> DataFrame:
        """
        Read a sales CSV file into a Spark DataFrame.

        Args:
            file_path: Path to CSV file (must have a header row)
            delimiter: Field delimiter

        Returns:
            Spark DataFrame of string columns in table order
        """
        # PERMISSIVE keeps malformed rows; short rows get nulls for the cleaners
        df = self.spark.read \
            .option("header", "true") \
            .option("inferSchema", "false") \
            .option("delimiter", delimiter) \
            .option("mode", "PERMISSIVE") \
            .csv(file_path)

        return select_sales_columns(df, file_path)

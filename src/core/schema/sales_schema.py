"""
Spark schemas for the sales table.

Raw files are read with every column as text so that dirty values
("", "N/A", "30-02-2024") reach the cleaners unchanged; cleaned rows are
written with the final typed schema.
"""

from pyspark.sql.types import (
    DateType,
    DecimalType,
    IntegerType,
    StringType,
    StructField,
    StructType,
)

from src.core.models import SALES_COLUMNS

RAW_SALES_SCHEMA = StructType([
    StructField(column, StringType(), nullable=True) for column in SALES_COLUMNS
])

CLEAN_SALES_SCHEMA = StructType([
    StructField("transaction_id", IntegerType(), nullable=False),
    StructField("customer_id", IntegerType(), nullable=False),
    StructField("customer_name", StringType(), nullable=False),
    StructField("email", StringType(), nullable=True),
    StructField("purchase_date", DateType(), nullable=True),
    StructField("product_id", IntegerType(), nullable=True),
    StructField("category", StringType(), nullable=False),
    StructField("price", DecimalType(10, 2), nullable=False),
    StructField("quantity", IntegerType(), nullable=False),
    StructField("total_amount", DecimalType(10, 2), nullable=False),
    StructField("payment_method", StringType(), nullable=False),
    StructField("delivery_status", StringType(), nullable=False),
    StructField("customer_address", StringType(), nullable=False),
])

"""
Spark schemas for raw and cleaned sales data.
"""

from .sales_schema import CLEAN_SALES_SCHEMA, RAW_SALES_SCHEMA

__all__ = [
    "RAW_SALES_SCHEMA",
    "CLEAN_SALES_SCHEMA",
]

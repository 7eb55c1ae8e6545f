"""
Schema management for the cleaned sales table.

Handles DDL for the typed table and inspection of the written schema.
"""

from typing import Any

from psycopg import sql

from src.core.models import SALES_COLUMNS

from .connection import DatabaseConnectionPool

# Final column types; transaction_id carries the primary key
SALES_COLUMN_TYPES = {
    "transaction_id": "INTEGER NOT NULL",
    "customer_id": "INTEGER NOT NULL",
    "customer_name": "TEXT NOT NULL",
    "email": "TEXT",
    "purchase_date": "DATE",
    "product_id": "INTEGER",
    "category": "TEXT NOT NULL",
    "price": "DECIMAL(10,2) NOT NULL",
    "quantity": "INTEGER NOT NULL",
    "total_amount": "DECIMAL(10,2) NOT NULL",
    "payment_method": "TEXT NOT NULL",
    "delivery_status": "TEXT NOT NULL",
    "customer_address": "TEXT NOT NULL",
}


def table_identifier(table: str) -> sql.Identifier:
    """Build an identifier from "table" or "schema.table"."""
    return sql.Identifier(*table.split("."))


class SchemaManager:
    """
    Manages the typed sales table in the warehouse.

    Handles:
    - Building the CREATE TABLE statement with the primary key
    - Describing column names and data types of a table
    - Looking up primary-key columns
    """

    def __init__(self, pool: DatabaseConnectionPool | None):
        """
        Initialize schema manager.

        Args:
            pool: Database connection pool (not needed for DDL generation)
        """
        self.pool = pool

    @staticmethod
    def create_table_sql(table: str, primary_key: str = "transaction_id") -> sql.Composed:
        """
        Build CREATE TABLE for the cleaned sales schema.

        Args:
            table: Target table name
            primary_key: Primary key column

        Returns:
            Composed SQL statement
        """
        if primary_key not in SALES_COLUMNS:
            raise ValueError(f"Primary key '{primary_key}' is not a sales column")

        column_defs = [
            sql.SQL("{} {}").format(sql.Identifier(column), sql.SQL(SALES_COLUMN_TYPES[column]))
            for column in SALES_COLUMNS
        ]
        column_defs.append(sql.SQL("PRIMARY KEY ({})").format(sql.Identifier(primary_key)))

        return sql.SQL("CREATE TABLE {} ({})").format(
            table_identifier(table),
            sql.SQL(", ").join(column_defs),
        )

    @staticmethod
    def drop_table_sql(table: str) -> sql.Composed:
        return sql.SQL("DROP TABLE IF EXISTS {}").format(table_identifier(table))

    def describe_table(self, table: str) -> list[dict[str, Any]]:
        """
        Get column names and data types of a table.

        Args:
            table: Table name ("table" or "schema.table")

        Returns:
            List of {"column_name", "data_type", "is_nullable"} in column order
        """
        schema, _, name = table.rpartition(".")
        query = """
            SELECT column_name, data_type, is_nullable
            FROM information_schema.columns
            WHERE table_name = %s AND table_schema = COALESCE(NULLIF(%s, ''), current_schema())
            ORDER BY ordinal_position
        """
        return self.pool.execute_query(query, (name, schema))

    def get_primary_key(self, table: str) -> list[str]:
        """
        Get the primary-key columns of a table.

        Args:
            table: Table name

        Returns:
            Column names in key order (empty if the table has no primary key)
        """
        query = """
            SELECT a.attname AS column_name
            FROM pg_index i
            JOIN pg_attribute a ON a.attrelid = i.indrelid AND a.attnum = ANY(i.indkey)
            WHERE i.indrelid = %s::regclass AND i.indisprimary
            ORDER BY a.attnum
        """
        rows = self.pool.execute_query(query, (table,))
        return [row["column_name"] for row in rows]

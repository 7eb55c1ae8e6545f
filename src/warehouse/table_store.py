"""
PostgreSQL table adapter for the cleaning pipeline.

Reads the raw table with a plain SELECT and writes the cleaned, typed
table back in a single transaction.
"""

from typing import Any

from psycopg import sql

from src.core.models import SALES_COLUMNS
from src.observability.logger import get_logger
from src.utils.validation import validate_table_name

from .connection import DatabaseConnectionPool
from .record_store import RecordStore
from .schema_mgmt import SchemaManager, table_identifier

logger = get_logger(__name__)


class PostgresRecordStore(RecordStore):
    """
    Loads and saves sales records in a PostgreSQL table.

    save() drops and recreates the table with the typed schema and
    primary key, then inserts every row, all inside one transaction:
    either the whole cleaned table is visible or nothing changed.
    """

    def __init__(
        self,
        pool: DatabaseConnectionPool,
        table: str,
        primary_key: str = "transaction_id"
    ):
        """
        Initialize table store.

        Args:
            pool: Database connection pool
            table: Table name ("table" or "schema.table")
            primary_key: Primary key column of the written table
        """
        self.pool = pool
        self.table = validate_table_name(table)
        self.primary_key = primary_key
        self.schema_manager = SchemaManager(pool)

    @property
    def name(self) -> str:
        return self.table

    def load(self) -> list[dict[str, Any]]:
        """
        Read every row of the table.

        Returns:
            List of dictionaries (one per row)
        """
        query = sql.SQL("SELECT * FROM {}").format(table_identifier(self.table))
        with self.pool.get_cursor() as cur:
            cur.execute(query)
            rows = cur.fetchall()

        logger.info(f"Loaded {len(rows)} rows from {self.table}")
        return [dict(row) for row in rows]

    def save(self, records: list[dict[str, Any]]) -> int:
        """
        Replace the table with the cleaned records.

        Args:
            records: Cleaned rows

        Returns:
            Number of rows written

        Raises:
            psycopg.Error: If any statement fails (the transaction is rolled back)
        """
        insert = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
            table_identifier(self.table),
            sql.SQL(", ").join(sql.Identifier(column) for column in SALES_COLUMNS),
            sql.SQL(", ").join(sql.Placeholder() * len(SALES_COLUMNS)),
        )
        rows = [tuple(record.get(column) for column in SALES_COLUMNS) for record in records]

        with self.pool.get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    cur.execute(SchemaManager.drop_table_sql(self.table))
                    cur.execute(SchemaManager.create_table_sql(self.table, self.primary_key))
                    if rows:
                        cur.executemany(insert, rows)

        logger.info(f"Wrote {len(rows)} rows to {self.table}")
        return len(rows)

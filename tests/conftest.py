"""
Pytest configuration and fixtures for retail-sales-cleaning tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
import shutil
from typing import Generator

import pytest

# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers or a JVM"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that run the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session():
    """
    Create a Spark session for testing with local mode

    Yields:
        SparkSession configured for local testing
    """
    if not (os.getenv("JAVA_HOME") or shutil.which("java")):
        pytest.skip("Spark tests require a Java runtime")

    from pyspark.sql import SparkSession

    spark = (
        SparkSession.builder
        .appName("retail-sales-cleaning-test")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.driver.memory", "1g")
        .config("spark.ui.enabled", "false")  # Disable UI for tests
        .config("spark.sql.warehouse.dir", "/tmp/spark-warehouse")
        .getOrCreate()
    )

    # Set log level to WARN to reduce test output noise
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    # Cleanup
    spark.stop()


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container():
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_pipeline",
        password="test_password",
        dbname="test_datawarehouse",
        driver=None,
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available for PostgreSQL tests: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def db_pool(postgres_container):
    """
    Open a connection pool against the test container

    Args:
        postgres_container: PostgreSQL container fixture

    Yields:
        Open DatabaseConnectionPool
    """
    from src.warehouse.connection import DatabaseConnectionPool

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_datawarehouse",
        user="test_pipeline",
        password="test_password",
        min_size=1,
        max_size=4,
    )
    pool.open()
    yield pool
    pool.close()


@pytest.fixture(scope="function")
def raw_sales_table(db_pool) -> Generator[str, None, None]:
    """
    Create an untyped raw_sales table loaded with dirty_records

    Yields:
        Table name
    """
    from src.core.models import SALES_COLUMNS

    columns = ", ".join(f"{column} TEXT" for column in SALES_COLUMNS)
    placeholders = ", ".join(["%s"] * len(SALES_COLUMNS))

    db_pool.execute_command("DROP TABLE IF EXISTS raw_sales")
    db_pool.execute_command(f"CREATE TABLE raw_sales ({columns})")
    db_pool.execute_batch(
        f"INSERT INTO raw_sales ({', '.join(SALES_COLUMNS)}) VALUES ({placeholders})",
        [tuple(record[column] for column in SALES_COLUMNS) for record in dirty_record_rows()],
    )

    yield "raw_sales"

    db_pool.execute_command("DROP TABLE IF EXISTS raw_sales")


# =======================
# DATA FIXTURES
# =======================

def make_record(**overrides) -> dict:
    """Build a clean raw (text) record, overriding selected fields."""
    record = {
        "transaction_id": "2000",
        "customer_id": "1",
        "customer_name": "Jane Doe",
        "email": "jane@example.com",
        "purchase_date": "14-02-2024",
        "product_id": "300",
        "category": "Books",
        "price": "20.00",
        "quantity": "1",
        "total_amount": "20.00",
        "payment_method": "Cash",
        "delivery_status": "Delivered",
        "customer_address": "12 High Street",
    }
    record.update(overrides)
    return record


def dirty_record_rows() -> list[dict]:
    """Raw rows exhibiting every kind of defect the pipeline repairs."""
    return [
        make_record(transaction_id="1001", customer_id="5", category="Electronics",
                    price="10.00", quantity="-3", total_amount=""),
        make_record(transaction_id="1001", customer_id="5", category="Electronics",
                    price="10.00", quantity="-3", total_amount=""),
        make_record(transaction_id="1002", customer_id="6", category="Electronics",
                    price="30.00", quantity="2", total_amount="60.00",
                    payment_method="creditcard"),
        make_record(transaction_id="1003", customer_id="7", category="Electronics",
                    price="", quantity="1", total_amount="", payment_method=""),
        make_record(transaction_id="1004", customer_id="8", category="Books",
                    price="12.50", quantity="2", total_amount="99.99",
                    purchase_date="30-02-2024", email="user-example.com"),
        make_record(transaction_id="1005", customer_id="9", category="",
                    price="7.00", quantity="1", total_amount="7.00",
                    customer_name="", delivery_status="", customer_address=""),
        make_record(transaction_id="1006", customer_id="10", category="Books",
                    price="-4.00", quantity="2", total_amount="-8.00",
                    payment_method="CC", email="user@example.com"),
    ]


@pytest.fixture
def record_factory():
    """Factory building raw records with selected fields overridden."""
    return make_record


@pytest.fixture
def dirty_records() -> list[dict]:
    """Fresh copy of the dirty raw rows."""
    return dirty_record_rows()


@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return os.path.join(os.path.dirname(__file__), "fixtures")


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture(scope="session", autouse=True)
def test_env_vars():
    """
    Set test environment variables

    This fixture loads config/test.env when present
    """
    from dotenv import load_dotenv

    env_path = os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "config",
        "test.env"
    )

    if os.path.exists(env_path):
        load_dotenv(env_path, override=True)

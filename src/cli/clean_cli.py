"""
Command-line interface for the cleaning pipeline.

Usage:
    python -m src.cli.clean_cli run --source <store> [--target <store>] [options]

Stores are written as <kind>:<location>:
    csv:data/raw_sales.csv      json:data/raw_sales.json
    parquet:data/raw_sales      table:public.raw_sales
"""

import argparse
import os
import sys

from dotenv import load_dotenv

from src.batch.pipeline import DEFAULT_RULES_PATH, CleaningPipeline
from src.observability.logger import configure_logging, get_logger
from src.utils.validation import ValidationError, validate_file_path
from src.warehouse.connection import DatabaseConnectionPool
from src.warehouse.record_store import RecordStore

logger = get_logger(__name__)

STORE_KINDS = ("csv", "json", "parquet", "table")


def parse_store(spec: str) -> tuple[str, str]:
    """
    Split a store argument into kind and location.

    Args:
        spec: Store argument, e.g. "csv:data/sales.csv"

    Returns:
        (kind, location)

    Raises:
        ValidationError: If the kind is unknown or the location is empty
    """
    kind, sep, location = spec.partition(":")
    if not sep or kind not in STORE_KINDS or not location:
        raise ValidationError(
            f"Invalid store '{spec}'. Expected one of {', '.join(k + ':<location>' for k in STORE_KINDS)}"
        )
    if kind != "table":
        location = validate_file_path(location)
    return kind, location


def create_spark_session(app_name: str = "SalesCleaning"):
    """
    Create Spark session for file stores.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    from pyspark.sql import SparkSession

    spark = SparkSession.builder \
        .appName(app_name) \
        .master("local[*]") \
        .config("spark.sql.adaptive.enabled", "true") \
        .config("spark.sql.adaptive.coalescePartitions.enabled", "true") \
        .getOrCreate()

    return spark


def build_store(kind: str, location: str, args, resources: dict) -> RecordStore:
    """
    Build the record store for a parsed store argument.

    Spark sessions and database pools are created on first use and kept in
    `resources` so the caller can close them.
    """
    if kind == "table":
        from src.warehouse.table_store import PostgresRecordStore

        if "pool" not in resources:
            pool = DatabaseConnectionPool(
                host=args.db_host,
                port=args.db_port,
                database=args.db_name,
                user=args.db_user,
                password=args.db_password
            )
            pool.open()
            resources["pool"] = pool
        return PostgresRecordStore(resources["pool"], location, primary_key=args.primary_key)

    from src.batch.file_store import SparkFileRecordStore

    if "spark" not in resources:
        resources["spark"] = create_spark_session()
    return SparkFileRecordStore(resources["spark"], location, file_format=kind)


def run_command(args):
    """
    Execute cleaning run command.

    Args:
        args: Command-line arguments
    """
    resources: dict = {}

    try:
        source_kind, source_location = parse_store(args.source)
        target_kind, target_location = parse_store(args.target or args.source)

        if source_kind != "table" and not os.path.exists(source_location):
            logger.error(f"Input file not found: {source_location}")
            sys.exit(1)

        source = build_store(source_kind, source_location, args, resources)
        target = build_store(target_kind, target_location, args, resources)

        pipeline = CleaningPipeline(rules_path=args.rules)

        if args.dry_run:
            logger.info("DRY RUN MODE: No data will be written")

        report = pipeline.run_store(source, target, dry_run=args.dry_run)

        logger.info("=" * 60)
        logger.info("CLEANING COMPLETE")
        logger.info("=" * 60)
        logger.info(f"Input records: {report.input_records}")
        logger.info(f"Output records: {report.output_records}")
        for stage, rows in report.as_dict().items():
            logger.info(f"  {stage}: {rows} rows affected")
        logger.info(f"Completeness: {report.completeness_pct():.2f}%")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"Error during cleaning run: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if "pool" in resources:
            resources["pool"].close()
        if "spark" in resources:
            resources["spark"].stop()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Retail sales data cleaning pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Clean a CSV file into an output directory
  python -m src.cli.clean_cli run --source csv:data/raw_sales.csv --target csv:data/clean_sales

  # Clean a table in place
  python -m src.cli.clean_cli run --source table:raw_sales

  # Load a CSV into a typed table with custom rules
  python -m src.cli.clean_cli run --source csv:data/raw_sales.csv --target table:sales2 \\
      --rules config/custom_rules.yaml

  # Dry run (clean and report, don't write)
  python -m src.cli.clean_cli run --source table:raw_sales --dry-run
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Clean a dataset")
    run_parser.add_argument(
        "--source",
        required=True,
        help="Store to read raw records from (csv:, json:, parquet: or table:)"
    )
    run_parser.add_argument(
        "--target",
        help="Store to write cleaned records to (default: overwrite the source)"
    )
    run_parser.add_argument(
        "--rules",
        default=DEFAULT_RULES_PATH,
        help=f"Path to cleaning rules YAML file (default: {DEFAULT_RULES_PATH})"
    )
    run_parser.add_argument(
        "--primary-key",
        default="transaction_id",
        help="Primary key of written tables (default: transaction_id)"
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Clean and report without writing"
    )
    run_parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        default=None,
        help="Log output format (default: env LOG_FORMAT or json)"
    )

    # Database connection arguments (default to DB_* environment variables)
    run_parser.add_argument("--db-host", default=None, help="Database host")
    run_parser.add_argument("--db-port", type=int, default=None, help="Database port")
    run_parser.add_argument("--db-name", default=None, help="Database name")
    run_parser.add_argument("--db-user", default=None, help="Database user")
    run_parser.add_argument("--db-password", default=None, help="Database password")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.log_format:
        configure_logging(format_type=args.log_format)

    if args.command == "run":
        run_command(args)


if __name__ == "__main__":
    main()

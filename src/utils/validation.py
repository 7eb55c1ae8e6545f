"""
Input validation utilities for the cleaning pipeline.

Validates the names callers hand to the record stores and CLI (table
names, file paths, source ids) before they reach SQL or the filesystem.
"""

import re


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


def validate_source_id(source_id: str, field_name: str = "source_id") -> str:
    """
    Validate a source ID.

    Source IDs must be non-empty strings containing only alphanumeric
    characters, hyphens, underscores and dots.

    Args:
        source_id: The source ID to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated source ID (stripped of whitespace)

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_source_id("raw_sales")
        'raw_sales'
        >>> validate_source_id("sales-2024.csv")
        'sales-2024.csv'
    """
    if not source_id or not isinstance(source_id, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    source_id = source_id.strip()

    if not source_id:
        raise ValidationError(f"{field_name} cannot be empty or whitespace-only")

    if not re.match(r'^[a-zA-Z0-9_\-\.]+$', source_id):
        raise ValidationError(
            f"{field_name} contains invalid characters. "
            "Only alphanumeric, hyphens, underscores, and dots are allowed."
        )

    if len(source_id) > 255:
        raise ValidationError(f"{field_name} exceeds maximum length of 255 characters")

    return source_id


def sanitize_sql_identifier(identifier: str, field_name: str = "identifier") -> str:
    """
    Sanitize an SQL identifier (table name, column name, etc.).

    This is a strict validation that only allows safe SQL identifiers.

    Args:
        identifier: The identifier to sanitize
        field_name: Name of the field (for error messages)

    Returns:
        The validated identifier

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> sanitize_sql_identifier("sales2")
        'sales2'
        >>> sanitize_sql_identifier("table; DROP TABLE users;")  # doctest: +SKIP
        ValidationError: identifier contains invalid characters
    """
    if not identifier or not isinstance(identifier, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    identifier = identifier.strip()

    # SQL identifiers: alphanumeric and underscores only, must start with letter or underscore
    if not re.match(r'^[a-zA-Z_][a-zA-Z0-9_]*$', identifier):
        raise ValidationError(
            f"{field_name} contains invalid characters. "
            "SQL identifiers must start with a letter or underscore and contain only "
            "alphanumeric characters and underscores."
        )

    if len(identifier) > 63:  # PostgreSQL limit
        raise ValidationError(f"{field_name} exceeds PostgreSQL maximum length of 63 characters")

    reserved_keywords = {
        "select", "insert", "update", "delete", "drop", "create", "alter",
        "table", "database", "index", "view", "user", "grant", "revoke"
    }
    if identifier.lower() in reserved_keywords:
        raise ValidationError(
            f"{field_name} '{identifier}' is a reserved SQL keyword. "
            "Please use a different name."
        )

    return identifier


def validate_table_name(table: str, field_name: str = "table") -> str:
    """
    Validate a table name, optionally schema-qualified.

    Args:
        table: "table" or "schema.table"
        field_name: Name of the field (for error messages)

    Returns:
        The validated table name

    Raises:
        ValidationError: If either part is not a safe identifier

    Examples:
        >>> validate_table_name("public.sales2")
        'public.sales2'
    """
    if not table or not isinstance(table, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    parts = table.strip().split(".")
    if len(parts) > 2:
        raise ValidationError(f"{field_name} must be 'table' or 'schema.table'")

    return ".".join(sanitize_sql_identifier(part, field_name) for part in parts)


def validate_file_path(file_path: str, field_name: str = "file_path", allow_wildcards: bool = False) -> str:
    """
    Validate a file path for security.

    Prevents path traversal attacks and ensures the path is reasonable.

    Args:
        file_path: The file path to validate
        field_name: Name of the field (for error messages)
        allow_wildcards: Whether to allow wildcards (* and ?) in the path

    Returns:
        The validated file path (stripped of whitespace)

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_file_path("/data/raw_sales.csv")
        '/data/raw_sales.csv'
        >>> validate_file_path("../../../etc/passwd")  # doctest: +SKIP
        ValidationError: file_path contains path traversal characters
    """
    if not file_path or not isinstance(file_path, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    file_path = file_path.strip()

    if not file_path:
        raise ValidationError(f"{field_name} cannot be empty or whitespace-only")

    if ".." in file_path:
        raise ValidationError(f"{field_name} contains path traversal characters (..)")

    if "\x00" in file_path:
        raise ValidationError(f"{field_name} contains null bytes")

    if not allow_wildcards and ("*" in file_path or "?" in file_path):
        raise ValidationError(
            f"{field_name} contains wildcards (* or ?). "
            "If this is intentional, set allow_wildcards=True."
        )

    if len(file_path) > 4096:  # Linux PATH_MAX
        raise ValidationError(f"{field_name} exceeds maximum length of 4096 characters")

    return file_path

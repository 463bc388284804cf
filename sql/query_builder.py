"""
======================================================
Catalog and server metadata queries for convergence.
======================================================

Read-only lookups used by the existence and version probes. Like the DDL
module these functions only build SQL text; execution happens in
convergence.probes.

Functions:
    check_database_exists_sql: Lookup of a database in pg_database
    server_version_num_sql: Numeric server version (PostgreSQL 8.2+)
    server_version_string_sql: Human-readable version banner
"""


def check_database_exists_sql(database_name: str) -> str:
    """
    Generate SQL to check if a database exists.

    Args:
        database_name: Name of the database to check

    Returns:
        SQL query returning one row per matching database, nothing if absent
    """
    return f"SELECT * FROM pg_database WHERE datname = '{database_name}'"


def server_version_num_sql() -> str:
    """Generate SQL returning the server version as an integer-like string (e.g. '90605')."""
    return "SHOW server_version_num"


def server_version_string_sql() -> str:
    """Generate SQL returning the version banner, e.g. 'PostgreSQL 8.1.23 on x86_64-...'."""
    return "SELECT version()"

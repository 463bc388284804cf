"""
=======================================================
SQL rendering package for database convergence.
=======================================================

Pure functions that build the SQL text issued by the convergence layer.
Nothing in this package opens a connection.

The package follows a clear organization:
    - ddl.py: CREATE DATABASE / DROP DATABASE statements
    - query_builder.py: catalog and server version lookups

Example:
    >>> from sql.ddl import create_database_sql, drop_database_sql
    >>> from sql.query_builder import check_database_exists_sql
"""

__version__ = "1.0.0"
__all__ = [
    # DDL functions
    'create_database_sql', 'drop_database_sql',
    # Metadata queries
    'check_database_exists_sql', 'server_version_num_sql', 'server_version_string_sql',
]

from .ddl import create_database_sql, drop_database_sql
from .query_builder import (
    check_database_exists_sql,
    server_version_num_sql,
    server_version_string_sql,
)

"""
==========================================================
Data Definition Language (DDL) for database convergence.
==========================================================

Renders the CREATE DATABASE and DROP DATABASE statements issued by the
convergence layer. Every function here is pure: the same descriptor always
renders byte-identical SQL.

Quoting rules:
    - Database name and owner are wrapped in double quotes
    - Encoding (unless the DEFAULT keyword) and collation are single quoted
    - Template, tablespace and connection limit are emitted bare
    - Embedded quote characters are NOT escaped; callers must not pass
      untrusted names

Functions:
    create_database_sql: Generate CREATE DATABASE from a ResourceDescriptor
    drop_database_sql: Generate DROP DATABASE from a ResourceDescriptor

Example:
    >>> from models.resource_models import ResourceDescriptor
    >>> from sql.ddl import create_database_sql
    >>>
    >>> descriptor = ResourceDescriptor(
    ...     database_name='app_db', owner='app_user', encoding='UTF8'
    ... )
    >>> print(create_database_sql(descriptor))
    CREATE DATABASE "app_db" ENCODING = 'UTF8' OWNER = "app_user"
"""

from typing import List

from models.resource_models import ResourceDescriptor

DEFAULT_ENCODING_KEYWORD = 'DEFAULT'


def _encoding_literal(encoding: str) -> str:
    if encoding == DEFAULT_ENCODING_KEYWORD:
        return encoding
    return f"'{encoding}'"


def create_database_sql(descriptor: ResourceDescriptor) -> str:
    """
    Generate CREATE DATABASE statement.

    Clauses are appended only for fields set on the descriptor, always in
    the order template, encoding, tablespace, collation, connection limit,
    owner.

    Note: CREATE DATABASE cannot run inside a transaction block, so the
    statement must be executed on an AUTOCOMMIT connection.

    Args:
        descriptor: Desired database state

    Returns:
        SQL CREATE DATABASE statement (no trailing semicolon)
    """
    sql_parts: List[str] = [f'CREATE DATABASE "{descriptor.database_name}"']

    if descriptor.template:
        sql_parts.append(f"TEMPLATE = {descriptor.template}")

    if descriptor.encoding:
        sql_parts.append(f"ENCODING = {_encoding_literal(descriptor.encoding)}")

    if descriptor.tablespace:
        sql_parts.append(f"TABLESPACE = {descriptor.tablespace}")

    if descriptor.collation:
        sql_parts.append(
            f"LC_CTYPE = '{descriptor.collation}' LC_COLLATE = '{descriptor.collation}'"
        )

    # 0 is a meaningful limit, so test against None
    if descriptor.connection_limit is not None:
        sql_parts.append(f"CONNECTION LIMIT = {descriptor.connection_limit}")

    if descriptor.owner:
        sql_parts.append(f'OWNER = "{descriptor.owner}"')

    return " ".join(sql_parts)


def drop_database_sql(descriptor: ResourceDescriptor) -> str:
    """
    Generate DROP DATABASE statement.

    Args:
        descriptor: Desired database state (only the name is used)

    Returns:
        SQL DROP DATABASE statement
    """
    return f'DROP DATABASE "{descriptor.database_name}"'

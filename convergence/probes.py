"""
=====================================================
Read-only probes against a PostgreSQL server.
=====================================================

Existence and version checks used by the convergence controller. Each probe
opens its own administrative session and releases it before returning,
on success and on failure.

Functions:
    database_exists: Is a database present in pg_database?
    server_version: Server version as a server_version_num style integer
    version_greater_than: Compare the server version to a threshold

Example:
    >>> from convergence.probes import database_exists, version_greater_than
    >>>
    >>> if database_exists(factory, 'app_db'):
    ...     print("app_db is present")
    >>> if version_greater_than(factory, 90100):
    ...     print("server is newer than 9.1")
"""

import logging
import re

from sql.query_builder import (
    check_database_exists_sql,
    server_version_num_sql,
    server_version_string_sql,
)
from utils.database_utils import (
    ADMIN_DATABASE,
    ConnectionFactory,
    DatabaseOperationError,
    QueryError,
    admin_session,
)

logger = logging.getLogger(__name__)

_VERSION_TOKEN = re.compile(r'^(\d+)(?:\.(\d+))?(?:\.(\d+))?')


class VersionError(DatabaseOperationError):
    """Exception raised when no version detection strategy succeeds."""
    pass


def database_exists(factory: ConnectionFactory, database_name: str) -> bool:
    """
    Check whether ``database_name`` exists on the server.

    The lookup runs against the administrative database (template1, unless
    the connection overrides it).

    Args:
        factory: Factory used to open the session
        database_name: Database to look for

    Returns:
        True if at least one catalog row matches

    Raises:
        ConnectError: If the session cannot be opened
        QueryError: If the catalog lookup fails
    """
    logger.debug(f"Checking if database {database_name} exists")
    with admin_session(factory, ADMIN_DATABASE) as handle:
        rows = handle.execute(check_database_exists_sql(database_name)).fetchall()

    exists = len(rows) != 0
    if exists:
        logger.debug(f"Database {database_name} exists")
    else:
        logger.debug(f"Database {database_name} does not exist")
    return exists


def parse_version_banner(banner: str) -> int:
    """
    Convert a ``SELECT version()`` banner into a server_version_num integer.

    The version is the second whitespace-separated token of the banner.
    Servers before 10 use three components (8.1.23 -> 80123), later ones
    use two (16.2 -> 160002).

    Args:
        banner: Output of ``SELECT version()``

    Returns:
        Integer comparable with ``SHOW server_version_num`` output

    Raises:
        ValueError: If the banner has no parseable version token
    """
    fields = banner.split()
    if len(fields) < 2:
        raise ValueError(f"Unrecognised version banner: {banner!r}")

    match = _VERSION_TOKEN.match(fields[1])
    if not match:
        raise ValueError(f"Unrecognised version token {fields[1]!r} in {banner!r}")

    major = int(match.group(1))
    minor = int(match.group(2) or 0)
    patch = int(match.group(3) or 0)
    if major >= 10:
        return major * 10000 + minor
    return major * 10000 + minor * 100 + patch


def _first_value(factory: ConnectionFactory, sql: str):
    with admin_session(factory, ADMIN_DATABASE) as handle:
        rows = handle.execute(sql).fetchall()
    if not rows:
        raise ValueError(f"No rows returned by [{sql}]")
    return rows[0][0]


def server_version(factory: ConnectionFactory) -> int:
    """
    Determine the server version number.

    Tries ``SHOW server_version_num`` first and falls back to parsing
    ``SELECT version()`` when that query fails or returns garbage. Each
    attempt uses its own session. A connection failure on either attempt
    is not a reason to fall back: it propagates as ConnectError, never as
    VersionError.

    Args:
        factory: Factory used to open sessions

    Returns:
        Version as an integer, e.g. 90605 or 160002

    Raises:
        ConnectError: If no session can be opened
        VersionError: If both strategies fail
    """
    try:
        value = _first_value(factory, server_version_num_sql())
        version = int(value)
        logger.debug(f"Server version_num is {version}")
        return version
    except (QueryError, ValueError, TypeError) as e:
        # Could be an older server without server_version_num
        logger.debug(f"server_version_num unavailable ({e}), falling back to version()")

    try:
        banner = _first_value(factory, server_version_string_sql())
        version = parse_version_banner(str(banner))
    except (QueryError, ValueError) as e:
        raise VersionError(f"Unable to determine server version: {e}") from e

    logger.debug(f"Server version parsed from banner is {version}")
    return version


def version_greater_than(factory: ConnectionFactory, threshold: int) -> bool:
    """
    Verify the server's version number is greater than ``threshold``.

    Args:
        factory: Factory used to open sessions
        threshold: server_version_num style integer, e.g. 90100

    Returns:
        True if the server version is strictly greater
    """
    return server_version(factory) > threshold

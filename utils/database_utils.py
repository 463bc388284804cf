"""
==================================================
Administrative connection handling for PostgreSQL.
==================================================

Opens the short-lived administrative sessions used by the convergence
layer and guarantees they are released.

There is no connection pool: every probe or statement opens its
own session through ConnectionFactory.open() and releases it when the
admin_session() block exits, whatever the outcome. Release errors are logged
and dropped so that they never replace the error that caused the exit.

Key Features:
    - Eager driver check (require_driver) with an actionable message
    - Target database resolution (explicit override beats action default)
    - AUTOCOMMIT sessions, required for CREATE/DROP DATABASE
    - Scoped acquisition via the admin_session() context manager
    - Typed errors: ConnectError, QueryError, MissingDependencyError

Example:
    >>> from models.resource_models import ConnectionInfo
    >>> from utils.database_utils import ConnectionFactory, admin_session
    >>>
    >>> factory = ConnectionFactory(ConnectionInfo(host='localhost', password='pwd'))
    >>> with admin_session(factory) as handle:
    ...     rows = handle.execute("SELECT 1").fetchall()
"""

import logging
from contextlib import contextmanager
from importlib.util import find_spec
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, CursorResult, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from models.resource_models import ConnectionInfo

logger = logging.getLogger(__name__)

ADMIN_DATABASE = 'template1'
DRIVER_MODULE = 'psycopg2'
DRIVER_DISTRIBUTION = 'psycopg2-binary'


class DatabaseOperationError(Exception):
    """Base class for errors raised while converging a database."""
    pass


class ConnectError(DatabaseOperationError):
    """Exception raised when a connection cannot be established or authenticated."""
    pass


class QueryError(DatabaseOperationError):
    """Exception raised when the server rejects a statement or lookup.

    The server message is kept verbatim in the exception text and the
    driver exception is chained as ``__cause__``.
    """
    pass


class MissingDependencyError(DatabaseOperationError):
    """Exception raised when the PostgreSQL driver cannot be imported."""
    pass


def require_driver() -> None:
    """
    Verify the psycopg2 driver is importable.

    Meant to be called once, before any connection is attempted, so that a
    missing driver is reported as such instead of as a connection failure.

    Raises:
        MissingDependencyError: If psycopg2 is not installed
    """
    if find_spec(DRIVER_MODULE) is None:
        raise MissingDependencyError(
            f"Could not load the required '{DRIVER_MODULE}' module. "
            f"Install it with 'pip install {DRIVER_DISTRIBUTION}' "
            f"(or 'pip install -e .', which declares it) before running database actions."
        )


def build_connection_url(connection: ConnectionInfo, database: str) -> URL:
    """
    Build the SQLAlchemy URL for an administrative session.

    Args:
        connection: Connection parameters
        database: Database name to connect to (already resolved)

    Returns:
        SQLAlchemy URL using the psycopg2 driver
    """
    return URL.create(
        drivername=f'postgresql+{DRIVER_MODULE}',
        username=connection.username,
        password=connection.password,
        host=connection.host,
        port=connection.port,
        database=database
    )


class ConnectionHandle:
    """One live administrative session.

    Owns both the connection and the single-use engine that produced it;
    close() releases both.

    Attributes:
        database: Name of the database this session is connected to
    """

    def __init__(self, engine: Engine, connection: Connection, database: str):
        self._engine = engine
        self._connection = connection
        self.database = database
        self.closed = False

    def execute(self, sql: str) -> CursorResult:
        """
        Execute a raw SQL statement.

        The statement is sent to the driver as-is, with no bind parameter
        parsing, so literal colons and percent signs are safe.

        Args:
            sql: Statement text

        Returns:
            Result of the statement

        Raises:
            QueryError: If the server rejects the statement
        """
        try:
            return self._connection.execution_options(no_parameters=True).exec_driver_sql(sql)
        except SQLAlchemyError as e:
            raise QueryError(f"Query failed on database {self.database}: {e}") from e

    def close(self) -> None:
        """Close the connection and dispose of its engine."""
        self.closed = True
        try:
            self._connection.close()
        finally:
            self._engine.dispose()


def release_quietly(handle: Optional[ConnectionHandle]) -> None:
    """
    Release a handle, discarding any error raised while doing so.

    A session that already failed often cannot close cleanly; that
    secondary error is logged and never propagated.

    Args:
        handle: Handle to release, or None
    """
    if handle is None:
        return
    try:
        handle.close()
    except Exception as e:
        logger.warning(f"Ignoring error while closing connection to {handle.database}: {e}")


class ConnectionFactory:
    """Opens administrative sessions for one ConnectionInfo.

    The password must already be resolved by the caller; the factory never
    consults global configuration.

    Attributes:
        connection: Connection parameters used for every session

    Example:
        >>> factory = ConnectionFactory(ConnectionInfo(host='db', password='pwd'))
        >>> handle = factory.open('template1')
        >>> handle.close()
    """

    def __init__(self, connection: ConnectionInfo, check_driver: bool = True):
        """
        Initialize the factory.

        Args:
            connection: Connection parameters
            check_driver: Run require_driver() immediately

        Raises:
            MissingDependencyError: If check_driver is set and psycopg2 is missing
        """
        if check_driver:
            require_driver()
        self.connection = connection

    def resolve_database(self, database: str) -> str:
        """Return the database actually used when an operation asks for ``database``."""
        return self.connection.target_database(database)

    def open(self, database: str = ADMIN_DATABASE) -> ConnectionHandle:
        """
        Open a new session. The caller must release it.

        Args:
            database: Database the operation wants; overridden by
                ``connection.database`` when that is set

        Returns:
            Open ConnectionHandle

        Raises:
            ConnectError: If the server is unreachable or rejects the login
        """
        dbname = self.resolve_database(database)
        conn = self.connection
        logger.debug(
            f"Connecting to database {dbname} on {conn.host}:{conn.port} as {conn.username}"
        )

        connect_args = {}
        if conn.connect_timeout is not None:
            connect_args['connect_timeout'] = conn.connect_timeout

        try:
            engine = create_engine(
                build_connection_url(conn, dbname),
                isolation_level='AUTOCOMMIT',
                poolclass=NullPool,
                connect_args=connect_args,
                echo=False
            )
        except SQLAlchemyError as e:
            raise ConnectError(f"Invalid connection settings for {dbname}: {e}") from e

        try:
            connection = engine.connect()
        except SQLAlchemyError as e:
            engine.dispose()
            logger.error(f"Failed to connect to {dbname} on {conn.host}:{conn.port}: {e}")
            raise ConnectError(
                f"Could not connect to database {dbname} on {conn.host}:{conn.port} "
                f"as {conn.username}: {e}"
            ) from e

        return ConnectionHandle(engine, connection, dbname)


@contextmanager
def admin_session(factory: ConnectionFactory, database: str = ADMIN_DATABASE) -> Iterator[ConnectionHandle]:
    """
    Open a session for the duration of a ``with`` block.

    The handle is released on every exit path; release errors are swallowed
    by release_quietly() so the original exception, if any, propagates.

    Args:
        factory: Factory used to open the session
        database: Database the operation targets (default template1)

    Yields:
        Open ConnectionHandle

    Raises:
        ConnectError: If the session cannot be opened
    """
    handle = factory.open(database)
    try:
        yield handle
    finally:
        release_quietly(handle)

"""
===========================================================
Desired-state models for database convergence
===========================================================

Value objects passed into the convergence layer by its callers. They are
built before an action runs and thrown away afterwards; nothing in the
convergence layer stores them.

Models:
    ConnectionInfo: Where and as whom to connect
    ResourceDescriptor: The database the caller wants to exist (or not)
    Action: The closed set of convergence actions
    ConvergenceResult: Outcome of a single action

Example:
    >>> from models.resource_models import ConnectionInfo, ResourceDescriptor
    >>>
    >>> descriptor = ResourceDescriptor(
    ...     database_name='app_db',
    ...     owner='app_user',
    ...     encoding='UTF8',
    ...     connection=ConnectionInfo(host='localhost', password='secret')
    ... )
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

DEFAULT_PORT = 5432
DEFAULT_USERNAME = 'postgres'


class DescriptorError(ValueError):
    """Raised when a descriptor cannot be used for the requested action."""
    pass


class Action(str, Enum):
    """Convergence actions supported by DatabaseConverger."""

    CREATE = 'create'
    DROP = 'drop'
    QUERY = 'query'

    @classmethod
    def parse(cls, value: Union['Action', str]) -> 'Action':
        """Coerce an action name such as ``'create'`` into an Action.

        Raises:
            DescriptorError: If the name is not a known action
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ', '.join(a.value for a in cls)
            raise DescriptorError(f"Unknown action '{value}' (expected one of: {valid})") from None


@dataclass(frozen=True)
class ConnectionInfo:
    """Connection parameters for the administrative session.

    Attributes:
        host: Server hostname; None lets the driver use its local default
        port: Server port (default 5432)
        username: Role to connect as (default 'postgres')
        password: Already-resolved password, or None
        database: Explicit target database overriding the action default
        connect_timeout: Optional driver connect timeout in seconds
    """

    host: Optional[str] = None
    port: int = DEFAULT_PORT
    username: str = DEFAULT_USERNAME
    password: Optional[str] = None
    database: Optional[str] = None
    connect_timeout: Optional[int] = None

    def target_database(self, default: str) -> str:
        """Return the database to connect to for an operation defaulting to ``default``."""
        return self.database if self.database else default


@dataclass(frozen=True)
class ResourceDescriptor:
    """Desired state of a single PostgreSQL database.

    Only ``database_name`` is required. Optional fields left as None are
    omitted from generated statements.

    Attributes:
        database_name: Name of the database to converge
        template: Template database to copy from
        encoding: Character encoding; 'DEFAULT' is emitted as a keyword
        tablespace: Default tablespace for the new database
        collation: Locale used for both LC_CTYPE and LC_COLLATE
        connection_limit: Maximum concurrent connections
        owner: Role that will own the database
        sql_query: Statement run by the query action
        connection: Connection parameters
    """

    database_name: str
    template: Optional[str] = None
    encoding: Optional[str] = None
    tablespace: Optional[str] = None
    collation: Optional[str] = None
    connection_limit: Optional[int] = None
    owner: Optional[str] = None
    sql_query: Optional[str] = None
    connection: ConnectionInfo = field(default_factory=ConnectionInfo)

    def __post_init__(self):
        if not isinstance(self.database_name, str) or not self.database_name.strip():
            raise DescriptorError("database_name must be a non-empty string")
        if self.connection_limit is not None:
            if isinstance(self.connection_limit, bool) or not isinstance(self.connection_limit, int):
                raise DescriptorError(
                    f"connection_limit must be an integer, got {self.connection_limit!r}"
                )
            # -1 is PostgreSQL's "no limit"
            if self.connection_limit < -1:
                raise DescriptorError(
                    f"connection_limit must be >= -1, got {self.connection_limit}"
                )

    def validate_for(self, action: Action) -> None:
        """Check that the fields ``action`` needs are present.

        Raises:
            DescriptorError: If the query action has no sql_query
        """
        if action is Action.QUERY and not self.sql_query:
            raise DescriptorError(
                f"sql_query is required for the query action on {self.database_name}"
            )

    def __str__(self) -> str:
        return f"database[{self.database_name}]"


@dataclass
class ConvergenceResult:
    """Outcome of one convergence action.

    Attributes:
        action: Action that was run
        database_name: Database the action targeted
        changed: True if the action changed (or, in dry-run, would change) state
        sql: Statement executed or planned; None when the action was skipped
        executed: True if the statement was actually sent to the server
    """

    action: Action
    database_name: str
    changed: bool
    sql: Optional[str] = None
    executed: bool = False

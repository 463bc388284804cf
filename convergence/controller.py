"""
==================================================
Convergence controller for PostgreSQL databases.
==================================================

Brings a server in line with a ResourceDescriptor. Each action checks the
current state first and only issues a statement when something has to
change, so running the same action twice is safe.

Actions:
    create: CREATE DATABASE when the database is absent
    drop: DROP DATABASE when the database is present
    query: Run descriptor.sql_query inside the database when it is present;
        a missing database is a silent no-op

Every statement runs in its own administrative session that is released
before the action returns. create and drop run against template1, query
runs against the database itself; ConnectionInfo.database overrides both.

There is no transaction around the existence check and the statement.
Concurrent callers racing on the same name will see the server's own
"already exists" / "does not exist" error as a QueryError.

Example:
    >>> from convergence.controller import DatabaseConverger
    >>> from models.resource_models import ResourceDescriptor
    >>>
    >>> converger = DatabaseConverger(
    ...     ResourceDescriptor(database_name='app_db', owner='app_user', encoding='UTF8')
    ... )
    >>> converger.converge('create').changed
    True
    >>> converger.converge('create').changed
    False
"""

import logging
from typing import Optional, Union

from convergence.probes import database_exists, version_greater_than
from models.resource_models import Action, ConvergenceResult, ResourceDescriptor
from sql.ddl import create_database_sql, drop_database_sql
from utils.database_utils import (
    ADMIN_DATABASE,
    ConnectionFactory,
    DatabaseOperationError,
    admin_session,
)

logger = logging.getLogger(__name__)


class DatabaseConverger:
    """Idempotent create/drop/query actions for one database.

    Attributes:
        descriptor: Desired state of the database
        factory: Opens the administrative sessions
        dry_run: When True, report what would change without executing

    Example:
        >>> converger = DatabaseConverger(descriptor, dry_run=True)
        >>> result = converger.drop()
        >>> result.changed, result.executed
        (True, False)
    """

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        factory: Optional[ConnectionFactory] = None,
        dry_run: bool = False
    ):
        """
        Initialize the converger.

        Args:
            descriptor: Desired state of the database
            factory: Session factory; built from descriptor.connection if omitted
            dry_run: Skip mutating statements and only report planned changes

        Raises:
            MissingDependencyError: If no factory is given and psycopg2 is missing
        """
        self.descriptor = descriptor
        self.factory = factory if factory is not None else ConnectionFactory(descriptor.connection)
        self.dry_run = dry_run

    def converge(self, action: Union[Action, str]) -> ConvergenceResult:
        """
        Run one action by name.

        Args:
            action: Action or its name ('create', 'drop', 'query')

        Returns:
            ConvergenceResult describing what happened

        Raises:
            DescriptorError: Unknown action or descriptor unusable for it
            ConnectError: If a session cannot be opened
            QueryError: If a probe or statement fails on the server
        """
        action = Action.parse(action)
        self.descriptor.validate_for(action)

        if action is Action.CREATE:
            return self.create()
        elif action is Action.DROP:
            return self.drop()
        else:
            return self.query()

    def create(self) -> ConvergenceResult:
        """Create the database unless it already exists."""
        name = self.descriptor.database_name
        if database_exists(self.factory, name):
            logger.debug(f"{self.descriptor}: database {name} already exists")
            return ConvergenceResult(Action.CREATE, name, changed=False)

        logger.debug(f"{self.descriptor}: Creating database {name}")
        return self._apply(Action.CREATE, ADMIN_DATABASE, create_database_sql(self.descriptor))

    def drop(self) -> ConvergenceResult:
        """Drop the database if it exists."""
        name = self.descriptor.database_name
        if not database_exists(self.factory, name):
            logger.debug(f"{self.descriptor}: database {name} does not exist")
            return ConvergenceResult(Action.DROP, name, changed=False)

        logger.debug(f"{self.descriptor}: Dropping database {name}")
        return self._apply(Action.DROP, ADMIN_DATABASE, drop_database_sql(self.descriptor))

    def query(self) -> ConvergenceResult:
        """Run sql_query inside the database; do nothing if it is missing."""
        self.descriptor.validate_for(Action.QUERY)
        name = self.descriptor.database_name
        if not database_exists(self.factory, name):
            logger.debug(f"{self.descriptor}: database {name} does not exist, skipping query")
            return ConvergenceResult(Action.QUERY, name, changed=False)

        result = self._apply(Action.QUERY, name, self.descriptor.sql_query)
        if result.executed:
            logger.debug(f"{self.descriptor}: query [{self.descriptor.sql_query}] succeeded")
        return result

    def version_greater_than(self, threshold: int) -> bool:
        """Return True if the server version number is greater than ``threshold``."""
        return version_greater_than(self.factory, threshold)

    def _apply(self, action: Action, database: str, sql: str) -> ConvergenceResult:
        name = self.descriptor.database_name

        if self.dry_run:
            logger.info(f"{self.descriptor}: Would perform query [{sql}]")
            return ConvergenceResult(action, name, changed=True, sql=sql, executed=False)

        try:
            with admin_session(self.factory, database) as handle:
                logger.debug(f"{self.descriptor}: Performing query [{sql}]")
                handle.execute(sql)
        except DatabaseOperationError as e:
            logger.debug(f"{self.descriptor}: {action.value} failed: {e}")
            raise

        logger.info(f"{self.descriptor}: {action.value} applied to {name}")
        return ConvergenceResult(action, name, changed=True, sql=sql, executed=True)

"""
==========================
Utility Functions Package.
==========================

Connection management shared by the convergence layer.

Modules:
    database_utils: Administrative sessions, scoped release, driver check
"""

__version__ = "1.0.0"
__all__ = [
    'ADMIN_DATABASE',
    'ConnectError',
    'ConnectionFactory',
    'ConnectionHandle',
    'DatabaseOperationError',
    'MissingDependencyError',
    'QueryError',
    'admin_session',
    'release_quietly',
    'require_driver',
]

from .database_utils import (
    ADMIN_DATABASE,
    ConnectError,
    ConnectionFactory,
    ConnectionHandle,
    DatabaseOperationError,
    MissingDependencyError,
    QueryError,
    admin_session,
    release_quietly,
    require_driver,
)

"""
========================================================
Convergence package for PostgreSQL database resources.
========================================================

Declarative create/drop/query actions that compare a desired
ResourceDescriptor with the server and change only what differs.

Modules:
    probes: Existence and version checks
    controller: DatabaseConverger, the per-action orchestration

Architecture:
    - SQL rendering: sql.ddl and sql.query_builder
    - Sessions: utils.database_utils (one short-lived session per statement)
    - Desired state: models.resource_models

Example:
    >>> from convergence import DatabaseConverger
    >>> from models import ResourceDescriptor
    >>>
    >>> result = DatabaseConverger(ResourceDescriptor(database_name='app_db')).converge('create')

Requirements:
    - SQLAlchemy >= 2.0.0
    - psycopg2-binary >= 2.9.0
"""

__version__ = "0.1.0"
__all__ = [
    'DatabaseConverger',
    'VersionError',
    'database_exists',
    'server_version',
    'version_greater_than',
]

from .controller import DatabaseConverger
from .probes import VersionError, database_exists, server_version, version_greater_than

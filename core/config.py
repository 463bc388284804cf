"""
================================================
Configuration management for database actions.
================================================

Loads connection defaults from environment variables (.env file) for the
command-line layer. The convergence modules never read this module: the
CLI resolves a complete ConnectionInfo here and passes it down.

Environment variables:
    POSTGRES_HOST: Server hostname (default 'localhost')
    POSTGRES_PORT: Server port (default 5432)
    POSTGRES_USER: Role to connect as (default 'postgres')
    POSTGRES_PASSWORD: Password used when none is given explicitly
    POSTGRES_CONNECT_TIMEOUT: Optional connect timeout in seconds
    LOG_LEVEL: Logging level (default 'INFO')

Example:
    >>> from core.config import config
    >>>
    >>> info = config.resolve_connection(host='db.internal')
    >>> print(f"Host: {info.host}, Port: {info.port}")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from models.resource_models import ConnectionInfo

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == '':
        return None
    return int(value)


@dataclass
class DatabaseConfig:
    """Connection defaults read from the environment.

    Attributes:
        host: PostgreSQL server hostname or IP address
        port: PostgreSQL server port number
        user: Database username
        password: Database password
        connect_timeout: Connect timeout in seconds, or None for the driver default
    """

    host: str
    port: int
    user: str
    password: str
    connect_timeout: Optional[int] = None


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig instance with connection defaults
        log_level: Default logging level name

    Example:
        >>> config = Config()
        >>> info = config.resolve_connection(password='override')
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            host=os.getenv('POSTGRES_HOST', 'localhost'),
            port=int(os.getenv('POSTGRES_PORT', '5432')),
            user=os.getenv('POSTGRES_USER', 'postgres'),
            password=os.getenv('POSTGRES_PASSWORD', ''),
            connect_timeout=_optional_int(os.getenv('POSTGRES_CONNECT_TIMEOUT'))
        )
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')

    @property
    def db_host(self) -> str:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_port(self) -> int:
        """Get database server port number."""
        return self.db.port

    @property
    def db_user(self) -> str:
        """Get database username."""
        return self.db.user

    @property
    def db_password(self) -> str:
        """Get database password."""
        return self.db.password

    def resolve_connection(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None
    ) -> ConnectionInfo:
        """Build a ConnectionInfo, filling unset fields from the environment.

        Explicit arguments always win. ``database`` is only set when given,
        since an override changes which database every action connects to.

        Args:
            host: Server hostname
            port: Server port
            username: Role to connect as
            password: Password; falls back to POSTGRES_PASSWORD
            database: Explicit target database override

        Returns:
            Fully resolved ConnectionInfo
        """
        return ConnectionInfo(
            host=host if host is not None else self.db.host,
            port=port if port is not None else self.db.port,
            username=username if username is not None else self.db.user,
            password=password if password is not None else (self.db.password or None),
            database=database,
            connect_timeout=self.db.connect_timeout
        )


# Global configuration instance
config = Config()

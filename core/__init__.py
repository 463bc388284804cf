"""
===================================================
Core infrastructure package for database tooling.
===================================================

Configuration and logging used by the command-line layer.

Modules:
    config: Connection defaults from environment variables
    logger: Centralized logging configuration

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Connecting to {config.db_host}")
"""

__version__ = "0.1.0"
__all__ = ['get_logger', 'setup_logging', 'config', 'Config']

from core.config import Config, config
from core.logger import get_logger, setup_logging

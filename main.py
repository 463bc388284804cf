"""
=========================================================
Command-line entry point for PostgreSQL database actions.
=========================================================

Thin wrapper around convergence.DatabaseConverger. It resolves connection
defaults from core.config (including the fallback password), sets up
logging, checks the psycopg2 driver once, and runs a single action.

Usage:
    # Create a database if it does not exist
    python main.py create app_db --owner app_user --encoding UTF8

    # Drop it if it exists
    python main.py drop app_db

    # Run a statement inside it (no-op when it is missing)
    python main.py query app_db --sql "GRANT CONNECT ON DATABASE app_db TO reader"

    # Show what would change without executing anything
    python main.py create app_db --dry-run

    # Print the server version; exit 1 if it is not newer than 9.1
    python main.py version --greater-than 90100

Exit Codes:
    0: Success
    1: Error (or version not greater than the threshold)
    2: Missing psycopg2 driver
    130: User interrupt (Ctrl+C)
"""

import argparse
import sys
from typing import List, Optional

from convergence.controller import DatabaseConverger
from convergence.probes import server_version
from core.config import config
from core.logger import get_logger, setup_logging
from models.resource_models import Action, DescriptorError, ResourceDescriptor
from utils.database_utils import (
    ConnectionFactory,
    DatabaseOperationError,
    MissingDependencyError,
    require_driver,
)

logger = get_logger(__name__)

VERSION_COMMAND = 'version'


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description="Converge a PostgreSQL database to a desired state",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py create app_db --owner app_user --encoding UTF8
  python main.py drop app_db --dry-run
  python main.py query app_db --sql "CREATE EXTENSION IF NOT EXISTS pg_trgm"
  python main.py version --greater-than 90100

Connection defaults come from POSTGRES_HOST, POSTGRES_PORT, POSTGRES_USER
and POSTGRES_PASSWORD (or a .env file).
        """
    )

    parser.add_argument(
        'action',
        choices=[a.value for a in Action] + [VERSION_COMMAND],
        help='Action to run'
    )
    parser.add_argument(
        'database',
        nargs='?',
        help='Name of the database to converge (not used by "version")'
    )

    # Desired state
    state = parser.add_argument_group('database options')
    state.add_argument('--template', help='Template database')
    state.add_argument('--encoding', help="Encoding, or DEFAULT for the server default")
    state.add_argument('--tablespace', help='Default tablespace')
    state.add_argument('--collation', help='Locale used for LC_CTYPE and LC_COLLATE')
    state.add_argument('--connection-limit', type=int, help='Maximum concurrent connections')
    state.add_argument('--owner', help='Owning role')
    state.add_argument('--sql', dest='sql_query', help='Statement for the query action')

    # Connection
    conn = parser.add_argument_group('connection options')
    conn.add_argument('--host', help='Server hostname (default: POSTGRES_HOST)')
    conn.add_argument('--port', type=int, help='Server port (default: POSTGRES_PORT)')
    conn.add_argument('--user', help='Role to connect as (default: POSTGRES_USER)')
    conn.add_argument('--password', help='Password (default: POSTGRES_PASSWORD)')
    conn.add_argument(
        '--connect-db',
        help='Connect to this database for every action instead of the default'
    )

    parser.add_argument(
        '--greater-than',
        type=int,
        help='With "version": exit 0 only if the server version number is greater'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Report what would change without executing statements'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging (DEBUG level)'
    )
    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable coloured console output'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command-line interface for database convergence.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.action != VERSION_COMMAND and not args.database:
        parser.error(f"the {args.action} action requires a database name")

    try:
        setup_logging(
            log_level='DEBUG' if args.verbose else config.log_level,
            use_colors=not args.no_color
        )
    except ValueError as e:
        logger.error(f"Invalid logging configuration: {e}")
        return 1

    try:
        require_driver()

        connection = config.resolve_connection(
            host=args.host,
            port=args.port,
            username=args.user,
            password=args.password,
            database=args.connect_db
        )
        factory = ConnectionFactory(connection, check_driver=False)

        if args.action == VERSION_COMMAND:
            version = server_version(factory)
            print(version)
            if args.greater_than is not None and not version > args.greater_than:
                logger.info(f"Server version {version} is not greater than {args.greater_than}")
                return 1
            return 0

        descriptor = ResourceDescriptor(
            database_name=args.database,
            template=args.template,
            encoding=args.encoding,
            tablespace=args.tablespace,
            collation=args.collation,
            connection_limit=args.connection_limit,
            owner=args.owner,
            sql_query=args.sql_query,
            connection=connection
        )
        converger = DatabaseConverger(descriptor, factory=factory, dry_run=args.dry_run)
        result = converger.converge(args.action)

        if not result.changed:
            logger.info(f"{descriptor}: {result.action.value} - already up to date")
        elif result.executed:
            logger.info(f"{descriptor}: {result.action.value} - changed")
        else:
            logger.info(f"{descriptor}: {result.action.value} - would change (dry run)")
        return 0

    except MissingDependencyError as e:
        logger.critical(str(e))
        return 2
    except (DatabaseOperationError, DescriptorError) as e:
        logger.error(f"Action failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Operation interrupted by user")
        return 130


if __name__ == '__main__':
    sys.exit(main())

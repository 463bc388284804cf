"""
Shared fixtures and fakes for convergence tests.

FakeConnectionFactory stands in for utils.database_utils.ConnectionFactory.
It keeps an in-memory set of existing databases, answers the catalog and
version queries the probes issue, applies CREATE/DROP DATABASE to its set,
and counts every open() and close() so tests can assert that no session
is leaked.

Key fixtures:
- fake_factory: builds a FakeConnectionFactory with the given state.
- descriptor_factory: builds ResourceDescriptor instances with defaults.
"""

import re

import pytest

from utils.database_utils import QueryError

_QUOTED = re.compile(r"""["']([^"']+)["']""")


class FakeResult:
    def __init__(self, rows=None):
        self._rows = rows or []

    def fetchall(self):
        return list(self._rows)


class FakeHandle:
    """Session returned by FakeConnectionFactory.open()."""

    def __init__(self, factory, database):
        self.factory = factory
        self.database = database
        self.closed = False

    def execute(self, sql):
        self.factory.executed.append((self.database, sql))
        return self.factory.respond(sql)

    def close(self):
        self.closed = True
        self.factory.closed += 1
        if self.factory.close_error:
            raise self.factory.close_error


class FakeConnectionFactory:
    """
    Counting stand-in for ConnectionFactory.

    Args:
        existing: Names of databases that exist initially
        version_num: Value of SHOW server_version_num, or an Exception to raise
        version_banner: Value of SELECT version(), or an Exception to raise
        failures: Mapping of SQL prefix -> Exception raised when a statement starts with it
        close_error: Exception raised by every handle.close()
        connect_error: Exception raised by every open()
    """

    def __init__(
        self,
        existing=(),
        version_num='90605',
        version_banner='PostgreSQL 9.6.5 on x86_64-pc-linux-gnu',
        failures=None,
        close_error=None,
        connect_error=None
    ):
        self.databases = set(existing)
        self.version_num = version_num
        self.version_banner = version_banner
        self.failures = failures or {}
        self.close_error = close_error
        self.connect_error = connect_error
        self.opened = 0
        self.closed = 0
        self.opened_databases = []
        self.peak_open = 0
        self.executed = []

    @property
    def open_handles(self):
        return self.opened - self.closed

    @property
    def statements(self):
        return [sql for _, sql in self.executed]

    def open(self, database='template1'):
        if self.connect_error:
            raise self.connect_error
        self.opened += 1
        self.peak_open = max(self.peak_open, self.open_handles)
        self.opened_databases.append(database)
        return FakeHandle(self, database)

    def respond(self, sql):
        for prefix, error in self.failures.items():
            if sql.startswith(prefix):
                raise error

        if sql.startswith("SELECT * FROM pg_database"):
            name = _QUOTED.search(sql).group(1)
            return FakeResult([(name,)] if name in self.databases else [])
        if sql == "SHOW server_version_num":
            return self._value(self.version_num)
        if sql == "SELECT version()":
            return self._value(self.version_banner)
        if sql.startswith("CREATE DATABASE"):
            name = _QUOTED.search(sql).group(1)
            if name in self.databases:
                raise QueryError(f'database "{name}" already exists')
            self.databases.add(name)
        elif sql.startswith("DROP DATABASE"):
            name = _QUOTED.search(sql).group(1)
            if name not in self.databases:
                raise QueryError(f'database "{name}" does not exist')
            self.databases.discard(name)
        return FakeResult()

    @staticmethod
    def _value(value):
        if isinstance(value, Exception):
            raise value
        return FakeResult([(value,)])


@pytest.fixture
def fake_factory():
    """Build a FakeConnectionFactory; keyword arguments configure its state."""
    def factory(**kwargs):
        return FakeConnectionFactory(**kwargs)
    return factory


@pytest.fixture
def descriptor_factory():
    """Build ResourceDescriptor instances named 'app_db' unless overridden."""
    from models.resource_models import ResourceDescriptor

    def factory(**overrides):
        params = dict(database_name='app_db')
        params.update(overrides)
        return ResourceDescriptor(**params)

    return factory

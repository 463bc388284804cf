"""
Shared fixtures and mocking helpers for utils tests.

Key fixtures:
- patch_create_engine: patches sqlalchemy.create_engine inside utils.database_utils.
- connection_factory: returns a ConnectionFactory wired to the patched engine.
"""

from unittest.mock import patch

import pytest


@pytest.fixture
def patch_create_engine():
    """
    Patch create_engine as imported by utils.database_utils.
    Tests set ``return_value`` (or ``side_effect``) on the yielded mock.
    """
    with patch("utils.database_utils.create_engine") as mock_create_engine:
        yield mock_create_engine


@pytest.fixture
def connection_factory():
    """
    Factory that creates a ConnectionFactory with default params, skipping the driver check.
    """
    from models.resource_models import ConnectionInfo
    from utils.database_utils import ConnectionFactory

    def factory(**overrides):
        params = dict(
            host="localhost",
            port=5432,
            username="postgres",
            password="secret"
        )
        params.update(overrides)
        return ConnectionFactory(ConnectionInfo(**params), check_driver=False)

    return factory

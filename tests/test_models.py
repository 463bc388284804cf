"""
=====================================================
Pytest suite for models/resource_models.py
=====================================================

How to Execute:
---------------
All tests:          python -m pytest tests/test_models.py -v
"""

from dataclasses import FrozenInstanceError

import pytest
from pytest import mark, raises

from models.resource_models import (
    Action,
    ConnectionInfo,
    DescriptorError,
    ResourceDescriptor,
)


@mark.unit
def test_connection_info_defaults():
    info = ConnectionInfo()
    assert info.port == 5432
    assert info.username == 'postgres'
    assert info.host is None
    assert info.password is None
    assert info.database is None


@mark.unit
def test_target_database_uses_default_without_override():
    assert ConnectionInfo().target_database('template1') == 'template1'


@mark.unit
def test_target_database_override_wins():
    info = ConnectionInfo(database='maintenance')
    assert info.target_database('template1') == 'maintenance'
    assert info.target_database('app_db') == 'maintenance'


@mark.unit
def test_descriptor_is_immutable():
    descriptor = ResourceDescriptor(database_name='app_db')
    with raises(FrozenInstanceError):
        descriptor.database_name = 'other'


@mark.unit
@pytest.mark.parametrize("name", ['', '   ', None])
def test_descriptor_rejects_empty_name(name):
    with raises(DescriptorError):
        ResourceDescriptor(database_name=name)


@mark.edge_case
@pytest.mark.parametrize("limit", ['10', 2.5, True, -2])
def test_descriptor_rejects_bad_connection_limit(limit):
    with raises(DescriptorError):
        ResourceDescriptor(database_name='app_db', connection_limit=limit)


@mark.unit
def test_query_action_requires_sql():
    descriptor = ResourceDescriptor(database_name='app_db')
    descriptor.validate_for(Action.CREATE)
    descriptor.validate_for(Action.DROP)
    with raises(DescriptorError, match="sql_query"):
        descriptor.validate_for(Action.QUERY)


@mark.unit
def test_action_parse_accepts_names_and_members():
    assert Action.parse('create') is Action.CREATE
    assert Action.parse('DROP') is Action.DROP
    assert Action.parse(Action.QUERY) is Action.QUERY


@mark.unit
def test_action_parse_rejects_unknown():
    with raises(DescriptorError, match="Unknown action"):
        Action.parse('truncate')


@mark.unit
def test_descriptor_str():
    assert str(ResourceDescriptor(database_name='app_db')) == 'database[app_db]'

"""
=====================================================
Pytest suite for core/config.py and core/logger.py
=====================================================

How to Execute:
---------------
All tests:          python -m pytest tests/tests_core/test_config.py -v
"""

import logging

from pytest import mark, raises

from core.config import Config
from core.logger import ColoredFormatter, get_logger, setup_logging

ENV_VARS = (
    'POSTGRES_HOST', 'POSTGRES_PORT', 'POSTGRES_USER',
    'POSTGRES_PASSWORD', 'POSTGRES_CONNECT_TIMEOUT', 'LOG_LEVEL',
)


def _clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ================
# CONFIG TESTS
# ================

@mark.unit
def test_config_defaults(monkeypatch):
    _clear_env(monkeypatch)
    cfg = Config()

    assert cfg.db_host == 'localhost'
    assert cfg.db_port == 5432
    assert cfg.db_user == 'postgres'
    assert cfg.db_password == ''
    assert cfg.db.connect_timeout is None
    assert cfg.log_level == 'INFO'


@mark.unit
def test_config_reads_environment(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv('POSTGRES_HOST', 'db.internal')
    monkeypatch.setenv('POSTGRES_PORT', '6543')
    monkeypatch.setenv('POSTGRES_USER', 'admin')
    monkeypatch.setenv('POSTGRES_PASSWORD', 'from-env')
    monkeypatch.setenv('POSTGRES_CONNECT_TIMEOUT', '7')

    cfg = Config()

    assert cfg.db_host == 'db.internal'
    assert cfg.db_port == 6543
    assert cfg.db_user == 'admin'
    assert cfg.db_password == 'from-env'
    assert cfg.db.connect_timeout == 7


@mark.unit
def test_resolve_connection_falls_back_to_environment_password(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv('POSTGRES_PASSWORD', 'node-default')

    info = Config().resolve_connection(host='db1')

    assert info.host == 'db1'
    assert info.password == 'node-default'
    assert info.database is None


@mark.unit
def test_resolve_connection_explicit_values_win(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv('POSTGRES_PASSWORD', 'node-default')

    info = Config().resolve_connection(
        port=5433, username='owner', password='explicit', database='maintenance'
    )

    assert info.port == 5433
    assert info.username == 'owner'
    assert info.password == 'explicit'
    assert info.database == 'maintenance'


@mark.edge_case
def test_resolve_connection_empty_env_password_is_none(monkeypatch):
    _clear_env(monkeypatch)
    assert Config().resolve_connection().password is None


# ================
# LOGGER TESTS
# ================

@mark.unit
def test_get_logger_sets_level():
    logger = get_logger('tests.level_check', level='debug')
    assert logger.level == logging.DEBUG


@mark.unit
def test_setup_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging(
            log_level='INFO',
            log_file='converge.log',
            log_dir=str(tmp_path),
            console_output=False
        )
        logging.getLogger('tests.file').info("created app_db")
        for handler in root.handlers:
            handler.flush()

        assert "created app_db" in (tmp_path / 'converge.log').read_text(encoding='utf-8')
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


@mark.unit
def test_setup_logging_rejects_unknown_level():
    with raises(ValueError):
        setup_logging(log_level='LOUD', console_output=False)


@mark.unit
def test_colored_formatter_leaves_record_untouched():
    record = logging.LogRecord('x', logging.ERROR, __file__, 1, "failed", None, None)
    output = ColoredFormatter('%(levelname)s %(message)s').format(record)

    assert '\033[31mERROR\033[0m failed' == output
    assert record.levelname == 'ERROR'

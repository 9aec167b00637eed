"""
Tests for settings, database helpers and the lifespan hook.
"""

import json
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog
from fastapi import FastAPI
from pydantic import ValidationError

from permguard.api.lifespan import lifespan
from permguard.core.config import Settings, settings
from permguard.core.database import check_database_health, create_engine_from_settings
from permguard.core.logging import LOGGER_NAMESPACE, setup_logging


def make_settings(**values):
    return Settings(_env_file=None, **values)


# ── Settings ────────────────────────────────────────────────────


def test_defaults():
    config = make_settings()
    assert config.DATABASE_URL.startswith("sqlite+aiosqlite://")
    assert config.DEFAULT_PAGE == 1
    assert config.DEFAULT_PAGE_LIMIT == 20


def test_postgresql_url_uses_asyncpg():
    config = make_settings(DATABASE_URL="postgresql://permguard@localhost/permguard")
    assert config.DATABASE_URL == "postgresql+asyncpg://permguard@localhost/permguard"


def test_log_level_is_normalized():
    assert make_settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize(
    "values",
    [
        {"ENVIRONMENT": "prod"},
        {"LOG_LEVEL": "verbose"},
        {"DEFAULT_PAGE_LIMIT": 0},
        {"DEFAULT_PAGE": -1},
    ],
)
def test_invalid_values(values):
    with pytest.raises(ValidationError):
        make_settings(**values)


def test_environment_prefix(monkeypatch):
    monkeypatch.setenv("PERMGUARD_DEFAULT_PAGE_LIMIT", "50")
    assert make_settings().DEFAULT_PAGE_LIMIT == 50


# ── Database & lifespan ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_health_check(engine):
    assert await check_database_health(engine) is True


@pytest.mark.parametrize(
    "url",
    ["postgresql+asyncpg://permguard@localhost/permguard", "mysql+aiomysql://permguard@localhost/permguard"],
)
def test_server_url_gets_pool_options(url):
    with patch("permguard.core.database.create_async_engine", MagicMock()) as create_async_engine:
        create_engine_from_settings(url)

    args, kwargs = create_async_engine.call_args
    assert args == (url,)
    assert kwargs["pool_size"] == settings.DB_POOL_SIZE
    assert kwargs["pool_pre_ping"] is True


def test_sqlite_url_gets_no_pool_options():
    with patch("permguard.core.database.create_async_engine", MagicMock()) as create_async_engine:
        create_engine_from_settings("sqlite+aiosqlite:///:memory:", echo=True)

    _, kwargs = create_async_engine.call_args
    assert "pool_size" not in kwargs
    assert kwargs["echo"] is True


@pytest.mark.asyncio
async def test_lifespan_creates_tables_when_enabled():
    with patch("permguard.api.lifespan.setup_logging"), \
         patch("permguard.api.lifespan.init_database", AsyncMock()) as init_database, \
         patch("permguard.api.lifespan.close_database", AsyncMock()) as close_database, \
         patch.object(settings, "DB_AUTO_MIGRATE", True):
        async with lifespan(FastAPI()):
            init_database.assert_awaited_once()
            close_database.assert_not_awaited()

    close_database.assert_awaited_once()


@pytest.mark.asyncio
async def test_lifespan_skips_tables_by_default():
    with patch("permguard.api.lifespan.setup_logging"), \
         patch("permguard.api.lifespan.init_database", AsyncMock()) as init_database, \
         patch("permguard.api.lifespan.close_database", AsyncMock()), \
         patch.object(settings, "DB_AUTO_MIGRATE", False):
        async with lifespan(FastAPI()):
            pass

    init_database.assert_not_awaited()


# ── Logging ─────────────────────────────────────────────────────


@pytest.fixture
def package_logging():
    yield
    structlog.reset_defaults()
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


def test_setup_logging_leaves_root_logger_alone(package_logging):
    root_level = logging.getLogger().level

    package_logger = setup_logging(level="warning", json_logs=True)

    assert package_logger.name == "permguard"
    assert package_logger.propagate is False
    assert logging.getLogger("permguard.repositories.role").getEffectiveLevel() == logging.WARNING
    assert logging.getLogger().level == root_level


def test_json_events_carry_module_logger_name(package_logging, capsys):
    setup_logging(level="INFO", json_logs=True)

    structlog.get_logger("permguard.repositories.role").info("Permissions of role cleared", role_id=3)

    event = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert event["event"] == "Permissions of role cleared"
    assert event["logger"] == "permguard.repositories.role"
    assert event["level"] == "info"
    assert event["role_id"] == 3

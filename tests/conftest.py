"""
Shared fixtures for the permguard test suite.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from permguard.core.database import close_database, create_engine_from_settings, create_session_factory, init_database


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database file for each test"""
    engine = create_engine_from_settings(f"sqlite+aiosqlite:///{tmp_path / 'permguard.db'}")
    await init_database(engine)
    yield engine
    await close_database(engine)


@pytest_asyncio.fixture
async def db(engine):
    """Session bound to the per-test database"""
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db():
    """Create a mock async database session"""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    return db

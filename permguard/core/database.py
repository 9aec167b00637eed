"""
Database Configuration and Session Management
"""

from typing import Optional

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
import structlog

from permguard.core.config import settings, DATABASE_CONFIG, POOL_CONFIG

logger = structlog.get_logger()

# Create declarative base
Base = declarative_base()


def create_engine_from_settings(database_url: Optional[str] = None, **overrides) -> AsyncEngine:
    """
    Build the async engine

    Args:
        database_url: Overrides the configured DATABASE_URL
        **overrides: Extra engine keyword arguments

    Returns:
        Async engine
    """
    url = database_url or settings.DATABASE_URL
    engine_kwargs = dict(DATABASE_CONFIG)
    if not url.startswith("sqlite"):
        engine_kwargs.update(POOL_CONFIG)
    engine_kwargs.update(overrides)

    return create_async_engine(url, **engine_kwargs)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,  # Manual flush control
    )


engine = create_engine_from_settings()

# Create session factory
AsyncSessionLocal = create_session_factory(engine)


# Database dependency
async def get_db() -> AsyncSession:
    """
    Database session dependency
    Repositories commit their own units of work; anything left pending is
    committed here and rolled back on error
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# Health check function
async def check_database_health(bind: Optional[AsyncEngine] = None) -> bool:
    """
    Check database connectivity
    """
    try:
        async with (bind or engine).begin() as conn:
            result = await conn.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return False


# Database initialization
async def init_database(bind: Optional[AsyncEngine] = None):
    """
    Create the roles, permissions and pivot tables if they don't exist
    """
    try:
        async with (bind or engine).begin() as conn:
            # Import all models to ensure they're registered
            from permguard.models import permission, role  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise


# Cleanup function
async def close_database(bind: Optional[AsyncEngine] = None):
    """
    Close database connections
    """
    try:
        await (bind or engine).dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error("Error closing database connections", error=str(e))

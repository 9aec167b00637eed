"""
Lifespan hook
Logging setup, optional table creation and engine disposal for a FastAPI app
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from permguard.core.config import settings
from permguard.core.database import close_database, init_database
from permguard.core.logging import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Use as ``FastAPI(lifespan=lifespan)`` or enter it from an existing lifespan

    Tables are created on startup only when PERMGUARD_DB_AUTO_MIGRATE is set.
    """
    setup_logging()
    logger.info("Starting permguard", environment=settings.ENVIRONMENT)

    if settings.DB_AUTO_MIGRATE:
        await init_database()

    try:
        yield
    finally:
        logger.info("Shutting down permguard")
        await close_database()

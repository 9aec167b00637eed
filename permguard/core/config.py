"""
Application Configuration
Environment variables and settings management
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator

from permguard.core.pagination import PaginationDefaults


class Settings(BaseSettings):
    """Permguard settings with environment variable support"""

    # Application
    ENVIRONMENT: str = Field(default="development", description="Application environment")
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./permguard.db",
        description="Async SQLAlchemy database URL"
    )
    DB_POOL_SIZE: int = Field(default=10, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Database max overflow connections")
    DB_POOL_TIMEOUT: int = Field(default=30, description="Database pool timeout in seconds")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Database pool recycle time in seconds")
    DB_AUTO_MIGRATE: bool = Field(default=False, description="Create missing tables on startup")

    # Pagination
    DEFAULT_PAGE: int = Field(default=1, description="Page used when none or a non-positive one is given")
    DEFAULT_PAGE_LIMIT: int = Field(default=20, description="Page size used when none or a non-positive one is given")

    @field_validator("DATABASE_URL")
    @classmethod
    def use_async_driver(cls, v):
        """Point plain PostgreSQL URLs at the asyncpg driver"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value"""
        allowed = ["development", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("DEFAULT_PAGE", "DEFAULT_PAGE_LIMIT")
    @classmethod
    def validate_positive(cls, v):
        """Pagination defaults must be usable as-is"""
        if v <= 0:
            raise ValueError("Pagination defaults must be positive")
        return v

    model_config = {
        "env_file": ".env",
        "env_prefix": "PERMGUARD_",
        "case_sensitive": True,
        "extra": "ignore",
    }


# Create settings instance
settings = Settings()

# Derived settings
DATABASE_CONFIG = {
    "echo": settings.ENVIRONMENT == "development" and settings.DEBUG,
}

# Queue pool options; SQLite engines do not take them
POOL_CONFIG = {
    "pool_size": settings.DB_POOL_SIZE,
    "max_overflow": settings.DB_MAX_OVERFLOW,
    "pool_timeout": settings.DB_POOL_TIMEOUT,
    "pool_recycle": settings.DB_POOL_RECYCLE,
    "pool_pre_ping": True,
}

PAGINATION_DEFAULTS = PaginationDefaults(
    page=settings.DEFAULT_PAGE,
    limit=settings.DEFAULT_PAGE_LIMIT,
)

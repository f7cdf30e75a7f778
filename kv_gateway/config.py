"""
Configuration Management Module

Configures application parameters via environment variables or .env file.
Supports an in-process store (default), a SQL database and Redis as KV backends.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "KV Gateway"
    DEBUG: bool = False

    # KV Store Config
    # "memory" keeps entries in-process, "database" uses the SQL database, "redis" uses Redis
    KV_STORE_TYPE: Literal["memory", "database", "redis"] = "memory"

    # Database Config (only used when KV_STORE_TYPE is "database")
    # Supports "sqlite" or "postgresql"
    DATABASE_TYPE: Literal["sqlite", "postgresql"] = "sqlite"
    # SQLite default database path, PostgreSQL requires full connection string
    DATABASE_URL: str = "sqlite+aiosqlite:///./kv_gateway.db"

    # Redis Config (only used when KV_STORE_TYPE is "redis")
    REDIS_URL: str = "redis://localhost:6379/0"
    # Namespace prepended to every stored key
    REDIS_KEY_PREFIX: str = "kv:"

    # Listing Config
    # Limit applied when the caller omits "limit" or sends an unparsable one
    LIST_DEFAULT_LIMIT: int = 100
    # Upper bound for a single listing page
    LIST_MAX_LIMIT: int = 1000

    # Content type recorded when a PUT carries no content-type header
    DEFAULT_CONTENT_TYPE: str = "data/binary"

    # Expired entry sweep interval for the database backend (minutes)
    KV_CLEANUP_INTERVAL_MINUTES: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Returns:
        Settings: Application configuration instance
    """
    return Settings()

"""Database connection management."""

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool


class DatabaseConfig:
    """Database configuration."""

    def __init__(self, config: Dict[str, Any]) -> None:
        """Initialize database config from dict."""
        self.host = config.get("host", "localhost")
        self.port = config.get("port", 5432)
        self.database = config.get("database", "trendfeed")
        self.user = config.get("user", "trendfeed_user")
        self.min_size = config.get("min_pool_size", 1)
        self.max_size = config.get("max_pool_size", 10)

        password = config.get("password")
        password_env = config.get("password_env")
        if not password and password_env:
            password = os.environ.get(password_env, "")
        self.password = password or ""

    @property
    def connection_string(self) -> str:
        """Get psycopg connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@asynccontextmanager
async def open_pool(config: Dict[str, Any]) -> AsyncGenerator[AsyncConnectionPool, None]:
    """Open an async connection pool for the duration of the block."""
    db_config = DatabaseConfig(config)
    pool = AsyncConnectionPool(
        db_config.connection_string,
        min_size=db_config.min_size,
        max_size=db_config.max_size,
        kwargs={"row_factory": dict_row},
        open=False,
    )
    await pool.open()
    try:
        yield pool
    finally:
        await pool.close()

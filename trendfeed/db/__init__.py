"""Database management for trendfeed."""

from .connection import DatabaseConfig, open_pool
from .favorites import FavoritePage, FavoriteResult, FavoriteStorage
from .init import init_database, validate_connection
from .store import PostgresStore, Store

__all__ = [
    "DatabaseConfig",
    "FavoritePage",
    "FavoriteResult",
    "FavoriteStorage",
    "PostgresStore",
    "Store",
    "init_database",
    "open_pool",
    "validate_connection",
]

"""
PostgreSQL access: connection pool, bulk load store and wine repository.
"""

from .connection import DatabaseConnectionPool
from .wine_repository import StoredProcedureMissing, WineRepository, build_update
from .wine_store import WineStore

__all__ = [
    "DatabaseConnectionPool",
    "WineStore",
    "WineRepository",
    "StoredProcedureMissing",
    "build_update",
]

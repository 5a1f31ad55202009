"""Persistence sessions for seed records."""

from .base import PersistenceSession, StoreError
from .memory import MemoryStore
from .duckdb_store import DuckDBStore
from .factory import open_session

__all__ = ["PersistenceSession", "StoreError", "MemoryStore", "DuckDBStore", "open_session"]

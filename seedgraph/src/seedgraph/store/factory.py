"""Construction of the configured persistence session."""

from seedgraph.config.settings import Settings
from seedgraph.schema.models import SchemaIR
from .base import PersistenceSession
from .duckdb_store import DuckDBStore
from .memory import MemoryStore


def open_session(settings: Settings, schema: SchemaIR) -> PersistenceSession:
    """
    Open a store for ``schema`` according to ``settings.store_backend``.

    Args:
        settings: Application settings
        schema: Entity schema the store must hold

    Returns:
        An open PersistenceSession
    """
    if settings.store_backend == "memory":
        return MemoryStore(schema)
    return DuckDBStore(schema, database=str(settings.database_path))

"""
Document store backends.

Usage:
    from app.services.store import build_store

    store = build_store(settings)   # memory or sql, per STORE_BACKEND
"""
from app.services.store.base import DatabaseStats, DocumentStore, format_bytes
from app.services.store.memory import InMemoryDocumentStore
from app.services.store.sql import SqlDocumentStore


def build_store(settings) -> DocumentStore:
    """
    Create the store selected by settings.STORE_BACKEND.

    The SQL backend creates its table on first use.
    """
    if settings.STORE_BACKEND == "sql":
        from app.core.database import get_session_factory, init_db

        init_db()
        return SqlDocumentStore(get_session_factory(), settings.environments)

    if settings.STORE_BACKEND == "memory":
        return InMemoryDocumentStore(settings.environments)

    raise ValueError(f"Unknown STORE_BACKEND '{settings.STORE_BACKEND}'")


__all__ = [
    "DatabaseStats",
    "DocumentStore",
    "InMemoryDocumentStore",
    "SqlDocumentStore",
    "build_store",
    "format_bytes",
]

"""
Database configuration and session management for the SQL store backend.
"""
import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def build_engine(database_url: str) -> Engine:
    """
    Create an engine suited to the database URL.

    In-memory SQLite needs a single shared connection, everything else gets
    a regular connection pool.
    """
    echo = os.getenv("SQL_ECHO", "false").lower() == "true"

    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url:
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo
    )


def get_engine() -> Engine:
    """Get or create the application engine from settings."""
    global _engine, _SessionLocal

    if _engine is None:
        from app.core.config import settings
        _engine = build_engine(settings.DATABASE_URL)
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

    return _engine


def get_session_factory() -> sessionmaker:
    """Session factory bound to the application engine."""
    get_engine()
    return _SessionLocal


def init_db(engine: Optional[Engine] = None) -> None:
    """Create the documents table if it does not exist."""
    from app.models.documents_table import Base
    Base.metadata.create_all(bind=engine or get_engine(), checkfirst=True)

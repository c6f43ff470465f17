"""
SQLAlchemy table backing the SQL document store.

One row per document. Documents are partitioned by (environment, collection)
and keyed by their source-assigned id; the body holds the JSON dump of the
pydantic model. The surrogate primary key preserves insertion order, which
get_all() returns.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, JSON, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoredDocument(Base):
    """A document of one collection in one environment."""
    __tablename__ = "documents"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    environment = Column(String(64), nullable=False)
    collection = Column(String(64), nullable=False)
    doc_id = Column(String(128), nullable=False)
    body = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('environment', 'collection', 'doc_id', name='uq_documents_env_collection_id'),
        Index('ix_documents_env_collection', 'environment', 'collection'),
    )

"""SQLAlchemy-backed document store.

All environments share one `documents` table; rows are scoped by
(environment, collection, doc_id). Bodies are stored as JSON and decoded
back into the collection's pydantic model on read.

Transient database errors (OperationalError) are retried with exponential
backoff. Anything the database still cannot do after that surfaces as
StoreUnavailableError so callers can treat the environment as unreachable.
"""
import json
from datetime import datetime
from typing import Callable, Iterable, List, Optional, TypeVar, Union

from sqlalchemy import func, select, delete
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from app.core.exceptions import (
    DuplicateDocumentError,
    StoreUnavailableError,
    UnknownEnvironmentError,
)
from app.core.logging import get_logger
from app.models.documents import Document
from app.models.documents_table import StoredDocument
from app.services.store.base import (
    DatabaseStats,
    DocumentStore,
    IdOrPredicate,
    as_predicate,
    to_document,
)

logger = get_logger(__name__)

T = TypeVar("T")

_retry_transient = retry(
    retry=retry_if_exception_type(OperationalError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, max=2),
    reraise=True,
)


class SqlDocumentStore(DocumentStore):
    """
    Document store persisted through SQLAlchemy.

    Usage:
        engine = build_engine("sqlite:///syncenv.db")
        init_db(engine)
        store = SqlDocumentStore(sessionmaker(bind=engine), ["Production", "Local"])
    """

    def __init__(self, session_factory: sessionmaker, environments: Iterable[str]):
        self._session_factory = session_factory
        self._environments: List[str] = list(dict.fromkeys(environments))

    def list_environments(self) -> List[str]:
        return list(self._environments)

    async def get_all(self, collection: str, environment: str) -> List[Document]:
        def query(session: Session) -> List[Document]:
            rows = session.scalars(
                self._rows(environment, collection).order_by(StoredDocument.pk)
            ).all()
            return [self._decode(collection, row) for row in rows]

        return self._run(environment, query)

    async def find_one(
        self,
        collection: str,
        id_or_predicate: IdOrPredicate,
        environment: str
    ) -> Optional[Document]:
        if not callable(id_or_predicate):
            doc_id = str(id_or_predicate)

            def query(session: Session) -> Optional[Document]:
                row = session.scalars(
                    self._rows(environment, collection).where(StoredDocument.doc_id == doc_id)
                ).first()
                return self._decode(collection, row) if row is not None else None

            return self._run(environment, query)

        for document in await self.get_all(collection, environment):
            if id_or_predicate(document):
                return document
        return None

    async def insert_many(
        self,
        collection: str,
        documents: Iterable[Union[Document, dict]],
        environment: str
    ) -> int:
        new_docs = [to_document(collection, doc) for doc in documents]
        if not new_docs:
            return 0

        def insert(session: Session) -> int:
            ids = [doc.id for doc in new_docs]
            duplicates = set(session.scalars(
                select(StoredDocument.doc_id).where(
                    StoredDocument.environment == environment,
                    StoredDocument.collection == collection,
                    StoredDocument.doc_id.in_(ids),
                )
            ).all())
            seen = set()
            for doc_id in ids:
                if doc_id in duplicates or doc_id in seen:
                    raise DuplicateDocumentError(collection, doc_id, environment)
                seen.add(doc_id)

            now = datetime.utcnow()
            session.add_all([
                StoredDocument(
                    environment=environment,
                    collection=collection,
                    doc_id=doc.id,
                    body=self._encode(doc),
                    created_at=now,
                    updated_at=now,
                )
                for doc in new_docs
            ])
            try:
                session.commit()
            except IntegrityError:
                # Another writer inserted one of the ids after our check
                session.rollback()
                raise DuplicateDocumentError(collection, ids[0], environment)
            return len(new_docs)

        count = self._run(environment, insert)
        logger.debug(f"Inserted {count} documents into {environment}/{collection}")
        return count

    async def upsert(
        self,
        collection: str,
        id_or_predicate: IdOrPredicate,
        document: Union[Document, dict],
        environment: str
    ) -> bool:
        replacement = to_document(collection, document)
        body = self._encode(replacement)

        if callable(id_or_predicate):
            predicate = as_predicate(id_or_predicate)
            match = None
            for existing in await self.get_all(collection, environment):
                if predicate(existing):
                    match = existing.id
                    break
        else:
            match = str(id_or_predicate)

        def write(session: Session) -> bool:
            now = datetime.utcnow()
            row = None
            if match is not None:
                row = session.scalars(
                    self._rows(environment, collection).where(StoredDocument.doc_id == match)
                ).first()

            if row is not None:
                row.doc_id = replacement.id
                row.body = body
                row.updated_at = now
                session.commit()
                return True

            session.add(StoredDocument(
                environment=environment,
                collection=collection,
                doc_id=replacement.id,
                body=body,
                created_at=now,
                updated_at=now,
            ))
            try:
                session.commit()
                return False
            except IntegrityError:
                # Lost an insert race: replace the row the other writer created
                session.rollback()
                row = session.scalars(
                    self._rows(environment, collection).where(StoredDocument.doc_id == replacement.id)
                ).one()
                row.body = body
                row.updated_at = now
                session.commit()
                return True

        replaced = self._run(environment, write)
        logger.debug(
            f"{'Replaced' if replaced else 'Inserted'} {replacement.id} in {environment}/{collection}"
        )
        return replaced

    async def clear_environment(self, environment: str) -> None:
        def clear(session: Session) -> int:
            result = session.execute(
                delete(StoredDocument).where(StoredDocument.environment == environment)
            )
            session.commit()
            return result.rowcount or 0

        deleted = self._run(environment, clear)
        logger.info(f"Cleared all data from {environment} ({deleted} documents)")

    async def get_stats(self, environment: str) -> DatabaseStats:
        if not self.has_environment(environment):
            return DatabaseStats(environment=environment, error="Environment not found")

        def stats(session: Session) -> DatabaseStats:
            collections = session.scalar(
                select(func.count(func.distinct(StoredDocument.collection)))
                .where(StoredDocument.environment == environment)
            ) or 0
            bodies = session.scalars(
                select(StoredDocument.body).where(StoredDocument.environment == environment)
            ).all()
            data_size = sum(len(json.dumps(body)) for body in bodies)
            bind = session.get_bind()
            return DatabaseStats(
                environment=environment,
                database_name=f"{bind.url.database or bind.url.drivername}:{environment}",
                collections=collections,
                objects=len(bodies),
                data_size=data_size,
                storage_size=data_size,
            )

        try:
            return self._run(environment, stats)
        except StoreUnavailableError as e:
            return DatabaseStats(environment=environment, error=str(e))

    async def test_connection(self, environment: str) -> bool:
        if not self.has_environment(environment):
            return False
        try:
            self._run(environment, lambda session: session.execute(select(1)).scalar())
            return True
        except StoreUnavailableError as e:
            logger.warning(f"Connection test for {environment} failed: {e}")
            return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _run(self, environment: str, operation: Callable[[Session], T]) -> T:
        """Run `operation` in a fresh session with retries and error translation."""
        if environment not in self._environments:
            raise UnknownEnvironmentError(environment, self._environments)

        @_retry_transient
        def attempt() -> T:
            with self._session_factory() as session:
                return operation(session)

        try:
            return attempt()
        except SQLAlchemyError as e:
            logger.error(f"Database error in {environment}: {e}")
            raise StoreUnavailableError(environment, f"Database error in '{environment}': {e}") from e

    @staticmethod
    def _rows(environment: str, collection: str):
        return select(StoredDocument).where(
            StoredDocument.environment == environment,
            StoredDocument.collection == collection,
        )

    @staticmethod
    def _encode(document: Document) -> dict:
        return document.model_dump(mode="json")

    @staticmethod
    def _decode(collection: str, row: StoredDocument) -> Document:
        return to_document(collection, row.body)

"""In-memory document store.

Environment -> collection -> ordered list of documents. Used for local
development, demos and tests. All reads return deep copies.
"""
import json
import threading
from typing import Dict, Iterable, List, Optional, Union

from app.core.exceptions import DuplicateDocumentError, UnknownEnvironmentError
from app.core.logging import get_logger
from app.models.documents import Document
from app.services.store.base import (
    DatabaseStats,
    DocumentStore,
    IdOrPredicate,
    as_predicate,
    to_document,
)

logger = get_logger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """
    Document store kept in process memory.

    The set of environments is fixed at construction; collections are
    created on first write.
    """

    def __init__(self, environments: Iterable[str] = ("Production", "Local")):
        self._environments: List[str] = list(dict.fromkeys(environments))
        self._data: Dict[str, Dict[str, List[Document]]] = {
            env: {} for env in self._environments
        }
        self._lock = threading.RLock()

    def list_environments(self) -> List[str]:
        return list(self._environments)

    async def get_all(self, collection: str, environment: str) -> List[Document]:
        with self._lock:
            documents = self._environment_data(environment).get(collection, [])
            return [doc.model_copy(deep=True) for doc in documents]

    async def find_one(
        self,
        collection: str,
        id_or_predicate: IdOrPredicate,
        environment: str
    ) -> Optional[Document]:
        predicate = as_predicate(id_or_predicate)
        with self._lock:
            for doc in self._environment_data(environment).get(collection, []):
                if predicate(doc):
                    return doc.model_copy(deep=True)
        return None

    async def insert_many(
        self,
        collection: str,
        documents: Iterable[Union[Document, dict]],
        environment: str
    ) -> int:
        new_docs = [to_document(collection, doc) for doc in documents]

        with self._lock:
            existing = self._environment_data(environment).setdefault(collection, [])
            seen = {doc.id for doc in existing}
            for doc in new_docs:
                if doc.id in seen:
                    raise DuplicateDocumentError(collection, doc.id, environment)
                seen.add(doc.id)
            existing.extend(new_docs)

        logger.debug(f"Inserted {len(new_docs)} documents into {environment}/{collection}")
        return len(new_docs)

    async def upsert(
        self,
        collection: str,
        id_or_predicate: IdOrPredicate,
        document: Union[Document, dict],
        environment: str
    ) -> bool:
        replacement = to_document(collection, document)
        predicate = as_predicate(id_or_predicate)

        with self._lock:
            documents = self._environment_data(environment).setdefault(collection, [])
            for index, existing in enumerate(documents):
                if predicate(existing):
                    documents[index] = replacement
                    logger.debug(f"Replaced {replacement.id} in {environment}/{collection}")
                    return True

            documents.append(replacement)
            logger.debug(f"Inserted {replacement.id} in {environment}/{collection}")
            return False

    async def clear_environment(self, environment: str) -> None:
        with self._lock:
            self._environment_data(environment).clear()
        logger.info(f"Cleared all data from {environment}")

    async def get_stats(self, environment: str) -> DatabaseStats:
        if not self.has_environment(environment):
            return DatabaseStats(environment=environment, error="Environment not found")

        with self._lock:
            collections = self._data[environment]
            objects = sum(len(docs) for docs in collections.values())
            data_size = sum(
                len(json.dumps(doc.model_dump(mode="json")))
                for docs in collections.values()
                for doc in docs
            )

        return DatabaseStats(
            environment=environment,
            database_name=f"InMemory_{environment}",
            collections=len(collections),
            objects=objects,
            data_size=data_size,
            storage_size=data_size,
        )

    def _environment_data(self, environment: str) -> Dict[str, List[Document]]:
        try:
            return self._data[environment]
        except KeyError:
            raise UnknownEnvironmentError(environment, self._environments) from None

"""
Base document store interface.

A store holds documents partitioned by environment and collection. It owns
no sync logic: the resolver and orchestrator only talk to this interface,
so any backend (in-memory, SQL, ...) can sit behind them.

Conventions shared by every backend:
- Documents handed out are copies; mutating them never changes stored state.
- Unknown environments raise UnknownEnvironmentError.
- Backend connectivity failures raise StoreUnavailableError.
- `id_or_predicate` is either a document id (str) or a callable taking a
  Document and returning bool.

Example:
    store = InMemoryDocumentStore(["Production", "Local"])
    await store.insert_many("teams", [Team(id="t1", name="Liverpool")], "Production")
    team = await store.find_one("teams", "t1", "Production")
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Union

from app.models.documents import Document
from app.models.reference_model import matches_text, model_for_collection

Predicate = Callable[[Document], bool]
IdOrPredicate = Union[str, Predicate]


@dataclass
class DatabaseStats:
    """Size summary for one environment."""

    environment: str
    database_name: str = ""
    collections: int = 0
    objects: int = 0
    data_size: int = 0
    storage_size: int = 0
    error: Optional[str] = None

    def format_data_size(self) -> str:
        return format_bytes(self.data_size)

    def format_storage_size(self) -> str:
        return format_bytes(self.storage_size)

    def to_dict(self) -> dict:
        return {
            'environment': self.environment,
            'database_name': self.database_name,
            'collections': self.collections,
            'documents': self.objects,
            'data_size': self.data_size,
            'storage_size': self.storage_size,
            'data_size_display': self.format_data_size(),
            'storage_size_display': self.format_storage_size(),
            'error': self.error,
        }


def format_bytes(size: int) -> str:
    """Render a byte count as '1.5 KB', '3 MB', ..."""
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    order = 0
    while value >= 1024 and order < len(units) - 1:
        order += 1
        value /= 1024
    return f"{value:.2f}".rstrip("0").rstrip(".") + f" {units[order]}"


def as_predicate(id_or_predicate: IdOrPredicate) -> Predicate:
    """Normalize an id or predicate into a predicate."""
    if callable(id_or_predicate):
        return id_or_predicate
    doc_id = str(id_or_predicate)
    return lambda document: document.id == doc_id


def to_document(collection: str, data: Union[Document, dict]) -> Document:
    """Coerce raw data into the collection's document model."""
    model = model_for_collection(collection)
    if isinstance(data, model):
        return data.model_copy(deep=True)
    if isinstance(data, Document):
        data = data.model_dump()
    return model.model_validate(data)


class DocumentStore(ABC):
    """
    Abstract document store.

    Subclasses implement storage. Arguments run collection first,
    environment last.
    """

    @abstractmethod
    def list_environments(self) -> List[str]:
        """Names of the environments this store serves."""

    @abstractmethod
    async def get_all(self, collection: str, environment: str) -> List[Document]:
        """All documents of a collection, in insertion order."""

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        id_or_predicate: IdOrPredicate,
        environment: str
    ) -> Optional[Document]:
        """First matching document, or None."""

    @abstractmethod
    async def insert_many(
        self,
        collection: str,
        documents: Iterable[Union[Document, dict]],
        environment: str
    ) -> int:
        """
        Insert documents.

        Raises:
            DuplicateDocumentError: if an id already exists in the collection

        Returns:
            Number of documents inserted
        """

    @abstractmethod
    async def upsert(
        self,
        collection: str,
        id_or_predicate: IdOrPredicate,
        document: Union[Document, dict],
        environment: str
    ) -> bool:
        """
        Replace the first matching document, or append if none matches.

        Returns:
            True if an existing document was replaced, False if inserted
        """

    @abstractmethod
    async def clear_environment(self, environment: str) -> None:
        """Delete every document of an environment."""

    @abstractmethod
    async def get_stats(self, environment: str) -> DatabaseStats:
        """Size summary for an environment."""

    # ------------------------------------------------------------------
    # Derived operations - backends may override for efficiency
    # ------------------------------------------------------------------

    async def find(
        self,
        collection: str,
        predicate: Predicate,
        environment: str
    ) -> List[Document]:
        """All documents matching a predicate."""
        return [doc for doc in await self.get_all(collection, environment) if predicate(doc)]

    async def find_by_text(
        self,
        collection: str,
        search_text: str,
        environment: str
    ) -> List[Document]:
        """Case-insensitive text search using the kind's search fields."""
        return [
            doc for doc in await self.get_all(collection, environment)
            if matches_text(doc, search_text, collection)
        ]

    async def insert_one(
        self,
        collection: str,
        document: Union[Document, dict],
        environment: str
    ) -> None:
        await self.insert_many(collection, [document], environment)

    async def test_connection(self, environment: str) -> bool:
        """True if the environment exists and can be queried."""
        return environment in self.list_environments()

    def has_environment(self, environment: str) -> bool:
        return environment in self.list_environments()

"""
Error types shared by the store and the sync engine.

Entity-scoped problems (a missing root, a dangling reference, one id that
fails to copy) are reported in the SyncReport and never raised. Only
conditions that make a whole environment unusable are exceptions.
"""
from typing import Iterable, Optional


class StoreUnavailableError(RuntimeError):
    """Raised when an environment of the store cannot be reached or queried."""

    def __init__(self, environment: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Store unavailable for environment '{environment}'")
        self.environment = environment


class UnknownEnvironmentError(StoreUnavailableError):
    """Raised when a request names an environment the store does not have."""

    def __init__(self, environment: str, available: Iterable[str] = ()) -> None:
        available = list(available)
        super().__init__(
            environment,
            f"Environment '{environment}' not found. "
            f"Available environments: {', '.join(available) or 'none'}",
        )
        self.available = available


class DuplicateDocumentError(ValueError):
    """Raised when inserting a document whose id already exists in the collection."""

    def __init__(self, collection: str, doc_id: str, environment: str) -> None:
        super().__init__(f"Document '{doc_id}' already exists in {environment}/{collection}")
        self.collection = collection
        self.doc_id = doc_id
        self.environment = environment

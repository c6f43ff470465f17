"""Shared FastAPI dependencies for the sync and environment routes."""
import logging
from typing import NoReturn

from fastapi import Depends, HTTPException, Request

from app.core.exceptions import StoreUnavailableError, UnknownEnvironmentError
from app.services.store.base import DocumentStore
from app.services.sync.locks import KeyedLockRegistry
from app.services.sync.lookup import GameLookupService
from app.services.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


def get_store(request: Request) -> DocumentStore:
    """Store created by the application lifespan."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Document store not initialized")
    return store


def get_lock_registry(request: Request) -> KeyedLockRegistry:
    return request.app.state.commit_locks


def get_orchestrator(
    store: DocumentStore = Depends(get_store),
    locks: KeyedLockRegistry = Depends(get_lock_registry),
) -> SyncOrchestrator:
    """Dependency to get sync orchestrator instance."""
    return SyncOrchestrator(store, locks=locks)


def get_lookup_service(store: DocumentStore = Depends(get_store)) -> GameLookupService:
    return GameLookupService(store)


def raise_store_error(error: StoreUnavailableError) -> NoReturn:
    """Translate a store failure into the matching HTTP error."""
    if isinstance(error, UnknownEnvironmentError):
        raise HTTPException(status_code=404, detail=str(error))
    logger.error(f"Store unavailable: {error}")
    raise HTTPException(status_code=503, detail=f"❌ {error}")

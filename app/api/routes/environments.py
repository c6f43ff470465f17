"""Environment API routes: list, connectivity, statistics and reset."""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.dependencies import get_store, raise_store_error
from app.core.exceptions import StoreUnavailableError, UnknownEnvironmentError
from app.services.store.base import DocumentStore
from app.services.sync import formatting

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/environments", tags=["environments"])


@router.get("")
async def list_environments(store: DocumentStore = Depends(get_store)) -> Dict:
    """List all available environments."""
    environments = store.list_environments()
    return {
        'environments': environments,
        'message': formatting.format_environments(environments)
    }


@router.get("/{environment}/connection")
async def test_connection(
    environment: str,
    store: DocumentStore = Depends(get_store)
) -> Dict:
    """Test the connection to an environment."""
    connected = await store.test_connection(environment)
    return {
        'environment': environment,
        'connected': connected,
        'message': formatting.format_connection(environment, connected)
    }


@router.get("/{environment}/stats")
async def get_database_stats(
    environment: str,
    store: DocumentStore = Depends(get_store)
) -> Dict:
    """Get document counts and estimated sizes for an environment."""
    stats = await store.get_stats(environment)
    if stats.error and not store.has_environment(environment):
        raise HTTPException(status_code=404, detail=formatting.format_stats(stats))

    return {
        **stats.to_dict(),
        'message': formatting.format_stats(stats)
    }


@router.delete("/{environment}")
async def clear_environment(
    environment: str,
    confirm: bool = Query(False, description="Must be true to delete all documents"),
    store: DocumentStore = Depends(get_store)
) -> Dict:
    """
    Delete every document in an environment.

    Requires confirm=true.
    """
    if not confirm:
        raise HTTPException(
            status_code=400,
            detail=f"Pass confirm=true to delete all data in {environment}"
        )

    try:
        await store.clear_environment(environment)
    except StoreUnavailableError as e:
        raise_store_error(e)

    logger.warning(f"Environment {environment} cleared via API")
    return {
        'environment': environment,
        'cleared': True,
        'message': f"🗑️  Cleared all data from {environment}"
    }

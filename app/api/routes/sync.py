"""Sync API routes for previewing and copying games between environments.

Provides endpoints for:
- Previewing what a game sync would copy (dry run)
- Syncing a game and its dependencies into another environment
- Finding games by team name and date range

Query parameter names (sourceEnvironment, targetEnvironment, teamName, ...)
are part of the public contract and must not change.
"""
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from app.api.dependencies import get_lookup_service, get_orchestrator, raise_store_error
from app.core.config import settings
from app.core.exceptions import StoreUnavailableError
from app.services.sync import formatting
from app.services.sync.lookup import GameLookupService
from app.services.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/games/{gameId}/preview")
async def preview_game_sync(
    game_id: str = Path(..., alias="gameId", description="Game ID to preview"),
    source_environment: str = Query(
        settings.DEFAULT_SOURCE_ENVIRONMENT,
        alias="sourceEnvironment",
        description="Source environment"
    ),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> Dict:
    """
    Preview what would be synced for a game (dry run).

    Returns per-collection document counts for the game and everything it
    references. Nothing is written.
    """
    try:
        report = await orchestrator.preview_game(game_id, source_environment)
    except StoreUnavailableError as e:
        raise_store_error(e)

    return {
        **report.to_dict(),
        'message': formatting.format_preview(report)
    }


@router.post("/games/{gameId}")
async def sync_game(
    game_id: str = Path(..., alias="gameId", description="Game ID to sync"),
    source_environment: str = Query(
        settings.DEFAULT_SOURCE_ENVIRONMENT,
        alias="sourceEnvironment",
        description="Source environment"
    ),
    target_environment: str = Query(
        settings.DEFAULT_TARGET_ENVIRONMENT,
        alias="targetEnvironment",
        description="Target environment (usually Local)"
    ),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> Dict:
    """
    Sync a game and all its dependencies from source to target.

    Dependencies are written before the game itself. Documents referenced
    by the game but missing from the source are listed under `skipped`.
    """
    try:
        report = await orchestrator.sync_game(game_id, source_environment, target_environment)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailableError as e:
        raise_store_error(e)

    return {
        **report.to_dict(),
        'message': formatting.format_commit(report)
    }


@router.get("/games")
async def find_games(
    team_name: str = Query(..., alias="teamName", description="Team name (partial match)"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Start date (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="End date (YYYY-MM-DD)"),
    environment: str = Query(settings.DEFAULT_SOURCE_ENVIRONMENT, description="Environment to search"),
    lookup: GameLookupService = Depends(get_lookup_service)
) -> Dict:
    """
    Find games by team name and date range.

    Dates are inclusive and compared by calendar day. Unparseable dates are
    ignored. Results are newest first.
    """
    try:
        games = await lookup.find_by_team_name_and_date_range(
            environment, team_name, start_date=start_date, end_date=end_date
        )
    except StoreUnavailableError as e:
        raise_store_error(e)

    return {
        'environment': environment,
        'team_name': team_name,
        'count': len(games),
        'games': [game.model_dump(mode="json") for game in games],
        'message': formatting.format_games(games, team_name, environment)
    }

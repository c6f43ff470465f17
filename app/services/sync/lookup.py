"""Game lookup by team name and date range."""
import logging
from datetime import date, datetime
from typing import List, Optional, Union

from app.models.documents import Game
from app.models.reference_model import EntityKind, collection_for
from app.services.store.base import DocumentStore

logger = logging.getLogger(__name__)

DateBound = Union[date, datetime, str, None]


def parse_date_bound(value: DateBound) -> Optional[date]:
    """
    Normalize a date bound to a calendar date.

    Accepts date, datetime or an ISO-8601 string ("2024-01-15" or a full
    timestamp). Anything unparseable is treated as no bound.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        logger.debug(f"Ignoring unparseable date bound '{value}'")
        return None


class GameLookupService:
    """Find games in an environment for a team within an optional date window."""

    def __init__(self, store: DocumentStore, default_limit: Optional[int] = None):
        from app.core.config import settings

        self.store = store
        self.default_limit = default_limit or settings.FIND_GAMES_LIMIT

    async def find_by_team_name_and_date_range(
        self,
        environment: str,
        team_name: str,
        start_date: DateBound = None,
        end_date: DateBound = None,
        limit: Optional[int] = None,
    ) -> List[Game]:
        """
        Games where either team name contains `team_name` (case-insensitive).

        Args:
            environment: Environment to search
            team_name: Substring of the home or away team name
            start_date: Inclusive lower bound on the game's calendar date
            end_date: Inclusive upper bound on the game's calendar date
            limit: Max results (defaults to FIND_GAMES_LIMIT)

        Returns:
            Matching games, newest first
        """
        start = parse_date_bound(start_date)
        end = parse_date_bound(end_date)
        limit = limit if limit is not None else self.default_limit

        games = await self.store.find_by_text(
            collection_for(EntityKind.GAME), team_name, environment
        )

        def in_range(game: Game) -> bool:
            if start is None and end is None:
                return True
            if game.date is None:
                return False
            game_day = game.date.date()
            if start is not None and game_day < start:
                return False
            if end is not None and game_day > end:
                return False
            return True

        matches = [game for game in games if in_range(game)]
        matches.sort(
            key=lambda game: game.date.replace(tzinfo=None) if game.date else datetime.min,
            reverse=True,
        )

        logger.info(
            f"Found {len(matches)} games for '{team_name}' in {environment}"
            f"{f', returning {limit}' if len(matches) > limit else ''}"
        )
        return matches[:limit]

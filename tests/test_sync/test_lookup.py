"""Tests for GameLookupService and date bound parsing."""
from datetime import date, datetime

import pytest

from app.services.sync.lookup import GameLookupService, parse_date_bound

# Import helpers from conftest
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import make_game


@pytest.fixture
async def games_store(empty_store):
    """Production with twelve Liverpool games in January 2024 and one Chelsea game."""
    games = [
        make_game(f"liv-{day:02d}", "Liverpool", "Everton", datetime(2024, 1, day, 20, 0))
        for day in range(1, 13)
    ]
    games.append(make_game("che-1", "Chelsea", "Arsenal", datetime(2024, 1, 5, 17, 30)))
    games.append(make_game("away-1", "Brentford", "LIVERPOOL FC", datetime(2023, 12, 30, 15, 0)))
    await empty_store.insert_many("games", games, "Production")
    return empty_store


class TestParseDateBound:
    """Tests for parse_date_bound()."""

    def test_iso_date(self):
        """Should parse YYYY-MM-DD."""
        assert parse_date_bound("2024-01-15") == date(2024, 1, 15)

    def test_iso_timestamp(self):
        """Should reduce a timestamp to its calendar date."""
        assert parse_date_bound("2024-01-15T18:30:00Z") == date(2024, 1, 15)
        assert parse_date_bound(datetime(2024, 1, 15, 18, 30)) == date(2024, 1, 15)

    @pytest.mark.parametrize("value", [None, "", "   ", "not-a-date", "2024-13-45", "2024-01-15garbage"])
    def test_unparseable_is_no_bound(self, value):
        """Should treat missing or garbage input as no bound."""
        assert parse_date_bound(value) is None


class TestGameLookupService:
    """Tests for find_by_team_name_and_date_range()."""

    @pytest.mark.asyncio
    async def test_newest_first_capped_at_ten(self, games_store):
        """Should return at most ten games, newest first."""
        lookup = GameLookupService(games_store, default_limit=10)

        games = await lookup.find_by_team_name_and_date_range("Production", "Liverpool")

        assert len(games) == 10
        assert games[0].id == "liv-12"
        dates = [game.date for game in games]
        assert dates == sorted(dates, reverse=True)

    @pytest.mark.asyncio
    async def test_case_insensitive_home_or_away(self, games_store):
        """Should match the team name in either slot regardless of case."""
        lookup = GameLookupService(games_store, default_limit=50)

        games = await lookup.find_by_team_name_and_date_range("Production", "liverpool")

        assert len(games) == 13
        assert "away-1" in [game.id for game in games]

    @pytest.mark.asyncio
    async def test_date_bounds_are_inclusive(self, games_store):
        """Should include games on the start and end dates."""
        lookup = GameLookupService(games_store)

        games = await lookup.find_by_team_name_and_date_range(
            "Production", "Liverpool", start_date="2024-01-03", end_date="2024-01-05"
        )

        assert [game.id for game in games] == ["liv-05", "liv-04", "liv-03"]

    @pytest.mark.asyncio
    async def test_unparseable_bound_is_ignored(self, games_store):
        """Should ignore an end date it cannot parse."""
        lookup = GameLookupService(games_store, default_limit=50)

        games = await lookup.find_by_team_name_and_date_range(
            "Production", "Liverpool", start_date="2024-01-10", end_date="whenever"
        )

        assert [game.id for game in games] == ["liv-12", "liv-11", "liv-10"]

    @pytest.mark.asyncio
    async def test_no_match(self, games_store):
        """Should return an empty list for an unknown team."""
        lookup = GameLookupService(games_store)

        games = await lookup.find_by_team_name_and_date_range("Production", "Juventus")

        assert games == []

    @pytest.mark.asyncio
    async def test_searches_requested_environment_only(self, games_store):
        """Should not return games from another environment."""
        lookup = GameLookupService(games_store)

        games = await lookup.find_by_team_name_and_date_range("Local", "Liverpool")

        assert games == []

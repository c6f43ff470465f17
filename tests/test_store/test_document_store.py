"""Behaviour shared by every DocumentStore backend.

Each test runs against the in-memory store and the SQL store (SQLite
in-memory database).
"""
import pytest

from app.core.exceptions import DuplicateDocumentError, UnknownEnvironmentError
from app.models import Game, Team, TeamRef
from app.services.store.memory import InMemoryDocumentStore
from app.services.store.sql import SqlDocumentStore

ENVIRONMENTS = ["Production", "Local"]


@pytest.fixture(params=["memory", "sql"])
def store(request, sql_session_factory):
    if request.param == "memory":
        return InMemoryDocumentStore(ENVIRONMENTS)
    return SqlDocumentStore(sql_session_factory, ENVIRONMENTS)


class TestDocumentStore:
    """Contract tests for store backends."""

    # Reads and writes
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_insert_and_find_one(self, store):
        """Should find an inserted document by id."""
        await store.insert_many("teams", [Team(id="t1", name="Liverpool")], "Production")

        team = await store.find_one("teams", "t1", "Production")

        assert isinstance(team, Team)
        assert team.name == "Liverpool"

    @pytest.mark.asyncio
    async def test_find_one_with_predicate(self, store):
        """Should accept a predicate instead of an id."""
        await store.insert_many(
            "teams",
            [Team(id="t1", name="Liverpool"), Team(id="t2", name="Chelsea")],
            "Production",
        )

        team = await store.find_one("teams", lambda t: t.name == "Chelsea", "Production")

        assert team.id == "t2"

    @pytest.mark.asyncio
    async def test_find_one_missing(self, store):
        """Should return None for an unknown id."""
        assert await store.find_one("teams", "nope", "Production") is None

    @pytest.mark.asyncio
    async def test_environments_are_disjoint(self, store):
        """Should not see documents of another environment."""
        await store.insert_one("teams", Team(id="t1"), "Production")

        assert await store.get_all("teams", "Local") == []
        assert await store.find_one("teams", "t1", "Local") is None

    @pytest.mark.asyncio
    async def test_get_all_preserves_insertion_order(self, store):
        """Should return documents in the order they were inserted."""
        await store.insert_many("teams", [Team(id="b"), Team(id="a"), Team(id="c")], "Production")

        teams = await store.get_all("teams", "Production")

        assert [team.id for team in teams] == ["b", "a", "c"]

    @pytest.mark.asyncio
    async def test_duplicate_insert_rejected(self, store):
        """Should refuse to insert an id that already exists."""
        await store.insert_one("teams", Team(id="t1"), "Production")

        with pytest.raises(DuplicateDocumentError):
            await store.insert_one("teams", Team(id="t1"), "Production")

    @pytest.mark.asyncio
    async def test_same_id_in_other_collection_allowed(self, store):
        """Should scope id uniqueness to the collection."""
        await store.insert_one("teams", Team(id="x1"), "Production")
        await store.insert_one("games", Game(id="x1"), "Production")

        assert await store.find_one("games", "x1", "Production") is not None

    @pytest.mark.asyncio
    async def test_upsert_inserts_then_replaces(self, store):
        """Should append when missing and replace when present."""
        inserted = await store.upsert("teams", "t1", Team(id="t1", name="Old"), "Local")
        replaced = await store.upsert("teams", "t1", Team(id="t1", name="New"), "Local")

        teams = await store.get_all("teams", "Local")
        assert inserted is False
        assert replaced is True
        assert [(team.id, team.name) for team in teams] == [("t1", "New")]

    @pytest.mark.asyncio
    async def test_reads_are_copies(self, store):
        """Should not change stored state when a returned document is mutated."""
        await store.insert_one("teams", Team(id="t1", name="Liverpool"), "Production")

        team = await store.find_one("teams", "t1", "Production")
        team.name = "Changed"

        stored = await store.find_one("teams", "t1", "Production")
        assert stored.name == "Liverpool"

    @pytest.mark.asyncio
    async def test_extra_fields_round_trip(self, store):
        """Should keep fields the model does not declare."""
        await store.insert_one("games", {"id": "g1", "attendance": 74000}, "Production")

        game = await store.find_one("games", "g1", "Production")

        assert game.model_dump()["attendance"] == 74000

    @pytest.mark.asyncio
    async def test_find_and_find_by_text(self, store):
        """Should filter by predicate and by team name text."""
        await store.insert_many(
            "games",
            [
                Game(id="g1", home_team=TeamRef(id="t1", name="Liverpool"), home_score=3),
                Game(id="g2", home_team=TeamRef(id="t2", name="Chelsea"), home_score=0),
            ],
            "Production",
        )

        scored = await store.find("games", lambda g: (g.home_score or 0) > 0, "Production")
        by_text = await store.find_by_text("games", "LIVER", "Production")

        assert [g.id for g in scored] == ["g1"]
        assert [g.id for g in by_text] == ["g1"]

    # Environments
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_unknown_environment_raises(self, store):
        """Should raise UnknownEnvironmentError for unknown environments."""
        with pytest.raises(UnknownEnvironmentError):
            await store.get_all("teams", "Staging")

        with pytest.raises(UnknownEnvironmentError):
            await store.upsert("teams", "t1", Team(id="t1"), "Staging")

    @pytest.mark.asyncio
    async def test_list_environments(self, store):
        """Should list configured environments in order."""
        assert store.list_environments() == ENVIRONMENTS
        assert store.has_environment("Local")
        assert not store.has_environment("Staging")

    @pytest.mark.asyncio
    async def test_clear_environment(self, store):
        """Should delete every document of one environment only."""
        await store.insert_one("teams", Team(id="t1"), "Production")
        await store.insert_one("teams", Team(id="t1"), "Local")

        await store.clear_environment("Local")

        assert await store.get_all("teams", "Local") == []
        assert len(await store.get_all("teams", "Production")) == 1

    @pytest.mark.asyncio
    async def test_test_connection(self, store):
        """Should report reachable environments only."""
        assert await store.test_connection("Production") is True
        assert await store.test_connection("Staging") is False

    @pytest.mark.asyncio
    async def test_get_stats(self, store):
        """Should count collections and documents of an environment."""
        await store.insert_many("teams", [Team(id="t1"), Team(id="t2")], "Production")
        await store.insert_one("games", Game(id="g1"), "Production")

        stats = await store.get_stats("Production")

        assert stats.error is None
        assert stats.collections == 2
        assert stats.objects == 3
        assert stats.data_size > 0
        assert stats.to_dict()["documents"] == 3

    @pytest.mark.asyncio
    async def test_get_stats_unknown_environment(self, store):
        """Should return an error instead of raising."""
        stats = await store.get_stats("Staging")

        assert stats.error == "Environment not found"

"""Shared pytest fixtures for syncenv-api tests."""
import asyncio
import sys
from pathlib import Path
from datetime import datetime
from typing import Generator

import pytest
from sqlalchemy.orm import sessionmaker

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from app.models import (
    BasicMonikerRef,
    Competition,
    DocumentRef,
    Game,
    Player,
    Season,
    Team,
    TeamRef,
)
from app.services.store.memory import InMemoryDocumentStore

ENVIRONMENTS = ["Production", "Local"]


def make_example_documents():
    """
    Small Production data set.

    g1 references t1, t2, c1 and s1. t1 has player p1, which a game sync
    must not pull in.
    """
    teams = [
        Team(
            id="t1",
            name="Manchester United",
            short_name="Man Utd",
            country="England",
            players=[DocumentRef(id="p1")],
            competitions=[DocumentRef(id="c1")],
        ),
        Team(id="t2", name="Liverpool", short_name="Liverpool", country="England"),
    ]
    competitions = [
        Competition(
            id="c1",
            name="Premier League",
            code="EPL",
            seasons=[DocumentRef(id="s1")],
            participating_teams=[DocumentRef(id="t1"), DocumentRef(id="t2")],
        ),
    ]
    seasons = [Season(id="s1", name="2023-24", code="2023-24", is_active=True)]
    players = [
        Player(id="p1", first_name="Marcus", last_name="Rashford", current_team=DocumentRef(id="t1")),
    ]
    games = [
        Game(
            id="g1",
            date=datetime(2024, 1, 15, 15, 0),
            home_team=TeamRef(id="t1", name="Manchester United", short_name="Man Utd"),
            away_team=TeamRef(id="t2", name="Liverpool", short_name="Liverpool"),
            competition=BasicMonikerRef(id="c1", name="Premier League", code="EPL"),
            season=BasicMonikerRef(id="s1", name="2023-24", code="2023-24"),
            venue="Old Trafford",
            home_score=2,
            away_score=1,
        ),
    ]
    return {
        "teams": teams,
        "competitions": competitions,
        "seasons": seasons,
        "players": players,
        "games": games,
    }


async def load_documents(store, environment: str = "Production") -> None:
    for collection, documents in make_example_documents().items():
        await store.insert_many(collection, documents, environment)


def make_game(game_id: str, home: str, away: str, when: datetime, **kwargs) -> Game:
    """Game with team refs built from names (ids derived from the names)."""
    return Game(
        id=game_id,
        date=when,
        home_team=TeamRef(id=f"team-{home.lower()}", name=home),
        away_team=TeamRef(id=f"team-{away.lower()}", name=away),
        **kwargs
    )


@pytest.fixture
def empty_store() -> InMemoryDocumentStore:
    """In-memory store with Production and Local, no data."""
    return InMemoryDocumentStore(ENVIRONMENTS)


@pytest.fixture
async def memory_store(empty_store) -> InMemoryDocumentStore:
    """In-memory store with the example data set in Production."""
    await load_documents(empty_store)
    return empty_store


@pytest.fixture(scope="function")
def sql_session_factory() -> Generator[sessionmaker, None, None]:
    """Session factory bound to a fresh in-memory SQLite database."""
    from app.core.database import build_engine, init_db

    engine = build_engine("sqlite:///:memory:")
    init_db(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def empty_sql_store(sql_session_factory):
    from app.services.store.sql import SqlDocumentStore

    return SqlDocumentStore(sql_session_factory, ENVIRONMENTS)


@pytest.fixture
async def sql_store(empty_sql_store):
    """SQL store with the example data set in Production."""
    await load_documents(empty_sql_store)
    return empty_sql_store


@pytest.fixture
async def sample_store(empty_store) -> InMemoryDocumentStore:
    """In-memory store seeded with the full sample data set."""
    from app.services.sample_data import initialize_environments

    await initialize_environments(empty_store)
    return empty_store


@pytest.fixture(scope="function")
def test_client():
    """
    Create FastAPI TestClient backed by a freshly seeded in-memory store.

    The lifespan is not run; the store is injected through app.state and
    the get_store dependency instead.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/v1/environments")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from app.api.dependencies import get_store
    from app.main import app
    from app.services.sample_data import initialize_environments

    sample_store = InMemoryDocumentStore(ENVIRONMENTS)
    asyncio.run(initialize_environments(sample_store))

    previous_store = getattr(app.state, "store", None)
    app.state.store = sample_store
    app.dependency_overrides[get_store] = lambda: sample_store

    client = TestClient(app)
    client.store = sample_store
    yield client

    app.dependency_overrides.clear()
    app.state.store = previous_store

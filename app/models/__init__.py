"""
Models module.

- documents: pydantic models for every syncable entity kind
- reference_model: entity kinds, collections and one-hop reference edges
- documents_table: SQLAlchemy table used by the SQL store backend

Usage:
    from app.models import Game, Team, EntityKind

    game = Game(id="g1", home_team=TeamRef(id="t1", name="Man Utd"))
"""
from app.models.documents import (
    BasicMonikerRef,
    Competition,
    CompetitionType,
    Document,
    DocumentRef,
    Game,
    League,
    Player,
    Season,
    SyncMetadata,
    Team,
    TeamRef,
)
from app.models.reference_model import (
    COLLECTIONS,
    EntityKind,
    ReferenceField,
    collection_for,
    kind_for_collection,
    model_for_collection,
    parse_kind,
)

__all__ = [
    "BasicMonikerRef",
    "Competition",
    "CompetitionType",
    "Document",
    "DocumentRef",
    "Game",
    "League",
    "Player",
    "Season",
    "SyncMetadata",
    "Team",
    "TeamRef",
    "COLLECTIONS",
    "EntityKind",
    "ReferenceField",
    "collection_for",
    "kind_for_collection",
    "model_for_collection",
    "parse_kind",
]

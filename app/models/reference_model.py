"""
Reference Model: the closed set of entity kinds and their one-hop edges.

Every entity kind has:
- exactly one collection name (the same in every environment)
- one document model class
- a declared list of reference fields (the edges the resolver follows)
- a text-search predicate (used by the store's find_by_text)

All four tables are keyed by EntityKind and checked for completeness at
import time, so adding a kind without declaring its edges and search
behaviour fails immediately instead of silently producing incomplete
closures.

Edges:
    Game.home_team / away_team      -> Team
    Game.competition                -> Competition
    Game.season                     -> Season
    Game.league                     -> League
    Team.players[]                  -> Player
    Team.competitions[]             -> Competition
    Competition.seasons[]           -> Season
    Competition.participating_teams[] -> Team
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Type

from app.models.documents import (
    Competition,
    Document,
    DocumentRef,
    Game,
    League,
    Player,
    Season,
    Team,
)


class EntityKind(str, Enum):
    GAME = "game"
    TEAM = "team"
    COMPETITION = "competition"
    SEASON = "season"
    PLAYER = "player"
    LEAGUE = "league"


@dataclass(frozen=True)
class ReferenceField:
    """A named edge from one kind to another."""

    name: str
    target: EntityKind
    many: bool = False


COLLECTIONS: Dict[EntityKind, str] = {
    EntityKind.GAME: "games",
    EntityKind.TEAM: "teams",
    EntityKind.COMPETITION: "competitions",
    EntityKind.SEASON: "seasons",
    EntityKind.PLAYER: "players",
    EntityKind.LEAGUE: "leagues",
}

MODELS: Dict[EntityKind, Type[Document]] = {
    EntityKind.GAME: Game,
    EntityKind.TEAM: Team,
    EntityKind.COMPETITION: Competition,
    EntityKind.SEASON: Season,
    EntityKind.PLAYER: Player,
    EntityKind.LEAGUE: League,
}

REFERENCE_FIELDS: Dict[EntityKind, Tuple[ReferenceField, ...]] = {
    EntityKind.GAME: (
        ReferenceField("home_team", EntityKind.TEAM),
        ReferenceField("away_team", EntityKind.TEAM),
        ReferenceField("competition", EntityKind.COMPETITION),
        ReferenceField("season", EntityKind.SEASON),
        ReferenceField("league", EntityKind.LEAGUE),
    ),
    EntityKind.TEAM: (
        ReferenceField("players", EntityKind.PLAYER, many=True),
        ReferenceField("competitions", EntityKind.COMPETITION, many=True),
    ),
    EntityKind.COMPETITION: (
        ReferenceField("seasons", EntityKind.SEASON, many=True),
        ReferenceField("participating_teams", EntityKind.TEAM, many=True),
    ),
    EntityKind.SEASON: (),
    EntityKind.PLAYER: (),
    EntityKind.LEAGUE: (),
}


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in value.casefold()


def _ref_name(ref: Optional[DocumentRef]) -> Optional[str]:
    return getattr(ref, "name", None) if ref is not None else None


SEARCH_FIELDS: Dict[EntityKind, Callable[[Document], List[Optional[str]]]] = {
    EntityKind.GAME: lambda game: [_ref_name(game.home_team), _ref_name(game.away_team)],
    EntityKind.TEAM: lambda team: [team.name, team.short_name],
    EntityKind.PLAYER: lambda player: [player.first_name, player.last_name],
    EntityKind.COMPETITION: lambda _: [],
    EntityKind.SEASON: lambda _: [],
    EntityKind.LEAGUE: lambda _: [],
}


def _check_complete() -> None:
    for table_name, table in (
        ("COLLECTIONS", COLLECTIONS),
        ("MODELS", MODELS),
        ("REFERENCE_FIELDS", REFERENCE_FIELDS),
        ("SEARCH_FIELDS", SEARCH_FIELDS),
    ):
        missing = [kind.value for kind in EntityKind if kind not in table]
        if missing:
            raise RuntimeError(f"{table_name} has no entry for entity kind(s): {', '.join(missing)}")

    for kind, fields in REFERENCE_FIELDS.items():
        model_fields = MODELS[kind].model_fields
        for field in fields:
            if field.name not in model_fields:
                raise RuntimeError(f"{MODELS[kind].__name__} has no reference field '{field.name}'")


_check_complete()

_KINDS_BY_COLLECTION: Dict[str, EntityKind] = {name: kind for kind, name in COLLECTIONS.items()}


def collection_for(kind: EntityKind) -> str:
    return COLLECTIONS[kind]


def kind_for_collection(collection: str) -> Optional[EntityKind]:
    """Entity kind stored in `collection`, or None for collections outside the model."""
    return _KINDS_BY_COLLECTION.get(collection)


def model_for_collection(collection: str) -> Type[Document]:
    """Document class for a collection; plain Document for unknown collections."""
    kind = kind_for_collection(collection)
    return MODELS[kind] if kind is not None else Document


def parse_kind(value) -> EntityKind:
    """
    Accept an EntityKind, its value ("game") or its collection name ("games").

    Raises:
        ValueError: if the value names no known kind
    """
    if isinstance(value, EntityKind):
        return value
    text = str(value).strip().lower()
    try:
        return EntityKind(text)
    except ValueError:
        kind = kind_for_collection(text)
        if kind is None:
            raise ValueError(
                f"Unknown entity kind '{value}'. "
                f"Expected one of: {', '.join(k.value for k in EntityKind)}"
            )
        return kind


def iter_references(kind: EntityKind, document: Document) -> Iterator[Tuple[str, str]]:
    """
    Yield (collection, id) for every declared one-hop reference of `document`.

    Null references and references without an id are skipped. Duplicates are
    yielded as found; callers apply set semantics.
    """
    for field in REFERENCE_FIELDS[kind]:
        value = getattr(document, field.name, None)
        refs = (value or []) if field.many else [value]
        target_collection = COLLECTIONS[field.target]
        for ref in refs:
            ref_id = _ref_id(ref)
            if ref_id:
                yield target_collection, ref_id


def _ref_id(ref) -> Optional[str]:
    if ref is None:
        return None
    if isinstance(ref, dict):
        return ref.get("id")
    return getattr(ref, "id", None)


def matches_text(document: Document, search_text: str, collection: str) -> bool:
    """
    Case-insensitive substring match using the kind's search fields.

    Empty search text matches every document of a known kind.
    """
    kind = kind_for_collection(collection)
    if kind is None:
        return False
    needle = (search_text or "").casefold()
    if not needle:
        return True
    return any(_contains(value, needle) for value in SEARCH_FIELDS[kind](document))

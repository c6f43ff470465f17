"""Dependency resolver: builds the one-hop closure of a root entity.

Given a root kind, id and source environment, the resolver fetches the root
and records every id it references through the fields declared in the
Reference Model. Dependencies of dependencies are NOT followed: resolving a
game yields its teams, competition, season and league, but not the teams'
players.

A missing root is not an error. The resolver returns an empty closure and
the caller checks `closure.is_empty` before doing anything else. Dangling
references are not validated here either; they show up later when the
orchestrator fails to fetch them.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set

from app.models.documents import Document
from app.models.reference_model import (
    EntityKind,
    collection_for,
    iter_references,
    parse_kind,
)
from app.services.store.base import DocumentStore

logger = logging.getLogger(__name__)


@dataclass
class DependencyClosure:
    """
    Root entity plus the ids it references, grouped by collection.

    Built fresh per request and discarded with the report.
    """

    root_kind: EntityKind
    root_id: str
    source_environment: str
    entities: Dict[str, Dict[str, Document]] = field(default_factory=dict)
    dependencies: Dict[str, Set[str]] = field(default_factory=dict)

    def add_entity(self, collection: str, document: Document) -> None:
        self.entities.setdefault(collection, {})[document.id] = document

    def add_dependency(self, collection: str, doc_id: str) -> None:
        self.dependencies.setdefault(collection, set()).add(doc_id)

    @property
    def is_empty(self) -> bool:
        return self.total_entity_count == 0 and self.total_dependency_count == 0

    @property
    def root_collection(self) -> str:
        return collection_for(self.root_kind)

    @property
    def root(self) -> Document:
        return self.entities[self.root_collection][self.root_id]

    @property
    def total_entity_count(self) -> int:
        return sum(len(docs) for docs in self.entities.values())

    @property
    def total_dependency_count(self) -> int:
        return sum(len(ids) for ids in self.dependencies.values())

    def collections(self) -> List[str]:
        """Union of entity and dependency collections, in first-seen order."""
        return list(dict.fromkeys([*self.entities.keys(), *self.dependencies.keys()]))

    def ids_for(self, collection: str) -> List[str]:
        """Explicit and dependency ids of one collection, deduplicated and sorted."""
        ids = set(self.entities.get(collection, {}).keys())
        ids.update(self.dependencies.get(collection, set()))
        return sorted(ids)

    def iter_members(self) -> Iterator[str]:
        """'collection/id' for every member of the closure."""
        for collection in self.collections():
            for doc_id in self.ids_for(collection):
                yield f"{collection}/{doc_id}"


class DependencyResolver:
    """
    Resolve one-hop dependency closures against a document store.

    Store errors (StoreUnavailableError, UnknownEnvironmentError) propagate
    to the caller untouched.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def resolve(
        self,
        root_kind,
        root_id: str,
        source_environment: str
    ) -> DependencyClosure:
        """
        Build the closure for a root entity.

        Args:
            root_kind: EntityKind, kind name ("game") or collection ("games")
            root_id: Id of the root document
            source_environment: Environment to read from

        Returns:
            DependencyClosure; empty if the root does not exist
        """
        kind = parse_kind(root_kind)
        collection = collection_for(kind)
        closure = DependencyClosure(
            root_kind=kind,
            root_id=root_id,
            source_environment=source_environment,
        )

        root = await self.store.find_one(collection, root_id, source_environment)
        if root is None:
            logger.warning(f"{kind.value.capitalize()} {root_id} not found in {source_environment}")
            return closure

        closure.add_entity(collection, root)
        for target_collection, ref_id in iter_references(kind, root):
            closure.add_dependency(target_collection, ref_id)

        logger.info(
            f"Built dependency closure for {kind.value} {root_id}: "
            f"{closure.total_dependency_count} dependencies"
        )
        return closure

    async def resolve_game(self, game_id: str, source_environment: str) -> DependencyClosure:
        return await self.resolve(EntityKind.GAME, game_id, source_environment)

    async def resolve_team(self, team_id: str, source_environment: str) -> DependencyClosure:
        return await self.resolve(EntityKind.TEAM, team_id, source_environment)

    async def resolve_competition(self, competition_id: str, source_environment: str) -> DependencyClosure:
        return await self.resolve(EntityKind.COMPETITION, competition_id, source_environment)

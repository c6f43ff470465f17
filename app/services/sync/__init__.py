"""
Cross-environment sync engine.

Copies a root entity (normally a game) together with the documents it
references, one hop deep, from one data environment to another.

Key components:
- DependencyResolver: builds the one-hop closure of a root entity
- SyncOrchestrator: previews or commits a closure and produces a SyncReport
- KeyedLockRegistry: serializes concurrent writes to the same target document
- GameLookupService: finds games by team name and date range
"""
from app.services.sync.dependency_resolver import DependencyClosure, DependencyResolver
from app.services.sync.locks import KeyedLockRegistry
from app.services.sync.lookup import GameLookupService, parse_date_bound
from app.services.sync.orchestrator import SyncOrchestrator, SyncReport

__all__ = [
    "DependencyClosure",
    "DependencyResolver",
    "GameLookupService",
    "KeyedLockRegistry",
    "SyncOrchestrator",
    "SyncReport",
    "parse_date_bound",
]

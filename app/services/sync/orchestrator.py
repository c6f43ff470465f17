"""Sync orchestrator for copying a root entity and its dependencies between environments.

Two entry points share the same closure-building step:

- preview(): resolve the closure and count what would be copied. Read-only.
- commit(): copy every member of the closure from the source environment
  to the target environment, stamping SyncMetadata on each copy.

Copy order:
    Every non-root collection first, then the root's own collection last.
    If a commit is interrupted, readers of the target never see a root whose
    dependencies are missing. This is forward consistency, not a
    transaction: an interrupted commit can leave some dependencies copied
    and the root not.

Failure handling:
    - Root not found: report.not_found, no store mutation.
    - Dangling reference: skipped, listed in report.skipped, not counted.
    - Any other error on one id: logged, listed in report.failed, the rest
      of the batch continues.
    - StoreUnavailableError: aborts the whole request and propagates.

Concurrency:
    Ids of one collection are copied concurrently (bounded by a semaphore).
    Every fetch/stamp/upsert of (target, collection, id) holds that key's
    lock, so overlapping commits that share a dependency are serialized on
    it. Setting `cancel_event` stops new per-id work; upserts already in
    flight are shielded and complete.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from app.core.exceptions import StoreUnavailableError, UnknownEnvironmentError
from app.core.logging import sync_log_context
from app.models.documents import Document, SyncMetadata
from app.models.reference_model import parse_kind
from app.services.store.base import DocumentStore
from app.services.sync.dependency_resolver import DependencyClosure, DependencyResolver
from app.services.sync.locks import KeyedLockRegistry

logger = logging.getLogger(__name__)

_SYNCED = "synced"
_SKIPPED = "skipped"
_FAILED = "failed"
_CANCELLED = "cancelled"


@dataclass
class SyncReport:
    """Outcome of a preview or commit."""

    root_kind: str
    root_id: str
    source_environment: str
    target_environment: Optional[str] = None
    dry_run: bool = False
    not_found: bool = False
    cancelled: bool = False
    per_collection_counts: Dict[str, int] = field(default_factory=dict)
    synced: Dict[str, List[str]] = field(default_factory=dict)
    skipped: Dict[str, List[str]] = field(default_factory=dict)
    failed: Dict[str, List[str]] = field(default_factory=dict)
    duration_ms: int = 0

    @property
    def total_count(self) -> int:
        return sum(self.per_collection_counts.values())

    @property
    def skipped_count(self) -> int:
        return sum(len(ids) for ids in self.skipped.values())

    @property
    def failed_count(self) -> int:
        return sum(len(ids) for ids in self.failed.values())

    def to_dict(self) -> Dict:
        return {
            'root_kind': self.root_kind,
            'root_id': self.root_id,
            'source_environment': self.source_environment,
            'target_environment': self.target_environment,
            'dry_run': self.dry_run,
            'not_found': self.not_found,
            'cancelled': self.cancelled,
            'per_collection_counts': dict(self.per_collection_counts),
            'total_count': self.total_count,
            'skipped': {k: list(v) for k, v in self.skipped.items()},
            'failed': {k: list(v) for k, v in self.failed.items()},
            'duration_ms': self.duration_ms,
        }


class SyncOrchestrator:
    """
    Coordinates preview and commit of dependency closures.

    This is the main entry point of the sync engine; the API routes and
    scripts only talk to this class.
    """

    def __init__(
        self,
        store: DocumentStore,
        locks: Optional[KeyedLockRegistry] = None,
        actor: Optional[str] = None,
        max_concurrency: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the sync orchestrator.

        Args:
            store: Document store holding every environment
            locks: Shared per-key lock registry; pass the same registry to
                every orchestrator that writes to the same store
            actor: Tag written to SyncMetadata.synced_by
            max_concurrency: Max concurrent per-id copies within a collection
            clock: Returns the sync timestamp (UTC)
        """
        from app.core.config import settings

        self.store = store
        self.resolver = DependencyResolver(store)
        self.locks = locks if locks is not None else KeyedLockRegistry()
        self.actor = actor or settings.SYNC_ACTOR
        self.max_concurrency = max_concurrency or settings.SYNC_MAX_CONCURRENCY
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def preview(
        self,
        root_kind,
        root_id: str,
        source_environment: str
    ) -> SyncReport:
        """
        Count what a commit would copy, without touching the store.

        Per-collection count is the number of distinct ids (explicit and
        referenced) in that collection, whether or not they exist.
        """
        start = time.perf_counter()
        kind = parse_kind(root_kind)

        with sync_log_context("preview", root_id, kind=kind.value, source=source_environment):
            closure = await self.resolver.resolve(kind, root_id, source_environment)

            report = SyncReport(
                root_kind=kind.value,
                root_id=root_id,
                source_environment=source_environment,
                dry_run=True,
            )

            if closure.is_empty:
                report.not_found = True
            else:
                for collection in self.copy_order(closure):
                    count = len(closure.ids_for(collection))
                    if count:
                        report.per_collection_counts[collection] = count

            report.duration_ms = int((time.perf_counter() - start) * 1000)
            logger.info(
                f"Preview for {kind.value} {root_id}: "
                f"{'not found' if report.not_found else f'{report.total_count} documents'}"
            )
            return report

    async def commit(
        self,
        root_kind,
        root_id: str,
        source_environment: str,
        target_environment: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> SyncReport:
        """
        Copy a root entity and its one-hop dependencies to another environment.

        Re-running a commit converges to the same target state; only the
        SyncMetadata timestamp changes.

        Raises:
            ValueError: if source and target are the same environment
            UnknownEnvironmentError: if either environment does not exist
            StoreUnavailableError: if an environment cannot be queried
        """
        if source_environment == target_environment:
            raise ValueError("Source and target environments must differ")
        if not self.store.has_environment(target_environment):
            raise UnknownEnvironmentError(target_environment, self.store.list_environments())

        start = time.perf_counter()
        kind = parse_kind(root_kind)

        with sync_log_context(
            "commit", root_id, kind=kind.value, source=source_environment, target=target_environment
        ):
            logger.info(
                f"Starting sync for {kind.value} {root_id} "
                f"from {source_environment} to {target_environment}"
            )

            closure = await self.resolver.resolve(kind, root_id, source_environment)

            report = SyncReport(
                root_kind=kind.value,
                root_id=root_id,
                source_environment=source_environment,
                target_environment=target_environment,
            )

            if closure.is_empty:
                report.not_found = True
                report.duration_ms = int((time.perf_counter() - start) * 1000)
                return report

            synced_at = self._clock()
            semaphore = asyncio.Semaphore(self.max_concurrency)

            for collection in self.copy_order(closure):
                if cancel_event is not None and cancel_event.is_set():
                    report.cancelled = True
                    break

                await self._sync_collection(
                    collection, closure, report, target_environment,
                    synced_at, semaphore, cancel_event,
                )

            report.duration_ms = int((time.perf_counter() - start) * 1000)

            if report.cancelled:
                logger.warning(
                    f"Sync for {kind.value} {root_id} cancelled after {report.total_count} documents"
                )
            else:
                logger.info(
                    f"Completed sync for {kind.value} {root_id}: {report.total_count} documents "
                    f"({report.skipped_count} skipped, {report.failed_count} failed, {report.duration_ms}ms)"
                )
            return report

    async def preview_game(self, game_id: str, source_environment: str) -> SyncReport:
        return await self.preview("game", game_id, source_environment)

    async def sync_game(
        self,
        game_id: str,
        source_environment: str,
        target_environment: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> SyncReport:
        return await self.commit("game", game_id, source_environment, target_environment, cancel_event)

    @staticmethod
    def copy_order(closure: DependencyClosure) -> List[str]:
        """Non-root collections (sorted by name), then the root collection."""
        root_collection = closure.root_collection
        others = sorted(c for c in closure.collections() if c != root_collection)
        return others + [root_collection]

    async def _sync_collection(
        self,
        collection: str,
        closure: DependencyClosure,
        report: SyncReport,
        target_environment: str,
        synced_at: datetime,
        semaphore: asyncio.Semaphore,
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        ids = closure.ids_for(collection)
        if not ids:
            return

        is_root = collection == closure.root_collection
        dependencies = (
            [f"{c}/{doc_id}" for c, doc_ids in report.synced.items() for doc_id in doc_ids]
            if is_root else []
        )

        tasks = [
            asyncio.ensure_future(self._sync_one(
                collection, doc_id, closure.source_environment, target_environment,
                synced_at, dependencies, semaphore, cancel_event,
            ))
            for doc_id in ids
        ]
        try:
            outcomes = await asyncio.gather(*tasks)
        except StoreUnavailableError:
            # Stop sibling copies; in-flight writes still settle before we re-raise.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        for doc_id, outcome in zip(ids, outcomes):
            if outcome == _SYNCED:
                report.synced.setdefault(collection, []).append(doc_id)
            elif outcome == _SKIPPED:
                report.skipped.setdefault(collection, []).append(doc_id)
            elif outcome == _FAILED:
                report.failed.setdefault(collection, []).append(doc_id)
            elif outcome == _CANCELLED:
                report.cancelled = True

        synced_count = len(report.synced.get(collection, []))
        if synced_count:
            report.per_collection_counts[collection] = synced_count

    async def _sync_one(
        self,
        collection: str,
        doc_id: str,
        source_environment: str,
        target_environment: str,
        synced_at: datetime,
        dependencies: List[str],
        semaphore: asyncio.Semaphore,
        cancel_event: Optional[asyncio.Event],
    ) -> str:
        async with semaphore:
            if cancel_event is not None and cancel_event.is_set():
                return _CANCELLED

            try:
                async with self.locks.hold((target_environment, collection, doc_id)):
                    document = await self.store.find_one(collection, doc_id, source_environment)
                    if document is None:
                        logger.info(
                            f"Skipping dangling reference {collection}/{doc_id}: "
                            f"not found in {source_environment}"
                        )
                        return _SKIPPED

                    self._stamp(document, source_environment, synced_at, dependencies)
                    write = asyncio.ensure_future(
                        self.store.upsert(collection, doc_id, document, target_environment)
                    )
                    try:
                        await asyncio.shield(write)
                    except asyncio.CancelledError:
                        # Keep the key locked until the shielded write finishes.
                        await asyncio.wait({write})
                        raise
                    return _SYNCED
            except StoreUnavailableError:
                raise
            except Exception:
                logger.exception(f"Failed to sync {collection}/{doc_id} to {target_environment}")
                return _FAILED

    def _stamp(
        self,
        document: Document,
        source_environment: str,
        synced_at: datetime,
        dependencies: List[str],
    ) -> None:
        """Replace any previous SyncMetadata with a fresh one."""
        document.sync_info = SyncMetadata(
            last_synced=synced_at,
            source_environment=source_environment,
            synced_by=self.actor,
            sync_version=1,
            dependencies_synced=list(dependencies),
        )

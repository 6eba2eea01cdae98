"""Read path for the public site plus the normalising write path for admin saves.

``load`` fans out six concurrent store reads, decides whether the store is
down, repairs media references against the live blob inventory, and returns
the repaired payload immediately. Write-backs of repaired groups and the disk
snapshot run as fire-and-forget tasks whose failures are logged, never raised
and never retried.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, Protocol

from .. import metrics
from ..observability import record_degradation, record_source
from ..schemas import (
    RECORD_TYPES,
    ContentRecord,
    ContentSource,
    EntityKind,
    PortfolioPayload,
    ResolvedPortfolio,
)
from ..utils.media_normalizer import normalize_record
from ..utils.media_paths import MediaNamespace
from .blob_inventory import BlobLister, build_blob_inventory
from .data_cache import DataCache
from .data_fallback import FallbackDataSupplier, RawDatasets, is_remote_unavailable
from .kv_store import GROUP_KEYS, KVKeys
from .media_repair import PortfolioRepairResult, repair_portfolio_media

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool: ...


class PortfolioDataService:
    def __init__(
        self,
        *,
        kv: KeyValueStore,
        blob_storage: BlobLister,
        cache: DataCache,
        namespace: MediaNamespace | None = None,
    ) -> None:
        self._kv = kv
        self._blob_storage = blob_storage
        self._cache = cache
        self._namespace = namespace or MediaNamespace.from_settings()
        self._fallback = FallbackDataSupplier(cache)
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def namespace(self) -> MediaNamespace:
        return self._namespace

    @property
    def cache(self) -> DataCache:
        return self._cache

    async def fetch_datasets(self) -> RawDatasets:
        projects, experiences, skills, achievements, mentorship, personal = await asyncio.gather(
            self._kv.get(KVKeys.PROJECTS),
            self._kv.get(KVKeys.EXPERIENCES),
            self._kv.get(KVKeys.SKILLS),
            self._kv.get(KVKeys.ACHIEVEMENTS),
            self._kv.get(KVKeys.MENTORSHIP),
            self._kv.get(KVKeys.PERSONAL_INFO),
        )
        return RawDatasets(
            projects=projects,
            experiences=experiences,
            skills=skills,
            achievements=achievements,
            mentorship=mentorship,
            personal=personal,
        )

    async def repair(self, payload: PortfolioPayload) -> PortfolioRepairResult:
        inventory = await build_blob_inventory(self._blob_storage, self._namespace)
        return repair_portfolio_media(payload, inventory, self._namespace)

    async def load(self) -> ResolvedPortfolio:
        datasets = await self.fetch_datasets()
        if is_remote_unavailable(datasets):
            record_degradation(
                "kv",
                "load",
                "Remote store appears unavailable, falling back",
                capture=False,
            )
            return await self._fallback.get_fallback_data()

        result = await self.repair(datasets.to_payload())
        repaired = result.payload
        if result.changed:
            self._spawn(self.persist_repairs(result), name="portfolio-repair-writeback")
        self._spawn(self._cache.sync(repaired), name="portfolio-cache-sync")

        record_source(ContentSource.remote)
        return ResolvedPortfolio(payload=repaired, source=ContentSource.remote)

    async def persist_repairs(self, result: PortfolioRepairResult) -> dict[EntityKind, bool]:
        writes: dict[EntityKind, Any] = {}
        for kind in result.changed_groups:
            if kind is EntityKind.personal:
                if result.personal.data is not None:
                    writes[kind] = result.personal.data.to_json()
                continue
            records = getattr(result, kind.value).data
            writes[kind] = [record.to_json() for record in records]

        if not writes:
            return {}

        kinds = list(writes)
        outcomes = await asyncio.gather(
            *(self._kv.set(GROUP_KEYS[kind], writes[kind]) for kind in kinds)
        )
        persisted = dict(zip(kinds, outcomes))
        for kind, ok in persisted.items():
            metrics.portfolio_repair_writebacks_total.labels(
                group=kind.value, outcome="written" if ok else "failed"
            ).inc()
            if ok:
                logger.info("Persisted repaired media references group=%s", kind.value)
            else:
                record_degradation(
                    "media_repair",
                    "writeback",
                    f"Failed to persist repaired {kind.value}",
                    capture=False,
                    group=kind.value,
                )
        return persisted

    async def store_group(self, kind: EntityKind, value: Any) -> bool:
        """Normalise media references in ``value`` and save it under the group's key."""

        model = RECORD_TYPES.get(kind)
        if model is None:
            document = value
        elif kind is EntityKind.personal:
            document = self._normalized(model, value) if isinstance(value, dict) else value
        else:
            document = [
                self._normalized(model, item) if isinstance(item, dict) else item
                for item in value or []
            ]
        return await self._kv.set(GROUP_KEYS[kind], document)

    def _normalized(self, model: type[ContentRecord], raw: dict[str, Any]) -> dict[str, Any]:
        return normalize_record(model.parse(raw), self._namespace).to_json()

    def _spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        metrics.portfolio_background_tasks.set(len(self._tasks))
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        metrics.portfolio_background_tasks.set(len(self._tasks))
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            record_degradation(
                "background",
                task.get_name(),
                f"Background persistence failed: {exc}",
                error=exc,
            )

    async def drain(self) -> None:
        """Wait for in-flight write-backs and cache syncs."""

        while self._tasks:
            pending = list(self._tasks)
            await asyncio.gather(*pending, return_exceptions=True)
            self._tasks.difference_update(pending)


__all__ = ["KeyValueStore", "PortfolioDataService"]

"""Disk snapshot of the last good, repaired portfolio payload.

The snapshot is the second fallback tier. Writes are best effort and reads
treat every kind of damage (missing, truncated, malformed, wrong shape) as a
plain cache miss.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any

from .. import metrics
from ..config import settings
from ..observability import record_degradation
from ..schemas import CacheSnapshot, PortfolioPayload

logger = logging.getLogger(__name__)

SERVERLESS_CACHE_FILENAME = "portfolio-data-cache.json"
LOCAL_CACHE_FILENAME = "data-cache.json"

_ARRAY_GROUPS = ("projects", "experiences", "achievements", "mentorship")
_OBJECT_GROUPS = ("personal", "skills")


class CacheValidationError(ValueError):
    """Raised internally when a cache document does not have the expected shape."""


def _is_restricted_environment(cwd: Path) -> bool:
    if settings.read_only_filesystem:
        return True
    if os.getenv("VERCEL") or os.getenv("NOW_REGION"):
        return True
    return not os.access(cwd, os.W_OK)


def resolve_cache_path() -> Path:
    if settings.data_cache_path:
        return Path(settings.data_cache_path)
    cwd = Path.cwd()
    if _is_restricted_environment(cwd):
        return Path(tempfile.gettempdir()) / SERVERLESS_CACHE_FILENAME
    return cwd / LOCAL_CACHE_FILENAME


def validate_cache_document(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        raise CacheValidationError("cache document is not a JSON object")
    for group in _OBJECT_GROUPS:
        if not isinstance(document.get(group), dict):
            raise CacheValidationError(f"cache group {group!r} must be an object")
    for group in _ARRAY_GROUPS:
        if not isinstance(document.get(group), list):
            raise CacheValidationError(f"cache group {group!r} must be an array")
    synced_at = document.get("syncedAt")
    if synced_at is not None and (
        isinstance(synced_at, bool) or not isinstance(synced_at, (int, float))
    ):
        raise CacheValidationError("cache syncedAt must be a timestamp")
    return document


def _write_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class DataCache:
    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else resolve_cache_path()

    @property
    def path(self) -> Path:
        return self._path

    async def sync(self, payload: PortfolioPayload) -> bool:
        document = {**payload.to_json(), "syncedAt": int(time.time() * 1000)}
        if document["personal"] is None:
            # read() requires an object here; an absent personal record is stored empty.
            document["personal"] = {}
        try:
            content = json.dumps(document, ensure_ascii=False, indent=2)
            await asyncio.to_thread(_write_atomic, self._path, content)
        except (OSError, TypeError, ValueError) as exc:
            metrics.portfolio_cache_syncs_total.labels(outcome="failed").inc()
            record_degradation(
                "data_cache",
                "sync",
                f"Failed to sync fallback cache: {exc}",
                error=exc,
                path=str(self._path),
            )
            return False

        metrics.portfolio_cache_syncs_total.labels(outcome="written").inc()
        logger.debug("Fallback cache synced path=%s", self._path)
        return True

    async def read(self) -> CacheSnapshot | None:
        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            record_degradation(
                "data_cache",
                "read",
                f"Failed to read cache file: {exc}",
                error=exc,
                path=str(self._path),
            )
            return None

        try:
            document = validate_cache_document(json.loads(raw))
        except ValueError as exc:
            # json.JSONDecodeError and CacheValidationError are both ValueErrors.
            record_degradation(
                "data_cache",
                "validate",
                f"Cache file structure is invalid, ignoring cache: {exc}",
                capture=False,
                path=str(self._path),
            )
            return None

        synced_at = document.get("syncedAt")
        return CacheSnapshot(
            payload=PortfolioPayload.from_json(document),
            synced_at=int(synced_at) if synced_at is not None else None,
        )

    async def last_sync_time(self) -> int | None:
        snapshot = await self.read()
        return snapshot.synced_at if snapshot is not None else None


__all__ = [
    "CacheValidationError",
    "DataCache",
    "resolve_cache_path",
    "validate_cache_document",
]

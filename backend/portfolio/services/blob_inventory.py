from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Protocol

from .. import metrics
from ..observability import record_degradation
from ..schemas import BlobInventoryEntry
from ..utils.media_keys import inventory_key, key_variants
from ..utils.media_paths import MediaNamespace
from .blob_storage import BlobListPage, BlobObject, BlobStorageError

logger = logging.getLogger(__name__)

MAX_LIST_PAGES = 1000


class BlobLister(Protocol):
    async def list_blobs(
        self,
        *,
        prefix: str | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> BlobListPage: ...


class BlobInventory(Mapping[str, str]):
    """Canonical key (and its encoding variants) -> actual blob pathname."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        self._lookup: dict[str, str] = {}
        self._canonical: dict[str, str] = {}

    def register(self, pathname: str) -> str | None:
        key = inventory_key(pathname, self.prefix)
        if not key:
            return None
        self._canonical[key] = pathname
        for variant in key_variants(key):
            self._lookup[variant] = pathname
        return key

    def resolve(self, key: str) -> str | None:
        for variant in key_variants(key):
            match = self._lookup.get(variant)
            if match:
                return match
        return None

    @property
    def entries(self) -> list[BlobInventoryEntry]:
        return [
            BlobInventoryEntry(canonical_key=key, actual_path=path)
            for key, path in sorted(self._canonical.items())
        ]

    def __getitem__(self, key: str) -> str:
        return self._lookup[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._lookup)

    def __len__(self) -> int:
        return len(self._lookup)


async def list_all_blobs(
    storage: BlobLister,
    *,
    prefix: str,
    page_size: int | None = None,
) -> list[BlobObject]:
    blobs: list[BlobObject] = []
    cursor: str | None = None
    seen_cursors: set[str] = set()
    for _ in range(MAX_LIST_PAGES):
        page = await storage.list_blobs(prefix=prefix, cursor=cursor, limit=page_size)
        blobs.extend(page.blobs)
        if not page.has_more or not page.cursor or page.cursor in seen_cursors:
            break
        seen_cursors.add(page.cursor)
        cursor = page.cursor
    else:
        logger.warning("Blob listing stopped after %s pages prefix=%s", MAX_LIST_PAGES, prefix)
    return blobs


async def build_blob_inventory(
    storage: BlobLister,
    namespace: MediaNamespace | None = None,
    *,
    page_size: int | None = None,
) -> BlobInventory:
    """List every object under the namespace prefix and index it by canonical key.

    Listing failures and empty listings both yield an empty inventory, which
    turns repair into a no-op instead of an error.
    """

    namespace = namespace or MediaNamespace.from_settings()
    inventory = BlobInventory(namespace.prefix)
    try:
        blobs = await list_all_blobs(storage, prefix=namespace.prefix, page_size=page_size)
    except BlobStorageError as exc:
        record_degradation(
            "blob_inventory",
            "list",
            f"Failed to load blob inventory: {exc}",
            error=exc.__cause__ or exc,
            capture=exc.error != "not_configured",
            prefix=namespace.prefix,
        )
        metrics.blob_inventory_size.set(0)
        return inventory

    if not blobs:
        record_degradation(
            "blob_inventory",
            "empty",
            "Blob inventory is empty; verify the blob token and that assets exist "
            f"under {namespace.prefix}",
            capture=False,
            prefix=namespace.prefix,
        )
        metrics.blob_inventory_size.set(0)
        return inventory

    # Oldest first so the latest upload of a logical asset wins its canonical key.
    for blob in sorted(blobs, key=lambda item: item.uploaded_at or ""):
        inventory.register(blob.pathname)

    metrics.blob_inventory_size.set(len(inventory.entries))
    logger.debug(
        "Blob inventory built prefix=%s objects=%s keys=%s",
        namespace.prefix,
        len(blobs),
        len(inventory.entries),
    )
    return inventory


__all__ = ["BlobInventory", "BlobLister", "build_blob_inventory", "list_all_blobs"]

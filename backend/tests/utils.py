from __future__ import annotations

import copy
from typing import Any

from portfolio.services.blob_storage import BlobListPage, BlobObject, BlobStorageError


class FakeKVStore:
    """In-memory stand-in for KVStoreClient with the same never-raise contract."""

    def __init__(self, data: dict[str, Any] | None = None, *, fail_writes: bool = False):
        self.data: dict[str, Any] = copy.deepcopy(data or {})
        self.fail_writes = fail_writes
        self.gets: list[str] = []
        self.sets: list[tuple[str, Any]] = []

    async def get(self, key: str) -> Any | None:
        self.gets.append(key)
        return copy.deepcopy(self.data.get(key))

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        if self.fail_writes:
            return False
        self.sets.append((key, copy.deepcopy(value)))
        self.data[key] = copy.deepcopy(value)
        return True


class FakeBlobStorage:
    """Serves a fixed list of pathnames in pages of ``page_size``."""

    def __init__(
        self,
        pathnames: list[str] | None = None,
        *,
        page_size: int = 2,
        error: BlobStorageError | None = None,
        base_url: str = "https://store123.public.blob.vercel-storage.com",
    ):
        self.blobs = [
            BlobObject(url=f"{base_url}/{path}", pathname=path, size=1)
            for path in pathnames or []
        ]
        self.page_size = page_size
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def list_blobs(self, *, prefix=None, cursor=None, limit=None) -> BlobListPage:
        self.calls.append({"prefix": prefix, "cursor": cursor, "limit": limit})
        if self.error is not None:
            raise self.error
        start = int(cursor or 0)
        end = start + self.page_size
        page = self.blobs[start:end]
        has_more = end < len(self.blobs)
        return BlobListPage(blobs=page, cursor=str(end) if has_more else None, has_more=has_more)


def blob_url(path: str) -> str:
    return f"https://store123.public.blob.vercel-storage.com/{path}"

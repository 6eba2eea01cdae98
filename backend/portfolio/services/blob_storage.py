from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from ..config import settings

DEFAULT_PREFIX = "web-pics"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class BlobStorageError(RuntimeError):
    """Raised when the blob API cannot be reached or rejects a request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error


@dataclass(slots=True)
class BlobObject:
    url: str
    pathname: str
    size: int | None = None
    uploaded_at: str | None = None
    content_type: str | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "BlobObject":
        size = data.get("size")
        return cls(
            url=str(data.get("url") or ""),
            pathname=str(data.get("pathname") or ""),
            size=int(size) if isinstance(size, (int, float)) else None,
            uploaded_at=str(data["uploadedAt"]) if data.get("uploadedAt") else None,
            content_type=data.get("contentType"),
        )


@dataclass(slots=True)
class BlobListPage:
    blobs: list[BlobObject]
    cursor: str | None
    has_more: bool


def sanitize_prefix(prefix: str | None) -> str:
    if not prefix:
        return settings.blob_prefix or DEFAULT_PREFIX
    cleaned = prefix.strip().strip("/")
    return cleaned or settings.blob_prefix or DEFAULT_PREFIX


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


class BlobStorageService:
    def __init__(
        self,
        *,
        token: str | None = None,
        api_url: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token or settings.blob_read_write_token
        self._api_url = (api_url or settings.blob_api_url).rstrip("/")
        self._api_version = api_version or settings.blob_api_version
        self._timeout = timeout or settings.blob_request_timeout_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._token)

    def _headers(self) -> dict[str, str]:
        if not self._token:
            raise BlobStorageError(
                "Blob read/write token not found in environment variables",
                error="not_configured",
            )
        return {
            "authorization": f"Bearer {self._token}",
            "x-api-version": self._api_version,
        }

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.request(method, url, headers=headers, **kwargs)
            except httpx.HTTPError as exc:
                raise BlobStorageError("Failed to call the blob API") from exc

        if response.status_code >= 400:
            error = None
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict):
                detail = payload.get("error")
                if isinstance(detail, dict):
                    error = detail.get("code") or detail.get("message")
                elif detail is not None:
                    error = str(detail)
            raise BlobStorageError(
                f"Blob API {method} failed with status {response.status_code}",
                status_code=response.status_code,
                error=error,
            )
        return response

    async def list_blobs(
        self,
        *,
        prefix: str | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> BlobListPage:
        params: dict[str, Any] = {
            "prefix": f"{sanitize_prefix(prefix)}/",
            "limit": limit or settings.blob_list_page_size,
        }
        if cursor:
            params["cursor"] = cursor

        response = await self._request("GET", self._api_url, params=params)
        try:
            data = response.json()
        except ValueError as exc:
            raise BlobStorageError("Blob API returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise BlobStorageError("Blob API returned a malformed listing")

        blobs = [
            BlobObject.from_api(item)
            for item in data.get("blobs") or []
            if isinstance(item, dict) and item.get("pathname")
        ]
        next_cursor = data.get("cursor") or None
        return BlobListPage(
            blobs=blobs,
            cursor=str(next_cursor) if next_cursor else None,
            has_more=bool(data.get("hasMore")) and bool(next_cursor),
        )

    async def upload(
        self,
        data: bytes,
        *,
        filename: str,
        prefix: str | None = None,
        pathname: str | None = None,
        content_type: str | None = None,
    ) -> BlobObject:
        if not filename and not pathname:
            raise BlobStorageError("filename or pathname is required")

        if pathname:
            target_path = pathname.lstrip("/")
        else:
            target_path = (
                f"{sanitize_prefix(prefix)}/{int(time.time() * 1000)}-{sanitize_filename(filename)}"
            )

        headers = {"x-add-random-suffix": "1", "access": "public"}
        if content_type:
            headers["x-content-type"] = content_type

        response = await self._request(
            "PUT",
            f"{self._api_url}/",
            params={"pathname": target_path},
            content=data,
            headers=headers,
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise BlobStorageError("Blob API returned invalid JSON") from exc
        if not isinstance(payload, dict) or not payload.get("url"):
            raise BlobStorageError("url missing in blob upload response")
        return BlobObject.from_api(payload)

    async def delete(self, path_or_url: str) -> None:
        if not path_or_url:
            raise BlobStorageError("blob path or url is required")
        await self._request(
            "POST",
            f"{self._api_url}/delete",
            json={"urls": [path_or_url]},
        )


__all__ = [
    "BlobListPage",
    "BlobObject",
    "BlobStorageError",
    "BlobStorageService",
    "DEFAULT_PREFIX",
    "sanitize_filename",
    "sanitize_prefix",
]

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import urlparse

from ..config import settings
from .media_keys import decode_path_component

_REMOTE_URL = re.compile(r"^https?://", re.IGNORECASE)
_PROVIDER_HOST_SUFFIX = ".blob.vercel-storage.com"


def is_remote_url(value: str | None) -> bool:
    if not value:
        return False
    return bool(_REMOTE_URL.match(value))


def strip_leading_slashes(value: str) -> str:
    return value.lstrip("/")


def url_host(value: str) -> str | None:
    try:
        host = urlparse(value).hostname
    except ValueError:
        return None
    return host.lower() if host else None


def url_pathname(value: str) -> str | None:
    """Decoded, slash-stripped path of an absolute URL."""

    try:
        path = urlparse(value).path
    except ValueError:
        return None
    return decode_path_component(strip_leading_slashes(path))


@dataclass(frozen=True, slots=True)
class MediaNamespace:
    """Where managed media lives: the public blob base URL and the key prefix."""

    base_url: str | None
    prefix: str = "web-pics"

    @classmethod
    def from_settings(cls) -> "MediaNamespace":
        return cls(base_url=settings.blob_base_url, prefix=settings.blob_prefix)

    @property
    def host(self) -> str | None:
        if not self.base_url:
            return None
        return url_host(self.base_url)

    def is_managed(self, path: str) -> bool:
        return strip_leading_slashes(path).startswith(f"{self.prefix}/")

    def is_blob_url(self, value: str) -> bool:
        host = self.host
        if host is None or not is_remote_url(value):
            return False
        return url_host(value) == host

    def build_url(self, path: str) -> str:
        normalized = strip_leading_slashes(path)
        if not self.base_url:
            return f"/{normalized}"
        return f"{self.base_url.rstrip('/')}/{normalized}"

    def canonical_url(self, value: str) -> str:
        """Re-derive the blob URL for ``value`` with redundant encoding removed."""

        pathname = url_pathname(value)
        if pathname is None:
            return value
        return self.build_url(pathname)

    def relative_path(self, value: str | None) -> str | None:
        """Decoded, slash-stripped storage path of a URL or bare key."""

        if not value:
            return None
        if is_remote_url(value):
            return url_pathname(value)
        return decode_path_component(strip_leading_slashes(value))


class MediaSourceType(StrEnum):
    blob = "blob"
    fallback = "fallback"
    external = "external"
    unknown = "unknown"


_SOURCE_DESCRIPTIONS: dict[MediaSourceType, str] = {
    MediaSourceType.blob: "Remote Blob",
    MediaSourceType.fallback: "Local Fallback",
    MediaSourceType.external: "External URL",
    MediaSourceType.unknown: "Not Set",
}


def media_source_type(
    value: str | None,
    namespace: MediaNamespace | None = None,
) -> MediaSourceType:
    namespace = namespace or MediaNamespace.from_settings()
    candidate = value.strip() if isinstance(value, str) else ""
    if not candidate:
        return MediaSourceType.unknown
    if candidate.startswith("data:"):
        return MediaSourceType.external
    if is_remote_url(candidate):
        host = url_host(candidate) or ""
        if host.endswith(_PROVIDER_HOST_SUFFIX) or namespace.is_blob_url(candidate):
            return MediaSourceType.blob
        return MediaSourceType.external
    if candidate.startswith("/"):
        return MediaSourceType.fallback
    if namespace.is_managed(candidate):
        return MediaSourceType.blob
    if "://" not in candidate:
        return MediaSourceType.fallback
    return MediaSourceType.external


def media_source_description(source: MediaSourceType) -> str:
    return _SOURCE_DESCRIPTIONS.get(source, "Not Set")

"""Canonical key derivation for blob objects.

The blob provider appends a random disambiguation suffix before the extension
on every upload (``intro.png`` becomes ``intro-h4F9kLpQ2a.png``). The canonical
key drops that suffix so re-uploads of the same logical asset collide.
"""

from __future__ import annotations

import re
from urllib.parse import quote, unquote

# Long runs are always treated as provider suffixes; shorter ones only when they
# mix upper case, lower case and digits so names like "intro-screenshot" or
# "team-photo2023a" survive.
_LONG_SUFFIX = re.compile(r"-([A-Za-z0-9]{16,})$")
_MIXED_SUFFIX = re.compile(
    r"-((?=[A-Za-z0-9]*[0-9])(?=[A-Za-z0-9]*[a-z])(?=[A-Za-z0-9]*[A-Z])[A-Za-z0-9]{10,})$"
)

# encodeURI keeps URI reserved characters intact.
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"
_COMPONENT_SAFE = "-_.!~*'()"


def decode_path_component(value: str) -> str:
    if "%" not in value:
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def split_hash_suffix(stem: str) -> tuple[str, str | None]:
    """Return ``(base, suffix)``; ``suffix`` is None when no provider hash is present."""

    for pattern in (_LONG_SUFFIX, _MIXED_SUFFIX):
        match = pattern.search(stem)
        if match:
            base = stem[: match.start()]
            if base:
                return base, match.group(1)
    return stem, None


def canonical_key(relative_path: str) -> str:
    last_dot = relative_path.rfind(".")
    if last_dot <= 0 or last_dot == len(relative_path) - 1:
        return relative_path
    stem = relative_path[:last_dot]
    extension = relative_path[last_dot:]
    base, suffix = split_hash_suffix(stem)
    if suffix is None:
        return relative_path
    return f"{base}{extension}"


def inventory_key(pathname: str, prefix: str) -> str | None:
    """Canonical key for a namespaced path, or None when it sits outside ``prefix``."""

    normalized = decode_path_component(pathname.lstrip("/"))
    namespace = f"{prefix}/"
    if not normalized.startswith(namespace):
        return None
    return canonical_key(normalized[len(namespace) :])


def key_variants(key: str) -> list[str]:
    """Encoding variants historical references may have been stored under."""

    variants: dict[str, None] = {}
    for candidate in (
        key,
        decode_path_component(key),
        quote(key, safe=_URI_SAFE),
        quote(key, safe=_COMPONENT_SAFE),
        key.replace(" ", "%20"),
        key.replace("%20", " "),
    ):
        if candidate:
            variants.setdefault(candidate, None)
    return list(variants)

from __future__ import annotations

from enum import Enum
from typing import Any

DEFAULT_ICON = "FaAward"


def sanitize_icon(icon: Any) -> str:
    """Coerce a stored icon identifier to a plain string name.

    Older records persisted serialized component objects instead of names;
    anything that cannot be reduced to a name renders as the default icon.
    """

    if not icon:
        return DEFAULT_ICON
    if isinstance(icon, Enum):
        return str(icon.value)
    if isinstance(icon, str):
        return str(icon)
    if isinstance(icon, dict):
        element_type = icon.get("type")
        if isinstance(element_type, str) and element_type:
            return element_type
        if isinstance(element_type, dict):
            nested = element_type.get("name") or element_type.get("displayName")
            if isinstance(nested, str) and nested:
                return nested
        name = icon.get("name") or icon.get("displayName")
        if isinstance(name, str) and name:
            return name
        return DEFAULT_ICON
    name = getattr(icon, "__name__", None)
    if isinstance(name, str) and name:
        return name
    return DEFAULT_ICON


def sanitize_icons(records: list[Any], field: str) -> list[Any]:
    sanitized: list[Any] = []
    for record in records:
        if isinstance(record, dict):
            sanitized.append({**record, field: sanitize_icon(record.get(field))})
        else:
            sanitized.append(record)
    return sanitized

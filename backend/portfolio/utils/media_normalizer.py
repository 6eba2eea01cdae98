"""Write-time canonicalisation of stored media references.

Pure functions: no I/O, no clock. The namespace (blob base URL and key prefix)
is passed in or read from settings.
"""

from __future__ import annotations

from typing import Any, TypeVar

from ..schemas import Achievement, ContentRecord, Mentorship, Personal, Project
from .media_fallbacks import project_fallback_image
from .media_keys import decode_path_component
from .media_paths import MediaNamespace, is_remote_url, strip_leading_slashes

RecordT = TypeVar("RecordT", bound=ContentRecord)


def normalize_primary(value: Any, namespace: MediaNamespace | None = None) -> Any:
    if not isinstance(value, str) or not value:
        return value
    namespace = namespace or MediaNamespace.from_settings()
    if is_remote_url(value):
        if namespace.is_blob_url(value):
            return namespace.canonical_url(value)
        return value
    trimmed = strip_leading_slashes(value)
    if namespace.is_managed(trimmed):
        return namespace.build_url(decode_path_component(trimmed))
    return value


def normalize_fallback(value: Any) -> Any:
    if not isinstance(value, str) or not value:
        return value
    if is_remote_url(value) or value.startswith("/"):
        return value
    return f"/{strip_leading_slashes(value)}"


def _normalize_slots(record: RecordT, namespace: MediaNamespace) -> RecordT:
    normalized = record.model_copy()
    fields_set = record.model_fields_set
    for slot in record.media_slots:
        if slot.primary in fields_set:
            setattr(normalized, slot.primary, normalize_primary(getattr(record, slot.primary), namespace))
        if slot.fallback and slot.fallback in fields_set:
            setattr(normalized, slot.fallback, normalize_fallback(getattr(record, slot.fallback)))
    return normalized


def normalize_project_media(project: Project, namespace: MediaNamespace | None = None) -> Project:
    namespace = namespace or MediaNamespace.from_settings()
    normalized = _normalize_slots(project, namespace)
    if normalized.experience_key:
        normalized.experience_key = str(normalized.experience_key)
    if not normalized.fallback_image_url:
        inferred = project_fallback_image(
            title=normalized.title,
            remote_url=normalized.image_url,
            fallback_candidate=normalized.fallback_image_url,
        )
        if inferred:
            normalized.fallback_image_url = inferred
    return normalized


def normalize_achievement_media(
    achievement: Achievement, namespace: MediaNamespace | None = None
) -> Achievement:
    return _normalize_slots(achievement, namespace or MediaNamespace.from_settings())


def normalize_mentorship_media(
    mentorship: Mentorship, namespace: MediaNamespace | None = None
) -> Mentorship:
    return _normalize_slots(mentorship, namespace or MediaNamespace.from_settings())


def normalize_personal_media(personal: Personal, namespace: MediaNamespace | None = None) -> Personal:
    return _normalize_slots(personal, namespace or MediaNamespace.from_settings())


def normalize_record(record: RecordT, namespace: MediaNamespace | None = None) -> RecordT:
    if isinstance(record, Project):
        return normalize_project_media(record, namespace)
    if isinstance(record, Achievement):
        return normalize_achievement_media(record, namespace)
    if isinstance(record, Mentorship):
        return normalize_mentorship_media(record, namespace)
    if isinstance(record, Personal):
        return normalize_personal_media(record, namespace)
    return record

"""Read-time reconciliation of stored media references against the blob inventory.

A reference is only ever rewritten to a path the inventory proved to exist.
References the inventory cannot vouch for are left untouched, so a
misconfigured or empty inventory degrades to a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, TypeVar

from .. import metrics
from ..schemas import (
    Achievement,
    ContentRecord,
    EntityKind,
    Mentorship,
    Personal,
    PortfolioPayload,
    Project,
)
from ..utils.media_keys import inventory_key
from ..utils.media_paths import MediaNamespace
from .blob_inventory import BlobInventory

logger = logging.getLogger(__name__)

T = TypeVar("T")
RecordT = TypeVar("RecordT", bound=ContentRecord)


@dataclass(slots=True)
class RepairResult(Generic[T]):
    data: T
    changed: bool


@dataclass(frozen=True, slots=True)
class MediaRewrite:
    group: EntityKind
    label: str
    field: str
    before: str
    after: str


@dataclass(slots=True)
class PortfolioRepairResult:
    personal: RepairResult[Personal | None]
    projects: RepairResult[list[Project]]
    achievements: RepairResult[list[Achievement]]
    mentorship: RepairResult[list[Mentorship]]
    experiences: list[dict[str, Any]] = field(default_factory=list)
    skills: dict[str, Any] = field(default_factory=dict)
    rewrites: list[MediaRewrite] = field(default_factory=list)

    @property
    def changed_groups(self) -> list[EntityKind]:
        groups = {
            EntityKind.personal: self.personal,
            EntityKind.projects: self.projects,
            EntityKind.achievements: self.achievements,
            EntityKind.mentorship: self.mentorship,
        }
        return [kind for kind, result in groups.items() if result.changed]

    @property
    def changed(self) -> bool:
        return bool(self.changed_groups)

    @property
    def payload(self) -> PortfolioPayload:
        return PortfolioPayload(
            personal=self.personal.data,
            projects=self.projects.data,
            experiences=self.experiences,
            skills=self.skills,
            achievements=self.achievements.data,
            mentorship=self.mentorship.data,
        )


def resolve_reference(
    value: Any,
    inventory: Mapping[str, str],
    namespace: MediaNamespace,
) -> tuple[Any, bool]:
    """Return ``(value, changed)`` for one stored reference."""

    if not isinstance(value, str) or not value:
        return value, False

    stored_path = namespace.relative_path(value)
    if not stored_path or not namespace.is_managed(stored_path):
        return value, False

    key = inventory_key(stored_path, namespace.prefix)
    if not key:
        logger.debug("Unable to derive inventory key value=%s", value)
        return value, False

    if isinstance(inventory, BlobInventory):
        actual_path = inventory.resolve(key)
    else:
        actual_path = inventory.get(key)
    if not actual_path:
        logger.debug("No blob match for key=%s", key)
        return value, False

    desired_url = namespace.build_url(actual_path)
    if stored_path == actual_path or value == desired_url:
        return value, False

    logger.debug("Repaired media reference original=%s resolved=%s", value, desired_url)
    return desired_url, True


def repair_record(
    record: RecordT,
    inventory: Mapping[str, str],
    namespace: MediaNamespace,
) -> tuple[RecordT, list[tuple[str, str, str]]]:
    """Repair every media field of ``record``; returns the copy and (field, before, after)."""

    updated = record
    changes: list[tuple[str, str, str]] = []
    for field_name in record.repair_fields:
        current = getattr(record, field_name, None)
        value, changed = resolve_reference(current, inventory, namespace)
        if changed:
            if updated is record:
                updated = record.model_copy()
            setattr(updated, field_name, value)
            changes.append((field_name, current, value))
    return updated, changes


def _alias(record: ContentRecord, field_name: str) -> str:
    info = type(record).model_fields.get(field_name)
    return info.alias if info is not None and info.alias else field_name


def _repair_group(
    kind: EntityKind,
    records: list[RecordT],
    inventory: Mapping[str, str],
    namespace: MediaNamespace,
    rewrites: list[MediaRewrite],
) -> RepairResult[list[RecordT]]:
    changed = False
    repaired: list[RecordT] = []
    for index, record in enumerate(records):
        updated, changes = repair_record(record, inventory, namespace)
        label = record.label or f"#{index}"
        for field_name, before, after in changes:
            rewrites.append(
                MediaRewrite(kind, label, _alias(record, field_name), before, after)
            )
        if changes:
            changed = True
            metrics.portfolio_media_rewrites_total.labels(group=kind.value).inc(len(changes))
        repaired.append(updated)
    return RepairResult(data=repaired, changed=changed)


def repair_portfolio_media(
    payload: PortfolioPayload,
    inventory: Mapping[str, str],
    namespace: MediaNamespace | None = None,
) -> PortfolioRepairResult:
    namespace = namespace or MediaNamespace.from_settings()
    if len(inventory) == 0:
        logger.warning("Proceeding without blob inventory; media references will remain unchanged")

    rewrites: list[MediaRewrite] = []

    if payload.personal is None:
        personal_result: RepairResult[Personal | None] = RepairResult(data=None, changed=False)
    else:
        personal_group = _repair_group(
            EntityKind.personal, [payload.personal], inventory, namespace, rewrites
        )
        personal_result = RepairResult(
            data=personal_group.data[0], changed=personal_group.changed
        )

    return PortfolioRepairResult(
        personal=personal_result,
        projects=_repair_group(EntityKind.projects, payload.projects, inventory, namespace, rewrites),
        achievements=_repair_group(
            EntityKind.achievements, payload.achievements, inventory, namespace, rewrites
        ),
        mentorship=_repair_group(
            EntityKind.mentorship, payload.mentorship, inventory, namespace, rewrites
        ),
        experiences=payload.experiences,
        skills=payload.skills,
        rewrites=rewrites,
    )


__all__ = [
    "MediaRewrite",
    "PortfolioRepairResult",
    "RepairResult",
    "repair_portfolio_media",
    "repair_record",
    "resolve_reference",
]

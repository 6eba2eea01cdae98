from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, fields
from typing import Any

from .. import defaults
from ..observability import record_degradation, record_source
from ..schemas import ContentSource, PortfolioPayload, ResolvedPortfolio
from ..utils.icons import sanitize_icons
from .data_cache import DataCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawDatasets:
    """The six groups exactly as the remote store returned them (None on failure)."""

    projects: Any = None
    experiences: Any = None
    skills: Any = None
    achievements: Any = None
    mentorship: Any = None
    personal: Any = None

    def to_payload(self) -> PortfolioPayload:
        return PortfolioPayload.from_raw(
            personal=self.personal,
            projects=self.projects,
            experiences=sanitize_icons(self.experiences, "icon")
            if isinstance(self.experiences, list)
            else None,
            skills=self.skills,
            achievements=sanitize_icons(self.achievements, "Icon")
            if isinstance(self.achievements, list)
            else None,
            mentorship=self.mentorship,
        )


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, str)):
        return len(value) == 0
    return not value


def is_remote_unavailable(datasets: RawDatasets) -> bool:
    """True only when every dataset is empty at once.

    A single empty group is legitimate content; all six empty together is
    read as the store being unreachable (or freshly initialised, which is
    indistinguishable from here).
    """

    return all(_is_empty(getattr(datasets, item.name)) for item in fields(datasets))


def default_payload() -> PortfolioPayload:
    return PortfolioPayload.from_raw(
        personal=copy.deepcopy(defaults.PERSONAL_INFO),
        projects=copy.deepcopy(list(defaults.PROJECTS)),
        experiences=sanitize_icons(copy.deepcopy(list(defaults.EXPERIENCES)), "icon"),
        skills=copy.deepcopy(defaults.SKILLS),
        achievements=sanitize_icons(copy.deepcopy(list(defaults.ACHIEVEMENTS)), "Icon"),
        mentorship=copy.deepcopy(list(defaults.MENTORSHIP)),
    )


class FallbackDataSupplier:
    """Second and third tiers: the disk snapshot, then compiled defaults."""

    def __init__(self, cache: DataCache) -> None:
        self._cache = cache

    async def get_fallback_data(self) -> ResolvedPortfolio:
        snapshot = await self._cache.read()
        if snapshot is not None:
            logger.warning(
                "Remote store unavailable, serving disk cache synced_at=%s",
                snapshot.synced_at,
            )
            record_source(ContentSource.cache)
            return ResolvedPortfolio(payload=snapshot.payload, source=ContentSource.cache)

        record_degradation(
            "fallback",
            "defaults",
            "Remote store and disk cache unavailable, serving compiled defaults",
            capture=False,
            cache_path=str(self._cache.path),
        )
        record_source(ContentSource.defaults)
        return ResolvedPortfolio(payload=default_payload(), source=ContentSource.defaults)


__all__ = [
    "FallbackDataSupplier",
    "RawDatasets",
    "default_payload",
    "is_remote_unavailable",
]

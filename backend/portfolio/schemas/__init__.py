import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class EntityKind(StrEnum):
    personal = "personal"
    projects = "projects"
    experiences = "experiences"
    skills = "skills"
    achievements = "achievements"
    mentorship = "mentorship"


class ContentSource(StrEnum):
    remote = "remote"
    cache = "cache"
    defaults = "defaults"


class MediaReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str | None = None
    fallback: str | None = None


@dataclass(frozen=True, slots=True)
class MediaSlot:
    primary: str
    fallback: str | None = None


class ContentRecord(BaseModel):
    """A stored content record; attributes beyond media are carried opaquely."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    kind: ClassVar[EntityKind]
    media_slots: ClassVar[tuple[MediaSlot, ...]] = ()
    repair_fields: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def parse(cls, raw: dict[str, Any]):
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            # Keep the record rather than dropping content; media fields of the
            # wrong type are simply ignored by the normalizer and repair engine.
            logger.warning(
                "Stored %s record failed validation, keeping it unvalidated: %s",
                cls.kind,
                exc.errors(include_url=False),
            )
            return cls.model_construct(**raw)

    def media(self, slot: MediaSlot) -> MediaReference:
        primary = getattr(self, slot.primary, None)
        fallback = getattr(self, slot.fallback, None) if slot.fallback else None
        return MediaReference(
            primary=primary if isinstance(primary, str) else None,
            fallback=fallback if isinstance(fallback, str) else None,
        )

    @property
    def label(self) -> str | None:
        title = getattr(self, "title", None)
        return title if isinstance(title, str) and title else None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Project(ContentRecord):
    kind: ClassVar[EntityKind] = EntityKind.projects
    media_slots: ClassVar[tuple[MediaSlot, ...]] = (
        MediaSlot("image_url", "fallback_image_url"),
        MediaSlot("certificate_url"),
    )
    repair_fields: ClassVar[tuple[str, ...]] = (
        "image_url",
        "certificate_url",
        "fallback_image_url",
    )

    title: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    fallback_image_url: Optional[str] = Field(default=None, alias="fallbackImageUrl")
    certificate_url: Optional[str] = Field(default=None, alias="certificateUrl")
    experience_key: Any = Field(default=None, alias="experienceKey")


class Achievement(ContentRecord):
    kind: ClassVar[EntityKind] = EntityKind.achievements
    media_slots: ClassVar[tuple[MediaSlot, ...]] = (
        MediaSlot("image_url"),
        MediaSlot("certificate_url", "fallback_certificate_url"),
    )
    repair_fields: ClassVar[tuple[str, ...]] = (
        "image_url",
        "certificate_url",
        "fallback_certificate_url",
    )

    title: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    certificate_url: Optional[str] = Field(default=None, alias="certificateUrl")
    fallback_certificate_url: Optional[str] = Field(
        default=None, alias="fallbackCertificateUrl"
    )


class Mentorship(ContentRecord):
    kind: ClassVar[EntityKind] = EntityKind.mentorship
    media_slots: ClassVar[tuple[MediaSlot, ...]] = (
        MediaSlot("image_url", "fallback_image_url"),
        MediaSlot("certificate_url", "fallback_certificate_url"),
    )
    repair_fields: ClassVar[tuple[str, ...]] = (
        "image_url",
        "certificate_url",
        "fallback_image_url",
        "fallback_certificate_url",
    )

    title: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    fallback_image_url: Optional[str] = Field(default=None, alias="fallbackImageUrl")
    certificate_url: Optional[str] = Field(default=None, alias="certificateUrl")
    fallback_certificate_url: Optional[str] = Field(
        default=None, alias="fallbackCertificateUrl"
    )


class Personal(ContentRecord):
    kind: ClassVar[EntityKind] = EntityKind.personal
    media_slots: ClassVar[tuple[MediaSlot, ...]] = (MediaSlot("profile_image_url"),)
    repair_fields: ClassVar[tuple[str, ...]] = ("profile_image_url", "cv_link")

    profile_image_url: Optional[str] = Field(default=None, alias="profileImageUrl")
    cv_link: Optional[str] = Field(default=None, alias="cvLink")

    @property
    def label(self) -> str | None:
        return "personal"


AnyContentRecord = Union[Project, Achievement, Mentorship, Personal]

RECORD_TYPES: dict[EntityKind, type[ContentRecord]] = {
    EntityKind.personal: Personal,
    EntityKind.projects: Project,
    EntityKind.achievements: Achievement,
    EntityKind.mentorship: Mentorship,
}


def _record_list(model: type[ContentRecord], raw: Any) -> list:
    if not isinstance(raw, list):
        return []
    return [
        item if isinstance(item, model) else model.parse(item)
        for item in raw
        if isinstance(item, (dict, model))
    ]


class PortfolioPayload(BaseModel):
    """The six content groups served to the site, in their wire shape."""

    personal: Optional[Personal] = None
    projects: list[Project] = Field(default_factory=list)
    experiences: list[dict[str, Any]] = Field(default_factory=list)
    skills: dict[str, Any] = Field(default_factory=dict)
    achievements: list[Achievement] = Field(default_factory=list)
    mentorship: list[Mentorship] = Field(default_factory=list)

    @classmethod
    def from_raw(
        cls,
        *,
        personal: Any = None,
        projects: Any = None,
        experiences: Any = None,
        skills: Any = None,
        achievements: Any = None,
        mentorship: Any = None,
    ) -> "PortfolioPayload":
        if isinstance(personal, Personal):
            personal_record: Personal | None = personal
        elif isinstance(personal, dict):
            personal_record = Personal.parse(personal)
        else:
            personal_record = None
        return cls(
            personal=personal_record,
            projects=_record_list(Project, projects),
            experiences=[item for item in experiences or [] if isinstance(item, dict)]
            if isinstance(experiences, list)
            else [],
            skills=dict(skills) if isinstance(skills, dict) else {},
            achievements=_record_list(Achievement, achievements),
            mentorship=_record_list(Mentorship, mentorship),
        )

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "PortfolioPayload":
        return cls.from_raw(**{kind.value: data.get(kind.value) for kind in EntityKind})

    def to_json(self) -> dict[str, Any]:
        return {
            "personal": self.personal.to_json() if self.personal is not None else None,
            "projects": [record.to_json() for record in self.projects],
            "experiences": [dict(item) for item in self.experiences],
            "skills": dict(self.skills),
            "achievements": [record.to_json() for record in self.achievements],
            "mentorship": [record.to_json() for record in self.mentorship],
        }


@dataclass(frozen=True, slots=True)
class ResolvedPortfolio:
    payload: PortfolioPayload
    source: ContentSource


@dataclass(frozen=True, slots=True)
class CacheSnapshot:
    payload: PortfolioPayload
    synced_at: int | None


@dataclass(frozen=True, slots=True)
class BlobInventoryEntry:
    canonical_key: str
    actual_path: str


__all__ = [
    "Achievement",
    "AnyContentRecord",
    "BlobInventoryEntry",
    "CacheSnapshot",
    "ContentRecord",
    "ContentSource",
    "EntityKind",
    "MediaReference",
    "MediaSlot",
    "Mentorship",
    "Personal",
    "PortfolioPayload",
    "Project",
    "RECORD_TYPES",
    "ResolvedPortfolio",
]

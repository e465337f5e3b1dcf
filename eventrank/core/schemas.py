"""Core data models for the event ranker.

Python attributes are snake_case; the camelCase names used by scrapers and the
JSON response layer are accepted on input and produced by
``model_dump(by_alias=True)``.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

STUDENT_FRIENDLY_THRESHOLD = 0.6


class Category(StrEnum):
    """Closed set of event types assigned by the categorizer."""

    SOCIAL = "social"
    ACADEMIC = "academic"
    CULTURAL = "cultural"
    SPORTS = "sports"
    NIGHTLIFE = "nightlife"
    FOOD = "food"
    ENTERTAINMENT = "entertainment"
    OUTDOOR = "outdoor"
    WORKSHOP = "workshop"
    NETWORKING = "networking"
    GENERAL = "general"


class RawCandidate(BaseModel):
    """An unscored event as produced by any source.

    Frozen: the ranking pipeline derives ScoredEvent values, never mutates these.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    title: str = ""
    description: str | None = None
    location: str | None = None
    date_time: str | None = None
    platform: str
    source_url: str = ""
    image_url: str | None = None
    organizer: str | None = None
    price: str | None = None
    age_restriction: str | None = None
    tags: tuple[str, ...] = ()
    raw_data: Any = None

    @field_validator("title", "source_url", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def none_to_no_tags(cls, v: Any) -> Any:
        return () if v is None else v

    @property
    def namespaced_id(self) -> str:
        """Identity key that stays unique across platforms (``platform:id``)."""
        return f"{self.platform}:{self.id}"


class ScoredEvent(RawCandidate):
    """A RawCandidate augmented with pipeline-computed scores."""

    relevance_score: float = 0.0
    student_friendliness_score: float = 0.0
    event_type: Category | str = Category.GENERAL
    keywords: frozenset[str] = frozenset()

    @field_validator("relevance_score", "student_friendliness_score")
    @classmethod
    def clamp_unit(cls, v: float) -> float:
        return max(0.0, min(1.0, v))

    @computed_field(alias="isStudentFriendly")  # type: ignore[prop-decorator]
    @property
    def is_student_friendly(self) -> bool:
        return self.student_friendliness_score > STUDENT_FRIENDLY_THRESHOLD

    @classmethod
    def from_candidate(cls, candidate: RawCandidate, **scores: Any) -> "ScoredEvent":
        """Build a ScoredEvent carrying every field of ``candidate``."""
        fields = {name: getattr(candidate, name) for name in RawCandidate.model_fields}
        return cls(**fields, **scores)


class FilteredEvent(ScoredEvent):
    """A ScoredEvent kept by the relevance filter, with the filter's confidence."""

    confidence: float = 0.0

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, v: float) -> float:
        return max(0.0, min(1.0, v))


class ScrapingResult(BaseModel):
    """Per-platform envelope returned by a source collaborator."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    success: bool
    events: tuple[RawCandidate, ...] = ()
    error: str | None = None
    platform: str
    query: str = ""
    location: str = ""
    scraped_at: datetime = Field(default_factory=datetime.now)


class QueryAnalysis(BaseModel):
    """Classifier hint describing what a free-text query is asking for."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    is_event_search: bool
    location: str | None = None
    event_types: list[Category] = Field(default_factory=list)
    search_keywords: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source: str = "keyword"

    @field_validator("event_types", mode="before")
    @classmethod
    def drop_unknown_types(cls, v: Any) -> Any:
        if v is None:
            return []
        known = {c.value for c in Category}
        names = [str(getattr(t, "value", t)).lower() for t in v]
        return [n for n in names if n in known]

    @property
    def primary_event_type(self) -> Category | None:
        return self.event_types[0] if self.event_types else None


class PlatformReport(BaseModel):
    """Success/failure counters for one platform's envelope."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    platform: str
    success: bool
    event_count: int
    error: str | None = None


class RankingResult(BaseModel):
    """Ranked events plus the aggregate counters callers report."""

    model_config = ConfigDict(frozen=True)

    events: tuple[ScoredEvent, ...] = ()
    query: str
    location: str
    total_found: int = 0
    filtered_count: int = 0
    student_friendly_count: int = 0
    used_student_fallback: bool = False
    skipped: int = 0
    platforms: tuple[PlatformReport, ...] = ()

"""Data models for the matching engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from community_match.profiles.models import (
    CommunicationStyle,
    Gender,
    MeetingType,
    MemberProfile,
    SkillLevel,
    UserRecord,
)


class MatchingFilters(BaseModel):
    """Caller-supplied filters for a single find-matches request.

    Empty lists mean "no constraint". Domain checks beyond types live in
    ``community_match.matching.filters.validate_filters``.
    """

    skill_categories: list[str] = Field(default_factory=list)
    interest_categories: list[str] = Field(default_factory=list)
    skill_levels: list[SkillLevel] = Field(default_factory=list)
    availability_types: list[MeetingType] = Field(default_factory=list)
    min_age: int | None = None
    max_age: int | None = None
    gender_preference: list[Gender] = Field(default_factory=list)
    communication_styles: list[CommunicationStyle] = Field(default_factory=list)
    exclude_user_ids: list[str] = Field(default_factory=list)
    max_distance: float | None = Field(default=None, description="Cutoff in km")
    min_matching_score: float | None = None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class ScoreSource(str, Enum):
    """Which scoring path produced a result."""

    DETERMINISTIC = "deterministic"
    ASSISTED = "assisted"
    FALLBACK = "fallback"


FACTOR_NAMES = (
    "skills_alignment",
    "interests_alignment",
    "availability_match",
    "location_compatibility",
    "communication_style",
    "experience_level",
)


@dataclass
class CompatibilityFactors:
    """Per-factor breakdown, each in [0, 100]."""

    skills_alignment: float = 0.0
    interests_alignment: float = 0.0
    availability_match: float = 0.0
    location_compatibility: float = 0.0
    communication_style: float = 0.0
    experience_level: float = 0.0

    def __post_init__(self) -> None:
        for name in FACTOR_NAMES:
            value = getattr(self, name)
            if not (0.0 <= value <= 100.0):
                raise ValueError(f"{name} must be between 0 and 100 (got {value})")

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class CompatibilityResult:
    """Score of one candidate against the seeker. Never cached across requests."""

    candidate_id: str
    score: int
    factors: CompatibilityFactors
    reasoning: str
    recommendations: list[str] = field(default_factory=list)
    distance_km: float | None = None
    score_source: ScoreSource = ScoreSource.DETERMINISTIC
    fallback_reason: str | None = None

    def __post_init__(self) -> None:
        if not (0 <= self.score <= 100):
            raise ValueError(f"score must be between 0 and 100 (got {self.score})")
        if self.distance_km is not None and self.distance_km < 0:
            raise ValueError("distance_km must be >= 0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "score": self.score,
            "factors": self.factors.to_dict(),
            "reasoning": self.reasoning,
            "recommendations": list(self.recommendations),
            "distance_km": self.distance_km,
            "score_source": self.score_source.value,
            "fallback_reason": self.fallback_reason,
        }


@dataclass
class MatchResult:
    """One entry of a ranked match list."""

    member: MemberProfile
    user: UserRecord | None
    compatibility: CompatibilityResult

    @property
    def candidate_id(self) -> str:
        return self.member.user_id

    @property
    def score(self) -> int:
        return self.compatibility.score

    @property
    def distance_km(self) -> float | None:
        return self.compatibility.distance_km

    @property
    def used_fallback(self) -> bool:
        return self.compatibility.score_source == ScoreSource.FALLBACK

    def to_dict(self) -> dict[str, Any]:
        user = self.user
        summary = {
            "user_id": self.member.user_id,
            "display_name": user.display_name if user else None,
            "skills": [skill.name for skill in self.member.skills],
            "interests": [interest.name for interest in self.member.interests],
            "communication_style": self.member.communication_style,
        }
        payload = self.compatibility.to_dict()
        payload.pop("candidate_id")
        return {"candidate": summary, **payload}


def _clamp_percentage(value: Any) -> float:
    """Coerce a model-supplied number into [0, 100]; junk becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number:  # NaN
        return 0.0
    return min(100.0, max(0.0, number))


class AssistedFactors(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    skills_alignment: float = 0.0
    interests_alignment: float = 0.0
    availability_match: float = 0.0
    location_compatibility: float = 0.0
    communication_style: float = 0.0
    experience_level: float = 0.0

    @field_validator(*FACTOR_NAMES, mode="before")
    @classmethod
    def clamp(cls, v: Any) -> float:
        return _clamp_percentage(v)


class AssistedRating(BaseModel):
    """Structured answer from the reasoning service.

    Accepts the camelCase keys the prompt asks for; every number is clamped
    into [0, 100] and missing fields default to 0 or empty.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    score: float = 0.0
    reasoning: str = ""
    compatibility_factors: AssistedFactors = Field(default_factory=AssistedFactors)
    recommendations: list[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, v: Any) -> float:
        return _clamp_percentage(v)

    @field_validator("reasoning", mode="before")
    @classmethod
    def default_reasoning(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("compatibility_factors", mode="before")
    @classmethod
    def default_factors(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, AssistedFactors)) else {}

    @field_validator("recommendations", mode="before")
    @classmethod
    def default_recommendations(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [str(item) for item in v if str(item).strip()]

"""Data models for community member profiles and user records."""

from __future__ import annotations

from datetime import UTC, date, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

SkillLevel = Literal["beginner", "intermediate", "advanced", "expert"]
Intensity = Literal["casual", "moderate", "passionate"]
Weekday = Literal[
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
]
MeetingType = Literal["in-person", "video-call", "phone-call", "text-chat"]
ResponseTime = Literal["immediate", "within-hour", "within-day", "within-week"]
CommunicationStyle = Literal["formal", "professional", "friendly", "casual"]
Gender = Literal["male", "female", "other", "any"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # Snapshot files often carry naive timestamps; treat them as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class ConnectionType(str, Enum):
    """How a connection between two members came about."""

    MATCHED = "matched"
    REQUESTED = "requested"
    MUTUAL = "mutual"


class ConnectionStatus(str, Enum):
    """Current state of a connection entry."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    BLOCKED = "blocked"


class _Document(BaseModel):
    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict):
        """Deserialize from a dictionary."""
        return cls.model_validate(data)


class Skill(_Document):
    """A skill a member has, teaches, or wants to learn."""

    name: str = Field(..., min_length=1, description="Skill name")
    level: SkillLevel = Field(..., description="Proficiency level")
    can_teach: bool = Field(default=False, description="Willing to teach this skill")
    wants_to_learn: bool = Field(
        default=False, description="Wants to learn more of this skill"
    )
    category: str = Field(..., description="Skill category (agricultural, trades, ...)")
    years_experience: int | None = Field(
        default=None, ge=0, description="Years of experience with this skill"
    )


class Interest(_Document):
    """A personal interest."""

    name: str = Field(..., min_length=1, description="Interest name")
    category: str = Field(..., description="Interest category")
    intensity: Intensity = Field(default="moderate", description="How strongly held")


class TimeSlot(_Document):
    """A weekly availability window. start < end is assumed, not checked."""

    day: Weekday
    start_time: str = Field(..., description="Local start time, HH:MM")
    end_time: str = Field(..., description="Local end time, HH:MM")


class Availability(_Document):
    """When and how a member can meet."""

    time_slots: list[TimeSlot] = Field(default_factory=list)
    timezone: str = Field(default="UTC", description="IANA timezone name")
    preferred_meeting_types: list[MeetingType] = Field(default_factory=list)
    response_time: ResponseTime = Field(default="within-day")


class AgeRange(_Document):
    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)


class MatchingPreferences(_Document):
    """What a member is looking for in a match."""

    max_distance_km: float = Field(default=50, ge=1, description="Preferred radius")
    preferred_skill_levels: list[SkillLevel] = Field(default_factory=list)
    priority_categories: list[str] = Field(default_factory=list)
    exclude_categories: list[str] | None = Field(default=None)
    age_range: AgeRange | None = Field(default=None)
    gender_preference: list[Gender] | None = Field(default=None)
    require_mutual_interests: bool = Field(default=False)
    minimum_shared_interests: int = Field(default=1, ge=0)


class Connection(_Document):
    """One entry of a member's own connection ledger.

    Entries are created on the first connect action and updated in place
    afterwards, never deleted. The peer keeps a separate entry in its own
    ledger.
    """

    peer_user_id: str
    type: ConnectionType
    status: ConnectionStatus = ConnectionStatus.ACTIVE
    created_at: datetime = Field(default_factory=_utcnow)
    last_interaction: datetime = Field(default_factory=_utcnow)
    interaction_count: int = Field(default=0, ge=0)

    @field_validator("created_at", "last_interaction")
    @classmethod
    def _normalize_timestamps(cls, v: datetime) -> datetime:
        return _as_utc(v)


class VerificationStatus(_Document):
    email: bool = False
    phone: bool = False
    identity: bool = False
    skills: bool = False

    def verified_count(self) -> int:
        return sum((self.email, self.phone, self.identity, self.skills))


class MemberProfile(_Document):
    """Matching profile of a community member (at most one per user)."""

    user_id: str = Field(..., min_length=1)
    skills: list[Skill] = Field(default_factory=list)
    interests: list[Interest] = Field(default_factory=list)
    availability: Availability = Field(default_factory=Availability)
    matching_preferences: MatchingPreferences = Field(
        default_factory=MatchingPreferences
    )
    connection_history: list[Connection] = Field(default_factory=list)
    communication_style: CommunicationStyle = Field(default="friendly")
    is_available_for_matching: bool = Field(default=True)
    joined_at: datetime = Field(default_factory=_utcnow)
    last_active: datetime = Field(default_factory=_utcnow)
    verification: VerificationStatus = Field(default_factory=VerificationStatus)

    @field_validator("joined_at", "last_active")
    @classmethod
    def _normalize_timestamps(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @property
    def profile_completeness(self) -> int:
        """Percentage (0-100) of the profile that has been filled in."""
        completeness = 0.0
        if self.skills:
            completeness += 20
        if self.interests:
            completeness += 20
        if self.availability.time_slots:
            completeness += 20
        if self.matching_preferences.max_distance_km > 0:
            completeness += 10
        if self.matching_preferences.preferred_skill_levels:
            completeness += 10
        completeness += (self.verification.verified_count() / 4) * 20
        return int(round(completeness))

    def find_connection(self, peer_user_id: str) -> Connection | None:
        for connection in self.connection_history:
            if connection.peer_user_id == peer_user_id:
                return connection
        return None

    def blocked_user_ids(self) -> set[str]:
        return {
            connection.peer_user_id
            for connection in self.connection_history
            if connection.status == ConnectionStatus.BLOCKED
        }


class Location(_Document):
    """Coordinates attached to a user record."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    city: str | None = None
    state: str | None = None
    region: str | None = None


class UserRecord(_Document):
    """Identity-layer snapshot of a user, as far as matching needs it."""

    user_id: str = Field(..., min_length=1)
    display_name: str | None = None
    date_of_birth: date | None = None
    gender: Literal["male", "female", "other"] | None = None
    occupation: str | None = None
    farm_type: str | None = None
    years_in_area: int | None = Field(default=None, ge=0)
    location: Location | None = None

    def age(self, today: date | None = None) -> int | None:
        """Age in whole years, or None when no date of birth is known."""
        if self.date_of_birth is None:
            return None
        today = today or date.today()
        born = self.date_of_birth
        years = today.year - born.year
        if (today.month, today.day) < (born.month, born.day):
            years -= 1
        return years

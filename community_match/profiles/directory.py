"""Member directory operations: profile upserts, toggles and statistics."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from community_match.errors import MatchNotFoundError
from community_match.profiles.models import (
    Availability,
    Interest,
    MatchingPreferences,
    MemberProfile,
    Skill,
)
from community_match.profiles.store import ProfileStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommunityStats:
    total_members: int
    active_members: int
    skill_categories: dict[str, int] = field(default_factory=dict)
    interest_categories: dict[str, int] = field(default_factory=dict)
    average_profile_completeness: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_members": self.total_members,
            "active_members": self.active_members,
            "skill_categories": dict(self.skill_categories),
            "interest_categories": dict(self.interest_categories),
            "average_profile_completeness": self.average_profile_completeness,
        }


class MemberDirectory:
    """Create and maintain member profiles in a ``ProfileStore``."""

    def __init__(self, store: ProfileStore, *, active_window_days: int = 30) -> None:
        self.store = store
        self.active_window_days = active_window_days

    async def upsert_member(
        self,
        user_id: str,
        *,
        skills: list[Skill],
        interests: list[Interest],
        availability: Availability,
        matching_preferences: MatchingPreferences,
    ) -> MemberProfile:
        """Create a member profile, or replace the matching fields of an existing one.

        The user must already be known to the identity layer.
        """
        if await self.store.get_user(user_id) is None:
            raise MatchNotFoundError(f"User not found: {user_id}", user_id=user_id)

        now = datetime.now(UTC)
        profile = await self.store.get_profile(user_id)
        if profile is None:
            profile = MemberProfile(
                user_id=user_id,
                skills=skills,
                interests=interests,
                availability=availability,
                matching_preferences=matching_preferences,
                joined_at=now,
                last_active=now,
            )
            logger.info("Created member profile for %s", user_id)
        else:
            profile = profile.model_copy(
                update={
                    "skills": skills,
                    "interests": interests,
                    "availability": availability,
                    "matching_preferences": matching_preferences,
                    "last_active": now,
                }
            )

        await self.store.save_profile(profile)
        return profile

    async def update_availability(
        self, user_id: str, availability: Availability
    ) -> MemberProfile:
        profile = await self._require(user_id)
        profile.availability = availability
        profile.last_active = datetime.now(UTC)
        await self.store.save_profile(profile)
        return profile

    async def update_preferences(
        self, user_id: str, changes: dict[str, Any]
    ) -> MemberProfile:
        """Merge ``changes`` into the member's matching preferences."""
        profile = await self._require(user_id)
        merged = profile.matching_preferences.model_dump() | changes
        profile.matching_preferences = MatchingPreferences.model_validate(merged)
        profile.last_active = datetime.now(UTC)
        await self.store.save_profile(profile)
        return profile

    async def toggle_matching_availability(self, user_id: str) -> MemberProfile:
        profile = await self._require(user_id)
        profile.is_available_for_matching = not profile.is_available_for_matching
        profile.last_active = datetime.now(UTC)
        await self.store.save_profile(profile)
        logger.info(
            "Member %s is now %s for matching",
            user_id,
            "available" if profile.is_available_for_matching else "unavailable",
        )
        return profile

    async def community_stats(self, now: datetime | None = None) -> CommunityStats:
        """Aggregate counts across every stored profile."""
        now = now or datetime.now(UTC)
        cutoff = now - timedelta(days=self.active_window_days)
        profiles = await self.store.list_profiles()

        skill_categories: Counter[str] = Counter()
        interest_categories: Counter[str] = Counter()
        active = 0
        for profile in profiles:
            skill_categories.update(skill.category for skill in profile.skills)
            interest_categories.update(
                interest.category for interest in profile.interests
            )
            if profile.is_available_for_matching and profile.last_active >= cutoff:
                active += 1

        average = 0.0
        if profiles:
            average = sum(p.profile_completeness for p in profiles) / len(profiles)

        return CommunityStats(
            total_members=len(profiles),
            active_members=active,
            skill_categories=dict(skill_categories),
            interest_categories=dict(interest_categories),
            average_profile_completeness=round(average, 2),
        )

    async def _require(self, user_id: str) -> MemberProfile:
        profile = await self.store.get_profile(user_id)
        if profile is None:
            raise MatchNotFoundError(
                f"Community member not found: {user_id}", user_id=user_id
            )
        return profile

"""Profile store interface and an in-memory implementation.

The matching engine reads read-only snapshots through ``ProfileStore`` and
writes back only through ``save_profile`` (ledger and directory updates).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from community_match.profiles.models import MemberProfile, UserRecord


@dataclass(frozen=True)
class ProfileCriteria:
    """Coarse pre-selection pushed down to the store.

    Stores may apply these loosely; the candidate filter re-checks
    everything, so an over-inclusive store is correct.
    """

    exclude_user_ids: frozenset[str] = field(default_factory=frozenset)
    skill_categories: frozenset[str] = field(default_factory=frozenset)
    interest_categories: frozenset[str] = field(default_factory=frozenset)

    def admits(self, profile: MemberProfile) -> bool:
        if not profile.is_available_for_matching:
            return False
        if profile.user_id in self.exclude_user_ids:
            return False
        if self.skill_categories and not (
            {skill.category for skill in profile.skills} & self.skill_categories
        ):
            return False
        if self.interest_categories and not (
            {interest.category for interest in profile.interests}
            & self.interest_categories
        ):
            return False
        return True


class ProfileStore(Protocol):
    """Persistence and identity collaborator used by the engine."""

    async def get_profile(self, user_id: str) -> MemberProfile | None: ...

    async def list_eligible_profiles(
        self, criteria: ProfileCriteria
    ) -> list[MemberProfile]: ...

    async def list_profiles(self) -> list[MemberProfile]: ...

    async def save_profile(self, profile: MemberProfile) -> None: ...

    async def get_user(self, user_id: str) -> UserRecord | None: ...

    async def get_users(self, user_ids: Iterable[str]) -> dict[str, UserRecord]: ...

    async def save_user(self, user: UserRecord) -> None: ...


class InMemoryProfileStore:
    """Dictionary-backed store, used for pool snapshot files and tests.

    Returned profiles are deep copies so callers never mutate the snapshot.
    """

    def __init__(
        self,
        profiles: Iterable[MemberProfile] = (),
        users: Iterable[UserRecord] = (),
    ) -> None:
        self._profiles: dict[str, MemberProfile] = {}
        self._users: dict[str, UserRecord] = {}
        for profile in profiles:
            self._profiles[profile.user_id] = profile.model_copy(deep=True)
        for user in users:
            self._users[user.user_id] = user.model_copy(deep=True)

    async def get_profile(self, user_id: str) -> MemberProfile | None:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile is not None else None

    async def list_eligible_profiles(
        self, criteria: ProfileCriteria
    ) -> list[MemberProfile]:
        return [
            profile.model_copy(deep=True)
            for profile in self._profiles.values()
            if criteria.admits(profile)
        ]

    async def list_profiles(self) -> list[MemberProfile]:
        return [profile.model_copy(deep=True) for profile in self._profiles.values()]

    async def save_profile(self, profile: MemberProfile) -> None:
        self._profiles[profile.user_id] = profile.model_copy(deep=True)

    async def get_user(self, user_id: str) -> UserRecord | None:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user is not None else None

    async def get_users(self, user_ids: Iterable[str]) -> dict[str, UserRecord]:
        return {
            user_id: self._users[user_id].model_copy(deep=True)
            for user_id in user_ids
            if user_id in self._users
        }

    async def save_user(self, user: UserRecord) -> None:
        self._users[user.user_id] = user.model_copy(deep=True)

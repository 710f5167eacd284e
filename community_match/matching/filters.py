"""Candidate filtering: narrow a profile pool to structurally eligible members."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date

from community_match.errors import InvalidFilterError
from community_match.matching.geo import distance_between
from community_match.matching.models import MatchingFilters
from community_match.profiles.models import MemberProfile, UserRecord
from community_match.profiles.store import ProfileCriteria

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A pool member paired with its identity record (if any)."""

    member: MemberProfile
    user: UserRecord | None

    @property
    def user_id(self) -> str:
        return self.member.user_id


def validate_filters(filters: MatchingFilters) -> None:
    """Reject out-of-domain filter values before any scoring work begins."""
    if filters.max_distance is not None and filters.max_distance <= 0:
        raise InvalidFilterError(
            f"max_distance must be positive (got {filters.max_distance})",
            field="max_distance",
        )
    for name in ("min_age", "max_age"):
        value = getattr(filters, name)
        if value is not None and value < 0:
            raise InvalidFilterError(f"{name} must be >= 0 (got {value})", field=name)
    if (
        filters.min_age is not None
        and filters.max_age is not None
        and filters.min_age > filters.max_age
    ):
        raise InvalidFilterError(
            f"min_age ({filters.min_age}) exceeds max_age ({filters.max_age})",
            field="min_age",
        )
    score = filters.min_matching_score
    if score is not None and not (0 <= score <= 100):
        raise InvalidFilterError(
            f"min_matching_score must be between 0 and 100 (got {score})",
            field="min_matching_score",
        )


def criteria_for(filters: MatchingFilters, seeker: MemberProfile) -> ProfileCriteria:
    """Coarse store-side pre-selection derived from the request."""
    excluded = set(filters.exclude_user_ids) | seeker.blocked_user_ids()
    excluded.add(seeker.user_id)
    return ProfileCriteria(
        exclude_user_ids=frozenset(excluded),
        skill_categories=frozenset(filters.skill_categories),
        interest_categories=frozenset(filters.interest_categories),
    )


def filter_candidates(
    seeker: MemberProfile,
    seeker_user: UserRecord | None,
    pool: Iterable[Candidate],
    filters: MatchingFilters,
    *,
    today: date | None = None,
) -> list[Candidate]:
    """Return the eligible subset of ``pool``, preserving pool order.

    Checks run in this order: availability and self-exclusion, explicit and
    blocked exclusions, structural membership tests, demographics (only when
    the candidate's age or gender is known), and finally the distance cutoff
    (only when both parties have a location).
    """
    today = today or date.today()
    excluded = set(filters.exclude_user_ids) | seeker.blocked_user_ids()

    eligible: list[Candidate] = []
    for candidate in pool:
        member = candidate.member
        if member.user_id == seeker.user_id or not member.is_available_for_matching:
            continue
        if member.user_id in excluded:
            continue
        if not _passes_structural(seeker, member, filters):
            continue
        if not _passes_demographics(seeker, candidate.user, filters, today):
            continue
        if not _passes_distance(seeker_user, candidate.user, filters):
            continue
        eligible.append(candidate)

    logger.debug("Candidate filter kept %s members for %s", len(eligible), seeker.user_id)
    return eligible


def build_pool(
    members: Iterable[MemberProfile], users: Mapping[str, UserRecord]
) -> list[Candidate]:
    return [Candidate(member=m, user=users.get(m.user_id)) for m in members]


def _intersects(required: Iterable[str], present: Iterable[str]) -> bool:
    return bool(set(required) & set(present))


def _passes_structural(
    seeker: MemberProfile, member: MemberProfile, filters: MatchingFilters
) -> bool:
    if filters.skill_categories and not _intersects(
        filters.skill_categories, (s.category for s in member.skills)
    ):
        return False
    if filters.interest_categories and not _intersects(
        filters.interest_categories, (i.category for i in member.interests)
    ):
        return False
    if filters.skill_levels and not _intersects(
        filters.skill_levels, (s.level for s in member.skills)
    ):
        return False
    if filters.availability_types and not _intersects(
        filters.availability_types, member.availability.preferred_meeting_types
    ):
        return False
    if (
        filters.communication_styles
        and member.communication_style not in filters.communication_styles
    ):
        return False

    preferences = seeker.matching_preferences
    if preferences.exclude_categories and member.skills:
        excluded = set(preferences.exclude_categories)
        if all(skill.category in excluded for skill in member.skills):
            return False
    if preferences.require_mutual_interests:
        if shared_interest_count(seeker, member) < preferences.minimum_shared_interests:
            return False
    return True


def shared_interest_count(seeker: MemberProfile, member: MemberProfile) -> int:
    """Number of the seeker's interests that the member shares by name or category."""
    count = 0
    for mine in seeker.interests:
        for theirs in member.interests:
            if (
                mine.name.lower() == theirs.name.lower()
                or mine.category == theirs.category
            ):
                count += 1
                break
    return count


def _passes_demographics(
    seeker: MemberProfile,
    user: UserRecord | None,
    filters: MatchingFilters,
    today: date,
) -> bool:
    if user is None:
        return True

    preferences = seeker.matching_preferences
    min_age = filters.min_age
    max_age = filters.max_age
    if min_age is None and max_age is None and preferences.age_range is not None:
        min_age = preferences.age_range.min
        max_age = preferences.age_range.max

    if min_age is not None or max_age is not None:
        age = user.age(today)
        if age is not None:
            if min_age is not None and age < min_age:
                return False
            if max_age is not None and age > max_age:
                return False

    genders = filters.gender_preference or preferences.gender_preference or []
    if genders and "any" not in genders and user.gender is not None:
        if user.gender not in genders:
            return False
    return True


def _passes_distance(
    seeker_user: UserRecord | None,
    user: UserRecord | None,
    filters: MatchingFilters,
) -> bool:
    if filters.max_distance is None:
        return True
    distance = distance_between(
        seeker_user.location if seeker_user else None,
        user.location if user else None,
    )
    if distance is None:
        return True
    return distance <= filters.max_distance

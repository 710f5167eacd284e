"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from community_match.profiles.models import (
    Availability,
    Interest,
    Location,
    MemberProfile,
    Skill,
    UserRecord,
)


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Keep settings, matching config and logging state per-test."""
    from community_match.config.settings import reset_settings
    from community_match.matching.config import reset_matching_config
    from community_match.utils.logging import reset_logging

    reset_settings()
    reset_matching_config()
    reset_logging()
    yield
    reset_settings()
    reset_matching_config()
    reset_logging()


@pytest.fixture
def make_member():
    """Factory for member profiles with sensible farming-community defaults."""

    def _make(user_id: str, **overrides) -> MemberProfile:
        data = {
            "user_id": user_id,
            "skills": [
                Skill(
                    name="Cattle Farming",
                    level="advanced",
                    category="agricultural",
                    can_teach=True,
                )
            ],
            "interests": [Interest(name="Gardening", category="outdoors")],
            "availability": Availability(
                preferred_meeting_types=["in-person"], response_time="within-day"
            ),
        }
        data.update(overrides)
        return MemberProfile(**data)

    return _make


@pytest.fixture
def make_user():
    """Factory for user records; pass ``lat``/``lon`` to attach a location."""

    def _make(
        user_id: str,
        *,
        lat: float | None = None,
        lon: float | None = None,
        **overrides,
    ) -> UserRecord:
        data: dict = {"user_id": user_id, "display_name": user_id.title()}
        if lat is not None and lon is not None:
            data["location"] = Location(latitude=lat, longitude=lon)
        data.update(overrides)
        return UserRecord(**data)

    return _make

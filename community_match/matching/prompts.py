"""Prompt builders for assisted compatibility scoring."""

from __future__ import annotations

import json
from datetime import date
from typing import Any

from community_match.profiles.models import MemberProfile, UserRecord

MATCHING_SYSTEM_PROMPT = """You are a community matching assistant for rural and regional members.

Analyze compatibility between two community members based on their skills,
interests, availability, location and communication preferences. Consider
agricultural knowledge sharing, geographic isolation, community support needs,
skills exchange and the preservation of traditional knowledge.

You must follow these rules:
- Only use facts present in the two member summaries. Do not invent skills or history.
- Every score is a number from 0 to 100.
- Output MUST be valid JSON only (no markdown), matching the requested schema.
"""

RESPONSE_SCHEMA = {
    "score": "<overall compatibility 0-100>",
    "reasoning": "<explanation of the compatibility>",
    "compatibilityFactors": {
        "skillsAlignment": "<0-100>",
        "interestsAlignment": "<0-100>",
        "availabilityMatch": "<0-100>",
        "locationCompatibility": "<0-100>",
        "communicationStyle": "<0-100>",
        "experienceLevel": "<0-100>",
    },
    "recommendations": ["<specific recommendation>"],
}


def build_member_summary(
    member: MemberProfile,
    user: UserRecord | None,
    *,
    today: date | None = None,
    include_preferences: bool = False,
) -> dict[str, Any]:
    """Summarize a member for the reasoning service.

    Only matching-relevant fields are included; no contact details leave the
    engine. Preferences are included for the seeker side of the pair.
    """
    location = user.location if user else None
    summary: dict[str, Any] = {
        "location": {
            "city": location.city if location else None,
            "state": location.state if location else None,
            "region": location.region if location else None,
        },
        "age": user.age(today) if user else None,
        "occupation": user.occupation if user else None,
        "farm_type": user.farm_type if user else None,
        "years_in_area": user.years_in_area if user else None,
        "skills": [
            {
                "name": skill.name,
                "level": skill.level,
                "category": skill.category,
                "can_teach": skill.can_teach,
                "wants_to_learn": skill.wants_to_learn,
            }
            for skill in member.skills
        ],
        "interests": [
            {
                "name": interest.name,
                "category": interest.category,
                "intensity": interest.intensity,
            }
            for interest in member.interests
        ],
        "availability": {
            "meeting_types": list(member.availability.preferred_meeting_types),
            "response_time": member.availability.response_time,
        },
        "communication_style": member.communication_style,
    }

    if include_preferences:
        preferences = member.matching_preferences
        summary["preferences"] = {
            "max_distance_km": preferences.max_distance_km,
            "preferred_skill_levels": list(preferences.preferred_skill_levels),
            "priority_categories": list(preferences.priority_categories),
        }
    return summary


def build_match_prompt(
    seeker_summary: dict[str, Any], candidate_summary: dict[str, Any]
) -> str:
    """Build the user prompt for one seeker/candidate pair."""
    return "\n".join(
        [
            "Analyze compatibility between these two community members.",
            "",
            "MEMBER A (seeking matches, JSON):",
            json.dumps(seeker_summary, ensure_ascii=True),
            "",
            "MEMBER B (candidate, JSON):",
            json.dumps(candidate_summary, ensure_ascii=True),
            "",
            "Respect Member A's preferences when weighing location and skill levels.",
            "Respond with a JSON object of this shape:",
            json.dumps(RESPONSE_SCHEMA, ensure_ascii=True),
        ]
    )

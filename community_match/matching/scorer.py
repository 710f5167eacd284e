"""Deterministic compatibility scoring.

Pure, in-process scoring of a seeker against one candidate. It has no I/O
and no failure states, so it doubles as the fallback for assisted scoring.
"""

from __future__ import annotations

import math

from community_match.matching.geo import distance_between
from community_match.matching.models import (
    CompatibilityFactors,
    CompatibilityResult,
    ScoreSource,
)
from community_match.profiles.models import (
    Availability,
    Interest,
    Location,
    MemberProfile,
    Skill,
    UserRecord,
)

WEIGHT_SKILLS = 0.25
WEIGHT_INTERESTS = 0.20
WEIGHT_AVAILABILITY = 0.15
WEIGHT_LOCATION = 0.20
WEIGHT_COMMUNICATION = 0.10
WEIGHT_EXPERIENCE = 0.10

NEUTRAL_LOCATION_SCORE = 50.0
DEFAULT_STYLE_SCORE = 50.0

RESPONSE_TIME_ORDINALS: dict[str, int] = {
    "immediate": 4,
    "within-hour": 3,
    "within-day": 2,
    "within-week": 1,
}

# Stored per direction; the rows happen to agree both ways.
COMMUNICATION_STYLE_MATRIX: dict[str, dict[str, float]] = {
    "formal": {"formal": 100, "professional": 80, "friendly": 60, "casual": 40},
    "professional": {"professional": 100, "formal": 80, "friendly": 70, "casual": 50},
    "friendly": {"friendly": 100, "professional": 70, "casual": 80, "formal": 60},
    "casual": {"casual": 100, "friendly": 80, "professional": 50, "formal": 40},
}

DETERMINISTIC_REASONING = (
    "Basic compatibility analysis based on skills, interests, availability, "
    "location, and communication preferences."
)


def _same_topic(a_name: str, a_category: str, b_name: str, b_category: str) -> bool:
    return a_name.lower() == b_name.lower() or a_category == b_category


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class DeterministicScorer:
    """Weighted six-factor compatibility scorer."""

    def score_skills(self, seeker_skills: list[Skill], candidate_skills: list[Skill]) -> float:
        """70 points for topic overlap plus 30 for teach/learn pairings."""
        if not seeker_skills or not candidate_skills:
            return 0.0

        matches = 0
        teach_learn = 0
        for mine in seeker_skills:
            for theirs in candidate_skills:
                if not _same_topic(mine.name, mine.category, theirs.name, theirs.category):
                    continue
                matches += 1
                if (mine.can_teach and theirs.wants_to_learn) or (
                    mine.wants_to_learn and theirs.can_teach
                ):
                    teach_learn += 1

        denominator = max(len(seeker_skills), len(candidate_skills))
        base = matches / denominator * 70
        bonus = teach_learn / denominator * 30
        return min(100.0, base + bonus)

    def score_interests(
        self, seeker_interests: list[Interest], candidate_interests: list[Interest]
    ) -> float:
        """80 points for topic overlap plus 20 for matching intensity."""
        if not seeker_interests or not candidate_interests:
            return 0.0

        matches = 0
        same_intensity = 0
        for mine in seeker_interests:
            for theirs in candidate_interests:
                if not _same_topic(mine.name, mine.category, theirs.name, theirs.category):
                    continue
                matches += 1
                if mine.intensity == theirs.intensity:
                    same_intensity += 1

        denominator = max(len(seeker_interests), len(candidate_interests))
        base = matches / denominator * 80
        bonus = (same_intensity / matches * 20) if matches else 0.0
        return min(100.0, base + bonus)

    def score_availability(self, seeker: Availability, candidate: Availability) -> float:
        """50 points for shared meeting types, 50 for response-time closeness."""
        mine = seeker.preferred_meeting_types
        theirs = candidate.preferred_meeting_types
        meeting_score = 0.0
        if mine and theirs:
            common = [t for t in mine if t in theirs]
            meeting_score = len(common) / max(len(mine), len(theirs)) * 50

        response_score = self.score_response_time(
            seeker.response_time, candidate.response_time
        )
        return min(100.0, meeting_score + response_score / 100 * 50)

    def score_response_time(self, seeker_time: str, candidate_time: str) -> float:
        diff = abs(
            RESPONSE_TIME_ORDINALS[seeker_time] - RESPONSE_TIME_ORDINALS[candidate_time]
        )
        return float(max(25, 100 - diff * 25))

    def score_location(
        self,
        seeker_location: Location | None,
        candidate_location: Location | None,
        max_distance_km: float,
    ) -> float:
        """Steep reward inside the preferred radius, gentle decay beyond it."""
        distance = distance_between(seeker_location, candidate_location)
        if distance is None:
            return NEUTRAL_LOCATION_SCORE

        if distance <= max_distance_km:
            return max(60.0, 100 - (distance / max_distance_km) * 40)
        return max(10.0, 60 - ((distance - max_distance_km) / max_distance_km) * 50)

    def score_communication(self, seeker_style: str, candidate_style: str) -> float:
        return float(
            COMMUNICATION_STYLE_MATRIX.get(seeker_style, {}).get(
                candidate_style, DEFAULT_STYLE_SCORE
            )
        )

    def score_experience(
        self, seeker_user: UserRecord | None, candidate_user: UserRecord | None
    ) -> float:
        """Similar tenure scores highest; a wider gap still suits mentoring."""
        seeker_years = (seeker_user.years_in_area if seeker_user else None) or 0
        candidate_years = (candidate_user.years_in_area if candidate_user else None) or 0

        diff = abs(seeker_years - candidate_years)
        if diff <= 2:
            return 100.0
        if diff <= 5:
            return 80.0
        if diff <= 10:
            return 70.0
        return 50.0

    def calculate_factors(
        self,
        seeker: MemberProfile,
        candidate: MemberProfile,
        *,
        seeker_user: UserRecord | None,
        candidate_user: UserRecord | None,
        max_distance_km: float,
    ) -> CompatibilityFactors:
        return CompatibilityFactors(
            skills_alignment=self.score_skills(seeker.skills, candidate.skills),
            interests_alignment=self.score_interests(
                seeker.interests, candidate.interests
            ),
            availability_match=self.score_availability(
                seeker.availability, candidate.availability
            ),
            location_compatibility=self.score_location(
                seeker_user.location if seeker_user else None,
                candidate_user.location if candidate_user else None,
                max_distance_km,
            ),
            communication_style=self.score_communication(
                seeker.communication_style, candidate.communication_style
            ),
            experience_level=self.score_experience(seeker_user, candidate_user),
        )

    def total_score(self, factors: CompatibilityFactors) -> int:
        total = (
            WEIGHT_SKILLS * factors.skills_alignment
            + WEIGHT_INTERESTS * factors.interests_alignment
            + WEIGHT_AVAILABILITY * factors.availability_match
            + WEIGHT_LOCATION * factors.location_compatibility
            + WEIGHT_COMMUNICATION * factors.communication_style
            + WEIGHT_EXPERIENCE * factors.experience_level
        )
        return min(100, max(0, _round_half_up(total)))

    def recommendations(
        self,
        seeker: MemberProfile,
        candidate: MemberProfile,
        factors: CompatibilityFactors,
    ) -> list[str]:
        recommendations: list[str] = []

        if factors.skills_alignment > 70:
            recommendations.append(
                "Strong skills compatibility - consider skill sharing or collaboration"
            )

        teachable = _teach_learn_topics(seeker.skills, candidate.skills)
        if teachable:
            recommendations.append(
                f"Teach/learn opportunity around {', '.join(teachable)}"
            )

        if factors.interests_alignment > 70:
            recommendations.append(
                "Shared interests detected - great foundation for friendship"
            )

        if factors.availability_match > 70:
            recommendations.append("Compatible schedules - easy to arrange meetings")

        if factors.location_compatibility > 80:
            recommendations.append("Close proximity - ideal for in-person meetings")

        if not recommendations:
            recommendations.append(
                "Consider connecting to explore potential collaboration opportunities"
            )
        return recommendations

    def format_reasoning(self, factors: CompatibilityFactors, score: int) -> str:
        parts = [DETERMINISTIC_REASONING, f"score={score}"]
        parts.extend(f"{name}={value:.0f}" for name, value in factors.to_dict().items())
        return " | ".join(parts)

    def score(
        self,
        seeker: MemberProfile,
        candidate: MemberProfile,
        *,
        seeker_user: UserRecord | None = None,
        candidate_user: UserRecord | None = None,
        max_distance_km: float = 50.0,
    ) -> CompatibilityResult:
        """Score ``candidate`` against ``seeker`` with the fixed factor weights."""
        factors = self.calculate_factors(
            seeker,
            candidate,
            seeker_user=seeker_user,
            candidate_user=candidate_user,
            max_distance_km=max_distance_km,
        )
        total = self.total_score(factors)
        return CompatibilityResult(
            candidate_id=candidate.user_id,
            score=total,
            factors=factors,
            reasoning=self.format_reasoning(factors, total),
            recommendations=self.recommendations(seeker, candidate, factors),
            distance_km=distance_between(
                seeker_user.location if seeker_user else None,
                candidate_user.location if candidate_user else None,
            ),
            score_source=ScoreSource.DETERMINISTIC,
        )


def _teach_learn_topics(seeker_skills: list[Skill], candidate_skills: list[Skill]) -> list[str]:
    topics: list[str] = []
    for mine in seeker_skills:
        for theirs in candidate_skills:
            if not _same_topic(mine.name, mine.category, theirs.name, theirs.category):
                continue
            if (mine.can_teach and theirs.wants_to_learn) or (
                mine.wants_to_learn and theirs.can_teach
            ):
                if mine.name not in topics:
                    topics.append(mine.name)
    return topics

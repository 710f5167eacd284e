"""Reasoning-assisted scoring with deterministic fallback."""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import date

from pydantic import ValidationError

from community_match.matching.geo import distance_between
from community_match.matching.llm import ReasoningClient, ReasoningServiceError
from community_match.matching.models import (
    AssistedRating,
    CompatibilityFactors,
    CompatibilityResult,
    ScoreSource,
)
from community_match.matching.prompts import build_member_summary
from community_match.matching.scorer import DeterministicScorer
from community_match.profiles.models import MemberProfile, UserRecord

logger = logging.getLogger(__name__)


class AssistedScorer:
    """Score a pair through the reasoning service, falling back on any failure.

    The result is tagged: ``ScoreSource.ASSISTED`` when the service answered,
    ``ScoreSource.FALLBACK`` (with ``fallback_reason``) when the deterministic
    scorer had to step in. Cancellation is never swallowed.
    """

    def __init__(
        self,
        client: ReasoningClient,
        *,
        timeout_seconds: float,
        deterministic: DeterministicScorer | None = None,
    ) -> None:
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.deterministic = deterministic or DeterministicScorer()

    async def score(
        self,
        seeker: MemberProfile,
        candidate: MemberProfile,
        *,
        seeker_user: UserRecord | None = None,
        candidate_user: UserRecord | None = None,
        max_distance_km: float = 50.0,
        today: date | None = None,
    ) -> CompatibilityResult:
        seeker_summary = build_member_summary(
            seeker, seeker_user, today=today, include_preferences=True
        )
        candidate_summary = build_member_summary(candidate, candidate_user, today=today)

        try:
            rating = await asyncio.wait_for(
                self.client.rate(seeker_summary, candidate_summary),
                timeout=self.timeout_seconds,
            )
            if not isinstance(rating, AssistedRating):
                rating = AssistedRating.model_validate(rating)
        except TimeoutError:
            reason = f"timed out after {self.timeout_seconds}s"
        except ReasoningServiceError as e:
            reason = str(e)
        except ValidationError as e:
            reason = f"unparseable rating: {e.error_count()} validation error(s)"
        except Exception as e:
            # Clients are pluggable; any error they raise stays local to this pair.
            reason = f"reasoning client failed: {e!r}"
        else:
            return self._from_rating(
                rating,
                candidate_id=candidate.user_id,
                distance_km=distance_between(
                    seeker_user.location if seeker_user else None,
                    candidate_user.location if candidate_user else None,
                ),
            )

        logger.warning(
            "Assisted scoring for %s -> %s fell back to deterministic: %s",
            seeker.user_id,
            candidate.user_id,
            reason,
        )
        result = self.deterministic.score(
            seeker,
            candidate,
            seeker_user=seeker_user,
            candidate_user=candidate_user,
            max_distance_km=max_distance_km,
        )
        result.score_source = ScoreSource.FALLBACK
        result.fallback_reason = reason
        return result

    def _from_rating(
        self,
        rating: AssistedRating,
        *,
        candidate_id: str,
        distance_km: float | None,
    ) -> CompatibilityResult:
        factors = rating.compatibility_factors
        return CompatibilityResult(
            candidate_id=candidate_id,
            score=min(100, max(0, int(math.floor(rating.score + 0.5)))),
            factors=CompatibilityFactors(
                skills_alignment=factors.skills_alignment,
                interests_alignment=factors.interests_alignment,
                availability_match=factors.availability_match,
                location_compatibility=factors.location_compatibility,
                communication_style=factors.communication_style,
                experience_level=factors.experience_level,
            ),
            reasoning=rating.reasoning or "AI analysis completed",
            recommendations=list(rating.recommendations),
            distance_km=distance_km,
            score_source=ScoreSource.ASSISTED,
        )

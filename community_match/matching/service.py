"""Match orchestration: filter the pool, score with bounded concurrency, rank."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Iterable
from datetime import date
from typing import Any

from pydantic import ValidationError

from community_match.errors import InvalidFilterError, MatchNotFoundError
from community_match.ledger.service import ConnectionLedger
from community_match.matching.assisted import AssistedScorer
from community_match.matching.config import MatchingConfig, get_matching_config
from community_match.matching.filters import (
    Candidate,
    build_pool,
    criteria_for,
    filter_candidates,
    validate_filters,
)
from community_match.matching.llm import LiteLLMReasoningClient, ReasoningClient
from community_match.matching.models import (
    CompatibilityResult,
    MatchingFilters,
    MatchResult,
)
from community_match.matching.scorer import DeterministicScorer
from community_match.profiles.models import (
    Connection,
    ConnectionType,
    MemberProfile,
    UserRecord,
)
from community_match.profiles.store import ProfileStore

logger = logging.getLogger(__name__)


def rank_results(
    results: Iterable[MatchResult],
    *,
    min_score: float | None = None,
    limit: int | None = None,
) -> list[MatchResult]:
    """Drop low scores, then sort by score desc, distance asc, candidate id.

    Depends only on the set of results, never on completion order.
    """
    kept = [r for r in results if min_score is None or r.score >= min_score]
    kept.sort(
        key=lambda r: (
            -r.score,
            r.distance_km if r.distance_km is not None else math.inf,
            r.candidate_id,
        )
    )
    if limit is not None:
        kept = kept[:limit]
    return kept


class MatchingService:
    """Entry points of the engine: ``find_matches`` and ``record_connection``.

    The reasoning client is injected; with none given, ``scoring_mode=assisted``
    builds a LiteLLM client and ``deterministic`` scores in-process only.
    """

    def __init__(
        self,
        store: ProfileStore,
        *,
        config: MatchingConfig | None = None,
        reasoning_client: ReasoningClient | None = None,
        scorer: DeterministicScorer | None = None,
    ) -> None:
        self.store = store
        self.config = config or get_matching_config()
        self.scorer = scorer or DeterministicScorer()
        self.ledger = ConnectionLedger(store)

        if reasoning_client is None and self.config.scoring_mode == "assisted":
            reasoning_client = LiteLLMReasoningClient(config=self.config)

        self.assisted: AssistedScorer | None = None
        if reasoning_client is not None:
            self.assisted = AssistedScorer(
                reasoning_client,
                timeout_seconds=self.config.assisted_timeout_seconds,
                deterministic=self.scorer,
            )

    async def find_matches(
        self,
        seeker_id: str,
        filters: MatchingFilters | dict[str, Any] | None = None,
        limit: int | None = None,
        *,
        today: date | None = None,
    ) -> list[MatchResult]:
        """Return the ranked match list for ``seeker_id``.

        Raises:
            InvalidFilterError: filters or limit out of domain (before any work).
            MatchNotFoundError: the seeker has no profile or is not matchable.
            StoreUnavailableError: the profile store could not be read.
        """
        filters = self._coerce_filters(filters)
        validate_filters(filters)
        limit = self._resolve_limit(limit)

        started = time.monotonic()

        seeker = await self.store.get_profile(seeker_id)
        if seeker is None:
            raise MatchNotFoundError(
                f"Community member profile not found: {seeker_id}", user_id=seeker_id
            )
        if not seeker.is_available_for_matching:
            raise MatchNotFoundError(
                f"Member {seeker_id} is not available for matching", user_id=seeker_id
            )
        seeker_user = await self.store.get_user(seeker_id)

        members = await self.store.list_eligible_profiles(criteria_for(filters, seeker))
        users = await self.store.get_users(member.user_id for member in members)
        candidates = filter_candidates(
            seeker, seeker_user, build_pool(members, users), filters, today=today
        )

        logger.info(
            "Scoring %s candidates for %s (pool=%s, mode=%s)",
            len(candidates),
            seeker_id,
            len(members),
            "assisted" if self.assisted else "deterministic",
        )

        scored = await self._score_candidates(seeker, seeker_user, candidates, today)
        ranked = rank_results(
            scored, min_score=filters.min_matching_score, limit=limit
        )

        degraded = sum(1 for result in scored if result.used_fallback)
        if degraded:
            logger.warning(
                "Scoring degraded for %s of %s candidates of %s",
                degraded,
                len(scored),
                seeker_id,
            )
        logger.info(
            "Returning %s matches for %s in %.2fs",
            len(ranked),
            seeker_id,
            time.monotonic() - started,
        )
        return ranked

    async def record_connection(
        self,
        seeker_id: str,
        target_id: str,
        connection_type: ConnectionType | str,
    ) -> Connection:
        """Record a connection on the seeker's own ledger."""
        return await self.ledger.record_connection(seeker_id, target_id, connection_type)

    async def _score_candidates(
        self,
        seeker: MemberProfile,
        seeker_user: UserRecord | None,
        candidates: list[Candidate],
        today: date | None,
    ) -> list[MatchResult]:
        max_distance_km = seeker.matching_preferences.max_distance_km

        if self.assisted is None:
            return [
                MatchResult(
                    member=candidate.member,
                    user=candidate.user,
                    compatibility=self.scorer.score(
                        seeker,
                        candidate.member,
                        seeker_user=seeker_user,
                        candidate_user=candidate.user,
                        max_distance_km=max_distance_km,
                    ),
                )
                for candidate in candidates
            ]

        if not candidates:
            return []

        assisted = self.assisted
        queue: asyncio.Queue[tuple[int, Candidate]] = asyncio.Queue()
        for item in enumerate(candidates):
            queue.put_nowait(item)
        slots: list[CompatibilityResult | None] = [None] * len(candidates)

        async def worker() -> None:
            while True:
                try:
                    index, candidate = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                slots[index] = await assisted.score(
                    seeker,
                    candidate.member,
                    seeker_user=seeker_user,
                    candidate_user=candidate.user,
                    max_distance_km=max_distance_km,
                    today=today,
                )

        workers = min(self.config.max_concurrency, len(candidates))
        async with asyncio.TaskGroup() as group:
            for number in range(workers):
                group.create_task(worker(), name=f"match-worker-{number}")

        results: list[MatchResult] = []
        for candidate, compatibility in zip(candidates, slots, strict=True):
            if compatibility is None:
                raise RuntimeError(f"Candidate {candidate.user_id} was never scored")
            results.append(
                MatchResult(
                    member=candidate.member,
                    user=candidate.user,
                    compatibility=compatibility,
                )
            )
        return results

    def _coerce_filters(
        self, filters: MatchingFilters | dict[str, Any] | None
    ) -> MatchingFilters:
        if filters is None:
            return MatchingFilters()
        if isinstance(filters, MatchingFilters):
            return filters
        try:
            return MatchingFilters.model_validate(filters)
        except ValidationError as e:
            raise InvalidFilterError(f"Invalid matching filters: {e}") from e

    def _resolve_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.config.default_limit
        if limit < 1 or limit > self.config.max_limit:
            raise InvalidFilterError(
                f"limit must be between 1 and {self.config.max_limit} (got {limit})",
                field="limit",
            )
        return limit

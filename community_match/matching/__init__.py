"""Candidate filtering, compatibility scoring and match ranking.

Public API:
    - MatchingService: find_matches / record_connection entry points
    - MatchingConfig: scoring mode, worker budget, timeouts, paging
    - DeterministicScorer / AssistedScorer: the two scoring paths
    - MatchingFilters, MatchResult, CompatibilityResult, ScoreSource
"""

from community_match.matching.assisted import AssistedScorer
from community_match.matching.config import (
    MatchingConfig,
    get_matching_config,
    reset_matching_config,
)
from community_match.matching.filters import (
    Candidate,
    filter_candidates,
    validate_filters,
)
from community_match.matching.geo import distance_between, haversine_km
from community_match.matching.llm import (
    LiteLLMReasoningClient,
    ReasoningClient,
    ReasoningServiceError,
)
from community_match.matching.models import (
    AssistedRating,
    CompatibilityFactors,
    CompatibilityResult,
    MatchingFilters,
    MatchResult,
    ScoreSource,
)
from community_match.matching.scorer import DeterministicScorer
from community_match.matching.service import MatchingService, rank_results

__all__ = [
    "AssistedRating",
    "AssistedScorer",
    "Candidate",
    "CompatibilityFactors",
    "CompatibilityResult",
    "DeterministicScorer",
    "LiteLLMReasoningClient",
    "MatchResult",
    "MatchingConfig",
    "MatchingFilters",
    "MatchingService",
    "ReasoningClient",
    "ReasoningServiceError",
    "ScoreSource",
    "distance_between",
    "filter_candidates",
    "get_matching_config",
    "haversine_km",
    "rank_results",
    "reset_matching_config",
    "validate_filters",
]

"""Tests for matching configuration."""

import pytest


class TestMatchingConfig:
    """Test MatchingConfig settings."""

    def test_matching_config_has_defaults(self):
        """MatchingConfig should load with sensible defaults."""
        from community_match.matching.config import MatchingConfig

        config = MatchingConfig(_env_file=None)  # type: ignore[call-arg]

        assert config.scoring_mode == "deterministic"
        assert config.max_concurrency == 8
        assert config.assisted_timeout_seconds == 5.0
        assert config.default_limit == 20
        assert config.max_limit == 100
        assert config.llm_max_retries == 0

    def test_reads_prefixed_environment(self, monkeypatch):
        from community_match.matching.config import MatchingConfig

        monkeypatch.setenv("MATCHING_SCORING_MODE", "assisted")
        monkeypatch.setenv("MATCHING_MAX_CONCURRENCY", "16")

        config = MatchingConfig(_env_file=None)  # type: ignore[call-arg]
        assert config.scoring_mode == "assisted"
        assert config.max_concurrency == 16

    def test_concurrency_bounds(self):
        from community_match.matching.config import MatchingConfig

        with pytest.raises(ValueError):
            MatchingConfig(_env_file=None, max_concurrency=0)  # type: ignore[call-arg]
        with pytest.raises(ValueError):
            MatchingConfig(_env_file=None, max_concurrency=65)  # type: ignore[call-arg]

    def test_default_limit_must_fit_max_limit(self):
        from community_match.matching.config import MatchingConfig

        with pytest.raises(ValueError, match="default_limit"):
            MatchingConfig(_env_file=None, default_limit=50, max_limit=10)  # type: ignore[call-arg]

    def test_singleton_reset(self):
        from community_match.matching.config import (
            get_matching_config,
            reset_matching_config,
        )

        first = get_matching_config()
        assert get_matching_config() is first
        reset_matching_config()
        assert get_matching_config() is not first

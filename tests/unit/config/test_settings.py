"""Tests for Settings configuration class."""

from pathlib import Path

import pytest


class TestSettingsDefaults:
    """Test that Settings loads sensible defaults."""

    def test_settings_loads_with_defaults(self, monkeypatch):
        """Settings should load with default values when no env vars are set."""
        from community_match.config.settings import Settings

        for var in ("DATABASE_PATH", "POOL_PATH", "ACTIVE_WINDOW_DAYS", "LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.database_path == Path("./data/community.db")
        assert settings.pool_path is None
        assert settings.active_window_days == 30
        assert settings.log_level == "INFO"

    def test_settings_reads_environment(self, monkeypatch):
        """Environment variables should override defaults."""
        from community_match.config.settings import Settings

        monkeypatch.setenv("DATABASE_PATH", "/tmp/members.db")
        monkeypatch.setenv("POOL_PATH", "pool.yaml")
        monkeypatch.setenv("ACTIVE_WINDOW_DAYS", "7")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.database_path == Path("/tmp/members.db")
        assert settings.pool_path == Path("pool.yaml")
        assert settings.active_window_days == 7


class TestSettingsValidation:
    """Test Settings field validation."""

    def test_log_level_is_normalized(self):
        from community_match.config.settings import Settings

        settings = Settings(_env_file=None, log_level="debug")  # type: ignore[call-arg]
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        from community_match.config.settings import Settings

        with pytest.raises(ValueError):
            Settings(_env_file=None, log_level="LOUD")  # type: ignore[call-arg]

    def test_active_window_must_be_positive(self):
        from community_match.config.settings import Settings

        with pytest.raises(ValueError):
            Settings(_env_file=None, active_window_days=0)  # type: ignore[call-arg]


class TestSettingsSingleton:
    def test_get_settings_returns_same_instance(self):
        from community_match.config.settings import get_settings, reset_settings

        first = get_settings()
        assert get_settings() is first

        reset_settings()
        assert get_settings() is not first

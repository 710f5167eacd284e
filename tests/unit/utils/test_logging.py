"""Tests for logging utility."""

import logging
from io import StringIO


class TestLoggerConfiguration:
    """Test that logger configures correctly from settings."""

    def test_configure_logging_creates_logger(self):
        """configure_logging should return a configured logger."""
        from community_match.utils.logging import configure_logging

        logger = configure_logging()
        assert isinstance(logger, logging.Logger)
        assert logger.name == "community_match"

    def test_configure_logging_respects_level(self):
        """Logger should respect the configured log level."""
        from community_match.utils.logging import configure_logging

        logger = configure_logging(level="DEBUG")
        assert logger.level == logging.DEBUG

        logger = configure_logging(level="WARNING")
        assert logger.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in logger.handlers)

    def test_configure_logging_default_level_is_info(self):
        """Default log level should be INFO."""
        from community_match.utils.logging import configure_logging

        logger = configure_logging()
        assert logger.level == logging.INFO

    def test_configure_logging_does_not_stack_handlers(self):
        from community_match.utils.logging import configure_logging

        configure_logging()
        logger = configure_logging()
        assert len(logger.handlers) == 1


class TestLogOutput:
    """Test that log output format is correct."""

    def test_module_loggers_inherit_app_handler(self):
        """Module loggers under the package tree should reach the app handler."""
        from community_match.utils.logging import configure_logging, get_logger

        logger = configure_logging(level="INFO")

        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(logger.handlers[0].formatter)
        logger.addHandler(handler)

        get_logger("matching.service").warning("Scoring degraded")

        output = buffer.getvalue()
        assert "WARNING" in output
        assert "community_match.matching.service" in output
        assert "Scoring degraded" in output

    def test_reset_logging_restores_propagation(self):
        from community_match.utils.logging import configure_logging, reset_logging

        logger = configure_logging()
        assert logger.propagate is False

        reset_logging()
        assert logger.propagate is True
        assert logger.handlers == []


class TestThirdPartyLoggers:
    """Request-level chatter from LiteLLM, httpx and aiosqlite."""

    def test_third_party_loggers_capped_at_warning(self):
        from community_match.utils.logging import THIRD_PARTY_LOGGERS, configure_logging

        configure_logging(level="INFO")

        for name in THIRD_PARTY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_debug_level_opens_third_party_loggers(self):
        from community_match.utils.logging import configure_logging

        configure_logging(level="INFO")
        configure_logging(level="DEBUG")

        assert logging.getLogger("LiteLLM").level == logging.DEBUG
        assert logging.getLogger("aiosqlite").level == logging.DEBUG

    def test_reset_logging_clears_third_party_levels(self):
        from community_match.utils.logging import configure_logging, reset_logging

        configure_logging(level="ERROR")
        reset_logging()

        assert logging.getLogger("httpx").level == logging.NOTSET

"""Configuration settings for the matching engine."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatchingConfig(BaseSettings):
    """Matching engine configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `MATCHING_` prefix or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATCHING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Scoring mode
    scoring_mode: Literal["deterministic", "assisted"] = Field(
        default="deterministic",
        description="'assisted' asks the reasoning service first, with fallback",
    )

    # Fan-out settings
    max_concurrency: Annotated[int, Field(ge=1, le=64)] = Field(
        default=8,
        description="Worker budget for concurrent candidate scoring",
    )
    assisted_timeout_seconds: Annotated[float, Field(gt=0.0)] = Field(
        default=5.0,
        description="Timeout for each reasoning-service call",
    )

    # Paging
    default_limit: Annotated[int, Field(ge=1)] = Field(
        default=20,
        description="Result page size when the caller does not pass a limit",
    )
    max_limit: Annotated[int, Field(ge=1)] = Field(
        default=100,
        description="Largest page size a caller may request",
    )

    # Reasoning service (LiteLLM)
    llm_provider: str = Field(
        default="openai",
        description="LLM provider: 'openai', 'anthropic', or any LiteLLM prefix",
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Model ID used for assisted scoring",
    )
    llm_api_key: str | None = Field(
        default=None,
        description="API key for the LLM provider",
    )
    llm_base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible endpoints",
    )
    llm_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.3,
        description="Sampling temperature",
    )
    llm_max_tokens: Annotated[int, Field(gt=0)] = Field(
        default=1000,
        description="Maximum tokens in the reasoning-service response",
    )
    llm_max_retries: Annotated[int, Field(ge=0)] = Field(
        default=0,
        description="Client-level retries handled inside LiteLLM",
    )

    @model_validator(mode="after")
    def validate_limits(self) -> MatchingConfig:
        """Ensure the default page size fits under the maximum."""
        if self.default_limit > self.max_limit:
            raise ValueError(
                f"default_limit ({self.default_limit}) must not exceed "
                f"max_limit ({self.max_limit})."
            )
        return self


# Singleton instance for easy import
_matching_config: MatchingConfig | None = None


def get_matching_config() -> MatchingConfig:
    """Get the matching configuration singleton."""
    global _matching_config
    if _matching_config is None:
        _matching_config = MatchingConfig()
    return _matching_config


def reset_matching_config() -> None:
    """Reset the matching configuration singleton (useful for testing)."""
    global _matching_config
    _matching_config = None

"""Reasoning-service client for assisted scoring.

Uses LiteLLM to ask a chat model for a structured compatibility rating.
"""

from __future__ import annotations

import logging
import os
import warnings
from typing import Any, Protocol

from pydantic import ValidationError

from community_match.errors import MatchingError
from community_match.matching.config import MatchingConfig, get_matching_config
from community_match.matching.models import AssistedRating
from community_match.matching.prompts import (
    MATCHING_SYSTEM_PROMPT,
    build_match_prompt,
)

logger = logging.getLogger(__name__)

warnings.filterwarnings(
    "ignore",
    message=r"(?s)^Pydantic serializer warnings:.*",
    category=UserWarning,
)

# LiteLLM loads `.env` into the process environment in DEV mode, which lets
# local config leak into tests. Default to PRODUCTION unless opted in.
os.environ.setdefault("LITELLM_MODE", "PRODUCTION")


class ReasoningServiceError(MatchingError):
    """Raised when the reasoning service fails or answers unusably."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class ReasoningClient(Protocol):
    """Anything that can rate a seeker/candidate pair."""

    async def rate(
        self, seeker_summary: dict[str, Any], candidate_summary: dict[str, Any]
    ) -> AssistedRating: ...


class LiteLLMReasoningClient:
    """Reasoning client backed by any LiteLLM-routable chat model."""

    def __init__(self, config: MatchingConfig | None = None) -> None:
        self.config = config or get_matching_config()

    def _get_model_name(self) -> str:
        """Return provider-qualified model name for LiteLLM routing."""
        if "/" in self.config.llm_model:
            return self.config.llm_model

        if self.config.llm_provider == "anthropic":
            return f"anthropic/{self.config.llm_model}"

        if self.config.llm_base_url:
            return f"openai/{self.config.llm_model}"

        if self.config.llm_provider == "openai":
            return self.config.llm_model

        return f"{self.config.llm_provider}/{self.config.llm_model}"

    async def rate(
        self, seeker_summary: dict[str, Any], candidate_summary: dict[str, Any]
    ) -> AssistedRating:
        """Ask the model to rate a pair and parse the structured answer."""
        from litellm.exceptions import Timeout

        messages = [
            {"role": "system", "content": MATCHING_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": build_match_prompt(seeker_summary, candidate_summary),
            },
        ]

        try:
            response = await self._call_completion(messages=messages)
        except Timeout as e:
            raise ReasoningServiceError(
                "Reasoning service timed out "
                f"(timeout={self.config.assisted_timeout_seconds}s).",
                e,
            ) from e
        except Exception as e:
            raise ReasoningServiceError(f"Reasoning service call failed: {e}", e) from e

        return self._parse_response(response)

    async def _call_completion(self, *, messages: list[dict[str, str]]):
        from litellm import acompletion

        kwargs: dict[str, Any] = {
            "model": self._get_model_name(),
            "messages": messages,
            "timeout": self.config.assisted_timeout_seconds,
            "temperature": self.config.llm_temperature,
            "max_tokens": self.config.llm_max_tokens,
            "num_retries": self.config.llm_max_retries,
        }

        if self.config.llm_api_key:
            kwargs["api_key"] = self.config.llm_api_key

        if self.config.llm_base_url:
            kwargs["base_url"] = self.config.llm_base_url

        return await acompletion(**kwargs)

    def _parse_response(self, response) -> AssistedRating:
        try:
            message = response.choices[0].message
        except (AttributeError, IndexError, TypeError) as e:
            raise ReasoningServiceError("Reasoning service returned no choices.", e) from e

        content = getattr(message, "content", None)

        if content is None:
            tool_calls = getattr(message, "tool_calls", None) or []
            if tool_calls:
                function = getattr(tool_calls[0], "function", None)
                arguments = getattr(function, "arguments", None)
                if isinstance(arguments, str) and arguments.strip():
                    content = arguments

        if content is None:
            raise ReasoningServiceError("Reasoning service returned no content to parse.")

        content = extract_json_object(str(content))

        try:
            return AssistedRating.model_validate_json(content)
        except ValidationError as e:
            raise ReasoningServiceError(
                f"Failed to parse reasoning response - validation error: {e}", e
            ) from e


def extract_json_object(content: str) -> str:
    """Strip code fences and return the first balanced JSON object in ``content``."""
    content = content.strip()

    if content.startswith("```"):
        first_newline = content.find("\n")
        if first_newline != -1:
            content = content[first_newline + 1 :]
        if content.endswith("```"):
            content = content[:-3]
        content = content.strip()

    if content.startswith("{"):
        return content

    start = content.find("{")
    if start == -1:
        return content

    depth = 0
    for idx in range(start, len(content)):
        ch = content[idx]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return content[start : idx + 1].strip()
    return content

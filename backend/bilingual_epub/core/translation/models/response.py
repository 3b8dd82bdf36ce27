"""Backend response models.

This module defines what a translation backend hands back for one request,
independent of the provider's wire format.
"""

import re
from typing import Any, Optional

import litellm
from pydantic import BaseModel, Field

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")

_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}

DEFAULT_RESET_SECONDS = 1.0


def parse_reset_duration(value: Optional[str]) -> Optional[float]:
    """Parse a rate-limit reset interval such as ``"20ms"``, ``"1.5s"`` or ``"6m0s"``.

    Returns:
        Seconds, or None if the value is missing or not a duration
    """
    if not value:
        return None
    value = value.strip()
    parts = _DURATION_PART.findall(value)
    if not parts or "".join(number + unit for number, unit in parts) != value:
        return None
    return sum(float(number) * _UNIT_SECONDS[unit] for number, unit in parts)


class TokenUsage(BaseModel):
    """Token consumption details."""

    prompt_tokens: int = Field(default=0, description="Tokens in the prompt")
    completion_tokens: int = Field(default=0, description="Tokens in the completion")
    total_tokens: int = Field(default=0, description="Total tokens used")

    def model_post_init(self, __context: Any) -> None:
        """Calculate total if not provided."""
        if not self.total_tokens and (self.prompt_tokens or self.completion_tokens):
            self.total_tokens = self.prompt_tokens + self.completion_tokens

    def estimate_cost_usd(self, model: str) -> Optional[float]:
        """Estimate cost in USD from LiteLLM's model price table.

        Args:
            model: LiteLLM model ID, with or without provider prefix

        Returns:
            Estimated cost in USD, or None if the model has no known pricing
        """
        cost_info = litellm.model_cost.get(model, {})
        if not cost_info and "/" in model:
            # Try without provider prefix
            cost_info = litellm.model_cost.get(model.split("/")[-1], {})
        if not cost_info:
            return None

        input_cost = self.prompt_tokens * (cost_info.get("input_cost_per_token") or 0)
        output_cost = self.completion_tokens * (cost_info.get("output_cost_per_token") or 0)
        return input_cost + output_cost


class RateLimitHint(BaseModel):
    """Throttling quotas reported by a provider alongside a response.

    Values are kept as the provider sent them; only the token reset
    interval is interpreted, for pacing.
    """

    limit_requests: Optional[str] = None
    limit_tokens: Optional[str] = None
    remaining_requests: Optional[str] = None
    remaining_tokens: Optional[str] = None
    reset_requests: Optional[str] = None
    reset_tokens: Optional[str] = None

    def reset_tokens_seconds(self) -> float:
        """Seconds until the token quota resets (1 second if unknown)."""
        seconds = parse_reset_duration(self.reset_tokens)
        return DEFAULT_RESET_SECONDS if seconds is None else seconds

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


class BackendReply(BaseModel):
    """Result of one backend request.

    ``translated_lines`` holds one string per output entry the backend
    produced; it is empty when the payload could not be parsed.
    """

    translated_lines: list[str] = Field(default_factory=list)
    raw_text: str = Field(default="", description="Reply content before parsing")
    usage: TokenUsage = Field(default_factory=TokenUsage)
    rate_limit: Optional[RateLimitHint] = None
    provider: str = ""
    model: str = ""
    latency_ms: int = 0

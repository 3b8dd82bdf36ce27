"""Chunk and outcome models used by the orchestrator."""

from typing import Optional

from pydantic import BaseModel, Field

from .response import RateLimitHint, TokenUsage


class Chunk(BaseModel):
    """A contiguous slice of blocks sent as one backend request."""

    sequence_number: int = Field(..., ge=1, description="1-based dispatch order")
    lines: list[str] = Field(default_factory=list)


class TranslationOutcome(BaseModel):
    """What came back for one chunk."""

    sequence_number: int
    original_lines: list[str]
    translated_lines: list[str]
    usage: TokenUsage = Field(default_factory=TokenUsage)
    rate_limit: Optional[RateLimitHint] = None
    provider: str = ""
    model: str = ""
    retry_depth: int = 0
    latency_ms: int = 0

    @property
    def is_count_consistent(self) -> bool:
        return len(self.translated_lines) == len(self.original_lines)


class UsageTotals(BaseModel):
    """Token usage accumulated over a run."""

    requests: int = 0
    mismatches: int = 0
    usage: TokenUsage = Field(default_factory=TokenUsage)
    model: str = Field(default="", description="Last model seen, with provider prefix")

    def add(self, outcome: TranslationOutcome) -> None:
        self.requests += 1
        if outcome.model:
            self.model = (
                f"{outcome.provider}/{outcome.model}" if outcome.provider else outcome.model
            )
        if not outcome.is_count_consistent:
            self.mismatches += 1
        self.usage = TokenUsage(
            prompt_tokens=self.usage.prompt_tokens + outcome.usage.prompt_tokens,
            completion_tokens=self.usage.completion_tokens + outcome.usage.completion_tokens,
            total_tokens=self.usage.total_tokens + outcome.usage.total_tokens,
        )

    def estimate_cost_usd(self) -> Optional[float]:
        """Estimated run cost, or None if the model has no known pricing."""
        if not self.model:
            return None
        return self.usage.estimate_cost_usd(self.model)

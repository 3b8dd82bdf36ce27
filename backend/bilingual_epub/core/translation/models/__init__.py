"""Translation data models.

This module provides the data models passed between backends, the
orchestrator and the document pipeline.
"""

from .response import BackendReply, RateLimitHint, TokenUsage, parse_reset_duration
from .result import Chunk, TranslationOutcome, UsageTotals

__all__ = [
    # Response models
    "BackendReply",
    "RateLimitHint",
    "TokenUsage",
    "parse_reset_duration",
    # Orchestration models
    "Chunk",
    "TranslationOutcome",
    "UsageTotals",
]

"""Chunked translation of block sequences."""

from .models import BackendReply, Chunk, RateLimitHint, TokenUsage, TranslationOutcome, UsageTotals
from .orchestrator import ChunkedTranslator, OutcomeObserver, log_outcome, partition

__all__ = [
    "BackendReply",
    "Chunk",
    "RateLimitHint",
    "TokenUsage",
    "TranslationOutcome",
    "UsageTotals",
    "ChunkedTranslator",
    "OutcomeObserver",
    "log_outcome",
    "partition",
]

"""Chunked translation orchestrator.

Splits a sequence of text blocks into chunks, translates the chunks
concurrently through a backend and puts the results back in input order.
A chunk whose reply has the wrong number of lines is translated again one
line per request, down to a fixed retry depth.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from bilingual_epub.config import settings
from bilingual_epub.exceptions import RetryExhaustedError
from bilingual_epub.utils.text import normalize_for_log

from .models import Chunk, TranslationOutcome

if TYPE_CHECKING:
    from bilingual_epub.core.llm.adapter import TranslationBackend

logger = logging.getLogger(__name__)

OutcomeObserver = Callable[[TranslationOutcome], None]


def log_outcome(outcome: TranslationOutcome) -> None:
    """Default observer: log token usage and rate-limit state of one outcome."""
    usage = outcome.usage
    logger.info(
        f"[Orchestrator] chunk {outcome.sequence_number} (depth {outcome.retry_depth}): "
        f"prompt tokens: {usage.prompt_tokens} completion tokens: {usage.completion_tokens} "
        f"total tokens: {usage.total_tokens} latency: {outcome.latency_ms}ms"
    )
    if outcome.rate_limit is not None:
        logger.debug(
            f"[Orchestrator] remaining requests: {outcome.rate_limit.remaining_requests} "
            f"remaining tokens: {outcome.rate_limit.remaining_tokens}"
        )


def partition(blocks: Sequence[str], chunk_size: int) -> list[Chunk]:
    """Split blocks into ordered chunks numbered from 1."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [
        Chunk(sequence_number=number, lines=list(blocks[start:start + chunk_size]))
        for number, start in enumerate(range(0, len(blocks), chunk_size), start=1)
    ]


class ChunkedTranslator:
    """Translates block sequences with bounded concurrency and retry-with-shrink.

    Args:
        backend: Backend used for every request
        chunk_size: Lines per request on the first attempt
        max_concurrency: Maximum requests in flight at once
        max_retry_depth: Deepest retry level; a mismatch there is fatal
        observers: Callbacks invoked with every outcome, in sequence order
    """

    def __init__(
        self,
        backend: "TranslationBackend",
        chunk_size: Optional[int] = None,
        max_concurrency: Optional[int] = None,
        max_retry_depth: Optional[int] = None,
        observers: Optional[Sequence[OutcomeObserver]] = None,
    ):
        self.backend = backend
        self.chunk_size = chunk_size or settings.chunk_lines
        self.max_concurrency = max_concurrency or settings.max_concurrent_requests
        self.max_retry_depth = (
            settings.max_retry_depth if max_retry_depth is None else max_retry_depth
        )
        self.observers = list(observers) if observers is not None else [log_outcome]

        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {self.max_concurrency}")

    async def translate(self, blocks: Sequence[str]) -> list[str]:
        """Translate blocks, returning one translation per block in input order.

        Raises:
            RetryExhaustedError: If a chunk keeps returning the wrong line count
            BackendTransportError: If a backend call fails
        """
        logger.debug(f"[Orchestrator] line_length: {len(blocks)}")
        if not blocks:
            return []
        return await self.translate_parallel(blocks, self.chunk_size, retry_depth=0)

    async def translate_parallel(
        self,
        blocks: Sequence[str],
        chunk_size: int,
        retry_depth: int,
    ) -> list[str]:
        """Translate one level of chunks, then repair mismatching chunks.

        Outcomes are collected in full before they are sorted by sequence
        number; a failed chunk is re-run at ``chunk_size=1`` one level
        deeper and its result spliced in at the same position.
        """
        if not blocks:
            return []

        chunks = partition(blocks, chunk_size)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(chunk: Chunk) -> TranslationOutcome:
            async with semaphore:
                return await self._translate_chunk(chunk, retry_depth)

        outcomes = await asyncio.gather(*(run(chunk) for chunk in chunks))
        outcomes = sorted(outcomes, key=lambda outcome: outcome.sequence_number)

        translated: list[str] = []
        for outcome in outcomes:
            self._notify(outcome)
            if outcome.is_count_consistent:
                translated.extend(outcome.translated_lines)
                continue

            self._log_mismatch(outcome, retry_depth)
            if retry_depth >= self.max_retry_depth:
                raise RetryExhaustedError(
                    retry_depth=retry_depth,
                    expected=len(outcome.original_lines),
                    received=len(outcome.translated_lines),
                )
            translated.extend(
                await self.translate_parallel(
                    outcome.original_lines, chunk_size=1, retry_depth=retry_depth + 1
                )
            )

        return translated

    async def _translate_chunk(self, chunk: Chunk, retry_depth: int) -> TranslationOutcome:
        reply = await self.backend.translate(chunk.lines)
        return TranslationOutcome(
            sequence_number=chunk.sequence_number,
            original_lines=chunk.lines,
            translated_lines=reply.translated_lines,
            usage=reply.usage,
            rate_limit=reply.rate_limit,
            provider=reply.provider,
            model=reply.model,
            retry_depth=retry_depth,
            latency_ms=reply.latency_ms,
        )

    def _notify(self, outcome: TranslationOutcome) -> None:
        for observer in self.observers:
            observer(outcome)

    def _log_mismatch(self, outcome: TranslationOutcome, retry_depth: int) -> None:
        for line in outcome.original_lines:
            logger.debug(f"[Orchestrator] original: {normalize_for_log(line)}")
        for line in outcome.translated_lines:
            logger.debug(f"[Orchestrator] translated: {normalize_for_log(line)}")
        logger.error(f"[Orchestrator] retry count: {retry_depth}")
        logger.error(
            f"[Orchestrator] translated line length error "
            f"{len(outcome.translated_lines)}/{len(outcome.original_lines)}"
        )

"""Tests for the chunked translation orchestrator."""

import logging
import random

import pytest

from bilingual_epub.core.translation.models import UsageTotals
from bilingual_epub.core.translation.orchestrator import ChunkedTranslator, log_outcome, partition
from bilingual_epub.exceptions import RetryExhaustedError
from stubs import AlwaysEmptyBackend, DropLastLineBackend, EchoBackend

BLOCKS = [f"b{i}" for i in range(10)]


def test_partition_numbers_chunks_from_one():
    chunks = partition(["a", "b", "c", "d", "e"], 2)

    assert [chunk.sequence_number for chunk in chunks] == [1, 2, 3]
    assert [chunk.lines for chunk in chunks] == [["a", "b"], ["c", "d"], ["e"]]


def test_partition_rejects_non_positive_size():
    with pytest.raises(ValueError):
        partition(["a"], 0)


@pytest.mark.asyncio
async def test_empty_input_makes_no_calls(echo_backend):
    translator = ChunkedTranslator(echo_backend, chunk_size=3, max_concurrency=2)

    assert await translator.translate([]) == []
    assert echo_backend.calls == []


@pytest.mark.asyncio
async def test_chunks_are_sent_in_order(echo_backend):
    translator = ChunkedTranslator(echo_backend, chunk_size=4, max_concurrency=1)

    result = await translator.translate(BLOCKS)

    assert result == [f"[TR]{block}" for block in BLOCKS]
    assert echo_backend.calls == [BLOCKS[0:4], BLOCKS[4:8], BLOCKS[8:10]]


@pytest.mark.asyncio
@pytest.mark.parametrize("concurrency", [1, 2, 3, 10])
async def test_order_is_kept_when_completions_arrive_reversed(concurrency):
    # Earlier chunks take longer, so completions come back last-first
    backend = EchoBackend(delay=lambda texts: 0.05 - 0.004 * int(texts[0][1:]))
    translator = ChunkedTranslator(backend, chunk_size=1, max_concurrency=concurrency)

    result = await translator.translate(BLOCKS)

    assert result == [f"[TR]{block}" for block in BLOCKS]


@pytest.mark.asyncio
@pytest.mark.parametrize("seed", [0, 1, 2])
async def test_order_is_kept_with_random_completion_order(seed):
    rng = random.Random(seed)
    delays = {block: rng.uniform(0, 0.02) for block in BLOCKS}
    backend = EchoBackend(delay=lambda texts: delays[texts[0]])
    translator = ChunkedTranslator(backend, chunk_size=2, max_concurrency=3)

    result = await translator.translate(BLOCKS)

    assert result == [f"[TR]{block}" for block in BLOCKS]


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    backend = EchoBackend(delay=lambda texts: 0.01)
    translator = ChunkedTranslator(backend, chunk_size=1, max_concurrency=3)

    await translator.translate(BLOCKS)

    assert backend.max_in_flight == 3
    assert len(backend.calls) == len(BLOCKS)


@pytest.mark.asyncio
async def test_mismatched_chunk_is_retried_line_by_line():
    blocks = ["b0", "b1", "b2", "b3", "b4", "b5"]
    backend = DropLastLineBackend(trigger="b2")
    translator = ChunkedTranslator(backend, chunk_size=2, max_concurrency=3)

    result = await translator.translate(blocks)

    assert result == [f"[TR]{block}" for block in blocks]
    assert len(backend.calls) == 5
    assert sorted(backend.calls[:3]) == [["b0", "b1"], ["b2", "b3"], ["b4", "b5"]]
    assert backend.calls[3:] == [["b2"], ["b3"]]


@pytest.mark.asyncio
async def test_retry_stops_after_five_attempts():
    backend = AlwaysEmptyBackend()
    translator = ChunkedTranslator(backend, chunk_size=5, max_concurrency=2, max_retry_depth=4)

    with pytest.raises(RetryExhaustedError) as exc_info:
        await translator.translate(["only line"])

    assert len(backend.calls) == 5
    assert exc_info.value.retry_depth == 4
    assert exc_info.value.expected == 1
    assert exc_info.value.received == 0


@pytest.mark.asyncio
async def test_retry_depth_zero_fails_on_first_mismatch():
    backend = AlwaysEmptyBackend()
    translator = ChunkedTranslator(backend, chunk_size=2, max_concurrency=1, max_retry_depth=0)

    with pytest.raises(RetryExhaustedError):
        await translator.translate(["a", "b"])

    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_observers_receive_every_outcome_in_order():
    backend = DropLastLineBackend(trigger="b2")
    totals = UsageTotals()
    seen = []

    def record(outcome):
        seen.append((outcome.retry_depth, outcome.sequence_number))
        totals.add(outcome)

    translator = ChunkedTranslator(
        backend, chunk_size=2, max_concurrency=2, observers=[record]
    )

    await translator.translate(["b0", "b1", "b2", "b3"])

    assert seen == [(0, 1), (0, 2), (1, 1), (1, 2)]
    assert totals.requests == 4
    assert totals.mismatches == 1
    assert totals.usage.prompt_tokens == 10 * 6
    assert totals.usage.total_tokens == 15 * 6


def test_invalid_concurrency_is_rejected(echo_backend):
    with pytest.raises(ValueError):
        ChunkedTranslator(echo_backend, chunk_size=1, max_concurrency=-1)


@pytest.mark.asyncio
async def test_outcome_carries_backend_latency(caplog):
    backend = EchoBackend(latency_ms=42)
    seen = []
    translator = ChunkedTranslator(
        backend, chunk_size=2, max_concurrency=1, observers=[seen.append, log_outcome]
    )

    with caplog.at_level(logging.INFO, logger="bilingual_epub.core.translation.orchestrator"):
        await translator.translate(["a", "b", "c"])

    assert [outcome.latency_ms for outcome in seen] == [42, 42]
    assert "latency: 42ms" in caplog.text

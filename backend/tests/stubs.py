"""In-process translation backends used by the tests."""

import asyncio
from typing import Callable, Optional, Sequence

from bilingual_epub.core.translation.models import BackendReply, TokenUsage


class EchoBackend:
    """Returns ``prefix + text`` for every line, recording each call."""

    def __init__(
        self,
        prefix: str = "[TR]",
        delay: Optional[Callable[[Sequence[str]], float]] = None,
        latency_ms: int = 0,
    ):
        self.prefix = prefix
        self.delay = delay
        self.latency_ms = latency_ms
        self.calls: list[list[str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def lines_for(self, texts: Sequence[str]) -> list[str]:
        return [f"{self.prefix}{text}" for text in texts]

    async def translate(self, texts: Sequence[str]) -> BackendReply:
        self.calls.append(list(texts))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay is not None:
                await asyncio.sleep(self.delay(texts))
            else:
                await asyncio.sleep(0)
            return BackendReply(
                translated_lines=self.lines_for(texts),
                usage=TokenUsage(prompt_tokens=10 * len(texts), completion_tokens=5 * len(texts)),
                provider="stub",
                model="echo",
                latency_ms=self.latency_ms,
            )
        finally:
            self.in_flight -= 1


class DropLastLineBackend(EchoBackend):
    """Drops the last line of multi-line requests that contain ``trigger``."""

    def __init__(self, trigger: str, **kwargs):
        super().__init__(**kwargs)
        self.trigger = trigger

    def lines_for(self, texts: Sequence[str]) -> list[str]:
        lines = super().lines_for(texts)
        if self.trigger in texts and len(texts) > 1:
            return lines[:-1]
        return lines


class AlwaysEmptyBackend(EchoBackend):
    """Simulates a backend whose payload never parses."""

    def lines_for(self, texts: Sequence[str]) -> list[str]:
        return []

"""Abstract translation backend interface."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

import litellm
from litellm import acompletion
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bilingual_epub.config import settings
from bilingual_epub.exceptions import BackendTransportError
from bilingual_epub.core.translation.models import BackendReply, RateLimitHint, TokenUsage
from bilingual_epub.utils.text import normalize_for_log

from .prompts import build_instruction, wrap_paragraph

logger = logging.getLogger(__name__)


class TranslationBackend(ABC):
    """Abstract base class for LLM translation backends.

    A backend turns a batch of lines into a ``BackendReply`` holding one
    translated string per JSON entry the model produced. It never checks
    the count against the input; that is the orchestrator's job.
    """

    def __init__(
        self,
        model: str,
        api_key: str,
        language: str,
        base_url: Optional[str] = None,
        cooldown: float = 0.0,
        rate_limit_max_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.model = model
        self.api_key = api_key
        self.language = language
        self.base_url = base_url
        self.cooldown = cooldown
        self.rate_limit_max_attempts = rate_limit_max_attempts or settings.rate_limit_max_attempts
        self.timeout = timeout or settings.request_timeout
        self._retry_wait = wait_exponential(multiplier=2, min=4, max=60)

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @property
    @abstractmethod
    def litellm_model(self) -> str:
        """Model name with the LiteLLM routing prefix."""
        pass

    @property
    @abstractmethod
    def instruction_template(self) -> str:
        """System instruction template for this provider."""
        pass

    @abstractmethod
    def parse_payload(self, content: str) -> Optional[list[str]]:
        """Parse reply content into translated lines.

        Returns:
            One string per output entry, or None if the payload is malformed
        """
        pass

    def extract_rate_limit(self, response: Any) -> Optional[RateLimitHint]:
        """Read throttling hints from a response. Providers without any return None."""
        return None

    async def translate(self, texts: Sequence[str]) -> BackendReply:
        """Translate a batch of lines.

        Args:
            texts: Lines to translate, one paragraph each

        Returns:
            BackendReply; ``translated_lines`` is empty when the reply had no
            candidates or could not be parsed

        Raises:
            BackendTransportError: If the HTTP call fails
        """
        start_time = time.time()
        response = await self._complete(self.build_messages(texts))
        latency_ms = int((time.time() - start_time) * 1000)

        content = self._first_choice_content(response)
        lines = self.parse_payload(content) if content else None
        if lines is None:
            if content:
                logger.error(
                    f"[{self.display_name}] JSON parse error: {normalize_for_log(content, 500)}"
                )
            lines = []

        rate_limit = self.extract_rate_limit(response)
        reply = BackendReply(
            translated_lines=lines,
            raw_text=content,
            usage=self._usage(response),
            rate_limit=rate_limit,
            provider=self.provider_name,
            model=self.model,
            latency_ms=latency_ms,
        )

        await self._pace(rate_limit)
        return reply

    @property
    def display_name(self) -> str:
        return self.provider_name.capitalize()

    def build_messages(self, texts: Sequence[str]) -> list[dict[str, Any]]:
        """Build chat messages: the instruction, then one text part per line."""
        instruction = build_instruction(self.instruction_template, self.language, len(texts))
        return [
            {"role": "system", "content": instruction},
            {
                "role": "user",
                "content": [{"type": "text", "text": wrap_paragraph(text)} for text in texts],
            },
        ]

    async def _complete(self, messages: list[dict[str, Any]]) -> Any:
        """Call LiteLLM, retrying HTTP 429 responses with exponential backoff."""
        kwargs = {
            "model": self.litellm_model,
            "messages": messages,
            "response_format": {"type": "json_object"},
            "api_key": self.api_key,
            "timeout": self.timeout,
        }
        if self.base_url:
            kwargs["api_base"] = self.base_url

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.rate_limit_max_attempts),
                wait=self._retry_wait,
                retry=retry_if_exception_type(litellm.RateLimitError),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            f"[{self.display_name}] Rate limited, attempt "
                            f"{attempt.retry_state.attempt_number}/{self.rate_limit_max_attempts}"
                        )
                    return await acompletion(**kwargs)
        except Exception as e:
            raise BackendTransportError(self.provider_name, str(e)) from e

    def _first_choice_content(self, response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            logger.info(f"[{self.display_name}] Response has no candidates (model={self.model})")
            logger.debug(f"[{self.display_name}] Empty response: {response!r}")
            return ""
        return (choices[0].message.content or "").strip()

    def _usage(self, response: Any) -> TokenUsage:
        usage = getattr(response, "usage", None)
        if usage is None:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            total_tokens=getattr(usage, "total_tokens", 0) or 0,
        )

    def pacing_delay(self, rate_limit: Optional[RateLimitHint]) -> float:
        """Seconds to wait after a call: the provider's reset interval if known, else the cooldown."""
        if rate_limit is not None:
            return rate_limit.reset_tokens_seconds()
        return self.cooldown

    async def _pace(self, rate_limit: Optional[RateLimitHint]) -> None:
        delay = self.pacing_delay(rate_limit)
        if delay > 0:
            logger.debug(f"[{self.display_name}] sleep: {delay:.3f}sec")
            await asyncio.sleep(delay)

"""OpenAI translation backend - Uses LiteLLM for the chat-completions call."""

import json
import logging
from typing import Any, Optional

from bilingual_epub.config import settings
from bilingual_epub.core.llm.adapter import TranslationBackend
from bilingual_epub.core.llm.prompts import OPENAI_INSTRUCTION_TEMPLATE
from bilingual_epub.core.translation.models import RateLimitHint
from bilingual_epub.utils.text import strip_code_fence

logger = logging.getLogger(__name__)

RATE_LIMIT_HEADERS = {
    "limit_requests": "x-ratelimit-limit-requests",
    "limit_tokens": "x-ratelimit-limit-tokens",
    "remaining_requests": "x-ratelimit-remaining-requests",
    "remaining_tokens": "x-ratelimit-remaining-tokens",
    "reset_requests": "x-ratelimit-reset-requests",
    "reset_tokens": "x-ratelimit-reset-tokens",
}


class OpenAIBackend(TranslationBackend):
    """OpenAI GPT backend.

    Expects ``{"results": [{"line": n, "translated": [...]}, ...]}`` and
    paces itself with the ``x-ratelimit-reset-tokens`` header.
    """

    def __init__(self, model: str, api_key: str, language: str, **kwargs):
        kwargs.setdefault("cooldown", settings.openai_fallback_cooldown)
        kwargs.setdefault("base_url", settings.openai_base_url)
        super().__init__(model, api_key, language, **kwargs)
        # Ensure openai/ prefix for proper LiteLLM routing
        if not model.startswith("openai/"):
            self._litellm_model = f"openai/{model}"
        else:
            self._litellm_model = model

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def display_name(self) -> str:
        return "OpenAI"

    @property
    def litellm_model(self) -> str:
        return self._litellm_model

    @property
    def instruction_template(self) -> str:
        return OPENAI_INSTRUCTION_TEMPLATE

    def parse_payload(self, content: str) -> Optional[list[str]]:
        try:
            payload = json.loads(strip_code_fence(content))
        except json.JSONDecodeError:
            return None

        if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
            return None

        lines = []
        for result in payload["results"]:
            if not isinstance(result, dict):
                return None
            translated = result.get("translated")
            if isinstance(translated, str):
                translated = [translated]
            if not isinstance(translated, list) or not all(isinstance(t, str) for t in translated):
                return None
            lines.append("\n".join(translated))
        return lines

    def extract_rate_limit(self, response: Any) -> Optional[RateLimitHint]:
        hidden_params = getattr(response, "_hidden_params", None) or {}
        headers = hidden_params.get("additional_headers") or {}
        if not headers:
            return None

        values = {}
        for field_name, header in RATE_LIMIT_HEADERS.items():
            # LiteLLM also exposes raw provider headers with an llm_provider- prefix
            value = headers.get(header) or headers.get(f"llm_provider-{header}")
            if value is not None:
                values[field_name] = str(value)

        hint = RateLimitHint(**values)
        if hint.is_empty():
            return None

        logger.debug(f"[OpenAI] ratelimit limit requests: {hint.limit_requests}")
        logger.debug(f"[OpenAI] ratelimit limit tokens: {hint.limit_tokens}")
        logger.debug(f"[OpenAI] ratelimit remaining requests: {hint.remaining_requests}")
        logger.debug(f"[OpenAI] ratelimit remaining tokens: {hint.remaining_tokens}")
        logger.debug(f"[OpenAI] ratelimit reset requests: {hint.reset_requests}")
        logger.debug(f"[OpenAI] ratelimit reset tokens: {hint.reset_tokens}")
        return hint

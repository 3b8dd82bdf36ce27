"""Gemini translation backend - Uses LiteLLM for the generateContent call."""

import json
import logging
from typing import Optional

from bilingual_epub.config import settings
from bilingual_epub.core.llm.adapter import TranslationBackend
from bilingual_epub.core.llm.prompts import GEMINI_INSTRUCTION_TEMPLATE
from bilingual_epub.utils.text import strip_code_fence

logger = logging.getLogger(__name__)


class GeminiBackend(TranslationBackend):
    """Google Gemini backend.

    Expects ``[{"line": n, "text": [...]}, ...]``. Gemini sends no
    rate-limit headers, so every call is followed by a fixed cooldown.
    """

    def __init__(self, model: str, api_key: str, language: str, **kwargs):
        kwargs.setdefault("cooldown", settings.gemini_cooldown)
        kwargs.setdefault("base_url", settings.gemini_base_url)
        super().__init__(model, api_key, language, **kwargs)
        if not model.startswith("gemini/"):
            self._litellm_model = f"gemini/{model}"
        else:
            self._litellm_model = model

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def litellm_model(self) -> str:
        return self._litellm_model

    @property
    def instruction_template(self) -> str:
        return GEMINI_INSTRUCTION_TEMPLATE

    def parse_payload(self, content: str) -> Optional[list[str]]:
        try:
            payload = json.loads(strip_code_fence(content))
        except json.JSONDecodeError:
            return None

        if not isinstance(payload, list):
            return None

        lines = []
        for paragraph in payload:
            if not isinstance(paragraph, dict):
                return None
            text = paragraph.get("text")
            if isinstance(text, str):
                text = [text]
            if not isinstance(text, list) or not all(isinstance(t, str) for t in text):
                return None
            lines.append("\n".join(text))
        return lines

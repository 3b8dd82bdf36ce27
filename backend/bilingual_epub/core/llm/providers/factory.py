"""Translation backend factory."""

from enum import Enum
from typing import Optional, Type

from bilingual_epub.config import Settings, settings as default_settings
from bilingual_epub.core.llm.adapter import TranslationBackend
from bilingual_epub.core.llm.providers.gemini import GeminiBackend
from bilingual_epub.core.llm.providers.openai import OpenAIBackend
from bilingual_epub.exceptions import ConfigurationError


class BackendKind(str, Enum):
    """Supported translation backends."""

    OPENAI = "openai"
    GEMINI = "gemini"


class BackendFactory:
    """Factory for creating translation backends."""

    _backends: dict[BackendKind, Type[TranslationBackend]] = {
        BackendKind.OPENAI: OpenAIBackend,
        BackendKind.GEMINI: GeminiBackend,
    }

    @classmethod
    def create(
        cls,
        kind: BackendKind | str,
        language: str,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        settings: Optional[Settings] = None,
        **kwargs,
    ) -> TranslationBackend:
        """Create a backend, filling model, key, endpoint and cooldown from settings.

        Raises:
            ConfigurationError: If the kind is unknown or no API key is available
        """
        settings = settings or default_settings
        try:
            kind = BackendKind(kind)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown backend: {kind}. Available: {cls.available_backends()}"
            ) from e

        if kind == BackendKind.OPENAI:
            model = model or settings.openai_model
            api_key = api_key or settings.openai_api_key
            kwargs.setdefault("base_url", settings.openai_base_url)
            kwargs.setdefault("cooldown", settings.openai_fallback_cooldown)
        else:
            model = model or settings.gemini_model
            api_key = api_key or settings.gemini_api_key
            kwargs.setdefault("base_url", settings.gemini_base_url)
            kwargs.setdefault("cooldown", settings.gemini_cooldown)

        if not api_key:
            raise ConfigurationError(
                f"API key must be provided for {kind.value} "
                f"(--api-key or {kind.value.upper()}_API_KEY)"
            )

        kwargs.setdefault("rate_limit_max_attempts", settings.rate_limit_max_attempts)
        kwargs.setdefault("timeout", settings.request_timeout)
        return cls._backends[kind](model=model, api_key=api_key, language=language, **kwargs)

    @classmethod
    def available_backends(cls) -> list[str]:
        """List available backend names."""
        return [kind.value for kind in cls._backends]

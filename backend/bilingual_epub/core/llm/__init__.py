"""LLM integration package.

This package provides:
- The translation backend contract (TranslationBackend)
- OpenAI and Gemini backends routed through LiteLLM
- BackendFactory for picking one at configuration time
"""

from .adapter import TranslationBackend
from .providers import BackendFactory, BackendKind, GeminiBackend, OpenAIBackend

__all__ = [
    "TranslationBackend",
    "BackendFactory",
    "BackendKind",
    "GeminiBackend",
    "OpenAIBackend",
]

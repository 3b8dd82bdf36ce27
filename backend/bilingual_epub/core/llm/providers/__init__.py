"""Translation backend implementations."""

from .factory import BackendFactory, BackendKind
from .gemini import GeminiBackend
from .openai import OpenAIBackend

__all__ = ["BackendFactory", "BackendKind", "GeminiBackend", "OpenAIBackend"]

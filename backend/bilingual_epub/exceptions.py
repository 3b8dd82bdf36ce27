"""Exceptions raised by the translator.

Recoverable backend-content problems (unparseable JSON, wrong line counts)
never surface as exceptions; they are repaired by the orchestrator. Every
exception defined here aborts the run.
"""


class TranslatorError(Exception):
    """Base exception for the translator package."""

    pass


class ConfigurationError(TranslatorError):
    """Configuration error (unknown backend, missing API key, etc.)."""

    pass


class ArchiveError(TranslatorError):
    """The input archive cannot be opened or read."""

    pass


class MarkupError(TranslatorError):
    """A markup entry cannot be parsed."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot parse markup entry {name!r}: {reason}")


class BackendTransportError(TranslatorError):
    """The HTTP call to a translation backend failed."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} request failed: {reason}")


class RetryExhaustedError(TranslatorError):
    """A chunk still has the wrong number of lines at the deepest retry level."""

    def __init__(self, retry_depth: int, expected: int, received: int):
        self.retry_depth = retry_depth
        self.expected = expected
        self.received = received
        super().__init__(
            f"Translation retries exhausted at depth {retry_depth}: "
            f"expected {expected} lines, received {received}"
        )


class ReinsertionError(TranslatorError):
    """Translated lines do not match the blocks extracted from an entry."""

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Reinsertion mismatch: entry has {expected} translatable blocks, "
            f"received {received} translated lines"
        )

"""Text utilities for log output and LLM reply cleanup."""

import re
from typing import Optional

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_BREAK_CHARS = {" ", "\n", "\t", ",", ".", "!", "?", ";", ":", "-", "。", "，", "、"}


def safe_truncate(text: str, max_chars: int, suffix: str = "...") -> str:
    """Truncate text for display, preferring a word boundary.

    Looks back up to 20 characters for a space or punctuation mark so
    that log lines do not end in the middle of a word.

    Args:
        text: Text to truncate
        max_chars: Maximum characters (excluding suffix)
        suffix: Suffix to append if truncated (default "...")

    Returns:
        Truncated text with suffix if needed
    """
    if not text or len(text) <= max_chars:
        return text

    truncated = text[:max_chars]
    for i in range(min(20, max_chars - 1), 0, -1):
        if truncated[-i] in _BREAK_CHARS:
            truncated = truncated[: -(i - 1) or None].rstrip()
            break

    return truncated + suffix


def normalize_for_log(text: str, max_length: Optional[int] = 200) -> str:
    """Collapse a text fragment onto one line for logging.

    Args:
        text: Text to normalize
        max_length: Optional maximum length

    Returns:
        Normalized text
    """
    if not text:
        return ""

    text = _CONTROL_CHARS.sub("", text)
    text = re.sub(r"\s+", " ", text).strip()

    if max_length:
        text = safe_truncate(text, max_length)

    return text


def strip_code_fence(content: str) -> str:
    """Remove a Markdown code fence wrapped around an LLM reply.

    Models asked for JSON sometimes answer with ```json ... ```; the
    payload inside is returned unchanged.
    """
    content = content.strip()
    if content.startswith("```"):
        lines = content.split("\n")
        if len(lines) >= 3 and lines[-1].strip() == "```":
            content = "\n".join(lines[1:-1])
    return content.strip()

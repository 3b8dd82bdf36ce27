"""Extraction of translatable text blocks from markup entries."""

import logging
import string
import unicodedata
from typing import Optional

from lxml import etree

from .markup import EventKind, MarkupEvent, iter_events, parse_markup

logger = logging.getLogger(__name__)

_IGNORABLE_CHARS = frozenset(string.punctuation + string.digits + "–")


def is_ignorable(text: str) -> bool:
    """Check whether a block carries nothing worth translating.

    A block made only of whitespace, control characters, symbols, digits,
    punctuation or en-dashes is skipped. Empty blocks are ignorable too.
    """
    return all(_is_ignorable_char(char) for char in text)


def _is_ignorable_char(char: str) -> bool:
    if char.isspace() or char in _IGNORABLE_CHARS:
        return True
    category = unicodedata.category(char)
    return category in ("Cc", "So") or category.startswith("P")


def normalize_block(text: str) -> str:
    """Collapse whitespace runs inside a block to single spaces."""
    return " ".join(text.split())


class TranslationSpanTracker:
    """State machine deciding where translation units start and end.

    The first translatable container opened outside a span starts a new
    span. Nested containers with the same tag name only deepen it, so an
    ``li`` holding another ``li`` is one unit bounded by the outer element.
    Containers with a different name inside a span are plain structure.
    """

    def __init__(self):
        self.is_translating = False
        self.active_tag: Optional[str] = None
        self.depth = 0
        self._buffer: list[str] = []

    def feed(self, event: MarkupEvent) -> Optional[str]:
        """Advance on one event.

        Returns:
            The normalized text of a span when ``event`` closes it,
            otherwise None
        """
        if event.kind == EventKind.OPEN and event.is_translatable_container:
            if not self.is_translating:
                self.is_translating = True
                self.active_tag = event.tag
                self.depth = 0
                self._buffer = []
            if event.tag == self.active_tag:
                self.depth += 1
        elif event.kind == EventKind.CLOSE and event.is_translatable_container:
            if self.is_translating and event.tag == self.active_tag:
                self.depth -= 1
                if self.depth == 0:
                    self.is_translating = False
                    return normalize_block("".join(self._buffer))
        elif event.kind == EventKind.TEXT and self.is_translating:
            self._buffer.append(event.text)
        return None


def extract_from_tree(root: etree._Element) -> list[str]:
    """Extract translatable blocks from a parsed tree, in document order."""
    tracker = TranslationSpanTracker()
    blocks = []
    for event in iter_events(root):
        block = tracker.feed(event)
        if block is not None and not is_ignorable(block):
            blocks.append(block)
    return blocks


def extract_blocks(content: bytes, name: str = "<entry>") -> list[str]:
    """Extract translatable text blocks from markup entry bytes.

    Args:
        content: Raw entry bytes
        name: Entry name, used in log and error messages

    Returns:
        One string per paragraph, heading or list item, ruby glosses removed
    """
    document = parse_markup(content, name)
    blocks = extract_from_tree(document.root)
    logger.debug(f"[Extractor] {name}: {len(blocks)} blocks")
    return blocks

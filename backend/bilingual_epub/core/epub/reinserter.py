"""Reinsertion of translated text into the original markup.

Each translation is added inside the element it was extracted from, right
before the element's closing tag, as ``<<translation>>``. The source text
stays in place so both can be reviewed side by side.
"""

import logging
from typing import Sequence

from lxml import etree

from bilingual_epub.exceptions import ReinsertionError

from .extractor import TranslationSpanTracker, is_ignorable
from .markup import iter_events, parse_markup, serialize_markup, strip_annotations

logger = logging.getLogger(__name__)

MARKER_OPEN = "<<"
MARKER_CLOSE = ">>"


def format_marker(translated: str) -> str:
    """Frame a translated string with the review markers."""
    return f"{MARKER_OPEN}{translated}{MARKER_CLOSE}"


def append_before_close(element: etree._Element, text: str) -> None:
    """Append text as the last content of an element.

    If the element has children the text goes into the last child's tail,
    otherwise into the element's own text.
    """
    if len(element):
        last = element[-1]
        last.tail = (last.tail or "") + text
    else:
        element.text = (element.text or "") + text


def reinsert_into_tree(root: etree._Element, translated: Sequence[str]) -> int:
    """Insert translations into a tree in place.

    Replays the extraction state machine so that the n-th accepted block
    receives the n-th translated string; ignorable blocks consume nothing.

    Returns:
        Number of translations inserted

    Raises:
        ReinsertionError: If the tree has a different number of
            translatable blocks than there are translations
    """
    tracker = TranslationSpanTracker()
    index = 0
    for event in iter_events(root):
        block = tracker.feed(event)
        if block is None or is_ignorable(block):
            continue
        if index >= len(translated):
            raise ReinsertionError(expected=index + 1, received=len(translated))
        append_before_close(event.element, format_marker(translated[index]))
        index += 1

    if index != len(translated):
        raise ReinsertionError(expected=index, received=len(translated))
    return index


def reinsert_translations(
    content: bytes,
    translated: Sequence[str],
    name: str = "<entry>",
) -> bytes:
    """Produce translated entry bytes.

    Ruby glosses are removed from the output, everything else outside the
    inserted markers is serialized back unchanged.

    Args:
        content: Original entry bytes
        translated: Translations in extraction order
        name: Entry name, used in log and error messages

    Returns:
        Serialized markup with translations inserted
    """
    document = parse_markup(content, name)
    strip_annotations(document.root)
    inserted = reinsert_into_tree(document.root, translated)
    logger.debug(f"[Reinserter] {name}: inserted {inserted} translations")
    return serialize_markup(document)

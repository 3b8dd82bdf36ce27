"""Markup walker for ePub content documents.

Parses XHTML/HTML entries with lxml and replays them as a flat stream of
open / close / text events. Two tag families get special treatment:

- translatable containers (``p``, ``h1``-``h6``, ``li``) whose text forms
  one translation unit, and
- ruby annotations (``ruby`` and its ``rt`` pronunciation child), which are
  dropped from the stream: ``ruby`` is unwrapped and ``rt`` is skipped
  together with its text.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from html import escape
from typing import Iterator, Optional

from lxml import etree, html

from bilingual_epub.exceptions import MarkupError

logger = logging.getLogger(__name__)

# Tags containing one translation unit each
TRANSLATABLE_TAGS = frozenset({"p", "h1", "h2", "h3", "h4", "h5", "h6", "li"})

# Ruby annotations (CJK pronunciation glosses)
RUBY_TAG = "ruby"
RUBY_TEXT_TAG = "rt"
ANNOTATION_TAGS = frozenset({RUBY_TAG, RUBY_TEXT_TAG})

# Entry suffixes routed through translation
MARKUP_SUFFIXES = (".xhtml", ".xml", ".html", ".htm")

# Entries always read with the HTML parser
HTML_SUFFIXES = (".html", ".htm")

# Synthetic parent holding the top-level nodes of a fragment entry
FRAGMENT_PARENT = "div"

_XML_DECLARATION = re.compile(rb"^\s*<\?xml[^>]*\?>")
_DECLARED_ENCODING = re.compile(rb"""^\s*<\?xml[^>]*encoding=["']([A-Za-z0-9._-]+)["']""")
_META_CHARSET = re.compile(rb"""<meta[^>]+charset=["']?([A-Za-z0-9._-]+)""", re.IGNORECASE)
_HTML_ROOT = re.compile(rb"<html[\s>]", re.IGNORECASE)


class EventKind(str, Enum):
    """Kinds of events produced by the walker."""

    OPEN = "open"
    CLOSE = "close"
    TEXT = "text"
    EOF = "eof"


@dataclass(frozen=True)
class MarkupEvent:
    """One event of the walker stream.

    ``element`` is set for OPEN and CLOSE events so that a consumer can
    attach text to the element being closed.
    """

    kind: EventKind
    tag: str = ""
    text: str = ""
    element: Optional[etree._Element] = field(default=None, compare=False, repr=False)

    @property
    def is_translatable_container(self) -> bool:
        return self.tag in TRANSLATABLE_TAGS


@dataclass
class MarkupDocument:
    """Parsed markup entry plus what is needed to serialize it back.

    A ``fragment`` document has no ``<html>`` root in its source; its
    top-level nodes are held under a synthetic ``div`` parent that is left
    out again on serialization.
    """

    root: etree._Element
    method: str = "xml"  # serialization method, "xml" or "html"
    encoding: str = "utf-8"
    xml_declaration: bool = False
    fragment: bool = False


def is_markup_entry(name: str) -> bool:
    """Return True if an archive entry must go through translation."""
    return name.endswith(MARKUP_SUFFIXES)


def local_name(element: etree._Element) -> Optional[str]:
    """Namespace-free tag name, or None for comments and processing instructions."""
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element.tag).localname.lower()


def parse_markup(content: bytes, name: str = "<entry>") -> MarkupDocument:
    """Parse entry bytes into a walkable tree.

    ``.html``/``.htm`` entries go straight to the HTML parser. Everything
    else is parsed as XML first; if libxml2 had to recover from errors, or
    left undefined entities such as ``&nbsp;`` unresolved, the entry is
    parsed again as HTML and serialized back as XML.

    Args:
        content: Raw entry bytes
        name: Entry name, used to pick the parser and in error messages

    Returns:
        MarkupDocument ready to walk

    Raises:
        MarkupError: If neither parser produces a document
    """
    if name.endswith(HTML_SUFFIXES):
        return _parse_html(content, name, method="html")

    parser = etree.XMLParser(
        recover=True,
        remove_blank_text=False,
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
    )
    try:
        root = etree.fromstring(content, parser)
    except etree.XMLSyntaxError:
        root = None

    if root is not None and not _needs_html_parser(parser, root):
        docinfo = root.getroottree().docinfo
        return MarkupDocument(
            root=root,
            method="xml",
            encoding=docinfo.encoding or "utf-8",
            xml_declaration=bool(_XML_DECLARATION.match(content)),
        )

    # A recovered XML tree may be truncated after the first error
    logger.debug(f"[Markup] {name}: not well-formed XML, parsing as HTML")
    return _parse_html(content, name, method="xml")


def _needs_html_parser(parser: etree.XMLParser, root: etree._Element) -> bool:
    if len(parser.error_log):
        return True
    return next(root.iter(etree.Entity), None) is not None


def _declared_encoding(content: bytes) -> str:
    match = _DECLARED_ENCODING.match(content) or _META_CHARSET.search(content[:2048])
    if match:
        return match.group(1).decode("ascii").lower()
    return "utf-8"


def _parse_html(content: bytes, name: str, method: str) -> MarkupDocument:
    encoding = _declared_encoding(content)
    xml_declaration = method == "xml" and bool(_XML_DECLARATION.match(content))
    body = _XML_DECLARATION.sub(b"", content, count=1)
    fragment = _HTML_ROOT.search(body) is None

    try:
        parser = html.HTMLParser(
            encoding=encoding,
            remove_blank_text=False,
            no_network=True,
            default_doctype=False,
            huge_tree=True,
        )
        if fragment:
            root = html.fragment_fromstring(body, create_parent=FRAGMENT_PARENT, parser=parser)
        else:
            root = html.document_fromstring(body, parser=parser)
    except (etree.ParserError, etree.XMLSyntaxError, LookupError, ValueError) as e:
        raise MarkupError(name, str(e)) from e

    return MarkupDocument(
        root=root,
        method=method,
        encoding=encoding,
        xml_declaration=xml_declaration,
        fragment=fragment,
    )


def serialize_markup(document: MarkupDocument) -> bytes:
    """Serialize a document back to bytes, keeping DOCTYPE and declaration."""
    if document.fragment:
        return _serialize_fragment(document)

    tree = document.root.getroottree()
    if document.method == "html":
        return etree.tostring(tree, method="html", encoding=document.encoding)
    return etree.tostring(
        tree,
        encoding=document.encoding,
        xml_declaration=document.xml_declaration,
    )


def _serialize_fragment(document: MarkupDocument) -> bytes:
    parent = document.root
    parts = []
    if document.xml_declaration:
        parts.append(f"<?xml version='1.0' encoding='{document.encoding}'?>\n")
    parts.append(escape(parent.text or "", quote=False))
    for child in parent:
        parts.append(
            etree.tostring(child, method=document.method, encoding="unicode", with_tail=True)
        )
    return "".join(parts).encode(document.encoding)


def strip_annotations(root: etree._Element) -> None:
    """Remove ruby glosses from a tree in place.

    ``rt`` elements are removed with their content while the text that
    follows them is kept; ``ruby`` wrappers are unwrapped so the base text
    stays where it was.
    """
    etree.strip_elements(root, "{*}" + RUBY_TEXT_TAG, RUBY_TEXT_TAG, with_tail=False)
    etree.strip_tags(root, "{*}" + RUBY_TAG, RUBY_TAG)


def iter_events(root: etree._Element) -> Iterator[MarkupEvent]:
    """Walk a tree in document order, yielding typed events.

    The stream is lazy and single-pass. Annotation tags produce no
    OPEN/CLOSE events, and text inside ``rt`` is not yielded.
    """
    yield from _walk(root, in_gloss=False)
    yield MarkupEvent(EventKind.EOF)


def _walk(element: etree._Element, in_gloss: bool) -> Iterator[MarkupEvent]:
    tag = local_name(element)
    if tag is None:
        # Comment or processing instruction; its tail is handled by the parent
        return

    structural = tag not in ANNOTATION_TAGS
    if tag == RUBY_TEXT_TAG:
        in_gloss = True

    if structural:
        yield MarkupEvent(EventKind.OPEN, tag=tag, element=element)

    if element.text and not in_gloss:
        yield MarkupEvent(EventKind.TEXT, text=element.text)

    for child in element:
        yield from _walk(child, in_gloss)
        if child.tail and not in_gloss:
            yield MarkupEvent(EventKind.TEXT, text=child.tail)

    if structural:
        yield MarkupEvent(EventKind.CLOSE, tag=tag, element=element)

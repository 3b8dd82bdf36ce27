"""Tests for the markup walker."""

import pytest
from lxml import etree

from bilingual_epub.core.epub.markup import (
    EventKind,
    MarkupEvent,
    is_markup_entry,
    iter_events,
    parse_markup,
    serialize_markup,
    strip_annotations,
)


def events_of(markup: str) -> list[MarkupEvent]:
    return list(iter_events(parse_markup(markup.encode("utf-8")).root))


def test_events_follow_document_order():
    events = events_of("<p>a<b>b</b>c</p>")

    assert events == [
        MarkupEvent(EventKind.OPEN, tag="p"),
        MarkupEvent(EventKind.TEXT, text="a"),
        MarkupEvent(EventKind.OPEN, tag="b"),
        MarkupEvent(EventKind.TEXT, text="b"),
        MarkupEvent(EventKind.CLOSE, tag="b"),
        MarkupEvent(EventKind.TEXT, text="c"),
        MarkupEvent(EventKind.CLOSE, tag="p"),
        MarkupEvent(EventKind.EOF),
    ]


def test_open_and_close_events_carry_the_element():
    events = events_of("<div><p>x</p></div>")

    opened = [event for event in events if event.kind == EventKind.OPEN]
    assert [event.element.tag for event in opened] == ["div", "p"]


def test_namespaced_tags_use_local_names():
    events = events_of('<html xmlns="http://www.w3.org/1999/xhtml"><body><p>x</p></body></html>')

    tags = [event.tag for event in events if event.kind == EventKind.OPEN]
    assert tags == ["html", "body", "p"]
    assert events[2].is_translatable_container


def test_ruby_annotations_are_not_emitted():
    events = events_of("<p><ruby>漢<rt>かん</rt>字<rt>じ</rt></ruby>です</p>")

    assert events == [
        MarkupEvent(EventKind.OPEN, tag="p"),
        MarkupEvent(EventKind.TEXT, text="漢"),
        MarkupEvent(EventKind.TEXT, text="字"),
        MarkupEvent(EventKind.TEXT, text="です"),
        MarkupEvent(EventKind.CLOSE, tag="p"),
        MarkupEvent(EventKind.EOF),
    ]


def test_comments_are_skipped_but_their_tail_is_text():
    events = events_of("<p>a<!-- note -->b</p>")

    texts = [event.text for event in events if event.kind == EventKind.TEXT]
    assert texts == ["a", "b"]


def test_strip_annotations_keeps_base_text():
    document = parse_markup("<p><ruby>親<rt>おや</rt></ruby>が来た</p>".encode("utf-8"))

    strip_annotations(document.root)

    output = serialize_markup(document).decode("utf-8")
    assert output == "<p>親が来た</p>"


def test_strip_annotations_handles_xhtml_namespace():
    markup = (
        '<html xmlns="http://www.w3.org/1999/xhtml"><body>'
        "<p><ruby>東<rt>とう</rt>京<rt>きょう</rt></ruby></p>"
        "</body></html>"
    )
    document = parse_markup(markup.encode("utf-8"))

    strip_annotations(document.root)

    output = serialize_markup(document).decode("utf-8")
    assert "rt" not in output
    assert "ruby" not in output
    assert "<p>東京</p>" in output


def test_serialize_keeps_declaration_and_doctype():
    content = (
        b'<?xml version="1.0" encoding="utf-8"?>\n'
        b"<!DOCTYPE html>\n"
        b'<html xmlns="http://www.w3.org/1999/xhtml"><body><p>x</p></body></html>'
    )
    document = parse_markup(content)

    output = serialize_markup(document)

    assert output.lower().startswith(b"<?xml version='1.0' encoding='utf-8'?>")
    assert b"<!DOCTYPE html>" in output
    assert document.xml_declaration


def test_serialize_without_declaration_when_source_has_none():
    document = parse_markup(b"<div><p>x</p></div>")

    assert not document.xml_declaration
    assert serialize_markup(document) == b"<div><p>x</p></div>"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("OEBPS/chapter1.xhtml", True),
        ("META-INF/container.xml", True),
        ("index.html", True),
        ("old/page.htm", True),
        ("OEBPS/images/cover.jpg", False),
        ("OEBPS/content.opf", False),
        ("OEBPS/style.css", False),
        ("mimetype", False),
    ],
)
def test_is_markup_entry(name, expected):
    assert is_markup_entry(name) is expected


def test_parse_markup_returns_lxml_root():
    document = parse_markup(b"<p>x</p>")

    assert isinstance(document.root, etree._Element)
    assert document.method == "xml"


def test_multi_root_entry_keeps_every_node():
    document = parse_markup(b"lead<p>One</p><p>Two</p><!-- c --><p>Three</p>tail")

    assert document.fragment
    assert serialize_markup(document) == b"lead<p>One</p><p>Two</p><!-- c --><p>Three</p>tail"


def test_html_entries_use_the_html_parser():
    document = parse_markup(b"<p>Line one<br>line two</p><p>Next para</p>", "text/page.htm")

    assert document.method == "html"
    assert [event.tag for event in iter_events(document.root) if event.kind == EventKind.OPEN] == [
        "div",
        "p",
        "br",
        "p",
    ]
    output = serialize_markup(document)
    assert b"</br>" not in output
    assert output.count(b"</p>") == 2


def test_html_document_keeps_doctype():
    content = (
        b"<!DOCTYPE html>\n<html><head><title>T</title></head>"
        b"<body><p>x</p></body></html>"
    )
    document = parse_markup(content, "index.html")

    output = serialize_markup(document)

    assert not document.fragment
    assert output.startswith(b"<!DOCTYPE html>")
    assert b"<title>T</title>" in output


def test_broken_xhtml_is_reparsed_and_written_back_as_xml():
    content = (
        b'<?xml version="1.0" encoding="utf-8"?>\n'
        b'<html xmlns="http://www.w3.org/1999/xhtml"><body>'
        b"<p>A&nbsp;B</p><p>C<br>D</p></body></html>"
    )
    document = parse_markup(content, "OEBPS/chapter.xhtml")

    assert document.method == "xml"
    assert document.xml_declaration
    output = serialize_markup(document)
    assert output.lower().startswith(b"<?xml version='1.0' encoding='utf-8'?>")
    assert b"<br/>" in output
    assert "A B".encode("utf-8") in output
    etree.fromstring(output)


def test_declared_encoding_is_honoured_for_html_entries():
    content = '<meta charset="iso-8859-1"><p>Café</p>'.encode("iso-8859-1")

    document = parse_markup(content, "page.html")

    assert document.encoding == "iso-8859-1"
    assert serialize_markup(document).decode("iso-8859-1").endswith("<p>Café</p>")

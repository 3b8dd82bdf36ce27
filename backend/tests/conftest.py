"""Shared fixtures."""

from io import BytesIO
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZIP_STORED, ZipFile

import pytest

from stubs import EchoBackend

CHAPTER_1 = """<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>Chapter 1</title></head>
<body>
<h1>Chapter One</h1>
<p>It was a bright cold day.</p>
<p>The clocks were striking <em>thirteen</em>.</p>
<p>123. —</p>
<p>Winston slipped quickly through the doors.</p>
</body>
</html>
"""

CONTAINER_XML = """<?xml version="1.0"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

COVER_BYTES = bytes(range(256)) * 4


def build_epub(path: Path, entries: list[tuple[str, bytes]]) -> Path:
    with ZipFile(path, "w", ZIP_DEFLATED) as zip_out:
        for name, content in entries:
            compress_type = ZIP_STORED if name == "mimetype" else ZIP_DEFLATED
            zip_out.writestr(name, content, compress_type=compress_type)
    return path


def read_epub(data: bytes) -> dict[str, bytes]:
    with ZipFile(BytesIO(data)) as zip_in:
        return {name: zip_in.read(name) for name in zip_in.namelist()}


@pytest.fixture
def sample_entries() -> list[tuple[str, bytes]]:
    return [
        ("mimetype", b"application/epub+zip"),
        ("META-INF/container.xml", CONTAINER_XML.encode("utf-8")),
        ("OEBPS/chapter1.xhtml", CHAPTER_1.encode("utf-8")),
        ("OEBPS/images/cover.jpg", COVER_BYTES),
        ("OEBPS/style.css", b"p { margin: 0; }\n"),
    ]


@pytest.fixture
def sample_epub(tmp_path, sample_entries) -> Path:
    return build_epub(tmp_path / "book.epub", sample_entries)


@pytest.fixture
def echo_backend() -> EchoBackend:
    return EchoBackend()

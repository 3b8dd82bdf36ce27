"""ePub processing package."""

from .archive import EpubArchive, ZipArchiveStore
from .extractor import extract_blocks, is_ignorable
from .markup import (
    MARKUP_SUFFIXES,
    TRANSLATABLE_TAGS,
    EventKind,
    MarkupEvent,
    is_markup_entry,
    iter_events,
    parse_markup,
)
from .reinserter import format_marker, reinsert_translations

__all__ = [
    "EpubArchive",
    "ZipArchiveStore",
    "extract_blocks",
    "is_ignorable",
    "MARKUP_SUFFIXES",
    "TRANSLATABLE_TAGS",
    "EventKind",
    "MarkupEvent",
    "is_markup_entry",
    "iter_events",
    "parse_markup",
    "format_marker",
    "reinsert_translations",
]

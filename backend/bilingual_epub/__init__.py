"""Bilingual ePub translator.

Translates the paragraph, heading and list-item text of an ePub's XHTML
entries through an LLM backend and writes each translation next to its
source text, leaving the markup structure untouched.
"""

__version__ = "0.1.0"

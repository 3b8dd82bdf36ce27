"""Utility modules."""

from .text import safe_truncate, strip_code_fence

__all__ = ["safe_truncate", "strip_code_fence"]

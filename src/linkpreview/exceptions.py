"""
Exception types raised by linkpreview.
"""

from __future__ import annotations


class LinkPreviewError(Exception):
    """Base exception for linkpreview errors."""

    pass


class ParseError(LinkPreviewError):
    """Raised when the supplied text cannot be tokenized as markup at all."""

    pass

"""
linkpreview - Resolve link preview metadata from HTML.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .document import HtmlDocument, load
from .exceptions import LinkPreviewError, ParseError
from .metadata import MetadataResolver, resolve_metadata
from .protocols import VOCABULARY_PRIORITY, MetadataField, PreviewMetadata, Vocabulary

__all__ = [
    "__version__",
    "HtmlDocument",
    "load",
    "LinkPreviewError",
    "ParseError",
    "MetadataResolver",
    "resolve_metadata",
    "MetadataField",
    "PreviewMetadata",
    "Vocabulary",
    "VOCABULARY_PRIORITY",
]

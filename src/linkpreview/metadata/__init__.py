"""
linkpreview Metadata Module - Preview metadata resolution

Components:
- Selector Set: static (vocabulary, field, tag query, attribute) table
- Field extractors: OpenGraph, Twitter Card, Schema.org (microdata + JSON-LD), Fallback
- Normalizers: text cleanup, URL resolution/validation, image sniffing
- MetadataResolver: fixed-priority merge into PreviewMetadata
"""

from .extractors import (
    EXTRACTORS,
    extract_fallback,
    extract_opengraph,
    extract_schema_org,
    extract_twitter,
    parse_json_ld,
)
from .normalizers import document_base_url, normalize
from .resolver import MetadataResolver, ResolverStats, get_default_resolver, resolve_metadata
from .selectors import JSON_LD_SELECTORS, SELECTORS, JsonLdSelector, Selector, selectors_for

__all__ = [
    # Resolution
    "MetadataResolver",
    "ResolverStats",
    "get_default_resolver",
    "resolve_metadata",
    # Extraction
    "EXTRACTORS",
    "extract_opengraph",
    "extract_twitter",
    "extract_schema_org",
    "extract_fallback",
    "parse_json_ld",
    # Normalization
    "normalize",
    "document_base_url",
    # Selector Set
    "Selector",
    "JsonLdSelector",
    "SELECTORS",
    "JSON_LD_SELECTORS",
    "selectors_for",
]

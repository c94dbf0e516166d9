"""
Field extractors - one pure function per vocabulary.

Each extractor reads only its own vocabulary's rows of the Selector Set and
returns a sparse mapping of field to raw candidate. A field with no matching
tag is left out of the mapping; a matching tag with a blank value is kept so
that normalization can reject it.
"""

from __future__ import annotations

import html
import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import structlog

from ..document import HtmlDocument, attribute_text
from ..protocols import MetadataField, RawCandidate, Vocabulary
from .selectors import JSON_LD_SELECTORS, SELECTORS, JsonLdSelector, Selector, selectors_for

logger = structlog.get_logger(__name__)

CandidateMap = Dict[MetadataField, RawCandidate]
Extractor = Callable[..., CandidateMap]


def _read_selector(document: HtmlDocument, selector: Selector) -> Optional[str]:
    """Value of the first element matching ``selector``, or None if nothing matches."""
    attrs = dict(selector.attrs)

    if not selector.read:
        element = document.query_first(selector.tag, attrs, within=selector.scope)
        return document.text_of(element) if element is not None else None

    for element in document.query_all(selector.tag, attrs, within=selector.scope):
        for attribute in selector.read:
            value = attribute_text(element, attribute)
            if value is not None:
                return value
    return None


def _extract_rows(document: HtmlDocument, vocabulary: Vocabulary, selectors: Iterable[Selector]) -> CandidateMap:
    candidates: CandidateMap = {}
    for selector in selectors_for(vocabulary, tuple(selectors)):
        if selector.field in candidates:
            continue
        value = _read_selector(document, selector)
        if value is not None:
            candidates[selector.field] = RawCandidate(
                field=selector.field,
                vocabulary=vocabulary,
                value=value,
                selector=selector.describe(),
            )
    return candidates


def extract_opengraph(document: HtmlDocument, selectors: Iterable[Selector] = SELECTORS) -> CandidateMap:
    """OpenGraph ``<meta property="og:*">`` values."""
    return _extract_rows(document, Vocabulary.OPENGRAPH, selectors)


def extract_twitter(document: HtmlDocument, selectors: Iterable[Selector] = SELECTORS) -> CandidateMap:
    """Twitter Card ``<meta name="twitter:*">`` values."""
    return _extract_rows(document, Vocabulary.TWITTER, selectors)


# ----------------------------------------------------------------------------
# Schema.org: microdata rows first, then JSON-LD blocks
# ----------------------------------------------------------------------------


def parse_json_ld(blocks: Iterable[str]) -> List[Dict[str, Any]]:
    """
    Shallow-parse JSON-LD script blocks into a flat list of objects.

    A block that is not valid JSON is skipped and the next block is still
    read. A top-level array contributes each of its objects in order.
    """
    objects: List[Dict[str, Any]] = []
    for index, block in enumerate(blocks):
        try:
            data = json.loads(block)
        except (ValueError, RecursionError) as e:
            logger.debug("Skipping unparsable JSON-LD block", block=index, error=str(e))
            continue

        if isinstance(data, list):
            objects.extend(item for item in data if isinstance(item, dict))
        elif isinstance(data, dict):
            objects.append(data)
    return objects


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _lookup(obj: Dict[str, Any], path: Tuple[str, ...]) -> Optional[str]:
    current: Any = obj
    for key in path:
        current = _first(current)
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    current = _first(current)
    # JSON-LD strings never pass through the HTML parser, so entities are still encoded.
    return html.unescape(current) if isinstance(current, str) else None


def _extract_json_ld(
    objects: List[Dict[str, Any]],
    json_ld_selectors: Iterable[JsonLdSelector],
    skip: Iterable[MetadataField],
) -> CandidateMap:
    candidates: CandidateMap = {}
    skipped = set(skip)
    for selector in json_ld_selectors:
        if selector.field in skipped or selector.field in candidates:
            continue
        for obj in objects:
            value = _lookup(obj, selector.path)
            if value is not None:
                candidates[selector.field] = RawCandidate(
                    field=selector.field,
                    vocabulary=Vocabulary.SCHEMA_ORG,
                    value=value,
                    selector=selector.describe(),
                )
                break
    return candidates


def extract_schema_org(
    document: HtmlDocument,
    selectors: Iterable[Selector] = SELECTORS,
    json_ld_selectors: Iterable[JsonLdSelector] = JSON_LD_SELECTORS,
) -> CandidateMap:
    """
    Schema.org microdata ``itemprop`` values, completed from JSON-LD blocks.

    A microdata value owns its field unless it is blank; JSON-LD fills
    missing and blank fields.
    """
    candidates = _extract_rows(document, Vocabulary.SCHEMA_ORG, selectors)

    blocks = document.json_ld_blocks()
    if blocks:
        objects = parse_json_ld(blocks)
        owned = [metadata_field for metadata_field, candidate in candidates.items() if candidate.value.strip()]
        candidates.update(_extract_json_ld(objects, json_ld_selectors, skip=owned))
    return candidates


def extract_fallback(document: HtmlDocument, selectors: Iterable[Selector] = SELECTORS) -> CandidateMap:
    """
    Generic HTML signals: ``<title>``, ``<meta name="description">``, first body image.

    Always computed, even when a structured vocabulary also covers the
    field; the resolver decides which value is used.
    """
    return _extract_rows(document, Vocabulary.FALLBACK, selectors)


EXTRACTORS: Dict[Vocabulary, Extractor] = {
    Vocabulary.OPENGRAPH: extract_opengraph,
    Vocabulary.TWITTER: extract_twitter,
    Vocabulary.SCHEMA_ORG: extract_schema_org,
    Vocabulary.FALLBACK: extract_fallback,
}


__all__ = [
    "CandidateMap",
    "EXTRACTORS",
    "extract_opengraph",
    "extract_twitter",
    "extract_schema_org",
    "extract_fallback",
    "parse_json_ld",
]

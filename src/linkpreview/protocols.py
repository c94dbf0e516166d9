"""
Core enums and dataclasses shared by every stage of metadata resolution.

Data flow:
- Extractors produce ``RawCandidate`` values, one per field they found a tag for
- Normalizers turn each candidate into a ``NormalizedValue`` (valid or rejected)
- The resolver merges valid values into one immutable ``PreviewMetadata``
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple
from urllib.parse import urlparse

# ============================================================================
# Enums and Constants
# ============================================================================


class MetadataField(Enum):
    """Logical metadata fields a preview can carry."""

    TITLE = "title"
    DESCRIPTION = "description"
    IMAGE = "image"
    SITE_NAME = "site_name"
    AUTHOR = "author"
    URL = "url"
    LOCALE = "locale"
    TYPE = "type"

    @property
    def is_url(self) -> bool:
        return self in (MetadataField.IMAGE, MetadataField.URL)


class Vocabulary(Enum):
    """Metadata vocabularies a page may use to describe itself."""

    OPENGRAPH = "opengraph"
    TWITTER = "twitter"
    SCHEMA_ORG = "schema_org"
    FALLBACK = "fallback"


# Merge order used by the resolver, highest priority first.
VOCABULARY_PRIORITY: Tuple[Vocabulary, ...] = (
    Vocabulary.OPENGRAPH,
    Vocabulary.TWITTER,
    Vocabulary.SCHEMA_ORG,
    Vocabulary.FALLBACK,
)

# PreviewMetadata attribute holding each field.
FIELD_ATTRIBUTES: Dict[MetadataField, str] = {
    MetadataField.TITLE: "title",
    MetadataField.DESCRIPTION: "description",
    MetadataField.IMAGE: "image",
    MetadataField.SITE_NAME: "site_name",
    MetadataField.AUTHOR: "author",
    MetadataField.URL: "url",
    MetadataField.LOCALE: "locale",
    MetadataField.TYPE: "schema_type",
}


# ============================================================================
# Candidates
# ============================================================================


@dataclass(frozen=True, slots=True)
class RawCandidate:
    """A value read from the document, before any validation."""

    field: MetadataField
    vocabulary: Vocabulary
    value: str
    selector: str = ""


@dataclass(frozen=True, slots=True)
class NormalizedValue:
    """Outcome of normalizing one ``RawCandidate``."""

    field: MetadataField
    vocabulary: Vocabulary
    value: Optional[str]
    valid: bool
    reason: Optional[str] = None

    @classmethod
    def accept(cls, candidate: RawCandidate, value: str) -> NormalizedValue:
        return cls(field=candidate.field, vocabulary=candidate.vocabulary, value=value, valid=True)

    @classmethod
    def reject(cls, candidate: RawCandidate, reason: str) -> NormalizedValue:
        return cls(
            field=candidate.field,
            vocabulary=candidate.vocabulary,
            value=None,
            valid=False,
            reason=reason,
        )


# ============================================================================
# Public Result
# ============================================================================


@dataclass(frozen=True, slots=True)
class PreviewMetadata:
    """
    Resolved preview metadata for one HTML document.

    Every present value passed normalization: URLs are absolute http(s)
    URLs and text values are non-empty. ``winners`` records which
    vocabulary supplied each present field, as ``(field, vocabulary)``
    pairs in ``MetadataField`` order.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    site_name: Optional[str] = None
    author: Optional[str] = None
    url: Optional[str] = None
    locale: Optional[str] = None
    schema_type: Optional[str] = None
    winners: Tuple[Tuple[MetadataField, Vocabulary], ...] = field(default=(), repr=False)

    @classmethod
    def from_values(cls, values: Dict[MetadataField, NormalizedValue]) -> PreviewMetadata:
        """Build a record from the winning value of each field."""
        kwargs: Dict[str, object] = {}
        winners = []
        for metadata_field in MetadataField:
            value = values.get(metadata_field)
            if value is None or not value.valid:
                continue
            kwargs[FIELD_ATTRIBUTES[metadata_field]] = value.value
            winners.append((metadata_field, value.vocabulary))
        return cls(winners=tuple(winners), **kwargs)  # type: ignore[arg-type]

    def get(self, metadata_field: MetadataField) -> Optional[str]:
        return getattr(self, FIELD_ATTRIBUTES[metadata_field])

    def source(self, metadata_field: MetadataField) -> Optional[Vocabulary]:
        """Vocabulary that supplied ``metadata_field``, or None if absent."""
        for winner_field, vocabulary in self.winners:
            if winner_field is metadata_field:
                return vocabulary
        return None

    @property
    def sources(self) -> Dict[MetadataField, Vocabulary]:
        return dict(self.winners)

    @property
    def fields_present(self) -> Tuple[MetadataField, ...]:
        return tuple(winner_field for winner_field, _ in self.winners)

    @property
    def is_empty(self) -> bool:
        return not self.winners

    @property
    def domain(self) -> Optional[str]:
        """Host name of the canonical URL, or None for IP hosts and missing URLs."""
        if not self.url:
            return None
        hostname = urlparse(self.url).hostname
        if not hostname or _is_ip_address(hostname):
            return None
        return hostname

    def with_value(self, metadata_field: MetadataField, value: Optional[str]) -> PreviewMetadata:
        """Return a copy with one field's value replaced, keeping its vocabulary."""
        if value is None:
            winners = tuple(w for w in self.winners if w[0] is not metadata_field)
            return replace(self, winners=winners, **{FIELD_ATTRIBUTES[metadata_field]: None})
        if self.source(metadata_field) is None:
            raise ValueError(f"{metadata_field.value} has no resolved value to replace")
        return replace(self, **{FIELD_ATTRIBUTES[metadata_field]: value})

    def items(self) -> Tuple[Tuple[MetadataField, str, Vocabulary], ...]:
        """Present fields as ``(field, value, vocabulary)`` triples."""
        return tuple((f, self.get(f), v) for f, v in self.winners)  # type: ignore[misc]


def _is_ip_address(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


__all__ = [
    "MetadataField",
    "Vocabulary",
    "VOCABULARY_PRIORITY",
    "FIELD_ATTRIBUTES",
    "RawCandidate",
    "NormalizedValue",
    "PreviewMetadata",
]

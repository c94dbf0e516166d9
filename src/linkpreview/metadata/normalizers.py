"""
Per-field value cleanup and validation.

Normalizers never raise for bad input and never touch the network: a value
that cannot be made valid comes back as a rejected ``NormalizedValue``
carrying a short reason.
"""

from __future__ import annotations

import mimetypes
import re
from typing import Optional
from urllib.parse import urljoin, urlsplit

from ..document import HtmlDocument
from ..protocols import MetadataField, NormalizedValue, RawCandidate

ALLOWED_SCHEMES = ("http", "https")

# Rejection reasons
EMPTY = "empty"
MALFORMED = "malformed"
UNRESOLVABLE = "unresolvable"
SCHEME = "scheme"
NOT_IMAGE = "not-image"

_WHITESPACE = re.compile(r"\s+")
_URL_FORBIDDEN = re.compile(r"[\s\x00-\x1f\x7f<>\"]")
_HOSTNAME = re.compile(r"^[\w.\-]+$|^\[[0-9a-fA-F:.]+\]$", re.UNICODE)
_SCHEME_PREFIX = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")

# Built-in table only, so results do not depend on the host's mime.types files.
_MIME_TYPES = mimetypes.MimeTypes()


def clean_text(raw: str) -> str:
    """Collapse whitespace runs and trim. Entities are already decoded by the parser."""
    return _WHITESPACE.sub(" ", raw).strip()


def _absolute_url(value: str) -> Optional[str]:
    """``value`` if it is a well-formed absolute http(s) URL, else None."""
    try:
        parts = urlsplit(value)
        parts.port  # raises ValueError for out-of-range or non-numeric ports
    except ValueError:
        return None
    if parts.scheme.lower() not in ALLOWED_SCHEMES or not parts.hostname:
        return None
    host = parts.netloc.rsplit("@", 1)[-1]
    host = host.rsplit(":", 1)[0] if not host.endswith("]") else host
    if not _HOSTNAME.match(host):
        return None
    return value


def is_absolute_http_url(value: Optional[str]) -> bool:
    return bool(value) and _absolute_url(value) is not None  # type: ignore[arg-type]


def resolve_url(raw: str, base_url: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """
    Resolve ``raw`` against ``base_url``.

    Returns:
        ``(url, None)`` on success or ``(None, reason)`` on rejection
    """
    value = raw.strip()
    if not value:
        return None, EMPTY
    if _URL_FORBIDDEN.search(value):
        return None, MALFORMED

    if _SCHEME_PREFIX.match(value):
        scheme = value.split(":", 1)[0].lower()
        if scheme not in ALLOWED_SCHEMES:
            return None, SCHEME
        resolved = value
    else:
        if not base_url:
            return None, UNRESOLVABLE
        resolved = urljoin(base_url, value)

    if _absolute_url(resolved) is None:
        return None, MALFORMED
    return resolved, None


def document_base_url(document: HtmlDocument, base_url: Optional[str] = None) -> Optional[str]:
    """
    Base URL for relative references in ``document``.

    A ``<base href>`` wins over the caller's ``base_url``; a relative
    ``<base href>`` is itself resolved against ``base_url``. Unusable values
    are ignored.
    """
    caller_base = base_url if is_absolute_http_url(base_url) else None
    href = document.base_href()
    if href:
        resolved, _ = resolve_url(href, caller_base)
        if resolved is not None:
            return resolved
    return caller_base


# ----------------------------------------------------------------------------
# Field normalizers
# ----------------------------------------------------------------------------


def normalize_text(candidate: RawCandidate) -> NormalizedValue:
    value = clean_text(candidate.value)
    if not value:
        return NormalizedValue.reject(candidate, EMPTY)
    return NormalizedValue.accept(candidate, value)


def normalize_locale(candidate: RawCandidate) -> NormalizedValue:
    value = candidate.value.strip()
    if not value:
        return NormalizedValue.reject(candidate, EMPTY)
    return NormalizedValue.accept(candidate, value)


def normalize_type(candidate: RawCandidate) -> NormalizedValue:
    """Schema.org type names; ``https://schema.org/Article`` becomes ``Article``."""
    value = clean_text(candidate.value)
    # itemtype may list several space separated type URLs
    value = value.split(" ")[0]
    if "/" in value:
        value = value.rstrip("/").rsplit("/", 1)[-1]
    if not value:
        return NormalizedValue.reject(candidate, EMPTY)
    return NormalizedValue.accept(candidate, value)


def normalize_url(candidate: RawCandidate, base_url: Optional[str] = None) -> NormalizedValue:
    resolved, reason = resolve_url(candidate.value, base_url)
    if resolved is None:
        return NormalizedValue.reject(candidate, reason or MALFORMED)
    return NormalizedValue.accept(candidate, resolved)


def normalize_image(candidate: RawCandidate, base_url: Optional[str] = None) -> NormalizedValue:
    """URL normalization plus a file-extension check against known MIME types."""
    normalized = normalize_url(candidate, base_url)
    if not normalized.valid or normalized.value is None:
        return normalized

    path = urlsplit(normalized.value).path
    mime_type, _ = _MIME_TYPES.guess_type(path, strict=False)
    if mime_type is not None and not mime_type.startswith("image/"):
        return NormalizedValue.reject(candidate, NOT_IMAGE)
    return normalized


def normalize(candidate: RawCandidate, base_url: Optional[str] = None) -> NormalizedValue:
    """Dispatch ``candidate`` to the normalizer for its field."""
    if candidate.field is MetadataField.IMAGE:
        return normalize_image(candidate, base_url)
    if candidate.field is MetadataField.URL:
        return normalize_url(candidate, base_url)
    if candidate.field is MetadataField.LOCALE:
        return normalize_locale(candidate)
    if candidate.field is MetadataField.TYPE:
        return normalize_type(candidate)
    return normalize_text(candidate)


__all__ = [
    "clean_text",
    "resolve_url",
    "document_base_url",
    "is_absolute_http_url",
    "normalize",
    "normalize_text",
    "normalize_locale",
    "normalize_type",
    "normalize_url",
    "normalize_image",
]

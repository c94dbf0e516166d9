"""
Selector Set - where each vocabulary keeps each metadata field.

Static configuration only. Supporting another tag means adding a row here;
extractor logic never changes. Rows for the same vocabulary and field are
tried in table order and the first row that matches an element wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple, Union

from ..protocols import MetadataField, Vocabulary

Attrs = Tuple[Tuple[str, Union[str, bool]], ...]

TEXT: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Selector:
    """One (vocabulary, field, tag query, attribute) row."""

    vocabulary: Vocabulary
    field: MetadataField
    tag: str | None
    attrs: Attrs = ()
    read: Tuple[str, ...] = ("content",)
    scope: Literal["document", "body"] = "document"

    def describe(self) -> str:
        """CSS-like rendering, e.g. ``meta[property=og:title]@content``."""
        parts = [self.tag or "*"]
        for name, expected in self.attrs:
            parts.append(f"[{name}]" if expected is True else f"[{name}={expected}]")
        query = "".join(parts)
        if self.scope == "body":
            query = f"body {query}"
        return f"{query}@{'|'.join(self.read)}" if self.read else f"{query}::text"


@dataclass(frozen=True)
class JsonLdSelector:
    """A key path read from JSON-LD objects by the Schema.org extractor."""

    field: MetadataField
    path: Tuple[str, ...]

    def describe(self) -> str:
        return "ld+json:" + ".".join(self.path)


def _meta(vocabulary: Vocabulary, field: MetadataField, key: str, value: str) -> Selector:
    return Selector(vocabulary, field, "meta", ((key, value),))


def _og(field: MetadataField, prop: str) -> Tuple[Selector, ...]:
    # og:* belongs on property=, but name= is common enough in the wild.
    return (
        _meta(Vocabulary.OPENGRAPH, field, "property", prop),
        _meta(Vocabulary.OPENGRAPH, field, "name", prop),
    )


def _twitter(field: MetadataField, name: str) -> Tuple[Selector, ...]:
    return (
        _meta(Vocabulary.TWITTER, field, "name", name),
        _meta(Vocabulary.TWITTER, field, "property", name),
    )


def _itemprop(
    field: MetadataField, prop: str, read: Tuple[str, ...] = ("content",), tag: str | None = "meta"
) -> Selector:
    return Selector(Vocabulary.SCHEMA_ORG, field, tag, (("itemprop", prop),), read)


_F = MetadataField
_FALLBACK = Vocabulary.FALLBACK

OPENGRAPH_SELECTORS: Tuple[Selector, ...] = (
    *_og(_F.TITLE, "og:title"),
    *_og(_F.DESCRIPTION, "og:description"),
    *_og(_F.IMAGE, "og:image"),
    *_og(_F.IMAGE, "og:image:secure_url"),
    *_og(_F.IMAGE, "og:image:url"),
    *_og(_F.SITE_NAME, "og:site_name"),
    *_og(_F.AUTHOR, "article:author"),
    *_og(_F.URL, "og:url"),
    *_og(_F.LOCALE, "og:locale"),
)

TWITTER_SELECTORS: Tuple[Selector, ...] = (
    *_twitter(_F.TITLE, "twitter:title"),
    *_twitter(_F.DESCRIPTION, "twitter:description"),
    *_twitter(_F.IMAGE, "twitter:image"),
    *_twitter(_F.IMAGE, "twitter:image:src"),
    *_twitter(_F.AUTHOR, "twitter:creator"),
    *_twitter(_F.URL, "twitter:url"),
)

SCHEMA_ORG_SELECTORS: Tuple[Selector, ...] = (
    _itemprop(_F.TITLE, "headline"),
    _itemprop(_F.TITLE, "name"),
    _itemprop(_F.DESCRIPTION, "description"),
    _itemprop(_F.IMAGE, "image", ("content", "src", "href"), tag=None),
    _itemprop(_F.AUTHOR, "author"),
    _itemprop(_F.URL, "url", ("content", "href"), tag=None),
    _itemprop(_F.LOCALE, "inLanguage"),
    Selector(Vocabulary.SCHEMA_ORG, _F.TYPE, None, (("itemscope", True), ("itemtype", True)), ("itemtype",)),
)

FALLBACK_SELECTORS: Tuple[Selector, ...] = (
    Selector(_FALLBACK, _F.TITLE, "title", read=TEXT),
    Selector(_FALLBACK, _F.TITLE, "h1", read=TEXT, scope="body"),
    Selector(_FALLBACK, _F.TITLE, "h2", read=TEXT, scope="body"),
    _meta(_FALLBACK, _F.DESCRIPTION, "name", "description"),
    Selector(_FALLBACK, _F.DESCRIPTION, "p", read=TEXT, scope="body"),
    Selector(_FALLBACK, _F.IMAGE, "link", (("rel", "image_src"), ("href", True)), ("href",)),
    Selector(_FALLBACK, _F.IMAGE, "img", (("src", True),), ("src",), scope="body"),
    _meta(_FALLBACK, _F.SITE_NAME, "name", "application-name"),
    _meta(_FALLBACK, _F.AUTHOR, "name", "author"),
    Selector(_FALLBACK, _F.URL, "link", (("rel", "canonical"), ("href", True)), ("href",)),
    Selector(_FALLBACK, _F.LOCALE, "html", (("lang", True),), ("lang",)),
)

SELECTORS: Tuple[Selector, ...] = (
    *OPENGRAPH_SELECTORS,
    *TWITTER_SELECTORS,
    *SCHEMA_ORG_SELECTORS,
    *FALLBACK_SELECTORS,
)

# Shallow key paths only: lists contribute their first element and
# @context/@graph are never followed.
JSON_LD_SELECTORS: Tuple[JsonLdSelector, ...] = (
    JsonLdSelector(_F.TITLE, ("headline",)),
    JsonLdSelector(_F.TITLE, ("name",)),
    JsonLdSelector(_F.DESCRIPTION, ("description",)),
    JsonLdSelector(_F.IMAGE, ("image",)),
    JsonLdSelector(_F.IMAGE, ("image", "url")),
    JsonLdSelector(_F.AUTHOR, ("author", "name")),
    JsonLdSelector(_F.SITE_NAME, ("publisher", "name")),
    JsonLdSelector(_F.URL, ("url",)),
    JsonLdSelector(_F.LOCALE, ("inLanguage",)),
    JsonLdSelector(_F.TYPE, ("@type",)),
)


def selectors_for(vocabulary: Vocabulary, selectors: Tuple[Selector, ...] = SELECTORS) -> Tuple[Selector, ...]:
    """Rows of ``selectors`` that belong to ``vocabulary``, in table order."""
    return tuple(selector for selector in selectors if selector.vocabulary is vocabulary)


__all__ = [
    "Selector",
    "JsonLdSelector",
    "SELECTORS",
    "JSON_LD_SELECTORS",
    "OPENGRAPH_SELECTORS",
    "TWITTER_SELECTORS",
    "SCHEMA_ORG_SELECTORS",
    "FALLBACK_SELECTORS",
    "selectors_for",
]

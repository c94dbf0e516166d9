"""
HTML document loading and read-only tag queries.

The loader wraps BeautifulSoup, which accepts the same lenient markup a
browser does: unclosed tags, unquoted attributes and stray end tags never
abort parsing. Only text that cannot be read as markup at all (binary
content decoded as text) is rejected with ``ParseError``.
"""

from __future__ import annotations

import unicodedata
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Union

import structlog
from bs4 import BeautifulSoup, ParserRejectedMarkup, Tag

from .exceptions import ParseError

logger = structlog.get_logger(__name__)

AttrPredicate = Mapping[str, Union[str, bool]]
Scope = Literal["document", "body"]

_WHITESPACE_CONTROLS = frozenset("\t\n\r\f\v")
_REPLACEMENT_CHAR = "\ufffd"


def _control_ratio(text: str) -> float:
    """Share of characters that never occur in real markup."""
    if not text:
        return 0.0
    suspicious = sum(
        1
        for char in text
        if char == _REPLACEMENT_CHAR
        or (char not in _WHITESPACE_CONTROLS and unicodedata.category(char) == "Cc")
    )
    return suspicious / len(text)


def _attribute_matches(actual: Any, expected: Union[str, bool]) -> bool:
    if expected is True:
        return actual is not None
    if actual is None:
        return False
    expected_value = str(expected).lower()
    # Multi-valued attributes such as rel="canonical icon" arrive as lists.
    if isinstance(actual, list):
        return any(token.strip().lower() == expected_value for token in actual)
    return str(actual).strip().lower() == expected_value


def attribute_text(element: Tag, attribute: str) -> Optional[str]:
    """Value of ``attribute`` as a string, or None when the attribute is missing."""
    value = element.get(attribute)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


class HtmlDocument:
    """
    A parsed HTML document.

    Built once by ``load`` and only read afterwards, so a single instance
    can be queried from several threads at the same time.
    """

    def __init__(self, soup: BeautifulSoup, parser: str = "html.parser") -> None:
        self._soup = soup
        self.parser = parser

    def _scope(self, scope: Scope) -> Union[BeautifulSoup, Tag]:
        if scope == "body":
            body = self._soup.find("body")
            if isinstance(body, Tag):
                return body
        return self._soup

    @staticmethod
    def _predicate(tag: Optional[str], attrs: AttrPredicate) -> Callable[[Tag], bool]:
        tag_name = tag.lower() if tag else None

        def predicate(element: Tag) -> bool:
            if tag_name is not None and element.name != tag_name:
                return False
            return all(_attribute_matches(element.get(name), expected) for name, expected in attrs.items())

        return predicate

    def query_first(
        self,
        tag: Optional[str],
        attrs: Optional[AttrPredicate] = None,
        *,
        within: Scope = "document",
    ) -> Optional[Tag]:
        """First element in document order matching ``tag`` and ``attrs``."""
        found = self._scope(within).find(self._predicate(tag, attrs or {}))
        return found if isinstance(found, Tag) else None

    def query_all(
        self,
        tag: Optional[str],
        attrs: Optional[AttrPredicate] = None,
        *,
        within: Scope = "document",
    ) -> List[Tag]:
        """Every element matching ``tag`` and ``attrs``, in document order."""
        return [el for el in self._scope(within).find_all(self._predicate(tag, attrs or {})) if isinstance(el, Tag)]

    def query_meta(self, value: str) -> List[Dict[str, str]]:
        """
        Attributes of each ``<meta>`` whose property, name or itemprop equals ``value``.

        The comparison ignores case and surrounding whitespace.
        """
        wanted = value.strip().lower()
        matches: List[Dict[str, str]] = []
        for meta in self._soup.find_all("meta"):
            if not isinstance(meta, Tag):
                continue
            keys = (meta.get("property"), meta.get("name"), meta.get("itemprop"))
            if any(_attribute_matches(key, wanted) for key in keys):
                matches.append({name: attribute_text(meta, name) or "" for name in meta.attrs})
        return matches

    def json_ld_blocks(self) -> List[str]:
        """Raw text of every JSON-LD script block, in document order."""
        blocks = []
        for script in self.query_all("script", {"type": "application/ld+json"}):
            if script.string:
                blocks.append(str(script.string))
        return blocks

    def base_href(self) -> Optional[str]:
        """The ``href`` of the first ``<base>`` element, if any."""
        base = self.query_first("base", {"href": True})
        return attribute_text(base, "href") if base is not None else None

    @staticmethod
    def text_of(element: Tag) -> str:
        return element.get_text(separator=" ")


def load(html_text: str, *, parser: str = "html.parser", max_control_ratio: float = 0.1) -> HtmlDocument:
    """
    Parse ``html_text`` into an ``HtmlDocument``.

    Args:
        html_text: Decoded HTML text
        parser: BeautifulSoup tree builder name
        max_control_ratio: Largest tolerated share of control characters

    Returns:
        The parsed document

    Raises:
        TypeError: If ``html_text`` is not a string
        ParseError: If the text cannot be tokenized as markup
    """
    if not isinstance(html_text, str):
        raise TypeError(f"expected decoded HTML text, got {type(html_text).__name__}")

    if "\x00" in html_text:
        raise ParseError("input contains NUL characters and is not markup")

    ratio = _control_ratio(html_text)
    if ratio > max_control_ratio:
        raise ParseError(f"input is not markup: {ratio:.0%} of characters are control characters")

    try:
        soup = BeautifulSoup(html_text, parser)
    except ParserRejectedMarkup as e:
        raise ParseError(f"markup rejected by {parser}: {e}") from e

    logger.debug("Document loaded", parser=parser, length=len(html_text))
    return HtmlDocument(soup, parser=parser)


__all__ = ["HtmlDocument", "load", "attribute_text"]

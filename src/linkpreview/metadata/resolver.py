"""
Resolver - merges the four vocabularies into one PreviewMetadata.

For each field the candidates are considered in the fixed order
OpenGraph > Twitter > Schema.org > Fallback, and the first vocabulary whose
candidate normalizes to a valid value wins. Lower priority candidates are
discarded. A field no vocabulary can supply stays absent; no default is
ever made up.
"""

from __future__ import annotations

import asyncio
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional, Tuple, TypedDict
from uuid import uuid4

import structlog

from ..config import ResolverConfig, settings
from ..document import HtmlDocument, load
from ..exceptions import ParseError
from ..observability import increment, observe
from ..profiles import profile_for
from ..protocols import VOCABULARY_PRIORITY, MetadataField, NormalizedValue, PreviewMetadata, Vocabulary
from .extractors import EXTRACTORS, CandidateMap
from .normalizers import document_base_url, is_absolute_http_url, normalize
from .selectors import JSON_LD_SELECTORS, SELECTORS, JsonLdSelector, Selector

logger = structlog.get_logger(__name__)


class ResolverStats(TypedDict):
    """Running counters kept by a resolver instance."""

    resolutions: int
    parse_errors: int
    candidates_accepted: int
    candidates_rejected: int
    rejected_by_field: Dict[str, int]


def _empty_stats() -> ResolverStats:
    return {
        "resolutions": 0,
        "parse_errors": 0,
        "candidates_accepted": 0,
        "candidates_rejected": 0,
        "rejected_by_field": {},
    }


class MetadataResolver:
    """
    Resolve preview metadata from HTML text.

    Instances hold only configuration and counters, so one resolver can
    serve many documents, including concurrently.
    """

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        *,
        metrics_enabled: bool = True,
        selectors: Tuple[Selector, ...] = SELECTORS,
        json_ld_selectors: Tuple[JsonLdSelector, ...] = JSON_LD_SELECTORS,
    ) -> None:
        self.config = config or ResolverConfig()
        self.metrics_enabled = metrics_enabled
        self.selectors = selectors
        self.json_ld_selectors = json_ld_selectors
        self._stats = _empty_stats()
        self._stats_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def load(self, html_text: str) -> HtmlDocument:
        return load(
            html_text,
            parser=self.config.parser,
            max_control_ratio=self.config.max_control_ratio,
        )

    def _run_extractor(self, vocabulary: Vocabulary, document: HtmlDocument) -> CandidateMap:
        extractor = EXTRACTORS[vocabulary]
        if vocabulary is Vocabulary.SCHEMA_ORG:
            return extractor(document, self.selectors, self.json_ld_selectors)
        return extractor(document, self.selectors)

    def extract(self, document: HtmlDocument) -> Dict[Vocabulary, CandidateMap]:
        """Run every extractor; each returns its own complete map."""
        vocabularies = list(EXTRACTORS)
        if self.config.parallel_extraction:
            with ThreadPoolExecutor(
                max_workers=min(self.config.max_workers, len(vocabularies)),
                thread_name_prefix="linkpreview-extract",
            ) as pool:
                maps = list(pool.map(lambda vocabulary: self._run_extractor(vocabulary, document), vocabularies))
        else:
            maps = [self._run_extractor(vocabulary, document) for vocabulary in vocabularies]
        return dict(zip(vocabularies, maps))

    def merge(
        self,
        candidate_maps: Dict[Vocabulary, CandidateMap],
        base_url: Optional[str] = None,
    ) -> PreviewMetadata:
        """Normalize every candidate and keep the highest priority valid value per field."""
        winners: Dict[MetadataField, NormalizedValue] = {}

        for metadata_field in MetadataField:
            for vocabulary in VOCABULARY_PRIORITY:
                candidate = candidate_maps.get(vocabulary, {}).get(metadata_field)
                if candidate is None:
                    continue
                normalized = normalize(candidate, base_url)
                if not normalized.valid:
                    self._record_candidate(vocabulary, accepted=False, metadata_field=metadata_field)
                    logger.debug(
                        "Dropped invalid candidate",
                        field=metadata_field.value,
                        vocabulary=vocabulary.value,
                        selector=candidate.selector,
                        reason=normalized.reason,
                    )
                    continue
                self._record_candidate(vocabulary, accepted=True)
                if metadata_field not in winners:
                    winners[metadata_field] = normalized

        return PreviewMetadata.from_values(winners)

    def resolve_document(self, document: HtmlDocument, base_url: Optional[str] = None) -> PreviewMetadata:
        """Resolve an already loaded document. Never raises."""
        effective_base = document_base_url(document, base_url)
        metadata = self.merge(self.extract(document), effective_base)

        if self.config.enable_profiles:
            page_url = base_url if is_absolute_http_url(base_url) else metadata.url
            profile = profile_for(page_url)
            if profile is not None:
                metadata = profile.apply(metadata)
        return metadata

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def resolve(self, html_text: str, base_url: Optional[str] = None) -> PreviewMetadata:
        """
        Resolve preview metadata from decoded HTML text.

        Args:
            html_text: Decoded HTML document
            base_url: Address the document was fetched from, used to resolve
                relative URLs. Relative URLs are dropped when it is missing.

        Returns:
            The resolved PreviewMetadata (possibly with every field absent)

        Raises:
            ParseError: If the text cannot be tokenized as markup
        """
        started = time.perf_counter()
        with structlog.contextvars.bound_contextvars(resolution_id=uuid4().hex[:12]):
            try:
                document = self.load(html_text)
            except ParseError as e:
                logger.warning("Document is not parseable markup", error=str(e))
                with self._stats_lock:
                    self._stats["parse_errors"] += 1
                self._metric_increment("resolutions", labels={"outcome": "parse_error"})
                raise

            metadata = self.resolve_document(document, base_url)

            with self._stats_lock:
                self._stats["resolutions"] += 1
            self._metric_increment("resolutions", labels={"outcome": "resolved"})
            elapsed = time.perf_counter() - started
            if self.metrics_enabled:
                observe("resolution_seconds", elapsed)
            logger.debug(
                "Metadata resolved",
                fields=[f.value for f in metadata.fields_present],
                duration_ms=round(elapsed * 1000, 3),
            )
            return metadata

    async def resolve_async(self, html_text: str, base_url: Optional[str] = None) -> PreviewMetadata:
        """Run ``resolve`` in the loop's default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.resolve, html_text, base_url)

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    @property
    def stats(self) -> ResolverStats:
        """A snapshot of this resolver's counters."""
        with self._stats_lock:
            snapshot = dict(self._stats)
            snapshot["rejected_by_field"] = dict(self._stats["rejected_by_field"])
        return snapshot  # type: ignore[return-value]

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats = _empty_stats()

    def _record_candidate(
        self,
        vocabulary: Vocabulary,
        *,
        accepted: bool,
        metadata_field: Optional[MetadataField] = None,
    ) -> None:
        with self._stats_lock:
            if accepted:
                self._stats["candidates_accepted"] += 1
            else:
                self._stats["candidates_rejected"] += 1
                if metadata_field is not None:
                    by_field = self._stats["rejected_by_field"]
                    by_field[metadata_field.value] = by_field.get(metadata_field.value, 0) + 1
        self._metric_increment(
            "candidates",
            labels={"vocabulary": vocabulary.value, "outcome": "accepted" if accepted else "rejected"},
        )

    def _metric_increment(self, name: str, labels: Dict[str, str]) -> None:
        if self.metrics_enabled:
            increment(name, labels=labels)


# ----------------------------------------------------------------------------
# Module-level entry point
# ----------------------------------------------------------------------------

_default_resolver: Optional[MetadataResolver] = None
_default_lock = threading.Lock()


def get_default_resolver() -> MetadataResolver:
    """The resolver used by ``resolve_metadata``, built from global settings."""
    global _default_resolver
    if _default_resolver is None:
        with _default_lock:
            if _default_resolver is None:
                _default_resolver = MetadataResolver(
                    settings.resolver,
                    metrics_enabled=settings.monitoring.metrics_enabled,
                )
    return _default_resolver


def resolve_metadata(html_text: str, base_url: Optional[str] = None) -> PreviewMetadata:
    """
    Resolve preview metadata from decoded HTML text.

    Raises:
        ParseError: If the text cannot be tokenized as markup
    """
    return get_default_resolver().resolve(html_text, base_url)


__all__ = ["MetadataResolver", "ResolverStats", "get_default_resolver", "resolve_metadata"]

"""
Defines the Prometheus metrics recorded while resolving metadata.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test reloads, several resolvers in one process)
# must reuse the registered collectors instead of failing registration.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[no-untyped-def]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing

        try:
            return metric_cls(name, documentation, *args, **kwargs)
        except ValueError:
            # Registration lost the race; use the collector that won.
            return _PROM_REGISTRY._names_to_collectors[name]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)
Histogram = _duplicate_safe_factory(_OrigHistogram)

METRICS: Dict[str, Any] = {
    "resolutions": Counter(
        "linkpreview_resolutions_total",
        "Metadata resolution calls by outcome",
        ["outcome"],
    ),
    "candidates": Counter(
        "linkpreview_candidates_total",
        "Extracted candidates by vocabulary and normalization outcome",
        ["vocabulary", "outcome"],
    ),
    "resolution_seconds": Histogram(
        "linkpreview_resolution_seconds",
        "Time spent parsing and resolving one document",
        buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
    ),
}

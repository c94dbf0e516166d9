"""
Protocol for site-specific adjustments applied after the generic merge.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..protocols import PreviewMetadata


@runtime_checkable
class Profile(Protocol):
    """Post-processing for pages from one site."""

    name: str

    def fits(self, url: str) -> bool:
        """Whether this profile applies to a page fetched from ``url``."""
        ...

    def apply(self, metadata: PreviewMetadata) -> PreviewMetadata:
        """Return an adjusted copy of ``metadata``."""
        ...

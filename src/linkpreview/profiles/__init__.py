"""
Site profiles - per-site fixes applied to an already resolved preview.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .base import Profile
from .youtube import YouTubeProfile

PROFILES: Tuple[Profile, ...] = (YouTubeProfile(),)


def profile_for(url: Optional[str]) -> Optional[Profile]:
    """First registered profile that fits ``url``, if any."""
    if not url:
        return None
    for profile in PROFILES:
        if profile.fits(url):
            return profile
    return None


__all__ = ["Profile", "PROFILES", "YouTubeProfile", "profile_for"]

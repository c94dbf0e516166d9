"""
YouTube pages: serve preview images from the ytimg storage host.
"""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

import structlog

from ..protocols import MetadataField, PreviewMetadata

logger = structlog.get_logger(__name__)

YOUTUBE_IMAGE_STORAGE = "https://i.ytimg.com"


class YouTubeProfile:
    name = "youtube"

    def fits(self, url: str) -> bool:
        try:
            host = urlsplit(url).hostname or ""
        except ValueError:
            return False
        return "youtube.com" in host or "youtu.be" in host

    def apply(self, metadata: PreviewMetadata) -> PreviewMetadata:
        if not metadata.image:
            return metadata

        storage = urlsplit(YOUTUBE_IMAGE_STORAGE)
        image = urlsplit(metadata.image)
        rewritten = urlunsplit((storage.scheme, storage.netloc, image.path, "", ""))
        logger.debug("Rewrote YouTube preview image", original=metadata.image, image=rewritten)
        return metadata.with_value(MetadataField.IMAGE, rewritten)

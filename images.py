from typing import Optional
from urllib.parse import quote

import config


OPTIMIZER_PATH = "/_vercel/image"

COVER_WIDTH, COVER_QUALITY = 640, 80
THUMBNAIL_WIDTH, THUMBNAIL_QUALITY = 400, 75
FULL_SIZE_WIDTH, FULL_SIZE_QUALITY = 1920, 85


def optimized_url(url: str, width: int, quality: int) -> str:
    """Build an image-proxy URL that resizes and recompresses `url` on the fly"""
    encoded = quote(url, safe="!~*'()")
    return f"{OPTIMIZER_PATH}?url={encoded}&w={width}&q={quality}"


class ImageRenditions:
    """Derives display URLs for stored images

    The optimization proxy only exists on the production deployment, so
    everywhere else the raw storage URL is passed through unchanged.
    """

    def __init__(self, optimize: Optional[bool] = None):
        self.optimize = config.is_production() if optimize is None else optimize

    def _render(self, url: str, width: int, quality: int) -> str:
        if not self.optimize:
            return url
        return optimized_url(url, width, quality)

    def cover(self, url: str) -> str:
        return self._render(url, COVER_WIDTH, COVER_QUALITY)

    def thumbnail(self, url: str) -> str:
        return self._render(url, THUMBNAIL_WIDTH, THUMBNAIL_QUALITY)

    def full_size(self, url: str) -> str:
        return self._render(url, FULL_SIZE_WIDTH, FULL_SIZE_QUALITY)

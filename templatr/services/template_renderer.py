"""
Export pipeline: loads images, renders, and applies the fallback rules.

- Question image fails to decode: render the background alone.
- Background fails to decode: ImageDecodeError reaches the caller.
- Thumbnails are cached per (background, question) pair; fallbacks are not.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from templatr.config.settings import SETTINGS, LayoutSettings
from templatr.exceptions import ImageDecodeError
from templatr.models.template import ComposablePair
from templatr.services.auto_fit import LayoutConstraints
from templatr.services.image_source import ImageSource
from templatr.services.raster_compositor import (
    CONTENT_TYPES,
    encode_image,
    render_background_only,
    render_full_resolution,
    render_thumbnail,
)
from templatr.services.slide_exporter import DeckExportResult, SlideCanvas, SlideDeckBuilder
from templatr.services.thumbnail_cache import ThumbnailCache

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    data: bytes
    content_type: str
    fell_back: bool = False
    cached: bool = False


class TemplateRenderer:
    """Renders downloads, thumbnails and decks for composable pairs."""

    def __init__(
        self,
        image_source: Optional[ImageSource] = None,
        cache: Optional[ThumbnailCache] = None,
        settings: LayoutSettings = SETTINGS,
    ):
        self.settings = settings
        self.image_source = image_source or ImageSource(timeout=settings.image_fetch_timeout)
        self.cache = cache if cache is not None else ThumbnailCache(settings.thumbnail_cache_size)
        self.constraints = LayoutConstraints(
            coverage_x=settings.coverage_x,
            coverage_y=settings.coverage_y,
            padding=settings.padding_px,
        )

    def render_download(self, pair: ComposablePair, fmt: str = "PNG") -> RenderResult:
        """Native-resolution composite honouring the pair's saved placement."""
        fmt = fmt.upper()
        background = self.image_source.load(pair.background_ref)
        try:
            foreground = self.image_source.load(pair.foreground_ref)
        except ImageDecodeError as e:
            logger.error(f"Error generating merged image for '{pair.name}', using background only: {e}")
            image = render_background_only(background.image)
            return RenderResult(encode_image(image, fmt), CONTENT_TYPES[_normalize(fmt)], fell_back=True)

        image = render_full_resolution(
            background.image,
            foreground.image,
            pair.placement,
            pair.container,
            pair.crop,
            self.constraints,
        )
        return RenderResult(encode_image(image, fmt), CONTENT_TYPES[_normalize(fmt)])

    def render_thumbnail(self, background_ref: str, foreground_ref: str) -> RenderResult:
        """400x225 JPEG preview with the default auto-fit layout."""
        key = ThumbnailCache.key_for(background_ref, foreground_ref)
        cached = self.cache.get(key)
        if cached is not None:
            return RenderResult(cached, CONTENT_TYPES["JPEG"], cached=True)

        quality = self.settings.thumbnail_jpeg_quality
        size = self.settings.thumbnail_size
        background = self.image_source.load(background_ref)
        try:
            foreground = self.image_source.load(foreground_ref)
        except ImageDecodeError as e:
            logger.error(f"Error generating thumbnail, using background only: {e}")
            image = render_background_only(background.image, size)
            return RenderResult(encode_image(image, "JPEG", quality), CONTENT_TYPES["JPEG"], fell_back=True)

        image = render_thumbnail(background.image, foreground.image, size, self.constraints)
        data = encode_image(image, "JPEG", quality)
        self.cache.put(key, data)
        return RenderResult(data, CONTENT_TYPES["JPEG"])

    def render_deck(self, pairs: Iterable[ComposablePair], canvas: Optional[SlideCanvas] = None) -> DeckExportResult:
        canvas = canvas or SlideCanvas(
            width_in=self.settings.slide_width_in,
            height_in=self.settings.slide_height_in,
            dpi=self.settings.dpi,
        )
        builder = SlideDeckBuilder(self.image_source, canvas, self.constraints)
        return builder.build(pairs)


def _normalize(fmt: str) -> str:
    return "JPEG" if fmt == "JPG" else fmt

"""
Crop box interaction in percent of the foreground's rendered box.

Every returned CropRegion satisfies x + width <= 100 and y + height <= 100,
including the intermediate ones produced while a drag is in progress.
"""
import logging
from typing import Optional

from templatr.config.settings import SETTINGS
from templatr.models.geometry import CropRegion, PixelRect
from templatr.services.resize_handles import ResizeHandle, resize_rect
from templatr.utils.geometry import clamp

logger = logging.getLogger(__name__)

FULL_EXTENT = 100.0


def default_crop_region() -> CropRegion:
    """Centered 60% x 60% box."""
    return CropRegion(x=20, y=20, width=60, height=60)


def _contain(rect: PixelRect) -> Optional[CropRegion]:
    x = clamp(rect.x, 0.0, FULL_EXTENT)
    y = clamp(rect.y, 0.0, FULL_EXTENT)
    width = min(rect.width, FULL_EXTENT - x)
    height = min(rect.height, FULL_EXTENT - y)
    if width <= 0 or height <= 0:
        return None
    return CropRegion(x=x, y=y, width=width, height=height)


def move_crop(crop: CropRegion, x_pct: float, y_pct: float) -> CropRegion:
    """Move the crop's top-left to (x_pct, y_pct), kept inside the image."""
    return CropRegion(
        x=clamp(x_pct, 0.0, FULL_EXTENT - crop.width),
        y=clamp(y_pct, 0.0, FULL_EXTENT - crop.height),
        width=crop.width,
        height=crop.height,
    )


def resize_crop(
    crop: CropRegion,
    handle: ResizeHandle,
    pointer_x_pct: float,
    pointer_y_pct: float,
    min_pct: float = SETTINGS.min_crop_pct,
) -> CropRegion:
    """Drag one crop corner to the pointer; the opposite corner stays put."""
    rect = PixelRect(x=crop.x, y=crop.y, width=crop.width, height=crop.height)
    resized = resize_rect(handle, rect, pointer_x_pct, pointer_y_pct, FULL_EXTENT, FULL_EXTENT, min_pct, min_pct)
    contained = _contain(resized)
    if contained is None:
        logger.debug(f"Crop resize via {handle} collapsed the box; keeping {crop}")
        return crop
    return contained

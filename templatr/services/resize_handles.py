"""
Corner-handle resizing.

Each handle holds the opposite corner fixed and solves for the edges it
drags. Used in container pixels for the placement and in percent of the
rendered foreground for the crop box.
"""
from enum import Enum

from templatr.models.geometry import PixelRect
from templatr.utils.geometry import clamp


class ResizeHandle(str, Enum):
    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"


def resize_rect(
    handle: ResizeHandle,
    rect: PixelRect,
    pointer_x: float,
    pointer_y: float,
    bounds_width: float,
    bounds_height: float,
    min_width: float,
    min_height: float,
) -> PixelRect:
    """
    Resize rect by dragging one corner to the pointer.

    Free aspect ratio. The dragged edges are clamped to [0, bounds] and kept
    at least min_width/min_height away from the anchored edges.

    Args:
        handle: Corner being dragged
        rect: Rectangle when the pointer moved
        pointer_x: Pointer x in the bounds' coordinate space
        pointer_y: Pointer y in the bounds' coordinate space
        bounds_width: Right limit for the dragged edge
        bounds_height: Bottom limit for the dragged edge
        min_width: Width floor
        min_height: Height floor

    Returns:
        New rectangle
    """
    handle = ResizeHandle(handle)

    if handle is ResizeHandle.SE:
        # Anchor: top-left
        left, top = rect.x, rect.y
        right = clamp(pointer_x, left + min_width, bounds_width)
        bottom = clamp(pointer_y, top + min_height, bounds_height)
        return PixelRect(x=left, y=top, width=right - left, height=bottom - top)

    if handle is ResizeHandle.SW:
        # Anchor: top-right
        right, top = rect.right, rect.y
        left = clamp(pointer_x, 0.0, right - min_width)
        bottom = clamp(pointer_y, top + min_height, bounds_height)
        return PixelRect(
            x=left,
            y=top,
            width=max(min_width, right - left),
            height=bottom - top,
        )

    if handle is ResizeHandle.NE:
        # Anchor: bottom-left
        left, bottom = rect.x, rect.bottom
        right = clamp(pointer_x, left + min_width, bounds_width)
        top = clamp(pointer_y, 0.0, bottom - min_height)
        return PixelRect(
            x=left,
            y=top,
            width=right - left,
            height=max(min_height, bottom - top),
        )

    # NW. Anchor: bottom-right
    right, bottom = rect.right, rect.bottom
    left = clamp(pointer_x, 0.0, right - min_width)
    top = clamp(pointer_y, 0.0, bottom - min_height)
    return PixelRect(
        x=left,
        y=top,
        width=max(min_width, right - left),
        height=max(min_height, bottom - top),
    )

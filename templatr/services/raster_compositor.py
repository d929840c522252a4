"""
Pillow compositor for background + question images.

Full downloads render at the background's native resolution and honour the
saved Placement/CropRegion. Thumbnails re-run the auto-fit layout on a fixed
400x225 canvas, so they always show the default layout.
"""
import logging
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image

from templatr.config.settings import SETTINGS
from templatr.models.geometry import ContainerContext, CropRegion, PixelRect, Placement, Size
from templatr.models.template import check_saved_edit
from templatr.services.auto_fit import LayoutConstraints, DEFAULT_CONSTRAINTS, compute_auto_fit_box

logger = logging.getLogger(__name__)

RESAMPLE = Image.Resampling.LANCZOS

CONTENT_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
}


def map_placement_to_output(
    placement: Placement,
    container: ContainerContext,
    output_size: Tuple[int, int],
) -> PixelRect:
    """
    Destination rectangle of the foreground on the output canvas.

    Position scales by output/container per axis; size is the placement's
    percentage of the output dimensions.
    """
    output_width, output_height = output_size
    rel_x, rel_y, rel_width, rel_height = placement.relative_box(container)
    return PixelRect(
        x=rel_x * output_width,
        y=rel_y * output_height,
        width=rel_width * output_width,
        height=rel_height * output_height,
    )


def _to_rgba(image: Image.Image) -> Image.Image:
    if image.mode == "RGBA":
        return image
    return image.convert("RGBA")


def _draw_foreground(
    canvas: Image.Image,
    foreground: Image.Image,
    destination: PixelRect,
    crop: Optional[CropRegion],
) -> None:
    dest_width = max(1, round(destination.width))
    dest_height = max(1, round(destination.height))

    source_box = None
    if crop is not None:
        box = crop.source_box(Size(width=foreground.width, height=foreground.height))
        source_box = (box.x, box.y, box.right, box.bottom)

    layer = _to_rgba(foreground).resize((dest_width, dest_height), RESAMPLE, box=source_box)

    x, y = round(destination.x), round(destination.y)
    # alpha_composite only takes non-negative offsets
    if x < 0 or y < 0:
        left = min(layer.width, max(0, -x))
        top = min(layer.height, max(0, -y))
        layer = layer.crop((left, top, layer.width, layer.height))
        x, y = max(0, x), max(0, y)
    if layer.width <= 0 or layer.height <= 0 or x >= canvas.width or y >= canvas.height:
        logger.debug(f"Foreground at {destination} falls outside the {canvas.size} canvas")
        return
    canvas.alpha_composite(layer, dest=(x, y))


def composite_to_raster(
    background: Image.Image,
    foreground: Image.Image,
    placement: Placement,
    container: ContainerContext,
    crop: Optional[CropRegion] = None,
    output_size: Optional[Tuple[int, int]] = None,
) -> Image.Image:
    """
    Draw the foreground over the background at the requested output size.

    Args:
        background: Decoded background image
        foreground: Decoded question image (natural size)
        placement: Placement relative to container
        container: Editing surface the placement was produced in
        crop: Optional crop of the foreground in percent of its natural size
        output_size: (width, height); defaults to the background's native size

    Returns:
        RGBA image of output_size
    """
    if output_size is None:
        output_size = background.size
    output_size = (int(output_size[0]), int(output_size[1]))

    canvas = _to_rgba(background)
    if canvas.size != output_size:
        canvas = canvas.resize(output_size, RESAMPLE)
    else:
        canvas = canvas.copy()

    destination = map_placement_to_output(placement, container, output_size)
    _draw_foreground(canvas, foreground, destination, crop)
    return canvas


def render_full_resolution(
    background: Image.Image,
    foreground: Image.Image,
    placement: Optional[Placement] = None,
    container: Optional[ContainerContext] = None,
    crop: Optional[CropRegion] = None,
    constraints: LayoutConstraints = DEFAULT_CONSTRAINTS,
) -> Image.Image:
    """
    Native-resolution composite.

    With a saved placement the user's layout (and crop) is honoured; without
    one the auto-fit layout runs against the background's own canvas. A
    placement without its container, or a crop without a placement, raises
    ValueError.
    """
    check_saved_edit(placement, container, crop)
    if placement is None:
        native = ContainerContext(width=background.width, height=background.height)
        box = compute_auto_fit_box(
            (foreground.width, foreground.height), native, constraints
        )
        placement = Placement.from_pixel_rect(box, native)
        container = native
    return composite_to_raster(background, foreground, placement, container, crop)


def render_thumbnail(
    background: Image.Image,
    foreground: Image.Image,
    size: Tuple[int, int] = SETTINGS.thumbnail_size,
    constraints: LayoutConstraints = DEFAULT_CONSTRAINTS,
) -> Image.Image:
    """Fixed-size preview using a fresh auto-fit layout on the thumbnail canvas."""
    canvas = ContainerContext(width=size[0], height=size[1])
    box = compute_auto_fit_box((foreground.width, foreground.height), canvas, constraints)
    placement = Placement.from_pixel_rect(box, canvas)
    return composite_to_raster(background, foreground, placement, canvas, output_size=size)


def render_background_only(background: Image.Image, output_size: Optional[Tuple[int, int]] = None) -> Image.Image:
    """Fallback render when the question image is unavailable."""
    canvas = _to_rgba(background)
    if output_size is not None and canvas.size != tuple(output_size):
        canvas = canvas.resize(tuple(output_size), RESAMPLE)
    return canvas


def encode_image(image: Image.Image, fmt: str = "PNG", quality: int = SETTINGS.thumbnail_jpeg_quality) -> bytes:
    """Encode as PNG or JPEG (JPEG drops alpha)."""
    fmt = fmt.upper()
    if fmt == "JPG":
        fmt = "JPEG"
    if fmt not in CONTENT_TYPES:
        raise ValueError(f"Unsupported output format: {fmt}")

    buffer = BytesIO()
    if fmt == "JPEG":
        image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    else:
        image.save(buffer, format="PNG")
    return buffer.getvalue()

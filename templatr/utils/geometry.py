"""
Unit conversions and aspect-ratio scaling shared by every renderer.

The editor, the raster compositor and the slide exporter all call
scale_aspect_fit; its width-first order must not change or the three
outputs drift apart.
"""
from typing import Tuple

from templatr.exceptions import DegenerateGeometryError


def _require_positive(value: float, what: str) -> None:
    if not value > 0:
        raise DegenerateGeometryError(f"{what} must be positive", context={what: value})


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]; the lower bound wins if they cross."""
    return max(lower, min(value, upper))


def pixels_to_percent(value_px: float, container_dim_px: float) -> float:
    """Express a pixel length as a percentage of a container dimension."""
    _require_positive(container_dim_px, "container_dim_px")
    return (value_px / container_dim_px) * 100


def percent_to_pixels(value_pct: float, container_dim_px: float) -> float:
    """Inverse of pixels_to_percent."""
    _require_positive(container_dim_px, "container_dim_px")
    return (value_pct / 100) * container_dim_px


def scale_aspect_fit(
    natural_width: float,
    natural_height: float,
    max_width: float,
    max_height: float,
) -> Tuple[float, float]:
    """
    Largest rectangle with the natural aspect ratio that fits in the max box.

    Try width-constrained first; fall back to height-constrained when the
    resulting height overflows.

    Args:
        natural_width: Source width (any unit)
        natural_height: Source height (same unit)
        max_width: Available width
        max_height: Available height

    Returns:
        (width, height) tuple in the unit of the max box
    """
    _require_positive(natural_width, "natural_width")
    _require_positive(natural_height, "natural_height")
    aspect_ratio = natural_width / natural_height

    width = max_width
    height = width / aspect_ratio

    if height > max_height:
        height = max_height
        width = height * aspect_ratio

    return width, height

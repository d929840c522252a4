"""
Default placement of a question image on a background.

The same routine feeds the editor's initial/reset layout, the thumbnail
renderer (pixels) and the slide exporter (inches); only the unit of the
inputs changes.
"""
import logging
from dataclasses import dataclass
from typing import Tuple, Union

from templatr.config.settings import SETTINGS
from templatr.exceptions import DegenerateGeometryError
from templatr.models.geometry import ContainerContext, PixelRect, Placement, Size
from templatr.utils.geometry import scale_aspect_fit

logger = logging.getLogger(__name__)

SizeLike = Union[Size, Tuple[float, float]]


@dataclass(frozen=True)
class LayoutConstraints:
    """Coverage fractions of the container and the top-left inset (target units)."""
    coverage_x: float = SETTINGS.coverage_x
    coverage_y: float = SETTINGS.coverage_y
    padding: float = SETTINGS.padding_px

    def in_inches(self, dpi: float = SETTINGS.dpi) -> "LayoutConstraints":
        """Same constraints with the pixel padding converted at a fixed DPI."""
        return LayoutConstraints(self.coverage_x, self.coverage_y, self.padding / dpi)


DEFAULT_CONSTRAINTS = LayoutConstraints()


def _as_size(value: SizeLike, what: str) -> Size:
    if isinstance(value, Size):
        return value
    width, height = value
    if not (width > 0 and height > 0):
        raise DegenerateGeometryError(f"{what} must have positive dimensions", context={what: (width, height)})
    return Size(width=width, height=height)


def compute_auto_fit_box(
    natural: SizeLike,
    container: SizeLike,
    constraints: LayoutConstraints = DEFAULT_CONSTRAINTS,
) -> PixelRect:
    """
    Auto-fit rectangle in the container's own unit.

    Width starts at the smaller of the coverage box and the natural width (no
    upscaling), then the shared width-first fit runs against that box.
    """
    natural_size = _as_size(natural, "natural")
    container_size = _as_size(container, "container")

    max_width = container_size.width * constraints.coverage_x
    max_height = container_size.height * constraints.coverage_y

    width, height = scale_aspect_fit(
        natural_size.width,
        natural_size.height,
        min(max_width, natural_size.width),
        max_height,
    )

    return PixelRect(x=constraints.padding, y=constraints.padding, width=width, height=height)


def compute_auto_fit_placement(
    natural_size: SizeLike,
    container_size: SizeLike,
    coverage: Tuple[float, float] = (SETTINGS.coverage_x, SETTINGS.coverage_y),
    padding: float = SETTINGS.padding_px,
) -> Placement:
    """Auto-fit default as a Placement relative to a pixel container."""
    container = _as_size(container_size, "container")
    constraints = LayoutConstraints(coverage_x=coverage[0], coverage_y=coverage[1], padding=padding)
    box = compute_auto_fit_box(natural_size, container, constraints)
    placement = Placement.from_pixel_rect(
        box, ContainerContext(width=container.width, height=container.height)
    )
    logger.debug(
        f"Auto-fit {natural_size} in {container.as_tuple()}: "
        f"{box.width:.1f}x{box.height:.1f} at ({box.x}, {box.y})"
    )
    return placement

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Tuple

from templatr.utils.geometry import percent_to_pixels, pixels_to_percent

# Float slack for the crop containment check; percent math accumulates error
_CROP_TOLERANCE = 1e-9


class Size(BaseModel):
    """Width/height pair in a single unit (pixels or inches)."""
    model_config = ConfigDict(frozen=True)

    width: float = Field(gt=0)
    height: float = Field(gt=0)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def as_tuple(self) -> Tuple[float, float]:
        return self.width, self.height


class ContainerContext(Size):
    """
    Pixel size of the editing surface a Placement was produced in.

    A Placement only means something next to the container it came from;
    rendering it at another resolution goes through explicit rescaling.
    """


class PixelRect(BaseModel):
    """Axis-aligned rectangle with every value in the same unit."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


class Placement(BaseModel):
    """
    Where the foreground sits inside its container.

    Position is absolute pixels of the container's on-screen rendering while
    size is a percentage of the container. The field names keep the two unit
    systems apart; the aliases match the editor's wire format.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    x_px: float = Field(alias="x")
    y_px: float = Field(alias="y")
    width_pct: float = Field(gt=0, alias="width")
    height_pct: float = Field(gt=0, alias="height")

    def to_pixel_rect(self, container: ContainerContext) -> PixelRect:
        """Resolve the percentage size against the container."""
        return PixelRect(
            x=self.x_px,
            y=self.y_px,
            width=percent_to_pixels(self.width_pct, container.width),
            height=percent_to_pixels(self.height_pct, container.height),
        )

    @classmethod
    def from_pixel_rect(cls, rect: PixelRect, container: ContainerContext) -> "Placement":
        return cls(
            x_px=rect.x,
            y_px=rect.y,
            width_pct=pixels_to_percent(rect.width, container.width),
            height_pct=pixels_to_percent(rect.height, container.height),
        )

    def relative_box(self, container: ContainerContext) -> Tuple[float, float, float, float]:
        """All four values as fractions of the container (0..1)."""
        return (
            self.x_px / container.width,
            self.y_px / container.height,
            self.width_pct / 100,
            self.height_pct / 100,
        )


class CropRegion(BaseModel):
    """
    Visible part of the foreground, in percent of its natural size.

    x/y/width/height are each in [0, 100] and the box never extends past the
    right or bottom edge of the image.
    """
    model_config = ConfigDict(frozen=True)

    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)
    width: float = Field(gt=0, le=100)
    height: float = Field(gt=0, le=100)

    @model_validator(mode="after")
    def _check_containment(self) -> "CropRegion":
        if self.x + self.width > 100 + _CROP_TOLERANCE:
            raise ValueError(f"crop x + width exceeds 100 ({self.x} + {self.width})")
        if self.y + self.height > 100 + _CROP_TOLERANCE:
            raise ValueError(f"crop y + height exceeds 100 ({self.y} + {self.height})")
        return self

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def source_box(self, natural: Size) -> PixelRect:
        """Crop rectangle in the foreground's natural pixel coordinates."""
        return PixelRect(
            x=(self.x / 100) * natural.width,
            y=(self.y / 100) * natural.height,
            width=(self.width / 100) * natural.width,
            height=(self.height / 100) * natural.height,
        )

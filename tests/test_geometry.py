import pytest
from pydantic import ValidationError

from templatr.exceptions import DegenerateGeometryError
from templatr.models.geometry import ContainerContext, CropRegion, PixelRect, Placement, Size
from templatr.utils.geometry import clamp, percent_to_pixels, pixels_to_percent, scale_aspect_fit


# ---------------------------------------------------------------------------
# Unit conversions
# ---------------------------------------------------------------------------

def test_pixels_to_percent_and_back():
    assert pixels_to_percent(560, 800) == pytest.approx(70.0)
    assert percent_to_pixels(70.0, 800) == pytest.approx(560.0)
    assert percent_to_pixels(pixels_to_percent(123.4, 450), 450) == pytest.approx(123.4)


def test_zero_container_is_rejected():
    with pytest.raises(DegenerateGeometryError):
        pixels_to_percent(10, 0)
    with pytest.raises(DegenerateGeometryError):
        percent_to_pixels(10, 0)


def test_clamp_lower_bound_wins_when_bounds_cross():
    assert clamp(5, 0, 10) == 5
    assert clamp(-1, 0, 10) == 0
    assert clamp(11, 0, 10) == 10
    assert clamp(3, 8, 4) == 8


# ---------------------------------------------------------------------------
# scale_aspect_fit
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("natural,box", [
    ((1000, 500), (560, 360)),
    ((300, 500), (560, 360)),
    ((1920, 1080), (400, 400)),
    ((50, 2000), (800, 450)),
    ((4000, 10), (100, 100)),
    ((333, 777), (12.5, 99.1)),
])
def test_scale_aspect_fit_preserves_ratio_and_fits_tightly(natural, box):
    width, height = scale_aspect_fit(*natural, *box)

    assert width / height == pytest.approx(natural[0] / natural[1])
    assert width <= box[0] + 1e-9
    assert height <= box[1] + 1e-9
    assert width == pytest.approx(box[0]) or height == pytest.approx(box[1])


def test_scale_aspect_fit_tries_width_first():
    assert scale_aspect_fit(1000, 500, 560, 360) == (560, 280)


def test_scale_aspect_fit_falls_back_to_height():
    width, height = scale_aspect_fit(300, 500, 300, 360)
    assert height == 360
    assert width == pytest.approx(216)


def test_scale_aspect_fit_rejects_empty_source():
    with pytest.raises(DegenerateGeometryError):
        scale_aspect_fit(0, 100, 10, 10)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

def test_placement_pixel_round_trip():
    container = ContainerContext(width=800, height=450)
    rect = PixelRect(x=16, y=16, width=560, height=280)

    placement = Placement.from_pixel_rect(rect, container)

    assert placement.x_px == 16
    assert placement.width_pct == pytest.approx(70.0)
    assert placement.height_pct == pytest.approx(280 / 450 * 100)
    back = placement.to_pixel_rect(container)
    assert back.width == pytest.approx(560)
    assert back.height == pytest.approx(280)
    assert back.right == pytest.approx(576)


def test_placement_accepts_editor_wire_format():
    placement = Placement.model_validate({"x": 20, "y": 30, "width": 50, "height": 40})

    assert (placement.x_px, placement.y_px) == (20, 30)
    assert placement.model_dump(by_alias=True) == {"x": 20, "y": 30, "width": 50, "height": 40}


def test_placement_requires_positive_size():
    with pytest.raises(ValidationError):
        Placement(x_px=0, y_px=0, width_pct=0, height_pct=10)


def test_placement_relative_box():
    container = ContainerContext(width=800, height=400)
    placement = Placement(x_px=80, y_px=40, width_pct=50, height_pct=25)
    assert placement.relative_box(container) == (0.1, 0.1, 0.5, 0.25)


def test_placement_is_immutable():
    placement = Placement(x_px=0, y_px=0, width_pct=10, height_pct=10)
    with pytest.raises(ValidationError):
        placement.x_px = 5


def test_container_must_have_area():
    with pytest.raises(ValidationError):
        ContainerContext(width=0, height=450)


def test_size_aspect_ratio():
    assert Size(width=1000, height=500).aspect_ratio == 2.0


def test_crop_region_containment():
    CropRegion(x=40, y=40, width=60, height=60)
    with pytest.raises(ValidationError):
        CropRegion(x=50, y=0, width=60, height=10)
    with pytest.raises(ValidationError):
        CropRegion(x=0, y=41, width=10, height=60)


def test_crop_source_box_in_natural_pixels():
    crop = CropRegion(x=25, y=10, width=50, height=80)
    box = crop.source_box(Size(width=200, height=100))
    assert (box.x, box.y, box.width, box.height) == (50, 10, 100, 80)

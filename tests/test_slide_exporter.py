from io import BytesIO

import pytest
from PIL import Image
from pptx import Presentation
from pptx.util import Inches

from templatr.models.geometry import Size
from templatr.models.template import ComposablePair
from templatr.services.image_source import decode_image_bytes
from templatr.services.slide_exporter import (
    SlideCanvas,
    SlideDeckBuilder,
    compute_slide_objects,
    export_to_slide_objects,
)


def pair(name, background, foreground):
    return ComposablePair(name=name, background_ref=background, foreground_ref=foreground)


# ---------------------------------------------------------------------------
# Slide geometry
# ---------------------------------------------------------------------------

def test_background_covers_whole_slide():
    objects = compute_slide_objects("bg.png", "wide.png", Size(width=1000, height=500))

    bg = objects.background
    assert (bg.x, bg.y, bg.width, bg.height) == (0, 0, 10, 7.5)
    assert bg.image_ref == "bg.png"


def test_wide_question_is_width_constrained():
    fg = compute_slide_objects("bg.png", "wide.png", Size(width=1000, height=500)).foreground

    assert fg.x == pytest.approx(1 / 6)
    assert fg.y == pytest.approx(1 / 6)
    assert fg.width == pytest.approx(7.0)
    assert fg.height == pytest.approx(3.5)


def test_small_question_keeps_natural_size_in_inches():
    fg = compute_slide_objects("bg.png", "small.png", Size(width=96, height=48)).foreground

    assert fg.width == pytest.approx(1.0)
    assert fg.height == pytest.approx(0.5)


def test_tall_question_is_height_constrained():
    fg = compute_slide_objects("bg.png", "tall.png", Size(width=300, height=1000)).foreground

    assert fg.height == pytest.approx(6.0)
    assert fg.width == pytest.approx(1.8)


def test_missing_question_size_gives_background_only():
    objects = compute_slide_objects("bg.png", "gone.png", None)

    assert objects.foreground is None
    assert objects.background.width == 10


def test_custom_canvas():
    canvas = SlideCanvas(width_in=13.333, height_in=7.5)
    fg = compute_slide_objects("bg.png", "wide.png", Size(width=1000, height=500), canvas).foreground

    assert fg.width == pytest.approx(13.333 * 0.7)


def test_export_to_slide_objects_probes_question(fake_source):
    objects = export_to_slide_objects("bg.png", "small.png", fake_source)
    assert objects.foreground.width == pytest.approx(1.0)

    objects = export_to_slide_objects("bg.png", "broken.png", fake_source)
    assert objects.foreground is None


# ---------------------------------------------------------------------------
# Deck building
# ---------------------------------------------------------------------------

def test_deck_has_independent_pictures(fake_source):
    result = SlideDeckBuilder(fake_source).build([pair("Wide", "bg.png", "wide.png")])

    prs = Presentation(BytesIO(result.data))
    assert prs.slide_width == Inches(10)
    assert prs.slide_height == Inches(7.5)

    shapes = list(prs.slides[0].shapes)
    assert len(shapes) == 2
    background, question = shapes
    assert (background.left, background.top) == (0, 0)
    assert (background.width, background.height) == (Inches(10), Inches(7.5))
    assert question.left == pytest.approx(Inches(1 / 6), abs=1)
    assert question.width == pytest.approx(Inches(7), abs=1)
    assert question.height == pytest.approx(Inches(3.5), abs=1)


def test_deck_keeps_going_past_failures(fake_source):
    pairs = [
        pair("Good", "bg.png", "wide.png"),
        pair("No question", "bg.png", "broken.png"),
        pair("No background", "missing.png", "wide.png"),
        pair("Tall", "bg-large.png", "tall.png"),
    ]

    result = SlideDeckBuilder(fake_source).build(pairs)

    assert result.slide_count == 3
    assert result.skipped == ["No background"]
    assert result.background_only == ["No question"]

    prs = Presentation(BytesIO(result.data))
    assert [len(slide.shapes) for slide in prs.slides] == [2, 1, 2]


def test_background_that_cannot_be_embedded_skips_only_its_slide(fake_source, monkeypatch):
    fake_source.images["bg-corrupt.png"] = fake_source.images["bg.png"]
    add_picture = SlideDeckBuilder._add_picture

    def failing_add_picture(slide, image, obj):
        if obj.image_ref == "bg-corrupt.png":
            raise ValueError("unsupported image")
        add_picture(slide, image, obj)

    monkeypatch.setattr(SlideDeckBuilder, "_add_picture", staticmethod(failing_add_picture))
    pairs = [
        pair("First", "bg.png", "wide.png"),
        pair("Corrupt", "bg-corrupt.png", "wide.png"),
        pair("Last", "bg.png", "small.png"),
    ]

    result = SlideDeckBuilder(fake_source).build(pairs)

    assert result.slide_count == 2
    assert result.skipped == ["Corrupt"]
    prs = Presentation(BytesIO(result.data))
    assert [len(slide.shapes) for slide in prs.slides] == [2, 2]


def test_empty_batch_still_produces_a_deck(fake_source):
    result = SlideDeckBuilder(fake_source).build([])

    assert result.slide_count == 0
    assert len(Presentation(BytesIO(result.data)).slides) == 0


def test_unembeddable_format_is_converted_to_png():
    buffer = BytesIO()
    Image.new("RGB", (20, 10), (1, 2, 3)).save(buffer, format="PPM")

    decoded = decode_image_bytes("image.ppm", buffer.getvalue())

    assert decoded.format == "PPM"
    assert decoded.embeddable_bytes().startswith(b"\x89PNG")


def test_embeddable_format_is_passed_through(fake_source):
    decoded = fake_source.load("bg-large.png")

    assert decoded.embeddable_bytes() == fake_source.images["bg-large.png"]

"""
Editable slide export using python-pptx.

Each template becomes one slide on a fixed 10in x 7.5in canvas with two
separate pictures: the background stretched over the whole slide and the
question image placed by the auto-fit layout (in inches, padding converted
at 96 DPI). The interactive placement is not used here, matching the
thumbnail renderer.
"""
import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Iterable, List, Optional

from pptx import Presentation
from pptx.util import Inches

from templatr.config.settings import SETTINGS
from templatr.exceptions import ImageDecodeError
from templatr.models.geometry import Size
from templatr.models.template import ComposablePair, SlideObject, SlideObjects
from templatr.services.auto_fit import DEFAULT_CONSTRAINTS, LayoutConstraints, compute_auto_fit_box
from templatr.services.image_source import DecodedImage, ImageSource

logger = logging.getLogger(__name__)

BLANK_LAYOUT_INDEX = 6

PPTX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


@dataclass(frozen=True)
class SlideCanvas:
    """Physical slide size; fixed 4:3 regardless of the background's ratio."""
    width_in: float = SETTINGS.slide_width_in
    height_in: float = SETTINGS.slide_height_in
    dpi: float = SETTINGS.dpi


DEFAULT_CANVAS = SlideCanvas()


def compute_slide_objects(
    background_ref: str,
    foreground_ref: str,
    foreground_natural_px: Optional[Size],
    canvas: SlideCanvas = DEFAULT_CANVAS,
    constraints: LayoutConstraints = DEFAULT_CONSTRAINTS,
) -> SlideObjects:
    """
    Slide geometry for one template, in inches.

    Without a foreground size only the background object is produced.
    """
    background = SlideObject(
        image_ref=background_ref, x=0.0, y=0.0, width=canvas.width_in, height=canvas.height_in
    )
    if foreground_natural_px is None:
        return SlideObjects(background=background)

    natural_in = (
        foreground_natural_px.width / canvas.dpi,
        foreground_natural_px.height / canvas.dpi,
    )
    box = compute_auto_fit_box(
        natural_in,
        (canvas.width_in, canvas.height_in),
        constraints.in_inches(canvas.dpi),
    )
    foreground = SlideObject(
        image_ref=foreground_ref, x=box.x, y=box.y, width=box.width, height=box.height
    )
    return SlideObjects(background=background, foreground=foreground)


def export_to_slide_objects(
    background_ref: str,
    foreground_ref: str,
    image_source: ImageSource,
    canvas: SlideCanvas = DEFAULT_CANVAS,
) -> SlideObjects:
    """Slide objects for one template; background only if the question image can't be sized."""
    try:
        natural = image_source.probe_size(foreground_ref)
    except ImageDecodeError as e:
        logger.warning(f"Question image unavailable, exporting background only: {e}")
        natural = None
    return compute_slide_objects(background_ref, foreground_ref, natural, canvas)


@dataclass
class DeckExportResult:
    data: bytes
    slide_count: int
    skipped: List[str] = field(default_factory=list)
    background_only: List[str] = field(default_factory=list)


class SlideDeckBuilder:
    """
    Builds a multi-slide deck, one slide per composable pair.

    Templates are processed sequentially. A template whose background cannot
    be loaded is skipped; one whose question image fails keeps its
    background-only slide. Neither stops the batch.
    """

    def __init__(
        self,
        image_source: ImageSource,
        canvas: SlideCanvas = DEFAULT_CANVAS,
        constraints: LayoutConstraints = DEFAULT_CONSTRAINTS,
    ):
        self.image_source = image_source
        self.canvas = canvas
        self.constraints = constraints

    def _new_presentation(self):
        prs = Presentation()
        prs.slide_width = Inches(self.canvas.width_in)
        prs.slide_height = Inches(self.canvas.height_in)
        return prs

    def _load_foreground(self, pair: ComposablePair) -> Optional[DecodedImage]:
        try:
            return self.image_source.load(pair.foreground_ref)
        except ImageDecodeError as e:
            logger.error(f"Error loading question image for slide '{pair.name}': {e}")
            return None

    @staticmethod
    def _add_picture(slide, image: DecodedImage, obj: SlideObject) -> None:
        slide.shapes.add_picture(
            BytesIO(image.embeddable_bytes()),
            Inches(obj.x),
            Inches(obj.y),
            Inches(obj.width),
            Inches(obj.height),
        )

    @staticmethod
    def _drop_last_slide(prs) -> None:
        # python-pptx has no public slide removal
        slide_ids = prs.slides._sldIdLst
        last = slide_ids[-1]
        slide_ids.remove(last)
        prs.part.drop_rel(last.rId)

    def build(self, pairs: Iterable[ComposablePair]) -> DeckExportResult:
        prs = self._new_presentation()
        layout = prs.slide_layouts[BLANK_LAYOUT_INDEX]
        skipped: List[str] = []
        background_only: List[str] = []

        for index, pair in enumerate(pairs):
            try:
                background = self.image_source.load(pair.background_ref)
            except ImageDecodeError as e:
                logger.error(f"Skipping slide {index + 1} ('{pair.name}'): {e}")
                skipped.append(pair.name)
                continue

            foreground = self._load_foreground(pair)
            objects = compute_slide_objects(
                pair.background_ref,
                pair.foreground_ref,
                foreground.natural_size if foreground else None,
                self.canvas,
                self.constraints,
            )

            slide = prs.slides.add_slide(layout)
            try:
                self._add_picture(slide, background, objects.background)
            except Exception as e:
                logger.error(f"Skipping slide {index + 1} ('{pair.name}'), background not embeddable: {e}")
                self._drop_last_slide(prs)
                skipped.append(pair.name)
                continue

            if foreground is None or objects.foreground is None:
                background_only.append(pair.name)
                continue
            try:
                self._add_picture(slide, foreground, objects.foreground)
            except Exception as e:
                logger.error(f"Error adding question image to slide '{pair.name}': {e}")
                background_only.append(pair.name)

        buffer = BytesIO()
        prs.save(buffer)
        slide_count = len(prs.slides)
        logger.info(
            f"Exported deck with {slide_count} slides "
            f"({len(skipped)} skipped, {len(background_only)} background only)"
        )
        return DeckExportResult(
            data=buffer.getvalue(),
            slide_count=slide_count,
            skipped=skipped,
            background_only=background_only,
        )

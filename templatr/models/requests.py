from pydantic import BaseModel, Field, model_validator
from typing import List, Literal, Optional

from templatr.models.geometry import ContainerContext, CropRegion, Placement, Size
from templatr.models.template import ComposablePair, TemplateRequest, check_saved_edit


class AutoFitRequest(BaseModel):
    natural: Size
    container: Size
    coverage_x: float = Field(default=0.7, gt=0, le=1)
    coverage_y: float = Field(default=0.8, gt=0, le=1)
    padding: float = Field(default=16, ge=0)


class ThumbnailRequest(BaseModel):
    background_url: str
    question_url: str


class DownloadRequest(BaseModel):
    """Full-resolution download; placement/container/crop come from a saved edit."""
    background_url: str
    question_url: str
    name: str = "template"
    placement: Optional[Placement] = None
    container: Optional[ContainerContext] = None
    crop: Optional[CropRegion] = None
    format: Literal["png", "jpeg"] = "png"

    @model_validator(mode="after")
    def _check_edit_complete(self) -> "DownloadRequest":
        check_saved_edit(self.placement, self.container, self.crop)
        return self

    def to_pair(self) -> ComposablePair:
        return ComposablePair(
            name=self.name,
            background_ref=self.background_url,
            foreground_ref=self.question_url,
            placement=self.placement,
            container=self.container,
            crop=self.crop,
        )


class SlideRequest(BaseModel):
    background_url: str
    question_url: str
    name: str = "Slide"


class DeckExportRequest(BaseModel):
    """Slides are exported in order: explicit slides first, then expanded templates."""
    slides: List[SlideRequest] = Field(default_factory=list)
    templates: List[TemplateRequest] = Field(default_factory=list)
    file_name: Optional[str] = None

    def to_pairs(self) -> List[ComposablePair]:
        pairs = [
            ComposablePair(name=s.name, background_ref=s.background_url, foreground_ref=s.question_url)
            for s in self.slides
        ]
        for template in self.templates:
            pairs.extend(template.expand())
        return pairs

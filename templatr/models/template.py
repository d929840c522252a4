from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Literal, Optional

from templatr.exceptions import TemplateCardinalityError
from templatr.models.geometry import ContainerContext, CropRegion, Placement

TemplateType = Literal["standalone", "folder"]

MAX_FOLDER_QUESTIONS = 50


def check_saved_edit(
    placement: Optional[Placement],
    container: Optional[ContainerContext],
    crop: Optional[CropRegion],
) -> None:
    """A placement needs the container it was made in; a crop needs a placement."""
    if placement is not None and container is None:
        raise ValueError("placement requires the container it was edited in")
    if crop is not None and placement is None:
        raise ValueError("crop requires a saved placement")


class ComposablePair(BaseModel):
    """
    Unit of work for the compositor and the slide exporter.

    placement/container/crop stay empty until the user saves an edit; the
    renderers fall back to the auto-fit layout while they are unset.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    background_ref: str
    foreground_ref: str
    placement: Optional[Placement] = None
    container: Optional[ContainerContext] = None
    crop: Optional[CropRegion] = None

    @model_validator(mode="after")
    def _check_edit_complete(self) -> "ComposablePair":
        check_saved_edit(self.placement, self.container, self.crop)
        return self

    def with_edit(
        self,
        placement: Placement,
        container: ContainerContext,
        crop: Optional[CropRegion] = None,
    ) -> "ComposablePair":
        return ComposablePair(
            name=self.name,
            background_ref=self.background_ref,
            foreground_ref=self.foreground_ref,
            placement=placement,
            container=container,
            crop=crop,
        )


class TemplateRequest(BaseModel):
    """A background plus the question images uploaded against it."""
    name: str = Field(min_length=1)
    background_ref: str
    question_refs: List[str]
    template_type: TemplateType = "standalone"

    def expand(self) -> List[ComposablePair]:
        """
        One composable pair per question image.

        standalone takes exactly one image; folder takes 1-50 and numbers
        the generated names when there is more than one.
        """
        count = len(self.question_refs)
        if count == 0:
            raise TemplateCardinalityError("At least one question image is required")
        if self.template_type == "standalone" and count > 1:
            raise TemplateCardinalityError(
                "Standalone templates can have only one question image",
                context={"count": count},
            )
        if self.template_type == "folder" and count > MAX_FOLDER_QUESTIONS:
            raise TemplateCardinalityError(
                f"Folder templates can have maximum {MAX_FOLDER_QUESTIONS} question images",
                context={"count": count},
            )

        base_name = self.name.strip()
        pairs = []
        for i, ref in enumerate(self.question_refs):
            if self.template_type == "folder" and count > 1:
                name = f"{base_name} - Question {i + 1}"
            else:
                name = base_name
            pairs.append(ComposablePair(name=name, background_ref=self.background_ref, foreground_ref=ref))
        return pairs


class SlideObject(BaseModel):
    """An image placed on the slide canvas; all values in inches."""
    model_config = ConfigDict(frozen=True)

    image_ref: str
    x: float
    y: float
    width: float
    height: float


class SlideObjects(BaseModel):
    """Background layer plus the independently editable question layer."""
    model_config = ConfigDict(frozen=True)

    background: SlideObject
    foreground: Optional[SlideObject] = None

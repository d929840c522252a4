"""
Single-user editing session over one Placement and an optional CropRegion.

States: VIEWING -> EDITING -> SAVED (and back to EDITING for further edits).
Reset returns to VIEWING from any state.
Inside EDITING at most one gesture is active: move, corner resize, crop move
or crop resize. Every transition replaces the Placement/CropRegion value.

All pointer coordinates are pixels relative to the container's top-left.
Out-of-range pointers are clamped; calls that do not fit the current state
are ignored and return False.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from templatr.config.settings import SETTINGS
from templatr.models.geometry import ContainerContext, CropRegion, Placement, Size
from templatr.services.auto_fit import compute_auto_fit_placement
from templatr.services.crop_editor import default_crop_region, move_crop, resize_crop
from templatr.services.resize_handles import ResizeHandle, resize_rect
from templatr.utils.geometry import clamp

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SAVED = "saved"


class GestureKind(str, Enum):
    MOVE = "move"
    RESIZE = "resize"
    CROP_MOVE = "crop_move"
    CROP_RESIZE = "crop_resize"


@dataclass(frozen=True)
class Gesture:
    kind: GestureKind
    handle: Optional[ResizeHandle] = None
    # Pointer minus the dragged box's top-left at pointer-down
    offset_x: float = 0.0
    offset_y: float = 0.0


@dataclass(frozen=True)
class CommittedEdit:
    placement: Placement
    crop: Optional[CropRegion] = None


class EditableSession:
    """Interactive placement editor for one question image."""

    def __init__(
        self,
        initial_placement: Placement,
        container: ContainerContext,
        initial_crop: Optional[CropRegion] = None,
        default_placement: Optional[Placement] = None,
        min_size_px: float = SETTINGS.min_placement_px,
        min_crop_pct: float = SETTINGS.min_crop_pct,
    ):
        self.container = container
        self.default_placement = default_placement or initial_placement
        self.min_size_px = min_size_px
        self.min_crop_pct = min_crop_pct

        self._state = SessionState.VIEWING
        self._placement = initial_placement
        self._crop = initial_crop
        self._cropping = False
        self._gesture: Optional[Gesture] = None
        self._committed = CommittedEdit(initial_placement, initial_crop)

    @classmethod
    def for_images(
        cls,
        natural_size: Union[Size, Tuple[float, float]],
        container: Optional[ContainerContext] = None,
        **kwargs,
    ) -> "EditableSession":
        """
        Session whose starting and reset layout is the auto-fit default.

        The container defaults to the standard editor surface.
        """
        if container is None:
            width, height = SETTINGS.editor_container
            container = ContainerContext(width=width, height=height)
        default = compute_auto_fit_placement(natural_size, container)
        return cls(default, container, default_placement=default, **kwargs)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def placement(self) -> Placement:
        return self._placement

    @property
    def crop(self) -> Optional[CropRegion]:
        return self._crop

    @property
    def gesture(self) -> Optional[Gesture]:
        return self._gesture

    @property
    def is_cropping(self) -> bool:
        return self._cropping

    @property
    def committed(self) -> CommittedEdit:
        return self._committed

    @property
    def has_unsaved_changes(self) -> bool:
        return (self._placement, self._crop) != (self._committed.placement, self._committed.crop)

    @property
    def can_save(self) -> bool:
        return self._state is SessionState.EDITING and self.has_unsaved_changes

    # ------------------------------------------------------------------
    # Mode transitions
    # ------------------------------------------------------------------

    def start_editing(self) -> bool:
        if self._state is SessionState.EDITING:
            return False
        self._state = SessionState.EDITING
        self._cropping = False
        self._gesture = None
        logger.debug("Editing started")
        return True

    def exit_editing(self) -> bool:
        """Leave EDITING without committing; the current values stay on screen."""
        if self._state is not SessionState.EDITING:
            return False
        self._state = SessionState.VIEWING
        self._cropping = False
        self._gesture = None
        return True

    def toggle_crop_mode(self) -> bool:
        """
        Switch between resize handles and the crop box.

        Entering crop mode starts from the existing crop, or the centered
        default when there is none. Leaving keeps the crop.
        """
        if self._state is not SessionState.EDITING or self._gesture is not None:
            return False
        self._cropping = not self._cropping
        if self._cropping and self._crop is None:
            self._crop = default_crop_region()
        logger.debug(f"Crop mode {'on' if self._cropping else 'off'}")
        return True

    def clear_crop(self) -> bool:
        if self._state is not SessionState.EDITING or self._gesture is not None or self._crop is None:
            return False
        self._crop = None
        self._cropping = False
        return True

    def reset(self) -> None:
        """
        Back to the auto-fit default with no crop, returning to VIEWING.

        The reset values are not committed; editing again and saving does.
        """
        self._placement = self.default_placement
        self._crop = None
        self._cropping = False
        self._gesture = None
        self._state = SessionState.VIEWING
        logger.debug("Placement reset to default")

    def save(self) -> Optional[CommittedEdit]:
        """Commit the current values. No-op unless editing with unsaved changes."""
        if not self.can_save:
            return None
        self._committed = CommittedEdit(self._placement, self._crop)
        self._state = SessionState.SAVED
        self._cropping = False
        self._gesture = None
        logger.info(
            f"Saved placement ({self._placement.x_px:.0f}, {self._placement.y_px:.0f}) "
            f"{self._placement.width_pct:.1f}% x {self._placement.height_pct:.1f}%"
            f"{' with crop' if self._crop else ''}"
        )
        return self._committed

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def _can_begin(self) -> bool:
        return self._state is SessionState.EDITING and self._gesture is None

    def begin_move(self, pointer_x: float, pointer_y: float) -> bool:
        if not self._can_begin():
            return False
        self._gesture = Gesture(
            GestureKind.MOVE,
            offset_x=pointer_x - self._placement.x_px,
            offset_y=pointer_y - self._placement.y_px,
        )
        return True

    def begin_resize(self, handle: Union[ResizeHandle, str]) -> bool:
        if not self._can_begin() or self._cropping:
            return False
        self._gesture = Gesture(GestureKind.RESIZE, handle=ResizeHandle(handle))
        return True

    def begin_crop_move(self, pointer_x: float, pointer_y: float) -> bool:
        if not self._can_begin() or not self._cropping or self._crop is None:
            return False
        px, py = self._pointer_in_crop_space(pointer_x, pointer_y)
        self._gesture = Gesture(
            GestureKind.CROP_MOVE,
            offset_x=px - self._crop.x,
            offset_y=py - self._crop.y,
        )
        return True

    def begin_crop_resize(self, handle: Union[ResizeHandle, str]) -> bool:
        if not self._can_begin() or not self._cropping or self._crop is None:
            return False
        self._gesture = Gesture(GestureKind.CROP_RESIZE, handle=ResizeHandle(handle))
        return True

    def pointer_move(self, pointer_x: float, pointer_y: float) -> bool:
        """Apply the active gesture. Returns True when a value changed."""
        gesture = self._gesture
        if gesture is None:
            return False

        placement, crop = self._placement, self._crop

        if gesture.kind is GestureKind.MOVE:
            placement = self._moved(pointer_x - gesture.offset_x, pointer_y - gesture.offset_y)
        elif gesture.kind is GestureKind.RESIZE:
            rect = resize_rect(
                gesture.handle,
                self._placement.to_pixel_rect(self.container),
                pointer_x,
                pointer_y,
                self.container.width,
                self.container.height,
                self.min_size_px,
                self.min_size_px,
            )
            placement = Placement.from_pixel_rect(rect, self.container)
        elif gesture.kind is GestureKind.CROP_MOVE:
            px, py = self._pointer_in_crop_space(pointer_x, pointer_y)
            crop = move_crop(self._crop, px - gesture.offset_x, py - gesture.offset_y)
        else:
            px, py = self._pointer_in_crop_space(pointer_x, pointer_y)
            crop = resize_crop(self._crop, gesture.handle, px, py, self.min_crop_pct)

        changed = (placement, crop) != (self._placement, self._crop)
        self._placement, self._crop = placement, crop
        return changed

    def pointer_up(self) -> None:
        self._gesture = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _moved(self, x: float, y: float) -> Placement:
        rect = self._placement.to_pixel_rect(self.container)
        return self._placement.model_copy(update={
            "x_px": clamp(x, 0.0, self.container.width - rect.width),
            "y_px": clamp(y, 0.0, self.container.height - rect.height),
        })

    def _pointer_in_crop_space(self, pointer_x: float, pointer_y: float) -> Tuple[float, float]:
        """Container pointer -> percent of the foreground's rendered box."""
        box = self._placement.to_pixel_rect(self.container)
        return (
            (pointer_x - box.x) / box.width * 100,
            (pointer_y - box.y) / box.height * 100,
        )


def create_editable_session(
    initial_placement: Placement,
    container: ContainerContext,
    initial_crop: Optional[CropRegion] = None,
    default_placement: Optional[Placement] = None,
) -> EditableSession:
    return EditableSession(initial_placement, container, initial_crop, default_placement)

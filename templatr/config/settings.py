"""
Layout and rendering settings.

Values come from the environment (optionally a .env file) and fall back to
the constants the editor, thumbnail and slide renderers share.
"""
import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class LayoutSettings:
    # Auto-fit coverage of the container and top-left inset
    coverage_x: float = 0.7
    coverage_y: float = 0.8
    padding_px: float = 16.0
    dpi: float = 96.0

    # Interactive editor floors and defaults
    min_placement_px: float = 50.0
    min_crop_pct: float = 10.0
    editor_container: Tuple[int, int] = (800, 450)

    # Renderers
    thumbnail_size: Tuple[int, int] = (400, 225)
    thumbnail_jpeg_quality: int = 80
    slide_width_in: float = 10.0
    slide_height_in: float = 7.5

    thumbnail_cache_size: int = 256
    image_fetch_timeout: float = 10.0


def load_layout_settings() -> LayoutSettings:
    """Build settings from TEMPLATR_* environment variables"""
    return LayoutSettings(
        coverage_x=_env_float("TEMPLATR_COVERAGE_X", 0.7),
        coverage_y=_env_float("TEMPLATR_COVERAGE_Y", 0.8),
        padding_px=_env_float("TEMPLATR_PADDING_PX", 16.0),
        thumbnail_cache_size=_env_int("TEMPLATR_THUMBNAIL_CACHE_SIZE", 256),
        image_fetch_timeout=_env_float("TEMPLATR_IMAGE_FETCH_TIMEOUT", 10.0),
    )


SETTINGS = load_layout_settings()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = _env_int("PORT", 8000)

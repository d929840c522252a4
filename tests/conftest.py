"""Shared fixtures: in-memory images and an image source that never touches the network."""

from io import BytesIO
from typing import Dict, List, Tuple

import pytest
from PIL import Image

from templatr.exceptions import ImageDecodeError
from templatr.services.image_source import ImageSource

BLUE = (0, 0, 255)
RED = (255, 0, 0)
GREEN = (0, 255, 0)


def make_image_bytes(size: Tuple[int, int], color=RED, fmt: str = "PNG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_split_image_bytes(size: Tuple[int, int], left=RED, right=GREEN) -> bytes:
    """Left half one color, right half another."""
    image = Image.new("RGB", size, left)
    image.paste(right, (size[0] // 2, 0, size[0], size[1]))
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def assert_color(pixel, expected, tolerance: int = 4):
    assert all(abs(a - b) <= tolerance for a, b in zip(pixel[:3], expected)), f"{pixel} != {expected}"


class FakeImageSource(ImageSource):
    """Serves images from a dict; unknown refs fail like a 404."""

    def __init__(self, images: Dict[str, bytes]):
        super().__init__()
        self.images = dict(images)
        self.fetched: List[str] = []

    def fetch_bytes(self, ref: str) -> bytes:
        self.fetched.append(ref)
        if ref not in self.images:
            raise ImageDecodeError(ref, "Image could not be fetched")
        return self.images[ref]


@pytest.fixture
def fake_source():
    return FakeImageSource({
        "bg.png": make_image_bytes((800, 450), BLUE),
        "bg-large.png": make_image_bytes((1600, 900), BLUE, fmt="JPEG"),
        "wide.png": make_image_bytes((1000, 500), RED),
        "tall.png": make_image_bytes((300, 500), GREEN),
        "small.png": make_image_bytes((96, 48), RED),
        "split.png": make_split_image_bytes((200, 100)),
        "broken.png": b"definitely not an image",
    })

"""
Image loading for the renderers.

An image reference is an http(s) URL, a base64 data URL or a local file
path. Every failure to fetch or decode becomes ImageDecodeError; decode
failures are treated as permanent, so there are no retries.
"""
import base64
import binascii
import logging
import threading
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

import httpx
from PIL import ExifTags, Image, ImageOps, UnidentifiedImageError

from templatr.config.settings import SETTINGS
from templatr.exceptions import ImageDecodeError
from templatr.models.geometry import Size

logger = logging.getLogger(__name__)

# Formats python-pptx can embed as-is
PPTX_EMBEDDABLE_FORMATS = {"PNG", "JPEG", "GIF", "BMP", "TIFF"}


@dataclass
class DecodedImage:
    """A decoded image, upright per its EXIF orientation, with the bytes it came from."""
    ref: str
    image: Image.Image
    data: bytes
    source_format: Optional[str] = None
    # True when EXIF orientation rotated or flipped the pixels
    reoriented: bool = False

    @property
    def natural_width(self) -> int:
        return self.image.width

    @property
    def natural_height(self) -> int:
        return self.image.height

    @property
    def natural_size(self) -> Size:
        return Size(width=self.natural_width, height=self.natural_height)

    @property
    def format(self) -> Optional[str]:
        return self.source_format or self.image.format

    def embeddable_bytes(self) -> bytes:
        """Original bytes when python-pptx can embed them as shown, PNG otherwise."""
        if self.format in PPTX_EMBEDDABLE_FORMATS and not self.reoriented:
            return self.data
        buffer = BytesIO()
        image = self.image
        if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            image = image.convert("RGBA")
        image.save(buffer, format="PNG")
        return buffer.getvalue()


def _truncate_ref(ref: str) -> str:
    """Keep base64 payloads out of log lines."""
    if ref.startswith("data:"):
        return ref[:50] + "...[truncated]"
    return ref


def decode_image_bytes(ref: str, data: bytes) -> DecodedImage:
    """
    Decode raw bytes with Pillow, forcing the pixel data to load.

    EXIF orientation is applied so the natural size matches what a browser
    displays.
    """
    try:
        image = Image.open(BytesIO(data))
        image.load()
        source_format = image.format
        orientation = image.getexif().get(ExifTags.Base.Orientation, 1)
        reoriented = orientation not in (None, 1)
        if reoriented:
            image = ImageOps.exif_transpose(image)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(_truncate_ref(ref), cause=e) from e
    return DecodedImage(ref=ref, image=image, data=data, source_format=source_format, reoriented=reoriented)


class ImageSource:
    """Fetches and decodes images by reference."""

    def __init__(self, timeout: float = SETTINGS.image_fetch_timeout, client: Optional[httpx.Client] = None):
        self.timeout = timeout
        self._client = client
        # Renders call in from worker threads; one pooled client is shared
        self._client_lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(timeout=self.timeout, follow_redirects=True)
            return self._client

    def close(self) -> None:
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def fetch_bytes(self, ref: str) -> bytes:
        if ref.startswith("data:"):
            return self._read_data_url(ref)
        if ref.startswith(("http://", "https://")):
            return self._read_url(ref)
        return self._read_path(ref)

    def load(self, ref: str) -> DecodedImage:
        """Fetch and decode an image; raises ImageDecodeError on any failure."""
        data = self.fetch_bytes(ref)
        decoded = decode_image_bytes(ref, data)
        logger.debug(f"Loaded {_truncate_ref(ref)}: {decoded.natural_width}x{decoded.natural_height} {decoded.format}")
        return decoded

    def probe_size(self, ref: str) -> Size:
        """Natural size of an image."""
        return self.load(ref).natural_size

    def _read_data_url(self, ref: str) -> bytes:
        try:
            header, payload = ref.split(",", 1)
        except ValueError as e:
            raise ImageDecodeError(_truncate_ref(ref), "Malformed data URL", cause=e) from e
        if ";base64" not in header:
            raise ImageDecodeError(_truncate_ref(ref), "Only base64 data URLs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageDecodeError(_truncate_ref(ref), "Invalid base64 payload", cause=e) from e

    def _read_url(self, ref: str) -> bytes:
        try:
            response = self._get_client().get(ref)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch image {ref}: {e}")
            raise ImageDecodeError(ref, "Image could not be fetched", cause=e) from e
        return response.content

    def _read_path(self, ref: str) -> bytes:
        try:
            return Path(ref).read_bytes()
        except OSError as e:
            raise ImageDecodeError(ref, "Image file could not be read", cause=e) from e

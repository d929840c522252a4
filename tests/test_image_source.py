import base64
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO

import httpx
import pytest
from PIL import ExifTags, Image

from conftest import GREEN, RED, assert_color, make_image_bytes
from templatr.exceptions import ImageDecodeError
from templatr.services.image_source import ImageSource, decode_image_bytes


def data_url(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def test_decodes_base64_data_url():
    source = ImageSource()

    decoded = source.load(data_url(make_image_bytes((30, 20), RED)))

    assert (decoded.natural_width, decoded.natural_height) == (30, 20)
    assert decoded.format == "PNG"


def test_rejects_bad_data_urls():
    source = ImageSource()

    with pytest.raises(ImageDecodeError):
        source.load("data:image/png;base64,@@@not-base64@@@")
    with pytest.raises(ImageDecodeError):
        source.load("data:image/png,rawpayload")
    with pytest.raises(ImageDecodeError):
        source.load("data:image/png;base64")


def test_error_message_truncates_data_urls():
    ref = data_url(b"not an image at all" * 20)

    with pytest.raises(ImageDecodeError) as info:
        ImageSource().load(ref)

    assert info.value.image_ref.endswith("...[truncated]")
    assert len(info.value.image_ref) < len(ref)


def test_reads_local_files(tmp_path):
    path = tmp_path / "question.jpg"
    path.write_bytes(make_image_bytes((64, 32), RED, fmt="JPEG"))

    size = ImageSource().probe_size(str(path))

    assert (size.width, size.height) == (64, 32)


def test_missing_file(tmp_path):
    with pytest.raises(ImageDecodeError):
        ImageSource().load(str(tmp_path / "nope.png"))


def test_undecodable_bytes():
    with pytest.raises(ImageDecodeError) as info:
        decode_image_bytes("thing.png", b"\x00\x01\x02")

    assert info.value.cause is not None


def test_fetches_http_urls():
    png = make_image_bytes((10, 10), RED)

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/ok.png":
            return httpx.Response(200, content=png)
        return httpx.Response(404)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with ImageSource(client=client) as source:
        assert source.probe_size("https://cdn.example.com/ok.png").width == 10
        with pytest.raises(ImageDecodeError):
            source.load("https://cdn.example.com/missing.png")


def rotated_phone_jpeg() -> bytes:
    """200x100 sensor image, left half red, tagged to display rotated 90 degrees clockwise."""
    image = Image.new("RGB", (200, 100), GREEN)
    image.paste(RED, (0, 0, 100, 100))
    exif = Image.Exif()
    exif[ExifTags.Base.Orientation] = 6
    buffer = BytesIO()
    image.save(buffer, format="JPEG", exif=exif, quality=95)
    return buffer.getvalue()


def test_exif_orientation_is_applied():
    decoded = decode_image_bytes("phone.jpg", rotated_phone_jpeg())

    assert (decoded.natural_width, decoded.natural_height) == (100, 200)
    assert decoded.format == "JPEG"
    assert decoded.reoriented
    # Rotated clockwise, the red left half ends up on top
    assert_color(decoded.image.getpixel((50, 40)), RED, tolerance=12)
    assert_color(decoded.image.getpixel((50, 160)), GREEN, tolerance=12)


def test_reoriented_image_is_embedded_upright():
    decoded = decode_image_bytes("phone.jpg", rotated_phone_jpeg())

    embedded = Image.open(BytesIO(decoded.embeddable_bytes()))

    assert embedded.format == "PNG"
    assert embedded.size == (100, 200)


def test_upright_jpeg_is_passed_through():
    data = make_image_bytes((30, 20), RED, fmt="JPEG")
    decoded = decode_image_bytes("plain.jpg", data)

    assert not decoded.reoriented
    assert decoded.embeddable_bytes() == data


def test_http_client_is_shared_across_threads():
    source = ImageSource()
    try:
        with ThreadPoolExecutor(max_workers=8) as pool:
            clients = list(pool.map(lambda _: source._get_client(), range(32)))
        assert len({id(client) for client in clients}) == 1
    finally:
        source.close()

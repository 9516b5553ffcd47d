"""Tests for image preprocessing."""

import io
import random

import pytest
from PIL import Image

from meal_lens.domain.errors import ImageTooLargeError, InvalidImageError
from meal_lens.services.images import ImagePreprocessor, encode_jpeg, to_rgb
from tests.conftest import jpeg_bytes


def _noise_image(size: tuple[int, int]) -> Image.Image:
    rng = random.Random(0)
    return Image.frombytes("RGB", size, rng.randbytes(size[0] * size[1] * 3))


def test_small_image_passes_at_full_quality() -> None:
    data = jpeg_bytes()

    prepared = ImagePreprocessor().prepare(data)

    assert prepared.data.startswith(b"\xff\xd8\xff")
    assert prepared.size <= 1_048_576


def test_quality_reduction_fits_budget_without_resizing() -> None:
    image = _noise_image((256, 256))
    full = len(encode_jpeg(image, 1.0))
    lowest = len(encode_jpeg(image, 0.1))
    budget = (full + lowest) // 2

    prepared = ImagePreprocessor(max_bytes=budget).prepare(image)

    assert prepared.size <= budget
    with Image.open(io.BytesIO(prepared.data)) as decoded:
        assert decoded.size == (256, 256)


def test_resizes_when_quality_floor_is_not_enough() -> None:
    image = _noise_image((1024, 768))
    resized = image.copy()
    resized.thumbnail((64, 64))
    budget = len(encode_jpeg(resized, 0.8))
    assert len(encode_jpeg(image, 0.1)) > budget

    prepared = ImagePreprocessor(max_bytes=budget, max_dimension=64).prepare(image)

    assert prepared.size <= budget
    with Image.open(io.BytesIO(prepared.data)) as decoded:
        assert max(decoded.size) <= 64
        assert decoded.size == (64, 48)


def test_reports_too_large_when_no_path_fits() -> None:
    with pytest.raises(ImageTooLargeError):
        ImagePreprocessor(max_bytes=10).prepare(jpeg_bytes())


def test_rejects_undecodable_bytes() -> None:
    with pytest.raises(InvalidImageError):
        ImagePreprocessor().prepare(b"definitely not an image")


def test_to_rgb_flattens_transparency() -> None:
    rgba = Image.new("RGBA", (4, 4), (0, 0, 0, 0))

    flattened = to_rgb(rgba)

    assert flattened.mode == "RGB"
    assert flattened.getpixel((0, 0)) == (255, 255, 255)


def test_png_input_is_reencoded_as_jpeg() -> None:
    output = io.BytesIO()
    Image.new("RGBA", (32, 32), (10, 200, 10, 128)).save(output, format="PNG")

    prepared = ImagePreprocessor().prepare(output.getvalue())

    assert prepared.data.startswith(b"\xff\xd8\xff")


def test_exif_orientation_is_applied_before_encoding() -> None:
    exif = Image.Exif()
    exif[0x0112] = 6
    output = io.BytesIO()
    Image.new("RGB", (40, 20), (200, 30, 30)).save(output, format="JPEG", exif=exif)

    prepared = ImagePreprocessor().prepare(output.getvalue())

    assert Image.open(io.BytesIO(prepared.data)).size == (20, 40)


def test_decompression_bomb_is_reported_as_too_large(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(ImageTooLargeError):
        ImagePreprocessor().prepare(jpeg_bytes())

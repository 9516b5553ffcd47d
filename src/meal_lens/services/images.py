"""Image preprocessing for upload."""

import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from meal_lens.domain.errors import ImageTooLargeError, InvalidImageError
from meal_lens.domain.images import PreprocessedImage

_logger = logging.getLogger(__name__)


def load_image(image: Image.Image | bytes) -> Image.Image:
    """Return an upright Pillow image from bytes or an existing image."""
    if isinstance(image, Image.Image):
        return ImageOps.exif_transpose(image)
    try:
        decoded = Image.open(io.BytesIO(image))
        decoded.load()
    except Image.DecompressionBombError as exc:
        raise ImageTooLargeError() from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageError() from exc
    return ImageOps.exif_transpose(decoded)


def to_rgb(image: Image.Image) -> Image.Image:
    """Flatten transparency onto white and convert to RGB for JPEG."""
    if image.mode in ("RGBA", "LA", "P"):
        if image.mode == "P":
            image = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def encode_jpeg(image: Image.Image, quality: float) -> bytes:
    """Encode an RGB image as JPEG with quality in the 0-1 range."""
    output = io.BytesIO()
    pil_quality = min(100, max(1, round(quality * 100)))
    image.save(output, format="JPEG", quality=pil_quality)
    return output.getvalue()


@dataclass
class ImagePreprocessor:
    """Produces a JPEG payload that fits within a byte budget."""

    max_bytes: int = 1_048_576
    initial_quality: float = 1.0
    quality_step: float = 0.1
    min_quality: float = 0.1
    max_dimension: int = 1024
    resize_quality: float = 0.8

    def prepare(self, image: Image.Image | bytes) -> PreprocessedImage:
        """Compress, then downscale if needed, until under the byte budget."""
        rgb = to_rgb(load_image(image))

        data: bytes | None = None
        # Quality ladder in whole percent.
        step = max(1, round(self.quality_step * 100))
        floor = round(self.min_quality * 100)
        quality = round(self.initial_quality * 100)
        while True:
            data = self._try_encode(rgb, quality / 100)
            if data is not None and len(data) <= self.max_bytes:
                return PreprocessedImage(data=data)
            if quality - step < floor:
                break
            quality -= step

        resized = rgb.copy()
        resized.thumbnail((self.max_dimension, self.max_dimension))
        data = self._try_encode(resized, self.resize_quality)
        if data is None or len(data) > self.max_bytes:
            _logger.warning(
                "Image exceeds %s bytes after resize to %sx%s",
                self.max_bytes,
                resized.width,
                resized.height,
            )
            raise ImageTooLargeError()
        _logger.info(
            "Image resized to %sx%s (%s bytes)", resized.width, resized.height, len(data)
        )
        return PreprocessedImage(data=data)

    def _try_encode(self, image: Image.Image, quality: float) -> bytes | None:
        try:
            return encode_jpeg(image, quality)
        except (OSError, ValueError) as exc:
            _logger.warning("JPEG encode failed at quality %.1f: %s", quality, exc)
            return None

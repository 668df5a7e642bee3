"""Image preprocessing before AI extraction.

Label images arrive base64 encoded (optionally as a data URL). Before they are
sent to the vision model they are:
- size checked
- shrunk to fit within the configured maximum dimension
- normalized to JPEG
"""

import base64
import binascii
import io
import re
import logging
from PIL import Image

from ..config import get_settings

logger = logging.getLogger(__name__)

_DATA_URL_PATTERN = re.compile(r"^data:image/(\w+);base64,")

ALLOWED_FORMATS = {"jpeg", "jpg", "png", "webp"}


class ImageProcessingError(ValueError):
    """Raised when an uploaded image cannot be decoded or normalized."""


def strip_data_url(image: str) -> str:
    """Remove a leading "data:image/...;base64," prefix if present."""
    return _DATA_URL_PATTERN.sub("", image, count=1)


def encode_jpeg(img: Image.Image, quality: int) -> bytes:
    """Encode a PIL image as JPEG, flattening alpha/palette modes to RGB."""
    if img.mode != "RGB":
        img = img.convert("RGB")
    out = io.BytesIO()
    img.save(out, format="JPEG", quality=quality)
    return out.getvalue()


class ImagePreprocessor:
    """Validates and normalizes label images for the extraction model."""

    def __init__(self):
        self.settings = get_settings()

    def is_valid_format(self, image: str) -> bool:
        """
        Check the declared format of a data URL.

        Bare base64 (no data URL prefix) is accepted; its real format is
        checked when the image is decoded.
        """
        match = _DATA_URL_PATTERN.match(image)
        if match:
            return match.group(1).lower() in ALLOWED_FORMATS
        return True

    def process_image(self, image: str) -> str:
        """
        Decode, resize and normalize an image.

        Args:
            image: Base64 image, with or without data URL prefix

        Returns:
            Base64 JPEG (or the original base64 if it is already a JPEG
            within the size limits)

        Raises:
            ImageProcessingError: If the image is too large or unreadable
        """
        try:
            base64_data = strip_data_url(image)
            image_bytes = self._decode(base64_data)
            img = Image.open(io.BytesIO(image_bytes))
            width, height = img.size

            max_dim = self.settings.max_image_dimension
            if width > max_dim or height > max_dim:
                img.thumbnail((max_dim, max_dim), Image.LANCZOS)
                converted = encode_jpeg(img, self.settings.resize_jpeg_quality)
                logger.debug(f"Resized image from {width}x{height} to {img.width}x{img.height}")
                return base64.b64encode(converted).decode("ascii")

            if (img.format or "").upper() != "JPEG":
                converted = encode_jpeg(img, self.settings.convert_jpeg_quality)
                logger.debug(f"Converted {img.format} image to JPEG")
                return base64.b64encode(converted).decode("ascii")

            return base64_data
        except ImageProcessingError:
            raise
        except Exception as e:
            logger.error(f"Error processing image: {e}")
            raise ImageProcessingError(f"Failed to process image: {e}") from e

    def _decode(self, base64_data: str) -> bytes:
        try:
            image_bytes = base64.b64decode(base64_data)
        except (binascii.Error, ValueError) as e:
            raise ImageProcessingError(f"Failed to process image: invalid base64 data ({e})") from e

        size_mb = len(image_bytes) / (1024 * 1024)
        if size_mb > self.settings.max_image_size_mb:
            raise ImageProcessingError(
                f"Image too large: {size_mb:.2f}MB (max {self.settings.max_image_size_mb:g}MB)"
            )
        return image_bytes


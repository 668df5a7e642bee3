"""Tests for image preprocessing."""

import base64

import pytest

from label_verifier.config import Settings
from label_verifier.services.preprocessing import (
    ImagePreprocessor,
    ImageProcessingError,
    strip_data_url,
)


@pytest.fixture
def preprocessor():
    """Create preprocessor instance."""
    return ImagePreprocessor()


class TestFormatCheck:
    """Test declared-format validation."""

    @pytest.mark.parametrize("prefix", [
        "data:image/jpeg;base64,",
        "data:image/jpg;base64,",
        "data:image/png;base64,",
        "data:image/webp;base64,",
        "data:image/PNG;base64,",
    ])
    def test_supported(self, preprocessor, prefix):
        assert preprocessor.is_valid_format(prefix + "AAAA") is True

    @pytest.mark.parametrize("prefix", [
        "data:image/gif;base64,",
        "data:image/bmp;base64,",
        "data:image/tiff;base64,",
    ])
    def test_unsupported(self, preprocessor, prefix):
        assert preprocessor.is_valid_format(prefix + "AAAA") is False

    def test_bare_base64_accepted(self, preprocessor):
        assert preprocessor.is_valid_format("iVBORw0KGgo=") is True

    def test_strip_data_url(self):
        assert strip_data_url("data:image/png;base64,AAAA") == "AAAA"
        assert strip_data_url("AAAA") == "AAAA"


class TestProcessImage:
    """Test resize and JPEG normalization."""

    def test_png_converted_to_jpeg(self, preprocessor, make_image, decode_image):
        result = preprocessor.process_image(make_image(image_format="PNG"))

        img = decode_image(result)
        assert img.format == "JPEG"
        assert img.size == (300, 200)

    def test_jpeg_passes_through(self, preprocessor, make_image):
        original = make_image(image_format="JPEG", data_url=False)

        assert preprocessor.process_image(original) == original

    def test_jpeg_data_url_prefix_removed(self, preprocessor, make_image):
        original = make_image(image_format="JPEG")

        assert preprocessor.process_image(original) == strip_data_url(original)

    def test_large_image_resized(self, preprocessor, make_image, decode_image):
        result = preprocessor.process_image(make_image(size=(3000, 1500)))

        img = decode_image(result)
        assert img.format == "JPEG"
        assert img.size == (2048, 1024)

    def test_tall_image_resized(self, preprocessor, make_image, decode_image):
        result = preprocessor.process_image(make_image(size=(1000, 4096), image_format="JPEG"))

        assert decode_image(result).size == (500, 2048)

    def test_alpha_flattened(self, preprocessor, make_image, decode_image):
        result = preprocessor.process_image(make_image(mode="RGBA"))

        img = decode_image(result)
        assert img.format == "JPEG"
        assert img.mode == "RGB"

    def test_webp(self, preprocessor, make_image, decode_image):
        result = preprocessor.process_image(make_image(image_format="WEBP"))

        assert decode_image(result).format == "JPEG"

    def test_not_an_image(self, preprocessor):
        garbage = base64.b64encode(b"not an image").decode("ascii")

        with pytest.raises(ImageProcessingError, match="Failed to process image"):
            preprocessor.process_image("data:image/png;base64," + garbage)

    def test_too_large(self, preprocessor):
        preprocessor.settings = Settings(max_image_size_mb=0.01)
        payload = base64.b64encode(b"\x00" * 20000).decode("ascii")

        with pytest.raises(ImageProcessingError) as exc_info:
            preprocessor.process_image(payload)

        assert str(exc_info.value) == "Image too large: 0.02MB (max 0.01MB)"


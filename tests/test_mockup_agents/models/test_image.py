"""Tests for mockup_agents.models.image module."""

import pytest

from mockup_agents.core.exceptions import InvalidImageError
from mockup_agents.models.image import CanonicalImage


class TestCanonicalImage:
    """Tests for CanonicalImage."""

    def test_valid_image(self, sample_png_bytes):
        image = CanonicalImage(mime_type="image/png", payload=sample_png_bytes)
        assert image.is_image
        assert image.payload == sample_png_bytes

    @pytest.mark.parametrize("mime_type", ["", "png", "image/", "/png", "image png"])
    def test_invalid_mime_type(self, mime_type):
        with pytest.raises(InvalidImageError):
            CanonicalImage(mime_type=mime_type, payload=b"data")

    def test_empty_payload(self):
        with pytest.raises(InvalidImageError):
            CanonicalImage(mime_type="image/png", payload=b"")

    def test_from_base64(self, sample_image_base64, sample_png_bytes):
        image = CanonicalImage.from_base64("image/png", sample_image_base64)
        assert image.payload == sample_png_bytes
        assert image.base64_data == sample_image_base64

    def test_to_data_url(self, sample_image_base64, sample_data_url):
        image = CanonicalImage.from_base64("image/png", sample_image_base64)
        assert image.to_data_url() == sample_data_url

    def test_to_inline_part(self, sample_image_base64):
        image = CanonicalImage.from_base64("image/png", sample_image_base64)
        assert image.to_inline_part() == {
            "inlineData": {"mimeType": "image/png", "data": sample_image_base64}
        }

    def test_equality_and_hash(self):
        a = CanonicalImage(mime_type="image/png", payload=b"abc")
        b = CanonicalImage(mime_type="image/png", payload=b"abc")
        assert a == b
        assert hash(a) == hash(b)

    def test_repr_hides_payload(self):
        image = CanonicalImage(mime_type="image/jpeg", payload=b"x" * 2048)
        assert repr(image) == "CanonicalImage(mime_type='image/jpeg', size=2048)"

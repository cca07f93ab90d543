"""Tests for firm logo preparation."""

import base64
from io import BytesIO

import pytest
from PIL import Image

from lawdesk.services.branding import (
    DATA_URL_PREFIX,
    InvalidLogoError,
    LogoTooLargeError,
    is_data_url,
    prepare_logo,
)


def image_bytes(size=(64, 32), mode="RGB", fmt="PNG") -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, "red" if mode == "RGB" else 0).save(buffer, format=fmt)
    return buffer.getvalue()


def decode(data_url: str) -> Image.Image:
    return Image.open(BytesIO(base64.b64decode(data_url[len(DATA_URL_PREFIX):])))


class TestPrepareLogo:

    def test_returns_png_data_url(self):
        data_url = prepare_logo(image_bytes(), max_size_px=512, max_upload_bytes=1_000_000)

        assert data_url.startswith(DATA_URL_PREFIX)
        assert is_data_url(data_url)
        assert decode(data_url).size == (64, 32)

    def test_large_image_downscaled(self):
        data_url = prepare_logo(image_bytes((1024, 512)), max_size_px=128, max_upload_bytes=10_000_000)
        assert decode(data_url).size == (128, 64)

    def test_jpeg_converted_to_png(self):
        data_url = prepare_logo(image_bytes(fmt="JPEG"), max_size_px=512, max_upload_bytes=1_000_000)
        assert decode(data_url).format == "PNG"

    def test_palette_image_converted(self):
        data_url = prepare_logo(image_bytes(mode="P"), max_size_px=512, max_upload_bytes=1_000_000)
        assert decode(data_url).mode == "RGBA"

    def test_upload_too_large(self):
        with pytest.raises(LogoTooLargeError):
            prepare_logo(image_bytes(), max_size_px=512, max_upload_bytes=10)

    @pytest.mark.parametrize("content", [b"", b"not an image"])
    def test_invalid(self, content):
        with pytest.raises(InvalidLogoError):
            prepare_logo(content, max_size_px=512, max_upload_bytes=1_000_000)


class TestControllerLogo:

    def test_set_logo_stored_in_state(self, controller):
        data_url = controller.set_logo(image_bytes())

        assert controller.state.firm_logo == data_url
        assert is_data_url(controller.state.firm_logo)

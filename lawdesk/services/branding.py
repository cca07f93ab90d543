"""
Firm Logo Handling

The firm logo is stored inside AppState as a data URL so the whole state
stays a single JSON document. Uploads are verified with Pillow, scaled
down so the largest side fits the configured limit, and re-encoded as PNG
to keep the stored string small and predictable.
"""

import base64
from io import BytesIO
from typing import Optional

import structlog
from PIL import Image, UnidentifiedImageError

from lawdesk.config import get_settings


logger = structlog.get_logger(__name__)

DATA_URL_PREFIX = "data:image/png;base64,"


class LogoError(Exception):
    """Base exception for logo processing errors."""
    pass


class LogoTooLargeError(LogoError):
    """Upload exceeds the accepted file size."""
    pass


class InvalidLogoError(LogoError):
    """Upload is not a readable image."""
    pass


def prepare_logo(
    image_bytes: bytes,
    max_size_px: Optional[int] = None,
    max_upload_bytes: Optional[int] = None,
) -> str:
    """
    Normalize an uploaded logo into a PNG data URL.

    Args:
        image_bytes: Raw uploaded file content
        max_size_px: Largest side after downscaling (default from settings)
        max_upload_bytes: Largest accepted upload (default from settings)

    Returns:
        `data:image/png;base64,...` string

    Raises:
        LogoTooLargeError: Upload is over the size limit
        InvalidLogoError: Content is not an image Pillow can read
    """
    if max_size_px is None or max_upload_bytes is None:
        app_settings = get_settings().app
        max_size_px = max_size_px or app_settings.max_logo_size_px
        max_upload_bytes = max_upload_bytes or app_settings.max_logo_upload_bytes

    if not image_bytes:
        raise InvalidLogoError("Logo file is empty")
    if len(image_bytes) > max_upload_bytes:
        raise LogoTooLargeError(
            f"Logo is {len(image_bytes)} bytes; limit is {max_upload_bytes} bytes"
        )

    try:
        # verify() leaves the image unusable, so open twice
        Image.open(BytesIO(image_bytes)).verify()
        img = Image.open(BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidLogoError(f"Could not read logo image: {e}")

    original_size = img.size
    if img.mode not in ("RGB", "RGBA", "L", "LA"):
        img = img.convert("RGBA")
    img.thumbnail((max_size_px, max_size_px))

    buffer = BytesIO()
    img.save(buffer, format="PNG", optimize=True)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")

    logger.info(
        "logo_prepared",
        original_size=original_size,
        stored_size=img.size,
        stored_bytes=len(encoded),
    )
    return DATA_URL_PREFIX + encoded


def is_data_url(value: str) -> bool:
    return value.startswith("data:image/")

"""JPEG re-encoding of user-selected images (Pillow).

The service never uploads the original file: it is decoded and re-encoded as
a quality-reduced JPEG so every request carries `image/jpeg`.
"""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from core.domain.errors import InvalidImageError

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 80

# Modes the JPEG encoder writes as-is; everything else goes through RGB.
_JPEG_NATIVE_MODES = ("RGB", "L")


def encode_jpeg(image_bytes: bytes, *, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Decode `image_bytes` and return it re-encoded as JPEG.

    Raises:
        InvalidImageError: empty input, unknown format, truncated data or a
            failed save.
    """

    if not image_bytes:
        raise InvalidImageError("The selected image is empty.")

    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.load()
            if image.mode not in _JPEG_NATIVE_MODES:
                image = image.convert("RGB")
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=quality)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.debug("image encoding failed: %s", exc)
        raise InvalidImageError() from exc

    encoded = buffer.getvalue()
    logger.debug("encoded image: %d -> %d bytes (quality=%d)", len(image_bytes), len(encoded), quality)
    return encoded

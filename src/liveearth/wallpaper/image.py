"""Image decode/encode helpers for composite payloads."""

from __future__ import annotations

import base64
import binascii
import logging
from io import BytesIO
from typing import Final

from PIL import Image, UnidentifiedImageError

logger: Final = logging.getLogger(__name__)

# JPEG has no alpha channel or palette
JPEG_MODES: Final = ("RGB", "L", "CMYK")


def decode_base64(payload: str) -> bytes:
    """Decode a strict base64 string.

    Raises:
        ValueError: If the payload is empty or not valid base64
    """
    if not payload:
        raise ValueError("empty image payload")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 image payload: {exc}") from exc


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes into a fully loaded Pillow image.

    Raises:
        ValueError: If the bytes are not a readable image
    """
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ValueError(f"cannot decode image: {exc}") from exc
    return image


def encode_jpeg(image: Image.Image, quality: int = 90) -> bytes:
    """Encode an image as JPEG.

    Args:
        image: Source image in any mode
        quality: JPEG quality, 0-100

    Returns:
        Encoded JPEG bytes

    Raises:
        OSError: If Pillow cannot encode the image
        ValueError: If the image mode cannot be converted
    """
    if image.mode not in JPEG_MODES:
        logger.debug("Converting %s image to RGB for JPEG", image.mode)
        image = image.convert("RGB")
    buf = BytesIO()
    image.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()

"""
RU: Кодирование и декодирование PNG для монохромных RGBA-растров.
EN: Lossless PNG encode/decode for strict-monochrome RGBA rasters (Pillow).
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Final

from PIL import Image, UnidentifiedImageError

from labelraster.raster import RasterBuffer, assert_monochrome

logger = logging.getLogger(__name__)

__all__ = ["PNG_SIGNATURE", "encode_png", "decode_png", "is_png"]

PNG_SIGNATURE: Final[bytes] = b"\x89PNG\r\n\x1a\n"


def is_png(data: bytes) -> bool:
    return data[: len(PNG_SIGNATURE)] == PNG_SIGNATURE


def encode_png(raster: RasterBuffer) -> bytes:
    """
    Encode a monochrome raster as an RGBA PNG.

    No metadata chunks are written, so identical rasters give identical bytes.

    Raises:
        InvariantViolationError: the raster is not strictly monochrome.
    """
    assert_monochrome(raster)
    buf = BytesIO()
    raster.to_image().save(buf, format="PNG")
    data = buf.getvalue()
    logger.debug(
        "PNG encoded: %dx%dpx, %d bytes", raster.width, raster.height, len(data)
    )
    return data


def decode_png(data: bytes) -> RasterBuffer:
    """
    Decode PNG bytes into an RGBA raster.

    Raises:
        ValueError: missing PNG signature or undecodable data.
    """
    if not is_png(data):
        raise ValueError("Data is not a PNG image (signature mismatch)")
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return RasterBuffer.from_image(img)
    except (UnidentifiedImageError, OSError) as e:
        logger.error("PNG decode failed: %r", e)
        raise ValueError(f"PNG decode failed: {e}") from e

"""
RU: Форматы вывода для потребителей PNG (JPEG, BMP) и конвертация.
EN: Downstream output formats; PNG is canonical, JPEG/BMP are converted from it.
"""

from __future__ import annotations

import logging
from enum import Enum
from io import BytesIO
from typing import Literal, Union

from PIL import Image

from labelraster.export.png import is_png

logger = logging.getLogger(__name__)

__all__ = ["ImageFormat", "convert_format"]


class ImageFormat(str, Enum):
    PNG = "png"
    JPG = "jpg"
    BMP = "bmp"

    @property
    def pil_format(self) -> str:
        return {"png": "PNG", "jpg": "JPEG", "bmp": "BMP"}[self.value]

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        return {"png": "image/png", "jpg": "image/jpeg", "bmp": "image/bmp"}[self.value]

    @classmethod
    def parse(cls, value: Union["ImageFormat", str]) -> "ImageFormat":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().lstrip(".")
        if text == "jpeg":
            text = "jpg"
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"Unsupported image format: {value!r}")

    def localized_name(self, lang: Literal["ru", "en"] = "ru") -> str:
        return self.pil_format if lang == "en" else f"Изображение {self.pil_format}"


def convert_format(png_bytes: bytes, fmt: Union[ImageFormat, str]) -> bytes:
    """
    Convert canonical PNG bytes to ``fmt``.

    PNG passes through unchanged. JPEG and BMP carry no alpha channel, so the
    image is flattened to RGB first (alpha is always 255 here). JPEG is saved
    at maximum quality without chroma subsampling; it is still lossy.

    Raises:
        ValueError: input is not PNG or the format is unknown.
    """
    target = ImageFormat.parse(fmt)
    if not is_png(png_bytes):
        raise ValueError("Input is not a PNG image (signature mismatch)")
    if target is ImageFormat.PNG:
        return png_bytes

    with Image.open(BytesIO(png_bytes)) as img:
        rgb = img.convert("RGB")
    buf = BytesIO()
    if target is ImageFormat.JPG:
        rgb.save(buf, format="JPEG", quality=100, subsampling=0)
    else:
        rgb.save(buf, format="BMP")
    data = buf.getvalue()
    logger.debug("Converted PNG to %s (%d bytes)", target.pil_format, len(data))
    return data

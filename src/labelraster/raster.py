"""
RU: RGBA-буферы и монохромные операции над ними (порог, проверка инварианта, размещение, обрезка).
EN: RGBA raster buffers plus the strict-monochrome helpers shared by every pipeline stage.

All pixel work goes through Pillow so that full-size label rasters (thousands
of pixels per side) are processed in C rather than in Python loops.

Invariant for any buffer crossing a stage boundary:
    R, G, B in {0, 255} and A == 255
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Optional, Tuple

from PIL import Image, ImageChops, ImageOps

from labelraster.constants import MONO_THRESHOLD, WHITE
from labelraster.errors import GeometryError, InvariantViolationError

logger = logging.getLogger(__name__)

__all__ = [
    "RasterBuffer",
    "dark_mask",
    "threshold_to_monochrome",
    "assert_monochrome",
    "is_monochrome",
    "fit_to_area",
    "trim_and_pad",
    "invert",
]

# Всего 8 допустимых цветов: каждый канал 0 или 255, альфа 255
_MAX_MONO_COLORS: Final[int] = 8


@dataclass(frozen=True)
class RasterBuffer:
    """
    Row-major RGBA raster.

    Attributes:
        width: Width in pixels.
        height: Height in pixels.
        data: ``width * height * 4`` bytes, RGBA per pixel.
    """

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Raster dimensions must be positive, got {self.width}x{self.height}"
            )
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(
                f"Invalid RGBA length: got {len(self.data)}, expected {expected}"
            )

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height}")
        i = (y * self.width + x) * 4
        r, g, b, a = self.data[i : i + 4]
        return (r, g, b, a)

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.data)

    @classmethod
    def from_image(cls, img: Image.Image) -> "RasterBuffer":
        rgba = img if img.mode == "RGBA" else img.convert("RGBA")
        return cls(width=rgba.width, height=rgba.height, data=rgba.tobytes())

    @classmethod
    def blank(cls, width: int, height: int) -> "RasterBuffer":
        """White, fully opaque raster."""
        return cls.from_image(Image.new("RGBA", (width, height), WHITE))


def _mean_level(img: Image.Image, threshold: int) -> Image.Image:
    """
    "L" image whose value is below 128 exactly where mean(R, G, B) < threshold.

    The conversion matrix yields ``R + G + B + (128 - 3 * threshold)``
    clipped to 0..255; with integer coefficients there is no rounding, so
    the comparison against 128 is exact.
    """
    rgb = img.convert("RGB")
    return rgb.convert("L", matrix=(1.0, 1.0, 1.0, float(128 - 3 * threshold)))


def _check_threshold(threshold: int) -> None:
    if not isinstance(threshold, int) or not 0 <= threshold <= 255:
        raise ValueError(f"Invalid threshold: {threshold!r}")


def dark_mask(img: Image.Image, threshold: int = MONO_THRESHOLD) -> Image.Image:
    """
    Маска тёмных пикселей ("L", 255 = тёмный).

    Пиксель тёмный, если среднее RGB ниже порога и он полностью непрозрачен.
    """
    _check_threshold(threshold)
    rgba = img.convert("RGBA")
    dark = _mean_level(rgba, threshold).point(lambda v: 255 if v < 128 else 0)
    opaque = rgba.getchannel("A").point(lambda v: 255 if v == 255 else 0)
    return ImageChops.multiply(dark, opaque)


def threshold_to_monochrome(
    raster: RasterBuffer, threshold: int = MONO_THRESHOLD
) -> RasterBuffer:
    """
    Convert RGBA to strict black/white with alpha forced to 255.

    Rule: mean(R, G, B) < threshold -> black (0), otherwise white (255).
    Returns a new buffer; the input is left untouched.
    """
    _check_threshold(threshold)
    bw = _mean_level(raster.to_image(), threshold).point(
        lambda v: 0 if v < 128 else 255
    )
    alpha = Image.new("L", raster.size, 255)
    return RasterBuffer.from_image(Image.merge("RGBA", (bw, bw, bw, alpha)))


def _first_violation(data: bytes) -> Optional[str]:
    if len(data) % 4 != 0:
        return f"Invalid RGBA buffer length: {len(data)} (not divisible by 4)"
    for i in range(0, len(data), 4):
        r, g, b, a = data[i : i + 4]
        if r not in (0, 255) or g not in (0, 255) or b not in (0, 255):
            return f"Non-monochrome RGB detected at byte {i}: ({r},{g},{b})"
        if a != 255:
            return f"Non-opaque alpha detected at byte {i + 3}: {a}"
    return None


def is_monochrome(raster: RasterBuffer) -> bool:
    """True when every channel is 0/255 and alpha is 255."""
    colors = raster.to_image().getcolors(maxcolors=_MAX_MONO_COLORS)
    if colors is None:
        return False
    return all(
        all(c in (0, 255) for c in color[:3]) and color[3] == 255
        for _count, color in colors
    )


def assert_monochrome(raster: RasterBuffer) -> None:
    """
    Raise InvariantViolationError on the first non-monochrome or non-opaque pixel.

    Never modifies the buffer.
    """
    if is_monochrome(raster):
        return
    # Медленный путь только при нарушении: найти точное место для сообщения
    reason = _first_violation(raster.data) or "Non-monochrome raster"
    logger.error("Monochrome invariant violated: %s", reason)
    raise InvariantViolationError(
        reason, context={"width": raster.width, "height": raster.height}
    )


def fit_to_area(raster: RasterBuffer, width: int, height: int) -> RasterBuffer:
    """
    Centre a code raster on a white, opaque ``width x height`` area.

    The leading offset is the floor of half the remainder on each axis.
    """
    if raster.width > width or raster.height > height:
        raise GeometryError(
            f"Code raster {raster.width}x{raster.height}px does not fit into "
            f"{width}x{height}px area",
            context={
                "code_width": raster.width,
                "code_height": raster.height,
                "area_width": width,
                "area_height": height,
            },
        )
    if raster.size == (width, height):
        return raster
    canvas = Image.new("RGBA", (width, height), WHITE)
    canvas.paste(
        raster.to_image(), ((width - raster.width) // 2, (height - raster.height) // 2)
    )
    return RasterBuffer.from_image(canvas)


def trim_and_pad(raster: RasterBuffer, pad_px: int) -> RasterBuffer:
    """
    Crop to the bounding box of dark pixels, then pad with white on every side.

    A raster without dark pixels is returned unchanged.
    """
    if not isinstance(pad_px, int) or pad_px < 0:
        raise ValueError(f"pad_px must be an integer >= 0. Got: {pad_px!r}")
    img = raster.to_image()
    bbox = dark_mask(img).getbbox()
    if bbox is None:
        return raster
    cropped = img.crop(bbox)
    out = Image.new(
        "RGBA",
        (cropped.width + 2 * pad_px, cropped.height + 2 * pad_px),
        WHITE,
    )
    out.paste(cropped, (pad_px, pad_px))
    return RasterBuffer.from_image(out)


def invert(raster: RasterBuffer) -> RasterBuffer:
    """Swap black and white; alpha stays 255."""
    inverted = ImageOps.invert(raster.to_image().convert("RGB"))
    inverted.putalpha(255)
    return RasterBuffer.from_image(inverted)

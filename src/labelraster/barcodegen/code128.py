"""
RU: Рендерер Code128: полосы python-barcode, целочисленный масштаб, растр ровно inner_w x inner_h.
EN: Code128 renderer: bar geometry from python-barcode, integer bar scaling, exact inner-area raster.

Requirements: Pillow, python-barcode
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import List

import barcode as pybarcode
from PIL import Image, ImageDraw

from labelraster.barcodegen.sizing import (
    DEFAULT_RULES,
    SizingRules,
    check_job,
    compute_canvas,
    plan_code128,
)
from labelraster.errors import EncodingError
from labelraster.model.enums import Symbology
from labelraster.model.job import Job
from labelraster.raster import RasterBuffer, threshold_to_monochrome

logger = logging.getLogger(__name__)

__all__ = [
    "Bar",
    "encode_code128_bars",
    "base_width",
    "render_code128",
    "render_code128_async",
]


@dataclass(frozen=True)
class Bar:
    """Dark bar at unit module width: ``x`` offset and ``width`` in modules."""

    x: int
    width: int

    @property
    def right(self) -> int:
        return self.x + self.width


def encode_code128_bars(payload: str) -> List[Bar]:
    """
    Encode ``payload`` (already trimmed) into Code128 bars, no quiet zone.

    Raises:
        EncodingError: python-barcode rejected the payload or produced no bars.
    """
    try:
        code = pybarcode.get_barcode_class("code128")(payload)
        modules = "".join(code.build())
    except Exception as e:
        logger.error("Code128 encoding failed: %r", e)
        raise EncodingError(f"Code128 encoding failed: {e}") from e

    bars: List[Bar] = []
    x = 0
    for bit, run in itertools.groupby(modules):
        length = len(list(run))
        if bit == "1":
            bars.append(Bar(x=x, width=length))
        x += length
    if not bars:
        logger.error("Code128 encoder produced no bars for %r", payload)
        raise EncodingError("Code128 encoder produced no bars")
    return bars


def base_width(bars: List[Bar]) -> int:
    """Symbol width at one pixel per module: right edge of the last bar."""
    return max(bar.right for bar in bars) if bars else 0


def render_code128(job: Job, rules: SizingRules = DEFAULT_RULES) -> RasterBuffer:
    """
    Render Code128 bars into a raster of exactly ``inner_w x inner_h``.

    Bars span the full height and are centred horizontally at the largest
    integer scale that fits; a threshold pass guarantees strict monochrome.

    Raises:
        JobInputError, GeometryError, DensityError, EncodingError
    """
    check_job(job, Symbology.CODE128, rules)
    canvas = compute_canvas(job)
    payload = job.payload.strip()
    bars = encode_code128_bars(payload)
    layout = plan_code128(canvas, base_width(bars), job.size, rules)
    logger.debug(
        "Code128 layout: base %d modules, %dpx/module, offset %dpx, %dx%dpx",
        layout.base_width,
        layout.scale,
        layout.offset_x,
        layout.width,
        layout.height,
    )

    img = Image.new("L", (layout.width, layout.height), 255)
    draw = ImageDraw.Draw(img)
    for bar in bars:
        x0 = layout.offset_x + bar.x * layout.scale
        x1 = x0 + bar.width * layout.scale - 1
        draw.rectangle((x0, 0, x1, layout.height - 1), fill=0)

    raster = threshold_to_monochrome(
        RasterBuffer.from_image(img.convert("RGBA")), rules.mono_threshold
    )
    logger.info(
        "Code128 rendered: %dx%dpx (%d bars at %dpx/module)",
        raster.width,
        raster.height,
        len(bars),
        layout.scale,
    )
    return raster


async def render_code128_async(
    job: Job, rules: SizingRules = DEFAULT_RULES
) -> RasterBuffer:
    """Async wrapper for render_code128 (for thread pools)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: render_code128(job, rules))

"""
RU: Рендерер QR-кода: целочисленный масштаб модулей, квадратный символ по центру, строгая монохромность.
EN: QR renderer producing a code-only, strictly monochrome ``code_px x code_px`` raster.

Requirements: Pillow, qrcode
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_M

from labelraster.barcodegen.sizing import (
    DEFAULT_RULES,
    SizingRules,
    check_job,
    compute_canvas,
    plan_qr,
)
from labelraster.errors import EncodingError
from labelraster.model.enums import Symbology
from labelraster.model.job import Job
from labelraster.raster import RasterBuffer, threshold_to_monochrome

logger = logging.getLogger(__name__)

__all__ = ["encode_qr_matrix", "render_qr", "render_qr_async"]


def encode_qr_matrix(payload: str) -> List[List[bool]]:
    """
    Encode ``payload`` into a square module matrix (True = dark).

    Fixed error-correction level M, no quiet zone: the margin is the
    compositor's job.

    Raises:
        EncodingError: payload does not fit any QR version or the library failed.
    """
    try:
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_M,
            box_size=1,
            border=0,
        )
        qr.add_data(payload)
        qr.make(fit=True)
        matrix = qr.get_matrix()
    except Exception as e:
        logger.error("QR encoding failed: %r", e)
        raise EncodingError(f"QR encoding failed: {e}") from e

    if not matrix or len(matrix) != len(matrix[0]):
        logger.error("QR encoder returned a non-square matrix")
        raise EncodingError("QR encoder returned an empty or non-square matrix")
    return [[bool(cell) for cell in row] for row in matrix]


def _rasterize(matrix: List[List[bool]], scale: int, code_px: int, offset: int) -> Image.Image:
    n = len(matrix)
    modules = Image.new("L", (n, n), 255)
    modules.putdata([0 if dark else 255 for row in matrix for dark in row])
    symbol = modules.resize((n * scale, n * scale), Image.Resampling.NEAREST)
    canvas = Image.new("L", (code_px, code_px), 255)
    canvas.paste(symbol, (offset, offset))
    return canvas.convert("RGBA")


def render_qr(job: Job, rules: SizingRules = DEFAULT_RULES) -> RasterBuffer:
    """
    Render the QR symbol of ``job`` as a square, code-only raster.

    The square side is ``min(inner_w, inner_h)``; the symbol is drawn at the
    largest integer module scale that fits and centred inside the square.

    Raises:
        JobInputError, GeometryError, DensityError, EncodingError

    Example:
        >>> raster = render_qr(job)
        >>> raster.width == raster.height
        True
    """
    check_job(job, Symbology.QR, rules)
    canvas = compute_canvas(job)
    matrix = encode_qr_matrix(job.payload)
    layout = plan_qr(canvas, len(matrix), job.size, rules)
    logger.debug(
        "QR layout: %d modules, %dpx/module, code %dpx, offset %dpx",
        layout.module_count,
        layout.scale,
        layout.code_px,
        layout.offset,
    )

    img = _rasterize(matrix, layout.scale, layout.code_px, layout.offset)
    raster = threshold_to_monochrome(RasterBuffer.from_image(img), rules.mono_threshold)
    logger.info(
        "QR rendered: %dx%dpx (%d modules at %dpx)",
        raster.width,
        raster.height,
        layout.module_count,
        layout.scale,
    )
    return raster


async def render_qr_async(job: Job, rules: SizingRules = DEFAULT_RULES) -> RasterBuffer:
    """Async wrapper for render_qr (for thread pools)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: render_qr(job, rules))

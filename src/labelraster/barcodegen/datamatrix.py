"""
RU: Рендерер Data Matrix: зондирование матрицы модулей и синтез плотного растра с целочисленным масштабом.
EN: Data Matrix renderer: probe the module matrix once, then synthesize an ``n*scale`` square.

The backend bitmap is never scaled for output. It is only read back to
recover the bit matrix, and the final raster is painted from that matrix,
so the module scale is always exact.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from labelraster.barcodegen.dm_backends import DataMatrixBackend, select_backend
from labelraster.barcodegen.sizing import (
    DEFAULT_RULES,
    SizingRules,
    check_job,
    compute_canvas,
    plan_datamatrix,
)
from labelraster.constants import MONO_THRESHOLD
from labelraster.errors import EncodingError
from labelraster.model.enums import Symbology
from labelraster.model.job import Job
from labelraster.raster import RasterBuffer, dark_mask, threshold_to_monochrome

logger = logging.getLogger(__name__)

__all__ = [
    "ModuleMatrix",
    "probe_module_matrix",
    "render_datamatrix",
    "render_datamatrix_async",
]


@dataclass(frozen=True)
class ModuleMatrix:
    """Square bit matrix of a Data Matrix symbol (True = dark module)."""

    module_count: int
    bits: Tuple[Tuple[bool, ...], ...]

    def is_dark(self, x: int, y: int) -> bool:
        return self.bits[y][x]


def _module_pitch(mask: Image.Image, left: int, right: int, top: int) -> int:
    # Угол L-шаблона тёмный, верхняя строка чередуется: первый тёмный отрезок = 1 модуль
    x = left
    while x <= right and mask.getpixel((x, top)):
        x += 1
    return x - left


def probe_module_matrix(
    payload: str, backend: DataMatrixBackend, threshold: int = MONO_THRESHOLD
) -> ModuleMatrix:
    """
    Render ``payload`` at scale 1 and read back its module matrix.

    Steps: dark mask (mean RGB < threshold and opaque), tight bounding box,
    square check, module pitch from the finder/timing corner, one sample at
    each module centre.

    Raises:
        EncodingError: backend failure, no dark pixels, non-square symbol or
            a pitch that does not divide the symbol.
    """
    try:
        img = backend.render(payload, 1)
    except EncodingError:
        raise
    except Exception as e:
        logger.error("DataMatrix backend %r failed: %r", backend, e)
        raise EncodingError(f"DataMatrix generation failed: {e}") from e

    mask = dark_mask(img, threshold)
    bbox = mask.getbbox()
    if bbox is None:
        logger.error("DataMatrix symbol has no dark modules")
        raise EncodingError("Encoded Data Matrix symbol has no dark modules")

    left, top, right, bottom = bbox  # right/bottom exclusive
    width = right - left
    height = bottom - top
    if width != height:
        raise EncodingError(
            f"Expected square Data Matrix symbol, got {width}x{height}",
            context={"width": width, "height": height},
        )

    pitch = _module_pitch(mask, left, right - 1, top)
    if pitch <= 0 or width % pitch != 0:
        raise EncodingError(
            f"Unable to determine Data Matrix module dimensions "
            f"(symbol {width}px, pitch {pitch}px)",
            context={"width": width, "pitch": pitch},
        )

    n = width // pitch
    half = pitch // 2
    pixels = mask.load()
    bits = tuple(
        tuple(
            bool(pixels[left + mx * pitch + half, top + my * pitch + half])
            for mx in range(n)
        )
        for my in range(n)
    )
    logger.debug("DataMatrix probe: %dx%d modules, native pitch %dpx", n, n, pitch)
    return ModuleMatrix(module_count=n, bits=bits)


def _synthesize(matrix: ModuleMatrix, scale: int) -> Image.Image:
    n = matrix.module_count
    modules = Image.new("L", (n, n), 255)
    modules.putdata([0 if dark else 255 for row in matrix.bits for dark in row])
    return modules.resize((n * scale, n * scale), Image.Resampling.NEAREST).convert(
        "RGBA"
    )


def render_datamatrix(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    backend: Optional[DataMatrixBackend] = None,
) -> RasterBuffer:
    """
    Render a tight Data Matrix raster of ``n*scale x n*scale`` pixels.

    No centering, no padding: placement inside the inner area belongs to the
    pipeline.

    Args:
        job: Data Matrix print job.
        rules: Sizing thresholds.
        backend: Encoder backend; selected automatically when None.

    Raises:
        JobInputError, GeometryError, DensityError, EncodingError
    """
    check_job(job, Symbology.DATAMATRIX, rules)
    canvas = compute_canvas(job)
    if backend is None:
        backend = select_backend()
    matrix = probe_module_matrix(job.payload, backend, rules.mono_threshold)
    layout = plan_datamatrix(canvas, matrix.module_count, job.size, rules)
    logger.debug(
        "DataMatrix layout: %d modules, %dpx/module, side %dpx",
        layout.module_count,
        layout.scale,
        layout.side_px,
    )

    raster = threshold_to_monochrome(
        RasterBuffer.from_image(_synthesize(matrix, layout.scale)), rules.mono_threshold
    )
    logger.info(
        "DataMatrix rendered: %dx%dpx via %s", raster.width, raster.height, backend.name
    )
    return raster


async def render_datamatrix_async(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    backend: Optional[DataMatrixBackend] = None,
) -> RasterBuffer:
    """Async wrapper for render_datamatrix (Ghostscript calls can be slow)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, lambda: render_datamatrix(job, rules, backend)
    )

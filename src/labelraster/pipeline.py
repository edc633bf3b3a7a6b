"""
RU: Конвейер генерации: Job -> рендерер -> размещение во внутренней области -> компоновщик -> байты.
EN: End-to-end generation pipeline. Deterministic: identical jobs give identical bytes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

from labelraster.barcodegen.code128 import render_code128
from labelraster.barcodegen.datamatrix import render_datamatrix
from labelraster.barcodegen.dm_backends import DataMatrixBackend
from labelraster.barcodegen.qr import render_qr
from labelraster.barcodegen.sizing import DEFAULT_RULES, SizingRules, compute_canvas
from labelraster.errors import JobInputError
from labelraster.export.compositor import compose
from labelraster.export.formats import ImageFormat, convert_format
from labelraster.model.enums import ErrorCode, Symbology
from labelraster.model.job import Job
from labelraster.raster import RasterBuffer, fit_to_area

logger = logging.getLogger(__name__)

__all__ = ["render_code", "generate", "generate_async"]


def render_code(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    backend: Optional[DataMatrixBackend] = None,
) -> RasterBuffer:
    """
    Render the code-only raster for ``job.symbology``.

    Raises:
        JobInputError: unsupported symbology (plus everything the renderer raises).
    """
    if job.symbology is Symbology.QR:
        return render_qr(job, rules)
    if job.symbology is Symbology.DATAMATRIX:
        return render_datamatrix(job, rules, backend)
    if job.symbology is Symbology.CODE128:
        return render_code128(job, rules)
    raise JobInputError(
        f"Unsupported symbology: {job.symbology!r}",
        code=ErrorCode.SYMBOLOGY,
        context={"symbology": job.symbology},
    )


def generate(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    output_format: Union[ImageFormat, str] = ImageFormat.PNG,
    backend: Optional[DataMatrixBackend] = None,
) -> bytes:
    """
    Produce the final image bytes for ``job``.

    Output pixel size equals the job's outer geometry; square symbols are
    centred inside the inner area, then the margin is added.

    Example:
        >>> png = generate(job)
        >>> jpg = generate(job, output_format="jpg")
    """
    fmt = ImageFormat.parse(output_format)
    code = render_code(job, rules, backend)
    canvas = compute_canvas(job)
    placed = fit_to_area(code, canvas.inner_width, canvas.inner_height)
    png = compose(job, placed, rules)
    data = convert_format(png, fmt)
    logger.info(
        "Generated %s %s: %dx%dpx, %d bytes",
        job.symbology.value,
        fmt.value,
        canvas.pixel_width,
        canvas.pixel_height,
        len(data),
    )
    return data


async def generate_async(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    output_format: Union[ImageFormat, str] = ImageFormat.PNG,
    backend: Optional[DataMatrixBackend] = None,
) -> bytes:
    """Async wrapper for generate (for thread pools)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, lambda: generate(job, rules, output_format, backend)
    )

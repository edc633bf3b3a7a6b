"""
RU: Компоновщик полей: код в центре белого холста внешнего размера задания, проверка монохромности, PNG.
EN: Margin compositor: place the inner-area code raster on the job's outer canvas and export PNG.

Output dimensions always equal the job's outer pixel geometry:

    +--------------------------- pixel_width ---------------------------+
    | margin_px                                                         |
    |      +------------------ inner_w x inner_h -----------------+     |
    |      |                  code raster                         |     |
    |      +------------------------------------------------------+     |
    +-------------------------------------------------------------------+
"""

from __future__ import annotations

import logging

from PIL import Image

from labelraster.barcodegen.sizing import (
    DEFAULT_RULES,
    SizingRules,
    check_job,
    compute_canvas,
)
from labelraster.constants import WHITE
from labelraster.errors import GeometryError, InvariantViolationError, JobInputError
from labelraster.export.png import encode_png
from labelraster.model.enums import ErrorCode, Symbology
from labelraster.model.job import Job
from labelraster.raster import (
    RasterBuffer,
    assert_monochrome,
    invert,
    threshold_to_monochrome,
)

logger = logging.getLogger(__name__)

__all__ = ["compose_raster", "compose"]


def compose_raster(
    job: Job, code: RasterBuffer, rules: SizingRules = DEFAULT_RULES
) -> RasterBuffer:
    """
    Composite ``code`` into the job's outer canvas.

    Raises:
        JobInputError: malformed job.
        GeometryError: no inner area, or ``code`` is not ``inner_w x inner_h``.
        InvariantViolationError: ``code`` (or the composite) is not strictly monochrome.
    """
    if not isinstance(job.symbology, Symbology):
        raise JobInputError(
            f"Unsupported symbology: {job.symbology!r}", code=ErrorCode.SYMBOLOGY
        )
    check_job(job, job.symbology, rules)
    canvas = compute_canvas(job)

    expected = (canvas.inner_width, canvas.inner_height)
    if code.size != expected:
        logger.error(
            "Code raster %dx%dpx does not match inner area %dx%dpx",
            code.width,
            code.height,
            *expected,
        )
        raise GeometryError(
            f"Code raster is {code.width}x{code.height}px but the inner area is "
            f"{expected[0]}x{expected[1]}px",
            code=ErrorCode.INNER,
            context={
                "code_width": code.width,
                "code_height": code.height,
                "inner_width": expected[0],
                "inner_height": expected[1],
            },
        )

    # Входной растр не "чинится": нарушение означает дефект рендерера
    assert_monochrome(code)

    img = Image.new("RGBA", (canvas.pixel_width, canvas.pixel_height), WHITE)
    img.paste(code.to_image(), (canvas.margin_px, canvas.margin_px))
    composite = RasterBuffer.from_image(img)
    if job.invert_output:
        composite = invert(composite)

    mono = threshold_to_monochrome(composite, rules.mono_threshold)
    if mono.data != composite.data:
        logger.error("Composite changed under the monochrome threshold pass")
        raise InvariantViolationError(
            "Composite raster is not strictly monochrome",
            context={"width": composite.width, "height": composite.height},
        )
    assert_monochrome(mono)
    logger.debug(
        "Composed %dx%dpx (margin %dpx, inverted=%s)",
        mono.width,
        mono.height,
        canvas.margin_px,
        job.invert_output,
    )
    return mono


def compose(job: Job, code: RasterBuffer, rules: SizingRules = DEFAULT_RULES) -> bytes:
    """Composite ``code`` and encode the result as PNG bytes."""
    return encode_png(compose_raster(job, code, rules))

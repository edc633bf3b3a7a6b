"""
RU: Общие калькуляторы размеров и плотности для рендереров и валидаторов.
EN: Shared sizing-and-density calculators, one per symbology.

Рендерер и валидатор вызывают одни и те же функции, поэтому граница
"пройдёт / не пройдёт" у них совпадает по построению:

    check_job -> compute_canvas -> plan_qr / plan_datamatrix / plan_code128

Пороговые значения не прячутся в глобальных переменных модулей: они
собраны в SizingRules и передаются в каждый калькулятор явно.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from typing import Any, Final, Mapping, Optional

from labelraster.constants import (
    CODE128_MAX_PAYLOAD_LEN,
    CODE128_MIN_BAR_PX,
    CODE128_MIN_HEIGHT_PX,
    DATAMATRIX_MIN_MODULE_PX,
    MONO_THRESHOLD,
    QR_MIN_MODULE_PX,
)
from labelraster.errors import DensityError, EncodingError, GeometryError, JobInputError
from labelraster.model.enums import ErrorCode, Symbology, Unit
from labelraster.model.job import Job, PhysicalSize
from labelraster.units import (
    MM_PER_INCH,
    compute_pixel_size,
    in_to_mm,
    margin_to_pixels,
    mm_to_in,
)

logger = logging.getLogger(__name__)

__all__ = [
    "SizingRules",
    "DEFAULT_RULES",
    "SizeLimits",
    "CODE128_UI_SIZE_LIMITS",
    "CanvasGeometry",
    "QrLayout",
    "DataMatrixLayout",
    "Code128Layout",
    "check_job",
    "compute_canvas",
    "plan_qr",
    "plan_datamatrix",
    "plan_code128",
    "apply_size_limits",
]


@dataclass(frozen=True)
class SizingRules:
    """
    Named thresholds used by every sizing calculator.

    Attributes:
        qr_min_module_px: Minimum pixels per QR module (scan reliability).
        datamatrix_min_module_px: Minimum pixels per Data Matrix module.
        code128_min_bar_px: Minimum pixels per Code128 module (narrowest bar).
        code128_min_height_px: Minimum inner height of a Code128 symbol.
        code128_max_payload_len: Longest Code128 payload accepted.
        mono_threshold: Mean-RGB threshold used by monochrome passes.
    """

    qr_min_module_px: int = QR_MIN_MODULE_PX
    datamatrix_min_module_px: int = DATAMATRIX_MIN_MODULE_PX
    code128_min_bar_px: int = CODE128_MIN_BAR_PX
    code128_min_height_px: int = CODE128_MIN_HEIGHT_PX
    code128_max_payload_len: int = CODE128_MAX_PAYLOAD_LEN
    mono_threshold: int = MONO_THRESHOLD

    def __post_init__(self) -> None:
        # Все пороги >= 1, порог монохромности в диапазоне канала 0..255
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Sizing rule {f.name!r} must be an integer, got {value!r}")
            if f.name == "mono_threshold":
                if not 0 <= value <= 255:
                    raise ValueError(
                        f"Sizing rule 'mono_threshold' must be within 0..255, got {value!r}"
                    )
            elif value < 1:
                raise ValueError(f"Sizing rule {f.name!r} must be >= 1, got {value!r}")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "SizingRules":
        """
        Build rules from a loaded config dict; unknown keys are ignored.

        Raises:
            ValueError: a rule value is not an integer or is out of range.
        """
        return cls(**{f.name: config[f.name] for f in fields(cls) if f.name in config})


DEFAULT_RULES: Final[SizingRules] = SizingRules()


@dataclass(frozen=True)
class SizeLimits:
    """Externally imposed physical range (UI layer), expressed in ``unit``."""

    unit: Unit
    min_width: float
    max_width: float
    min_height: float
    max_height: float

    def check(self, size: PhysicalSize) -> None:
        width = _convert(size.width, size.unit, self.unit)
        height = _convert(size.height, size.unit, self.unit)
        tol = 1e-9
        u = self.unit.value
        if not (self.min_width - tol <= width <= self.max_width + tol):
            raise JobInputError(
                f"Width must be between {self.min_width} and {self.max_width} {u} "
                f"(got {width:.3f} {u}).",
                code=ErrorCode.SIZE,
                context={"width": width, "unit": u},
            )
        if not (self.min_height - tol <= height <= self.max_height + tol):
            raise JobInputError(
                f"Height must be between {self.min_height} and {self.max_height} {u} "
                f"(got {height:.3f} {u}).",
                code=ErrorCode.SIZE,
                context={"height": height, "unit": u},
            )


CODE128_UI_SIZE_LIMITS: Final[SizeLimits] = SizeLimits(
    unit=Unit.MILLIMETER,
    min_width=20.0,
    max_width=50.0,
    min_height=3.0,
    max_height=10.0,
)


@dataclass(frozen=True)
class CanvasGeometry:
    """Outer pixel geometry of a job plus the margin in pixels."""

    pixel_width: int
    pixel_height: int
    margin_px: int

    @property
    def inner_width(self) -> int:
        return self.pixel_width - 2 * self.margin_px

    @property
    def inner_height(self) -> int:
        return self.pixel_height - 2 * self.margin_px

    @property
    def code_square_px(self) -> int:
        return min(self.inner_width, self.inner_height)


@dataclass(frozen=True)
class QrLayout:
    module_count: int
    scale: int
    code_px: int
    offset: int


@dataclass(frozen=True)
class DataMatrixLayout:
    module_count: int
    scale: int

    @property
    def side_px(self) -> int:
        return self.module_count * self.scale


@dataclass(frozen=True)
class Code128Layout:
    base_width: int
    scale: int
    width: int
    height: int
    offset_x: int


# ==============================================================================
# JOB CHECKS
# ==============================================================================


def _is_finite_number(value: Any) -> bool:
    return (
        not isinstance(value, bool)
        and isinstance(value, (int, float))
        and math.isfinite(value)
    )


def _is_positive_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer() and value > 0
    return isinstance(value, int) and value > 0


def check_job(
    job: Job, symbology: Symbology, rules: SizingRules = DEFAULT_RULES
) -> None:
    """
    Input-shape checks shared by renderers and validators.

    Raises:
        JobInputError: with the matching ErrorCode for the first defect found.
    """
    if job.symbology != symbology:
        raise JobInputError(
            f"Job symbology must be {symbology.value!r} (got {job.symbology!r}).",
            code=ErrorCode.SYMBOLOGY,
            context={"symbology": job.symbology, "expected": symbology.value},
        )

    if not isinstance(job.payload, str) or not job.payload.strip():
        raise JobInputError(
            "Payload must be a non-empty string.", code=ErrorCode.PAYLOAD
        )

    if symbology is Symbology.CODE128:
        length = len(job.payload.strip())
        if length > rules.code128_max_payload_len:
            raise JobInputError(
                f"Payload too long ({length} chars). Please shorten it "
                f"(max {rules.code128_max_payload_len}).",
                code=ErrorCode.PAYLOAD,
                context={"length": length},
            )

    size = job.size
    if not _is_positive_int(size.dpi):
        raise JobInputError(
            f"DPI must be an integer greater than 0 (got {size.dpi!r}).",
            code=ErrorCode.DPI,
        )
    if not _is_finite_number(size.width) or size.width <= 0:
        raise JobInputError(
            f"Width must be a finite number > 0 (got {size.width!r}).",
            code=ErrorCode.SIZE,
        )
    if not _is_finite_number(size.height) or size.height <= 0:
        raise JobInputError(
            f"Height must be a finite number > 0 (got {size.height!r}).",
            code=ErrorCode.SIZE,
        )
    if not isinstance(size.unit, Unit):
        raise JobInputError(
            f"Unit must be 'in' or 'mm' (got {size.unit!r}).", code=ErrorCode.UNIT
        )

    margin = job.margin.value
    if not _is_finite_number(margin) or margin < 0:
        raise JobInputError(
            f"Margin must be a finite number >= 0 (got {margin!r}).",
            code=ErrorCode.MARGIN,
        )
    if margin * 2 > size.width or margin * 2 > size.height:
        raise JobInputError(
            "Margin cannot exceed half of width or height.",
            code=ErrorCode.MARGIN,
            context={
                "margin": margin,
                "max_margin_width": size.width / 2,
                "max_margin_height": size.height / 2,
                "unit": size.unit.value,
            },
        )


def compute_canvas(job: Job) -> CanvasGeometry:
    """
    Outer pixel geometry and margin in pixels for a shape-checked job.

    Raises:
        GeometryError: when no inner area remains after the margin.
    """
    dpi = int(job.size.dpi)
    geometry = compute_pixel_size(job.size, dpi)
    margin_px = margin_to_pixels(job.margin.value, job.size.unit, dpi)
    canvas = CanvasGeometry(
        pixel_width=geometry.pixel_width,
        pixel_height=geometry.pixel_height,
        margin_px=margin_px,
    )
    if canvas.inner_width <= 0 or canvas.inner_height <= 0:
        raise GeometryError(
            f"Margin is too large at {dpi} DPI: no inner area remains "
            f"({canvas.pixel_width}x{canvas.pixel_height}px outer, "
            f"margin {margin_px}px, inner {canvas.inner_width}x{canvas.inner_height}px).",
            code=ErrorCode.INNER,
            context={
                "pixel_width": canvas.pixel_width,
                "pixel_height": canvas.pixel_height,
                "margin_px": margin_px,
                "inner_width": canvas.inner_width,
                "inner_height": canvas.inner_height,
            },
        )
    logger.debug(
        "Canvas %dx%dpx, margin %dpx, inner %dx%dpx",
        canvas.pixel_width,
        canvas.pixel_height,
        margin_px,
        canvas.inner_width,
        canvas.inner_height,
    )
    return canvas


# ==============================================================================
# SUGGESTIONS
# ==============================================================================


def _convert(value: float, src: Unit, dst: Unit) -> float:
    if src is dst:
        return value
    return mm_to_in(value) if src is Unit.MILLIMETER else in_to_mm(value)


def _ceil3(value: float) -> str:
    # Вверх до 0.001: подсказанный размер не должен снова упасть ниже минимума
    thousandths = math.ceil(round(value * 1000, 6))
    text = f"{thousandths / 1000:.3f}"
    return text.rstrip("0").rstrip(".")


def _format_length(px: int, dpi: int, unit: Unit) -> str:
    inches = px / dpi
    value = inches if unit is Unit.INCH else inches * MM_PER_INCH
    return f"{_ceil3(value)}{unit.value}"


def _suggest_physical(px: int, dpi: int, unit: Unit) -> str:
    """``"0.5in (~12.7mm)"`` with the job unit first, each rounded up."""
    return f"{_format_length(px, dpi, unit)} (~{_format_length(px, dpi, unit.complement)})"


# ==============================================================================
# PER-SYMBOLOGY PLANS
# ==============================================================================


def plan_qr(
    canvas: CanvasGeometry,
    module_count: int,
    size: PhysicalSize,
    rules: SizingRules = DEFAULT_RULES,
) -> QrLayout:
    """
    Integer module scale for a square QR symbol inside the inner area.

    Raises:
        EncodingError: module count is not positive.
        DensityError: scale below ``rules.qr_min_module_px``.
    """
    n = module_count
    if n <= 0:
        raise EncodingError(
            "Unable to determine QR module density for this payload.",
            context={"module_count": n},
        )
    dpi = int(size.dpi)
    code_px = canvas.code_square_px
    scale = code_px // n
    minimum = max(1, rules.qr_min_module_px)
    if scale < minimum:
        min_code_px = n * minimum
        min_outer_px = min_code_px + 2 * canvas.margin_px
        raise DensityError(
            f"QR too small for payload at current size: {scale}px/module "
            f"(min {minimum}px/module). Need at least {min_code_px}px "
            f"code area, which is about {_suggest_physical(min_outer_px, dpi, size.unit)} "
            f"outer size at {dpi} DPI. Increase size or DPI, reduce margin or payload length.",
            code=ErrorCode.TOO_SMALL,
            context={
                "code_px": code_px,
                "module_count": n,
                "scale": scale,
                "min_module_px": minimum,
                "min_code_px": min_code_px,
                "suggested_min_outer_px": min_outer_px,
            },
        )
    return QrLayout(
        module_count=n,
        scale=scale,
        code_px=code_px,
        offset=(code_px - n * scale) // 2,
    )


def plan_datamatrix(
    canvas: CanvasGeometry,
    module_count: int,
    size: PhysicalSize,
    rules: SizingRules = DEFAULT_RULES,
) -> DataMatrixLayout:
    """
    Integer module scale for a tight square Data Matrix symbol.

    Raises:
        EncodingError: module count is not positive.
        DensityError: scale below ``rules.datamatrix_min_module_px``.
    """
    n = module_count
    if n <= 0:
        raise EncodingError(
            "Unable to determine Data Matrix module dimensions.",
            context={"module_count": n},
        )
    dpi = int(size.dpi)
    target = canvas.code_square_px
    scale = target // n
    minimum = max(1, rules.datamatrix_min_module_px)
    if scale < minimum:
        min_code_px = n * minimum
        min_outer_px = min_code_px + 2 * canvas.margin_px
        raise DensityError(
            f"Output too small for reliable scanning: {scale}px/module "
            f"(min {minimum}px/module) for a {n}x{n} module symbol. "
            f"Try at least {_suggest_physical(min_outer_px, dpi, size.unit)} at {dpi} DPI.",
            code=ErrorCode.TOO_SMALL,
            context={
                "target_px": target,
                "module_count": n,
                "scale": scale,
                "min_module_px": minimum,
                "suggested_min_outer_px": min_outer_px,
            },
        )
    return DataMatrixLayout(module_count=n, scale=scale)


def plan_code128(
    canvas: CanvasGeometry,
    base_width: int,
    size: PhysicalSize,
    rules: SizingRules = DEFAULT_RULES,
) -> Code128Layout:
    """
    Largest integer bar scale that fits the inner width.

    Raises:
        DensityError: inner height below ``code128_min_height_px`` (too_small)
            or scale below ``code128_min_bar_px`` (too_dense).
        EncodingError: base width is not positive.
    """
    dpi = int(size.dpi)
    inner_w = canvas.inner_width
    inner_h = canvas.inner_height
    if inner_h < rules.code128_min_height_px:
        raise DensityError(
            f"Barcode height too small: {inner_h}px inner "
            f"(min {rules.code128_min_height_px}px). Increase height or DPI, or reduce margin.",
            code=ErrorCode.TOO_SMALL,
            context={"inner_height": inner_h},
        )
    if base_width <= 0:
        raise EncodingError(
            "Could not determine Code128 base width from bar geometry.",
            context={"base_width": base_width},
        )
    scale = inner_w // base_width
    minimum = max(1, rules.code128_min_bar_px)
    if scale < minimum:
        required_w = base_width * minimum
        suggested_px = required_w + 2 * canvas.margin_px
        raise DensityError(
            f"Barcode too dense for reliable scanning: {scale}px/module at inner width "
            f"{inner_w}px (min {minimum}px per bar/module, need about {required_w}px). "
            f"At {dpi} DPI, try width >= {_suggest_physical(suggested_px, dpi, size.unit)} "
            f"(including margin), or reduce payload length.",
            code=ErrorCode.TOO_DENSE,
            context={
                "inner_width": inner_w,
                "base_width": base_width,
                "scale": scale,
                "min_bar_px": minimum,
                "suggested_min_width_px": suggested_px,
            },
        )
    drawn = base_width * scale
    return Code128Layout(
        base_width=base_width,
        scale=scale,
        width=inner_w,
        height=inner_h,
        offset_x=(inner_w - drawn) // 2,
    )


def apply_size_limits(job: Job, size_limits: Optional[SizeLimits]) -> None:
    """Enforce an optional caller-supplied physical range."""
    if size_limits is not None:
        size_limits.check(job.size)

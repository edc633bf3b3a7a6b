"""
RU: Каноническое преобразование единиц и пиксельная математика (чистые, детерминированные функции).
EN: Canonical unit conversion and pixel math (pure, deterministic).

Правило округления (единое для рендереров и валидаторов):
    px = floor(inches * dpi + 0.5)

Для положительных значений это округление "половина от нуля", то есть
Math.round-совместимое поведение; встроенный round() (банковское
округление) здесь намеренно не используется.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Final, Protocol, Union

from labelraster.model.enums import Unit

__all__ = [
    "MM_PER_INCH",
    "PixelGeometry",
    "mm_to_in",
    "in_to_mm",
    "round_px",
    "to_pixels",
    "margin_to_pixels",
    "compute_pixel_size",
    "format_size",
]

MM_PER_INCH: Final[float] = 25.4


class _SizeLike(Protocol):
    unit: Any
    width: float
    height: float


@dataclass(frozen=True)
class PixelGeometry:
    """Outer pixel dimensions derived from a physical size and DPI."""

    pixel_width: int
    pixel_height: int


def _assert_finite(name: str, value: Any) -> None:
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
    ):
        raise TypeError(f"{name} must be a finite number (received: {value!r})")


def _assert_positive(name: str, value: Any) -> None:
    try:
        _assert_finite(name, value)
    except TypeError as e:
        raise ValueError(str(e)) from e
    if value <= 0:
        raise ValueError(f"{name} must be > 0 (received: {value!r})")


def _assert_positive_int(name: str, value: Any) -> int:
    _assert_positive(name, value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{name} must be an integer (received: {value!r})")
        return int(value)
    return int(value)


def _as_unit(unit: Union[Unit, str]) -> Unit:
    if isinstance(unit, Unit):
        return unit
    for member in Unit:
        if member.value == unit:
            return member
    raise TypeError(f"Unsupported unit: {unit!r}")


def mm_to_in(mm: float) -> float:
    """Convert millimeters to inches."""
    _assert_finite("mm", mm)
    return mm / MM_PER_INCH


def in_to_mm(inches: float) -> float:
    """Convert inches to millimeters."""
    _assert_finite("inches", inches)
    return inches * MM_PER_INCH


def round_px(value: float) -> int:
    """Round a non-negative pixel quantity half-up."""
    return int(math.floor(value + 0.5))


def to_pixels(value: float, unit: Union[Unit, str], dpi: int) -> int:
    """
    Convert a physical length to an integer pixel count.

    Args:
        value: Length in ``unit``, must be finite and > 0.
        unit: ``Unit.INCH`` / ``Unit.MILLIMETER`` (or "in" / "mm").
        dpi: Positive integer resolution.

    Returns:
        ``round_px(inches * dpi)``.

    Raises:
        ValueError: value <= 0 or non-finite, dpi <= 0 or non-integer.
        TypeError: unknown unit.

    Example:
        >>> to_pixels(25.4, "mm", 300)
        300
    """
    _assert_positive("value", value)
    dpi = _assert_positive_int("dpi", dpi)
    inches = mm_to_in(value) if _as_unit(unit) is Unit.MILLIMETER else value
    return round_px(inches * dpi)


def margin_to_pixels(value: float, unit: Union[Unit, str], dpi: int) -> int:
    """Margin in pixels: zero stays zero, anything positive goes through :func:`to_pixels`."""
    _assert_finite("margin", value)
    if value < 0:
        raise ValueError(f"margin must be >= 0 (received: {value!r})")
    if value == 0:
        return 0
    return to_pixels(value, unit, dpi)


def compute_pixel_size(size: _SizeLike, dpi: int) -> PixelGeometry:
    """
    Outer pixel geometry for a physical size.

    Width and height are rounded independently, so the pixel ratio of a
    non-square label can drift slightly from the physical ratio.

    Example:
        >>> compute_pixel_size(PhysicalSize("in", 2, 1, 203), 203)
        PixelGeometry(pixel_width=406, pixel_height=203)
    """
    _assert_positive("width", size.width)
    _assert_positive("height", size.height)
    _assert_positive_int("dpi", dpi)
    return PixelGeometry(
        pixel_width=to_pixels(size.width, size.unit, dpi),
        pixel_height=to_pixels(size.height, size.unit, dpi),
    )


def format_size(size: _SizeLike, precision: int = 3) -> str:
    """Human-readable size without trailing zeros, e.g. ``"2 × 1 in"``."""
    _assert_positive("width", size.width)
    _assert_positive("height", size.height)
    unit = _as_unit(size.unit)
    return f"{_trim(size.width, precision)} × {_trim(size.height, precision)} {unit.value}"


def _trim(value: float, precision: int) -> str:
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text

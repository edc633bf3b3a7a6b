import math

import pytest

from labelraster.model import PhysicalSize, Unit
from labelraster.units import (
    MM_PER_INCH,
    PixelGeometry,
    compute_pixel_size,
    format_size,
    in_to_mm,
    margin_to_pixels,
    mm_to_in,
    round_px,
    to_pixels,
)


class TestConversions:
    def test_mm_in_roundtrip(self) -> None:
        assert mm_to_in(25.4) == pytest.approx(1.0)
        assert in_to_mm(1.0) == pytest.approx(MM_PER_INCH)
        assert mm_to_in(in_to_mm(2.5)) == pytest.approx(2.5)

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), "1", None, True])
    def test_conversion_rejects_non_finite(self, bad: object) -> None:
        with pytest.raises(TypeError):
            mm_to_in(bad)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            in_to_mm(bad)  # type: ignore[arg-type]


class TestToPixels:
    # === Examples ===
    @pytest.mark.parametrize(
        "value,unit,dpi,expected",
        [
            (1, "in", 600, 600),
            (25.4, "mm", 300, 300),
            (2, Unit.INCH, 203, 406),
            (1, Unit.INCH, 203, 203),
            (50, Unit.MILLIMETER, 600, 1181),
        ],
    )
    def test_examples(self, value: float, unit: object, dpi: int, expected: int) -> None:
        assert to_pixels(value, unit, dpi) == expected  # type: ignore[arg-type]

    def test_half_rounds_up(self) -> None:
        # Банковское округление дало бы 2
        assert to_pixels(2.5, "in", 1) == 3
        assert round_px(0.5) == 1
        assert round_px(1.49) == 1

    def test_integral_float_dpi_accepted(self) -> None:
        assert to_pixels(1, "in", 300.0) == 300  # type: ignore[arg-type]

    # === Errors ===
    @pytest.mark.parametrize("value", [0, -1, float("nan"), float("inf")])
    def test_invalid_value(self, value: float) -> None:
        with pytest.raises(ValueError):
            to_pixels(value, "in", 300)

    @pytest.mark.parametrize("dpi", [0, -300, 300.5])
    def test_invalid_dpi(self, dpi: float) -> None:
        with pytest.raises(ValueError):
            to_pixels(1, "in", dpi)  # type: ignore[arg-type]

    def test_unknown_unit(self) -> None:
        with pytest.raises(TypeError, match="Unsupported unit"):
            to_pixels(1, "cm", 300)  # type: ignore[arg-type]


class TestMarginAndGeometry:
    def test_zero_margin_is_zero(self) -> None:
        assert margin_to_pixels(0, "mm", 300) == 0
        assert margin_to_pixels(0.0, Unit.INCH, 600) == 0

    def test_positive_margin(self) -> None:
        assert margin_to_pixels(1, "mm", 600) == 24
        assert margin_to_pixels(0.05, "in", 300) == 15

    def test_negative_margin(self) -> None:
        with pytest.raises(ValueError):
            margin_to_pixels(-0.1, "in", 300)

    def test_compute_pixel_size(self) -> None:
        size = PhysicalSize(unit=Unit.INCH, width=2, height=1, dpi=203)
        assert compute_pixel_size(size, 203) == PixelGeometry(406, 203)

    def test_compute_pixel_size_rounds_independently(self) -> None:
        size = PhysicalSize(unit=Unit.MILLIMETER, width=50, height=10, dpi=600)
        geometry = compute_pixel_size(size, 600)
        assert (geometry.pixel_width, geometry.pixel_height) == (1181, 236)
        assert not math.isclose(geometry.pixel_width / geometry.pixel_height, 5.0)

    def test_compute_pixel_size_rejects_bad_width(self) -> None:
        size = PhysicalSize(unit=Unit.INCH, width=0, height=1, dpi=300)
        with pytest.raises(ValueError):
            compute_pixel_size(size, 300)


class TestFormatSize:
    def test_trailing_zeros_trimmed(self) -> None:
        assert format_size(PhysicalSize(Unit.INCH, 2, 1, 203)) == "2 × 1 in"
        assert format_size(PhysicalSize(Unit.MILLIMETER, 25.4, 12.5, 300)) == "25.4 × 12.5 mm"

    def test_precision(self) -> None:
        size = PhysicalSize(Unit.INCH, 1.23456, 1, 300)
        assert format_size(size) == "1.235 × 1 in"
        assert format_size(size, precision=1) == "1.2 × 1 in"

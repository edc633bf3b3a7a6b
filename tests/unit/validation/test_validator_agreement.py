"""Validator and renderer must agree: ok exactly when rendering succeeds."""

import itertools
from typing import Any, Callable, Optional

import pytest

from labelraster.barcodegen.code128 import render_code128
from labelraster.barcodegen.datamatrix import render_datamatrix
from labelraster.barcodegen.qr import render_qr
from labelraster.barcodegen.sizing import SizingRules
from labelraster.errors import LabelRasterError
from labelraster.model import ErrorCode, Job, Symbology, Unit
from labelraster.validation import (
    validate_code128_job,
    validate_datamatrix_job,
    validate_qr_job,
)

SIZES_IN = [0.05, 0.1, 0.2, 0.28, 0.5, 1.0]
DPIS = [72, 203, 300]
MARGINS_IN = [0.0, 0.02, 0.05]


def _render_code(render: Callable[[], Any]) -> Optional[ErrorCode]:
    try:
        render()
    except LabelRasterError as e:
        return e.code
    return None


class TestAgreement:
    @pytest.mark.parametrize("payload", ["HELLO", "https://example.com/label/0001"])
    def test_qr(self, make_job: Callable[..., Job], payload: str) -> None:
        for side, dpi, margin in itertools.product(SIZES_IN, DPIS, MARGINS_IN):
            job = make_job(payload=payload, width=side, height=side, dpi=dpi, margin=margin)
            result = validate_qr_job(job)
            assert result.code == _render_code(lambda: render_qr(job)), (side, dpi, margin)

    def test_datamatrix(self, make_job: Callable[..., Job], fake_dm_backend: Any) -> None:
        for side, dpi, margin in itertools.product(SIZES_IN, DPIS, MARGINS_IN):
            job = make_job(
                symbology=Symbology.DATAMATRIX, width=side, height=side, dpi=dpi, margin=margin
            )
            result = validate_datamatrix_job(job, backend=fake_dm_backend)
            rendered = _render_code(lambda: render_datamatrix(job, backend=fake_dm_backend))
            assert result.code == rendered, (side, dpi, margin)

    @pytest.mark.parametrize("payload", ["AB", "ABC123", "A" * 30])
    def test_code128(self, make_job: Callable[..., Job], payload: str) -> None:
        widths_mm = [20, 35, 50]
        heights_mm = [3, 6, 10]
        margins_mm = [0, 0.5, 1]
        for width, height, dpi, margin in itertools.product(
            widths_mm, heights_mm, DPIS, margins_mm
        ):
            job = make_job(
                symbology=Symbology.CODE128,
                payload=payload,
                unit=Unit.MILLIMETER,
                width=width,
                height=height,
                dpi=dpi,
                margin=margin,
            )
            result = validate_code128_job(job)
            rendered = _render_code(lambda: render_code128(job))
            assert result.code == rendered, (width, height, dpi, margin)

    @pytest.mark.parametrize(
        "rules",
        [
            SizingRules(qr_min_module_px=1),
            SizingRules(qr_min_module_px=1, mono_threshold=1),
            SizingRules(qr_min_module_px=8, mono_threshold=255),
            SizingRules.from_config({"qr_min_module_px": 2, "code128_min_bar_px": 1}),
        ],
    )
    def test_non_default_rules(
        self, make_job: Callable[..., Job], fake_dm_backend: Any, rules: SizingRules
    ) -> None:
        for side, dpi, margin in itertools.product(SIZES_IN, DPIS, MARGINS_IN):
            qr_job = make_job(width=side, height=side, dpi=dpi, margin=margin)
            assert validate_qr_job(qr_job, rules).code == _render_code(
                lambda: render_qr(qr_job, rules)
            ), (side, dpi, margin)

            dm_job = make_job(
                symbology=Symbology.DATAMATRIX, width=side, height=side, dpi=dpi, margin=margin
            )
            assert validate_datamatrix_job(dm_job, rules, backend=fake_dm_backend).code == (
                _render_code(lambda: render_datamatrix(dm_job, rules, fake_dm_backend))
            ), (side, dpi, margin)

    def test_sweep_covers_both_outcomes(self, make_job: Callable[..., Job]) -> None:
        outcomes = {
            validate_qr_job(make_job(width=side, height=side, dpi=dpi)).ok
            for side, dpi in itertools.product(SIZES_IN, DPIS)
        }
        assert outcomes == {True, False}

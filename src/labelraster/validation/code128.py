"""
RU: Предварительная проверка Code128: длина данных, высота и плотность полос.
EN: Code128 pre-flight validator (payload length, minimum height, bar density).
"""

from __future__ import annotations

from typing import Optional

from labelraster.barcodegen.code128 import base_width, encode_code128_bars
from labelraster.barcodegen.sizing import (
    DEFAULT_RULES,
    SizeLimits,
    SizingRules,
    apply_size_limits,
    check_job,
    compute_canvas,
    plan_code128,
)
from labelraster.model.enums import Symbology
from labelraster.model.job import Job
from labelraster.validation.result import ValidationResult, capture

__all__ = ["validate_code128_job"]


def validate_code128_job(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    size_limits: Optional[SizeLimits] = None,
) -> ValidationResult:
    """
    Pass exactly when :func:`render_code128` would succeed for ``job``.

    Pass ``CODE128_UI_SIZE_LIMITS`` as ``size_limits`` to also enforce the
    20-50 mm x 3-10 mm range offered by the label editor.
    """

    def check() -> None:
        check_job(job, Symbology.CODE128, rules)
        apply_size_limits(job, size_limits)
        canvas = compute_canvas(job)
        bars = encode_code128_bars(job.payload.strip())
        plan_code128(canvas, base_width(bars), job.size, rules)

    return capture(check)

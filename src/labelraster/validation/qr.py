"""
RU: Предварительная проверка QR-задания (та же арифметика размеров, что и у рендерера).
EN: QR pre-flight validator sharing the renderer's sizing chain.
"""

from __future__ import annotations

from typing import Optional

from labelraster.barcodegen.qr import encode_qr_matrix
from labelraster.barcodegen.sizing import (
    DEFAULT_RULES,
    SizeLimits,
    SizingRules,
    apply_size_limits,
    check_job,
    compute_canvas,
    plan_qr,
)
from labelraster.model.enums import Symbology
from labelraster.model.job import Job
from labelraster.validation.result import ValidationResult, capture

__all__ = ["validate_qr_job"]


def validate_qr_job(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    size_limits: Optional[SizeLimits] = None,
) -> ValidationResult:
    """Pass exactly when :func:`render_qr` would succeed for ``job``."""

    def check() -> None:
        check_job(job, Symbology.QR, rules)
        apply_size_limits(job, size_limits)
        canvas = compute_canvas(job)
        # Только число модулей: растр здесь не строится
        module_count = len(encode_qr_matrix(job.payload))
        plan_qr(canvas, module_count, job.size, rules)

    return capture(check)

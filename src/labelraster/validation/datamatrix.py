"""
RU: Предварительная проверка Data Matrix: зондирование числа модулей и проверка масштаба.
EN: Data Matrix pre-flight validator; probes the encoder only for the module count.
"""

from __future__ import annotations

from typing import Optional

from labelraster.barcodegen.datamatrix import probe_module_matrix
from labelraster.barcodegen.dm_backends import DataMatrixBackend, select_backend
from labelraster.barcodegen.sizing import (
    DEFAULT_RULES,
    SizeLimits,
    SizingRules,
    apply_size_limits,
    check_job,
    compute_canvas,
    plan_datamatrix,
)
from labelraster.model.enums import Symbology
from labelraster.model.job import Job
from labelraster.validation.result import ValidationResult, capture

__all__ = ["validate_datamatrix_job"]


def validate_datamatrix_job(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    size_limits: Optional[SizeLimits] = None,
    backend: Optional[DataMatrixBackend] = None,
) -> ValidationResult:
    """
    Pass exactly when :func:`render_datamatrix` would succeed for ``job``.

    A missing encoder backend is reported with code ``encode``.
    """

    def check() -> None:
        check_job(job, Symbology.DATAMATRIX, rules)
        apply_size_limits(job, size_limits)
        canvas = compute_canvas(job)
        matrix = probe_module_matrix(
            job.payload, backend or select_backend(), rules.mono_threshold
        )
        plan_datamatrix(canvas, matrix.module_count, job.size, rules)

    return capture(check)

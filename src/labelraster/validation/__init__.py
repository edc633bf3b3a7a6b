"""
validation

Предварительная проверка заданий печати. Валидаторы не бросают исключений
для дефектов задания: они возвращают ValidationResult с кодом ошибки.

Public API:
    - validate_job / validate_job_async: диспетчер по символике
    - validate_qr_job, validate_datamatrix_job, validate_code128_job
    - ValidationResult, ValidationIssue
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from labelraster.barcodegen.sizing import DEFAULT_RULES, SizeLimits, SizingRules
from labelraster.model.enums import ErrorCode, Symbology
from labelraster.model.job import Job
from labelraster.validation.code128 import validate_code128_job
from labelraster.validation.datamatrix import validate_datamatrix_job
from labelraster.validation.qr import validate_qr_job
from labelraster.validation.result import ValidationIssue, ValidationResult

logger = logging.getLogger(__name__)

__all__ = [
    "ValidationIssue",
    "ValidationResult",
    "validate_code128_job",
    "validate_datamatrix_job",
    "validate_qr_job",
    "validate_job",
    "validate_job_async",
]


def validate_job(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    size_limits: Optional[SizeLimits] = None,
) -> ValidationResult:
    """Dispatch to the validator of ``job.symbology``."""
    if job.symbology is Symbology.QR:
        result = validate_qr_job(job, rules, size_limits)
    elif job.symbology is Symbology.DATAMATRIX:
        result = validate_datamatrix_job(job, rules, size_limits)
    elif job.symbology is Symbology.CODE128:
        result = validate_code128_job(job, rules, size_limits)
    else:
        result = ValidationResult.failure(
            ErrorCode.SYMBOLOGY,
            f"Unsupported symbology: {job.symbology!r}",
            {"symbology": job.symbology},
        )
    if not result.ok:
        logger.info("Job rejected [%s]: %s", result.code, result.message)
    return result


async def validate_job_async(
    job: Job,
    rules: SizingRules = DEFAULT_RULES,
    size_limits: Optional[SizeLimits] = None,
) -> ValidationResult:
    """Async wrapper for validate_job (Data Matrix probing may call Ghostscript)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, lambda: validate_job(job, rules, size_limits)
    )

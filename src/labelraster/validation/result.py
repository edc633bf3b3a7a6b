"""
RU: Результат предварительной проверки задания (ok / ошибка с кодом).
EN: Validation result value returned by every validator instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from labelraster.errors import InvariantViolationError, LabelRasterError
from labelraster.model.enums import ErrorCode

logger = logging.getLogger(__name__)

__all__ = ["ValidationIssue", "ValidationResult", "capture"]


@dataclass(frozen=True)
class ValidationIssue:
    """First defect found in a job: closed-vocabulary code plus a human message."""

    code: ErrorCode
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message, "details": dict(self.details)}


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    error: Optional[ValidationIssue] = None

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def failure(
        cls,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ValidationResult":
        return cls(ok=False, error=ValidationIssue(code, message, details or {}))

    @classmethod
    def from_error(cls, error: LabelRasterError) -> "ValidationResult":
        code = error.code if error.code is not None else ErrorCode.ENCODE
        return cls.failure(code, error.message, error.context)

    @property
    def code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is None:
            return {"ok": self.ok}
        return {"ok": False, "error": self.error.to_dict()}


def capture(check: Callable[[], None]) -> ValidationResult:
    """
    Run a raising check and turn job defects into a ValidationResult.

    Invariant violations are programming defects and still propagate.
    """
    try:
        check()
    except InvariantViolationError:
        raise
    except LabelRasterError as e:
        logger.debug("Validation failed [%s]: %s", e.code, e.message)
        return ValidationResult.from_error(e)
    return ValidationResult.success()

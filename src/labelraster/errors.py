"""
Централизованные исключения генератора растров этикеток.

Иерархия типизированных исключений для всего конвейера
Job -> Validator -> Renderer -> Compositor. Каждое исключение несёт
код ошибки из закрытого словаря ErrorCode, чтобы валидаторы могли
превратить его в ValidationResult без разбора текста сообщения.

Example:
    >>> from labelraster.errors import LabelRasterError
    >>> try:
    ...     generate(job)
    ... except LabelRasterError as e:
    ...     logger.error("Generation failed: %s", e)
    ...     print(e.code)

Иерархия:
    LabelRasterError (базовое)
    ├── JobInputError
    ├── GeometryError
    ├── DensityError
    ├── EncodingError
    └── InvariantViolationError
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from labelraster.model.enums import ErrorCode

__all__: list[str] = [
    "LabelRasterError",
    "JobInputError",
    "GeometryError",
    "DensityError",
    "EncodingError",
    "InvariantViolationError",
]


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class LabelRasterError(Exception):
    """
    Базовое исключение для всех ошибок генерации.

    Attributes:
        message: Человекочитаемое сообщение об ошибке
        code: Код из ErrorCode (None для дефектов, не связанных с вводом)
        context: Вычисленные величины для диагностики (px, dpi, ...)

    Example:
        >>> raise LabelRasterError(
        ...     "Inner area is empty",
        ...     code=ErrorCode.INNER,
        ...     context={"inner_width": 0},
        ... )
    """

    default_code: Optional[ErrorCode] = None

    def __init__(
        self,
        message: str,
        *,
        code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# JOB DEFECTS
# ==============================================================================


class JobInputError(LabelRasterError):
    """
    Некорректная форма задания.

    Raises когда:
    - symbology не совпадает с вызванным рендерером
    - payload пустой
    - размер/DPI не конечные или не положительные, неизвестная единица
    - поле отрицательное или больше половины ширины/высоты
    """

    default_code = ErrorCode.PAYLOAD


class GeometryError(LabelRasterError):
    """Геометрически невыполнимое задание (поле съедает всю площадь, размеры растра не совпадают)."""

    default_code = ErrorCode.INNER


class DensityError(LabelRasterError):
    """
    Символ слишком плотный для выбранного размера.

    Сообщение содержит достигнутое значение px/module, минимум
    и рекомендуемый физический размер в единицах задания и в
    дополнительной единице.
    """

    default_code = ErrorCode.TOO_SMALL


class EncodingError(LabelRasterError):
    """Сбой внешнего кодировщика символики (исключение или пустой символ)."""

    default_code = ErrorCode.ENCODE


# ==============================================================================
# DEFECTS
# ==============================================================================


class InvariantViolationError(LabelRasterError):
    """
    Буфер нарушил инвариант строгой монохромности.

    Это дефект рендерера выше по конвейеру, а не ошибка ввода:
    такой буфер никогда не "исправляется" молча.
    """

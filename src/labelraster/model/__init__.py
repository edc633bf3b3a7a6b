"""
model

Доменная модель генератора этикеток: перечисления и неизменяемое задание печати.

Public API:
    - Symbology, Unit, ErrorCode: перечисления
    - Job, PhysicalSize, Margin: задание печати (frozen dataclasses)
"""

from .enums import ErrorCode, Symbology, Unit
from .job import Job, Margin, PhysicalSize

__all__ = [
    "ErrorCode",
    "Symbology",
    "Unit",
    "Job",
    "Margin",
    "PhysicalSize",
]

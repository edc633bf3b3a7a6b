"""
model/enums.py

(Краткое RU: Перечисления доменной модели генератора этикеток.)

EN: Domain enums for the label raster pipeline: symbologies, physical units
and the closed vocabulary of validation error codes.
NO rendering logic here!
"""

from __future__ import annotations

from enum import Enum
from typing import Literal


class Symbology(str, Enum):
    QR = "qr"
    DATAMATRIX = "datamatrix"
    CODE128 = "code128"

    @property
    def is_matrix(self) -> bool:
        return self in {Symbology.QR, Symbology.DATAMATRIX}

    def localized_name(self, lang: Literal["ru", "en"] = "ru") -> str:
        names = {
            "qr": {"ru": "QR код", "en": "QR code"},
            "datamatrix": {"ru": "DataMatrix", "en": "Data Matrix"},
            "code128": {"ru": "Code 128", "en": "Code 128"},
        }
        return names[self.value][lang] if lang in names[self.value] else self.value


class Unit(str, Enum):
    INCH = "in"
    MILLIMETER = "mm"

    @property
    def complement(self) -> "Unit":
        """The other supported unit (used in size suggestions)."""
        return Unit.MILLIMETER if self is Unit.INCH else Unit.INCH

    def localized_name(self, lang: Literal["ru", "en"] = "ru") -> str:
        names_ru = {self.INCH: "дюймы", self.MILLIMETER: "миллиметры"}
        names_en = {self.INCH: "inches", self.MILLIMETER: "millimeters"}
        return names_ru[self] if lang == "ru" else names_en[self]


class ErrorCode(str, Enum):
    # Ошибки формы задания
    SYMBOLOGY = "symbology"
    PAYLOAD = "payload"
    DPI = "dpi"
    SIZE = "size"
    UNIT = "unit"
    MARGIN = "margin"
    # Геометрия
    INNER = "inner"
    # Плотность / сканируемость
    TOO_SMALL = "too_small"
    TOO_DENSE = "too_dense"
    # Сбой кодировщика
    ENCODE = "encode"

"""
Общие значения по умолчанию и константы генератора.

EN: Single named source for defaults and sizing thresholds. SizingRules,
the raster helpers and the package config defaults all read from here.
No rendering logic here.
"""

from __future__ import annotations

from typing import Final, Tuple

from labelraster.model.enums import Symbology, Unit
from labelraster.model.job import Job, Margin, PhysicalSize
from labelraster.units import mm_to_in

# === RESOLUTION ===
DEFAULT_DPI: Final[int] = 600  # чёткая печать этикеток
DPI_PRESETS: Final[Tuple[int, ...]] = (203, 300, 600)

# === PHYSICAL SIZE ===
DEFAULT_UNIT: Final[Unit] = Unit.INCH
DEFAULT_WIDTH_IN: Final[float] = 1.0
DEFAULT_HEIGHT_IN: Final[float] = 1.0

# Поле задаётся в той же единице, что и размер задания
DEFAULT_MARGIN_MM: Final[float] = 1.0
DEFAULT_MARGIN_IN: Final[float] = mm_to_in(DEFAULT_MARGIN_MM)

DEFAULT_SYMBOLOGY: Final[Symbology] = Symbology.QR

# === SIZING THRESHOLDS ===
QR_MIN_MODULE_PX: Final[int] = 4
DATAMATRIX_MIN_MODULE_PX: Final[int] = 1
CODE128_MIN_BAR_PX: Final[int] = 2
CODE128_MIN_HEIGHT_PX: Final[int] = 24
CODE128_MAX_PAYLOAD_LEN: Final[int] = 256

# === RASTER ===
# Порог по среднему RGB: mean < MONO_THRESHOLD -> чёрный
MONO_THRESHOLD: Final[int] = 128
WHITE: Final[Tuple[int, int, int, int]] = (255, 255, 255, 255)

# Шаблон задания для инициализации UI (payload задаёт вызывающая сторона)
DEFAULT_JOB: Final[Job] = Job(
    symbology=DEFAULT_SYMBOLOGY,
    payload="",
    size=PhysicalSize(
        unit=DEFAULT_UNIT,
        width=DEFAULT_WIDTH_IN,
        height=DEFAULT_HEIGHT_IN,
        dpi=DEFAULT_DPI,
    ),
    margin=Margin(DEFAULT_MARGIN_IN),
)

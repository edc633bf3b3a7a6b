"""
Пакет labelraster
=================

Генератор пиксельно-точных монохромных растров этикеток со штрихкодами.

Этот пакет предоставляет:
    - Пересчёт физических размеров (дюймы / мм) в пиксели при заданном DPI
    - Рендереры QR, Data Matrix и Code128 с целочисленным масштабом модулей
    - Предварительные валидаторы с той же арифметикой, что и у рендереров
    - Компоновку полей и экспорт в PNG (JPEG/BMP для потребителей)

Пример базового использования:
    >>> from labelraster import Job, PhysicalSize, Margin, Symbology, Unit
    >>> from labelraster import generate, validate_job
    >>>
    >>> job = Job(
    ...     symbology=Symbology.QR,
    ...     payload="HELLO",
    ...     size=PhysicalSize(unit=Unit.INCH, width=1, height=1, dpi=600),
    ...     margin=Margin(0.04),
    ... )
    >>> if validate_job(job).ok:
    ...     png = generate(job)

Управление конфигурацией:
    >>> import os
    >>> os.environ['LABELRASTER_LOG_LEVEL'] = 'DEBUG'
    >>>
    >>> from labelraster import load_config, SizingRules
    >>> rules = SizingRules.from_config(load_config())

Версия: 0.1.0
Лицензия: MIT
Python: 3.11+
"""

import json
import logging
import logging.handlers
import os
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__description__ = "Pixel-exact monochrome label rasters for QR, Data Matrix and Code128"
__license__ = "MIT"
__python_requires__ = ">=3.11"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"labelraster требует Python 3.11 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================

_LOG_LEVELS: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _setup_logging() -> None:
    """
    Инициализировать общепакетную конфигурацию логирования.

    Настраивает логгер "labelraster" с:
    - Консольным обработчиком (stderr) для WARNING и выше
    - Ротирующим файловым обработчиком (10 МБ x 5), только если задана
      переменная окружения LABELRASTER_LOG_FILE

    Уровень задаётся переменной LABELRASTER_LOG_LEVEL
    (DEBUG, INFO, WARNING, ERROR, CRITICAL), по умолчанию INFO.

    Вызывается автоматически при импорте пакета. Идемпотентна.
    """
    log_level = _LOG_LEVELS.get(
        os.environ.get("LABELRASTER_LOG_LEVEL", "INFO").upper(), logging.INFO
    )

    root_logger = logging.getLogger("labelraster")
    if root_logger.handlers:
        return

    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file = os.environ.get("LABELRASTER_LOG_FILE")
    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_path,
                maxBytes=10 * 1024 * 1024,  # 10 МБ
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(
                "Не удалось инициализировать файловое логирование: %s. "
                "Используется только консоль.",
                e,
            )


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер в пространстве имён 'labelraster.'.

    Аргументы:
        module_name: Обычно `__name__`; '__main__' становится 'labelraster.main'.

    Пример:
        >>> logger = get_logger("my_plugin")
        >>> logger.name
        'labelraster.my_plugin'
    """
    if module_name == "labelraster" or module_name.startswith("labelraster."):
        return logging.getLogger(module_name)
    if module_name == "__main__":
        return logging.getLogger("labelraster.main")
    return logging.getLogger(f"labelraster.{module_name.lstrip('.')}")


# =============================================================================
# УПРАВЛЕНИЕ КОНФИГУРАЦИЕЙ
# =============================================================================

from . import constants  # noqa: E402

# Ключи совпадают с полями SizingRules; значения берутся из labelraster.constants
_DEFAULT_CONFIG: Dict[str, Any] = {
    "qr_min_module_px": constants.QR_MIN_MODULE_PX,
    "datamatrix_min_module_px": constants.DATAMATRIX_MIN_MODULE_PX,
    "code128_min_bar_px": constants.CODE128_MIN_BAR_PX,
    "code128_min_height_px": constants.CODE128_MIN_HEIGHT_PX,
    "code128_max_payload_len": constants.CODE128_MAX_PAYLOAD_LEN,
    "mono_threshold": constants.MONO_THRESHOLD,
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Загрузить конфигурацию из labelraster.json или вернуть значения по умолчанию.

    Пользовательские ключи перекрывают _DEFAULT_CONFIG. Недопустимый JSON,
    ошибка чтения или не-объект в файле: предупреждение в лог и значения
    по умолчанию.

    Аргументы:
        config_path: Путь к файлу; по умолчанию 'labelraster.json' в текущем каталоге.

    Пример:
        >>> config = load_config(Path("labelraster.json"))
        >>> rules = SizingRules.from_config(config)
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path("labelraster.json")
    config_path = Path(config_path)

    config = _DEFAULT_CONFIG.copy()

    if not config_path.exists():
        logger.info(
            "Файл конфигурации %s не найден. Используется конфигурация по умолчанию.",
            config_path,
        )
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = json.load(f)
        if not isinstance(user_config, dict):
            raise ValueError(
                f"Файл конфигурации должен содержать JSON-объект, "
                f"получен {type(user_config).__name__}"
            )
    except json.JSONDecodeError as e:
        logger.warning(
            "Не удалось разобрать %s: недопустимый JSON в строке %d, столбце %d. "
            "Используется конфигурация по умолчанию.",
            config_path,
            e.lineno,
            e.colno,
        )
        return config
    except OSError as e:
        logger.warning(
            "Не удалось прочитать %s: %s. Используется конфигурация по умолчанию.",
            config_path,
            e,
        )
        return config
    except ValueError as e:
        logger.warning(
            "Недопустимый формат конфигурации: %s. Используется конфигурация по умолчанию.",
            e,
        )
        return config

    config.update(user_config)
    logger.info("Конфигурация загружена из %s", config_path)
    logger.debug("Конфигурация: %s", config)
    return config


def check_dependencies() -> Dict[str, bool]:
    """
    Проверить доступность зависимостей (без исключений).

    Обязательные: pillow, qrcode, python-barcode.
    Data Matrix: pylibdmtx (с libdmtx) или treepoem (с Ghostscript).

    Пример:
        >>> deps = check_dependencies()
        >>> if not (deps["pylibdmtx"] or deps["treepoem"]):
        ...     print("Data Matrix недоступен")
    """
    dependencies: Dict[str, bool] = {}

    try:
        import PIL  # noqa: F401

        dependencies["pillow"] = True
    except ImportError:
        dependencies["pillow"] = False

    try:
        import qrcode  # noqa: F401

        dependencies["qrcode"] = True
    except ImportError:
        dependencies["qrcode"] = False

    try:
        import barcode  # noqa: F401

        dependencies["python-barcode"] = True
    except ImportError:
        dependencies["python-barcode"] = False

    try:
        from pylibdmtx import pylibdmtx  # noqa: F401

        dependencies["pylibdmtx"] = True
    except (ImportError, OSError):
        dependencies["pylibdmtx"] = False

    try:
        import treepoem  # noqa: F401

        dependencies["treepoem"] = True
    except ImportError:
        dependencies["treepoem"] = False

    dependencies["ghostscript"] = any(
        shutil.which(binary) for binary in ("gs", "gswin64c", "gswin32c")
    )
    return dependencies


_setup_logging()

# =============================================================================
# ПУБЛИЧНЫЙ API
# =============================================================================

# Примечание: импорты размещены после утилит, чтобы логирование
# было настроено первым.

from .errors import (  # noqa: E402
    DensityError,
    EncodingError,
    GeometryError,
    InvariantViolationError,
    JobInputError,
    LabelRasterError,
)
from .model import ErrorCode, Job, Margin, PhysicalSize, Symbology, Unit  # noqa: E402
from .constants import DEFAULT_JOB, DPI_PRESETS  # noqa: E402
from .units import (  # noqa: E402
    PixelGeometry,
    compute_pixel_size,
    format_size,
    in_to_mm,
    margin_to_pixels,
    mm_to_in,
    to_pixels,
)
from .raster import RasterBuffer  # noqa: E402
from .barcodegen import (  # noqa: E402
    CODE128_UI_SIZE_LIMITS,
    SizeLimits,
    SizingRules,
    render_code128,
    render_datamatrix,
    render_qr,
)
from .validation import ValidationResult, validate_job, validate_job_async  # noqa: E402
from .export import ImageFormat, compose, convert_format, suggest_filename  # noqa: E402
from .pipeline import generate, generate_async, render_code  # noqa: E402

__all__ = [
    "__version__",
    "get_logger",
    "load_config",
    "check_dependencies",
    "LabelRasterError",
    "JobInputError",
    "GeometryError",
    "DensityError",
    "EncodingError",
    "InvariantViolationError",
    "ErrorCode",
    "Job",
    "Margin",
    "PhysicalSize",
    "Symbology",
    "Unit",
    "DEFAULT_JOB",
    "DPI_PRESETS",
    "PixelGeometry",
    "compute_pixel_size",
    "format_size",
    "in_to_mm",
    "margin_to_pixels",
    "mm_to_in",
    "to_pixels",
    "RasterBuffer",
    "CODE128_UI_SIZE_LIMITS",
    "SizeLimits",
    "SizingRules",
    "render_code128",
    "render_datamatrix",
    "render_qr",
    "ValidationResult",
    "validate_job",
    "validate_job_async",
    "ImageFormat",
    "compose",
    "convert_format",
    "suggest_filename",
    "generate",
    "generate_async",
    "render_code",
]

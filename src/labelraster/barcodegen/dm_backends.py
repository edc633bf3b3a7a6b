"""
RU: Бэкенды кодирования Data Matrix (pylibdmtx / treepoem) с определением доступности во время выполнения.
EN: Data Matrix encoder backends behind a single "render symbol at integer scale" capability.

Both backends are optional at runtime:
- pylibdmtx needs the native libdmtx shared library;
- treepoem needs Ghostscript (gs / gswin64c / gswin32c) on PATH.

select_backend() returns the first backend that can actually run here.
"""

from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from typing import Final, List, Optional, Tuple, Type

from PIL import Image

from labelraster.errors import EncodingError

logger = logging.getLogger(__name__)

__all__ = [
    "DataMatrixBackend",
    "PyLibDmtxBackend",
    "TreepoemBackend",
    "available_backends",
    "select_backend",
]

_GHOSTSCRIPT_BINARIES: Final[Tuple[str, ...]] = ("gs", "gswin64c", "gswin32c")


class DataMatrixBackend(ABC):
    """
    Capability interface: render a Data Matrix symbol to a bitmap.

    ``scale`` multiplies the backend's native module size; callers must
    not assume one pixel per module and should measure the module pitch
    from the returned image.
    """

    name: str = "abstract"

    @classmethod
    @abstractmethod
    def is_available(cls) -> bool:
        """True when the backend's library (and its native parts) can be used."""

    @abstractmethod
    def render(self, payload: str, scale: int) -> Image.Image:
        """Render ``payload``; raises EncodingError on any encoder failure."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class PyLibDmtxBackend(DataMatrixBackend):
    """libdmtx via pylibdmtx (square symbols, 5px modules natively)."""

    name = "pylibdmtx"

    @classmethod
    def is_available(cls) -> bool:
        try:
            from pylibdmtx import pylibdmtx  # noqa: F401
        except (ImportError, OSError) as e:
            logger.debug("pylibdmtx unavailable: %r", e)
            return False
        return True

    def render(self, payload: str, scale: int) -> Image.Image:
        if scale < 1:
            raise ValueError(f"scale must be >= 1, got {scale}")
        try:
            from pylibdmtx.pylibdmtx import encode

            encoded = encode(payload.encode("utf-8"))
            img = Image.frombytes("RGB", (encoded.width, encoded.height), encoded.pixels)
        except (ImportError, OSError) as e:
            logger.error("pylibdmtx not usable: %r", e)
            raise EncodingError(
                "pylibdmtx not installed or libdmtx missing (pip install pylibdmtx)"
            ) from e
        except Exception as e:
            logger.error("DataMatrix generation error: %r", e)
            raise EncodingError(f"DataMatrix generation failed: {e}") from e

        if scale > 1:
            img = img.resize(
                (img.width * scale, img.height * scale), Image.Resampling.NEAREST
            )
        return img


class TreepoemBackend(DataMatrixBackend):
    """BWIPP via treepoem (requires Ghostscript)."""

    name = "treepoem"

    @staticmethod
    def _ghostscript() -> Optional[str]:
        for binary in _GHOSTSCRIPT_BINARIES:
            found = shutil.which(binary)
            if found:
                return found
        return None

    @classmethod
    def is_available(cls) -> bool:
        try:
            import treepoem  # noqa: F401
        except ImportError as e:
            logger.debug("treepoem unavailable: %r", e)
            return False
        if cls._ghostscript() is None:
            logger.debug("treepoem unavailable: Ghostscript not found on PATH")
            return False
        return True

    def render(self, payload: str, scale: int) -> Image.Image:
        if scale < 1:
            raise ValueError(f"scale must be >= 1, got {scale}")
        try:
            import treepoem
        except ImportError as e:
            logger.error("treepoem not installed for DataMatrix")
            raise EncodingError(
                "treepoem not installed (install with: pip install treepoem)"
            ) from e

        try:
            dm_img = treepoem.generate_barcode(
                barcode_type="datamatrix",
                data=payload,
                options={},
                scale=scale,
            )
        except Exception as e:
            logger.error("DataMatrix generation error: %r", e)
            raise EncodingError(f"DataMatrix generation failed: {e}") from e

        if not isinstance(dm_img, Image.Image):
            logger.error("treepoem did not produce a valid DataMatrix image")
            raise EncodingError("DataMatrix generation failed via treepoem")
        return dm_img.convert("RGB")


# Порядок важен: pylibdmtx не требует внешнего процесса Ghostscript
_BACKEND_ORDER: Final[Tuple[Type[DataMatrixBackend], ...]] = (
    PyLibDmtxBackend,
    TreepoemBackend,
)


def available_backends() -> List[DataMatrixBackend]:
    """Instances of every backend usable in this environment, in preference order."""
    return [cls() for cls in _BACKEND_ORDER if cls.is_available()]


def select_backend(preferred: Optional[str] = None) -> DataMatrixBackend:
    """
    Pick a Data Matrix backend.

    Args:
        preferred: Backend ``name`` to try first ("pylibdmtx" / "treepoem").

    Raises:
        EncodingError: no backend can run here.
    """
    backends = available_backends()
    if preferred is not None:
        for backend in backends:
            if backend.name == preferred:
                return backend
        logger.warning("Preferred DataMatrix backend %r unavailable", preferred)
    if not backends:
        logger.error("No DataMatrix backend available")
        raise EncodingError(
            "No DataMatrix encoder available: install pylibdmtx (with libdmtx) "
            "or treepoem (with Ghostscript)"
        )
    logger.debug("Selected DataMatrix backend: %s", backends[0].name)
    return backends[0]

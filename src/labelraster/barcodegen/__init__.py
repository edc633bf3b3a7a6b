"""
barcodegen

Рендереры символик этикеток: только сам код, без полей, строго монохромно.

Public API:
    - render_qr / render_qr_async: QR (qrcode)
    - render_datamatrix / render_datamatrix_async: Data Matrix (pylibdmtx или treepoem)
    - render_code128 / render_code128_async: Code128 (python-barcode)
    - SizingRules, SizeLimits, CODE128_UI_SIZE_LIMITS: пороги и внешние ограничения размера
    - select_backend, available_backends: выбор кодировщика Data Matrix

Примеры:
    >>> from labelraster.barcodegen import render_qr
    >>> raster = render_qr(job)

Зависимости:
    Pillow, qrcode, python-barcode, pylibdmtx, treepoem
"""

from labelraster.barcodegen.code128 import (
    Bar,
    encode_code128_bars,
    render_code128,
    render_code128_async,
)
from labelraster.barcodegen.datamatrix import (
    ModuleMatrix,
    probe_module_matrix,
    render_datamatrix,
    render_datamatrix_async,
)
from labelraster.barcodegen.dm_backends import (
    DataMatrixBackend,
    PyLibDmtxBackend,
    TreepoemBackend,
    available_backends,
    select_backend,
)
from labelraster.barcodegen.qr import encode_qr_matrix, render_qr, render_qr_async
from labelraster.barcodegen.sizing import (
    CODE128_UI_SIZE_LIMITS,
    DEFAULT_RULES,
    CanvasGeometry,
    SizeLimits,
    SizingRules,
    check_job,
    compute_canvas,
)

__all__ = [
    "Bar",
    "encode_code128_bars",
    "render_code128",
    "render_code128_async",
    "ModuleMatrix",
    "probe_module_matrix",
    "render_datamatrix",
    "render_datamatrix_async",
    "DataMatrixBackend",
    "PyLibDmtxBackend",
    "TreepoemBackend",
    "available_backends",
    "select_backend",
    "encode_qr_matrix",
    "render_qr",
    "render_qr_async",
    "CODE128_UI_SIZE_LIMITS",
    "DEFAULT_RULES",
    "CanvasGeometry",
    "SizeLimits",
    "SizingRules",
    "check_job",
    "compute_canvas",
]

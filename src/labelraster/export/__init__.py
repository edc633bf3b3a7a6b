"""
export

Компоновка полей и экспорт: PNG как канонический формат, JPEG/BMP для потребителей.

Public API:
    - compose, compose_raster: код + поля -> PNG / растр внешнего размера
    - encode_png, decode_png: PNG-кодек
    - ImageFormat, convert_format: конвертация PNG -> JPEG/BMP
    - suggest_filename, slugify_payload: имя файла для сохранения
"""

from labelraster.export.compositor import compose, compose_raster
from labelraster.export.filename import slugify_payload, suggest_filename
from labelraster.export.formats import ImageFormat, convert_format
from labelraster.export.png import PNG_SIGNATURE, decode_png, encode_png, is_png

__all__ = [
    "compose",
    "compose_raster",
    "slugify_payload",
    "suggest_filename",
    "ImageFormat",
    "convert_format",
    "PNG_SIGNATURE",
    "decode_png",
    "encode_png",
    "is_png",
]

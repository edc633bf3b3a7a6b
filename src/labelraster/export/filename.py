"""
RU: Детерминированное имя файла для сохранения (без обращения к файловой системе).
EN: Deterministic, filesystem-safe file name suggestions. Keep the format stable once released.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Final, FrozenSet, Union

from labelraster.export.formats import ImageFormat
from labelraster.model.job import Job

__all__ = ["WIN_RESERVED", "slugify_payload", "suggest_filename"]

WIN_RESERVED: Final[FrozenSet[str]] = frozenset(
    ["con", "prn", "aux", "nul"]
    + [f"com{i}" for i in range(1, 10)]
    + [f"lpt{i}" for i in range(1, 10)]
)

MAX_BASE_LEN: Final[int] = 120
MAX_PAYLOAD_SLUG: Final[int] = 60

_FORBIDDEN = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_NON_SAFE = re.compile(r"[^a-zA-Z0-9._-]+")


def slugify_payload(text: str, max_len: int = MAX_PAYLOAD_SLUG) -> str:
    """ASCII slug of a payload: ``"Hello World!"`` -> ``"Hello_World"``."""
    r = unicodedata.normalize("NFKD", text)
    r = re.sub(r"\s+", "_", r)
    r = _FORBIDDEN.sub("", r)
    r = _NON_SAFE.sub("_", r)
    r = re.sub(r"_+", "_", r)
    r = re.sub(r"^[._]+|[._]+$", "", r)
    if r.lower() in WIN_RESERVED:
        r += "_"
    return r[:max_len]


def _sanitize_base(text: str) -> str:
    return re.sub(r"[.\s]+$", "", _FORBIDDEN.sub("_", text))


def suggest_filename(job: Job, fmt: Union[ImageFormat, str] = ImageFormat.PNG) -> str:
    """
    File name for saving ``job``'s output, e.g. ``"ABC123.png"``.

    Empty or unprintable payloads fall back to ``"code"``; Windows reserved
    device names get a ``_`` suffix.
    """
    target = ImageFormat.parse(fmt)
    payload = job.payload if isinstance(job.payload, str) else ""
    base = _sanitize_base(slugify_payload(payload) or "code")
    if len(base) > MAX_BASE_LEN:
        base = re.sub(r"[.\s]+$", "", base[:MAX_BASE_LEN])
    if base.lower() in WIN_RESERVED:
        base = f"{base}_"
    return f"{base}.{target.extension}"

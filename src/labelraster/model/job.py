# RU: Доменная модель задания печати: символика, данные, физический размер, поле и флаг инверсии.
# EN: Print job domain model (symbology, payload, physical size, margin, invert flag), immutable once built.

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Type, TypeVar, Union

from .enums import Symbology, Unit

logger = logging.getLogger(__name__)

_E = TypeVar("_E", Symbology, Unit)


def _coerce_enum(enum_cls: Type[_E], value: Any) -> Union[_E, Any]:
    """
    Приводит строку к члену перечисления, если это возможно.

    Неизвестные значения сохраняются как есть: отклонять их должны
    валидаторы (с кодом ошибки), а не конструктор.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        for member in enum_cls:
            if member.value == value:
                return member
    return value


@dataclass(frozen=True)
class PhysicalSize:
    """Physical label size; ``width``/``height`` are in ``unit``, ``dpi`` is pixels per inch."""

    unit: Unit
    width: float
    height: float
    dpi: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit", _coerce_enum(Unit, self.unit))

    def to_dict(self) -> Dict[str, Any]:
        unit = self.unit.value if isinstance(self.unit, Unit) else self.unit
        return {
            "unit": unit,
            "width": self.width,
            "height": self.height,
            "dpi": self.dpi,
        }


@dataclass(frozen=True)
class Margin:
    """Quiet zone around the code, in the same unit as the job size."""

    value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True)
class Job:
    """
    Immutable print job handed to the pipeline.

    The job is owned by the caller (UI/IPC layer) and passed by value to
    every stage. Construction never validates: out-of-range values are
    kept so the validators can report them with a precise error code.

    Examples:
        job = Job(
            symbology=Symbology.QR,
            payload="HELLO",
            size=PhysicalSize(unit=Unit.INCH, width=1, height=1, dpi=600),
            margin=Margin(0.04),
        )
        same = Job.from_dict(job.to_dict())
    """

    schema_version: ClassVar[str] = "1.0"

    symbology: Symbology
    payload: str
    size: PhysicalSize
    margin: Margin = Margin()
    invert_output: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "symbology", _coerce_enum(Symbology, self.symbology)
        )

    def to_dict(self) -> Dict[str, Any]:
        symbology = (
            self.symbology.value
            if isinstance(self.symbology, Symbology)
            else self.symbology
        )
        return {
            "schema_version": self.schema_version,
            "symbology": symbology,
            "payload": self.payload,
            "size": self.size.to_dict(),
            "margin": self.margin.to_dict(),
            "invertOutput": self.invert_output,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Job":
        if not isinstance(d, dict):
            raise TypeError(f"Expected dict, got {type(d).__name__}")
        if "schema_version" in d and d["schema_version"] != cls.schema_version:
            logger.warning(
                "Schema version mismatch (expected %s, got %s)",
                cls.schema_version,
                d["schema_version"],
            )
        size = d.get("size") or {}
        # Старые вызовы передают dpi на верхнем уровне задания
        dpi = size.get("dpi", d.get("dpi", 0))
        margin = d.get("margin") or {}
        return cls(
            symbology=d.get("symbology"),  # type: ignore[arg-type]
            payload=d.get("payload", ""),
            size=PhysicalSize(
                unit=size.get("unit"),  # type: ignore[arg-type]
                width=size.get("width", 0),
                height=size.get("height", 0),
                dpi=dpi,
            ),
            margin=Margin(value=margin.get("value", 0.0)),
            invert_output=bool(d.get("invertOutput", d.get("invert_output", False))),
        )

    def __str__(self) -> str:
        datashow: str = self.payload[:16] + ("..." if len(self.payload) > 16 else "")
        return f"Job({self.symbology}, payload={datashow!r})"

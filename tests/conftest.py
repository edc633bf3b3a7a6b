"""Общие фикстуры: фабрика заданий и детерминированный тестовый бэкенд Data Matrix."""

from typing import Callable, List, Optional

import pytest
from PIL import Image, ImageDraw

from labelraster.barcodegen.dm_backends import DataMatrixBackend
from labelraster.model import Job, Margin, PhysicalSize, Symbology, Unit


def finder_matrix(n: int) -> List[List[bool]]:
    """Matrix with a Data Matrix finder (solid left/bottom, alternating top/right)."""
    m = [[False] * n for _ in range(n)]
    for i in range(n):
        m[i][0] = True
        m[n - 1][i] = True
        m[0][i] = i % 2 == 0
        m[i][n - 1] = (n - 1 - i) % 2 == 0
    m[3][4] = True
    m[5][5] = True
    m[4][2] = True
    return m


class FakeDataMatrixBackend(DataMatrixBackend):
    """Paints a fixed matrix at ``native_px * scale`` per module with a white border."""

    name = "fake"

    def __init__(
        self,
        matrix: Optional[List[List[bool]]] = None,
        native_px: int = 3,
        border: int = 4,
    ) -> None:
        self.matrix = matrix if matrix is not None else finder_matrix(10)
        self.native_px = native_px
        self.border = border
        self.calls: List[int] = []

    @classmethod
    def is_available(cls) -> bool:
        return True

    def render(self, payload: str, scale: int) -> Image.Image:
        self.calls.append(scale)
        pitch = self.native_px * scale
        n = len(self.matrix)
        side = n * pitch + 2 * self.border
        img = Image.new("RGB", (side, side), (255, 255, 255))
        draw = ImageDraw.Draw(img)
        for y, row in enumerate(self.matrix):
            for x, dark in enumerate(row):
                if dark:
                    x0 = self.border + x * pitch
                    y0 = self.border + y * pitch
                    draw.rectangle((x0, y0, x0 + pitch - 1, y0 + pitch - 1), fill=(0, 0, 0))
        return img


@pytest.fixture
def fake_dm_backend() -> FakeDataMatrixBackend:
    return FakeDataMatrixBackend()


@pytest.fixture
def make_job() -> Callable[..., Job]:
    def _make(
        symbology: Symbology = Symbology.QR,
        payload: str = "HELLO",
        width: float = 1.0,
        height: float = 1.0,
        dpi: int = 300,
        unit: Unit = Unit.INCH,
        margin: float = 0.0,
        invert_output: bool = False,
    ) -> Job:
        return Job(
            symbology=symbology,
            payload=payload,
            size=PhysicalSize(unit=unit, width=width, height=height, dpi=dpi),
            margin=Margin(margin),
            invert_output=invert_output,
        )

    return _make


@pytest.fixture
def dm_backend_factory() -> Callable[..., FakeDataMatrixBackend]:
    return FakeDataMatrixBackend


@pytest.fixture
def dm_finder_matrix() -> Callable[[int], List[List[bool]]]:
    return finder_matrix

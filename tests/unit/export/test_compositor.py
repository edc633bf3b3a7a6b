from typing import Callable, Tuple

import pytest
from PIL import Image

from labelraster.errors import GeometryError, InvariantViolationError, JobInputError
from labelraster.export.compositor import compose, compose_raster
from labelraster.export.png import PNG_SIGNATURE, decode_png
from labelraster.model import ErrorCode, Job
from labelraster.raster import RasterBuffer, is_monochrome

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def solid(width: int, height: int, color: Tuple[int, int, int, int]) -> RasterBuffer:
    return RasterBuffer.from_image(Image.new("RGBA", (width, height), color))


class TestComposeRaster:
    @pytest.fixture
    def job(self, make_job: Callable[..., Job]) -> Job:
        # 100x100px, поле 10px, внутренняя область 80x80
        return make_job(payload="X", dpi=100, margin=0.1)

    def test_output_matches_outer_geometry(self, job: Job) -> None:
        out = compose_raster(job, solid(80, 80, BLACK))
        assert out.size == (100, 100)

    def test_margin_white_and_code_preserved(self, job: Job) -> None:
        out = compose_raster(job, solid(80, 80, BLACK))
        assert out.pixel(0, 0) == WHITE
        assert out.pixel(9, 50) == WHITE
        assert out.pixel(10, 10) == BLACK
        assert out.pixel(89, 89) == BLACK
        assert out.pixel(90, 90) == WHITE
        assert is_monochrome(out)

    def test_zero_margin_is_code_itself(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="X", dpi=100)
        code = solid(100, 100, BLACK)
        assert compose_raster(job, code) == code

    def test_non_square_outer(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="X", width=2, height=1, dpi=100, margin=0.05)
        out = compose_raster(job, solid(190, 90, BLACK))
        assert out.size == (200, 100)
        assert out.pixel(4, 4) == WHITE
        assert out.pixel(5, 5) == BLACK

    def test_invert(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="X", dpi=100, margin=0.1, invert_output=True)
        out = compose_raster(job, solid(80, 80, BLACK))
        assert out.pixel(0, 0) == BLACK
        assert out.pixel(50, 50) == WHITE
        assert is_monochrome(out)

    @pytest.mark.parametrize("size", [(79, 80), (80, 81), (100, 100)])
    def test_size_mismatch_rejected(self, job: Job, size: Tuple[int, int]) -> None:
        with pytest.raises(GeometryError, match="inner area") as exc_info:
            compose_raster(job, solid(*size, BLACK))
        assert exc_info.value.code is ErrorCode.INNER

    @pytest.mark.parametrize("color", [(128, 128, 128, 255), (0, 0, 0, 0), (255, 255, 255, 254)])
    def test_non_monochrome_input_never_coerced(
        self, job: Job, color: Tuple[int, int, int, int]
    ) -> None:
        with pytest.raises(InvariantViolationError):
            compose_raster(job, solid(80, 80, color))

    def test_malformed_job(self, make_job: Callable[..., Job]) -> None:
        with pytest.raises(JobInputError):
            compose_raster(make_job(dpi=0), solid(10, 10, BLACK))
        with pytest.raises(JobInputError) as exc_info:
            compose_raster(make_job(symbology="aztec"), solid(10, 10, BLACK))
        assert exc_info.value.code is ErrorCode.SYMBOLOGY


class TestCompose:
    def test_png_bytes(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="X", dpi=100, margin=0.1)
        code = solid(80, 80, BLACK)
        data = compose(job, code)
        assert data.startswith(PNG_SIGNATURE)
        assert decode_png(data) == compose_raster(job, code)

    def test_deterministic(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="X", dpi=100, margin=0.1)
        code = solid(80, 80, BLACK)
        assert compose(job, code) == compose(job, code)

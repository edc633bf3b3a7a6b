import asyncio
from io import BytesIO
from typing import Any, Callable

import pytest
from PIL import Image

from labelraster.errors import DensityError, JobInputError
from labelraster.export.png import PNG_SIGNATURE, decode_png
from labelraster.model import ErrorCode, Job, Symbology, Unit
from labelraster.pipeline import generate, generate_async, render_code
from labelraster.raster import is_monochrome

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


class TestRenderCode:
    def test_dispatch(self, make_job: Callable[..., Job], fake_dm_backend: Any) -> None:
        assert render_code(make_job()).size == (300, 300)
        dm = render_code(make_job(symbology=Symbology.DATAMATRIX, dpi=100), backend=fake_dm_backend)
        assert dm.size == (100, 100)
        bars = render_code(make_job(symbology=Symbology.CODE128, payload="AB", width=2, height=0.5))
        assert bars.size == (600, 150)

    def test_unknown_symbology(self, make_job: Callable[..., Job]) -> None:
        with pytest.raises(JobInputError) as exc_info:
            render_code(make_job(symbology="pdf417"))
        assert exc_info.value.code is ErrorCode.SYMBOLOGY


class TestGenerate:
    def test_qr_png(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="HELLO", dpi=300, margin=0.05)
        data = generate(job)
        assert data.startswith(PNG_SIGNATURE)
        raster = decode_png(data)
        assert raster.size == (300, 300)
        assert is_monochrome(raster)
        assert raster.pixel(0, 0) == WHITE
        assert raster.pixel(14, 14) == WHITE

    def test_qr_centred_in_non_square_label(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="HELLO", width=2, height=1, dpi=300)
        raster = decode_png(generate(job))
        assert raster.size == (600, 300)
        # Квадрат 300px в центре внутренней области 600x300
        row = [raster.pixel(x, 150) for x in range(600)]
        assert all(p == WHITE for p in row[:150])
        assert all(p == WHITE for p in row[450:])

    def test_datamatrix(self, make_job: Callable[..., Job], fake_dm_backend: Any) -> None:
        job = make_job(symbology=Symbology.DATAMATRIX, width=1.2, height=1, dpi=100, margin=0.1)
        raster = decode_png(generate(job, backend=fake_dm_backend))
        assert raster.size == (120, 100)
        # Внутренняя область 100x80, символ 80x80 со смещением 10px по X
        assert raster.pixel(19, 10) == WHITE
        assert raster.pixel(20, 10) == BLACK

    def test_code128_outer_size(self, make_job: Callable[..., Job]) -> None:
        job = make_job(
            symbology=Symbology.CODE128,
            payload="ABC123",
            unit=Unit.MILLIMETER,
            width=50,
            height=10,
            dpi=600,
            margin=1,
        )
        raster = decode_png(generate(job))
        assert raster.size == (1181, 236)
        assert raster.pixel(0, 0) == WHITE
        assert raster.pixel(1180, 235) == WHITE

    def test_invert(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="HELLO", dpi=300, margin=0.05, invert_output=True)
        raster = decode_png(generate(job))
        assert raster.pixel(0, 0) == BLACK
        assert is_monochrome(raster)

    def test_deterministic_bytes(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="HELLO", dpi=203, margin=0.02)
        assert generate(job) == generate(job)

    @pytest.mark.parametrize("fmt,magic", [("jpg", b"\xff\xd8"), ("bmp", b"BM")])
    def test_output_format(self, make_job: Callable[..., Job], fmt: str, magic: bytes) -> None:
        data = generate(make_job(dpi=100), output_format=fmt)
        assert data.startswith(magic)
        with Image.open(BytesIO(data)) as img:
            assert img.size == (100, 100)

    def test_no_partial_output_on_failure(self, make_job: Callable[..., Job]) -> None:
        with pytest.raises(DensityError):
            generate(make_job(width=0.1, height=0.1))

    def test_async(self, make_job: Callable[..., Job]) -> None:
        job = make_job(dpi=100)
        assert asyncio.run(generate_async(job)) == generate(job)

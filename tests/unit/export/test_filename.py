from typing import Callable

import pytest

from labelraster.export.filename import MAX_PAYLOAD_SLUG, slugify_payload, suggest_filename
from labelraster.export.formats import ImageFormat
from labelraster.model import Job


class TestSlugifyPayload:
    @pytest.mark.parametrize(
        "payload,expected",
        [
            ("Hello World!", "Hello_World"),
            ("ABC-123.x", "ABC-123.x"),
            ("https://example.com/a?b=c", "httpsexample.comab_c"),
            ("café", "cafe"),
            ("  __lead and trail__  ", "lead_and_trail"),
            ("Привет", ""),
            ("a   b\t\tc", "a_b_c"),
        ],
    )
    def test_rules(self, payload: str, expected: str) -> None:
        assert slugify_payload(payload) == expected

    def test_reserved_name(self) -> None:
        assert slugify_payload("CON") == "CON_"
        assert slugify_payload("lpt1") == "lpt1_"

    def test_max_len(self) -> None:
        assert len(slugify_payload("a" * 200)) == MAX_PAYLOAD_SLUG
        assert slugify_payload("abcdef", max_len=3) == "abc"


class TestSuggestFilename:
    def test_png_default(self, make_job: Callable[..., Job]) -> None:
        assert suggest_filename(make_job(payload="ABC123")) == "ABC123.png"

    def test_other_format(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="ABC123")
        assert suggest_filename(job, ImageFormat.JPG) == "ABC123.jpg"
        assert suggest_filename(job, "bmp") == "ABC123.bmp"

    @pytest.mark.parametrize("payload", ["", "   ", "Привет", "///"])
    def test_fallback_name(self, make_job: Callable[..., Job], payload: str) -> None:
        assert suggest_filename(make_job(payload=payload)) == "code.png"

    def test_reserved_device_name(self, make_job: Callable[..., Job]) -> None:
        assert suggest_filename(make_job(payload="nul")) == "nul_.png"

    def test_deterministic(self, make_job: Callable[..., Job]) -> None:
        job = make_job(payload="Label #42 / Batch 7")
        assert suggest_filename(job) == suggest_filename(job) == "Label_42_Batch_7.png"

import io

import pytest
from PIL import Image

from conftest import make_image_bytes
from json_shake import compress
from json_shake.compress import (
    FALLBACK_QUALITY,
    QUALITY_LADDER,
    reencode,
    sniff_image_format,
)
from json_shake.config import limit_to_bytes
from json_shake.errors import DecodeError, EncodeError

SVG = b'<?xml version="1.0"?>\n<svg xmlns="http://www.w3.org/2000/svg" width="1" height="1"></svg>'


def _fake_encoder(sizes, calls):
    def _encode(image, quality):
        calls.append(quality)
        size = sizes[quality]
        if isinstance(size, Exception):
            raise size
        return b"j" * size

    return _encode


def test_sniff_image_format_by_signature():
    assert sniff_image_format(make_image_bytes("JPEG")) == "jpeg"
    assert sniff_image_format(make_image_bytes("PNG")) == "png"
    assert sniff_image_format(make_image_bytes("GIF")) == "gif"
    assert sniff_image_format(make_image_bytes("BMP")) == "bmp"
    assert sniff_image_format(SVG) == "svg"
    assert sniff_image_format(b"not an image at all") == "unknown"


def test_within_budget_is_returned_unchanged(png_bytes):
    result = reencode(png_bytes, len(png_bytes))
    assert result.data is png_bytes
    assert result.image_format == "png"
    assert not result.compressed


def test_png_over_budget_always_reports_jpeg(png_bytes):
    for budget in (1, len(png_bytes) // 2, len(png_bytes) - 1):
        result = reencode(png_bytes, budget)
        assert result.image_format == "jpeg"
        assert result.compressed
        assert result.data[:3] == b"\xff\xd8\xff"
        assert result.size <= budget or result.quality == FALLBACK_QUALITY


def test_unreachable_budget_falls_back_to_quality_20(png_bytes):
    result = reencode(png_bytes, 1)
    assert result.quality == FALLBACK_QUALITY
    assert result.size > 1
    assert result.original_size == len(png_bytes)


def test_first_level_that_fits_wins(monkeypatch, png_bytes):
    calls = []
    sizes = {quality: 10 for quality in QUALITY_LADDER}
    monkeypatch.setattr(compress, "encode_jpeg", _fake_encoder(sizes, calls))

    result = reencode(png_bytes, 10)

    assert result.quality == 85
    assert calls == [85]


def test_ladder_is_walked_highest_first(monkeypatch, png_bytes):
    calls = []
    sizes = {85: 500, 75: 400, 65: 300, 55: 200, 45: 100, 35: 50, 25: 10, 20: 5}
    monkeypatch.setattr(compress, "encode_jpeg", _fake_encoder(sizes, calls))

    result = reencode(png_bytes, 250)

    assert result.quality == 55
    assert calls == [85, 75, 65, 55]
    assert result.size == 200


def test_failed_level_is_skipped(monkeypatch, png_bytes):
    calls = []
    sizes = {quality: 1 for quality in QUALITY_LADDER}
    sizes[85] = OSError("encoder exploded")
    monkeypatch.setattr(compress, "encode_jpeg", _fake_encoder(sizes, calls))

    result = reencode(png_bytes, 10)

    assert result.quality == 75
    assert calls == [85, 75]


def test_fallback_is_returned_even_when_too_large(monkeypatch, png_bytes):
    calls = []
    sizes = {quality: 10_000 for quality in QUALITY_LADDER}
    sizes[FALLBACK_QUALITY] = 9_000
    monkeypatch.setattr(compress, "encode_jpeg", _fake_encoder(sizes, calls))

    result = reencode(png_bytes, 100)

    assert calls == [*QUALITY_LADDER, FALLBACK_QUALITY]
    assert result.quality == FALLBACK_QUALITY
    assert result.size == 9_000


def test_fallback_failure_raises_encode_error(monkeypatch, png_bytes):
    calls = []
    sizes = {quality: ValueError("bad") for quality in (*QUALITY_LADDER, FALLBACK_QUALITY)}
    monkeypatch.setattr(compress, "encode_jpeg", _fake_encoder(sizes, calls))

    with pytest.raises(EncodeError):
        reencode(png_bytes, 100)


def test_corrupt_raster_raises_decode_error():
    data = b"\x89PNG\r\n\x1a\n" + b"\x00garbage" * 200
    with pytest.raises(DecodeError):
        reencode(data, 10)


@pytest.mark.parametrize("data", [make_image_bytes("BMP"), SVG, b"x" * 4096])
def test_other_formats_pass_through_unchanged(data):
    result = reencode(data, 10)
    assert result.data is data
    assert not result.compressed


def test_alpha_png_is_flattened():
    data = make_image_bytes("PNG", mode="RGBA")
    result = reencode(data, len(data) - 1)
    with Image.open(io.BytesIO(result.data)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.mode == "RGB"


def test_animated_gif_keeps_first_frame():
    frames = [Image.new("RGB", (64, 64), color) for color in ("red", "blue", "green")]
    buffer = io.BytesIO()
    frames[0].save(buffer, format="GIF", save_all=True, append_images=frames[1:])
    data = buffer.getvalue()

    result = reencode(data, len(data) - 1)

    with Image.open(io.BytesIO(result.data)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.size == (64, 64)
        red, green, blue = decoded.getpixel((32, 32))
        assert red > 200 and green < 60 and blue < 60


def test_limit_to_bytes():
    assert limit_to_bytes(0) == 0
    assert limit_to_bytes(-1) == 0
    assert limit_to_bytes(1) == 1024 * 1024
    assert limit_to_bytes(0.5) == 512 * 1024


def test_limit_to_bytes_edge_values():
    assert limit_to_bytes(float("nan")) == 0
    assert limit_to_bytes(float("inf")) == 0
    assert limit_to_bytes(float("-inf")) == 0
    assert limit_to_bytes(1e-9) == 1

import re

import pytest

from badges.barcode import encode_linear_visual, encode_qr, qr_image, token_for
from badges.errors import EncodingError
from badges.models import BARCODE, QR


def svg_width(svg):
    return int(re.search(r'<svg[^>]* width="(\d+)"', svg).group(1))


def test_linear_visual_is_deterministic():
    options = dict(height=80, font_size=14, margin=5)
    assert encode_linear_visual("g-1", **options) == encode_linear_visual("g-1", **options)


def test_linear_visual_minimum_width():
    assert svg_width(encode_linear_visual("a")) == 200
    assert svg_width(encode_linear_visual("x" * 14)) == 200


def test_linear_visual_width_scales_with_payload():
    assert svg_width(encode_linear_visual("x" * 20)) == 280
    assert svg_width(encode_linear_visual("x" * 40)) == 560


def test_linear_visual_explicit_width():
    assert svg_width(encode_linear_visual("x" * 40, width=300)) == 300


def test_linear_visual_bars_follow_char_codes():
    # 'a' is 97, 97 % 3 == 1 -> second bar is twice the base width
    svg = encode_linear_visual("a", margin=10, height=100)
    bars = re.findall(r'<rect x="(\d+)" y="10" width="(\d+)" height="(\d+)"', svg)
    assert bars == [("10", "2", "80"), ("13", "4", "80")]


def test_linear_visual_two_bars_per_character():
    svg = encode_linear_visual("badge-42", show_text=False)
    assert len(re.findall(r'<rect x="\d+" y="10"', svg)) == 16


def test_linear_visual_text():
    svg = encode_linear_visual("g-1", height=100)
    assert '<text x="100" y="95" text-anchor="middle"' in svg
    assert ">g-1</text>" in svg

    no_text = encode_linear_visual("g-1", show_text=False, height=100)
    assert "<text" not in no_text
    assert 'height="100" fill=' in no_text


def test_linear_visual_escapes_payload():
    svg = encode_linear_visual("<a&b>")
    assert "&lt;a&amp;b&gt;" in svg


@pytest.mark.parametrize("payload", ["", None, 42])
def test_bad_payload(payload):
    with pytest.raises(EncodingError):
        encode_linear_visual(payload)
    with pytest.raises(EncodingError):
        encode_qr(payload)


def test_qr_markup():
    svg = encode_qr("g-1", size=80)
    assert svg.startswith("<svg")
    assert 'width="80"' in svg
    assert 'height="80"' in svg
    assert "viewBox=" in svg
    assert encode_qr("g-1", size=80) == svg
    assert encode_qr("g-2", size=80) != svg


def test_qr_unknown_error_correction():
    with pytest.raises(EncodingError):
        encode_qr("g-1", error_correction="Z")


def test_qr_image_is_rgb():
    img = qr_image("g-1")
    assert img.mode == "RGB"
    assert img.size[0] == img.size[1]


def test_token_for(ada):
    qr = token_for(ada)
    assert qr.payload == "g-1"
    assert qr.visual_form == QR
    barcode = token_for(ada, BARCODE, height=80)
    assert barcode.markup == encode_linear_visual("g-1", height=80)
    with pytest.raises(EncodingError):
        token_for(ada, "hologram")

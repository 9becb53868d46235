"""
Token encoders: QR and the linear "barcode" used on confirmations.

Both encoders are pure functions of their arguments so the same guest always
gets byte-identical markup.
"""
import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape

import qrcode
import qrcode.image.svg

from badges.errors import EncodingError
from badges.models import BARCODE, QR, ScannableToken

ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

BAR_WIDTH = 2
BAR_SPACING = 1
FRAME_COLOR = "#FFDC00"


def _check_payload(payload):
    if not isinstance(payload, str) or not payload:
        raise EncodingError(f"Cannot encode payload {payload!r}")


def _build_qr(payload, error_correction):
    _check_payload(payload)
    try:
        level = ERROR_CORRECTION[error_correction]
    except KeyError:
        raise EncodingError(f"Unknown QR error correction level {error_correction!r}")
    qr = qrcode.QRCode(error_correction=level, box_size=10, border=0)
    qr.add_data(payload)
    qr.make(fit=True)
    return qr


def encode_qr(payload, size=80, error_correction="H"):
    """
    Return the QR code for ``payload`` as SVG markup ``size`` pixels square.
    """
    qr = _build_qr(payload, error_correction)
    img = qr.make_image(image_factory=qrcode.image.svg.SvgPathImage)
    root = img.get_image()
    dimension = img.units(img.pixel_size, text=False)
    root.set("width", str(size))
    root.set("height", str(size))
    root.set("viewBox", f"0 0 {dimension} {dimension}")
    return ET.tostring(root, encoding="unicode")


def qr_image(payload, error_correction="H"):
    """Pillow image of the QR code, for embedding in PDFs."""
    qr = _build_qr(payload, error_correction)
    return qr.make_image(fill_color="black", back_color="white").convert("RGB")


def encode_linear_visual(payload, height=100, width=None, show_text=True,
                         font_size=16, margin=10, background_color="#ffffff",
                         line_color="#000000"):
    """
    Draw ``payload`` as a row of bars.

    Each character gives a narrow bar followed by a bar one to three times
    as wide, picked from the character code. This is only a visual stand-in
    for a barcode: hardware scanners cannot decode it, check-in scans the QR
    code instead.
    """
    _check_payload(payload)
    if width is None:
        width = max(len(payload) * 14, 200)

    bar_height = height - (20 if show_text else 0)
    bars = []
    x = margin
    for char in payload:
        bars.append(
            f'<rect x="{x}" y="{margin}" width="{BAR_WIDTH}" height="{bar_height}" '
            f'fill="{line_color}" />'
        )
        x += BAR_WIDTH + BAR_SPACING

        wide = BAR_WIDTH * ((ord(char) % 3) + 1)
        bars.append(
            f'<rect x="{x}" y="{margin}" width="{wide}" height="{bar_height}" '
            f'fill="{line_color}" />'
        )
        x += wide + BAR_SPACING

    text = ""
    if show_text:
        text = (
            f'<text x="{width / 2:g}" y="{height - 5}" text-anchor="middle" '
            f'font-family="Arial" font-size="{font_size}" fill="#000000">'
            f"{escape(payload)}</text>"
        )

    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        f'<rect width="100%" height="100%" fill="{background_color}" />'
        f'<rect x="0" y="0" width="100%" height="100%" fill="none" '
        f'stroke="{FRAME_COLOR}" stroke-width="2" />'
        f'{"".join(bars)}{text}</svg>'
    )


def token_for(guest, visual_form=QR, **options):
    if visual_form == QR:
        markup = encode_qr(guest.id, **options)
    elif visual_form == BARCODE:
        markup = encode_linear_visual(guest.id, **options)
    else:
        raise EncodingError(f"Unknown token form {visual_form!r}")
    return ScannableToken(payload=guest.id, visual_form=visual_form, markup=markup)

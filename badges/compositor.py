"""
Badge rendering and printing.

``render_badge`` binds a guest to a layout and returns a ``BadgeView``: a flat
list of positioned fields that the Flask template shows on screen and
``draw_badge`` paints onto a reportlab canvas for printing.
"""
import logging
from dataclasses import dataclass, replace
from io import BytesIO
from typing import Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from badges.barcode import encode_qr, qr_image
from badges.editor import LANDSCAPE, LOGO, QRCODE, TEXT, BadgeTheme, default_layout
from badges.errors import PrintError
from badges.models import GuestIdentity

logger = logging.getLogger(__name__)

# layout pixels (96 dpi) to PDF points (72 dpi)
PX = 0.75
STRIP_HEIGHT = 48

BADGE_TYPE_COLORS = {
    "vip": ("#FFD700", "#000000"),
    "speaker": ("#9333EA", "#FFFFFF"),
}

PREVIEW_EVENT = "Annual Technology Conference 2025"
PREVIEW_DATA = {
    "attendee": ("John", "Smith", "Acme Corporation", "Marketing Manager"),
    "vip": ("Sarah", "Johnson", "Tech Innovators", "Chief Marketing Officer"),
    "speaker": ("Dr. Michael", "Brown", "Future Technologies", "AI Research Director"),
}


@dataclass(frozen=True)
class BadgeField:
    kind: str
    x: float
    y: float
    width: float
    height: float
    text: str = ""
    font_size: int = 12
    bold: bool = False
    color: str = "#000000"
    svg: Optional[str] = None
    payload: Optional[str] = None


@dataclass(frozen=True)
class BadgeView:
    width: int
    height: int
    orientation: str
    theme: BadgeTheme
    fields: Tuple[BadgeField, ...]
    event_name: str
    footer: str
    badge_type: Optional[str] = None

    @property
    def badge_type_colors(self):
        return BADGE_TYPE_COLORS.get(self.badge_type)

    def to_pdf(self):
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(self.width * PX, self.height * PX))
        draw_badge(c, self, 0, 0)
        c.showPage()
        c.save()
        return buffer.getvalue()


def _bound_text(element, guest):
    if element.id == "name":
        return guest.full_name
    if element.id == "company":
        return guest.company or "Guest"
    if element.id == "title":
        return guest.job_title or ""
    return element.content or ""


def render_badge(guest, event_name, layout=None, logo_text="Validity Events"):
    layout = layout or default_layout()
    theme = layout.theme
    fields = []
    for element in layout.elements:
        common = dict(x=element.x, y=element.y, width=element.width, height=element.height)
        if element.type == TEXT:
            text = _bound_text(element, guest)
            if not text:
                continue
            fields.append(BadgeField(
                kind=TEXT,
                text=text,
                font_size=element.font_size or theme.font_size,
                bold=element.font_weight == "bold",
                color=element.color or theme.text_color,
                **common,
            ))
        elif element.type == QRCODE:
            size = int(min(element.width, element.height)) - 4
            fields.append(BadgeField(kind=QRCODE, svg=encode_qr(guest.id, size=size),
                                     payload=guest.id, **common))
        elif element.type == LOGO:
            fields.append(BadgeField(kind=LOGO, text=logo_text, bold=True,
                                     color=theme.text_color, **common))

    return BadgeView(
        width=layout.width,
        height=layout.height,
        orientation=layout.orientation,
        theme=theme,
        fields=tuple(fields),
        event_name=event_name,
        footer=f"Badge ID: {guest.display_badge_id}",
    )


def preview_badge(preview_type, theme=None, orientation=LANDSCAPE, logo_text="Validity Events"):
    """Badge filled with sample data for the template designer."""
    try:
        first, last, company, title = PREVIEW_DATA[preview_type]
    except KeyError:
        raise ValueError(f"Unknown preview type {preview_type!r}")
    sample = GuestIdentity(
        id="sample-id-12345",
        badge_id="SAMPLE-12345",
        first_name=first,
        last_name=last,
        email="guest@example.com",
        company=company,
        job_title=title,
        event_name=PREVIEW_EVENT,
    )
    view = render_badge(sample, PREVIEW_EVENT, default_layout(theme, orientation), logo_text)
    if preview_type != "attendee":
        view = replace(view, badge_type=preview_type)
    return view


def _fit_font_size(c, text, font_name, size, max_width):
    while size > 4 and c.stringWidth(text, font_name, size) > max_width:
        size -= 0.5
    return size


def draw_badge(c, view, x, y):
    """Paint ``view`` with its lower-left corner at (x, y), in points."""
    w, h = view.width * PX, view.height * PX
    primary = colors.HexColor(view.theme.primary_color)

    c.saveState()
    c.setFillColor(colors.white)
    c.setStrokeColor(primary)
    c.setLineWidth(1.5)
    c.roundRect(x, y, w, h, 8, stroke=1, fill=1)

    c.setFillColor(primary)
    c.rect(x, y + h - STRIP_HEIGHT * PX, w, STRIP_HEIGHT * PX, stroke=0, fill=1)

    c.setFillColor(colors.HexColor(view.theme.text_color))
    size = _fit_font_size(c, view.event_name, "Helvetica", 7, w / 2)
    c.setFont("Helvetica", size)
    c.drawRightString(x + w - 10, y + h - 20, view.event_name)

    for field in view.fields:
        fx = x + field.x * PX
        top = y + h - field.y * PX
        if field.kind == QRCODE:
            c.drawImage(ImageReader(qr_image(field.payload)), fx, top - field.height * PX,
                        width=field.width * PX, height=field.height * PX)
            continue
        font = "Helvetica-Bold" if field.bold else "Helvetica"
        size = _fit_font_size(c, field.text, font, field.font_size * PX, field.width * PX)
        c.setFont(font, size)
        c.setFillColor(colors.HexColor(field.color))
        c.drawString(fx, top - (field.height * PX + size) / 2, field.text)

    if view.badge_type_colors:
        background, foreground = view.badge_type_colors
        c.setFillColor(colors.HexColor(background))
        c.roundRect(x + 10, y + 18, 40, 12, 6, stroke=0, fill=1)
        c.setFillColor(colors.HexColor(foreground))
        c.setFont("Helvetica-Bold", 7)
        c.drawCentredString(x + 30, y + 22, view.badge_type.upper())

    c.setFillColor(colors.HexColor(view.theme.text_color))
    c.setFont("Helvetica", 7)
    c.drawCentredString(x + w / 2, y + 6, view.footer)
    c.restoreState()


def print_badge(view, target, on_print=None):
    """
    Send only the badge to ``target`` and then call ``on_print`` once.

    ``target`` receives the badge PDF bytes. If the badge cannot be captured
    a ``PrintError`` is raised and ``on_print`` is not called.
    """
    if not view.fields:
        raise PrintError("Badge has nothing to print")
    try:
        pdf = view.to_pdf()
    except Exception as e:
        raise PrintError(f"Could not capture badge: {e}") from e
    if not pdf:
        raise PrintError("Badge capture produced no output")

    target(pdf)
    logger.info("Badge sent to printer: %s", view.footer)
    if on_print is not None:
        on_print()
    return pdf

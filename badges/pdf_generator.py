import logging
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from typing import List, Optional, Tuple

from PIL import Image
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from badges.compositor import PX, draw_badge
from badges.errors import AssemblyError

logger = logging.getLogger(__name__)

YELLOW = colors.Color(255 / 255, 220 / 255, 0)
LIGHT_YELLOW = colors.Color(255 / 255, 250 / 255, 230 / 255)

INSTRUCTIONS = [
    "Please present this confirmation at the event entrance to print your badge.",
    "You can also show the barcode on your mobile device.",
]
BRAND = "Validity Events Management System"
FOOTER = [BRAND, "This is an automatically generated document."]


@dataclass
class TokenSection:
    guest_id: str
    badge_id: str
    raster: Optional[bytes] = None

    @property
    def is_fallback(self):
        return self.raster is None


@dataclass
class ConfirmationDocument:
    event_name: str
    generated_on: str
    attendee_rows: List[Tuple[str, str]]
    token: TokenSection
    instructions: List[str] = field(default_factory=lambda: list(INSTRUCTIONS))
    footer: List[str] = field(default_factory=lambda: list(FOOTER))

    sections = ("header", "attendee", "token", "instructions", "footer")


def attendee_rows(guest):
    rows = [
        ("Name:", guest.full_name),
        ("Email:", guest.email),
        ("Phone:", guest.phone),
        ("Badge ID:", guest.badge_id),
    ]
    if guest.company:
        rows.append(("Company:", guest.company))
    if guest.job_title:
        rows.append(("Job Title:", guest.job_title))
    return rows


def build_confirmation(guest, raster=None, generated_on=None, brand=BRAND):
    if generated_on is None:
        generated_on = date.today().strftime("%B %d, %Y").replace(" 0", " ")
    return ConfirmationDocument(
        event_name=guest.event_name,
        generated_on=generated_on,
        attendee_rows=attendee_rows(guest),
        token=TokenSection(guest_id=guest.id, badge_id=guest.badge_id, raster=raster or None),
        footer=[brand, FOOTER[1]],
    )


def confirmation_filename(guest):
    return f"event-registration-{guest.badge_id}.pdf"


# The layout is measured in mm from the top of an A4 page.
PAGE_WIDTH, PAGE_HEIGHT = A4


def _y(top_mm):
    return PAGE_HEIGHT - top_mm * mm


def _band(c, color, left_mm, top_mm, width_mm, height_mm):
    c.setFillColor(color)
    c.rect(left_mm * mm, _y(top_mm + height_mm), width_mm * mm, height_mm * mm, stroke=0, fill=1)


def _centred(c, text, top_mm, font="Helvetica", size=12):
    c.setFont(font, size)
    c.drawCentredString(PAGE_WIDTH / 2, _y(top_mm), text)


def _draw_header(c, doc):
    _band(c, YELLOW, 0, 0, 210, 40)
    c.setFillColor(colors.black)
    _centred(c, "Event Registration Confirmation", 20, "Helvetica-Bold", 24)
    _centred(c, doc.event_name, 30, "Helvetica", 16)
    _centred(c, f"Generated on: {doc.generated_on}", 50, "Helvetica", 10)


def _draw_attendee_table(c, doc):
    c.setFillColor(colors.black)
    c.setFont("Helvetica-Bold", 16)
    c.drawString(20 * mm, _y(65), "Attendee Information")

    table = Table(doc.attendee_rows, colWidths=[30 * mm, 100 * mm])
    table.setStyle(TableStyle([
        ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 12),
        ("FONT", (1, 0), (1, -1), "Helvetica", 12),
        ("BACKGROUND", (0, 0), (0, -1), LIGHT_YELLOW),
        ("BOX", (0, 0), (-1, -1), 0.3, YELLOW),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    _, height = table.wrapOn(c, 130 * mm, 60 * mm)
    table.drawOn(c, 20 * mm, _y(70) - height)


def _draw_image_token(c, raster):
    with Image.open(BytesIO(raster)) as img:
        img.load()
        reader = ImageReader(img.convert("RGB"))
    c.setFillColor(colors.white)
    c.roundRect(65 * mm, _y(155), 80 * mm, 20 * mm, 2 * mm, stroke=0, fill=1)
    c.drawImage(reader, 70 * mm, _y(152), width=70 * mm, height=15 * mm)


def _draw_text_token(c, token):
    c.setFillColor(colors.white)
    c.roundRect(65 * mm, _y(155), 80 * mm, 20 * mm, 2 * mm, stroke=0, fill=1)
    c.setFillColor(colors.black)
    c.setFont("Helvetica", 12)
    c.drawString(70 * mm, _y(145), "Guest ID:")
    c.setFont("Helvetica-Bold", 8)
    c.drawString(90 * mm, _y(145), token.guest_id)

    # decorative bars, not scannable
    x = 70
    for char in token.guest_id[:40]:
        code = ord(char)
        if code % 2 == 0:
            bar = 3 + code % 3
            c.rect(x * mm, _y(147 + bar), 0.8 * mm, bar * mm, stroke=0, fill=1)
        x += 1.6


def _draw_token(c, doc):
    _band(c, YELLOW, 50, 120, 110, 40)
    c.setFillColor(colors.black)
    _centred(c, "Your Barcode", 130, "Helvetica-Bold", 16)

    token = doc.token
    embedded = False
    if not token.is_fallback:
        try:
            _draw_image_token(c, token.raster)
            embedded = True
        except (OSError, ValueError) as e:
            logger.warning("Could not embed token image for %s: %s", token.badge_id, e)
    if not embedded:
        _draw_text_token(c, token)

    c.setFillColor(colors.black)
    _centred(c, "Badge ID:", 165, "Helvetica", 12)
    _centred(c, token.badge_id, 172, "Helvetica-Bold", 12)


def _draw_instructions(c, doc):
    c.setFillColor(colors.black)
    c.rect(20 * mm, _y(210), 170 * mm, 25 * mm, stroke=0, fill=1)
    c.setFillColor(colors.white)
    for i, line in enumerate(doc.instructions):
        _centred(c, line, 195 + 7 * i, "Helvetica", 12)


def _draw_footer(c, doc):
    _band(c, YELLOW, 0, 270, 210, 27)
    c.setFillColor(colors.black)
    for i, line in enumerate(doc.footer):
        _centred(c, line, 280 + 5 * i, "Helvetica", 10)


def render_confirmation(doc):
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4, pageCompression=0)
    c.setTitle(f"Registration {doc.token.badge_id}")
    _draw_header(c, doc)
    _draw_attendee_table(c, doc)
    _draw_token(c, doc)
    _draw_instructions(c, doc)
    _draw_footer(c, doc)
    c.showPage()
    c.save()
    return buffer.getvalue()


def assemble_confirmation(guest, raster=None, output=None, generated_on=None, brand=BRAND):
    """
    Build the registration confirmation PDF for ``guest``.

    ``raster`` is the PNG of the guest's token. Without it the token section
    prints the guest and badge ids instead. The whole document is built in
    memory; ``output`` (a path or file object) is only written once it is
    complete. Returns the PDF bytes.
    """
    doc = build_confirmation(guest, raster, generated_on, brand)
    try:
        pdf = render_confirmation(doc)
    except Exception as e:
        logger.error("Confirmation for %s failed: %s", guest.badge_id, e)
        raise AssemblyError(f"Could not generate confirmation: {e}") from e

    if output is not None:
        if hasattr(output, "write"):
            output.write(pdf)
        else:
            with open(output, "wb") as f:
                f.write(pdf)
    return pdf


def generate_badge_sheet(views, cols=2, rows=4):
    """
    Lay badges out on A4 pages, ``cols`` x ``rows`` per page.
    """
    if not views:
        raise AssemblyError("No badges to print")

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    page_width, page_height = A4
    cell_w, cell_h = views[0].width * PX, views[0].height * PX
    cols = max(1, min(cols, int(page_width // cell_w)))
    rows = max(1, min(rows, int(page_height // cell_h)))
    x_spacing = (page_width - cols * cell_w) / (cols + 1)
    y_spacing = (page_height - rows * cell_h) / (rows + 1)

    count = 0
    try:
        for view in views:
            col = count % cols
            row = (count // cols) % rows
            x = x_spacing + col * (cell_w + x_spacing)
            y = page_height - ((row + 1) * (cell_h + y_spacing))
            draw_badge(c, view, x, y)

            count += 1
            if count % (cols * rows) == 0:
                c.showPage()
        if count % (cols * rows):
            c.showPage()
        c.save()
    except Exception as e:
        logger.error("Badge sheet failed after %d badges: %s", count, e)
        raise AssemblyError(f"Could not generate badge sheet: {e}") from e
    return buffer.getvalue()

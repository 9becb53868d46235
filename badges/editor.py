"""
Badge template editing: element placement and drag handling.

Layouts are plain data measured in CSS pixels on a 96 dpi card. Nothing here
is saved; whoever owns the template stores ``BadgeLayout`` as they see fit.
"""
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

TEXT = "text"
LOGO = "logo"
QRCODE = "qrcode"
ELEMENT_TYPES = (TEXT, LOGO, QRCODE)

LANDSCAPE = "landscape"
PORTRAIT = "portrait"

# CR80 badge stock, 3.375in x 2.125in
CARD_LONG = 324
CARD_SHORT = 204

DEFAULT_SIZES = {
    TEXT: (200, 20),
    LOGO: (100, 30),
    QRCODE: (80, 80),
}


def card_size(orientation):
    if orientation == LANDSCAPE:
        return CARD_LONG, CARD_SHORT
    if orientation == PORTRAIT:
        return CARD_SHORT, CARD_LONG
    raise ValueError(f"Unknown orientation {orientation!r}")


@dataclass(frozen=True)
class BadgeTheme:
    primary_color: str = "#FFDC00"
    text_color: str = "#000000"
    font_size: int = 16
    show_qr: bool = True
    show_logo: bool = True


@dataclass
class BadgeElement:
    id: str
    type: str
    x: float
    y: float
    width: float
    height: float
    content: Optional[str] = None
    font_size: Optional[int] = None
    font_weight: Optional[str] = None
    color: Optional[str] = None


@dataclass
class BadgeLayout:
    elements: List[BadgeElement] = field(default_factory=list)
    orientation: str = LANDSCAPE
    theme: BadgeTheme = field(default_factory=BadgeTheme)

    @property
    def width(self):
        return card_size(self.orientation)[0]

    @property
    def height(self):
        return card_size(self.orientation)[1]

    def get(self, element_id):
        for element in self.elements:
            if element.id == element_id:
                return element
        raise KeyError(element_id)

    def clamp(self, element, x, y):
        """Position nearest to (x, y) that keeps ``element`` on the card."""
        x = max(0, min(x, self.width - element.width))
        y = max(0, min(y, self.height - element.height))
        return x, y


def default_layout(theme=None, orientation=LANDSCAPE):
    theme = theme or BadgeTheme()
    width, _ = card_size(orientation)
    text_w = min(200, width - 40)
    elements = [
        BadgeElement("name", TEXT, 20, 60, text_w, 30, content="Full Name",
                     font_size=theme.font_size, font_weight="bold"),
        BadgeElement("company", TEXT, 20, 90, text_w, 20, content="Company Name",
                     font_size=theme.font_size - 2),
        BadgeElement("title", TEXT, 20, 110, text_w, 20, content="Job Title",
                     font_size=theme.font_size - 2),
    ]
    if theme.show_logo:
        elements.append(BadgeElement("logo", LOGO, 20, 20, 100, 30))
    if theme.show_qr:
        qr_x, qr_y = (250, 50) if orientation == LANDSCAPE else (150, 140)
        qr_w, qr_h = DEFAULT_SIZES[QRCODE]
        elements.append(BadgeElement("qrcode", QRCODE, min(qr_x, width - qr_w - 10),
                                     qr_y, qr_w, qr_h))
    return BadgeLayout(elements=elements, orientation=orientation, theme=theme)


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class BadgeTemplateEditor:
    """
    In-memory editor for a ``BadgeLayout``.

    Pointer coordinates are relative to the card's top-left corner. A drag
    starts on ``pointer_down`` over an element and ends on ``pointer_up`` or
    ``pointer_leave``; every move in between repositions the selected
    element, clamped to the card.
    """

    def __init__(self, layout=None):
        self.layout = layout or default_layout()
        self.selected_id = None
        self.state = DragState.IDLE
        self._offset = (0, 0)
        self._ids = itertools.count(1)

    @property
    def selected(self):
        if self.selected_id is None:
            return None
        return self.layout.get(self.selected_id)

    def select(self, element_id):
        self.layout.get(element_id)
        self.selected_id = element_id

    def add_element(self, element_type):
        if element_type not in ELEMENT_TYPES:
            raise ValueError(f"Unknown element type {element_type!r}")
        width, height = DEFAULT_SIZES[element_type]
        is_text = element_type == TEXT
        element = BadgeElement(
            id=f"{element_type}-{next(self._ids)}",
            type=element_type,
            x=50,
            y=50,
            width=width,
            height=height,
            content="New Text" if is_text else None,
            font_size=self.layout.theme.font_size if is_text else None,
        )
        element.x, element.y = self.layout.clamp(element, element.x, element.y)
        self.layout.elements.append(element)
        self.selected_id = element.id
        return element

    def move_element(self, element_id, x, y):
        element = self.layout.get(element_id)
        element.x, element.y = self.layout.clamp(element, x, y)
        return element

    def pointer_down(self, element_id, x, y):
        element = self.layout.get(element_id)
        self.selected_id = element_id
        self.state = DragState.DRAGGING
        self._offset = (x - element.x, y - element.y)

    def pointer_move(self, x, y):
        if self.state is not DragState.DRAGGING or self.selected_id is None:
            return False
        dx, dy = self._offset
        self.move_element(self.selected_id, x - dx, y - dy)
        return True

    def pointer_up(self):
        self.state = DragState.IDLE

    pointer_leave = pointer_up

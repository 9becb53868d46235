import time
from dataclasses import dataclass
from typing import Optional

QR = "qr"
BARCODE = "barcode"


def make_badge_id(event_id, now_ms=None):
    """
    Badge id handed out at registration: first 8 chars of the event id
    and the registration time in milliseconds.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{str(event_id)[:8]}-{now_ms}"


@dataclass(frozen=True)
class GuestIdentity:
    id: str
    badge_id: str
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    company: Optional[str] = None
    job_title: Optional[str] = None
    event_name: str = ""

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_badge_id(self):
        return self.badge_id or self.id

    @classmethod
    def from_row(cls, row, event_name=""):
        return cls(
            id=row["id"],
            badge_id=row["badge_id"] or "",
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            phone=row["phone"] or "",
            company=row["company"] or None,
            job_title=row["job_title"] or None,
            event_name=event_name,
        )


@dataclass(frozen=True)
class ScannableToken:
    payload: str
    visual_form: str
    markup: str

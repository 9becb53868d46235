"""Badge and credential artifact generation for event guests."""

from badges.errors import (
    AssemblyError,
    BadgeError,
    EncodingError,
    PrintError,
    RasterizationError,
)
from badges.models import GuestIdentity, ScannableToken, make_badge_id

__all__ = [
    "AssemblyError",
    "BadgeError",
    "EncodingError",
    "GuestIdentity",
    "PrintError",
    "RasterizationError",
    "ScannableToken",
    "make_badge_id",
]

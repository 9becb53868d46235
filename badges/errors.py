class BadgeError(Exception):
    """Base class for badge artifact failures."""


class EncodingError(BadgeError):
    """Payload could not be turned into a token."""


class RasterizationError(BadgeError):
    """Vector markup could not be converted to a PNG."""


class AssemblyError(BadgeError):
    """The confirmation document could not be written."""


class PrintError(BadgeError):
    """The badge could not be captured for printing."""

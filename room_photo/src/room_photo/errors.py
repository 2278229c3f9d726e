"""Exceptions raised by the room photo tools."""


class PhotoError(Exception):
    """Base class for room photo errors."""


class PhotoFormatError(PhotoError):
    """Raised when a photo or object image file cannot be decoded."""


class NoActiveRoomError(PhotoError, RuntimeError):
    """Raised when a scanline is requested before a room has been prepared."""

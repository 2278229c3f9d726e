"""Scanline composition of the active room photo and its objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .errors import NoActiveRoomError
from .palette import Color
from .quantizer import IndexedPhoto, QuantizedPhoto

OBJ_CLR_TRANSP = 0x40
SCROLL_X_DIM = 320
SCROLL_Y_DIM = 182

HORIZONTAL = "horizontal"
VERTICAL = "vertical"

PaletteProgrammer = Callable[[int, Sequence[Color]], None]


@dataclass(frozen=True)
class SpriteImage:
    """Object art: row-major, top-to-bottom, one palette index per byte."""

    width: int
    height: int
    pixels: bytes

    def pixel(self, x: int, y: int) -> int:
        return self.pixels[self.width * y + x]


@dataclass
class PlacedObject:
    x: int
    y: int
    image: SpriteImage


@dataclass
class Room:
    """A quantized photo and the objects drawn over it, in paint order."""

    photo: QuantizedPhoto
    objects: List[PlacedObject] = field(default_factory=list)
    name: str = ""


class RenderContext:
    """Holds the room being shown and produces display lines from it.

    The room is swapped only between frames; line requests never modify the
    photo, the object list or any sprite.
    """

    def __init__(
        self,
        program_palette: Optional[PaletteProgrammer] = None,
        transparent: int = OBJ_CLR_TRANSP,
    ):
        self.program_palette = program_palette
        self.transparent = transparent
        self._room: Optional[Room] = None

    @property
    def active_room(self) -> Optional[Room]:
        return self._room

    def set_active_room(self, room: Room) -> None:
        """Make ``room`` the source of every following line request.

        When a palette programmer was given, it receives the first managed
        slot and the photo's colors before the switch takes effect.
        """

        if self.program_palette is not None:
            allocation = room.photo.palette
            self.program_palette(allocation.base_slot, list(allocation.colors))
        self._room = room

    def clear_active_room(self) -> None:
        self._room = None

    def _require_room(self) -> Room:
        if self._room is None:
            raise NoActiveRoomError("No active room; call set_active_room() first")
        return self._room

    def fill_horiz_buffer(self, x: int, y: int, length: int = SCROLL_X_DIM) -> bytes:
        """Line of ``length`` pixels whose leftmost pixel is map coordinate (x, y)."""

        return self.composite_line(x, y, length, HORIZONTAL)

    def fill_vert_buffer(self, x: int, y: int, length: int = SCROLL_Y_DIM) -> bytes:
        """Line of ``length`` pixels whose top pixel is map coordinate (x, y)."""

        return self.composite_line(x, y, length, VERTICAL)

    def composite_line(self, x: int, y: int, length: int, orientation: str = HORIZONTAL) -> bytes:
        if orientation not in (HORIZONTAL, VERTICAL):
            raise ValueError(f"Unknown line orientation: {orientation}")
        if length < 0:
            raise ValueError(f"Line length must not be negative: {length}")

        room = self._require_room()
        vertical = orientation == VERTICAL
        buf = bytearray(length)
        _draw_background(buf, room.photo.photo, x, y, vertical)
        for obj in room.objects:
            _draw_object(buf, obj, x, y, vertical, self.transparent)
        return bytes(buf)


def _draw_background(buf: bytearray, photo: IndexedPhoto, x: int, y: int, vertical: bool) -> None:
    length = len(buf)
    if vertical:
        if not 0 <= x < photo.width:
            return
        start = max(0, -y)
        stop = min(length, photo.height - y)
        for idx in range(start, stop):
            buf[idx] = photo.pixel(x, y + idx)
    else:
        if not 0 <= y < photo.height:
            return
        start = max(0, -x)
        stop = min(length, photo.width - x)
        if start < stop:
            row = photo.row(y)
            buf[start:stop] = row[x + start : x + stop]


def _draw_object(
    buf: bytearray,
    obj: PlacedObject,
    x: int,
    y: int,
    vertical: bool,
    transparent: int,
) -> None:
    image = obj.image
    # ``along`` runs with the line, ``across`` is fixed for the whole line.
    if vertical:
        along, across = y - obj.y, x - obj.x
        span, breadth = image.height, image.width
    else:
        along, across = x - obj.x, y - obj.y
        span, breadth = image.width, image.height

    length = len(buf)
    if not 0 <= across < breadth or along + length <= 0 or along >= span:
        return

    idx = max(0, -along)
    pos = along + idx
    while idx < length and pos < span:
        pixel = image.pixel(across, pos) if vertical else image.pixel(pos, across)
        if pixel != transparent:
            buf[idx] = pixel
        idx += 1
        pos += 1

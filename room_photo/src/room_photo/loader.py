"""Readers and writers for the binary photo and object image files."""

# File layout (little endian)
# Offset | Size            | Content
# -------|-----------------|--------------------------------------------------
# 0      | 2               | width in pixels
# 2      | 2               | height in pixels
# 4      | w*h*2 or w*h*1  | pixels; photos are 5:6:5 words, object images
#        |                 | are palette index bytes. Rows are stored from
#        |                 | the bottom of the picture up, left to right.

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .compositor import SpriteImage
from .errors import PhotoFormatError

HEADER = struct.Struct("<HH")

MAX_PHOTO_WIDTH = 1024
MAX_PHOTO_HEIGHT = 1024
MAX_OBJECT_WIDTH = 160
MAX_OBJECT_HEIGHT = 100


@dataclass(frozen=True)
class RawPhoto:
    """Decoded 5:6:5 samples, row-major from the top row down."""

    width: int
    height: int
    pixels: List[int]


def _read_header(data: bytes, max_width: int, max_height: int, kind: str) -> tuple[int, int]:
    if len(data) < HEADER.size:
        raise PhotoFormatError(f"{kind} file is too short for its header")
    width, height = HEADER.unpack_from(data)
    if width > max_width or height > max_height:
        raise PhotoFormatError(
            f"{kind} is {width}x{height}; the limit is {max_width}x{max_height}"
        )
    return width, height


def _flip_rows(values: Sequence[int], width: int, height: int) -> List[int]:
    rows = [values[y * width : (y + 1) * width] for y in range(height)]
    return [value for row in reversed(rows) for value in row]


def decode_photo(data: bytes) -> RawPhoto:
    width, height = _read_header(data, MAX_PHOTO_WIDTH, MAX_PHOTO_HEIGHT, "Photo")
    expected = HEADER.size + width * height * 2
    if len(data) < expected:
        raise PhotoFormatError(
            f"Photo data is truncated: expected {expected} bytes, got {len(data)}"
        )
    stored = [value for (value,) in struct.iter_unpack("<H", data[HEADER.size : expected])]
    return RawPhoto(width=width, height=height, pixels=_flip_rows(stored, width, height))


def decode_obj_image(data: bytes) -> SpriteImage:
    width, height = _read_header(data, MAX_OBJECT_WIDTH, MAX_OBJECT_HEIGHT, "Object image")
    expected = HEADER.size + width * height
    if len(data) < expected:
        raise PhotoFormatError(
            f"Object image data is truncated: expected {expected} bytes, got {len(data)}"
        )
    pixels = _flip_rows(data[HEADER.size : expected], width, height)
    return SpriteImage(width=width, height=height, pixels=bytes(pixels))


def encode_photo(width: int, height: int, pixels: Sequence[int]) -> bytes:
    if len(pixels) != width * height:
        raise ValueError(f"Expected {width * height} samples, got {len(pixels)}")
    stored = _flip_rows(pixels, width, height)
    return HEADER.pack(width, height) + struct.pack(f"<{len(stored)}H", *stored)


def encode_obj_image(image: SpriteImage) -> bytes:
    stored = _flip_rows(image.pixels, image.width, image.height)
    return HEADER.pack(image.width, image.height) + bytes(stored)


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise PhotoFormatError(f"Input file not found: {path}") from exc
    except OSError as exc:
        raise PhotoFormatError(f"Failed to read {path}: {exc}") from exc


def read_photo_file(path: str | Path) -> RawPhoto:
    return decode_photo(_read_bytes(Path(path)))


def read_obj_image_file(path: str | Path) -> SpriteImage:
    return decode_obj_image(_read_bytes(Path(path)))


def write_photo_file(path: str | Path, width: int, height: int, pixels: Sequence[int]) -> Path:
    path = Path(path)
    path.write_bytes(encode_photo(width, height, pixels))
    return path


def write_obj_image_file(path: str | Path, image: SpriteImage) -> Path:
    path = Path(path)
    path.write_bytes(encode_obj_image(image))
    return path

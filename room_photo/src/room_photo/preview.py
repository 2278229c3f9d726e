"""Pillow helpers: read ordinary images as 5:6:5 samples and render previews."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from PIL import Image

from .compositor import RenderContext
from .errors import PhotoFormatError
from .histogram import pack_565
from .loader import MAX_PHOTO_HEIGHT, MAX_PHOTO_WIDTH, RawPhoto
from .palette import Color
from .quantizer import QuantizedPhoto


def rgb_to_565(rgb: Sequence[int]) -> int:
    r, g, b = rgb[:3]
    return pack_565(r >> 3, g >> 2, b >> 3)


def register_to_rgb(color: Color) -> Color:
    """Scale 6-bit color register values to 8-bit RGB."""

    return tuple(((v & 0x3F) << 2) | ((v & 0x3F) >> 4) for v in color)  # type: ignore[return-value]


def image_to_565(image: Image.Image) -> RawPhoto:
    width, height = image.size
    if width > MAX_PHOTO_WIDTH or height > MAX_PHOTO_HEIGHT:
        raise PhotoFormatError(
            f"Photo is {width}x{height}; the limit is {MAX_PHOTO_WIDTH}x{MAX_PHOTO_HEIGHT}"
        )
    data = image.convert("RGB").tobytes()
    pixels = [rgb_to_565(data[i : i + 3]) for i in range(0, len(data), 3)]
    return RawPhoto(width=width, height=height, pixels=pixels)


def read_image_as_565(path: str | Path) -> RawPhoto:
    path = Path(path)
    try:
        with Image.open(path) as img:
            return image_to_565(img)
    except FileNotFoundError as exc:
        raise PhotoFormatError(f"Input file not found: {path}") from exc
    except OSError as exc:
        raise PhotoFormatError(f"Failed to read image: {path}") from exc


def _indices_to_image(
    width: int, height: int, indices: Sequence[int], palette_table: Sequence[Color]
) -> Image.Image:
    lut: List[Color] = [register_to_rgb(color) for color in palette_table]
    lut.extend([(0, 0, 0)] * (256 - len(lut)))
    image = Image.new("RGB", (width, height))
    image.putdata([lut[idx] for idx in indices])
    return image


def indexed_photo_to_image(quantized: QuantizedPhoto) -> Image.Image:
    """Render a quantized photo through its own palette."""

    allocation = quantized.palette
    table: List[Color] = [(0, 0, 0)] * allocation.base_slot + list(allocation.colors)
    return _indices_to_image(quantized.width, quantized.height, quantized.photo.pixels, table)


def render_view(
    context: RenderContext,
    x: int,
    y: int,
    width: int,
    height: int,
    palette_table: Sequence[Color],
) -> Image.Image:
    """Compose a ``width`` x ``height`` window of the active room, one line at a time."""

    indices = bytearray()
    for row in range(height):
        indices += context.fill_horiz_buffer(x, y + row, width)
    return _indices_to_image(width, height, indices, palette_table)

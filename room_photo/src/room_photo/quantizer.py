"""Two-pass quantization of 5:6:5 room photos into palette indices."""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import List, Sequence

from .histogram import bucket_key, build_histograms
from .palette import (
    PROMOTED_SLOTS,
    RESERVED_SLOTS,
    Color,
    PaletteAllocation,
    allocate_palette,
)

TIE_BREAK_MODES = ("key",)


@dataclass
class QuantizeOptions:
    """Palette layout choices for a quantization run."""

    reserved_slots: int = RESERVED_SLOTS
    promoted_slots: int = PROMOTED_SLOTS
    tie_break: str = "key"  # equal counts rank by ascending fine key


@dataclass(frozen=True)
class IndexedPhoto:
    width: int
    height: int
    pixels: bytes

    def pixel(self, x: int, y: int) -> int:
        return self.pixels[self.width * y + x]

    def row(self, y: int) -> bytes:
        start = self.width * y
        return self.pixels[start : start + self.width]


@dataclass(frozen=True)
class QuantizedPhoto:
    """An indexed photo together with the palette its indices refer to."""

    photo: IndexedPhoto
    palette: PaletteAllocation

    @property
    def width(self) -> int:
        return self.photo.width

    @property
    def height(self) -> int:
        return self.photo.height

    @property
    def colors(self) -> List[Color]:
        return self.palette.colors


def remap_pixels(pixels: Sequence[int], allocation: PaletteAllocation) -> bytes:
    """Replace every sample with the palette slot of its fine key."""

    slots = allocation.slot_for_key
    bits = allocation.fine_bits
    out = bytearray(len(pixels))
    for i, pixel in enumerate(pixels):
        out[i] = slots[bucket_key(pixel, bits)]
    return bytes(out)


def quantize_photo(
    width: int,
    height: int,
    pixels: Sequence[int],
    options: QuantizeOptions | None = None,
) -> QuantizedPhoto:
    """Build histograms, allocate the palette and remap ``pixels``.

    ``pixels`` is the row-major, top-to-bottom stream of ``width * height``
    samples. It is read twice, so pass a sequence rather than an iterator.
    """

    options = options or QuantizeOptions()
    if options.tie_break not in TIE_BREAK_MODES:
        raise ValueError(f"Unknown tie break mode: {options.tie_break}")
    if width < 0 or height < 0:
        raise ValueError(f"Invalid photo size: {width}x{height}")
    if len(pixels) != width * height:
        raise ValueError(
            f"Expected {width * height} samples for a {width}x{height} photo, got {len(pixels)}"
        )
    if not pixels:
        warnings.warn(
            "Quantizing an empty photo; every managed palette slot is black",
            RuntimeWarning,
            stacklevel=2,
        )

    fine, coarse = build_histograms(pixels)
    allocation = allocate_palette(
        fine,
        coarse,
        reserved_slots=options.reserved_slots,
        promoted_slots=options.promoted_slots,
    )
    indexed = IndexedPhoto(width=width, height=height, pixels=remap_pixels(pixels, allocation))
    return QuantizedPhoto(photo=indexed, palette=allocation)

"""Color histograms over 5:6:5 pixel samples."""

# 16-bit sample layout
#   bit  15 14 13 12 11 | 10  9  8  7  6  5 |  4  3  2  1  0
#        R4 R3 R2 R1 R0 | G5 G4 G3 G2 G1 G0 | B4 B3 B2 B1 B0
#
# A bucket key keeps the top ``bits`` of each channel and packs them as
# RGB, so a 4-bit key is ``RRRRGGGGBBBB`` and a 2-bit key is ``RRGGBB``.

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

Channels = Tuple[int, int, int]

FINE_BITS = 4
COARSE_BITS = 2
MAX_KEY_BITS = 5


def unpack_565(pixel: int) -> Channels:
    """Split a 5:6:5 sample into its native (red, green, blue) values."""

    return (pixel >> 11) & 0x1F, (pixel >> 5) & 0x3F, pixel & 0x1F


def pack_565(red: int, green: int, blue: int) -> int:
    return ((red & 0x1F) << 11) | ((green & 0x3F) << 5) | (blue & 0x1F)


def bucket_key(pixel: int, bits: int) -> int:
    """Return the histogram key of ``pixel`` for a table of ``bits`` per channel."""

    if not 1 <= bits <= MAX_KEY_BITS:
        raise ValueError(f"Unsupported key width: {bits} (expected 1-{MAX_KEY_BITS})")
    red, green, blue = unpack_565(pixel)
    red >>= 5 - bits
    green >>= 6 - bits
    blue >>= 5 - bits
    return (red << (bits * 2)) | (green << bits) | blue


def parent_key_of(key: int, bits: int, parent_bits: int) -> int:
    """Derive the coarser key that contains ``key`` without looking at any pixel."""

    if not 1 <= parent_bits <= bits <= MAX_KEY_BITS:
        raise ValueError(f"Cannot derive a {parent_bits}-bit key from a {bits}-bit key")
    mask = (1 << bits) - 1
    shift = bits - parent_bits
    red = (key >> (bits * 2)) >> shift
    green = ((key >> bits) & mask) >> shift
    blue = (key & mask) >> shift
    return (red << (parent_bits * 2)) | (green << parent_bits) | blue


def fine_key(pixel: int) -> int:
    return bucket_key(pixel, FINE_BITS)


def coarse_key(pixel: int) -> int:
    return bucket_key(pixel, COARSE_BITS)


@dataclass
class HistogramBucket:
    key: int
    count: int = 0
    red_sum: int = 0
    green_sum: int = 0
    blue_sum: int = 0
    # Only fine buckets record a parent; it never changes once set.
    parent_key: Optional[int] = None
    slot: Optional[int] = None

    def add(self, red: int, green: int, blue: int) -> None:
        self.count += 1
        self.red_sum += red
        self.green_sum += green
        self.blue_sum += blue

    def average(self) -> Channels:
        """Integer-truncated mean of the channel sums, ``(0, 0, 0)`` if empty."""

        if self.count == 0:
            return (0, 0, 0)
        return (
            self.red_sum // self.count,
            self.green_sum // self.count,
            self.blue_sum // self.count,
        )


class ColorHistogram:
    """Frequency and channel-sum table keyed by the top ``bits`` of each channel."""

    def __init__(self, bits: int):
        if not 1 <= bits <= MAX_KEY_BITS:
            raise ValueError(f"Unsupported key width: {bits} (expected 1-{MAX_KEY_BITS})")
        self.bits = bits
        self.buckets: List[HistogramBucket] = [
            HistogramBucket(key) for key in range(1 << (bits * 3))
        ]

    def __len__(self) -> int:
        return len(self.buckets)

    def __getitem__(self, key: int) -> HistogramBucket:
        return self.buckets[key]

    def __iter__(self):
        return iter(self.buckets)

    def key_for(self, pixel: int) -> int:
        return bucket_key(pixel, self.bits)

    def add(self, pixel: int) -> HistogramBucket:
        bucket = self.buckets[self.key_for(pixel)]
        bucket.add(*unpack_565(pixel))
        return bucket

    @property
    def total(self) -> int:
        return sum(bucket.count for bucket in self.buckets)

    def populated(self) -> List[HistogramBucket]:
        return [bucket for bucket in self.buckets if bucket.count]


def build_histograms(
    pixels: Iterable[int],
    fine_bits: int = FINE_BITS,
    coarse_bits: int = COARSE_BITS,
) -> Tuple[ColorHistogram, ColorHistogram]:
    """Count every sample into a fine and a coarse table.

    Each fine bucket remembers the coarse key its pixels fall into. Because
    the coarse key uses a subset of the high bits the fine key uses, every
    pixel sharing a fine key shares that parent too.
    """

    if coarse_bits >= fine_bits:
        raise ValueError(
            f"Coarse key width ({coarse_bits}) must be smaller than fine key width ({fine_bits})"
        )
    fine = ColorHistogram(fine_bits)
    coarse = ColorHistogram(coarse_bits)

    for pixel in pixels:
        if not 0 <= pixel <= 0xFFFF:
            raise ValueError(f"Pixel sample out of 16-bit range: {pixel}")
        parent = coarse.add(pixel)
        fine.add(pixel).parent_key = parent.key

    return fine, coarse


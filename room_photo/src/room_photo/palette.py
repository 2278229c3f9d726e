"""Palette slot allocation for quantized room photos."""

# Palette layout (192 entries)
# Slots      | Owner              | Notes
# -----------|--------------------|---------------------------------------------
#   0 -  63  | sprite art         | 2:2:2 RGB object colors, never written here
#  64 - 127  | promoted fine keys | the 64 most frequent 4:4:4 buckets
# 128 - 191  | coarse keys        | one per 2:2:2 bucket, slot = 128 + key
#
# Entries hold 6-bit color register values in 8-bit fields.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .histogram import (
    COARSE_BITS,
    Channels,
    ColorHistogram,
    HistogramBucket,
    bucket_key,
    parent_key_of,
)

Color = Tuple[int, int, int]

RESERVED_SLOTS = 64
PROMOTED_SLOTS = 64
COARSE_SLOTS = 1 << (COARSE_BITS * 3)
PHOTO_PALETTE_SIZE = PROMOTED_SLOTS + COARSE_SLOTS
PALETTE_SIZE = RESERVED_SLOTS + PHOTO_PALETTE_SIZE


def to_palette_color(channels: Channels) -> Color:
    """Convert native 5:6:5 channel values into color register values.

    Red and blue gain one low bit, green already has six.
    """

    red, green, blue = channels
    return (red & 0x1F) << 1, green & 0x3F, (blue & 0x1F) << 1


def rank_buckets(histogram: ColorHistogram) -> List[HistogramBucket]:
    """Order buckets by descending count, ties broken by ascending key."""

    return sorted(histogram, key=lambda bucket: (-bucket.count, bucket.key))


@dataclass
class PaletteAllocation:
    """Colors chosen for one photo and the slot every fine key resolves to."""

    base_slot: int
    fine_bits: int
    colors: List[Color] = field(default_factory=list)
    slot_for_key: List[int] = field(default_factory=list)
    promoted_keys: List[int] = field(default_factory=list)

    def slot_for_pixel(self, pixel: int) -> int:
        return self.slot_for_key[bucket_key(pixel, self.fine_bits)]

    def color_for_slot(self, slot: int) -> Color:
        index = slot - self.base_slot
        if not 0 <= index < len(self.colors):
            raise ValueError(f"Slot {slot} is not managed by this palette")
        return self.colors[index]

    @property
    def slots(self) -> range:
        return range(self.base_slot, self.base_slot + len(self.colors))


def allocate_palette(
    fine: ColorHistogram,
    coarse: ColorHistogram,
    reserved_slots: int = RESERVED_SLOTS,
    promoted_slots: int = PROMOTED_SLOTS,
) -> PaletteAllocation:
    """Assign palette slots to the most frequent fine buckets and to every coarse bucket.

    Buckets are updated in place: each one ends up with its resolved ``slot``.
    A fine bucket that is not promoted shares the slot of its coarse parent.
    """

    if fine.bits <= coarse.bits:
        raise ValueError("Fine histogram must use more key bits than the coarse one")
    promoted_slots = min(promoted_slots, len(fine))
    if reserved_slots + promoted_slots + len(coarse) > 256:
        raise ValueError("Palette layout does not fit in one byte of slot indices")

    allocation = PaletteAllocation(base_slot=reserved_slots, fine_bits=fine.bits)

    # Slots come only from this call's ranking; earlier allocations are overwritten.
    promoted = {}
    for rank, bucket in enumerate(rank_buckets(fine)[:promoted_slots]):
        promoted[bucket.key] = reserved_slots + rank
        allocation.colors.append(to_palette_color(bucket.average()))
        allocation.promoted_keys.append(bucket.key)

    coarse_base = reserved_slots + promoted_slots
    for bucket in coarse:
        bucket.slot = coarse_base + bucket.key
        allocation.colors.append(to_palette_color(bucket.average()))

    for bucket in fine:
        slot = promoted.get(bucket.key)
        if slot is None:
            parent = bucket.parent_key
            if parent is None:
                parent = parent_key_of(bucket.key, fine.bits, coarse.bits)
            slot = coarse[parent].slot
        bucket.slot = slot
        allocation.slot_for_key.append(slot)

    return allocation


def sprite_palette_222() -> List[Color]:
    """Colors for the reserved block: index ``RRGGBB`` spread over 0-63."""

    levels = (0x00, 0x15, 0x2A, 0x3F)
    return [
        (levels[(index >> 4) & 0x3], levels[(index >> 2) & 0x3], levels[index & 0x3])
        for index in range(RESERVED_SLOTS)
    ]


def build_palette_table(
    allocation: PaletteAllocation,
    sprite_palette: Sequence[Color] | None = None,
) -> List[Color]:
    """Merge the sprite block and a photo's colors into one full palette table."""

    size = allocation.base_slot + len(allocation.colors)
    table: List[Color] = [(0, 0, 0)] * size
    if sprite_palette is not None:
        if len(sprite_palette) > allocation.base_slot:
            raise ValueError(
                f"Sprite palette has {len(sprite_palette)} entries, only {allocation.base_slot} are reserved"
            )
        table[: len(sprite_palette)] = list(sprite_palette)
    for slot, color in zip(allocation.slots, allocation.colors):
        table[slot] = color
    return table


def format_palette_text(colors: Sequence[Color], base_slot: int = 0) -> str:
    entries = [f"{base_slot + idx}: ({r},{g},{b})" for idx, (r, g, b) in enumerate(colors)]
    return ", ".join(entries)

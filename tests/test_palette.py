from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / "room_photo/src"))

from room_photo.histogram import build_histograms, coarse_key, fine_key, pack_565, parent_key_of
from room_photo.palette import (
    PALETTE_SIZE,
    RESERVED_SLOTS,
    allocate_palette,
    build_palette_table,
    format_palette_text,
    rank_buckets,
    sprite_palette_222,
    to_palette_color,
)


def pixel_for_fine_key(key: int) -> int:
    return pack_565(((key >> 8) & 0xF) << 1, ((key >> 4) & 0xF) << 2, (key & 0xF) << 1)


def test_to_palette_color_shifts_red_and_blue() -> None:
    assert to_palette_color((31, 63, 31)) == (62, 63, 62)
    assert to_palette_color((20, 40, 10)) == (40, 40, 20)
    assert to_palette_color((0, 0, 0)) == (0, 0, 0)


def test_rank_breaks_ties_by_ascending_key() -> None:
    pixels = [pixel_for_fine_key(k) for k in (300, 5, 77)]
    fine, _coarse = build_histograms(pixels)

    ranked = rank_buckets(fine)

    assert [bucket.key for bucket in ranked[:3]] == [5, 77, 300]
    assert all(bucket.count == 0 for bucket in ranked[3:])


def test_single_color_photo() -> None:
    value = pack_565(20, 40, 10)
    fine, coarse = build_histograms([value] * 4)

    allocation = allocate_palette(fine, coarse)

    assert allocation.promoted_keys[0] == fine_key(value)
    assert allocation.slot_for_pixel(value) == RESERVED_SLOTS
    assert allocation.colors[0] == (40, 40, 20)
    assert allocation.colors[64 + coarse_key(value)] == (40, 40, 20)
    assert allocation.colors[1:64] == [(0, 0, 0)] * 63
    other = [c for i, c in enumerate(allocation.colors[64:]) if i != coarse_key(value)]
    assert other == [(0, 0, 0)] * 63


def test_every_managed_slot_is_assigned_once() -> None:
    fine, coarse = build_histograms([pack_565(3, 7, 9)])

    allocation = allocate_palette(fine, coarse)

    assert len(allocation.colors) == 128
    assert list(allocation.slots) == list(range(64, 192))
    assert len(set(allocation.promoted_keys)) == 64
    assert [b.slot for b in coarse] == list(range(128, 192))
    promoted_slots = [fine[k].slot for k in allocation.promoted_keys]
    assert promoted_slots == list(range(64, 128))
    assert all(bucket.slot is not None for bucket in fine)
    assert len(allocation.slot_for_key) == 4096


def test_popular_color_is_promoted_and_rare_ones_fall_back() -> None:
    popular = 150
    pixels = [pixel_for_fine_key(k) for k in range(200)]
    pixels += [pixel_for_fine_key(popular)] * 49
    fine, coarse = build_histograms(pixels)
    assert len(fine.populated()) == 200
    assert fine[popular].count == 50

    allocation = allocate_palette(fine, coarse)

    assert allocation.promoted_keys[0] == popular
    assert allocation.slot_for_key[popular] == 64
    # Remaining ranks go to the single-count keys in ascending key order.
    assert allocation.promoted_keys[1:] == list(range(63))
    for key in range(63, 200):
        if key == popular:
            continue
        assert allocation.slot_for_key[key] == 128 + parent_key_of(key, 4, 2)


def test_unpopulated_fine_keys_resolve_through_derived_parent() -> None:
    fine, coarse = build_histograms([pack_565(20, 40, 10)])

    allocation = allocate_palette(fine, coarse)

    assert allocation.slot_for_key[0xFFF] == 191


def test_coarse_color_averages_all_of_its_pixels() -> None:
    a = pack_565(16, 32, 16)
    b = pack_565(22, 46, 18)
    assert coarse_key(a) == coarse_key(b)
    assert fine_key(a) != fine_key(b)
    fine, coarse = build_histograms([a, a, a, b])

    allocation = allocate_palette(fine, coarse)

    expected = to_palette_color(((16 * 3 + 22) // 4, (32 * 3 + 46) // 4, (16 * 3 + 18) // 4))
    assert allocation.color_for_slot(128 + coarse_key(a)) == expected


def test_color_for_slot_outside_managed_range() -> None:
    fine, coarse = build_histograms([0])
    allocation = allocate_palette(fine, coarse)
    with pytest.raises(ValueError):
        allocation.color_for_slot(10)
    with pytest.raises(ValueError):
        allocation.color_for_slot(192)


def test_palette_table_keeps_sprite_block() -> None:
    fine, coarse = build_histograms([pack_565(31, 63, 31)])
    allocation = allocate_palette(fine, coarse)
    sprites = sprite_palette_222()

    table = build_palette_table(allocation, sprites)

    assert len(table) == PALETTE_SIZE
    assert table[:64] == sprites
    assert table[64:] == allocation.colors
    assert table[64] == (62, 63, 62)
    assert build_palette_table(allocation)[:64] == [(0, 0, 0)] * 64


def test_palette_table_rejects_oversized_sprite_block() -> None:
    fine, coarse = build_histograms([0])
    allocation = allocate_palette(fine, coarse)
    with pytest.raises(ValueError):
        build_palette_table(allocation, [(0, 0, 0)] * 65)


def test_sprite_palette_222() -> None:
    sprites = sprite_palette_222()
    assert len(sprites) == 64
    assert sprites[0] == (0, 0, 0)
    assert sprites[0b111111] == (0x3F, 0x3F, 0x3F)
    assert sprites[0b110110] == (0x3F, 0x15, 0x2A)


def test_format_palette_text() -> None:
    assert format_palette_text([(1, 2, 3), (4, 5, 6)], 64) == "64: (1,2,3), 65: (4,5,6)"


def test_reallocation_ignores_earlier_slots() -> None:
    pixels = [pixel_for_fine_key(k) for k in range(200)]
    fine, coarse = build_histograms(pixels)
    allocate_palette(fine, coarse)

    again = allocate_palette(fine, coarse, reserved_slots=0)

    assert all(0 <= slot < 128 for slot in again.slot_for_key)
    assert again.slot_for_key[199] == 64 + parent_key_of(199, 4, 2)
    assert [fine[k].slot for k in again.promoted_keys] == list(range(64))

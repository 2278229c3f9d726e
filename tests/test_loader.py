from pathlib import Path
import struct
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / "room_photo/src"))

from room_photo.compositor import SpriteImage
from room_photo.errors import PhotoFormatError
from room_photo.loader import (
    MAX_OBJECT_WIDTH,
    MAX_PHOTO_HEIGHT,
    decode_obj_image,
    decode_photo,
    encode_obj_image,
    encode_photo,
    read_obj_image_file,
    read_photo_file,
    write_obj_image_file,
    write_photo_file,
)


def test_photo_rows_are_stored_bottom_up() -> None:
    # 2x2 photo: file holds the bottom row (3, 4) before the top row (1, 2).
    data = struct.pack("<HH", 2, 2) + struct.pack("<4H", 3, 4, 1, 2)

    photo = decode_photo(data)

    assert (photo.width, photo.height) == (2, 2)
    assert photo.pixels == [1, 2, 3, 4]
    assert encode_photo(2, 2, [1, 2, 3, 4]) == data


def test_obj_image_rows_are_stored_bottom_up() -> None:
    data = struct.pack("<HH", 3, 2) + bytes([4, 5, 6, 1, 2, 3])

    image = decode_obj_image(data)

    assert image == SpriteImage(width=3, height=2, pixels=bytes([1, 2, 3, 4, 5, 6]))
    assert encode_obj_image(image) == data


def test_photo_file_round_trip(tmp_path: Path) -> None:
    pixels = [0xF800, 0x07E0, 0x001F, 0xFFFF, 0x0000, 0x1234]
    path = write_photo_file(tmp_path / "room.photo", 3, 2, pixels)

    photo = read_photo_file(path)

    assert photo.pixels == pixels


def test_obj_image_file_round_trip(tmp_path: Path) -> None:
    image = SpriteImage(width=2, height=2, pixels=bytes([1, 0x40, 3, 4]))
    path = write_obj_image_file(tmp_path / "key.obj", image)

    assert read_obj_image_file(path) == image


def test_truncated_photo_is_rejected() -> None:
    data = struct.pack("<HH", 2, 2) + struct.pack("<3H", 1, 2, 3)
    with pytest.raises(PhotoFormatError):
        decode_photo(data)
    with pytest.raises(PhotoFormatError):
        decode_photo(b"\x01")


def test_oversized_inputs_are_rejected() -> None:
    with pytest.raises(PhotoFormatError):
        decode_photo(struct.pack("<HH", 1, MAX_PHOTO_HEIGHT + 1))
    with pytest.raises(PhotoFormatError):
        decode_obj_image(struct.pack("<HH", MAX_OBJECT_WIDTH + 1, 1))


def test_truncated_obj_image_is_rejected() -> None:
    with pytest.raises(PhotoFormatError):
        decode_obj_image(struct.pack("<HH", 2, 2) + bytes(3))


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(PhotoFormatError):
        read_photo_file(tmp_path / "missing.photo")
    with pytest.raises(PhotoFormatError):
        read_obj_image_file(tmp_path / "missing.obj")


def test_encode_photo_checks_sample_count() -> None:
    with pytest.raises(ValueError):
        encode_photo(2, 2, [0])

"""Room photo quantizer and scanline compositor.

Reduces 5:6:5 room photos to 128 palette colors placed after a block of
sprite colors, and composes display lines from the quantized photo and the
objects placed in the room. Usable from the CLI (``python -m room_photo``)
or as a library.
"""

from .compositor import (
    OBJ_CLR_TRANSP,
    SCROLL_X_DIM,
    SCROLL_Y_DIM,
    PlacedObject,
    RenderContext,
    Room,
    SpriteImage,
)
from .errors import NoActiveRoomError, PhotoError, PhotoFormatError
from .histogram import ColorHistogram, build_histograms, coarse_key, fine_key
from .loader import RawPhoto, read_obj_image_file, read_photo_file
from .palette import (
    PALETTE_SIZE,
    RESERVED_SLOTS,
    PaletteAllocation,
    allocate_palette,
    build_palette_table,
    format_palette_text,
    sprite_palette_222,
)
from .quantizer import (
    IndexedPhoto,
    QuantizeOptions,
    QuantizedPhoto,
    quantize_photo,
    remap_pixels,
)

__all__ = [
    "OBJ_CLR_TRANSP",
    "PALETTE_SIZE",
    "RESERVED_SLOTS",
    "SCROLL_X_DIM",
    "SCROLL_Y_DIM",
    "ColorHistogram",
    "IndexedPhoto",
    "NoActiveRoomError",
    "PaletteAllocation",
    "PhotoError",
    "PhotoFormatError",
    "PlacedObject",
    "QuantizeOptions",
    "QuantizedPhoto",
    "RawPhoto",
    "RenderContext",
    "Room",
    "SpriteImage",
    "allocate_palette",
    "build_histograms",
    "build_palette_table",
    "coarse_key",
    "fine_key",
    "format_palette_text",
    "quantize_photo",
    "read_obj_image_file",
    "read_photo_file",
    "remap_pixels",
    "sprite_palette_222",
]

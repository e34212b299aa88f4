"""Writing ICO files and repairing BMP data embedded in them."""

from __future__ import annotations

import struct
import zlib

from .image import Image, ImageError

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_PNG_COLOR_TYPES = {1: 0, 2: 4, 3: 2, 4: 6}
_MAX_ICO_DIMENSION = 256
_ICO_DATA_OFFSET = 22


def _png_chunk(kind: bytes, payload: bytes) -> bytes:
    return (
        struct.pack(">I", len(payload))
        + kind
        + payload
        + struct.pack(">I", zlib.crc32(kind + payload) & 0xFFFFFFFF)
    )


def encode_png(image: Image) -> bytes:
    """Encode an 8-bit image as a non-interlaced PNG."""
    try:
        color_type = _PNG_COLOR_TYPES[image.bands]
    except KeyError:
        raise ImageError(f"can't encode {image.bands}-band image as PNG") from None

    stride = image.stride
    raw = b"".join(
        b"\x00" + bytes(image.data[start:start + stride])
        for start in range(0, len(image.data), stride)
    )
    ihdr = struct.pack(">IIBBBBB", image.width, image.height, 8, color_type, 0, 0, 0)

    return (
        _PNG_SIGNATURE
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(raw))
        + _png_chunk(b"IEND", b"")
    )


def save_ico(image: Image) -> bytes:
    """Encode an image as a single-entry ICO file holding PNG data."""
    if image.width > _MAX_ICO_DIMENSION or image.height > _MAX_ICO_DIMENSION:
        raise ImageError(
            "Image dimensions is too big. Max dimension size for ICO is 256"
        )

    png = encode_png(image)

    icon_dir = bytes((0, 0, 1, 0, 1, 0))
    entry = struct.pack(
        "<BBBBHHII",
        image.width % 256,
        image.height % 256,
        0,  # number of colours: not used
        0,  # reserved
        1,  # colour planes
        32 if image.has_alpha() else 24,
        len(png),
        _ICO_DATA_OFFSET,
    )
    return icon_dir + entry + png


def fix_bmp_header(data: bytes) -> bytes:
    """Turn BMP data stored inside an ICO into a standalone BMP file.

    A file header is prepended and the doubled ICO height is halved.
    """
    if len(data) < 36:
        raise ImageError("BMP info header is too short")

    file_size = (14 + len(data)) & 0xFFFFFFFF
    colors_used = int.from_bytes(data[32:36], "little")
    bit_count = int.from_bytes(data[14:16], "little")

    if colors_used == 0 and bit_count <= 8:
        pixel_offset = 14 + 40 + 4 * (1 << bit_count)
    else:
        pixel_offset = 14 + 40 + 4 * colors_used

    height = int.from_bytes(data[8:12], "little") // 2

    return (
        b"BM"
        + struct.pack("<III", file_size, 0, pixel_offset & 0xFFFFFFFF)
        + bytes(data[:8])
        + struct.pack("<I", height)
        + bytes(data[12:])
    )
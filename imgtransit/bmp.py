"""Reading and writing of Windows BMP images."""

from __future__ import annotations

import io
import struct
from itertools import cycle, islice
from typing import BinaryIO, Iterable, Iterator, Sequence

from .image import Image, ImageError

_FILE_HEADER_LEN = 14
_INFO_HEADER_LEN = 40
_V4_INFO_HEADER_LEN = 108
_V5_INFO_HEADER_LEN = 124
_SUPPORTED_INFO_LENGTHS = (_INFO_HEADER_LEN, _V4_INFO_HEADER_LEN, _V5_INFO_HEADER_LEN)

_PIXELS_PER_METER = 2835
_HEADER_FORMAT = "<2sIHHIIIIHHIIIIII"


class BmpUnsupportedError(ImageError):
    """The BMP image uses a valid but unsupported feature."""

    def __init__(self, message: str = "unsupported BMP image") -> None:
        super().__init__(message)


def _u16(buf: bytes, offset: int) -> int:
    # Bytes past the end of the buffer read as zero.
    return int.from_bytes(buf[offset:offset + 2], "little")


def _u32(buf: bytes, offset: int) -> int:
    return int.from_bytes(buf[offset:offset + 4], "little")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunk = stream.read(size)
    if len(chunk) < size:
        raise ImageError("unexpected EOF")
    return chunk


def _rows(height: int, top_down: bool) -> range:
    return range(height) if top_down else range(height - 1, -1, -1)


def _unpack(packed: Iterable[int], bpp: int) -> Iterator[int]:
    """Yield palette indices packed most significant bits first."""
    mask = (1 << bpp) - 1
    shifts = range(8 - bpp, -1, -bpp)
    for byte in packed:
        for shift in shifts:
            yield (byte >> shift) & mask


def _expand(indices: Iterable[int], palette: Sequence[bytes]) -> bytes:
    try:
        return b"".join(palette[index] for index in indices)
    except IndexError:
        raise ImageError("palette index out of range") from None


def _set_bit_depth(image: Image, colors: int) -> None:
    if colors > 16:
        bit_depth = 8
    elif colors > 4:
        bit_depth = 4
    elif colors > 2:
        bit_depth = 2
    else:
        bit_depth = 0
    image.set_int("palette-bit-depth", bit_depth)


def _decode_paletted(
    stream: BinaryIO,
    width: int,
    height: int,
    bpp: int,
    palette: Sequence[bytes],
    top_down: bool,
) -> Image:
    per_byte = 8 // bpp
    # Each row is 4-byte aligned.
    row_len = ((width + per_byte - 1) // per_byte + 3) & ~3
    stride = width * 3
    data = bytearray(stride * height)

    for y in _rows(height, top_down):
        row = _read_exact(stream, row_len)
        data[y * stride:(y + 1) * stride] = _expand(
            islice(_unpack(row, bpp), width), palette
        )

    image = Image(width, height, 3, data)
    _set_bit_depth(image, len(palette))
    return image


def _decode_rle(
    stream: BinaryIO,
    width: int,
    height: int,
    bpp: int,
    palette: Sequence[bytes],
) -> Image:
    per_byte = 8 // bpp
    data = bytearray(width * height * 3)
    x, y = 0, height - 1

    while True:
        first, second = _read_exact(stream, 2)

        if first == 0:
            if second == 0:  # end of line
                x, y = 0, y - 1
                if y < 0:
                    break
            elif second == 1:  # end of bitmap
                break
            elif second == 2:  # delta
                dx, dy = _read_exact(stream, 2)
                x = min(x + dx, width)
                y -= dy
                if y < 0:
                    break
            else:  # absolute run
                size = ((second + per_byte - 1) // per_byte + 1) & ~1
                chunk = _read_exact(stream, size)
                count = min(second, width - x)
                if count > 0:
                    start = (y * width + x) * 3
                    data[start:start + count * 3] = _expand(
                        islice(_unpack(chunk, bpp), count), palette
                    )
                    x += count
        else:  # encoded run
            count = min(first, width - x)
            if count > 0:
                start = (y * width + x) * 3
                pattern = cycle(list(_unpack((second,), bpp)))
                data[start:start + count * 3] = _expand(
                    islice(pattern, count), palette
                )
                x += count

    image = Image(width, height, 3, data)
    _set_bit_depth(image, len(palette))
    return image


def _decode_rgb(
    stream: BinaryIO,
    width: int,
    height: int,
    bands: int,
    top_down: bool,
    no_alpha: bool,
) -> Image:
    if bands not in (3, 4):
        raise BmpUnsupportedError()

    # Keep alpha only when the source has 4 bands and the last one is alpha.
    image_bands = 4 if bands == 4 and not no_alpha else 3
    row_len = (bands * width + 3) & ~3
    used = bands * width
    stride = width * image_bands
    data = bytearray(stride * height)

    for y in _rows(height, top_down):
        row = _read_exact(stream, row_len)
        out = bytearray(stride)
        # Pixels are stored in BGR order.
        out[0::image_bands] = row[2:used:bands]
        out[1::image_bands] = row[1:used:bands]
        out[2::image_bands] = row[0:used:bands]
        if image_bands == 4:
            out[3::4] = row[3:used:4]
        data[y * stride:(y + 1) * stride] = out

    return Image(width, height, image_bands, data)


def _decode_rgb16(
    stream: BinaryIO, width: int, height: int, top_down: bool, bmp565: bool
) -> Image:
    row_len = (2 * width + 3) & ~3
    stride = width * 3
    data = bytearray(stride * height)

    for y in _rows(height, top_down):
        row = _read_exact(stream, row_len)
        out = bytearray()
        for (pixel,) in struct.iter_unpack("<H", row[:2 * width]):
            if bmp565:
                red = ((pixel & 0xF800) >> 11) << 3
                green = ((pixel & 0x7E0) >> 5) << 2
            else:
                red = ((pixel & 0x7C00) >> 10) << 3
                green = ((pixel & 0x3E0) >> 5) << 3
            blue = (pixel & 0x1F) << 3
            out += bytes((red, green, blue))
        data[y * stride:(y + 1) * stride] = out

    return Image(width, height, 3, data)


def load_bmp(data: bytes, no_alpha: bool) -> Image:
    """Decode a BMP file made of a file header followed by an info header.

    With ``no_alpha`` set, 32-bit images without an alpha mask load as RGB.
    """
    stream = io.BytesIO(data)

    header = bytearray(_read_exact(stream, _FILE_HEADER_LEN + 4))
    if header[:2] != b"BM":
        raise ImageError("not a BMP image")

    offset = _u32(header, 10)
    info_len = _u32(header, 14)
    if info_len not in _SUPPORTED_INFO_LENGTHS:
        raise BmpUnsupportedError()

    header += _read_exact(stream, info_len - 4)

    width = int.from_bytes(header[18:22], "little", signed=True)
    height = int.from_bytes(header[22:26], "little", signed=True)
    top_down = False
    if height < 0:
        height, top_down = -height, True
    if width <= 0 or height <= 0:
        raise BmpUnsupportedError()

    planes, bpp, compression = _u16(header, 26), _u16(header, 28), _u32(header, 30)
    if planes != 1:
        raise BmpUnsupportedError()

    rle = False
    bmp565 = False

    if compression == 0:
        pass
    elif (compression == 1 and bpp == 8) or (compression == 2 and bpp == 4):
        rle = True
    elif compression == 3:
        if info_len == _INFO_HEADER_LEN:
            # Colour masks follow the plain info header.
            header += _read_exact(stream, 12)

        rmask = _u32(header, 54)
        gmask = _u32(header, 58)
        bmask = _u32(header, 62)
        amask = _u32(header, 66)

        if bpp == 16 and (rmask, gmask, bmask) == (0xF800, 0x7E0, 0x1F):
            bmp565 = True
        elif bpp == 16 and (rmask, gmask, bmask) == (0x7C00, 0x3E0, 0x1F):
            pass
        elif bpp == 32 and (rmask, gmask, bmask, amask) == (
            0xFF0000,
            0xFF00,
            0xFF,
            0xFF000000,
        ):
            pass
        else:
            raise BmpUnsupportedError()
    else:
        raise BmpUnsupportedError()

    palette: list[bytes] = []
    if bpp <= 8:
        colors = _u32(header, 46) or 1 << bpp
        if colors > 256:
            raise BmpUnsupportedError()
        raw = _read_exact(stream, colors * 4)
        # Entries are BGR with a padding byte.
        palette = [
            bytes((blue_green_red[2], blue_green_red[1], blue_green_red[0]))
            for blue_green_red in (raw[i:i + 4] for i in range(0, len(raw), 4))
        ]

    stream.seek(offset)

    if rle:
        return _decode_rle(stream, width, height, bpp, palette)

    if bpp in (1, 2, 4, 8):
        return _decode_paletted(stream, width, height, bpp, palette, top_down)
    if bpp == 16:
        return _decode_rgb16(stream, width, height, top_down, bmp565)
    if bpp == 24:
        return _decode_rgb(stream, width, height, 3, top_down, True)
    if bpp == 32:
        if info_len >= 70:
            # An empty alpha mask means there is no alpha.
            no_alpha = _u32(header, 66) == 0
        return _decode_rgb(stream, width, height, 4, top_down, no_alpha)

    raise BmpUnsupportedError()


def save_bmp(image: Image) -> bytes:
    """Encode an RGB or RGBA image as an uncompressed 24-bit BMP.

    Alpha is dropped after premultiplying it into the colour values.
    """
    bands = image.bands
    if bands not in (3, 4):
        raise ImageError("BMP can only be saved from RGB or RGBA images")

    width, height = image.width, image.height
    line_size = (width * 3 + 3) & ~3
    image_size = height * line_size
    pixel_offset = _FILE_HEADER_LEN + _INFO_HEADER_LEN

    out = bytearray(
        struct.pack(
            _HEADER_FORMAT,
            b"BM",
            pixel_offset + image_size,
            0,
            0,
            pixel_offset,
            _INFO_HEADER_LEN,
            width,
            height,
            1,
            24,
            0,
            image_size,
            _PIXELS_PER_METER,
            _PIXELS_PER_METER,
            0,
            0,
        )
    )

    stride = image.stride
    padding = bytes(line_size - width * 3)

    for y in reversed(range(height)):
        row = image.data[y * stride:(y + 1) * stride]
        line = bytearray(width * 3)
        line[0::3] = row[2::bands]
        line[1::3] = row[1::bands]
        line[2::3] = row[0::bands]

        if bands == 4:
            for index, alpha in enumerate(row[3::4]):
                if alpha < 255:
                    start = index * 3
                    line[start:start + 3] = bytes(
                        value * alpha // 255 for value in line[start:start + 3]
                    )

        out += line
        out += padding

    return bytes(out)
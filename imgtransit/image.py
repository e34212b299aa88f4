"""In-memory raster images with typed metadata fields."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class ImageError(Exception):
    """Raised when an image operation cannot be carried out."""


class ImageType(enum.Enum):
    """Image formats known to the package."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"
    ICO = "ico"
    SVG = "svg"
    HEIC = "heic"
    AVIF = "avif"
    BMP = "bmp"
    TIFF = "tiff"

    def __str__(self) -> str:
        return self.value


@dataclass
class Image:
    """An 8-bit, band-interleaved image stored row by row."""

    width: int
    height: int
    bands: int
    data: bytearray
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0 or self.bands <= 0:
            raise ImageError("image dimensions and bands must be positive")
        self.data = bytearray(self.data)
        expected = self.width * self.height * self.bands
        if len(self.data) != expected:
            raise ImageError(
                f"pixel data holds {len(self.data)} bytes, expected {expected}"
            )

    @classmethod
    def blank(cls, width: int, height: int, bands: int) -> Image:
        """Create a black image of the given size."""
        if width <= 0 or height <= 0 or bands <= 0:
            raise ImageError("image dimensions and bands must be positive")
        return cls(width, height, bands, bytearray(width * height * bands))

    @property
    def stride(self) -> int:
        """Number of bytes in one row."""
        return self.width * self.bands

    def has_alpha(self) -> bool:
        """Whether the last band is an alpha channel."""
        return self.bands in (2, 4)

    def pixel(self, x: int, y: int) -> tuple[int, ...]:
        """Return the band values of the pixel at (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside the image")
        start = y * self.stride + x * self.bands
        return tuple(self.data[start:start + self.bands])

    def swap(self, other: Image) -> None:
        """Exchange the whole contents of this image with another one."""
        for name in ("width", "height", "bands", "data", "metadata"):
            mine, theirs = getattr(self, name), getattr(other, name)
            setattr(self, name, theirs)
            setattr(other, name, mine)

    def _get_typed(self, name: str, kind: type, label: str) -> Any:
        try:
            value = self.metadata[name]
        except KeyError:
            raise ImageError(f'field "{name}" not found') from None
        if not isinstance(value, kind):
            raise ImageError(f'field "{name}" is not of type {label}')
        return value

    def set_int(self, name: str, value: int) -> None:
        self.metadata[name] = int(value)

    def get_int(self, name: str) -> int:
        return self._get_typed(name, int, "int")

    def get_int_default(self, name: str, default: int) -> int:
        if name not in self.metadata:
            return default
        return self.get_int(name)

    def set_int_slice(self, name: str, value: list[int]) -> None:
        self.metadata[name] = tuple(int(v) for v in value)

    def get_int_slice(self, name: str) -> list[int]:
        return list(self._get_typed(name, tuple, "int array"))

    def get_int_slice_default(self, name: str, default: list[int]) -> list[int]:
        if name not in self.metadata:
            return default
        return self.get_int_slice(name)

    def set_blob(self, name: str, value: bytes) -> None:
        self.metadata[name] = bytes(value)

    def get_blob(self, name: str) -> bytes:
        return self._get_typed(name, bytes, "blob")

    def flip(self) -> None:
        """Mirror the image horizontally."""
        bands, stride = self.bands, self.stride
        flipped = bytearray()
        for row_start in range(0, len(self.data), stride):
            row = self.data[row_start:row_start + stride]
            pixels = [row[i:i + bands] for i in range(0, stride, bands)]
            flipped.extend(b"".join(reversed(pixels)))
        self.data = flipped

    def crop(self, left: int, top: int, width: int, height: int) -> None:
        """Keep only the given rectangle of the image."""
        if (
            left < 0
            or top < 0
            or width <= 0
            or height <= 0
            or left + width > self.width
            or top + height > self.height
        ):
            raise ImageError("bad extract area")
        bands, stride = self.bands, self.stride
        cropped = bytearray()
        for y in range(top, top + height):
            start = y * stride + left * bands
            cropped.extend(self.data[start:start + width * bands])
        self.data = cropped
        self.width = width
        self.height = height
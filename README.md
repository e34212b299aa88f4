# imgtransit

A small library with no dependencies for working with raster images in memory. It has:

- an `Image` type that holds 8-bit, band-interleaved pixel data. Images can also carry
  named integer, integer-list and blob metadata.
- a BMP decoder and a BMP encoder. The decoder reads paletted 1/2/4/8-bit, RLE4/RLE8,
  16-bit 555/565, 24-bit, and 32-bit images with or without alpha. The encoder writes
  24-bit images.
- a minimal PNG encoder and an ICO writer that wraps it. There is also a helper that
  turns the headerless bitmap stored inside an ICO entry into a standalone BMP.
- hex colour parsing.
- a local file-system transport. It serves files under a root directory as
  HTTP-style responses and handles ETags and `If-None-Match`.

## Installation

```
pip install imgtransit
```

To run the tests:

```
pip install "imgtransit[test]"
pytest
```

## Usage

### Version

```python
from imgtransit.version import version

version()                    # "3.7.1"
```

### Colours

```python
from imgtransit.color import Color

Color.from_hex("fff")        # Color(r=255, g=255, b=255)
Color.from_hex("1a2b3c")     # Color(r=26, g=43, b=60)
```

`from_hex` accepts exactly 3 or 6 hexadecimal digits. Any other input raises
`ValueError`.

### Images

```python
from imgtransit.image import Image

img = Image.blank(4, 2, 3)   # black 4x2 image with 3 bands
img.pixel(0, 0)              # (0, 0, 0)
img.has_alpha()              # False (True for 2- or 4-band images)

img.set_int("palette-bit-depth", 4)
img.get_int("palette-bit-depth")            # 4
img.get_int_default("missing", 7)           # 7
img.set_int_slice("delays", [10, 20])
img.get_int_slice("delays")                 # [10, 20]
img.set_blob("icc", b"\x00\x01")
img.get_blob("icc")                         # b"\x00\x01"

img.flip()                   # mirror horizontally, in place
img.crop(1, 0, 2, 2)         # keep the 2x2 area at (1, 0), in place
```

`Image` is a dataclass with `width`, `height`, `bands`, `data` (a `bytearray`)
and `metadata` fields. `swap(other)` exchanges the whole contents of two images.

`ImageError` is raised in these cases:

- the dimensions are not positive;
- the pixel data has the wrong length;
- a metadata field is missing or has the wrong type;
- a crop area falls outside the image.

`pixel` raises `IndexError` for coordinates outside the image. `ImageType` lists
the format names the package knows about.

### BMP

```python
from imgtransit.bmp import load_bmp, save_bmp

with open("picture.bmp", "rb") as f:
    img = load_bmp(f.read(), True)

data = save_bmp(img)         # 24-bit bottom-up BMP bytes
```

`load_bmp` only accepts a file header followed by a 40-, 108- or 124-byte info
header. For 32-bit images, the `no_alpha` argument applies only when the header
has no alpha mask. Paletted and RLE images get a `palette-bit-depth` integer in
their metadata.

`save_bmp` takes 3- or 4-band images. Alpha is multiplied into the colour values
and then dropped.

`load_bmp` raises `BmpUnsupportedError` (a subclass of `ImageError`) for valid
BMP features it does not support. It raises `ImageError` for data that is not a
BMP or that ends too early.

### PNG and ICO

```python
from imgtransit.ico import encode_png, save_ico, fix_bmp_header

png_bytes = encode_png(img)  # 1-, 2-, 3- or 4-band images
ico_bytes = save_ico(img)    # single-entry ICO holding PNG data
bmp_bytes = fix_bmp_header(raw_icon_bitmap)
```

`save_ico` raises `ImageError` when either dimension is larger than 256.

`fix_bmp_header` prepends a BMP file header and halves the doubled height that
ICO entries store. Pass its result to `load_bmp` to decode it.

### Local file transport

```python
from imgtransit.transport_fs import FsTransport, Request

transport = FsTransport("/srv/images", etag_enabled=True)

with transport.round_trip(Request("local:///photo.png")) as response:
    response.status_code     # 200, or 404 for missing files and directories
    response.headers["ETag"] # present only when etag_enabled is set
    content = response.read()

again = transport.round_trip(
    Request("local:///photo.png", headers={"If-None-Match": response.headers["ETag"]})
)
again.status_code            # 304
```

Request paths are normalised so that they cannot leave the root directory.
`build_etag(path, stat_result)` computes the ETag from the path, the file size
and the modification time in nanoseconds.

## What is not included

- No decoders for JPEG, PNG, GIF, WebP, SVG, HEIC/AVIF or TIFF.
- No reading of ICO files beyond `fix_bmp_header`.
- No resizing, colour management or other processing beyond flipping and cropping.
- No transports other than the local file system.
- No HTTP server and no command-line tool.
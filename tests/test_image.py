import pytest

from imgtransit.image import Image, ImageError, ImageType


def _gradient(width, height, bands):
    data = bytearray((i % 256) for i in range(width * height * bands))
    return Image(width, height, bands, data)


def test_blank_is_black():
    img = Image.blank(4, 3, 3)
    assert (img.width, img.height, img.bands) == (4, 3, 3)
    assert all(v == 0 for v in img.data)
    assert len(img.data) == 4 * 3 * 3


@pytest.mark.parametrize("dims", [(0, 1, 3), (1, 0, 3), (1, 1, 0), (-1, 2, 3)])
def test_blank_rejects_bad_dimensions(dims):
    with pytest.raises(ImageError):
        Image.blank(*dims)


def test_constructor_checks_data_length():
    with pytest.raises(ImageError):
        Image(2, 2, 3, bytearray(5))


@pytest.mark.parametrize("bands,expected", [(1, False), (2, True), (3, False), (4, True)])
def test_has_alpha(bands, expected):
    assert Image.blank(1, 1, bands).has_alpha() is expected


def test_pixel_reads_interleaved_bands():
    img = Image(2, 1, 3, bytearray([1, 2, 3, 4, 5, 6]))
    assert img.pixel(0, 0) == (1, 2, 3)
    assert img.pixel(1, 0) == (4, 5, 6)


def test_pixel_out_of_range():
    img = Image.blank(2, 2, 3)
    with pytest.raises(IndexError):
        img.pixel(2, 0)
    with pytest.raises(IndexError):
        img.pixel(0, -1)


def test_swap_exchanges_contents():
    a = Image.blank(2, 2, 3)
    b = _gradient(3, 1, 4)
    b.set_int("k", 7)
    b_data = bytes(b.data)
    a.swap(b)
    assert (a.width, a.height, a.bands) == (3, 1, 4)
    assert bytes(a.data) == b_data
    assert a.get_int("k") == 7
    assert (b.width, b.height, b.bands) == (2, 2, 3)
    assert b.get_int_default("k", -1) == -1


def test_int_roundtrip_and_default():
    img = Image.blank(1, 1, 3)
    img.set_int("palette-bit-depth", 4)
    assert img.get_int("palette-bit-depth") == 4
    assert img.get_int_default("palette-bit-depth", 8) == 4
    assert img.get_int_default("missing", 8) == 8


def test_get_int_missing_raises():
    with pytest.raises(ImageError):
        Image.blank(1, 1, 3).get_int("missing")


def test_get_int_wrong_type_raises():
    img = Image.blank(1, 1, 3)
    img.set_blob("icc", b"abc")
    with pytest.raises(ImageError):
        img.get_int("icc")
    with pytest.raises(ImageError):
        img.get_int_default("icc", 1)


def test_int_slice_roundtrip():
    img = Image.blank(1, 1, 3)
    img.set_int_slice("delay", [10, 20, 30])
    assert img.get_int_slice("delay") == [10, 20, 30]
    assert img.get_int_slice_default("delay", [1]) == [10, 20, 30]
    assert img.get_int_slice_default("missing", [1]) == [1]


def test_int_slice_is_copied():
    img = Image.blank(1, 1, 3)
    values = [1, 2]
    img.set_int_slice("delay", values)
    values.append(3)
    assert img.get_int_slice("delay") == [1, 2]


def test_get_int_slice_missing_raises():
    with pytest.raises(ImageError):
        Image.blank(1, 1, 3).get_int_slice("delay")


def test_blob_roundtrip():
    img = Image.blank(1, 1, 3)
    img.set_blob("exif-data", bytearray(b"\x01\x02"))
    assert img.get_blob("exif-data") == b"\x01\x02"


def test_get_blob_missing_raises():
    with pytest.raises(ImageError):
        Image.blank(1, 1, 3).get_blob("exif-data")


def test_flip_mirrors_rows():
    img = Image(3, 1, 1, bytearray([1, 2, 3]))
    img.flip()
    assert bytes(img.data) == bytes([3, 2, 1])


def test_flip_twice_is_identity():
    img = _gradient(5, 4, 3)
    original = bytes(img.data)
    img.flip()
    assert bytes(img.data) != original
    img.flip()
    assert bytes(img.data) == original


def test_flip_keeps_pixel_bands_together():
    img = _gradient(4, 2, 3)
    before = {(x, y): img.pixel(x, y) for x in range(4) for y in range(2)}
    img.flip()
    for (x, y), value in before.items():
        assert img.pixel(3 - x, y) == value


def test_crop_extracts_region():
    img = _gradient(5, 4, 3)
    before = {(x, y): img.pixel(x, y) for x in range(5) for y in range(4)}
    img.crop(1, 2, 3, 2)
    assert (img.width, img.height) == (3, 2)
    assert len(img.data) == 3 * 2 * 3
    for x in range(3):
        for y in range(2):
            assert img.pixel(x, y) == before[(x + 1, y + 2)]


def test_crop_keeps_metadata():
    img = _gradient(4, 4, 3)
    img.set_int("k", 1)
    img.crop(0, 0, 2, 2)
    assert img.get_int("k") == 1


@pytest.mark.parametrize(
    "area", [(-1, 0, 1, 1), (0, -1, 1, 1), (0, 0, 0, 1), (0, 0, 1, 0), (3, 0, 2, 1), (0, 3, 1, 2)]
)
def test_crop_bad_area_raises(area):
    img = Image.blank(4, 4, 3)
    with pytest.raises(ImageError, match="bad extract area"):
        img.crop(*area)
    assert (img.width, img.height) == (4, 4)


def test_image_type_str():
    assert str(ImageType.ICO) == "ico"
    assert ImageType("bmp") is ImageType.BMP
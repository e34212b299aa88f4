from imgtransit.version import version


def test_version_value():
    assert version() == "3.7.1"


def test_version_is_dotted_numbers():
    parts = version().split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)
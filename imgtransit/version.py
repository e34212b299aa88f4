"""Package version information."""

_VERSION = "3.7.1"


def version() -> str:
    """Return the version string of the package."""
    return _VERSION
"""In-memory images, BMP reading and writing, PNG and ICO writing, and a local file-system transport."""

__version__ = "3.7.1"
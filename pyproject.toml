[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imgtransit"
version = "3.7.1"
description = "Pure-Python BMP reader and writer, ICO writer, in-memory image model and local file-system image transport with ETag support"
requires-python = ">=3.10"
dependencies = []
keywords = ["image", "bmp", "ico", "png", "etag", "transport", "codec"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["imgtransit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

"""Serving files from a local directory as HTTP-style responses."""

from __future__ import annotations

import base64
import hashlib
import io
import os
import posixpath
from dataclasses import dataclass, field
from http import HTTPStatus
from pathlib import Path
from typing import BinaryIO, Mapping, Protocol
from urllib.parse import unquote, urlsplit


class _FileStat(Protocol):
    st_size: int
    st_mtime_ns: int


@dataclass
class Request:
    """A request for the resource at ``url``."""

    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    method: str = "GET"

    @property
    def path(self) -> str:
        """The unescaped path component of the URL."""
        return unquote(urlsplit(self.url).path)

    def header(self, name: str) -> str:
        """Return a header value looked up case-insensitively, or ``""``."""
        wanted = name.lower()
        return next(
            (value for key, value in self.headers.items() if key.lower() == wanted),
            "",
        )


@dataclass
class Response:
    """The outcome of a request: a status, headers and an optional body."""

    status_code: int
    request: Request
    headers: dict[str, str] = field(default_factory=dict)
    content_length: int = 0
    body: BinaryIO | None = None
    close: bool = False
    proto: str = "HTTP/1.0"

    @property
    def status(self) -> str:
        return f"{self.status_code} {HTTPStatus(self.status_code).phrase}"

    def read(self) -> bytes:
        """Read the whole body, or return empty bytes if there is none."""
        return self.body.read() if self.body is not None else b""

    def __enter__(self) -> Response:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self.body is not None:
            self.body.close()


def build_etag(path: str, stat_result: _FileStat) -> str:
    """Build a quoted entity tag from a path, file size and modification time."""
    tag = f"{path}__{stat_result.st_size}__{stat_result.st_mtime_ns}"
    digest = hashlib.md5(tag.encode()).digest()
    encoded = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return f'"{encoded}"'


def _not_found(request: Request, message: str) -> Response:
    body = message.encode()
    return Response(
        status_code=HTTPStatus.NOT_FOUND,
        request=request,
        content_length=len(body),
        body=io.BytesIO(body),
    )


class FsTransport:
    """Answers requests with files found under a root directory."""

    def __init__(self, root: str | os.PathLike[str], etag_enabled: bool = False) -> None:
        self.root = Path(root)
        self.etag_enabled = etag_enabled

    def _resolve(self, name: str) -> Path:
        if "\\" in name or "\x00" in name:
            raise ValueError("invalid character in file path")
        cleaned = posixpath.normpath("/" + name).lstrip("/")
        return self.root / cleaned if cleaned not in ("", ".") else self.root

    def round_trip(self, request: Request) -> Response:
        """Serve the file named by the request path."""
        path = request.path
        target = self._resolve(path)

        try:
            info = target.stat()
        except FileNotFoundError:
            return _not_found(request, f"{path} doesn't exist")

        if target.is_dir():
            return _not_found(request, f"{path} is directory")

        headers: dict[str, str] = {}

        if self.etag_enabled:
            etag = build_etag(path, info)
            headers["ETag"] = etag
            if etag == request.header("If-None-Match"):
                return Response(
                    status_code=HTTPStatus.NOT_MODIFIED,
                    request=request,
                    headers=headers,
                )

        try:
            body = target.open("rb")
        except FileNotFoundError:
            return _not_found(request, f"{path} doesn't exist")

        return Response(
            status_code=HTTPStatus.OK,
            request=request,
            headers=headers,
            content_length=info.st_size,
            body=body,
            close=True,
        )
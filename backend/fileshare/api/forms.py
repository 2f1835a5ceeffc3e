"""Streaming reader for the file part of a ``multipart/form-data`` upload.

The body is fed to python-multipart's parser as it arrives, so the file name
is known once the part headers are in, before any file bytes are read.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import Request

from fileshare.core.errors import BadRequestError

logger = logging.getLogger(__name__)


class _FilePartParser:
    def __init__(self, boundary: bytes, field_name: str):
        self.field_name = field_name.encode()
        self.filename: str | None = None
        self.pending: list[bytes] = []
        self.done = False
        self.ended = False
        self._in_target = False
        self._header_field = b""
        self._header_value = b""
        self._headers: dict[bytes, bytes] = {}
        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_end": self._on_end,
            },
        )

    def feed(self, data: bytes) -> None:
        try:
            self._parser.write(data)
        except MultipartParseError as exc:
            logger.warning("Unparseable multipart body: %s", exc)
            raise BadRequestError("Bad request") from exc

    def _on_part_begin(self) -> None:
        self._headers = {}

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        _, options = parse_options_header(self._headers.get(b"content-disposition", b""))
        if self.filename is None and options.get(b"name") == self.field_name and b"filename" in options:
            self.filename = options[b"filename"].decode("utf-8", errors="replace")
            self._in_target = True

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._in_target:
            self.pending.append(data[start:end])

    def _on_part_end(self) -> None:
        if self._in_target:
            self._in_target = False
            self.done = True

    def _on_end(self) -> None:
        self.ended = True


async def read_form_file(request: Request, field_name: str = "file") -> tuple[str, AsyncIterator[bytes]]:
    """Return the uploaded file name and an iterator over the file's bytes.

    Only the body up to the end of the file part's headers is consumed here;
    the rest is read as the returned iterator is drained.
    """
    content_type, params = parse_options_header(request.headers.get("content-type", ""))
    boundary = params.get(b"boundary")
    if content_type != b"multipart/form-data" or not boundary:
        raise BadRequestError("Bad request")

    parser = _FilePartParser(boundary, field_name)
    body = request.stream().__aiter__()

    async def next_chunk() -> bytes:
        try:
            return await body.__anext__()
        except StopAsyncIteration:
            raise BadRequestError("Bad request") from None

    while parser.filename is None:
        if parser.ended:
            raise BadRequestError("Bad request")
        parser.feed(await next_chunk())

    async def chunks() -> AsyncIterator[bytes]:
        while True:
            while parser.pending:
                yield parser.pending.pop(0)
            if parser.done:
                return
            parser.feed(await next_chunk())

    return parser.filename, chunks()

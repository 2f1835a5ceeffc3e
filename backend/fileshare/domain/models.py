from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from typing import BinaryIO, Literal
from urllib.parse import quote

ConflictPolicy = Literal["reject", "overwrite"]

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(name: str) -> str:
    content_type, _ = mimetypes.guess_type(name, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


@dataclass(frozen=True)
class StoredFile:
    name: str
    size: int
    content_type: str

    @property
    def url(self) -> str:
        return f"/files/{quote(self.name)}"


@dataclass
class OpenedFile:
    """A stored file plus the handle its bytes are read from."""

    stored: StoredFile
    handle: BinaryIO

    def close(self) -> None:
        self.handle.close()

"""Validation of client-supplied file names.

Names are rejected, never rewritten: what the client asked for is either
stored under exactly that name or refused.
"""

from __future__ import annotations

import re

from fileshare.core.errors import InvalidFileNameError, PathTraversalError

MAX_NAME_BYTES = 255

_SEPARATORS = ("/", "\\")
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_name(name: str | None) -> str:
    if not name:
        raise InvalidFileNameError("File name is required")

    if any(sep in name for sep in _SEPARATORS) or name in {".", ".."} or _DRIVE_PREFIX.match(name):
        raise PathTraversalError(f"File name must not address a path: {name!r}")

    if _CONTROL_CHARS.search(name):
        raise InvalidFileNameError("File name contains control characters")

    if name.startswith("."):
        raise InvalidFileNameError(f"Hidden file names are not allowed: {name!r}")

    if len(name.encode("utf-8", errors="surrogatepass")) > MAX_NAME_BYTES:
        raise InvalidFileNameError(f"File name is longer than {MAX_NAME_BYTES} bytes")

    return name


def extension_of(name: str) -> str:
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()

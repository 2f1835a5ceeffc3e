"""Identifiers for staged uploads and request logging, using ULID."""

from ulid import ULID


def new_staging_id() -> str:
    """Return a sortable unique name stem for a staged upload."""
    return str(ULID())


def new_request_id() -> str:
    """Return a short id to correlate the log lines of one request."""
    return str(ULID())[-10:].lower()

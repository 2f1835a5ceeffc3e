import asyncio
from pathlib import Path

import pytest
from starlette.requests import ClientDisconnect

from fileshare.application.services import FileService
from fileshare.core.errors import (
    FileConflictError,
    PathTraversalError,
    PayloadTooLargeError,
    UnsupportedFileTypeError,
)
from fileshare.infra.storage.local import STAGING_DIRNAME, LocalFileStorage


def _service(base: Path, **kwargs) -> FileService:
    kwargs.setdefault("max_upload_bytes", 1024)
    return FileService(storage=LocalFileStorage(base), **kwargs)


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


def _leftovers(base: Path) -> list[Path]:
    return list((base / STAGING_DIRNAME).iterdir())


def test_upload_streams_chunks_into_one_file(tmp_path: Path):
    service = _service(tmp_path)

    stored = asyncio.run(service.upload("notes.txt", _chunks(b"hel", b"", b"lo")))

    assert stored.size == 5
    assert (tmp_path / "notes.txt").read_bytes() == b"hello"
    assert [item.name for item in service.list_files()] == ["notes.txt"]


def test_disconnect_mid_upload_leaves_nothing_behind(tmp_path: Path):
    service = _service(tmp_path)

    async def broken():
        yield b"partial"
        raise ClientDisconnect()

    with pytest.raises(ClientDisconnect):
        asyncio.run(service.upload("notes.txt", broken()))

    assert not (tmp_path / "notes.txt").exists()
    assert _leftovers(tmp_path) == []


def test_body_over_limit_is_aborted(tmp_path: Path):
    service = _service(tmp_path, max_upload_bytes=8)

    with pytest.raises(PayloadTooLargeError):
        asyncio.run(service.upload("notes.txt", _chunks(b"12345", b"67890")))

    assert not (tmp_path / "notes.txt").exists()
    assert _leftovers(tmp_path) == []


def test_declared_size_over_limit_is_refused_before_reading(tmp_path: Path):
    service = _service(tmp_path, max_upload_bytes=8)

    with pytest.raises(PayloadTooLargeError):
        service.check_upload("notes.txt", declared_size=9)


def test_extension_allow_list_is_case_insensitive(tmp_path: Path):
    service = _service(tmp_path, allowed_extensions=(".txt", "PNG"))

    assert service.check_upload("NOTES.TXT") == "NOTES.TXT"
    assert service.check_upload("photo.png") == "photo.png"
    with pytest.raises(UnsupportedFileTypeError):
        service.check_upload("run.exe")
    with pytest.raises(UnsupportedFileTypeError):
        service.check_upload("README")


def test_reject_policy_refuses_every_repeat(tmp_path: Path):
    service = _service(tmp_path)
    asyncio.run(service.upload("notes.txt", _chunks(b"first")))

    for _ in range(3):
        with pytest.raises(FileConflictError):
            asyncio.run(service.upload("notes.txt", _chunks(b"again")))

    assert (tmp_path / "notes.txt").read_bytes() == b"first"
    assert _leftovers(tmp_path) == []


def test_overwrite_policy_keeps_latest_upload(tmp_path: Path):
    service = _service(tmp_path, conflict_policy="overwrite")

    for body in (b"one", b"two", b"three"):
        asyncio.run(service.upload("notes.txt", _chunks(body)))
        assert (tmp_path / "notes.txt").read_bytes() == body


def test_open_sanitizes_names(tmp_path: Path):
    service = _service(tmp_path)

    with pytest.raises(PathTraversalError):
        service.open("../secret.txt")

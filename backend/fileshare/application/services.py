from __future__ import annotations

import logging
from typing import AsyncIterable

from fastapi.concurrency import run_in_threadpool

from fileshare.core.errors import (
    FileConflictError,
    PayloadTooLargeError,
    UnsupportedFileTypeError,
)
from fileshare.domain.models import ConflictPolicy, OpenedFile, StoredFile
from fileshare.infra.ports.storage import StoragePort
from fileshare.utils.names import extension_of, sanitize_name

logger = logging.getLogger(__name__)


class FileService:
    def __init__(
        self,
        *,
        storage: StoragePort,
        max_upload_bytes: int,
        allowed_extensions: tuple[str, ...] = (),
        conflict_policy: ConflictPolicy = "reject",
    ):
        self.storage = storage
        self.max_upload_bytes = max_upload_bytes
        self.allowed_extensions = tuple(ext.lower().lstrip(".") for ext in allowed_extensions)
        self.conflict_policy = conflict_policy

    @property
    def overwrite(self) -> bool:
        return self.conflict_policy == "overwrite"

    def check_upload(self, name: str | None, declared_size: int | None = None) -> str:
        """Validate an upload before any of its body is read; return the stored name."""
        safe_name = sanitize_name(name)

        if self.allowed_extensions and extension_of(safe_name) not in self.allowed_extensions:
            allowed = ", ".join(self.allowed_extensions)
            raise UnsupportedFileTypeError(f"Unsupported file type. Allowed extensions: {allowed}")

        if declared_size is not None and declared_size > self.max_upload_bytes:
            raise PayloadTooLargeError(f"File exceeds the {self.max_upload_bytes} byte limit")

        if not self.overwrite and self.storage.exists(safe_name):
            raise FileConflictError(f"File already exists: {safe_name!r}")

        return safe_name

    async def upload(
        self,
        name: str | None,
        chunks: AsyncIterable[bytes],
        *,
        declared_size: int | None = None,
    ) -> StoredFile:
        safe_name = await run_in_threadpool(self.check_upload, name, declared_size)
        staged = await run_in_threadpool(self.storage.begin, safe_name)
        try:
            async for chunk in chunks:
                if not chunk:
                    continue
                if staged.size + len(chunk) > self.max_upload_bytes:
                    raise PayloadTooLargeError(f"File exceeds the {self.max_upload_bytes} byte limit")
                await run_in_threadpool(staged.write, chunk)
            return await run_in_threadpool(self.storage.commit, staged, overwrite=self.overwrite)
        finally:
            # Runs on disconnect and cancellation too; a committed upload makes this a no-op.
            staged.discard()

    def open(self, name: str | None) -> OpenedFile:
        return self.storage.open(sanitize_name(name))

    def list_files(self) -> list[StoredFile]:
        return self.storage.list_files()

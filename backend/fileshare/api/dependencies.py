from __future__ import annotations

from functools import lru_cache

from fileshare.application.services import FileService
from fileshare.core.config import get_settings
from fileshare.infra.ports.storage import StoragePort
from fileshare.infra.storage.local import LocalFileStorage


@lru_cache(maxsize=1)
def get_storage() -> StoragePort:
    settings = get_settings()
    return LocalFileStorage(base_dir=settings.storage_dir)


def get_file_service() -> FileService:
    settings = get_settings()
    return FileService(
        storage=get_storage(),
        max_upload_bytes=settings.max_upload_bytes,
        allowed_extensions=settings.allowed_extensions,
        conflict_policy=settings.conflict_policy,  # type: ignore[arg-type]
    )


async def provide_file_service() -> FileService:
    return get_file_service()

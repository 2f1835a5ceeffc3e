from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO

from fileshare.core.errors import (
    FileConflictError,
    PathTraversalError,
    StorageError,
    StoredFileNotFoundError,
)
from fileshare.domain.models import OpenedFile, StoredFile, guess_content_type
from fileshare.infra.ports.storage import StagedUpload, StoragePort
from fileshare.utils.ids import new_staging_id

logger = logging.getLogger(__name__)

STAGING_DIRNAME = ".incoming"


class LocalStagedUpload(StagedUpload):
    def __init__(self, name: str, path: Path):
        self.name = name
        self.path = path
        self.size = 0
        self._handle: BinaryIO | None = open(path, "xb")

    def write(self, chunk: bytes) -> None:
        if self._handle is None:
            raise StorageError(f"Upload of {self.name!r} is already closed")
        try:
            self._handle.write(chunk)
        except OSError as exc:
            raise StorageError(f"Failed to write {self.name!r}: {exc.strerror or exc}") from exc
        self.size += len(chunk)

    def finish(self) -> None:
        """Flush the staged bytes to disk and close the handle."""
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            handle.flush()
            os.fsync(handle.fileno())
        finally:
            handle.close()

    def discard(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.close()
        try:
            self.path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove staged upload %s", self.path, exc_info=True)


class LocalFileStorage(StoragePort):
    """Flat directory of stored files plus a hidden staging area.

    Uploads are written under ``.incoming/`` on the same filesystem and then
    linked or renamed into place, so a reader only ever opens a complete file.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self.staging_dir = self.base_dir / STAGING_DIRNAME
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.staging_dir.mkdir(exist_ok=True)
        self._resolved_base = self.base_dir.resolve()
        self._purge_staging()

    def _purge_staging(self) -> None:
        removed = 0
        for leftover in self.staging_dir.iterdir():
            if leftover.is_file():
                leftover.unlink(missing_ok=True)
                removed += 1
        if removed:
            logger.info("Removed %d unfinished upload(s) from %s", removed, self.staging_dir)

    def _path_for(self, name: str) -> Path:
        path = self.base_dir / name
        # A symlink or odd name must not lead outside the storage directory.
        if path.resolve().parent != self._resolved_base:
            raise PathTraversalError(f"File name must not address a path: {name!r}")
        return path

    def begin(self, name: str) -> LocalStagedUpload:
        self._path_for(name)
        staged_path = self.staging_dir / f"{new_staging_id()}.part"
        try:
            return LocalStagedUpload(name, staged_path)
        except OSError as exc:
            raise StorageError(f"Failed to stage {name!r}: {exc.strerror or exc}") from exc

    def commit(self, staged: StagedUpload, *, overwrite: bool) -> StoredFile:
        if not isinstance(staged, LocalStagedUpload):
            raise TypeError("LocalFileStorage can only commit its own staged uploads")

        target = self._path_for(staged.name)
        try:
            staged.finish()
            if overwrite:
                os.replace(staged.path, target)
            else:
                # link() refuses an existing target, so two racing uploads cannot both win.
                os.link(staged.path, target)
        except FileExistsError as exc:
            raise FileConflictError(f"File already exists: {staged.name!r}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to store {staged.name!r}: {exc.strerror or exc}") from exc
        finally:
            staged.discard()

        logger.info("Stored %s (%d bytes)", staged.name, staged.size)
        return StoredFile(name=staged.name, size=staged.size, content_type=guess_content_type(staged.name))

    def exists(self, name: str) -> bool:
        return self._path_for(name).is_file()

    def open(self, name: str) -> OpenedFile:
        path = self._path_for(name)
        try:
            handle = open(path, "rb")
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise StoredFileNotFoundError(f"File not found: {name!r}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to open {name!r}: {exc.strerror or exc}") from exc

        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            handle.close()
            raise StorageError(f"Failed to read {name!r}: {exc.strerror or exc}") from exc

        stored = StoredFile(name=name, size=size, content_type=guess_content_type(name))
        return OpenedFile(stored=stored, handle=handle)

    def list_files(self) -> list[StoredFile]:
        try:
            with os.scandir(self.base_dir) as scanned:
                entries = sorted(scanned, key=lambda entry: entry.name)
        except OSError as exc:
            raise StorageError(f"Failed to list {self.base_dir}: {exc.strerror or exc}") from exc

        files: list[StoredFile] = []
        for entry in entries:
            if entry.name.startswith(".") or not entry.is_file(follow_symlinks=False):
                continue
            files.append(
                StoredFile(
                    name=entry.name,
                    size=entry.stat(follow_symlinks=False).st_size,
                    content_type=guess_content_type(entry.name),
                )
            )
        return files

from __future__ import annotations

from abc import ABC, abstractmethod

from fileshare.domain.models import OpenedFile, StoredFile


class StagedUpload(ABC):
    """Bytes of an upload in flight, invisible to readers until committed."""

    name: str
    size: int

    @abstractmethod
    def write(self, chunk: bytes) -> None:
        """Append a chunk to the staged bytes."""

    @abstractmethod
    def discard(self) -> None:
        """Drop the staged bytes. Safe to call after commit or twice."""


class StoragePort(ABC):
    @abstractmethod
    def begin(self, name: str) -> StagedUpload:
        """Open a staging area for an upload that will be stored as ``name``."""

    @abstractmethod
    def commit(self, staged: StagedUpload, *, overwrite: bool) -> StoredFile:
        """Atomically make the staged bytes visible under their name."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Whether ``name`` currently resolves to a stored file."""

    @abstractmethod
    def open(self, name: str) -> OpenedFile:
        """Open a stored file for reading."""

    @abstractmethod
    def list_files(self) -> list[StoredFile]:
        """Return every stored file, sorted by name."""

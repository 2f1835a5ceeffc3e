from pydantic import BaseModel

from fileshare.domain.models import StoredFile


class StoredFileResponse(BaseModel):
    name: str
    url: str
    size: int
    contentType: str

    @classmethod
    def from_stored(cls, stored: StoredFile) -> "StoredFileResponse":
        return cls(name=stored.name, url=stored.url, size=stored.size, contentType=stored.content_type)


class FileListResponse(BaseModel):
    files: list[StoredFileResponse]

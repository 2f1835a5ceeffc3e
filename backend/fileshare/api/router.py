from __future__ import annotations

from typing import Iterator
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse, StreamingResponse
from starlette.background import BackgroundTask

from fileshare.api.dependencies import provide_file_service
from fileshare.api.forms import read_form_file
from fileshare.api.schemas.file import FileListResponse, StoredFileResponse
from fileshare.application.services import FileService
from fileshare.core.errors import PayloadTooLargeError
from fileshare.domain.models import OpenedFile, StoredFile

router = APIRouter(tags=["files"])

CHUNK_SIZE = 64 * 1024
# Room for the multipart boundaries and part headers around the file bytes.
FORM_OVERHEAD_BYTES = 16 * 1024


def _declared_length(request: Request) -> int | None:
    raw = request.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _created(stored: StoredFile) -> JSONResponse:
    body = StoredFileResponse.from_stored(stored)
    return JSONResponse(status_code=201, content=body.model_dump(), headers={"Location": stored.url})


def _prefers_html(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    return "text/html" in accept and "application/json" not in accept


def _iter_opened(opened: OpenedFile) -> Iterator[bytes]:
    try:
        while True:
            chunk = opened.handle.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        opened.close()


@router.get("/files", response_model=FileListResponse)
async def list_files(service: FileService = Depends(provide_file_service)):
    files = await run_in_threadpool(service.list_files)
    return FileListResponse(files=[StoredFileResponse.from_stored(item) for item in files])


@router.put("/files/{name:path}", status_code=201, response_model=StoredFileResponse)
async def put_file(name: str, request: Request, service: FileService = Depends(provide_file_service)):
    stored = await service.upload(name, request.stream(), declared_size=_declared_length(request))
    return _created(stored)


@router.post("/upload", status_code=201, response_model=StoredFileResponse)
async def upload_form(request: Request, service: FileService = Depends(provide_file_service)):
    declared = _declared_length(request)
    if declared is not None and declared > service.max_upload_bytes + FORM_OVERHEAD_BYTES:
        raise PayloadTooLargeError(f"File exceeds the {service.max_upload_bytes} byte limit")

    filename, chunks = await read_form_file(request)
    stored = await service.upload(filename, chunks)
    if _prefers_html(request):
        # Browser form submissions go back to the file list.
        return RedirectResponse("/", status_code=303)
    return _created(stored)


@router.get("/files/{name:path}")
async def get_file(name: str, service: FileService = Depends(provide_file_service)):
    opened = await run_in_threadpool(service.open, name)
    stored = opened.stored
    headers = {
        "Content-Length": str(stored.size),
        "Content-Disposition": f"inline; filename*=utf-8''{quote(stored.name)}",
    }
    return StreamingResponse(
        _iter_opened(opened),
        media_type=stored.content_type,
        headers=headers,
        background=BackgroundTask(opened.close),
    )

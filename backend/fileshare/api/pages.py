from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse

from fileshare.api.dependencies import provide_file_service
from fileshare.application.services import FileService
from fileshare.domain.models import StoredFile

router = APIRouter(tags=["pages"])

_INDEX_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Uploaded files</title></head>
<body>
<h1>Uploaded files</h1>
<ul>
{files}
</ul>
<h2>Upload a file</h2>
<form action="/upload" method="post" enctype="multipart/form-data">
<input type="file" name="file" required>
<button type="submit">Upload</button>
</form>
</body>
</html>
"""


def render_index(files: list[StoredFile]) -> str:
    if not files:
        items = "<li><em>No files uploaded yet.</em></li>"
    else:
        items = "\n".join(
            f'<li><a href="{escape(item.url)}">{escape(item.name)}</a> ({item.size} bytes)</li>' for item in files
        )
    return _INDEX_TEMPLATE.format(files=items)


@router.get("/", response_class=HTMLResponse)
async def index(service: FileService = Depends(provide_file_service)):
    files = await run_in_threadpool(service.list_files)
    return HTMLResponse(render_index(files))

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import ClientDisconnect

from fileshare import __version__
from fileshare.api.pages import router as pages_router
from fileshare.api.router import router as files_router
from fileshare.core.config import get_settings
from fileshare.core.errors import FileShareError
from fileshare.core.logging import configure_logging
from fileshare.utils.ids import new_request_id

logger = logging.getLogger("fileshare.http")

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title=settings.app_name, version=__version__)

app.include_router(pages_router)
app.include_router(files_router)

settings.storage_dir.mkdir(parents=True, exist_ok=True)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = new_request_id()
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "[%s] %s %s -> %d (%.1f ms)",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


@app.exception_handler(FileShareError)
async def handle_fileshare_error(request: Request, exc: FileShareError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("%s %s malformed request: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "Bad request"})


@app.exception_handler(ClientDisconnect)
async def handle_client_disconnect(request: Request, exc: ClientDisconnect) -> JSONResponse:
    logger.info("%s %s client disconnected, upload discarded", request.method, request.url.path)
    return JSONResponse(status_code=400, content={"detail": "Client disconnected"})


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    return {"ok": "true"}

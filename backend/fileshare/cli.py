from __future__ import annotations

import argparse
import logging
import os
import socket
from collections.abc import Sequence

import uvicorn

from fileshare.core.config import get_settings
from fileshare.core.logging import configure_logging

logger = logging.getLogger(__name__)


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket, exiting the process when the address is taken."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        logger.error("Could not bind to %s:%d: %s", host, port, exc.strerror or exc)
        raise SystemExit(1) from exc
    sock.set_inheritable(True)
    return sock


def _apply_overrides(args: argparse.Namespace) -> None:
    overrides = {
        "FILESHARE_HOST": args.host,
        "FILESHARE_PORT": None if args.port is None else str(args.port),
        "FILESHARE_STORAGE_DIR": None if args.storage_dir is None else str(args.storage_dir),
        "FILESHARE_LOG_LEVEL": args.log_level,
    }
    for key, value in overrides.items():
        if value is not None:
            os.environ[key] = value
    get_settings.cache_clear()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fileshare", description="Serve file uploads and downloads over HTTP.")
    parser.add_argument("--host", default=None, help="Address to bind (default: FILESHARE_HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (default: FILESHARE_PORT or 7878)")
    parser.add_argument("--storage-dir", default=None, help="Directory uploaded files are stored in")
    parser.add_argument("--log-level", default=None, help="Log level, e.g. INFO or DEBUG")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _apply_overrides(args)
    settings = get_settings()
    configure_logging(settings.log_level)

    sock = bind_socket(settings.host, settings.port)
    try:
        from fileshare.main import app

        logger.info("Serving %s on http://%s:%d", settings.storage_dir, settings.host, settings.port)
        config = uvicorn.Config(app, log_config=None, log_level=settings.log_level.lower())
        uvicorn.Server(config).run(sockets=[sock])
    finally:
        sock.close()
        logger.info("Listener on port %d closed", settings.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

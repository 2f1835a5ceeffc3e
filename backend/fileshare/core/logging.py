from __future__ import annotations

import logging

LOG_FORMAT = "%(levelname)s [%(asctime)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class _ConsoleHandler(logging.StreamHandler):
    """The stream handler this package installs on the root logger."""


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install one stream handler on the root logger.

    Calling it again only adjusts the level, so importing the app from tests or
    from the command line never stacks duplicate handlers.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not any(isinstance(handler, _ConsoleHandler) for handler in root.handlers):
        handler = _ConsoleHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)

"""Shared logging setup for the journal library and its tools.

One named handler is attached to the root logger; repeated calls only
adjust its level. Timestamps are always UTC so import logs line up with the
UTC trade timestamps the parsers produce.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
CONSOLE_HANDLER = "tradejournal-console"
FILE_HANDLER = "tradejournal-file"


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).strip().upper(), logging.INFO)


def _formatter() -> logging.Formatter:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def _named(root: logging.Logger, name: str) -> logging.Handler | None:
    for handler in root.handlers:
        if getattr(handler, "name", "") == name:
            return handler
    return None


def setup_logging(level: str | int | None = None, log_file: str | Path | None = None) -> logging.Logger:
    """Attach the console handler once and set the level.

    ``log_file`` additionally appends every record to that file (an import
    audit trail); it is attached at most once per process.
    """
    root = logging.getLogger()
    resolved = _resolve_level(level)

    console = _named(root, CONSOLE_HANDLER)
    if console is None:
        console = logging.StreamHandler()
        console.name = CONSOLE_HANDLER
        console.setFormatter(_formatter())
        root.addHandler(console)
    console.setLevel(resolved)

    if log_file is not None and _named(root, FILE_HANDLER) is None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.name = FILE_HANDLER
        file_handler.setFormatter(_formatter())
        root.addHandler(file_handler)

    root.setLevel(resolved)
    return root


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)

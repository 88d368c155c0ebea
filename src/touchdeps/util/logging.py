"""Logging setup utilities."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path


class _StderrHandler(logging.StreamHandler):
    """Stream handler that writes to whatever ``sys.stderr`` currently is."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def configure_logging(*, log_path: Path | None = None, level: int = logging.INFO) -> logging.Logger:
    """Configure the ``touchdeps`` logger.

    Records go to stderr so stdout stays reserved for command output. Calling
    this repeatedly does not duplicate handlers.
    """

    logger = logging.getLogger("touchdeps")
    logger.setLevel(level)

    has_stream = any(isinstance(h, _StderrHandler) for h in logger.handlers)
    existing_files = {getattr(h, "baseFilename", None) for h in logger.handlers}

    formatter = logging.Formatter(fmt="%(asctime)s %(levelname)s %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    if not has_stream:
        stream_handler = _StderrHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if log_path and os.path.abspath(log_path) not in existing_files:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging"]

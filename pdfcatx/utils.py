"""Utility helpers shared across :mod:`pdfcatx`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024


def ensure_path(path: PathLike) -> Path:
    """Return a :class:`~pathlib.Path` instance for *path*.

    User-home references are expanded and relative paths are resolved against
    the current working directory so that comparisons between inputs and the
    output are meaningful.
    """

    resolved = Path(path).expanduser()
    try:
        return resolved.resolve(strict=False)
    except (OSError, RuntimeError):  # pragma: no cover - symlink loops
        return resolved


def format_file_size(size: int) -> str:
    """Format *size* bytes as a human-readable string."""

    if size >= _GB:
        return f"{size / _GB:.2f} GB"
    if size >= _MB:
        return f"{size / _MB:.2f} MB"
    if size >= _KB:
        return f"{size / _KB:.2f} KB"
    return f"{size} bytes"


def get_logger(
    name: str,
    level: int | None = None,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        if handler is None:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    if level is not None:
        logger.setLevel(level)
    return logger


__all__ = ["PathLike", "ensure_path", "format_file_size", "get_logger"]

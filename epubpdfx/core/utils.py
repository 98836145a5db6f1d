"""Utilities shared by epubpdfx tools."""

from __future__ import annotations

import logging
import re
from pathlib import Path

_UNSAFE_FILENAME = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def resolve_path(path: str | Path | None) -> Path:
    if path is None:
        raise ValueError("Path must not be None")
    resolved = Path(path).expanduser().resolve()
    return resolved


def sanitize_filename(title: str | None, default: str = "converted_document", *, limit: int = 50) -> str:
    """Return a download-safe stem derived from a document title."""

    if not title or not title.strip():
        return default
    return _UNSAFE_FILENAME.sub("_", title)[:limit]

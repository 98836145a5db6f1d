"""Shared helpers used across :mod:`epubpdfx`."""

from .utils import get_logger, resolve_path, sanitize_filename

__all__ = ["get_logger", "resolve_path", "sanitize_filename"]

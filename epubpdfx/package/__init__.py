"""Reading and parsing EPUB packages."""

from __future__ import annotations

from .reader import CONTAINER_PATH, SourcePackage, open_package, resolve_relative_path
from .structure import parse_container, parse_structure, strip_fragment

__all__ = [
    "CONTAINER_PATH",
    "SourcePackage",
    "open_package",
    "resolve_relative_path",
    "parse_container",
    "parse_structure",
    "strip_fragment",
]

"""Merging rendered fragments and adding bookmarks."""

from __future__ import annotations

from .merger import OutputDocument, append_fragment, write_atomic
from .outline import OutlineEntry, OutlineRoot, build_outline, plan_outline, write_outline

__all__ = [
    "OutputDocument",
    "append_fragment",
    "write_atomic",
    "OutlineEntry",
    "OutlineRoot",
    "build_outline",
    "plan_outline",
    "write_outline",
]

"""Preparing content units and rendering them to PDF fragments."""

from __future__ import annotations

from .oracle import PlaywrightRenderSession, RenderSession, SessionFactory, fragment_from_pdf
from .preparer import extract_heading, inline_media, prepare_unit, strip_styles

__all__ = [
    "PlaywrightRenderSession",
    "RenderSession",
    "SessionFactory",
    "fragment_from_pdf",
    "extract_heading",
    "inline_media",
    "prepare_unit",
    "strip_styles",
]

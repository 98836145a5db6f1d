"""Command line interface for epubpdfx."""

from .main import main

__all__ = ["main"]

"""Custom exceptions for :mod:`epubpdfx`."""

from __future__ import annotations


class EpubPdfError(Exception):
    """Base class for every error raised by the conversion pipeline."""


class InvalidPackageError(EpubPdfError):
    """Raised when the source archive cannot be opened as an EPUB."""


class InvalidStructureError(EpubPdfError):
    """Raised when the container index or package descriptor is unusable."""


class EntryNotFoundError(EpubPdfError):
    """Raised when a path does not name an entry inside the archive."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Entry not found in package: {path}")
        self.path = path


class UnreadableUnitError(EpubPdfError):
    """Raised when the markup of a content unit cannot be read."""


class RenderError(EpubPdfError):
    """Raised when the rendering engine fails to produce a fragment."""


class RenderTimeoutError(RenderError):
    """Raised when a page never reaches the loaded state in time."""


class RenderCrashError(RenderError):
    """Raised when the rendering engine crashes or disconnects."""


class FragmentDecodeError(EpubPdfError):
    """Raised when a rendered fragment cannot be decoded as a PDF."""


class OutputWriteError(EpubPdfError):
    """Raised when the merged document cannot be serialised or written."""


__all__ = [
    "EpubPdfError",
    "InvalidPackageError",
    "InvalidStructureError",
    "EntryNotFoundError",
    "UnreadableUnitError",
    "RenderError",
    "RenderTimeoutError",
    "RenderCrashError",
    "FragmentDecodeError",
    "OutputWriteError",
]

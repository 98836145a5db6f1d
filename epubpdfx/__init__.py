"""Convert EPUB packages into a single bookmarked PDF."""

from __future__ import annotations

from pathlib import Path

from .config import ConversionOptions, PageMargins
from .exceptions import (
    EntryNotFoundError,
    EpubPdfError,
    FragmentDecodeError,
    InvalidPackageError,
    InvalidStructureError,
    OutputWriteError,
    RenderCrashError,
    RenderError,
    RenderTimeoutError,
    UnreadableUnitError,
)
from .package import SourcePackage, open_package, parse_structure, resolve_relative_path
from .pipeline import ConversionPipeline, convert_epub, convert_epub_to_pdf
from .render import PlaywrightRenderSession, RenderSession, prepare_unit
from .merge import OutputDocument, build_outline
from .types import (
    BookMetadata,
    ChapterRecord,
    ContentUnit,
    ConversionResult,
    ManifestEntry,
    PackageStructure,
    RenderedFragment,
    SpineItem,
)

__all__ = [
    "ConversionOptions",
    "PageMargins",
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
    "SourcePackage",
    "open_package",
    "parse_structure",
    "resolve_relative_path",
    "ConversionPipeline",
    "convert_epub",
    "convert_epub_to_pdf",
    "convert_document",
    "PlaywrightRenderSession",
    "RenderSession",
    "prepare_unit",
    "OutputDocument",
    "build_outline",
    "BookMetadata",
    "ChapterRecord",
    "ContentUnit",
    "ConversionResult",
    "ManifestEntry",
    "PackageStructure",
    "RenderedFragment",
    "SpineItem",
]

__version__ = "0.1.0"


def convert_document(
    input: str | Path,
    output: str | Path,
    *,
    options: ConversionOptions | None = None,
) -> ConversionResult:
    """Convenience wrapper around :func:`pipeline.convert_epub_to_pdf`."""

    return convert_epub_to_pdf(input, output, options=options)

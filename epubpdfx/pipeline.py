"""End-to-end EPUB → PDF conversion.

Content units are processed strictly in spine order: prepare, render,
append. The running page count of the output document gives every
chapter its start page, so rendering and merging are never reordered.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from .config import ConversionOptions
from .exceptions import (
    FragmentDecodeError,
    InvalidPackageError,
    RenderCrashError,
    RenderError,
    UnreadableUnitError,
)
from .merge.merger import OutputDocument, write_atomic
from .merge.outline import build_outline
from .package.reader import SourcePackage, open_package
from .package.structure import parse_structure
from .render.oracle import PlaywrightRenderSession, RenderSession, SessionFactory
from .render.preparer import prepare_unit
from .types import ChapterRecord, ContentUnit, ConversionResult, PackageStructure

__all__ = ["ConversionPipeline", "convert_epub", "convert_epub_to_pdf"]

LOGGER = logging.getLogger("epubpdfx.pipeline")

ProgressCallback = Callable[[int, int, str], None]


class ConversionPipeline:
    """Drive one conversion request from package bytes to PDF bytes."""

    def __init__(
        self,
        options: ConversionOptions | None = None,
        *,
        session_factory: SessionFactory | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.options = options or ConversionOptions()
        self.session_factory: SessionFactory = session_factory or PlaywrightRenderSession
        self.progress = progress

    def run(self, data: bytes, *, filename: str | Path | None = None) -> ConversionResult:
        with open_package(data, filename=filename) as package:
            structure = parse_structure(package)
            with self.session_factory(self.options) as session:
                return self._convert(package, structure, session)

    def _convert(
        self,
        package: SourcePackage,
        structure: PackageStructure,
        session: RenderSession,
    ) -> ConversionResult:
        metadata = structure.metadata
        document = OutputDocument(
            title=metadata.title,
            author=metadata.author,
            creator=self.options.creator,
        )
        warnings = list(structure.warnings)
        chapters: list[ChapterRecord] = []
        total = len(structure.spine)

        LOGGER.info("Processing %d content unit(s) of '%s'", total, metadata.title)
        for position, item in enumerate(structure.spine, start=1):
            entry = structure.manifest[item.id]
            try:
                unit = prepare_unit(package, entry, structure, position=len(chapters) + 1)
            except UnreadableUnitError as exc:
                LOGGER.warning("Skipping unit %s: %s", item.id, exc)
                warnings.append(str(exc))
                continue

            for reference in unit.missing_media:
                warnings.append(f"Media '{reference}' in {unit.path} could not be resolved")

            if unit.is_empty:
                LOGGER.debug("Skipping empty unit %s", item.id)
                continue

            added = self._render_and_append(session, document, unit, warnings)
            if added:
                chapter = ChapterRecord(
                    id=unit.id,
                    title=unit.title,
                    start_page=document.page_count - added,
                    page_count=added,
                    path=unit.path,
                )
                chapters.append(chapter)
                LOGGER.info("Processed chapter: %s (%d page(s))", chapter.title, added)

            if self.progress is not None:
                self.progress(position, total, unit.title)

        build_outline(document, chapters)
        payload = document.finalize()
        LOGGER.info(
            "Finished '%s': %d page(s), %d chapter(s)",
            metadata.title,
            document.page_count,
            len(chapters),
        )
        return ConversionResult(
            document=payload,
            page_count=document.page_count,
            title=metadata.title,
            author=metadata.author,
            chapters=tuple(chapters),
            warnings=tuple(warnings),
        )

    def _render_and_append(
        self,
        session: RenderSession,
        document: OutputDocument,
        unit: ContentUnit,
        warnings: list[str],
    ) -> int:
        try:
            fragment = session.render_to_fragment(unit.markup, title=unit.title)
            if fragment.page_count == 0:
                return 0
            return document.append(fragment)
        except (RenderError, FragmentDecodeError) as exc:
            LOGGER.warning("Skipping unit %s: %s", unit.id, exc)
            warnings.append(f"Unit '{unit.id}' was not rendered: {exc}")
            if isinstance(exc, RenderCrashError):
                session.restart()
            return 0


def convert_epub(
    data: bytes,
    *,
    filename: str | Path | None = None,
    options: ConversionOptions | None = None,
    session_factory: SessionFactory | None = None,
) -> ConversionResult:
    """Convert EPUB ``data`` and return the merged PDF with its summary."""

    pipeline = ConversionPipeline(options, session_factory=session_factory)
    return pipeline.run(data, filename=filename)


def convert_epub_to_pdf(
    input: str | Path,
    output: str | Path,
    *,
    options: ConversionOptions | None = None,
    session_factory: SessionFactory | None = None,
) -> ConversionResult:
    """Convert the EPUB at ``input`` and write the PDF to ``output``."""

    input_path = Path(input).expanduser()
    try:
        data = input_path.read_bytes()
    except OSError as exc:
        LOGGER.error("Failed to read %s: %s", input_path, exc)
        raise InvalidPackageError(f"Unable to read source package: {input_path}") from exc

    result = convert_epub(
        data,
        filename=input_path.name,
        options=options,
        session_factory=session_factory,
    )
    write_atomic(result.document, output)
    LOGGER.info("Saved %s", output)
    return result

"""Accumulate rendered fragments into one output PDF."""

from __future__ import annotations

import logging
import os
from io import BytesIO
from pathlib import Path
import tempfile

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from ..exceptions import FragmentDecodeError, OutputWriteError
from ..types import RenderedFragment

__all__ = ["OutputDocument", "append_fragment", "write_atomic"]

LOGGER = logging.getLogger("epubpdfx.merge")


class OutputDocument:
    """The merged PDF being assembled for a single conversion run.

    Pages are copied structurally from each fragment; nothing is
    re-rendered. Once :meth:`finalize` has been called the document is
    frozen and further appends are rejected.
    """

    def __init__(
        self,
        *,
        title: str | None = None,
        author: str | None = None,
        creator: str | None = None,
    ) -> None:
        self.writer = PdfWriter()
        self._finalized = False
        info = {
            key: value
            for key, value in (("/Title", title), ("/Author", author), ("/Creator", creator))
            if value
        }
        if info:
            self.writer.add_metadata(info)

    @property
    def page_count(self) -> int:
        return len(self.writer.pages)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def append(self, fragment: RenderedFragment) -> int:
        """Copy every page of ``fragment`` and return how many were added."""

        if self._finalized:
            raise OutputWriteError("Cannot append to a finalized document")

        try:
            reader = PdfReader(BytesIO(fragment.data))
            pages = list(reader.pages)
        except (PyPdfError, ValueError, OSError) as exc:
            LOGGER.warning("Failed to decode rendered fragment: %s", exc)
            raise FragmentDecodeError("Rendered fragment is not a readable PDF") from exc

        start = self.page_count
        for page_index, page in enumerate(pages):
            LOGGER.debug("Adding fragment page %s as page %s", page_index, start + page_index)
            self.writer.add_page(page)
        return self.page_count - start

    def finalize(self) -> bytes:
        """Serialise the document and return the PDF bytes."""

        buffer = BytesIO()
        try:
            self.writer.write(buffer)
        except Exception as exc:  # pragma: no cover - pypdf write errors vary
            LOGGER.error("Failed to serialise merged PDF: %s", exc)
            raise OutputWriteError("Failed to serialise merged PDF") from exc
        self._finalized = True
        return buffer.getvalue()


def append_fragment(document: OutputDocument, fragment: RenderedFragment) -> int:
    return document.append(fragment)


def write_atomic(data: bytes, output: str | Path) -> Path:
    """Write ``data`` to ``output`` without ever exposing a partial file."""

    output_path = Path(output).expanduser().resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(prefix=f".{output_path.name}.", dir=output_path.parent)
    try:
        with os.fdopen(handle, "wb") as stream:
            stream.write(data)
        os.replace(temp_name, output_path)
    except OSError as exc:
        LOGGER.error("Failed to write merged PDF to %s: %s", output_path, exc)
        Path(temp_name).unlink(missing_ok=True)
        raise OutputWriteError(f"Failed to write merged PDF to {output_path}") from exc
    return output_path

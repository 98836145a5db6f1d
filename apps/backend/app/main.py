"""FastAPI application exposing EPUB → PDF conversion."""

from __future__ import annotations

import json
import logging
from json import JSONDecodeError
from pathlib import Path
from tempfile import TemporaryDirectory

from fastapi import BackgroundTasks, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse

from epubpdfx import (
    ConversionOptions,
    ConversionResult,
    EpubPdfError,
    InvalidPackageError,
    InvalidStructureError,
    PlaywrightRenderSession,
    convert_epub,
)
from epubpdfx.core.utils import sanitize_filename
from epubpdfx.merge import write_atomic
from epubpdfx.render import SessionFactory

LOGGER = logging.getLogger("epubpdfx.backend")

app = FastAPI(title="epubpdfx API", version="0.1.0")

EPUB_SUFFIX = ".epub"


def create_session_factory() -> SessionFactory:
    """Return the render oracle used for each request."""

    return PlaywrightRenderSession


def _cleanup_temp_dir(background_tasks: BackgroundTasks, temp_dir: TemporaryDirectory) -> None:
    """Schedule ``temp_dir`` to be cleaned up after the response is sent."""

    background_tasks.add_task(temp_dir.cleanup)


def _parse_options(raw_value: str | None) -> ConversionOptions:
    """Parse optional JSON encoded conversion options from a form field."""

    if raw_value is None:
        return ConversionOptions()

    try:
        payload = json.loads(raw_value)
    except JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="options must be valid JSON.") from exc

    if payload is not None and not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="options must be a JSON object.")

    try:
        return ConversionOptions.from_mapping(payload)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _perform_conversion(
    data: bytes,
    filename: str,
    output_path: Path,
    options: ConversionOptions,
) -> ConversionResult:
    result = convert_epub(
        data,
        filename=filename,
        options=options,
        session_factory=create_session_factory(),
    )
    write_atomic(result.document, output_path)
    return result


@app.get("/health", response_class=JSONResponse)
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/convert", response_class=FileResponse)
async def convert_document(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(..., description="EPUB file to convert"),
    options: str | None = Form(
        None,
        description="Optional JSON encoded conversion options (page format, margins, timeout).",
    ),
) -> FileResponse:
    """Convert an uploaded EPUB into one bookmarked PDF.

    The upload is converted in a worker thread and written into a
    per-request temporary directory. The directory is removed once the
    response has been sent, or immediately when conversion fails or the
    request is cancelled.
    """

    filename = Path(file.filename or "").name
    if not filename.lower().endswith(EPUB_SUFFIX):
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload an EPUB.")

    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail=f"File '{filename}' is empty.")

    conversion_options = _parse_options(options)

    temp_dir = TemporaryDirectory(prefix="epubpdfx-")
    output_path = Path(temp_dir.name) / "output.pdf"
    converted = False
    try:
        result = await run_in_threadpool(
            _perform_conversion, contents, filename, output_path, conversion_options
        )
        converted = True
    except (InvalidPackageError, InvalidStructureError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except EpubPdfError as exc:
        LOGGER.error("Conversion of %s failed: %s", filename, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover - defensive conversion to HTTP error
        LOGGER.exception("Unexpected failure converting %s", filename)
        raise HTTPException(
            status_code=500, detail="Internal Server Error during conversion."
        ) from exc
    finally:
        # Also reached when the request is cancelled mid-conversion.
        if not converted:
            temp_dir.cleanup()

    _cleanup_temp_dir(background_tasks, temp_dir)

    return FileResponse(
        output_path,
        media_type="application/pdf",
        filename=f"{sanitize_filename(result.title)}.pdf",
        headers={
            "X-EpubPdfX-Page-Count": str(result.page_count),
            "X-EpubPdfX-Chapter-Count": str(len(result.chapters)),
        },
    )

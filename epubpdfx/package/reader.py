"""Read-only access to the entries of an EPUB archive."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from types import TracebackType
from zipfile import BadZipFile, ZipFile

from ..exceptions import EntryNotFoundError, InvalidPackageError

__all__ = ["CONTAINER_PATH", "SourcePackage", "open_package", "resolve_relative_path"]

LOGGER = logging.getLogger("epubpdfx.package")

CONTAINER_PATH = "META-INF/container.xml"
EPUB_SUFFIX = ".epub"


def resolve_relative_path(base_path: str, relative_path: str) -> str:
    """Resolve ``relative_path`` against the directory of ``base_path``.

    Paths use ``/`` separators and are relative to the archive root. ``.``
    and empty segments are ignored, ``..`` climbs one directory (never above
    the root) and a leading ``/`` restarts from the root::

        >>> resolve_relative_path("folder/chapter1.xhtml", "../images/cover.jpg")
        'images/cover.jpg'
        >>> resolve_relative_path("chapter1.xhtml", "./img.png")
        'img.png'
    """

    stack = base_path.split("/")
    stack.pop()
    if relative_path.startswith("/"):
        stack = []
    for part in relative_path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if stack:
                stack.pop()
            continue
        stack.append(part)
    return "/".join(part for part in stack if part)


class SourcePackage:
    """An opened EPUB archive.

    Entry names are case sensitive and unique. The package must be closed
    once the pipeline is done with it; it is usable as a context manager.
    """

    def __init__(self, archive: ZipFile, name: str | None = None) -> None:
        self._archive = archive
        self._names = frozenset(archive.namelist())
        self.name = name

    def __enter__(self) -> "SourcePackage":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def names(self) -> frozenset[str]:
        return self._names

    def has_entry(self, path: str) -> bool:
        return path in self._names

    def read_entry(self, path: str) -> bytes:
        if path not in self._names:
            raise EntryNotFoundError(path)
        LOGGER.debug("Reading entry %s", path)
        try:
            return self._archive.read(path)
        except (BadZipFile, OSError, RuntimeError) as exc:
            LOGGER.warning("Entry %s could not be decompressed: %s", path, exc)
            raise EntryNotFoundError(path) from exc

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return self.read_entry(path).decode(encoding, errors="replace")

    def resolve_relative_path(self, base_path: str, relative_path: str) -> str:
        return resolve_relative_path(base_path, relative_path)

    def close(self) -> None:
        self._archive.close()


def open_package(data: bytes, *, filename: str | Path | None = None) -> SourcePackage:
    """Open ``data`` as an EPUB archive.

    When ``filename`` is given it must carry the ``.epub`` extension.

    Raises:
        InvalidPackageError: If the bytes are not a zip archive or the
            container index is missing.
    """

    name = None
    if filename is not None:
        name = Path(filename).name
        if not name.lower().endswith(EPUB_SUFFIX):
            LOGGER.error("Rejected %s: not an EPUB file", name)
            raise InvalidPackageError("Invalid file type. Please upload an EPUB.")

    if not data:
        raise InvalidPackageError("Source package is empty")

    try:
        archive = ZipFile(BytesIO(data))
    except (BadZipFile, OSError) as exc:
        LOGGER.error("Failed to decode package %s: %s", name or "<bytes>", exc)
        raise InvalidPackageError("Source package is not a valid EPUB archive") from exc

    package = SourcePackage(archive, name=name)
    if not package.has_entry(CONTAINER_PATH):
        package.close()
        LOGGER.error("Package %s has no %s", name or "<bytes>", CONTAINER_PATH)
        raise InvalidPackageError(f"Source package is missing {CONTAINER_PATH}")

    LOGGER.debug("Opened package %s with %d entries", name or "<bytes>", len(package.names))
    return package

"""Data model shared by the conversion stages."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "BookMetadata",
    "ManifestEntry",
    "SpineItem",
    "PackageStructure",
    "ContentUnit",
    "RenderedFragment",
    "ChapterRecord",
    "ConversionResult",
]


@dataclass(frozen=True, slots=True)
class BookMetadata:
    """Top-level descriptive metadata of an EPUB."""

    title: str = "Untitled"
    author: str = "Unknown Author"
    language: str | None = None


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    """A single ``<item>`` of the package manifest.

    ``path`` is already resolved against the package descriptor location,
    so it can be handed straight to :meth:`SourcePackage.read_entry`.
    """

    id: str
    path: str
    media_type: str
    properties: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class SpineItem:
    """Reference to a manifest entry in reading order."""

    id: str


@dataclass(frozen=True, slots=True)
class PackageStructure:
    """Result of parsing the container index and package descriptor."""

    metadata: BookMetadata
    spine: tuple[SpineItem, ...]
    manifest: dict[str, ManifestEntry]
    descriptor_path: str
    toc_titles: dict[str, str] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()

    def entry_for_path(self, path: str) -> ManifestEntry | None:
        for entry in self.manifest.values():
            if entry.path == path:
                return entry
        return None


@dataclass(slots=True)
class ContentUnit:
    """Prepared markup for one spine item.

    ``markup`` holds the body content only; media is inlined as data URIs
    and every e-book supplied stylesheet has been removed.
    """

    id: str
    title: str
    markup: str
    path: str
    inlined_media: int = 0
    missing_media: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.markup.strip()


@dataclass(frozen=True, slots=True)
class RenderedFragment:
    """PDF bytes produced by the render oracle for one content unit."""

    data: bytes
    page_count: int


@dataclass(frozen=True, slots=True)
class ChapterRecord:
    """Where a merged content unit starts in the output document."""

    id: str
    title: str
    start_page: int
    page_count: int
    path: str = ""


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Finished artifact plus summary statistics."""

    document: bytes
    page_count: int
    title: str
    author: str
    chapters: tuple[ChapterRecord, ...] = ()
    warnings: tuple[str, ...] = ()

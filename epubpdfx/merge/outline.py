"""Bookmark (outline) construction for the merged document.

The outline is first planned as a plain doubly linked list of
:class:`OutlineEntry` nodes hanging off an :class:`OutlineRoot`, so its
shape can be checked without touching the PDF. :func:`write_outline` then
turns the plan into indirect objects in the writer's object graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Sequence

from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    TextStringObject,
)

from ..types import ChapterRecord
from .merger import OutputDocument

__all__ = ["OutlineEntry", "OutlineRoot", "plan_outline", "write_outline", "build_outline"]

LOGGER = logging.getLogger("epubpdfx.merge")


@dataclass(slots=True, eq=False)
class OutlineEntry:
    """One bookmark pointing at the top of ``page_index``."""

    title: str
    page_index: int
    prev: "OutlineEntry | None" = field(default=None, repr=False)
    next: "OutlineEntry | None" = field(default=None, repr=False)


@dataclass(slots=True)
class OutlineRoot:
    entries: list[OutlineEntry] = field(default_factory=list)

    @property
    def first(self) -> OutlineEntry | None:
        return self.entries[0] if self.entries else None

    @property
    def last(self) -> OutlineEntry | None:
        return self.entries[-1] if self.entries else None

    def append(self, entry: OutlineEntry) -> None:
        previous = self.last
        if previous is not None:
            previous.next = entry
            entry.prev = previous
        self.entries.append(entry)

    def validate(self) -> None:
        """Raise :class:`ValueError` unless the list is a proper chain."""

        seen: set[int] = set()
        node = self.first
        previous: OutlineEntry | None = None
        while node is not None:
            if id(node) in seen:
                raise ValueError("Outline list contains a cycle")
            if node.prev is not previous:
                raise ValueError(f"Outline entry '{node.title}' has a broken Prev link")
            seen.add(id(node))
            previous, node = node, node.next
        if previous is not self.last or len(seen) != len(self.entries):
            raise ValueError("Outline First/Last do not match the list ends")


def plan_outline(chapters: Sequence[ChapterRecord], page_count: int) -> OutlineRoot:
    """Build the linked outline for ``chapters``, skipping out-of-range ones."""

    root = OutlineRoot()
    for chapter in chapters:
        if not 0 <= chapter.start_page < page_count:
            LOGGER.warning(
                "Skipping bookmark '%s': page %s outside 0..%s",
                chapter.title,
                chapter.start_page,
                page_count - 1,
            )
            continue
        root.append(OutlineEntry(title=chapter.title, page_index=chapter.start_page))
    root.validate()
    return root


def write_outline(writer: PdfWriter, root: OutlineRoot) -> IndirectObject | None:
    """Materialise ``root`` as ``/Outlines`` in the writer's catalog."""

    if not root.entries:
        return None

    outlines_ref = writer._add_object(DictionaryObject())
    refs = {id(entry): writer._add_object(DictionaryObject()) for entry in root.entries}

    for entry in root.entries:
        page_ref = writer.pages[entry.page_index].indirect_reference
        item = refs[id(entry)].get_object()
        item[NameObject("/Title")] = TextStringObject(entry.title)
        item[NameObject("/Parent")] = outlines_ref
        if entry.prev is not None:
            item[NameObject("/Prev")] = refs[id(entry.prev)]
        if entry.next is not None:
            item[NameObject("/Next")] = refs[id(entry.next)]
        item[NameObject("/Dest")] = ArrayObject(
            [page_ref, NameObject("/XYZ"), NullObject(), NullObject(), NullObject()]
        )

    outlines = outlines_ref.get_object()
    outlines[NameObject("/Type")] = NameObject("/Outlines")
    outlines[NameObject("/Count")] = NumberObject(len(root.entries))
    outlines[NameObject("/First")] = refs[id(root.first)]
    outlines[NameObject("/Last")] = refs[id(root.last)]

    catalog = writer._root_object
    catalog[NameObject("/Outlines")] = outlines_ref
    catalog[NameObject("/PageMode")] = NameObject("/UseOutlines")
    return outlines_ref


def build_outline(document: OutputDocument, chapters: Sequence[ChapterRecord]) -> OutlineRoot:
    root = plan_outline(chapters, document.page_count)
    write_outline(document.writer, root)
    LOGGER.debug("Added %d bookmark(s)", len(root.entries))
    return root

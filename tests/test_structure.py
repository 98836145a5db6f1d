from __future__ import annotations

from io import BytesIO
import zipfile

import pytest

from epubpdfx.exceptions import InvalidStructureError
from epubpdfx.package import open_package, parse_structure

from builders import build_epub, chapter_html


def _structure(data: bytes):
    with open_package(data) as package:
        return parse_structure(package)


def _archive(entries: dict[str, str]) -> bytes:
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, payload in entries.items():
            archive.writestr(name, payload)
    return buffer.getvalue()


def test_parse_structure_reads_metadata_manifest_and_spine() -> None:
    data = build_epub(
        [
            ("intro", "text/intro.xhtml", chapter_html("<p>1</p>")),
            ("body", "text/body.xhtml", chapter_html("<p>2</p>")),
        ],
        title="A Tale",
        author="Some Author",
        manifest_extra=[("cover", "images/cover.jpg", "image/jpeg")],
        spine=["body", "intro"],
    )

    structure = _structure(data)

    assert structure.metadata.title == "A Tale"
    assert structure.metadata.author == "Some Author"
    assert structure.descriptor_path == "OEBPS/content.opf"
    assert [item.id for item in structure.spine] == ["body", "intro"]
    assert structure.manifest["intro"].path == "OEBPS/text/intro.xhtml"
    assert structure.manifest["cover"].media_type == "image/jpeg"
    assert structure.entry_for_path("OEBPS/images/cover.jpg").id == "cover"
    assert structure.warnings == ()


def test_missing_metadata_uses_defaults() -> None:
    data = build_epub([("ch1", "ch1.xhtml", chapter_html("<p>1</p>"))], title=None, author=None)

    metadata = _structure(data).metadata

    assert metadata.title == "Untitled"
    assert metadata.author == "Unknown Author"


def test_descriptor_at_archive_root() -> None:
    data = build_epub([("ch1", "ch1.xhtml", chapter_html("<p>1</p>"))], opf_dir="")

    structure = _structure(data)

    assert structure.descriptor_path == "content.opf"
    assert structure.manifest["ch1"].path == "ch1.xhtml"


def test_spine_reference_missing_from_manifest_is_skipped_with_warning() -> None:
    data = build_epub(
        [("ch1", "ch1.xhtml", chapter_html("<p>1</p>")), ("ch2", "ch2.xhtml", chapter_html("<p>2</p>"))],
        spine=["ch1", "ghost", "ch2"],
    )

    structure = _structure(data)

    assert [item.id for item in structure.spine] == ["ch1", "ch2"]
    assert len(structure.warnings) == 1
    assert "ghost" in structure.warnings[0]


def test_non_linear_items_keep_their_spine_position() -> None:
    data = build_epub(
        [
            ("cover", "cover.xhtml", chapter_html("<p>cover</p>")),
            ("ch1", "ch1.xhtml", chapter_html("<p>1</p>")),
            ("notes", "notes.xhtml", chapter_html("<p>notes</p>")),
        ],
        non_linear=["cover", "notes"],
    )

    structure = _structure(data)

    assert [item.id for item in structure.spine] == ["cover", "ch1", "notes"]
    assert structure.warnings == ()


def test_container_without_rootfile_is_invalid() -> None:
    data = _archive(
        {
            "META-INF/container.xml": (
                '<container xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
                "<rootfiles/></container>"
            )
        }
    )

    with pytest.raises(InvalidStructureError, match="package descriptor"):
        _structure(data)


def test_unparseable_container_is_invalid() -> None:
    data = _archive({"META-INF/container.xml": "<container><rootfiles>"})

    with pytest.raises(InvalidStructureError):
        _structure(data)


def test_missing_descriptor_is_invalid() -> None:
    data = _archive(
        {
            "META-INF/container.xml": (
                '<container><rootfiles><rootfile full-path="OEBPS/content.opf"/></rootfiles></container>'
            )
        }
    )

    with pytest.raises(InvalidStructureError, match="not found"):
        _structure(data)


def test_unparseable_descriptor_is_invalid() -> None:
    data = _archive(
        {
            "META-INF/container.xml": (
                '<container><rootfiles><rootfile full-path="content.opf"/></rootfiles></container>'
            ),
            "content.opf": "<package><manifest>",
        }
    )

    with pytest.raises(InvalidStructureError, match="Unable to parse"):
        _structure(data)


def test_ncx_titles_are_mapped_to_content_paths() -> None:
    data = build_epub(
        [("ch1", "text/ch1.xhtml", chapter_html("<p>1</p>")), ("ch2", "text/ch2.xhtml", chapter_html("<p>2</p>"))],
        ncx_titles={"text/ch1.xhtml#start": "Opening", "text/ch2.xhtml": "Second Part"},
    )

    titles = _structure(data).toc_titles

    assert titles == {"OEBPS/text/ch1.xhtml": "Opening", "OEBPS/text/ch2.xhtml": "Second Part"}


def test_nav_document_titles_take_precedence() -> None:
    nav = chapter_html(
        '<nav epub:type="landmarks"><ol><li><a href="ch1.xhtml">Landmark</a></li></ol></nav>'
        '<nav epub:type="toc"><ol><li><a href="ch1.xhtml">Chapter  One</a></li></ol></nav>'
    )
    data = build_epub(
        [("ch1", "ch1.xhtml", chapter_html("<p>1</p>"))],
        files={"OEBPS/nav.xhtml": nav.encode("utf-8")},
        manifest_extra=[("nav", "nav.xhtml", "application/xhtml+xml", "nav")],
        ncx_titles={"ch1.xhtml": "From NCX"},
    )

    assert _structure(data).toc_titles == {"OEBPS/ch1.xhtml": "Chapter One"}

"""In-memory EPUB and PDF builders shared by the test-suite."""

from __future__ import annotations

from io import BytesIO
from typing import Sequence
import zipfile

from pypdf import PdfWriter

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c63000100000500010d0a2db40000000049454e44ae426082"
)


def chapter_html(body: str, *, head: str = "") -> str:
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml">'
        f"<head><title>ignored</title>{head}</head>"
        f"<body>{body}</body></html>"
    )


def make_pdf(page_count: int) -> bytes:
    writer = PdfWriter()
    for _ in range(page_count):
        writer.add_blank_page(width=595, height=842)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def build_epub(
    chapters: Sequence[tuple[str, str, str]],
    *,
    title: str | None = "Sample Book",
    author: str | None = "Jane Doe",
    spine: Sequence[str] | None = None,
    files: dict[str, bytes] | None = None,
    manifest_extra: Sequence[tuple[str, ...]] = (),
    ncx_titles: dict[str, str] | None = None,
    non_linear: Sequence[str] = (),
    opf_dir: str = "OEBPS",
) -> bytes:
    """Build an EPUB archive in memory.

    ``chapters`` holds ``(id, href, markup)`` with hrefs relative to the
    package descriptor, which lives in ``opf_dir``. ``manifest_extra``
    entries are ``(id, href, media_type[, properties])``.
    """

    opf_path = f"{opf_dir}/content.opf" if opf_dir else "content.opf"
    prefix = f"{opf_dir}/" if opf_dir else ""

    metadata = []
    if title is not None:
        metadata.append(f"<dc:title>{title}</dc:title>")
    if author is not None:
        metadata.append(f"<dc:creator>{author}</dc:creator>")

    items = [
        f'<item id="{item_id}" href="{href}" media-type="application/xhtml+xml"/>'
        for item_id, href, _ in chapters
    ]
    for item_id, href, media_type, *properties in manifest_extra:
        extra = f' properties="{properties[0]}"' if properties else ""
        items.append(f'<item id="{item_id}" href="{href}" media-type="{media_type}"{extra}/>')
    spine_attr = ""
    if ncx_titles is not None:
        items.append('<item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>')
        spine_attr = ' toc="ncx"'

    spine_ids = list(spine) if spine is not None else [item_id for item_id, _, _ in chapters]
    itemrefs = [
        f'<itemref idref="{item_id}" linear="no"/>' if item_id in non_linear else f'<itemref idref="{item_id}"/>'
        for item_id in spine_ids
    ]

    opf = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="id">'
        '<metadata xmlns:dc="http://purl.org/dc/elements/1.1/">'
        + "".join(metadata)
        + "</metadata><manifest>"
        + "".join(items)
        + f"</manifest><spine{spine_attr}>"
        + "".join(itemrefs)
        + "</spine></package>"
    )

    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("mimetype", "application/epub+zip")
        archive.writestr("META-INF/container.xml", CONTAINER_XML.format(opf_path=opf_path))
        archive.writestr(opf_path, opf)
        for _, href, markup in chapters:
            archive.writestr(prefix + href, markup)
        if ncx_titles is not None:
            points = "".join(
                f'<navPoint id="p{index}" playOrder="{index}">'
                f"<navLabel><text>{label}</text></navLabel>"
                f'<content src="{src}"/></navPoint>'
                for index, (src, label) in enumerate(ncx_titles.items(), start=1)
            )
            archive.writestr(
                prefix + "toc.ncx",
                '<?xml version="1.0" encoding="UTF-8"?>'
                '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">'
                f"<navMap>{points}</navMap></ncx>",
            )
        for name, payload in (files or {}).items():
            archive.writestr(name, payload)
    return buffer.getvalue()

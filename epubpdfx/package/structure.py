"""Parse the container index, package descriptor and navigation of an EPUB.

The parser returns typed records only. Element lookups are namespace
agnostic (matching on local names) because real-world packages are loose
about which OPF/DC namespace URIs they declare.
"""

from __future__ import annotations

import logging
from typing import Iterable
from urllib.parse import unquote
import xml.etree.ElementTree as ET

from bs4 import BeautifulSoup

from ..exceptions import EntryNotFoundError, InvalidStructureError
from ..types import BookMetadata, ManifestEntry, PackageStructure, SpineItem
from .reader import CONTAINER_PATH, SourcePackage, resolve_relative_path

__all__ = ["parse_structure", "parse_container", "strip_fragment"]

LOGGER = logging.getLogger("epubpdfx.package")

DEFAULT_TITLE = "Untitled"
DEFAULT_AUTHOR = "Unknown Author"
NCX_MEDIA_TYPE = "application/x-dtbncx+xml"


def _local(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> Iterable[ET.Element]:
    return (child for child in element if _local(child.tag) == name)


def _first(element: ET.Element, name: str) -> ET.Element | None:
    for child in element.iter():
        if _local(child.tag) == name:
            return child
    return None


def _text(element: ET.Element | None) -> str:
    if element is None:
        return ""
    return " ".join("".join(element.itertext()).split())


def strip_fragment(href: str) -> str:
    """Drop ``#fragment`` and ``?query`` suffixes and decode ``%XX`` escapes."""

    for separator in ("#", "?"):
        href = href.split(separator, 1)[0]
    return unquote(href)


def _parse_xml(package: SourcePackage, path: str, label: str) -> ET.Element:
    try:
        payload = package.read_entry(path)
    except EntryNotFoundError as exc:
        LOGGER.error("%s %s is missing from the package", label, path)
        raise InvalidStructureError(f"{label} not found: {path}") from exc
    try:
        return ET.fromstring(payload)
    except ET.ParseError as exc:
        LOGGER.error("Failed to parse %s %s: %s", label, path, exc)
        raise InvalidStructureError(f"Unable to parse {label}: {path}") from exc


def parse_container(package: SourcePackage) -> str:
    """Return the path of the package descriptor named by the container."""

    root = _parse_xml(package, CONTAINER_PATH, "container index")
    for rootfile in root.iter():
        if _local(rootfile.tag) != "rootfile":
            continue
        full_path = (rootfile.get("full-path") or "").strip()
        if full_path:
            return unquote(full_path)
    LOGGER.error("Container index does not declare a rootfile path")
    raise InvalidStructureError("Container index does not declare a package descriptor")


def _extract_metadata(root: ET.Element) -> BookMetadata:
    metadata = _first(root, "metadata")
    if metadata is None:
        return BookMetadata(title=DEFAULT_TITLE, author=DEFAULT_AUTHOR)

    def _value(name: str) -> str | None:
        for element in metadata.iter():
            if _local(element.tag) == name:
                value = _text(element)
                if value:
                    return value
        return None

    return BookMetadata(
        title=_value("title") or DEFAULT_TITLE,
        author=_value("creator") or DEFAULT_AUTHOR,
        language=_value("language"),
    )


def _extract_manifest(
    root: ET.Element, descriptor_path: str, warnings: list[str]
) -> dict[str, ManifestEntry]:
    manifest_element = _first(root, "manifest")
    if manifest_element is None:
        LOGGER.error("Package descriptor %s has no manifest", descriptor_path)
        raise InvalidStructureError("Package descriptor has no manifest")

    manifest: dict[str, ManifestEntry] = {}
    for item in _children(manifest_element, "item"):
        item_id = item.get("id")
        href = item.get("href")
        if not item_id or not href:
            continue
        if item_id in manifest:
            message = f"Duplicate manifest id '{item_id}' ignored"
            LOGGER.warning(message)
            warnings.append(message)
            continue
        manifest[item_id] = ManifestEntry(
            id=item_id,
            path=resolve_relative_path(descriptor_path, strip_fragment(href)),
            media_type=item.get("media-type", "application/octet-stream"),
            properties=frozenset((item.get("properties") or "").split()),
        )
    LOGGER.debug("Manifest lists %d item(s)", len(manifest))
    return manifest


def _extract_spine(
    root: ET.Element, manifest: dict[str, ManifestEntry], warnings: list[str]
) -> tuple[tuple[SpineItem, ...], str | None]:
    spine_element = _first(root, "spine")
    if spine_element is None:
        LOGGER.error("Package descriptor has no spine")
        raise InvalidStructureError("Package descriptor has no spine")

    spine: list[SpineItem] = []
    for itemref in _children(spine_element, "itemref"):
        idref = itemref.get("idref")
        if not idref:
            continue
        if idref not in manifest:
            message = f"Spine item '{idref}' is not in the manifest and was skipped"
            LOGGER.warning(message)
            warnings.append(message)
            continue
        spine.append(SpineItem(id=idref))
    return tuple(spine), spine_element.get("toc")


def _ncx_titles(package: SourcePackage, path: str) -> dict[str, str]:
    root = ET.fromstring(package.read_entry(path))
    titles: dict[str, str] = {}
    for nav_point in root.iter():
        if _local(nav_point.tag) != "navPoint":
            continue
        label = next(_children(nav_point, "navLabel"), None)
        content = next(_children(nav_point, "content"), None)
        if content is None or not content.get("src"):
            continue
        target = resolve_relative_path(path, strip_fragment(content.get("src", "")))
        title = _text(label)
        if title and target not in titles:
            titles[target] = title
    return titles


def _nav_titles(package: SourcePackage, path: str) -> dict[str, str]:
    soup = BeautifulSoup(package.read_text(path), "html.parser")
    navs = soup.find_all("nav")
    toc = next((nav for nav in navs if "toc" in (nav.get("epub:type") or "").split()), None)
    if toc is None and navs:
        toc = navs[0]
    titles: dict[str, str] = {}
    if toc is None:
        return titles
    for anchor in toc.find_all("a", href=True):
        target = resolve_relative_path(path, strip_fragment(anchor["href"]))
        title = " ".join(anchor.get_text(" ").split())
        if title and target not in titles:
            titles[target] = title
    return titles


def _extract_toc_titles(
    package: SourcePackage,
    manifest: dict[str, ManifestEntry],
    toc_id: str | None,
    warnings: list[str],
) -> dict[str, str]:
    nav_entry = next((entry for entry in manifest.values() if "nav" in entry.properties), None)
    ncx_entry = manifest.get(toc_id) if toc_id else None
    if ncx_entry is None:
        ncx_entry = next(
            (entry for entry in manifest.values() if entry.media_type == NCX_MEDIA_TYPE), None
        )

    for entry, loader in ((nav_entry, _nav_titles), (ncx_entry, _ncx_titles)):
        if entry is None:
            continue
        try:
            titles = loader(package, entry.path)
        except (EntryNotFoundError, ET.ParseError) as exc:
            message = f"Navigation document {entry.path} could not be read: {exc}"
            LOGGER.warning(message)
            warnings.append(message)
            continue
        if titles:
            LOGGER.debug("Loaded %d title(s) from %s", len(titles), entry.path)
            return titles
    return {}


def parse_structure(package: SourcePackage) -> PackageStructure:
    """Extract metadata, manifest, spine and TOC titles from ``package``.

    Raises:
        InvalidStructureError: When the container index, the descriptor path
            or the descriptor itself is missing or cannot be parsed.
    """

    descriptor_path = parse_container(package)
    root = _parse_xml(package, descriptor_path, "package descriptor")

    warnings: list[str] = []
    metadata = _extract_metadata(root)
    manifest = _extract_manifest(root, descriptor_path, warnings)
    spine, toc_id = _extract_spine(root, manifest, warnings)
    toc_titles = _extract_toc_titles(package, manifest, toc_id, warnings)

    LOGGER.info(
        "Parsed '%s' by %s: %d spine item(s), %d manifest item(s)",
        metadata.title,
        metadata.author,
        len(spine),
        len(manifest),
    )
    return PackageStructure(
        metadata=metadata,
        spine=spine,
        manifest=manifest,
        descriptor_path=descriptor_path,
        toc_titles=toc_titles,
        warnings=tuple(warnings),
    )

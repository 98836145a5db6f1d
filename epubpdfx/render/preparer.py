"""Turn one spine item into self-contained, house-styled markup."""

from __future__ import annotations

import base64
import logging
import mimetypes

from bs4 import BeautifulSoup, Tag

from ..exceptions import EntryNotFoundError, UnreadableUnitError
from ..package.reader import SourcePackage
from ..package.structure import strip_fragment
from ..types import ContentUnit, ManifestEntry, PackageStructure

__all__ = ["prepare_unit", "inline_media", "strip_styles", "extract_heading"]

LOGGER = logging.getLogger("epubpdfx.render")

# (tag, attributes that may carry the media reference)
MEDIA_ATTRIBUTES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("img", ("src",)),
    ("image", ("xlink:href", "href")),
)
EXTERNAL_PREFIXES = ("http://", "https://", "data:", "//")
# Elements that make a unit worth rendering even without any text.
CONTENT_TAGS = ["img", "image", "svg", "video", "object", "table", "hr"]


def _is_external(reference: str) -> bool:
    return reference.lower().startswith(EXTERNAL_PREFIXES)


def _media_type(path: str, structure: PackageStructure | None) -> str:
    if structure is not None:
        entry = structure.entry_for_path(path)
        if entry is not None and entry.media_type:
            return entry.media_type
    guessed, _ = mimetypes.guess_type(path)
    return guessed or "application/octet-stream"


def inline_media(
    soup: BeautifulSoup,
    package: SourcePackage,
    unit_path: str,
    structure: PackageStructure | None = None,
) -> tuple[int, list[str]]:
    """Replace archive media references in ``soup`` with data URIs.

    Returns the number of inlined references and the list of references that
    could not be resolved. Unresolved references are left untouched.
    """

    cache: dict[str, str] = {}
    inlined = 0
    missing: list[str] = []

    for tag_name, attributes in MEDIA_ATTRIBUTES:
        for element in soup.find_all(tag_name):
            attribute = next((name for name in attributes if element.get(name)), None)
            if attribute is None:
                continue
            reference = element[attribute].strip()
            if not reference or _is_external(reference):
                continue

            target = package.resolve_relative_path(unit_path, strip_fragment(reference))
            data_uri = cache.get(target)
            if data_uri is None:
                try:
                    payload = package.read_entry(target)
                except EntryNotFoundError:
                    LOGGER.warning("Media %s referenced by %s not found", target, unit_path)
                    missing.append(reference)
                    continue
                encoded = base64.b64encode(payload).decode("ascii")
                data_uri = f"data:{_media_type(target, structure)};base64,{encoded}"
                cache[target] = data_uri

            element[attribute] = data_uri
            inlined += 1

    return inlined, missing


def strip_styles(soup: BeautifulSoup) -> int:
    """Remove linked stylesheets and ``<style>`` blocks; return how many."""

    removed = 0
    for link in soup.find_all("link"):
        relations = link.get("rel") or []
        if isinstance(relations, str):
            relations = relations.split()
        if "stylesheet" in (value.lower() for value in relations):
            link.decompose()
            removed += 1
    for style in soup.find_all("style"):
        style.decompose()
        removed += 1
    return removed


def extract_heading(soup: BeautifulSoup) -> str | None:
    heading = soup.find(["h1", "h2"])
    if heading is None:
        return None
    text = " ".join(heading.get_text(" ").split())
    return text or None


def _body_markup(soup: BeautifulSoup) -> str:
    container = soup.find("body")
    if not isinstance(container, Tag):
        head = soup.find("head")
        if head is not None:
            head.decompose()
        container = soup.find("html") or soup
    if not container.get_text(strip=True) and container.find(CONTENT_TAGS) is None:
        return ""
    return container.decode_contents()


def prepare_unit(
    package: SourcePackage,
    entry: ManifestEntry,
    structure: PackageStructure | None = None,
    *,
    position: int = 1,
) -> ContentUnit:
    """Read, inline and restyle the markup of ``entry``.

    ``position`` is the one-based number used for the ``"Unit {n}"`` title
    fallback when neither the navigation document nor a heading names it.

    Raises:
        UnreadableUnitError: If the markup cannot be read from the package.
    """

    try:
        raw = package.read_entry(entry.path)
    except EntryNotFoundError as exc:
        raise UnreadableUnitError(f"Content unit '{entry.id}' could not be read: {entry.path}") from exc

    try:
        markup = raw.decode("utf-8")
    except UnicodeDecodeError:
        markup = raw.decode("latin-1")

    soup = BeautifulSoup(markup, "html.parser")
    removed = strip_styles(soup)
    inlined, missing = inline_media(soup, package, entry.path, structure)

    toc_title = structure.toc_titles.get(entry.path) if structure is not None else None
    title = toc_title or extract_heading(soup) or f"Unit {position}"

    LOGGER.debug(
        "Prepared %s (%s): %d media inlined, %d missing, %d style(s) removed",
        entry.id,
        entry.path,
        inlined,
        len(missing),
        removed,
    )
    return ContentUnit(
        id=entry.id,
        title=title,
        markup=_body_markup(soup),
        path=entry.path,
        inlined_media=inlined,
        missing_media=missing,
    )

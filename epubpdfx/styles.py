"""House style and document shell handed to the render oracle."""

from __future__ import annotations

from html import escape
from typing import Mapping

__all__ = ["PRINT_STYLES", "page_rule", "wrap_document"]

PRINT_STYLES = """
  * {
    box-sizing: border-box;
  }

  body {
    font-family: 'Merriweather', Georgia, serif;
    font-size: 11pt;
    line-height: 1.6;
    text-align: justify;
    color: #000 !important;
    background: #fff !important;
    padding: 0;
    margin: 0;
    -webkit-print-color-adjust: exact;
  }

  h1, h2, h3, h4, h5, h6 {
    font-family: 'Inter', 'Helvetica Neue', Arial, sans-serif;
    font-weight: 700;
    color: #000;
    page-break-after: avoid;
    page-break-inside: avoid;
  }

  h1 {
    font-size: 24pt;
    margin-top: 0;
    margin-bottom: 1.5em;
    border-bottom: 2px solid #000;
    padding-bottom: 0.5em;
  }

  h2 {
    font-size: 18pt;
    margin-top: 2em;
    margin-bottom: 1em;
  }

  h3 {
    font-size: 14pt;
    margin-top: 1.5em;
  }

  p {
    margin-top: 0;
    margin-bottom: 1em;
    orphans: 3;
    widows: 3;
  }

  img, svg {
    max-width: 100%;
    height: auto;
    display: block;
    margin: 1.5em auto;
    page-break-inside: avoid;
  }

  blockquote {
    margin: 1.5em 2em;
    font-style: italic;
    border-left: 3px solid #ccc;
    padding-left: 1em;
  }

  pre, code {
    font-family: 'Courier New', monospace;
    font-size: 9pt;
    white-space: pre-wrap;
  }

  table {
    width: 100%;
    border-collapse: collapse;
    margin: 1.5em 0;
    page-break-inside: avoid;
  }

  th, td {
    border: 1px solid #000;
    padding: 0.4em;
  }

  a {
    color: #000;
    text-decoration: none;
  }
"""


def page_rule(page_format: str, margins: Mapping[str, str]) -> str:
    """Return the ``@page`` rule for ``page_format`` and ``margins``.

    ``margins`` holds CSS lengths keyed ``top``, ``right``, ``bottom`` and
    ``left``, the same mapping handed to the print call.
    """

    box = " ".join(margins[side] for side in ("top", "right", "bottom", "left"))
    return f"@page {{ size: {page_format}; margin: {box}; }}"


def wrap_document(
    body: str,
    stylesheet: str = PRINT_STYLES,
    *,
    title: str | None = None,
    page_style: str = "",
) -> str:
    """Return a complete HTML document embedding ``stylesheet`` verbatim.

    ``page_style`` is emitted in its own ``<style>`` block ahead of the
    stylesheet so page geometry stays under the caller's control.
    """

    title_tag = f"<title>{escape(title)}</title>" if title else ""
    page_tag = f"<style>{page_style}</style>" if page_style else ""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "  <head>\n"
        '    <meta charset="utf-8">\n'
        f"    {title_tag}\n"
        f"    {page_tag}\n"
        f"    <style>{stylesheet}</style>\n"
        "  </head>\n"
        "  <body>\n"
        f"{body}\n"
        "  </body>\n"
        "</html>\n"
    )

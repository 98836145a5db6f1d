"""Configuration objects consumed by the conversion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from .styles import PRINT_STYLES, page_rule

__all__ = ["PageMargins", "ConversionOptions", "DEFAULT_BROWSER_ARGS"]

DEFAULT_BROWSER_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--font-render-hinting=none",
    "--disable-dev-shm-usage",
)


@dataclass(frozen=True, slots=True)
class PageMargins:
    """CSS length margins applied to every rendered page."""

    top: str = "20mm"
    right: str = "20mm"
    bottom: str = "20mm"
    left: str = "20mm"

    @classmethod
    def uniform(cls, value: str) -> "PageMargins":
        return cls(top=value, right=value, bottom=value, left=value)

    def as_dict(self) -> dict[str, str]:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


@dataclass(frozen=True, slots=True)
class ConversionOptions:
    """Options shared by every content unit of a single conversion run."""

    page_format: str = "A4"
    margins: PageMargins = field(default_factory=PageMargins)
    print_background: bool = True
    render_timeout: float = 30.0
    stylesheet: str = PRINT_STYLES
    creator: str = "epubpdfx"
    browser_args: tuple[str, ...] = DEFAULT_BROWSER_ARGS

    @property
    def render_timeout_ms(self) -> float:
        return self.render_timeout * 1000.0

    @property
    def page_style(self) -> str:
        """CSS @page rule matching the print format and margins."""
        return page_rule(self.page_format, self.margins.as_dict())

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> "ConversionOptions":
        """Build options from a loosely typed mapping (CLI or form input)."""

        options = cls()
        if not payload:
            return options

        aliases = {
            "page_format": ("page_format", "pageFormat", "format"),
            "print_background": ("print_background", "printBackground"),
            "render_timeout": ("render_timeout", "renderTimeout", "timeout"),
            "stylesheet": ("stylesheet",),
            "creator": ("creator",),
        }
        updates: dict[str, Any] = {}
        for canonical, keys in aliases.items():
            for key in keys:
                if payload.get(key) is not None:
                    updates[canonical] = payload[key]
                    break

        if "render_timeout" in updates:
            timeout = float(updates["render_timeout"])
            if timeout <= 0:
                raise ValueError("render_timeout must be positive")
            updates["render_timeout"] = timeout
        if "print_background" in updates:
            updates["print_background"] = bool(updates["print_background"])

        margins = payload.get("margins", payload.get("margin"))
        if isinstance(margins, str):
            updates["margins"] = PageMargins.uniform(margins)
        elif isinstance(margins, Mapping):
            updates["margins"] = replace(
                PageMargins(),
                **{side: str(margins[side]) for side in ("top", "right", "bottom", "left") if side in margins},
            )

        browser_args = payload.get("browser_args", payload.get("browserArgs"))
        if browser_args is not None:
            updates["browser_args"] = tuple(str(arg) for arg in browser_args)

        return replace(options, **updates)

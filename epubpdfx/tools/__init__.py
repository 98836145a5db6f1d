"""Namespace for pluggable epubpdfx tools."""

from __future__ import annotations

from .common.pipeline import registry


def load_builtin_plugins() -> None:
    from .converter import convert  # noqa: F401  # register the convert tool


__all__ = ["registry", "load_builtin_plugins"]

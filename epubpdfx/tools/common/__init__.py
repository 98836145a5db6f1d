"""Shared building blocks for epubpdfx tools."""

from .interfaces import BaseTool, ConversionContext, ToolFactory
from .pipeline import ToolRegistry, register_tool, registry

__all__ = ["BaseTool", "ConversionContext", "ToolFactory", "ToolRegistry", "register_tool", "registry"]

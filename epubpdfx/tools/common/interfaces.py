"""Core interfaces and context objects shared by epubpdfx tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from ...config import ConversionOptions
from ...core.utils import resolve_path


@dataclass
class ConversionContext:
    """Holds shared execution state for a tool invocation."""

    input_path: Path | None = None
    output_path: Path | None = None
    resources: dict[str, Any] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.input_path, (str, Path)) and self.input_path is not None:
            self.input_path = resolve_path(self.input_path)
        if isinstance(self.output_path, (str, Path)) and self.output_path is not None:
            self.output_path = resolve_path(self.output_path)

    def options(self) -> ConversionOptions:
        return ConversionOptions.from_mapping(self.config)


class BaseTool:
    """Base class for all pluggable epubpdfx tools."""

    name: str

    def __init__(self, context: ConversionContext) -> None:
        self.context = context

    def run(self) -> Any:  # pragma: no cover - to be implemented by subclasses
        raise NotImplementedError


ToolFactory = Callable[[ConversionContext], BaseTool]

"""Plugin exposing EPUB → PDF conversion through the registry."""

from __future__ import annotations

from ...core.utils import get_logger
from ...exceptions import InvalidPackageError
from ...pipeline import convert_epub_to_pdf
from ...types import ConversionResult
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool

LOGGER = get_logger("epubpdfx.tools.convert")


@register_tool("convert")
class ConvertTool(BaseTool):
    name = "convert"

    def run(self) -> ConversionResult:
        context = self.context
        if context.input_path is None:
            raise InvalidPackageError("No input EPUB provided")

        output = context.output_path
        if output is None:
            output = context.input_path.with_suffix(".pdf")

        LOGGER.debug("Converting %s into %s", context.input_path, output)
        result = convert_epub_to_pdf(
            context.input_path,
            output,
            options=context.options(),
            session_factory=context.resources.get("session_factory"),
        )
        context.resources["result"] = result
        context.resources["output_path"] = output
        return result

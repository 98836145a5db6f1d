"""Command line interface for the epubpdfx converter."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from ..exceptions import EpubPdfError
from ..tools import load_builtin_plugins
from ..tools.common.interfaces import ConversionContext
from ..tools.common.pipeline import registry
from .commands import convert

COMMAND_MODULES = [convert]


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="epubpdfx", description="EPUB to PDF converter")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True
    for module in COMMAND_MODULES:
        module.configure_parser(subparsers)
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    logging.getLogger("epubpdfx").setLevel(logging.DEBUG if verbose else logging.INFO)


def main(argv: Sequence[str] | None = None) -> object:
    load_builtin_plugins()
    parser = _create_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    context: ConversionContext = args.build_context(args)
    tool = registry.create(args.tool_name, context)
    try:
        result = tool.run()
    except (EpubPdfError, ValueError) as exc:
        print(f"epubpdfx: error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    output = context.resources.get("output_path")
    print(f"Wrote {output} ({result.page_count} pages, {len(result.chapters)} chapters)")
    return result


if __name__ == "__main__":  # pragma: no cover
    main()

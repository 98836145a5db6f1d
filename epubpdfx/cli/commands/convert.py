"""CLI helpers for converting EPUBs."""

from __future__ import annotations

from argparse import ArgumentParser, _SubParsersAction

from ...tools.common.interfaces import ConversionContext


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("convert", help="Convert an EPUB into a single PDF")
    parser.add_argument("input", help="Input EPUB file")
    parser.add_argument("output", nargs="?", help="Output PDF path (defaults to the input name)")
    parser.add_argument("--page-format", default=None, help="Paper format such as A4 or Letter")
    parser.add_argument("--margin", default=None, help="Margin applied to every side, e.g. 20mm")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each chapter to finish rendering",
    )
    parser.add_argument(
        "--no-background",
        action="store_true",
        help="Do not print CSS backgrounds",
    )
    parser.set_defaults(tool_name="convert", build_context=_build_context)


def _build_context(args) -> ConversionContext:
    config: dict[str, object] = {
        "page_format": args.page_format,
        "margins": args.margin,
        "render_timeout": args.timeout,
    }
    if args.no_background:
        config["print_background"] = False
    return ConversionContext(
        input_path=args.input,
        output_path=args.output,
        config={key: value for key, value in config.items() if value is not None},
    )

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys

from .config import load_settings
from .errors import GogenError
from .generator import Generator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gogen",
        description="Generate code from a Go interface or struct using a template.",
    )
    parser.add_argument("name", help="Name of the Go type to be parsed.")
    parser.add_argument("--template-file", "-t", required=True, help="Path to the template file.")
    parser.add_argument("--output", "-o", default=None, help="Path to the output file (default: stdout).")
    parser.add_argument("--dir", "-d", default=".", help="Path to the Go package directory (default: .).")
    parser.add_argument("--format", action="store_true", help="Format the output with gofmt.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    g = Generator(
        name=args.name,
        dir=args.dir,
        template_file=args.template_file,
        output=args.output,
        format=bool(args.format),
        settings=settings,
    )
    try:
        g.run()
    except GogenError as e:
        print(f"gogen: {e}", file=sys.stderr)
        return 1
    return 0


def _version() -> str:
    try:
        return importlib.metadata.version("gogen")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"

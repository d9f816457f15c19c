from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from pathlib import Path

from .errors import GoMoqError
from .log import configure_logging


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="gomoq")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="Print gomoq version.")

    p_mock = sub.add_parser("mock", help="Generate mocks for Go interfaces.")
    p_mock.add_argument("src", help="Go package directory containing the interfaces.")
    p_mock.add_argument("interfaces", nargs="*", help="Interface names to mock, in output order.")
    p_mock.add_argument("--out", default=None, help="Output .go file path (default: stdout).")
    p_mock.add_argument(
        "--pkg",
        default=None,
        help="Package name of the generated file (default: the package found in SRC).",
    )
    p_mock.add_argument("--no-fmt", action="store_true", help="Do not run gofmt on the generated source.")
    p_mock.add_argument("-v", "--verbose", action="store_true", help="Log resolver activity to stderr.")

    args = parser.parse_args(argv)
    if args.cmd == "version":
        try:
            print(importlib.metadata.version("gomoq"))
        except importlib.metadata.PackageNotFoundError:
            # Source checkouts without an installed distribution.
            print("0.0.0")
        return

    if args.cmd == "mock":
        from .gofmt import format_source
        from .mocker import Mocker

        configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
        try:
            src = Mocker(args.src, args.pkg).render(*args.interfaces)
            if not args.no_fmt:
                src = format_source(src)
        except GoMoqError as e:
            print(f"gomoq: {e}", file=sys.stderr)
            raise SystemExit(1) from e

        if args.out:
            out_file = Path(args.out)
            out_file.parent.mkdir(parents=True, exist_ok=True)
            out_file.write_text(src, encoding="utf-8")
        else:
            sys.stdout.write(src)
        return

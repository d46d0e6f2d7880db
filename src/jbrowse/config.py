"""Runtime configuration built from the command line."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field

from .colorize import DEFAULT_SCHEME, ColorScheme

WALK_TIMEOUT = 30.0


@dataclass
class BrowserConfig:
    root: str = "."
    extensions: tuple[str, ...] = (".json",)
    walk_timeout: float = WALK_TIMEOUT
    indent: int = 2
    log_dir: str = "."
    scheme: ColorScheme = field(default=DEFAULT_SCHEME)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jbrowse",
        description="Browse, search and compare JSON files in the terminal",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="directory to scan for JSON files (default: current directory)",
    )
    parser.add_argument(
        "--log-dir",
        default=".",
        help="where info.log and error.log are written",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=WALK_TIMEOUT,
        help="seconds allowed for the directory scan",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="indentation used when pretty-printing",
    )
    return parser


def parse_config(argv: list[str] | None = None) -> BrowserConfig:
    args = build_parser().parse_args(argv)
    return BrowserConfig(
        root=args.directory,
        walk_timeout=args.timeout,
        indent=max(0, args.indent),
        log_dir=args.log_dir,
    )

"""
globcat: concatenate the files matching a set of globs, for pasting into an LLM chat.

Overview
--------
Walks a directory tree (honoring `.gitignore`/`.ignore` files and skipping hidden
entries), keeps the regular files matching the include patterns and none of the
exclude patterns, and concatenates them as labeled blocks:

    [file name]: src/app.py
    [file content begin]
    ...
    [file content end]

The result goes to the clipboard (with a short summary on stdout) or to stdout.

Usage
-----
Run `python -m globcat.cli --help` for full options. Common examples:
    - Every Python file, anywhere below the current directory:
        globcat "*.py"

    - Markdown files except drafts, printed to stdout:
        globcat "*.md" "!draft_*" --output stdout

    - Everything but tests, two levels deep, from another root:
        globcat "!tests/**" --root ~/projects/app --max-depth 2
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from globcat import __version__
from globcat.config import OutputDestination
from globcat.exceptions import GlobcatError
from globcat.file_discovery import select_files, walk_tree
from globcat.logging import logger, setup_logging
from globcat.output_construction import aggregate
from globcat.output_dispatch import dispatch
from globcat.pattern_compilation import compile_patterns
from globcat.settings import Settings

if TYPE_CHECKING:
    from collections.abc import Sequence


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from e
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="globcat",
        description="Concatenate files matching glob patterns to the clipboard or stdout.",
    )
    p.add_argument(
        "patterns",
        nargs="*",
        default=[],
        help="Glob patterns to match files (a leading '!' excludes; supports ~ and $VAR).",
    )
    p.add_argument(
        "--max-depth",
        type=_non_negative_int,
        default=None,
        help="Set the maximum depth for directory traversal.",
    )
    p.add_argument("--root", type=str, default=".", help="Root directory for file search.")
    p.add_argument(
        "--output",
        type=str,
        choices=[d.value for d in OutputDestination],
        default=OutputDestination.CLIPBOARD.value,
        help="Choose the output destination.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output.")
    p.add_argument("--hidden", action="store_true", help="Include hidden files and directories.")
    p.add_argument("--no-ignore", action="store_true", help="Do not read .gitignore/.ignore files.")
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    return Settings(**vars(args))


def run(settings: Settings) -> None:
    """Run the whole pipeline: compile, walk, select, aggregate, dispatch.

    Args:
        settings (Settings): the parsed command-line settings

    Raises:
        GlobcatError: on pattern, traversal or clipboard failures.
    """
    include, exclude = compile_patterns(settings.patterns)

    logger.debug("Searching in root: %s", settings.root)
    entries = walk_tree(
        settings.root,
        settings.max_depth,
        hidden=settings.hidden,
        ignore_files=not settings.no_ignore,
    )
    files = select_files(entries, settings.root, include, exclude)
    logger.debug("Total matching files: %d", len(files))

    buffer = aggregate(files, settings.root)
    dispatch(buffer, files, settings.output)


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    setup_logging(settings.log_file or None, verbose=settings.verbose)

    try:
        run(settings)
    except GlobcatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

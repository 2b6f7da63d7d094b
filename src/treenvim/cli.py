"""CLI entry point for treenvim — prints the tree view's lines without an editor."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from treenvim import TreeNvimError
from treenvim.config import TreeConfig
from treenvim.formatter.icons import StaticIconProvider
from treenvim.formatter.line import LineFormatter
from treenvim.lister import PROVIDERS, make_provider
from treenvim.navigation import NavigationContext


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``treenvim`` command.
    """
    parser = argparse.ArgumentParser(
        prog="treenvim",
        description="print the tree view listing of a directory",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Root directory to list (default: current directory)",
    )
    parser.add_argument(
        "-L",
        "--level",
        type=int,
        default=1,
        dest="limit",
        help="Depth limit (default: 1)",
    )
    parser.add_argument(
        "--provider",
        choices=sorted(PROVIDERS),
        default="scan",
        help="Listing provider (default: scan)",
    )
    parser.add_argument(
        "--gitignore",
        action="store_true",
        dest="respect_gitignore",
        help="Hide entries matched by .gitignore",
    )
    parser.add_argument(
        "-I",
        "--exclude",
        action="append",
        default=[],
        dest="patterns",
        help="Exclude entries matching pattern (can be specified multiple times)",
    )
    parser.add_argument(
        "--icons",
        action="store_true",
        help="Prefix entries with + (directory) or - (file)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log provider invocations to stderr",
    )
    return parser


def _resolve_root(directory: str) -> Path:
    """Resolve directory and validate it is a directory.

    Raises:
        TreeNvimError: If directory does not exist or is not a directory.
    """
    root = Path(directory).resolve()
    if not root.is_dir():
        raise TreeNvimError(f"'{directory}' is not a directory")
    return root


def _run_with_args(args: argparse.Namespace) -> str:
    """List the directory described by ``args`` and return the display lines.

    Raises:
        TreeNvimError: On any user-facing validation or listing error.
    """
    root = _resolve_root(args.directory)
    config = TreeConfig.from_mapping(
        {
            "limit": args.limit,
            "provider": args.provider,
            "respect_gitignore": args.respect_gitignore,
            "exclude": list(args.patterns),
            "icons_enabled": args.icons,
        }
    )
    formatter = LineFormatter(StaticIconProvider() if config.icons_enabled else None, config.icons_enabled)
    context = NavigationContext(
        make_provider(config.provider, config.listing_options),
        formatter,
        root,
        config.limit,
    )
    snapshot = context.open()
    assert snapshot is not None
    return "\n".join(snapshot.display_lines)


def run_treenvim(argv: list[str] | None = None) -> str:
    """Run treenvim with provided CLI args and return formatted output.

    Args:
        argv: Command-line argument list without program name.

    Returns:
        str: One display line per entry.

    Raises:
        TreeNvimError: On any user-facing validation or listing error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_with_args(args)


def main() -> None:
    """Run the CLI entry point with process arguments.

    Exits with code 1 on user-facing errors.
    """
    parser = build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        output = _run_with_args(args)
    except TreeNvimError as exc:
        sys.stderr.write(f"treenvim: {exc}\n")
        sys.exit(1)

    if output:
        sys.stdout.write(output + "\n")

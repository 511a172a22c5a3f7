from __future__ import annotations

import argparse
import logging
from typing import Sequence

from rich.console import Console

from . import __version__
from .codegen.cli_integration import create_codegen_subparsers
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the schemagen argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="schemagen",
        description="Generate source code from database schemas",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default: WARNING)",
    )
    parser.add_argument("--log-file", metavar="FILE", help="Also log to FILE")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    create_codegen_subparsers(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the schemagen command line.

    Args:
        argv: Arguments to parse (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, 1 for failure, 2 for usage errors).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(getattr(logging, args.log_level), log_file=args.log_file)

    if not getattr(args, "func", None):
        parser.print_help()
        return 2

    logger.debug("Running command: %s", args.command)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        Console(stderr=True).print("[yellow]Interrupted[/yellow]")
        return 130
    except Exception as e:
        logger.exception("Unexpected error in command %s", args.command)
        Console(stderr=True).print(f"[red]✗ Unexpected error:[/red] {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

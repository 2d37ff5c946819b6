"""buildstreak - Daily build success/fail counter for the tmux status line.

Entry point for the ``buildstreak`` command.

    buildstreak init [path]   create a store and point this directory at it
    buildstreak success       record a passing build
    buildstreak fail          record a failing build
    buildstreak status        print today's tally
    buildstreak reset         zero today's tally
    buildstreak tmux          print a tmux status segment (alias: render)
"""

import argparse
import logging
import sys
from functools import partial
from pathlib import Path

from buildstreak.core.config import BuildStreakError
from buildstreak.core.operations import OPERATIONS, StoreOptions, init_store

logger = logging.getLogger("buildstreak")

RENDER_COMMANDS = ("tmux", "render")


def setup_logging(debug: bool = False) -> None:
    """Configure logging to stderr; stdout is reserved for command output."""
    level = logging.DEBUG if debug else logging.WARNING
    format_str = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=format_str,
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits 1 on usage errors like every other failure."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(
        prog="buildstreak",
        description="buildstreak - daily build success/fail counter",
    )
    parser.add_argument(
        "command",
        nargs="?",
        help="init, success, fail, status, reset or tmux",
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="Parent directory for the store (init only)",
    )
    parser.add_argument(
        "--global",
        dest="use_global",
        action="store_true",
        help="Use the shared store in the system temp directory",
    )
    parser.add_argument(
        "--no-lock",
        dest="lock",
        action="store_false",
        help="Do not lock the store while updating",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    """Run the selected command.

    Returns:
        Exit code (0 for success).
    """
    if args.command is None:
        print("Mode missing", file=sys.stderr)
        return 1

    options = StoreOptions(use_global=args.use_global, lock=args.lock)

    if args.command == "init":
        if args.use_global:
            print("init cannot be combined with --global", file=sys.stderr)
            return 1
        operation = partial(init_store, base_path=args.path)
    elif args.command in OPERATIONS:
        if args.path is not None:
            print(f"Unexpected argument for {args.command}: {args.path}", file=sys.stderr)
            return 1
        operation = OPERATIONS[args.command]
    else:
        print("Invalid command", file=sys.stderr)
        return 1

    logger.debug("Running %s", args.command)
    try:
        output = operation(options)
    except (BuildStreakError, OSError) as e:
        print(repr(e), file=sys.stderr)
        return 1

    if args.command in RENDER_COMMANDS:
        print(output, end="")
    elif output is not None:
        print(output)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)
    sys.exit(run(args))


if __name__ == "__main__":
    main()

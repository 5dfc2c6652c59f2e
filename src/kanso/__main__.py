"""Entry point for kanso CLI."""

import argparse
import logging
import sys
from pathlib import Path

from kanso.constants import DEFAULT_BOARD

NOUNS = {"init", "board", "list", "card", "config", "web"}


def _run_tui(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="kanso", description="Open a board in the terminal")
    parser.add_argument("path", nargs="?", default=".", help="Path to git repository (default: .)")
    parser.add_argument("--board", default=DEFAULT_BOARD, help=f"Board ID (default: {DEFAULT_BOARD})")
    args = parser.parse_args(argv)

    from kanso.ui import KansoApp

    app = KansoApp(Path(args.path).resolve(), board_id=args.board)
    app.run()


def main():
    # No subcommand or non-noun argument = TUI mode
    if len(sys.argv) < 2 or (sys.argv[1] not in NOUNS and sys.argv[1] not in ("-h", "--help")):
        _run_tui(sys.argv[1:])
        return

    from kanso.cli import build_parser

    parser = build_parser()
    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
            stream=sys.stderr,
            level=logging.DEBUG,
        )

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()

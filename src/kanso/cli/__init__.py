"""CLI argument parser and dispatch for kanso."""

import argparse

from kanso.cli.board import board_add, board_list, board_show
from kanso.cli.card import card_add, card_list, card_move, card_move_all
from kanso.cli.config import config_get, config_set
from kanso.cli.init import init_board
from kanso.cli.lists import list_add, list_ls, list_move
from kanso.cli.web import web
from kanso.constants import DEFAULT_BOARD


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo", default=".", help="Path to git repository (default: .)")
    common.add_argument("--board", default=DEFAULT_BOARD, help=f"Board ID (default: {DEFAULT_BOARD})")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")

    parser = argparse.ArgumentParser(
        prog="kanso",
        description="Kanban boards with drag-and-drop ordering, stored in git",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- init ---
    init_p = nouns.add_parser("init", help="Initialize kanso boards", parents=[common])
    init_p.set_defaults(func=init_board)

    # --- board ---
    board_p = nouns.add_parser("board", help="Board operations", parents=[common])
    board_verbs = board_p.add_subparsers(dest="verb")

    board_ls_p = board_verbs.add_parser("ls", help="List boards", parents=[common])
    board_ls_p.set_defaults(func=board_list)

    board_show_p = board_verbs.add_parser("show", help="Show board summary", parents=[common])
    board_show_p.set_defaults(func=board_show)

    board_add_p = board_verbs.add_parser("add", help="Create a board", parents=[common])
    board_add_p.add_argument("title", help="Board title")
    board_add_p.add_argument("--id", help="Board ID (default: derived from title)")
    board_add_p.set_defaults(func=board_add)

    # board with no verb = show
    board_p.set_defaults(func=board_show)

    # --- list ---
    list_p = nouns.add_parser("list", help="List operations", parents=[common])
    list_verbs = list_p.add_subparsers(dest="verb")

    list_ls_p = list_verbs.add_parser("ls", help="Show lists in order", parents=[common])
    list_ls_p.set_defaults(func=list_ls)

    list_add_p = list_verbs.add_parser("add", help="Append a list", parents=[common])
    list_add_p.add_argument("title", help="List title")
    list_add_p.set_defaults(func=list_add)

    list_move_p = list_verbs.add_parser("move", help="Move a list", parents=[common])
    list_move_p.add_argument("id", help="List ID")
    list_move_p.add_argument("--position", type=int, help="New position (1-indexed, default: last)")
    list_move_p.add_argument("--to-board", dest="to_board", help="Move the list, with its cards, to this board")
    list_move_p.set_defaults(func=list_move)

    # list with no verb = ls
    list_p.set_defaults(func=list_ls)

    # --- card ---
    card_p = nouns.add_parser("card", help="Card operations", parents=[common])
    card_verbs = card_p.add_subparsers(dest="verb")

    card_ls_p = card_verbs.add_parser("ls", help="List cards", parents=[common])
    card_ls_p.add_argument("--list", dest="list", help="Filter by list ID")
    card_ls_p.set_defaults(func=card_list)

    card_add_p = card_verbs.add_parser("add", help="Create a card", parents=[common])
    card_add_p.add_argument("title", help="Card title")
    card_add_p.add_argument("--list", dest="list", help="Target list ID (default: first list)")
    card_add_p.set_defaults(func=card_add)

    card_move_p = card_verbs.add_parser("move", help="Move a card", parents=[common])
    card_move_p.add_argument("id", help="Card ID")
    card_move_p.add_argument("--list", dest="list", help="Target list ID (default: current list)")
    card_move_p.add_argument("--to-board", dest="to_board", help="Move the card to this board")
    card_move_p.add_argument("--position", type=int, help="Position in list (1-indexed, default: last)")
    card_move_p.set_defaults(func=card_move)

    card_move_all_p = card_verbs.add_parser("move-all", help="Move every card to another list", parents=[common])
    card_move_all_p.add_argument("source", help="Source list ID")
    card_move_all_p.add_argument("target", help="Target list ID")
    card_move_all_p.set_defaults(func=card_move_all)

    # card with no verb = ls
    card_p.set_defaults(func=card_list, list=None)

    # --- config ---
    config_p = nouns.add_parser("config", help="Read or write [kanso] settings", parents=[common])
    config_verbs = config_p.add_subparsers(dest="verb")

    config_get_p = config_verbs.add_parser("get", help="Show settings", parents=[common])
    config_get_p.add_argument("key", nargs="?", help="Setting name (default: all)")
    config_get_p.set_defaults(func=config_get)

    config_set_p = config_verbs.add_parser("set", help="Change a setting", parents=[common])
    config_set_p.add_argument("key", help="Setting name")
    config_set_p.add_argument("value", help="New value")
    config_set_p.set_defaults(func=config_set)

    # config with no verb = get all
    config_p.set_defaults(func=config_get, key=None)

    # --- web ---
    web_p = nouns.add_parser("web", help="Serve the board in a browser", parents=[common])
    web_p.add_argument("--host", default="localhost", help="Bind address (default: localhost)")
    web_p.add_argument("--port", type=int, default=8617, help="Port (default: 8617)")
    web_p.set_defaults(func=web)

    return parser

"""Handlers for 'kanso board' commands."""

from kanso.cli._common import (
    error,
    fetch_board_or_die,
    format_list_line,
    list_summaries,
    open_store_or_die,
    output_json,
)
from kanso.errors import KansoError


def board_list(args) -> int:
    """List boards on the branch."""
    store = open_store_or_die(args.repo, args.json)
    boards = [{"id": b.id, "title": b.title} for b in store.list_boards()]

    if args.json:
        output_json(boards)
    else:
        for b in boards:
            print(f"{b['id']}  {b['title']}")

    return 0


def board_show(args) -> int:
    """Show board summary: title, lists, card counts."""
    store = open_store_or_die(args.repo, args.json)
    board = fetch_board_or_die(store, args.board, args.json)

    if args.json:
        output_json(board.to_dict())
    else:
        print(board.title)
        for item in list_summaries(board):
            print(format_list_line(item, indent="  "))

    return 0


def board_add(args) -> int:
    """Create a new, empty board."""
    store = open_store_or_die(args.repo, args.json)
    try:
        board = store.create_board(args.title, board_id=args.id)
    except KansoError as e:
        error(str(e), args.json)

    if args.json:
        output_json({"id": board.id, "title": board.title})
    else:
        print(f'Created board "{board.title}" (id {board.id})')

    return 0

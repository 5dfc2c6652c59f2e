"""Handlers for 'kanso list' commands."""

from kanso.cli._common import (
    error,
    fetch_board_or_die,
    find_list,
    format_list_line,
    list_summaries,
    open_store_or_die,
    output_json,
    run_reorder,
)
from kanso.constants import LIST
from kanso.errors import KansoError
from kanso.model.reorder import Transfer, list_drag


def list_ls(args) -> int:
    """List the lists of a board in order."""
    store = open_store_or_die(args.repo, args.json)
    board = fetch_board_or_die(store, args.board, args.json)
    items = list_summaries(board)

    if args.json:
        output_json(items)
    else:
        for item in items:
            print(format_list_line(item))

    return 0


def list_add(args) -> int:
    """Append a new list to the board."""
    store = open_store_or_die(args.repo, args.json)
    try:
        lst = store.add_list(args.board, args.title)
    except KansoError as e:
        error(str(e), args.json)

    if args.json:
        output_json({"id": lst.id, "title": lst.title, "position": lst.position + 1})
    else:
        print(f'Created list "{lst.title}" (id {lst.id})')

    return 0


def list_move(args) -> int:
    """Move a list to a new position, on its board or another one."""
    store = open_store_or_die(args.repo, args.json)
    board = fetch_board_or_die(store, args.board, args.json)
    lst = find_list(board, args.id, args.json)
    if args.to_board and args.to_board != board.id:
        return _list_move_to_board(args, store, board, lst)

    # CLI uses 1-indexed positions, model uses 0-indexed. Default is the end.
    new_index = len(board.lists) - 1 if args.position is None else args.position - 1
    position = new_index + 1

    async def move(dispatcher):
        drag = list_drag(dispatcher.cache.get(args.board), lst.id, new_index)
        return await dispatcher.submit(args.board, drag)

    op = run_reorder(store, args.board, args.json, move)

    if args.json:
        changed = len(op.changes.items) if op else 0
        output_json({"id": lst.id, "title": lst.title, "position": position, "changed": changed})
    elif op is None:
        print(f'List "{lst.title}" is already at position {position}')
    else:
        print(f'Moved list "{lst.title}" to position {position}')

    return 0


def _list_move_to_board(args, store, board, lst) -> int:
    destination = fetch_board_or_die(store, args.to_board, args.json)
    new_index = len(destination.lists) if args.position is None else args.position - 1
    transfer = Transfer(LIST, lst.id, board.id, destination.id, new_index)

    op = run_reorder(store, board.id, args.json, lambda dispatcher: dispatcher.transfer(transfer))
    position = new_index + 1

    if args.json:
        output_json({"id": op.result, "title": lst.title, "board": destination.id, "position": position})
    else:
        print(f'Moved list "{lst.title}" to board "{destination.title}" position {position} (id {op.result})')

    return 0

"""Handlers for 'kanso card' commands."""

from kanso.cli._common import (
    error,
    fetch_board_or_die,
    find_list,
    open_store_or_die,
    output_json,
    run_reorder,
)
from kanso.constants import CARD
from kanso.errors import KansoError
from kanso.model.reorder import Transfer, card_drag


def card_list(args) -> int:
    """List cards grouped by list."""
    store = open_store_or_die(args.repo, args.json)
    board = fetch_board_or_die(store, args.board, args.json)
    if args.list:
        find_list(board, args.list, args.json)

    lists = [lst for lst in board.lists if not args.list or lst.id == args.list]

    if args.json:
        items = [
            {
                "id": card.id,
                "title": card.title,
                "position": card.position + 1,
                "list": {"id": lst.id, "title": lst.title},
            }
            for lst in lists
            for card in lst.cards
        ]
        output_json(items)
    else:
        for lst in lists:
            print(f"{lst.id}  {lst.title}")
            for card in lst.cards:
                print(f"  {card.id}  {card.title}")

    return 0


def card_add(args) -> int:
    """Create a card at the end of a list (the first list by default)."""
    store = open_store_or_die(args.repo, args.json)
    board = fetch_board_or_die(store, args.board, args.json)
    if args.list:
        lst = find_list(board, args.list, args.json)
    elif board.lists:
        lst = board.lists[0]
    else:
        error(f"Board '{board.id}' has no lists. Add one with 'kanso list add'.", args.json)

    try:
        card = store.add_card(board.id, lst.id, args.title)
    except KansoError as e:
        error(str(e), args.json)

    if args.json:
        output_json(
            {
                "id": card.id,
                "title": card.title,
                "position": card.position + 1,
                "list": {"id": lst.id, "title": lst.title},
            }
        )
    else:
        print(f'Created card {card.id} "{card.title}" in "{lst.title}"')

    return 0


def card_move(args) -> int:
    """Move a card within its list, to another list, or to another board."""
    store = open_store_or_die(args.repo, args.json)
    board = fetch_board_or_die(store, args.board, args.json)
    found = board.find_card(args.id)
    if found is None:
        error(f"Card '{args.id}' not found.", args.json)
    if args.to_board and args.to_board != board.id:
        return _card_move_to_board(args, store, board)
    source, _index = found
    target = find_list(board, args.list, args.json) if args.list else source

    # CLI uses 1-indexed positions, model uses 0-indexed. Default is the end.
    if args.position is not None:
        new_index = args.position - 1
    elif target.id == source.id:
        new_index = len(target.cards) - 1
    else:
        new_index = len(target.cards)

    async def move(dispatcher):
        drag = card_drag(dispatcher.cache.get(args.board), args.id, target.id, new_index)
        return await dispatcher.submit(args.board, drag)

    op = run_reorder(store, args.board, args.json, move)
    position = new_index + 1

    if args.json:
        changed = len(op.changes.items) if op else 0
        output_json(
            {
                "id": args.id,
                "list": {"id": target.id, "title": target.title},
                "position": position,
                "changed": changed,
            }
        )
    elif op is None:
        print(f'Card {args.id} is already at position {position} in "{target.title}"')
    else:
        print(f'Moved card {args.id} to "{target.title}" position {position}')

    return 0


def _card_move_to_board(args, store, board) -> int:
    destination = fetch_board_or_die(store, args.to_board, args.json)
    if args.list:
        target = find_list(destination, args.list, args.json)
    elif destination.lists:
        target = destination.lists[0]
    else:
        error(f"Board '{destination.id}' has no lists. Add one with 'kanso list add'.", args.json)
    new_index = len(target.cards) if args.position is None else args.position - 1
    transfer = Transfer(CARD, args.id, board.id, destination.id, new_index, target.id)

    op = run_reorder(store, board.id, args.json, lambda dispatcher: dispatcher.transfer(transfer))
    position = new_index + 1

    if args.json:
        output_json(
            {
                "id": op.result,
                "board": destination.id,
                "list": {"id": target.id, "title": target.title},
                "position": position,
            }
        )
    else:
        print(f'Moved card {args.id} to "{target.title}" on board "{destination.title}" position {position}')
        if op.result != args.id:
            print(f"Card {args.id} is now card {op.result}")

    return 0


def card_move_all(args) -> int:
    """Move every card of one list to the end of another."""
    store = open_store_or_die(args.repo, args.json)
    board = fetch_board_or_die(store, args.board, args.json)
    source = find_list(board, args.source, args.json)
    target = find_list(board, args.target, args.json)

    async def move(dispatcher):
        return await dispatcher.move_all(args.board, source.id, target.id)

    op = run_reorder(store, args.board, args.json, move)
    # op.before is the board as the dispatcher loaded it, not our earlier fetch
    count = len(op.before.get_list(source.id).cards)

    if args.json:
        output_json({"source": source.id, "target": target.id, "moved": count})
    else:
        cards = "card" if count == 1 else "cards"
        print(f'Moved {count} {cards} from "{source.title}" to "{target.title}"')

    return 0

"""Contract of the authoritative store, and the batch rules every store applies.

A reorder batch names every sibling of each collection it touches, with
its new dense position. A store accepts the batch as a whole or rejects
it as a whole. When the collection changed underneath the client (a
card was added or removed by someone else), the batch no longer covers
it and is rejected; the client rolls back and picks up the new state on
its next fetch. Among complete batches the last one accepted wins.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Sequence

from kanso.constants import LIST
from kanso.errors import InvalidDragError, NotFoundError, RejectedError
from kanso.model.positions import by_position, is_dense
from kanso.model.reorder import CardPosition, ListPosition, Transfer, Transferred, plan_transfer
from kanso.model.snapshot import Board, Card, CardList


class BoardStore:
    """Authoritative store holding durable positions for lists and cards.

    Subclasses implement every method. Reorder methods are atomic: after
    an exception the stored board is unchanged.
    """

    def list_boards(self) -> list[Board]:
        """All boards, without their lists."""
        raise NotImplementedError

    def fetch_board(self, board_id: str) -> Board:
        """Full board with lists and cards ordered by position."""
        raise NotImplementedError

    def create_board(self, title: str, board_id: str | None = None) -> Board:
        raise NotImplementedError

    def add_list(self, board_id: str, title: str) -> CardList:
        """Append a new list at the end of the board."""
        raise NotImplementedError

    def add_card(self, board_id: str, list_id: str, title: str) -> Card:
        """Append a new card at the end of a list."""
        raise NotImplementedError

    def reorder_lists(self, board_id: str, items: Sequence[ListPosition]) -> tuple[ListPosition, ...]:
        """Persist new positions for all of a board's lists."""
        raise NotImplementedError

    def reorder_cards(self, board_id: str, items: Sequence[CardPosition]) -> tuple[CardPosition, ...]:
        """Persist new positions and owning lists for the given cards."""
        raise NotImplementedError

    def move_to_board(self, transfer: Transfer) -> str:
        """Move a list or card to another board, renumbering both.

        Both boards change together or not at all. Returns the id the
        item has on the destination board.
        """
        raise NotImplementedError


def _check_unique(ids: list[str], what: str) -> None:
    dupes = [id_ for id_, n in Counter(ids).items() if n > 1]
    if dupes:
        raise RejectedError(f"Duplicate {what} in batch: {', '.join(dupes)}")


def apply_list_batch(board: Board, items: Sequence[ListPosition]) -> Board:
    """Return board with its lists reordered by items.

    items must name every list on the board exactly once with dense positions.
    """
    if not items:
        raise RejectedError("Empty list batch")
    _check_unique([item.list_id for item in items], "lists")
    for item in items:
        if board.get_list(item.list_id) is None:
            raise NotFoundError(f"List '{item.list_id}' not found on board '{board.id}'")
    missing = set(board.list_ids()) - {item.list_id for item in items}
    if missing:
        raise RejectedError(f"Batch does not cover lists: {', '.join(sorted(missing))}")
    if not is_dense(item.position for item in items):
        raise RejectedError("List positions are not dense")

    positions = {item.list_id: item.position for item in items}
    lists = [replace(lst, position=positions[lst.id]) for lst in board.lists]
    return replace(board, lists=tuple(by_position(lists)))


def apply_card_batch(board: Board, items: Sequence[CardPosition]) -> Board:
    """Return board with the batch's cards placed at their new positions.

    Every list a batch card leaves or enters must be fully covered by
    the batch, and end up with dense positions.
    """
    if not items:
        raise RejectedError("Empty card batch")
    _check_unique([item.card_id for item in items], "cards")

    cards: dict[str, Card] = {card.id: card for card in board.cards()}
    for item in items:
        if item.card_id not in cards:
            raise NotFoundError(f"Card '{item.card_id}' not found on board '{board.id}'")
        if board.get_list(item.list_id) is None:
            raise NotFoundError(f"List '{item.list_id}' not found on board '{board.id}'")

    batch_ids = {item.card_id for item in items}
    affected = {item.list_id for item in items} | {cards[item.card_id].list_id for item in items}

    new_lists = []
    for lst in board.lists:
        if lst.id not in affected:
            new_lists.append(lst)
            continue
        uncovered = [card.id for card in lst.cards if card.id not in batch_ids]
        if uncovered:
            raise RejectedError(f"Batch does not cover list '{lst.id}' (missing {', '.join(uncovered)})")
        members = [
            replace(cards[item.card_id], list_id=lst.id, position=item.position)
            for item in items
            if item.list_id == lst.id
        ]
        if not is_dense(card.position for card in members):
            raise RejectedError(f"Card positions in list '{lst.id}' are not dense")
        new_lists.append(replace(lst, cards=tuple(by_position(members))))
    return replace(board, lists=tuple(new_lists))


def accepted_lists(board: Board) -> tuple[ListPosition, ...]:
    return tuple(ListPosition(lst.id, lst.position) for lst in board.lists)


def accepted_cards(board: Board, items: Sequence[CardPosition]) -> tuple[CardPosition, ...]:
    """Final positions of every card in the lists the batch touched."""
    touched = {item.list_id for item in items}
    return tuple(
        CardPosition(card.id, card.position, lst.id) for lst in board.lists if lst.id in touched for card in lst.cards
    )


def apply_transfer(source: Board, destination: Board, transfer: Transfer) -> Transferred:
    """Return both boards after moving the transfer's item between them.

    The item must still be on the source board. Both boards come back
    with dense positions in the collections the item left and entered.
    """
    if transfer.kind == LIST:
        missing = source.get_list(transfer.item_id) is None
    else:
        missing = source.find_card(transfer.item_id) is None
    if missing:
        raise NotFoundError(f"{transfer.kind.capitalize()} '{transfer.item_id}' not found on board '{source.id}'")
    if transfer.list_id is not None and destination.get_list(transfer.list_id) is None:
        raise NotFoundError(f"List '{transfer.list_id}' not found on board '{destination.id}'")
    try:
        return plan_transfer(source, destination, transfer)
    except InvalidDragError as e:
        raise RejectedError(str(e)) from e

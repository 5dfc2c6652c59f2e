"""Reorder coordinator: turn one completed drag into a new snapshot.

Everything here is a pure function of (snapshot, gesture outcome). The
caller decides what to do with the result: the dispatcher installs it
optimistically and persists the change set, the CLI persists it
directly, tests just look at it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from kanso.constants import CARD, LIST
from kanso.errors import InvalidDragError
from kanso.ids import next_id
from kanso.model.positions import move_item, renumber
from kanso.model.snapshot import Board, CardList


@dataclass(frozen=True)
class DragLocation:
    """Where an item sits: a collection id and an index within it.

    For lists the collection is the board, for cards it is a list.
    """

    collection_id: str
    index: int


@dataclass(frozen=True)
class DragResult:
    """Outcome of one drag gesture, as reported by the interface."""

    kind: str
    item_id: str
    source: DragLocation
    destination: DragLocation | None

    @property
    def is_noop(self) -> bool:
        return self.destination == self.source


@dataclass(frozen=True)
class ListPosition:
    list_id: str
    position: int


@dataclass(frozen=True)
class CardPosition:
    card_id: str
    position: int
    list_id: str


@dataclass(frozen=True)
class ChangeSet:
    """Every sibling position in the collections a reorder touched."""

    kind: str
    board_id: str
    items: tuple[ListPosition | CardPosition, ...]

    def list_ids(self) -> list[str]:
        """Ids of the lists whose cards (or whose own positions) changed."""
        if self.kind == LIST:
            return [item.list_id for item in self.items]
        seen: list[str] = []
        for item in self.items:
            if item.list_id not in seen:
                seen.append(item.list_id)
        return seen


@dataclass(frozen=True)
class Reorder:
    snapshot: Board
    changes: ChangeSet


def _check_index(index: int, size: int, what: str) -> None:
    if not 0 <= index < size:
        raise InvalidDragError(f"{what} index {index} out of range (0..{size - 1})")


def _list_changes(board: Board) -> ChangeSet:
    items = tuple(ListPosition(lst.id, lst.position) for lst in board.lists)
    return ChangeSet(kind=LIST, board_id=board.id, items=items)


def _card_changes(board: Board, *lists: CardList) -> ChangeSet:
    items = tuple(CardPosition(card.id, card.position, lst.id) for lst in lists for card in lst.cards)
    return ChangeSet(kind=CARD, board_id=board.id, items=items)


def reorder_lists(board: Board, from_index: int, to_index: int) -> Reorder:
    """Move the list at from_index to to_index and renumber the board's lists."""
    _check_index(from_index, len(board.lists), "source list")
    _check_index(to_index, len(board.lists), "destination list")
    lists = renumber(move_item(board.lists, from_index, to_index))
    snapshot = replace(board, lists=lists)
    return Reorder(snapshot, _list_changes(snapshot))


def reorder_cards(board: Board, list_id: str, from_index: int, to_index: int) -> Reorder:
    """Move a card within one list and renumber that list."""
    lst = _require_list(board, list_id)
    _check_index(from_index, len(lst.cards), "source card")
    _check_index(to_index, len(lst.cards), "destination card")
    updated = replace(lst, cards=renumber(move_item(lst.cards, from_index, to_index)))
    return Reorder(board.with_lists(updated), _card_changes(board, updated))


def move_card(board: Board, source_id: str, from_index: int, destination_id: str, to_index: int) -> Reorder:
    """Move a card from one list to another.

    The card takes the destination list as its owner. Source and
    destination are renumbered independently.
    """
    if source_id == destination_id:
        return reorder_cards(board, source_id, from_index, to_index)
    source = _require_list(board, source_id)
    destination = _require_list(board, destination_id)
    _check_index(from_index, len(source.cards), "source card")
    if not 0 <= to_index <= len(destination.cards):
        raise InvalidDragError(f"destination card index {to_index} out of range (0..{len(destination.cards)})")

    remaining = list(source.cards)
    card = remaining.pop(from_index)
    incoming = list(destination.cards)
    incoming.insert(to_index, replace(card, list_id=destination.id))

    new_source = replace(source, cards=renumber(remaining))
    new_destination = replace(destination, cards=renumber(incoming))
    return Reorder(
        board.with_lists(new_source, new_destination),
        _card_changes(board, new_source, new_destination),
    )


def move_all_cards(board: Board, source_id: str, destination_id: str) -> Reorder:
    """Append every card of source to the end of destination, in order."""
    if source_id == destination_id:
        raise InvalidDragError("Source and destination lists are the same")
    source = _require_list(board, source_id)
    destination = _require_list(board, destination_id)
    if not source.cards:
        raise InvalidDragError(f"List '{source.title or source.id}' has no cards to move")

    moved = [replace(card, list_id=destination.id) for card in source.cards]
    new_source = replace(source, cards=())
    new_destination = replace(destination, cards=renumber([*destination.cards, *moved]))
    return Reorder(
        board.with_lists(new_source, new_destination),
        _card_changes(board, new_source, new_destination),
    )


def _require_list(board: Board, list_id: str) -> CardList:
    lst = board.get_list(list_id)
    if lst is None:
        raise InvalidDragError(f"List '{list_id}' is not on board '{board.id}'")
    return lst


def validate(board: Board, drag: DragResult) -> None:
    """Raise InvalidDragError unless drag describes a move on board."""
    if drag.destination is None:
        raise InvalidDragError(f"Drag of {drag.kind} '{drag.item_id}' has no destination")
    if drag.kind == LIST:
        if drag.source.collection_id != board.id or drag.destination.collection_id != board.id:
            raise InvalidDragError("Lists can only be reordered within their own board")
        _check_index(drag.source.index, len(board.lists), "source list")
        if board.lists[drag.source.index].id != drag.item_id:
            raise InvalidDragError(f"List '{drag.item_id}' is no longer at index {drag.source.index}")
    elif drag.kind == CARD:
        source = _require_list(board, drag.source.collection_id)
        _require_list(board, drag.destination.collection_id)
        _check_index(drag.source.index, len(source.cards), "source card")
        if source.cards[drag.source.index].id != drag.item_id:
            raise InvalidDragError(f"Card '{drag.item_id}' is no longer at index {drag.source.index}")
    else:
        raise InvalidDragError(f"Unknown drag kind '{drag.kind}'")


def plan(board: Board, drag: DragResult) -> Reorder | None:
    """Compute the snapshot and change set for a drag.

    Returns None when the item was dropped where it started.
    """
    validate(board, drag)
    if drag.is_noop:
        return None
    if drag.kind == LIST:
        return reorder_lists(board, drag.source.index, drag.destination.index)
    return move_card(
        board,
        drag.source.collection_id,
        drag.source.index,
        drag.destination.collection_id,
        drag.destination.index,
    )


def list_drag(board: Board, list_id: str, to_index: int) -> DragResult:
    """Build the DragResult for moving a list to to_index."""
    index = board.list_index(list_id)
    if index is None:
        raise InvalidDragError(f"List '{list_id}' is not on board '{board.id}'")
    return DragResult(
        kind=LIST,
        item_id=list_id,
        source=DragLocation(board.id, index),
        destination=DragLocation(board.id, to_index),
    )


def card_drag(board: Board, card_id: str, list_id: str, to_index: int) -> DragResult:
    """Build the DragResult for moving a card into list_id at to_index."""
    found = board.find_card(card_id)
    if found is None:
        raise InvalidDragError(f"Card '{card_id}' is not on board '{board.id}'")
    source, index = found
    return DragResult(
        kind=CARD,
        item_id=card_id,
        source=DragLocation(source.id, index),
        destination=DragLocation(list_id, to_index),
    )


def nudge(board: Board, kind: str, item_id: str, dx: int = 0, dy: int = 0) -> DragResult | None:
    """Translate a one-step keyboard move into a DragResult.

    Lists move left/right (dx). Cards move up/down within their list (dy)
    or into the neighbouring list (dx), keeping their index where
    possible. Returns None when the move would leave the board.
    """
    if kind == LIST:
        index = board.list_index(item_id)
        if index is None:
            raise InvalidDragError(f"List '{item_id}' is not on board '{board.id}'")
        target = index + dx
        if dx == 0 or not 0 <= target < len(board.lists):
            return None
        return list_drag(board, item_id, target)

    found = board.find_card(item_id)
    if found is None:
        raise InvalidDragError(f"Card '{item_id}' is not on board '{board.id}'")
    lst, index = found
    if dx:
        list_index = board.list_index(lst.id) + dx
        if not 0 <= list_index < len(board.lists):
            return None
        target = board.lists[list_index]
        return card_drag(board, item_id, target.id, min(index, len(target.cards)))
    target_index = index + dy
    if dy == 0 or not 0 <= target_index < len(lst.cards):
        return None
    return card_drag(board, item_id, lst.id, target_index)


# --- Moves between boards ---


@dataclass(frozen=True)
class Transfer:
    """Request to move a list, or a card, from one board to another.

    position is the index in the destination collection: the board's
    lists for a list, list_id's cards for a card.
    """

    kind: str
    item_id: str
    board_id: str
    destination_board_id: str
    position: int
    list_id: str | None = None


@dataclass(frozen=True)
class Transferred:
    """Both boards after a transfer, and the id the item took on arrival.

    Ids are only unique within a board, so a moved item whose id is
    already taken on the destination gets the next free one.
    """

    source: Board
    destination: Board
    transfer: Transfer
    new_id: str


def _free_id(id_: str, taken: list[str]) -> str:
    return next_id(taken) if id_ in taken else id_


def transfer_list(source: Board, list_id: str, destination: Board, to_index: int) -> Transferred:
    """Move a list, with its cards, to to_index on another board.

    The source board's remaining lists and the destination board's lists
    are renumbered independently.
    """
    if source.id == destination.id:
        raise InvalidDragError(f"List '{list_id}' is already on board '{destination.id}'")
    index = source.list_index(list_id)
    if index is None:
        raise InvalidDragError(f"List '{list_id}' is not on board '{source.id}'")
    if not 0 <= to_index <= len(destination.lists):
        raise InvalidDragError(f"destination list index {to_index} out of range (0..{len(destination.lists)})")

    lst = source.lists[index]
    new_id = _free_id(lst.id, destination.list_ids())
    taken = [card.id for card in destination.cards()]
    cards = []
    for card in lst.cards:
        card_id = _free_id(card.id, taken)
        taken.append(card_id)
        cards.append(replace(card, id=card_id, list_id=new_id))
    moved = replace(lst, id=new_id, board_id=destination.id, cards=tuple(cards))

    remaining = list(source.lists)
    del remaining[index]
    incoming = list(destination.lists)
    incoming.insert(to_index, moved)
    return Transferred(
        replace(source, lists=renumber(remaining)),
        replace(destination, lists=renumber(incoming)),
        Transfer(LIST, list_id, source.id, destination.id, to_index),
        new_id,
    )


def transfer_card(source: Board, card_id: str, destination: Board, list_id: str, to_index: int) -> Transferred:
    """Move a card into list_id at to_index on another board.

    The list the card leaves and the list it enters are renumbered.
    """
    if source.id == destination.id:
        raise InvalidDragError(f"Card '{card_id}' is already on board '{destination.id}'")
    found = source.find_card(card_id)
    if found is None:
        raise InvalidDragError(f"Card '{card_id}' is not on board '{source.id}'")
    lst, index = found
    target = _require_list(destination, list_id)
    if not 0 <= to_index <= len(target.cards):
        raise InvalidDragError(f"destination card index {to_index} out of range (0..{len(target.cards)})")

    new_id = _free_id(card_id, [card.id for card in destination.cards()])
    remaining = list(lst.cards)
    card = remaining.pop(index)
    incoming = list(target.cards)
    incoming.insert(to_index, replace(card, id=new_id, list_id=target.id))
    return Transferred(
        source.with_lists(replace(lst, cards=renumber(remaining))),
        destination.with_lists(replace(target, cards=renumber(incoming))),
        Transfer(CARD, card_id, source.id, destination.id, to_index, target.id),
        new_id,
    )


def plan_transfer(source: Board, destination: Board, transfer: Transfer) -> Transferred:
    """Apply a Transfer to the two boards it names."""
    if source.id != transfer.board_id or destination.id != transfer.destination_board_id:
        names = f"'{transfer.board_id}' to '{transfer.destination_board_id}'"
        raise InvalidDragError(f"Boards do not match the move from {names}")
    if transfer.kind == LIST:
        return transfer_list(source, transfer.item_id, destination, transfer.position)
    if transfer.kind == CARD:
        if transfer.list_id is None:
            raise InvalidDragError(f"Move of card '{transfer.item_id}' names no destination list")
        return transfer_card(source, transfer.item_id, destination, transfer.list_id, transfer.position)
    raise InvalidDragError(f"Unknown transfer kind '{transfer.kind}'")


"""In-process store, shared by every client in the same process."""

import logging
import threading
from dataclasses import replace
from typing import Sequence

from kanso.errors import NotFoundError, RejectedError
from kanso.ids import next_id, slugify, unique_id
from kanso.model.positions import next_position
from kanso.model.reorder import CardPosition, ListPosition, Transfer
from kanso.model.snapshot import Board, Card, CardList
from kanso.store.base import (
    BoardStore,
    accepted_cards,
    accepted_lists,
    apply_card_batch,
    apply_list_batch,
    apply_transfer,
)

logger = logging.getLogger(__name__)


class MemoryStore(BoardStore):
    """Boards held in a dict, guarded by a lock.

    Calls arrive from worker threads (the dispatcher runs store I/O via
    asyncio.to_thread), so every read-modify-write holds the lock.
    """

    def __init__(self, boards: Sequence[Board] = ()) -> None:
        self._lock = threading.Lock()
        self._boards: dict[str, Board] = {board.id: board for board in boards}

    def _get(self, board_id: str) -> Board:
        board = self._boards.get(board_id)
        if board is None:
            raise NotFoundError(f"Board '{board_id}' not found")
        return board

    def list_boards(self) -> list[Board]:
        with self._lock:
            return [replace(board, lists=()) for board in self._boards.values()]

    def fetch_board(self, board_id: str) -> Board:
        with self._lock:
            return self._get(board_id)

    def create_board(self, title: str, board_id: str | None = None) -> Board:
        with self._lock:
            if board_id in self._boards:
                raise RejectedError(f"Board '{board_id}' already exists")
            board_id = board_id or unique_id(slugify(title), set(self._boards))
            board = Board(id=board_id, title=title)
            self._boards[board_id] = board
            return board

    def add_list(self, board_id: str, title: str) -> CardList:
        with self._lock:
            board = self._get(board_id)
            lst = CardList(
                id=next_id(board.list_ids()),
                board_id=board_id,
                position=next_position(board.lists),
                title=title,
            )
            self._boards[board_id] = replace(board, lists=(*board.lists, lst))
            return lst

    def add_card(self, board_id: str, list_id: str, title: str) -> Card:
        with self._lock:
            board = self._get(board_id)
            lst = board.get_list(list_id)
            if lst is None:
                raise NotFoundError(f"List '{list_id}' not found on board '{board_id}'")
            card = Card(
                id=next_id(card.id for card in board.cards()),
                list_id=list_id,
                position=next_position(lst.cards),
                title=title,
            )
            self._boards[board_id] = board.with_lists(replace(lst, cards=(*lst.cards, card)))
            return card

    def reorder_lists(self, board_id: str, items: Sequence[ListPosition]) -> tuple[ListPosition, ...]:
        with self._lock:
            board = apply_list_batch(self._get(board_id), items)
            self._boards[board_id] = board
            logger.debug("board %s: reordered %d lists", board_id, len(items))
            return accepted_lists(board)

    def reorder_cards(self, board_id: str, items: Sequence[CardPosition]) -> tuple[CardPosition, ...]:
        with self._lock:
            board = apply_card_batch(self._get(board_id), items)
            self._boards[board_id] = board
            logger.debug("board %s: repositioned %d cards", board_id, len(items))
            return accepted_cards(board, items)

    def move_to_board(self, transfer: Transfer) -> str:
        with self._lock:
            source = self._get(transfer.board_id)
            destination = self._get(transfer.destination_board_id)
            moved = apply_transfer(source, destination, transfer)
            self._boards[source.id] = moved.source
            self._boards[destination.id] = moved.destination
            logger.debug("moved %s %s from %s to %s", transfer.kind, transfer.item_id, source.id, destination.id)
            return moved.new_id

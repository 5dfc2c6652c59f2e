"""Immutable ordering snapshot of a board: lists with nested cards.

A snapshot is a value. Holding a reference to one is the same as holding
a copy, so rollback is a plain assignment and comparing two snapshots is
plain equality.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class Card:
    """A card owned by exactly one list."""

    id: str
    list_id: str
    position: int
    title: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "list_id": self.list_id, "position": self.position, "title": self.title}


@dataclass(frozen=True)
class CardList:
    """An ordered list of cards on one board."""

    id: str
    board_id: str
    position: int
    title: str = ""
    cards: tuple[Card, ...] = ()

    def card_ids(self) -> list[str]:
        return [card.id for card in self.cards]

    def index_of(self, card_id: str) -> int | None:
        """Index of card_id in this list, or None."""
        for i, card in enumerate(self.cards):
            if card.id == card_id:
                return i
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "board_id": self.board_id,
            "position": self.position,
            "title": self.title,
            "cards": [card.to_dict() for card in self.cards],
        }


@dataclass(frozen=True)
class Board:
    """Point-in-time copy of one board's lists and cards."""

    id: str
    title: str = ""
    lists: tuple[CardList, ...] = ()

    def list_ids(self) -> list[str]:
        return [lst.id for lst in self.lists]

    def get_list(self, list_id: str) -> CardList | None:
        for lst in self.lists:
            if lst.id == list_id:
                return lst
        return None

    def list_index(self, list_id: str) -> int | None:
        for i, lst in enumerate(self.lists):
            if lst.id == list_id:
                return i
        return None

    def find_card(self, card_id: str) -> tuple[CardList, int] | None:
        """Return (owning list, index) for card_id, or None."""
        for lst in self.lists:
            index = lst.index_of(card_id)
            if index is not None:
                return lst, index
        return None

    def cards(self) -> list[Card]:
        """All cards on the board, list by list."""
        return [card for lst in self.lists for card in lst.cards]

    def with_lists(self, *changed: CardList) -> Board:
        """Return a copy with the given lists swapped in by id."""
        by_id = {lst.id: lst for lst in changed}
        return replace(self, lists=tuple(by_id.get(lst.id, lst) for lst in self.lists))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "lists": [lst.to_dict() for lst in self.lists]}


"""Ordering model: snapshots, positions, cache and the reorder coordinator."""

from kanso.model.cache import OrderingCache
from kanso.model.positions import is_dense, move_item, next_position, renumber
from kanso.model.reorder import (
    CardPosition,
    ChangeSet,
    DragLocation,
    DragResult,
    ListPosition,
    Reorder,
    Transfer,
    Transferred,
    card_drag,
    list_drag,
    move_all_cards,
    move_card,
    nudge,
    plan,
    plan_transfer,
    reorder_cards,
    reorder_lists,
    transfer_card,
    transfer_list,
)
from kanso.model.snapshot import Board, Card, CardList

__all__ = [
    "Board",
    "Card",
    "CardList",
    "CardPosition",
    "ChangeSet",
    "DragLocation",
    "DragResult",
    "ListPosition",
    "OrderingCache",
    "Reorder",
    "Transfer",
    "Transferred",
    "card_drag",
    "is_dense",
    "list_drag",
    "move_all_cards",
    "move_card",
    "move_item",
    "next_position",
    "nudge",
    "plan",
    "plan_transfer",
    "renumber",
    "reorder_cards",
    "reorder_lists",
    "transfer_card",
    "transfer_list",
]

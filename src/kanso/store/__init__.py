"""Authoritative stores for board ordering."""

from kanso.store.base import BoardStore, apply_card_batch, apply_list_batch, apply_transfer
from kanso.store.gitstore import GitStore
from kanso.store.memory import MemoryStore

__all__ = ["BoardStore", "GitStore", "MemoryStore", "apply_card_batch", "apply_list_batch", "apply_transfer"]

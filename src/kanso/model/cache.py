"""Local ordering cache: the snapshots the interface renders from.

One entry per board being viewed. An entry holds either the last
confirmed snapshot, or a single optimistic snapshot layered on it that
is waiting for the store to confirm or reject it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from kanso.errors import NotCachedError, PendingChangeError
from kanso.model.snapshot import Board

logger = logging.getLogger(__name__)

Callback = Callable[["Board | None", "Board | None"], None]


@dataclass
class _Entry:
    snapshot: Board
    revision: int = 0
    pending: bool = False


class OrderingCache:
    """Snapshots keyed by board id, with change notification.

    Every change of snapshot bumps the board's revision. Watchers receive
    (old, new) snapshots; new is None when the board is discarded.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._watchers: dict[str, list[Callback]] = {}

    def __contains__(self, board_id: str) -> bool:
        return board_id in self._entries

    def _entry(self, board_id: str) -> _Entry:
        try:
            return self._entries[board_id]
        except KeyError:
            raise NotCachedError(board_id) from None

    def get(self, board_id: str) -> Board:
        """Current snapshot for rendering, or for taking a rollback copy."""
        return self._entry(board_id).snapshot

    def revision(self, board_id: str) -> int:
        return self._entry(board_id).revision

    def is_pending(self, board_id: str) -> bool:
        """True while an optimistic change awaits confirmation."""
        entry = self._entries.get(board_id)
        return entry is not None and entry.pending

    def load(self, board: Board) -> int:
        """Install a freshly fetched board, creating the entry if needed."""
        return self.replace(board)

    def replace(self, board: Board) -> int:
        """Replace the whole snapshot with a confirmed one."""
        return self._install(board, pending=False)

    def patch(self, board: Board) -> int:
        """Layer an optimistic snapshot on the confirmed one."""
        if self.is_pending(board.id):
            raise PendingChangeError(f"Board '{board.id}' already has an unconfirmed change")
        return self._install(board, pending=True)

    def confirm(self, board_id: str) -> None:
        """Mark the optimistic snapshot as confirmed. It stays as-is.

        A board discarded while its request was in flight has nothing left
        to confirm.
        """
        entry = self._entries.get(board_id)
        if entry is not None:
            entry.pending = False

    def restore(self, board: Board, optimistic: Board | None = None) -> int | None:
        """Roll back to a snapshot taken before the optimistic change.

        With optimistic given, only roll back while that snapshot is still
        the pending one; a board discarded or reloaded since is left alone.
        Returns None when the board is no longer cached.
        """
        entry = self._entries.get(board.id)
        if entry is None:
            return None
        if optimistic is not None and not (entry.pending and entry.snapshot == optimistic):
            logger.debug("board %s: nothing to roll back", board.id)
            return entry.revision
        return self._install(board, pending=False)

    def discard(self, board_id: str) -> None:
        """Forget a board (its view was closed)."""
        entry = self._entries.pop(board_id, None)
        if entry is not None:
            self._emit(board_id, entry.snapshot, None)
        self._watchers.pop(board_id, None)

    def watch(self, board_id: str, callback: Callback) -> Callable[[], None]:
        """Watch a board for snapshot changes. Returns an unwatch callable."""
        self._watchers.setdefault(board_id, []).append(callback)

        def unwatch() -> None:
            callbacks = self._watchers.get(board_id, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unwatch

    def _install(self, board: Board, pending: bool) -> int:
        entry = self._entries.get(board.id)
        if entry is None:
            entry = self._entries[board.id] = _Entry(snapshot=board, revision=1, pending=pending)
            self._emit(board.id, None, board)
            return entry.revision
        old = entry.snapshot
        entry.pending = pending
        if old == board:
            return entry.revision
        entry.snapshot = board
        entry.revision += 1
        logger.debug("board %s at revision %d (pending=%s)", board.id, entry.revision, pending)
        self._emit(board.id, old, board)
        return entry.revision

    def _emit(self, board_id: str, old: Board | None, new: Board | None) -> None:
        for cb in list(self._watchers.get(board_id, ())):
            cb(old, new)

"""Persistence dispatcher: optimistic apply, persist, confirm or roll back.

Each reorder is a small state machine::

    IDLE -> OPTIMISTIC -> CONFIRMED
                       -> ROLLED_BACK

The snapshot taken before the optimistic update is kept on the
operation, so rolling back is a single assignment into the cache.
Operations on one board run one at a time; the next starts only once
the previous one is confirmed or rolled back.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from kanso.constants import LIST
from kanso.errors import InvalidDragError
from kanso.model.cache import OrderingCache
from kanso.model.reorder import ChangeSet, DragResult, Transfer, move_all_cards, plan, plan_transfer
from kanso.model.snapshot import Board
from kanso.store.base import BoardStore

logger = logging.getLogger(__name__)


class OperationState(Enum):
    IDLE = "idle"
    OPTIMISTIC = "optimistic"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


@dataclass
class ReorderOperation:
    """One reorder on its way from the interface to the store.

    others holds (before, after) pairs for further cached boards the
    change touches, such as the destination of a move between boards.
    """

    board_id: str
    before: Board
    after: Board
    changes: ChangeSet | Transfer
    state: OperationState = OperationState.IDLE
    error: BaseException | None = None
    result: Any = None
    others: tuple[tuple[Board, Board], ...] = ()

    def _advance(self, expected: OperationState, new: OperationState) -> None:
        if self.state is not expected:
            raise RuntimeError(f"cannot go from {self.state.value} to {new.value}")
        self.state = new

    def pairs(self) -> tuple[tuple[Board, Board], ...]:
        """(before, after) for every board the operation changes."""
        return ((self.before, self.after), *self.others)

    def apply(self, cache: OrderingCache) -> None:
        """Install the new snapshots before the store has seen them."""
        for _before, after in self.pairs():
            cache.patch(after)
        self._advance(OperationState.IDLE, OperationState.OPTIMISTIC)

    def confirm(self, cache: OrderingCache) -> None:
        for _before, after in self.pairs():
            cache.confirm(after.id)
        self._advance(OperationState.OPTIMISTIC, OperationState.CONFIRMED)

    def rollback(self, cache: OrderingCache, error: BaseException | None) -> None:
        """Put back the snapshots captured before the optimistic update.

        Boards discarded or reloaded in the meantime are left as they are.
        """
        for before, after in self.pairs():
            cache.restore(before, optimistic=after)
        self.error = error
        self._advance(OperationState.OPTIMISTIC, OperationState.ROLLED_BACK)

    @property
    def message(self) -> str:
        """User-facing description of why the move did not stick."""
        if isinstance(self.changes, Transfer):
            what = f"{self.changes.kind} move"
        else:
            what = "list order" if self.changes.kind == LIST else "card order"
        if isinstance(self.error, TimeoutError):
            return f"Saving the {what} timed out; the move was undone"
        return f"Could not save the {what}: {self.error}"


ErrorCallback = Callable[[ReorderOperation], Any]


class Dispatcher:
    """Runs reorders against a store and keeps the cache in step.

    Store calls are blocking and run in worker threads. A failed or
    timed-out request rolls the cache back and reports through
    on_error; nothing is retried.
    """

    def __init__(
        self,
        store: BoardStore,
        cache: OrderingCache | None = None,
        timeout: float = 10.0,
        refresh_after_confirm: bool = True,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.store = store
        self.cache = cache if cache is not None else OrderingCache()
        self.timeout = timeout
        self.refresh_after_confirm = refresh_after_confirm
        self.on_error = on_error
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._refreshes: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, store: BoardStore, config: dict[str, Any], **kwargs) -> Dispatcher:
        """Build a dispatcher from the [kanso] config section."""
        kwargs.setdefault("timeout", float(config["request_timeout"]))
        kwargs.setdefault("refresh_after_confirm", bool(config["refresh_after_confirm"]))
        return cls(store, **kwargs)

    @contextlib.asynccontextmanager
    async def _locked(self, *board_ids: str):
        """Hold the locks of board_ids, always taken in sorted order.

        A board's lock exists only while someone holds or waits for it.
        """
        ids = sorted(set(board_ids))
        for board_id in ids:
            if board_id not in self._locks:
                self._locks[board_id] = asyncio.Lock()
            self._lock_users[board_id] = self._lock_users.get(board_id, 0) + 1
        try:
            async with contextlib.AsyncExitStack() as stack:
                for board_id in ids:
                    await stack.enter_async_context(self._locks[board_id])
                yield
        finally:
            for board_id in ids:
                self._lock_users[board_id] -= 1
                if not self._lock_users[board_id]:
                    del self._lock_users[board_id]
                    del self._locks[board_id]

    def busy(self, board_id: str) -> bool:
        """True while a reorder on board_id has not reached a terminal state."""
        lock = self._locks.get(board_id)
        return lock is not None and lock.locked()

    async def load(self, board_id: str) -> Board:
        """Fetch a board from the store and install it in the cache."""
        board = await asyncio.to_thread(self.store.fetch_board, board_id)
        self.cache.load(board)
        return board

    async def submit(self, board_id: str, drag: DragResult) -> ReorderOperation | None:
        """Apply a completed drag and persist it.

        Returns None for a drop onto the item's own slot. Raises
        InvalidDragError, without touching anything, if the drag does not
        fit the current snapshot.
        """
        async with self._locked(board_id):
            reorder = plan(self.cache.get(board_id), drag)
            if reorder is None:
                logger.debug("board %s: %s %s dropped in place", board_id, drag.kind, drag.item_id)
                return None
            return await self._run(board_id, reorder.snapshot, reorder.changes)

    async def move_all(self, board_id: str, source_id: str, destination_id: str) -> ReorderOperation:
        """Move every card of one list to the end of another."""
        async with self._locked(board_id):
            reorder = move_all_cards(self.cache.get(board_id), source_id, destination_id)
            return await self._run(board_id, reorder.snapshot, reorder.changes)

    async def transfer(self, transfer: Transfer) -> ReorderOperation:
        """Move a list or card from a cached board to another board.

        The destination changes optimistically too when it is cached;
        otherwise it is fetched only to plan the move.
        """
        source_id, destination_id = transfer.board_id, transfer.destination_board_id
        if source_id == destination_id:
            raise InvalidDragError(f"{transfer.kind.capitalize()} '{transfer.item_id}' is already on '{source_id}'")
        async with self._locked(source_id, destination_id):
            source = self.cache.get(source_id)
            cached = destination_id in self.cache
            if cached:
                destination = self.cache.get(destination_id)
            else:
                destination = await asyncio.to_thread(self.store.fetch_board, destination_id)
            moved = plan_transfer(source, destination, transfer)
            others = ((destination, moved.destination),) if cached else ()
            return await self._run(source_id, moved.source, transfer, others)

    async def _run(
        self,
        board_id: str,
        snapshot: Board,
        changes: ChangeSet | Transfer,
        others: tuple[tuple[Board, Board], ...] = (),
    ) -> ReorderOperation:
        op = ReorderOperation(
            board_id=board_id,
            before=self.cache.get(board_id),
            after=snapshot,
            changes=changes,
            others=others,
        )
        op.apply(self.cache)
        try:
            # The worker thread is not interrupted on timeout; a write that
            # lands late is picked up by the next refetch.
            op.result = await asyncio.wait_for(asyncio.to_thread(self._persist, op.changes), self.timeout)
        except asyncio.CancelledError:
            op.rollback(self.cache, None)
            raise
        except Exception as exc:
            op.rollback(self.cache, exc)
            logger.warning("board %s: %s", board_id, op.message)
            self._report(op)
            return op

        op.confirm(self.cache)
        if self.refresh_after_confirm:
            for _before, after in op.pairs():
                self._schedule_refresh(after.id)
        return op

    def _persist(self, changes: ChangeSet | Transfer):
        if isinstance(changes, Transfer):
            new_id = self.store.move_to_board(changes)
            logger.debug(
                "board %s: %s %s is %s on %s",
                changes.board_id,
                changes.kind,
                changes.item_id,
                new_id,
                changes.destination_board_id,
            )
            return new_id
        logger.debug("board %s: saving %d positions", changes.board_id, len(changes.items))
        if changes.kind == LIST:
            return self.store.reorder_lists(changes.board_id, changes.items)
        return self.store.reorder_cards(changes.board_id, changes.items)

    def _report(self, op: ReorderOperation) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(op)
        except Exception:
            logger.exception("error callback failed")

    async def refresh(self, board_id: str) -> bool:
        """Refetch the whole board and replace the cached snapshot.

        The result is dropped, and False returned, if the cache changed
        while the fetch was in flight or a change is still unconfirmed.
        """
        if board_id not in self.cache or self.cache.is_pending(board_id):
            return False
        revision = self.cache.revision(board_id)
        board = await asyncio.to_thread(self.store.fetch_board, board_id)
        if board_id not in self.cache or self.cache.is_pending(board_id):
            return False
        if self.cache.revision(board_id) != revision:
            logger.debug("board %s: dropping stale refetch", board_id)
            return False
        self.cache.replace(board)
        return True

    def _schedule_refresh(self, board_id: str) -> None:
        task = asyncio.create_task(self._background_refresh(board_id))
        self._refreshes.add(task)
        task.add_done_callback(self._refreshes.discard)

    async def _background_refresh(self, board_id: str) -> None:
        try:
            await self.refresh(board_id)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("refresh of board %s failed", board_id)

    async def drain(self) -> None:
        """Wait for scheduled background refreshes to finish."""
        while self._refreshes:
            await asyncio.gather(*list(self._refreshes), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel background refreshes."""
        tasks = list(self._refreshes)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

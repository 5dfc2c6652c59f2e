"""Board screen showing lists and cards from the ordering cache."""

import logging
import time

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.screen import Screen
from textual.widget import Widget
from textual.widgets import Footer, Static

from kanso.constants import CARD, LIST
from kanso.dispatch import Dispatcher
from kanso.errors import KansoError
from kanso.model.reorder import DragResult, card_drag, list_drag, nudge
from kanso.model.snapshot import Board
from kanso.ui.cards import CardWidget
from kanso.ui.drag import DropTarget, ListPlaceholder
from kanso.ui.lists import ListWidget
from kanso.ui.watcher import CacheWatcherMixin

logger = logging.getLogger(__name__)


class BoardScreen(CacheWatcherMixin, DropTarget, Screen):
    """Main board screen showing all lists.

    Never edits the snapshot itself: every gesture becomes a DragResult
    handed to the dispatcher, and the screen re-renders when the cache
    changes (optimistic update, rollback or refetch).
    """

    DEFAULT_CSS = """
    BoardScreen #board-header {
        height: 1;
        padding: 0 1;
        background: $panel;
        text-style: bold;
    }
    BoardScreen #lists {
        overflow-x: auto;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel_drag", "Cancel drag", show=False),
        ("ctrl+r", "refetch", "Refresh"),
    ]

    def __init__(self, dispatcher: Dispatcher, board_id: str, refetch_interval: float = 30):
        self._init_watcher()
        super().__init__()
        self.dispatcher = dispatcher
        self.board_id = board_id
        self.refetch_interval = refetch_interval
        self._active_draggable = None
        self._list_placeholder: ListPlaceholder | None = None
        self._deferred: Board | None = None
        self._last_refetch = time.monotonic()

    @property
    def board(self) -> Board:
        return self.dispatcher.cache.get(self.board_id)

    def compose(self) -> ComposeResult:
        board = self.board
        yield Static(board.title or board.id, id="board-header")
        with Horizontal(id="lists"):
            for lst in board.lists:
                yield ListWidget(lst)
        yield Footer()

    def on_mount(self) -> None:
        self.cache_watch(self.dispatcher.cache, self.board_id, self._on_snapshot)
        self.call_after_refresh(self._focus_first_card)
        self.set_interval(1.0, self._refetch_tick)

    def on_unmount(self) -> None:
        # The watcher mixin's own on_unmount drops the watches afterwards
        self.dispatcher.cache.discard(self.board_id)

    def _focus_first_card(self) -> None:
        for lst in self.query(ListWidget):
            cards = lst.card_widgets()
            if cards:
                cards[0].focus()
                return

    # -- Rendering --

    def _on_snapshot(self, old: Board | None, new: Board | None) -> None:
        if new is None:
            return
        if self._active_draggable is not None:
            # Re-render once the gesture is over
            self._deferred = new
            return
        self._show_snapshot(new)

    def drag_ended(self) -> None:
        if self._deferred is not None:
            board, self._deferred = self._deferred, None
            self._show_snapshot(board)

    def _show_snapshot(self, board: Board) -> None:
        """Reconcile list widgets with a snapshot, reusing widgets by id."""
        focused = self.focused
        self.query_one("#board-header", Static).update(board.title or board.id)
        container = self.query_one("#lists", Horizontal)

        existing = {w.list_id: w for w in self.query(ListWidget)}
        wanted = set(board.list_ids())
        for list_id, widget in existing.items():
            if list_id not in wanted:
                widget.remove()

        widgets = []
        for lst in board.lists:
            widget = existing.get(lst.id)
            if widget is None:
                widget = ListWidget(lst)
                container.mount(widget)
            else:
                widget.update_list(lst)
            widgets.append(widget)

        for prev, widget in zip(widgets, widgets[1:]):
            container.move_child(widget, after=prev)

        if isinstance(focused, CardWidget):
            self.call_after_refresh(self._refocus_card, focused.card_id)

    def _refocus_card(self, card_id: str) -> None:
        """Focus a card by id, wherever it now lives."""
        for card in self.query(CardWidget):
            if card.card_id == card_id:
                card.focus()
                return

    # -- Submitting moves --

    def submit(self, drag: DragResult | None) -> None:
        """Hand a finished gesture to the dispatcher in the background."""
        if drag is None:
            return
        self.run_worker(self._submit(drag), group="reorder")

    async def _submit(self, drag: DragResult) -> None:
        try:
            await self.dispatcher.submit(self.board_id, drag)
        except KansoError as e:
            logger.warning("ignored %s drag of %s: %s", drag.kind, drag.item_id, e)
            self.notify(str(e), severity="warning")
        self._last_refetch = time.monotonic()

    def _build_and_submit(self, build) -> None:
        try:
            drag = build(self.board)
        except KansoError as e:
            self.notify(str(e), severity="warning")
            return
        self.submit(drag)

    def on_list_widget_card_dropped(self, event: ListWidget.CardDropped) -> None:
        event.stop()
        self._build_and_submit(lambda board: card_drag(board, event.card_id, event.list_id, event.index))

    def on_card_widget_nudge_requested(self, event: CardWidget.NudgeRequested) -> None:
        event.stop()
        self._build_and_submit(lambda board: nudge(board, CARD, event.card_id, dx=event.dx, dy=event.dy))

    def on_list_widget_nudge_requested(self, event: ListWidget.NudgeRequested) -> None:
        event.stop()
        self._build_and_submit(lambda board: nudge(board, LIST, event.list_id, dx=event.dx))

    # -- Periodic refetch --

    def _refetch_tick(self) -> None:
        """Called every 1s. Refetches the board once the interval has elapsed."""
        if not self.refetch_interval or self._active_draggable is not None:
            return
        if self.dispatcher.busy(self.board_id) or self.dispatcher.cache.is_pending(self.board_id):
            return
        now = time.monotonic()
        if now - self._last_refetch < self.refetch_interval:
            return
        self._last_refetch = now
        self.run_worker(self._refetch(), group="refetch", exclusive=True)

    async def _refetch(self) -> None:
        try:
            await self.dispatcher.refresh(self.board_id)
        except Exception:
            logger.exception("refresh of board %s failed", self.board_id)

    def action_refetch(self) -> None:
        self._last_refetch = time.monotonic()
        self.run_worker(self._refetch(), group="refetch", exclusive=True)

    # -- Mouse routing: the screen forwards events to the active draggable --

    def on_mouse_move(self, event) -> None:
        if self._active_draggable is not None:
            self._active_draggable._drag_move(event.screen_x, event.screen_y)

    def on_mouse_up(self, event) -> None:
        if self._active_draggable is not None:
            self._active_draggable._drag_finish(event.screen_x, event.screen_y)

    def action_cancel_drag(self) -> None:
        if self._active_draggable is not None:
            self._active_draggable._drag_cancel()

    # -- DropTarget: board accepting list drops --

    def drag_over(self, draggable, x: int, y: int) -> bool:
        if not isinstance(draggable, ListWidget):
            return False
        self._ensure_list_placeholder(self._list_insert_position(draggable, x))
        return True

    def drag_away(self, draggable) -> None:
        if self._list_placeholder is not None and self._list_placeholder.parent is not None:
            self._list_placeholder.remove()
        self._list_placeholder = None

    def try_drop(self, draggable, x: int, y: int) -> bool:
        if not isinstance(draggable, ListWidget):
            return False
        others = [w for w in self.query(ListWidget) if w is not draggable]
        before = self._list_insert_position(draggable, x)
        index = len(others) if before is None else others.index(before)
        self.drag_away(draggable)
        self._build_and_submit(lambda board: list_drag(board, draggable.list_id, index))
        return True

    def _list_insert_position(self, draggable, screen_x: int) -> ListWidget | None:
        """The list the drop would land before, or None for the end."""
        for lst in self.query(ListWidget):
            if lst is draggable:
                continue
            if screen_x < lst.region.x + lst.region.width // 2:
                return lst
        return None

    def _ensure_list_placeholder(self, before: Widget | None) -> None:
        container = self.query_one("#lists", Horizontal)
        if self._list_placeholder is None:
            self._list_placeholder = ListPlaceholder()
            if before is None:
                container.mount(self._list_placeholder)
            else:
                container.mount(self._list_placeholder, before=before)
            return
        last = container.children[-1]
        if before is not None:
            container.move_child(self._list_placeholder, before=before)
        elif last is not self._list_placeholder:
            container.move_child(self._list_placeholder, after=last)

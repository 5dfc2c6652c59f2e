"""List widgets for the board UI."""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Rule, Static

from kanso.model.snapshot import CardList
from kanso.ui.cards import CardWidget
from kanso.ui.drag import CardPlaceholder, DraggableMixin, DropTarget


class ListTitle(Static, can_focus=True):
    """List heading. Focusable so an empty list can still be moved."""

    BINDINGS = [
        ("shift+left", "nudge(-1)", "Move list left"),
        ("shift+right", "nudge(1)", "Move list right"),
    ]

    def action_nudge(self, dx: int) -> None:
        lst = self.parent
        if isinstance(lst, ListWidget):
            self.post_message(ListWidget.NudgeRequested(lst.list_id, dx))


class ListWidget(DraggableMixin, DropTarget, Vertical):
    """A single list on the board, holding its cards in order."""

    DEFAULT_CSS = """
    ListWidget {
        width: 1fr;
        height: auto;
        min-height: 100%;
        min-width: 25;
        max-width: 25;
        padding: 0 1;
        border-right: tall $surface-lighten-1;
    }
    ListWidget.dragging {
        layer: overlay;
        border: solid $primary;
        opacity: 0.8;
    }
    ListWidget > ListTitle {
        width: 100%;
        text-align: center;
        text-style: bold;
    }
    ListWidget > ListTitle:focus {
        background: $primary;
    }
    ListWidget > Rule.-horizontal {
        margin: 0;
    }
    """

    HORIZONTAL_ONLY = True

    class CardDropped(Message):
        """Posted when a card is dropped into this list."""

        def __init__(self, card_id: str, list_id: str, index: int) -> None:
            super().__init__()
            self.card_id = card_id
            self.list_id = list_id
            self.index = index

    class NudgeRequested(Message):
        """Posted when the list should move one step left or right."""

        def __init__(self, list_id: str, dx: int) -> None:
            super().__init__()
            self.list_id = list_id
            self.dx = dx

    def __init__(self, lst: CardList):
        Vertical.__init__(self)
        self._init_draggable()
        self.lst = lst
        self._card_placeholder: CardPlaceholder | None = None

    @property
    def list_id(self) -> str:
        return self.lst.id

    def compose(self) -> ComposeResult:
        yield ListTitle(self.lst.title or self.lst.id, id="list-title")
        yield Rule()
        for card in self.lst.cards:
            yield CardWidget(card)

    def card_widgets(self) -> list[CardWidget]:
        return [c for c in self.children if isinstance(c, CardWidget)]

    def update_list(self, lst: CardList) -> None:
        """Bring title and card children in line with a newer snapshot."""
        if lst.title != self.lst.title:
            self.query_one("#list-title", ListTitle).update(lst.title or lst.id)
        self.lst = lst

        existing = {c.card_id: c for c in self.card_widgets()}
        wanted = {card.id for card in lst.cards}
        for card_id, widget in existing.items():
            if card_id not in wanted:
                widget.remove()

        widgets = []
        for card in lst.cards:
            widget = existing.get(card.id)
            if widget is None:
                widget = CardWidget(card)
                self.mount(widget)
            else:
                widget.update_card(card)
            widgets.append(widget)

        # Reorder to match the snapshot
        after = self.query_one(Rule)
        for widget in widgets:
            self.move_child(widget, after=after)
            after = widget

    # -- DraggableMixin: list being dragged --

    def draggable_make_ghost(self):
        """The list itself is the ghost, lifted onto the overlay layer."""
        return self

    def _lists_container(self) -> Horizontal:
        return self.screen.query_one("#lists", Horizontal)

    def _reposition_ghost(self, x: int, y: int) -> None:
        """Position relative to the scrolling lists container."""
        container = self._lists_container()
        region = container.region
        new_x = (x - self._drag_offset.x) - region.x + container.scroll_x
        new_y = (y - self._drag_offset.y) - region.y + container.scroll_y
        self.styles.offset = (new_x, new_y)

    def _drag_start(self, mouse_pos):
        super()._drag_start(mouse_pos)
        container = self._lists_container()
        region = container.region
        self.styles.offset = (
            self.region.x - region.x + container.scroll_x,
            self.region.y - region.y + container.scroll_y,
        )

    def _drag_cleanup(self) -> None:
        self.styles.offset = (0, 0)
        self._ghost = None
        super()._drag_cleanup()

    def draggable_clicked(self) -> None:
        self.query_one("#list-title", ListTitle).focus()

    # -- DropTarget: list accepting card drops --

    def drag_over(self, draggable, x: int, y: int) -> bool:
        if not isinstance(draggable, CardWidget):
            return False
        self._ensure_card_placeholder(self._card_insert_position(draggable, y))
        return True

    def drag_away(self, draggable) -> None:
        self._remove_placeholder()

    def try_drop(self, draggable, x: int, y: int) -> bool:
        if not isinstance(draggable, CardWidget):
            return False
        index = self._card_index(draggable, self._card_insert_position(draggable, y))
        self._remove_placeholder()
        self.post_message(self.CardDropped(draggable.card_id, self.list_id, index))
        return True

    def _remove_placeholder(self) -> None:
        if self._card_placeholder is not None and self._card_placeholder.parent is not None:
            self._card_placeholder.remove()
        self._card_placeholder = None

    def _card_insert_position(self, draggable, screen_y: int) -> CardWidget | None:
        """The card the drop would land before, or None for the end."""
        for card in self.card_widgets():
            if card is draggable:
                continue
            if screen_y < card.region.y + card.region.height // 2:
                return card
        return None

    def _ensure_card_placeholder(self, before: CardWidget | None) -> None:
        if self._card_placeholder is None or self._card_placeholder.parent is not self:
            self._remove_placeholder()
            self._card_placeholder = CardPlaceholder()
            if before is None:
                self.mount(self._card_placeholder)
            else:
                self.mount(self._card_placeholder, before=before)
            return
        if before is None:
            if self.children[-1] is not self._card_placeholder:
                self.move_child(self._card_placeholder, after=self.children[-1])
        else:
            self.move_child(self._card_placeholder, before=before)

    def _card_index(self, draggable, before: CardWidget | None) -> int:
        """Index the card takes once dropped, counting the other cards only."""
        others = [c for c in self.card_widgets() if c is not draggable]
        if before is None:
            return len(others)
        return others.index(before)

    # -- Keyboard navigation --

    def on_key(self, event) -> None:
        """Arrow keys move focus between cards and across lists."""
        if event.key not in ("up", "down", "left", "right"):
            return
        focused = self.screen.focused
        focusable = [c for c in self.children if c.can_focus]
        if focused not in focusable:
            return
        idx = focusable.index(focused)

        if event.key == "up" and idx > 0:
            focusable[idx - 1].focus()
        elif event.key == "down" and idx < len(focusable) - 1:
            focusable[idx + 1].focus()
        elif event.key in ("left", "right"):
            siblings = [w for w in self.parent.children if isinstance(w, ListWidget)]
            new_idx = siblings.index(self) + (-1 if event.key == "left" else 1)
            if 0 <= new_idx < len(siblings):
                target = [c for c in siblings[new_idx].children if c.can_focus]
                if target:
                    target[min(idx, len(target) - 1)].focus()

        event.prevent_default()
        event.stop()

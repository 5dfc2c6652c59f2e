"""Drag-and-drop plumbing for the board UI.

A DraggableMixin widget owns the gesture while it is in flight; a
DropTarget decides where it lands. Neither touches the model: a target
that accepts a drop posts a message, and the board screen turns it into
a DragResult for the dispatcher.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.geometry import Offset
from textual.widgets import Static

if TYPE_CHECKING:
    from textual.widget import Widget


class DropTarget:
    """Mixin for widgets that accept drops.

    Each hook returns False to ignore the draggable, True to accept it.
    """

    def drag_over(self, draggable: DraggableMixin, x: int, y: int) -> bool:
        return False

    def drag_away(self, draggable: DraggableMixin) -> None:
        """The draggable left this target; remove any placeholder."""

    def try_drop(self, draggable: DraggableMixin, x: int, y: int) -> bool:
        return False


class DraggableMixin:
    """Mixin for widgets that can be picked up with the mouse.

    Subclasses call _init_draggable() in __init__ and implement
    draggable_make_ghost() and draggable_clicked().
    """

    DRAG_THRESHOLD = 2
    HORIZONTAL_ONLY = False

    def _init_draggable(self) -> None:
        self._drag_start_pos: Offset | None = None
        self._dragging = False
        self._ghost: Widget | None = None
        self._drag_offset = Offset(0, 0)
        self._current_target: DropTarget | None = None

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    def on_mouse_down(self, event) -> None:
        if event.button != 1:
            return
        event.stop()
        event.prevent_default()
        self._drag_start_pos = Offset(event.screen_x, event.screen_y)
        self.capture_mouse()

    def on_mouse_move(self, event) -> None:
        if self._drag_start_pos is None:
            return
        event.stop()
        event.prevent_default()
        dx = abs(event.screen_x - self._drag_start_pos.x)
        dy = abs(event.screen_y - self._drag_start_pos.y)
        moved = dx > self.DRAG_THRESHOLD or (not self.HORIZONTAL_ONLY and dy > self.DRAG_THRESHOLD)
        if moved:
            self.release_mouse()
            start, self._drag_start_pos = self._drag_start_pos, None
            self._drag_start(start)

    def on_mouse_up(self, event) -> None:
        event.stop()
        event.prevent_default()
        self.release_mouse()
        if self._drag_start_pos is not None:
            self._drag_start_pos = None
            self.draggable_clicked()

    def _drag_start(self, mouse_pos: Offset) -> None:
        """Lift the widget: make the ghost and hand mouse events to the screen."""
        self._dragging = True
        self.add_class("dragging")
        self.screen.set_focus(None)

        region = self.region
        self._drag_offset = Offset(mouse_pos.x - region.x, mouse_pos.y - region.y)
        self._ghost = self.draggable_make_ghost()
        if self._ghost is not self:
            self._ghost.styles.width = region.width
            self._ghost.styles.offset = (region.x, region.y)
            self.screen.mount(self._ghost)

        self.screen._active_draggable = self
        self.screen.capture_mouse()

    def _drag_move(self, x: int, y: int) -> None:
        self._reposition_ghost(x, y)
        self._update_drop_target(x, y)

    def _reposition_ghost(self, x: int, y: int) -> None:
        if self._ghost is None:
            return
        self._ghost.styles.offset = (x - self._drag_offset.x, y - self._drag_offset.y)

    def _update_drop_target(self, x: int, y: int) -> None:
        """Offer the hover to targets under the cursor until one accepts."""
        for target in self._drop_targets_at(x, y):
            if not target.drag_over(self, x, y):
                continue
            if target is not self._current_target:
                if self._current_target is not None:
                    self._current_target.drag_away(self)
                self._current_target = target
            return
        # Off any accepting target: keep the last placeholder where it is

    def _drag_finish(self, x: int, y: int) -> None:
        """Mouse released: offer the drop to targets, innermost first."""
        self.screen.release_mouse()
        dropped = any(target.try_drop(self, x, y) for target in self._drop_targets_at(x, y))
        if not dropped and self._current_target is not None:
            dropped = self._current_target.try_drop(self, x, y)
        if not dropped:
            self._drag_cancel()
            return
        if self._current_target is not None:
            # The drop may have landed somewhere other than the last hover
            self._current_target.drag_away(self)
            self._current_target = None
        self._drag_cleanup()

    def _drag_cancel(self) -> None:
        self.screen.release_mouse()
        if self._current_target is not None:
            self._current_target.drag_away(self)
            self._current_target = None
        self._drag_cleanup()

    def _drag_cleanup(self) -> None:
        if self._ghost is not None and self._ghost is not self:
            self._ghost.remove()
        self._ghost = None
        self._dragging = False
        self._drag_offset = Offset(0, 0)
        self.remove_class("dragging")
        screen = self.screen
        if hasattr(screen, "_active_draggable"):
            screen._active_draggable = None
        if hasattr(screen, "drag_ended"):
            screen.drag_ended()

    def _drop_targets_at(self, x: int, y: int) -> list[DropTarget]:
        """DropTargets under (x, y), innermost first, ignoring the ghost."""
        targets: list[DropTarget] = []
        for widget, _region in self.screen.get_widgets_at(x, y):
            if self._ghost is not None and self._ghost is not self:
                if widget is self._ghost or self._ghost in widget.ancestors:
                    continue
            candidate = widget
            while candidate is not None:
                if isinstance(candidate, DropTarget) and candidate is not self and candidate not in targets:
                    targets.append(candidate)
                candidate = candidate.parent
        return targets

    def draggable_make_ghost(self) -> Widget:
        raise NotImplementedError

    def draggable_clicked(self) -> None:
        raise NotImplementedError


class DragGhost(Static):
    """Floating copy of the card being dragged."""

    DEFAULT_CSS = """
    DragGhost {
        layer: overlay;
        height: auto;
        padding: 0 1;
        background: $primary;
        border: solid $primary-lighten-2;
    }
    """


class CardPlaceholder(Static):
    """Where a dragged card will land."""

    DEFAULT_CSS = """
    CardPlaceholder {
        width: 100%;
        height: 3;
        margin-bottom: 1;
        border: dashed $primary;
        background: $surface-darken-1;
    }
    """


class ListPlaceholder(Static):
    """Where a dragged list will land."""

    DEFAULT_CSS = """
    ListPlaceholder {
        width: 1fr;
        min-width: 25;
        max-width: 25;
        height: 100%;
        border: dashed $primary;
        background: $surface-darken-1;
    }
    """

"""Card widgets for the board UI."""

from rich.text import Text
from textual.message import Message
from textual.widgets import Static

from kanso.model.snapshot import Card
from kanso.ui.drag import DraggableMixin, DragGhost


def card_label(card: Card) -> Text:
    """Display text for a card: its title, or its id when untitled."""
    if card.title:
        return Text(card.title, overflow="ellipsis")
    return Text(f"#{card.id}", style="dim italic")


class CardWidget(DraggableMixin, Static, can_focus=True):
    """A single card in a list."""

    BINDINGS = [
        ("shift+up", "nudge(0, -1)", "Move up"),
        ("shift+down", "nudge(0, 1)", "Move down"),
        ("shift+left", "nudge(-1, 0)", "Move left"),
        ("shift+right", "nudge(1, 0)", "Move right"),
    ]

    DEFAULT_CSS = """
    CardWidget {
        width: 100%;
        height: auto;
        padding: 0 1;
        margin-bottom: 1;
        background: $surface;
    }
    CardWidget:focus {
        background: $primary;
    }
    CardWidget.dragging {
        display: none;
    }
    """

    class NudgeRequested(Message):
        """Posted when the card should move one step with the keyboard."""

        def __init__(self, card_id: str, dx: int, dy: int) -> None:
            super().__init__()
            self.card_id = card_id
            self.dx = dx
            self.dy = dy

    def __init__(self, card: Card):
        Static.__init__(self, card_label(card))
        self._init_draggable()
        self.card = card

    @property
    def card_id(self) -> str:
        return self.card.id

    def update_card(self, card: Card) -> None:
        """Take a newer snapshot of the same card."""
        if card.title != self.card.title:
            self.update(card_label(card))
        self.card = card

    def action_nudge(self, dx: int, dy: int) -> None:
        self.post_message(self.NudgeRequested(self.card_id, dx, dy))

    def draggable_make_ghost(self):
        return DragGhost(card_label(self.card))

    def draggable_clicked(self) -> None:
        self.focus()

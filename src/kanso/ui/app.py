"""Main Textual application for kanso."""

import asyncio
import logging
from pathlib import Path

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static

from kanso.constants import DEFAULT_BOARD, DEFAULT_LISTS
from kanso.dispatch import Dispatcher, ReorderOperation
from kanso.errors import NotFoundError
from kanso.git import default_config, init_repo, is_git_repo, kanso_config
from kanso.model.cache import OrderingCache
from kanso.store.base import BoardStore
from kanso.store.gitstore import GitStore
from kanso.ui.board import BoardScreen

logger = logging.getLogger(__name__)


class ConfirmInitScreen(ModalScreen[bool]):
    """Modal screen asking to initialize a git repo."""

    CSS = """
    ConfirmInitScreen {
        align: center middle;
    }
    #dialog {
        width: 70;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }
    #message {
        text-align: center;
        margin-bottom: 1;
    }
    #buttons {
        width: 100%;
        height: 3;
        align: center middle;
    }
    Button {
        margin: 0 2;
    }
    """

    def __init__(self, path: Path):
        super().__init__()
        self.path = path

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(f"{self.path} is not a git repository. Create one for your boards?", id="message")
            with Horizontal(id="buttons"):
                yield Button("Yes", id="yes", variant="primary")
                yield Button("No", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")


def ensure_default_board(store: BoardStore, board_id: str) -> None:
    """Create board_id with the starter lists if the store lacks it."""
    if any(b.id == board_id for b in store.list_boards()):
        return
    board = store.create_board(board_id.replace("-", " ").title(), board_id=board_id)
    for title in DEFAULT_LISTS:
        store.add_list(board.id, title)
    logger.info("created board %s", board.id)


class KansoApp(App):
    """Kanban board TUI with optimistic drag-and-drop."""

    TITLE = "kanso"
    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(self, repo_path: Path, board_id: str = DEFAULT_BOARD, store: BoardStore | None = None):
        super().__init__()
        self.repo_path = repo_path
        self.board_id = board_id
        self.store = store
        self.dispatcher: Dispatcher | None = None

    async def on_mount(self) -> None:
        if self.store is not None:
            await self._open_board(default_config())
        elif not is_git_repo(self.repo_path):
            self.push_screen(ConfirmInitScreen(self.repo_path), self._on_init_response)
        else:
            await self._open_git_board()

    async def _on_init_response(self, result: bool) -> None:
        if result:
            init_repo(self.repo_path)
            await self._open_git_board()
        else:
            self.exit()

    async def _open_git_board(self) -> None:
        self.store = GitStore(self.repo_path)
        if self.board_id == DEFAULT_BOARD:
            await asyncio.to_thread(ensure_default_board, self.store, self.board_id)
        await self._open_board(kanso_config(self.repo_path))

    async def _open_board(self, config: dict) -> None:
        """Load the board into a fresh cache and show it."""
        self.dispatcher = Dispatcher.from_config(
            self.store,
            config,
            cache=OrderingCache(),
            on_error=self._on_reorder_failed,
        )
        try:
            await self.dispatcher.load(self.board_id)
        except NotFoundError as e:
            self.exit(return_code=1, message=str(e))
            return
        self.push_screen(BoardScreen(self.dispatcher, self.board_id, refetch_interval=config["refresh_interval"]))

    def _on_reorder_failed(self, op: ReorderOperation) -> None:
        self.notify(op.message, title="Move undone", severity="error")

    async def action_quit(self) -> None:
        """Stop background refetches and quit."""
        if self.dispatcher is not None:
            await self.dispatcher.aclose()
        self.exit()

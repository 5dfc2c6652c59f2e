"""Shared helpers for CLI command handlers."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Awaitable, Callable

from kanso.constants import BRANCH_NAME
from kanso.dispatch import Dispatcher, OperationState, ReorderOperation
from kanso.errors import KansoError
from kanso.git import has_branch, is_git_repo, kanso_config
from kanso.model.snapshot import Board, CardList
from kanso.store.gitstore import GitStore


def open_store_or_die(repo: str, json_mode: bool) -> GitStore:
    """Open the board store in repo. Exit 1 if there is none yet."""
    repo_path = Path(repo).resolve()
    if not is_git_repo(repo_path) or not has_branch(repo_path, BRANCH_NAME):
        error(f"No kanso boards in {repo_path}. Run 'kanso init' first.", json_mode)
    return GitStore(repo_path)


def fetch_board_or_die(store: GitStore, board_id: str, json_mode: bool) -> Board:
    """Fetch a board. Exit 1 listing available boards if not found."""
    try:
        return store.fetch_board(board_id)
    except KansoError as e:
        available = [f"  {b.id}  {b.title}" for b in store.list_boards()]
        error(f"{e}. Available:\n" + "\n".join(available), json_mode)


def find_list(board: Board, list_id: str, json_mode: bool) -> CardList:
    """Lookup list by ID. Exit 1 listing available lists if not found."""
    lst = board.get_list(list_id)
    if lst is not None:
        return lst
    available = [f"  {lst.id}  {lst.title}" for lst in board.lists]
    msg = f"List '{list_id}' not found. Available:\n" + "\n".join(available)
    error(msg, json_mode)


def run_reorder(
    store: GitStore,
    board_id: str,
    json_mode: bool,
    action: Callable[[Dispatcher], Awaitable[ReorderOperation | None]],
) -> ReorderOperation | None:
    """Load the board, run one reorder through a dispatcher, report failure.

    Returns the finished operation, or None if nothing had to move.
    Exits 1 if the reorder was invalid or the store rejected it.
    """
    config = kanso_config(store.repo_path)
    dispatcher = Dispatcher.from_config(store, config, refresh_after_confirm=False)

    async def run() -> ReorderOperation | None:
        await dispatcher.load(board_id)
        return await action(dispatcher)

    try:
        op = asyncio.run(run())
    except KansoError as e:
        error(str(e), json_mode)
    if op is not None and op.state is OperationState.ROLLED_BACK:
        error(op.message, json_mode)
    return op


def list_summaries(board: Board) -> list[dict]:
    """Build list summary dicts from board, positions 1-indexed."""
    return [
        {"id": lst.id, "title": lst.title, "position": lst.position + 1, "cards": len(lst.cards)}
        for lst in board.lists
    ]


def format_list_line(item: dict, indent: str = "") -> str:
    """Format a list summary dict as a text line."""
    cards = "card" if item["cards"] == 1 else "cards"
    return f"{indent}{item['id']}  {item['title']:<16} {item['cards']} {cards}"


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output mutation result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)

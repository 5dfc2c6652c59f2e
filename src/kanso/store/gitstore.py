"""Durable store on a dedicated git branch.

Layout of the branch, one directory per board::

    <board>/index.md              # Board title
    <board>/lists/<list>.md       position in front-matter
    <board>/cards/<card>.md       list and position in front-matter

Every write builds a new commit with git plumbing (the working tree is
never touched) and moves the branch with a compare-and-swap
``update-ref``, so each batch is atomic even with several writers on
the same repository. A writer that loses the race re-reads the tip and
applies its batch again on top.
"""

import logging
import subprocess
from dataclasses import replace
from pathlib import Path
from typing import Callable, Sequence

from git import Repo
from git.objects import Blob, Tree

from kanso.constants import BRANCH_NAME
from kanso.errors import NotFoundError, RejectedError, StoreError
from kanso.ids import next_id, slugify, unique_id
from kanso.model.positions import next_position
from kanso.model.reorder import CardPosition, ListPosition, Transfer
from kanso.model.snapshot import Board, Card, CardList
from kanso.parser import parse_document, serialize_document
from kanso.store.base import (
    BoardStore,
    accepted_cards,
    accepted_lists,
    apply_card_batch,
    apply_list_batch,
    apply_transfer,
)

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
NULL_SHA = "0" * 40


# --- Git plumbing ---


def _git(repo_path: Path, args: list[str], input: str | None = None) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        input=input.encode("utf-8") if input is not None else None,
        capture_output=True,
        check=True,
    )
    return result.stdout.decode("utf-8").strip()


def _hash_object(repo_path: Path, content: str) -> str:
    """Write content to the object store and return the blob hash."""
    return _git(repo_path, ["hash-object", "-w", "--stdin"], input=content)


def _mktree(repo_path: Path, entries: list[tuple[str, str, str, str]]) -> str:
    """Create a tree object from (mode, type, sha, name) entries."""
    lines = [f"{mode} {typ} {sha}\t{name}" for mode, typ, sha, name in entries]
    content = "\n".join(lines) + "\n" if lines else ""
    return _git(repo_path, ["mktree"], input=content)


def _get_ref(repo_path: Path, ref: str) -> str | None:
    """Get the commit hash for a ref, or None if it doesn't exist."""
    result = subprocess.run(
        ["git", "rev-parse", "--verify", "--quiet", ref],
        cwd=repo_path,
        capture_output=True,
    )
    if result.returncode != 0:
        return None
    return result.stdout.decode("utf-8").strip()


def _swap_ref(repo_path: Path, ref: str, new: str, old: str | None) -> bool:
    """Point ref at new only if it still points at old. Returns success."""
    result = subprocess.run(
        ["git", "update-ref", ref, new, old or NULL_SHA],
        cwd=repo_path,
        capture_output=True,
    )
    return result.returncode == 0


# --- Reading ---


def _tree_get(tree: Tree, name: str) -> Blob | Tree | None:
    """Get an item from a tree by name, returning None if not found."""
    try:
        return tree[name]
    except KeyError:
        return None


def _read_blob(blob: Blob) -> str:
    return blob.data_stream.read().decode("utf-8")


def _documents(tree: Tree | None) -> dict[str, tuple[str, dict]]:
    """Parse every .md blob in tree into {stem: (title, meta)}."""
    docs: dict[str, tuple[str, dict]] = {}
    if not isinstance(tree, Tree):
        return docs
    for item in tree:
        if isinstance(item, Blob) and item.name.endswith(".md"):
            docs[item.name[:-3]] = parse_document(_read_blob(item))
    return docs


def _position(meta: dict) -> int:
    try:
        return int(meta.get("position", 0))
    except (TypeError, ValueError):
        return 0


def _sort_key(position: int, id_: str) -> tuple[int, int, str]:
    return position, len(id_), id_


def _load_board(board_id: str, tree: Tree) -> Board:
    """Deserialize one board directory into a snapshot.

    Stored positions only decide order; the snapshot is renumbered so
    hand-edited or damaged positions still load dense.
    """
    index = _tree_get(tree, "index.md")
    title = parse_document(_read_blob(index))[0] if isinstance(index, Blob) else board_id

    list_docs = _documents(_tree_get(tree, "lists"))
    ordered_lists = sorted(list_docs.items(), key=lambda kv: _sort_key(_position(kv[1][1]), kv[0]))

    cards_by_list: dict[str, list[tuple[int, str, str]]] = {list_id: [] for list_id in list_docs}
    for card_id, (card_title, meta) in _documents(_tree_get(tree, "cards")).items():
        list_id = str(meta.get("list", ""))
        if list_id not in cards_by_list:
            logger.warning("board %s: card %s references missing list %r", board_id, card_id, list_id)
            continue
        cards_by_list[list_id].append((_position(meta), card_id, card_title))

    lists = []
    for list_pos, (list_id, (list_title, _meta)) in enumerate(ordered_lists):
        entries = sorted(cards_by_list[list_id], key=lambda e: _sort_key(e[0], e[1]))
        cards = tuple(
            Card(id=card_id, list_id=list_id, position=i, title=card_title)
            for i, (_pos, card_id, card_title) in enumerate(entries)
        )
        lists.append(CardList(id=list_id, board_id=board_id, position=list_pos, title=list_title, cards=cards))
    return Board(id=board_id, title=title, lists=tuple(lists))


# --- Store ---


class GitStore(BoardStore):
    """Boards stored on the ``kanso`` branch of a git repository."""

    def __init__(self, repo_path: str | Path, branch: str = BRANCH_NAME) -> None:
        self.repo_path = Path(repo_path)
        self.branch = branch
        self.ref = f"refs/heads/{branch}"

    def _tip(self) -> str | None:
        return _get_ref(self.repo_path, self.ref)

    def _root(self, tip: str | None) -> Tree | None:
        if tip is None:
            return None
        return Repo(self.repo_path).commit(tip).tree

    @staticmethod
    def _board_tree(root: Tree | None, board_id: str) -> Tree:
        item = _tree_get(root, board_id) if root is not None else None
        if not isinstance(item, Tree):
            raise NotFoundError(f"Board '{board_id}' not found")
        return item

    def list_boards(self) -> list[Board]:
        root = self._root(self._tip())
        if root is None:
            return []
        boards = []
        for item in root:
            if not isinstance(item, Tree):
                continue
            index = _tree_get(item, "index.md")
            title = parse_document(_read_blob(index))[0] if isinstance(index, Blob) else item.name
            boards.append(Board(id=item.name, title=title))
        return boards

    def fetch_board(self, board_id: str) -> Board:
        root = self._root(self._tip())
        return _load_board(board_id, self._board_tree(root, board_id))

    def create_board(self, title: str, board_id: str | None = None) -> Board:
        def change(root: Tree | None) -> Board:
            existing = {item.name for item in root if isinstance(item, Tree)} if root is not None else set()
            if board_id in existing:
                raise RejectedError(f"Board '{board_id}' already exists")
            return Board(id=board_id or unique_id(slugify(title), existing), title=title)

        return self._write(change, f"Create board: {title}")

    def add_list(self, board_id: str, title: str) -> CardList:
        created: list[CardList] = []

        def change(root: Tree | None) -> Board:
            board = _load_board(board_id, self._board_tree(root, board_id))
            lst = CardList(
                id=next_id(board.list_ids()),
                board_id=board_id,
                position=next_position(board.lists),
                title=title,
            )
            created[:] = [lst]
            return replace(board, lists=(*board.lists, lst))

        self._write(change, f"Add list: {title}")
        return created[0]

    def add_card(self, board_id: str, list_id: str, title: str) -> Card:
        created: list[Card] = []

        def change(root: Tree | None) -> Board:
            board = _load_board(board_id, self._board_tree(root, board_id))
            lst = board.get_list(list_id)
            if lst is None:
                raise NotFoundError(f"List '{list_id}' not found on board '{board_id}'")
            card = Card(
                id=next_id(c.id for c in board.cards()),
                list_id=list_id,
                position=next_position(lst.cards),
                title=title,
            )
            created[:] = [card]
            return board.with_lists(replace(lst, cards=(*lst.cards, card)))

        self._write(change, f"Add card: {title}")
        return created[0]

    def reorder_lists(self, board_id: str, items: Sequence[ListPosition]) -> tuple[ListPosition, ...]:
        def change(root: Tree | None) -> Board:
            return apply_list_batch(_load_board(board_id, self._board_tree(root, board_id)), items)

        board = self._write(change, f"Reorder {len(items)} lists on {board_id}")
        return accepted_lists(board)

    def reorder_cards(self, board_id: str, items: Sequence[CardPosition]) -> tuple[CardPosition, ...]:
        def change(root: Tree | None) -> Board:
            return apply_card_batch(_load_board(board_id, self._board_tree(root, board_id)), items)

        board = self._write(change, f"Reposition {len(items)} cards on {board_id}")
        return accepted_cards(board, items)

    def move_to_board(self, transfer: Transfer) -> str:
        new_ids: list[str] = []

        def change(root: Tree | None) -> tuple[Board, Board]:
            source = _load_board(transfer.board_id, self._board_tree(root, transfer.board_id))
            destination_id = transfer.destination_board_id
            destination = _load_board(destination_id, self._board_tree(root, destination_id))
            moved = apply_transfer(source, destination, transfer)
            new_ids[:] = [moved.new_id]
            return moved.source, moved.destination

        what = f"{transfer.kind} {transfer.item_id}"
        self._write(change, f"Move {what} from {transfer.board_id} to {transfer.destination_board_id}")
        return new_ids[0]

    # --- Writing ---

    def _write(self, change: Callable[[Tree | None], Board | tuple[Board, ...]], message: str):
        """Apply change to the branch tip and publish it as one commit.

        change receives the current root tree and returns the new board,
        or a tuple of boards that change together; it is called again if
        another writer moved the branch meanwhile.
        """
        for attempt in range(MAX_ATTEMPTS):
            tip = self._tip()
            root = self._root(tip)
            result = change(root)
            boards = result if isinstance(result, tuple) else (result,)
            tree = self._build_root(root, boards)
            parent_args = ["-p", tip] if tip else []
            commit = _git(self.repo_path, ["commit-tree", tree, *parent_args, "-m", message])
            if _swap_ref(self.repo_path, self.ref, commit, tip):
                logger.debug("%s: %s (%s)", self.branch, message, commit[:7])
                return result
            logger.info("%s moved during write, retrying (attempt %d)", self.branch, attempt + 1)
        raise StoreError(f"Could not update {self.branch}: too many concurrent writers")

    def _build_root(self, root: Tree | None, boards: tuple[Board, ...]) -> str:
        changed = {board.id for board in boards}
        entries = []
        if root is not None:
            for item in root:
                if item.name not in changed:
                    entries.append((f"{item.mode:06o}", item.type, item.hexsha, item.name))
        for board in boards:
            entries.append(("040000", "tree", self._build_board_tree(board), board.id))
        return _mktree(self.repo_path, entries)

    def _build_board_tree(self, board: Board) -> str:
        repo_path = self.repo_path
        list_entries = []
        card_entries = []
        for lst in board.lists:
            text = serialize_document(lst.title, {"position": lst.position})
            list_entries.append(("100644", "blob", _hash_object(repo_path, text), f"{lst.id}.md"))
            for card in lst.cards:
                text = serialize_document(card.title, {"list": lst.id, "position": card.position})
                card_entries.append(("100644", "blob", _hash_object(repo_path, text), f"{card.id}.md"))

        entries = [("100644", "blob", _hash_object(repo_path, serialize_document(board.title)), "index.md")]
        if list_entries:
            entries.append(("040000", "tree", _mktree(repo_path, list_entries), "lists"))
        if card_entries:
            entries.append(("040000", "tree", _mktree(repo_path, card_entries), "cards"))
        return _mktree(repo_path, entries)

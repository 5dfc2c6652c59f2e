"""Shared fixtures: git identity, board snapshots and store doubles."""

import time

import pytest
from git import Repo

from kanso.model.snapshot import Board, Card, CardList
from kanso.store.memory import MemoryStore


def _make_board(board_id="b1", title="Test board", **lists) -> Board:
    """Build a snapshot from list ids mapped to card ids, in keyword order."""
    return Board(
        id=board_id,
        title=title,
        lists=tuple(
            CardList(
                id=list_id,
                board_id=board_id,
                position=i,
                title=list_id,
                cards=tuple(
                    Card(id=card_id, list_id=list_id, position=j, title=card_id.upper())
                    for j, card_id in enumerate(card_ids)
                ),
            )
            for i, (list_id, card_ids) in enumerate(lists.items())
        ),
    )


class FakeStore(MemoryStore):
    """MemoryStore that records reorder calls and can be told to fail or stall."""

    def __init__(self, boards=()):
        super().__init__(boards)
        self.calls: list[tuple[str, str, tuple]] = []
        self.fetches = 0
        self.error: Exception | None = None
        self.delay = 0.0

    def fetch_board(self, board_id):
        self.fetches += 1
        return super().fetch_board(board_id)

    def _reorder(self, name, board_id, items, apply):
        self.calls.append((name, board_id, tuple(items)))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return apply(board_id, items)

    def reorder_lists(self, board_id, items):
        return self._reorder("reorder_lists", board_id, items, super().reorder_lists)

    def reorder_cards(self, board_id, items):
        return self._reorder("reorder_cards", board_id, items, super().reorder_cards)

    def move_to_board(self, transfer):
        move = super().move_to_board
        return self._reorder("move_to_board", transfer.board_id, (transfer,), lambda _board_id, _items: move(transfer))


@pytest.fixture(autouse=True)
def git_identity(monkeypatch):
    """Commits made with git plumbing need an identity."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")


@pytest.fixture
def make_board():
    return _make_board


@pytest.fixture
def board():
    """Lists X=[c1, c2] and Y=[c3] on board b1."""
    return _make_board(X=["c1", "c2"], Y=["c3"])


@pytest.fixture
def fake_store(board):
    return FakeStore([board])


@pytest.fixture
def empty_repo(tmp_path):
    """Create an empty git repo."""
    repo = Repo.init(tmp_path)
    (tmp_path / ".gitkeep").write_text("")
    repo.index.add([".gitkeep"])
    repo.index.commit("Initial commit")
    return tmp_path


@pytest.fixture
def make_store():
    """Build a FakeStore holding the given boards."""
    return FakeStore

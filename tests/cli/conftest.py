"""Shared fixtures for CLI tests."""

from argparse import Namespace

import pytest

from kanso.cli.init import init_board
from kanso.store.gitstore import GitStore


@pytest.fixture
def initialized_repo(empty_repo, capsys):
    """Create a repo with the default board (3 lists, 2 cards in the first)."""
    init_board(Namespace(repo=str(empty_repo), json=False))
    store = GitStore(empty_repo)
    store.add_card("main", "1", "First card")
    store.add_card("main", "1", "Second card")
    capsys.readouterr()
    return empty_repo


@pytest.fixture
def cli_args(initialized_repo):
    """Build handler arguments with the common options filled in."""

    def make(**kwargs):
        kwargs.setdefault("repo", str(initialized_repo))
        kwargs.setdefault("board", "main")
        kwargs.setdefault("json", False)
        kwargs.setdefault("verbose", False)
        kwargs.setdefault("to_board", None)
        return Namespace(**kwargs)

    return make


@pytest.fixture
def load(initialized_repo):
    """Read the default board back from the branch."""
    return lambda: GitStore(initialized_repo).fetch_board("main")

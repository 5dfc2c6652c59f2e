"""Tests for 'kanso card' commands."""

import json

import pytest

from kanso.cli import card as card_cli
from kanso.cli.card import card_add, card_list, card_move, card_move_all
from kanso.store.gitstore import GitStore


def test_card_list(cli_args, capsys):
    assert card_list(cli_args(list=None)) == 0

    out = capsys.readouterr().out
    assert "To Do" in out
    assert "First card" in out
    assert "Second card" in out


def test_card_list_filter(cli_args, capsys):
    assert card_list(cli_args(list="2")) == 0

    out = capsys.readouterr().out
    assert "Doing" in out
    assert "First card" not in out


def test_card_list_json(cli_args, capsys):
    assert card_list(cli_args(list=None, json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert [(c["id"], c["position"]) for c in data] == [("1", 1), ("2", 2)]
    assert data[0]["list"] == {"id": "1", "title": "To Do"}


def test_card_add_defaults_to_first_list(cli_args, load, capsys):
    assert card_add(cli_args(title="Third card", list=None)) == 0

    assert 'Created card 3 "Third card" in "To Do"' in capsys.readouterr().out
    assert load().get_list("1").card_ids() == ["1", "2", "3"]


def test_card_add_to_list(cli_args, load, capsys):
    assert card_add(cli_args(title="Review", list="2", json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["position"] == 1
    assert load().get_list("2").card_ids() == [data["id"]]


def test_card_move_within_list(cli_args, load, capsys):
    assert card_move(cli_args(id="1", list=None, position=2)) == 0

    assert 'Moved card 1 to "To Do" position 2' in capsys.readouterr().out
    lst = load().get_list("1")
    assert lst.card_ids() == ["2", "1"]
    assert [c.position for c in lst.cards] == [0, 1]


def test_card_move_to_other_list_defaults_to_end(cli_args, load, capsys):
    assert card_move(cli_args(id="1", list="2", position=None)) == 0

    capsys.readouterr()
    board = load()
    assert board.get_list("1").card_ids() == ["2"]
    assert board.get_list("1").cards[0].position == 0
    assert board.get_list("2").card_ids() == ["1"]


def test_card_move_in_place(cli_args, capsys):
    assert card_move(cli_args(id="2", list=None, position=None)) == 0
    assert "already at position 2" in capsys.readouterr().out


def test_card_move_unknown_card(cli_args, capsys):
    with pytest.raises(SystemExit):
        card_move(cli_args(id="99", list=None, position=None))
    assert "Card '99' not found" in capsys.readouterr().err


def test_card_move_rejected_batch_is_reported(cli_args, load, monkeypatch, capsys):
    from kanso.errors import RejectedError
    from kanso.store.gitstore import GitStore

    def reject(self, board_id, items):
        raise RejectedError("branch is locked")

    monkeypatch.setattr(GitStore, "reorder_cards", reject)
    with pytest.raises(SystemExit):
        card_move(cli_args(id="1", list="3", position=None))

    assert "branch is locked" in capsys.readouterr().err
    assert load().get_list("1").card_ids() == ["1", "2"]


def test_card_move_all(cli_args, load, capsys):
    assert card_move_all(cli_args(source="1", target="3")) == 0

    assert 'Moved 2 cards from "To Do" to "Done"' in capsys.readouterr().out
    board = load()
    assert board.get_list("1").cards == ()
    assert board.get_list("3").card_ids() == ["1", "2"]


def test_card_move_all_from_empty_list(cli_args, capsys):
    with pytest.raises(SystemExit):
        card_move_all(cli_args(source="2", target="3"))
    assert "no cards" in capsys.readouterr().err


def test_card_move_all_counts_what_it_moved(cli_args, load, initialized_repo, monkeypatch, capsys):
    stale = load()
    GitStore(initialized_repo).add_card("main", "1", "Third card")
    monkeypatch.setattr(card_cli, "fetch_board_or_die", lambda store, board_id, json_mode: stale)

    assert card_move_all(cli_args(source="1", target="3", json=True)) == 0

    assert json.loads(capsys.readouterr().out)["moved"] == 3
    assert load().get_list("3").card_ids() == ["1", "2", "3"]


@pytest.fixture
def ops_board(initialized_repo):
    """A second board "ops" with one empty list "1" (Inbox)."""
    store = GitStore(initialized_repo)
    store.create_board("Ops", board_id="ops")
    store.add_list("ops", "Inbox")
    return lambda: store.fetch_board("ops")


def test_card_move_to_other_board(cli_args, load, ops_board, capsys):
    assert card_move(cli_args(id="2", list=None, position=None, to_board="ops", json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data == {"id": "2", "board": "ops", "list": {"id": "1", "title": "Inbox"}, "position": 1}
    assert load().get_list("1").card_ids() == ["1"]
    assert ops_board().get_list("1").card_ids() == ["2"]


def test_card_move_to_other_board_takes_free_id(cli_args, load, ops_board, initialized_repo, capsys):
    GitStore(initialized_repo).add_card("ops", "1", "Page")

    assert card_move(cli_args(id="1", list="1", position=1, to_board="ops")) == 0

    out = capsys.readouterr().out
    assert 'Moved card 1 to "Inbox" on board "Ops" position 1' in out
    assert "Card 1 is now card 2" in out
    assert [(c.id, c.title) for c in ops_board().get_list("1").cards] == [("2", "First card"), ("1", "Page")]
    assert load().get_list("1").card_ids() == ["2"]


def test_card_move_to_board_without_lists(cli_args, initialized_repo, capsys):
    GitStore(initialized_repo).create_board("Empty", board_id="empty")

    with pytest.raises(SystemExit):
        card_move(cli_args(id="1", list=None, position=None, to_board="empty"))
    assert "has no lists" in capsys.readouterr().err


def test_card_move_to_unknown_board(cli_args, load, capsys):
    with pytest.raises(SystemExit):
        card_move(cli_args(id="1", list=None, position=None, to_board="nope"))
    assert "not found" in capsys.readouterr().err
    assert load().get_list("1").card_ids() == ["1", "2"]

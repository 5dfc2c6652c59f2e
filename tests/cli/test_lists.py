"""Tests for 'kanso list' commands."""

import json

import pytest

from kanso.cli.lists import list_add, list_ls, list_move
from kanso.store.gitstore import GitStore


def test_list_ls(cli_args, capsys):
    assert list_ls(cli_args()) == 0

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert lines[0].startswith("1  To Do")
    assert lines[0].endswith("2 cards")


def test_list_ls_json(cli_args, capsys):
    assert list_ls(cli_args(json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert [item["position"] for item in data] == [1, 2, 3]
    assert data[1] == {"id": "2", "title": "Doing", "position": 2, "cards": 0}


def test_list_add(cli_args, load, capsys):
    assert list_add(cli_args(title="Blocked")) == 0

    assert 'Created list "Blocked" (id 4)' in capsys.readouterr().out
    assert load().list_ids() == ["1", "2", "3", "4"]


def test_list_move(cli_args, load, capsys):
    assert list_move(cli_args(id="3", position=1)) == 0

    assert 'Moved list "Done" to position 1' in capsys.readouterr().out
    board = load()
    assert board.list_ids() == ["3", "1", "2"]
    assert [lst.position for lst in board.lists] == [0, 1, 2]


def test_list_move_in_place(cli_args, load, initialized_repo, capsys):
    from git import Repo

    commits = len(list(Repo(initialized_repo).iter_commits("kanso")))
    assert list_move(cli_args(id="2", position=2, json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["changed"] == 0
    assert len(list(Repo(initialized_repo).iter_commits("kanso"))) == commits


def test_list_move_out_of_range(cli_args, load, capsys):
    with pytest.raises(SystemExit):
        list_move(cli_args(id="1", position=9))

    assert "out of range" in capsys.readouterr().err
    assert load().list_ids() == ["1", "2", "3"]


def test_list_move_unknown_list(cli_args, capsys):
    with pytest.raises(SystemExit):
        list_move(cli_args(id="42", position=1))
    assert "List '42' not found" in capsys.readouterr().err


def test_list_move_defaults_to_end(cli_args, load, capsys):
    assert list_move(cli_args(id="1", position=None)) == 0

    assert 'Moved list "To Do" to position 3' in capsys.readouterr().out
    assert load().list_ids() == ["2", "3", "1"]


def test_list_move_to_other_board(cli_args, load, initialized_repo, capsys):
    store = GitStore(initialized_repo)
    store.create_board("Ops", board_id="ops")
    store.add_list("ops", "Inbox")

    assert list_move(cli_args(id="1", position=None, to_board="ops")) == 0

    assert 'Moved list "To Do" to board "Ops" position 2 (id 2)' in capsys.readouterr().out
    board = load()
    assert board.list_ids() == ["2", "3"]
    assert [lst.position for lst in board.lists] == [0, 1]
    ops = store.fetch_board("ops")
    assert ops.list_ids() == ["1", "2"]
    assert [c.title for c in ops.get_list("2").cards] == ["First card", "Second card"]


def test_list_move_to_other_board_json(cli_args, initialized_repo, capsys):
    GitStore(initialized_repo).create_board("Ops", board_id="ops")

    assert list_move(cli_args(id="3", position=1, to_board="ops", json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data == {"id": "3", "title": "Done", "board": "ops", "position": 1}


def test_list_move_to_other_board_out_of_range(cli_args, load, initialized_repo, capsys):
    GitStore(initialized_repo).create_board("Ops", board_id="ops")

    with pytest.raises(SystemExit):
        list_move(cli_args(id="1", position=5, to_board="ops"))

    assert "out of range" in capsys.readouterr().err
    assert load().list_ids() == ["1", "2", "3"]

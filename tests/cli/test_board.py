"""Tests for 'kanso board' commands."""

import json

import pytest

from kanso.cli.board import board_add, board_list, board_show


def test_board_show(cli_args, initialized_repo, capsys):
    assert board_show(cli_args()) == 0

    out = capsys.readouterr().out
    assert initialized_repo.name in out
    assert "To Do" in out
    assert "2 cards" in out
    assert "0 cards" in out


def test_board_show_json(cli_args, capsys):
    assert board_show(cli_args(json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["id"] == "main"
    assert [lst["title"] for lst in data["lists"]] == ["To Do", "Doing", "Done"]
    assert [card["title"] for card in data["lists"][0]["cards"]] == ["First card", "Second card"]


def test_board_show_unknown_board(cli_args, capsys):
    with pytest.raises(SystemExit) as exc_info:
        board_show(cli_args(board="nope"))
    assert exc_info.value.code == 1

    err = capsys.readouterr().err
    assert "not found" in err
    assert "main" in err


def test_board_add_and_list(cli_args, capsys):
    assert board_add(cli_args(title="Ops Work", id=None)) == 0
    assert 'Created board "Ops Work" (id ops-work)' in capsys.readouterr().out

    assert board_list(cli_args(json=True)) == 0
    data = json.loads(capsys.readouterr().out)
    assert [b["id"] for b in data] == ["main", "ops-work"]


def test_board_add_taken_id(cli_args, capsys):
    with pytest.raises(SystemExit):
        board_add(cli_args(title="Again", id="main"))
    assert "already exists" in capsys.readouterr().err


def test_commands_need_init(empty_repo, capsys):
    from argparse import Namespace

    args = Namespace(repo=str(empty_repo), board="main", json=True, verbose=False)
    with pytest.raises(SystemExit):
        board_show(args)

    data = json.loads(capsys.readouterr().err)
    assert "kanso init" in data["error"]

"""Tests for the batch rules every store applies."""

import pytest

from kanso.constants import CARD, LIST
from kanso.errors import NotFoundError, RejectedError
from kanso.model.reorder import CardPosition, ListPosition, Transfer
from kanso.store.base import accepted_cards, accepted_lists, apply_card_batch, apply_list_batch, apply_transfer


def test_list_batch_reorders(make_board):
    board = make_board(A=[], B=[], C=[])
    items = [ListPosition("C", 0), ListPosition("A", 1), ListPosition("B", 2)]
    result = apply_list_batch(board, items)
    assert result.list_ids() == ["C", "A", "B"]
    assert [lst.position for lst in result.lists] == [0, 1, 2]


def test_list_batch_order_of_items_does_not_matter(make_board):
    board = make_board(A=[], B=[])
    result = apply_list_batch(board, [ListPosition("A", 1), ListPosition("B", 0)])
    assert result.list_ids() == ["B", "A"]


@pytest.mark.parametrize(
    "items,match",
    [
        ([], "Empty"),
        ([ListPosition("A", 0), ListPosition("A", 1), ListPosition("B", 2)], "Duplicate"),
        ([ListPosition("A", 0), ListPosition("B", 1)], "does not cover"),
        ([ListPosition("A", 0), ListPosition("B", 1), ListPosition("C", 3)], "not dense"),
    ],
)
def test_list_batch_rejections(make_board, items, match):
    board = make_board(A=[], B=[], C=[])
    with pytest.raises(RejectedError, match=match):
        apply_list_batch(board, items)


def test_list_batch_unknown_list(make_board):
    board = make_board(A=[])
    with pytest.raises(NotFoundError):
        apply_list_batch(board, [ListPosition("A", 0), ListPosition("Z", 1)])


def test_card_batch_moves_between_lists(board):
    items = [CardPosition("c2", 0, "X"), CardPosition("c1", 0, "Y"), CardPosition("c3", 1, "Y")]
    result = apply_card_batch(board, items)
    assert result.get_list("X").card_ids() == ["c2"]
    assert result.get_list("Y").card_ids() == ["c1", "c3"]
    assert result.get_list("Y").cards[0].list_id == "Y"


def test_card_batch_leaves_other_lists_alone(make_board):
    board = make_board(X=["c1", "c2"], Y=["c3"])
    result = apply_card_batch(board, [CardPosition("c2", 0, "X"), CardPosition("c1", 1, "X")])
    assert result.get_list("Y") is board.get_list("Y")


def test_card_batch_must_cover_source_list(board):
    """c2 stays behind in X but the batch does not say where."""
    items = [CardPosition("c1", 0, "Y"), CardPosition("c3", 1, "Y")]
    with pytest.raises(RejectedError, match="does not cover list 'X'"):
        apply_card_batch(board, items)


def test_card_batch_must_cover_destination_list(board):
    items = [CardPosition("c2", 0, "X"), CardPosition("c1", 0, "Y")]
    with pytest.raises(RejectedError, match="does not cover list 'Y'"):
        apply_card_batch(board, items)


def test_card_batch_positions_must_be_dense(board):
    items = [CardPosition("c1", 0, "X"), CardPosition("c2", 2, "X")]
    with pytest.raises(RejectedError, match="not dense"):
        apply_card_batch(board, items)


@pytest.mark.parametrize(
    "items,error",
    [
        ([], RejectedError),
        ([CardPosition("c1", 0, "X"), CardPosition("c1", 1, "X")], RejectedError),
        ([CardPosition("c9", 0, "X")], NotFoundError),
        ([CardPosition("c1", 0, "Z")], NotFoundError),
    ],
)
def test_card_batch_bad_items(board, items, error):
    with pytest.raises(error):
        apply_card_batch(board, items)


def test_accepted_cards_reports_touched_lists(board):
    items = [CardPosition("c2", 0, "X"), CardPosition("c1", 1, "X")]
    result = apply_card_batch(board, items)
    assert accepted_cards(result, items) == (CardPosition("c2", 0, "X"), CardPosition("c1", 1, "X"))


def test_same_list_batch_twice_gives_same_board(make_board):
    board = make_board(A=[], B=[], C=[])
    items = [ListPosition("B", 0), ListPosition("C", 1), ListPosition("A", 2)]

    once = apply_list_batch(board, items)
    twice = apply_list_batch(once, items)

    assert twice == once
    assert accepted_lists(twice) == accepted_lists(once)


def test_same_card_batch_twice_gives_same_board(board):
    items = [CardPosition("c2", 0, "X"), CardPosition("c3", 0, "Y"), CardPosition("c1", 1, "Y")]

    once = apply_card_batch(board, items)
    twice = apply_card_batch(once, items)

    assert twice == once
    assert accepted_cards(twice, items) == accepted_cards(once, items)


def test_apply_transfer(board, make_board):
    other = make_board("b2", P=[])
    moved = apply_transfer(board, other, Transfer(CARD, "c3", "b1", "b2", 0, "P"))
    assert moved.destination.get_list("P").card_ids() == ["c3"]
    assert moved.source.get_list("Y").cards == ()


@pytest.mark.parametrize(
    "transfer,error",
    [
        (Transfer(CARD, "c9", "b1", "b2", 0, "P"), NotFoundError),
        (Transfer(LIST, "Z", "b1", "b2", 0), NotFoundError),
        (Transfer(CARD, "c1", "b1", "b2", 0, "Z"), NotFoundError),
        (Transfer(CARD, "c1", "b1", "b2", 5, "P"), RejectedError),
        (Transfer(LIST, "X", "b1", "b2", 5), RejectedError),
    ],
)
def test_apply_transfer_failures(board, make_board, transfer, error):
    with pytest.raises(error):
        apply_transfer(board, make_board("b2", P=[]), transfer)

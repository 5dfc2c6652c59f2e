"""Tests for dense position helpers."""

from kanso.model.positions import by_position, is_dense, move_item, next_position, renumber
from kanso.model.snapshot import Card


def _cards(*positions):
    return [Card(id=f"c{i}", list_id="X", position=p) for i, p in enumerate(positions)]


def test_renumber_assigns_sequence_order():
    cards = renumber(_cards(5, 2, 9))
    assert [c.position for c in cards] == [0, 1, 2]
    assert [c.id for c in cards] == ["c0", "c1", "c2"]


def test_renumber_keeps_items_already_in_place():
    cards = _cards(0, 7, 2)
    result = renumber(cards)
    assert result[0] is cards[0]
    assert result[2] is cards[2]
    assert result[1] is not cards[1]


def test_renumber_empty():
    assert renumber([]) == ()


def test_is_dense():
    assert is_dense([])
    assert is_dense([0])
    assert is_dense([2, 0, 1])


def test_is_dense_rejects_gaps_and_duplicates():
    assert not is_dense([1])
    assert not is_dense([0, 2])
    assert not is_dense([0, 0, 1])
    assert not is_dense([-1, 0])


def test_next_position_appends():
    assert next_position([]) == 0
    assert next_position(_cards(0, 1, 2)) == 3


def test_move_item_forward_and_back():
    assert move_item("abcd", 0, 3) == list("bcda")
    assert move_item("abcd", 3, 0) == list("dabc")
    assert move_item("abcd", 1, 1) == list("abcd")


def test_by_position_is_stable_for_ties():
    cards = _cards(1, 0, 1)
    assert [c.id for c in by_position(cards)] == ["c1", "c0", "c2"]


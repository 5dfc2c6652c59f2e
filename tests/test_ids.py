"""Tests for ID generation."""

from kanso.ids import next_id, slugify, unique_id


def test_next_id_empty():
    assert next_id([]) == "1"


def test_next_id_numeric():
    """Numeric IDs compare as numbers, not strings."""
    assert next_id(["1", "2"]) == "3"
    assert next_id(["9", "10"]) == "11"


def test_next_id_ignores_non_numeric():
    assert next_id(["fish", "c1"]) == "1"
    assert next_id(["fish", "4"]) == "5"


def test_slugify():
    assert slugify("Road Map") == "road-map"
    assert slugify("  Q3 / Q4 plans!  ") == "q3-q4-plans"
    assert slugify("???") == "untitled"


def test_unique_id():
    assert unique_id("main", set()) == "main"
    assert unique_id("main", {"main"}) == "main-2"
    assert unique_id("main", {"main", "main-2"}) == "main-3"

"""Dense zero-based sibling positions.

Every ordered collection (one board's lists, or one list's cards) keeps
positions 0..N-1 in display order. After any structural change the
affected collection is renumbered as a whole, one collection per pass.
"""

from dataclasses import replace
from typing import Iterable, Sequence, TypeVar

T = TypeVar("T")


def renumber(items: Sequence[T]) -> tuple[T, ...]:
    """Assign positions 0..N-1 in sequence order.

    Items already at the right position are returned as-is.
    """
    return tuple(item if item.position == i else replace(item, position=i) for i, item in enumerate(items))


def is_dense(positions: Iterable[int]) -> bool:
    """True if positions are exactly {0, ..., N-1}, each once."""
    positions = list(positions)
    return sorted(positions) == list(range(len(positions)))


def next_position(items: Sequence) -> int:
    """Position for an item appended to the end of items."""
    return len(items)


def move_item(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Remove the item at from_index and reinsert it at to_index."""
    result = list(items)
    item = result.pop(from_index)
    result.insert(to_index, item)
    return result


def by_position(items: Iterable[T]) -> list[T]:
    """Sort items by position, keeping input order for ties."""
    return sorted(items, key=lambda item: item.position)


"""Mixin that manages ordering-cache watches with auto-cleanup."""

from __future__ import annotations

from typing import Callable

from kanso.model.cache import Callback, OrderingCache


class CacheWatcherMixin:
    """Mixin for widgets that render from an OrderingCache.

    Subclasses should:
    - Call ``_init_watcher()`` in ``__init__``
    - Use ``self.cache_watch(cache, board_id, callback)`` instead of ``cache.watch(...)``
    - Skip writing ``on_unmount`` -- the mixin handles cleanup
    """

    def _init_watcher(self) -> None:
        self._unwatches: list[Callable[[], None]] = []

    def cache_watch(self, cache: OrderingCache, board_id: str, callback: Callback) -> None:
        """Register a watch that is removed when the widget unmounts."""
        self._unwatches.append(cache.watch(board_id, callback))

    def on_unmount(self) -> None:
        for unwatch in self._unwatches:
            unwatch()
        self._unwatches.clear()

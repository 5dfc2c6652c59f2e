"""Tests for CacheWatcherMixin."""

from dataclasses import replace

from kanso.model.cache import OrderingCache
from kanso.ui.watcher import CacheWatcherMixin


class FakeWidget(CacheWatcherMixin):
    """Minimal stand-in for a Textual widget."""

    def __init__(self):
        self._init_watcher()


def test_watch_fires_callback(board):
    widget = FakeWidget()
    cache = OrderingCache()
    cache.load(board)
    calls = []
    widget.cache_watch(cache, "b1", lambda old, new: calls.append(new.title))

    cache.replace(replace(board, title="Renamed"))
    assert calls == ["Renamed"]


def test_on_unmount_cleans_up(board):
    widget = FakeWidget()
    cache = OrderingCache()
    cache.load(board)
    calls = []
    widget.cache_watch(cache, "b1", lambda old, new: calls.append(new))
    widget.cache_watch(cache, "b1", lambda old, new: calls.append(new))

    widget.on_unmount()
    widget.on_unmount()

    cache.replace(replace(board, title="Renamed"))
    assert calls == []

"""Fixtures for UI tests."""

import pytest

from kanso.ui.app import KansoApp
from kanso.ui.board import BoardScreen
from kanso.ui.lists import ListWidget


@pytest.fixture
def wait_for():
    """Pause the pilot until predicate() holds."""

    async def wait(pilot, predicate, tries=100):
        for _ in range(tries):
            if predicate():
                return
            await pilot.pause(0.02)
        raise AssertionError("condition never became true")

    return wait


@pytest.fixture
def opened(wait_for):
    """Wait until the board screen is up and has taken initial focus."""

    async def wait(pilot) -> BoardScreen:
        await wait_for(pilot, lambda: isinstance(pilot.app.screen, BoardScreen))
        await pilot.pause()
        await pilot.pause()
        return pilot.app.screen

    return wait


@pytest.fixture
def settle():
    """Wait for submitted moves and the refetches they schedule."""

    async def wait(pilot):
        app = pilot.app
        await app.workers.wait_for_complete()
        if app.dispatcher is not None:
            await app.dispatcher.drain()
        await pilot.pause()

    return wait


@pytest.fixture
def make_app(tmp_path, fake_store):
    def make(store=None, board_id="b1"):
        return KansoApp(tmp_path, board_id=board_id, store=store or fake_store)

    return make


def shown_cards(screen: BoardScreen) -> dict[str, list[str]]:
    """Card ids per list id, in widget order."""
    return {w.list_id: [c.card_id for c in w.card_widgets()] for w in screen.query(ListWidget)}


@pytest.fixture
def cards_on():
    return shown_cards

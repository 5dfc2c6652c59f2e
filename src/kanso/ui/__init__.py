"""Textual UI for kanso."""

from kanso.ui.app import KansoApp
from kanso.ui.board import BoardScreen

__all__ = ["BoardScreen", "KansoApp"]

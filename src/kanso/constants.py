"""Constants shared across kanso."""

BRANCH_NAME = "kanso"

LIST = "list"
CARD = "card"

DEFAULT_BOARD = "main"
DEFAULT_LISTS = ("To Do", "Doing", "Done")

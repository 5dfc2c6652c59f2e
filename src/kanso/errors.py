"""Exception hierarchy for kanso."""


class KansoError(Exception):
    """Base class for all kanso errors."""


class InvalidDragError(KansoError):
    """A gesture outcome that cannot be applied to the current snapshot."""


class PendingChangeError(KansoError):
    """An optimistic change is already waiting for confirmation."""


class NotCachedError(KansoError, KeyError):
    """The board is not held in the ordering cache."""

    def __str__(self) -> str:
        return f"Board '{self.args[0]}' is not loaded"


class StoreError(KansoError):
    """The authoritative store could not complete a request."""


class NotFoundError(StoreError):
    """A referenced board, list or card does not exist in the store."""


class RejectedError(StoreError):
    """The store refused a reorder batch."""

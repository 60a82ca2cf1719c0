"""Session-local identifiers for annotations that have not been persisted yet."""

import itertools


class IdCounter:
    """Mints 0, 1, 2, ... for one owner.

    Each highlighter owns its own counter; there is no process-wide sequence.
    """

    def __init__(self, start: int = 0) -> None:
        self._counter = itertools.count(start)
        self._last: int | None = None

    def next(self) -> int:
        self._last = next(self._counter)
        return self._last

    @property
    def last(self) -> int | None:
        """The most recently minted id, or None if none was minted."""
        return self._last

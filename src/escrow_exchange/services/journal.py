"""Undo journal for all-or-nothing ledger operations.

Every reversible effect (listing deactivation, escrow credit, nonce
consumption, a new listing) registers an undo callback, and every
notification is staged here instead of going straight to the log. An
``atomic()`` block remembers where the journal stood when it was entered;
if the block raises, everything recorded after that point is undone and the
staged notifications are dropped, except durable ones reporting effects
that cannot be undone.

Blocks nest: a re-entrant operation started from inside a gateway call opens
its own savepoint inside the outer one, so a failing outer operation also
undoes the inner one's effects.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from escrow_exchange.domain.models import Notification


class Journal:
    """Records undo actions and staged notifications until commit."""

    def __init__(self) -> None:
        self._undo: list[Callable[[], None]] = []
        self._staged: list[tuple[Notification, bool]] = []

    def record(self, undo: Callable[[], None]) -> None:
        """Register the inverse of an effect that was just applied."""
        self._undo.append(undo)

    def stage(self, notification: Notification, durable: bool = False) -> None:
        """Hold a notification until the outermost operation commits.

        A ``durable`` notification reports an effect that cannot be undone,
        such as a completed payout. Rollbacks keep it, so it is handed back
        by the next commit even when the enclosing operation fails.
        """
        self._staged.append((notification, durable))

    def savepoint(self) -> tuple[int, int]:
        return len(self._undo), len(self._staged)

    def rollback_to(self, savepoint: tuple[int, int]) -> None:
        """Undo effects in reverse order back to ``savepoint``."""
        undo_mark, staged_mark = savepoint
        while len(self._undo) > undo_mark:
            self._undo.pop()()
        self._staged[staged_mark:] = [
            entry for entry in self._staged[staged_mark:] if entry[1]
        ]

    def commit(self) -> list[Notification]:
        """Forget all undo actions and hand back the staged notifications."""
        staged = [notification for notification, _ in self._staged]
        self._undo = []
        self._staged = []
        return staged

    @property
    def pending(self) -> int:
        """Number of effects that would be undone by a full rollback."""
        return len(self._undo)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        savepoint = self.savepoint()
        try:
            yield
        except BaseException:
            self.rollback_to(savepoint)
            raise

"""Owner-aware exclusive lock for the marketplace aggregate.

One ``asyncio.Lock`` serializes every ledger operation, and it stays held
while the operation awaits the transfer gateway. A gateway that calls back
into the marketplace from the same task would deadlock on a plain lock, so
the task that owns the lock may re-enter: the nested call runs against the
effects the outer call has already applied (a deactivated listing, a zeroed
balance) and fails on its own preconditions.

Calls re-entering from a *different* task wait like any other caller.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class OperationLock:
    """Exclusive, re-entrant-per-task async lock."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None
        self._depth = 0

    @property
    def depth(self) -> int:
        """How many nested holds the owning task currently has (0 when free)."""
        return self._depth

    def locked(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[bool]:
        """Hold the lock for the duration of the block.

        Yields:
            True when this hold is nested inside one the current task already
            owns, False for the outermost hold.
        """
        task = asyncio.current_task()
        if task is not None and self._owner is task:
            self._depth += 1
            try:
                yield True
            finally:
                self._depth -= 1
            return

        async with self._lock:
            self._owner = task
            self._depth = 1
            try:
                yield False
            finally:
                self._owner = None
                self._depth = 0

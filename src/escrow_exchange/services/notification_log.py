"""Append-only notification log consumed by external indexers.

Notifications arrive here only after the operation that produced them has
committed, each stamped with the next sequence number. Indexers either poll
with ``since()`` or register a subscriber callback that is invoked once per
appended notification.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from escrow_exchange.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from escrow_exchange.domain.models import Notification

logger = get_logger(__name__)


class NotificationLog:
    """Immutable-record, append-only log with sequence numbers starting at 0."""

    def __init__(self) -> None:
        self._entries: list[Notification] = []
        self._subscribers: list[Callable[[Notification], None]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> tuple[Notification, ...]:
        return tuple(self._entries)

    def since(self, sequence: int) -> tuple[Notification, ...]:
        """Entries with a sequence number >= ``sequence``."""
        return tuple(self._entries[max(sequence, 0):])

    def subscribe(self, callback: Callable[[Notification], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Notification], None]) -> None:
        self._subscribers.remove(callback)

    def extend(self, notifications: Iterable[Notification]) -> list[Notification]:
        """Stamp and append committed notifications, then notify subscribers."""
        appended = []
        for notification in notifications:
            stamped = replace(notification, sequence=len(self._entries))
            self._entries.append(stamped)
            appended.append(stamped)
            logger.debug(
                "notification.appended",
                type=stamped.type.value,
                sequence=stamped.sequence,
            )

        for stamped in appended:
            for callback in list(self._subscribers):
                try:
                    callback(stamped)
                except Exception as exc:
                    # Committed state is final; subscriber errors are only logged.
                    logger.exception(
                        "notification.subscriber_failed",
                        sequence=stamped.sequence,
                        error=str(exc),
                    )
        return appended

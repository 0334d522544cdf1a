"""
Event delivery to external observers (indexers, UIs).

A sink is any callable that accepts a LedgerEvent. Events are delivered
synchronously, in commit order, after the operation that produced them has
been applied.
"""

from __future__ import annotations

from typing import Callable

from .models import LandId, LedgerEvent

EventSink = Callable[[LedgerEvent], None]


class EventLog:
    """In-memory sink that keeps every event it receives, oldest first."""

    def __init__(self) -> None:
        self._events: list[LedgerEvent] = []

    def __call__(self, event: LedgerEvent) -> None:
        self._events.append(event)

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> list[LedgerEvent]:
        return list(self._events)

    def for_land(self, land_id: LandId) -> list[LedgerEvent]:
        return [e for e in self._events if e.land_id == land_id]

    def names(self) -> list[str]:
        return [e.event for e in self._events]

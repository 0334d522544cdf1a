"""
Append-only ownership history, one sequence per land.

The log exposes two writes: ``append`` and ``amend_last``. The latter exists
for exactly one purpose, flipping ``verified_at_time`` on the newest entry
when an admin verifies the current owner. Any other edit is refused.
"""

from __future__ import annotations

from typing import Callable

from .models import LandId, OwnershipRecord

# Fields amend_last is allowed to change
AMENDABLE_FIELDS: frozenset[str] = frozenset({"verified_at_time"})


class HistoryAmendmentError(ValueError):
    """A mutator tried to change something other than the verification flag."""


class HistoryLog:
    def __init__(self) -> None:
        self._entries: dict[LandId, list[OwnershipRecord]] = {}

    def append(self, land_id: LandId, record: OwnershipRecord) -> None:
        self._entries.setdefault(land_id, []).append(record)

    def amend_last(
        self,
        land_id: LandId,
        mutator: Callable[[OwnershipRecord], OwnershipRecord],
    ) -> OwnershipRecord:
        """Replace the newest record of ``land_id`` with ``mutator(record)``.

        Raises:
            KeyError: ``land_id`` has no history.
            HistoryAmendmentError: the mutator changed a non-amendable field.
        """
        entries = self._entries[land_id]
        current = entries[-1]
        amended = mutator(current)

        before = current.model_dump()
        after = amended.model_dump()
        changed = {name for name in before if before[name] != after[name]}
        illegal = changed - AMENDABLE_FIELDS
        if illegal:
            raise HistoryAmendmentError(
                f"History entries are immutable except for {sorted(AMENDABLE_FIELDS)}; "
                f"attempted to change {sorted(illegal)}"
            )

        entries[-1] = amended
        return amended

    def get(self, land_id: LandId) -> tuple[OwnershipRecord, ...]:
        """Full sequence, oldest first. Empty for an unknown land."""
        return tuple(self._entries.get(land_id, ()))

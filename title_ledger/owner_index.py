"""
Secondary index: owner identity → land ids currently held.

Removal is O(1) by swap-with-last: the removed slot is overwritten with the
last id in the owner's list and the list shrinks by one. This REORDERS the
owner's list, so callers must not rely on insertion order.

    before remove(owner, 2):   [1, 2, 3, 4]
    after:                     [1, 4, 3]
"""

from __future__ import annotations

from .models import Identity, LandId


class OwnerIndex:
    def __init__(self) -> None:
        self._lands: dict[Identity, list[LandId]] = {}
        # (owner, land_id) → slot in self._lands[owner]
        self._slots: dict[tuple[Identity, LandId], int] = {}

    def insert(self, owner: Identity, land_id: LandId) -> None:
        """Append ``land_id`` to ``owner``'s list. Callers never double-insert."""
        held = self._lands.setdefault(owner, [])
        self._slots[(owner, land_id)] = len(held)
        held.append(land_id)

    def remove(self, owner: Identity, land_id: LandId) -> None:
        """Remove ``land_id`` from ``owner``'s list by swap-with-last.

        ``land_id`` must be present; the store's ownership invariant
        guarantees it for every transfer.
        """
        held = self._lands[owner]
        slot = self._slots.pop((owner, land_id))
        last = held.pop()
        if last != land_id:
            held[slot] = last
            self._slots[(owner, last)] = slot
        if not held:
            del self._lands[owner]

    def list_for(self, owner: Identity) -> list[LandId]:
        return list(self._lands.get(owner, ()))

"""
The single process-wide ledger state.

One explicit object carries everything the ledger owns. Each structure is
kept deliberately independent; the write operations in ``store.py`` are
responsible for updating every structure they touch in one step.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .access import AccessController
from .history import HistoryLog
from .models import Identity, Land, LandId
from .owner_index import OwnerIndex


@dataclass
class RegistryState:
    access: AccessController
    lands: dict[LandId, Land] = field(default_factory=dict)
    land_ids: list[LandId] = field(default_factory=list)  # Registration order
    owner_index: OwnerIndex = field(default_factory=OwnerIndex)
    history: HistoryLog = field(default_factory=HistoryLog)

    @classmethod
    def create(cls, creator: Identity) -> RegistryState:
        """Fresh, empty ledger administered by ``creator``."""
        return cls(access=AccessController(creator))

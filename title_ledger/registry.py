"""
Registry service — the only entry point external collaborators call.

Flow for every write:

  caller + args
       │
  ┌────▼─────────┐
  │ ordering lock│   ← one operation at a time, reads included
  └────┬─────────┘
       │
  ┌────▼─────────┐
  │  LandStore   │   ← guards (access, existence, state), then commit
  └────┬─────────┘     to land table + history log + owner index
       │
  ┌────▼─────────┐
  │  Event sink  │   ← notified after commit, in commit order
  └────┬─────────┘
       │
  result / LedgerError

Design principles:
  - All validation happens before any mutation. A rejected operation
    leaves no trace in state, history, index or event stream.
  - The lock is the single ordering point. Hosts that call from several
    threads (the HTTP adapter) still see a serial ledger.
  - Reads return copies; nothing handed out aliases internal state.
"""

from __future__ import annotations

import logging
import threading

from .config import LedgerSettings
from .events import EventSink
from .exceptions import LedgerError
from .models import (
    Identity,
    Land,
    LandId,
    LedgerEvent,
    OwnershipRecord,
    VerificationPolicy,
    normalize_identity,
    utc_now,
)
from .state import RegistryState
from .store import Clock, LandStore

logger = logging.getLogger(__name__)


class RegistryService:
    """Façade over the ledger state.

    Usage:
        registry = RegistryService(admin="0xadmin")
        registry.register_land("0xadmin", 1, "0xowner", 1000, "10,20", "T-1")
        registry.verify_land("0xadmin", 1)
        registry.transfer_ownership("0xowner", 1, "0xbuyer")
    """

    def __init__(
        self,
        admin: Identity,
        *,
        policy: VerificationPolicy = VerificationPolicy.RESET_ON_TRANSFER,
        sink: EventSink | None = None,
        clock: Clock = utc_now,
    ):
        self.state = RegistryState.create(admin)
        self.store = LandStore(self.state, clock=clock, policy=policy)
        self.sink = sink
        self._lock = threading.RLock()
        logger.info("Registry deployed; admin=%s policy=%s", self.state.access.admin, policy.value)

    @classmethod
    def from_settings(
        cls, settings: LedgerSettings, sink: EventSink | None = None
    ) -> RegistryService:
        return cls(settings.admin, policy=settings.verification_policy, sink=sink)

    @property
    def policy(self) -> VerificationPolicy:
        return self.store.policy

    # ─── Writes ──────────────────────────────────────────────────────

    def register_land(
        self,
        caller: Identity,
        land_id: LandId,
        owner: Identity,
        size_sq_ft: int,
        location: str,
        title_number: str,
    ) -> Land:
        with self._lock:
            event = self._apply(
                self.store.register, caller, land_id, owner, size_sq_ft, location, title_number
            )
            return self.store.get(event.land_id)

    def verify_land(self, caller: Identity, land_id: LandId) -> Land:
        with self._lock:
            self._apply(self.store.verify, caller, land_id)
            return self.store.get(land_id)

    def transfer_ownership(
        self, caller: Identity, land_id: LandId, new_owner: Identity
    ) -> Land:
        with self._lock:
            self._apply(self.store.transfer, caller, land_id, new_owner)
            return self.store.get(land_id)

    def transfer_admin(self, caller: Identity, new_admin: Identity) -> Identity:
        """Hand admin rights to ``new_admin``; returns the new admin identity."""
        with self._lock:
            try:
                self.state.access.set_admin(caller, new_admin)
            except LedgerError as e:
                self._log_rejection(e)
                raise
            return self.state.access.admin

    # ─── Reads ───────────────────────────────────────────────────────

    @property
    def admin(self) -> Identity:
        with self._lock:
            return self.state.access.admin

    def is_admin(self, address: Identity) -> bool:
        with self._lock:
            return self.state.access.is_admin(address)

    def get_land_details(self, land_id: LandId) -> Land:
        with self._lock:
            return self.store.get(land_id)

    def get_ownership_history(self, land_id: LandId) -> list[OwnershipRecord]:
        with self._lock:
            self.store.get(land_id, operation="get_ownership_history")
            return list(self.state.history.get(land_id))

    def get_owner_lands(self, owner: Identity) -> list[LandId]:
        with self._lock:
            return self.state.owner_index.list_for(normalize_identity(owner))

    def get_all_land_ids(self) -> list[LandId]:
        with self._lock:
            return self.store.list_ids()

    def get_land_count(self) -> int:
        with self._lock:
            return self.store.count()

    def is_owner(self, land_id: LandId, address: Identity) -> bool:
        with self._lock:
            land = self.store.get(land_id, operation="is_owner")
            return land.owner == normalize_identity(address)

    # ─── Internals ───────────────────────────────────────────────────

    def _apply(self, write, *args) -> LedgerEvent:
        """Run one store write and publish its event. Caller holds the lock."""
        try:
            event = write(*args)
        except LedgerError as e:
            self._log_rejection(e)
            raise
        self._publish(event)
        return event

    def _publish(self, event: LedgerEvent) -> None:
        logger.debug("Event %s for land %s", event.event, event.land_id)
        if self.sink is None:
            return
        try:
            self.sink(event)
        except Exception:
            # The operation has committed; delivery is not part of its result.
            logger.exception("Event sink failed on %s for land %s", event.event, event.land_id)

    @staticmethod
    def _log_rejection(error: LedgerError) -> None:
        logger.warning(
            "Rejected %s [%s]: %s", error.operation or "operation", error.code, error
        )

"""
Primary land store and its field-level mutation rules.

Every write follows the same two phases:

  1. Guard   — authorization, existence, state and argument checks.
               Any failure raises here, before anything is touched.
  2. Commit  — land table, history log and owner index are updated
               together; nothing in this phase can fail.

Each write returns the event describing what happened. Delivering it to
observers is the caller's job (see RegistryService), after the commit.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from pydantic import ValidationError

from .exceptions import InvalidArgumentError, NotFoundError, StateConflictError
from .models import (
    Identity,
    Land,
    LandId,
    LandRegistered,
    LandVerified,
    OwnershipRecord,
    OwnershipTransferred,
    VerificationPolicy,
    is_null_identity,
    normalize_identity,
    utc_now,
)
from .state import RegistryState

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class LandStore:
    """Owns the land table and the rules for changing it."""

    def __init__(
        self,
        state: RegistryState,
        clock: Clock = utc_now,
        policy: VerificationPolicy = VerificationPolicy.RESET_ON_TRANSFER,
    ):
        self.state = state
        self.clock = clock
        self.policy = policy

    # ─── Writes ──────────────────────────────────────────────────────

    def register(
        self,
        caller: Identity,
        land_id: LandId,
        owner: Identity,
        size_sq_ft: int,
        location: str,
        title_number: str,
    ) -> LandRegistered:
        op = "register_land"
        self.state.access.require_admin(caller, op)

        now = self.clock()
        try:
            land = Land(
                land_id=land_id,
                owner=normalize_identity(owner),
                size_sq_ft=size_sq_ft,
                location=location,
                title_number=title_number,
                verified=False,
                registered_at=now,
            )
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise InvalidArgumentError(
                f"Invalid land fields: {', '.join(fields)}",
                details={"operation": op, "land_id": land_id, "reason": "invalid_fields", "fields": fields},
            ) from e

        # Checked against the coerced id: "1" and 1 are the same land.
        if land.land_id in self.state.lands:
            raise StateConflictError(
                f"Land {land.land_id} is already registered",
                details={"operation": op, "land_id": land.land_id, "reason": "duplicate_id"},
            )
        if is_null_identity(land.owner):
            raise InvalidArgumentError(
                "Owner cannot be the null identity",
                details={"operation": op, "land_id": land.land_id, "reason": "null_owner"},
            )

        # ── Commit ───────────────────────────────────────────────────
        self.state.lands[land.land_id] = land
        self.state.land_ids.append(land.land_id)
        self.state.history.append(
            land.land_id, OwnershipRecord(owner=land.owner, timestamp=now, verified_at_time=False)
        )
        self.state.owner_index.insert(land.owner, land.land_id)

        logger.info("Registered land %s for %s", land.land_id, land.owner)
        return LandRegistered(land_id=land.land_id, owner=land.owner, time=now)

    def verify(self, caller: Identity, land_id: LandId) -> LandVerified:
        op = "verify_land"
        self.state.access.require_admin(caller, op)
        land = self._require_land(land_id, op)

        if land.verified:
            raise StateConflictError(
                f"Land {land_id} is already verified",
                details={"operation": op, "land_id": land_id, "reason": "already_verified"},
            )

        now = self.clock()
        land.verified = True
        # Attests the current owner's record; no new entry is appended.
        self.state.history.amend_last(
            land_id, lambda record: record.model_copy(update={"verified_at_time": True})
        )

        logger.info("Verified land %s (owner %s)", land_id, land.owner)
        return LandVerified(land_id=land_id, owner=land.owner, time=now)

    def transfer(
        self, caller: Identity, land_id: LandId, new_owner: Identity
    ) -> OwnershipTransferred:
        op = "transfer_ownership"
        land = self._require_land(land_id, op)
        self.state.access.require_owner(caller, land, op)

        if not land.verified:
            raise StateConflictError(
                f"Land {land_id} must be verified before it can be transferred",
                details={"operation": op, "land_id": land_id, "reason": "not_verified"},
            )
        if is_null_identity(new_owner):
            raise InvalidArgumentError(
                "New owner cannot be the null identity",
                details={"operation": op, "land_id": land_id, "reason": "null_owner"},
            )
        recipient = normalize_identity(new_owner)
        if recipient == land.owner:
            raise InvalidArgumentError(
                f"Land {land_id} is already owned by {recipient}",
                details={"operation": op, "land_id": land_id, "reason": "self_transfer"},
            )

        now = self.clock()
        old_owner = land.owner
        still_verified = self.policy is VerificationPolicy.PRESERVE_ON_TRANSFER
        record = OwnershipRecord(owner=recipient, timestamp=now, verified_at_time=still_verified)

        # ── Commit ───────────────────────────────────────────────────
        land.owner = recipient
        land.verified = still_verified
        self.state.owner_index.remove(old_owner, land_id)
        self.state.owner_index.insert(recipient, land_id)
        self.state.history.append(land_id, record)

        logger.info("Transferred land %s from %s to %s", land_id, old_owner, recipient)
        return OwnershipTransferred(
            land_id=land_id, old_owner=old_owner, new_owner=recipient, time=now
        )

    # ─── Reads ───────────────────────────────────────────────────────

    def get(self, land_id: LandId, operation: str = "get_land_details") -> Land:
        """Detached snapshot of a land; edits to it never reach the store."""
        return self._require_land(land_id, operation).model_copy()

    def list_ids(self) -> list[LandId]:
        return list(self.state.land_ids)

    def count(self) -> int:
        return len(self.state.land_ids)

    # ─── Helpers ─────────────────────────────────────────────────────

    def _require_land(self, land_id: LandId, operation: str) -> Land:
        land = self.state.lands.get(land_id)
        if land is None:
            raise NotFoundError(
                f"Land {land_id} does not exist",
                details={"operation": operation, "land_id": land_id, "reason": "unknown_id"},
            )
        return land

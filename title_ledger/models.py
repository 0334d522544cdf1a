"""
Pydantic models for ledger data — the shapes that cross every boundary.

Lands are mutable inside the store only; readers always receive copies.
Ownership records and events are frozen: once written, they never change
(the single exception is handled by HistoryLog.amend_last, which swaps in
a new record rather than editing the old one).
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# ─── Identities ─────────────────────────────────────────────────────

Identity = str
LandId = int

NULL_IDENTITY: Identity = "0x0000000000000000000000000000000000000000"


def normalize_identity(identity: Identity | None) -> Identity:
    """Canonical form used for every identity comparison (lower-case, trimmed)."""
    if identity is None:
        return ""
    return identity.strip().lower()


def is_null_identity(identity: Identity | None) -> bool:
    normalized = normalize_identity(identity)
    return normalized in ("", NULL_IDENTITY)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ─── Policy ─────────────────────────────────────────────────────────


class VerificationPolicy(str, Enum):
    """What happens to a land's verification flag when it changes hands."""

    RESET_ON_TRANSFER = "reset"  # New owner must be re-verified
    PRESERVE_ON_TRANSFER = "preserve"  # Attestation follows the parcel


# ─── Records ────────────────────────────────────────────────────────


class Land(BaseModel):
    """A registered parcel."""

    land_id: LandId = Field(ge=0)
    owner: Identity
    size_sq_ft: int = Field(ge=0)
    location: str
    title_number: str
    verified: bool = False
    registered_at: datetime


class OwnershipRecord(BaseModel):
    """One entry in a land's ownership history."""

    model_config = ConfigDict(frozen=True)

    owner: Identity
    timestamp: datetime
    verified_at_time: bool = False


# ─── Events ─────────────────────────────────────────────────────────


class LandRegistered(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: Literal["LandRegistered"] = "LandRegistered"
    land_id: LandId
    owner: Identity
    time: datetime


class LandVerified(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: Literal["LandVerified"] = "LandVerified"
    land_id: LandId
    owner: Identity
    time: datetime


class OwnershipTransferred(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: Literal["OwnershipTransferred"] = "OwnershipTransferred"
    land_id: LandId
    old_owner: Identity
    new_owner: Identity
    time: datetime


LedgerEvent = Union[LandRegistered, LandVerified, OwnershipTransferred]

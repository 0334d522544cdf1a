"""
Title Ledger — FastAPI Server
=============================

HTTP adapter over the registry service. Authentication is handled upstream:
the identity-aware gateway in front of this server puts the authenticated
caller address in the ``X-Caller`` header.

Endpoints:
    POST /lands                          Register a land (admin)
    POST /lands/{id}/verify              Verify a land (admin)
    POST /lands/{id}/transfer            Transfer ownership (current owner)
    POST /admin/transfer                 Hand admin rights to another identity (admin)
    GET  /admin                          Current admin identity
    GET  /lands                          All land ids, registration order
    GET  /lands/count                    Number of registered lands
    GET  /lands/{id}                     Land details
    GET  /lands/{id}/history             Ownership history, oldest first
    GET  /lands/{id}/owner/{address}     Is ``address`` the current owner?
    GET  /owners/{address}/lands         Lands currently held by ``address``
    GET  /events                         Events emitted so far
    GET  /health                         Health check / readiness probe

Run:
    uvicorn api:app --reload              # Dev (http://localhost:8000)
    uvicorn api:app --host 0.0.0.0        # Production
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from title_ledger import __version__
from title_ledger.config import LedgerSettings
from title_ledger.events import EventLog
from title_ledger.exceptions import (
    AuthorizationError,
    InvalidArgumentError,
    LedgerError,
    NotFoundError,
    StateConflictError,
)
from title_ledger.models import Land, OwnershipRecord
from title_ledger.registry import RegistryService

# ─── Load .env if available ──────────────────────────────────────────
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    pass

logger = logging.getLogger(__name__)


# ─── Application Lifespan (deploy the registry) ─────────────────────

_registry: RegistryService | None = None
_events: EventLog | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Deploy a fresh registry, administered by the configured identity."""
    global _registry, _events  # noqa: PLW0603
    settings = LedgerSettings.from_env()
    logging.basicConfig(level=settings.log_level)
    _events = EventLog()
    _registry = RegistryService.from_settings(settings, sink=_events)
    yield
    _registry = None
    _events = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="Title Ledger API",
    description=(
        "Append-only land title registry. Admin-gated registration and "
        "verification, owner-gated transfer, permanent ownership history."
    ),
    version=__version__,
    lifespan=lifespan,
)

_STATUS_BY_ERROR: dict[type[LedgerError], int] = {
    AuthorizationError: 403,
    NotFoundError: 404,
    StateConflictError: 409,
    InvalidArgumentError: 422,
}


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status = _STATUS_BY_ERROR.get(type(exc), 400)
    return JSONResponse(
        status_code=status,
        content={"code": exc.code, "message": str(exc), "details": exc.details},
    )


# ─── Request / Response Schemas ─────────────────────────────────────


class RegisterLandRequest(BaseModel):
    land_id: int = Field(..., description="Unique land identifier.")
    owner: str = Field(..., description="Identity of the initial owner.")
    size_sq_ft: int = Field(..., description="Parcel size in square feet.")
    location: str = Field(..., description="Free-form location, e.g. '10,20'.")
    title_number: str = Field(..., description="Land title number, e.g. 'T-1'.")

    model_config = {"json_schema_extra": {"example": {
        "land_id": 1,
        "owner": "0xab8483f64d9c6d1ecf9b849ae677dd3315835cb2",
        "size_sq_ft": 1000,
        "location": "10,20",
        "title_number": "T-1",
    }}}


class TransferRequest(BaseModel):
    new_owner: str


class TransferAdminRequest(BaseModel):
    new_admin: str


class LandOut(Land):
    """API-facing land (inherits all fields from Land)."""


class RecordOut(OwnershipRecord):
    """API-facing ownership record (inherits all fields from OwnershipRecord)."""


class AdminResponse(BaseModel):
    admin: str


class CountResponse(BaseModel):
    count: int


class OwnershipCheckResponse(BaseModel):
    land_id: int
    address: str
    is_owner: bool


class EventOut(BaseModel):
    event: str
    land_id: int
    time: datetime
    owner: str | None = None
    old_owner: str | None = None
    new_owner: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    lands_registered: int
    verification_policy: str


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_registry() -> RegistryService:
    if _registry is None:
        raise HTTPException(status_code=503, detail="Registry not deployed")
    return _registry


def _land_out(land: Land) -> LandOut:
    return LandOut.model_validate(land, from_attributes=True)


# ─── Write Endpoints ─────────────────────────────────────────────────


@app.post("/lands", status_code=201, summary="Register a land", tags=["Lands"])
def register_land(
    request: RegisterLandRequest, x_caller: str = Header(...)
) -> LandOut:
    land = _get_registry().register_land(
        x_caller,
        request.land_id,
        request.owner,
        request.size_sq_ft,
        request.location,
        request.title_number,
    )
    return _land_out(land)


@app.post("/lands/{land_id}/verify", summary="Verify a land", tags=["Lands"])
def verify_land(land_id: int, x_caller: str = Header(...)) -> LandOut:
    return _land_out(_get_registry().verify_land(x_caller, land_id))


@app.post("/lands/{land_id}/transfer", summary="Transfer ownership", tags=["Lands"])
def transfer_ownership(
    land_id: int, request: TransferRequest, x_caller: str = Header(...)
) -> LandOut:
    return _land_out(
        _get_registry().transfer_ownership(x_caller, land_id, request.new_owner)
    )


@app.post("/admin/transfer", summary="Transfer admin rights", tags=["Admin"])
def transfer_admin(
    request: TransferAdminRequest, x_caller: str = Header(...)
) -> AdminResponse:
    return AdminResponse(admin=_get_registry().transfer_admin(x_caller, request.new_admin))


# ─── Read Endpoints ──────────────────────────────────────────────────


@app.get("/admin", summary="Current admin", tags=["Admin"])
def get_admin() -> AdminResponse:
    return AdminResponse(admin=_get_registry().admin)


@app.get("/lands", summary="All land ids", tags=["Lands"])
def get_all_land_ids() -> list[int]:
    return _get_registry().get_all_land_ids()


@app.get("/lands/count", summary="Number of lands", tags=["Lands"])
def get_land_count() -> CountResponse:
    return CountResponse(count=_get_registry().get_land_count())


@app.get("/lands/{land_id}", summary="Land details", tags=["Lands"])
def get_land_details(land_id: int) -> LandOut:
    return _land_out(_get_registry().get_land_details(land_id))


@app.get("/lands/{land_id}/history", summary="Ownership history", tags=["Lands"])
def get_ownership_history(land_id: int) -> list[RecordOut]:
    return [
        RecordOut.model_validate(r, from_attributes=True)
        for r in _get_registry().get_ownership_history(land_id)
    ]


@app.get("/lands/{land_id}/owner/{address}", summary="Ownership check", tags=["Lands"])
def is_owner(land_id: int, address: str) -> OwnershipCheckResponse:
    return OwnershipCheckResponse(
        land_id=land_id,
        address=address,
        is_owner=_get_registry().is_owner(land_id, address),
    )


@app.get("/owners/{address}/lands", summary="Lands held by an owner", tags=["Owners"])
def get_owner_lands(address: str) -> list[int]:
    return _get_registry().get_owner_lands(address)


@app.get("/events", summary="Emitted events", tags=["System"])
def get_events(land_id: int | None = None) -> list[EventOut]:
    _get_registry()
    assert _events is not None
    events = _events.events if land_id is None else _events.for_land(land_id)
    return [EventOut.model_validate(e.model_dump()) for e in events]


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Registry not yet deployed"}},
)
def health_check() -> HealthResponse:
    registry = _get_registry()
    return HealthResponse(
        status="healthy",
        version=__version__,
        lands_registered=registry.get_land_count(),
        verification_policy=registry.policy.value,
    )

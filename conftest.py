"""Pytest configuration — ensures the project root is importable."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from title_ledger.events import EventLog  # noqa: E402
from title_ledger.registry import RegistryService  # noqa: E402

ADMIN = "0x5b38da6a701c568545dcfcb03fcb875f56beddc4"
OWNER_X = "0xab8483f64d9c6d1ecf9b849ae677dd3315835cb2"
OWNER_Y = "0x4b20993bc481177ec7e8f571cecae8a9e22c02db"
OWNER_Z = "0x78731d3ca6b7e34ac0f824c42a7cc18a495cabab"


@pytest.fixture(autouse=True)
def _clean_ledger_env(monkeypatch):
    """Keep a developer's LEDGER_* variables out of the suite."""
    for name in ("LEDGER_ADMIN", "LEDGER_VERIFICATION_POLICY", "LEDGER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TickingClock:
    """Deterministic clock: each call is one second after the previous."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def events() -> EventLog:
    return EventLog()


@pytest.fixture
def registry(events, clock) -> RegistryService:
    return RegistryService(ADMIN, sink=events, clock=clock)


@pytest.fixture
def registered(registry) -> RegistryService:
    """Registry with land 1 registered to OWNER_X (unverified)."""
    registry.register_land(ADMIN, 1, OWNER_X, 1000, "10,20", "T-1")
    return registry


@pytest.fixture
def verified(registered) -> RegistryService:
    """Registry with land 1 registered to OWNER_X and verified."""
    registered.verify_land(ADMIN, 1)
    return registered

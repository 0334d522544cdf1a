#!/usr/bin/env python3
"""
Title Ledger — Entry Point
===========================

Deploys a registry (the deploying identity becomes admin) and walks it
through the reference lifecycle: register, verify, transfer, and the
rejections the ledger must produce along the way.

Usage:
    python main.py                                     # Default demo admin
    LEDGER_ADMIN=0x... python main.py                  # Deploy as a specific identity
    LEDGER_VERIFICATION_POLICY=preserve python main.py # Verification survives transfer
"""

from __future__ import annotations

import logging
import sys

from title_ledger.config import LedgerSettings
from title_ledger.events import EventLog
from title_ledger.exceptions import LedgerError
from title_ledger.models import VerificationPolicy
from title_ledger.registry import RegistryService

# ─── Load .env if available (optional dependency) ────────────────────
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    pass


# ─── Demo Identities ────────────────────────────────────────────────

OWNER_X = "0xab8483f64d9c6d1ecf9b849ae677dd3315835cb2"
OWNER_Y = "0x4b20993bc481177ec7e8f571cecae8a9e22c02db"
OWNER_Z = "0x78731d3ca6b7e34ac0f824c42a7cc18a495cabab"


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72


# ─── Pretty Printer Helpers ─────────────────────────────────────────


def _print_land(registry: RegistryService, land_id: int) -> None:
    land = registry.get_land_details(land_id)
    status = f"{_GREEN}Verified{_RESET}" if land.verified else f"{_DIM}Not Verified{_RESET}"
    print(f"  Land ID:     {land.land_id}")
    print(f"  Owner:       {land.owner}")
    print(f"  Size:        {land.size_sq_ft:,} sq. ft.")
    print(f"  Location:    {land.location}")
    print(f"  Title:       {land.title_number}")
    print(f"  Status:      {status}")
    print("  History:")
    for record in registry.get_ownership_history(land_id):
        mark = "verified" if record.verified_at_time else "unverified"
        print(f"    {_DIM}{record.timestamp:%Y-%m-%d %H:%M:%S}{_RESET}  {record.owner}  ({mark})")


def _check(label: str, passed: bool) -> bool:
    color, word = (_GREEN, "PASS") if passed else (_RED, "FAIL")
    print(f"  {color}[{word}]{_RESET} {label}")
    return passed


def _expect_rejection(label: str, code: str, action) -> bool:
    try:
        action()
    except LedgerError as e:
        print(f"    {_DIM}{e.code}: {e}{_RESET}")
        return _check(label, e.code == code)
    return _check(label, False)


# ─── Scenarios ──────────────────────────────────────────────────────


def run_scenarios(registry: RegistryService) -> bool:
    """Run the reference lifecycle. Returns True if every check passed."""
    admin = registry.admin
    resets = registry.policy is VerificationPolicy.RESET_ON_TRANSFER
    results: list[bool] = []

    print(f"\n  {_BOLD}A. Registration{_RESET}")
    registry.register_land(admin, 1, OWNER_X, 1000, "10,20", "T-1")
    results.append(_check("land count is 1", registry.get_land_count() == 1))
    results.append(_check("new land is unverified", not registry.get_land_details(1).verified))

    print(f"\n  {_BOLD}B. Verification and transfer{_RESET}")
    registry.verify_land(admin, 1)
    history = registry.get_ownership_history(1)
    results.append(_check("first history entry is verified", history[0].verified_at_time))
    registry.transfer_ownership(OWNER_X, 1, OWNER_Y)
    land = registry.get_land_details(1)
    results.append(_check("owner is now Y", land.owner == OWNER_Y))
    if resets:
        results.append(_check("verification reset", land.verified is False))
    else:
        results.append(_check("verification preserved", land.verified is True))
    results.append(_check("Y holds [1]", registry.get_owner_lands(OWNER_Y) == [1]))
    results.append(_check("X holds nothing", registry.get_owner_lands(OWNER_X) == []))

    print(f"\n  {_BOLD}C. Transfer before re-verification{_RESET}")
    if not resets:
        print(f"    {_DIM}skipped: verification survives transfer under this policy{_RESET}")
    else:
        results.append(_expect_rejection(
            "Y cannot transfer unverified land",
            "STATE_CONFLICT",
            lambda: registry.transfer_ownership(OWNER_Y, 1, OWNER_Z),
        ))
        results.append(_check("owner unchanged", registry.get_land_details(1).owner == OWNER_Y))

    print(f"\n  {_BOLD}D. Registration by a non-admin{_RESET}")
    results.append(_expect_rejection(
        "non-admin cannot register",
        "UNAUTHORIZED",
        lambda: registry.register_land(OWNER_X, 2, OWNER_X, 500, "1,1", "T-2"),
    ))
    results.append(_check("no land created", registry.get_land_count() == 1))

    return all(results)


# ─── Main ────────────────────────────────────────────────────────────


def main():
    """Deploy a registry, run the reference scenarios, and print the outcome."""
    settings = LedgerSettings.from_env()
    logging.basicConfig(level=settings.log_level)

    events = EventLog()
    registry = RegistryService.from_settings(settings, sink=events)

    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  TITLE LEDGER{_RESET}")
    print(f"{'=' * _WIDTH}")
    print(f"  Admin:       {registry.admin}")
    print(f"  Policy:      {registry.policy.value}")
    print(f"{'─' * _WIDTH}")

    passed = run_scenarios(registry)

    print(f"\n{'─' * _WIDTH}")
    _print_land(registry, 1)
    print(f"{'─' * _WIDTH}")
    print(f"  Events:      {', '.join(events.names())}")
    print(f"{'=' * _WIDTH}")
    if passed:
        print(f"  {_GREEN}{_BOLD}ALL SCENARIOS PASSED{_RESET}")
    else:
        print(f"  {_RED}{_BOLD}SCENARIO FAILURES{_RESET}")
    print(f"{'=' * _WIDTH}\n")

    sys.exit(0 if passed else 1)


if __name__ == "__main__":
    main()

"""
Role checks for ledger operations.

Authorization is a flat set of guard clauses run before each mutating
operation: there is one admin identity, and every land has one current
owner. Nothing here mutates land state.
"""

from __future__ import annotations

import logging

from .exceptions import AuthorizationError, InvalidArgumentError
from .models import Identity, Land, is_null_identity, normalize_identity

logger = logging.getLogger(__name__)


class AccessController:
    """Holds the single administrator identity."""

    def __init__(self, admin: Identity):
        if is_null_identity(admin):
            raise InvalidArgumentError(
                "Registry admin cannot be the null identity",
                details={"operation": "deploy", "reason": "null_admin"},
            )
        self._admin = normalize_identity(admin)

    @property
    def admin(self) -> Identity:
        return self._admin

    def is_admin(self, caller: Identity) -> bool:
        return normalize_identity(caller) == self._admin

    def require_admin(self, caller: Identity, operation: str) -> None:
        if not self.is_admin(caller):
            raise AuthorizationError(
                f"Only the admin may call {operation}",
                details={
                    "operation": operation,
                    "caller": normalize_identity(caller),
                    "reason": "not_admin",
                },
            )

    def require_owner(self, caller: Identity, land: Land, operation: str) -> None:
        if normalize_identity(caller) != land.owner:
            raise AuthorizationError(
                f"Only the current owner of land {land.land_id} may call {operation}",
                details={
                    "operation": operation,
                    "land_id": land.land_id,
                    "caller": normalize_identity(caller),
                    "reason": "not_owner",
                },
            )

    def set_admin(self, caller: Identity, new_admin: Identity) -> Identity:
        """Hand admin rights to ``new_admin``. Returns the previous admin."""
        self.require_admin(caller, "transfer_admin")
        if is_null_identity(new_admin):
            raise InvalidArgumentError(
                "New admin cannot be the null identity",
                details={"operation": "transfer_admin", "reason": "null_admin"},
            )
        previous = self._admin
        self._admin = normalize_identity(new_admin)
        logger.info("Admin transferred from %s to %s", previous, self._admin)
        return previous

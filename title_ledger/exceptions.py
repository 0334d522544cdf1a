"""
Custom exception hierarchy for ledger operations.

Each exception type maps to one category of rejected operation, so callers
(the HTTP adapter, the demo runner) can map them to a response without
parsing messages. Every error is raised before any state is touched.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for all rejected ledger operations."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.details = details or {}
        super().__init__(message)

    @property
    def operation(self) -> str | None:
        return self.details.get("operation")


class AuthorizationError(LedgerError):
    """The caller does not hold the role the operation requires."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("UNAUTHORIZED", message, details)


class NotFoundError(LedgerError):
    """The referenced land id has never been registered."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("LAND_NOT_FOUND", message, details)


class StateConflictError(LedgerError):
    """Duplicate id, already verified, or not yet verified for transfer."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("STATE_CONFLICT", message, details)


class InvalidArgumentError(LedgerError):
    """Null or self-referential identity, or an out-of-range value."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("INVALID_ARGUMENT", message, details)

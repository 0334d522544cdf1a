"""
Runtime settings, read from the environment.

Entry points call ``load_dotenv()`` first, so a local ``.env`` file works the
same as exported variables:

    LEDGER_ADMIN=0xAbC...              # Deploying identity (initial admin)
    LEDGER_VERIFICATION_POLICY=reset   # or "preserve"
    LEDGER_LOG_LEVEL=INFO
"""

from __future__ import annotations

import os

from pydantic import BaseModel, field_validator

from .models import Identity, VerificationPolicy

DEFAULT_ADMIN: Identity = "0x5b38da6a701c568545dcfcb03fcb875f56beddc4"


class LedgerSettings(BaseModel):
    admin: Identity = DEFAULT_ADMIN
    verification_policy: VerificationPolicy = VerificationPolicy.RESET_ON_TRANSFER
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    @classmethod
    def from_env(cls) -> LedgerSettings:
        values: dict[str, str] = {}
        if admin := os.environ.get("LEDGER_ADMIN"):
            values["admin"] = admin
        if policy := os.environ.get("LEDGER_VERIFICATION_POLICY"):
            values["verification_policy"] = policy.strip().lower()
        if level := os.environ.get("LEDGER_LOG_LEVEL"):
            values["log_level"] = level
        return cls(**values)

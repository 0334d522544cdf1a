"""
Title Ledger — an append-only land title registry.

Architecture: AccessController → LandStore → HistoryLog / OwnerIndex → RegistryService
Philosophy:  Verify before you transfer. Never rewrite history.
"""

__version__ = "1.0.0"

"""Ledger error types."""

from __future__ import annotations


class ArcStoreError(Exception):
    """Raised when the ledger rejects a read or write."""


class ArcNotFoundError(ArcStoreError, LookupError):
    """Raised when an arc id has no row in the ledger."""

    def __init__(self, arc_id: str):
        self.arc_id = arc_id
        super().__init__(f"Arc not found in ledger: {arc_id}")


class ConfigurationError(ArcStoreError):
    """Raised when the ledger schema lacks required columns."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            "Lifecycle columns not found in ledger: "
            + ", ".join(missing)
            + ". Run scripts/migrate_ledger.py first."
        )

"""EntryKind enum tagging the two ledger streams."""

from enum import Enum


class EntryKind(Enum):
    """Which stream an entry belongs to."""

    DAILY_LOG = "DAILY_LOG"
    FUEL_ENTRY = "FUEL_ENTRY"

    @property
    def label(self) -> str:
        """Human-readable stream name."""
        return "daily log" if self is EntryKind.DAILY_LOG else "fuel entry"

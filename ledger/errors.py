"""
Typed failures for ledger validation.

Validation and state-machine calls return these as values; value type
constructors raise them. Each carries what a caller needs to show the user.
"""

from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .entries import LedgerEntry
    from .kind import EntryKind


class LedgerError(Exception):
    """Base class for all ledger validation failures."""

    recoverable = True


class OpenConflict(LedgerError):
    """An OPEN entry of the same kind already exists for the vehicle."""

    def __init__(self, kind: "EntryKind", existing: "LedgerEntry"):
        self.kind = kind
        self.existing = existing
        super().__init__(
            f"This vehicle already has an open {kind.label}. Please close it first."
        )


class ContinuityViolation(LedgerError):
    """Opening reading is below the vehicle's last recorded closing reading."""

    def __init__(
        self,
        opening_km: float,
        bound: float,
        source: Optional["LedgerEntry"] = None,
    ):
        self.opening_km = opening_km
        self.bound = bound
        self.source = source
        origin = f" {source.kind.label}" if source is not None else ""
        super().__init__(
            f"Opening km ({opening_km:.1f}) must be >= last{origin} "
            f"closing km ({bound:.1f} km)"
        )


class BelowOpening(LedgerError):
    """Closing reading is below the entry's own opening reading."""

    def __init__(self, closing_km: float, opening_km: float):
        self.closing_km = closing_km
        self.opening_km = opening_km
        super().__init__(
            f"Closing km ({closing_km:.1f}) cannot be less than "
            f"opening km ({opening_km:.1f} km)"
        )


class AlreadyClosed(LedgerError):
    """Attempted to close a terminal entry. Reload history before retrying."""

    recoverable = False

    def __init__(self, entry: Optional["LedgerEntry"] = None):
        self.entry = entry
        what = entry.kind.label if entry is not None else "entry"
        ident = f" #{entry.id}" if entry is not None and entry.id is not None else ""
        super().__init__(f"The {what}{ident} is already closed")


class MissingRequiredField(LedgerError):
    """A required value is absent or out of range."""

    def __init__(self, field: str, value: Any = None):
        self.field = field
        self.value = value
        if value is None:
            message = f"Missing required field: {field}"
        else:
            message = f"Invalid value for {field}: {value!r}"
        super().__init__(message)

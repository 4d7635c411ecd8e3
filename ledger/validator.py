"""
Odometer continuity validation.

A vehicle has one physical odometer shared by both streams, so a new opening
reading is checked against the closed entries of both kinds. Both functions
are pure: they return the failure as a value, or None when the proposal is
acceptable.
"""

import math
from typing import Optional

from .entries import LedgerEntry
from .errors import (
    AlreadyClosed,
    BelowOpening,
    ContinuityViolation,
    LedgerError,
    MissingRequiredField,
    OpenConflict,
)
from .history import VehicleHistory
from .kind import EntryKind
from .status import EntryStatus


def validate_open(
    history: VehicleHistory, kind: EntryKind, opening_km: float
) -> Optional[LedgerError]:
    """Check a proposed new OPEN entry of kind against the vehicle's history."""
    existing = history.open_entry(kind)
    if existing is not None:
        return OpenConflict(kind, existing)

    if not math.isfinite(opening_km):
        return MissingRequiredField("opening_km", opening_km)
    last_closed = history.last_closed_entry
    if last_closed is not None and opening_km < last_closed.closing_km:
        return ContinuityViolation(opening_km, last_closed.closing_km, last_closed)
    return None


def validate_close(entry: LedgerEntry, closing_km: float) -> Optional[LedgerError]:
    """Check a proposed closing reading for an entry."""
    if not entry.status.can_transition_to(EntryStatus.CLOSED):
        return AlreadyClosed(entry)
    if not math.isfinite(closing_km):
        return MissingRequiredField("closing_km", closing_km)
    if closing_km < entry.opening_km:
        return BelowOpening(closing_km, entry.opening_km)
    return None

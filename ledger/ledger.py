"""
Ledger state machine: open, refill and close entries against a history snapshot.

Every operation returns an Outcome holding either the new entry or the
failure. Nothing is persisted here; the caller hands accepted entries to
the store, re-validating against a fresh snapshot right before the write.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Tuple

from .entries import DailyLog, FuelEntry, LedgerEntry
from .errors import AlreadyClosed, LedgerError, MissingRequiredField
from .history import VehicleHistory
from .interval import OdometerInterval
from .kind import EntryKind
from .status import EntryStatus
from .validator import validate_close, validate_open

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """
    Result of a ledger operation: exactly one of entry or error is set.

    A chained refill also sets closed to the fuel entry it closed; both
    entries must be stored together.
    """

    entry: Optional[LedgerEntry] = None
    error: Optional[LedgerError] = None
    closed: Optional[LedgerEntry] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def entries(self) -> Tuple[LedgerEntry, ...]:
        """Entries to store, in write order."""
        if not self.ok:
            return ()
        if self.closed is not None:
            return (self.closed, self.entry)
        return (self.entry,)

    def unwrap(self) -> LedgerEntry:
        """Return the entry, raising the error if the operation failed."""
        if self.error is not None:
            raise self.error
        return self.entry


def _reject(vehicle_id, action: str, error: LedgerError) -> Outcome:
    logger.info("Rejected %s for vehicle %s: %s", action, vehicle_id, error)
    return Outcome(error=error)


def _accept(action: str, entry: LedgerEntry) -> Outcome:
    logger.debug(
        "Accepted %s for vehicle %s at %.1f km",
        action,
        entry.vehicle_id,
        entry.closing_km if entry.is_closed else entry.opening_km,
    )
    return Outcome(entry=entry)


def _open(history: VehicleHistory, entry_factory, kind: EntryKind, opening_km, action):
    try:
        interval = OdometerInterval(opening_km)
    except LedgerError as e:
        return _reject(history.vehicle_id, action, e)

    error = validate_open(history, kind, interval.opening_km)
    if error is not None:
        return _reject(history.vehicle_id, action, error)
    return _accept(action, entry_factory(interval))


def open_daily_log(history: VehicleHistory, day: date, opening_km: float) -> Outcome:
    """Start a vehicle's working day."""
    if day is None:
        return _reject(history.vehicle_id, "open daily log", MissingRequiredField("date"))
    return _open(
        history,
        lambda interval: DailyLog(history.vehicle_id, day, interval),
        EntryKind.DAILY_LOG,
        opening_km,
        "open daily log",
    )


def _check_fuel_details(
    supplier_id: Optional[int],
    litres: Optional[float],
    price_per_litre: Optional[float],
) -> Optional[LedgerError]:
    if supplier_id is None:
        return MissingRequiredField("supplier_id")
    if litres is None:
        return MissingRequiredField("litres")
    if not math.isfinite(litres) or litres <= 0:
        return MissingRequiredField("litres", litres)
    if price_per_litre is None:
        return MissingRequiredField("price_per_litre")
    if not math.isfinite(price_per_litre) or price_per_litre < 0:
        return MissingRequiredField("price_per_litre", price_per_litre)
    return None


def open_fuel_entry(
    history: VehicleHistory,
    day: date,
    supplier_id: int,
    litres: float,
    price_per_litre: float,
    opening_km: float,
) -> Outcome:
    """Record a refuelling event with its fuel details up front."""
    action = "open fuel entry"
    if day is None:
        return _reject(history.vehicle_id, action, MissingRequiredField("date"))
    error = _check_fuel_details(supplier_id, litres, price_per_litre)
    if error is not None:
        return _reject(history.vehicle_id, action, error)
    return _open(
        history,
        lambda interval: FuelEntry(
            history.vehicle_id,
            day,
            interval,
            supplier_id=supplier_id,
            litres=litres,
            price_per_litre=price_per_litre,
        ),
        EntryKind.FUEL_ENTRY,
        opening_km,
        action,
    )


def refill(
    history: VehicleHistory,
    day: date,
    supplier_id: Optional[int] = None,
    opening_km: Optional[float] = None,
) -> Outcome:
    """
    Open an interval-only fuel entry at the vehicle's current position.

    If a fuel entry is still OPEN, the refill reading closes it and opens
    the next one, so a single reading ends one tank and starts the next.
    Either both happen or neither does; the closed entry is returned in
    Outcome.closed. A chained refill needs an explicit reading, and a
    predecessor still waiting for its fuel details must be completed with
    close_entry first.

    Without an open fuel entry the opening reading defaults to the last
    closing reading across both streams. Litres and price of the new
    entry are collected when it is closed.
    """
    action = "refill"
    if day is None:
        return _reject(history.vehicle_id, action, MissingRequiredField("date"))

    closed = None
    predecessor = history.open_entry(EntryKind.FUEL_ENTRY)
    if predecessor is not None:
        if opening_km is None:
            return _reject(history.vehicle_id, action, MissingRequiredField("opening_km"))
        chained = close_entry(predecessor, opening_km)
        if not chained.ok:
            return _reject(history.vehicle_id, action, chained.error)
        closed = chained.entry
        history = history.with_entry(closed)
    elif opening_km is None:
        opening_km = history.last_closing_km
        if opening_km is None:
            return _reject(history.vehicle_id, action, MissingRequiredField("opening_km"))

    outcome = _open(
        history,
        lambda interval: FuelEntry(
            history.vehicle_id, day, interval, supplier_id=supplier_id
        ),
        EntryKind.FUEL_ENTRY,
        opening_km,
        action,
    )
    if not outcome.ok or closed is None:
        return outcome
    return Outcome(entry=outcome.entry, closed=closed)


def close_entry(
    entry: LedgerEntry,
    closing_km: float,
    supplier_id: Optional[int] = None,
    litres: Optional[float] = None,
    price_per_litre: Optional[float] = None,
) -> Outcome:
    """
    Close an OPEN entry at closing_km.

    Fuel details may only be given to complete a refill placeholder; once
    supplied they become mandatory for that entry. Passing them anywhere
    else is a caller error and raises ValueError, except on an entry that
    is already closed, which always reports AlreadyClosed.
    """
    action = f"close {entry.kind.label}"
    if not entry.status.can_transition_to(EntryStatus.CLOSED):
        return _reject(entry.vehicle_id, action, AlreadyClosed(entry))
    if closing_km is None:
        return _reject(entry.vehicle_id, action, MissingRequiredField("closing_km"))

    given = (supplier_id, litres, price_per_litre)
    if any(value is not None for value in given):
        if not isinstance(entry, FuelEntry):
            raise ValueError("Fuel details only apply to fuel entries")
        if not entry.is_placeholder:
            raise ValueError(
                f"Fuel entry #{entry.id} already has its fuel details; "
                "they are fixed at creation"
            )

    if isinstance(entry, FuelEntry) and entry.is_placeholder:
        completed = {
            "supplier_id": entry.supplier_id if entry.supplier_id is not None else supplier_id,
            "litres": entry.litres if entry.litres is not None else litres,
            "price_per_litre": (
                entry.price_per_litre
                if entry.price_per_litre is not None
                else price_per_litre
            ),
        }
        error = _check_fuel_details(**completed)
        if error is not None:
            return _reject(entry.vehicle_id, action, error)
        entry = replace(entry, **completed)

    error = validate_close(entry, closing_km)
    if error is not None:
        return _reject(entry.vehicle_id, action, error)
    return _accept(action, entry.close(closing_km))

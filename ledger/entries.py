"""Ledger entries: DailyLog and FuelEntry as variants of LedgerEntry."""

import math
from dataclasses import dataclass, replace
from datetime import date
from typing import ClassVar, Optional

from .errors import AlreadyClosed, MissingRequiredField
from .interval import OdometerInterval
from .kind import EntryKind
from .status import EntryStatus


@dataclass(frozen=True)
class LedgerEntry:
    """
    An intervalled, stateful transaction recorded against one vehicle.

    Entries are immutable. Closing returns a new entry; the id is assigned
    by the store and is None until the entry has been saved.
    """

    kind: ClassVar[EntryKind]

    vehicle_id: int
    date: date
    interval: OdometerInterval
    status: EntryStatus = EntryStatus.OPEN
    id: Optional[int] = None

    def __post_init__(self):
        if self.status is EntryStatus.CLOSED and not self.interval.is_closed:
            raise MissingRequiredField("closing_km")
        if self.status is EntryStatus.OPEN and self.interval.is_closed:
            raise ValueError("An OPEN entry cannot carry a closing reading")

    @property
    def is_open(self) -> bool:
        return self.status is EntryStatus.OPEN

    @property
    def is_closed(self) -> bool:
        return self.status is EntryStatus.CLOSED

    @property
    def opening_km(self) -> float:
        return self.interval.opening_km

    @property
    def closing_km(self) -> Optional[float]:
        return self.interval.closing_km

    @property
    def distance(self) -> Optional[float]:
        return self.interval.distance

    def close(self, closing_km: float) -> "LedgerEntry":
        """Return a CLOSED copy of this entry. Raises AlreadyClosed or BelowOpening."""
        if not self.status.can_transition_to(EntryStatus.CLOSED):
            raise AlreadyClosed(self)
        return replace(
            self,
            interval=self.interval.closed_at(closing_km),
            status=EntryStatus.CLOSED,
        )

    def with_id(self, entry_id: int) -> "LedgerEntry":
        return replace(self, id=entry_id)


@dataclass(frozen=True)
class DailyLog(LedgerEntry):
    """Start/stop odometer readings for one working day."""

    kind: ClassVar[EntryKind] = EntryKind.DAILY_LOG


@dataclass(frozen=True)
class FuelEntry(LedgerEntry):
    """
    A refuelling event bracketing an odometer interval.

    A refill placeholder may leave supplier, litres and price unset until
    the entry is closed.
    """

    kind: ClassVar[EntryKind] = EntryKind.FUEL_ENTRY

    supplier_id: Optional[int] = None
    litres: Optional[float] = None
    price_per_litre: Optional[float] = None

    def __post_init__(self):
        super().__post_init__()
        if self.litres is not None:
            if not math.isfinite(self.litres) or self.litres < 0:
                raise MissingRequiredField("litres", self.litres)
            # recorded history may hold an empty fill; a new one may not
            if self.is_open and self.litres == 0:
                raise MissingRequiredField("litres", self.litres)
        if self.price_per_litre is not None:
            if not math.isfinite(self.price_per_litre) or self.price_per_litre < 0:
                raise MissingRequiredField("price_per_litre", self.price_per_litre)

    @property
    def is_placeholder(self) -> bool:
        """True for an interval-only entry still waiting for fuel details."""
        return (
            self.supplier_id is None
            or self.litres is None
            or self.price_per_litre is None
        )

    @property
    def total_cost(self) -> Optional[float]:
        if self.litres is None or self.price_per_litre is None:
            return None
        return self.litres * self.price_per_litre

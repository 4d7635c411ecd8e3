"""VehicleHistory - the immutable per-vehicle snapshot both streams are validated against."""

from typing import Iterable, List, Optional, Tuple

from .entries import DailyLog, FuelEntry, LedgerEntry
from .kind import EntryKind


class VehicleHistory:
    """All daily logs and fuel entries recorded for one vehicle, any status."""

    def __init__(
        self,
        vehicle_id: int,
        daily_logs: Optional[Iterable[DailyLog]] = None,
        fuel_entries: Optional[Iterable[FuelEntry]] = None,
    ):
        self.vehicle_id = vehicle_id
        self._daily_logs: Tuple[DailyLog, ...] = tuple(daily_logs or ())
        self._fuel_entries: Tuple[FuelEntry, ...] = tuple(fuel_entries or ())
        for entry in self._daily_logs + self._fuel_entries:
            if entry.vehicle_id != vehicle_id:
                raise ValueError(
                    f"{entry.kind.label} #{entry.id} belongs to vehicle "
                    f"{entry.vehicle_id}, not {vehicle_id}"
                )

    @property
    def daily_logs(self) -> Tuple[DailyLog, ...]:
        return self._daily_logs

    @property
    def fuel_entries(self) -> Tuple[FuelEntry, ...]:
        return self._fuel_entries

    def entries(self, kind: Optional[EntryKind] = None) -> List[LedgerEntry]:
        """Entries of one stream, or both streams merged when kind is None."""
        if kind is EntryKind.DAILY_LOG:
            return list(self._daily_logs)
        if kind is EntryKind.FUEL_ENTRY:
            return list(self._fuel_entries)
        return list(self._daily_logs) + list(self._fuel_entries)

    def open_entries(self, kind: Optional[EntryKind] = None) -> List[LedgerEntry]:
        return [e for e in self.entries(kind) if e.is_open]

    def open_entry(self, kind: EntryKind) -> Optional[LedgerEntry]:
        """The OPEN entry of a stream, if any."""
        entries = self.open_entries(kind)
        return entries[0] if entries else None

    def closed_entries(self, kind: Optional[EntryKind] = None) -> List[LedgerEntry]:
        return [e for e in self.entries(kind) if e.is_closed]

    @property
    def last_closed_entry(self) -> Optional[LedgerEntry]:
        """The CLOSED entry, of either stream, with the highest closing reading."""
        closed = self.closed_entries()
        if not closed:
            return None
        return max(closed, key=lambda e: e.closing_km)

    @property
    def last_closing_km(self) -> Optional[float]:
        """Highest closing reading across both streams."""
        entry = self.last_closed_entry
        return entry.closing_km if entry else None

    @property
    def current_km(self) -> Optional[float]:
        """
        Best known odometer position: the highest reading recorded anywhere,
        including the opening readings of entries still in progress.
        """
        readings = [e.opening_km for e in self.open_entries()]
        if self.last_closing_km is not None:
            readings.append(self.last_closing_km)
        return max(readings) if readings else None

    def get_entry(self, kind: EntryKind, entry_id: int) -> Optional[LedgerEntry]:
        for entry in self.entries(kind):
            if entry.id == entry_id:
                return entry
        return None

    def get_entries_sorted(
        self,
        kind: Optional[EntryKind] = None,
        sort_by: str = "date",
        reverse: bool = True,
    ) -> List[LedgerEntry]:
        """
        Get entries sorted by specified field.

        Args:
            sort_by: "date" or "km"
            reverse: If True, newest/highest first (default)
        """
        entries = self.entries(kind)
        if sort_by == "date":
            return sorted(
                entries, key=lambda e: (e.date, e.opening_km), reverse=reverse
            )
        elif sort_by == "km":
            return sorted(entries, key=lambda e: e.opening_km, reverse=reverse)
        return entries

    def with_entry(self, entry: LedgerEntry) -> "VehicleHistory":
        """
        Return a new snapshot including entry.

        An entry whose id matches a stored one replaces it; anything else
        is appended.
        """
        daily_logs = list(self._daily_logs)
        fuel_entries = list(self._fuel_entries)
        target = daily_logs if entry.kind is EntryKind.DAILY_LOG else fuel_entries
        for index, existing in enumerate(target):
            if entry.id is not None and existing.id == entry.id:
                target[index] = entry
                break
        else:
            target.append(entry)
        return VehicleHistory(self.vehicle_id, daily_logs, fuel_entries)

"""Helper functions for derived distance, mileage and cost metrics."""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from .entries import FuelEntry, LedgerEntry
from .vehicle import RentPeriod, Vehicle

DAYS_PER_MONTH = 30
HOURS_PER_DAY = 24
SECONDS_PER_DAY = 24 * 60 * 60
MILEAGE_BENCHMARK = 15  # km/l treated as a 100% performance rate

DateLike = Union[date, datetime]

PERIODS = ("day", "week", "month", "year", "all")


def distance(entry: LedgerEntry) -> Optional[float]:
    """closing - opening for a CLOSED entry, None otherwise."""
    if not entry.is_closed:
        return None
    return entry.distance


def calc_mileage(
    distance_km: Optional[float], litres: Optional[float]
) -> Optional[float]:
    """Distance per litre. None (no data) when either side is unusable."""
    if distance_km is None or litres is None or litres <= 0:
        return None
    return distance_km / litres


def mileage(entry: FuelEntry) -> Optional[float]:
    return calc_mileage(distance(entry), entry.litres)


def fuel_cost(entry: FuelEntry) -> Optional[float]:
    """litres x price per litre, None while either is unknown."""
    return entry.total_cost


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def calc_rent_days(start: DateLike, end: DateLike) -> int:
    """
    Inclusive day count between start and end: ceil(span / 1 day) + 1.

    Plain dates are taken at midnight, so a same-day span counts as one
    day. A datetime end keeps its time of day, which adds a day for any
    part-day elapsed.
    """
    span = _as_datetime(end) - _as_datetime(start)
    return math.ceil(span.total_seconds() / SECONDS_PER_DAY) + 1


def calc_rent_units(days: int, period: RentPeriod) -> int:
    """Convert a day count into whole billing periods, rounding up."""
    if period is RentPeriod.MONTHLY:
        return math.ceil(days / DAYS_PER_MONTH)
    if period is RentPeriod.DAILY:
        return days
    if period is RentPeriod.HOURLY:
        return days * HOURS_PER_DAY
    raise ValueError(f"Unknown rent period: {period}")


def rent_cost(vehicle: Vehicle, as_of: Optional[DateLike] = None) -> Optional[float]:
    """
    Prorated rental cost of a vehicle up to its end date.

    - Owned vehicles and vehicles without a rent price: None
    - End defaults to as_of (now when omitted) if the vehicle has no end date
    """
    if not vehicle.is_rented or vehicle.rent_price is None:
        return None
    now = as_of if as_of is not None else datetime.now()
    start = vehicle.start_date or now
    end = vehicle.end_date or now
    days = calc_rent_days(start, end)
    return vehicle.rent_price * calc_rent_units(days, vehicle.rent_period)


@dataclass
class LedgerSummary:
    """Rollup of a set of CLOSED entries."""

    entry_count: int = 0
    total_distance: float = 0.0
    total_litres: float = 0.0
    total_cost: float = 0.0

    @property
    def average_mileage(self) -> Optional[float]:
        return calc_mileage(self.total_distance, self.total_litres)

    @property
    def cost_per_litre(self) -> Optional[float]:
        if self.total_litres <= 0:
            return None
        return self.total_cost / self.total_litres

    @property
    def cost_per_km(self) -> Optional[float]:
        if self.total_distance <= 0:
            return None
        return self.total_cost / self.total_distance


def summarize(entries: Iterable[LedgerEntry]) -> LedgerSummary:
    """
    Reduce CLOSED entries into totals.

    OPEN entries are skipped. An entry missing a value (e.g. litres on a
    daily log) is left out of that sum rather than counted as zero.
    """
    summary = LedgerSummary()
    for entry in entries:
        if not entry.is_closed:
            continue
        summary.entry_count += 1
        km = distance(entry)
        if km is not None:
            summary.total_distance += km
        if isinstance(entry, FuelEntry):
            if entry.litres is not None:
                summary.total_litres += entry.litres
            cost = fuel_cost(entry)
            if cost is not None:
                summary.total_cost += cost
    return summary


def date_range(period: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Start and end of a reporting window ending now.

    day covers today only; week, month and year reach back from today's
    midnight; all starts at the epoch.
    """
    now = now or datetime.now()
    today = datetime.combine(now.date(), time.min)
    if period == "day":
        return today, today + timedelta(days=1) - timedelta(microseconds=1)
    if period == "week":
        return today - timedelta(days=7), now
    if period == "month":
        return today - relativedelta(months=1), now
    if period == "year":
        return today - relativedelta(years=1), now
    if period == "all":
        return datetime(1970, 1, 1), now
    raise ValueError(f"Unknown period '{period}' (expected one of {', '.join(PERIODS)})")


def filter_by_date(
    entries: Iterable[LedgerEntry], start: DateLike, end: DateLike
) -> list:
    """Entries whose date falls inside [start, end]."""
    start_dt, end_dt = _as_datetime(start), _as_datetime(end)
    return [e for e in entries if start_dt <= _as_datetime(e.date) <= end_dt]

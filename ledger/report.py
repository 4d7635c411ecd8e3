"""
Per-vehicle and fleet-wide rollups for the vehicle dashboards.

All figures come from CLOSED entries only. A fleet is a sequence of
(Vehicle, VehicleHistory) pairs as loaded from the store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from .calculations import (
    MILEAGE_BENCHMARK,
    DateLike,
    calc_mileage,
    filter_by_date,
    rent_cost,
    summarize,
)
from .history import VehicleHistory
from .kind import EntryKind
from .vehicle import FuelType, Vehicle, VehicleStatus

Fleet = Sequence[Tuple[Vehicle, VehicleHistory]]


@dataclass
class VehicleStats:
    """Side-by-side view of a vehicle's two streams plus its costs."""

    fuel_total_km: float
    daily_log_total_km: float
    total_litres: float
    fuel_cost: float
    fuel_avg_mileage: Optional[float]
    daily_log_avg_mileage: Optional[float]
    cost_per_litre: Optional[float]
    cost_per_km: Optional[float]
    rent_cost: Optional[float]
    fuel_entry_count: int
    daily_log_count: int

    @property
    def km_difference(self) -> float:
        """Daily-log km minus fuel-stream km; non-zero means the streams disagree."""
        return self.daily_log_total_km - self.fuel_total_km

    @property
    def mileage_difference(self) -> Optional[float]:
        if self.fuel_avg_mileage is None or self.daily_log_avg_mileage is None:
            return None
        return self.daily_log_avg_mileage - self.fuel_avg_mileage

    @property
    def total_cost(self) -> float:
        return self.fuel_cost + (self.rent_cost or 0.0)


def vehicle_stats(
    vehicle: Vehicle, history: VehicleHistory, as_of: Optional[DateLike] = None
) -> VehicleStats:
    fuel = summarize(history.entries(EntryKind.FUEL_ENTRY))
    logs = summarize(history.entries(EntryKind.DAILY_LOG))
    return VehicleStats(
        fuel_total_km=fuel.total_distance,
        daily_log_total_km=logs.total_distance,
        total_litres=fuel.total_litres,
        fuel_cost=fuel.total_cost,
        fuel_avg_mileage=fuel.average_mileage,
        daily_log_avg_mileage=calc_mileage(logs.total_distance, fuel.total_litres),
        cost_per_litre=fuel.cost_per_litre,
        cost_per_km=fuel.cost_per_km,
        rent_cost=rent_cost(vehicle, as_of),
        fuel_entry_count=fuel.entry_count,
        daily_log_count=logs.entry_count,
    )


@dataclass
class FleetSummary:
    """Dashboard totals over a date window."""

    total_fuel_cost: float = 0.0
    total_distance: float = 0.0
    total_litres: float = 0.0
    total_rent_cost: float = 0.0
    active_vehicles: int = 0
    cost_by_fuel_type: Dict[FuelType, float] = field(
        default_factory=lambda: {fuel_type: 0.0 for fuel_type in FuelType}
    )


def fleet_summary(
    fleet: Fleet,
    start: DateLike,
    end: DateLike,
    as_of: Optional[DateLike] = None,
) -> FleetSummary:
    """Totals for closed fuel entries dated within [start, end]."""
    result = FleetSummary()
    for vehicle, history in fleet:
        entries = filter_by_date(history.entries(EntryKind.FUEL_ENTRY), start, end)
        summary = summarize(entries)
        result.total_fuel_cost += summary.total_cost
        result.total_distance += summary.total_distance
        result.total_litres += summary.total_litres
        result.cost_by_fuel_type[vehicle.fuel_type] += summary.total_cost
        if vehicle.status is VehicleStatus.ACTIVE:
            result.active_vehicles += 1
        rent = rent_cost(vehicle, as_of)
        if rent is not None:
            result.total_rent_cost += rent
    return result


@dataclass
class VehiclePerformance:
    vehicle: Vehicle
    total_km: float
    avg_mileage: Optional[float]
    performance_rate: float
    fuel_cost: float
    rent_cost: Optional[float]

    @property
    def total_cost(self) -> float:
        return self.fuel_cost + (self.rent_cost or 0.0)


def top_performers(
    fleet: Fleet,
    start: DateLike,
    end: DateLike,
    limit: int = 5,
    benchmark: float = MILEAGE_BENCHMARK,
    as_of: Optional[DateLike] = None,
) -> List[VehiclePerformance]:
    """
    Rank vehicles by fuel efficiency within a date window.

    performance_rate = min(avg_mileage / benchmark * 100, 100). Vehicles
    that covered no distance in the window are left out.
    """
    ranked = []
    for vehicle, history in fleet:
        entries = filter_by_date(history.entries(EntryKind.FUEL_ENTRY), start, end)
        summary = summarize(entries)
        if summary.total_distance <= 0:
            continue
        avg = summary.average_mileage
        rate = min(avg / benchmark * 100, 100.0) if avg else 0.0
        ranked.append(
            VehiclePerformance(
                vehicle=vehicle,
                total_km=summary.total_distance,
                avg_mileage=avg,
                performance_rate=rate,
                fuel_cost=summary.total_cost,
                rent_cost=rent_cost(vehicle, as_of),
            )
        )
    ranked.sort(key=lambda p: p.performance_rate, reverse=True)
    return ranked[:limit]


def monthly_litres(
    fleet: Fleet, now: Optional[datetime] = None, months: int = 12
) -> List[Tuple[str, Dict[FuelType, float]]]:
    """Litres per fuel type for each of the trailing calendar months, oldest first."""
    now = now or datetime.now()
    first = now.date().replace(day=1)
    buckets: Dict[Tuple[int, int], Dict[FuelType, float]] = {}
    labels = []
    for offset in range(months - 1, -1, -1):
        month = first - relativedelta(months=offset)
        key = (month.year, month.month)
        buckets[key] = {fuel_type: 0.0 for fuel_type in FuelType}
        labels.append((key, month.strftime("%b %y")))

    for vehicle, history in fleet:
        for entry in history.closed_entries(EntryKind.FUEL_ENTRY):
            key = (entry.date.year, entry.date.month)
            if key in buckets and entry.litres is not None:
                buckets[key][vehicle.fuel_type] += entry.litres

    return [(label, buckets[key]) for key, label in labels]

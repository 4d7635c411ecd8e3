"""
Vehicle usage ledger.

This package keeps a vehicle's two odometer streams consistent and
derives distance, mileage and cost from them:
- EntryStatus / EntryKind: Lifecycle states and stream tags
- OdometerInterval: Opening/closing reading value type
- DailyLog / FuelEntry: The two ledger entry variants
- Vehicle / Supplier: Reference records
- VehicleHistory: Immutable per-vehicle snapshot of both streams
- validate_open / validate_close: Continuity checks
- open_daily_log / open_fuel_entry / refill / close_entry: State machine
"""

from .status import EntryStatus
from .kind import EntryKind
from .errors import (
    LedgerError,
    OpenConflict,
    ContinuityViolation,
    BelowOpening,
    AlreadyClosed,
    MissingRequiredField,
)
from .interval import OdometerInterval
from .entries import LedgerEntry, DailyLog, FuelEntry
from .vehicle import (
    FuelType,
    Ownership,
    RentPeriod,
    VehicleStatus,
    StatusChange,
    Vehicle,
)
from .supplier import Supplier
from .history import VehicleHistory
from .validator import validate_open, validate_close
from .calculations import (
    distance,
    calc_mileage,
    mileage,
    fuel_cost,
    calc_rent_days,
    calc_rent_units,
    rent_cost,
    summarize,
    LedgerSummary,
    date_range,
    filter_by_date,
)
from .ledger import Outcome, open_daily_log, open_fuel_entry, refill, close_entry
from .loader import load_vehicle, load_history, save_entry

__all__ = [
    "EntryStatus",
    "EntryKind",
    "LedgerError",
    "OpenConflict",
    "ContinuityViolation",
    "BelowOpening",
    "AlreadyClosed",
    "MissingRequiredField",
    "OdometerInterval",
    "LedgerEntry",
    "DailyLog",
    "FuelEntry",
    "FuelType",
    "Ownership",
    "RentPeriod",
    "VehicleStatus",
    "StatusChange",
    "Vehicle",
    "Supplier",
    "VehicleHistory",
    "validate_open",
    "validate_close",
    "distance",
    "calc_mileage",
    "mileage",
    "fuel_cost",
    "calc_rent_days",
    "calc_rent_units",
    "rent_cost",
    "summarize",
    "LedgerSummary",
    "date_range",
    "filter_by_date",
    "Outcome",
    "open_daily_log",
    "open_fuel_entry",
    "refill",
    "close_entry",
    "load_vehicle",
    "load_history",
    "save_entry",
]

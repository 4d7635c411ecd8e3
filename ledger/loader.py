"""YAML loading and saving utilities for vehicle ledger files."""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import yaml
from dateutil.parser import isoparse

from .entries import DailyLog, FuelEntry, LedgerEntry
from .history import VehicleHistory
from .interval import OdometerInterval
from .kind import EntryKind
from .status import EntryStatus
from .supplier import Supplier
from .vehicle import (
    FuelType,
    Ownership,
    RentPeriod,
    StatusChange,
    Vehicle,
    VehicleStatus,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

ENTRY_SECTIONS = {
    EntryKind.DAILY_LOG: "dailyLogs",
    EntryKind.FUEL_ENTRY: "fuelEntries",
}


def _read(filename: PathLike) -> Dict[str, Any]:
    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader)
    return data or {}


def _write(filename: PathLike, data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _parse_date(value: Any) -> Optional[date]:
    """Accept YAML dates, datetimes and ISO strings."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(str(value)).date()


def _format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_status_change(dct: Dict[str, Any]) -> StatusChange:
    return StatusChange(
        VehicleStatus(dct["status"]),
        _parse_date(dct["startDate"]),
        _parse_date(dct.get("endDate")),
        dct.get("reason"),
    )


def _parse_vehicle(dct: Dict[str, Any]) -> Vehicle:
    rent_period = dct.get("rentPeriod")
    return Vehicle(
        id=dct["id"],
        name=dct["name"],
        number=dct.get("number", ""),
        project_id=dct.get("projectId"),
        fuel_type=FuelType(dct["fuelType"]),
        ownership=Ownership(dct.get("ownership", "OWNED")),
        status=VehicleStatus(dct.get("status", "ACTIVE")),
        start_date=_parse_date(dct.get("startDate")),
        end_date=_parse_date(dct.get("endDate")),
        rent_period=RentPeriod(rent_period) if rent_period else None,
        rent_price=dct.get("rentPrice"),
        status_history=[_parse_status_change(s) for s in dct.get("statusHistory") or []],
    )


def _parse_supplier(dct: Dict[str, Any]) -> Supplier:
    return Supplier(
        dct["id"],
        dct["name"],
        dct.get("contact"),
        dct.get("phone"),
        dct.get("address"),
    )


def _parse_interval(dct: Dict[str, Any]) -> OdometerInterval:
    return OdometerInterval(dct["openingKm"], dct.get("closingKm"))


def _parse_daily_log(dct: Dict[str, Any], vehicle_id: int) -> DailyLog:
    return DailyLog(
        vehicle_id,
        _parse_date(dct["date"]),
        _parse_interval(dct),
        EntryStatus(dct["status"]),
        dct.get("id"),
    )


def _parse_fuel_entry(dct: Dict[str, Any], vehicle_id: int) -> FuelEntry:
    return FuelEntry(
        vehicle_id,
        _parse_date(dct["date"]),
        _parse_interval(dct),
        EntryStatus(dct["status"]),
        dct.get("id"),
        supplier_id=dct.get("supplierId"),
        litres=dct.get("litres"),
        price_per_litre=dct.get("pricePerLitre"),
    )


def _entry_to_dict(entry: LedgerEntry) -> Dict[str, Any]:
    """Serialize an entry to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": entry.id,
        "date": _format_date(entry.date),
        "status": entry.status.value,
        "openingKm": entry.opening_km,
    }
    if entry.closing_km is not None:
        d["closingKm"] = entry.closing_km
    if isinstance(entry, FuelEntry):
        if entry.supplier_id is not None:
            d["supplierId"] = entry.supplier_id
        if entry.litres is not None:
            d["litres"] = entry.litres
        if entry.price_per_litre is not None:
            d["pricePerLitre"] = entry.price_per_litre
    return d


def _status_change_to_dict(change: StatusChange) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "status": change.status.value,
        "startDate": _format_date(change.start_date),
    }
    if change.end_date is not None:
        d["endDate"] = _format_date(change.end_date)
    if change.reason is not None:
        d["reason"] = change.reason
    return d


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    """Serialize a Vehicle to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": vehicle.id,
        "name": vehicle.name,
        "number": vehicle.number,
        "fuelType": vehicle.fuel_type.value,
        "ownership": vehicle.ownership.value,
        "status": vehicle.status.value,
    }
    if vehicle.project_id is not None:
        d["projectId"] = vehicle.project_id
    if vehicle.start_date is not None:
        d["startDate"] = _format_date(vehicle.start_date)
    if vehicle.end_date is not None:
        d["endDate"] = _format_date(vehicle.end_date)
    if vehicle.rent_period is not None:
        d["rentPeriod"] = vehicle.rent_period.value
    if vehicle.rent_price is not None:
        d["rentPrice"] = vehicle.rent_price
    if vehicle.status_history:
        d["statusHistory"] = [_status_change_to_dict(s) for s in vehicle.status_history]
    return d


def _supplier_to_dict(supplier: Supplier) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": supplier.id, "name": supplier.name}
    if supplier.contact is not None:
        d["contact"] = supplier.contact
    if supplier.phone is not None:
        d["phone"] = supplier.phone
    if supplier.address is not None:
        d["address"] = supplier.address
    return d


def load_vehicle(filename: PathLike) -> Vehicle:
    """Load the vehicle record from a ledger YAML file."""
    return _parse_vehicle(_read(filename)["vehicle"])


def load_history(filename: PathLike) -> VehicleHistory:
    """Load every daily log and fuel entry of the vehicle, any status."""
    data = _read(filename)
    vehicle_id = data["vehicle"]["id"]
    daily_logs = [_parse_daily_log(d, vehicle_id) for d in data.get("dailyLogs") or []]
    fuel_entries = [
        _parse_fuel_entry(d, vehicle_id) for d in data.get("fuelEntries") or []
    ]
    logger.debug(
        "Loaded %d daily logs and %d fuel entries for vehicle %s from %s",
        len(daily_logs),
        len(fuel_entries),
        vehicle_id,
        filename,
    )
    return VehicleHistory(vehicle_id, daily_logs, fuel_entries)


def load_suppliers(filename: PathLike) -> List[Supplier]:
    return [_parse_supplier(d) for d in _read(filename).get("suppliers") or []]


def load_fleet(filenames: Iterable[PathLike]) -> List[Tuple[Vehicle, VehicleHistory]]:
    """Load (vehicle, history) pairs for several ledger files."""
    return [(load_vehicle(f), load_history(f)) for f in filenames]


def _next_id(records: List[Dict[str, Any]]) -> int:
    ids = [r["id"] for r in records if r.get("id") is not None]
    return max(ids) + 1 if ids else 1


def save_entry(filename: PathLike, entry: LedgerEntry) -> LedgerEntry:
    """
    Store an entry in a ledger YAML file and return the stored entry.

    An entry without an id is appended with the next free id of its
    stream; an entry with an id replaces the stored record with that id.
    """
    data = _read(filename)
    if data["vehicle"]["id"] != entry.vehicle_id:
        raise ValueError(
            f"Entry for vehicle {entry.vehicle_id} cannot be saved to "
            f"{filename} (vehicle {data['vehicle']['id']})"
        )

    section = ENTRY_SECTIONS[entry.kind]
    if data.get(section) is None:
        data[section] = []
    records = data[section]

    if entry.id is None:
        entry = entry.with_id(_next_id(records))
        records.append(_entry_to_dict(entry))
        logger.info("Added %s #%s to %s", entry.kind.label, entry.id, filename)
    else:
        for index, record in enumerate(records):
            if record.get("id") == entry.id:
                records[index] = _entry_to_dict(entry)
                break
        else:
            raise KeyError(f"No {entry.kind.label} with id {entry.id} in {filename}")
        logger.info("Updated %s #%s in %s", entry.kind.label, entry.id, filename)

    _write(filename, data)
    return entry


def save_supplier(
    filename: PathLike,
    name: str,
    contact: Optional[str] = None,
    phone: Optional[str] = None,
    address: Optional[str] = None,
) -> Supplier:
    """Append a supplier to a ledger YAML file with the next free id."""
    if not name:
        raise ValueError("Supplier name is required")
    data = _read(filename)
    if data.get("suppliers") is None:
        data["suppliers"] = []
    supplier = Supplier(_next_id(data["suppliers"]), name, contact, phone, address)
    data["suppliers"].append(_supplier_to_dict(supplier))
    _write(filename, data)
    logger.info("Added supplier #%s (%s) to %s", supplier.id, name, filename)
    return supplier


def save_vehicle_status(filename: PathLike, vehicle: Vehicle) -> None:
    """Write the vehicle's status and status history back to its file."""
    data = _read(filename)
    data["vehicle"]["status"] = vehicle.status.value
    data["vehicle"]["statusHistory"] = [
        _status_change_to_dict(s) for s in vehicle.status_history
    ]
    _write(filename, data)


def create_vehicle_file(filename: PathLike, vehicle: Vehicle) -> None:
    """
    Create a new ledger YAML file for a vehicle.

    Initializes with empty suppliers, daily logs and fuel entries.
    """
    data: Dict[str, Any] = {
        "vehicle": _vehicle_to_dict(vehicle),
        "suppliers": [],
        "dailyLogs": [],
        "fuelEntries": [],
    }
    _write(filename, data)


def delete_vehicle_file(filename: PathLike) -> None:
    """Remove a vehicle ledger file from disk. Refuses while entries reference it."""
    data = _read(filename)
    if data.get("dailyLogs") or data.get("fuelEntries"):
        raise ValueError(f"{filename} still has ledger entries; vehicle cannot be deleted")
    Path(filename).unlink()

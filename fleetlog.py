#!/usr/bin/env python3
"""
Unified CLI for the vehicle usage ledger.

Commands:
  status      - Show open entries and the stream comparison for a vehicle
  logs        - View daily logs
  fuel        - View fuel entries
  open-log    - Start a daily log
  close-log   - Close a daily log
  open-fuel   - Record a fuel entry with litres and price
  refill      - Open an interval-only fuel entry at the current position
  close-fuel  - Close a fuel entry (completing a refill if needed)
  rent        - Show the prorated rent cost
  suppliers   - List suppliers
  add-supplier - Add a supplier
  set-status  - Change the vehicle status
  dashboard   - Fleet totals over one file or a directory of vehicle files
"""

import argparse
import logging
import os
import sys
from datetime import date, datetime
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from dateutil.parser import isoparse

from ledger import (
    EntryKind,
    FuelEntry,
    FuelType,
    LedgerEntry,
    Outcome,
    VehicleStatus,
    calc_rent_days,
    calc_rent_units,
    close_entry,
    date_range,
    load_history,
    load_vehicle,
    mileage,
    open_daily_log,
    open_fuel_entry,
    refill,
    rent_cost,
    save_entry,
)
from ledger.calculations import PERIODS
from ledger.loader import load_fleet, load_suppliers, save_supplier, save_vehicle_status
from ledger.report import fleet_summary, monthly_litres, top_performers, vehicle_stats

logger = logging.getLogger("fleetlog")

# =============================================================================
# Configuration
# =============================================================================


def configure_logging(verbose: bool = False) -> None:
    """Set up the root logger from FLEETLOG_LOG_LEVEL (or DEBUG with --verbose)."""
    level = "DEBUG" if verbose else os.environ.get("FLEETLOG_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_date(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return isoparse(value).date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}' (expected YYYY-MM-DD)")


# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format an odometer reading or distance for display."""
    return f"{km:,.1f}" if km is not None else "-"


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"{cost:,.2f}" if cost is not None else "-"


def format_mileage(value: Optional[float]) -> str:
    return f"{value:.2f} km/l" if value is not None else "-"


def describe_entry(entry: LedgerEntry) -> List[str]:
    """Lines describing an entry about to be stored."""
    lines = [
        f"  Kind:    {entry.kind.label}" + (f" #{entry.id}" if entry.id else ""),
        f"  Date:    {entry.date.isoformat()}",
        f"  Opening: {format_km(entry.opening_km)} km",
    ]
    if entry.is_closed:
        lines.append(f"  Closing: {format_km(entry.closing_km)} km")
        lines.append(f"  Distance: {format_km(entry.distance)} km")
    if isinstance(entry, FuelEntry):
        if entry.litres is not None:
            lines.append(f"  Litres:  {entry.litres:,.2f}")
        if entry.price_per_litre is not None:
            lines.append(f"  Price:   {format_cost(entry.price_per_litre)} / l")
        if entry.is_closed:
            lines.append(f"  Mileage: {format_mileage(mileage(entry))}")
    return lines


def make_log_table(entries: List[LedgerEntry]) -> List[List[str]]:
    """Convert daily logs to table rows."""
    rows = []
    for entry in entries:
        rows.append(
            [
                str(entry.id) if entry.id is not None else "-",
                entry.date.isoformat(),
                format_km(entry.opening_km),
                format_km(entry.closing_km),
                format_km(entry.distance),
                entry.status.value,
            ]
        )
    return rows


def make_fuel_table(entries: List[FuelEntry], suppliers: dict) -> List[List[str]]:
    """Convert fuel entries to table rows, resolving supplier names."""
    rows = []
    for entry in entries:
        supplier = suppliers.get(entry.supplier_id)
        rows.append(
            [
                str(entry.id) if entry.id is not None else "-",
                entry.date.isoformat(),
                supplier.name if supplier else str(entry.supplier_id or "-"),
                f"{entry.litres:,.2f}" if entry.litres is not None else "-",
                format_cost(entry.total_cost),
                format_km(entry.opening_km),
                format_km(entry.closing_km),
                format_km(entry.distance),
                format_mileage(mileage(entry)),
                entry.status.value,
            ]
        )
    return rows


# =============================================================================
# Read commands
# =============================================================================


def cmd_status(args):
    """Show open entries and the stream comparison for a vehicle."""
    vehicle = load_vehicle(args.vehicle_file)
    history = load_history(args.vehicle_file)
    stats = vehicle_stats(vehicle, history, args.as_of)

    print(f"Vehicle: {vehicle.display_name}")
    print(f"Status: {vehicle.status.value}")
    print(f"Odometer: {format_km(history.current_km)} km")
    print()

    for kind in EntryKind:
        entry = history.open_entry(kind)
        if entry is None:
            print(f"Open {kind.label}: none")
        else:
            print(
                f"Open {kind.label}: #{entry.id} since {entry.date.isoformat()} "
                f"@ {format_km(entry.opening_km)} km"
            )
    print()

    rows = [
        ["Closed entries", stats.daily_log_count, stats.fuel_entry_count],
        ["Distance (km)", format_km(stats.daily_log_total_km), format_km(stats.fuel_total_km)],
        [
            "Avg mileage",
            format_mileage(stats.daily_log_avg_mileage),
            format_mileage(stats.fuel_avg_mileage),
        ],
    ]
    print(tabulate(rows, headers=["", "Daily logs", "Fuel entries"], tablefmt="simple"))
    print()
    print(f"Km difference: {format_km(stats.km_difference)}")
    print(f"Litres: {stats.total_litres:,.2f}")
    print(f"Fuel cost: {format_cost(stats.fuel_cost)}")
    print(f"Cost per km: {format_cost(stats.cost_per_km)}")
    if stats.rent_cost is not None:
        print(f"Rent cost: {format_cost(stats.rent_cost)}")
        print(f"Total cost: {format_cost(stats.total_cost)}")
    return 0


def _filtered(history, kind: EntryKind, args):
    entries = history.get_entries_sorted(kind, sort_by="date", reverse=not args.asc)
    if args.since:
        entries = [e for e in entries if e.date >= args.since]
    return entries


def cmd_logs(args):
    """View daily logs."""
    history = load_history(args.vehicle_file)
    entries = _filtered(history, EntryKind.DAILY_LOG, args)
    if not entries:
        print("No daily logs found.")
        return 0
    headers = ["ID", "Date", "Opening", "Closing", "Distance", "Status"]
    print(tabulate(make_log_table(entries), headers=headers, tablefmt="simple"))
    return 0


def cmd_fuel(args):
    """View fuel entries."""
    history = load_history(args.vehicle_file)
    suppliers = {s.id: s for s in load_suppliers(args.vehicle_file)}
    entries = _filtered(history, EntryKind.FUEL_ENTRY, args)
    if not entries:
        print("No fuel entries found.")
        return 0
    headers = [
        "ID", "Date", "Supplier", "Litres", "Cost",
        "Opening", "Closing", "Distance", "Mileage", "Status",
    ]
    print(tabulate(make_fuel_table(entries, suppliers), headers=headers, tablefmt="simple"))
    return 0


def cmd_rent(args):
    """Show the prorated rent cost."""
    vehicle = load_vehicle(args.vehicle_file)
    if not vehicle.is_rented:
        print(f"Vehicle: {vehicle.display_name} is owned; no rent applies.")
        return 0

    as_of = args.as_of or datetime.now()
    start = vehicle.start_date or as_of
    end = vehicle.end_date or as_of
    days = calc_rent_days(start, end)
    units = calc_rent_units(days, vehicle.rent_period)

    print(f"Vehicle: {vehicle.display_name}")
    print(f"Rent: {format_cost(vehicle.rent_price)} per {vehicle.rent_period.value.lower()}")
    print(f"Days: {days}")
    print(f"Billed units: {units}")
    print(f"Rent cost: {format_cost(rent_cost(vehicle, as_of))}")
    return 0


def cmd_suppliers(args):
    """List suppliers."""
    suppliers = load_suppliers(args.vehicle_file)
    if not suppliers:
        print("No suppliers found.")
        return 0
    rows = [[s.id, s.name, s.contact or "-", s.phone or "-"] for s in suppliers]
    print(tabulate(rows, headers=["ID", "Name", "Contact", "Phone"], tablefmt="simple"))
    return 0


def vehicle_files(path: Path) -> List[Path]:
    """A single ledger file, or every YAML file in a directory."""
    if path.is_dir():
        return sorted(list(path.glob("*.yaml")) + list(path.glob("*.yml")))
    return [path]


def cmd_dashboard(args):
    """Fleet totals, top performers and the monthly fuel trend."""
    files = vehicle_files(args.vehicle_file)
    if not files:
        print(f"No vehicle files found in {args.vehicle_file}.")
        return 0
    fleet = load_fleet(files)
    start, end = date_range(args.period)
    summary = fleet_summary(fleet, start, end)

    print(f"Fleet: {len(fleet)} vehicles ({summary.active_vehicles} active)")
    print(f"Period: {args.period} ({start.date().isoformat()} to {end.date().isoformat()})")
    print(f"Distance: {format_km(summary.total_distance)} km")
    print(f"Litres: {summary.total_litres:,.2f}")
    print(f"Fuel cost: {format_cost(summary.total_fuel_cost)}")
    print(f"Rent cost: {format_cost(summary.total_rent_cost)}")
    print()

    rows = [
        [fuel_type.value, format_cost(cost)]
        for fuel_type, cost in summary.cost_by_fuel_type.items()
    ]
    print(tabulate(rows, headers=["Fuel type", "Fuel cost"], tablefmt="simple"))
    print()

    ranked = top_performers(fleet, start, end, limit=args.top)
    if ranked:
        rows = [
            [
                p.vehicle.display_name,
                format_km(p.total_km),
                format_mileage(p.avg_mileage),
                f"{p.performance_rate:.0f}%",
                format_cost(p.total_cost),
            ]
            for p in ranked
        ]
        headers = ["Vehicle", "Distance", "Mileage", "Rate", "Total cost"]
        print(tabulate(rows, headers=headers, tablefmt="simple"))
    else:
        print("No closed fuel entries in this period.")
    print()

    trend = monthly_litres(fleet, months=args.months)
    headers = ["Month"] + [fuel_type.value for fuel_type in FuelType]
    rows = [
        [label] + [f"{litres[fuel_type]:,.2f}" for fuel_type in FuelType]
        for label, litres in trend
    ]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Mutating commands
# =============================================================================


def commit(args, outcome: Outcome) -> int:
    """Report an outcome and store its entry unless it failed or this is a dry run."""
    if not outcome.ok:
        print(f"Error: {outcome.error}")
        return 1

    for entry in outcome.entries:
        action = "Closing" if entry.is_closed else "Opening"
        print(f"{action} {entry.kind.label} in {args.vehicle_file}:")
        for line in describe_entry(entry):
            print(line)
        print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    for entry in outcome.entries:
        stored = save_entry(args.vehicle_file, entry)
        print(f"Saved {stored.kind.label} #{stored.id}.")
    return 0


def check_supplier(args, supplier_id: Optional[int]) -> bool:
    """Report a supplier id that is not listed in the vehicle file."""
    if supplier_id is None:
        return True
    if any(s.id == supplier_id for s in load_suppliers(args.vehicle_file)):
        return True
    print(f"Error: No supplier with id {supplier_id}")
    return False


def cmd_open_log(args):
    """Start a daily log."""
    history = load_history(args.vehicle_file)
    return commit(args, open_daily_log(history, args.date or date.today(), args.km))


def cmd_open_fuel(args):
    """Record a fuel entry with litres and price."""
    if not check_supplier(args, args.supplier):
        return 1
    history = load_history(args.vehicle_file)
    outcome = open_fuel_entry(
        history,
        args.date or date.today(),
        args.supplier,
        args.litres,
        args.price,
        args.km,
    )
    return commit(args, outcome)


def cmd_refill(args):
    """Open an interval-only fuel entry, closing the open one at the same reading."""
    if not check_supplier(args, args.supplier):
        return 1
    history = load_history(args.vehicle_file)
    outcome = refill(history, args.date or date.today(), args.supplier, args.km)
    return commit(args, outcome)


def _close(args, kind: EntryKind, **details):
    history = load_history(args.vehicle_file)
    entry = history.get_entry(kind, args.entry_id)
    if entry is None:
        print(f"Error: No {kind.label} with id {args.entry_id}")
        return 1
    try:
        outcome = close_entry(entry, args.km, **details)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    return commit(args, outcome)


def cmd_close_log(args):
    """Close a daily log."""
    return _close(args, EntryKind.DAILY_LOG)


def cmd_close_fuel(args):
    """Close a fuel entry, completing a refill placeholder if needed."""
    if not check_supplier(args, args.supplier):
        return 1
    return _close(
        args,
        EntryKind.FUEL_ENTRY,
        supplier_id=args.supplier,
        litres=args.litres,
        price_per_litre=args.price,
    )


def cmd_add_supplier(args):
    """Add a supplier."""
    print(f"Adding supplier to {args.vehicle_file}: {args.name}")
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0
    supplier = save_supplier(args.vehicle_file, args.name, args.contact, args.phone)
    print(f"Saved supplier #{supplier.id}.")
    return 0


def cmd_set_status(args):
    """Change the vehicle status."""
    vehicle = load_vehicle(args.vehicle_file)
    old_status = vehicle.status
    try:
        vehicle.change_status(
            VehicleStatus(args.status), args.date or date.today(), args.reason
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Vehicle: {vehicle.display_name}")
    print(f"Status: {old_status.value} -> {vehicle.status.value}")
    print()
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0
    save_vehicle_status(args.vehicle_file, vehicle)
    print("Status updated.")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vehicle usage ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s vehicles/truck-07.yaml status
  %(prog)s vehicles/truck-07.yaml logs --since 2025-01-01
  %(prog)s vehicles/truck-07.yaml open-log 12450 --date 2025-03-02
  %(prog)s vehicles/truck-07.yaml close-log 14 12610
  %(prog)s vehicles/truck-07.yaml open-fuel 12450 --supplier 1 \\
      --litres 40 --price 94.5
  %(prog)s vehicles/truck-07.yaml refill
  %(prog)s vehicles/truck-07.yaml refill --km 13420 --supplier 2
  %(prog)s vehicles/truck-07.yaml close-fuel 6 12980 --supplier 1 \\
      --litres 38.2 --price 95
  %(prog)s vehicles/truck-07.yaml rent --as-of 2025-03-31
  %(prog)s vehicles/ dashboard --period year
""",
    )
    parser.add_argument(
        "vehicle_file",
        type=Path,
        help="Path to vehicle ledger YAML file (or a directory, for dashboard)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level (default from FLEETLOG_LOG_LEVEL)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    status_parser = subparsers.add_parser(
        "status", help="Show open entries and the stream comparison"
    )
    status_parser.add_argument(
        "--as-of", type=parse_date, help="Date used for rent proration (default: now)"
    )

    for name, help_text in (("logs", "View daily logs"), ("fuel", "View fuel entries")):
        list_parser = subparsers.add_parser(name, help=help_text)
        list_parser.add_argument(
            "--since", type=parse_date, help="Show only entries since date (YYYY-MM-DD)"
        )
        list_parser.add_argument(
            "--asc", action="store_true", help="Sort ascending instead of descending"
        )

    def add_dry_run(sub):
        sub.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be stored without saving",
        )

    def add_fuel_details(sub, required: bool):
        sub.add_argument("--supplier", type=int, required=required, help="Supplier id")
        sub.add_argument("--litres", type=float, required=required, help="Fuel volume")
        sub.add_argument("--price", type=float, required=required, help="Price per litre")

    open_log_parser = subparsers.add_parser("open-log", help="Start a daily log")
    open_log_parser.add_argument("km", type=float, help="Opening odometer reading")
    open_log_parser.add_argument(
        "--date", type=parse_date, help="Log date in YYYY-MM-DD format (default: today)"
    )
    add_dry_run(open_log_parser)

    close_log_parser = subparsers.add_parser("close-log", help="Close a daily log")
    close_log_parser.add_argument("entry_id", type=int, help="Daily log id")
    close_log_parser.add_argument("km", type=float, help="Closing odometer reading")
    add_dry_run(close_log_parser)

    open_fuel_parser = subparsers.add_parser(
        "open-fuel", help="Record a fuel entry with litres and price"
    )
    open_fuel_parser.add_argument("km", type=float, help="Opening odometer reading")
    open_fuel_parser.add_argument(
        "--date", type=parse_date, help="Entry date in YYYY-MM-DD format (default: today)"
    )
    add_fuel_details(open_fuel_parser, required=True)
    add_dry_run(open_fuel_parser)

    refill_parser = subparsers.add_parser(
        "refill",
        help="Open an interval-only fuel entry, closing any open one at the same reading",
    )
    refill_parser.add_argument(
        "--km",
        type=float,
        help="Opening reading (default: last closing reading; required while a fuel entry is open)",
    )
    refill_parser.add_argument("--supplier", type=int, help="Supplier id")
    refill_parser.add_argument(
        "--date", type=parse_date, help="Entry date in YYYY-MM-DD format (default: today)"
    )
    add_dry_run(refill_parser)

    close_fuel_parser = subparsers.add_parser("close-fuel", help="Close a fuel entry")
    close_fuel_parser.add_argument("entry_id", type=int, help="Fuel entry id")
    close_fuel_parser.add_argument("km", type=float, help="Closing odometer reading")
    add_fuel_details(close_fuel_parser, required=False)
    add_dry_run(close_fuel_parser)

    rent_parser = subparsers.add_parser("rent", help="Show the prorated rent cost")
    rent_parser.add_argument(
        "--as-of", type=parse_date, help="End date when the vehicle has none (default: now)"
    )

    subparsers.add_parser("suppliers", help="List suppliers")

    dashboard_parser = subparsers.add_parser(
        "dashboard", help="Fleet totals over one file or a directory of vehicle files"
    )
    dashboard_parser.add_argument(
        "--period", choices=PERIODS, default="month", help="Reporting window (default: month)"
    )
    dashboard_parser.add_argument(
        "--top", type=int, default=5, help="Number of top performers to list"
    )
    dashboard_parser.add_argument(
        "--months", type=int, default=12, help="Months in the litres trend"
    )

    add_supplier_parser = subparsers.add_parser("add-supplier", help="Add a supplier")
    add_supplier_parser.add_argument("name", type=str, help="Supplier name")
    add_supplier_parser.add_argument("--contact", type=str, help="Contact person")
    add_supplier_parser.add_argument("--phone", type=str, help="Phone number")
    add_dry_run(add_supplier_parser)

    set_status_parser = subparsers.add_parser("set-status", help="Change the vehicle status")
    set_status_parser.add_argument(
        "status", choices=[s.value for s in VehicleStatus], help="New status"
    )
    set_status_parser.add_argument("--reason", type=str, required=True, help="Why")
    set_status_parser.add_argument(
        "--date", type=parse_date, help="Effective date (default: today)"
    )
    add_dry_run(set_status_parser)

    return parser


COMMANDS = {
    "status": cmd_status,
    "logs": cmd_logs,
    "fuel": cmd_fuel,
    "open-log": cmd_open_log,
    "close-log": cmd_close_log,
    "open-fuel": cmd_open_fuel,
    "refill": cmd_refill,
    "close-fuel": cmd_close_fuel,
    "rent": cmd_rent,
    "suppliers": cmd_suppliers,
    "add-supplier": cmd_add_supplier,
    "set-status": cmd_set_status,
    "dashboard": cmd_dashboard,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    # Validate vehicle file exists
    if not args.vehicle_file.exists():
        print(f"Error: File not found: {args.vehicle_file}")
        return 1
    if args.vehicle_file.is_dir() and args.command != "dashboard":
        print(f"Error: {args.command} needs a vehicle file, not a directory")
        return 1

    logger.debug("Running %s on %s", args.command, args.vehicle_file)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main() or 0)

#!/usr/bin/env python3
"""Validate vehicle ledger YAML files against the schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError

from ledger import EntryKind, LedgerError, load_history, load_vehicle


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def validate_vehicle_file(filepath: Path, schema: dict) -> list[str]:
    """
    Validate a single vehicle ledger file. Returns list of errors.

    Schema errors are reported first; a file that passes the schema is
    then loaded so that odometer ranges and entry states are checked too.
    """
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=data, schema=schema)
        load_vehicle(filepath)
        history = load_history(filepath)
        errors.extend(check_ledger(history))
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except LedgerError as e:
        errors.append(f"Ledger error: {e}")
    except Exception as e:
        errors.append(f"Error: {e}")
    return errors


def check_ledger(history) -> list[str]:
    """
    Report stored data the ledger operations would not have accepted.

    Each stream may hold at most one open entry, and every entry must open
    at or above the closing readings of the earlier entries in its stream.
    Ids give creation order within a stream only, so readings are not
    compared across streams.
    """
    errors = []
    for kind in EntryKind:
        open_entries = history.open_entries(kind)
        if len(open_entries) > 1:
            ids = ", ".join(str(e.id) for e in open_entries)
            errors.append(f"Ledger error: more than one open {kind.label} ({ids})")

        last = None
        for entry in sorted(history.entries(kind), key=lambda e: e.id or 0):
            if last is not None and entry.opening_km < last.closing_km:
                errors.append(
                    f"Ledger error: {kind.label} #{entry.id} opens at "
                    f"{entry.opening_km:.1f} km, below #{last.id} closing at "
                    f"{last.closing_km:.1f} km"
                )
            if entry.is_closed and (last is None or entry.closing_km > last.closing_km):
                last = entry
    return errors


def main():
    """Validate all vehicle YAML files in the vehicles/ directory."""
    schema = load_schema()
    vehicles_dir = Path(__file__).parent / "vehicles"
    if len(sys.argv) > 1:
        vehicles_dir = Path(sys.argv[1])

    if not vehicles_dir.exists():
        print(f"Error: vehicles directory not found: {vehicles_dir}")
        return 1

    yaml_files = list(vehicles_dir.glob("*.yaml")) + list(vehicles_dir.glob("*.yml"))

    if not yaml_files:
        print(f"Warning: No YAML files found in {vehicles_dir}")
        return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validate_vehicle_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())

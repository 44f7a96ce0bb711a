#!/usr/bin/env python3
"""
Convert legacy driver pay percentages to 0-1 fractions.

Reads a YAML or JSON export of driver records (a list, or a mapping with a
``drivers`` key), migrates them and writes the result.

Usage:
    python scripts/migrate_pay_percentages.py drivers.yaml
    python scripts/migrate_pay_percentages.py drivers.json -o migrated.json
    python scripts/migrate_pay_percentages.py drivers.yaml --dry-run
"""

import argparse
import json
import sys
from pathlib import Path

import yaml

from freight_ledger.core.logging import configure_logging
from freight_ledger.data.models.reference import DriverProfile
from freight_ledger.services.migration import migrate_driver_percentages


def load_drivers(path: Path) -> list[DriverProfile]:
    """Read driver records from a YAML or JSON file."""
    with open(path) as f:
        data = json.load(f) if path.suffix == ".json" else yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("drivers", [])
    return [DriverProfile.model_validate(record) for record in data or []]


def write_drivers(path: Path, drivers: list[DriverProfile]) -> None:
    """Write driver records in the format implied by the file suffix."""
    records = [driver.model_dump(mode="json") for driver in drivers]
    with open(path, "w") as f:
        if path.suffix == ".json":
            json.dump({"drivers": records}, f, indent=2)
        else:
            yaml.safe_dump({"drivers": records}, f, sort_keys=False)


def main(argv=None):
    """Run the migration."""
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    parser.add_argument("input", type=Path, help="Driver export (.yaml, .yml or .json)")
    parser.add_argument("-o", "--output", type=Path, help="Output file (defaults to the input file)")
    parser.add_argument("--dry-run", action="store_true", help="Report changes without writing")
    args = parser.parse_args(argv)

    configure_logging(level="INFO", json_output=False)

    drivers = load_drivers(args.input)
    report = migrate_driver_percentages(drivers)

    print("\nMigration complete!")
    print(f"- Migrated {report.migrated} drivers (added missing percentages)")
    print(f"- Fixed {report.fixed} drivers (converted integer to decimal)")
    print(f"- Total drivers processed: {report.total}")

    if args.dry_run:
        print("\nDry run, nothing written.")
        return 0

    output = args.output or args.input
    write_drivers(output, report.drivers)
    print(f"\nWrote {len(report.drivers)} drivers to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

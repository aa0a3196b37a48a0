from __future__ import annotations

import argparse
import json

from services.api.app.services.carrier_base import CarrierAdapterError
from services.api.app.services.carrier_factory import (
    close_carrier_directories,
    get_carrier_directory,
)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Look up carrier cities and warehouses with the configured directory"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    cities = sub.add_parser("cities", help="Search cities by name")
    cities.add_argument("term")

    warehouses = sub.add_parser("warehouses", help="Search warehouses within a city")
    warehouses.add_argument("term")
    warehouses.add_argument("--city-ref", required=True, help="Reference returned by `cities`")

    parser.add_argument("--json", action="store_true", help="Print raw JSON instead of a table")

    args = parser.parse_args()

    directory = get_carrier_directory()
    try:
        if args.command == "cities":
            options = directory.search_cities(args.term)
        else:
            options = directory.search_warehouses(args.term, args.city_ref)
    except CarrierAdapterError as e:
        raise SystemExit(f"Carrier lookup failed: {e}") from e
    finally:
        close_carrier_directories()

    if args.json:
        print(json.dumps([o.model_dump() for o in options], ensure_ascii=False, indent=2))
        return 0

    if not options:
        print("No matches.")
        return 0

    for option in options:
        postal = f"  [{option.postal_code}]" if option.postal_code else ""
        print(f"{option.value}  {option.label}{postal}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

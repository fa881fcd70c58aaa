from __future__ import annotations

import argparse

from poiproxy.catalog.importer import import_rows, read_rows_from_csv, read_rows_from_json
from poiproxy.config.settings import get_settings
from poiproxy.core.env import resolve_project_path
from poiproxy.core.logging import configure_logging
from poiproxy.search.factory import build_catalog_store


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Import POIs from a local CSV/JSON file into the configured catalog.")
    p.add_argument("--in-csv", type=str, default=None)
    p.add_argument("--in-json", type=str, default=None)
    p.add_argument("--lng-field", type=str, default="lng", help="Column holding longitude (e.g. 'lon').")
    p.add_argument(
        "--dedupe-radius-m",
        type=float,
        default=40.0,
        help="Skip rows within this radius of an entry with the same name (0 disables).",
    )
    args = p.parse_args(argv)

    if bool(args.in_csv) == bool(args.in_json):
        raise SystemExit("Provide exactly one of --in-csv or --in-json.")

    configure_logging()
    rows = (
        read_rows_from_csv(resolve_project_path(args.in_csv))
        if args.in_csv
        else read_rows_from_json(resolve_project_path(args.in_json))
    )
    store = build_catalog_store(get_settings())
    report = import_rows(store, rows, dedupe_radius_m=float(args.dedupe_radius_m), lng_field=args.lng_field)

    print("Imported rows:", len(rows))
    print("Added:", report.added, "Skipped:", report.skipped, "Bad:", report.bad)
    for err in report.errors[:20]:
        print("  ", err)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

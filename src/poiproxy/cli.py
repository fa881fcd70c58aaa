"""
poiproxy CLI entrypoint.

This CLI is intended for quick local demos and catalog maintenance without the HTTP API.
Searches go through the same `ProximitySearch` the API uses.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from poiproxy.config.settings import get_settings
from poiproxy.core.errors import PoiProxyError
from poiproxy.core.logging import configure_logging
from poiproxy.domain.models import POICreate
from poiproxy.privacy.encryption import EncryptionError, build_encryption_provider, describe_provider, generate_key
from poiproxy.search.factory import build_catalog_store, build_search


def _cmd_search(args: argparse.Namespace) -> int:
    """Handle the `search` subcommand."""
    settings = get_settings()
    if args.source:
        settings = settings.model_copy(
            update={"candidates": settings.candidates.model_copy(update={"source": args.source})}
        )
    search = build_search(settings)
    try:
        results = search.handle(
            {"lat": args.lat, "lng": args.lng, "radius": args.radius, "category": args.category}
        )
    finally:
        search.close()

    if args.json:
        payload = [r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in results]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    print(f"{len(results)} result(s) within {args.radius:g} km (source={search.source.name}):")
    for i, r in enumerate(results, start=1):
        print(f"{i:>2}. {r.name} [{r.category}]  {r.distance_km:.1f} km  ({r.lat:.5f}, {r.lng:.5f})")
    return 0


def _cmd_catalog_list(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = build_catalog_store(settings)
    entries = store.list_pois()
    if args.json:
        print(json.dumps([e.model_dump(mode="json") for e in entries], ensure_ascii=False, indent=2))
        return 0
    status = describe_provider(build_encryption_provider(settings.encryption))
    print(f"{len(entries)} catalog entr{'y' if len(entries) == 1 else 'ies'} (encryption={status['provider']}):")
    for e in entries:
        print(f"  {e.id}  {e.name} [{e.category}]  ({e.lat:.5f}, {e.lng:.5f})")
    return 0


def _cmd_catalog_add(args: argparse.Namespace) -> int:
    store = build_catalog_store(get_settings())
    entry = store.create_poi(
        POICreate(name=args.name, category=args.category, lat=args.lat, lng=args.lng, description=args.description)
    )
    print(entry.id)
    return 0


def _cmd_catalog_delete(args: argparse.Namespace) -> int:
    store = build_catalog_store(get_settings())
    store.delete_poi(args.id)
    print(f"deleted {args.id}")
    return 0


def _cmd_gen_key(_: argparse.Namespace) -> int:
    print(generate_key())
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the poiproxy CLI."""
    parser = argparse.ArgumentParser(prog="poiproxy")
    sub = parser.add_subparsers(dest="command", required=True)

    s = sub.add_parser("search", help="Search POIs near a location (location is obfuscated first).")
    s.add_argument("--lat", required=True, type=float)
    s.add_argument("--lng", required=True, type=float)
    s.add_argument("--radius", required=True, type=float, help="Search radius in km")
    s.add_argument("--category", type=str, default=None, help="Category filter ('all' or omit for none)")
    s.add_argument("--source", choices=["synthetic", "catalog"], default=None, help="Override candidates.source")
    s.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    s.set_defaults(func=_cmd_search)

    cat = sub.add_parser("catalog", help="Manage the admin POI catalog.")
    cat_sub = cat.add_subparsers(dest="catalog_command", required=True)

    ls = cat_sub.add_parser("list", help="List catalog entries (newest first).")
    ls.add_argument("--json", action="store_true")
    ls.set_defaults(func=_cmd_catalog_list)

    add = cat_sub.add_parser("add", help="Add a catalog entry.")
    add.add_argument("--name", required=True)
    add.add_argument("--category", required=True)
    add.add_argument("--lat", required=True, type=float)
    add.add_argument("--lng", required=True, type=float)
    add.add_argument("--description", default=None)
    add.set_defaults(func=_cmd_catalog_add)

    rm = cat_sub.add_parser("delete", help="Delete a catalog entry by id.")
    rm.add_argument("id")
    rm.set_defaults(func=_cmd_catalog_delete)

    key = sub.add_parser("gen-key", help="Print a new Fernet key for POIPROXY_ENCRYPTION_KEY.")
    key.set_defaults(func=_cmd_gen_key)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m poiproxy.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except PoiProxyError as e:
        parser.exit(status=2 if e.status_code < 500 else 1, message=f"error: {e.public_message}\n")
    except (ValueError, EncryptionError) as e:
        # Configuration problems (missing key, missing remote base_url, bad catalog file).
        parser.exit(status=1, message=f"error: {e}\n")


if __name__ == "__main__":
    raise SystemExit(main())

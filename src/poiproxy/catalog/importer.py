"""
Bulk import of POI rows (CSV/JSON) into a catalog store.

Rows go through `POICreate` validation and the store's `create_poi`, so they get ids,
timestamps and (if configured) encryption exactly like admin-created entries.
Rows within `dedupe_radius_m` of an existing entry with the same normalized name are skipped.
"""

from __future__ import annotations

import csv
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from poiproxy.catalog.store import CatalogStore
from poiproxy.core.geo import Coordinate, haversine_km
from poiproxy.domain.models import CatalogEntry, POICreate


@dataclass
class ImportReport:
    added: int = 0
    skipped: int = 0
    bad: int = 0
    errors: list[str] = field(default_factory=list)


def _norm_name(s: str) -> str:
    t = str(s or "").strip().lower()
    t = re.sub(r"[\s\-_/·•,.()\[\]{}<>&']+", " ", t)
    return re.sub(r"\s+", " ", t).strip()


def read_rows_from_csv(path: Path) -> list[dict[str, Any]]:
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        return [row for row in csv.DictReader(f) if isinstance(row, dict)]


def read_rows_from_json(path: Path) -> list[dict[str, Any]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("records", payload.get("pois"))
    if not isinstance(payload, list):
        raise ValueError("Unsupported JSON shape: expected an array of POI objects.")
    return [r for r in payload if isinstance(r, dict)]


def _is_duplicate(
    candidate: POICreate, existing: list[CatalogEntry], *, dedupe_radius_m: float
) -> bool:
    if dedupe_radius_m <= 0:
        return False
    name = _norm_name(candidate.name)
    here = Coordinate(lat=candidate.lat, lng=candidate.lng)
    for entry in existing:
        if _norm_name(entry.name) != name:
            continue
        if haversine_km(here, entry.location) * 1000 <= dedupe_radius_m:
            return True
    return False


def import_rows(
    store: CatalogStore,
    rows: list[dict[str, Any]],
    *,
    dedupe_radius_m: float = 40.0,
    lng_field: str = "lng",
) -> ImportReport:
    report = ImportReport()
    existing = store.list_pois()

    for i, row in enumerate(rows):
        data = dict(row)
        if lng_field != "lng" and lng_field in data:
            data["lng"] = data.pop(lng_field)
        description = data.get("description")
        if isinstance(description, str) and not description.strip():
            data["description"] = None
        try:
            candidate = POICreate.model_validate(data)
        except ValidationError as e:
            report.bad += 1
            report.errors.append(f"row {i}: {e.error_count()} validation error(s)")
            continue

        if _is_duplicate(candidate, existing, dedupe_radius_m=dedupe_radius_m):
            report.skipped += 1
            continue

        existing.append(store.create_poi(candidate))
        report.added += 1
    return report

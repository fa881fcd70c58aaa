"""
Admin-managed POI catalog storage.

`CatalogStore` is the capability the admin API uses for CRUD and the catalog candidate
source uses for reads. Two backends exist:
- `JsonFileCatalogStore` (this module): a local JSON file, optionally encrypted per record.
- `RemoteCatalogStore` (`poiproxy.catalog.remote`): a REST table over HTTP.

File layout:
    {"version": 1, "records": [<record>, ...]}
where each record is either a plaintext object or, when a real encryption provider is
configured, a Fernet token string. A bare JSON array of records (a seed catalog) is
also accepted on read.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from poiproxy.core.errors import CatalogEntryNotFound
from poiproxy.core.geo import BoundingBox
from poiproxy.domain.models import CatalogEntry, POICreate
from poiproxy.privacy.encryption import EncryptionError, EncryptionProvider, PlaintextProvider

logger = logging.getLogger(__name__)

FILE_FORMAT_VERSION = 1


class CatalogStore(Protocol):
    def list_pois(self, *, bbox: BoundingBox | None = None) -> list[CatalogEntry]: ...

    def create_poi(self, data: POICreate) -> CatalogEntry: ...

    def delete_poi(self, poi_id: str) -> None: ...


def sort_newest_first(entries: list[CatalogEntry]) -> list[CatalogEntry]:
    def key(entry: CatalogEntry) -> datetime:
        ts = entry.created_at or datetime.min
        # Seed files may carry naive timestamps; treat them as UTC.
        return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)

    return sorted(entries, key=key, reverse=True)


class JsonFileCatalogStore:
    """A JSON-file catalog guarded by a process-local lock."""

    def __init__(self, path: str | Path, *, encryption: EncryptionProvider | None = None):
        self.path = Path(path)
        self.encryption = encryption or PlaintextProvider()
        self._lock = threading.Lock()

    def _decode_record(self, raw: Any, index: int) -> CatalogEntry:
        if isinstance(raw, str):
            if not self.encryption.protects_data_at_rest:
                raise EncryptionError(
                    f"Record {index} in {self.path} is encrypted but no encryption key is configured."
                )
            raw = json.loads(self.encryption.decrypt(raw.encode("ascii")))
        if not isinstance(raw, dict):
            raise ValueError(f"Record {index} in {self.path} is not an object.")
        return CatalogEntry.model_validate(raw)

    def _encode_record(self, entry: CatalogEntry) -> Any:
        payload = entry.model_dump(mode="json")
        if not self.encryption.protects_data_at_rest:
            return payload
        data = json.dumps(payload, ensure_ascii=False, sort_keys=True).encode("utf-8")
        return self.encryption.encrypt(data).decode("ascii")

    def _read_all(self) -> list[CatalogEntry]:
        if not self.path.exists():
            return []
        payload = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        records = payload.get("records", []) if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise ValueError(f"Invalid catalog file {self.path}; expected a list of records.")
        try:
            return [self._decode_record(raw, i) for i, raw in enumerate(records)]
        except ValidationError as e:
            raise ValueError(f"Invalid record in catalog file {self.path}: {e}") from e

    def _write_all(self, entries: list[CatalogEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"version": FILE_FORMAT_VERSION, "records": [self._encode_record(e) for e in entries]}
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def list_pois(self, *, bbox: BoundingBox | None = None) -> list[CatalogEntry]:
        with self._lock:
            entries = self._read_all()
        if bbox is not None:
            entries = [e for e in entries if bbox.contains(e.lat, e.lng)]
        return sort_newest_first(entries)

    def create_poi(self, data: POICreate) -> CatalogEntry:
        entry = CatalogEntry(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            **data.model_dump(),
        )
        with self._lock:
            entries = self._read_all()
            entries.append(entry)
            self._write_all(entries)
        logger.info("Catalog entry created id=%s category=%s", entry.id, entry.category)
        return entry

    def delete_poi(self, poi_id: str) -> None:
        with self._lock:
            entries = self._read_all()
            remaining = [e for e in entries if e.id != poi_id]
            if len(remaining) == len(entries):
                raise CatalogEntryNotFound(poi_id)
            self._write_all(remaining)
        logger.info("Catalog entry deleted id=%s", poi_id)

"""
Remote catalog store (PostgREST / Supabase REST style).

Reads and writes rows of a `points_of_interest` table:
- list:   GET    {base_url}/rest/v1/{table}?select=*&order=created_at.desc[&lat=gte.X&lat=lte.Y...]
- create: POST   {base_url}/rest/v1/{table}  (Prefer: return=representation)
- delete: DELETE {base_url}/rest/v1/{table}?id=eq.{id}  (Prefer: return=representation)

Every HTTP call carries the configured timeout. Transport errors, timeouts and non-2xx
responses surface as `UpstreamUnavailable`; no retries happen here.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from poiproxy.config.settings import CatalogSettings
from poiproxy.core.errors import CatalogEntryNotFound, UpstreamUnavailable
from poiproxy.core.geo import BoundingBox
from poiproxy.core.http import delete, get_json, post_json
from poiproxy.domain.models import CatalogEntry, POICreate

logger = logging.getLogger(__name__)

_ROWS_ADAPTER = TypeAdapter(list[CatalogEntry])


class RemoteCatalogStore:
    """Catalog rows behind a REST table endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        table: str = "points_of_interest",
        api_key: str | None = None,
        timeout_seconds: float = 5,
    ):
        if not base_url:
            raise ValueError("RemoteCatalogStore requires a base_url (catalog.remote.base_url).")
        self._url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._api_key = api_key
        self._timeout_seconds = float(timeout_seconds)

    @classmethod
    def from_settings(cls, settings: CatalogSettings) -> "RemoteCatalogStore":
        return cls(
            settings.remote.base_url or "",
            table=settings.remote.table,
            api_key=settings.remote.api_key,
            timeout_seconds=settings.lookup_timeout_seconds,
        )

    def _headers(self, *, prefer: str | None = None) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _parse_rows(self, payload: Any) -> list[CatalogEntry]:
        if not isinstance(payload, list):
            raise UpstreamUnavailable("Catalog service returned an unexpected payload.")
        try:
            return _ROWS_ADAPTER.validate_python(payload)
        except ValidationError as e:
            raise UpstreamUnavailable(f"Catalog service returned invalid rows: {e.error_count()} errors") from e

    def list_pois(self, *, bbox: BoundingBox | None = None) -> list[CatalogEntry]:
        params: list[tuple[str, Any]] = [("select", "*"), ("order", "created_at.desc")]
        if bbox is not None:
            params += [
                ("lat", f"gte.{bbox.min_lat}"),
                ("lat", f"lte.{bbox.max_lat}"),
                ("lng", f"gte.{bbox.min_lng}"),
                ("lng", f"lte.{bbox.max_lng}"),
            ]
        try:
            payload = get_json(
                self._url,
                params=params,
                headers=self._headers(),
                timeout_seconds=self._timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise UpstreamUnavailable("Catalog lookup timed out.") from e
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamUnavailable(f"Catalog lookup failed: {e}") from e
        return self._parse_rows(payload)

    def create_poi(self, data: POICreate) -> CatalogEntry:
        try:
            payload = post_json(
                self._url,
                payload=data.model_dump(mode="json"),
                headers=self._headers(prefer="return=representation"),
                timeout_seconds=self._timeout_seconds,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamUnavailable(f"Catalog insert failed: {e}") from e
        rows = self._parse_rows(payload)
        if not rows:
            raise UpstreamUnavailable("Catalog insert returned no row.")
        logger.info("Catalog entry created id=%s category=%s", rows[0].id, rows[0].category)
        return rows[0]

    def delete_poi(self, poi_id: str) -> None:
        try:
            resp = delete(
                self._url,
                params=[("id", f"eq.{poi_id}")],
                headers=self._headers(prefer="return=representation"),
                timeout_seconds=self._timeout_seconds,
            )
            deleted = resp.json() if resp.content else []
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamUnavailable(f"Catalog delete failed: {e}") from e
        if not deleted:
            raise CatalogEntryNotFound(poi_id)
        logger.info("Catalog entry deleted id=%s", poi_id)

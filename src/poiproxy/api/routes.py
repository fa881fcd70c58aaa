"""
API routes.

Endpoints:
- POST   `/api/poi-proxy`: privacy-preserving proximity search (main entrypoint).
- GET    `/api/categories`: the fixed POI category list.
- GET    `/api/settings`: public settings for the UI (no secrets), incl. encryption status.
- GET    `/api/admin/pois`: list catalog entries (newest first).
- POST   `/api/admin/pois`: create a catalog entry.
- DELETE `/api/admin/pois/{poi_id}`: delete a catalog entry.
- GET    `/health`

Routes are plain `def` functions: FastAPI runs them in its thread pool, so a slow catalog
lookup never blocks the event loop.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response

from poiproxy.catalog.store import CatalogStore
from poiproxy.config.settings import Settings
from poiproxy.domain.models import POI_CATEGORIES, CatalogEntry, ErrorResponse, POICreate, POIResult
from poiproxy.privacy.encryption import EncryptionProvider, describe_provider
from poiproxy.search.orchestrator import ProximitySearch

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def get_search(request: Request) -> ProximitySearch:
    return request.app.state.search


def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_encryption(request: Request) -> EncryptionProvider:
    return request.app.state.encryption


@router.get("/health")
def health() -> dict:
    return {"ok": True}


@router.post(
    "/api/poi-proxy",
    response_model=list[POIResult],
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
def post_poi_search(
    payload: dict[str, Any] = Body(..., examples=[{"lat": 40.7128, "lng": -74.006, "radius": 5, "category": "all"}]),
    search: ProximitySearch = Depends(get_search),
) -> list[POIResult]:
    """Search POIs near `{lat, lng}` within `radius` km, optionally filtered by `category`."""
    return search.handle(payload)


@router.get("/api/categories")
def get_categories() -> dict:
    return {"categories": list(POI_CATEGORIES)}


@router.get("/api/settings")
def get_public_settings(
    settings: Settings = Depends(get_app_settings),
    encryption: EncryptionProvider = Depends(get_encryption),
    search: ProximitySearch = Depends(get_search),
) -> dict:
    """Return safe-to-expose settings for UI defaults (credentials removed)."""
    return {
        "privacy": {
            "zone_half_width_deg": settings.privacy.zone_half_width_deg,
            "correct_longitude": settings.privacy.correct_longitude,
        },
        "candidates": {"source": search.source.name},
        "catalog": {"backend": settings.catalog.backend},
        "encryption": describe_provider(encryption),
    }


@router.get("/api/admin/pois")
def list_catalog_pois(
    store: CatalogStore = Depends(get_store),
    encryption: EncryptionProvider = Depends(get_encryption),
) -> dict:
    entries = store.list_pois()
    return {
        "encryption": describe_provider(encryption),
        "count": len(entries),
        "pois": [e.model_dump(mode="json", exclude_none=True) for e in entries],
    }


@router.post("/api/admin/pois", status_code=201, response_model=CatalogEntry, response_model_exclude_none=True)
def create_catalog_poi(data: POICreate, store: CatalogStore = Depends(get_store)) -> CatalogEntry:
    return store.create_poi(data)


@router.delete("/api/admin/pois/{poi_id}", status_code=204, responses={404: {"model": ErrorResponse}})
def delete_catalog_poi(poi_id: str, store: CatalogStore = Depends(get_store)) -> Response:
    store.delete_poi(poi_id)
    return Response(status_code=204)

import httpx
import pytest

from poiproxy.catalog.remote import RemoteCatalogStore
from poiproxy.config.settings import CatalogSettings, RemoteCatalogSettings
from poiproxy.core.errors import CatalogEntryNotFound, UpstreamUnavailable
from poiproxy.core.geo import BoundingBox
from poiproxy.domain.models import POICreate

BASE = "https://catalog.example.test"
ROW = {
    "id": 7,
    "name": "Harbor Clinic",
    "category": "Hospital",
    "lat": 40.7,
    "lng": -74.0,
    "description": None,
    "created_at": "2024-05-01T12:00:00+00:00",
}


def _store(**kwargs):
    return RemoteCatalogStore(BASE, api_key="anon-key", timeout_seconds=2, **kwargs)


def test_list_pois_queries_table_with_order_and_bbox(monkeypatch):
    calls = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=10):
        calls.append((url, params, headers, timeout_seconds))
        return [ROW]

    monkeypatch.setattr("poiproxy.catalog.remote.get_json", fake_get_json)

    bbox = BoundingBox(min_lat=40.0, max_lat=41.0, min_lng=-75.0, max_lng=-73.0)
    entries = _store().list_pois(bbox=bbox)

    assert [e.id for e in entries] == ["7"]
    url, params, headers, timeout_seconds = calls[0]
    assert url == f"{BASE}/rest/v1/points_of_interest"
    assert ("order", "created_at.desc") in params
    assert ("lat", "gte.40.0") in params
    assert ("lng", "lte.-73.0") in params
    assert headers["apikey"] == "anon-key"
    assert headers["Authorization"] == "Bearer anon-key"
    assert timeout_seconds == 2


def test_list_pois_timeout_is_upstream_unavailable(monkeypatch):
    def fake_get_json(url, **_kwargs):
        raise httpx.ReadTimeout("timed out")

    monkeypatch.setattr("poiproxy.catalog.remote.get_json", fake_get_json)
    with pytest.raises(UpstreamUnavailable, match="timed out"):
        _store().list_pois()


def test_list_pois_http_error_is_upstream_unavailable(monkeypatch):
    def fake_get_json(url, **_kwargs):
        request = httpx.Request("GET", url)
        raise httpx.HTTPStatusError("server error", request=request, response=httpx.Response(500, request=request))

    monkeypatch.setattr("poiproxy.catalog.remote.get_json", fake_get_json)
    with pytest.raises(UpstreamUnavailable):
        _store().list_pois()


def test_list_pois_rejects_unexpected_payload(monkeypatch):
    monkeypatch.setattr("poiproxy.catalog.remote.get_json", lambda *_a, **_k: {"message": "nope"})
    with pytest.raises(UpstreamUnavailable):
        _store().list_pois()


def test_create_poi_returns_inserted_row(monkeypatch):
    sent = {}

    def fake_post_json(url, *, payload, headers=None, timeout_seconds=10):
        sent.update(payload=payload, headers=headers)
        return [{**ROW, **payload, "id": "new-id"}]

    monkeypatch.setattr("poiproxy.catalog.remote.post_json", fake_post_json)
    entry = _store().create_poi(POICreate(name="Pier Park", category="Park", lat=40.7, lng=-74.01))

    assert entry.id == "new-id"
    assert entry.name == "Pier Park"
    assert sent["payload"]["category"] == "Park"
    assert sent["headers"]["Prefer"] == "return=representation"


def test_delete_poi_filters_by_id(monkeypatch):
    seen = {}

    def fake_delete(url, *, params=None, headers=None, timeout_seconds=10):
        seen["params"] = params
        return httpx.Response(200, json=[ROW])

    monkeypatch.setattr("poiproxy.catalog.remote.delete", fake_delete)
    _store().delete_poi("7")
    assert seen["params"] == [("id", "eq.7")]


def test_delete_poi_missing_row_is_not_found(monkeypatch):
    monkeypatch.setattr("poiproxy.catalog.remote.delete", lambda *_a, **_k: httpx.Response(200, json=[]))
    with pytest.raises(CatalogEntryNotFound):
        _store().delete_poi("missing")


def test_from_settings_requires_base_url():
    with pytest.raises(ValueError):
        RemoteCatalogStore.from_settings(CatalogSettings(backend="remote"))

    store = RemoteCatalogStore.from_settings(
        CatalogSettings(backend="remote", remote=RemoteCatalogSettings(base_url=BASE + "/", table="pois"))
    )
    assert store._url == f"{BASE}/rest/v1/pois"

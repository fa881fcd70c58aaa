from starlette.testclient import TestClient

from conftest import FixedRandom
from poiproxy.api.app import create_app
from poiproxy.catalog.store import JsonFileCatalogStore
from poiproxy.config.settings import Settings
from poiproxy.core.errors import UpstreamUnavailable
from poiproxy.domain.models import POI
from poiproxy.privacy.encryption import PlaintextProvider
from poiproxy.privacy.obfuscation import LocationObfuscator
from poiproxy.search.orchestrator import ProximitySearch


class _StubSource:
    name = "stub"

    def __init__(self, pois=None, exc=None):
        self.pois = pois or []
        self.exc = exc
        self.closed = False

    def generate(self, center, radius_km, category=None):
        if self.exc is not None:
            raise self.exc
        return list(self.pois)

    def close(self):
        self.closed = True


def _app(tmp_path, source=None):
    source = source or _StubSource(
        [
            POI(id="2", name="Far Park", category="Park", lat=40.7328, lng=-74.0060),
            POI(id="1", name="Near Clinic", category="Hospital", lat=40.7228, lng=-74.0060),
        ]
    )
    search = ProximitySearch(obfuscator=LocationObfuscator(rng=FixedRandom(0.5)), source=source)
    return create_app(
        Settings(),
        search=search,
        store=JsonFileCatalogStore(tmp_path / "pois.json"),
        encryption=PlaintextProvider(),
    )


def test_poi_proxy_returns_sorted_results_with_distance(tmp_path):
    with TestClient(_app(tmp_path)) as c:
        resp = c.post("/api/poi-proxy", json={"lat": 40.7128, "lng": -74.0060, "radius": 5, "category": "all"})

    assert resp.status_code == 200
    data = resp.json()
    assert [r["id"] for r in data] == ["1", "2"]
    assert data[0] == {
        "id": "1",
        "name": "Near Clinic",
        "category": "Hospital",
        "lat": 40.7228,
        "lng": -74.006,
        "distance": 1.1,
    }
    assert resp.headers["X-Request-ID"]


def test_poi_proxy_missing_radius_is_400(tmp_path):
    with TestClient(_app(tmp_path)) as c:
        resp = c.post("/api/poi-proxy", json={"lat": 40.7128, "lng": -74.0060})
    assert resp.status_code == 400
    assert resp.json() == {"error": "missing required parameter 'radius'"}


def test_poi_proxy_non_object_body_is_400(tmp_path):
    with TestClient(_app(tmp_path)) as c:
        not_object = c.post("/api/poi-proxy", json=[1, 2, 3])
        not_json = c.post("/api/poi-proxy", content=b"{lat", headers={"content-type": "application/json"})
    assert not_object.status_code == 400
    assert "error" in not_object.json()
    assert not_json.status_code == 400


def test_poi_proxy_upstream_failure_is_503(tmp_path):
    source = _StubSource(exc=UpstreamUnavailable("Catalog lookup timed out after 5s."))
    with TestClient(_app(tmp_path, source)) as c:
        resp = c.post("/api/poi-proxy", json={"lat": 1, "lng": 1, "radius": 1})
    assert resp.status_code == 503
    assert resp.json() == {"error": "Catalog lookup timed out after 5s.", "retryable": True}


def test_poi_proxy_internal_fault_is_opaque_500(tmp_path):
    source = _StubSource(exc=ZeroDivisionError("secret detail"))
    with TestClient(_app(tmp_path, source)) as c:
        resp = c.post("/api/poi-proxy", json={"lat": 1, "lng": 1, "radius": 1})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal error while processing the search request"}


def test_admin_catalog_crud(tmp_path):
    with TestClient(_app(tmp_path)) as c:
        created = c.post(
            "/api/admin/pois",
            json={"name": "Pier Pharmacy", "category": "Pharmacy", "lat": 40.70, "lng": -74.01},
        )
        assert created.status_code == 201
        poi_id = created.json()["id"]

        listed = c.get("/api/admin/pois").json()
        assert listed["count"] == 1
        assert listed["pois"][0]["name"] == "Pier Pharmacy"
        assert listed["encryption"] == {"provider": "none", "protects_data_at_rest": False}

        assert c.delete(f"/api/admin/pois/{poi_id}").status_code == 204
        missing = c.delete(f"/api/admin/pois/{poi_id}")
        assert missing.status_code == 404
        assert missing.json() == {"error": f"POI '{poi_id}' not found"}


def test_admin_create_rejects_invalid_entry(tmp_path):
    with TestClient(_app(tmp_path)) as c:
        resp = c.post("/api/admin/pois", json={"name": "X", "category": "Park", "lat": 100, "lng": 0})
    assert resp.status_code == 400
    assert "lat" in resp.json()["error"]


def test_public_settings_categories_and_health(tmp_path):
    source = _StubSource()
    app = _app(tmp_path, source)
    with TestClient(app) as c:
        settings = c.get("/api/settings").json()
        categories = c.get("/api/categories").json()["categories"]
        health = c.get("/health").json()

    assert settings["candidates"] == {"source": "stub"}
    assert settings["encryption"]["protects_data_at_rest"] is False
    assert settings["privacy"]["zone_half_width_deg"] == 0.01
    assert "Hospital" in categories and "Other" in categories
    assert health == {"ok": True}
    # Lifespan shutdown closes the candidate source.
    assert source.closed is True


class _BrokenStore:
    def list_pois(self, *, bbox=None):
        raise RuntimeError("disk on fire")


def test_unhandled_error_is_opaque_500_and_keeps_request_id(tmp_path):
    search = ProximitySearch(obfuscator=LocationObfuscator(rng=FixedRandom(0.5)), source=_StubSource())
    app = create_app(Settings(), search=search, store=_BrokenStore(), encryption=PlaintextProvider())
    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/api/admin/pois", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal error while processing the search request"}
    assert resp.headers["X-Request-ID"] == "req-123"

import json

from poiproxy.catalog.importer import import_rows, read_rows_from_csv, read_rows_from_json
from poiproxy.catalog.store import JsonFileCatalogStore
from poiproxy.domain.models import POICreate


def test_import_rows_validates_and_dedupes(tmp_path):
    store = JsonFileCatalogStore(tmp_path / "pois.json")
    store.create_poi(POICreate(name="Battery Park", category="Park", lat=40.7033, lng=-74.0170))

    rows = [
        {"name": "battery  park", "category": "Park", "lat": 40.7034, "lng": -74.0170},
        {"name": "Hudson Library", "category": "Library", "lat": 40.73, "lng": -74.0, "description": ""},
        {"name": "No Coordinates", "category": "Park"},
        {"name": "", "category": "Park", "lat": 1, "lng": 1},
    ]
    report = import_rows(store, rows)

    assert (report.added, report.skipped, report.bad) == (1, 1, 2)
    assert len(report.errors) == 2
    names = sorted(e.name for e in store.list_pois())
    assert names == ["Battery Park", "Hudson Library"]
    assert next(e for e in store.list_pois() if e.name == "Hudson Library").description is None


def test_import_rows_dedupe_can_be_disabled(tmp_path):
    store = JsonFileCatalogStore(tmp_path / "pois.json")
    rows = [{"name": "Kiosk", "category": "Other", "lat": 1.0, "lng": 1.0}] * 2
    assert import_rows(store, rows, dedupe_radius_m=0).added == 2


def test_csv_rows_with_custom_longitude_column(tmp_path):
    path = tmp_path / "pois.csv"
    path.write_text("name,category,lat,lon\nCity Pharmacy,Pharmacy,40.71,-74.01\n", encoding="utf-8")
    store = JsonFileCatalogStore(tmp_path / "pois.json")

    report = import_rows(store, read_rows_from_csv(path), lng_field="lon")

    assert report.added == 1
    entry = store.list_pois()[0]
    assert (entry.lat, entry.lng) == (40.71, -74.01)


def test_json_rows_accept_envelope_or_array(tmp_path):
    envelope = tmp_path / "envelope.json"
    envelope.write_text(json.dumps({"version": 1, "records": [{"name": "A"}]}), encoding="utf-8")
    array = tmp_path / "array.json"
    array.write_text(json.dumps([{"name": "B"}, "junk"]), encoding="utf-8")

    assert read_rows_from_json(envelope) == [{"name": "A"}]
    assert read_rows_from_json(array) == [{"name": "B"}]

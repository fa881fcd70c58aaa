import random

import pytest

from conftest import FixedRandom
from poiproxy.config.settings import PrivacySettings
from poiproxy.core.geo import Coordinate, haversine_km
from poiproxy.privacy.obfuscation import LocationObfuscator


def test_obfuscate_applies_uniform_offset_on_each_axis():
    origin = Coordinate(lat=40.7128, lng=-74.0060)
    obf = LocationObfuscator(rng=FixedRandom(0.75, 0.0))
    center = obf.obfuscate(origin)
    assert center.lat == pytest.approx(origin.lat + 0.005)
    assert center.lng == pytest.approx(origin.lng - 0.01)


def test_obfuscated_center_stays_inside_privacy_zone():
    origin = Coordinate(lat=51.5074, lng=-0.1278)
    obf = LocationObfuscator(half_width_deg=0.01, rng=random.Random(7))
    centers = [obf.obfuscate(origin) for _ in range(500)]
    assert all(abs(c.lat - origin.lat) <= 0.01 for c in centers)
    assert all(abs(c.lng - origin.lng) <= 0.01 for c in centers)
    # Fresh randomness per call.
    assert len({(c.lat, c.lng) for c in centers}) > 1


def test_default_rng_is_system_random():
    obf = LocationObfuscator()
    assert isinstance(obf._rng, random.SystemRandom)
    center = obf.obfuscate(Coordinate(lat=0.0, lng=0.0))
    assert abs(center.lat) <= 0.01 and abs(center.lng) <= 0.01


def test_corrected_longitude_scales_with_latitude():
    origin = Coordinate(lat=60.0, lng=10.0)
    obf = LocationObfuscator(correct_longitude=True, rng=FixedRandom(0.5, 0.75))
    center = obf.obfuscate(origin)
    assert center.lat == pytest.approx(60.0)
    # 0.005 deg of offset doubled by 1 / cos(60).
    assert center.lng == pytest.approx(10.01)


def test_obfuscation_near_antimeridian_wraps_longitude():
    origin = Coordinate(lat=0.0, lng=179.999)
    center = LocationObfuscator(rng=FixedRandom(0.5, 1.0)).obfuscate(origin)
    assert -180.0 <= center.lng <= 180.0
    assert center.lng == pytest.approx(-179.991)


def test_privacy_zone_radius_is_about_one_and_a_half_km_at_equator():
    obf = LocationObfuscator()
    assert obf.privacy_zone_radius_km(Coordinate(lat=0.0, lng=0.0)) == pytest.approx(1.5725, abs=0.01)


def test_from_settings_and_validation():
    obf = LocationObfuscator.from_settings(PrivacySettings(zone_half_width_deg=0.02, correct_longitude=True))
    assert obf.half_width_deg == 0.02
    assert obf.correct_longitude is True

    with pytest.raises(ValueError):
        LocationObfuscator(half_width_deg=0)


@pytest.mark.parametrize("lat", [-89.995, -60.0, -12.5, 0.0, 33.3, 60.0, 80.0, 89.995])
def test_obfuscated_center_is_within_privacy_zone_radius_in_km(lat):
    origin = Coordinate(lat=lat, lng=179.995)
    obf = LocationObfuscator(rng=random.Random(int(lat * 1000)))
    limit = obf.privacy_zone_radius_km(origin)
    assert 0 < limit < 1.6
    for _ in range(300):
        assert haversine_km(origin, obf.obfuscate(origin)) <= limit + 1e-9

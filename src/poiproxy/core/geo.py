from __future__ import annotations
from dataclasses import dataclass
from math import atan2, cos, pi, radians, sin, sqrt

"""
Geospatial helpers.

We keep a tiny geometry layer here so the search path can do distance calculations
without pulling in heavier GIS dependencies.
"""

EARTH_RADIUS_KM = 6371.0
# Flat-earth approximation used for offsets and bounding boxes.
KM_PER_DEG_LAT = 111.0
# Above this the flat box no longer encloses the great-circle disc reliably.
MAX_BBOX_RADIUS_KM = 500.0
# No two points on the sphere are farther apart than half a great circle.
MAX_SURFACE_DISTANCE_KM = pi * EARTH_RADIUS_KM


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"lat must be within [-90, 90], got {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"lng must be within [-180, 180], got {self.lng}")


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Compute great-circle distance in kilometers between two points (full precision)."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = radians(b.lat - a.lat)
    dlng = radians(b.lng - a.lng)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(h), sqrt(1 - h))


def round_km(value: float) -> float:
    return round(value, 1)


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance rounded to one decimal place (display value)."""
    return round_km(haversine_km(a, b))


def normalize_coordinate(lat: float, lng: float) -> Coordinate:
    """Clamp latitude to [-90, 90] and wrap longitude into [-180, 180]."""
    lat = max(-90.0, min(90.0, lat))
    if not -180.0 <= lng <= 180.0:
        lng = (lng + 180.0) % 360.0 - 180.0
    return Coordinate(lat=lat, lng=lng)


def offset_polar(center: Coordinate, distance: float, angle: float) -> Coordinate:
    """Move `distance` km from `center` along `angle` radians (0 = east, pi/2 = north)."""
    distance = min(distance, MAX_SURFACE_DISTANCE_KM)
    lat_offset = (distance / KM_PER_DEG_LAT) * sin(angle)
    lng_offset = (distance / (KM_PER_DEG_LAT * cos(radians(center.lat)))) * cos(angle)
    return normalize_coordinate(center.lat + lat_offset, center.lng + lng_offset)


def bounding_box(center: Coordinate, radius_km: float) -> BoundingBox | None:
    """Return a lat/lng box enclosing the radius, or None near the poles/antimeridian."""
    if radius_km > MAX_BBOX_RADIUS_KM:
        return None
    # Pad slightly: the 111 km/deg figure is below the true meridian degree length.
    dlat = radius_km / KM_PER_DEG_LAT * 1.01
    min_lat = center.lat - dlat
    max_lat = center.lat + dlat
    if min_lat < -90.0 or max_lat > 90.0:
        return None

    cos_lat = min(cos(radians(min_lat)), cos(radians(max_lat)))
    if cos_lat <= 1e-6:
        return None
    dlng = radius_km / (KM_PER_DEG_LAT * cos_lat) * 1.01
    min_lng = center.lng - dlng
    max_lng = center.lng + dlng
    if min_lng < -180.0 or max_lng > 180.0:
        return None
    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)


def max_offset_km(origin: Coordinate, lat_deg: float, lng_deg: float) -> float:
    """Distance from `origin` to the farthest corner of a +-lat_deg/+-lng_deg box."""
    corners = [
        normalize_coordinate(origin.lat + dlat, origin.lng + dlng)
        for dlat in (-lat_deg, lat_deg)
        for dlng in (-lng_deg, lng_deg)
    ]
    return max(haversine_km(origin, c) for c in corners)

"""
Location obfuscation.

Before the candidate step sees a caller's position, we shift it by an independent uniform
offset on each axis. The shifted point (the "obfuscated center") lies inside a square
privacy zone of +-`half_width_deg` around the true origin.

This is perturbation against lookup/generation services, not a security boundary:
the offset is bounded and uniform, so repeated queries from one place average out.

By default the longitude offset is in plain degrees (not scaled by cos(lat)), so the
zone is narrower in kilometers away from the equator. `correct_longitude=True` scales the
longitude offset so the zone is a ~square in kilometers instead.
"""

from __future__ import annotations

import random
from math import cos, radians

from poiproxy.config.settings import PrivacySettings
from poiproxy.core.geo import Coordinate, max_offset_km, normalize_coordinate

# Keep the corrected longitude offset finite at the poles.
_MIN_COS_LAT = 1e-3


class LocationObfuscator:
    """Perturb coordinates by a bounded random offset."""

    def __init__(
        self,
        *,
        half_width_deg: float = 0.01,
        correct_longitude: bool = False,
        rng: random.Random | None = None,
    ):
        if half_width_deg <= 0:
            raise ValueError("half_width_deg must be > 0")
        self.half_width_deg = float(half_width_deg)
        self.correct_longitude = bool(correct_longitude)
        # SystemRandom draws from os.urandom and keeps no state, so one instance can
        # serve concurrent requests.
        self._rng = rng or random.SystemRandom()

    @classmethod
    def from_settings(cls, settings: PrivacySettings, *, rng: random.Random | None = None) -> "LocationObfuscator":
        return cls(
            half_width_deg=settings.zone_half_width_deg,
            correct_longitude=settings.correct_longitude,
            rng=rng,
        )

    def _draw_offset(self) -> float:
        return (self._rng.random() - 0.5) * 2 * self.half_width_deg

    def _lng_half_width(self, lat: float) -> float:
        if not self.correct_longitude:
            return self.half_width_deg
        return self.half_width_deg / max(cos(radians(lat)), _MIN_COS_LAT)

    def obfuscate(self, origin: Coordinate) -> Coordinate:
        """Return a fresh obfuscated center for `origin`."""
        lat_offset = self._draw_offset()
        lng_offset = self._draw_offset()
        if self.correct_longitude:
            lng_offset *= self._lng_half_width(origin.lat) / self.half_width_deg
        return normalize_coordinate(origin.lat + lat_offset, origin.lng + lng_offset)

    def privacy_zone_radius_km(self, origin: Coordinate) -> float:
        """Worst-case distance between `origin` and any obfuscated center it can produce."""
        return max_offset_km(origin, self.half_width_deg, self._lng_half_width(origin.lat))

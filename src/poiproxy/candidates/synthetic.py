"""
Synthetic candidate source.

Produces plausible demo POIs when no real catalog is wired in. Intended for demos and
tests; production deployments should use the catalog source.

Generation rules:
- count = min(floor(radius_km * per_km), max_candidates)  (defaults: 3 per km, capped at 20)
- position: uniform angle in [0, 2*pi), uniform distance in [0, radius_km), converted with
  111 km per degree of latitude and a cos(lat)-corrected longitude degree
- category: the requested filter, or uniform over the synthetic categories
- name: "<direction> ..." using a category-specific template
"""

from __future__ import annotations

import math
import random

from poiproxy.config.settings import SyntheticSettings
from poiproxy.core.geo import Coordinate, offset_polar
from poiproxy.domain.models import POI, SYNTHETIC_CATEGORIES, normalize_category

DIRECTIONS: tuple[str, ...] = (
    "North",
    "South",
    "East",
    "West",
    "Central",
    "Downtown",
    "Uptown",
    "Riverside",
    "Lakeside",
    "Highland",
)
ADJECTIVES: tuple[str, ...] = (
    "Community",
    "Regional",
    "City",
    "County",
    "Memorial",
    "General",
    "Public",
    "Private",
)

NAME_TEMPLATES: dict[str, str] = {
    "Hospital": "{direction} {adjective} Hospital",
    "Police": "{direction} Police Station",
    "Pharmacy": "{direction} {adjective} Pharmacy",
    "Park": "{direction} {adjective} Park",
    "Library": "{direction} {adjective} Library",
    "School": "{direction} {adjective} School",
    "Restaurant": "{direction} Bistro & Grill",
    "Grocery": "{direction} Market",
}
DEFAULT_NAME_TEMPLATE = "{direction} {category}"


def candidate_count(radius_km: float, *, per_km: float = 3, max_candidates: int = 20) -> int:
    # radius_km * per_km can overflow to inf, and floor(inf) raises.
    return max(0, math.floor(min(radius_km * per_km, max_candidates)))


class SyntheticCandidateSource:
    name = "synthetic"

    def __init__(self, *, per_km: float = 3, max_candidates: int = 20, rng: random.Random | None = None):
        self.per_km = float(per_km)
        self.max_candidates = int(max_candidates)
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(
        cls, settings: SyntheticSettings, *, rng: random.Random | None = None
    ) -> "SyntheticCandidateSource":
        return cls(per_km=settings.per_km, max_candidates=settings.max_candidates, rng=rng)

    def plausible_name(self, category: str) -> str:
        template = NAME_TEMPLATES.get(category, DEFAULT_NAME_TEMPLATE)
        return template.format(
            direction=self._rng.choice(DIRECTIONS),
            adjective=self._rng.choice(ADJECTIVES),
            category=category,
        )

    def generate(self, center: Coordinate, radius_km: float, category: str | None = None) -> list[POI]:
        forced = normalize_category(category)
        count = candidate_count(radius_km, per_km=self.per_km, max_candidates=self.max_candidates)

        pois: list[POI] = []
        for i in range(count):
            angle = self._rng.random() * 2 * math.pi
            distance = self._rng.random() * radius_km
            point = offset_polar(center, distance, angle)
            poi_category = forced or self._rng.choice(SYNTHETIC_CATEGORIES)
            pois.append(
                POI(
                    id=str(i + 1),
                    name=self.plausible_name(poi_category),
                    category=poi_category,
                    lat=point.lat,
                    lng=point.lng,
                )
            )
        return pois

    def close(self) -> None:
        return None

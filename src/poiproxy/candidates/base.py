"""
Candidate sources.

A `CandidateSource` produces POIs around a center. The search orchestrator only ever
passes it the *obfuscated* center, never the caller's true coordinate.

Variants:
- `SyntheticCandidateSource`: plausible demo POIs scattered around the center.
- `CatalogCandidateSource`: admin-managed records filtered by radius and category.

`poiproxy.search.factory.build_candidate_source()` picks one from settings (`candidates.source`).
"""

from __future__ import annotations

from typing import Protocol

from poiproxy.core.geo import Coordinate
from poiproxy.domain.models import POI


class CandidateSource(Protocol):
    name: str

    def generate(self, center: Coordinate, radius_km: float, category: str | None = None) -> list[POI]: ...

    def close(self) -> None: ...

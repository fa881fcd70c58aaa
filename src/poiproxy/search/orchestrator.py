"""
Proximity search orchestrator.

Per request:
    RECEIVED -> VALIDATED -> OBFUSCATED -> CANDIDATES_GENERATED -> DISTANCES_RECOMPUTED
             -> FILTERED -> SORTED -> RESPONDED
with FAILED reachable from validation (InvalidInput) or any later step.

The candidate source only ever sees the obfuscated center. Result distances are then
recomputed from the caller's true origin, so the caller gets accurate distances and results
outside the true radius (possible near the edge, since candidates were drawn around a
shifted center) are dropped.

The orchestrator holds no per-request state; one instance serves concurrent requests.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from poiproxy.candidates.base import CandidateSource
from poiproxy.core.errors import InternalFault, InvalidInput, PoiProxyError
from poiproxy.core.geo import haversine_km, round_km
from poiproxy.domain.models import POIResult, SearchRequest
from poiproxy.privacy.obfuscation import LocationObfuscator

logger = logging.getLogger(__name__)


class SearchStage(str, enum.Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    OBFUSCATED = "obfuscated"
    CANDIDATES_GENERATED = "candidates_generated"
    DISTANCES_RECOMPUTED = "distances_recomputed"
    FILTERED = "filtered"
    SORTED = "sorted"
    RESPONDED = "responded"
    FAILED = "failed"


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "body"
        if err.get("type") == "missing":
            parts.append(f"missing required parameter '{field}'")
        else:
            parts.append(f"invalid '{field}': {err.get('msg')}")
    return "; ".join(parts)


def parse_search_request(payload: Any) -> SearchRequest:
    """Validate a raw `{lat, lng, radius, category?}` payload.

    Raises:
        InvalidInput: If a required field is missing, non-numeric or out of range.
    """
    if isinstance(payload, SearchRequest):
        return payload
    if not isinstance(payload, Mapping):
        raise InvalidInput("Request body must be a JSON object with lat, lng and radius.")
    try:
        return SearchRequest.model_validate(dict(payload))
    except ValidationError as e:
        raise InvalidInput(_format_validation_error(e)) from e


class ProximitySearch:
    """Request handler wiring the obfuscator, a candidate source and distance filtering."""

    def __init__(self, *, obfuscator: LocationObfuscator, source: CandidateSource):
        self.obfuscator = obfuscator
        self.source = source

    def handle(self, payload: Any) -> list[POIResult]:
        """Validate `payload` and run the search (the external request/response contract)."""
        return self.search(parse_search_request(payload))

    def search(self, request: SearchRequest) -> list[POIResult]:
        stage = SearchStage.VALIDATED
        origin = request.origin
        radius_km = request.radius_km
        try:
            center = self.obfuscator.obfuscate(origin)
            stage = SearchStage.OBFUSCATED
            logger.debug("Obfuscated center (%.5f, %.5f)", center.lat, center.lng)

            candidates = self.source.generate(center, radius_km, request.category)
            stage = SearchStage.CANDIDATES_GENERATED

            # Full precision drives filtering and ordering; the rounded value is what we return,
            # so it must respect the radius too.
            measured = []
            for poi in candidates:
                exact = haversine_km(origin, poi.location)
                measured.append((exact, round_km(exact), poi))
            stage = SearchStage.DISTANCES_RECOMPUTED

            kept = [m for m in measured if m[0] <= radius_km and m[1] <= radius_km]
            stage = SearchStage.FILTERED

            kept.sort(key=lambda m: m[0])
            stage = SearchStage.SORTED

            results = [POIResult.from_poi(poi, distance_km=shown) for _, shown, poi in kept]
            stage = SearchStage.RESPONDED
        except PoiProxyError as e:
            logger.warning(
                "Search failed after stage=%s with %s (source=%s): %s",
                stage.value,
                type(e).__name__,
                self.source.name,
                e,
            )
            raise
        except Exception as e:
            logger.exception(
                "Internal fault after stage=%s (source=%s radius_km=%s category=%s)",
                stage.value,
                self.source.name,
                radius_km,
                request.category,
            )
            raise InternalFault(f"{type(e).__name__} after stage {stage.value}: {e}") from e

        logger.info(
            "Search served: source=%s radius_km=%s category=%s candidates=%d results=%d",
            self.source.name,
            radius_km,
            request.category or "all",
            len(candidates),
            len(results),
        )
        return results

    def close(self) -> None:
        self.source.close()

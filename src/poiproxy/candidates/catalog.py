"""
Catalog candidate source.

Reads admin-managed records from a `CatalogStore` and keeps those within `radius_km` of
the (obfuscated) center that match the requested category. The store lookup is the only
blocking step of a search; it runs on a worker thread and is abandoned after
`timeout_seconds`, failing the request with `UpstreamUnavailable`.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout

from poiproxy.catalog.store import CatalogStore
from poiproxy.core.errors import InternalFault, PoiProxyError, UpstreamUnavailable
from poiproxy.core.geo import Coordinate, bounding_box, haversine_km
from poiproxy.domain.models import POI, normalize_category
from poiproxy.privacy.encryption import EncryptionError

logger = logging.getLogger(__name__)


class CatalogCandidateSource:
    name = "catalog"

    def __init__(self, store: CatalogStore, *, timeout_seconds: float = 5, max_workers: int = 4):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self.store = store
        self.timeout_seconds = float(timeout_seconds)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="catalog-lookup")

    def _lookup(self, center: Coordinate, radius_km: float) -> list[POI]:
        bbox = bounding_box(center, radius_km)
        future = self._executor.submit(self.store.list_pois, bbox=bbox)
        try:
            return list(future.result(timeout=self.timeout_seconds))
        except FutureTimeout as e:
            future.cancel()
            raise UpstreamUnavailable(
                f"Catalog lookup timed out after {self.timeout_seconds:g}s."
            ) from e
        except PoiProxyError:
            raise
        except EncryptionError as e:
            # Wrong or missing key: not retryable.
            raise InternalFault(f"Catalog records could not be decrypted: {e}") from e
        except Exception as e:
            raise UpstreamUnavailable(f"Catalog lookup failed: {e}") from e

    def generate(self, center: Coordinate, radius_km: float, category: str | None = None) -> list[POI]:
        wanted = normalize_category(category)
        wanted_key = wanted.casefold() if wanted else None

        records = self._lookup(center, radius_km)
        out: list[POI] = []
        for poi in records:
            if wanted_key is not None and poi.category.casefold() != wanted_key:
                continue
            if haversine_km(center, poi.location) > radius_km:
                continue
            out.append(poi)
        logger.debug("Catalog lookup returned %d records, %d within radius", len(records), len(out))
        return out

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

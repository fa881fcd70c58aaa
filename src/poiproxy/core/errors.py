"""
Error taxonomy.

Every failure in the search path is one of:
- `InvalidInput`: the request is malformed (missing/out-of-range lat, lng or radius). Never retried.
- `UpstreamUnavailable`: the candidate source (catalog store) failed or timed out. Retryable by the caller.
- `InternalFault`: anything unexpected. Logged with context; reported with an opaque message.

The API layer maps these to HTTP status codes (`status_code`) and `{"error": ...}` bodies.
"""

from __future__ import annotations


class PoiProxyError(Exception):
    """Base class for errors that carry an HTTP mapping."""

    status_code: int = 500
    retryable: bool = False

    @property
    def public_message(self) -> str:
        return str(self)


class InvalidInput(PoiProxyError, ValueError):
    status_code = 400


class UpstreamUnavailable(PoiProxyError):
    status_code = 503
    retryable = True


class InternalFault(PoiProxyError):
    status_code = 500

    @property
    def public_message(self) -> str:
        return "Internal error while processing the search request"


class CatalogEntryNotFound(PoiProxyError, KeyError):
    status_code = 404

    def __init__(self, poi_id: str):
        super().__init__(poi_id)
        self.poi_id = poi_id

    @property
    def public_message(self) -> str:
        return f"POI '{self.poi_id}' not found"

    def __str__(self) -> str:
        return self.public_message

"""
Exception -> HTTP response mapping.

Every failure is reported as `{"error": "<message>"}` (plus `"retryable": true` for 503s):
- `InvalidInput` / malformed request bodies -> 400
- `CatalogEntryNotFound` -> 404
- `UpstreamUnavailable` -> 503
- `InternalFault` and anything unhandled -> 500 with an opaque message (details go to the log)
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from poiproxy.core.errors import InternalFault, PoiProxyError

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def error_body(exc: PoiProxyError) -> dict:
    body: dict = {"error": exc.public_message}
    if exc.retryable:
        body["retryable"] = True
    return body


async def handle_poiproxy_error(request: Request, exc: PoiProxyError) -> JSONResponse:
    if exc.status_code >= 500 and not exc.retryable:
        logger.error("Request %s failed: %s", _request_id(request), exc)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc) or "body"
        parts.append(f"invalid '{field}': {err.get('msg')}")
    return JSONResponse(status_code=400, content={"error": "; ".join(parts) or "Invalid request"})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error in request %s", _request_id(request), exc_info=exc)
    # Runs outside the request middleware, so the request id header is set here.
    request_id = getattr(request.state, "request_id", None)
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(status_code=500, content={"error": InternalFault().public_message}, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PoiProxyError, handle_poiproxy_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

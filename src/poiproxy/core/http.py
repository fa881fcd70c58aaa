"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by the remote catalog store.

Design goals:
- Small surface area (GET JSON, POST JSON, DELETE).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so callers can decide how to fail.
"""

from __future__ import annotations

from typing import Any, Sequence

import httpx


DEFAULT_USER_AGENT = "poiproxy/0.1.0 (+https://local)"

QueryParams = dict[str, Any] | Sequence[tuple[str, Any]]


def _headers(headers: dict[str, str] | None) -> dict[str, str]:
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if headers:
        request_headers.update(headers)
    return request_headers


def get_json(
    url: str,
    *,
    params: QueryParams | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
) -> Any:
    """GET `url` and return the decoded JSON response.

    Raises:
        httpx.HTTPError: On transport errors (including timeouts) or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.get(url, params=params, headers=_headers(headers))
        resp.raise_for_status()
        return resp.json()


def post_json(
    url: str,
    *,
    payload: Any,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
) -> Any:
    """POST `payload` as a JSON body and return the decoded JSON response.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.post(url, json=payload, headers=_headers(headers))
        resp.raise_for_status()
        return resp.json()


def delete(
    url: str,
    *,
    params: QueryParams | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
) -> httpx.Response:
    """DELETE `url`; returns the response so callers can inspect the body (if any)."""
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.delete(url, params=params, headers=_headers(headers))
        resp.raise_for_status()
        return resp

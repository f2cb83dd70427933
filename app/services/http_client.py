from __future__ import annotations

"""JSON request helper for the remote expense service.

Wraps ``httpx.AsyncClient`` so callers deal with one error type. No retries:
a failed round-trip is reported once and the caller picks the fallback.
"""
from typing import Any, Optional

import httpx


class HttpError(Exception):
    def __init__(
        self, message: str, status_code: Optional[int] = None, accepted: bool = False
    ):
        super().__init__(message)
        self.status_code = status_code
        # the service took the request but its reply could not be used
        self.accepted = accepted

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def unwrap_data(payload: Any) -> Any:
    """Strip the optional ``{"data": ...}`` envelope the service may add."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    path: str,
    *,
    json: Any = None,
    expect_body: bool = True,
) -> Any:
    try:
        resp = await client.request(method, path, json=json)
    except httpx.HTTPError as e:
        raise HttpError(f"{method} {path} failed: {e}") from e
    if resp.status_code >= 400:
        raise HttpError(
            f"HTTP {resp.status_code} for {method} {path}", status_code=resp.status_code
        )
    if not expect_body or not resp.content:
        return None
    try:
        return resp.json()
    except ValueError as e:  # JSON decode
        raise HttpError(
            f"Invalid JSON from {method} {path}",
            status_code=resp.status_code,
            accepted=True,
        ) from e

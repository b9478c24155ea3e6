"""Decoding of remote JSON responses."""

from __future__ import annotations

from typing import Any

import httpx

from mediabot.errors import UpstreamFailureError


def json_payload(resp: httpx.Response, what: str) -> Any:
    """Decoded JSON body; a non-JSON body is an UpstreamFailureError."""
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamFailureError(f"{what}: malformed response") from e


def json_object(resp: httpx.Response, what: str) -> dict[str, Any]:
    """Decoded JSON body that must be an object."""
    data = json_payload(resp, what)
    if not isinstance(data, dict):
        raise UpstreamFailureError(f"{what}: malformed response")
    return data

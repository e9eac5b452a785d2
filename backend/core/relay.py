"""Request decoding for the relay endpoint.

Turns the raw inbound body into a JSON object or a diagnostic error. Errors
carry the exact response body the caller will see; the FastAPI handler in
``backend.main`` only serializes them.
"""

import json
import os
from collections.abc import Mapping

import structlog

from backend.api.schemas import EmptyBodyResponse, InvalidJsonResponse, UpstreamErrorResponse

logger = structlog.get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Accept, Authorization",
}

RAW_PREVIEW_LIMIT = 1000
TRUNCATION_MARKER = "... (truncated)"


class RelayError(Exception):
    """Base class for errors surfaced to the relay caller."""
    status_code = 400

    def __init__(self, body: dict):
        super().__init__(body.get("error", "relay error"))
        self.body = body


class EmptyBodyError(RelayError):
    """POST arrived without a body."""
    pass


class InvalidJsonError(RelayError):
    """POST body is not a JSON object."""
    pass


class UpstreamFailedError(RelayError):
    """Upstream was unreachable or answered with something other than JSON."""
    status_code = 502


def echo_headers_enabled() -> bool:
    """Whether the empty-body diagnostic includes header values."""
    return os.environ.get("RELAY_ECHO_HEADERS", "true").lower() not in ("0", "false", "no")


def _reject_constant(name: str):
    """NaN and Infinity are not JSON."""
    raise ValueError(f"invalid JSON constant: {name}")


def truncate_raw(text: str, limit: int = RAW_PREVIEW_LIMIT) -> str:
    """Return text unchanged, or its first ``limit`` chars plus a marker."""
    if len(text) > limit:
        return text[:limit] + TRUNCATION_MARKER
    return text


def decode_body(raw: bytes, method: str, headers: Mapping[str, str]) -> dict:
    """Parse the inbound body into a JSON object.

    Args:
        raw: Raw request body.
        method: HTTP method of the request, echoed on empty bodies.
        headers: Received request headers, echoed on empty bodies.

    Returns:
        The decoded JSON object.

    Raises:
        EmptyBodyError: If the body is empty.
        InvalidJsonError: If the body does not decode to a JSON object.
    """
    text = raw.decode("utf-8", errors="replace")

    if not text:
        logger.warning("relay.empty_body", method=method)
        echoed = dict(headers) if echo_headers_enabled() else list(headers.keys())
        body = EmptyBodyResponse(method=method, headers=echoed)
        raise EmptyBodyError(body.model_dump())

    try:
        payload = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        payload = None

    if not isinstance(payload, dict):
        logger.warning("relay.invalid_json", body_len=len(text))
        raise InvalidJsonError(InvalidJsonResponse(raw=truncate_raw(text)).model_dump())

    return payload


def upstream_failed(detail: str) -> UpstreamFailedError:
    """Build the 502 error for an unreachable upstream."""
    return UpstreamFailedError(UpstreamErrorResponse(detail=detail).model_dump())

"""FastAPI endpoints for the chat relay.

OPTIONS / - CORS preflight
POST /    - forward a chat payload upstream with the server-held credential
GET /health - credential configuration check
"""

import time

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse, Response

from backend.api.schemas import HealthResponse
from backend.core.relay import CORS_HEADERS, decode_body, upstream_failed
from backend.core.upstream import UpstreamUnavailableError

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.options("/")
def preflight():
    """Answer CORS preflight without touching the body."""
    return Response(status_code=200, headers=CORS_HEADERS, media_type="application/json")


@router.post("/")
async def relay(req: Request):
    """Forward the caller's messages upstream and pass the JSON back.

    The response is always 200 once the upstream has answered with JSON,
    including when that JSON is an upstream error payload.
    """
    start = time.monotonic()
    raw = await req.body()
    payload = decode_body(raw, req.method, req.headers)

    upstream = req.app.state.upstream
    upstream_request = upstream.build_request(payload)
    logger.info("relay.request", max_tokens=upstream_request.max_tokens,
                has_messages=upstream_request.messages is not None)

    try:
        upstream_status, data = await upstream.complete(upstream_request)
    except UpstreamUnavailableError as e:
        raise upstream_failed(str(e)) from e

    latency_ms = int((time.monotonic() - start) * 1000)
    logger.info("relay.response", upstream_status=upstream_status, latency_ms=latency_ms)

    return JSONResponse(status_code=200, content=data, headers=CORS_HEADERS)


@router.get("/health", response_model=HealthResponse)
def health(req: Request):
    """Report whether the upstream credential is configured."""
    upstream = req.app.state.upstream
    components = {"credential": "ok" if upstream.is_healthy() else "error"}
    status = "healthy" if upstream.is_healthy() else "degraded"
    return JSONResponse(
        content=HealthResponse(status=status, components=components).model_dump(),
        headers=CORS_HEADERS,
    )

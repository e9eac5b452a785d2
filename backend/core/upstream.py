"""Upstream chat-completion client.

Holds the server-side credential and performs the single outbound call per
relay request. The upstream status code is not inspected: whatever JSON the
provider returns is handed back to the caller.
"""

import os

import httpx
import structlog

from backend.api.schemas import UpstreamChatRequest

logger = structlog.get_logger(__name__)

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o"


class UpstreamUnavailableError(Exception):
    """The upstream could not be reached or did not answer with JSON."""
    pass


class UpstreamClient:
    """Wraps the chat-completion endpoint with bearer-token injection."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.api_key = os.environ.get("OPENAI_API_KEY", "")
        self.api_url = os.environ.get("OPENAI_API_URL", DEFAULT_API_URL)
        self.model = os.environ.get("OPENAI_MODEL", DEFAULT_MODEL)
        self.default_max_tokens = int(os.environ.get("RELAY_DEFAULT_MAX_TOKENS", "300"))
        self.timeout = float(os.environ.get("LLM_TIMEOUT", "30"))
        self._transport = transport

    def is_healthy(self) -> bool:
        """Check that the credential is configured.

        Returns:
            True if OPENAI_API_KEY is set.
        """
        return bool(self.api_key)

    def build_request(self, payload: dict) -> UpstreamChatRequest:
        """Translate the caller's payload into the upstream request shape.

        Only ``messages`` and ``max_tokens`` are taken from the caller; the
        model is always the configured one.

        Args:
            payload: Parsed JSON object sent by the caller.

        Returns:
            UpstreamChatRequest ready to be serialized.
        """
        max_tokens = payload.get("max_tokens")
        return UpstreamChatRequest(
            model=self.model,
            messages=payload.get("messages"),
            max_tokens=self.default_max_tokens if max_tokens is None else max_tokens,
        )

    async def complete(self, request: UpstreamChatRequest) -> tuple[int, object]:
        """POST the request upstream and return its status and JSON body.

        Args:
            request: Upstream request built by build_request().

        Returns:
            Tuple of (upstream_status_code, decoded_json_body).

        Raises:
            UpstreamUnavailableError: On transport failure or a non-JSON body.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        logger.debug("upstream.invoke", url=self.api_url, model=request.model)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    headers=headers,
                    content=request.model_dump_json(exclude_none=True),
                )
        except httpx.HTTPError as e:
            logger.error("upstream.transport_failed", error=str(e))
            raise UpstreamUnavailableError(f"Upstream request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error("upstream.non_json", status=response.status_code)
            raise UpstreamUnavailableError(
                f"Upstream returned a non-JSON body ({response.status_code})"
            ) from e

        if response.is_error:
            logger.warning("upstream.error_status", status=response.status_code)
        else:
            logger.info("upstream.ok", status=response.status_code)
        return response.status_code, data

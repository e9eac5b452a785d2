"""Pydantic models for the relay API layer.

The caller's payload is deliberately not validated beyond "is a JSON object";
these models describe what the relay sends upstream and what it answers with
on failure.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class UpstreamChatRequest(BaseModel):
    """Body forwarded to the chat-completion endpoint."""
    model: str = Field(..., min_length=1)
    messages: Any = None  # copied verbatim from the caller
    max_tokens: Any = 300


class EmptyBodyResponse(BaseModel):
    """400 body for a POST without content."""
    error: str = "Empty body received"
    method: str
    headers: dict[str, str] | list[str]


class InvalidJsonResponse(BaseModel):
    """400 body for a POST that is not a JSON object."""
    error: str = "Invalid JSON body"
    raw: str


class UpstreamErrorResponse(BaseModel):
    """502 body when the upstream could not be reached."""
    error: str = "Upstream request failed"
    detail: str


class HealthResponse(BaseModel):
    """Relay component health."""
    status: Literal["healthy", "degraded"]
    components: dict[str, Literal["ok", "error"]]

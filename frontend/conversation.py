"""Conversation client for the chat relay.

Keeps a rolling context (detected user name, recent questions), assembles the
message list sent to the relay, and folds replies back into the transcript.
All state lives on an explicit ChatSession; nothing here is module-global.
"""

import os
import re
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

import requests
import structlog

from frontend.prompts import PERSONA_PROMPT

logger = structlog.get_logger(__name__)

GREETING = "👋 Hello! How can I help you today?"
FALLBACK_REPLY = "Sorry — I couldn't reach the API. Please try again later."
NAME_ACK_TEMPLATE = "Nice to meet you, {name}! How can I help today?"

MAX_PAST_QUESTIONS = 20
RECENT_QUESTIONS_IN_SUMMARY = 5

# Tried in order; the first match wins.
_NAME_PATTERNS = [
    re.compile(r"my name is\s+([A-Za-z\-']{2,50})", re.IGNORECASE),
    re.compile(r"i'm\s+([A-Za-z\-']{2,50})", re.IGNORECASE),
    re.compile(r"i am\s+([A-Za-z\-']{2,50})", re.IGNORECASE),
]

Role = Literal["system", "user", "assistant"]


class ConversationError(Exception):
    """Base class for failures of a single submission."""
    pass


class ConfigurationError(ConversationError):
    """Client is missing settings it needs to reach the relay."""
    pass


class UpstreamHttpError(ConversationError):
    """Relay answered with a non-success status."""

    def __init__(self, status_code: int, reason: str, body: str):
        super().__init__(f"OpenAI API error: {status_code} {reason} - {body}")
        self.status_code = status_code
        self.reason = reason
        self.body = body


class UpstreamMalformedResponse(ConversationError):
    """Relay answered 200 but without a usable first choice."""
    pass


class SessionBusyError(ConversationError):
    """A submission arrived while another is still in flight."""
    pass


@dataclass(frozen=True)
class ChatMessage:
    """Single chat message. Order within a list determines model context."""
    role: Role
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class PastQuestion:
    text: str
    time: datetime


@dataclass
class ConversationContext:
    """Detected user name and the most recent questions (FIFO, bounded)."""
    user_name: str | None = None
    past_questions: deque[PastQuestion] = field(
        default_factory=lambda: deque(maxlen=MAX_PAST_QUESTIONS)
    )


@dataclass
class ChatSession:
    """Everything one chat widget owns for its lifetime.

    Attributes:
        context: Rolling conversation context.
        transcript: Model-facing history, seeded with the persona message.
        state: "idle" or "sending"; at most one call is in flight.
    """
    context: ConversationContext = field(default_factory=ConversationContext)
    transcript: list[ChatMessage] = field(
        default_factory=lambda: [ChatMessage(role="system", content=PERSONA_PROMPT)]
    )
    state: Literal["idle", "sending"] = "idle"


@dataclass
class ClientSettings:
    """Relay location and the sampling parameters sent with every request."""
    relay_url: str = field(default_factory=lambda: os.environ.get("RELAY_URL", "http://localhost:8000/"))
    timeout: float = field(default_factory=lambda: float(os.environ.get("CLIENT_TIMEOUT", "60")))
    model: str = "gpt-4o"
    max_tokens: int = 500
    temperature: float = 0.7
    top_p: float = 1
    frequency_penalty: float = 0
    presence_penalty: float = 0


def update_context_from_message(context: ConversationContext, text: str) -> str | None:
    """Detect a self-introduction like "my name is ..." or "I'm ...".

    Args:
        context: Context to update when a name is found.
        text: Raw user text.

    Returns:
        The detected name, or None (context untouched).
    """
    if not text:
        return None
    for pattern in _NAME_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            name = match.group(1).strip()
            context.user_name = name
            return name
    return None


def add_user_question_to_context(context: ConversationContext, text: str) -> None:
    """Record a user question; the oldest is evicted beyond the bound."""
    if not text:
        return
    context.past_questions.append(PastQuestion(text=text, time=datetime.now(timezone.utc)))


def build_context_system_message(context: ConversationContext) -> ChatMessage | None:
    """Summarize the context as an extra system message, or None if empty."""
    parts = []
    if context.user_name:
        parts.append(f"user_name: {context.user_name}")
    if context.past_questions:
        last = [q.text for q in list(context.past_questions)[-RECENT_QUESTIONS_IN_SUMMARY:]]
        parts.append(f"recent_user_questions: {' || '.join(last)}\n")
    if not parts:
        return None
    return ChatMessage(role="system", content="Conversation context:\n" + "\n".join(parts))


def build_outgoing_messages(session: ChatSession, message: str) -> list[ChatMessage]:
    """Transcript (persona first), optional context summary, then the new turn."""
    messages = list(session.transcript)
    context_msg = build_context_system_message(session.context)
    if context_msg:
        messages.append(context_msg)
    messages.append(ChatMessage(role="user", content=message))
    return messages


def send_message_to_openai(
    session: ChatSession,
    message: str,
    settings: ClientSettings | None = None,
) -> str:
    """Send one user turn through the relay and record the exchange.

    Args:
        session: Session whose transcript and context feed the request.
        message: The user's text.
        settings: Relay location and sampling parameters.

    Returns:
        The assistant reply, stripped of surrounding whitespace.

    Raises:
        ConfigurationError: If no relay URL is configured.
        UpstreamHttpError: If the relay answers with a non-success status.
        UpstreamMalformedResponse: If the reply has no usable first choice.
        requests.RequestException: On transport failure.
    """
    settings = settings or ClientSettings()
    if not settings.relay_url:
        raise ConfigurationError("Relay URL is not defined. Set RELAY_URL in the environment.")

    messages = build_outgoing_messages(session, message)
    body = {
        "model": settings.model,
        "messages": [m.to_dict() for m in messages],
        "max_tokens": settings.max_tokens,
        "temperature": settings.temperature,
        "top_p": settings.top_p,
        "frequency_penalty": settings.frequency_penalty,
        "presence_penalty": settings.presence_penalty,
    }
    logger.debug("conversation.send", url=settings.relay_url, message_count=len(messages))

    resp = requests.post(
        settings.relay_url,
        json=body,
        headers={"Content-Type": "application/json"},
        timeout=settings.timeout,
    )

    if not resp.ok:
        raise UpstreamHttpError(resp.status_code, resp.reason or "", resp.text)

    data = resp.json()
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise UpstreamMalformedResponse(f"Response has no usable choices: {str(data)[:200]}") from e
    if not isinstance(content, str):
        raise UpstreamMalformedResponse("First choice has no text content")

    assistant_text = content.strip()
    session.transcript.append(ChatMessage(role="user", content=message))
    session.transcript.append(ChatMessage(role="assistant", content=assistant_text))
    logger.info("conversation.reply", transcript_len=len(session.transcript))
    return assistant_text


def submit(
    session: ChatSession,
    text: str,
    settings: ClientSettings | None = None,
) -> list[str]:
    """Handle one user submission end to end.

    Records the question, acknowledges a newly detected name, then sends the
    turn. Any failure becomes the single fallback reply.

    Returns:
        Assistant messages to show, in order. Empty for blank input.

    Raises:
        SessionBusyError: If a previous submission is still in flight.
    """
    text = text.strip() if text else ""
    if not text:
        return []
    if session.state == "sending":
        raise SessionBusyError("A message is already being sent")

    replies = []
    add_user_question_to_context(session.context, text)
    detected_name = update_context_from_message(session.context, text)
    if detected_name:
        replies.append(NAME_ACK_TEMPLATE.format(name=detected_name))

    session.state = "sending"
    try:
        replies.append(send_message_to_openai(session, text, settings))
    except (ConversationError, requests.RequestException, ValueError) as e:
        logger.error("conversation.send_failed", error=str(e), error_type=type(e).__name__)
        replies.append(FALLBACK_REPLY)
    finally:
        session.state = "idle"
    return replies

"""FastAPI application entry point for the chat relay.

Startup builds the upstream client from the environment. The relay keeps no
state between requests beyond that configured client.
"""

from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

from backend.api.routes import router
from backend.core.relay import CORS_HEADERS, RelayError
from backend.core.upstream import UpstreamClient

load_dotenv()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("startup.begin")

    upstream = UpstreamClient()
    app.state.upstream = upstream
    logger.info("startup.upstream_initialized", healthy=upstream.is_healthy(),
                model=upstream.model)
    if not upstream.is_healthy():
        logger.error("startup.credential_missing", hint="Set OPENAI_API_KEY in .env")

    logger.info("startup.complete")
    yield
    logger.info("shutdown.complete")


app = FastAPI(
    title="Chat Relay",
    description="Credential-shielding relay for chat-completion requests",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    """Surface relay errors to the caller with their diagnostic body."""
    return JSONResponse(status_code=exc.status_code, content=exc.body, headers=CORS_HEADERS)


app.include_router(router)

"""FastAPI application: slash command and Slack Events API endpoints.

WHY: Slack reaches the bot over HTTP. Slash commands POST form data to
/command and expect a plain-text reply; reaction events POST JSON to
/event. Both must come from Slack, which signs every request.

HOW: create_app() builds a FastAPI app around a Services bundle. /command
verifies the signature with slack_sdk's SignatureVerifier, validates the
form into a SlashCommand, and runs the CommandRouter in the threadpool.
/event is delegated to Bolt's FastAPI adapter, which verifies, acks and
dispatches to the reaction listeners.

RULES:
- Invalid or missing signature on /command -> 401, nothing executed
- Router replies keep their status: 201 for created, 200 otherwise
- Router exceptions are not caught here; FastAPI answers 500
- GET / and GET /health are unauthenticated liveness probes
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from slack_bolt.adapter.fastapi import SlackRequestHandler
from slack_sdk.signature import SignatureVerifier
from starlette.concurrency import run_in_threadpool

from qabot import __version__
from qabot.services import Services, get_services
from qabot.slack.payloads import SlashCommand

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Liveness probe response."""

    status: str = Field(description="Always 'ok' when the process is serving.")
    version: str = Field(description="Package version.")


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Build the FastAPI app.

    RULES:
    - services defaults to the process-wide bundle from get_services()
    """
    services = services or get_services()
    verifier = SignatureVerifier(services.settings.signing_secret)
    slack_handler = SlackRequestHandler(services.slack_app)

    app = FastAPI(
        title="Slack Q&A Bot",
        description=(
            "Collects questions for named events via a slash command and "
            "tallies thumbs-up / thumbs-down reactions on them."
        ),
        version=__version__,
    )

    @app.get("/", response_class=PlainTextResponse, tags=["health"])
    async def index() -> str:
        return "Hello World!"

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.post("/command", response_class=PlainTextResponse, tags=["slack"])
    async def command(request: Request) -> PlainTextResponse:
        body = await request.body()
        if not verifier.is_valid_request(body, dict(request.headers)):
            logger.warning("Rejected /command request with invalid signature")
            raise HTTPException(status_code=401, detail="Invalid request signature")

        form = await request.form()
        payload = SlashCommand.model_validate(
            {key: value for key, value in form.items() if isinstance(value, str)}
        )

        reply = await run_in_threadpool(services.router.handle, payload.text)
        return PlainTextResponse(reply.text, status_code=reply.status_code)

    @app.post("/event", tags=["slack"])
    async def slack_events(request: Request):
        return await slack_handler.handle(request)

    return app

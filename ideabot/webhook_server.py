"""FastAPI receiver for Slack events and slash commands."""

import json
import logging
import time
from typing import Any, Callable
from urllib.parse import parse_qs

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from slack_sdk.signature import Clock, SignatureVerifier

from .bot import IdeaBot
from .commands import CommandHandlers
from .config import Config
from .slack_client import MessageEvent, SlashCommand

logger = logging.getLogger(__name__)


class _FixedClock(Clock):
    """slack_sdk Clock pinned to a given unix time."""

    def __init__(self, now: float):
        self._now = now

    def now(self) -> float:
        return self._now


def verify_slack_signature(
    body: bytes,
    timestamp: str,
    signature: str,
    secret: str,
    now: float | None = None,
) -> bool:
    """Verify a Slack request signature (v0 scheme, HMAC SHA-256).

    Checking is done by slack_sdk's SignatureVerifier, which also refuses
    requests older than five minutes.

    Args:
        body: Raw request body bytes
        timestamp: X-Slack-Request-Timestamp header value
        signature: X-Slack-Signature header value (format: "v0=...")
        secret: Signing secret
        now: Current unix time (defaults to time.time())

    Returns:
        True if signature is valid and the request is fresh, False otherwise
    """
    # SignatureVerifier calls int() on the timestamp without guarding it
    try:
        int(timestamp)
    except (TypeError, ValueError):
        logger.warning("Missing or invalid request timestamp: %r", timestamp)
        return False

    clock = Clock() if now is None else _FixedClock(now)
    verifier = SignatureVerifier(signing_secret=secret, clock=clock)

    is_valid = verifier.is_valid(body=body, timestamp=timestamp, signature=signature)
    if not is_valid:
        logger.warning("Slack signature verification failed (timestamp %s)", timestamp)
    return is_valid


def create_webhook_app(
    config: Config,
    bot: IdeaBot,
    commands: CommandHandlers,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Create and configure the FastAPI webhook application.

    Args:
        config: Application configuration
        bot: Message handler for idea messages
        commands: Slash command handlers
        clock: Time source for signature freshness checks

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Hackathon Idea Bot",
        description="Slack Events API and slash command receiver",
        version="2.1.0",
    )
    signing_secret = config.slack.signing_secret.get_secret_value()

    async def verified_body(request: Request) -> bytes:
        body = await request.body()
        if not verify_slack_signature(
            body,
            request.headers.get("X-Slack-Request-Timestamp", ""),
            request.headers.get("X-Slack-Signature", ""),
            signing_secret,
            now=clock(),
        ):
            raise HTTPException(status_code=401, detail="Invalid signature")
        return body

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "hackathon-idea-bot"}

    @app.post("/slack/events")
    async def slack_events(request: Request, background_tasks: BackgroundTasks) -> Response:
        """Receive Events API callbacks; message events are handled in the background."""
        body = await verified_body(request)

        try:
            payload: dict[str, Any] = json.loads(body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Failed to parse event payload: %s", e)
            raise HTTPException(status_code=400, detail="Invalid JSON payload")

        payload_type = payload.get("type")
        if payload_type == "url_verification":
            return JSONResponse({"challenge": payload.get("challenge", "")})

        if payload_type != "event_callback":
            logger.info("Ignoring unhandled payload type: %s", payload_type)
            return Response(status_code=200)

        event = payload.get("event") or {}
        if event.get("type") == "message":
            retry_num = request.headers.get("X-Slack-Retry-Num")
            if retry_num:
                logger.info("Slack redelivery #%s of event %s", retry_num, payload.get("event_id"))
            background_tasks.add_task(bot.handle_message, MessageEvent.from_payload(event))
        else:
            logger.debug("Ignoring event type: %s", event.get("type"))

        return Response(status_code=200)

    @app.post("/slack/commands")
    async def slack_commands(request: Request, background_tasks: BackgroundTasks) -> Response:
        """Acknowledge a slash command at once and run it in the background."""
        body = await verified_body(request)

        try:
            form = {
                key: values[0]
                for key, values in parse_qs(body.decode("utf-8"), keep_blank_values=True).items()
            }
        except UnicodeDecodeError as e:
            logger.error("Failed to decode command payload: %s", e)
            raise HTTPException(status_code=400, detail="Invalid form payload")

        command = SlashCommand.from_form(form)
        if not command.command or not command.response_url:
            raise HTTPException(status_code=400, detail="Missing command or response_url")

        logger.info("Accepted slash command %s from %s", command.command, command.user_id)
        background_tasks.add_task(commands.handle, command)
        return Response(status_code=200)

    return app

"""Slack client wrapper and inbound event shapes."""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.http_retry.builtin_async_handlers import (
    AsyncConnectionErrorRetryHandler,
    AsyncRateLimitErrorRetryHandler,
)
from slack_sdk.web.async_client import AsyncWebClient
from slack_sdk.webhook.async_client import AsyncWebhookClient

from .blocks import Block, SlackResponse
from .config import SlackConfig

logger = logging.getLogger(__name__)

ANONYMOUS = "Anonymous"


@dataclass
class MessageEvent:
    """A channel message delivered by the Events API."""

    channel: str
    ts: str
    user: Optional[str]
    text: Optional[str]
    bot_id: Optional[str] = None
    subtype: Optional[str] = None

    @property
    def is_from_bot(self) -> bool:
        return bool(self.bot_id) or self.subtype == "bot_message"

    @classmethod
    def from_payload(cls, event: Mapping[str, Any]) -> "MessageEvent":
        return cls(
            channel=event.get("channel", ""),
            ts=event.get("ts", ""),
            user=event.get("user"),
            text=event.get("text"),
            bot_id=event.get("bot_id"),
            subtype=event.get("subtype"),
        )


@dataclass
class SlashCommand:
    """A slash command invocation."""

    command: str
    user_id: str
    channel_id: str
    text: str
    response_url: str

    @classmethod
    def from_form(cls, form: Mapping[str, str]) -> "SlashCommand":
        return cls(
            command=form.get("command", ""),
            user_id=form.get("user_id", ""),
            channel_id=form.get("channel_id", ""),
            text=form.get("text", ""),
            response_url=form.get("response_url", ""),
        )


def pick_display_name(user: Mapping[str, Any]) -> str:
    """Display name, then real name, then handle, then ``Anonymous``."""
    profile = user.get("profile") or {}
    return (
        profile.get("display_name")
        or user.get("real_name")
        or profile.get("real_name")
        or user.get("name")
        or ANONYMOUS
    )


class SlackClient:
    """Wrapper around the Slack Web API for bot operations."""

    def __init__(self, config: SlackConfig, max_retries: int = 3) -> None:
        self.config = config
        self.client = AsyncWebClient(
            token=config.bot_token.get_secret_value(),
            retry_handlers=[
                AsyncConnectionErrorRetryHandler(max_retry_count=max_retries),
                AsyncRateLimitErrorRetryHandler(max_retry_count=max_retries),
            ],
        )
        self.bot_user_id: Optional[str] = None

    async def auth_test(self) -> Optional[str]:
        """Look up the bot's own user id."""
        response = await self.client.auth_test()
        self.bot_user_id = response.get("user_id")
        logger.info("Slack bot authenticated as %s (%s)", response.get("user"), self.bot_user_id)
        return self.bot_user_id

    async def add_reaction(self, channel: str, timestamp: str, name: str) -> None:
        try:
            await self.client.reactions_add(channel=channel, timestamp=timestamp, name=name)
        except SlackApiError as e:
            # The random pool overlaps with category emoji
            if e.response.get("error") == "already_reacted":
                logger.debug("Reaction :%s: already present on %s", name, timestamp)
                return
            raise

    async def post_message(
        self,
        channel: str,
        text: str,
        thread_ts: Optional[str] = None,
        blocks: Optional[list[Block]] = None,
    ) -> Optional[str]:
        """Post a message, optionally in a thread. Returns the new message ts."""
        kwargs: dict[str, Any] = {"channel": channel, "text": text}
        if thread_ts:
            kwargs["thread_ts"] = thread_ts
        if blocks:
            kwargs["blocks"] = [block.to_dict() for block in blocks]

        response = await self.client.chat_postMessage(**kwargs)
        logger.debug("Posted message to %s: %s", channel, text[:50])
        return response.get("ts")

    async def lookup_display_name(self, user_id: str) -> str:
        """Resolve a user's display name; raises on API failure."""
        response = await self.client.users_info(user=user_id)
        return pick_display_name(response.get("user") or {})

    async def respond(self, response_url: str, response: SlackResponse) -> None:
        """Send a slash command response through its response_url."""
        webhook = AsyncWebhookClient(response_url)
        result = await webhook.send_dict(response.to_payload())
        if result.status_code != 200:
            logger.warning(
                "Slash command response rejected (%s): %s", result.status_code, result.body
            )

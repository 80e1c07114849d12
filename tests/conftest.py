"""Shared fixtures for the idea bot tests."""

import random
from typing import Optional

import pytest
import pytest_asyncio

from ideabot.blocks import SlackResponse
from ideabot.config import BotConfig, Config, SlackConfig
from ideabot.services import DatabaseService

ADMIN_ID = "U_ADMIN"
IDEA_CHANNEL = "C_IDEAS"


def make_config(**bot_overrides) -> Config:
    """Config with zero delays so deferred replies run immediately."""
    bot_settings = {
        "reply_delay_min": 0.0,
        "reply_delay_max": 0.0,
        "dad_joke_delay": 0.0,
        "dad_joke_chance": 0.0,
        "retry_base_delay": 0.0,
        "max_retries": 2,
    }
    bot_settings.update(bot_overrides)
    return Config(
        slack=SlackConfig(
            bot_token="xoxb-test",
            signing_secret="test-secret",
            channel_id=IDEA_CHANNEL,
            admin_user_id=ADMIN_ID,
        ),
        bot=BotConfig(**bot_settings),
    )


class FakeSlack:
    """Records outbound Slack calls instead of sending them."""

    def __init__(self) -> None:
        self.bot_user_id: Optional[str] = "U_BOT"
        self.reactions: list[tuple[str, str, str]] = []
        self.posts: list[dict] = []
        self.responses: list[tuple[str, SlackResponse]] = []
        self.display_names: dict[str, str] = {}
        self.fail_lookup = False
        self.fail_reactions = False
        self.fail_posts = False

    async def add_reaction(self, channel: str, timestamp: str, name: str) -> None:
        if self.fail_reactions:
            raise RuntimeError("reactions unavailable")
        self.reactions.append((channel, timestamp, name))

    async def post_message(self, channel, text, thread_ts=None, blocks=None):
        if self.fail_posts:
            raise RuntimeError("chat.postMessage failed")
        self.posts.append({"channel": channel, "text": text, "thread_ts": thread_ts})
        return "1700000000.000100"

    async def lookup_display_name(self, user_id: str) -> str:
        if self.fail_lookup:
            raise RuntimeError("users.info failed")
        return self.display_names.get(user_id, "Anonymous")

    async def respond(self, response_url: str, response: SlackResponse) -> None:
        self.responses.append((response_url, response))


@pytest.fixture
def config() -> Config:
    return make_config()


@pytest.fixture
def fake_slack() -> FakeSlack:
    return FakeSlack()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest_asyncio.fixture
async def db(tmp_path):
    """File-backed SQLite database, fresh per test."""
    service = DatabaseService(
        f"sqlite+aiosqlite:///{tmp_path / 'ideas.db'}",
        timeout=5,
        max_retries=2,
        retry_delay=0,
    )
    await service.initialize()
    yield service
    await service.close()

"""Tests for slash command handlers."""

import random
from datetime import datetime, timezone

import pytest

from ideabot.commands import (
    ADMIN_REJECTIONS,
    UNKNOWN_COMMAND,
    CommandHandlers,
    format_stats_message,
)
from ideabot.command_router import CommandType
from ideabot.services import (
    AggregateStats,
    RateLimiter,
    SettingsService,
    StatsService,
    SubmissionService,
)
from ideabot.slack_client import SlashCommand

from .conftest import ADMIN_ID, IDEA_CHANNEL, make_config

NOW = datetime(2026, 3, 10, 8, 30, tzinfo=timezone.utc)
RESPONSE_URL = "https://hooks.slack.test/commands/T1/1/abc"


def slash(command, user_id="U1"):
    return SlashCommand(
        command=command,
        user_id=user_id,
        channel_id=IDEA_CHANNEL,
        text="",
        response_url=RESPONSE_URL,
    )


class BrokenStats:
    async def get_aggregate_stats(self):
        raise ConnectionError("database unavailable")

    async def get_leaderboard(self, limit=10):
        raise ConnectionError("database unavailable")


class TestCommandHandlers:
    """Test command dispatch, admin checks and responses."""

    def make_handlers(self, db, fake_slack, config=None, rate_limit_max=10, stats=None):
        self.submissions = SubmissionService(db)
        self.settings = SettingsService(db)
        return CommandHandlers(
            config or make_config(),
            fake_slack,
            stats or StatsService(db),
            self.submissions,
            self.settings,
            RateLimiter(60, rate_limit_max),
            rng=random.Random(3),
            clock=lambda: NOW,
        )

    async def add_ideas(self, *specs):
        for i, (author_id, name, category) in enumerate(specs):
            await self.submissions.create_submission(
                author_id=author_id,
                author_name=name,
                text=f"Ide: nummer {i}",
                category=category,
                source_message_id=f"1.{i}",
                source_channel_id=IDEA_CHANNEL,
            )

    @staticmethod
    def responses(fake_slack):
        assert all(url == RESPONSE_URL for url, _ in fake_slack.responses)
        return [response for _, response in fake_slack.responses]

    @pytest.mark.asyncio
    async def test_stats_with_zero_ideas(self, db, fake_slack):
        """Test stats on an empty database render placeholders."""
        handlers = self.make_handlers(db, fake_slack)

        await handlers.handle(slash("/hackathon-stats"))

        [response] = self.responses(fake_slack)
        assert response.response_type == "in_channel"
        assert "*Total idéer:* 0" in response.text
        assert "Ingen kategorier endnu" in response.text
        assert "Ingen brugere endnu" in response.text

    @pytest.mark.asyncio
    async def test_stats_with_ideas(self, db, fake_slack):
        """Test stats list categories and top authors."""
        handlers = self.make_handlers(db, fake_slack)
        await self.add_ideas(
            ("U1", "Alice", "🤖 AI & Automatisering"),
            ("U1", "Alice", "🤖 AI & Automatisering"),
            ("U2", "Bob", "📊 Data & Visualisering"),
        )

        await handlers.handle(slash("/hackathon-stats"))

        [response] = self.responses(fake_slack)
        assert "*Total idéer:* 3" in response.text
        assert "🤖 AI & Automatisering: 2" in response.text
        assert "1. Alice: 2 idéer" in response.text
        assert "Vi har brug for flere idéer!" in response.text

    @pytest.mark.asyncio
    async def test_stats_rate_limited(self, db, fake_slack):
        """Test stats requests beyond the limit get a polite refusal."""
        handlers = self.make_handlers(db, fake_slack, rate_limit_max=1)

        await handlers.handle(slash("/hackathon-stats"))
        await handlers.handle(slash("/hackathon-stats"))

        first, second = self.responses(fake_slack)
        assert first.response_type == "in_channel"
        assert second.response_type == "ephemeral"
        assert second.text.startswith("⏳")

    @pytest.mark.asyncio
    async def test_stats_failure_reports_error(self, db, fake_slack):
        """Test a storage failure becomes an ephemeral error reply."""
        handlers = self.make_handlers(db, fake_slack, stats=BrokenStats())

        await handlers.handle(slash("/hackathon-stats"))

        [response] = self.responses(fake_slack)
        assert response.response_type == "ephemeral"
        assert response.text.startswith("❌")

    @pytest.mark.asyncio
    async def test_failed_error_reply_is_contained(self, db, fake_slack):
        """Test an expired response_url during error reporting does not escape handle."""
        handlers = self.make_handlers(db, fake_slack, stats=BrokenStats())
        attempts = []

        async def expired_respond(response):
            attempts.append(response)
            raise RuntimeError("response_url expired")

        await handlers.handle(slash("/hackathon-stats"), respond=expired_respond)

        [error_reply] = attempts
        assert error_reply.text.startswith("❌")

    @pytest.mark.asyncio
    async def test_help_is_ephemeral(self, db, fake_slack):
        """Test help mentions every command and the joke chance."""
        handlers = self.make_handlers(db, fake_slack, config=make_config(dad_joke_chance=0.25))

        await handlers.handle(slash("/hackathon-help", user_id="U2"))

        [response] = self.responses(fake_slack)
        assert response.response_type == "ephemeral"
        for command_type in CommandType:
            assert f"/{command_type.value}" in response.text
        assert "25% chance" in response.text

    @pytest.mark.asyncio
    async def test_unknown_command(self, db, fake_slack):
        """Test an unknown command gets a hint."""
        handlers = self.make_handlers(db, fake_slack)

        await handlers.handle(slash("/ask"))

        [response] = self.responses(fake_slack)
        assert response.text == UNKNOWN_COMMAND

    @pytest.mark.asyncio
    async def test_leaderboard_empty(self, db, fake_slack):
        """Test the leaderboard with no data is an ephemeral hint."""
        handlers = self.make_handlers(db, fake_slack)

        await handlers.handle(slash("/leaderboard"))

        [response] = self.responses(fake_slack)
        assert response.response_type == "ephemeral"
        assert "Ingen data til leaderboard endnu" in response.text

    @pytest.mark.asyncio
    async def test_leaderboard_blocks(self, db, fake_slack):
        """Test the leaderboard is posted in channel with one section per author."""
        handlers = self.make_handlers(db, fake_slack)
        await self.add_ideas(
            ("U1", "Alice", "🤖 AI & Automatisering"),
            ("U2", "Bob", "📊 Data & Visualisering"),
            ("U2", "Bob", "🔗 Integrationer"),
        )

        await handlers.handle(slash("/leaderboard"))

        [response] = self.responses(fake_slack)
        assert response.response_type == "in_channel"
        payload = response.to_payload()
        assert payload["blocks"][0]["type"] == "header"
        sections = [b["text"]["text"] for b in payload["blocks"] if b["type"] == "section"]
        assert any(s.startswith("🏆 *1. Bob*") for s in sections)
        assert any(s.startswith("🥈 *2. Alice*") for s in sections)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "command_type",
        [CommandType.MOTIVATE_NOW, CommandType.TOGGLE_DAILY_REMINDER, CommandType.SHOW_IDEAS],
    )
    async def test_admin_commands_reject_non_admin(self, db, fake_slack, command_type):
        """Test non-admins get the rejection and nothing else happens."""
        handlers = self.make_handlers(db, fake_slack)
        await self.add_ideas(("U1", "Alice", "🤖 AI & Automatisering"))

        await handlers.handle(slash(f"/{command_type.value}", user_id="U_SOMEONE"))

        [response] = self.responses(fake_slack)
        assert response.response_type == "ephemeral"
        assert response.text == ADMIN_REJECTIONS[command_type]
        assert fake_slack.posts == []
        assert await self.settings.get("daily_reminder_enabled") is None

    @pytest.mark.asyncio
    async def test_motivate_now_posts_to_channel(self, db, fake_slack):
        """Test the admin can trigger the motivational post."""
        handlers = self.make_handlers(db, fake_slack)
        await self.add_ideas(("U1", "Alice", "🤖 AI & Automatisering"))

        await handlers.handle(slash("/motivate-now", user_id=ADMIN_ID))

        assert len(fake_slack.posts) == 1
        post = fake_slack.posts[0]
        assert post["channel"] == IDEA_CHANNEL
        assert "1" in post["text"]
        assert "🤖 AI & Automatisering (1 idéer)" in post["text"]
        assert "<!channel>" in post["text"]

        [response] = self.responses(fake_slack)
        assert response.text.startswith("✅")

    @pytest.mark.asyncio
    async def test_motivate_now_without_ideas(self, db, fake_slack):
        """Test nothing is posted when there are no ideas."""
        handlers = self.make_handlers(db, fake_slack)

        await handlers.handle(slash("/motivate-now", user_id=ADMIN_ID))

        assert fake_slack.posts == []
        [response] = self.responses(fake_slack)
        assert response.text.startswith("⚠️")

    @pytest.mark.asyncio
    async def test_motivate_now_without_channel(self, db, fake_slack):
        """Test the admin is told when no channel is configured."""
        config = make_config()
        config.slack.channel_id = None
        handlers = self.make_handlers(db, fake_slack, config=config)

        await handlers.handle(slash("/motivate-now", user_id=ADMIN_ID))

        assert fake_slack.posts == []
        [response] = self.responses(fake_slack)
        assert response.text == "❌ Ingen hackathon-kanal konfigureret!"

    @pytest.mark.asyncio
    async def test_toggle_daily_reminder(self, db, fake_slack):
        """Test toggling flips the persisted flag and notifies the channel."""
        handlers = self.make_handlers(db, fake_slack)

        await handlers.handle(slash("/toggle-daily-reminder", user_id=ADMIN_ID))
        assert await self.settings.get_daily_reminder_enabled() is False
        assert fake_slack.posts[-1]["text"].startswith("🔕")

        await handlers.handle(slash("/toggle-daily-reminder", user_id=ADMIN_ID))
        assert await self.settings.get_daily_reminder_enabled() is True
        assert fake_slack.posts[-1]["text"].startswith("🔔")

        first, second = self.responses(fake_slack)
        assert "DEAKTIVERET" in first.text
        assert "AKTIVERET" in second.text and "DEAKTIVERET" not in second.text
        assert first.blocks

    @pytest.mark.asyncio
    async def test_toggle_survives_notification_failure(self, db, fake_slack):
        """Test a failed channel notice does not undo the toggle."""
        fake_slack.fail_posts = True
        handlers = self.make_handlers(db, fake_slack)

        await handlers.handle(slash("/toggle-daily-reminder", user_id=ADMIN_ID))

        assert await self.settings.get_daily_reminder_enabled() is False
        [response] = self.responses(fake_slack)
        assert "DEAKTIVERET" in response.text

    @pytest.mark.asyncio
    async def test_reminder_status(self, db, fake_slack):
        """Test anyone can read the reminder status; admins get a hint."""
        handlers = self.make_handlers(db, fake_slack)
        await self.settings.set_daily_reminder_enabled(False)

        await handlers.handle(slash("/reminder-status", user_id="U2"))
        await handlers.handle(slash("/reminder-status", user_id=ADMIN_ID))

        user_view, admin_view = self.responses(fake_slack)
        assert "DEAKTIVERET" in user_view.text
        assert "/toggle-daily-reminder" not in user_view.text
        assert "/toggle-daily-reminder" in admin_view.text

    @pytest.mark.asyncio
    async def test_show_ideas_empty(self, db, fake_slack):
        """Test the overview replaces the progress note when there are no ideas."""
        handlers = self.make_handlers(db, fake_slack)

        await handlers.handle(slash("/show-ideas", user_id=ADMIN_ID))

        interim, final = self.responses(fake_slack)
        assert interim.text.startswith("🎨")
        assert final.replace_original is True
        assert final.text == "⚠️ Ingen idéer at vise endnu!"

    @pytest.mark.asyncio
    async def test_show_ideas_overview(self, db, fake_slack):
        """Test the overview summarizes every stored idea."""
        handlers = self.make_handlers(db, fake_slack)
        await self.add_ideas(
            ("U1", "Alice", "🤖 AI & Automatisering"),
            ("U2", "Bob", "🤖 AI & Automatisering"),
            ("U2", "Bob", "📊 Data & Visualisering"),
        )

        await handlers.handle(slash("/show-ideas", user_id=ADMIN_ID))

        _, final = self.responses(fake_slack)
        assert final.replace_original is True
        payload = final.to_payload()
        assert payload["replace_original"] is True
        fields = [f["text"] for b in payload["blocks"] for f in b.get("fields", [])]
        assert "*📊 Total Idéer:*\n3" in fields
        assert "*👥 Aktive Brugere:*\n2" in fields
        texts = [b["text"]["text"] for b in payload["blocks"] if "text" in b]
        assert any("🤖 AI & Automatisering: 2 idéer (67%)" in t for t in texts)

    @pytest.mark.asyncio
    async def test_show_ideas_keeps_same_named_users_apart(self, db, fake_slack):
        """Test two users sharing a display name are listed separately."""
        handlers = self.make_handlers(db, fake_slack)
        await self.add_ideas(
            ("U1", "Anonymous", "🤖 AI & Automatisering"),
            ("U1", "Anonymous", "🤖 AI & Automatisering"),
            ("U2", "Anonymous", "📊 Data & Visualisering"),
        )

        await handlers.handle(slash("/show-ideas", user_id=ADMIN_ID))

        _, final = self.responses(fake_slack)
        texts = [b["text"]["text"] for b in final.to_payload()["blocks"] if "text" in b]
        [top_users] = [t for t in texts if t.startswith("*🏆 Top Idé-Generatorer:*")]
        assert "1. *Anonymous*: 2 idéer" in top_users
        assert "2. *Anonymous*: 1 idéer" in top_users


class TestFormatStatsMessage:
    def test_ready_status_above_threshold(self):
        message = format_stats_message(AggregateStats(total=11))
        assert "Vi er klar til at rocke hackathon!" in message

"""Slash command handlers."""

import logging
import random
from collections import Counter
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from .blocks import Block, ContextBlock, DividerBlock, HeaderBlock, SectionBlock, SlackResponse
from .categorizer import CATEGORY_NAMES
from .command_router import CommandRouter, CommandType
from .config import Config
from .content import LEADERBOARD_TIPS
from .daily_job import compose_motivational_message
from .formatting import format_datetime, format_time, local_date, time_ago
from .request_ids import new_request_id
from .services import (
    AggregateStats,
    LeaderboardEntry,
    RateLimiter,
    SettingsService,
    StatsService,
    SubmissionService,
    SubmissionSummary,
)
from .slack_client import SlackClient, SlashCommand

logger = logging.getLogger(__name__)

Respond = Callable[[SlackResponse], Awaitable[None]]

READY_THRESHOLD = 10
RECENT_IDEAS_LIMIT = 10
IDEA_PREVIEW_LENGTH = 100

ADMIN_REJECTIONS = {
    CommandType.MOTIVATE_NOW: "❌ Kun admin kan sende manuel motivationsbesked!",
    CommandType.TOGGLE_DAILY_REMINDER: "❌ Kun admin kan ændre daglige påmindelser!",
    CommandType.SHOW_IDEAS: "❌ Kun admin kan vise alle idéer!",
}

ERROR_MESSAGES = {
    CommandType.STATS: "❌ Ups! Noget gik galt ved hentning af statistikker. Prøv igen om lidt! 🤖",
    CommandType.HELP: "❌ Hjælpeteksten kunne ikke vises: {error}",
    CommandType.LEADERBOARD: "❌ Leaderboard kunne ikke indlæses: {error}",
    CommandType.MOTIVATE_NOW: "❌ *Fejl ved afsendelse:*\n\n```{error}```",
    CommandType.TOGGLE_DAILY_REMINDER: (
        "❌ *Fejl ved ændring af påmindelser:*\n\n```{error}```\n\n"
        "Prøv igen eller kontakt tech support."
    ),
    CommandType.REMINDER_STATUS: "❌ Kunne ikke hente påmindelse status: {error}",
    CommandType.SHOW_IDEAS: "❌ *Visuelt overblik fejlede:*\n\n```{error}```",
}

UNKNOWN_COMMAND = "🤔 Den kommando kender jeg ikke. Prøv `/hackathon-help`."


def _trophy(index: int) -> str:
    return {0: "🏆", 1: "🥈", 2: "🥉"}.get(index, "🏅")


def format_stats_message(stats: AggregateStats) -> str:
    """Plain-text statistics summary for ``/hackathon-stats``."""
    if stats.categories:
        category_text = "\n".join(f"{c.category}: {c.count}" for c in stats.categories)
    else:
        category_text = "Ingen kategorier endnu"

    if stats.top_authors:
        top_users_text = "\n".join(
            f"{i}. {a.author_name}: {a.count} idéer" for i, a in enumerate(stats.top_authors, 1)
        )
    else:
        top_users_text = "Ingen brugere endnu"

    if stats.total > READY_THRESHOLD:
        status = "Vi er klar til at rocke hackathon! 🚀"
    else:
        status = "Vi har brug for flere idéer! Kom nu, folk! <!channel>"

    return (
        "🎯 *Hackathon Idé-Status*\n\n"
        f"📈 *Total idéer:* {stats.total}\n\n"
        f"📊 *Kategorier:*\n{category_text}\n\n"
        f"🏆 *Top Idé-Generatorer:*\n{top_users_text}\n\n"
        f"💪 *Status:* {status}\n\n"
        "_Fortsæt med at dele idéer i #hackathon-ideas!_"
    )


def format_help_message(config: Config) -> str:
    trigger = config.bot.trigger_word.capitalize()
    chance = round(config.bot.dad_joke_chance * 100)
    categories = " • ".join(CATEGORY_NAMES)
    return (
        "🤖 *Forteil Hackathon Bot - Hjælp*\n\n"
        "*📝 Sådan Poster Du en Idé:*\n"
        f'Start din besked med "{trigger}:" efterfulgt af din idé:\n'
        f"`{trigger}: AI chatbot til HR-spørgsmål`\n\n"
        "*🎯 Bot Reaktioner:*\n"
        "- 2 emoji reactions (random + kategori)\n"
        "- Vittigt svar i thread\n"
        f"- {chance}% chance for bonus dad joke\n"
        "- Automatisk kategorisering og database lagring\n\n"
        "*📊 Available Commands:*\n"
        "- `/hackathon-stats` - Se alle statistikker\n"
        "- `/hackathon-help` - Denne hjælp besked\n"
        "- `/leaderboard` - Live rangliste (alle kan se)\n"
        "- `/motivate-now` - Admin: Send motivation nu\n"
        "- `/show-ideas` - Admin: Visuelt overblik\n\n"
        "*🔔 Reminder Commands:*\n"
        "- `/toggle-daily-reminder` - Admin: Skru daglige påmindelser til/fra\n"
        "- `/reminder-status` - Se status for daglige påmindelser\n\n"
        f"*🏷️ Kategorier:*\n{categories}\n\n"
        "*💡 Tips:*\n"
        "- Vær specifik i dine idé-beskrivelser\n"
        "- Byg videre på andres idéer\n"
        "- Brug /hackathon-stats for at se fremgang\n"
        "- Check /leaderboard for at se din ranking\n\n"
        f'*🚀 Ready to innovate? Start med "{trigger}:" og lad kreativiteten flyde!*'
    )


def build_leaderboard_blocks(
    entries: list[LeaderboardEntry], tip: str, now: datetime, tz: str
) -> list[Block]:
    blocks: list[Block] = [
        HeaderBlock("🏆 Hackathon Leaderboard"),
        SectionBlock("_Live ranking af idé-generatorer! 🚀_"),
        DividerBlock(),
    ]
    for index, entry in enumerate(entries):
        blocks.append(
            SectionBlock(
                f"{_trophy(index)} *{index + 1}. {entry.author_name}*\n"
                f"📊 {entry.submission_count} idéer • 🏷️ {', '.join(entry.categories)}\n"
                f"⏰ Seneste: {time_ago(entry.last_submission_at, now, tz)} • "
                f"💬 Ø {entry.avg_followups:.1f} reaktioner"
            )
        )
    blocks.extend(
        [
            DividerBlock(),
            SectionBlock(tip),
            ContextBlock(
                [f"🔄 Opdateret: {format_time(now, tz)} | Brug `/leaderboard` for at opdatere"]
            ),
        ]
    )
    return blocks


def build_ideas_overview(ideas: list[SubmissionSummary], now: datetime, tz: str) -> list[Block]:
    """Admin overview of every stored idea. ``ideas`` must be non-empty, newest first."""
    total = len(ideas)
    unique_users = len({idea.author_id for idea in ideas})
    total_followups = sum(idea.followup_count for idea in ideas)

    category_counts = Counter(idea.category for idea in ideas).most_common()
    user_counts = Counter(idea.author_id for idea in ideas).most_common(5)
    # ideas are newest first, so each id maps to its latest display name
    names: dict[str, str] = {}
    for idea in ideas:
        names.setdefault(idea.author_id, idea.author_name)
    daily_counts = Counter(local_date(idea.created_at, tz) for idea in ideas)

    category_lines = "\n".join(
        f"{category}: {count} idéer ({round(count / total * 100)}%)"
        for category, count in category_counts
    )
    user_lines = "\n".join(
        f"{i}. *{names[author_id]}*: {count} idéer"
        for i, (author_id, count) in enumerate(user_counts, 1)
    )
    daily_lines = "\n".join(
        f"{day.day}.{day.month}.{day.year}: {count} idéer"
        for day, count in sorted(daily_counts.items())
    )

    blocks: list[Block] = [
        HeaderBlock("🚀 Forteil Hackathon - Idé Overblik"),
        SectionBlock(
            fields=[
                f"*📊 Total Idéer:*\n{total}",
                f"*👥 Aktive Brugere:*\n{unique_users}",
                f"*💬 Total Reaktioner:*\n{total_followups}",
                f"*📈 Gennemsnit per Bruger:*\n{total / unique_users:.1f}",
            ]
        ),
        DividerBlock(),
        SectionBlock(f"*🏷️ Kategori Fordeling:*\n{category_lines}"),
        DividerBlock(),
        SectionBlock(f"*🏆 Top Idé-Generatorer:*\n{user_lines}"),
        DividerBlock(),
        SectionBlock(f"*📅 Daglig Aktivitet:*\n{daily_lines}"),
        DividerBlock(),
        SectionBlock(f"*💡 Seneste {min(RECENT_IDEAS_LIMIT, total)} Idéer:*"),
    ]

    for index, idea in enumerate(ideas[:RECENT_IDEAS_LIMIT], 1):
        preview = idea.text[:IDEA_PREVIEW_LENGTH]
        if len(idea.text) > IDEA_PREVIEW_LENGTH:
            preview += "..."
        blocks.append(
            SectionBlock(
                f"*{index}.* {preview}\n"
                f"_{idea.category} • {idea.author_name} • "
                f"{time_ago(idea.created_at, now, tz)} • {idea.followup_count} reaktioner_"
            )
        )

    blocks.extend(
        [
            DividerBlock(),
            ContextBlock([f"📊 Genereret: {format_datetime(now, tz)} | 🤖 Forteil Hackathon Bot"]),
        ]
    )
    return blocks


class CommandHandlers:
    """Runs slash commands and sends their responses."""

    def __init__(
        self,
        config: Config,
        slack: SlackClient,
        stats: StatsService,
        submissions: SubmissionService,
        settings: SettingsService,
        rate_limiter: RateLimiter,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.config = config
        self.slack = slack
        self.stats = stats
        self.submissions = submissions
        self.settings = settings
        self.rate_limiter = rate_limiter
        self.router = CommandRouter()
        self.rng = rng or random.Random()
        self.clock = clock

        self._handlers = {
            CommandType.STATS: self._stats,
            CommandType.HELP: self._help,
            CommandType.LEADERBOARD: self._leaderboard,
            CommandType.MOTIVATE_NOW: self._motivate_now,
            CommandType.TOGGLE_DAILY_REMINDER: self._toggle_daily_reminder,
            CommandType.REMINDER_STATUS: self._reminder_status,
            CommandType.SHOW_IDEAS: self._show_ideas,
        }

    @property
    def tz(self) -> str:
        return self.config.schedule.timezone

    def is_admin(self, user_id: str) -> bool:
        return user_id == self.config.slack.admin_user_id

    def _next_reminder_time(self) -> str:
        return f"{self.config.schedule.daily_hour:02d}:{self.config.schedule.daily_minute:02d}"

    def _responder(self, response_url: str) -> Respond:
        async def respond(response: SlackResponse) -> None:
            await self.slack.respond(response_url, response)

        return respond

    async def handle(self, command: SlashCommand, respond: Optional[Respond] = None) -> None:
        """Run ``command``; responses default to the command's response_url."""
        respond = respond or self._responder(command.response_url)
        request_id = new_request_id()
        command_type = self.router.parse_command(command.command)
        if command_type is None:
            logger.warning("[%s] Unknown command %s", request_id, command.command)
            await respond(SlackResponse.ephemeral(UNKNOWN_COMMAND))
            return

        if self.router.requires_admin(command_type) and not self.is_admin(command.user_id):
            logger.info(
                "[%s] Rejected /%s from non-admin %s",
                request_id,
                command_type.value,
                command.user_id,
            )
            await respond(SlackResponse.ephemeral(ADMIN_REJECTIONS[command_type]))
            return

        logger.info("[%s] /%s requested by %s", request_id, command_type.value, command.user_id)
        try:
            await self._handlers[command_type](command, respond, request_id)
        except Exception as e:
            logger.error(
                "[%s] /%s failed: %s", request_id, command_type.value, e, exc_info=True
            )
            try:
                await respond(
                    SlackResponse.ephemeral(
                        ERROR_MESSAGES[command_type].format(error=e),
                        replace_original=command_type == CommandType.SHOW_IDEAS,
                    )
                )
            except Exception as respond_error:
                logger.error(
                    "[%s] Failed to send error reply for /%s: %s",
                    request_id,
                    command_type.value,
                    respond_error,
                )

    async def _stats(self, command: SlashCommand, respond: Respond, request_id: str) -> None:
        if not self.rate_limiter.check_and_record(command.user_id):
            await respond(
                SlackResponse.ephemeral("⏳ Hold lige! Du spørger lidt for hurtigt. Prøv igen om lidt.")
            )
            return

        stats = await self.stats.get_aggregate_stats()
        await respond(SlackResponse.in_channel(format_stats_message(stats)))
        logger.info("[%s] Stats command completed (%d ideas)", request_id, stats.total)

    async def _help(self, command: SlashCommand, respond: Respond, request_id: str) -> None:
        await respond(SlackResponse.ephemeral(format_help_message(self.config)))

    async def _leaderboard(self, command: SlashCommand, respond: Respond, request_id: str) -> None:
        entries = await self.stats.get_leaderboard()
        if not entries:
            trigger = self.config.bot.trigger_word.capitalize()
            await respond(
                SlackResponse.ephemeral(
                    "📊 Ingen data til leaderboard endnu!\n\n"
                    f"Start med at poste en idé: `{trigger}: Min fantastiske idé`"
                )
            )
            return

        blocks = build_leaderboard_blocks(
            entries, self.rng.choice(LEADERBOARD_TIPS), self.clock(), self.tz
        )
        await respond(SlackResponse.in_channel("🏆 Hackathon Leaderboard", blocks=blocks))
        logger.info(
            "[%s] Leaderboard displayed (%d users, top: %s)",
            request_id,
            len(entries),
            entries[0].author_name,
        )

    async def _motivate_now(self, command: SlashCommand, respond: Respond, request_id: str) -> None:
        if not self.rate_limiter.check_and_record(f"admin_{command.user_id}"):
            await respond(SlackResponse.ephemeral("⏳ Vent lidt med at sende flere motivationsbeskeder."))
            return

        channel_id = self.config.slack.channel_id
        if not channel_id:
            await respond(SlackResponse.ephemeral("❌ Ingen hackathon-kanal konfigureret!"))
            return

        stats = await self.stats.get_aggregate_stats()
        if stats.total == 0:
            trigger = self.config.bot.trigger_word.capitalize()
            await respond(
                SlackResponse.ephemeral(
                    f'⚠️ Ingen idéer i database endnu - post nogle "{trigger}:" beskeder først!'
                )
            )
            return

        await self.slack.post_message(channel_id, compose_motivational_message(stats, self.rng))
        await respond(
            SlackResponse.ephemeral(
                "✅ *Manuel motivationsbesked sendt!*\n\n"
                f"📊 Stats: {stats.total} idéer\n"
                f"🕐 Tid: {format_time(self.clock(), self.tz)}\n"
                f"🎯 Besked sendt til <#{channel_id}>"
            )
        )
        logger.info("[%s] Manual motivation sent (%d ideas)", request_id, stats.total)

    async def _toggle_daily_reminder(
        self, command: SlashCommand, respond: Respond, request_id: str
    ) -> None:
        current = await self.settings.get_daily_reminder_enabled()
        enabled = not current
        await self.settings.set_daily_reminder_enabled(enabled)

        status_emoji = "✅" if enabled else "❌"
        status_text = "AKTIVERET" if enabled else "DEAKTIVERET"
        if enabled:
            next_action = f"Næste påmindelse sendes i morgen kl. {self._next_reminder_time()}"
        else:
            next_action = "Ingen automatiske påmindelser sendes"

        channel_id = self.config.slack.channel_id
        channel_text = f"<#{channel_id}>" if channel_id else "Ikke konfigureret"
        blocks: list[Block] = [
            HeaderBlock("🔔 Daglige Påmindelser"),
            SectionBlock(
                f"{status_emoji} *Status: {status_text}*\n\n📅 {next_action}\n\n"
                "_Brug `/toggle-daily-reminder` for at skifte igen_"
            ),
            DividerBlock(),
            SectionBlock(
                "*⚙️ Admin Info:*\n"
                f"• Ændret af: <@{command.user_id}>\n"
                f"• Tidspunkt: {format_datetime(self.clock(), self.tz)}\n"
                f"• Kanal: {channel_text}"
            ),
        ]
        await respond(
            SlackResponse.ephemeral(f"Daglige påmindelser: {status_text}", blocks=blocks)
        )
        logger.info(
            "[%s] Daily reminder toggled %s -> %s by %s",
            request_id,
            current,
            enabled,
            command.user_id,
        )

        if channel_id:
            if enabled:
                notice = (
                    "🔔 Daglige påmindelser er nu aktiveret! "
                    f"I får besked hver dag kl. {self._next_reminder_time()} 🌅"
                )
            else:
                notice = (
                    "🔕 Daglige påmindelser er nu deaktiveret. "
                    "Brug `/motivate-now` for manuel motivation 💪"
                )
            try:
                await self.slack.post_message(channel_id, notice)
            except Exception as e:
                logger.warning("[%s] Could not send channel notification: %s", request_id, e)

    async def _reminder_status(self, command: SlashCommand, respond: Respond, request_id: str) -> None:
        enabled = await self.settings.get_daily_reminder_enabled()
        status_emoji = "✅" if enabled else "❌"
        status_text = "AKTIVERET" if enabled else "DEAKTIVERET"
        if enabled:
            next_action = f"Næste påmindelse: I morgen kl. {self._next_reminder_time()}"
        else:
            next_action = "Ingen automatiske påmindelser planlagt"

        admin_info = ""
        if self.is_admin(command.user_id):
            admin_info = (
                "\n\n🔧 _Som admin kan du bruge `/toggle-daily-reminder` for at ændre status_"
            )

        await respond(
            SlackResponse.ephemeral(
                f"🔔 *Daglige Påmindelser*\n\n{status_emoji} Status: *{status_text}*\n"
                f"📅 {next_action}{admin_info}"
            )
        )

    async def _show_ideas(self, command: SlashCommand, respond: Respond, request_id: str) -> None:
        await respond(SlackResponse.ephemeral("🎨 Genererer visuelt overblik... ⏳"))

        ideas = await self.submissions.list_submissions()
        if not ideas:
            await respond(
                SlackResponse.ephemeral("⚠️ Ingen idéer at vise endnu!", replace_original=True)
            )
            return

        blocks = build_ideas_overview(ideas, self.clock(), self.tz)
        await respond(
            SlackResponse.ephemeral(
                f"Idé overblik: {len(ideas)} idéer", blocks=blocks, replace_original=True
            )
        )
        logger.info("[%s] Visual ideas export completed (%d ideas)", request_id, len(ideas))

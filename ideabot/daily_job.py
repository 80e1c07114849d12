"""Daily motivational reminder and scheduler wiring."""

import logging
import random
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .config import Config
from .content import MOTIVATIONAL_MESSAGES
from .request_ids import new_request_id
from .services import AggregateStats, RateLimiter, SettingsService, StatsService
from .slack_client import SlackClient

logger = logging.getLogger(__name__)


def compose_motivational_message(stats: AggregateStats, rng: random.Random) -> str:
    """Random template on the total, plus the most popular category if any."""
    message = rng.choice(MOTIVATIONAL_MESSAGES)(stats.total)

    top = stats.top_category
    category_text = (
        f"\n🏆 Mest populære kategori: {top.category} ({top.count} idéer)" if top else ""
    )

    return (
        f"{message}{category_text}\n\n"
        "💡 Brug /hackathon-stats for fuld oversigt!\n\n"
        "<!channel> Få delt flere idéer! 🚀"
    )


class DailyReminderJob:
    """Posts the daily idea count to the hackathon channel."""

    def __init__(
        self,
        config: Config,
        slack: SlackClient,
        stats: StatsService,
        settings: SettingsService,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.slack = slack
        self.stats = stats
        self.settings = settings
        self.rng = rng or random.Random()

    async def run(self) -> bool:
        """Run the job once. Returns True if a message was posted."""
        request_id = new_request_id()
        logger.info("[%s] Daily reminder job triggered", request_id)

        try:
            if not await self.settings.get_daily_reminder_enabled():
                logger.info("[%s] Daily reminders disabled, skipping", request_id)
                return False

            channel_id = self.config.slack.channel_id
            if not channel_id:
                logger.warning("[%s] No channel configured, skipping daily post", request_id)
                return False

            stats = await self.stats.get_aggregate_stats()
            if stats.total == 0:
                logger.info("[%s] No ideas available, skipping daily post", request_id)
                return False

            await self.slack.post_message(channel_id, compose_motivational_message(stats, self.rng))
            logger.info(
                "[%s] Daily motivational message sent (%d ideas)", request_id, stats.total
            )
            return True

        except Exception as e:
            logger.error("[%s] Daily reminder job failed: %s", request_id, e, exc_info=True)
            await self._alert_admin(e, request_id)
            return False

    async def _alert_admin(self, error: Exception, request_id: str) -> None:
        try:
            await self.slack.post_message(
                self.config.slack.admin_user_id,
                "🚨 *Daily Motivation Job Failed*\n\n"
                f"Time: {datetime.now(timezone.utc).isoformat()}\n"
                f"Error: {error}\n\n"
                f"Request ID: {request_id}",
            )
        except Exception as alert_error:
            logger.error("[%s] Failed to send admin alert: %s", request_id, alert_error)


def build_scheduler(
    config: Config, job: DailyReminderJob, rate_limiter: RateLimiter
) -> AsyncIOScheduler:
    """Scheduler with the daily reminder and the rate-limit sweep."""
    scheduler = AsyncIOScheduler(timezone=config.schedule.timezone)

    scheduler.add_job(
        job.run,
        CronTrigger(
            hour=config.schedule.daily_hour,
            minute=config.schedule.daily_minute,
            timezone=config.schedule.timezone,
        ),
        id="daily_reminder",
        coalesce=True,
        misfire_grace_time=600,
    )

    # Coroutine job so the sweep runs on the event loop, not a worker thread
    async def sweep_rate_limits() -> None:
        rate_limiter.sweep()

    scheduler.add_job(
        sweep_rate_limits,
        IntervalTrigger(seconds=config.bot.rate_limit_sweep_interval),
        id="rate_limit_sweep",
        coalesce=True,
    )
    return scheduler

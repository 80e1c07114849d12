"""Main entry point for the hackathon idea bot."""

import argparse
import asyncio
import logging
import random
import sys

import uvicorn

from .bot import IdeaBot
from .commands import CommandHandlers
from .config import Config, load_config
from .daily_job import DailyReminderJob, build_scheduler
from .deferred import DeferredTasks
from .services import (
    DatabaseService,
    RateLimiter,
    SettingsService,
    StatsService,
    SubmissionService,
)
from .slack_client import SlackClient
from .webhook_server import create_webhook_app

VERSION = "2.1.0"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduce noise from libraries
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("slack_sdk").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def create_database(config: Config) -> DatabaseService:
    return DatabaseService(
        config.bot.database_url,
        timeout=config.bot.db_timeout,
        max_retries=config.bot.max_retries,
        retry_delay=config.bot.retry_base_delay,
    )


async def serve(args, logger, config: Config, db: DatabaseService) -> int:
    """Wire up services and run the webhook server with the scheduler."""
    rng = random.Random()
    slack = SlackClient(config.slack, max_retries=config.bot.max_retries)
    rate_limiter = RateLimiter(config.bot.rate_limit_window, config.bot.rate_limit_max)
    deferred = DeferredTasks()

    submissions = SubmissionService(db)
    stats = StatsService(db)
    settings = SettingsService(db)

    job = DailyReminderJob(config, slack, stats, settings, rng=rng)
    if args.run_daily_job:
        posted = await job.run()
        logger.info("Daily job finished (posted=%s)", posted)
        return 0

    try:
        await slack.auth_test()
    except Exception as e:
        logger.warning("Could not look up bot user id: %s", e)

    try:
        enabled = await settings.get_daily_reminder_enabled()
        logger.info("Daily reminder status loaded: enabled=%s", enabled)
    except Exception as e:
        logger.warning("Could not load daily reminder status: %s", e)

    bot = IdeaBot(config, slack, submissions, rate_limiter, deferred, rng=rng)
    commands = CommandHandlers(config, slack, stats, submissions, settings, rate_limiter, rng=rng)
    app = create_webhook_app(config, bot, commands)

    scheduler = build_scheduler(config, job, rate_limiter)
    scheduler.start()

    logger.info(
        "Hackathon idea bot v%s started on %s:%d (admin=%s, dad joke chance=%.2f)",
        VERSION,
        args.host,
        args.port,
        config.slack.admin_user_id,
        config.bot.dad_joke_chance,
    )

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=args.host,
            port=args.port,
            log_level="info" if args.verbose else "warning",
        )
    )
    try:
        await server.serve()
    finally:
        scheduler.shutdown(wait=False)
        await deferred.shutdown()
    return 0


async def async_main(args, logger) -> int:
    """Async main function."""
    try:
        logger.info("Loading configuration from %s", args.config)
        config = load_config(args.config)
    except Exception as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    db = create_database(config)
    try:
        await db.initialize()
        logger.info("Database initialized successfully")

        if args.init_db:
            return 0

        return await serve(args, logger, config, db)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1
    finally:
        await db.close()
        logger.info("Database connection closed")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Slack bot collecting and categorizing hackathon ideas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              # Run with default config.yaml
  %(prog)s -c myconfig.yaml             # Run with custom config
  %(prog)s -v                           # Run with verbose logging
  %(prog)s --port 8080                  # Listen on a different port
  %(prog)s --init-db                    # Create tables and exit
  %(prog)s --run-daily-job              # Post the daily reminder once and exit
        """,
    )

    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose/debug logging",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Interface to bind (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for the Slack webhook server (default: 3000)",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create database tables and exit",
    )
    parser.add_argument(
        "--run-daily-job",
        action="store_true",
        help="Run the daily reminder job once and exit",
    )

    args = parser.parse_args()

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    return asyncio.run(async_main(args, logger))


if __name__ == "__main__":
    sys.exit(main())

"""Idea message handling: filter, categorize, store, react and reply."""

import asyncio
import logging
import random
from typing import Optional

from .categorizer import Category, categorize
from .config import Config
from .content import DAD_JOKE_PREFIX, DAD_JOKES, FUNNY_RESPONSES, REACTIONS
from .deferred import DeferredTasks
from .orm.followup import FollowupKind
from .request_ids import new_request_id
from .services import RateLimiter, SubmissionService
from .slack_client import ANONYMOUS, MessageEvent, SlackClient

logger = logging.getLogger(__name__)


class IdeaBot:
    """Handles idea messages posted in the hackathon channel."""

    def __init__(
        self,
        config: Config,
        slack: SlackClient,
        submissions: SubmissionService,
        rate_limiter: RateLimiter,
        deferred: DeferredTasks,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.slack = slack
        self.submissions = submissions
        self.rate_limiter = rate_limiter
        self.deferred = deferred
        self.rng = rng or random.Random()

    def _is_idea(self, event: MessageEvent, request_id: str) -> bool:
        if event.is_from_bot or (
            self.slack.bot_user_id and event.user == self.slack.bot_user_id
        ):
            return False

        channel_id = self.config.slack.channel_id
        if channel_id and event.channel != channel_id:
            return False

        trigger = self.config.bot.trigger_word.lower()
        if not event.text or not event.user or not event.text.lower().startswith(trigger):
            return False

        if not self.rate_limiter.check_and_record(event.user):
            logger.warning("[%s] User %s rate limited", request_id, event.user)
            return False

        return True

    async def handle_message(self, event: MessageEvent) -> Optional[int]:
        """Process one message event.

        Returns:
            The new submission id, or None if the message was ignored or could
            not be stored.
        """
        request_id = new_request_id()
        if not self._is_idea(event, request_id):
            return None

        logger.info(
            "[%s] Processing idea message from %s (%d chars)",
            request_id,
            event.user,
            len(event.text),
        )

        username = await self._resolve_username(event.user, request_id)
        category = categorize(event.text)

        try:
            submission_id = await self.submissions.create_submission(
                author_id=event.user,
                author_name=username,
                text=event.text,
                category=category.name,
                source_message_id=event.ts,
                source_channel_id=event.channel,
            )
        except Exception as e:
            logger.error(
                "[%s] Message processing failed for %s: %s",
                request_id,
                event.user,
                e,
                exc_info=True,
            )
            return None

        await self._add_reactions(event, category, submission_id, request_id)

        delay = self.rng.uniform(self.config.bot.reply_delay_min, self.config.bot.reply_delay_max)
        self.deferred.schedule(
            delay,
            lambda: self._send_reply(event, submission_id, request_id),
            name=f"reply-{submission_id}",
        )
        return submission_id

    async def _resolve_username(self, user_id: str, request_id: str) -> str:
        try:
            return await self.slack.lookup_display_name(user_id)
        except Exception as e:
            logger.warning(
                "[%s] Could not fetch user info, using fallback: %s", request_id, e
            )
            return ANONYMOUS

    async def _add_reactions(
        self, event: MessageEvent, category: Category, submission_id: int, request_id: str
    ) -> None:
        random_reaction = self.rng.choice(REACTIONS)
        try:
            await asyncio.gather(
                self.slack.add_reaction(event.channel, event.ts, random_reaction),
                self.slack.add_reaction(event.channel, event.ts, category.emoji),
            )
            logger.info("[%s] Reactions added for idea %d", request_id, submission_id)
        except Exception as e:
            logger.error("[%s] Adding reactions failed: %s", request_id, e)

    async def _send_reply(self, event: MessageEvent, submission_id: int, request_id: str) -> None:
        response = self.rng.choice(FUNNY_RESPONSES)
        try:
            await self.slack.post_message(event.channel, response, thread_ts=event.ts)
        except Exception as e:
            logger.error("[%s] Response sending failed: %s", request_id, e)
            return

        try:
            await self.submissions.record_followup(submission_id, FollowupKind.RESPONSE, response)
        except Exception as e:
            logger.error("[%s] Saving response follow-up failed: %s", request_id, e)

        if self.rng.random() < self.config.bot.dad_joke_chance:
            self.deferred.schedule(
                self.config.bot.dad_joke_delay,
                lambda: self._send_dad_joke(event, submission_id, request_id),
                name=f"dad-joke-{submission_id}",
            )

        logger.info("[%s] Message processing completed for idea %d", request_id, submission_id)

    async def _send_dad_joke(self, event: MessageEvent, submission_id: int, request_id: str) -> None:
        joke = self.rng.choice(DAD_JOKES)
        try:
            await self.slack.post_message(event.channel, DAD_JOKE_PREFIX + joke, thread_ts=event.ts)
            await self.submissions.record_followup(submission_id, FollowupKind.DAD_JOKE, joke)
            logger.info("[%s] Dad joke sent for idea %d", request_id, submission_id)
        except Exception as e:
            logger.error("[%s] Dad joke failed: %s", request_id, e)

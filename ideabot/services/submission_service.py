"""Service for storing idea submissions and their follow-ups."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..orm.followup import Followup, FollowupKind
from ..orm.submission import Submission
from .database import DatabaseService

logger = logging.getLogger(__name__)


@dataclass
class SubmissionSummary:
    """A submission row joined with its follow-up count."""

    id: int
    author_id: str
    author_name: str
    text: str
    category: str
    created_at: datetime
    followup_count: int


class SubmissionService:
    """Append-only writes of submissions and follow-ups."""

    def __init__(self, db: DatabaseService):
        self.db = db

    async def create_submission(
        self,
        author_id: str,
        author_name: str,
        text: str,
        category: str,
        source_message_id: str,
        source_channel_id: str,
    ) -> int:
        """Insert a submission and return its id.

        The (source_message_id, source_channel_id) pair is unique; a redelivered
        message raises ``IntegrityError`` once retries are exhausted.
        """

        async def create(session: AsyncSession) -> int:
            submission = Submission(
                author_id=author_id,
                author_name=author_name,
                text=text,
                category=category,
                source_message_id=source_message_id,
                source_channel_id=source_channel_id,
            )
            session.add(submission)
            await session.flush()
            return submission.id

        submission_id = await self.db.run(create)
        logger.info(
            "Saved idea %d from %s (%s, %d chars)",
            submission_id,
            author_name,
            category,
            len(text),
        )
        return submission_id

    async def record_followup(self, submission_id: int, kind: FollowupKind, text: str) -> None:
        """Record a bot reply posted in the submission's thread."""

        async def record(session: AsyncSession) -> None:
            session.add(Followup(submission_id=submission_id, kind=kind, text=text))

        await self.db.run(record)
        logger.info("Follow-up saved for idea %d (%s)", submission_id, kind.value)

    async def list_submissions(self) -> list[SubmissionSummary]:
        """All submissions with follow-up counts, newest first."""

        async def fetch(session: AsyncSession) -> list[SubmissionSummary]:
            followup_count = func.count(Followup.id)
            result = await session.execute(
                select(Submission, followup_count)
                .outerjoin(Followup, Followup.submission_id == Submission.id)
                .group_by(Submission.id)
                .order_by(Submission.created_at.desc(), Submission.id.desc())
            )
            return [
                SubmissionSummary(
                    id=submission.id,
                    author_id=submission.author_id,
                    author_name=submission.author_name,
                    text=submission.text,
                    category=submission.category,
                    created_at=submission.created_at,
                    followup_count=count,
                )
                for submission, count in result.all()
            ]

        return await self.db.run(fetch)

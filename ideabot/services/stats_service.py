"""Aggregation queries over stored submissions."""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..orm.followup import Followup
from ..orm.submission import Submission
from .database import DatabaseService

logger = logging.getLogger(__name__)

TOP_AUTHORS_LIMIT = 5
LEADERBOARD_LIMIT = 10


@dataclass
class CategoryCount:
    category: str
    count: int


@dataclass
class AuthorCount:
    author_id: str
    author_name: str
    count: int


@dataclass
class AggregateStats:
    """Totals for the stats command and the daily reminder."""

    total: int = 0
    categories: list[CategoryCount] = field(default_factory=list)
    top_authors: list[AuthorCount] = field(default_factory=list)

    @property
    def top_category(self) -> CategoryCount | None:
        return self.categories[0] if self.categories else None


@dataclass
class LeaderboardEntry:
    author_id: str
    author_name: str
    submission_count: int
    categories: list[str]
    last_submission_at: datetime
    avg_followups: float


class StatsService:
    """Read-only aggregation over submissions and follow-ups."""

    def __init__(self, db: DatabaseService):
        self.db = db

    async def get_aggregate_stats(self) -> AggregateStats:
        """Total count, per-category counts and the top authors."""

        async def fetch(session: AsyncSession) -> AggregateStats:
            total = (await session.execute(select(func.count(Submission.id)))).scalar_one()

            category_count = func.count(Submission.id).label("count")
            category_rows = await session.execute(
                select(Submission.category, category_count)
                .group_by(Submission.category)
                .order_by(category_count.desc(), Submission.category)
            )

            author_count = func.count(Submission.id).label("count")
            author_rows = await session.execute(
                select(Submission.author_id, func.max(Submission.author_name), author_count)
                .group_by(Submission.author_id)
                .order_by(author_count.desc(), func.max(Submission.created_at).desc())
                .limit(TOP_AUTHORS_LIMIT)
            )

            return AggregateStats(
                total=total or 0,
                categories=[CategoryCount(category, count) for category, count in category_rows],
                top_authors=[
                    AuthorCount(author_id, author_name, count)
                    for author_id, author_name, count in author_rows
                ],
            )

        stats = await self.db.run(fetch)
        logger.debug("Fetched idea statistics: total=%d", stats.total)
        return stats

    async def get_leaderboard(self, limit: int = LEADERBOARD_LIMIT) -> list[LeaderboardEntry]:
        """Per-author counts, categories, recency and average follow-ups."""

        async def fetch(session: AsyncSession) -> list[LeaderboardEntry]:
            per_submission = (
                select(
                    Submission.id.label("submission_id"),
                    Submission.author_id,
                    Submission.author_name,
                    Submission.created_at,
                    func.count(Followup.id).label("followup_count"),
                )
                .outerjoin(Followup, Followup.submission_id == Submission.id)
                .group_by(Submission.id)
                .subquery()
            )

            submission_count = func.count(per_submission.c.submission_id).label("submission_count")
            last_submission = func.max(per_submission.c.created_at).label("last_submission_at")
            rows = (
                await session.execute(
                    select(
                        per_submission.c.author_id,
                        func.max(per_submission.c.author_name),
                        submission_count,
                        last_submission,
                        func.avg(per_submission.c.followup_count),
                    )
                    .group_by(per_submission.c.author_id)
                    .order_by(submission_count.desc(), last_submission.desc())
                    .limit(limit)
                )
            ).all()

            if not rows:
                return []

            author_ids = [row[0] for row in rows]
            category_rows = await session.execute(
                select(Submission.author_id, Submission.category)
                .where(Submission.author_id.in_(author_ids))
                .distinct()
                .order_by(Submission.author_id, Submission.category)
            )
            categories: dict[str, list[str]] = {}
            for author_id, category in category_rows:
                categories.setdefault(author_id, []).append(category)

            return [
                LeaderboardEntry(
                    author_id=author_id,
                    author_name=author_name,
                    submission_count=count,
                    categories=categories.get(author_id, []),
                    last_submission_at=last_at,
                    avg_followups=float(avg or 0),
                )
                for author_id, author_name, count, last_at, avg in rows
            ]

        return await self.db.run(fetch)

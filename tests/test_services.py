"""Tests for the database-backed services."""

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from ideabot.orm import Followup, FollowupKind, Submission
from ideabot.services import SettingsService, StatsService, SubmissionService

AI = "🤖 AI & Automatisering"
DATA = "📊 Data & Visualisering"
CREATIVE = "💡 Kreative Løsninger"


async def add_idea(service, author_id, author_name, category, ts, text="Ide: noget"):
    return await service.create_submission(
        author_id=author_id,
        author_name=author_name,
        text=text,
        category=category,
        source_message_id=ts,
        source_channel_id="C_IDEAS",
    )


class TestSubmissionService:
    """Test submission and follow-up writes."""

    @pytest.mark.asyncio
    async def test_create_returns_increasing_ids(self, db):
        """Test new submissions get positive, increasing ids."""
        service = SubmissionService(db)
        first = await add_idea(service, "U1", "Alice", AI, "1.0")
        second = await add_idea(service, "U1", "Alice", AI, "2.0")
        assert first > 0
        assert second > first

    @pytest.mark.asyncio
    async def test_duplicate_source_message_is_rejected(self, db):
        """Test the same message/channel pair cannot be stored twice."""
        service = SubmissionService(db)
        await add_idea(service, "U1", "Alice", AI, "1.0")
        with pytest.raises(IntegrityError):
            await add_idea(service, "U1", "Alice", AI, "1.0")

        summaries = await service.list_submissions()
        assert len(summaries) == 1

    @pytest.mark.asyncio
    async def test_same_ts_in_other_channel_is_allowed(self, db):
        """Test uniqueness is scoped to the channel."""
        service = SubmissionService(db)
        await add_idea(service, "U1", "Alice", AI, "1.0")
        await service.create_submission(
            author_id="U1",
            author_name="Alice",
            text="Ide: noget",
            category=AI,
            source_message_id="1.0",
            source_channel_id="C_OTHER",
        )
        assert len(await service.list_submissions()) == 2

    @pytest.mark.asyncio
    async def test_followups_are_counted(self, db):
        """Test list_submissions reports follow-up counts, newest first."""
        service = SubmissionService(db)
        older = await add_idea(service, "U1", "Alice", AI, "1.0")
        newer = await add_idea(service, "U2", "Bob", DATA, "2.0")
        await service.record_followup(older, FollowupKind.RESPONSE, "🚀 Nice")
        await service.record_followup(older, FollowupKind.DAD_JOKE, "joke")

        summaries = await service.list_submissions()
        assert [s.id for s in summaries] == [newer, older]
        assert [s.followup_count for s in summaries] == [0, 2]

    @pytest.mark.asyncio
    async def test_followup_for_unknown_submission_fails(self, db):
        """Test a follow-up must reference an existing submission."""
        service = SubmissionService(db)
        with pytest.raises(IntegrityError):
            await service.record_followup(999, FollowupKind.RESPONSE, "orphan")

    @pytest.mark.asyncio
    async def test_deleting_submission_cascades(self, db):
        """Test removing a submission removes its follow-ups."""
        service = SubmissionService(db)
        submission_id = await add_idea(service, "U1", "Alice", AI, "1.0")
        await service.record_followup(submission_id, FollowupKind.RESPONSE, "hi")

        async with db.session() as session:
            await session.execute(delete(Submission).where(Submission.id == submission_id))

        async with db.session() as session:
            remaining = (await session.execute(select(func.count(Followup.id)))).scalar_one()
        assert remaining == 0

    @pytest.mark.asyncio
    async def test_followup_kind_round_trips(self, db):
        """Test the follow-up kind is stored as its string value."""
        service = SubmissionService(db)
        submission_id = await add_idea(service, "U1", "Alice", AI, "1.0")
        await service.record_followup(submission_id, FollowupKind.DAD_JOKE, "joke")

        async with db.session() as session:
            followup = (await session.execute(select(Followup))).scalar_one()
        assert followup.kind is FollowupKind.DAD_JOKE
        assert followup.text == "joke"


class TestStatsService:
    """Test aggregation queries."""

    @pytest.mark.asyncio
    async def test_empty_database(self, db):
        """Test stats on zero submissions."""
        stats = await StatsService(db).get_aggregate_stats()
        assert stats.total == 0
        assert stats.categories == []
        assert stats.top_authors == []
        assert stats.top_category is None

    @pytest.mark.asyncio
    async def test_aggregate_stats(self, db):
        """Test totals, category ordering and top authors."""
        submissions = SubmissionService(db)
        await add_idea(submissions, "U1", "Alice", AI, "1")
        await add_idea(submissions, "U1", "Alice", AI, "2")
        await add_idea(submissions, "U2", "Bob", AI, "3")
        await add_idea(submissions, "U2", "Bob", DATA, "4")
        await add_idea(submissions, "U2", "Bob", CREATIVE, "5")

        stats = await StatsService(db).get_aggregate_stats()
        assert stats.total == 5
        assert stats.categories[0].category == AI
        assert stats.categories[0].count == 3
        assert sum(c.count for c in stats.categories) == stats.total
        assert [(a.author_name, a.count) for a in stats.top_authors] == [("Bob", 3), ("Alice", 2)]
        assert stats.top_category.category == AI

    @pytest.mark.asyncio
    async def test_top_authors_tie_broken_by_recency(self, db):
        """Test authors with equal counts are ordered by their latest submission."""
        submissions = SubmissionService(db)
        await add_idea(submissions, "U1", "Alice", AI, "1")
        await add_idea(submissions, "U2", "Bob", AI, "2")
        await add_idea(submissions, "U3", "Carol", AI, "3")
        await add_idea(submissions, "U1", "Alice", DATA, "4")
        await add_idea(submissions, "U3", "Carol", DATA, "5")

        stats = await StatsService(db).get_aggregate_stats()

        assert [(a.author_name, a.count) for a in stats.top_authors] == [
            ("Carol", 2),
            ("Alice", 2),
            ("Bob", 1),
        ]

    @pytest.mark.asyncio
    async def test_top_authors_capped_at_five(self, db):
        """Test only five authors are returned."""
        submissions = SubmissionService(db)
        for i in range(7):
            await add_idea(submissions, f"U{i}", f"User {i}", AI, str(i))

        stats = await StatsService(db).get_aggregate_stats()
        assert len(stats.top_authors) == 5

    @pytest.mark.asyncio
    async def test_top_authors_grouped_by_id(self, db):
        """Test two users sharing a display name stay separate."""
        submissions = SubmissionService(db)
        await add_idea(submissions, "U1", "Anonymous", AI, "1")
        await add_idea(submissions, "U2", "Anonymous", AI, "2")

        stats = await StatsService(db).get_aggregate_stats()
        assert sorted(a.author_id for a in stats.top_authors) == ["U1", "U2"]

    @pytest.mark.asyncio
    async def test_leaderboard_empty(self, db):
        """Test the leaderboard of an empty database."""
        assert await StatsService(db).get_leaderboard() == []

    @pytest.mark.asyncio
    async def test_leaderboard(self, db):
        """Test leaderboard ordering, categories and average follow-ups."""
        submissions = SubmissionService(db)
        a1 = await add_idea(submissions, "U1", "Alice", AI, "1")
        a2 = await add_idea(submissions, "U1", "Alice", DATA, "2")
        await add_idea(submissions, "U2", "Bob", AI, "3")
        await add_idea(submissions, "U3", "Carol", CREATIVE, "4")
        await add_idea(submissions, "U3", "Carol", CREATIVE, "5")
        await submissions.record_followup(a1, FollowupKind.RESPONSE, "r")
        await submissions.record_followup(a1, FollowupKind.DAD_JOKE, "j")
        await submissions.record_followup(a2, FollowupKind.RESPONSE, "r")

        entries = await StatsService(db).get_leaderboard()

        # Carol ties with Alice on count but submitted most recently
        assert [e.author_name for e in entries] == ["Carol", "Alice", "Bob"]
        assert [e.submission_count for e in entries] == [2, 2, 1]

        alice = entries[1]
        assert sorted(alice.categories) == sorted([AI, DATA])
        assert alice.avg_followups == pytest.approx(1.5)
        assert entries[0].categories == [CREATIVE]
        assert entries[0].avg_followups == 0.0
        assert alice.last_submission_at is not None

    @pytest.mark.asyncio
    async def test_leaderboard_limit(self, db):
        """Test the leaderboard respects its limit."""
        submissions = SubmissionService(db)
        for i in range(4):
            await add_idea(submissions, f"U{i}", f"User {i}", AI, str(i))

        assert len(await StatsService(db).get_leaderboard(limit=3)) == 3


class TestSettingsService:
    """Test persisted settings."""

    @pytest.mark.asyncio
    async def test_reminder_enabled_by_default(self, db):
        """Test a missing setting reads as enabled."""
        assert await SettingsService(db).get_daily_reminder_enabled() is True

    @pytest.mark.asyncio
    async def test_toggle_round_trip(self, db):
        """Test disabling then enabling is persisted."""
        settings = SettingsService(db)
        await settings.set_daily_reminder_enabled(False)
        assert await settings.get_daily_reminder_enabled() is False

        await settings.set_daily_reminder_enabled(True)
        assert await settings.get_daily_reminder_enabled() is True

    @pytest.mark.asyncio
    async def test_set_updates_in_place(self, db):
        """Test setting a key twice keeps one row."""
        settings = SettingsService(db)
        await settings.set("feature", "a")
        await settings.set("feature", "b")
        assert await settings.get("feature") == "b"
        assert await settings.get("missing") is None

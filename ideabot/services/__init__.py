"""Service layer for business logic and database operations."""

from .database import DatabaseService
from .rate_limit_service import RateLimiter
from .settings_service import SettingsService
from .stats_service import (
    AggregateStats,
    AuthorCount,
    CategoryCount,
    LeaderboardEntry,
    StatsService,
)
from .submission_service import SubmissionService, SubmissionSummary

__all__ = [
    "AggregateStats",
    "AuthorCount",
    "CategoryCount",
    "DatabaseService",
    "LeaderboardEntry",
    "RateLimiter",
    "SettingsService",
    "StatsService",
    "SubmissionService",
    "SubmissionSummary",
]

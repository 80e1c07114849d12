"""ORM models for database persistence."""

from .base import Base, SqlalchemyBase
from .followup import Followup, FollowupKind
from .setting import BotSetting
from .submission import Submission

__all__ = [
    "Base",
    "SqlalchemyBase",
    "BotSetting",
    "Followup",
    "FollowupKind",
    "Submission",
]

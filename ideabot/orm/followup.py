"""Followup model for bot replies posted under a submission."""

import enum

from sqlalchemy import Enum, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import SqlalchemyBase


class FollowupKind(str, enum.Enum):
    """What the bot posted in the idea thread."""

    RESPONSE = "response"
    DAD_JOKE = "dad_joke"


class Followup(SqlalchemyBase):
    """A canned response or joke the bot posted for a submission."""

    __tablename__ = "followups"
    __table_args__ = (Index("idx_followups_submission_id", "submission_id"),)

    submission_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[FollowupKind] = mapped_column(
        Enum(
            FollowupKind,
            name="followup_kind",
            values_callable=lambda kinds: [k.value for k in kinds],
            native_enum=False,
            create_constraint=True,
            length=50,
        ),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)

    submission: Mapped["Submission"] = relationship(back_populates="followups")  # noqa: F821

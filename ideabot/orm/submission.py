"""Submission model for stored ideas."""

from sqlalchemy import Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import SqlalchemyBase


class Submission(SqlalchemyBase):
    """One accepted idea message.

    ``author_name`` is resolved once at creation and never refreshed.
    ``category`` is fixed at creation even if the keyword rules change later.
    """

    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint(
            "source_message_id", "source_channel_id", name="uq_submissions_source_message"
        ),
        Index("idx_submissions_created_at", "created_at"),
        Index("idx_submissions_category", "category"),
        Index("idx_submissions_author_id", "author_id"),
    )

    author_id: Mapped[str] = mapped_column(String(255), nullable=False)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    source_message_id: Mapped[str] = mapped_column(String(255), nullable=False)
    source_channel_id: Mapped[str] = mapped_column(String(255), nullable=False)

    followups: Mapped[list["Followup"]] = relationship(  # noqa: F821
        back_populates="submission",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

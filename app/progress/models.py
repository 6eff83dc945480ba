"""
SQLAlchemy models for progress module.
Defines the per-user flashcard progress table.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.progress.mastery import MasteryStatus, ProgressCounters


class UserFlashcardProgress(Base):
    """
    Progress of one user on one flashcard.
    Created on first interaction, deleted on reset.
    """

    __tablename__ = "user_flashcard_progress"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    flashcard_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("flashcards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[MasteryStatus] = mapped_column(
        SQLEnum(
            MasteryStatus,
            name="mastery_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        default=MasteryStatus.NEW,
        nullable=False,
    )
    correct_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    incorrect_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_studied_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "flashcard_id", name="uq_progress_user_flashcard"),
    )

    def to_counters(self) -> ProgressCounters:
        """Snapshot of the status and counters for the mastery engine."""
        return ProgressCounters(
            status=self.status,
            correct_count=self.correct_count,
            incorrect_count=self.incorrect_count,
        )

    def __repr__(self) -> str:
        return (
            f"<UserFlashcardProgress(user_id={self.user_id}, flashcard_id={self.flashcard_id}, "
            f"status={self.status})>"
        )

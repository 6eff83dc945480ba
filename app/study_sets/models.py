"""
SQLAlchemy models for study sets module.
Defines StudySet and Flashcard tables.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class StudySet(Base):
    """
    Study set model representing a named collection of flashcards.
    Owned by the user who created it.
    """

    __tablename__ = "study_sets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Owner (subject of the auth provider's JWT)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

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

    # Relationships
    flashcards: Mapped[List["Flashcard"]] = relationship(
        "Flashcard",
        back_populates="study_set",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Flashcard.position.asc()",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<StudySet(id={self.id}, title={self.title}, user_id={self.user_id})>"


class Flashcard(Base):
    """
    Flashcard model holding one term/definition pair.
    Learning status is tracked per user in user_flashcard_progress.
    """

    __tablename__ = "flashcards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    term: Mapped[str] = mapped_column(Text, nullable=False)
    definition: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Foreign keys
    study_set_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("study_sets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    study_set: Mapped["StudySet"] = relationship(
        "StudySet",
        back_populates="flashcards",
    )

    # Composite index for ordered card listing
    __table_args__ = (
        Index("ix_flashcards_set_position", "study_set_id", "position"),
    )

    def __repr__(self) -> str:
        return f"<Flashcard(id={self.id}, study_set_id={self.study_set_id}, position={self.position})>"

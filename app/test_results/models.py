"""
SQLAlchemy models for test results module.
Stores completed tests with per-question answer details.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class SavedTestResult(Base):
    """
    A completed test taken by a user on a study set.
    Answers are stored as a JSON snapshot so later card edits do not change history.
    """

    __tablename__ = "test_results"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    study_set_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("study_sets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    score: Mapped[int] = mapped_column(Integer, nullable=False)
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    percentage: Mapped[float] = mapped_column(Float, nullable=False)
    question_types: Mapped[Dict[str, int]] = mapped_column(JSON, default=dict, nullable=False)
    answers: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Composite index for the history query
    __table_args__ = (
        Index("ix_test_results_user_completed", "user_id", "completed_at"),
    )

    def __repr__(self) -> str:
        return f"<SavedTestResult(id={self.id}, study_set_id={self.study_set_id}, score={self.score})>"

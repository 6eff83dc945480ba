"""
Progress repository - Data Access Layer for per-user flashcard progress.
Records are keyed by (user_id, flashcard_id).
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.progress.mastery import MasteryStatus, ProgressCounters
from app.progress.models import UserFlashcardProgress
from app.study_sets.models import Flashcard, StudySet

logger = logging.getLogger(__name__)


class ProgressRepository:
    """Repository for UserFlashcardProgress upserts and resets."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str, flashcard_id: str) -> Optional[UserFlashcardProgress]:
        """Get a user's progress on a flashcard, or None."""
        stmt = (
            select(UserFlashcardProgress)
            .where(UserFlashcardProgress.user_id == user_id)
            .where(UserFlashcardProgress.flashcard_id == flashcard_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_flashcards(
        self,
        user_id: str,
        flashcard_ids: Iterable[str],
    ) -> Dict[str, UserFlashcardProgress]:
        """
        Get a user's progress for several flashcards.

        Returns:
            Dict mapping flashcard_id to its progress record
        """
        ids = list(flashcard_ids)
        if not ids:
            return {}

        stmt = (
            select(UserFlashcardProgress)
            .where(UserFlashcardProgress.user_id == user_id)
            .where(UserFlashcardProgress.flashcard_id.in_(ids))
        )
        result = await self.db.execute(stmt)
        return {p.flashcard_id: p for p in result.scalars().all()}

    async def upsert(
        self,
        user_id: str,
        flashcard_id: str,
        counters: ProgressCounters,
        studied_at: datetime,
    ) -> UserFlashcardProgress:
        """
        Create or update a user's progress on a flashcard.

        Args:
            user_id: User ID
            flashcard_id: Flashcard ID
            counters: Status and counters to store
            studied_at: Timestamp stored as last_studied_at

        Returns:
            The stored progress record
        """
        progress = await self.get(user_id, flashcard_id)

        if progress is None:
            progress = UserFlashcardProgress(
                id=str(uuid4()),
                user_id=user_id,
                flashcard_id=flashcard_id,
                status=counters.status,
                correct_count=counters.correct_count,
                incorrect_count=counters.incorrect_count,
                last_studied_at=studied_at,
                created_at=studied_at,
                updated_at=studied_at,
            )
            self.db.add(progress)
        else:
            progress.status = counters.status
            progress.correct_count = counters.correct_count
            progress.incorrect_count = counters.incorrect_count
            progress.last_studied_at = studied_at
            progress.updated_at = studied_at

        await self.db.flush()

        logger.info(
            f"[ProgressRepository] Stored progress for flashcard: {flashcard_id}, user: {user_id}, "
            f"status={counters.status.value}, correct={counters.correct_count}, "
            f"incorrect={counters.incorrect_count}"
        )
        return progress

    async def bulk_create_learning(self, user_id: str, flashcard_ids: Iterable[str]) -> int:
        """Create learning records with zero counts. Returns the number created."""
        now = datetime.now(timezone.utc)
        created = 0
        for flashcard_id in flashcard_ids:
            self.db.add(
                UserFlashcardProgress(
                    id=str(uuid4()),
                    user_id=user_id,
                    flashcard_id=flashcard_id,
                    status=MasteryStatus.LEARNING,
                    correct_count=0,
                    incorrect_count=0,
                    created_at=now,
                    updated_at=now,
                )
            )
            created += 1

        await self.db.flush()

        logger.info(f"[ProgressRepository] Initialized {created} progress records for user: {user_id}")
        return created

    async def delete_for_flashcards(self, user_id: str, flashcard_ids: Iterable[str]) -> int:
        """Delete a user's progress on the given flashcards. Returns the number deleted."""
        ids = list(flashcard_ids)
        if not ids:
            return 0

        result = await self.db.execute(
            delete(UserFlashcardProgress)
            .where(UserFlashcardProgress.user_id == user_id)
            .where(UserFlashcardProgress.flashcard_id.in_(ids))
        )
        await self.db.flush()

        logger.info(f"[ProgressRepository] Deleted {result.rowcount} progress records for user: {user_id}")
        return result.rowcount

    async def get_statuses_with_sets(
        self,
        user_id: str,
    ) -> Sequence[Tuple[MasteryStatus, str, str]]:
        """
        Get every progress status of a user with the owning study set.

        Returns:
            Rows of (status, study_set_id, study_set_title)
        """
        stmt = (
            select(UserFlashcardProgress.status, StudySet.id, StudySet.title)
            .join(Flashcard, Flashcard.id == UserFlashcardProgress.flashcard_id)
            .join(StudySet, StudySet.id == Flashcard.study_set_id)
            .where(UserFlashcardProgress.user_id == user_id)
            .order_by(StudySet.title.asc())
        )
        result = await self.db.execute(stmt)
        rows: List[Tuple[MasteryStatus, str, str]] = [tuple(row) for row in result.all()]
        return rows

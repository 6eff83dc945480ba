"""
Study sets repository - Data Access Layer for study sets and flashcards.
Handles all database operations for StudySet and Flashcard entities.
Writes verify that the caller owns the study set.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import uuid4

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import FlashcardNotFoundError, StudySetNotFoundError
from app.study_sets.csv_parser import FlashcardInput
from app.study_sets.models import Flashcard, StudySet

logger = logging.getLogger(__name__)


class StudySetRepository:
    """Repository for StudySet CRUD operations with ownership checks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        title: str,
        description: Optional[str],
        user_id: str,
    ) -> StudySet:
        """
        Create a new study set for a user.

        Args:
            title: Study set title
            description: Optional description (empty string stored as NULL)
            user_id: Owner user ID

        Returns:
            Created StudySet entity
        """
        now = datetime.now(timezone.utc)
        study_set = StudySet(
            id=str(uuid4()),
            title=title,
            description=description or None,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )

        self.db.add(study_set)
        await self.db.flush()

        logger.info(f"[StudySetRepository] Created study set: {study_set.id} - {study_set.title} for user: {user_id}")
        return study_set

    async def get_by_id(
        self,
        study_set_id: str,
        user_id: Optional[str] = None,
        with_flashcards: bool = False,
        verify_ownership: bool = False,
    ) -> StudySet:
        """
        Get a study set by its ID.

        Args:
            study_set_id: Study set UUID
            user_id: User ID for ownership verification
            with_flashcards: Whether to eagerly load flashcards
            verify_ownership: Whether to verify user ownership

        Returns:
            StudySet entity

        Raises:
            StudySetNotFoundError: If study set not found
            PermissionError: If study set doesn't belong to user
        """
        stmt = select(StudySet).where(StudySet.id == study_set_id)

        if with_flashcards:
            stmt = stmt.options(selectinload(StudySet.flashcards))

        result = await self.db.execute(stmt)
        study_set = result.scalar_one_or_none()

        if study_set is None:
            raise StudySetNotFoundError(f"Study set not found: {study_set_id}")

        if verify_ownership and study_set.user_id != user_id:
            raise PermissionError(f"Study set {study_set_id} does not belong to user {user_id}")

        return study_set

    async def get_all(self, skip: int = 0, limit: int = 100) -> Sequence[StudySet]:
        """Get all study sets, most recently updated first."""
        stmt = (
            select(StudySet)
            .order_by(StudySet.updated_at.desc())
            .offset(skip)
            .limit(limit)
        )

        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def count(self) -> int:
        """Count total number of study sets."""
        stmt = select(func.count()).select_from(StudySet)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def get_card_counts(self, study_set_ids: Iterable[str]) -> Dict[str, int]:
        """
        Get card counts for the given study sets.

        Returns:
            Dict mapping study_set_id to card_count
        """
        ids = list(study_set_ids)
        if not ids:
            return {}

        stmt = (
            select(Flashcard.study_set_id, func.count(Flashcard.id))
            .where(Flashcard.study_set_id.in_(ids))
            .group_by(Flashcard.study_set_id)
        )

        result = await self.db.execute(stmt)
        return {row[0]: row[1] for row in result.all()}

    async def update(
        self,
        study_set_id: str,
        title: str,
        description: Optional[str],
        user_id: str,
    ) -> StudySet:
        """Update a study set's title and description."""
        study_set = await self.get_by_id(study_set_id, user_id=user_id, verify_ownership=True)

        study_set.title = title
        study_set.description = description or None
        study_set.updated_at = datetime.now(timezone.utc)
        await self.db.flush()

        logger.info(f"[StudySetRepository] Updated study set: {study_set.id}")
        return study_set

    async def touch(self, study_set: StudySet) -> None:
        """Bump updated_at after a change to the set's cards."""
        study_set.updated_at = datetime.now(timezone.utc)
        await self.db.flush()

    async def delete(self, study_set_id: str, user_id: str) -> bool:
        """
        Delete a study set by its ID.

        Flashcards, progress and test results go with it via ON DELETE CASCADE.
        """
        study_set = await self.get_by_id(study_set_id, user_id=user_id, verify_ownership=True)
        await self.db.delete(study_set)
        await self.db.flush()

        logger.info(f"[StudySetRepository] Deleted study set: {study_set_id}")
        return True


class FlashcardRepository:
    """Repository for Flashcard operations within a study set."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def bulk_create(
        self,
        study_set_id: str,
        cards: Iterable[FlashcardInput],
        start_position: int = 0,
    ) -> List[Flashcard]:
        """
        Bulk create flashcards with consecutive positions.

        Args:
            study_set_id: Parent study set ID
            cards: Term/definition pairs in display order
            start_position: Position of the first new card

        Returns:
            List of created Flashcard entities
        """
        now = datetime.now(timezone.utc)

        flashcards = []
        for offset, card in enumerate(cards):
            flashcard = Flashcard(
                id=str(uuid4()),
                study_set_id=study_set_id,
                term=card.term,
                definition=card.definition,
                position=start_position + offset,
                created_at=now,
            )
            self.db.add(flashcard)
            flashcards.append(flashcard)

        await self.db.flush()

        logger.info(f"[FlashcardRepository] Bulk created {len(flashcards)} flashcards in study set: {study_set_id}")
        return flashcards

    async def get_by_id(self, flashcard_id: str) -> Flashcard:
        """
        Get a flashcard by its ID.

        Raises:
            FlashcardNotFoundError: If flashcard not found
        """
        result = await self.db.execute(select(Flashcard).where(Flashcard.id == flashcard_id))
        flashcard = result.scalar_one_or_none()

        if flashcard is None:
            raise FlashcardNotFoundError(f"Flashcard not found: {flashcard_id}")

        return flashcard

    async def get_for_set(self, study_set_id: str) -> Sequence[Flashcard]:
        """Get all flashcards of a study set ordered by position."""
        stmt = (
            select(Flashcard)
            .where(Flashcard.study_set_id == study_set_id)
            .order_by(Flashcard.position.asc())
        )

        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def get_ids_for_set(self, study_set_id: str) -> List[str]:
        """Get the IDs of all flashcards of a study set."""
        result = await self.db.execute(
            select(Flashcard.id).where(Flashcard.study_set_id == study_set_id)
        )
        return [row[0] for row in result.all()]

    async def get_max_position(self, study_set_id: str) -> int:
        """Get the highest position in a study set, or -1 when it is empty."""
        stmt = select(func.max(Flashcard.position)).where(Flashcard.study_set_id == study_set_id)
        result = await self.db.execute(stmt)
        max_position = result.scalar_one_or_none()
        return -1 if max_position is None else max_position

    async def delete_for_set(self, study_set_id: str) -> int:
        """Delete every flashcard of a study set. Returns the number deleted."""
        result = await self.db.execute(
            delete(Flashcard).where(Flashcard.study_set_id == study_set_id)
        )
        await self.db.flush()

        logger.info(f"[FlashcardRepository] Deleted {result.rowcount} flashcards from study set: {study_set_id}")
        return result.rowcount

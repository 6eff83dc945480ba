"""
Study sets service - Business logic for study set management.
Includes CSV import/export of flashcards.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import CSVImportError
from app.study_sets.csv_parser import FlashcardInput, ParseResult, generate_csv, parse_csv
from app.study_sets.models import Flashcard, StudySet
from app.study_sets.repository import FlashcardRepository, StudySetRepository
from app.study_sets.schemas import (
    CSVImportResponse,
    CSVPreviewResponse,
    FlashcardContent,
    FlashcardRead,
    StudySetCreate,
    StudySetDetail,
    StudySetList,
    StudySetRead,
    StudySetUpdate,
)

logger = logging.getLogger(__name__)


class StudySetService:
    """Service for study set business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.study_set_repo = StudySetRepository(db)
        self.flashcard_repo = FlashcardRepository(db)

    # ═══════════════════════════════════════════════════════════════════════
    # STUDY SET OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════

    async def create_study_set(self, data: StudySetCreate, user_id: str) -> StudySetDetail:
        """Create a study set and its initial flashcards."""
        logger.info(f"[StudySetService] Creating study set: {data.title} for user: {user_id}")

        study_set = await self.study_set_repo.create(data.title, data.description, user_id=user_id)
        flashcards = await self.flashcard_repo.bulk_create(
            study_set.id,
            [FlashcardInput(term=c.term, definition=c.definition) for c in data.flashcards],
        )
        return self._study_set_to_detail_dto(study_set, flashcards)

    async def get_study_set(self, study_set_id: str) -> StudySetDetail:
        """Get a study set with its flashcards ordered by position."""
        logger.info(f"[StudySetService] Getting study set: {study_set_id}")

        study_set = await self.study_set_repo.get_by_id(study_set_id, with_flashcards=True)
        return self._study_set_to_detail_dto(study_set, study_set.flashcards)

    async def list_study_sets(self, skip: int = 0, limit: int = 100) -> StudySetList:
        """List study sets with their card counts."""
        logger.info(f"[StudySetService] Listing study sets (skip={skip}, limit={limit})")

        study_sets = await self.study_set_repo.get_all(skip=skip, limit=limit)
        total = await self.study_set_repo.count()
        card_counts = await self.study_set_repo.get_card_counts(s.id for s in study_sets)

        return StudySetList(
            study_sets=[
                self._study_set_to_read_dto(s, card_count=card_counts.get(s.id, 0))
                for s in study_sets
            ],
            total=total,
        )

    async def update_study_set(
        self,
        study_set_id: str,
        data: StudySetUpdate,
        user_id: str,
    ) -> StudySetDetail:
        """
        Replace a study set's metadata and flashcards.

        Existing cards are deleted and recreated, which also drops
        every user's progress on them.
        """
        logger.info(f"[StudySetService] Updating study set: {study_set_id} for user: {user_id}")

        study_set = await self.study_set_repo.update(
            study_set_id,
            data.title,
            data.description,
            user_id=user_id,
        )
        await self.flashcard_repo.delete_for_set(study_set_id)
        flashcards = await self.flashcard_repo.bulk_create(
            study_set_id,
            [FlashcardInput(term=c.term, definition=c.definition) for c in data.flashcards],
        )
        return self._study_set_to_detail_dto(study_set, flashcards)

    async def delete_study_set(self, study_set_id: str, user_id: str) -> bool:
        """Delete a study set and everything attached to it."""
        logger.info(f"[StudySetService] Deleting study set: {study_set_id} for user: {user_id}")
        return await self.study_set_repo.delete(study_set_id, user_id=user_id)

    # ═══════════════════════════════════════════════════════════════════════
    # CSV IMPORT / EXPORT
    # ═══════════════════════════════════════════════════════════════════════

    def preview_csv(self, content: str) -> CSVPreviewResponse:
        """Parse CSV text without saving anything."""
        result = parse_csv(content)
        logger.info(
            f"[StudySetService] CSV preview: {len(result.flashcards)} cards, {len(result.errors)} errors"
        )
        return self._parse_result_to_dto(result)

    async def import_csv(
        self,
        study_set_id: str,
        content: str,
        user_id: str,
    ) -> CSVImportResponse:
        """
        Append the valid cards of a CSV document to a study set.

        Cards are placed after the current highest position. Invalid lines
        are skipped and reported back.

        Raises:
            CSVImportError: If no line produced a valid card
        """
        logger.info(f"[StudySetService] Importing CSV into study set: {study_set_id}")

        study_set = await self.study_set_repo.get_by_id(
            study_set_id,
            user_id=user_id,
            verify_ownership=True,
        )

        result = parse_csv(content)
        if not result.success:
            raise CSVImportError("No valid flashcards found in CSV", errors=list(result.errors))

        start_position = await self.flashcard_repo.get_max_position(study_set_id) + 1
        flashcards = await self.flashcard_repo.bulk_create(
            study_set_id,
            result.flashcards,
            start_position=start_position,
        )
        await self.study_set_repo.touch(study_set)

        return CSVImportResponse(
            imported=len(flashcards),
            errors=list(result.errors),
            flashcards=[FlashcardRead.model_validate(f) for f in flashcards],
        )

    async def export_csv(self, study_set_id: str) -> str:
        """Serialize a study set's flashcards to CSV text."""
        logger.info(f"[StudySetService] Exporting study set: {study_set_id}")

        await self.study_set_repo.get_by_id(study_set_id)
        flashcards = await self.flashcard_repo.get_for_set(study_set_id)
        return generate_csv(
            FlashcardInput(term=f.term, definition=f.definition) for f in flashcards
        )

    # ═══════════════════════════════════════════════════════════════════════
    # DTO TRANSFORMATIONS
    # ═══════════════════════════════════════════════════════════════════════

    def _study_set_to_read_dto(self, study_set: StudySet, card_count: int = 0) -> StudySetRead:
        """Convert StudySet model to StudySetRead DTO."""
        return StudySetRead(
            id=study_set.id,
            title=study_set.title,
            description=study_set.description,
            user_id=study_set.user_id,
            card_count=card_count,
            created_at=study_set.created_at,
            updated_at=study_set.updated_at,
        )

    def _study_set_to_detail_dto(
        self,
        study_set: StudySet,
        flashcards: List[Flashcard],
    ) -> StudySetDetail:
        """Convert StudySet model to StudySetDetail DTO with flashcards."""
        cards = sorted(flashcards or [], key=lambda f: f.position)
        return StudySetDetail(
            id=study_set.id,
            title=study_set.title,
            description=study_set.description,
            user_id=study_set.user_id,
            card_count=len(cards),
            created_at=study_set.created_at,
            updated_at=study_set.updated_at,
            flashcards=[FlashcardRead.model_validate(f) for f in cards],
        )

    def _parse_result_to_dto(self, result: ParseResult) -> CSVPreviewResponse:
        """Convert a ParseResult to its API representation."""
        return CSVPreviewResponse(
            success=result.success,
            flashcards=[
                FlashcardContent(term=c.term, definition=c.definition)
                for c in result.flashcards
            ],
            errors=list(result.errors),
        )


def get_study_set_service(db: AsyncSession) -> StudySetService:
    """Factory function for StudySetService."""
    return StudySetService(db)

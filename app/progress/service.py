"""
Progress service - Business logic for per-user mastery tracking.
Loads prior counters, applies the mastery engine and persists the result.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.exceptions import ProgressWriteError
from app.progress.mastery import MasteryStatus, ProgressCounters, classify, next_state
from app.progress.models import UserFlashcardProgress
from app.progress.repository import ProgressRepository
from app.progress.schemas import (
    AnswerResponse,
    FlashcardWithProgress,
    InitializeResponse,
    OverallProgressResponse,
    ProgressRead,
    ResetResponse,
    SetProgressResponse,
    StatusCounts,
    StudySetProgress,
)
from app.study_sets.repository import FlashcardRepository, StudySetRepository

logger = logging.getLogger(__name__)
settings = get_settings()

Transition = Callable[[Optional[ProgressCounters]], ProgressCounters]


class ProgressService:
    """Service for mastery progress business logic."""

    def __init__(
        self,
        db: AsyncSession,
        retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.db = db
        self.progress_repo = ProgressRepository(db)
        self.study_set_repo = StudySetRepository(db)
        self.flashcard_repo = FlashcardRepository(db)
        self.retries = retries if retries is not None else settings.progress_write_retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.progress_retry_delay_seconds

    # ═══════════════════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════════════════

    async def get_set_progress(self, study_set_id: str, user_id: str) -> SetProgressResponse:
        """Get all cards of a study set with the user's progress attached."""
        logger.info(f"[ProgressService] Getting progress for study set: {study_set_id}, user: {user_id}")

        await self.study_set_repo.get_by_id(study_set_id)
        flashcards = await self.flashcard_repo.get_for_set(study_set_id)
        progress_map = await self.progress_repo.get_for_flashcards(
            user_id,
            (f.id for f in flashcards),
        )

        return SetProgressResponse(
            study_set_id=study_set_id,
            flashcards=[
                FlashcardWithProgress(
                    id=f.id,
                    study_set_id=f.study_set_id,
                    term=f.term,
                    definition=f.definition,
                    position=f.position,
                    user_progress=self._progress_to_read_dto(progress_map[f.id])
                    if f.id in progress_map
                    else None,
                )
                for f in flashcards
            ],
        )

    async def get_overall_progress(self, user_id: str) -> OverallProgressResponse:
        """Count studied cards per status, overall and per study set."""
        logger.info(f"[ProgressService] Getting overall progress for user: {user_id}")

        rows = await self.progress_repo.get_statuses_with_sets(user_id)

        stats: Dict[str, int] = {"new": 0, "learning": 0, "mastered": 0, "total": 0}
        per_set: Dict[str, Dict] = {}

        for status, study_set_id, title in rows:
            stats[status.value] += 1
            stats["total"] += 1

            entry = per_set.setdefault(
                study_set_id,
                {"study_set_id": study_set_id, "title": title, "new": 0, "learning": 0, "mastered": 0, "total": 0},
            )
            entry[status.value] += 1
            entry["total"] += 1

        return OverallProgressResponse(
            stats=StatusCounts(**stats),
            set_progress=[StudySetProgress(**entry) for entry in per_set.values()],
        )

    # ═══════════════════════════════════════════════════════════════════════
    # TRANSITIONS
    # ═══════════════════════════════════════════════════════════════════════

    async def record_answer(self, flashcard_id: str, correct: bool, user_id: str) -> AnswerResponse:
        """
        Record an answer and advance the card's mastery status.

        Raises:
            FlashcardNotFoundError: If the flashcard does not exist
            ProgressWriteError: If the update could not be stored
        """
        logger.info(f"[ProgressService] Recording answer for flashcard: {flashcard_id}, correct={correct}")

        await self.flashcard_repo.get_by_id(flashcard_id)
        progress = await self._write_with_retry(
            flashcard_id,
            user_id,
            lambda prior: next_state(prior, correct),
        )

        return AnswerResponse(
            flashcard_id=flashcard_id,
            new_status=progress.status,
            correct_count=progress.correct_count,
            incorrect_count=progress.incorrect_count,
            last_studied_at=progress.last_studied_at,
        )

    async def mark_status(
        self,
        flashcard_id: str,
        status: MasteryStatus,
        user_id: str,
    ) -> ProgressRead:
        """
        Set a card's status from a manual self-assessment.
        Answer counters are left untouched.
        """
        logger.info(f"[ProgressService] Marking flashcard: {flashcard_id} as {status.value}")

        await self.flashcard_repo.get_by_id(flashcard_id)
        progress = await self._write_with_retry(
            flashcard_id,
            user_id,
            lambda prior: classify(prior, status),
        )
        return self._progress_to_read_dto(progress)

    async def initialize_set(self, study_set_id: str, user_id: str) -> InitializeResponse:
        """Create learning records for every card of a set the user has not studied yet."""
        logger.info(f"[ProgressService] Initializing progress for study set: {study_set_id}, user: {user_id}")

        await self.study_set_repo.get_by_id(study_set_id)
        flashcard_ids = await self.flashcard_repo.get_ids_for_set(study_set_id)
        existing = await self.progress_repo.get_for_flashcards(user_id, flashcard_ids)

        missing = [fid for fid in flashcard_ids if fid not in existing]
        if not missing:
            return InitializeResponse(initialized=0)

        created = await self.progress_repo.bulk_create_learning(user_id, missing)
        return InitializeResponse(initialized=created)

    async def reset_set(self, study_set_id: str, user_id: str) -> ResetResponse:
        """Delete the user's progress on every card of a study set."""
        logger.info(f"[ProgressService] Resetting progress for study set: {study_set_id}, user: {user_id}")

        await self.study_set_repo.get_by_id(study_set_id)
        flashcard_ids = await self.flashcard_repo.get_ids_for_set(study_set_id)
        deleted = await self.progress_repo.delete_for_flashcards(user_id, flashcard_ids)
        return ResetResponse(deleted=deleted)

    # ═══════════════════════════════════════════════════════════════════════
    # PERSISTENCE
    # ═══════════════════════════════════════════════════════════════════════

    async def _write_with_retry(
        self,
        flashcard_id: str,
        user_id: str,
        transition: Transition,
    ) -> UserFlashcardProgress:
        """
        Apply a transition to the stored counters and persist it.

        Transient database errors roll the session back and retry with
        exponential backoff. Each attempt re-reads the prior counters so
        the transition is computed against what is actually stored.

        Raises:
            ProgressWriteError: If every attempt failed
        """
        delay = self.retry_delay
        attempts = max(1, self.retries)

        for attempt in range(1, attempts + 1):
            try:
                existing = await self.progress_repo.get(user_id, flashcard_id)
                prior = existing.to_counters() if existing is not None else None
                counters = transition(prior)
                return await self.progress_repo.upsert(
                    user_id,
                    flashcard_id,
                    counters,
                    studied_at=datetime.now(timezone.utc),
                )
            except OperationalError as e:
                await self.db.rollback()
                if attempt == attempts:
                    logger.error(
                        f"[ProgressService] Giving up on progress write for flashcard: {flashcard_id} "
                        f"after {attempts} attempts: {e}"
                    )
                    raise ProgressWriteError(f"Could not save progress for flashcard {flashcard_id}")

                logger.warning(
                    f"[ProgressService] Progress write failed (attempt {attempt}/{attempts}), "
                    f"retrying in {delay:.2f}s: {e}"
                )
                await asyncio.sleep(delay)
                delay *= 2

    # ═══════════════════════════════════════════════════════════════════════
    # DTO TRANSFORMATIONS
    # ═══════════════════════════════════════════════════════════════════════

    def _progress_to_read_dto(self, progress: UserFlashcardProgress) -> ProgressRead:
        """Convert UserFlashcardProgress model to ProgressRead DTO."""
        return ProgressRead(
            flashcard_id=progress.flashcard_id,
            status=progress.status,
            correct_count=progress.correct_count,
            incorrect_count=progress.incorrect_count,
            last_studied_at=progress.last_studied_at,
        )


def get_progress_service(db: AsyncSession) -> ProgressService:
    """Factory function for ProgressService."""
    return ProgressService(db)

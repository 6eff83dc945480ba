"""
Test results repository - Data Access Layer for saved tests.
All operations filter by user_id.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import TestResultNotFoundError
from app.study_sets.models import StudySet
from app.test_results.models import SavedTestResult
from app.test_results.schemas import TestResultCreate

logger = logging.getLogger(__name__)


class TestResultRepository:
    """Repository for SavedTestResult operations with user filtering."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: TestResultCreate, user_id: str) -> SavedTestResult:
        """Store a completed test."""
        result = SavedTestResult(
            id=str(uuid4()),
            user_id=user_id,
            study_set_id=data.study_set_id,
            score=data.score,
            total_questions=data.total_questions,
            percentage=data.percentage,
            question_types=dict(data.question_types),
            answers=[answer.model_dump(mode="json") for answer in data.answers],
            completed_at=datetime.now(timezone.utc),
        )

        self.db.add(result)
        await self.db.flush()

        logger.info(f"[TestResultRepository] Saved test result: {result.id} for user: {user_id}")
        return result

    async def get_history(
        self,
        user_id: str,
        study_set_id: Optional[str] = None,
        limit: int = 20,
    ) -> Sequence[Tuple[SavedTestResult, str]]:
        """
        Get a user's test results with the study set title, newest first.

        Returns:
            Rows of (SavedTestResult, study_set_title)
        """
        stmt = (
            select(SavedTestResult, StudySet.title)
            .join(StudySet, StudySet.id == SavedTestResult.study_set_id)
            .where(SavedTestResult.user_id == user_id)
            .order_by(SavedTestResult.completed_at.desc())
            .limit(limit)
        )

        if study_set_id:
            stmt = stmt.where(SavedTestResult.study_set_id == study_set_id)

        result = await self.db.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def get_by_id(self, result_id: str, user_id: str) -> Tuple[SavedTestResult, str]:
        """
        Get one of the user's test results with its study set title.

        Raises:
            TestResultNotFoundError: If missing or owned by someone else
        """
        stmt = (
            select(SavedTestResult, StudySet.title)
            .join(StudySet, StudySet.id == SavedTestResult.study_set_id)
            .where(SavedTestResult.id == result_id)
            .where(SavedTestResult.user_id == user_id)
        )
        row = (await self.db.execute(stmt)).one_or_none()

        if row is None:
            raise TestResultNotFoundError(f"Test result not found: {result_id}")

        return row[0], row[1]

    async def delete(self, result_id: str, user_id: str) -> bool:
        """Delete one of the user's test results."""
        test_result, _ = await self.get_by_id(result_id, user_id)
        await self.db.delete(test_result)
        await self.db.flush()

        logger.info(f"[TestResultRepository] Deleted test result: {result_id}")
        return True

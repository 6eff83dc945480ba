"""
Test results service - Saving and browsing completed tests.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.study_sets.repository import StudySetRepository
from app.test_results.models import SavedTestResult
from app.test_results.repository import TestResultRepository
from app.test_results.schemas import TestAnswerDetail, TestResultCreate, TestResultList, TestResultRead

logger = logging.getLogger(__name__)


class TestResultService:
    """Service for saved test results."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.result_repo = TestResultRepository(db)
        self.study_set_repo = StudySetRepository(db)

    async def save_result(self, data: TestResultCreate, user_id: str) -> TestResultRead:
        """
        Save a completed test.

        Raises:
            StudySetNotFoundError: If the study set does not exist
        """
        logger.info(f"[TestResultService] Saving test result for study set: {data.study_set_id}, user: {user_id}")

        study_set = await self.study_set_repo.get_by_id(data.study_set_id)
        result = await self.result_repo.create(data, user_id=user_id)
        return self._result_to_read_dto(result, study_set.title)

    async def get_history(
        self,
        user_id: str,
        study_set_id: Optional[str] = None,
        limit: int = 20,
    ) -> TestResultList:
        """Get the user's test history, newest first."""
        logger.info(f"[TestResultService] Getting test history for user: {user_id}, study set: {study_set_id}")

        rows = await self.result_repo.get_history(user_id, study_set_id=study_set_id, limit=limit)
        return TestResultList(results=[self._result_to_read_dto(r, title) for r, title in rows])

    async def get_result(self, result_id: str, user_id: str) -> TestResultRead:
        """Get one saved test result for detailed review."""
        logger.info(f"[TestResultService] Getting test result: {result_id}, user: {user_id}")

        result, title = await self.result_repo.get_by_id(result_id, user_id)
        return self._result_to_read_dto(result, title)

    async def delete_result(self, result_id: str, user_id: str) -> bool:
        """Delete a saved test result."""
        logger.info(f"[TestResultService] Deleting test result: {result_id}, user: {user_id}")
        return await self.result_repo.delete(result_id, user_id)

    def _result_to_read_dto(self, result: SavedTestResult, study_set_title: Optional[str]) -> TestResultRead:
        """Convert SavedTestResult model to TestResultRead DTO."""
        return TestResultRead(
            id=result.id,
            study_set_id=result.study_set_id,
            study_set_title=study_set_title,
            score=result.score,
            total_questions=result.total_questions,
            percentage=result.percentage,
            question_types=result.question_types or {},
            answers=[TestAnswerDetail(**answer) for answer in (result.answers or [])],
            completed_at=result.completed_at,
        )


def get_test_result_service(db: AsyncSession) -> TestResultService:
    """Factory function for TestResultService."""
    return TestResultService(db)

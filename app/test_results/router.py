"""
Test results router - API endpoints for saved test results.
Users only ever see their own results.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StudySetNotFoundError, TestResultNotFoundError
from app.database import get_db
from app.dependencies import CurrentUserId
from app.test_results.schemas import TestResultCreate, TestResultList, TestResultRead
from app.test_results.service import get_test_result_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/test-results", tags=["Test Results"])


def _result_not_found(result_id: str, e: TestResultNotFoundError) -> JSONResponse:
    logger.warning(f"[TestResultsRouter] Test result not found: {result_id}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": e.message, "code": "TEST_RESULT_NOT_FOUND"},
    )


@router.post(
    "",
    response_model=TestResultRead,
    status_code=status.HTTP_201_CREATED,
    summary="Save a test result",
    description="Save a completed test with its per-question answers.",
    responses={
        201: {"model": TestResultRead, "description": "Test result saved"},
        401: {"description": "Not authenticated"},
        404: {"description": "Study set not found"},
    },
)
async def save_test_result(
    data: TestResultCreate,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> TestResultRead:
    """Save a completed test."""
    logger.info(f"[TestResultsRouter] Saving test result for study set: {data.study_set_id}, user: {user_id}")

    try:
        service = get_test_result_service(db)
        return await service.save_result(data, user_id=user_id)
    except StudySetNotFoundError as e:
        logger.warning(f"[TestResultsRouter] Study set not found: {data.study_set_id}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": e.message, "code": "STUDY_SET_NOT_FOUND"},
        )


@router.get(
    "",
    response_model=TestResultList,
    status_code=status.HTTP_200_OK,
    summary="Get test history",
    description="Get the user's test results, newest first, optionally for one study set.",
    responses={
        200: {"model": TestResultList, "description": "Test history"},
        401: {"description": "Not authenticated"},
    },
)
async def get_test_history(
    user_id: CurrentUserId,
    study_set_id: Optional[str] = Query(None, description="Optional study set ID to filter by"),
    limit: int = Query(20, ge=1, le=100, description="Maximum results to return"),
    db: AsyncSession = Depends(get_db),
) -> TestResultList:
    """Get the test history."""
    logger.info(f"[TestResultsRouter] Getting test history, user: {user_id}, study set: {study_set_id}")

    service = get_test_result_service(db)
    return await service.get_history(user_id, study_set_id=study_set_id, limit=limit)


@router.get(
    "/{result_id}",
    response_model=TestResultRead,
    status_code=status.HTTP_200_OK,
    summary="Get a test result",
    description="Get one saved test result for detailed review.",
    responses={
        200: {"model": TestResultRead, "description": "Test result"},
        401: {"description": "Not authenticated"},
        404: {"description": "Test result not found"},
    },
)
async def get_test_result(
    result_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> TestResultRead:
    """Get a saved test result."""
    try:
        service = get_test_result_service(db)
        return await service.get_result(result_id, user_id)
    except TestResultNotFoundError as e:
        return _result_not_found(result_id, e)


@router.delete(
    "/{result_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a test result",
    description="Delete one of the user's saved test results.",
    responses={
        204: {"description": "Test result deleted"},
        401: {"description": "Not authenticated"},
        404: {"description": "Test result not found"},
    },
)
async def delete_test_result(
    result_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete a saved test result."""
    logger.info(f"[TestResultsRouter] Deleting test result: {result_id}, user: {user_id}")

    try:
        service = get_test_result_service(db)
        await service.delete_result(result_id, user_id)
    except TestResultNotFoundError as e:
        return _result_not_found(result_id, e)

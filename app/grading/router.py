"""
Grading router - API endpoints for answer comparison and the study modes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import FlashcardNotFoundError, StudySetNotFoundError
from app.database import get_db
from app.dependencies import CurrentUserId
from app.grading.schemas import (
    CompareRequest,
    CompareResponse,
    GradingError,
    LearnQuestionResponse,
    MatchBoardResponse,
    TestGradeResponse,
    TestRequest,
    TestResponse,
    TestSubmission,
)
from app.grading.service import get_grading_service
from app.rate_limit import limiter

logger = logging.getLogger(__name__)

grading_router = APIRouter(prefix="/grading", tags=["Grading"])
modes_router = APIRouter(prefix="/study-sets", tags=["Study Modes"])


def _not_found(resource_id: str, e: Exception, code: str) -> JSONResponse:
    logger.warning(f"[GradingRouter] Not found: {resource_id}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": e.message, "code": code},
    )


# ═══════════════════════════════════════════════════════════════════════════
# ANSWER COMPARISON
# ═══════════════════════════════════════════════════════════════════════════


@grading_router.post(
    "/compare",
    response_model=CompareResponse,
    status_code=status.HTTP_200_OK,
    summary="Compare a written answer",
    description="""
    Grade a typed answer against the expected one.

    Case, whitespace, punctuation and accents are ignored. Answers of more
    than two words also pass when at least 80% of the expected key words
    are present.
    """,
    responses={
        200: {"model": CompareResponse, "description": "Comparison outcome"},
        401: {"description": "Not authenticated"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit("120/minute")
async def compare_answer(
    request: Request,
    data: CompareRequest,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> CompareResponse:
    """Compare a written answer with the expected answer."""
    service = get_grading_service(db)
    return service.compare(data.user_answer, data.correct_answer)


# ═══════════════════════════════════════════════════════════════════════════
# TEST MODE
# ═══════════════════════════════════════════════════════════════════════════


@modes_router.post(
    "/{study_set_id}/test",
    response_model=TestResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate a test",
    description="Generate multiple-choice, true/false and written questions from a study set.",
    responses={
        200: {"model": TestResponse, "description": "Generated questions"},
        401: {"description": "Not authenticated"},
        404: {"model": GradingError, "description": "Study set not found"},
    },
)
async def generate_test(
    study_set_id: str,
    data: TestRequest,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> TestResponse:
    """Generate a test from a study set."""
    logger.info(f"[GradingRouter] Generating test for study set: {study_set_id}, user: {user_id}")

    try:
        service = get_grading_service(db)
        return await service.generate_test(study_set_id, data.question_count, data.question_types)
    except StudySetNotFoundError as e:
        return _not_found(study_set_id, e, "STUDY_SET_NOT_FOUND")


@modes_router.post(
    "/{study_set_id}/test/grade",
    response_model=TestGradeResponse,
    status_code=status.HTTP_200_OK,
    summary="Grade a test",
    description="Grade submitted answers and optionally save the result to the test history.",
    responses={
        200: {"model": TestGradeResponse, "description": "Graded test"},
        401: {"description": "Not authenticated"},
        404: {"model": GradingError, "description": "Study set or flashcard not found"},
    },
)
async def grade_test(
    study_set_id: str,
    data: TestSubmission,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> TestGradeResponse:
    """Grade a submitted test."""
    logger.info(f"[GradingRouter] Grading test for study set: {study_set_id}, user: {user_id}")

    try:
        service = get_grading_service(db)
        return await service.grade_submission(study_set_id, data, user_id=user_id)
    except StudySetNotFoundError as e:
        return _not_found(study_set_id, e, "STUDY_SET_NOT_FOUND")
    except FlashcardNotFoundError as e:
        return _not_found(study_set_id, e, "FLASHCARD_NOT_FOUND")


# ═══════════════════════════════════════════════════════════════════════════
# LEARN & MATCH MODES
# ═══════════════════════════════════════════════════════════════════════════


@modes_router.get(
    "/{study_set_id}/learn/next",
    response_model=LearnQuestionResponse,
    status_code=status.HTTP_200_OK,
    summary="Next learn-mode question",
    description="Get a multiple-choice question for a random card the user has not mastered yet.",
    responses={
        200: {"model": LearnQuestionResponse, "description": "Question, or complete=true"},
        401: {"description": "Not authenticated"},
        404: {"model": GradingError, "description": "Study set not found"},
    },
)
async def next_learn_question(
    study_set_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> LearnQuestionResponse:
    """Get the next learn-mode question."""
    try:
        service = get_grading_service(db)
        return await service.next_learn_question(study_set_id, user_id)
    except StudySetNotFoundError as e:
        return _not_found(study_set_id, e, "STUDY_SET_NOT_FOUND")


@modes_router.get(
    "/{study_set_id}/match",
    response_model=MatchBoardResponse,
    status_code=status.HTTP_200_OK,
    summary="Match-game board",
    description="Get shuffled term and definition tiles for up to pair_count cards.",
    responses={
        200: {"model": MatchBoardResponse, "description": "Match board"},
        401: {"description": "Not authenticated"},
        404: {"model": GradingError, "description": "Study set not found"},
    },
)
async def match_board(
    study_set_id: str,
    user_id: CurrentUserId,
    pair_count: Optional[int] = Query(None, ge=1, le=50, description="Number of pairs on the board"),
    db: AsyncSession = Depends(get_db),
) -> MatchBoardResponse:
    """Get a match-game board."""
    try:
        service = get_grading_service(db)
        return await service.match_board(study_set_id, pair_count=pair_count)
    except StudySetNotFoundError as e:
        return _not_found(study_set_id, e, "STUDY_SET_NOT_FOUND")

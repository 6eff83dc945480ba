"""
Progress router - API endpoints for per-user mastery tracking.
All routes act on the authenticated user's own progress.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import FlashcardNotFoundError, ProgressWriteError, StudySetNotFoundError
from app.database import get_db
from app.dependencies import CurrentUserId
from app.progress.schemas import (
    AnswerRequest,
    AnswerResponse,
    InitializeResponse,
    OverallProgressResponse,
    ProgressError,
    ProgressRead,
    ResetResponse,
    SetProgressResponse,
    StatusUpdateRequest,
)
from app.progress.service import get_progress_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/progress", tags=["Progress"])


def _not_found(resource_id: str, e: Exception, code: str) -> JSONResponse:
    logger.warning(f"[ProgressRouter] Not found: {resource_id}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": e.message, "code": code},
    )


def _write_failed(e: ProgressWriteError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": e.message, "code": "PROGRESS_WRITE_FAILED"},
    )


@router.get(
    "",
    response_model=OverallProgressResponse,
    status_code=status.HTTP_200_OK,
    summary="Get overall progress",
    description="Count the user's studied cards per status, overall and per study set.",
    responses={
        200: {"model": OverallProgressResponse, "description": "Progress summary"},
        401: {"description": "Not authenticated"},
    },
)
async def get_overall_progress(
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> OverallProgressResponse:
    """Get overall progress for the authenticated user."""
    logger.info(f"[ProgressRouter] Getting overall progress, user: {user_id}")

    service = get_progress_service(db)
    return await service.get_overall_progress(user_id)


@router.get(
    "/study-sets/{study_set_id}",
    response_model=SetProgressResponse,
    status_code=status.HTTP_200_OK,
    summary="Get progress for a study set",
    description="Get every card of a study set with the user's progress (null when never studied).",
    responses={
        200: {"model": SetProgressResponse, "description": "Cards with progress"},
        401: {"description": "Not authenticated"},
        404: {"model": ProgressError, "description": "Study set not found"},
    },
)
async def get_set_progress(
    study_set_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> SetProgressResponse:
    """Get the user's progress for a study set."""
    logger.info(f"[ProgressRouter] Getting progress for study set: {study_set_id}, user: {user_id}")

    try:
        service = get_progress_service(db)
        return await service.get_set_progress(study_set_id, user_id)
    except StudySetNotFoundError as e:
        return _not_found(study_set_id, e, "STUDY_SET_NOT_FOUND")


@router.post(
    "/flashcards/{flashcard_id}/answer",
    response_model=AnswerResponse,
    status_code=status.HTTP_200_OK,
    summary="Record an answer",
    description="Record a correct or incorrect answer and advance the card's mastery status.",
    responses={
        200: {"model": AnswerResponse, "description": "Updated progress"},
        401: {"description": "Not authenticated"},
        404: {"model": ProgressError, "description": "Flashcard not found"},
        503: {"model": ProgressError, "description": "Progress could not be saved"},
    },
)
async def record_answer(
    flashcard_id: str,
    data: AnswerRequest,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> AnswerResponse:
    """Record an answer to a flashcard."""
    logger.info(f"[ProgressRouter] Answer for flashcard: {flashcard_id}, correct={data.correct}, user: {user_id}")

    try:
        service = get_progress_service(db)
        return await service.record_answer(flashcard_id, data.correct, user_id=user_id)
    except FlashcardNotFoundError as e:
        return _not_found(flashcard_id, e, "FLASHCARD_NOT_FOUND")
    except ProgressWriteError as e:
        return _write_failed(e)


@router.put(
    "/flashcards/{flashcard_id}/status",
    response_model=ProgressRead,
    status_code=status.HTTP_200_OK,
    summary="Classify a flashcard",
    description="Mark a card as still learning or already known without touching answer counts.",
    responses={
        200: {"model": ProgressRead, "description": "Updated progress"},
        401: {"description": "Not authenticated"},
        404: {"model": ProgressError, "description": "Flashcard not found"},
        503: {"model": ProgressError, "description": "Progress could not be saved"},
    },
)
async def mark_status(
    flashcard_id: str,
    data: StatusUpdateRequest,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> ProgressRead:
    """Set a flashcard's status from a self-assessment."""
    logger.info(f"[ProgressRouter] Marking flashcard: {flashcard_id} as {data.status.value}, user: {user_id}")

    try:
        service = get_progress_service(db)
        return await service.mark_status(flashcard_id, data.status, user_id=user_id)
    except FlashcardNotFoundError as e:
        return _not_found(flashcard_id, e, "FLASHCARD_NOT_FOUND")
    except ProgressWriteError as e:
        return _write_failed(e)


@router.post(
    "/study-sets/{study_set_id}/initialize",
    response_model=InitializeResponse,
    status_code=status.HTTP_200_OK,
    summary="Initialize progress for a study set",
    description="Create learning records for cards the user has not studied yet.",
    responses={
        200: {"model": InitializeResponse, "description": "Records created"},
        401: {"description": "Not authenticated"},
        404: {"model": ProgressError, "description": "Study set not found"},
    },
)
async def initialize_set(
    study_set_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> InitializeResponse:
    """Initialize progress for a study set."""
    logger.info(f"[ProgressRouter] Initializing study set: {study_set_id}, user: {user_id}")

    try:
        service = get_progress_service(db)
        return await service.initialize_set(study_set_id, user_id)
    except StudySetNotFoundError as e:
        return _not_found(study_set_id, e, "STUDY_SET_NOT_FOUND")


@router.delete(
    "/study-sets/{study_set_id}",
    response_model=ResetResponse,
    status_code=status.HTTP_200_OK,
    summary="Reset progress for a study set",
    description="Delete the user's progress on every card of a study set.",
    responses={
        200: {"model": ResetResponse, "description": "Progress reset"},
        401: {"description": "Not authenticated"},
        404: {"model": ProgressError, "description": "Study set not found"},
    },
)
async def reset_set(
    study_set_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> ResetResponse:
    """Reset progress for a study set."""
    logger.info(f"[ProgressRouter] Resetting study set: {study_set_id}, user: {user_id}")

    try:
        service = get_progress_service(db)
        return await service.reset_set(study_set_id, user_id)
    except StudySetNotFoundError as e:
        return _not_found(study_set_id, e, "STUDY_SET_NOT_FOUND")

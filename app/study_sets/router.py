"""
Study sets router - API endpoints for study sets, flashcards and CSV import/export.
Reads are open to any authenticated user; writes require ownership.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.exceptions import CSVImportError, StudySetNotFoundError
from app.database import get_db
from app.dependencies import CurrentUserId
from app.rate_limit import limiter
from app.study_sets.schemas import (
    CSVImportRequest,
    CSVImportResponse,
    CSVPreviewResponse,
    StudySetCreate,
    StudySetDetail,
    StudySetError,
    StudySetList,
    StudySetUpdate,
)
from app.study_sets.service import get_study_set_service

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/study-sets", tags=["Study Sets"])


def _study_set_not_found(study_set_id: str, e: StudySetNotFoundError) -> JSONResponse:
    logger.warning(f"[StudySetsRouter] Study set not found: {study_set_id}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": e.message, "code": "STUDY_SET_NOT_FOUND"},
    )


def _access_denied(study_set_id: str, user_id: str) -> HTTPException:
    logger.warning(f"[StudySetsRouter] Access denied to study set {study_set_id} for user {user_id}")
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied - study set does not belong to user",
    )


def _csv_too_large(content: str) -> bool:
    return len(content.encode("utf-8")) > settings.csv_max_bytes


@router.post(
    "",
    response_model=StudySetDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create a study set",
    description="Create a study set with its flashcards. The caller becomes the owner.",
    responses={
        201: {"model": StudySetDetail, "description": "Study set created"},
        401: {"description": "Not authenticated"},
    },
)
async def create_study_set(
    data: StudySetCreate,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> StudySetDetail:
    """Create a new study set."""
    logger.info(f"[StudySetsRouter] Creating study set: {data.title}, user: {user_id}")

    service = get_study_set_service(db)
    return await service.create_study_set(data, user_id=user_id)


@router.get(
    "",
    response_model=StudySetList,
    status_code=status.HTTP_200_OK,
    summary="List study sets",
    description="Get a paginated list of study sets, most recently updated first.",
    responses={
        200: {"model": StudySetList, "description": "List of study sets"},
        401: {"description": "Not authenticated"},
    },
)
async def list_study_sets(
    user_id: CurrentUserId,
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    db: AsyncSession = Depends(get_db),
) -> StudySetList:
    """List study sets."""
    logger.info(f"[StudySetsRouter] Listing study sets (skip={skip}, limit={limit}), user: {user_id}")

    service = get_study_set_service(db)
    return await service.list_study_sets(skip=skip, limit=limit)


@router.post(
    "/import/preview",
    response_model=CSVPreviewResponse,
    status_code=status.HTTP_200_OK,
    summary="Preview a CSV import",
    description="Parse CSV text into flashcards and per-line errors without saving.",
    responses={
        200: {"model": CSVPreviewResponse, "description": "Parse result"},
        401: {"description": "Not authenticated"},
        413: {"model": StudySetError, "description": "CSV too large"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit("30/minute")
async def preview_csv(
    request: Request,
    data: CSVImportRequest,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> CSVPreviewResponse:
    """Parse CSV content for preview."""
    if _csv_too_large(data.content):
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"error": "CSV content too large", "code": "CSV_TOO_LARGE"},
        )

    service = get_study_set_service(db)
    return service.preview_csv(data.content)


@router.get(
    "/{study_set_id}",
    response_model=StudySetDetail,
    status_code=status.HTTP_200_OK,
    summary="Get study set by ID",
    description="Get a study set with its flashcards ordered by position.",
    responses={
        200: {"model": StudySetDetail, "description": "Study set with flashcards"},
        401: {"description": "Not authenticated"},
        404: {"model": StudySetError, "description": "Study set not found"},
    },
)
async def get_study_set(
    study_set_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> StudySetDetail:
    """Get a specific study set with all flashcards."""
    logger.info(f"[StudySetsRouter] Getting study set: {study_set_id}, user: {user_id}")

    try:
        service = get_study_set_service(db)
        return await service.get_study_set(study_set_id)
    except StudySetNotFoundError as e:
        return _study_set_not_found(study_set_id, e)


@router.put(
    "/{study_set_id}",
    response_model=StudySetDetail,
    status_code=status.HTTP_200_OK,
    summary="Replace study set",
    description="Replace a study set's title, description and flashcards. Resets progress on its cards.",
    responses={
        200: {"model": StudySetDetail, "description": "Updated study set"},
        401: {"description": "Not authenticated"},
        403: {"description": "Access denied"},
        404: {"model": StudySetError, "description": "Study set not found"},
    },
)
async def update_study_set(
    study_set_id: str,
    data: StudySetUpdate,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> StudySetDetail:
    """Replace a study set."""
    logger.info(f"[StudySetsRouter] Updating study set: {study_set_id}, user: {user_id}")

    try:
        service = get_study_set_service(db)
        return await service.update_study_set(study_set_id, data, user_id=user_id)
    except StudySetNotFoundError as e:
        return _study_set_not_found(study_set_id, e)
    except PermissionError:
        raise _access_denied(study_set_id, user_id)


@router.delete(
    "/{study_set_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete study set",
    description="Delete a study set with its flashcards, progress and test results.",
    responses={
        204: {"description": "Study set deleted"},
        401: {"description": "Not authenticated"},
        403: {"description": "Access denied"},
        404: {"model": StudySetError, "description": "Study set not found"},
    },
)
async def delete_study_set(
    study_set_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete a study set."""
    logger.info(f"[StudySetsRouter] Deleting study set: {study_set_id}, user: {user_id}")

    try:
        service = get_study_set_service(db)
        await service.delete_study_set(study_set_id, user_id=user_id)
    except StudySetNotFoundError as e:
        return _study_set_not_found(study_set_id, e)
    except PermissionError:
        raise _access_denied(study_set_id, user_id)


@router.post(
    "/{study_set_id}/import",
    response_model=CSVImportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import flashcards from CSV",
    description="Append the valid cards of a CSV document to the end of a study set.",
    responses={
        201: {"model": CSVImportResponse, "description": "Cards imported"},
        401: {"description": "Not authenticated"},
        403: {"description": "Access denied"},
        404: {"model": StudySetError, "description": "Study set not found"},
        413: {"model": StudySetError, "description": "CSV too large"},
        422: {"description": "No valid flashcards in CSV"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit("30/minute")
async def import_csv(
    request: Request,
    study_set_id: str,
    data: CSVImportRequest,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
) -> CSVImportResponse:
    """Import flashcards from CSV into a study set."""
    logger.info(f"[StudySetsRouter] Importing CSV into study set: {study_set_id}, user: {user_id}")

    if _csv_too_large(data.content):
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"error": "CSV content too large", "code": "CSV_TOO_LARGE"},
        )

    try:
        service = get_study_set_service(db)
        return await service.import_csv(study_set_id, data.content, user_id=user_id)
    except StudySetNotFoundError as e:
        return _study_set_not_found(study_set_id, e)
    except PermissionError:
        raise _access_denied(study_set_id, user_id)
    except CSVImportError as e:
        logger.warning(f"[StudySetsRouter] CSV import rejected for {study_set_id}: {len(e.errors)} errors")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"error": e.message, "code": "CSV_INVALID", "errors": e.errors},
        )


@router.get(
    "/{study_set_id}/export",
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Export flashcards as CSV",
    description="Download a study set's flashcards as term,definition CSV.",
    responses={
        200: {"content": {"text/csv": {}}, "description": "CSV document"},
        401: {"description": "Not authenticated"},
        404: {"model": StudySetError, "description": "Study set not found"},
    },
)
async def export_csv(
    study_set_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db),
):
    """Export a study set as CSV."""
    logger.info(f"[StudySetsRouter] Exporting study set: {study_set_id}, user: {user_id}")

    try:
        service = get_study_set_service(db)
        content = await service.export_csv(study_set_id)
    except StudySetNotFoundError as e:
        return _study_set_not_found(study_set_id, e)

    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{study_set_id}.csv"'},
    )

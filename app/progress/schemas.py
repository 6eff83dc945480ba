"""
Pydantic schemas for progress module.
DTOs for API input/output validation.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.progress.mastery import MasteryStatus


# ═══════════════════════════════════════════════════════════════════════════
# PROGRESS RECORD SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════


class ProgressRead(BaseModel):
    """DTO for a user's progress on one flashcard."""

    flashcard_id: str = Field(..., description="Flashcard ID")
    status: MasteryStatus = Field(..., description="new, learning or mastered")
    correct_count: int = Field(..., ge=0, description="Correct answers so far")
    incorrect_count: int = Field(..., ge=0, description="Incorrect answers so far")
    last_studied_at: Optional[datetime] = Field(None, description="Last interaction timestamp")

    model_config = {"from_attributes": True}


class FlashcardWithProgress(BaseModel):
    """A flashcard with the caller's progress attached."""

    id: str = Field(..., description="Flashcard ID")
    study_set_id: str = Field(..., description="Parent study set ID")
    term: str = Field(..., description="Term (front side)")
    definition: str = Field(..., description="Definition (back side)")
    position: int = Field(..., description="Position within the set")
    user_progress: Optional[ProgressRead] = Field(
        None,
        description="Progress record, null if the card was never studied",
    )


class SetProgressResponse(BaseModel):
    """All cards of a study set with the caller's progress."""

    study_set_id: str = Field(..., description="Study set ID")
    flashcards: List[FlashcardWithProgress] = Field(..., description="Cards ordered by position")


# ═══════════════════════════════════════════════════════════════════════════
# ANSWER & CLASSIFICATION SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════


class AnswerRequest(BaseModel):
    """DTO for recording an answer to a flashcard."""

    correct: bool = Field(..., description="Whether the answer was correct")

    model_config = {
        "json_schema_extra": {
            "example": {
                "correct": True,
            }
        }
    }


class AnswerResponse(BaseModel):
    """Progress after recording an answer."""

    flashcard_id: str = Field(..., description="Answered flashcard ID")
    new_status: MasteryStatus = Field(..., description="Status after the answer")
    correct_count: int = Field(..., description="Updated correct count")
    incorrect_count: int = Field(..., description="Updated incorrect count")
    last_studied_at: datetime = Field(..., description="Timestamp of this answer")


class StatusUpdateRequest(BaseModel):
    """DTO for a manual self-assessment."""

    status: MasteryStatus = Field(
        ...,
        description="learning (still learning) or mastered (already know)",
    )

    @field_validator("status")
    @classmethod
    def status_must_be_assessable(cls, value: MasteryStatus) -> MasteryStatus:
        if value == MasteryStatus.NEW:
            raise ValueError("status must be learning or mastered")
        return value

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "mastered",
            }
        }
    }


class InitializeResponse(BaseModel):
    """Response after initializing progress for a set."""

    initialized: int = Field(..., description="Number of progress records created")


class ResetResponse(BaseModel):
    """Response after resetting progress for a set."""

    deleted: int = Field(..., description="Number of progress records removed")


# ═══════════════════════════════════════════════════════════════════════════
# OVERALL PROGRESS SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════


class StatusCounts(BaseModel):
    """Number of studied cards per status."""

    new: int = Field(0, description="Cards with status new")
    learning: int = Field(0, description="Cards with status learning")
    mastered: int = Field(0, description="Cards with status mastered")
    total: int = Field(0, description="All studied cards")


class StudySetProgress(StatusCounts):
    """Status counts for one study set."""

    study_set_id: str = Field(..., description="Study set ID")
    title: str = Field(..., description="Study set title")


class OverallProgressResponse(BaseModel):
    """Progress across all study sets the user has studied."""

    stats: StatusCounts = Field(..., description="Counts across all sets")
    set_progress: List[StudySetProgress] = Field(..., description="Counts per study set")


class ProgressError(BaseModel):
    """Error response for progress operations."""

    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")

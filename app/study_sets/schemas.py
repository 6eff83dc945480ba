"""
Pydantic schemas for study sets module.
DTOs for API input/output validation.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.study_sets.csv_parser import MAX_FIELD_LENGTH


# ═══════════════════════════════════════════════════════════════════════════
# FLASHCARD SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════


class FlashcardContent(BaseModel):
    """Term/definition pair used when creating or importing cards."""

    term: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH, description="Term (front side)")
    definition: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH, description="Definition (back side)")


class FlashcardRead(BaseModel):
    """DTO for reading a flashcard."""

    id: str = Field(..., description="Flashcard ID")
    study_set_id: str = Field(..., description="Parent study set ID")
    term: str = Field(..., description="Term (front side)")
    definition: str = Field(..., description="Definition (back side)")
    position: int = Field(..., description="Position within the set")
    created_at: datetime = Field(..., description="Creation timestamp")

    model_config = {"from_attributes": True}


# ═══════════════════════════════════════════════════════════════════════════
# STUDY SET SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════


class StudySetCreate(BaseModel):
    """DTO for creating a study set with its flashcards."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Study set title",
    )
    description: Optional[str] = Field(
        None,
        max_length=2000,
        description="Optional description",
    )
    flashcards: List[FlashcardContent] = Field(
        default_factory=list,
        max_length=2000,
        description="Flashcards in display order",
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "French Capitals",
                "description": "Capitals of francophone countries",
                "flashcards": [
                    {"term": "France", "definition": "Paris"},
                    {"term": "Belgium", "definition": "Brussels"},
                ],
            }
        }
    }


class StudySetUpdate(StudySetCreate):
    """DTO for replacing a study set's metadata and flashcards."""
    pass


class StudySetRead(BaseModel):
    """DTO for reading a study set (without cards)."""

    id: str = Field(..., description="Study set ID")
    title: str = Field(..., description="Study set title")
    description: Optional[str] = Field(None, description="Description")
    user_id: str = Field(..., description="Owner user ID")
    card_count: int = Field(0, description="Number of flashcards")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {"from_attributes": True}


class StudySetDetail(StudySetRead):
    """DTO for reading a study set with all cards."""

    flashcards: List[FlashcardRead] = Field(
        default_factory=list,
        description="Flashcards ordered by position",
    )


class StudySetList(BaseModel):
    """DTO for listing study sets."""

    study_sets: List[StudySetRead] = Field(..., description="List of study sets")
    total: int = Field(..., description="Total number of study sets")


# ═══════════════════════════════════════════════════════════════════════════
# CSV IMPORT SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════


class CSVImportRequest(BaseModel):
    """DTO carrying raw CSV text."""

    content: str = Field(..., description="CSV text: term,definition per line")

    model_config = {
        "json_schema_extra": {
            "example": {
                "content": "term,definition\nFrance,Paris\n\"Congo, Republic of\",Brazzaville",
            }
        }
    }


class CSVPreviewResponse(BaseModel):
    """Parse result returned without saving anything."""

    success: bool = Field(..., description="True if at least one card was parsed")
    flashcards: List[FlashcardContent] = Field(..., description="Valid cards in line order")
    errors: List[str] = Field(..., description="Per-line errors in line order")


class CSVImportResponse(BaseModel):
    """Response after importing CSV cards into a set."""

    imported: int = Field(..., description="Number of cards added")
    errors: List[str] = Field(..., description="Lines that were skipped")
    flashcards: List[FlashcardRead] = Field(..., description="Created flashcards")


class StudySetError(BaseModel):
    """Error response for study set operations."""

    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": "Study set not found",
                "code": "STUDY_SET_NOT_FOUND",
            }
        }
    }

"""
Pydantic schemas for grading and study modes.
DTOs for API input/output validation.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.grading.questions import QuestionType
from app.study_sets.schemas import FlashcardRead
from app.test_results.schemas import TestAnswerDetail


# ═══════════════════════════════════════════════════════════════════════════
# ANSWER COMPARISON
# ═══════════════════════════════════════════════════════════════════════════


class CompareRequest(BaseModel):
    """DTO for comparing a written answer with the expected one."""

    user_answer: str = Field(..., max_length=5000, description="Answer typed by the user")
    correct_answer: str = Field(..., max_length=5000, description="Expected answer")

    model_config = {
        "json_schema_extra": {
            "example": {
                "user_answer": "mitochondria powerhouse of cell",
                "correct_answer": "The mitochondria is the powerhouse of the cell",
            }
        }
    }


class CompareResponse(BaseModel):
    """DTO for the comparison outcome."""

    correct: bool = Field(..., description="Whether the answer is graded correct")
    normalized_user: str = Field(..., description="User answer after normalization")
    normalized_correct: str = Field(..., description="Expected answer after normalization")
    distance: Optional[int] = Field(
        None,
        description="Edit distance between the normalized answers, omitted for long answers",
    )


# ═══════════════════════════════════════════════════════════════════════════
# TEST MODE
# ═══════════════════════════════════════════════════════════════════════════


class TestRequest(BaseModel):
    """DTO for generating a test."""

    question_count: int = Field(10, ge=1, le=500, description="Number of questions wanted")
    question_types: List[QuestionType] = Field(
        default_factory=lambda: list(QuestionType),
        min_length=1,
        description="Question formats, used in rotation",
    )


class QuestionRead(BaseModel):
    """DTO for a generated question. Expected answers are not included."""

    id: str = Field(..., description="Question ID within the test")
    type: QuestionType = Field(..., description="Question format")
    flashcard_id: str = Field(..., description="Flashcard the question is about")
    term: str = Field(..., description="Term shown to the user")
    options: List[str] = Field(default_factory=list, description="Choices for multiple-choice questions")
    displayed_definition: Optional[str] = Field(
        None,
        description="Definition shown with the term in true/false questions",
    )


class TestResponse(BaseModel):
    """DTO for a generated test."""

    study_set_id: str = Field(..., description="Study set ID")
    questions: List[QuestionRead] = Field(..., description="Questions in order")


class SubmittedQuestion(BaseModel):
    """A question as sent back for grading."""

    id: str = Field(..., description="Question ID within the test")
    type: QuestionType = Field(..., description="Question format")
    flashcard_id: str = Field(..., description="Flashcard the question is about")
    displayed_definition: Optional[str] = Field(
        None,
        description="Definition that was shown in a true/false question",
    )


class TestSubmission(BaseModel):
    """DTO for grading a test."""

    questions: List[SubmittedQuestion] = Field(..., description="The questions that were asked")
    answers: Dict[str, str] = Field(
        default_factory=dict,
        description="Answers keyed by question ID; missing means unanswered",
    )
    save: bool = Field(False, description="Whether to store the result in the test history")


class TestGradeResponse(BaseModel):
    """DTO for a graded test."""

    total_questions: int = Field(..., description="Number of questions")
    correct_answers: int = Field(..., description="Number of correct answers")
    score: int = Field(..., description="Score from 0 to 100")
    question_types: Dict[str, int] = Field(..., description="Number of questions per type")
    answers: List[TestAnswerDetail] = Field(..., description="Per-question outcome")
    saved_result_id: Optional[str] = Field(None, description="ID of the stored test result, if saved")


# ═══════════════════════════════════════════════════════════════════════════
# LEARN & MATCH MODES
# ═══════════════════════════════════════════════════════════════════════════


class LearnQuestionResponse(BaseModel):
    """DTO for the next learn-mode question."""

    complete: bool = Field(..., description="True when every card is mastered")
    remaining: int = Field(..., description="Number of cards not yet mastered")
    flashcard: Optional[FlashcardRead] = Field(None, description="Card being asked")
    options: List[str] = Field(default_factory=list, description="Definition choices")
    correct_index: Optional[int] = Field(None, description="Index of the right option")


class MatchTileRead(BaseModel):
    """DTO for one match-game tile."""

    id: str = Field(..., description="Tile ID")
    flashcard_id: str = Field(..., description="Flashcard the tile belongs to")
    content: str = Field(..., description="Term or definition text")
    kind: str = Field(..., description="'term' or 'definition'")


class MatchBoardResponse(BaseModel):
    """DTO for a match-game board."""

    study_set_id: str = Field(..., description="Study set ID")
    pair_count: int = Field(..., description="Number of term/definition pairs on the board")
    tiles: List[MatchTileRead] = Field(..., description="Shuffled tiles")


class GradingError(BaseModel):
    """Error response DTO."""

    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")

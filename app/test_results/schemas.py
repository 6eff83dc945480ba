"""
Pydantic schemas for test results module.
DTOs for API input/output validation.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.grading.questions import QuestionType


class TestAnswerDetail(BaseModel):
    """One answered question as stored in a test result."""

    question_id: str = Field(..., description="Question ID within the test")
    question_type: QuestionType = Field(..., description="Question format")
    term: str = Field(..., description="Term the question was about")
    correct_answer: str = Field(..., description="Expected answer")
    user_answer: str = Field(..., description="Answer given")
    is_correct: bool = Field(..., description="Whether the answer was graded correct")


class TestResultCreate(BaseModel):
    """DTO for saving a completed test."""

    study_set_id: str = Field(..., description="Study set the test was generated from")
    score: int = Field(..., ge=0, description="Number of correct answers")
    total_questions: int = Field(..., ge=0, description="Number of questions")
    percentage: float = Field(..., ge=0, le=100, description="Score as a percentage")
    question_types: Dict[str, int] = Field(
        default_factory=dict,
        description="Number of questions per question type",
    )
    answers: List[TestAnswerDetail] = Field(default_factory=list, description="Per-question details")


class TestResultRead(BaseModel):
    """DTO for reading a saved test result."""

    id: str = Field(..., description="Test result ID")
    study_set_id: str = Field(..., description="Study set ID")
    study_set_title: Optional[str] = Field(None, description="Study set title")
    score: int = Field(..., description="Number of correct answers")
    total_questions: int = Field(..., description="Number of questions")
    percentage: float = Field(..., description="Score as a percentage")
    question_types: Dict[str, int] = Field(..., description="Number of questions per type")
    answers: List[TestAnswerDetail] = Field(..., description="Per-question details")
    completed_at: datetime = Field(..., description="Completion timestamp")


class TestResultList(BaseModel):
    """DTO for the test history."""

    results: List[TestResultRead] = Field(..., description="Test results, newest first")

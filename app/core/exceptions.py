"""
Custom exceptions for the application.
"""

from typing import List, Optional

from fastapi import HTTPException, status


class StudySetsException(Exception):
    """Base exception for the StudySets application."""

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


# ═══════════════════════════════════════════════════════════════════════════
# AUTHENTICATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════


class InvalidTokenError(StudySetsException):
    """Raised when a JWT token is invalid or expired."""
    pass


# ═══════════════════════════════════════════════════════════════════════════
# STUDY SET & FLASHCARD EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════


class StudySetNotFoundError(StudySetsException):
    """Raised when a study set is not found."""
    pass


class FlashcardNotFoundError(StudySetsException):
    """Raised when a flashcard is not found."""
    pass


class CSVImportError(StudySetsException):
    """Raised when a CSV import produced no valid flashcards."""

    def __init__(self, message: str = "No valid flashcards found", errors: Optional[List[str]] = None):
        self.errors = errors or []
        super().__init__(message)


# ═══════════════════════════════════════════════════════════════════════════
# PROGRESS & TEST RESULT EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════


class ProgressWriteError(StudySetsException):
    """Raised when a progress update could not be persisted after retries."""
    pass


class TestResultNotFoundError(StudySetsException):
    """Raised when a saved test result is not found."""
    pass


# ═══════════════════════════════════════════════════════════════════════════
# HTTP EXCEPTION HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

"""
Progress module - Per-user new/learning/mastered tracking for flashcards.
"""

from app.progress.router import router as progress_router

__all__ = ["progress_router"]

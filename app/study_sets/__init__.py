"""
Study sets module - Study set and flashcard management with CSV import/export.
"""

from app.study_sets.router import router as study_sets_router

__all__ = ["study_sets_router"]

"""
StudySets Backend Application.

A FastAPI backend for flashcard study sets.
Provides CSV import/export, answer grading and per-user mastery tracking.
"""

__version__ = "0.1.0"

"""
Test results module - History of completed tests.
"""

from app.test_results.router import router as test_results_router

__all__ = ["test_results_router"]

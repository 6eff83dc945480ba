"""
Grading module - Answer comparison and the test, learn and match study modes.
Routers are imported from app.grading.router.
"""

"""
StudySets Backend - Main FastAPI Application

Entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import get_settings
from app.database import create_tables
from app.rate_limit import limiter

from app.study_sets import study_sets_router
from app.progress import progress_router
from app.grading.router import grading_router, modes_router
from app.test_results import test_results_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs startup and shutdown logic.
    """
    # Startup
    logger.info(f"[Startup] Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"[Startup] Debug mode: {settings.debug}")

    try:
        await create_tables()
        logger.info("[Startup] Database tables created/verified")
    except Exception as e:
        logger.error(f"[Startup] Database initialization failed: {e}")

    yield

    # Shutdown
    logger.info("[Shutdown] Application shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    StudySets Backend API - Flashcard study sets with mastery tracking.

    ## Features

    * **Study Sets** - Create, edit and delete sets of term/definition flashcards
    * **CSV** - Preview, import and export flashcards as CSV
    * **Progress** - Per-user new / learning / mastered tracking
    * **Study Modes** - Test, learn and match modes with lenient answer grading
    * **Test Results** - History of completed tests

    ## Architecture

    Built with FastAPI and SQLAlchemy 2.0 (async).
    Uses a 3-layer architecture: Router → Service → Repository.
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions globally."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


# Health check endpoints
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API info."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health", tags=["Health"])
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# API v1 routes
API_V1_PREFIX = "/api/v1"


@app.get(f"{API_V1_PREFIX}/health", tags=["Health"])
async def api_health():
    """API health check with version."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


# Include routers
app.include_router(study_sets_router, prefix=API_V1_PREFIX)
app.include_router(progress_router, prefix=API_V1_PREFIX)
app.include_router(grading_router, prefix=API_V1_PREFIX)
app.include_router(modes_router, prefix=API_V1_PREFIX)
app.include_router(test_results_router, prefix=API_V1_PREFIX)

"""SkillSharp API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SkillSharpError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Request log line per call carries method, path, status and duration as JSON fields
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from skillsharp.api.error_handlers import register_error_handlers
from skillsharp.api.routes import (
    admin, analytics, announcements, auth, chapters, exam_attempts, exams,
    health, institutes, leaderboard, mcqs, payments, practice, profile, subjects,
)
from skillsharp.config import get_settings
from skillsharp.infrastructure import database
from skillsharp.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("SkillSharp API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("SkillSharp API shutting down")


app = FastAPI(
    title="SkillSharp API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    return response


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(subjects.router)
app.include_router(chapters.router)
app.include_router(mcqs.router)
app.include_router(practice.router)
app.include_router(institutes.router)
app.include_router(exams.router)
app.include_router(analytics.router)
app.include_router(exam_attempts.router)
app.include_router(payments.router)
app.include_router(announcements.router)
app.include_router(admin.router)
app.include_router(leaderboard.router)

register_error_handlers(app)

# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Lucky Love API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    LuckyLoveException,
    StoreError,
    lucky_love_exception_handler,
    validation_exception_handler,
)
from app.routers import health, notifications, challenges, daily_challenges, goals, messages, questions
from app.auth import routes as auth_routes
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    The API holds no background tasks; push delivery runs in the Celery
    worker.
    """
    logger.info(f"Starting Lucky Love API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.PUSH_NOTIFICATIONS_ENABLED:
        logger.info("Push notifications disabled")

    yield

    logger.info("Shutting down Lucky Love API")


# Create FastAPI application
app = FastAPI(
    title="Lucky Love API",
    description="""
## Backend for the Lucky Love couples app

Every endpoint except health checks needs a Supabase access token
(`Authorization: Bearer <token>`) of a user who is paired with a partner.

### Activity feed

`GET /home/notifications` groups the couple's recent events per person and
action ("Ana envio 2 mensajes nuevos") and tells you which ones you haven't
seen. `POST /home/notifications/seen` marks them seen.

### Stars, rewards and levels

| Action | Effect |
|--------|--------|
| Approve a challenge | +stars for the partner who did it, +5 XP for the couple |
| Complete a daily challenge | +1 XP for the couple |
| Redeem a reward | -stars_required from your balance |

20 XP take the couple to the next level.

### Question of the day

`GET /home/daily-question` returns the latest question asked today, asking a
built-in one the first time. Both partners answer it with
`POST /home/daily-question/answer`.
""",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Authentication endpoints for verifying JWT tokens",
        },
        {
            "name": "Notifications",
            "description": "Aggregated activity feed and seen state",
        },
        {
            "name": "Challenges",
            "description": "Challenges between partners and their lifecycle",
        },
        {
            "name": "Daily Challenges",
            "description": "Per-day challenges with a star budget",
        },
        {
            "name": "Goals",
            "description": "Couple level, rewards and star balance",
        },
        {
            "name": "Messages",
            "description": "Partner messages and message of the day",
        },
        {
            "name": "Questions",
            "description": "Question of the day and answers",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(LuckyLoveException)
async def handle_lucky_love_exception(request: Request, exc: LuckyLoveException):
    """Handle custom Lucky Love exceptions."""
    return await lucky_love_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Report malformed request bodies as 400."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(SupabaseClientError)
async def handle_store_exception(request: Request, exc: SupabaseClientError):
    """Store failures that reached a route unwrapped."""
    logger.error(f"Store error on {request.method} {request.url.path}: {exc.message}")
    return await lucky_love_exception_handler(request, StoreError(exc))


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(auth_routes.router, tags=["Auth"])

# Health check endpoints
app.include_router(health.router, tags=["Health"])

# Activity feed
app.include_router(notifications.router, tags=["Notifications"])

# Challenge state machine
app.include_router(challenges.router, tags=["Challenges"])

# Daily challenges
app.include_router(daily_challenges.router, tags=["Daily Challenges"])

# Level and rewards
app.include_router(goals.router, tags=["Goals"])

# Messages
app.include_router(messages.router, tags=["Messages"])

# Daily questions
app.include_router(questions.router, tags=["Questions"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Lucky Love API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
    }

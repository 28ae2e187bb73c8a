"""
Lesson Booking API - Main Application Entry Point

Four POST endpoints over a shared relational store:
- book a time slot against a paid (or freshly pending) lesson package
- cancel a booking and return its lesson to the package
- issue free packages from the admin code or a public promo code

Every error leaves the API as {"error": ..., "details": ...}.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from lesson_booking.core.config import get_settings
from lesson_booking.core.errors import MissingCancelFields, ValidationError
from lesson_booking.core.logging import setup_logging, get_logger
from lesson_booking.core.metrics import metrics_endpoint
from lesson_booking.api.router import api_router
from lesson_booking.api.middleware import PreflightCORSMiddleware, RequestLoggingMiddleware
from lesson_booking.db.session import engine, get_db
from lesson_booking.services.strategy_factory import get_notifier

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )
    notifier = get_notifier()
    logger.info("notifier_ready", notifier=type(notifier).__name__)

    yield

    await engine.dispose()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Lesson booking API: time slot reservations against lesson packages",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(api_router)


def _error_body(message: str, details: Optional[str] = None) -> dict:
    body = {"error": message}
    if details:
        body["details"] = details
    return body


# Endpoints whose missing-field error is worded differently
VALIDATION_ERRORS = {
    "/api/v1/cancel-booking": MissingCancelFields,
}


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = "Method not allowed"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message, getattr(exc, "details", None)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are a plain 400, not FastAPI's 422."""
    error_cls = VALIDATION_ERRORS.get(request.url.path.rstrip("/"), ValidationError)
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())[1:]) or "body"
        problems.append(f"{field}: {err.get('msg')}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(error_cls.message, "; ".join(problems)),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", str(exc)),
    )


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint for Docker and load balancers."""
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning("health_database_unavailable", error=str(e))
        database = "unavailable"
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": database,
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }

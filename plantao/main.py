# plantao/main.py
"""
FastAPI application entry point.
"""

import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from plantao.core.config import APP_VERSION, CORS_ORIGINS, IS_PRODUCTION
from plantao.core.logging_config import get_logger, setup_logging
from plantao.core.request_logging import RequestLoggingMiddleware
from plantao.core.sentry_config import init_sentry
from plantao.database.database import create_tables, get_db
from plantao.routes.financial import router as financial_router
from plantao.routes.overrides import router as overrides_router

# Setup logging FIRST (before any other imports that might log)
setup_logging()
logger = get_logger(__name__)

sentry_enabled = init_sentry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Application starting up",
        extra={
            "extra_fields": {
                "production": IS_PRODUCTION,
                "python_version": sys.version,
                "sentry": sentry_enabled,
            }
        },
    )

    try:
        create_tables()
        logger.info("Database tables created/verified")
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database tables: {e}", exc_info=True)
        raise

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title="Plantão",
    description="Shift compensation resolution and financial reports",
    version=APP_VERSION,
    lifespan=lifespan,
)

if IS_PRODUCTION:
    # Production: Strict CORS - only allow specified origins
    if not CORS_ORIGINS:
        logger.warning(
            "Production mode but no CORS_ORIGINS set. CORS will block all cross-origin requests. "
            "Set CORS_ORIGINS environment variable if you need to allow specific origins."
        )

    allowed_origins = CORS_ORIGINS
    allowed_methods = ["GET", "PUT"]
    logger.info(f"CORS configured for production with origins: {allowed_origins}")
else:
    allowed_origins = ["*"]
    allowed_methods = ["*"]
    logger.info("CORS configured for development (permissive)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=allowed_methods,
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(financial_router)
app.include_router(overrides_router)


@app.get("/health", tags=["health"])
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint for monitoring.

    Returns 200 OK if the database answers, 503 otherwise.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed - database connection error: {e}", exc_info=True)
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "service": "plantao",
                "database": "disconnected",
                "error": "Database connection failed",
            },
        ) from e

    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "service": "plantao",
            "version": APP_VERSION,
            "database": "connected",
        },
    )

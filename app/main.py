"""
Academy Analytics - FastAPI Application

Read-only analytics API behind the admin console dashboard.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import router as api_v1_router
from app.core.config import settings
from app.core.database import close_db

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def configure_logging() -> None:
    """Route application loggers to stderr at LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging on startup, release the connection pool on shutdown."""
    configure_logging()
    logger.info(f"Academy Analytics {VERSION} starting ({settings.ENVIRONMENT})")
    yield
    await close_db()
    logger.info("Academy Analytics stopped")


app = FastAPI(
    title="Academy Analytics",
    description="KPI overview, competency mastery and gap analysis for the admin console.",
    version=VERSION,
    # Interactive docs only outside production
    docs_url="/docs" if settings.is_development else None,
    redoc_url=None,
    lifespan=lifespan,
)

# The dashboard only reads
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Liveness probe.

    Does not touch the database; a failing database shows up as zeroed
    analytics, not as an unhealthy process.
    """
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": VERSION,
    }

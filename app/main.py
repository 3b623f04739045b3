"""
Apadbandhav Backend - FastAPI Application

Main entry point for the application.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import close_db, get_session_maker, init_db
from app.core.http_client import close_http_client
from app.api.v1 import router as api_v1_router
from app.services import user_service


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Creates missing tables and seeds privileged accounts on startup;
    releases the HTTP client and database pool on shutdown.
    """
    # Startup
    logger.info("Starting Apadbandhav Backend...")
    await init_db()
    async with get_session_maker()() as session:
        created = await user_service.seed_privileged_users(session)
    if created:
        logger.info("Seeded %d privileged account(s)", created)
    yield
    # Shutdown
    logger.info("Shutting down Apadbandhav Backend...")
    await close_http_client()
    await close_db()


# Create FastAPI application
app = FastAPI(
    title="Apadbandhav Backend",
    description="Phone OTP authentication with role-based identity administration.",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Health check endpoint.

    Returns:
        dict: Health status and environment info.
    """
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": "0.1.0",
    }


@app.get("/", tags=["Root"])
async def root() -> dict:
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links.
    """
    return {
        "message": "Welcome to Apadbandhav Backend API",
        "docs": "/docs",
        "health": "/health",
    }

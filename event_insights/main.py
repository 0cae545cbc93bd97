"""
FastAPI application entry point for the Event Insights API.

This module serves as the central orchestration file for the service layer.
It configures logging and CORS, registers API routers, and starts the ASGI
server.

Design:
- Dependency injection for loose coupling
- Database pool managed by the application lifespan
- Insights Engine stays pure; endpoints load records and call it
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from event_insights import __version__
from event_insights.api.insights import router as insights_router
from event_insights.core.config import get_settings
from event_insights.core.database import init_db, close_db

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Initialize database connection pool
        - Log startup message

    On shutdown:
        - Close database connection pool
        - Log shutdown message
    """
    # Startup
    logger.info("Event Insights API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        # POST /insights/generate works without the database

    yield

    # Shutdown
    logger.info("Event Insights API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="Event Insights API",
    version=__version__,
    description=(
        "Insights Engine for event performance analytics. "
        "Turns an event's aggregated metrics into ranked anomaly, trend "
        "and peer-benchmark insights."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(insights_router)  # Has its own /insights prefix


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Event Insights API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "event_insights.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

"""
FastAPI application entry point for the Segment Compass API.

Configures logging and CORS, registers the API routers and starts the ASGI
server. The engine is stateless, so startup and shutdown only log.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from segment_compass import __version__
from segment_compass.api import api_router
from segment_compass.core.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown logging."""
    logger.info(f"{settings.app_name} starting")
    yield
    logger.info(f"{settings.app_name} shutting down")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description=(
        "Segmentation and movement analytics for satisfaction/loyalty surveys. "
        "Provides endpoints for classification, proximity analysis, customer "
        "timelines, trends, segment movements and forecasts."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware for the dashboard dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


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
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "segment_compass.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

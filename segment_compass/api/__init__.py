"""
API package initialization.

This package contains the FastAPI router modules:
- segmentation: Classification, distribution and proximity analysis
- history: Timelines, trends, movements, period comparison and forecasts
"""

from fastapi import APIRouter

from segment_compass.api.segmentation import router as segmentation_router
from segment_compass.api.history import router as history_router

# Create main API router
api_router = APIRouter()

api_router.include_router(segmentation_router, prefix="/segmentation", tags=["segmentation"])
api_router.include_router(history_router, prefix="/history", tags=["history"])

__all__ = [
    "api_router",
    "segmentation_router",
    "history_router",
]

"""
FastAPI router module for segmentation endpoints.

Every request carries the full SegmentationConfig and the data points, so
the service keeps no state between calls.

Key Endpoints:
- POST /segmentation/classify: Segment, base quadrant and zone per point
- POST /segmentation/distribution: Per-segment counts of non-excluded points
- POST /segmentation/proximity: Neighbouring-segment relationships and risk

Out-of-scale ratings are refused with 422 and the list of offending values;
the engine never clamps them.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from segment_compass.core.dependencies import SettingsDep
from segment_compass.models.schemas import (
    ClassificationResponse,
    DataPoint,
    ProximityAnalysisResult,
    SegmentationConfig,
    SegmentationRequest,
    SegmentDistribution,
)
from segment_compass.services.engine import SegmentationEngine
from segment_compass.services.quadrant_assignment import classify_points

logger = logging.getLogger(__name__)

router = APIRouter()


def ensure_points_in_scale(config: SegmentationConfig, points: List[DataPoint]) -> SegmentationEngine:
    """
    Build the engine for a request, refusing out-of-scale data.

    Raises:
        HTTPException 422: If any rating falls outside its scale.
    """
    engine = SegmentationEngine(config)
    violations = engine.validate(points)
    if violations:
        logger.warning(f"Rejected upload with {len(violations)} out-of-scale values")
        raise HTTPException(
            status_code=422,
            detail={
                "message": "Ratings outside the configured scale",
                "violations": [v.model_dump() for v in violations],
            },
        )
    return engine


def _build_distribution(engine: SegmentationEngine, points: List[DataPoint]) -> SegmentDistribution:
    counts = engine.distribution(points)
    return SegmentDistribution(counts=counts, total=sum(counts.values()))


# =============================================================================
# API Endpoints
# =============================================================================

@router.post(
    '/classify',
    response_model=ClassificationResponse,
    summary="Classify Data Points",
)
async def classify(request: SegmentationRequest) -> ClassificationResponse:
    """
    Classify every point, excluded ones included, and return the distribution
    of the non-excluded ones.
    """
    logger.info(f"Classifying {len(request.points)} points")
    engine = ensure_points_in_scale(request.config, request.points)

    try:
        return ClassificationResponse(
            results=classify_points(request.points, request.config),
            distribution=_build_distribution(engine, request.points),
        )
    except Exception as e:
        logger.error(f"Error classifying points: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to classify points: {str(e)}"
        )


@router.post(
    '/distribution',
    response_model=SegmentDistribution,
    summary="Segment Distribution",
)
async def distribution(request: SegmentationRequest) -> SegmentDistribution:
    engine = ensure_points_in_scale(request.config, request.points)

    try:
        return _build_distribution(engine, request.points)
    except Exception as e:
        logger.error(f"Error computing distribution: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compute distribution: {str(e)}"
        )


@router.post(
    '/proximity',
    response_model=ProximityAnalysisResult,
    summary="Proximity Analysis",
    description="""
    Flag customers close to a neighbouring segment.

    - Main quadrant neighbours use `threshold` (default 2 scale units)
    - Special zone neighbours use `specialZoneThreshold` (default 1 scale unit)
    - Midpoint customers are related to every quadrant unless `includeNeutral` is false
    """
)
async def proximity(
    request: SegmentationRequest,
    settings: SettingsDep,
    threshold: Optional[float] = Query(
        default=None,
        ge=0,
        description="Main quadrant threshold in scale units"
    ),
    specialZoneThreshold: Optional[float] = Query(
        default=None,
        ge=0,
        description="Special zone threshold in scale units"
    ),
    includeNeutral: Optional[bool] = Query(
        default=None,
        description="Relate midpoint customers to all four quadrants"
    ),
) -> ProximityAnalysisResult:
    """
    Run proximity analysis with request overrides falling back to settings.

    Raises:
        HTTPException 422: If ratings fall outside their scale.
        HTTPException 500: If the analysis fails.
    """
    engine = ensure_points_in_scale(request.config, request.points)

    try:
        return engine.analyze_proximity(
            request.points,
            threshold=settings.proximity_threshold if threshold is None else threshold,
            special_zone_threshold=(
                settings.special_zone_proximity_threshold
                if specialZoneThreshold is None else specialZoneThreshold
            ),
            include_neutral=(
                settings.include_neutral_in_proximity
                if includeNeutral is None else includeNeutral
            ),
        )
    except Exception as e:
        logger.error(f"Error running proximity analysis: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to run proximity analysis: {str(e)}"
        )

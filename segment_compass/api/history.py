"""
FastAPI router module for historical analysis endpoints.

Key Endpoints:
- POST /history/timelines: Per-customer timelines
- POST /history/trends: Average satisfaction and loyalty per survey date
- POST /history/movements: Segment transitions between survey dates
- POST /history/period-comparison: First vs last survey date
- POST /history/forecast: Linear forecast of satisfaction and loyalty

Insufficient history is not an error: comparison and forecast return null
and the list endpoints return empty lists.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from segment_compass.core.dependencies import SettingsDep
from segment_compass.models.schemas import (
    CustomerTimeline,
    ForecastResult,
    HistoryRequest,
    MovementStats,
    PeriodComparison,
    TrendDataPoint,
)
from segment_compass.api.segmentation import ensure_points_in_scale

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# API Endpoints
# =============================================================================

@router.post(
    '/timelines',
    response_model=List[CustomerTimeline],
    summary="Customer Timelines",
)
async def timelines(request: HistoryRequest) -> List[CustomerTimeline]:
    engine = ensure_points_in_scale(request.config, request.points)

    try:
        return engine.group_by_customer(request.points, request.dateFormat)
    except Exception as e:
        logger.error(f"Error building timelines: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to build timelines: {str(e)}"
        )


@router.post(
    '/trends',
    response_model=List[TrendDataPoint],
    summary="Trend Data",
)
async def trends(request: HistoryRequest) -> List[TrendDataPoint]:
    """Average ratings per survey date, chronologically ordered."""
    engine = ensure_points_in_scale(request.config, request.points)

    try:
        return engine.calculate_trend_data(
            engine.group_by_customer(request.points, request.dateFormat),
            request.dateFormat,
        )
    except Exception as e:
        logger.error(f"Error calculating trends: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to calculate trends: {str(e)}"
        )


@router.post(
    '/movements',
    response_model=MovementStats,
    summary="Segment Movements",
)
async def movements(request: HistoryRequest) -> MovementStats:
    """Transitions between consecutive survey dates, busiest first."""
    engine = ensure_points_in_scale(request.config, request.points)

    try:
        return engine.calculate_quadrant_movements(
            engine.group_by_customer(request.points, request.dateFormat),
            request.dateFormat,
        )
    except Exception as e:
        logger.error(f"Error calculating movements: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to calculate movements: {str(e)}"
        )


@router.post(
    '/period-comparison',
    response_model=Optional[PeriodComparison],
    summary="Period Comparison",
)
async def period_comparison(request: HistoryRequest) -> Optional[PeriodComparison]:
    engine = ensure_points_in_scale(request.config, request.points)

    try:
        trend = engine.calculate_trend_data(
            engine.group_by_customer(request.points, request.dateFormat),
            request.dateFormat,
        )
        return engine.calculate_period_comparison(trend)
    except Exception as e:
        logger.error(f"Error comparing periods: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compare periods: {str(e)}"
        )


@router.post(
    '/forecast',
    response_model=Optional[ForecastResult],
    summary="Forecast",
    description="""
    Project satisfaction and loyalty 1, 3 and `monthsAhead` months past the
    last survey date. Returns null with fewer than two survey dates.
    """
)
async def forecast(
    request: HistoryRequest,
    settings: SettingsDep,
    monthsAhead: Optional[int] = Query(
        default=None,
        ge=1,
        le=60,
        description="Furthest horizon in months (default from settings)"
    ),
) -> Optional[ForecastResult]:
    """
    Raises:
        HTTPException 422: If ratings fall outside their scale.
        HTTPException 500: If the forecast fails.
    """
    engine = ensure_points_in_scale(request.config, request.points)
    months = settings.forecast_months_ahead if monthsAhead is None else monthsAhead

    try:
        trend = engine.calculate_trend_data(
            engine.group_by_customer(request.points, request.dateFormat),
            request.dateFormat,
        )
        result = engine.generate_forecast(trend, months)
        if result is None:
            logger.info(f"Forecast skipped: only {len(trend)} trend points")
        return result
    except Exception as e:
        logger.error(f"Error generating forecast: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to generate forecast: {str(e)}"
        )

"""
Forecast Service

Projects average satisfaction and loyalty forward with an ordinary least
squares fit against days elapsed since the first survey date.

    slope     = (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2)
    intercept = (Sy - slope*Sx) / n
    R^2       = 1 - SSres / SStot, clamped to [0, 1]; SStot = 0 gives 0

A series whose dates are all identical has no x-variance. It is reported
as degenerate (slope 0, intercept = mean) instead of producing NaN.

Horizons are 1, 3 and `months_ahead` calendar months past the last survey
date, keeping only those <= months_ahead.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from segment_compass.core.config import get_settings
from segment_compass.models.enums import ForecastConfidence
from segment_compass.models.schemas import (
    ForecastPoint,
    ForecastResult,
    RegressionResult,
    TrendDataPoint,
    TrendSlope,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Below this SStot the series is treated as flat
FLAT_SERIES_TOLERANCE = 1e-12

HIGH_CONFIDENCE_R2 = 0.7
HIGH_CONFIDENCE_MIN_POINTS = 5
MEDIUM_CONFIDENCE_R2 = 0.4
MEDIUM_CONFIDENCE_MIN_POINTS = 4
MIN_CONFIDENT_POINTS = 3

FORECAST_HORIZONS = (1, 3)

_CONFIDENCE_ORDER = {
    ForecastConfidence.LOW: 0,
    ForecastConfidence.MEDIUM: 1,
    ForecastConfidence.HIGH: 2,
}


# =============================================================================
# Regression
# =============================================================================

def linear_regression(xs: Sequence[float], ys: Sequence[float]) -> RegressionResult:
    """
    Ordinary least squares fit of ys against xs.

    Args:
        xs: Independent values (days since the first date)
        ys: Dependent values

    Returns:
        RegressionResult; isDegenerate when every x is identical

    Raises:
        ValueError: If the inputs are empty or of different lengths
    """
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if x.size == 0 or x.size != y.size:
        raise ValueError(f"Regression needs matching, non-empty inputs (got {x.size} and {y.size})")

    n = x.size
    if np.all(x == x[0]):
        return RegressionResult(
            slope=0.0,
            intercept=float(y.mean()),
            rSquared=0.0,
            pointCount=n,
            isDegenerate=True,
        )

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x ** 2)
    intercept = (sum_y - slope * sum_x) / n

    predicted = slope * x + intercept
    ss_res = float(((y - predicted) ** 2).sum())
    ss_tot = float(((y - y.mean()) ** 2).sum())
    r_squared = 0.0 if ss_tot < FLAT_SERIES_TOLERANCE else 1 - ss_res / ss_tot

    return RegressionResult(
        slope=float(slope),
        intercept=float(intercept),
        rSquared=min(max(r_squared, 0.0), 1.0),
        pointCount=n,
    )


def calculate_confidence(r_squared: float, point_count: int, is_degenerate: bool = False) -> ForecastConfidence:
    if is_degenerate or point_count < MIN_CONFIDENT_POINTS:
        return ForecastConfidence.LOW
    if r_squared >= HIGH_CONFIDENCE_R2 and point_count >= HIGH_CONFIDENCE_MIN_POINTS:
        return ForecastConfidence.HIGH
    if r_squared >= MEDIUM_CONFIDENCE_R2 and point_count >= MEDIUM_CONFIDENCE_MIN_POINTS:
        return ForecastConfidence.MEDIUM
    return ForecastConfidence.LOW


def combine_confidence(first: ForecastConfidence, second: ForecastConfidence) -> ForecastConfidence:
    """The lower of two confidences."""
    return min(first, second, key=_CONFIDENCE_ORDER.__getitem__)


# =============================================================================
# Forecast
# =============================================================================

def get_forecast_horizons(months_ahead: int) -> List[int]:
    return sorted({h for h in (*FORECAST_HORIZONS, months_ahead) if h <= months_ahead})


def generate_forecast(
    trend: Sequence[TrendDataPoint],
    months_ahead: Optional[int] = None,
) -> Optional[ForecastResult]:
    """
    Forecast satisfaction and loyalty from a trend series.

    Args:
        trend: Trend points from calculate_trend_data
        months_ahead: Furthest horizon in months (default from settings)

    Returns:
        ForecastResult, or None with fewer than two trend points

    Raises:
        ValueError: If months_ahead is below 1
    """
    if months_ahead is None:
        months_ahead = get_settings().forecast_months_ahead
    if months_ahead < 1:
        raise ValueError(f"months_ahead must be at least 1, got {months_ahead}")

    if len(trend) < 2:
        logger.info(f"Not enough trend points to forecast ({len(trend)})")
        return None

    ordered = sorted(trend, key=lambda t: t.dateObj)
    first_date = ordered[0].dateObj
    last_date = ordered[-1].dateObj
    xs = [(t.dateObj - first_date).days for t in ordered]

    satisfaction = linear_regression(xs, [t.averageSatisfaction for t in ordered])
    loyalty = linear_regression(xs, [t.averageLoyalty for t in ordered])

    satisfaction_confidence = calculate_confidence(
        satisfaction.rSquared, satisfaction.pointCount, satisfaction.isDegenerate
    )
    loyalty_confidence = calculate_confidence(
        loyalty.rSquared, loyalty.pointCount, loyalty.isDegenerate
    )
    confidence = combine_confidence(satisfaction_confidence, loyalty_confidence)

    forecast: List[ForecastPoint] = []
    for months in get_forecast_horizons(months_ahead):
        # DateOffset clamps Jan 31 + 1 month to the end of February
        target = (pd.Timestamp(last_date) + pd.DateOffset(months=months)).date()
        x = (target - first_date).days
        forecast.append(ForecastPoint(
            date=target.isoformat(),
            dateObj=target,
            monthsAhead=months,
            forecastedSatisfaction=round(satisfaction.slope * x + satisfaction.intercept, 2),
            forecastedLoyalty=round(loyalty.slope * x + loyalty.intercept, 2),
            confidence=confidence,
        ))

    if satisfaction.isDegenerate or loyalty.isDegenerate:
        logger.warning("Forecast regression is degenerate: all trend points share one date")

    return ForecastResult(
        forecast=forecast,
        satisfactionRegression=satisfaction,
        loyaltyRegression=loyalty,
        satisfactionConfidence=satisfaction_confidence,
        loyaltyConfidence=loyalty_confidence,
        confidence=confidence,
        trendSlope=TrendSlope(satisfaction=satisfaction.slope, loyalty=loyalty.slope),
    )


__all__ = [
    'linear_regression',
    'calculate_confidence',
    'combine_confidence',
    'get_forecast_horizons',
    'generate_forecast',
]

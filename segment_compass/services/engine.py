"""
Segmentation Engine

Host-facing facade that binds one immutable SegmentationConfig and exposes
every analysis through the same classifier instance. Build a new engine
when the configuration changes; nothing is cached between calls.

Usage:
    engine = SegmentationEngine(config)
    engine.classify(point)
    timelines = engine.group_by_customer(points)
    trend = engine.calculate_trend_data(timelines)
    forecast = engine.generate_forecast(trend)
"""

from typing import Dict, Iterable, List, Optional, Sequence

from segment_compass.models.enums import Segment
from segment_compass.models.schemas import (
    CustomerTimeline,
    DataPoint,
    ForecastResult,
    MovementStats,
    PeriodComparison,
    ProximityAnalysisResult,
    ScaleViolation,
    SegmentationConfig,
    TrendDataPoint,
)
from segment_compass.services.forecast import generate_forecast
from segment_compass.services.historical_analysis import (
    calculate_period_comparison,
    calculate_quadrant_movements,
    calculate_trend_data,
)
from segment_compass.services.proximity import analyze_proximity
from segment_compass.services.quadrant_assignment import (
    build_classifier,
    calculate_distribution,
    filter_points_by_segment,
)
from segment_compass.services.scales import find_out_of_scale_points
from segment_compass.services.timeline import group_by_customer


class SegmentationEngine:
    """All engine operations bound to one configuration and one classifier."""

    def __init__(self, config: SegmentationConfig):
        self.config = config
        self.classify = build_classifier(config)

    def validate(self, points: Iterable[DataPoint]) -> List[ScaleViolation]:
        return find_out_of_scale_points(points, self.config)

    def distribution(self, points: Iterable[DataPoint]) -> Dict[Segment, int]:
        return calculate_distribution(points, self.classify)

    def filter_by_segment(self, points: Iterable[DataPoint], segments: Iterable[Segment]) -> List[DataPoint]:
        return filter_points_by_segment(points, segments, self.classify)

    def analyze_proximity(
        self,
        points: Iterable[DataPoint],
        threshold: Optional[float] = None,
        special_zone_threshold: Optional[float] = None,
        include_neutral: Optional[bool] = None,
    ) -> ProximityAnalysisResult:
        return analyze_proximity(
            points,
            self.classify,
            self.config,
            threshold=threshold,
            special_zone_threshold=special_zone_threshold,
            include_neutral=include_neutral,
        )

    def group_by_customer(
        self,
        points: Iterable[DataPoint],
        date_format: Optional[str] = None,
    ) -> List[CustomerTimeline]:
        return group_by_customer(points, date_format)

    def calculate_trend_data(
        self,
        timelines: Iterable[CustomerTimeline],
        date_format: Optional[str] = None,
    ) -> List[TrendDataPoint]:
        return calculate_trend_data(timelines, date_format)

    def calculate_quadrant_movements(
        self,
        timelines: Iterable[CustomerTimeline],
        date_format: Optional[str] = None,
    ) -> MovementStats:
        return calculate_quadrant_movements(timelines, self.classify, date_format)

    def calculate_period_comparison(self, trend: List[TrendDataPoint]) -> Optional[PeriodComparison]:
        return calculate_period_comparison(trend)

    def generate_forecast(
        self,
        trend: Sequence[TrendDataPoint],
        months_ahead: Optional[int] = None,
    ) -> Optional[ForecastResult]:
        return generate_forecast(trend, months_ahead)

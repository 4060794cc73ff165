"""
Models package for the Segment Compass engine.

Re-exports the enums and Pydantic schemas so callers can write:

    from segment_compass.models import DataPoint, SegmentationConfig, Segment
"""

# =============================================================================
# Enums
# =============================================================================
from segment_compass.models.enums import (
    ForecastConfidence,
    IdentifierType,
    MovementDirection,
    RelationshipKind,
    RiskLevel,
    ScaleFormat,
    Segment,
    StrategicValue,
)

# =============================================================================
# Schemas
# =============================================================================
from segment_compass.models.schemas import (
    ClassificationResponse,
    CrossroadsCustomer,
    CustomerProximity,
    CustomerTimeline,
    DataPoint,
    ForecastPoint,
    ForecastResult,
    HierarchicalClassification,
    HistoryRequest,
    Midpoint,
    MovementCustomer,
    MovementStats,
    PeriodComparison,
    PointClassification,
    ProximityAnalysisResult,
    ProximityDetail,
    ProximityIndicator,
    ProximitySettings,
    ProximitySummary,
    QuadrantMovement,
    RegressionResult,
    RelationshipKey,
    ScaleBounds,
    ScaleViolation,
    SegmentationConfig,
    SegmentationRequest,
    SegmentDistribution,
    TrendDataPoint,
    TrendSlope,
    ZoneBounds,
)

__all__ = [
    # Enums
    "ForecastConfidence",
    "IdentifierType",
    "MovementDirection",
    "RelationshipKind",
    "RiskLevel",
    "ScaleFormat",
    "Segment",
    "StrategicValue",
    # Core domain
    "DataPoint",
    "Midpoint",
    "ScaleBounds",
    "ZoneBounds",
    "SegmentationConfig",
    # Classification
    "ScaleViolation",
    "HierarchicalClassification",
    "PointClassification",
    "SegmentDistribution",
    "ClassificationResponse",
    # Proximity
    "RelationshipKey",
    "CustomerProximity",
    "ProximityDetail",
    "ProximityIndicator",
    "ProximitySummary",
    "CrossroadsCustomer",
    "ProximitySettings",
    "ProximityAnalysisResult",
    # Historical
    "CustomerTimeline",
    "TrendDataPoint",
    "MovementCustomer",
    "QuadrantMovement",
    "MovementStats",
    "PeriodComparison",
    # Forecast
    "RegressionResult",
    "TrendSlope",
    "ForecastPoint",
    "ForecastResult",
    # Requests
    "SegmentationRequest",
    "HistoryRequest",
]

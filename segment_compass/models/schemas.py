"""
Pydantic request/response models for the Segment Compass engine.

This module provides type-safe validation and serialization for every contract
exchanged with the engine: survey data points, the immutable segmentation
configuration, classification output, proximity analysis, customer timelines,
trends, movements and forecasts.

Field names are camelCase to match the dashboard payloads. All models use
Pydantic v2 syntax.
"""

from datetime import date as DateType
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

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
# Core Domain Models
# =============================================================================


class DataPoint(BaseModel):
    """
    One survey response plotted on the satisfaction/loyalty plane.

    Extra attributes carried by the upload (segment labels, custom columns)
    are preserved untouched.
    """
    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "id": "CUST-001",
                "name": "Ada",
                "email": "ada@example.com",
                "satisfaction": 4,
                "loyalty": 4,
                "date": "2024-01-15",
                "dateFormat": "yyyy-MM-dd",
                "excluded": False,
                "group": "default"
            }
        }
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Unique identifier of the response"
    )
    name: str = Field(
        default="",
        description="Display name of the respondent"
    )
    email: Optional[str] = Field(
        default=None,
        description="Respondent email, preferred key for customer timelines"
    )
    satisfaction: float = Field(
        ...,
        description="Satisfaction rating on the configured scale"
    )
    loyalty: float = Field(
        ...,
        description="Loyalty rating on the configured scale"
    )
    date: Optional[str] = Field(
        default=None,
        description="Free-text survey date"
    )
    dateFormat: Optional[str] = Field(
        default=None,
        description="Hint for parsing the date (dd/MM/yyyy, MM/dd/yyyy, yyyy-MM-dd)"
    )
    excluded: bool = Field(
        default=False,
        description="Excluded points are ignored by every analysis"
    )
    group: str = Field(
        default="default",
        description="Upload group the response belongs to"
    )


class Midpoint(BaseModel):
    """Quadrant-splitting midpoint."""
    model_config = ConfigDict(frozen=True)

    sat: float = Field(..., description="Satisfaction coordinate")
    loy: float = Field(..., description="Loyalty coordinate")


class ScaleBounds(BaseModel):
    """Inclusive bounds of a rating scale."""
    model_config = ConfigDict(frozen=True)

    minValue: float
    maxValue: float

    @property
    def span(self) -> float:
        return self.maxValue - self.minValue


class ZoneBounds(BaseModel):
    """
    Axis-aligned, inclusive rectangle of a special zone.

    For near_apostles this is the outer rectangle; the apostles rectangle is
    carved out of it during classification.
    """
    model_config = ConfigDict(frozen=True)

    minSat: float
    maxSat: float
    minLoy: float
    maxLoy: float

    def contains(self, sat: float, loy: float) -> bool:
        return (
            self.minSat <= sat <= self.maxSat
            and self.minLoy <= loy <= self.maxLoy
        )


class SegmentationConfig(BaseModel):
    """
    Immutable configuration every engine operation runs against.

    The midpoint defaults to the centre of both scales. Zone sizes are in
    absolute scale units. When special zones are enabled, each enabled zone
    must lie entirely inside its parent quadrant.

    manualAssignments keys are either a point id or the position-specific
    key "<id>_<satisfaction>_<loyalty>"; the latter wins.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "satisfactionScale": "1-5",
                "loyaltyScale": "1-5",
                "midpoint": {"sat": 3, "loy": 3},
                "apostlesZoneSize": 1,
                "terroristsZoneSize": 1,
                "showSpecialZones": True,
                "showNearApostles": False,
                "manualAssignments": {"CUST-007": "hostages"}
            }
        }
    )

    satisfactionScale: ScaleFormat = Field(
        default=ScaleFormat.ONE_TO_FIVE,
        description="Rating scale of the satisfaction axis"
    )
    loyaltyScale: ScaleFormat = Field(
        default=ScaleFormat.ONE_TO_FIVE,
        description="Rating scale of the loyalty axis"
    )
    midpoint: Midpoint = Field(
        ...,
        description="Quadrant-splitting midpoint, defaults to the scale centre"
    )
    apostlesZoneSize: float = Field(
        default=1,
        gt=0,
        description="Side of the apostles square in scale units"
    )
    terroristsZoneSize: float = Field(
        default=1,
        gt=0,
        description="Side of the terrorists square in scale units"
    )
    showSpecialZones: bool = Field(
        default=False,
        description="Enable apostles and terrorists zones"
    )
    showNearApostles: bool = Field(
        default=False,
        description="Enable the near-apostles band (requires special zones)"
    )
    manualAssignments: Dict[str, Segment] = Field(
        default_factory=dict,
        description="Manual segment overrides keyed by point id or position key"
    )

    @model_validator(mode="before")
    @classmethod
    def _default_midpoint(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("midpoint") is None:
            sat_scale = ScaleFormat(data.get("satisfactionScale", ScaleFormat.ONE_TO_FIVE))
            loy_scale = ScaleFormat(data.get("loyaltyScale", ScaleFormat.ONE_TO_FIVE))
            data = {
                **data,
                "midpoint": {
                    "sat": (sat_scale.minimum + sat_scale.maximum) / 2,
                    "loy": (loy_scale.minimum + loy_scale.maximum) / 2,
                },
            }
        return data

    @model_validator(mode="after")
    def _check_geometry(self) -> "SegmentationConfig":
        sat_scale, loy_scale = self.satisfactionScale, self.loyaltyScale
        mid = self.midpoint

        if not sat_scale.minimum <= mid.sat <= sat_scale.maximum:
            raise ValueError(
                f"midpoint satisfaction {mid.sat} outside scale {sat_scale.value}"
            )
        if not loy_scale.minimum <= mid.loy <= loy_scale.maximum:
            raise ValueError(
                f"midpoint loyalty {mid.loy} outside scale {loy_scale.value}"
            )

        if not self.showSpecialZones:
            return self

        # Zones are carved out of their parent quadrant and may never cross it
        apostles_sat = sat_scale.maximum - self.apostlesZoneSize
        apostles_loy = loy_scale.maximum - self.apostlesZoneSize
        if apostles_sat < mid.sat or apostles_loy < mid.loy:
            raise ValueError(
                f"apostles zone of size {self.apostlesZoneSize} extends past the midpoint"
            )
        if self.showNearApostles and (apostles_sat - 1 < mid.sat or apostles_loy - 1 < mid.loy):
            raise ValueError(
                "near-apostles band extends past the midpoint"
            )

        terrorists_sat = sat_scale.minimum + self.terroristsZoneSize
        terrorists_loy = loy_scale.minimum + self.terroristsZoneSize
        if terrorists_sat >= mid.sat or terrorists_loy >= mid.loy:
            raise ValueError(
                f"terrorists zone of size {self.terroristsZoneSize} reaches the midpoint"
            )

        return self


# =============================================================================
# Classification Output Models
# =============================================================================


class ScaleViolation(BaseModel):
    """A rating that falls outside its configured scale."""
    id: str
    axis: str = Field(..., description="'satisfaction' or 'loyalty'")
    value: float
    minValue: float
    maxValue: float


class HierarchicalClassification(BaseModel):
    """Base quadrant of a point plus the special zone it sits in, if any."""
    baseQuadrant: Segment
    specificZone: Optional[Segment] = None


class PointClassification(BaseModel):
    """Classification of a single data point."""
    id: str
    name: str = ""
    satisfaction: float
    loyalty: float
    segment: Segment
    baseQuadrant: Segment
    specificZone: Optional[Segment] = None
    isManual: bool = Field(
        default=False,
        description="True when a manual assignment decided the segment"
    )


class SegmentDistribution(BaseModel):
    """Per-segment counts over the non-excluded points."""
    counts: Dict[Segment, int]
    total: int


class ClassificationResponse(BaseModel):
    """Response for the classify endpoint."""
    results: List[PointClassification]
    distribution: SegmentDistribution


# =============================================================================
# Proximity Models
# =============================================================================


class RelationshipKey(BaseModel):
    """
    Hashable (fromSegment, toSegment) pair identifying a relationship or a
    movement bucket. The string form is for display only.
    """
    model_config = ConfigDict(frozen=True)

    fromSegment: Segment
    toSegment: Segment

    @property
    def key(self) -> str:
        return f"{self.fromSegment.value}_close_to_{self.toSegment.value}"


class CustomerProximity(BaseModel):
    """One point flagged as close to another segment."""
    id: str
    name: str = ""
    satisfaction: float
    loyalty: float
    currentSegment: Segment
    targetSegment: Segment
    distance: float = Field(..., ge=0)
    riskScore: int = Field(..., ge=0, le=100)
    riskLevel: RiskLevel


class ProximityDetail(BaseModel):
    """All customers sharing one relationship key."""
    relationship: str = Field(..., description="Display key '<from>_close_to_<to>'")
    fromSegment: Segment
    toSegment: Segment
    kind: RelationshipKind
    customers: List[CustomerProximity] = Field(
        default_factory=list,
        description="Customers sorted by risk score descending"
    )
    customerCount: int = 0
    positionCount: int = Field(default=0, description="Distinct coordinates")
    averageDistance: float = 0.0
    averageRiskScore: float = 0.0
    riskLevel: RiskLevel = RiskLevel.LOW


class ProximityIndicator(BaseModel):
    """A crisis or opportunity signal raised by a busy relationship."""
    relationship: str
    fromSegment: Segment
    toSegment: Segment
    customerCount: int
    averageRiskScore: float
    riskLevel: RiskLevel


class ProximitySummary(BaseModel):
    totalProximityCustomers: int = 0
    totalRelationships: int = 0
    averageRiskScore: float = 0.0
    crisisIndicators: List[ProximityIndicator] = Field(default_factory=list)
    opportunityIndicators: List[ProximityIndicator] = Field(default_factory=list)


class CrossroadsCustomer(BaseModel):
    """A point close to several segments at once, or sitting on the midpoint."""
    id: str
    name: str = ""
    satisfaction: float
    loyalty: float
    currentSegment: Segment
    relationships: List[Segment] = Field(default_factory=list)
    relationshipCount: int = 0
    maxRiskScore: int = 0
    strategicValue: StrategicValue


class ProximitySettings(BaseModel):
    """Settings echoed back with a proximity analysis."""
    threshold: float
    specialZoneThreshold: float
    showSpecialZones: bool
    showNearApostles: bool
    includeNeutral: bool
    totalCustomers: int
    isAvailable: bool
    unavailabilityReason: Optional[str] = None


class ProximityAnalysisResult(BaseModel):
    """Full proximity analysis."""
    analysis: List[ProximityDetail] = Field(default_factory=list)
    summary: ProximitySummary = Field(default_factory=ProximitySummary)
    crossroads: List[CrossroadsCustomer] = Field(default_factory=list)
    settings: ProximitySettings


# =============================================================================
# Historical Models
# =============================================================================


class CustomerTimeline(BaseModel):
    """
    Chronologically ordered responses of one customer.

    identifier is the trimmed lower-case email when one exists, otherwise the
    point id. dates lists the distinct normalised dates in timeline order.
    """
    identifier: str
    identifierType: IdentifierType
    dataPoints: List[DataPoint]
    dates: List[str]


class TrendDataPoint(BaseModel):
    """Averages of all responses sharing one survey date."""
    date: str
    dateObj: DateType
    averageSatisfaction: float
    averageLoyalty: float
    count: int = Field(..., ge=1)


class MovementCustomer(BaseModel):
    identifier: str
    identifierType: IdentifierType
    fromDate: str
    toDate: str


class QuadrantMovement(BaseModel):
    """All customers who moved from one segment to another."""
    fromSegment: Segment
    toSegment: Segment
    direction: MovementDirection
    count: int = 0
    customers: List[MovementCustomer] = Field(default_factory=list)


class MovementStats(BaseModel):
    """
    Transition statistics across all timelines.

    totalMovements counts every consecutive dated pair, including pairs that
    stayed in the same segment.
    """
    positiveMovements: int = 0
    negativeMovements: int = 0
    neutralMovements: int = 0
    totalMovements: int = 0
    movements: List[QuadrantMovement] = Field(default_factory=list)


class PeriodComparison(BaseModel):
    """First trend point against the last one."""
    period1: TrendDataPoint
    period2: TrendDataPoint
    satisfactionChange: float
    loyaltyChange: float


# =============================================================================
# Forecast Models
# =============================================================================


class RegressionResult(BaseModel):
    """
    Ordinary least squares fit of one metric against elapsed days.

    isDegenerate is set when every x is identical; slope is then 0 and the
    intercept is the mean of y.
    """
    slope: float
    intercept: float
    rSquared: float = Field(..., ge=0, le=1)
    pointCount: int
    isDegenerate: bool = False


class TrendSlope(BaseModel):
    """Slope per day of each metric."""
    satisfaction: float
    loyalty: float


class ForecastPoint(BaseModel):
    date: str = Field(..., description="ISO date of the horizon")
    dateObj: DateType
    monthsAhead: int
    forecastedSatisfaction: float
    forecastedLoyalty: float
    confidence: ForecastConfidence


class ForecastResult(BaseModel):
    """Projected satisfaction and loyalty with per-metric regression quality."""
    forecast: List[ForecastPoint]
    satisfactionRegression: RegressionResult
    loyaltyRegression: RegressionResult
    satisfactionConfidence: ForecastConfidence
    loyaltyConfidence: ForecastConfidence
    confidence: ForecastConfidence = Field(
        ...,
        description="Lower of the two per-metric confidences"
    )
    trendSlope: TrendSlope


# =============================================================================
# API Request Models
# =============================================================================


class SegmentationRequest(BaseModel):
    """Configuration plus the points to analyse."""
    config: SegmentationConfig
    points: List[DataPoint] = Field(default_factory=list)


class HistoryRequest(SegmentationRequest):
    """Segmentation request with an optional date format hint."""
    dateFormat: Optional[str] = Field(
        default=None,
        description="Date format hint applied to every point"
    )

"""
Enumeration definitions for the Segment Compass engine.

All enums inherit from both `str` and `Enum` so that Pydantic models serialize
them as their plain string values in API responses.

- ScaleFormat: supported rating scales for the satisfaction and loyalty axes
- Segment: the seven segments plus the neutral midpoint marker
- RelationshipKind, RiskLevel, StrategicValue: proximity analysis vocabulary
- IdentifierType, MovementDirection: historical movement vocabulary
- ForecastConfidence: regression quality bands
"""

from enum import Enum


class ScaleFormat(str, Enum):
    """
    Supported rating scales.

    Zero-based formats ("0-5", "0-7", "0-10") start at 0, all others at 1.
    The maximum is the number after the dash.
    """
    ONE_TO_THREE = "1-3"
    ONE_TO_FIVE = "1-5"
    ONE_TO_SEVEN = "1-7"
    ONE_TO_TEN = "1-10"
    ZERO_TO_FIVE = "0-5"
    ZERO_TO_SEVEN = "0-7"
    ZERO_TO_TEN = "0-10"

    @property
    def minimum(self) -> int:
        """Lowest rating on the scale."""
        return 0 if self.value.startswith("0-") else 1

    @property
    def maximum(self) -> int:
        """Highest rating on the scale."""
        return int(self.value.split("-", 1)[1])


class Segment(str, Enum):
    """
    Customer segment on the satisfaction/loyalty plane.

    Main quadrants (relative to the midpoint):
    - loyalists: high satisfaction, high loyalty
    - mercenaries: high satisfaction, low loyalty
    - hostages: low satisfaction, high loyalty
    - defectors: low satisfaction, low loyalty

    Special zones (only when enabled):
    - apostles: extreme corner of loyalists
    - near_apostles: one-unit band around apostles
    - terrorists: extreme corner of defectors

    neutral marks a point sitting exactly on the midpoint.
    """
    LOYALISTS = "loyalists"
    MERCENARIES = "mercenaries"
    HOSTAGES = "hostages"
    DEFECTORS = "defectors"
    APOSTLES = "apostles"
    NEAR_APOSTLES = "near_apostles"
    TERRORISTS = "terrorists"
    NEUTRAL = "neutral"


class RelationshipKind(str, Enum):
    """
    How a proximity relationship crosses the plane.

    - lateral: the target quadrant differs on exactly one axis
    - diagonal: the target quadrant differs on both axes
    - zone: source and target share a base quadrant (special zone edges)
    - crossroads: the source sits on the midpoint
    """
    LATERAL = "lateral"
    DIAGONAL = "diagonal"
    ZONE = "zone"
    CROSSROADS = "crossroads"


class RiskLevel(str, Enum):
    """Risk band derived from a 0-100 risk score (>=75 HIGH, >=50 MODERATE)."""
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class StrategicValue(str, Enum):
    """Strategic value of a crossroads customer."""
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class IdentifierType(str, Enum):
    """Which attribute keyed a customer timeline."""
    EMAIL = "email"
    ID = "id"


class MovementDirection(str, Enum):
    """Direction of a segment transition by desirability rank."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ForecastConfidence(str, Enum):
    """
    Confidence band of a regression.

    - high: R^2 >= 0.7 with at least 5 points
    - medium: R^2 >= 0.4 with at least 4 points
    - low: anything else, including fewer than 3 points
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

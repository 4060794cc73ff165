"""
Segment Compass Services

Stateless business logic for the segmentation and movement analytics engine.
Every analysis that needs a segment receives the classifier built by
quadrant_assignment.build_classifier; none re-derives segments itself.

Services:
- scales: Rating scale bounds and out-of-scale detection
- quadrant_assignment: The authoritative classifier and derived views
- distance: Distance from a point to any segment
- proximity: Neighbouring-segment relationships and risk scoring
- timeline: Date parsing and per-customer timelines
- historical_analysis: Trends, segment movements and period comparison
- forecast: Linear regression forecasts
- engine: SegmentationEngine facade bound to one configuration
"""

# =============================================================================
# Scale Service Exports
# =============================================================================

from segment_compass.services.scales import (
    parse_scale,
    get_scale_min,
    get_scale_max,
    is_zero_based_scale,
    get_default_midpoint,
    find_out_of_scale_points,
)

# =============================================================================
# Quadrant Assignment Service Exports
# Single classifier plus distribution, filters and hierarchical views
# =============================================================================

from segment_compass.services.quadrant_assignment import (
    Classifier,
    build_classifier,
    classify_point,
    classify_points,
    get_natural_segment,
    get_point_key,
    get_special_zone_bounds,
    get_active_special_zones,
    get_hierarchical_classification,
    is_point_in_special_zone,
    calculate_distribution,
    filter_points_by_segment,
)

# =============================================================================
# Distance and Proximity Service Exports
# =============================================================================

from segment_compass.services.distance import (
    distance_to_segment,
    is_proximity_available,
)
from segment_compass.services.proximity import (
    analyze_proximity,
    calculate_risk_score,
    get_risk_level,
    get_relationship_kind,
)

# =============================================================================
# Historical Service Exports
# Timelines, trend aggregation, movement detection and forecasting
# =============================================================================

from segment_compass.services.timeline import (
    normalize_date,
    parse_date,
    group_by_customer,
    has_historical_data,
)
from segment_compass.services.historical_analysis import (
    calculate_trend_data,
    calculate_quadrant_movements,
    calculate_period_comparison,
    get_movement_direction,
)
from segment_compass.services.forecast import (
    linear_regression,
    calculate_confidence,
    combine_confidence,
    generate_forecast,
)

# =============================================================================
# Engine Facade
# =============================================================================

from segment_compass.services.engine import SegmentationEngine


__all__ = [
    # ----- Scale Service -----
    'parse_scale',
    'get_scale_min',
    'get_scale_max',
    'is_zero_based_scale',
    'get_default_midpoint',
    'find_out_of_scale_points',
    # ----- Quadrant Assignment Service -----
    'Classifier',
    'build_classifier',
    'classify_point',
    'classify_points',
    'get_natural_segment',
    'get_point_key',
    'get_special_zone_bounds',
    'get_active_special_zones',
    'get_hierarchical_classification',
    'is_point_in_special_zone',
    'calculate_distribution',
    'filter_points_by_segment',
    # ----- Distance / Proximity Services -----
    'distance_to_segment',
    'is_proximity_available',
    'analyze_proximity',
    'calculate_risk_score',
    'get_risk_level',
    'get_relationship_kind',
    # ----- Timeline Service -----
    'normalize_date',
    'parse_date',
    'group_by_customer',
    'has_historical_data',
    # ----- Historical Analysis Service -----
    'calculate_trend_data',
    'calculate_quadrant_movements',
    'calculate_period_comparison',
    'get_movement_direction',
    # ----- Forecast Service -----
    'linear_regression',
    'calculate_confidence',
    'combine_confidence',
    'generate_forecast',
    # ----- Engine -----
    'SegmentationEngine',
]

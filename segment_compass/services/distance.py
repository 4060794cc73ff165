"""
Distance Service

Chebyshev distance from a data point to any segment of the plane, in scale
units. Distance is 0 inside a segment (and on its boundary) and never
increases as a point moves straight toward the segment's interior.

- Main quadrant: max of the per-axis half-plane gaps. One axis has to change
  for a lateral neighbour, both for a diagonal one.
- Special zone: Chebyshev distance to the zone rectangle.
- Neutral: Chebyshev distance to the midpoint.

A point sitting inside an enabled special zone is not inside the quadrant
the zone was carved from; its distance to that quadrant is the exit
distance from the zone.
"""

from typing import Optional, Tuple

from segment_compass.models.enums import Segment
from segment_compass.models.schemas import DataPoint, SegmentationConfig, ZoneBounds
from segment_compass.services.quadrant_assignment import (
    QUADRANT_SIDES,
    get_special_zone_bounds,
)

# Scales narrower than this leave no room for a "near the boundary" band
MIN_PROXIMITY_SCALE_SPAN = 4


def _rectangle_distance(sat: float, loy: float, bounds: ZoneBounds) -> float:
    gap_sat = max(bounds.minSat - sat, sat - bounds.maxSat, 0.0)
    gap_loy = max(bounds.minLoy - loy, loy - bounds.maxLoy, 0.0)
    return max(gap_sat, gap_loy)


def _exit_toward_inner_corner(sat: float, loy: float, bounds: ZoneBounds) -> float:
    # Top-right corner zones are left through their lower-left edges
    return max(min(sat - bounds.minSat, loy - bounds.minLoy), 0.0)


def _exit_toward_outer_corner(sat: float, loy: float, bounds: ZoneBounds) -> float:
    # Bottom-left corner zones are left through their upper-right edges
    return max(min(bounds.maxSat - sat, bounds.maxLoy - loy), 0.0)


def _carved_zone_exit(sat: float, loy: float, quadrant: Segment, config: SegmentationConfig) -> Optional[float]:
    """Exit distance when the point sits in an enabled zone carved out of `quadrant`."""
    if not config.showSpecialZones:
        return None

    if quadrant == Segment.LOYALISTS:
        apostles = get_special_zone_bounds(Segment.APOSTLES, config)
        outer = get_special_zone_bounds(Segment.NEAR_APOSTLES, config)
        if config.showNearApostles:
            # Leaving apostles toward loyalists crosses the near-apostles band
            if outer.contains(sat, loy):
                return _exit_toward_inner_corner(sat, loy, outer)
        elif apostles.contains(sat, loy):
            return _exit_toward_inner_corner(sat, loy, apostles)
    elif quadrant == Segment.DEFECTORS:
        terrorists = get_special_zone_bounds(Segment.TERRORISTS, config)
        if terrorists.contains(sat, loy):
            return _exit_toward_outer_corner(sat, loy, terrorists)

    return None


def distance_to_segment(point: DataPoint, segment: Segment, config: SegmentationConfig) -> float:
    """
    Distance from a point to a segment.

    Args:
        point: The data point
        segment: Target segment
        config: Segmentation configuration supplying midpoint and zones

    Returns:
        Non-negative distance in scale units, 0 when already inside
    """
    sat, loy = point.satisfaction, point.loyalty
    mid = config.midpoint

    if segment == Segment.NEUTRAL:
        return max(abs(sat - mid.sat), abs(loy - mid.loy))

    if segment in QUADRANT_SIDES:
        high_sat, high_loy = QUADRANT_SIDES[segment]
        gap_sat = max(mid.sat - sat, 0.0) if high_sat else max(sat - mid.sat, 0.0)
        gap_loy = max(mid.loy - loy, 0.0) if high_loy else max(loy - mid.loy, 0.0)
        distance = max(gap_sat, gap_loy)
        if distance == 0:
            exit_distance = _carved_zone_exit(sat, loy, segment, config)
            if exit_distance is not None:
                return exit_distance
        return distance

    bounds = get_special_zone_bounds(segment, config)
    if segment == Segment.NEAR_APOSTLES:
        apostles = get_special_zone_bounds(Segment.APOSTLES, config)
        if apostles.contains(sat, loy):
            return _exit_toward_inner_corner(sat, loy, apostles)
    return _rectangle_distance(sat, loy, bounds)


def is_proximity_available(config: SegmentationConfig) -> Tuple[bool, Optional[str]]:
    """
    Whether proximity analysis is meaningful for the configured scales.

    Returns:
        (available, reason) where reason explains an unavailable analysis
    """
    for axis, scale in (("satisfaction", config.satisfactionScale), ("loyalty", config.loyaltyScale)):
        if scale.maximum - scale.minimum < MIN_PROXIMITY_SCALE_SPAN:
            return False, (
                f"Proximity analysis needs a scale spanning at least "
                f"{MIN_PROXIMITY_SCALE_SPAN} points; {axis} uses {scale.value}"
            )
    return True, None


__all__ = [
    'MIN_PROXIMITY_SCALE_SPAN',
    'distance_to_segment',
    'is_proximity_available',
]

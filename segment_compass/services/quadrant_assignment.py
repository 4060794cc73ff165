"""
Quadrant Assignment Service

The authoritative segment classifier. Every consumer (distribution counts,
filters, proximity analysis, movement analysis, the API) classifies through
classify_point, usually via the callable returned by build_classifier, so
that displayed counts and derived analytics can never disagree.

Classification order:
1. Manual assignment (position key "<id>_<sat>_<loy>" first, then the id)
2. Exact midpoint -> neutral
3. Main quadrant from >= / < comparisons against the midpoint
4. Special zones, only reachable from their parent quadrant:
   - loyalists inside the apostles square -> apostles
   - loyalists inside the one-unit band around apostles -> near_apostles
   - defectors inside the terrorists square -> terrorists
"""

import logging
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional

from segment_compass.models.enums import Segment
from segment_compass.models.schemas import (
    DataPoint,
    HierarchicalClassification,
    Midpoint,
    PointClassification,
    SegmentationConfig,
    ZoneBounds,
)

logger = logging.getLogger(__name__)

Classifier = Callable[[DataPoint], Segment]


# =============================================================================
# Segment Geometry
# =============================================================================

MAIN_QUADRANTS = (
    Segment.LOYALISTS,
    Segment.MERCENARIES,
    Segment.HOSTAGES,
    Segment.DEFECTORS,
)

SPECIAL_ZONES = (
    Segment.APOSTLES,
    Segment.NEAR_APOSTLES,
    Segment.TERRORISTS,
)

# Quadrant each special zone is carved out of
PARENT_QUADRANT: Dict[Segment, Segment] = {
    Segment.APOSTLES: Segment.LOYALISTS,
    Segment.NEAR_APOSTLES: Segment.LOYALISTS,
    Segment.TERRORISTS: Segment.DEFECTORS,
}

# Side of each main quadrant relative to the midpoint: (high satisfaction, high loyalty)
QUADRANT_SIDES: Dict[Segment, tuple] = {
    Segment.LOYALISTS: (True, True),
    Segment.MERCENARIES: (True, False),
    Segment.HOSTAGES: (False, True),
    Segment.DEFECTORS: (False, False),
}


def get_base_quadrant(segment: Segment) -> Segment:
    """Main quadrant a segment belongs to; main quadrants and neutral map to themselves."""
    return PARENT_QUADRANT.get(segment, segment)


def get_active_special_zones(config: SegmentationConfig) -> List[Segment]:
    """Special zones enabled by the configuration, in display order."""
    if not config.showSpecialZones:
        return []
    zones = [Segment.APOSTLES]
    if config.showNearApostles:
        zones.append(Segment.NEAR_APOSTLES)
    zones.append(Segment.TERRORISTS)
    return zones


def get_special_zone_bounds(segment: Segment, config: SegmentationConfig) -> Optional[ZoneBounds]:
    """
    Inclusive rectangle of a special zone.

    For near_apostles the outer rectangle is returned; it includes the
    apostles square, which classification carves back out.

    Returns:
        ZoneBounds, or None for segments that are not special zones
    """
    sat_min = config.satisfactionScale.minimum
    sat_max = config.satisfactionScale.maximum
    loy_min = config.loyaltyScale.minimum
    loy_max = config.loyaltyScale.maximum

    if segment == Segment.APOSTLES:
        size = config.apostlesZoneSize
        return ZoneBounds(minSat=sat_max - size, maxSat=sat_max, minLoy=loy_max - size, maxLoy=loy_max)
    if segment == Segment.NEAR_APOSTLES:
        size = config.apostlesZoneSize + 1
        return ZoneBounds(minSat=sat_max - size, maxSat=sat_max, minLoy=loy_max - size, maxLoy=loy_max)
    if segment == Segment.TERRORISTS:
        size = config.terroristsZoneSize
        return ZoneBounds(minSat=sat_min, maxSat=sat_min + size, minLoy=loy_min, maxLoy=loy_min + size)
    return None


# =============================================================================
# Classification
# =============================================================================

def _format_coordinate(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def get_point_key(point: DataPoint) -> str:
    """Position-specific key used to override one entry of a repeated customer."""
    return f"{point.id}_{_format_coordinate(point.satisfaction)}_{_format_coordinate(point.loyalty)}"


def get_manual_assignment(point: DataPoint, config: SegmentationConfig) -> Optional[Segment]:
    assignments = config.manualAssignments
    if not assignments:
        return None
    return assignments.get(get_point_key(point)) or assignments.get(point.id)


def _main_quadrant(satisfaction: float, loyalty: float, midpoint: Midpoint) -> Segment:
    if satisfaction >= midpoint.sat:
        return Segment.LOYALISTS if loyalty >= midpoint.loy else Segment.MERCENARIES
    return Segment.HOSTAGES if loyalty >= midpoint.loy else Segment.DEFECTORS


def get_natural_segment(point: DataPoint, config: SegmentationConfig) -> Segment:
    """
    Geometric segment of a point, ignoring manual assignments.

    Args:
        point: The data point to place
        config: Segmentation configuration

    Returns:
        The segment the point's coordinates fall into
    """
    sat, loy = point.satisfaction, point.loyalty
    mid = config.midpoint

    if sat == mid.sat and loy == mid.loy:
        return Segment.NEUTRAL

    quadrant = _main_quadrant(sat, loy, mid)
    if not config.showSpecialZones:
        return quadrant

    if quadrant == Segment.LOYALISTS:
        if get_special_zone_bounds(Segment.APOSTLES, config).contains(sat, loy):
            return Segment.APOSTLES
        if config.showNearApostles and get_special_zone_bounds(Segment.NEAR_APOSTLES, config).contains(sat, loy):
            return Segment.NEAR_APOSTLES
    elif quadrant == Segment.DEFECTORS:
        if get_special_zone_bounds(Segment.TERRORISTS, config).contains(sat, loy):
            return Segment.TERRORISTS

    return quadrant


def classify_point(point: DataPoint, config: SegmentationConfig) -> Segment:
    """
    Classify a data point into exactly one segment.

    A manual assignment wins over geometry; no further computation happens
    for overridden points.
    """
    manual = get_manual_assignment(point, config)
    if manual is not None:
        return manual
    return get_natural_segment(point, config)


def build_classifier(config: SegmentationConfig) -> Classifier:
    """
    Bind classify_point to one configuration.

    The returned callable is the classifier injected into every downstream
    analysis for that configuration.
    """
    return partial(classify_point, config=config)


# =============================================================================
# Derived Views
# =============================================================================

def get_hierarchical_classification(point: DataPoint, classify: Classifier) -> HierarchicalClassification:
    """Split a classification into its base quadrant and special zone."""
    segment = classify(point)
    if segment in PARENT_QUADRANT:
        return HierarchicalClassification(baseQuadrant=PARENT_QUADRANT[segment], specificZone=segment)
    return HierarchicalClassification(baseQuadrant=segment)


def is_point_in_special_zone(point: DataPoint, classify: Classifier) -> bool:
    return classify(point) in PARENT_QUADRANT


def calculate_distribution(points: Iterable[DataPoint], classify: Classifier) -> Dict[Segment, int]:
    """
    Count non-excluded points per segment.

    Every segment is present in the result, zero when empty, so callers can
    render a stable legend.
    """
    counts: Dict[Segment, int] = {segment: 0 for segment in Segment}
    for point in points:
        if point.excluded:
            continue
        counts[classify(point)] += 1
    return counts


def filter_points_by_segment(
    points: Iterable[DataPoint],
    segments: Iterable[Segment],
    classify: Classifier,
) -> List[DataPoint]:
    """Non-excluded points whose segment is one of `segments`."""
    wanted = set(segments)
    return [p for p in points if not p.excluded and classify(p) in wanted]


def classify_points(points: Iterable[DataPoint], config: SegmentationConfig) -> List[PointClassification]:
    """
    Classify every point, excluded ones included, for display.

    Args:
        points: Points to classify
        config: Segmentation configuration

    Returns:
        One PointClassification per point in input order
    """
    classify = build_classifier(config)
    results: List[PointClassification] = []
    for point in points:
        hierarchy = get_hierarchical_classification(point, classify)
        results.append(PointClassification(
            id=point.id,
            name=point.name,
            satisfaction=point.satisfaction,
            loyalty=point.loyalty,
            segment=hierarchy.specificZone or hierarchy.baseQuadrant,
            baseQuadrant=hierarchy.baseQuadrant,
            specificZone=hierarchy.specificZone,
            isManual=get_manual_assignment(point, config) is not None,
        ))
    logger.debug(f"Classified {len(results)} points")
    return results


__all__ = [
    'Classifier',
    'MAIN_QUADRANTS',
    'SPECIAL_ZONES',
    'PARENT_QUADRANT',
    'QUADRANT_SIDES',
    'get_base_quadrant',
    'get_active_special_zones',
    'get_special_zone_bounds',
    'get_point_key',
    'get_manual_assignment',
    'get_natural_segment',
    'classify_point',
    'build_classifier',
    'get_hierarchical_classification',
    'is_point_in_special_zone',
    'calculate_distribution',
    'filter_points_by_segment',
    'classify_points',
]

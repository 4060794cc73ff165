"""
Proximity Analysis Service

Flags customers who sit close to a neighbouring segment and scores how
likely they are to cross. The analysis is a pure function of its inputs:
the same points, classifier and configuration always produce the same
relationships, scores and ordering.

Relationship kinds:
- lateral: target quadrant differs from the own quadrant on one axis
- diagonal: target quadrant differs on both axes
- zone: source and target share a base quadrant (e.g. loyalists -> apostles)
- crossroads: the customer sits exactly on the midpoint

Risk score:
    risk = round(100 * (1 - distance / (threshold + 1))), clamped to [0, 100]

A customer on a boundary (distance 0) scores 100. With the default
thresholds a main quadrant neighbour at the threshold scores 33 and a
special zone neighbour at its threshold scores 50.

Risk bands: >= 75 HIGH, 50-74 MODERATE, < 50 LOW.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional

from segment_compass.core.config import get_settings
from segment_compass.models.enums import (
    RelationshipKind,
    RiskLevel,
    Segment,
    StrategicValue,
)
from segment_compass.models.schemas import (
    CrossroadsCustomer,
    CustomerProximity,
    DataPoint,
    ProximityAnalysisResult,
    ProximityDetail,
    ProximityIndicator,
    ProximitySettings,
    ProximitySummary,
    RelationshipKey,
    SegmentationConfig,
)
from segment_compass.services.distance import distance_to_segment, is_proximity_available
from segment_compass.services.quadrant_assignment import (
    Classifier,
    MAIN_QUADRANTS,
    QUADRANT_SIDES,
    SPECIAL_ZONES,
    get_active_special_zones,
    get_base_quadrant,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

HIGH_RISK_SCORE = 75
MODERATE_RISK_SCORE = 50

# Relationships that signal customers about to slip
CRISIS_RELATIONSHIPS = frozenset({
    RelationshipKey(fromSegment=Segment.LOYALISTS, toSegment=Segment.MERCENARIES),
    RelationshipKey(fromSegment=Segment.LOYALISTS, toSegment=Segment.DEFECTORS),
    RelationshipKey(fromSegment=Segment.MERCENARIES, toSegment=Segment.DEFECTORS),
    RelationshipKey(fromSegment=Segment.HOSTAGES, toSegment=Segment.DEFECTORS),
    RelationshipKey(fromSegment=Segment.APOSTLES, toSegment=Segment.LOYALISTS),
})

# Relationships that signal customers about to improve
OPPORTUNITY_RELATIONSHIPS = frozenset({
    RelationshipKey(fromSegment=Segment.MERCENARIES, toSegment=Segment.LOYALISTS),
    RelationshipKey(fromSegment=Segment.HOSTAGES, toSegment=Segment.LOYALISTS),
    RelationshipKey(fromSegment=Segment.DEFECTORS, toSegment=Segment.LOYALISTS),
    RelationshipKey(fromSegment=Segment.LOYALISTS, toSegment=Segment.APOSTLES),
    RelationshipKey(fromSegment=Segment.NEAR_APOSTLES, toSegment=Segment.APOSTLES),
})

_STRATEGIC_ORDER = {
    StrategicValue.HIGH: 0,
    StrategicValue.MODERATE: 1,
    StrategicValue.LOW: 2,
}


class _Candidate(NamedTuple):
    target: Segment
    distance: float
    threshold: float


# =============================================================================
# Scoring
# =============================================================================

def calculate_risk_score(distance: float, threshold: float) -> int:
    """
    Map a distance to a 0-100 risk score.

    Args:
        distance: Distance to the target segment (>= 0)
        threshold: Threshold the relationship was flagged against

    Returns:
        100 at distance 0, non-increasing in distance
    """
    score = round(100 * (1 - distance / (threshold + 1)))
    return int(min(max(score, 0), 100))


def get_risk_level(score: float) -> RiskLevel:
    if score >= HIGH_RISK_SCORE:
        return RiskLevel.HIGH
    if score >= MODERATE_RISK_SCORE:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def get_relationship_kind(from_segment: Segment, to_segment: Segment) -> RelationshipKind:
    """Classify a relationship by how its base quadrants differ."""
    if from_segment == Segment.NEUTRAL:
        return RelationshipKind.CROSSROADS

    from_base = get_base_quadrant(from_segment)
    to_base = get_base_quadrant(to_segment)
    if from_base == to_base:
        return RelationshipKind.ZONE

    from_sides = QUADRANT_SIDES[from_base]
    to_sides = QUADRANT_SIDES[to_base]
    differing = sum(1 for a, b in zip(from_sides, to_sides) if a != b)
    return RelationshipKind.DIAGONAL if differing == 2 else RelationshipKind.LATERAL


def get_strategic_value(segment: Segment, relationship_count: int, max_risk_score: int) -> StrategicValue:
    # A midpoint customer is one step from every quadrant
    if segment == Segment.NEUTRAL:
        return StrategicValue.HIGH
    if relationship_count >= 3 or (relationship_count >= 2 and max_risk_score >= HIGH_RISK_SCORE):
        return StrategicValue.HIGH
    if relationship_count >= 2 and max_risk_score >= MODERATE_RISK_SCORE:
        return StrategicValue.MODERATE
    return StrategicValue.LOW


# =============================================================================
# Analysis
# =============================================================================

def _find_candidates(
    point: DataPoint,
    own_segment: Segment,
    config: SegmentationConfig,
    zones: List[Segment],
    threshold: float,
    zone_threshold: float,
    include_neutral: bool,
) -> List[_Candidate]:
    candidates: List[_Candidate] = []

    if own_segment == Segment.NEUTRAL:
        if not include_neutral:
            return candidates
        for quadrant in MAIN_QUADRANTS:
            candidates.append(_Candidate(quadrant, 0.0, threshold))
        for zone in zones:
            distance = distance_to_segment(point, zone, config)
            if distance <= zone_threshold:
                candidates.append(_Candidate(zone, distance, zone_threshold))
        return candidates

    for target in list(MAIN_QUADRANTS) + zones:
        if target == own_segment:
            continue
        limit = zone_threshold if target in SPECIAL_ZONES else threshold
        distance = distance_to_segment(point, target, config)
        if distance <= limit:
            candidates.append(_Candidate(target, distance, limit))
    return candidates


def _build_detail(key: RelationshipKey, customers: List[CustomerProximity]) -> ProximityDetail:
    ordered = sorted(customers, key=lambda c: -c.riskScore)
    count = len(ordered)
    average_risk = round(sum(c.riskScore for c in ordered) / count, 2)
    return ProximityDetail(
        relationship=key.key,
        fromSegment=key.fromSegment,
        toSegment=key.toSegment,
        kind=get_relationship_kind(key.fromSegment, key.toSegment),
        customers=ordered,
        customerCount=count,
        positionCount=len({(c.satisfaction, c.loyalty) for c in ordered}),
        averageDistance=round(sum(c.distance for c in ordered) / count, 2),
        averageRiskScore=average_risk,
        riskLevel=get_risk_level(average_risk),
    )


def _build_indicators(
    details: List[ProximityDetail],
    relationships: frozenset,
    min_customers: int,
) -> List[ProximityIndicator]:
    indicators = []
    for detail in details:
        key = RelationshipKey(fromSegment=detail.fromSegment, toSegment=detail.toSegment)
        if key in relationships and detail.customerCount >= min_customers:
            indicators.append(ProximityIndicator(
                relationship=detail.relationship,
                fromSegment=detail.fromSegment,
                toSegment=detail.toSegment,
                customerCount=detail.customerCount,
                averageRiskScore=detail.averageRiskScore,
                riskLevel=detail.riskLevel,
            ))
    return indicators


def analyze_proximity(
    points: Iterable[DataPoint],
    classify: Classifier,
    config: SegmentationConfig,
    threshold: Optional[float] = None,
    special_zone_threshold: Optional[float] = None,
    include_neutral: Optional[bool] = None,
) -> ProximityAnalysisResult:
    """
    Find customers close to neighbouring segments.

    Args:
        points: Data points; excluded points are skipped
        classify: The configuration's classifier (see build_classifier)
        config: Segmentation configuration for distance geometry
        threshold: Main quadrant threshold (default from settings)
        special_zone_threshold: Special zone threshold (default from settings)
        include_neutral: Relate midpoint customers to all four quadrants
            (default from settings)

    Returns:
        ProximityAnalysisResult with per-relationship details, a summary,
        crossroads customers and the settings used
    """
    settings = get_settings()
    if threshold is None:
        threshold = settings.proximity_threshold
    if special_zone_threshold is None:
        special_zone_threshold = settings.special_zone_proximity_threshold
    if include_neutral is None:
        include_neutral = settings.include_neutral_in_proximity
    if threshold < 0 or special_zone_threshold < 0:
        raise ValueError("Proximity thresholds must be non-negative")

    active_points = [p for p in points if not p.excluded]
    available, reason = is_proximity_available(config)
    result_settings = ProximitySettings(
        threshold=threshold,
        specialZoneThreshold=special_zone_threshold,
        showSpecialZones=config.showSpecialZones,
        showNearApostles=config.showSpecialZones and config.showNearApostles,
        includeNeutral=include_neutral,
        totalCustomers=len(active_points),
        isAvailable=available,
        unavailabilityReason=reason,
    )
    if not available:
        logger.info(f"Proximity analysis unavailable: {reason}")
        return ProximityAnalysisResult(settings=result_settings)

    zones = get_active_special_zones(config)
    buckets: Dict[RelationshipKey, List[CustomerProximity]] = {}
    crossroads: List[CrossroadsCustomer] = []
    all_scores: List[int] = []
    flagged_ids = set()

    for point in active_points:
        own_segment = classify(point)
        candidates = _find_candidates(
            point, own_segment, config, zones,
            threshold, special_zone_threshold, include_neutral,
        )

        scores = []
        for candidate in candidates:
            score = calculate_risk_score(candidate.distance, candidate.threshold)
            scores.append(score)
            key = RelationshipKey(fromSegment=own_segment, toSegment=candidate.target)
            buckets.setdefault(key, []).append(CustomerProximity(
                id=point.id,
                name=point.name,
                satisfaction=point.satisfaction,
                loyalty=point.loyalty,
                currentSegment=own_segment,
                targetSegment=candidate.target,
                distance=round(candidate.distance, 4),
                riskScore=score,
                riskLevel=get_risk_level(score),
            ))

        if candidates:
            flagged_ids.add(point.id)
            all_scores.extend(scores)

        if own_segment == Segment.NEUTRAL or len(candidates) >= 2:
            max_score = max(scores) if scores else 0
            crossroads.append(CrossroadsCustomer(
                id=point.id,
                name=point.name,
                satisfaction=point.satisfaction,
                loyalty=point.loyalty,
                currentSegment=own_segment,
                relationships=[c.target for c in candidates],
                relationshipCount=len(candidates),
                maxRiskScore=max_score,
                strategicValue=get_strategic_value(own_segment, len(candidates), max_score),
            ))

    details = [_build_detail(key, customers) for key, customers in buckets.items()]
    details.sort(key=lambda d: -d.customerCount)

    min_customers = settings.proximity_indicator_min_customers
    summary = ProximitySummary(
        totalProximityCustomers=len(flagged_ids),
        totalRelationships=len(all_scores),
        averageRiskScore=round(sum(all_scores) / len(all_scores), 2) if all_scores else 0.0,
        crisisIndicators=_build_indicators(details, CRISIS_RELATIONSHIPS, min_customers),
        opportunityIndicators=_build_indicators(details, OPPORTUNITY_RELATIONSHIPS, min_customers),
    )

    crossroads.sort(key=lambda c: (_STRATEGIC_ORDER[c.strategicValue], -c.maxRiskScore, c.id))

    logger.info(
        f"Proximity analysis: {len(active_points)} customers, "
        f"{summary.totalProximityCustomers} flagged across {len(details)} relationships, "
        f"{len(crossroads)} at crossroads"
    )
    return ProximityAnalysisResult(
        analysis=details,
        summary=summary,
        crossroads=crossroads,
        settings=result_settings,
    )


__all__ = [
    'HIGH_RISK_SCORE',
    'MODERATE_RISK_SCORE',
    'CRISIS_RELATIONSHIPS',
    'OPPORTUNITY_RELATIONSHIPS',
    'calculate_risk_score',
    'get_risk_level',
    'get_relationship_kind',
    'get_strategic_value',
    'analyze_proximity',
]

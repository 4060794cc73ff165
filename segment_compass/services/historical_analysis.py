"""
Historical Analysis Service

Aggregates customer timelines into date-level trends, detects segment
transitions between consecutive survey dates, and compares the first and
last survey periods.

Movement direction follows a fixed desirability rank:

    apostles 8, near_apostles 7, loyalists 6, mercenaries 5,
    hostages 4, neutral 3, defectors 2, terrorists 0

A move to a higher rank is positive, to a lower rank negative. Consecutive
entries in the same segment count as neutral movements, so the three
counters always add up to the number of consecutive dated pairs.
"""

import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd

from segment_compass.models.enums import MovementDirection, Segment
from segment_compass.models.schemas import (
    CustomerTimeline,
    MovementCustomer,
    MovementStats,
    PeriodComparison,
    QuadrantMovement,
    RelationshipKey,
    TrendDataPoint,
)
from segment_compass.services.quadrant_assignment import Classifier
from segment_compass.services.timeline import normalize_date, parse_date

logger = logging.getLogger(__name__)


SEGMENT_RANK: Dict[Segment, int] = {
    Segment.APOSTLES: 8,
    Segment.NEAR_APOSTLES: 7,
    Segment.LOYALISTS: 6,
    Segment.MERCENARIES: 5,
    Segment.HOSTAGES: 4,
    Segment.NEUTRAL: 3,
    Segment.DEFECTORS: 2,
    Segment.TERRORISTS: 0,
}


# =============================================================================
# Trend Aggregation
# =============================================================================

def calculate_trend_data(
    timelines: Iterable[CustomerTimeline],
    date_format: Optional[str] = None,
) -> List[TrendDataPoint]:
    """
    Average satisfaction and loyalty per survey date.

    Responses are bucketed by their exact normalised date string. Buckets are
    ordered by parsed date, so mixed date formats still sort chronologically;
    buckets whose date cannot be parsed are dropped.

    Args:
        timelines: Customer timelines from group_by_customer
        date_format: Hint applied to every bucket; when omitted, the
            bucket's own dateFormat is used

    Returns:
        One TrendDataPoint per parseable survey date
    """
    rows = []
    for timeline in timelines:
        for point in timeline.dataPoints:
            normalized = normalize_date(point.date)
            if normalized is None:
                continue
            rows.append({
                'date': normalized,
                'satisfaction': point.satisfaction,
                'loyalty': point.loyalty,
                'dateFormat': point.dateFormat,
            })

    if not rows:
        return []

    df = pd.DataFrame(rows)
    buckets = df.groupby('date', sort=False).agg(
        averageSatisfaction=('satisfaction', 'mean'),
        averageLoyalty=('loyalty', 'mean'),
        count=('satisfaction', 'size'),
        dateFormat=('dateFormat', 'first'),
    )

    trend: List[TrendDataPoint] = []
    skipped = 0
    for date_str, bucket in buckets.iterrows():
        bucket_format = bucket['dateFormat'] if isinstance(bucket['dateFormat'], str) else None
        parsed = parse_date(date_str, date_format or bucket_format)
        if parsed is None:
            skipped += 1
            continue
        trend.append(TrendDataPoint(
            date=date_str,
            dateObj=parsed,
            averageSatisfaction=round(float(bucket['averageSatisfaction']), 2),
            averageLoyalty=round(float(bucket['averageLoyalty']), 2),
            count=int(bucket['count']),
        ))

    if skipped:
        logger.warning(f"Dropped {skipped} survey dates that could not be parsed")

    trend.sort(key=lambda t: (t.dateObj, t.date))
    return trend


# =============================================================================
# Movement Analysis
# =============================================================================

def get_movement_direction(from_segment: Segment, to_segment: Segment) -> MovementDirection:
    from_rank = SEGMENT_RANK[from_segment]
    to_rank = SEGMENT_RANK[to_segment]
    if to_rank > from_rank:
        return MovementDirection.POSITIVE
    if to_rank < from_rank:
        return MovementDirection.NEGATIVE
    return MovementDirection.NEUTRAL


def calculate_quadrant_movements(
    timelines: Iterable[CustomerTimeline],
    classify: Classifier,
    date_format: Optional[str] = None,
) -> MovementStats:
    """
    Detect segment transitions between consecutive dated responses.

    Responses without a parseable date are skipped for pairing, the same
    responses calculate_trend_data drops. Both ends of every pair are
    classified with the supplied classifier.

    Args:
        timelines: Chronologically ordered customer timelines
        classify: The configuration's classifier (see build_classifier)
        date_format: Hint applied to every response; when omitted, each
            response's own dateFormat is used

    Returns:
        MovementStats with movements sorted by count, busiest first
    """
    positive = negative = neutral = 0
    buckets: Dict[RelationshipKey, QuadrantMovement] = {}

    for timeline in timelines:
        dated = [
            p for p in timeline.dataPoints
            if parse_date(p.date, date_format or p.dateFormat) is not None
        ]
        for previous, current in zip(dated, dated[1:]):
            from_segment = classify(previous)
            to_segment = classify(current)
            if from_segment == to_segment:
                neutral += 1
                continue

            direction = get_movement_direction(from_segment, to_segment)
            if direction == MovementDirection.POSITIVE:
                positive += 1
            elif direction == MovementDirection.NEGATIVE:
                negative += 1
            else:
                neutral += 1

            key = RelationshipKey(fromSegment=from_segment, toSegment=to_segment)
            movement = buckets.get(key)
            if movement is None:
                movement = QuadrantMovement(
                    fromSegment=from_segment,
                    toSegment=to_segment,
                    direction=direction,
                )
                buckets[key] = movement
            movement.customers.append(MovementCustomer(
                identifier=timeline.identifier,
                identifierType=timeline.identifierType,
                fromDate=normalize_date(previous.date),
                toDate=normalize_date(current.date),
            ))
            movement.count += 1

    movements = sorted(buckets.values(), key=lambda m: -m.count)
    stats = MovementStats(
        positiveMovements=positive,
        negativeMovements=negative,
        neutralMovements=neutral,
        totalMovements=positive + negative + neutral,
        movements=movements,
    )
    logger.info(
        f"Movement analysis: {stats.totalMovements} transitions "
        f"(+{positive} / -{negative} / ={neutral})"
    )
    return stats


# =============================================================================
# Period Comparison
# =============================================================================

def calculate_period_comparison(trend: List[TrendDataPoint]) -> Optional[PeriodComparison]:
    """First trend point against the last one; None with fewer than two points."""
    if len(trend) < 2:
        return None

    first, last = trend[0], trend[-1]
    return PeriodComparison(
        period1=first,
        period2=last,
        satisfactionChange=round(last.averageSatisfaction - first.averageSatisfaction, 2),
        loyaltyChange=round(last.averageLoyalty - first.averageLoyalty, 2),
    )


__all__ = [
    'SEGMENT_RANK',
    'calculate_trend_data',
    'get_movement_direction',
    'calculate_quadrant_movements',
    'calculate_period_comparison',
]

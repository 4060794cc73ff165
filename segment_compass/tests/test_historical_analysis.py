"""
Historical Analysis Tests

Covers trend aggregation, segment movement detection with its desirability
ranks, movement conservation, and first-vs-last period comparison.
"""

import pytest

from segment_compass.models.enums import IdentifierType, MovementDirection, Segment
from segment_compass.models.schemas import CustomerTimeline, DataPoint, SegmentationConfig
from segment_compass.services.historical_analysis import (
    SEGMENT_RANK,
    calculate_period_comparison,
    calculate_quadrant_movements,
    calculate_trend_data,
    get_movement_direction,
)
from segment_compass.services.quadrant_assignment import build_classifier
from segment_compass.services.timeline import group_by_customer


def _timeline(identifier, entries):
    points = [
        DataPoint(id=f"{identifier}-{i}", satisfaction=sat, loyalty=loy, date=when)
        for i, (when, sat, loy) in enumerate(entries)
    ]
    return CustomerTimeline(
        identifier=identifier,
        identifierType=IdentifierType.ID,
        dataPoints=points,
        dates=sorted({p.date for p in points if p.date}),
    )


# =============================================================================
# Test Class: TestTrendData
# =============================================================================

class TestTrendData:

    def test_buckets_by_date(self, history_points):
        trend = calculate_trend_data(group_by_customer(history_points))

        assert [t.date for t in trend] == ["2024-01-01", "2024-02-01", "2024-03-01"]
        assert [(t.averageSatisfaction, t.averageLoyalty, t.count) for t in trend] == [
            (3.0, 3.0, 2),
            (2.0, 4.0, 1),
            (4.5, 4.5, 2),
        ]

    def test_averages_rounded_to_two_decimals(self):
        timeline = _timeline("x", [
            ("2024-01-01", 3, 3),
            ("2024-01-01", 3, 4),
            ("2024-01-01", 4, 4),
            ("2024-02-01", 1, 1),
        ])
        trend = calculate_trend_data([timeline])

        assert trend[0].averageSatisfaction == 3.33
        assert trend[0].averageLoyalty == 3.67

    def test_unparseable_dates_dropped(self):
        timeline = _timeline("x", [
            ("2024-01-01", 3, 3),
            ("2024-02-01", 4, 4),
            ("unknown", 5, 5),
        ])
        trend = calculate_trend_data([timeline])

        assert [t.date for t in trend] == ["2024-01-01", "2024-02-01"]

    def test_sorted_by_parsed_date_with_hint(self):
        timeline = _timeline("x", [
            ("02/03/2024", 4, 4),
            ("15/01/2024", 2, 2),
        ])
        trend = calculate_trend_data([timeline], "dd/MM/yyyy")

        assert [t.date for t in trend] == ["15/01/2024", "02/03/2024"]
        assert trend[0].dateObj.month == 1

    def test_point_format_used_without_hint(self):
        points = [
            DataPoint(id="a", email="x@example.com", satisfaction=4, loyalty=4,
                      date="02/03/2024", dateFormat="dd/MM/yyyy"),
            DataPoint(id="b", email="x@example.com", satisfaction=2, loyalty=2,
                      date="15/01/2024", dateFormat="dd/MM/yyyy"),
        ]
        trend = calculate_trend_data(group_by_customer(points))

        assert [t.dateObj.isoformat() for t in trend] == ["2024-01-15", "2024-03-02"]

    def test_empty(self):
        assert calculate_trend_data([]) == []


# =============================================================================
# Test Class: TestQuadrantMovements
# =============================================================================

class TestQuadrantMovements:

    @pytest.mark.parity
    def test_defectors_to_loyalists_is_positive(self, basic_config):
        timeline = _timeline("c1", [("2024-01-01", 2, 2), ("2024-02-01", 4, 4)])
        stats = calculate_quadrant_movements([timeline], build_classifier(basic_config))

        assert stats.positiveMovements == 1
        assert stats.negativeMovements == 0
        assert stats.totalMovements == 1
        movement = stats.movements[0]
        assert (movement.fromSegment, movement.toSegment) == (Segment.DEFECTORS, Segment.LOYALISTS)
        assert movement.direction == MovementDirection.POSITIVE
        assert movement.count == 1
        assert movement.customers[0].identifier == "c1"
        assert movement.customers[0].fromDate == "2024-01-01"
        assert movement.customers[0].toDate == "2024-02-01"

    def test_history_dataset(self, basic_config, history_points):
        stats = calculate_quadrant_movements(
            group_by_customer(history_points), build_classifier(basic_config)
        )

        assert stats.positiveMovements == 2
        assert stats.negativeMovements == 0
        assert stats.neutralMovements == 1
        assert stats.totalMovements == 3
        assert [(m.fromSegment, m.toSegment) for m in stats.movements] == [
            (Segment.DEFECTORS, Segment.HOSTAGES),
            (Segment.HOSTAGES, Segment.LOYALISTS),
        ]
        assert stats.movements[0].customers[0].identifierType == IdentifierType.EMAIL

    def test_negative_and_sorted_by_count(self, basic_config):
        timelines = [
            _timeline("a", [("2024-01-01", 4, 4), ("2024-02-01", 4, 2)]),
            _timeline("b", [("2024-01-01", 2, 4), ("2024-02-01", 2, 2)]),
            _timeline("c", [("2024-01-01", 5, 5), ("2024-02-01", 5, 1)]),
        ]
        stats = calculate_quadrant_movements(timelines, build_classifier(basic_config))

        assert stats.negativeMovements == 3
        assert stats.movements[0].fromSegment == Segment.LOYALISTS
        assert stats.movements[0].toSegment == Segment.MERCENARIES
        assert stats.movements[0].count == 2
        assert stats.movements[1].count == 1

    def test_undated_points_skipped_for_pairing(self, basic_config):
        timeline = _timeline("x", [
            ("2024-01-01", 2, 2),
            ("2024-02-01", 4, 4),
            (None, 1, 5),
        ])
        stats = calculate_quadrant_movements([timeline], build_classifier(basic_config))

        assert stats.totalMovements == 1

    def test_unparseable_dates_skipped_for_pairing(self, basic_config):
        timeline = _timeline("x", [
            ("2024-01-01", 2, 2),
            ("2024-02-01", 4, 4),
            ("not a date", 2, 2),
        ])
        stats = calculate_quadrant_movements([timeline], build_classifier(basic_config))

        assert stats.totalMovements == 1
        assert stats.positiveMovements == 1
        assert stats.negativeMovements == 0
        assert [(m.fromSegment, m.toSegment) for m in stats.movements] == [
            (Segment.DEFECTORS, Segment.LOYALISTS),
        ]
        assert stats.movements[0].customers[0].toDate == "2024-02-01"

    def test_hint_decides_which_dates_pair(self, basic_config):
        timeline = _timeline("x", [
            ("2024-01-01", 2, 2),
            ("2024-02-01", 4, 4),
            ("13/01/2024", 2, 2),
        ])
        stats = calculate_quadrant_movements(
            [timeline], build_classifier(basic_config), "MM/dd/yyyy"
        )

        assert stats.totalMovements == 1
        assert stats.negativeMovements == 0

    def test_manual_assignment_changes_movement(self):
        config = SegmentationConfig(manualAssignments={"c1-1": "defectors"})
        timeline = _timeline("c1", [("2024-01-01", 2, 2), ("2024-02-01", 4, 4)])
        stats = calculate_quadrant_movements([timeline], build_classifier(config))

        assert stats.neutralMovements == 1
        assert stats.movements == []

    def test_special_zones_ranked(self, zones_config):
        timeline = _timeline("z", [
            ("2024-01-01", 1, 1),
            ("2024-02-01", 5, 5),
            ("2024-03-01", 4.5, 3.5),
        ])
        stats = calculate_quadrant_movements([timeline], build_classifier(zones_config))

        assert [(m.fromSegment, m.toSegment, m.direction) for m in stats.movements] == [
            (Segment.TERRORISTS, Segment.APOSTLES, MovementDirection.POSITIVE),
            (Segment.APOSTLES, Segment.LOYALISTS, MovementDirection.NEGATIVE),
        ]

    def test_conservation(self, wide_zones_config):
        """positive + negative + neutral equals the number of consecutive dated pairs."""
        entries = [
            ("2024-01-01", 1, 1), ("2024-02-01", 9, 9), (None, 5, 5),
            ("2024-03-01", 9, 9), ("2024-04-01", 7, 9), ("2024-05-01", 2, 8),
            ("2024-06-01", 6, 2), (None, 3, 3), ("2024-07-01", 6, 2),
        ]
        timeline = _timeline("x", entries)
        dated_pairs = sum(1 for e in entries if e[0]) - 1

        stats = calculate_quadrant_movements([timeline], build_classifier(wide_zones_config))

        assert stats.totalMovements == dated_pairs
        assert stats.positiveMovements + stats.negativeMovements + stats.neutralMovements == dated_pairs
        assert sum(m.count for m in stats.movements) == stats.positiveMovements + stats.negativeMovements

    def test_rank_table(self):
        assert SEGMENT_RANK[Segment.APOSTLES] > SEGMENT_RANK[Segment.NEAR_APOSTLES] > SEGMENT_RANK[Segment.LOYALISTS]
        assert SEGMENT_RANK[Segment.NEUTRAL] == 3
        assert SEGMENT_RANK[Segment.TERRORISTS] == 0
        assert len(set(SEGMENT_RANK.values())) == len(SEGMENT_RANK)

    def test_direction(self):
        assert get_movement_direction(Segment.HOSTAGES, Segment.MERCENARIES) == MovementDirection.POSITIVE
        assert get_movement_direction(Segment.NEUTRAL, Segment.DEFECTORS) == MovementDirection.NEGATIVE
        assert get_movement_direction(Segment.HOSTAGES, Segment.HOSTAGES) == MovementDirection.NEUTRAL


# =============================================================================
# Test Class: TestPeriodComparison
# =============================================================================

class TestPeriodComparison:

    def test_first_vs_last(self, history_points):
        trend = calculate_trend_data(group_by_customer(history_points))
        comparison = calculate_period_comparison(trend)

        assert comparison.period1.date == "2024-01-01"
        assert comparison.period2.date == "2024-03-01"
        assert comparison.satisfactionChange == 1.5
        assert comparison.loyaltyChange == 1.5

    def test_needs_two_points(self, history_points):
        trend = calculate_trend_data(group_by_customer(history_points))
        assert calculate_period_comparison(trend[:1]) is None
        assert calculate_period_comparison([]) is None

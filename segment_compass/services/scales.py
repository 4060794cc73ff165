"""
Rating Scale Service

Bounds, parsing and validation of the rating scales used on the satisfaction
and loyalty axes. Out-of-scale values are reported, never clamped: the API
refuses such uploads rather than silently moving customers on the plane.
"""

import logging
from typing import Iterable, List, Union

from segment_compass.models.enums import ScaleFormat
from segment_compass.models.schemas import (
    DataPoint,
    Midpoint,
    ScaleBounds,
    ScaleViolation,
    SegmentationConfig,
)

logger = logging.getLogger(__name__)

ScaleLike = Union[ScaleFormat, str]


def parse_scale(scale: ScaleLike) -> ScaleBounds:
    """
    Parse a scale format into its inclusive bounds.

    Args:
        scale: A ScaleFormat or its string value ("1-5", "0-10", ...)

    Returns:
        ScaleBounds with minValue and maxValue

    Raises:
        ValueError: If the format is not a supported scale
    """
    try:
        fmt = ScaleFormat(scale)
    except ValueError:
        raise ValueError(f"Unsupported scale format: {scale!r}") from None
    return ScaleBounds(minValue=fmt.minimum, maxValue=fmt.maximum)


def get_scale_min(scale: ScaleLike) -> float:
    return parse_scale(scale).minValue


def get_scale_max(scale: ScaleLike) -> float:
    return parse_scale(scale).maxValue


def is_zero_based_scale(scale: ScaleLike) -> bool:
    return parse_scale(scale).minValue == 0


def get_default_midpoint(satisfaction_scale: ScaleLike, loyalty_scale: ScaleLike) -> Midpoint:
    """Centre of both scales, used when no midpoint has been placed."""
    sat = parse_scale(satisfaction_scale)
    loy = parse_scale(loyalty_scale)
    return Midpoint(
        sat=(sat.minValue + sat.maxValue) / 2,
        loy=(loy.minValue + loy.maxValue) / 2,
    )


def find_out_of_scale_points(
    points: Iterable[DataPoint],
    config: SegmentationConfig,
) -> List[ScaleViolation]:
    """
    Report every rating outside its configured scale.

    Excluded points are checked too: exclusion is a view filter, and a bad
    value in the upload is still a bad value.

    Returns:
        One ScaleViolation per offending axis value, in input order
    """
    sat_bounds = parse_scale(config.satisfactionScale)
    loy_bounds = parse_scale(config.loyaltyScale)

    violations: List[ScaleViolation] = []
    for point in points:
        for axis, value, bounds in (
            ("satisfaction", point.satisfaction, sat_bounds),
            ("loyalty", point.loyalty, loy_bounds),
        ):
            if not bounds.minValue <= value <= bounds.maxValue:
                violations.append(ScaleViolation(
                    id=point.id,
                    axis=axis,
                    value=value,
                    minValue=bounds.minValue,
                    maxValue=bounds.maxValue,
                ))

    if violations:
        logger.warning(f"Found {len(violations)} out-of-scale values")
    return violations


__all__ = [
    'parse_scale',
    'get_scale_min',
    'get_scale_max',
    'is_zero_based_scale',
    'get_default_midpoint',
    'find_out_of_scale_points',
]

"""
Customer Timeline Service

Rebuilds per-customer histories from repeated survey responses.

Identity:
- trimmed, lower-cased email when the response carries one
- otherwise the response id

Within a timeline, responses are ordered by survey date. Dates that parse
sort chronologically, dates that do not parse come next in string order, and
undated responses come last. Customers with fewer than two distinct survey
dates have no trajectory and are dropped.

Unparseable dates are kept in the timeline; trend, forecast and movement
computations treat them as absent. A request-level format hint overrides each
response's own dateFormat.
"""

import logging
import re
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from segment_compass.models.enums import IdentifierType
from segment_compass.models.schemas import CustomerTimeline, DataPoint

logger = logging.getLogger(__name__)


# =============================================================================
# Date Handling
# =============================================================================

_DAY_MONTH_PATTERN = re.compile(r'^(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{2,4})\b')
_YEAR_FIRST_PATTERN = re.compile(r'^(\d{4})[/.\-](\d{1,2})[/.\-](\d{1,2})\b')

# pandas resolves these against the wall clock
_RELATIVE_DATE_WORDS = frozenset({'now', 'today', 'yesterday', 'tomorrow'})


def normalize_date(value: Optional[str]) -> Optional[str]:
    """Trimmed date string, or None for missing or blank dates."""
    if value is None:
        return None
    normalized = str(value).strip()
    return normalized or None


def _expand_year(year: str) -> int:
    return 2000 + int(year) if len(year) == 2 else int(year)


def _parse_with_hint(value: str, date_format: str) -> Optional[date]:
    hint = date_format.strip()

    if hint.startswith(('dd/MM', 'dd-MM', 'dd.MM')):
        match = _DAY_MONTH_PATTERN.match(value)
        if match:
            day, month, year = match.groups()
            return date(_expand_year(year), int(month), int(day))
    elif hint.startswith(('MM/dd', 'MM-dd', 'MM.dd')):
        match = _DAY_MONTH_PATTERN.match(value)
        if match:
            month, day, year = match.groups()
            return date(_expand_year(year), int(month), int(day))
    elif hint.startswith('yyyy'):
        match = _YEAR_FIRST_PATTERN.match(value)
        if match:
            year, month, day = match.groups()
            return date(int(year), int(month), int(day))
    return None


def parse_date(value: Optional[str], date_format: Optional[str] = None) -> Optional[date]:
    """
    Parse a free-text survey date.

    The format hint decides the field order for dd/MM/yyyy, MM/dd/yyyy and
    yyyy-MM-dd style dates. Without a hint, or when the hinted parse does not
    match, pandas' general parser is used.

    Args:
        value: Raw date text
        date_format: Optional format hint

    Returns:
        The calendar date, or None when the text is blank, unparseable,
        relative to today or names an impossible date
    """
    normalized = normalize_date(value)
    if normalized is None:
        return None

    if date_format:
        try:
            parsed = _parse_with_hint(normalized, date_format)
        except ValueError:
            # 31/02/2024 and friends
            return None
        if parsed is not None:
            return parsed

    if normalized.lower() in _RELATIVE_DATE_WORDS:
        return None

    timestamp = pd.to_datetime(normalized, errors='coerce')
    if pd.isna(timestamp):
        return None
    return timestamp.date()


def _timeline_sort_key(point: DataPoint, date_format: Optional[str] = None) -> Tuple[int, int, str]:
    normalized = normalize_date(point.date)
    if normalized is None:
        return (2, 0, '')
    parsed = parse_date(normalized, date_format or point.dateFormat)
    if parsed is None:
        return (1, 0, normalized)
    return (0, parsed.toordinal(), normalized)


# =============================================================================
# Grouping
# =============================================================================

def get_customer_identifier(point: DataPoint) -> Tuple[str, IdentifierType]:
    email = (point.email or '').strip().lower()
    if email:
        return email, IdentifierType.EMAIL
    return point.id, IdentifierType.ID


def group_by_customer(
    points: Iterable[DataPoint],
    date_format: Optional[str] = None,
) -> List[CustomerTimeline]:
    """
    Group responses into per-customer timelines.

    Excluded points are skipped. Timelines come back in the order their
    customer was first seen.

    Args:
        points: Survey responses, possibly several per customer
        date_format: Hint applied to every response; when omitted, each
            response's own dateFormat is used

    Returns:
        Timelines of customers with at least two distinct survey dates
    """
    groups: Dict[Tuple[IdentifierType, str], List[DataPoint]] = {}
    for point in points:
        if point.excluded:
            continue
        identifier, identifier_type = get_customer_identifier(point)
        groups.setdefault((identifier_type, identifier), []).append(point)

    timelines: List[CustomerTimeline] = []
    for (identifier_type, identifier), customer_points in groups.items():
        distinct_dates = {normalize_date(p.date) for p in customer_points} - {None}
        if len(distinct_dates) < 2:
            continue

        ordered = sorted(customer_points, key=lambda p: _timeline_sort_key(p, date_format))
        dates: List[str] = []
        for point in ordered:
            normalized = normalize_date(point.date)
            if normalized is not None and normalized not in dates:
                dates.append(normalized)

        timelines.append(CustomerTimeline(
            identifier=identifier,
            identifierType=identifier_type,
            dataPoints=ordered,
            dates=dates,
        ))

    logger.debug(f"Built {len(timelines)} timelines from {len(groups)} customers")
    return timelines


def has_historical_data(points: Iterable[DataPoint]) -> bool:
    """True when at least one customer has responses on two different dates."""
    return len(group_by_customer(points)) > 0


__all__ = [
    'normalize_date',
    'parse_date',
    'get_customer_identifier',
    'group_by_customer',
    'has_historical_data',
]

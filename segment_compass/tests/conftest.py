"""
Pytest Configuration and Shared Fixtures for Segment Compass Tests.

Provides:
- Custom markers (slow, parity)
- A settings cache reset so environment overrides never leak between tests
- Segmentation configurations for the common 1-5 layouts
- A data point factory and sample survey datasets
"""

from typing import Callable, List, Optional

import pytest

from segment_compass.core.config import get_settings
from segment_compass.models.schemas import DataPoint, SegmentationConfig


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    Usage:
        pytest -m "not slow"
        pytest -m parity
    """
    config.addinivalue_line(
        'markers',
        'slow: marks tests as slow (deselect with -m "not slow")'
    )
    config.addinivalue_line(
        'markers',
        'parity: marks tests pinning documented worked examples'
    )


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings for every test so monkeypatched env vars apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ============================================================
# CONFIGURATION FIXTURES
# ============================================================

@pytest.fixture
def basic_config() -> SegmentationConfig:
    """1-5 scales, midpoint (3, 3), no special zones."""
    return SegmentationConfig(satisfactionScale="1-5", loyaltyScale="1-5")


@pytest.fixture
def zones_config() -> SegmentationConfig:
    """
    1-5 scales with apostles [4,5]x[4,5] and terrorists [1,2]x[1,2].
    """
    return SegmentationConfig(
        satisfactionScale="1-5",
        loyaltyScale="1-5",
        showSpecialZones=True,
    )


@pytest.fixture
def wide_zones_config() -> SegmentationConfig:
    """
    1-10 scales, midpoint (5.5, 5.5), apostles [8,10]x[8,10], near-apostles
    band out to 7, terrorists [1,3]x[1,3].
    """
    return SegmentationConfig(
        satisfactionScale="1-10",
        loyaltyScale="1-10",
        apostlesZoneSize=2,
        terroristsZoneSize=2,
        showSpecialZones=True,
        showNearApostles=True,
    )


# ============================================================
# DATA POINT FIXTURES
# ============================================================

@pytest.fixture
def make_point() -> Callable[..., DataPoint]:
    """
    Factory for DataPoint objects.

    Example:
        point = make_point(4, 4, id="A", date="2024-01-01")
    """
    counter = {'n': 0}

    def _make(
        satisfaction: float,
        loyalty: float,
        id: Optional[str] = None,
        **kwargs,
    ) -> DataPoint:
        counter['n'] += 1
        return DataPoint(
            id=id or f"P{counter['n']}",
            satisfaction=satisfaction,
            loyalty=loyalty,
            **kwargs,
        )

    return _make


@pytest.fixture
def quadrant_points() -> List[DataPoint]:
    """The five reference points around midpoint (3, 3)."""
    return [
        DataPoint(id="A", name="Ada", satisfaction=4, loyalty=4),
        DataPoint(id="B", name="Ben", satisfaction=2, loyalty=2),
        DataPoint(id="C", name="Cy", satisfaction=4, loyalty=2),
        DataPoint(id="D", name="Di", satisfaction=2, loyalty=4),
        DataPoint(id="E", name="Ed", satisfaction=3, loyalty=3),
    ]


@pytest.fixture
def history_points() -> List[DataPoint]:
    """
    Three customers surveyed over three months.

    - ada@example.com: defectors -> hostages -> loyalists
    - bob@example.com: loyalists -> loyalists
    - id C-1 (no email): mercenaries on a single date, dropped from timelines
    """
    return [
        DataPoint(id="1", email="Ada@Example.com ", satisfaction=2, loyalty=2, date="2024-01-01"),
        DataPoint(id="2", email="bob@example.com", satisfaction=4, loyalty=4, date="2024-01-01"),
        DataPoint(id="3", email="ada@example.com", satisfaction=2, loyalty=4, date="2024-02-01"),
        DataPoint(id="4", email="bob@example.com", satisfaction=5, loyalty=4, date="2024-03-01"),
        DataPoint(id="5", email="ada@example.com", satisfaction=4, loyalty=5, date="2024-03-01"),
        DataPoint(id="C-1", satisfaction=4, loyalty=1, date="2024-02-01"),
    ]

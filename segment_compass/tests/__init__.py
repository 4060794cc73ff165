'''
Segment Compass Test Suite

Test Modules:
-------------
- test_scales.py: Scale parsing, default midpoints, out-of-scale detection
- test_quadrant_assignment.py: Quadrant and special zone classification
  - Midpoint boundary rules
  - Manual assignment precedence
  - Distribution and hierarchical views
- test_distance.py: Distance to every segment, proximity availability
- test_proximity.py: Proximity analysis
  - Risk scores and levels
  - Crisis / opportunity relationship kinds
  - Crossroads customers and summary indicators
- test_timeline.py: Date parsing with format hints, customer timelines
- test_historical_analysis.py: Trends, segment movements, period comparison
- test_forecast.py: Regression, confidence bands, forecast horizons
- test_api.py: Contract tests for every endpoint

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []

"""
Settings and environment management for the Segment Compass service.

Configuration is loaded with pydantic-settings from environment variables and
an optional .env file. The segmentation geometry itself (scales, midpoint,
zones, manual assignments) is never ambient: it travels with every call as an
immutable SegmentationConfig. Settings only hold analysis defaults that a
caller may override per request.

Environment Variables:
- APP_NAME: Display name of the API (default: Segment Compass API)
- LOG_LEVEL: Root logging level (default: INFO)
- PROXIMITY_THRESHOLD: Max distance to flag a main quadrant neighbour (default: 2.0)
- SPECIAL_ZONE_PROXIMITY_THRESHOLD: Max distance to flag a special zone (default: 1.0)
- INCLUDE_NEUTRAL_IN_PROXIMITY: Relate midpoint customers to every quadrant (default: true)
- PROXIMITY_INDICATOR_MIN_CUSTOMERS: Customers needed to raise an indicator (default: 3)
- FORECAST_MONTHS_AHEAD: Default forecast horizon in months (default: 6)

Usage:
    from segment_compass.core.config import get_settings

    settings = get_settings()
    threshold = settings.proximity_threshold
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name used by the API.
        log_level: Logging level applied at startup.
        proximity_threshold: Distance at or below which a point is flagged as
            close to a neighbouring main quadrant.
        special_zone_proximity_threshold: Same, for special zone targets.
        include_neutral_in_proximity: Whether midpoint customers are related
            to all four quadrants.
        proximity_indicator_min_customers: Customers a relationship needs
            before it raises a crisis or opportunity indicator.
        forecast_months_ahead: Default furthest forecast horizon.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',  # Ignore extra environment variables not defined in this class
        case_sensitive=False,
    )

    # =========================================================================
    # Service
    # =========================================================================

    app_name: str = 'Segment Compass API'

    # One of DEBUG, INFO, WARNING, ERROR
    log_level: str = 'INFO'

    # =========================================================================
    # Proximity Analysis Defaults
    # =========================================================================

    # Distances are Chebyshev distances in scale units
    proximity_threshold: float = Field(default=2.0, ge=0)

    # Special zones are small, so they get a tighter radius
    special_zone_proximity_threshold: float = Field(default=1.0, ge=0)

    # A midpoint customer is one step from every quadrant
    include_neutral_in_proximity: bool = True

    proximity_indicator_min_customers: int = Field(default=3, ge=1)

    # =========================================================================
    # Forecast Defaults
    # =========================================================================

    # Horizons are 1, 3 and this value, filtered to <= this value
    forecast_months_ahead: int = Field(default=6, ge=1)


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()

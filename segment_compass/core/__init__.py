"""
Core infrastructure package for the Segment Compass service.

Provides:
- Configuration management via pydantic-settings
- FastAPI dependency injection utilities

Usage:

    from segment_compass.core import get_settings, SettingsDep
"""

from segment_compass.core.config import Settings, get_settings
from segment_compass.core.dependencies import get_settings_dependency, SettingsDep

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'SettingsDep',
]

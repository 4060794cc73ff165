"""
FastAPI dependency injection for the Segment Compass API.

Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- SettingsDep: Type alias for injecting Settings into endpoints

Tests override settings with:

    app.dependency_overrides[get_settings_dependency] = lambda: custom_settings
"""

from typing import Annotated

from fastapi import Depends

from segment_compass.core.config import Settings, get_settings


def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() so FastAPI's dependency
    override mechanism can swap it in tests.
    """
    return get_settings()


# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

"""
FastAPI dependency injection module for the Event Insights backend.

Provides reusable FastAPI dependencies for configuration access, so
endpoint handlers stay decoupled from infrastructure and can be tested
with overrides.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_insights_config: Returns the default InsightsConfig built from Settings
- SettingsDep / InsightsConfigDep: Annotated type aliases

Usage:
    @router.get("/insights/events/{event_id}")
    async def event_insights(event_id: str, config: InsightsConfigDep):
        ...

In tests, override any of them:
    app.dependency_overrides[get_insights_config] = lambda: InsightsConfig(max_insights=3)
"""

from typing import Annotated

from fastapi import Depends

from event_insights.core.config import Settings, get_settings
from event_insights.models.schemas import InsightsConfig


# =============================================================================
# Settings Dependencies
# =============================================================================


def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so FastAPI's dependency override
    mechanism can swap it in tests.
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


def get_insights_config(settings: SettingsDep) -> InsightsConfig:
    """Default engine configuration derived from the application settings."""
    return settings.insights_config()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

InsightsConfigDep = Annotated[InsightsConfig, Depends(get_insights_config)]

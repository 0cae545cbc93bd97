"""
Core infrastructure package for the Event Insights backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity via asyncpg
- FastAPI dependency injection utilities
- The Insights Engine error taxonomy

Re-exports key components so other modules can write:

    from event_insights.core import get_settings, get_db_pool, MissingContextError

instead of importing from each submodule.
"""

# =============================================================================
# Re-exports from event_insights.core.config
# =============================================================================
from event_insights.core.config import Settings, get_settings

# =============================================================================
# Re-exports from event_insights.core.database
# =============================================================================
from event_insights.core.database import (
    init_db,
    close_db,
    get_db_pool,
    execute_query,
    execute_query_one,
)

# =============================================================================
# Re-exports from event_insights.core.dependencies
# =============================================================================
from event_insights.core.dependencies import (
    get_settings_dependency,
    get_insights_config,
    SettingsDep,
    InsightsConfigDep,
)

# =============================================================================
# Re-exports from event_insights.core.exceptions
# =============================================================================
from event_insights.core.exceptions import (
    InsightsEngineError,
    MissingContextError,
    DataQualityError,
    RecordNotFoundError,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    'execute_query',
    'execute_query_one',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_insights_config',
    'SettingsDep',
    'InsightsConfigDep',
    # Errors (from exceptions.py)
    'InsightsEngineError',
    'MissingContextError',
    'DataQualityError',
    'RecordNotFoundError',
]

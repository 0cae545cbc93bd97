"""
SQL Query Module for the Event Insights backend.

Provides parameterized SQL queries for loading the engine's inputs from the
analytics_aggregate table:
- the current event's aggregate
- the partner's history window
- the cross-partner benchmark pool
- a partner's latest event and the most recent events overall

Follows the Repository Pattern for clean separation between business logic
and data access.

Example usage:
    from event_insights.sql import get_partner_history_query

    rows = await conn.fetch(get_partner_history_query(), partner_id, event_id,
                            event_date, window_start, 50)
"""

from event_insights.sql.aggregate_queries import (
    get_event_record_query,
    get_partner_history_query,
    get_benchmark_pool_query,
    get_latest_partner_event_query,
    get_recent_events_query,
    AGGREGATE_COLUMNS,
)

__all__ = [
    'get_event_record_query',
    'get_partner_history_query',
    'get_benchmark_pool_query',
    'get_latest_partner_event_query',
    'get_recent_events_query',
    'AGGREGATE_COLUMNS',
]

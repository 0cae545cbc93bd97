"""
Aggregate Queries Module for the Event Insights backend.

Provides parameterized PostgreSQL queries against the analytics_aggregate
table, which holds one pre-aggregated metrics row per event:

    analytics_aggregate(
        event_id     TEXT PRIMARY KEY,
        partner_id   TEXT,
        partner_name TEXT,
        event_date   DATE,
        metrics      JSONB      -- metric key -> numeric value
    )

The windows and caps applied here mirror the ones the engine re-applies
in memory (services/record_source.py), so the database never returns more
rows than the engine is willing to analyse.
"""


# =============================================================================
# CONSTANTS
# =============================================================================

AGGREGATE_COLUMNS: str = "event_id, partner_id, partner_name, event_date, metrics"


# =============================================================================
# SINGLE EVENT
# =============================================================================

def get_event_record_query() -> str:
    """
    Query for one event's aggregate row.

    Parameters:
        $1: event_id

    Returns:
        Parameterized PostgreSQL query string.
    """
    return f"""
    SELECT {AGGREGATE_COLUMNS}
    FROM analytics_aggregate
    WHERE event_id = $1
    """


# =============================================================================
# PARTNER HISTORY
# =============================================================================

def get_partner_history_query() -> str:
    """
    Query for a partner's events before the current one.

    Rows are returned newest first so LIMIT keeps the most recent events;
    the record source re-sorts them oldest first.

    Parameters:
        $1: partner_id
        $2: current event_id (excluded)
        $3: current event_date (exclusive upper bound)
        $4: window start date (inclusive lower bound)
        $5: maximum number of rows

    Returns:
        Parameterized PostgreSQL query string.
    """
    return f"""
    SELECT {AGGREGATE_COLUMNS}
    FROM analytics_aggregate
    WHERE partner_id = $1
      AND event_id <> $2
      AND event_date < $3
      AND event_date >= $4
    ORDER BY event_date DESC, event_id DESC
    LIMIT $5
    """


# =============================================================================
# BENCHMARK POOL
# =============================================================================

def get_benchmark_pool_query() -> str:
    """
    Query for the cross-partner benchmark pool.

    Parameters:
        $1: current event_id (excluded)
        $2: current event_date (inclusive upper bound)
        $3: window start date (inclusive lower bound)
        $4: maximum number of rows

    Returns:
        Parameterized PostgreSQL query string.
    """
    return f"""
    SELECT {AGGREGATE_COLUMNS}
    FROM analytics_aggregate
    WHERE event_id <> $1
      AND event_date <= $2
      AND event_date >= $3
    ORDER BY event_date DESC, event_id DESC
    LIMIT $4
    """


# =============================================================================
# RECENT EVENTS
# =============================================================================

def get_latest_partner_event_query() -> str:
    """
    Query for a partner's most recent event.

    Parameters:
        $1: partner_id

    Returns:
        Parameterized PostgreSQL query string.
    """
    return f"""
    SELECT {AGGREGATE_COLUMNS}
    FROM analytics_aggregate
    WHERE partner_id = $1
      AND event_date IS NOT NULL
    ORDER BY event_date DESC, event_id DESC
    LIMIT 1
    """


def get_recent_events_query() -> str:
    """
    Query for the most recent events across all partners.

    Parameters:
        $1: earliest event_date to include, or NULL for no lower bound
        $2: maximum number of rows

    Returns:
        Parameterized PostgreSQL query string.
    """
    return f"""
    SELECT {AGGREGATE_COLUMNS}
    FROM analytics_aggregate
    WHERE event_date IS NOT NULL
      AND ($1::date IS NULL OR event_date >= $1::date)
    ORDER BY event_date DESC, event_id DESC
    LIMIT $2
    """

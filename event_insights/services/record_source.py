"""
Aggregate Record Source - loading and windowing the engine's inputs.

Two layers:

1. Pure window builders used by the engine on every invocation, whatever
   the records' origin:
   - build_metric_series(): the partner's history, oldest first, bounded to
     the lookback window (default 365 days) and capped at the most recent
     50 events
   - build_benchmark_pool(): cross-partner events in the benchmark window
     (default 183 days), capped at the 500 most recent
   Both exclude the current event. The caps bound the work per invocation
   independently of total data volume.

2. Async fetchers that read analytics_aggregate through the asyncpg pool
   query helpers in core/database.py.
   They are awaited by the API before the engine runs; the engine itself
   never performs I/O.

Usage:
    current = await fetch_event_record(event_id)
    history = await fetch_partner_history(current, config)
    pool = await fetch_benchmark_records(current, config)
    report = generate_insights(current, history, pool, config)
"""

import json
import logging
import math
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Sequence

from event_insights.core.database import execute_query, execute_query_one
from event_insights.core.exceptions import RecordNotFoundError
from event_insights.models import InsightsConfig, MetricRecord
from event_insights.sql import (
    get_benchmark_pool_query,
    get_event_record_query,
    get_latest_partner_event_query,
    get_partner_history_query,
    get_recent_events_query,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Metric Access
# =============================================================================


def metric_values(records: Sequence[MetricRecord], metric: str) -> List[float]:
    """
    Values of metric across records, in record order.

    Records lacking the metric, or holding a non-finite value, are skipped.
    """
    values: List[float] = []
    for record in records:
        value = record.metrics.get(metric)
        if value is None or not math.isfinite(value):
            continue
        values.append(float(value))
    return values


def _sort_key(record: MetricRecord):
    return (record.eventDate or date.min, record.eventId or "")


def window_start(end: date, days: int) -> date:
    """First date of a lookback window of days ending at end, clamped to date.min."""
    if days >= (end - date.min).days:
        return date.min
    return end - timedelta(days=days)


# =============================================================================
# Window Builders
# =============================================================================


def build_metric_series(
    current: MetricRecord,
    records: Sequence[MetricRecord],
    config: InsightsConfig,
) -> List[MetricRecord]:
    """
    Bound the partner's history to the lookback window.

    Keeps records of the current partner dated strictly before the current
    event and no older than config.history_window_days, excluding the
    current event id. Returns them oldest first, keeping only the most
    recent config.history_max_records.

    Args:
        current: The event being analysed (must carry partnerId and eventDate).
        records: Candidate historical records, in any order.
        config: Engine configuration.

    Returns:
        The MetricSeries, sorted by event date ascending.
    """
    start = window_start(current.eventDate, config.history_window_days)

    series = [
        record for record in records
        if record.partnerId == current.partnerId
        and record.eventId != current.eventId
        and record.eventDate is not None
        and start <= record.eventDate < current.eventDate
    ]

    dropped = len(records) - len(series)
    if dropped:
        logger.debug(
            f"History for event {current.eventId}: dropped {dropped} record(s) "
            f"outside partner/window"
        )

    series.sort(key=_sort_key)
    return series[-config.history_max_records:]


def build_benchmark_pool(
    current: MetricRecord,
    records: Sequence[MetricRecord],
    config: InsightsConfig,
) -> List[MetricRecord]:
    """
    Bound the peer pool to the benchmark window.

    Keeps records of any partner dated within config.benchmark_window_days
    up to and including the current event date, excluding the current
    event id, capped at the config.benchmark_max_records most recent.

    Returns:
        The BenchmarkPool in deterministic (date, id) order.
    """
    start = window_start(current.eventDate, config.benchmark_window_days)

    pool = [
        record for record in records
        if record.eventId != current.eventId
        and record.eventDate is not None
        and start <= record.eventDate <= current.eventDate
    ]

    pool.sort(key=_sort_key)
    return pool[-config.benchmark_max_records:]


# =============================================================================
# Row Mapping
# =============================================================================


def record_from_row(row: Mapping[str, Any]) -> MetricRecord:
    """
    Convert an analytics_aggregate row to a MetricRecord.

    asyncpg returns JSONB as text unless a codec is registered, so the
    metrics column is decoded when it arrives as a string. Non-numeric
    metric entries are dropped.
    """
    raw_metrics = row["metrics"]
    if isinstance(raw_metrics, (str, bytes)):
        raw_metrics = json.loads(raw_metrics)

    metrics: Dict[str, float] = {}
    for key, value in (raw_metrics or {}).items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        metrics[key] = float(value)

    event_date = row["event_date"]
    if hasattr(event_date, "date") and callable(event_date.date):
        event_date = event_date.date()

    return MetricRecord(
        eventId=row["event_id"],
        partnerId=row["partner_id"],
        partnerName=row["partner_name"],
        eventDate=event_date,
        metrics=metrics,
    )


# =============================================================================
# Database Fetchers
# =============================================================================


async def fetch_event_record(event_id: str) -> MetricRecord:
    """
    Load one event's aggregate.

    Raises:
        RecordNotFoundError: If the event has no aggregate row.
    """
    row = await execute_query_one(get_event_record_query(), event_id)

    if row is None:
        raise RecordNotFoundError(event_id)

    return record_from_row(row)


async def fetch_partner_history(
    current: MetricRecord,
    config: InsightsConfig,
) -> List[MetricRecord]:
    """
    Load the partner's recent events preceding current.

    Returns:
        Records oldest first, bounded like build_metric_series().
    """
    start = window_start(current.eventDate, config.history_window_days)
    rows = await execute_query(
        get_partner_history_query(),
        current.partnerId,
        current.eventId,
        current.eventDate,
        start,
        config.history_max_records,
    )

    records = [record_from_row(row) for row in rows]
    records.sort(key=_sort_key)
    return records


async def fetch_benchmark_records(
    current: MetricRecord,
    config: InsightsConfig,
) -> List[MetricRecord]:
    """
    Load the cross-partner benchmark pool for current.

    Returns:
        Records in (date, id) order, bounded like build_benchmark_pool().
    """
    start = window_start(current.eventDate, config.benchmark_window_days)
    rows = await execute_query(
        get_benchmark_pool_query(),
        current.eventId,
        current.eventDate,
        start,
        config.benchmark_max_records,
    )

    records = [record_from_row(row) for row in rows]
    records.sort(key=_sort_key)
    return records


async def fetch_latest_partner_record(partner_id: str) -> MetricRecord:
    """
    Load the partner's most recent dated event.

    Raises:
        RecordNotFoundError: If the partner has no dated events.
    """
    row = await execute_query_one(get_latest_partner_event_query(), partner_id)

    if row is None:
        raise RecordNotFoundError(partner_id, kind="partner")

    return record_from_row(row)


async def fetch_recent_event_records(
    limit: int,
    since: Optional[date] = None,
) -> List[MetricRecord]:
    """
    Load the most recent events across all partners.

    Args:
        limit: Maximum number of events.
        since: Only events dated on or after this date.

    Returns:
        Records newest first.
    """
    rows = await execute_query(get_recent_events_query(), since, limit)
    return [record_from_row(row) for row in rows]

"""
Package initialization file for Event Insights models.

Exports all Pydantic schemas and enumerations from schemas.py and enums.py,
so other modules can import data models from event_insights.models directly:

    from event_insights.models import (
        MetricRecord,
        Insight,
        InsightCategory,
        InsightPriority,
        # ... etc
    )
"""

# =============================================================================
# Enums - Import and re-export all enumerations from enums.py
# =============================================================================

from event_insights.models.enums import (
    MetricKey,
    InsightCategory,
    InsightPriority,
    SignalDirection,
    InsightImpact,
    PerformanceRating,
    ReportStatus,
    # Ordering and vocabulary helpers
    PRIORITY_RANK,
    CATEGORY_PRECEDENCE,
    LOWER_IS_BETTER,
    METRIC_LABELS,
)


# =============================================================================
# Schemas - Import and re-export all Pydantic models from schemas.py
# =============================================================================

from event_insights.models.schemas import (
    # Inputs
    MetricRecord,
    # Engine configuration
    AnomalyThresholds,
    TrendThresholds,
    BenchmarkThresholds,
    InsightsConfig,
    MAX_WINDOW_DAYS,
    # Evidence variants
    AnomalyEvidence,
    TrendEvidence,
    BenchmarkEvidence,
    Evidence,
    # Engine signals and outputs
    RawSignal,
    Insight,
    InsightsSummary,
    InsightsReport,
    # API contracts
    InsightsRequest,
    InsightsContext,
    InsightsResponse,
    EventInsight,
    InsightsFeedResponse,
)


__all__ = [
    # Enums
    'MetricKey',
    'InsightCategory',
    'InsightPriority',
    'SignalDirection',
    'InsightImpact',
    'PerformanceRating',
    'ReportStatus',
    'PRIORITY_RANK',
    'CATEGORY_PRECEDENCE',
    'LOWER_IS_BETTER',
    'METRIC_LABELS',
    # Schemas
    'MetricRecord',
    'AnomalyThresholds',
    'TrendThresholds',
    'BenchmarkThresholds',
    'InsightsConfig',
    'MAX_WINDOW_DAYS',
    'AnomalyEvidence',
    'TrendEvidence',
    'BenchmarkEvidence',
    'Evidence',
    'RawSignal',
    'Insight',
    'InsightsSummary',
    'InsightsReport',
    'InsightsRequest',
    'InsightsContext',
    'InsightsResponse',
    'EventInsight',
    'InsightsFeedResponse',
]

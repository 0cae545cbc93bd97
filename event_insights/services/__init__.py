"""
Event Insights Services Module

This module contains the Insights Engine and the services it is built from.
Each service is stateless and testable in isolation.

Services:
- statistics: mean, sample standard deviation, percentile rank, linear fit
- record_source: window builders and asyncpg loaders for metric records
- anomaly_detection: current event vs the partner's own history (z-score)
- trend_analysis: direction and strength of change across the series
- benchmarking: percentile rank against the cross-partner pool
- insight_synthesizer: template rendering of raw signals into Insights
- insight_prioritizer: floor, dedup, stable sort, truncation, summary and
  the cross-event feed merge
- insights_engine: one invocation from records to an InsightsReport

The engine layer is pure and synchronous; only record_source performs I/O.
All services are designed to be consumed by the API layer (event_insights/api/).
"""

# =============================================================================
# Statistics Exports
# =============================================================================

from event_insights.services.statistics import (
    LinearFit,
    mean,
    median,
    std_dev,
    z_score,
    percentile_rank,
    linear_fit,
    has_variance,
    STAT_PRECISION,
)

# =============================================================================
# Record Source Exports
# Pure window builders for MetricSeries / BenchmarkPool plus the asyncpg
# loaders for the analytics_aggregate table
# =============================================================================

from event_insights.services.record_source import (
    metric_values,
    build_metric_series,
    build_benchmark_pool,
    record_from_row,
    fetch_event_record,
    fetch_partner_history,
    fetch_benchmark_records,
    fetch_latest_partner_record,
    fetch_recent_event_records,
    window_start,
)

# =============================================================================
# Detector Exports
# =============================================================================

from event_insights.services.anomaly_detection import (
    detect_anomaly,
    classify_z_score,
    anomaly_confidence,
)

from event_insights.services.trend_analysis import (
    analyze_trend,
    classify_trend,
    normalized_rate,
    trend_points,
)

from event_insights.services.benchmarking import (
    compare_to_benchmark,
    classify_percentile,
    performance_rating,
    benchmark_confidence,
)

# =============================================================================
# Synthesis and Prioritization Exports
# =============================================================================

from event_insights.services.insight_synthesizer import (
    synthesize_insight,
    impact_for,
    metric_label,
)

from event_insights.services.insight_prioritizer import (
    prioritize_insights,
    deduplicate_insights,
    sort_insights,
    check_record_identity,
    filter_insights,
    summarize_insights,
    overall_score,
    event_recommendations,
    merge_event_reports,
)

# =============================================================================
# Engine Exports
# =============================================================================

from event_insights.services.insights_engine import (
    generate_insights,
    validate_current_record,
    ordered_metrics,
)

# =============================================================================
# __all__ - Public API Definition
# All symbols explicitly listed for clean imports via:
#   from event_insights.services import <symbol>
# =============================================================================

__all__ = [
    # Statistics
    'LinearFit',
    'mean',
    'median',
    'std_dev',
    'z_score',
    'percentile_rank',
    'linear_fit',
    'has_variance',
    'STAT_PRECISION',
    # Record source
    'metric_values',
    'build_metric_series',
    'build_benchmark_pool',
    'record_from_row',
    'fetch_event_record',
    'fetch_partner_history',
    'fetch_benchmark_records',
    'fetch_latest_partner_record',
    'fetch_recent_event_records',
    'window_start',
    # Detectors
    'detect_anomaly',
    'classify_z_score',
    'anomaly_confidence',
    'analyze_trend',
    'classify_trend',
    'normalized_rate',
    'trend_points',
    'compare_to_benchmark',
    'classify_percentile',
    'performance_rating',
    'benchmark_confidence',
    # Synthesis and prioritization
    'synthesize_insight',
    'impact_for',
    'metric_label',
    'prioritize_insights',
    'deduplicate_insights',
    'sort_insights',
    'check_record_identity',
    'filter_insights',
    'summarize_insights',
    'overall_score',
    'event_recommendations',
    'merge_event_reports',
    # Engine
    'generate_insights',
    'validate_current_record',
    'ordered_metrics',
]

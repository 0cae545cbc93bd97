"""
Peer Benchmarking - current event vs the cross-partner pool.

Ranks the current event's metric value against all partners' events in the
recent window and expresses it as a percentile.

Percentile convention:
    INCLUSIVE rank, percentile = count(pool <= current) / pool size * 100.
    Ties count toward the percentile. Alternative conventions (strict "<",
    or mid-rank averaging ties) exist; inclusive rank is used so that the
    best value in the pool always reads as the 100th percentile.

Classification:
    - percentile >= 90 or <= 10 -> high   (top/bottom decile)
    - percentile >= 75 or <= 25 -> medium (top/bottom quartile)
    - otherwise                 -> no signal

confidence = max(floor, |percentile - 50| / 50)

At least 10 pool values are required; smaller pools yield no signal.
"""

import logging
from typing import Optional, Sequence

from event_insights.models import (
    BenchmarkEvidence,
    BenchmarkThresholds,
    InsightCategory,
    InsightPriority,
    InsightsConfig,
    MetricRecord,
    PerformanceRating,
    RawSignal,
    SignalDirection,
)
from event_insights.services.record_source import metric_values
from event_insights.services.statistics import STAT_PRECISION, median, percentile_rank


logger = logging.getLogger(__name__)

CONFIDENCE_PRECISION: int = 4


def classify_percentile(
    percentile: float,
    thresholds: BenchmarkThresholds,
) -> Optional[InsightPriority]:
    """
    Map a percentile to a benchmark priority.

    Returns:
        HIGH for the outer deciles, MEDIUM for the outer quartiles, else None.
    """
    if percentile >= thresholds.high_upper or percentile <= thresholds.high_lower:
        return InsightPriority.HIGH
    if percentile >= thresholds.medium_upper or percentile <= thresholds.medium_lower:
        return InsightPriority.MEDIUM
    return None


def performance_rating(percentile: float) -> PerformanceRating:
    """
    Coarse rating for a percentile.

    - >= 90: excellent
    - >= 75: good
    - >= 40: average
    - >= 25: below_average
    - < 25: poor
    """
    if percentile >= 90:
        return PerformanceRating.EXCELLENT
    if percentile >= 75:
        return PerformanceRating.GOOD
    if percentile >= 40:
        return PerformanceRating.AVERAGE
    if percentile >= 25:
        return PerformanceRating.BELOW_AVERAGE
    return PerformanceRating.POOR


def benchmark_confidence(percentile: float, floor: float) -> float:
    """confidence = max(floor, |percentile - 50| / 50)"""
    raw = abs(percentile - 50.0) / 50.0
    return round(min(1.0, max(floor, raw)), CONFIDENCE_PRECISION)


def compare_to_benchmark(
    metric: str,
    current_value: float,
    pool: Sequence[MetricRecord],
    config: InsightsConfig,
) -> Optional[RawSignal]:
    """
    Rank current_value within the peer pool for metric.

    Args:
        metric: Metric key being analysed.
        current_value: The current event's value.
        pool: Cross-partner benchmark records, current event excluded.
        config: Engine configuration.

    Returns:
        RawSignal when the value lands in an outer quartile, else None.
    """
    thresholds = config.benchmark_percentile_thresholds
    values = metric_values(pool, metric)

    if len(values) < thresholds.min_pool_size:
        logger.debug(
            f"Benchmark skipped for {metric}: pool of {len(values)} "
            f"(need {thresholds.min_pool_size})"
        )
        return None

    percentile = percentile_rank(values, current_value)
    priority = classify_percentile(percentile, thresholds)
    if priority is None:
        return None

    direction = SignalDirection.ABOVE if percentile >= 50 else SignalDirection.BELOW

    return RawSignal(
        category=InsightCategory.BENCHMARK,
        metric=metric,
        direction=direction,
        priority=priority,
        confidence=benchmark_confidence(percentile, config.confidence_floor),
        evidence=BenchmarkEvidence(
            currentValue=current_value,
            percentile=percentile,
            poolSize=len(values),
            poolMedian=round(median(values), STAT_PRECISION),
            rating=performance_rating(percentile),
        ),
    )

"""
Insights Engine - one invocation from records to a ranked InsightsReport.

Flow:
    1. Validate the current record (identity, partner, date, metrics).
       Missing context raises MissingContextError.
    2. Check identity fields of every historical and benchmark record.
       Any problem yields a report with status data_quality_error and no
       insights.
    3. Bound the inputs: the partner's MetricSeries (365 days, last 50
       events) and the BenchmarkPool (183 days, last 500 events), both
       excluding the current event.
    4. Run the detectors in production order: anomaly detection for every
       metric, then trend analysis for every metric, then benchmarking for
       every metric. Metrics are visited in MetricKey vocabulary order,
       followed by any other keys in sorted order.
    5. Render each RawSignal, prioritize the candidates and derive the
       summary from the returned list.

The engine is synchronous and performs no I/O; records are loaded by the
caller (see services/record_source.py). Given identical inputs it returns
identical reports, down to their serialized form.
"""

import logging
import math
from typing import List, Optional, Sequence

from event_insights.core.exceptions import DataQualityError, MissingContextError
from event_insights.models import (
    Insight,
    InsightsConfig,
    InsightsReport,
    MetricKey,
    MetricRecord,
    RawSignal,
    ReportStatus,
)
from event_insights.services.anomaly_detection import detect_anomaly
from event_insights.services.benchmarking import compare_to_benchmark
from event_insights.services.insight_prioritizer import (
    check_record_identity,
    prioritize_insights,
    summarize_insights,
)
from event_insights.services.insight_synthesizer import synthesize_insight
from event_insights.services.record_source import build_benchmark_pool, build_metric_series
from event_insights.services.trend_analysis import analyze_trend


logger = logging.getLogger(__name__)


# =============================================================================
# Input Validation
# =============================================================================


def validate_current_record(current: MetricRecord) -> None:
    """
    Ensure the current record carries enough context to analyse.

    Raises:
        MissingContextError: If eventId, partnerId or eventDate is missing,
            or the record has no metric entries.
    """
    if not current.eventId:
        raise MissingContextError("Current record has no eventId")
    if not current.partnerId:
        raise MissingContextError(f"Event {current.eventId} has no partnerId")
    if current.eventDate is None:
        raise MissingContextError(f"Event {current.eventId} has no eventDate")
    if not current.metrics:
        raise MissingContextError(f"Event {current.eventId} has no metrics")


def validate_supporting_records(
    historical: Sequence[MetricRecord],
    benchmark_pool: Sequence[MetricRecord],
) -> None:
    """
    Raises:
        DataQualityError: If any historical or benchmark record lacks an
            identity field.
    """
    problems = (
        check_record_identity(historical, label="historical")
        + check_record_identity(benchmark_pool, label="benchmark")
    )
    if problems:
        raise DataQualityError(problems)


def ordered_metrics(current: MetricRecord) -> List[str]:
    """
    Metric keys of the current record in analysis order.

    Vocabulary keys come first in MetricKey order, then any other keys
    sorted. Keys whose current value is not finite are skipped.
    """
    vocabulary = [key.value for key in MetricKey]
    known = [key for key in vocabulary if key in current.metrics]
    extra = sorted(key for key in current.metrics if key not in vocabulary)

    return [key for key in known + extra if math.isfinite(current.metrics[key])]


# =============================================================================
# Detection
# =============================================================================


def collect_signals(
    current: MetricRecord,
    series: Sequence[MetricRecord],
    pool: Sequence[MetricRecord],
    config: InsightsConfig,
) -> List[RawSignal]:
    """
    Run every detector over every metric, in production order.

    Returns:
        Raw signals: all anomalies, then all trends, then all benchmarks.
    """
    metrics = ordered_metrics(current)
    signals: List[RawSignal] = []

    for metric in metrics:
        signal = detect_anomaly(metric, current.metrics[metric], series, config)
        if signal is not None:
            signals.append(signal)

    for metric in metrics:
        signal = analyze_trend(metric, series, current.metrics[metric], config)
        if signal is not None:
            signals.append(signal)

    for metric in metrics:
        signal = compare_to_benchmark(metric, current.metrics[metric], pool, config)
        if signal is not None:
            signals.append(signal)

    return signals


# =============================================================================
# Public API
# =============================================================================


def generate_insights(
    current: MetricRecord,
    historical: Sequence[MetricRecord],
    benchmark_pool: Sequence[MetricRecord],
    config: Optional[InsightsConfig] = None,
) -> InsightsReport:
    """
    Generate the ranked insight report for one event.

    Args:
        current: The event being analysed.
        historical: The partner's previous events (any order; windowed here).
        benchmark_pool: Cross-partner events (any order; windowed here).
        config: Engine configuration; defaults apply when None.

    Returns:
        InsightsReport with status ok, no_insights or data_quality_error.

    Raises:
        MissingContextError: If the current record lacks identity, partner,
            date or metrics.
    """
    config = config or InsightsConfig()
    validate_current_record(current)

    try:
        validate_supporting_records(historical, benchmark_pool)
    except DataQualityError as e:
        logger.warning(f"Insights for event {current.eventId} aborted: {e}")
        return InsightsReport(
            eventId=current.eventId,
            partnerId=current.partnerId,
            eventDate=current.eventDate,
            status=ReportStatus.DATA_QUALITY_ERROR,
            error=str(e),
        )

    series = build_metric_series(current, historical, config)
    pool = build_benchmark_pool(current, benchmark_pool, config)

    signals = collect_signals(current, series, pool, config)
    candidates: List[Insight] = [synthesize_insight(signal) for signal in signals]
    insights = prioritize_insights(candidates, config)

    status = ReportStatus.OK if insights else ReportStatus.NO_INSIGHTS

    logger.info(
        f"Insights for event {current.eventId}: {len(signals)} signal(s), "
        f"{len(insights)} returned from {len(series)} historical and "
        f"{len(pool)} benchmark event(s) - {status.value}"
    )

    return InsightsReport(
        eventId=current.eventId,
        partnerId=current.partnerId,
        eventDate=current.eventDate,
        status=status,
        insights=insights,
        summary=summarize_insights(insights),
        historicalEventsAnalyzed=len(series),
        benchmarkEventsAnalyzed=len(pool),
    )

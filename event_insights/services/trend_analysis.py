"""
Trend Analysis - directional change across a partner's recent events.

Fits a straight line through the metric's values over the ordered historical
series with the current event appended as the most recent point, and
classifies the direction and strength of change.

Algorithm:
    1. Points = historical values (records lacking the metric are skipped)
       followed by the current value. Fewer than 4 points -> no signal.
    2. Flat series (all values identical) -> no signal.
    3. Least-squares regression of value on SEQUENCE INDEX 0..n-1. Dates are
       deliberately ignored: events are irregularly spaced and a date axis
       would weight a cluster of close events differently from the same
       values spread over months. Index regression keeps the output a
       function of the values and their order only.
    4. normalized rate = slope / baseline * 100 (% per period), where
       baseline is the fitted level at the start of the window (intercept).
       If the intercept is not positive the absolute series mean is used;
       if that is zero too, the rate is undefined and no signal is emitted.
    5. Classify:
       - |rate| >= 20 and R² >= 0.5 -> high ("strong trend")
       - |rate| >= 10 and R² >= 0.3 -> medium
       - otherwise                  -> no signal
    6. confidence = max(floor, R²)

Example:
    engagement rates 10, 12, 14, 16 then current 18 -> slope 2, intercept 10,
    rate 20% per period, R² 1.0 -> high priority, increasing, confidence 1.0
"""

import logging
from typing import List, Optional, Sequence

from event_insights.models import (
    InsightCategory,
    InsightPriority,
    InsightsConfig,
    MetricRecord,
    RawSignal,
    SignalDirection,
    TrendEvidence,
    TrendThresholds,
)
from event_insights.services.record_source import metric_values
from event_insights.services.statistics import (
    STAT_PRECISION,
    LinearFit,
    has_variance,
    linear_fit,
    mean,
)


logger = logging.getLogger(__name__)

CONFIDENCE_PRECISION: int = 4

# Two-sided 95% normal quantile for the forecast margin
FORECAST_Z: float = 1.96


def trend_points(
    history: Sequence[MetricRecord],
    metric: str,
    current_value: float,
) -> List[float]:
    """Historical values for metric in series order, current value last."""
    return metric_values(history, metric) + [current_value]


def normalized_rate(fit: LinearFit, values: Sequence[float]) -> Optional[float]:
    """
    Slope as a percentage of the series' starting level.

    Returns:
        Percent change per period, or None when no non-zero baseline exists.
    """
    baseline = fit.intercept
    if baseline <= 0:
        baseline = abs(mean(values))
    if baseline == 0:
        return None
    return round(fit.slope * 100.0 / baseline, STAT_PRECISION)


def classify_trend(
    rate: float,
    r_squared: float,
    thresholds: TrendThresholds,
) -> Optional[InsightPriority]:
    """
    Map (|rate|, R²) to a trend priority.

    Returns:
        HIGH or MEDIUM, or None when the trend is too weak or too noisy.
    """
    abs_rate = abs(rate)
    if abs_rate >= thresholds.high_rate and r_squared >= thresholds.high_r_squared:
        return InsightPriority.HIGH
    if abs_rate >= thresholds.medium_rate and r_squared >= thresholds.medium_r_squared:
        return InsightPriority.MEDIUM
    return None


def analyze_trend(
    metric: str,
    history: Sequence[MetricRecord],
    current_value: float,
    config: InsightsConfig,
) -> Optional[RawSignal]:
    """
    Classify the trend of metric across the partner's series.

    Args:
        metric: Metric key being analysed.
        history: The partner's historical series, oldest first, current excluded.
        current_value: The current event's value, appended as the newest point.
        config: Engine configuration.

    Returns:
        RawSignal for a significant trend, or None.
    """
    thresholds = config.trend_rate_thresholds
    values = trend_points(history, metric, current_value)

    if len(values) < thresholds.min_points:
        logger.debug(
            f"Trend skipped for {metric}: {len(values)} points "
            f"(need {thresholds.min_points})"
        )
        return None

    if not has_variance(values):
        return None

    fit = linear_fit(values)
    if fit is None:
        return None

    rate = normalized_rate(fit, values)
    if rate is None:
        logger.debug(f"Trend skipped for {metric}: no non-zero baseline")
        return None

    priority = classify_trend(rate, fit.r_squared, thresholds)
    if priority is None:
        return None

    confidence = round(max(config.confidence_floor, fit.r_squared), CONFIDENCE_PRECISION)
    direction = SignalDirection.INCREASING if fit.slope > 0 else SignalDirection.DECREASING

    return RawSignal(
        category=InsightCategory.TREND,
        metric=metric,
        direction=direction,
        priority=priority,
        confidence=min(1.0, confidence),
        evidence=TrendEvidence(
            currentValue=current_value,
            slope=fit.slope,
            intercept=fit.intercept,
            rSquared=fit.r_squared,
            normalizedRate=rate,
            points=fit.points,
            nextValue=round(fit.predict(fit.points), STAT_PRECISION),
            margin=round(FORECAST_Z * fit.residual_std_error, STAT_PRECISION),
        ),
    )

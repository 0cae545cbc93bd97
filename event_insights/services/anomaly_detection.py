"""
Anomaly Detection - current event vs the partner's own history.

Compares one metric of the current event against the historical distribution
of that same metric for the same partner and flags statistically significant
deviations.

Algorithm:
    1. Collect the metric from every historical record that carries it
       (the current event is never part of the history).
    2. Fewer than config.min_history_points (3) values -> no signal.
    3. mean and SAMPLE standard deviation of the history.
    4. z = (current - mean) / std
    5. Classify |z|:
       - |z| >= 3.0        -> critical
       - 2.0 <= |z| < 3.0  -> high
       - 1.5 <= |z| < 2.0  -> medium
       - otherwise         -> no signal
    6. confidence = max(floor, min(1, |z| / 4))

Degenerate history (std == 0):
    - current == mean -> no signal
    - otherwise       -> critical, confidence 1.0, zScore None (undefined)

Example:
    history attendance [100, 110, 105, 95, 102] (mean 102.4, std ~5.59),
    current 500 -> z ~71 -> critical, confidence 1.0
"""

import logging
from typing import Optional, Sequence

from event_insights.models import (
    AnomalyEvidence,
    AnomalyThresholds,
    InsightCategory,
    InsightPriority,
    InsightsConfig,
    MetricRecord,
    RawSignal,
    SignalDirection,
)
from event_insights.services.record_source import metric_values
from event_insights.services.statistics import (
    STAT_PRECISION,
    has_variance,
    mean,
    std_dev,
    z_score,
)


logger = logging.getLogger(__name__)

# Confidence values are reported with this many decimals
CONFIDENCE_PRECISION: int = 4


def classify_z_score(abs_z: float, thresholds: AnomalyThresholds) -> Optional[InsightPriority]:
    """
    Map an absolute z-score to an anomaly priority.

    Args:
        abs_z: |z|, must be non-negative.
        thresholds: Cut-offs for critical / high / medium.

    Returns:
        The priority, or None when |z| is below the medium cut-off.
    """
    if abs_z >= thresholds.critical:
        return InsightPriority.CRITICAL
    if abs_z >= thresholds.high:
        return InsightPriority.HIGH
    if abs_z >= thresholds.medium:
        return InsightPriority.MEDIUM
    return None


def anomaly_confidence(abs_z: float, thresholds: AnomalyThresholds, floor: float) -> float:
    """confidence = max(floor, min(1, |z| / scale))"""
    raw = min(1.0, abs_z / thresholds.confidence_scale)
    return round(max(floor, raw), CONFIDENCE_PRECISION)


def detect_anomaly(
    metric: str,
    current_value: float,
    history: Sequence[MetricRecord],
    config: InsightsConfig,
) -> Optional[RawSignal]:
    """
    Decide whether current_value is anomalous for this partner.

    Args:
        metric: Metric key being analysed.
        current_value: The current event's value for the metric.
        history: The partner's historical series, current event excluded.
        config: Engine configuration (thresholds, floor, minimum history).

    Returns:
        RawSignal for an anomaly, or None when there is insufficient history
        or the deviation is within normal range.
    """
    values = metric_values(history, metric)

    if len(values) < config.min_history_points:
        logger.debug(
            f"Anomaly skipped for {metric}: {len(values)} historical points "
            f"(need {config.min_history_points})"
        )
        return None

    thresholds = config.anomaly_z_thresholds

    if has_variance(values):
        avg = mean(values)
        std = std_dev(values)
        z = z_score(current_value, avg, std)
    else:
        # Checked on the raw values; a float mean of identical values can
        # carry rounding noise that would yield a tiny non-zero std.
        avg = values[0]
        std = 0.0
        z = None

    if z is None:
        # Zero-variance history: any difference is a maximal deviation
        if current_value == avg:
            return None
        priority = InsightPriority.CRITICAL
        confidence = 1.0
    else:
        priority = classify_z_score(abs(z), thresholds)
        if priority is None:
            return None
        confidence = anomaly_confidence(abs(z), thresholds, config.confidence_floor)

    direction = SignalDirection.ABOVE if current_value > avg else SignalDirection.BELOW

    return RawSignal(
        category=InsightCategory.ANOMALY,
        metric=metric,
        direction=direction,
        priority=priority,
        confidence=confidence,
        evidence=AnomalyEvidence(
            currentValue=current_value,
            mean=round(avg, STAT_PRECISION),
            stdDev=round(std, STAT_PRECISION),
            zScore=z,
            sampleSize=len(values),
            degenerate=z is None,
        ),
    )

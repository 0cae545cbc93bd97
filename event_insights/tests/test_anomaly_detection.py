"""
Test suite for the Anomaly Detector.

The tests verify:
1. |z| classification into critical / high / medium / none
2. Confidence = max(floor, min(1, |z| / 4))
3. A value 3.5 standard deviations above the mean is critical with
   confidence >= 0.875
4. Flat (zero-variance) histories: differing current -> critical with
   confidence 1.0, equal current -> no signal
5. Insufficient history and metrics missing from some records
"""

import pytest

from event_insights.models import (
    AnomalyEvidence,
    AnomalyThresholds,
    InsightCategory,
    InsightPriority,
    InsightsConfig,
    SignalDirection,
)
from event_insights.services.anomaly_detection import (
    anomaly_confidence,
    classify_z_score,
    detect_anomaly,
)
from event_insights.tests.conftest import CURRENT_DATE, make_history, make_record


# History [8, 10, 12]: mean 10, sample std 2
SIMPLE_HISTORY = [8.0, 10.0, 12.0]


class TestClassifyZScore:
    """Tests for the |z| cut-offs."""

    @pytest.mark.parametrize(
        "abs_z, expected",
        [
            (3.0, InsightPriority.CRITICAL),
            (71.0, InsightPriority.CRITICAL),
            (2.99, InsightPriority.HIGH),
            (2.0, InsightPriority.HIGH),
            (1.99, InsightPriority.MEDIUM),
            (1.5, InsightPriority.MEDIUM),
            (1.49, None),
            (0.0, None),
        ],
    )
    def test_boundaries(self, abs_z, expected) -> None:
        assert classify_z_score(abs_z, AnomalyThresholds()) == expected

    def test_custom_thresholds(self) -> None:
        thresholds = AnomalyThresholds(critical=5.0, high=4.0, medium=3.0)
        assert classify_z_score(3.5, thresholds) == InsightPriority.MEDIUM


class TestAnomalyConfidence:
    """Tests for confidence scoring."""

    def test_scaled_confidence(self) -> None:
        assert anomaly_confidence(3.5, AnomalyThresholds(), 0.5) == 0.875

    def test_capped_at_one(self) -> None:
        assert anomaly_confidence(12.0, AnomalyThresholds(), 0.5) == 1.0

    def test_floored(self) -> None:
        # 1.6 / 4 = 0.4 is raised to the floor
        assert anomaly_confidence(1.6, AnomalyThresholds(), 0.5) == 0.5


class TestDetectAnomaly:
    """Tests for detect_anomaly over a partner history."""

    def test_three_and_a_half_sigma_is_critical(self, default_config) -> None:
        history = make_history("attendance", SIMPLE_HISTORY)

        signal = detect_anomaly("attendance", 17.0, history, default_config)

        assert signal is not None
        assert signal.category == InsightCategory.ANOMALY
        assert signal.priority == InsightPriority.CRITICAL
        assert signal.direction == SignalDirection.ABOVE
        assert signal.confidence >= 0.875
        assert signal.evidence.zScore == 3.5
        assert signal.evidence.mean == 10.0
        assert signal.evidence.stdDev == 2.0
        assert signal.evidence.sampleSize == 3

    def test_below_mean(self, default_config) -> None:
        history = make_history("attendance", SIMPLE_HISTORY)

        signal = detect_anomaly("attendance", 3.0, history, default_config)

        assert signal.priority == InsightPriority.CRITICAL
        assert signal.direction == SignalDirection.BELOW
        assert signal.evidence.zScore == -3.5

    def test_high_priority(self, default_config) -> None:
        history = make_history("attendance", SIMPLE_HISTORY)

        signal = detect_anomaly("attendance", 15.0, history, default_config)

        assert signal.priority == InsightPriority.HIGH
        assert signal.confidence == 0.625

    def test_medium_priority_confidence_floored(self, default_config) -> None:
        history = make_history("attendance", SIMPLE_HISTORY)

        signal = detect_anomaly("attendance", 13.2, history, default_config)

        assert signal.priority == InsightPriority.MEDIUM
        assert signal.confidence == default_config.confidence_floor

    def test_within_normal_range(self, default_config) -> None:
        history = make_history("attendance", SIMPLE_HISTORY)

        assert detect_anomaly("attendance", 11.0, history, default_config) is None

    def test_attendance_spike_scenario(self, default_config) -> None:
        history = make_history("attendance", [100, 110, 105, 95, 102])

        signal = detect_anomaly("attendance", 500.0, history, default_config)

        assert signal.priority == InsightPriority.CRITICAL
        assert signal.confidence == 1.0
        assert signal.direction == SignalDirection.ABOVE
        assert signal.evidence.mean == pytest.approx(102.4)
        assert signal.evidence.zScore == pytest.approx(71.07, abs=0.01)


class TestDegenerateHistory:
    """Tests for zero-variance histories."""

    def test_flat_history_differing_current(self, default_config) -> None:
        history = make_history("attendance", [100.0, 100.0, 100.0])

        signal = detect_anomaly("attendance", 120.0, history, default_config)

        assert signal is not None
        assert signal.priority == InsightPriority.CRITICAL
        assert signal.confidence == 1.0
        assert isinstance(signal.evidence, AnomalyEvidence)
        assert signal.evidence.zScore is None
        assert signal.evidence.degenerate is True
        assert signal.evidence.stdDev == 0.0

    def test_flat_history_below(self, default_config) -> None:
        history = make_history("engagementRate", [0.1, 0.1, 0.1, 0.1])

        signal = detect_anomaly("engagementRate", 0.05, history, default_config)

        assert signal.direction == SignalDirection.BELOW
        assert signal.confidence == 1.0

    def test_flat_history_equal_current(self, default_config) -> None:
        history = make_history("attendance", [100.0, 100.0, 100.0])

        assert detect_anomaly("attendance", 100.0, history, default_config) is None


class TestInsufficientHistory:
    """Tests for the minimum history requirement."""

    def test_two_points_is_not_enough(self, default_config) -> None:
        history = make_history("attendance", [100.0, 110.0])

        assert detect_anomaly("attendance", 500.0, history, default_config) is None

    def test_records_without_metric_are_skipped(self, default_config) -> None:
        history = make_history("attendance", [8.0, 10.0]) + [
            make_record("evt-other", CURRENT_DATE, totalFans=50),
        ]

        assert detect_anomaly("attendance", 17.0, history, default_config) is None

    def test_min_history_points_is_configurable(self) -> None:
        config = InsightsConfig(min_history_points=2)
        history = make_history("attendance", [8.0, 12.0])

        signal = detect_anomaly("attendance", 30.0, history, config)

        assert signal is not None
        assert signal.evidence.sampleSize == 2

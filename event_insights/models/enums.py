"""
Enumeration definitions for the Event Insights backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models, enabling automatic serialization and
deserialization in API responses.

Ordering helpers (PRIORITY_RANK, CATEGORY_PRECEDENCE) live next to the enums
they rank so that the prioritizer and the summary agree on one ordering.
"""

from enum import Enum
from typing import Dict, FrozenSet


class MetricKey(str, Enum):
    """
    Fixed vocabulary of pre-aggregated event metrics.

    Records produced by the aggregation pipeline key their metric values by
    these names. Records may carry additional keys; the engine analyses them
    after the vocabulary keys, in sorted order.

    - attendance: Event attendees
    - totalFans: Fans captured in images
    - engagementRate: Fans per attendee, in percent
    - merchandiseRate: Share of fans wearing merchandise, in percent
    - adValue: Estimated advertising value generated
    - approvedImages: Images approved for publication
    - rejectionRate: Share of submitted images rejected, in percent
    - remoteFanRate: Share of fans captured remotely, in percent
    - bitlyClicks: Tracked link clicks attributed to the event
    """
    ATTENDANCE = "attendance"
    TOTAL_FANS = "totalFans"
    ENGAGEMENT_RATE = "engagementRate"
    MERCHANDISE_RATE = "merchandiseRate"
    AD_VALUE = "adValue"
    APPROVED_IMAGES = "approvedImages"
    REJECTION_RATE = "rejectionRate"
    REMOTE_FAN_RATE = "remoteFanRate"
    BITLY_CLICKS = "bitlyClicks"


# Metrics where a lower value is the better outcome. Only affects the
# positive/negative impact label, never scoring.
LOWER_IS_BETTER: FrozenSet[str] = frozenset({MetricKey.REJECTION_RATE.value})


METRIC_LABELS: Dict[str, str] = {
    MetricKey.ATTENDANCE.value: "Attendance",
    MetricKey.TOTAL_FANS.value: "Total Fans",
    MetricKey.ENGAGEMENT_RATE.value: "Engagement Rate",
    MetricKey.MERCHANDISE_RATE.value: "Merchandise Rate",
    MetricKey.AD_VALUE.value: "Ad Value",
    MetricKey.APPROVED_IMAGES.value: "Approved Images",
    MetricKey.REJECTION_RATE.value: "Rejection Rate",
    MetricKey.REMOTE_FAN_RATE.value: "Remote Fan Rate",
    MetricKey.BITLY_CLICKS.value: "Link Clicks",
}


class InsightCategory(str, Enum):
    """
    Which detector produced an insight.

    - anomaly: Current value is statistically unusual against the partner's history
    - trend: Sustained directional change across the partner's history
    - benchmark: Current value ranks in the tails of the cross-partner peer pool
    """
    ANOMALY = "anomaly"
    TREND = "trend"
    BENCHMARK = "benchmark"


class InsightPriority(str, Enum):
    """
    Business priority of an insight, ordered critical > high > medium > low.
    """
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Higher rank sorts first.
PRIORITY_RANK: Dict[InsightPriority, int] = {
    InsightPriority.CRITICAL: 4,
    InsightPriority.HIGH: 3,
    InsightPriority.MEDIUM: 2,
    InsightPriority.LOW: 1,
}

# Detector precedence used as the last dedup tie-break; anomalies first.
CATEGORY_PRECEDENCE: Dict[InsightCategory, int] = {
    InsightCategory.ANOMALY: 3,
    InsightCategory.TREND: 2,
    InsightCategory.BENCHMARK: 1,
}


class SignalDirection(str, Enum):
    """
    Polarity of a raw detector signal.

    Anomaly and benchmark signals are above/below a baseline; trend signals
    are increasing/decreasing over the series.
    """
    ABOVE = "above"
    BELOW = "below"
    INCREASING = "increasing"
    DECREASING = "decreasing"


class InsightImpact(str, Enum):
    """
    Whether the finding is good or bad news for the partner.

    Derived from signal direction and the metric's polarity (LOWER_IS_BETTER).
    """
    POSITIVE = "positive"
    NEGATIVE = "negative"


class PerformanceRating(str, Enum):
    """
    Coarse peer-benchmark rating from an inclusive percentile rank.

    - excellent: percentile >= 90 (top 10%)
    - good: percentile >= 75 (top 25%)
    - average: percentile >= 40
    - below_average: percentile >= 25
    - poor: percentile < 25
    """
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    POOR = "poor"


class ReportStatus(str, Enum):
    """
    Outcome of one engine invocation.

    - ok: At least one insight survived prioritization
    - no_insights: Inputs were valid and every metric was within normal ranges
    - data_quality_error: Supporting records failed identity checks; no insights returned
    """
    OK = "ok"
    NO_INSIGHTS = "no_insights"
    DATA_QUALITY_ERROR = "data_quality_error"

"""
Insight Prioritizer - merging, deduplicating, ranking and bounding insights.

Pipeline over the candidate list (in detector production order):
    1. Drop insights below the confidence floor.
    2. Deduplicate on (metric, category). The survivor is the one with the
       higher confidence; ties go to the higher priority, then to the
       detector precedence anomaly > trend > benchmark, then to the
       earliest produced.
    3. Stable sort by priority (critical > high > medium > low), then
       confidence descending. Insights equal on both keys keep their
       production order.
    4. Truncate to config.max_insights.

Also hosts the identity check run over input records, the caller-side
filter, the summary derived from a returned list (counts, overall score,
event-level recommendations) and the merge of several events into one feed.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from event_insights.models import (
    CATEGORY_PRECEDENCE,
    PRIORITY_RANK,
    EventInsight,
    Insight,
    InsightCategory,
    InsightImpact,
    InsightPriority,
    InsightsConfig,
    InsightsReport,
    InsightsSummary,
    MetricRecord,
)


logger = logging.getLogger(__name__)

# Number of titles listed under topStrengths / topWeaknesses
SUMMARY_TOP_N: int = 3

# overallScore: starts at 100, penalties per critical / high insight, bonus per
# top-decile benchmark strength
SCORE_BASE: int = 100
SCORE_PENALTIES: Dict[InsightPriority, int] = {
    InsightPriority.CRITICAL: 15,
    InsightPriority.HIGH: 7,
}
SCORE_STRENGTH_BONUS: int = 5

# Event-level recommendations fire at this many matching insights
MULTI_ISSUE_THRESHOLD: int = 2

IDENTITY_FIELDS: Tuple[str, ...] = ("eventId", "partnerId", "eventDate")


# =============================================================================
# Deduplication and Ranking
# =============================================================================


def _preference_key(insight: Insight, position: int) -> Tuple[float, int, int, int]:
    """Larger key wins; earlier position wins on full ties."""
    return (
        insight.confidence,
        PRIORITY_RANK[insight.priority],
        CATEGORY_PRECEDENCE[insight.category],
        -position,
    )


def deduplicate_insights(insights: Sequence[Insight]) -> List[Insight]:
    """
    Keep one insight per (metric, category).

    Returns:
        Survivors in production order.
    """
    winners: Dict[Tuple[str, InsightCategory], int] = {}

    for index, insight in enumerate(insights):
        key = (insight.metric, insight.category)
        if key not in winners:
            winners[key] = index
            continue

        incumbent = winners[key]
        if _preference_key(insight, index) > _preference_key(insights[incumbent], incumbent):
            winners[key] = index

    return [insights[i] for i in sorted(winners.values())]


def sort_insights(insights: Sequence[Insight]) -> List[Insight]:
    """Stable sort: priority desc, then confidence desc."""
    return sorted(
        insights,
        key=lambda insight: (-PRIORITY_RANK[insight.priority], -insight.confidence),
    )


def prioritize_insights(
    insights: Sequence[Insight],
    config: InsightsConfig,
) -> List[Insight]:
    """
    Floor, deduplicate, sort and truncate a candidate list.

    Args:
        insights: Synthesized insights in detector production order.
        config: Engine configuration (confidence_floor, max_insights).

    Returns:
        At most config.max_insights insights, highest priority first.
    """
    kept = [i for i in insights if i.confidence >= config.confidence_floor]
    dropped = len(insights) - len(kept)
    if dropped:
        logger.debug(f"Dropped {dropped} insight(s) below confidence floor {config.confidence_floor}")

    ranked = sort_insights(deduplicate_insights(kept))
    return ranked[:config.max_insights]


# =============================================================================
# Input Identity Checks
# =============================================================================


def check_record_identity(
    records: Sequence[MetricRecord],
    label: str = "record",
) -> List[str]:
    """
    List identity problems in a batch of input records.

    Args:
        records: Historical or benchmark records.
        label: Prefix used in problem descriptions (e.g. "historical").

    Returns:
        One message per missing identity field, e.g.
        "historical[3] missing partnerId". Empty when every record is complete.
    """
    problems: List[str] = []
    for position, record in enumerate(records):
        for field in IDENTITY_FIELDS:
            if getattr(record, field) in (None, ""):
                problems.append(f"{label}[{position}] missing {field}")
    return problems


# =============================================================================
# Caller-side Filtering and Summary
# =============================================================================


def filter_insights(
    insights: Sequence[Insight],
    priority: Optional[InsightPriority] = None,
    category: Optional[InsightCategory] = None,
) -> List[Insight]:
    """Post-processing filter; order is preserved."""
    return [
        insight for insight in insights
        if (priority is None or insight.priority == priority)
        and (category is None or insight.category == category)
    ]


def is_benchmark_strength(insight: Insight) -> bool:
    """Top-decile peer comparison in the metric's favourable direction."""
    return (
        insight.category == InsightCategory.BENCHMARK
        and insight.priority == InsightPriority.HIGH
        and insight.impact == InsightImpact.POSITIVE
    )


def overall_score(insights: Sequence[Insight]) -> int:
    """
    Single 0-100 health score for an insight list.

    Example:
        one critical anomaly, two high insights of which one is a top-decile
        benchmark strength -> 100 - 15 - 7 - 7 + 5 = 76
    """
    score = SCORE_BASE
    for insight in insights:
        score -= SCORE_PENALTIES.get(insight.priority, 0)
        if is_benchmark_strength(insight):
            score += SCORE_STRENGTH_BONUS
    return max(0, min(SCORE_BASE, score))


def event_recommendations(insights: Sequence[Insight]) -> List[str]:
    """Next steps that only make sense across several insights."""
    recommendations: List[str] = []

    critical_count = sum(1 for i in insights if i.priority == InsightPriority.CRITICAL)
    if critical_count >= MULTI_ISSUE_THRESHOLD:
        recommendations.append(
            f"Multiple critical issues detected: {critical_count} critical issues "
            f"require immediate attention. Schedule a review to address them systematically."
        )

    weak_benchmarks = sum(
        1 for i in insights
        if i.category == InsightCategory.BENCHMARK and i.impact == InsightImpact.NEGATIVE
    )
    if weak_benchmarks >= MULTI_ISSUE_THRESHOLD:
        recommendations.append(
            "Below-average performance across metrics: study top-performing "
            "comparable events to identify practices worth adopting."
        )

    return recommendations


def summarize_insights(insights: Sequence[Insight]) -> InsightsSummary:
    """
    Derive the summary from a returned insight list.

    Counts always add up to len(insights). topStrengths / topWeaknesses list
    the titles of the first positive / negative impact insights in rank order.
    overallScore and recommendations are computed from the same list, so a
    filtered list gets a matching score.
    """
    counts = {priority: 0 for priority in InsightPriority}
    for insight in insights:
        counts[insight.priority] += 1

    strengths = [i.title for i in insights if i.impact == InsightImpact.POSITIVE]
    weaknesses = [i.title for i in insights if i.impact == InsightImpact.NEGATIVE]

    return InsightsSummary(
        total=len(insights),
        critical=counts[InsightPriority.CRITICAL],
        high=counts[InsightPriority.HIGH],
        medium=counts[InsightPriority.MEDIUM],
        low=counts[InsightPriority.LOW],
        topStrengths=strengths[:SUMMARY_TOP_N],
        topWeaknesses=weaknesses[:SUMMARY_TOP_N],
        overallScore=overall_score(insights),
        recommendations=event_recommendations(insights),
    )


# =============================================================================
# Cross-event Feed
# =============================================================================


def merge_event_reports(
    reports: Sequence[Tuple[MetricRecord, InsightsReport]],
    priority: Optional[InsightPriority] = None,
    category: Optional[InsightCategory] = None,
) -> List[EventInsight]:
    """
    Flatten several events' reports into one ranked feed.

    Each insight is tagged with its event. Filters apply before ranking;
    the sort is the same stable (priority, confidence) sort used per event,
    so equal insights keep report order.

    Args:
        reports: (current record, engine report) pairs, newest event first.
        priority: Keep only insights of this priority.
        category: Keep only insights of this category.

    Returns:
        Tagged insights, highest priority first.
    """
    feed: List[EventInsight] = []
    for current, report in reports:
        for insight in filter_insights(report.insights, priority=priority, category=category):
            feed.append(
                EventInsight(
                    **dict(insight),
                    eventId=report.eventId,
                    partnerId=report.partnerId,
                    partnerName=current.partnerName,
                    eventDate=report.eventDate,
                )
            )
    return sort_insights(feed)

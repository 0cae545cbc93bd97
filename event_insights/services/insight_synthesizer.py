"""
Insight Synthesizer - rendering raw detector signals as Insights.

A pure mapping from RawSignal to Insight. Title and message come from
templates keyed by (category, direction, priority) with named slots; the
recommendation comes from templates keyed by (category, impact).

Dispatch is on the evidence variant (AnomalyEvidence, TrendEvidence,
BenchmarkEvidence), each of which contributes its own slots. Fallbacks are
explicit, never a missing-key lookup:
- a (category, direction, priority) combination without a template uses the
  category's generic template
- evidence that does not match the signal's category uses the generic
  template built only from metric, category, priority and direction

Deterministic: identical signals render identical insights.
"""

from typing import Dict, Optional, Tuple

from event_insights.models import (
    LOWER_IS_BETTER,
    METRIC_LABELS,
    AnomalyEvidence,
    BenchmarkEvidence,
    Insight,
    InsightCategory,
    InsightImpact,
    InsightPriority,
    RawSignal,
    SignalDirection,
    TrendEvidence,
)


TemplateKey = Tuple[InsightCategory, SignalDirection, InsightPriority]

# (title, message)
TITLE_MESSAGE_TEMPLATES: Dict[TemplateKey, Tuple[str, str]] = {
    # -------------------------------------------------------------------------
    # Anomaly
    # -------------------------------------------------------------------------
    (InsightCategory.ANOMALY, SignalDirection.ABOVE, InsightPriority.CRITICAL): (
        "{label} is extremely high",
        "{label} of {current} is {deviation} above this partner's average of {mean}{note}.",
    ),
    (InsightCategory.ANOMALY, SignalDirection.ABOVE, InsightPriority.HIGH): (
        "{label} is unusually high",
        "{label} of {current} is {deviation} above this partner's average of {mean}{note}.",
    ),
    (InsightCategory.ANOMALY, SignalDirection.ABOVE, InsightPriority.MEDIUM): (
        "{label} is above its usual range",
        "{label} of {current} is {deviation} above this partner's average of {mean}{note}.",
    ),
    (InsightCategory.ANOMALY, SignalDirection.BELOW, InsightPriority.CRITICAL): (
        "{label} is extremely low",
        "{label} of {current} is {deviation} below this partner's average of {mean}{note}.",
    ),
    (InsightCategory.ANOMALY, SignalDirection.BELOW, InsightPriority.HIGH): (
        "{label} is unusually low",
        "{label} of {current} is {deviation} below this partner's average of {mean}{note}.",
    ),
    (InsightCategory.ANOMALY, SignalDirection.BELOW, InsightPriority.MEDIUM): (
        "{label} is below its usual range",
        "{label} of {current} is {deviation} below this partner's average of {mean}{note}.",
    ),
    # -------------------------------------------------------------------------
    # Trend
    # -------------------------------------------------------------------------
    (InsightCategory.TREND, SignalDirection.INCREASING, InsightPriority.HIGH): (
        "{label} shows a strong increasing trend",
        "{label} has grown {rate}% per event across the last {points} events "
        "(fit R² {r_squared}).",
    ),
    (InsightCategory.TREND, SignalDirection.INCREASING, InsightPriority.MEDIUM): (
        "{label} is trending up",
        "{label} has grown {rate}% per event across the last {points} events "
        "(fit R² {r_squared}).",
    ),
    (InsightCategory.TREND, SignalDirection.DECREASING, InsightPriority.HIGH): (
        "{label} shows a strong decreasing trend",
        "{label} has fallen {rate}% per event across the last {points} events "
        "(fit R² {r_squared}).",
    ),
    (InsightCategory.TREND, SignalDirection.DECREASING, InsightPriority.MEDIUM): (
        "{label} is trending down",
        "{label} has fallen {rate}% per event across the last {points} events "
        "(fit R² {r_squared}).",
    ),
    # -------------------------------------------------------------------------
    # Benchmark
    # -------------------------------------------------------------------------
    (InsightCategory.BENCHMARK, SignalDirection.ABOVE, InsightPriority.HIGH): (
        "{label} ranks in the top decile of peers",
        "{label} of {current} is at the {percentile} percentile of {pool_size} "
        "recent peer events (peer median {pool_median}).",
    ),
    (InsightCategory.BENCHMARK, SignalDirection.ABOVE, InsightPriority.MEDIUM): (
        "{label} ranks in the top quartile of peers",
        "{label} of {current} is at the {percentile} percentile of {pool_size} "
        "recent peer events (peer median {pool_median}).",
    ),
    (InsightCategory.BENCHMARK, SignalDirection.BELOW, InsightPriority.HIGH): (
        "{label} ranks in the bottom decile of peers",
        "{label} of {current} is at the {percentile} percentile of {pool_size} "
        "recent peer events (peer median {pool_median}).",
    ),
    (InsightCategory.BENCHMARK, SignalDirection.BELOW, InsightPriority.MEDIUM): (
        "{label} ranks in the bottom quartile of peers",
        "{label} of {current} is at the {percentile} percentile of {pool_size} "
        "recent peer events (peer median {pool_median}).",
    ),
}

CATEGORY_FALLBACK_TEMPLATES: Dict[InsightCategory, Tuple[str, str]] = {
    InsightCategory.ANOMALY: (
        "{label} deviates from its history",
        "{label} of {current} is {direction} this partner's average of {mean}.",
    ),
    InsightCategory.TREND: (
        "{label} is {direction}",
        "{label} changed {rate}% per event across the last {points} events.",
    ),
    InsightCategory.BENCHMARK: (
        "{label} stands out against peers",
        "{label} of {current} is at the {percentile} percentile of recent peer events.",
    ),
}

GENERIC_TEMPLATE: Tuple[str, str] = (
    "{label}: {category} finding",
    "{label} produced a {priority} {category} signal ({direction}).",
)

RECOMMENDATION_TEMPLATES: Dict[Tuple[InsightCategory, InsightImpact], str] = {
    (InsightCategory.ANOMALY, InsightImpact.POSITIVE):
        "Analyze what drove the exceptional {label_lower} so it can be replicated.",
    (InsightCategory.ANOMALY, InsightImpact.NEGATIVE):
        "Investigate why {label_lower} is significantly {direction} normal levels.",
    (InsightCategory.TREND, InsightImpact.POSITIVE):
        "Maintain the {label_lower} momentum; the trend projects {next_value} next event.",
    (InsightCategory.TREND, InsightImpact.NEGATIVE):
        "Address the {direction} {label_lower}; the trend projects {next_value} "
        "(±{margin}) next event.",
    (InsightCategory.BENCHMARK, InsightImpact.POSITIVE):
        "Document what works for {label_lower} and share it with other partners.",
    (InsightCategory.BENCHMARK, InsightImpact.NEGATIVE):
        "Study top-performing peers to find ways to improve {label_lower}.",
}


# =============================================================================
# Formatting Helpers
# =============================================================================


def metric_label(metric: str) -> str:
    """Display label for a metric key; unknown camelCase keys are split into words."""
    if metric in METRIC_LABELS:
        return METRIC_LABELS[metric]
    words = []
    current = ""
    for char in metric:
        if char.isupper() and current:
            words.append(current)
            current = char
        else:
            current += char
    if current:
        words.append(current)
    return " ".join(words).replace("_", " ").capitalize() if words else metric


def format_number(value: float) -> str:
    """Thousands separators; decimals only when the value is not integral."""
    if float(value).is_integer():
        return f"{value:,.0f}"
    if abs(value) >= 1000:
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def ordinal(value: float) -> str:
    """95 -> '95th', 1 -> '1st', 12.5 -> '12.5th'"""
    if not float(value).is_integer():
        return f"{value:.1f}th"
    number = int(value)
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def impact_for(metric: str, direction: SignalDirection) -> InsightImpact:
    """
    Good or bad news, from the signal direction and the metric's polarity.
    """
    went_up = direction in (SignalDirection.ABOVE, SignalDirection.INCREASING)
    if metric in LOWER_IS_BETTER:
        went_up = not went_up
    return InsightImpact.POSITIVE if went_up else InsightImpact.NEGATIVE


# =============================================================================
# Slot Builders (one per evidence variant)
# =============================================================================


def _base_slots(signal: RawSignal) -> Dict[str, str]:
    label = metric_label(signal.metric)
    return {
        "label": label,
        "label_lower": label.lower(),
        "category": signal.category.value,
        "priority": signal.priority.value,
        "direction": signal.direction.value,
    }


def _anomaly_slots(evidence: AnomalyEvidence) -> Dict[str, str]:
    if evidence.degenerate or evidence.zScore is None:
        deviation = "well"
        note = " (every previous event recorded exactly that value)"
    else:
        deviation = f"{abs(evidence.zScore):.1f} standard deviations"
        note = ""
    return {
        "current": format_number(evidence.currentValue),
        "mean": format_number(evidence.mean),
        "deviation": deviation,
        "note": note,
    }


def _trend_slots(evidence: TrendEvidence) -> Dict[str, str]:
    return {
        "current": format_number(evidence.currentValue),
        "rate": f"{abs(evidence.normalizedRate):.1f}",
        "points": str(evidence.points),
        "r_squared": f"{evidence.rSquared:.2f}",
        "next_value": format_number(evidence.nextValue),
        "margin": format_number(evidence.margin),
    }


def _benchmark_slots(evidence: BenchmarkEvidence) -> Dict[str, str]:
    return {
        "current": format_number(evidence.currentValue),
        "percentile": ordinal(evidence.percentile),
        "pool_size": str(evidence.poolSize),
        "pool_median": format_number(evidence.poolMedian),
    }


def _evidence_slots(signal: RawSignal) -> Optional[Dict[str, str]]:
    """
    Slots contributed by the evidence, or None when the evidence variant
    does not belong to the signal's category.
    """
    evidence = signal.evidence
    if isinstance(evidence, AnomalyEvidence) and signal.category == InsightCategory.ANOMALY:
        return _anomaly_slots(evidence)
    elif isinstance(evidence, TrendEvidence) and signal.category == InsightCategory.TREND:
        return _trend_slots(evidence)
    elif isinstance(evidence, BenchmarkEvidence) and signal.category == InsightCategory.BENCHMARK:
        return _benchmark_slots(evidence)
    else:
        return None


# =============================================================================
# Public API
# =============================================================================


def synthesize_insight(signal: RawSignal) -> Insight:
    """
    Render a RawSignal as an Insight.

    Args:
        signal: Scored detector output.

    Returns:
        Insight carrying the signal's priority, confidence and evidence
        unchanged, plus rendered title/message/recommendation.
    """
    slots = _base_slots(signal)
    impact = impact_for(signal.metric, signal.direction)
    recommendation: Optional[str] = None

    evidence_slots = _evidence_slots(signal)
    if evidence_slots is None:
        title_template, message_template = GENERIC_TEMPLATE
    else:
        slots.update(evidence_slots)
        key = (signal.category, signal.direction, signal.priority)
        if key in TITLE_MESSAGE_TEMPLATES:
            title_template, message_template = TITLE_MESSAGE_TEMPLATES[key]
        else:
            title_template, message_template = CATEGORY_FALLBACK_TEMPLATES[signal.category]

        recommendation_template = RECOMMENDATION_TEMPLATES.get((signal.category, impact))
        if recommendation_template is not None:
            recommendation = recommendation_template.format_map(slots)

    return Insight(
        id=f"{signal.category.value}-{signal.metric}",
        category=signal.category,
        priority=signal.priority,
        confidence=signal.confidence,
        metric=signal.metric,
        direction=signal.direction,
        impact=impact,
        title=title_template.format_map(slots),
        message=message_template.format_map(slots),
        recommendation=recommendation,
        evidence=signal.evidence,
    )

"""
Pydantic models for the Event Insights backend.

This module provides type-safe data validation and serialization for the
Insights Engine inputs (metric records, engine configuration), its internal
signal and evidence types, and its outputs (insights, summary, report), plus
the HTTP request/response contracts built on top of them.

Evidence is a discriminated union on `kind` so that every detector's output
is statically checkable:
- AnomalyEvidence: history mean, sample standard deviation, z-score
- TrendEvidence: regression slope, R², normalized rate, forecast
- BenchmarkEvidence: inclusive percentile rank, pool size, pool median

All models use Pydantic v2 syntax.
"""

from datetime import date as DateType
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from event_insights.models.enums import (
    InsightCategory,
    InsightImpact,
    InsightPriority,
    PerformanceRating,
    ReportStatus,
    SignalDirection,
)


# =============================================================================
# Input Models
# =============================================================================


class MetricRecord(BaseModel):
    """
    One event's pre-aggregated metrics, as produced by the aggregation pipeline.

    Identity fields are optional at the type level so that a record with a
    missing identity reaches the engine and is reported as a context or
    data-quality problem instead of failing deserialization.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "eventId": "665f1c2e9b1d4a0012ab34cd",
                "partnerId": "64a0c0ffee00000000000001",
                "partnerName": "FC Example",
                "eventDate": "2025-10-18",
                "metrics": {
                    "attendance": 12500,
                    "engagementRate": 14.2,
                    "merchandiseRate": 38.5,
                },
            }
        },
    )

    eventId: Optional[str] = Field(
        default=None,
        description="Identifier of the event this record aggregates",
    )
    partnerId: Optional[str] = Field(
        default=None,
        description="Identifier of the partner (team, league, venue) hosting the event",
    )
    partnerName: Optional[str] = Field(
        default=None,
        description="Partner display name",
    )
    eventDate: Optional[DateType] = Field(
        default=None,
        description="Date the event took place",
    )
    metrics: Dict[str, float] = Field(
        default_factory=dict,
        description="Metric key -> pre-aggregated numeric value",
    )


# =============================================================================
# Engine Configuration
# =============================================================================

# Longest lookback accepted for the history and benchmark windows
MAX_WINDOW_DAYS: int = 3650


class AnomalyThresholds(BaseModel):
    """|z| cut-offs for anomaly priorities and the confidence scale."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    critical: float = Field(default=3.0, gt=0)
    high: float = Field(default=2.0, gt=0)
    medium: float = Field(default=1.5, gt=0)
    # Confidence = min(1, |z| / confidence_scale)
    confidence_scale: float = Field(default=4.0, gt=0)


class TrendThresholds(BaseModel):
    """Rate (% per period) and R² cut-offs for trend priorities."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min_points: int = Field(default=4, ge=3)
    high_rate: float = Field(default=20.0, ge=0)
    high_r_squared: float = Field(default=0.5, ge=0, le=1)
    medium_rate: float = Field(default=10.0, ge=0)
    medium_r_squared: float = Field(default=0.3, ge=0, le=1)


class BenchmarkThresholds(BaseModel):
    """Percentile cut-offs for benchmark priorities."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min_pool_size: int = Field(default=10, ge=1)
    high_upper: float = Field(default=90.0, ge=0, le=100)
    high_lower: float = Field(default=10.0, ge=0, le=100)
    medium_upper: float = Field(default=75.0, ge=0, le=100)
    medium_lower: float = Field(default=25.0, ge=0, le=100)


class InsightsConfig(BaseModel):
    """
    Knobs for one engine invocation.

    Accepts snake_case names or their camelCase aliases
    (confidenceFloor, maxInsights, anomalyZThresholds, ...).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    confidence_floor: float = Field(default=0.5, ge=0, le=1)
    max_insights: int = Field(default=10, ge=1)
    min_history_points: int = Field(default=3, ge=2)
    anomaly_z_thresholds: AnomalyThresholds = Field(default_factory=AnomalyThresholds)
    trend_rate_thresholds: TrendThresholds = Field(default_factory=TrendThresholds)
    benchmark_percentile_thresholds: BenchmarkThresholds = Field(
        default_factory=BenchmarkThresholds
    )
    history_window_days: int = Field(default=365, ge=1, le=MAX_WINDOW_DAYS)
    history_max_records: int = Field(default=50, ge=1)
    benchmark_window_days: int = Field(default=183, ge=1, le=MAX_WINDOW_DAYS)
    benchmark_max_records: int = Field(default=500, ge=1)

    def merged_with(self, overrides: Optional["InsightsConfig"]) -> "InsightsConfig":
        """
        Apply the fields a caller explicitly set on top of this configuration.

        Unset fields keep this configuration's values; threshold groups are
        merged field by field, so {"anomalyZThresholds": {"critical": 4}}
        changes only the critical cut-off.

        Example:
            >>> base = InsightsConfig(confidence_floor=0.9)
            >>> base.merged_with(InsightsConfig(max_insights=3)).confidence_floor
            0.9
        """
        if overrides is None:
            return self

        updates = {}
        for name in overrides.model_fields_set:
            value = getattr(overrides, name)
            if isinstance(value, BaseModel):
                value = getattr(self, name).model_copy(
                    update=value.model_dump(exclude_unset=True)
                )
            updates[name] = value

        return self.model_copy(update=updates)


# =============================================================================
# Evidence (discriminated union on `kind`)
# =============================================================================


class AnomalyEvidence(BaseModel):
    """
    Inputs behind an anomaly finding.

    zScore is None when the history has zero variance (degenerate=True);
    the deviation is then maximal by definition.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["anomaly"] = "anomaly"
    currentValue: float
    mean: float
    stdDev: float
    zScore: Optional[float] = None
    sampleSize: int
    degenerate: bool = False


class TrendEvidence(BaseModel):
    """Inputs behind a trend finding (index-based linear regression)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["trend"] = "trend"
    currentValue: float
    slope: float
    intercept: float
    rSquared: float
    normalizedRate: float = Field(..., description="Percent change per period")
    points: int
    nextValue: float = Field(..., description="Fitted value one period ahead")
    margin: float = Field(..., description="±95% margin for nextValue")


class BenchmarkEvidence(BaseModel):
    """Inputs behind a peer benchmark finding."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["benchmark"] = "benchmark"
    currentValue: float
    percentile: float = Field(..., ge=0, le=100)
    poolSize: int
    poolMedian: float
    rating: PerformanceRating


Evidence = Annotated[
    Union[AnomalyEvidence, TrendEvidence, BenchmarkEvidence],
    Field(discriminator="kind"),
]


# =============================================================================
# Engine Signal and Output Models
# =============================================================================


class RawSignal(BaseModel):
    """
    A detector's scored finding before rendering.

    priority and confidence are computed by the detector from the evidence.
    """
    model_config = ConfigDict(frozen=True)

    category: InsightCategory
    metric: str
    direction: SignalDirection
    priority: InsightPriority
    confidence: float = Field(..., ge=0, le=1)
    evidence: Evidence


class Insight(BaseModel):
    """
    A rendered, prioritized, confidence-scored finding.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "anomaly-attendance",
                "category": "anomaly",
                "priority": "critical",
                "confidence": 1.0,
                "metric": "attendance",
                "direction": "above",
                "impact": "positive",
                "title": "Attendance is extremely high",
                "message": "Attendance of 500 is 71.1 standard deviations above this partner's average of 102.40.",
                "recommendation": "Analyze what drove the exceptional attendance so it can be replicated.",
                "evidence": {
                    "kind": "anomaly",
                    "currentValue": 500,
                    "mean": 102.4,
                    "stdDev": 5.59464,
                    "zScore": 71.068,
                    "sampleSize": 5,
                    "degenerate": False,
                },
            }
        },
    )

    id: str
    category: InsightCategory
    priority: InsightPriority
    confidence: float = Field(..., ge=0, le=1)
    metric: str
    direction: SignalDirection
    impact: InsightImpact
    title: str
    message: str
    recommendation: Optional[str] = None
    evidence: Evidence


class InsightsSummary(BaseModel):
    """Counts, score and event-level recommendations derived from a returned insight list."""
    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    topStrengths: List[str] = Field(default_factory=list)
    topWeaknesses: List[str] = Field(default_factory=list)
    overallScore: int = Field(default=100, ge=0, le=100, description="0-100 event health score")
    recommendations: List[str] = Field(
        default_factory=list,
        description="Next steps spanning several insights",
    )


class InsightsReport(BaseModel):
    """
    Result of one engine invocation.

    Carries no timestamps so that identical inputs serialize identically;
    callers attach generation time.
    """
    eventId: Optional[str] = None
    partnerId: Optional[str] = None
    eventDate: Optional[DateType] = None
    status: ReportStatus
    error: Optional[str] = None
    insights: List[Insight] = Field(default_factory=list)
    summary: InsightsSummary = Field(default_factory=InsightsSummary)
    historicalEventsAnalyzed: int = 0
    benchmarkEventsAnalyzed: int = 0


# =============================================================================
# API Contracts
# =============================================================================


class InsightsRequest(BaseModel):
    """Request body for running the engine on caller-supplied records."""
    currentRecord: MetricRecord
    historicalRecords: List[MetricRecord] = Field(default_factory=list)
    benchmarkRecords: List[MetricRecord] = Field(default_factory=list)
    config: Optional[InsightsConfig] = Field(
        default=None,
        description="Fields to override on the default engine configuration; unset fields keep the server defaults",
    )


class InsightsContext(BaseModel):
    historicalEventsAnalyzed: int
    benchmarkEventsAnalyzed: int


class InsightsResponse(BaseModel):
    """API response wrapping an InsightsReport with request metadata."""
    eventId: Optional[str] = None
    partnerId: Optional[str] = None
    partnerName: Optional[str] = None
    eventDate: Optional[DateType] = None
    generatedAt: str
    status: ReportStatus
    error: Optional[str] = None
    summary: InsightsSummary
    insights: List[Insight]
    context: InsightsContext


class EventInsight(Insight):
    """An insight tagged with the event it was generated for (feed entries)."""
    eventId: Optional[str] = None
    partnerId: Optional[str] = None
    partnerName: Optional[str] = None
    eventDate: Optional[DateType] = None


class InsightsFeedResponse(BaseModel):
    """API response for the cross-event insights feed."""
    generatedAt: str
    eventsAnalyzed: int = Field(..., description="Events whose report was included")
    eventsSkipped: int = Field(0, description="Events that failed and were left out")
    summary: InsightsSummary
    insights: List[EventInsight]

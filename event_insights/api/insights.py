"""
FastAPI router module for Event Insights endpoints.

This module implements endpoints for:
- Running the Insights Engine on caller-supplied records
- Generating insights for a stored event, loading its partner history and
  the cross-partner benchmark pool from analytics_aggregate
- Generating insights for a partner's most recent event
- A cross-event feed over the most recent events

The single-event endpoints return the full prioritized report; the optional
`priority` and `category` query parameters are applied afterwards as a
post-processing filter, and the summary is recomputed from the filtered list
so that counts always match the returned insights.

Error mapping:
- MissingContextError -> 400 (current record lacks identity, partner, date
  or metrics)
- RecordNotFoundError -> 404 (no aggregate for the event or partner id)
- anything else      -> 500
"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from fastapi import APIRouter, HTTPException, Query

from event_insights.core.dependencies import InsightsConfigDep
from event_insights.core.exceptions import MissingContextError, RecordNotFoundError
from event_insights.models import (
    Insight,
    InsightCategory,
    InsightPriority,
    InsightsConfig,
    InsightsContext,
    InsightsFeedResponse,
    InsightsReport,
    InsightsRequest,
    InsightsResponse,
    MetricRecord,
)
from event_insights.services.insight_prioritizer import (
    filter_insights,
    merge_event_reports,
    summarize_insights,
)
from event_insights.services.insights_engine import generate_insights
from event_insights.services.record_source import (
    fetch_benchmark_records,
    fetch_event_record,
    fetch_latest_partner_record,
    fetch_partner_history,
    fetch_recent_event_records,
)

# Configure logging
logger = logging.getLogger(__name__)

# Create router with prefix and tags for OpenAPI documentation
router = APIRouter(prefix="/insights", tags=["insights"])

# Bounds for the number of events analysed by the feed
FEED_DEFAULT_LIMIT: int = 10
FEED_MAX_LIMIT: int = 50


# =============================================================================
# Helper Functions
# =============================================================================


async def analyze_stored_record(
    current: MetricRecord,
    config: InsightsConfig,
) -> InsightsReport:
    """
    Load a stored record's partner history and peer pool, then run the engine.

    Raises:
        MissingContextError: If the record has no partner or event date.
    """
    if current.partnerId is None or current.eventDate is None:
        raise MissingContextError(f"Event {current.eventId} has no partner or event date")

    historical = await fetch_partner_history(current, config)
    benchmark_pool = await fetch_benchmark_records(current, config)

    return generate_insights(current, historical, benchmark_pool, config)


def build_response(
    current: MetricRecord,
    report: InsightsReport,
    priority: Optional[InsightPriority] = None,
    category: Optional[InsightCategory] = None,
    include_recommendations: bool = True,
) -> InsightsResponse:
    """
    Wrap an engine report in the API response, applying caller filters.

    Args:
        current: The analysed record (supplies partnerName).
        report: Engine output.
        priority: Keep only insights of this priority.
        category: Keep only insights of this category.
        include_recommendations: When False, recommendation is cleared.

    Returns:
        InsightsResponse stamped with the generation time.
    """
    insights: List[Insight] = list(report.insights)
    summary = report.summary

    if priority is not None or category is not None:
        insights = filter_insights(insights, priority=priority, category=category)
        summary = summarize_insights(insights)

    if not include_recommendations:
        insights = [i.model_copy(update={"recommendation": None}) for i in insights]

    return InsightsResponse(
        eventId=report.eventId,
        partnerId=report.partnerId,
        partnerName=current.partnerName,
        eventDate=report.eventDate,
        generatedAt=datetime.now(timezone.utc).isoformat(),
        status=report.status,
        error=report.error,
        summary=summary,
        insights=insights,
        context=InsightsContext(
            historicalEventsAnalyzed=report.historicalEventsAnalyzed,
            benchmarkEventsAnalyzed=report.benchmarkEventsAnalyzed,
        ),
    )


# =============================================================================
# Insights Endpoints
# =============================================================================


@router.post("/generate", response_model=InsightsResponse)
async def generate_from_records(
    request: InsightsRequest,
    config: InsightsConfigDep,
    priority: Optional[InsightPriority] = Query(None, description="Return only this priority"),
    category: Optional[InsightCategory] = Query(None, description="Return only this category"),
    include_recommendations: bool = Query(
        True,
        alias="includeRecommendations",
        description="Include recommendation text in each insight",
    ),
) -> InsightsResponse:
    """
    Run the Insights Engine on the records supplied in the request body.

    Fields set in the request's `config` are merged over the default engine
    configuration derived from application settings; unset fields keep the
    server defaults.

    Args:
        request: Current record, partner history and benchmark pool.
        config: Default engine configuration (injected).
        priority: Optional post-processing priority filter.
        category: Optional post-processing category filter.
        include_recommendations: Whether to keep recommendation text.

    Returns:
        InsightsResponse with the ranked insights and summary.

    Raises:
        HTTPException 400: If the current record lacks required context
        HTTPException 500: If insight generation fails
    """
    try:
        report = generate_insights(
            request.currentRecord,
            request.historicalRecords,
            request.benchmarkRecords,
            config.merged_with(request.config),
        )
        return build_response(
            request.currentRecord,
            report,
            priority=priority,
            category=category,
            include_recommendations=include_recommendations,
        )

    except MissingContextError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    except Exception as e:
        logger.error(f"Error generating insights: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error generating insights: {str(e)}",
        )


@router.get("/events/{event_id}", response_model=InsightsResponse)
async def get_event_insights(
    event_id: str,
    config: InsightsConfigDep,
    priority: Optional[InsightPriority] = Query(None, description="Return only this priority"),
    category: Optional[InsightCategory] = Query(None, description="Return only this category"),
    include_recommendations: bool = Query(
        True,
        alias="includeRecommendations",
        description="Include recommendation text in each insight",
    ),
) -> InsightsResponse:
    """
    Generate insights for a stored event.

    Loads the event's aggregate, the partner's history within the lookback
    window and the cross-partner benchmark pool, then runs the engine.

    Args:
        event_id: Event identifier in analytics_aggregate.
        config: Engine configuration (injected from settings).
        priority: Optional post-processing priority filter.
        category: Optional post-processing category filter.
        include_recommendations: Whether to keep recommendation text.

    Returns:
        InsightsResponse with the ranked insights and summary.

    Raises:
        HTTPException 404: If the event has no aggregate
        HTTPException 400: If the stored record lacks required context
        HTTPException 500: If loading or generation fails
    """
    try:
        current = await fetch_event_record(event_id)
        report = await analyze_stored_record(current, config)
        return build_response(
            current,
            report,
            priority=priority,
            category=category,
            include_recommendations=include_recommendations,
        )

    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MissingContextError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    except Exception as e:
        logger.error(f"Error generating insights for event {event_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error generating insights: {str(e)}",
        )


@router.get("/partners/{partner_id}", response_model=InsightsResponse)
async def get_partner_insights(
    partner_id: str,
    config: InsightsConfigDep,
    priority: Optional[InsightPriority] = Query(None, description="Return only this priority"),
    category: Optional[InsightCategory] = Query(None, description="Return only this category"),
    include_recommendations: bool = Query(
        True,
        alias="includeRecommendations",
        description="Include recommendation text in each insight",
    ),
) -> InsightsResponse:
    """
    Generate insights for a partner's most recent event.

    Raises:
        HTTPException 404: If the partner has no dated events
        HTTPException 400: If the latest record lacks required context
        HTTPException 500: If loading or generation fails
    """
    try:
        current = await fetch_latest_partner_record(partner_id)
        report = await analyze_stored_record(current, config)
        return build_response(
            current,
            report,
            priority=priority,
            category=category,
            include_recommendations=include_recommendations,
        )

    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MissingContextError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    except Exception as e:
        logger.error(f"Error generating insights for partner {partner_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error generating insights: {str(e)}",
        )


@router.get("", response_model=InsightsFeedResponse)
async def get_insights_feed(
    config: InsightsConfigDep,
    limit: int = Query(
        FEED_DEFAULT_LIMIT,
        ge=1,
        le=FEED_MAX_LIMIT,
        description="Number of most recent events to analyse",
    ),
    since: Optional[date] = Query(None, description="Only events on or after this date"),
    priority: Optional[InsightPriority] = Query(None, description="Return only this priority"),
    category: Optional[InsightCategory] = Query(None, description="Return only this category"),
    include_recommendations: bool = Query(
        True,
        alias="includeRecommendations",
        description="Include recommendation text in each insight",
    ),
) -> InsightsFeedResponse:
    """
    Insights across the most recent events, ranked together.

    Each event is analysed like GET /insights/events/{event_id}. An event
    that cannot be analysed is logged and left out of the feed rather than
    failing the whole request.

    Returns:
        InsightsFeedResponse with every event's insights tagged by event,
        filtered, and sorted by priority then confidence.

    Raises:
        HTTPException 500: If the recent events cannot be loaded
    """
    try:
        records = await fetch_recent_event_records(limit, since)
    except Exception as e:
        logger.error(f"Error loading recent events: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error loading recent events: {str(e)}",
        )

    reports: List[Tuple[MetricRecord, InsightsReport]] = []
    skipped = 0
    for current in records:
        try:
            reports.append((current, await analyze_stored_record(current, config)))
        except Exception as e:
            skipped += 1
            logger.error(f"Failed to generate insights for event {current.eventId}: {e}", exc_info=True)

    insights = merge_event_reports(reports, priority=priority, category=category)
    if not include_recommendations:
        insights = [i.model_copy(update={"recommendation": None}) for i in insights]

    logger.info(
        f"Insights feed: {len(reports)} event(s) analysed, {skipped} skipped, "
        f"{len(insights)} insight(s)"
    )

    return InsightsFeedResponse(
        generatedAt=datetime.now(timezone.utc).isoformat(),
        eventsAnalyzed=len(reports),
        eventsSkipped=skipped,
        summary=summarize_insights(insights),
        insights=insights,
    )

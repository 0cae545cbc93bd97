"""
Event Insights API package initialization.

This package contains FastAPI router modules for the Event Insights service:
- insights: Insight generation for supplied records, a stored event, a
  partner's latest event, and the cross-event feed
"""

from fastapi import APIRouter

# Import router modules
from event_insights.api.insights import router as insights_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(insights_router)  # insights router has its own prefix

# Export all routers for selective imports
__all__ = [
    "api_router",
    "insights_router",
]

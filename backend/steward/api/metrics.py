"""
Metrics API endpoint for observability.

Provides:
- Summary statistics for buffered metrics
- Recent metric events with filtering
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, List

from fastapi import APIRouter, Query
from pydantic import BaseModel

from steward.api.schemas import Envelope, ok
from steward.core.metrics import metrics

router = APIRouter()


class MetricsSummary(BaseModel):
    """Summary of metrics over a time period."""
    period_hours: int
    total_events: int
    by_category: dict
    by_event: dict
    cache_hit_rate: Optional[float]
    github_requests: int
    github_failures: int
    comments_analyzed: int
    impact_calculations: int
    syncs_completed: int


class MetricEventResponse(BaseModel):
    """Single metric event for API response."""
    timestamp: str
    category: str
    event_type: str
    subject: Optional[str]
    value: float
    metadata: dict


@router.get("/summary", response_model=Envelope[MetricsSummary])
async def get_metrics_summary(
    hours: int = Query(default=24, ge=1, le=168, description="Hours of history to include")
):
    """Aggregated counts and rates for all metric categories."""
    return ok(metrics.get_summary(hours=hours))


@router.get("/events", response_model=Envelope[List[MetricEventResponse]])
async def get_recent_events(
    category: Optional[str] = Query(default=None, description="Filter by category"),
    event_type: Optional[str] = Query(default=None, description="Filter by event type"),
    subject: Optional[str] = Query(default=None, description="Filter by subject"),
    limit: int = Query(default=100, ge=1, le=1000, description="Max events to return"),
    hours: int = Query(default=24, ge=1, le=168, description="Hours of history")
):
    """Recent metric events, most recent first."""
    cutoff = datetime.now(timezone.utc) - timedelta(hours=hours)

    events = []
    for event in reversed(metrics.get_buffer()):
        if event.timestamp < cutoff:
            continue
        if category and event.category != category:
            continue
        if event_type and event.event_type != event_type:
            continue
        if subject and event.subject != subject:
            continue

        events.append(event.to_dict())
        if len(events) >= limit:
            break

    return ok(events)


@router.post("/clear", response_model=Envelope[dict])
async def clear_metrics_buffer():
    """Clear the in-memory metrics buffer."""
    return ok({"status": "cleared", "events_cleared": metrics.clear_buffer()})

"""
Live GitHub dashboard routes.

Payloads are computed from the GitHub REST API on demand and cached in Redis.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from steward.api.dependencies import get_dashboard_service
from steward.api.errors import route_errors
from steward.api.schemas import AnalyzeTextRequest, Envelope, LexiconSentimentSchema, ok
from steward.services.github_dashboard_service import GitHubDashboardService

router = APIRouter()


def _require_username(username: Optional[str]) -> str:
    if not username:
        raise HTTPException(status_code=400, detail="Username is required")
    return username


@router.get("/dashboard", response_model=Envelope[dict[str, Any]])
async def get_dashboard(
    username: Optional[str] = Query(default=None),
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    """Headline counts, recent activity and top repositories."""
    with route_errors("Failed to fetch dashboard data"):
        return ok(await service.get_dashboard(_require_username(username)))


@router.get("/reviews", response_model=Envelope[dict[str, Any]])
async def get_reviews(
    username: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    repo: Optional[str] = Query(default=None),
    priority: Optional[str] = Query(default=None),
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    with route_errors("Failed to fetch reviews"):
        return ok(await service.get_reviews(
            _require_username(username), status=status, repo=repo, priority=priority
        ))


@router.get("/issues", response_model=Envelope[list[dict[str, Any]]])
async def get_issues(
    username: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    repo: Optional[str] = Query(default=None),
    priority: Optional[str] = Query(default=None),
    labels: Optional[str] = Query(default=None, description="Comma separated label names"),
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    wanted = [label.strip() for label in labels.split(",") if label.strip()] if labels else None
    with route_errors("Failed to fetch issues"):
        return ok(await service.get_issues(
            _require_username(username),
            status=status,
            repo=repo,
            priority=priority,
            labels=wanted,
        ))


@router.get("/mentorship", response_model=Envelope[dict[str, Any]])
async def get_mentorship(
    username: Optional[str] = Query(default=None),
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    with route_errors("Failed to fetch mentorship data"):
        return ok(await service.get_mentorship(_require_username(username)))


@router.get("/impact", response_model=Envelope[dict[str, Any]])
async def get_impact(
    username: Optional[str] = Query(default=None),
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    with route_errors("Failed to fetch impact data"):
        return ok(await service.get_impact(_require_username(username)))


@router.get("/profile/share/{username}", response_model=Envelope[dict[str, Any]])
async def share_profile(
    username: str,
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    """Public URL, QR code descriptor and profile card for sharing."""
    with route_errors("Failed to generate shareable profile"):
        return ok(await service.share_profile(username))


@router.get("/profile/{username}", response_model=Envelope[dict[str, Any]])
async def get_profile(
    username: str,
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    with route_errors("Failed to fetch profile data"):
        return ok(await service.get_profile(username))


@router.get("/sentiment/analysis", response_model=Envelope[dict[str, Any]])
async def get_sentiment_analysis(
    username: Optional[str] = Query(default=None),
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    """Sentiment trends, heatmap and personality over the cached reviews."""
    with route_errors("Failed to perform sentiment analysis"):
        analysis = await service.get_sentiment_analysis(_require_username(username))
        if analysis is None:
            raise HTTPException(status_code=404, detail="No review data found")
        return ok(analysis)


@router.post("/sentiment/analyze", response_model=Envelope[LexiconSentimentSchema])
async def analyze_text(
    request: Optional[AnalyzeTextRequest] = None,
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    if request is None or not request.text:
        raise HTTPException(status_code=400, detail="Text is required")
    with route_errors("Failed to analyze text"):
        return ok(service.analyze_text(request.text))


@router.get("/community/impact", response_model=Envelope[dict[str, Any]])
async def get_community_impact(
    username: Optional[str] = Query(default=None),
    service: GitHubDashboardService = Depends(get_dashboard_service),
):
    with route_errors("Failed to calculate community impact"):
        impact = await service.get_community_impact(_require_username(username))
        if impact is None:
            raise HTTPException(status_code=404, detail="User data not found")
        return ok(impact)

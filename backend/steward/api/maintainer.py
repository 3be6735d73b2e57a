"""
Maintainer API Router.

Routes over the persisted maintainer schema; the subject maintainer is named
by a ``username`` query or path parameter.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from steward.analysis.impact import ImpactMetrics
from steward.api.dependencies import (
    ClientFactory,
    get_comment_service,
    get_github_client_factory,
    get_impact_service,
    get_maintainer_service,
)
from steward.api.errors import route_errors
from steward.api.schemas import (
    AnalyzeCommentRequest,
    BatchAnalysisSchema,
    BatchAnalyzeRequest,
    Envelope,
    MessageResponse,
    RepositorySnapshotRequest,
    SentimentResultSchema,
    StoreImpactMetricsRequest,
    SyncRequest,
    SyncResult,
    ok,
)
from steward.core.config import settings
from steward.core.database import get_db
from steward.services.comment_analysis_service import CommentAnalysisService
from steward.services.impact_service import ImpactService
from steward.services.maintainer_service import MaintainerService
from steward.services.sync_service import SyncService

router = APIRouter()

TIMEFRAMES = ("week", "month", "year")


def _require_username(username: Optional[str]) -> str:
    if not username:
        raise HTTPException(status_code=400, detail="Username is required")
    return username


# ---------- Activity ----------

@router.get("/dashboard", response_model=Envelope[dict[str, Any]])
async def get_dashboard(
    username: Optional[str] = Query(default=None),
    service: MaintainerService = Depends(get_maintainer_service),
):
    """30-day activity counts and the latest community impact row."""
    with route_errors("Failed to get dashboard"):
        return ok(await service.get_dashboard(_require_username(username)))


@router.get("/pr-reviews", response_model=Envelope[dict[str, Any]])
async def get_pr_reviews(
    username: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    repository: Optional[str] = Query(default=None),
    sentiment: Optional[str] = Query(default=None),
    service: MaintainerService = Depends(get_maintainer_service),
):
    with route_errors("Failed to get PR reviews"):
        return ok(await service.list_pr_reviews(
            _require_username(username), page, limit, repository=repository, sentiment=sentiment
        ))


@router.get("/issue-triage", response_model=Envelope[dict[str, Any]])
async def get_issue_triage(
    username: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    action: Optional[str] = Query(default=None),
    repository: Optional[str] = Query(default=None),
    service: MaintainerService = Depends(get_maintainer_service),
):
    with route_errors("Failed to get issue triage"):
        return ok(await service.list_issue_triage(
            _require_username(username), page, limit, action=action, repository=repository
        ))


@router.get("/mentorship", response_model=Envelope[dict[str, Any]])
async def get_mentorship(
    username: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    type: Optional[str] = Query(default=None),
    impact: Optional[str] = Query(default=None),
    service: MaintainerService = Depends(get_maintainer_service),
):
    with route_errors("Failed to get mentorship activities"):
        return ok(await service.list_mentorship(
            _require_username(username), page, limit, type=type, impact=impact
        ))


@router.get("/community-impact", response_model=Envelope[dict[str, Any]])
async def get_community_impact(
    username: Optional[str] = Query(default=None),
    period: str = Query(default="MONTHLY"),
    service: MaintainerService = Depends(get_maintainer_service),
):
    with route_errors("Failed to get community impact"):
        return ok(await service.get_community_impact(_require_username(username), period))


@router.post("/sync", response_model=Envelope[SyncResult])
async def sync_from_github(
    username: Optional[str] = Query(default=None),
    request: Optional[SyncRequest] = None,
    db: AsyncSession = Depends(get_db),
    client_factory: ClientFactory = Depends(get_github_client_factory),
):
    """Pull repositories, reviews and triage comments from GitHub."""
    username = _require_username(username)
    token = (request.githubToken if request else None) or settings.GITHUB_TOKEN
    if not token:
        raise HTTPException(status_code=400, detail="GitHub token required")

    with route_errors("Failed to sync from GitHub"):
        client = client_factory(token)
        try:
            result = await SyncService(client, session=db).sync_user(username)
        finally:
            await client.aclose()
        return ok(result)


# ---------- Profiles ----------

@router.get("/profile/{username}", response_model=Envelope[dict[str, Any]])
async def get_shareable_profile(
    username: str,
    service: MaintainerService = Depends(get_maintainer_service),
):
    with route_errors("Failed to get shareable profile"):
        return ok(await service.get_shareable_profile(username))


@router.get("/public-profile/{username}", response_model=Envelope[dict[str, Any]])
async def get_public_profile(
    username: str,
    service: MaintainerService = Depends(get_maintainer_service),
):
    with route_errors("Failed to get public profile"):
        return ok(await service.get_public_profile(username))


# ---------- Sentiment ----------

@router.get("/sentiment-analysis", response_model=Envelope[dict[str, Any]])
async def get_sentiment_analysis(
    username: Optional[str] = Query(default=None),
    timeframe: str = Query(default="month"),
    service: MaintainerService = Depends(get_maintainer_service),
):
    if timeframe not in TIMEFRAMES:
        raise HTTPException(status_code=400, detail="timeframe must be week, month or year")
    with route_errors("Failed to get sentiment analysis"):
        return ok(await service.get_sentiment_analysis(_require_username(username), timeframe))


@router.post("/analyze-comment", response_model=Envelope[SentimentResultSchema])
async def analyze_comment(
    request: Optional[AnalyzeCommentRequest] = None,
    service: CommentAnalysisService = Depends(get_comment_service),
):
    if request is None or not request.commentText:
        raise HTTPException(status_code=400, detail="Comment text is required")
    with route_errors("Failed to analyze comment"):
        return ok(service.analyze_pr_comment(request.commentText).to_dict())


@router.post("/batch-analyze", response_model=Envelope[BatchAnalysisSchema])
async def batch_analyze_comments(
    request: Optional[BatchAnalyzeRequest] = None,
    service: CommentAnalysisService = Depends(get_comment_service),
):
    comments = request.comments if request else None
    if not isinstance(comments, list):
        raise HTTPException(status_code=400, detail="Comments array is required")
    with route_errors("Failed to analyze comments"):
        analyses = service.batch_analyze_comments(str(c) for c in comments)
        return ok({"analyses": [a.to_dict() for a in analyses]})


@router.get("/sentiment-insights", response_model=Envelope[dict[str, Any]])
async def get_sentiment_insights(
    username: Optional[str] = Query(default=None),
    service: MaintainerService = Depends(get_maintainer_service),
):
    with route_errors("Failed to get sentiment insights"):
        return ok(await service.get_sentiment_insights(_require_username(username)))


# ---------- Impact ----------

@router.get("/impact-analysis", response_model=Envelope[dict[str, Any]])
async def get_impact_analysis(
    username: Optional[str] = Query(default=None),
    repository: Optional[str] = Query(default=None),
    maintainers: MaintainerService = Depends(get_maintainer_service),
    service: ImpactService = Depends(get_impact_service),
):
    """Contributor retention, repository health and mentorship folded into one score."""
    with route_errors("Failed to get impact analysis"):
        user = await maintainers.get_user(_require_username(username))
        analysis = await service.calculate_maintainer_impact(
            user.id, repository_filter=[repository] if repository else None
        )
        return ok(analysis.to_dict())


@router.post("/store-impact-metrics", response_model=Envelope[MessageResponse])
async def store_impact_metrics(
    request: Optional[StoreImpactMetricsRequest] = None,
    username: Optional[str] = Query(default=None),
    maintainers: MaintainerService = Depends(get_maintainer_service),
    service: ImpactService = Depends(get_impact_service),
):
    if request is None or request.metrics is None or not request.period:
        raise HTTPException(status_code=400, detail="Metrics and period are required")
    with route_errors("Failed to store impact metrics"):
        user = await maintainers.get_user(_require_username(username))
        m = request.metrics
        await service.store_impact_metrics(
            user.id,
            ImpactMetrics(
                new_contributors=m.newContributors,
                returning_contributors=m.returningContributors,
                contributor_retention_rate=m.contributorRetentionRate,
                contributor_growth_rate=m.contributorGrowthRate,
                issues_resolved=m.issuesResolved,
                prs_merged=m.prsMerged,
                activity_growth=m.activityGrowth,
                repository_health_score=m.repositoryHealthScore,
                mentorship_score=m.mentorshipScore,
                contributor_quality_improvement=m.contributorQualityImprovement,
                long_term_impact_score=m.longTermImpactScore,
                overall_impact_score=m.overallImpactScore,
                predicted_long_term_impact=m.predictedLongTermImpact,
            ),
            request.period,
        )
        return ok({"message": "Impact metrics stored successfully"})


@router.post("/create-repository-snapshot", response_model=Envelope[MessageResponse])
async def create_repository_snapshot(
    request: Optional[RepositorySnapshotRequest] = None,
    service: ImpactService = Depends(get_impact_service),
):
    if request is None or request.repositoryId is None:
        raise HTTPException(status_code=400, detail="Repository id is required")
    with route_errors("Failed to create repository snapshot"):
        snapshot = await service.create_repository_snapshot(request.repositoryId, request.metrics)
        if snapshot is None:
            raise HTTPException(status_code=404, detail="Repository not found")
        return ok({"message": "Repository snapshot created successfully"})

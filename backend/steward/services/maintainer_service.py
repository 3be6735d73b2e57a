"""
Read-side queries over persisted maintainer activity.

Provides:
- Dashboard counts over the last 30 days
- Paginated PR review / issue triage / mentorship listings with stats
- Community impact history with trends and averages
- Shareable and public profiles
- Sentiment trends, heatmap and insights over stored reviews
"""

import logging
import math
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from steward.analysis.personality import (
    SentimentResult,
    calculate_maintainer_personality,
    extract_emotions,
    extract_traits,
    review_insights,
)
from steward.analysis.sentiment import NEUTRAL
from steward.analysis.trends import ScoredSample, sentiment_heatmap, sentiment_trends
from steward.core.database import AsyncSessionLocal
from steward.models.base import utc_now
from steward.models.community_impact import CommunityImpact
from steward.models.contribution import Contribution
from steward.models.impact_metric import ImpactMetric
from steward.models.issue import Issue
from steward.models.issue_triage import IssueTriage
from steward.models.mentorship_activity import MentorshipActivity
from steward.models.pr_review import PRReview
from steward.models.repository import Repository
from steward.models.user import User

logger = logging.getLogger(__name__)

RECENT_DAYS = 30
COMMUNITY_PERIODS = 12
SENTIMENT_REVIEW_LIMIT = 100
INSIGHT_REVIEW_LIMIT = 50
PROFILE_ITEMS = 10
PROFILE_REPOSITORIES = 5
ACTIVE_MAINTAINER_DAYS = 180

# Stored reviews carry only a category and score
STORED_CONFIDENCE = 0.8


class MaintainerLookupError(Exception):
    status_code = 404

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UserNotFoundError(MaintainerLookupError):
    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class NotMaintainerError(MaintainerLookupError):
    status_code = 403

    def __init__(self, message: str = "User is not a maintainer"):
        super().__init__(message)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def stored_review_result(review: PRReview) -> SentimentResult:
    return SentimentResult(
        sentiment=review.sentiment or NEUTRAL,
        score=review.sentiment_score or 0.0,
        confidence=STORED_CONFIDENCE,
        emotions=extract_emotions(review.body),
        personality=extract_traits(review.body),
    )


def repository_dict(repo: Repository) -> dict:
    return {
        "id": repo.id,
        "name": repo.name,
        "fullName": repo.full_name,
        "description": repo.description or "",
        "stars": repo.stars,
        "forks": repo.forks,
        "language": repo.language or "Unknown",
        "url": repo.url,
    }


def review_dict(review: PRReview) -> dict:
    repo = review.repository
    return {
        "id": review.id,
        "prNumber": review.pr_number,
        "title": review.title,
        "body": review.body,
        "state": review.state,
        "sentiment": review.sentiment,
        "sentimentScore": review.sentiment_score,
        "url": review.url,
        "createdAt": _iso(review.created_at),
        "repository": {
            "name": repo.name,
            "fullName": repo.full_name,
            "language": repo.language,
        } if repo else None,
    }


def triage_dict(triage: IssueTriage) -> dict:
    issue = triage.issue
    return {
        "id": triage.id,
        "action": triage.action,
        "comment": triage.comment,
        "createdAt": _iso(triage.created_at),
        "issue": {
            "number": issue.number,
            "title": issue.title,
            "state": issue.state,
            "url": issue.url,
            "repository": {
                "name": issue.repository.name,
                "fullName": issue.repository.full_name,
            },
        } if issue else None,
    }


def mentorship_dict(activity: MentorshipActivity) -> dict:
    return {
        "id": activity.id,
        "type": activity.type,
        "impact": activity.impact,
        "description": activity.description,
        "url": activity.url,
        "contributorId": activity.contributor_id,
        "createdAt": _iso(activity.created_at),
    }


def community_impact_dict(row: CommunityImpact) -> dict:
    return {
        "id": row.id,
        "period": row.period,
        "startDate": row.start_date.isoformat(),
        "endDate": row.end_date.isoformat(),
        "maintainerScore": row.maintainer_score,
        "communityScore": row.community_score,
        "leadershipScore": row.leadership_score,
    }


class MaintainerService:
    """Queries behind the persisted maintainer API."""

    def __init__(self, session: Optional[AsyncSession] = None):
        self.session = session

    async def get_user(self, username: str, require_maintainer: bool = False) -> User:
        async with self._get_session() as session:
            user = (
                await session.execute(select(User).where(User.github_username == username))
            ).scalar_one_or_none()
        if user is None:
            raise UserNotFoundError()
        if require_maintainer and not user.is_maintainer:
            raise NotMaintainerError()
        return user

    async def get_dashboard(self, username: str, now: Optional[datetime] = None) -> dict:
        user = await self.get_user(username, require_maintainer=True)
        now = now or utc_now()
        since = now - timedelta(days=RECENT_DAYS)

        async with self._get_session() as session:
            counts = {}
            for key, model in (
                ("prReviews", PRReview),
                ("issueTriage", IssueTriage),
                ("mentorship", MentorshipActivity),
                ("contributions", Contribution),
            ):
                stmt = select(func.count(model.id)).where(
                    model.user_id == user.id, model.created_at >= since
                )
                counts[key] = (await session.execute(stmt)).scalar_one()

            latest = (
                await session.execute(
                    select(CommunityImpact)
                    .where(CommunityImpact.user_id == user.id)
                    .order_by(CommunityImpact.created_at.desc(), CommunityImpact.id.desc())
                    .limit(1)
                )
            ).scalar_one_or_none()

        return {
            "user": {
                "id": user.id,
                "name": user.name,
                "githubUsername": user.github_username,
            },
            "metrics": counts,
            "communityImpact": community_impact_dict(latest) if latest else {
                "maintainerScore": 0,
                "communityScore": 0,
                "leadershipScore": 0,
            },
            "lastUpdated": now.isoformat(),
        }

    async def _group_counts(self, session, column, user_id: int) -> dict[str, int]:
        stmt = (
            select(column, func.count())
            .where(column.class_.user_id == user_id)
            .group_by(column)
        )
        return {
            (key or "UNKNOWN"): count
            for key, count in (await session.execute(stmt)).all()
        }

    async def list_pr_reviews(
        self,
        username: str,
        page: int = 1,
        limit: int = 20,
        repository: Optional[str] = None,
        sentiment: Optional[str] = None,
    ) -> dict:
        user = await self.get_user(username)
        filters = [PRReview.user_id == user.id]
        if repository:
            filters.append(PRReview.repository.has(Repository.full_name == repository))
        if sentiment:
            filters.append(PRReview.sentiment == sentiment)

        async with self._get_session() as session:
            stmt = (
                select(PRReview)
                .where(*filters)
                .options(selectinload(PRReview.repository))
                .order_by(PRReview.created_at.desc(), PRReview.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            reviews = (await session.execute(stmt)).scalars().all()
            total = (
                await session.execute(select(func.count(PRReview.id)).where(*filters))
            ).scalar_one()
            stats = await self._group_counts(session, PRReview.sentiment, user.id)

        return {
            "reviews": [review_dict(r) for r in reviews],
            "pagination": _pagination(page, limit, total),
            "sentimentStats": stats,
        }

    async def list_issue_triage(
        self,
        username: str,
        page: int = 1,
        limit: int = 20,
        action: Optional[str] = None,
        repository: Optional[str] = None,
    ) -> dict:
        user = await self.get_user(username)
        filters = [IssueTriage.user_id == user.id]
        if action:
            filters.append(IssueTriage.action == action)
        if repository:
            filters.append(
                IssueTriage.issue.has(Issue.repository.has(Repository.full_name == repository))
            )

        async with self._get_session() as session:
            stmt = (
                select(IssueTriage)
                .where(*filters)
                .options(selectinload(IssueTriage.issue).selectinload(Issue.repository))
                .order_by(IssueTriage.created_at.desc(), IssueTriage.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            triage = (await session.execute(stmt)).scalars().all()
            total = (
                await session.execute(select(func.count(IssueTriage.id)).where(*filters))
            ).scalar_one()
            stats = await self._group_counts(session, IssueTriage.action, user.id)

        return {
            "triage": [triage_dict(t) for t in triage],
            "pagination": _pagination(page, limit, total),
            "actionStats": stats,
        }

    async def list_mentorship(
        self,
        username: str,
        page: int = 1,
        limit: int = 20,
        type: Optional[str] = None,
        impact: Optional[str] = None,
    ) -> dict:
        user = await self.get_user(username)
        filters = [MentorshipActivity.user_id == user.id]
        if type:
            filters.append(MentorshipActivity.type == type)
        if impact:
            filters.append(MentorshipActivity.impact == impact)

        async with self._get_session() as session:
            stmt = (
                select(MentorshipActivity)
                .where(*filters)
                .order_by(MentorshipActivity.created_at.desc(), MentorshipActivity.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            activities = (await session.execute(stmt)).scalars().all()
            total = (
                await session.execute(select(func.count(MentorshipActivity.id)).where(*filters))
            ).scalar_one()
            type_stats = await self._group_counts(session, MentorshipActivity.type, user.id)
            impact_stats = await self._group_counts(session, MentorshipActivity.impact, user.id)

        return {
            "activities": [mentorship_dict(a) for a in activities],
            "pagination": _pagination(page, limit, total),
            "typeStats": type_stats,
            "impactStats": impact_stats,
        }

    async def get_community_impact(self, username: str, period: str = "MONTHLY") -> dict:
        user = await self.get_user(username)
        async with self._get_session() as session:
            rows = (
                await session.execute(
                    select(CommunityImpact)
                    .where(CommunityImpact.user_id == user.id, CommunityImpact.period == period)
                    .order_by(CommunityImpact.start_date.desc())
                    .limit(COMMUNITY_PERIODS)
                )
            ).scalars().all()

        scores = ("maintainer_score", "community_score", "leadership_score")
        keys = ("maintainerScore", "communityScore", "leadershipScore")
        return {
            "impact": [community_impact_dict(r) for r in rows],
            "trends": {
                key: [getattr(r, name) for r in rows] for key, name in zip(keys, scores)
            },
            "averages": {
                key: (sum(getattr(r, name) for r in rows) / len(rows)) if rows else 0.0
                for key, name in zip(keys, scores)
            },
            "period": period,
        }

    async def _activity_counts(self, session, user_id: int) -> dict[str, int]:
        counts = {}
        for key, model in (
            ("prReviews", PRReview),
            ("issueTriage", IssueTriage),
            ("mentorship", MentorshipActivity),
            ("contributions", Contribution),
        ):
            counts[key] = (
                await session.execute(select(func.count(model.id)).where(model.user_id == user_id))
            ).scalar_one()
        return counts

    async def get_shareable_profile(self, username: str) -> dict:
        user = await self.get_user(username)
        async with self._get_session() as session:
            counts = await self._activity_counts(session, user.id)
        return {
            "user": {
                "name": user.name,
                "githubUsername": user.github_username,
                "avatarUrl": user.avatar_url,
                "isMaintainer": user.is_maintainer,
            },
            "metrics": counts,
            "lastUpdated": utc_now().isoformat(),
        }

    async def get_public_profile(self, username: str, now: Optional[datetime] = None) -> dict:
        """Public profile page: stats, achievements, recent activity, top repos and impact."""
        user = await self.get_user(username)
        now = now or utc_now()

        async with self._get_session() as session:
            reviews = (
                await session.execute(
                    select(PRReview)
                    .where(PRReview.user_id == user.id)
                    .options(selectinload(PRReview.repository))
                    .order_by(PRReview.created_at.desc())
                    .limit(PROFILE_ITEMS)
                )
            ).scalars().all()
            triage = (
                await session.execute(
                    select(IssueTriage)
                    .where(IssueTriage.user_id == user.id)
                    .options(selectinload(IssueTriage.issue).selectinload(Issue.repository))
                    .order_by(IssueTriage.created_at.desc())
                    .limit(PROFILE_ITEMS)
                )
            ).scalars().all()
            mentorship = (
                await session.execute(
                    select(MentorshipActivity)
                    .where(MentorshipActivity.user_id == user.id)
                    .order_by(MentorshipActivity.created_at.desc())
                    .limit(PROFILE_ITEMS)
                )
            ).scalars().all()
            contributions = (
                await session.execute(
                    select(Contribution)
                    .where(Contribution.user_id == user.id)
                    .order_by(Contribution.created_at.desc())
                    .limit(PROFILE_ITEMS)
                )
            ).scalars().all()
            repositories = (
                await session.execute(
                    select(Repository)
                    .where(Repository.user_id == user.id)
                    .order_by(Repository.stars.desc())
                    .limit(PROFILE_REPOSITORIES)
                )
            ).scalars().all()
            first_contribution = (
                await session.execute(
                    select(func.min(Contribution.created_at)).where(Contribution.user_id == user.id)
                )
            ).scalar_one()
            latest_impact = (
                await session.execute(
                    select(ImpactMetric)
                    .where(ImpactMetric.user_id == user.id)
                    .order_by(ImpactMetric.start_date.desc(), ImpactMetric.id.desc())
                    .limit(1)
                )
            ).scalar_one_or_none()

        activity = [
            {
                "id": r.id,
                "type": "pr_review",
                "title": r.title,
                "repository": r.repository.full_name if r.repository else None,
                "date": _iso(r.created_at),
                "url": r.url,
            }
            for r in reviews
        ]
        activity += [
            {
                "id": t.id,
                "type": "issue_triage",
                "title": t.issue.title if t.issue else None,
                "repository": t.issue.repository.full_name if t.issue else None,
                "date": _iso(t.created_at),
                "url": t.issue.url if t.issue else None,
            }
            for t in triage
        ]
        activity += [
            {
                "id": m.id,
                "type": "mentorship",
                "title": m.description,
                "repository": "Community",
                "date": _iso(m.created_at),
                "url": m.url,
            }
            for m in mentorship
        ]
        activity.sort(key=lambda a: a["date"] or "", reverse=True)

        achievements = []
        if first_contribution:
            achievements.append({
                "id": "first-contribution",
                "title": "First Contribution",
                "description": "Made your first contribution to open source",
                "icon": "star",
                "earnedAt": first_contribution.isoformat(),
            })
        if user.is_maintainer and user.created_at and now - user.created_at >= timedelta(days=ACTIVE_MAINTAINER_DAYS):
            achievements.append({
                "id": "active-maintainer",
                "title": "Active Maintainer",
                "description": "Maintained repositories for 6+ months",
                "icon": "award",
                "earnedAt": (user.created_at + timedelta(days=ACTIVE_MAINTAINER_DAYS)).isoformat(),
            })

        return {
            "user": {
                "id": user.id,
                "username": user.github_username,
                "name": user.name,
                "email": user.email,
                "avatarUrl": user.avatar_url,
                "bio": user.bio,
                "location": user.location,
                "website": user.website,
                "twitter": user.twitter,
                "github": user.github_username,
                "linkedin": user.linkedin,
                "joinedAt": _iso(user.created_at),
                "isMaintainer": user.is_maintainer,
            },
            "stats": {
                "totalContributions": len(contributions),
                "prReviews": len(reviews),
                "issueTriage": len(triage),
                "mentorship": len(mentorship),
                "repositories": len(repositories),
                "stars": sum(r.stars for r in repositories),
                "forks": sum(r.forks for r in repositories),
                "contributors": len(contributions),
            },
            "achievements": achievements,
            "recentActivity": activity[:PROFILE_ITEMS],
            "topRepositories": [repository_dict(r) for r in repositories],
            "impactMetrics": {
                "overallImpactScore": latest_impact.overall_impact_score if latest_impact else 0.0,
                "contributorRetentionRate": latest_impact.contributor_retention_rate if latest_impact else 0.0,
                "repositoryHealthScore": latest_impact.repository_health_score if latest_impact else 0.0,
                "mentorshipScore": latest_impact.mentorship_score if latest_impact else 0.0,
            },
            "lastUpdated": now.isoformat(),
        }

    async def get_sentiment_analysis(self, username: str, timeframe: str = "month") -> dict:
        user = await self.get_user(username)
        async with self._get_session() as session:
            reviews = (
                await session.execute(
                    select(PRReview)
                    .where(PRReview.user_id == user.id)
                    .order_by(PRReview.created_at.desc())
                    .limit(SENTIMENT_REVIEW_LIMIT)
                )
            ).scalars().all()
            repositories = (
                await session.execute(
                    select(Repository)
                    .where(Repository.user_id == user.id)
                    .options(selectinload(Repository.pr_reviews))
                    .order_by(Repository.id.asc())
                )
            ).scalars().all()

        results = [stored_review_result(r) for r in reviews]
        samples = [
            ScoredSample(result, review.created_at, None)
            for result, review in zip(results, reviews)
        ]
        by_repository = {
            repo.full_name: [
                stored_review_result(r) for r in repo.pr_reviews if r.user_id == user.id
            ]
            for repo in repositories
        }

        return {
            "trends": [t.to_dict() for t in sentiment_trends(samples, timeframe)],
            "personality": calculate_maintainer_personality(results).to_dict(),
            "heatmap": [e.to_dict() for e in sentiment_heatmap(by_repository)],
            "totalReviews": len(reviews),
            "lastUpdated": utc_now().isoformat(),
        }

    async def get_sentiment_insights(self, username: str) -> dict:
        user = await self.get_user(username)
        async with self._get_session() as session:
            reviews = (
                await session.execute(
                    select(PRReview)
                    .where(PRReview.user_id == user.id)
                    .order_by(PRReview.created_at.desc())
                    .limit(INSIGHT_REVIEW_LIMIT)
                )
            ).scalars().all()

        insights = review_insights([stored_review_result(r) for r in reviews])
        if reviews:
            insights["lastUpdated"] = utc_now().isoformat()
        return insights

    @asynccontextmanager
    async def _get_session(self):
        if self.session is not None:
            yield self.session
        else:
            async with AsyncSessionLocal() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

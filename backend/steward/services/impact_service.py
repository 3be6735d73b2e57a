import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from steward.analysis.impact import (
    ContributionRecord,
    ImpactAnalysis,
    ImpactMetrics,
    RepositoryMetrics,
    analyze_impact,
    assess_repository_health,
    mentorship_metrics,
    summarize_contributor,
)
from steward.core.database import AsyncSessionLocal
from steward.core.metrics import metrics
from steward.models.base import utc_now
from steward.models.contribution import Contribution
from steward.models.contributor import Contributor
from steward.models.impact_metric import ImpactMetric
from steward.models.mentorship_activity import MentorshipActivity
from steward.models.repository import Repository
from steward.models.repository_snapshot import RepositorySnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ("stars", "forks", "issues", "pull_requests", "contributors", "activity_score")
# camelCase request keys accepted alongside the column names
SNAPSHOT_ALIASES = {"pullRequests": "pull_requests", "activityScore": "activity_score"}


def _snapshot_metrics(snapshot: RepositorySnapshot) -> RepositoryMetrics:
    return RepositoryMetrics(**{name: getattr(snapshot, name) or 0 for name in SNAPSHOT_FIELDS})


class ImpactService:
    """Impact analysis over persisted maintainer data."""

    def __init__(self, session: Optional[AsyncSession] = None):
        self.session = session

    async def calculate_maintainer_impact(
        self,
        user_id: int,
        repository_filter: Optional[list[str]] = None,
        now: Optional[datetime] = None,
    ) -> ImpactAnalysis:
        async with self._get_session() as session:
            stmt = select(Repository).where(Repository.user_id == user_id)
            if repository_filter:
                stmt = stmt.where(Repository.full_name.in_(repository_filter))
            repositories = (await session.execute(stmt)).scalars().all()
            repository_ids = [repo.id for repo in repositories]

            contributors = await self._contributor_summaries(session, repository_ids, now)
            health = await self._repository_health(session, repositories)

            activities = (
                await session.execute(
                    select(MentorshipActivity).where(MentorshipActivity.user_id == user_id)
                )
            ).scalars().all()

            history = (
                await session.execute(
                    select(ImpactMetric)
                    .where(ImpactMetric.user_id == user_id)
                    .order_by(ImpactMetric.start_date.asc())
                )
            ).scalars().all()

        trends = [
            {
                "period": row.period,
                "impactScore": row.overall_impact_score,
                "contributorGrowth": row.contributor_growth_rate,
                "repositoryHealth": row.repository_health_score,
            }
            for row in history
        ]
        analysis = analyze_impact(contributors, health, mentorship_metrics(activities), trends)
        metrics.impact_calculated(
            str(user_id),
            analysis.metrics.overall_impact_score,
            repositories=len(health),
        )
        return analysis

    async def _contributor_summaries(self, session, repository_ids: list[int], now):
        if not repository_ids:
            return []
        stmt = (
            select(Contributor)
            .where(
                Contributor.contributions.any(Contribution.repository_id.in_(repository_ids))
            )
            .options(selectinload(Contributor.contributions))
            .order_by(Contributor.id.asc())
        )
        summaries = []
        for contributor in (await session.execute(stmt)).scalars().all():
            records = [
                ContributionRecord(type=c.type, created_at=c.created_at)
                for c in contributor.contributions
                if c.repository_id in repository_ids
            ]
            summaries.append(
                summarize_contributor(
                    contributor.id,
                    contributor.github_username,
                    records,
                    name=contributor.name,
                    avatar_url=contributor.avatar_url,
                    first_contribution=contributor.first_contribution,
                    is_active=contributor.is_active,
                    now=now,
                )
            )
        return summaries

    async def _repository_health(self, session, repositories):
        health = []
        for repo in repositories:
            snapshots = (
                await session.execute(
                    select(RepositorySnapshot)
                    .where(RepositorySnapshot.repository_id == repo.id)
                    .order_by(RepositorySnapshot.snapshot_date.asc(), RepositorySnapshot.id.asc())
                )
            ).scalars().all()
            if len(snapshots) < 2:
                continue
            health.append(
                assess_repository_health(
                    repo.id,
                    repo.full_name,
                    _snapshot_metrics(snapshots[0]),
                    _snapshot_metrics(snapshots[-1]),
                )
            )
        return health

    async def store_impact_metrics(
        self, user_id: int, values: ImpactMetrics, period: str
    ) -> ImpactMetric:
        """Append one impact-metric row for the period."""
        now = utc_now()
        async with self._get_session() as session:
            row = ImpactMetric(
                user_id=user_id,
                period=period,
                start_date=now,
                end_date=now,
                new_contributors=values.new_contributors,
                returning_contributors=values.returning_contributors,
                contributor_retention_rate=values.contributor_retention_rate,
                contributor_growth_rate=values.contributor_growth_rate,
                issues_resolved=int(values.issues_resolved),
                prs_merged=int(values.prs_merged),
                activity_growth=values.activity_growth,
                repository_health_score=values.repository_health_score,
                mentorship_score=values.mentorship_score,
                contributor_quality_improvement=values.contributor_quality_improvement,
                long_term_impact_score=values.long_term_impact_score,
                overall_impact_score=values.overall_impact_score,
                predicted_long_term_impact=values.predicted_long_term_impact,
            )
            session.add(row)
            await session.flush()
            await session.refresh(row)
            return row

    async def create_repository_snapshot(
        self, repository_id: int, values: dict[str, Any]
    ) -> Optional[RepositorySnapshot]:
        """Record current counters for a repository; None when it does not exist."""
        counters = {}
        for key, value in values.items():
            name = SNAPSHOT_ALIASES.get(key, key)
            if name in SNAPSHOT_FIELDS:
                counters[name] = float(value) if name == "activity_score" else int(value)
        async with self._get_session() as session:
            if await session.get(Repository, repository_id) is None:
                return None
            snapshot = RepositorySnapshot(
                repository_id=repository_id,
                snapshot_date=utc_now(),
                **counters,
            )
            session.add(snapshot)
            await session.flush()
            await session.refresh(snapshot)
            return snapshot

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

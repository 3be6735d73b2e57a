"""Tests for impact analysis over persisted data."""

import pytest
from sqlalchemy import func, select

from steward.analysis.impact import ImpactMetrics
from steward.core.metrics import metrics
from steward.models import ImpactMetric, RepositorySnapshot
from steward.services.impact_service import ImpactService


@pytest.fixture
def service(session):
    return ImpactService(session=session)


async def test_impact_over_all_repositories(service, maintainer):
    analysis = await service.calculate_maintainer_impact(maintainer.user_id, now=maintainer.now)
    result = analysis.metrics

    assert [c.github_username for c in analysis.contributors] == ["alice", "bob"]
    assert result.new_contributors == 1
    assert result.returning_contributors == 1
    assert result.contributor_retention_rate == 0.5
    assert result.mentorship_score == pytest.approx(2 / 3)

    (health,) = analysis.repository_health
    assert health.repository_name == "maint/core"
    assert health.improvement.stars_growth == 100.0
    assert health.improvement.issues_resolved == 15
    assert health.improvement.prs_merged == 12
    assert result.activity_growth == pytest.approx(50.0)

    expected = 0.3 * 0.5 + 0.3 * health.health_score + 0.2 * (2 / 3) + 0.2 * 0.5
    assert result.overall_impact_score == pytest.approx(expected)


async def test_impact_emits_metric(service, maintainer):
    await service.calculate_maintainer_impact(maintainer.user_id)
    (event,) = [e for e in metrics.get_buffer() if e.category == "impact"]
    assert event.metadata["repositories"] == 1


async def test_unknown_repository_filter_yields_empty_analysis(service, maintainer):
    analysis = await service.calculate_maintainer_impact(
        maintainer.user_id, repository_filter=["someone/else"]
    )
    assert analysis.contributors == []
    assert analysis.repository_health == []
    assert analysis.metrics.contributor_retention_rate == 0.0


async def test_stored_metrics_feed_trends(service, maintainer, session):
    await service.store_impact_metrics(
        maintainer.user_id, ImpactMetrics(overall_impact_score=0.2, issues_resolved=4.0), "WEEKLY"
    )
    await service.store_impact_metrics(
        maintainer.user_id, ImpactMetrics(overall_impact_score=0.5), "WEEKLY"
    )

    rows = (await session.execute(select(ImpactMetric))).scalars().all()
    assert [r.issues_resolved for r in rows] == [4, 0]

    analysis = await service.calculate_maintainer_impact(maintainer.user_id)
    assert [t["impactScore"] for t in analysis.trends] == [0.2, 0.5]
    # Rising history steepens the longer projections
    predicted = analysis.predicted_impact
    assert predicted.long_term > predicted.medium_term > predicted.short_term


async def test_snapshot_accepts_camel_case_and_ignores_unknown(service, maintainer, session):
    snapshot = await service.create_repository_snapshot(
        maintainer.docs_id, {"stars": 120, "activityScore": "7.5", "watchers": 3}
    )
    assert snapshot.stars == 120
    assert snapshot.activity_score == 7.5

    count = (
        await session.execute(
            select(func.count(RepositorySnapshot.id))
            .where(RepositorySnapshot.repository_id == maintainer.docs_id)
        )
    ).scalar_one()
    assert count == 2


async def test_snapshot_for_missing_repository(service, maintainer):
    assert await service.create_repository_snapshot(9999, {"stars": 1}) is None

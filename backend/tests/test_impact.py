"""Tests for repository health, contributor quality and the combined impact score."""

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from steward.analysis.impact import (
    WEIGHTS,
    ContributionRecord,
    MentorshipMetrics,
    RepositoryMetrics,
    analyze_impact,
    assess_repository_health,
    check_weights,
    community_impact_score,
    github_health_score,
    impact_level,
    mentorship_metrics,
    percent_growth,
    project_impact,
    summarize_contributor,
    weighted_impact_score,
)

NOW = datetime(2024, 6, 1, 12, 0, 0)

BEFORE = RepositoryMetrics(stars=100, forks=10, issues=40, pull_requests=10, contributors=5, activity_score=20.0)
AFTER = RepositoryMetrics(stars=150, forks=15, issues=25, pull_requests=22, contributors=8, activity_score=30.0)


def test_weights_sum_to_one():
    assert sum(WEIGHTS.values()) == pytest.approx(1.0)


def test_weights_that_do_not_sum_to_one_are_rejected():
    with pytest.raises(ValueError):
        check_weights({"contributor_retention_rate": 0.5, "mentorship_score": 0.2})


def test_perfect_inputs_score_one():
    assert weighted_impact_score(1, 1, 1, 1) == pytest.approx(1.0)
    assert weighted_impact_score(0, 0, 0, 0) == 0.0


def test_percent_growth_zero_baseline():
    assert percent_growth(0, 10) == 0.0
    assert percent_growth(10, 15) == 50.0


def test_repository_health_averages_scaled_factors():
    health = assess_repository_health(1, "o/a", BEFORE, AFTER)
    assert health.improvement.stars_growth == pytest.approx(50.0)
    assert health.improvement.issues_resolved == 15
    assert health.improvement.prs_merged == 12
    assert health.health_score == pytest.approx(0.5)
    assert health.to_dict()["afterMetrics"]["pullRequests"] == 22


def test_health_factors_are_clamped():
    shrinking = assess_repository_health(1, "o/a", AFTER, BEFORE)
    assert shrinking.health_score == 0.0

    booming = assess_repository_health(
        1, "o/a",
        RepositoryMetrics(stars=1, forks=1, issues=100, pull_requests=0, contributors=1, activity_score=1.0),
        RepositoryMetrics(stars=10, forks=10, issues=0, pull_requests=50, contributors=10, activity_score=10.0),
    )
    assert booming.health_score == 1.0


def test_contributor_summary():
    records = [
        ContributionRecord("PULL_REQUEST", NOW),
        ContributionRecord("COMMIT", NOW - timedelta(days=30)),
    ]
    summary = summarize_contributor(7, "alice", records, name="Alice", now=NOW)

    assert summary.first_contribution == NOW - timedelta(days=30)
    assert summary.last_activity == NOW
    assert summary.total_contributions == 2
    assert summary.return_rate == 1
    # frequency 0.2, diversity 0.4, recency 1.0
    assert summary.quality_score == pytest.approx(1.6 / 3)


def test_contributor_without_contributions():
    summary = summarize_contributor(7, "alice", [], first_contribution=NOW, now=NOW)
    assert summary.first_contribution == NOW
    assert summary.last_activity is None
    assert summary.return_rate == 0
    assert summary.quality_score == 0.0


def test_mentorship_metrics():
    activities = [
        SimpleNamespace(type="GUIDANCE", impact="HIGH"),
        SimpleNamespace(type="COLLABORATION", impact="HIGH"),
        SimpleNamespace(type="CODE_REVIEW", impact="LOW"),
        SimpleNamespace(type="FEEDBACK", impact="MEDIUM"),
    ]
    result = mentorship_metrics(activities)
    assert result.mentorship_score == 0.5
    assert result.contributor_quality_improvement == pytest.approx(0.4)
    assert result.long_term_impact_score == pytest.approx(0.4)
    assert mentorship_metrics([]) == MentorshipMetrics()


def test_projection_uses_history_slope():
    projections = project_impact(0.5, [0.4, 0.6])
    assert projections.short_term == pytest.approx(0.55)
    assert projections.medium_term == pytest.approx(0.85)
    assert projections.long_term == pytest.approx(1.15)

    flat = project_impact(0.5)
    assert flat.medium_term == flat.short_term == flat.long_term


def test_analyze_impact_combines_everything():
    contributors = [
        summarize_contributor(1, "alice", [
            ContributionRecord("COMMIT", NOW),
            ContributionRecord("REVIEW", NOW),
        ], now=NOW),
        summarize_contributor(2, "bob", [ContributionRecord("COMMIT", NOW)], now=NOW),
    ]
    health = [assess_repository_health(1, "o/a", BEFORE, AFTER)]
    mentorship = MentorshipMetrics(mentorship_score=0.5)

    analysis = analyze_impact(contributors, health, mentorship, [{"impactScore": 0.4}, {"impactScore": 0.6}])
    metrics = analysis.metrics

    assert metrics.new_contributors == 1
    assert metrics.returning_contributors == 1
    assert metrics.contributor_retention_rate == 0.5
    assert metrics.activity_growth == pytest.approx(50.0)
    assert metrics.overall_impact_score == pytest.approx(0.5)
    assert metrics.predicted_long_term_impact == pytest.approx(0.55)
    assert analysis.predicted_impact.long_term == pytest.approx(1.15)
    assert analysis.insights == []
    assert analysis.recommendations == [
        "Enhance mentorship activities to provide more guidance and support to contributors",
        "Work on improving repository health through better issue management and documentation",
    ]

    data = analysis.to_dict()
    assert data["metrics"]["overallImpactScore"] == pytest.approx(0.5)
    assert len(data["contributors"]) == 2
    assert data["repositoryHealth"][0]["repositoryName"] == "o/a"


def test_analyze_impact_with_no_data():
    analysis = analyze_impact([], [], MentorshipMetrics())
    assert analysis.metrics.overall_impact_score == 0.0
    assert analysis.insights == []
    assert analysis.recommendations == [
        "Enhance mentorship activities to provide more guidance and support to contributors",
    ]


@pytest.mark.parametrize("score,level", [
    (95, "Exceptional"),
    (80, "High"),
    (70, "Good"),
    (60, "Moderate"),
    (59, "Low"),
])
def test_impact_levels(score, level):
    assert impact_level(score) == level


def test_github_health_score():
    assert github_health_score(5000, 200, 10) == 27
    assert github_health_score(200_000, 0, 0) == 100


def test_community_impact_score():
    assert community_impact_score(10, 50, 60, 30) == 40
    assert community_impact_score(80, 100, 100, 100) == 100

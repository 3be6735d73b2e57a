"""
Community impact scoring.

Provides:
- Repository health from before/after snapshots
- Contributor quality and retention
- Mentorship effectiveness
- Weighted overall impact score with short/medium/long-term projections
- Human-readable insights and recommendations
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

WEIGHTS: Dict[str, float] = {
    "contributor_retention_rate": 0.3,
    "repository_health_score": 0.3,
    "mentorship_score": 0.2,
    "activity_growth": 0.2,
}


def check_weights(weights: Dict[str, float]) -> None:
    total = sum(weights.values())
    if abs(total - 1.0) > 1e-9:
        raise ValueError(f"impact weights must sum to 1.0, got {total}")


check_weights(WEIGHTS)

# Divisor that maps each improvement factor onto [0, 1]
HEALTH_DIVISORS: Dict[str, float] = {
    "stars_growth": 100.0,
    "forks_growth": 100.0,
    "issues_resolved": 50.0,
    "prs_merged": 20.0,
    "contributor_growth": 50.0,
    "activity_growth": 100.0,
}

SHORT_TERM_MULTIPLIER = 1.1
MEDIUM_TERM_PERIODS = 6
LONG_TERM_PERIODS = 12

CONTRIBUTION_TYPES = 5
FREQUENCY_SATURATION = 10
RECENCY_DAYS = 365.0
QUALITY_SATURATION = 10
LONG_TERM_SATURATION = 5
LONG_TERM_ACTIVITY_TYPES = ("GUIDANCE", "COLLABORATION")
HIGH_IMPACT = "HIGH"

IMPACT_LEVELS = (
    (90, "Exceptional"),
    (80, "High"),
    (70, "Good"),
    (60, "Moderate"),
)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(value, high))


def percent_growth(before: float, after: float) -> float:
    """Percentage change; a zero baseline counts as no growth."""
    if not before:
        return 0.0
    return (after - before) / before * 100.0


@dataclass(frozen=True)
class RepositoryMetrics:
    stars: int = 0
    forks: int = 0
    issues: int = 0
    pull_requests: int = 0
    contributors: int = 0
    activity_score: float = 0.0

    def to_dict(self) -> dict:
        return {
            "stars": self.stars,
            "forks": self.forks,
            "issues": self.issues,
            "pullRequests": self.pull_requests,
            "contributors": self.contributors,
            "activityScore": self.activity_score,
        }


@dataclass(frozen=True)
class HealthImprovement:
    stars_growth: float
    forks_growth: float
    issues_resolved: float
    prs_merged: float
    contributor_growth: float
    activity_growth: float

    @classmethod
    def between(cls, before: RepositoryMetrics, after: RepositoryMetrics) -> "HealthImprovement":
        return cls(
            stars_growth=percent_growth(before.stars, after.stars),
            forks_growth=percent_growth(before.forks, after.forks),
            issues_resolved=before.issues - after.issues,
            prs_merged=after.pull_requests - before.pull_requests,
            contributor_growth=percent_growth(before.contributors, after.contributors),
            activity_growth=percent_growth(before.activity_score, after.activity_score),
        )

    def to_dict(self) -> dict:
        return {
            "starsGrowth": self.stars_growth,
            "forksGrowth": self.forks_growth,
            "issuesResolved": self.issues_resolved,
            "prsMerged": self.prs_merged,
            "contributorGrowth": self.contributor_growth,
            "activityGrowth": self.activity_growth,
        }


def repository_health_score(improvement: HealthImprovement) -> float:
    """Unweighted mean of six factors, each scaled by its divisor and clamped to [0, 1]."""
    factors = [
        _clamp(getattr(improvement, name) / divisor)
        for name, divisor in HEALTH_DIVISORS.items()
    ]
    return sum(factors) / len(factors)


@dataclass(frozen=True)
class RepositoryHealth:
    repository_id: int
    repository_name: str
    before: RepositoryMetrics
    after: RepositoryMetrics
    improvement: HealthImprovement
    health_score: float

    def to_dict(self) -> dict:
        return {
            "repositoryId": self.repository_id,
            "repositoryName": self.repository_name,
            "beforeMetrics": self.before.to_dict(),
            "afterMetrics": self.after.to_dict(),
            "improvement": self.improvement.to_dict(),
            "healthScore": self.health_score,
        }


def assess_repository_health(
    repository_id: int,
    repository_name: str,
    before: RepositoryMetrics,
    after: RepositoryMetrics,
) -> RepositoryHealth:
    improvement = HealthImprovement.between(before, after)
    return RepositoryHealth(
        repository_id=repository_id,
        repository_name=repository_name,
        before=before,
        after=after,
        improvement=improvement,
        health_score=repository_health_score(improvement),
    )


@dataclass(frozen=True)
class ContributionRecord:
    type: str
    created_at: datetime


@dataclass(frozen=True)
class ContributorSummary:
    id: int
    github_username: str
    name: Optional[str]
    avatar_url: Optional[str]
    first_contribution: Optional[datetime]
    last_activity: Optional[datetime]
    total_contributions: int
    is_active: bool
    return_rate: int
    quality_score: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "githubUsername": self.github_username,
            "name": self.name,
            "avatarUrl": self.avatar_url,
            "firstContribution": self.first_contribution.isoformat() if self.first_contribution else None,
            "lastActivity": self.last_activity.isoformat() if self.last_activity else None,
            "totalContributions": self.total_contributions,
            "isActive": self.is_active,
            "returnRate": self.return_rate,
            "qualityScore": self.quality_score,
        }


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def contribution_diversity(contributions: Sequence[ContributionRecord]) -> float:
    return len({c.type for c in contributions}) / CONTRIBUTION_TYPES


def recency_score(contributions: Sequence[ContributionRecord], now: datetime) -> float:
    """Linear decay from 1 to 0 over a year since the most recent contribution."""
    if not contributions:
        return 0.0
    last = _naive_utc(contributions[-1].created_at)
    days = (_naive_utc(now) - last).total_seconds() / 86400.0
    return max(0.0, 1.0 - days / RECENCY_DAYS)


def contributor_quality(
    contributions: Sequence[ContributionRecord], now: Optional[datetime] = None
) -> float:
    """Mean of frequency, type diversity and recency for one contributor's history."""
    if not contributions:
        return 0.0
    now = now or datetime.utcnow()
    frequency = min(len(contributions) / FREQUENCY_SATURATION, 1.0)
    return (frequency + contribution_diversity(contributions) + recency_score(contributions, now)) / 3


def summarize_contributor(
    contributor_id: int,
    github_username: str,
    contributions: Sequence[ContributionRecord],
    name: Optional[str] = None,
    avatar_url: Optional[str] = None,
    first_contribution: Optional[datetime] = None,
    is_active: bool = True,
    now: Optional[datetime] = None,
) -> ContributorSummary:
    ordered = sorted(contributions, key=lambda c: _naive_utc(c.created_at))
    return ContributorSummary(
        id=contributor_id,
        github_username=github_username,
        name=name,
        avatar_url=avatar_url,
        first_contribution=ordered[0].created_at if ordered else first_contribution,
        last_activity=ordered[-1].created_at if ordered else None,
        total_contributions=len(ordered),
        is_active=is_active,
        return_rate=1 if len(ordered) > 1 else 0,
        quality_score=contributor_quality(ordered, now),
    )


@dataclass(frozen=True)
class MentorshipMetrics:
    mentorship_score: float = 0.0
    contributor_quality_improvement: float = 0.0
    long_term_impact_score: float = 0.0


def mentorship_metrics(activities: Iterable) -> MentorshipMetrics:
    """Score mentorship activities (anything with ``type`` and ``impact`` attributes)."""
    activities = list(activities)
    if not activities:
        return MentorshipMetrics()
    high = sum(1 for a in activities if a.impact == HIGH_IMPACT)
    long_term = sum(1 for a in activities if a.type in LONG_TERM_ACTIVITY_TYPES)
    return MentorshipMetrics(
        mentorship_score=high / len(activities),
        contributor_quality_improvement=min(len(activities) / QUALITY_SATURATION, 1.0),
        long_term_impact_score=min(long_term / LONG_TERM_SATURATION, 1.0),
    )


def weighted_impact_score(
    contributor_retention_rate: float,
    repository_health_score: float,
    mentorship_score: float,
    activity_growth: float,
) -> float:
    values = {
        "contributor_retention_rate": contributor_retention_rate,
        "repository_health_score": repository_health_score,
        "mentorship_score": mentorship_score,
        "activity_growth": activity_growth,
    }
    return sum(values[key] * weight for key, weight in WEIGHTS.items())


@dataclass(frozen=True)
class Projections:
    short_term: float
    medium_term: float
    long_term: float

    def to_dict(self) -> dict:
        return {
            "shortTerm": self.short_term,
            "mediumTerm": self.medium_term,
            "longTerm": self.long_term,
        }


def trend_slope(history: Sequence[float]) -> float:
    if len(history) < 2:
        return 0.0
    return (history[-1] - history[0]) / len(history)


def project_impact(current: float, history: Sequence[float] = ()) -> Projections:
    slope = trend_slope(history)
    return Projections(
        short_term=current * SHORT_TERM_MULTIPLIER,
        medium_term=current * (SHORT_TERM_MULTIPLIER + slope * MEDIUM_TERM_PERIODS),
        long_term=current * (SHORT_TERM_MULTIPLIER + slope * LONG_TERM_PERIODS),
    )


@dataclass(frozen=True)
class ImpactMetrics:
    new_contributors: int = 0
    returning_contributors: int = 0
    contributor_retention_rate: float = 0.0
    contributor_growth_rate: float = 0.0
    issues_resolved: float = 0.0
    prs_merged: float = 0.0
    activity_growth: float = 0.0
    repository_health_score: float = 0.0
    mentorship_score: float = 0.0
    contributor_quality_improvement: float = 0.0
    long_term_impact_score: float = 0.0
    overall_impact_score: float = 0.0
    predicted_long_term_impact: float = 0.0

    def to_dict(self) -> dict:
        return {
            "newContributors": self.new_contributors,
            "returningContributors": self.returning_contributors,
            "contributorRetentionRate": self.contributor_retention_rate,
            "contributorGrowthRate": self.contributor_growth_rate,
            "issuesResolved": self.issues_resolved,
            "prsMerged": self.prs_merged,
            "activityGrowth": self.activity_growth,
            "repositoryHealthScore": self.repository_health_score,
            "mentorshipScore": self.mentorship_score,
            "contributorQualityImprovement": self.contributor_quality_improvement,
            "longTermImpactScore": self.long_term_impact_score,
            "overallImpactScore": self.overall_impact_score,
            "predictedLongTermImpact": self.predicted_long_term_impact,
        }


def combine_impact(
    contributors: Sequence[ContributorSummary],
    repository_health: Sequence[RepositoryHealth],
    mentorship: MentorshipMetrics,
) -> ImpactMetrics:
    """Fold contributor, repository and mentorship figures into one ImpactMetrics."""
    returning = sum(1 for c in contributors if c.return_rate > 0)
    retention = returning / len(contributors) if contributors else 0.0
    activity_growth = _mean([r.improvement.activity_growth for r in repository_health])
    health = _mean([r.health_score for r in repository_health])

    overall = weighted_impact_score(
        contributor_retention_rate=retention,
        repository_health_score=health,
        mentorship_score=mentorship.mentorship_score,
        # Percent growth is put on the same [0, 1] scale as the other terms
        activity_growth=_clamp(activity_growth / HEALTH_DIVISORS["activity_growth"]),
    )

    return ImpactMetrics(
        new_contributors=sum(1 for c in contributors if c.total_contributions == 1),
        returning_contributors=returning,
        contributor_retention_rate=retention,
        contributor_growth_rate=float(len(contributors)),
        issues_resolved=sum(r.improvement.issues_resolved for r in repository_health),
        prs_merged=sum(r.improvement.prs_merged for r in repository_health),
        activity_growth=activity_growth,
        repository_health_score=health,
        mentorship_score=mentorship.mentorship_score,
        contributor_quality_improvement=mentorship.contributor_quality_improvement,
        long_term_impact_score=mentorship.long_term_impact_score,
        overall_impact_score=overall,
        predicted_long_term_impact=project_impact(overall).long_term,
    )


def generate_insights(
    contributors: Sequence[ContributorSummary],
    repository_health: Sequence[RepositoryHealth],
    mentorship: MentorshipMetrics,
) -> List[str]:
    insights = []
    retention = _mean([c.return_rate for c in contributors])
    if contributors and retention > 0.7:
        insights.append("Excellent contributor retention rate - you're building a strong community")
    elif contributors and retention < 0.3:
        insights.append("Low contributor retention - consider improving onboarding and support")

    if _mean([r.health_score for r in repository_health]) > 0.8:
        insights.append("Outstanding repository health improvements across your projects")

    if mentorship.mentorship_score > 0.8:
        insights.append("Exceptional mentorship skills - contributors are thriving under your guidance")
    return insights


def generate_recommendations(
    contributors: Sequence[ContributorSummary],
    repository_health: Sequence[RepositoryHealth],
    mentorship: MentorshipMetrics,
) -> List[str]:
    recommendations = []
    if contributors and _mean([c.return_rate for c in contributors]) < 0.5:
        recommendations.append(
            "Focus on improving contributor retention through better onboarding and ongoing support"
        )
    if mentorship.mentorship_score < 0.6:
        recommendations.append(
            "Enhance mentorship activities to provide more guidance and support to contributors"
        )
    if repository_health and _mean([r.health_score for r in repository_health]) < 0.6:
        recommendations.append(
            "Work on improving repository health through better issue management and documentation"
        )
    return recommendations


@dataclass(frozen=True)
class ImpactAnalysis:
    metrics: ImpactMetrics
    contributors: List[ContributorSummary] = field(default_factory=list)
    repository_health: List[RepositoryHealth] = field(default_factory=list)
    trends: List[dict] = field(default_factory=list)
    insights: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    predicted_impact: Optional[Projections] = None

    def to_dict(self) -> dict:
        return {
            "metrics": self.metrics.to_dict(),
            "contributors": [c.to_dict() for c in self.contributors],
            "repositoryHealth": [r.to_dict() for r in self.repository_health],
            "trends": list(self.trends),
            "insights": list(self.insights),
            "recommendations": list(self.recommendations),
            "predictedImpact": self.predicted_impact.to_dict() if self.predicted_impact else None,
        }


def analyze_impact(
    contributors: Sequence[ContributorSummary],
    repository_health: Sequence[RepositoryHealth],
    mentorship: MentorshipMetrics,
    trends: Sequence[dict] = (),
) -> ImpactAnalysis:
    """
    Full impact analysis.

    ``trends`` are historical rows ordered oldest first, each with an
    ``impactScore`` key; they drive the projection slope.
    """
    metrics = combine_impact(contributors, repository_health, mentorship)
    history = [t["impactScore"] for t in trends]
    return ImpactAnalysis(
        metrics=metrics,
        contributors=list(contributors),
        repository_health=list(repository_health),
        trends=list(trends),
        insights=generate_insights(contributors, repository_health, mentorship),
        recommendations=generate_recommendations(contributors, repository_health, mentorship),
        predicted_impact=project_impact(metrics.overall_impact_score, history),
    )


def impact_level(score: float) -> str:
    for floor, label in IMPACT_LEVELS:
        if score >= floor:
            return label
    return "Low"


def github_health_score(total_stars: int, total_forks: int, unique_contributors: int) -> int:
    """0-100 popularity-based health score for the live GitHub summary."""
    return min(100, round(total_stars / 1000 + total_forks / 100 + unique_contributors * 2))


def community_impact_score(
    first_time_contributors: int,
    retention_percent: float,
    average_health: float,
    mentorship_percent: float,
) -> int:
    """Mean of four 0-100 sub-scores; first-time contributors count 2 points each up to 100."""
    first_time_score = min(first_time_contributors * 2, 100)
    return round((first_time_score + retention_percent + average_health + mentorship_percent) / 4)

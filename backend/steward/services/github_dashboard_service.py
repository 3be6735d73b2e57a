"""
Live GitHub dashboard service.

Builds dashboard payloads straight from the GitHub REST API, scores review
text, and caches computed payloads in a Redis-backed TTL cache.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from steward.analysis.impact import community_impact_score, github_health_score, impact_level
from steward.analysis.personality import review_style_shares
from steward.analysis.sentiment.lexicon import LexiconSentimentStrategy
from steward.analysis.trends import (
    TextSample,
    average_comparative,
    daily_sentiment_trends,
    lexicon_heatmap,
    most_negative_repository,
    most_positive_repository,
    personality_insights,
    tier_bucket,
)
from steward.core.cache import PayloadCache
from steward.core.config import settings
from steward.core.metrics import metrics
from steward.services.github.client import GitHubClient, GitHubError

logger = logging.getLogger(__name__)

MENTORING_EVENTS = ("IssueCommentEvent", "PullRequestReviewEvent")
MENTORSHIP_RECOMMENDATIONS = [
    "Continue providing detailed code reviews",
    "Increase documentation contributions",
    "Engage more with community discussions",
]


def derive_priority(labels: list[str]) -> Optional[str]:
    """Priority from labels such as ``priority: high`` or ``P1``; None when unlabelled."""
    for raw in labels:
        label = raw.lower().replace("priority", "").strip(" :/-_")
        if label == "critical" or label in ("p0", "p1"):
            return "high"
        if label in ("high", "medium", "low"):
            return label
        if label == "p2":
            return "medium"
        if label == "p3":
            return "low"
    return None


def review_status(pr: dict[str, Any]) -> str:
    if pr.get("merged_at"):
        return "approved"
    if pr.get("state") == "closed":
        return "rejected"
    return "pending"


def _label_names(item: dict[str, Any]) -> list[str]:
    return [label.get("name", "") for label in item.get("labels") or []]


def _login(item: dict[str, Any]) -> Optional[str]:
    return (item.get("user") or {}).get("login")


class GitHubDashboardService:
    """Dashboard payloads computed from live GitHub data."""

    def __init__(
        self,
        client: GitHubClient,
        cache: PayloadCache,
        lexicon: Optional[LexiconSentimentStrategy] = None,
    ):
        self.client = client
        self.cache = cache
        self.lexicon = lexicon or LexiconSentimentStrategy()

    async def _cached(
        self, key: str, ttl_minutes: int, build: Callable[[], Awaitable[Any]]
    ) -> Any:
        cached = await self.cache.get_valid(key)
        metrics.cache_lookup(key, hit=cached is not None)
        if cached is not None:
            return cached
        data = await build()
        await self.cache.set(key, data, ttl_minutes)
        return data

    async def _user_and_repos(
        self, username: str, per_page: int = 100
    ) -> tuple[dict[str, Any], list[dict[str, Any]]]:
        user = await self.client.get_user(username)
        repos = await self.client.get_user_repositories(username, per_page=per_page)
        # Kept for the share / community-impact views
        await self.cache.set(f"user_{username}", user, settings.PROFILE_CACHE_TTL_MINUTES)
        await self.cache.set(f"repos_{username}", repos, settings.PROFILE_CACHE_TTL_MINUTES)
        return user, repos

    # Dashboard

    async def get_dashboard(self, username: str) -> dict[str, Any]:
        return await self._cached(
            f"dashboard_{username}",
            settings.DASHBOARD_CACHE_TTL_MINUTES,
            lambda: self._build_dashboard(username),
        )

    async def _build_dashboard(self, username: str) -> dict[str, Any]:
        _, repos = await self._user_and_repos(username)
        scanned = repos[: settings.DASHBOARD_REPO_LIMIT]

        async def authored(repo: dict[str, Any]) -> tuple[list[dict], list[dict]]:
            owner, name = repo["full_name"].split("/", 1)
            try:
                prs = await self.client.get_pull_requests(owner, name)
                issues = await self.client.get_issues(owner, name)
            except GitHubError as exc:
                logger.error("Error fetching data for %s: %s", repo["full_name"], exc)
                return [], []
            return (
                [pr for pr in prs if _login(pr) == username],
                [i for i in issues if _login(i) == username and "pull_request" not in i],
            )

        per_repo = await self.client.gather_limited(scanned, authored)
        counts = {
            repo["full_name"]: (len(prs), len(issues))
            for repo, (prs, issues) in zip(scanned, per_repo)
        }

        activity = []
        for repo, (prs, issues) in zip(scanned, per_repo):
            for pr in prs:
                activity.append({
                    "id": f"pr-{repo['full_name']}-{pr['number']}",
                    "action": f"Opened PR #{pr['number']}",
                    "repo": repo["full_name"],
                    "type": "review",
                    "timestamp": pr.get("updated_at") or pr.get("created_at"),
                })
            for issue in issues:
                activity.append({
                    "id": f"issue-{repo['full_name']}-{issue['number']}",
                    "action": f"Opened issue #{issue['number']}",
                    "repo": repo["full_name"],
                    "type": "triage",
                    "timestamp": issue.get("updated_at") or issue.get("created_at"),
                })
        activity.sort(key=lambda a: a["timestamp"] or "", reverse=True)

        return {
            "metrics": {
                "totalPRReviews": sum(c[0] for c in counts.values()),
                "issuesTriaged": sum(c[1] for c in counts.values()),
                "contributorsMentored": None,
                "avgResponseTime": None,
            },
            "recentActivity": activity[:10],
            "topRepositories": [
                {
                    "name": repo["full_name"],
                    "reviews": counts.get(repo["full_name"], (0, 0))[0],
                    "issues": counts.get(repo["full_name"], (0, 0))[1],
                    "stars": repo.get("stargazers_count", 0),
                    "language": repo.get("language") or "Unknown",
                    "lastActivity": repo.get("updated_at"),
                }
                for repo in repos[:5]
            ],
        }

    # Reviews

    async def get_reviews(
        self,
        username: str,
        status: Optional[str] = None,
        repo: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> dict[str, Any]:
        data = await self._cached(
            f"reviews_{username}",
            settings.REVIEWS_CACHE_TTL_MINUTES,
            lambda: self._build_reviews(username),
        )
        reviews = [
            r for r in data["reviews"]
            if (not status or status in (r["status"], r["reviewStatus"]))
            and (not repo or r["repo"] == repo)
            and (not priority or r["priority"] == priority)
        ]
        return dict(data, reviews=reviews)

    async def _build_reviews(self, username: str) -> dict[str, Any]:
        repos = await self.client.get_user_repositories(username, per_page=20)

        async def repo_reviews(repo: dict[str, Any]) -> list[dict[str, Any]]:
            owner, name = repo["full_name"].split("/", 1)
            rows = []
            try:
                prs = await self.client.get_pull_requests(owner, name, per_page=50)
                for pr in prs:
                    if _login(pr) != username:
                        continue
                    comments = await self.client.get_issue_comments(owner, name, pr["number"])
                    texts = [c.get("body") for c in comments if c.get("body")]
                    body = " ".join(texts)
                    tier = tier_bucket(self.lexicon.analyze(body).sentiment) if texts else "neutral"
                    rows.append({
                        "id": pr["number"],
                        "title": pr.get("title"),
                        "repo": repo["full_name"],
                        "author": _login(pr),
                        "status": pr.get("state"),
                        "reviewStatus": review_status(pr),
                        "sentiment": tier,
                        "comments": len(comments),
                        "body": body,
                        "createdAt": pr.get("created_at"),
                        "updatedAt": pr.get("updated_at"),
                        "priority": derive_priority(_label_names(pr)),
                        "style": review_style_shares(texts),
                        "scored": bool(texts),
                    })
            except GitHubError as exc:
                logger.error("Error analyzing PRs for %s: %s", repo["full_name"], exc)
            return rows

        batches = await self.client.gather_limited(
            repos[: settings.REVIEW_REPO_LIMIT], repo_reviews
        )
        reviews = [row for batch in batches for row in batch]

        sentiment_counts = {"positive": 0, "neutral": 0, "negative": 0}
        style_totals = {"helpful": 0, "direct": 0, "constructive": 0}
        for row in reviews:
            if row.pop("scored"):
                sentiment_counts[row["sentiment"]] += 1
            for trait, value in row.pop("style").items():
                style_totals[trait] += value
        if reviews:
            style_totals = {k: round(v / len(reviews)) for k, v in style_totals.items()}

        return {
            "reviews": reviews,
            "sentimentData": [
                {"name": "Positive", "value": sentiment_counts["positive"], "color": "#10b981"},
                {"name": "Neutral", "value": sentiment_counts["neutral"], "color": "#3b82f6"},
                {"name": "Negative", "value": sentiment_counts["negative"], "color": "#ef4444"},
            ],
            "personalityData": [
                {"trait": "Helpful", "value": style_totals["helpful"]},
                {"trait": "Direct", "value": style_totals["direct"]},
                {"trait": "Constructive", "value": style_totals["constructive"]},
            ],
        }

    # Issues

    async def get_issues(
        self,
        username: str,
        status: Optional[str] = None,
        repo: Optional[str] = None,
        priority: Optional[str] = None,
        labels: Optional[list[str]] = None,
    ) -> list[dict[str, Any]]:
        issues = await self._cached(
            f"issues_{username}",
            settings.ISSUES_CACHE_TTL_MINUTES,
            lambda: self._build_issues(username),
        )
        wanted = {label.lower() for label in labels or []}
        return [
            i for i in issues
            if (not status or i["status"] == status)
            and (not repo or i["repo"] == repo)
            and (not priority or i["priority"] == priority)
            and (not wanted or wanted & {label.lower() for label in i["labels"]})
        ]

    async def _build_issues(self, username: str) -> list[dict[str, Any]]:
        repos = await self.client.get_user_repositories(username, per_page=20)

        async def repo_issues(repo: dict[str, Any]) -> list[dict[str, Any]]:
            owner, name = repo["full_name"].split("/", 1)
            try:
                issues = await self.client.get_issues(owner, name, per_page=50)
            except GitHubError as exc:
                logger.error("Error fetching issues for %s: %s", repo["full_name"], exc)
                return []
            return [
                {
                    "id": issue["number"],
                    "title": issue.get("title"),
                    "repo": repo["full_name"],
                    "author": _login(issue),
                    "status": issue.get("state"),
                    "priority": derive_priority(_label_names(issue)),
                    "labels": _label_names(issue),
                    "createdAt": issue.get("created_at"),
                    "updatedAt": issue.get("updated_at"),
                }
                for issue in issues
                if _login(issue) == username and "pull_request" not in issue
            ]

        batches = await self.client.gather_limited(
            repos[: settings.REVIEW_REPO_LIMIT], repo_issues
        )
        return [row for batch in batches for row in batch]

    # Mentorship

    async def get_mentorship(self, username: str) -> dict[str, Any]:
        repos = await self.client.get_user_repositories(username, per_page=20)

        async def repo_contributors(repo: dict[str, Any]) -> list[dict[str, Any]]:
            owner, name = repo["full_name"].split("/", 1)
            try:
                return await self.client.get_repository_contributors(owner, name)
            except GitHubError as exc:
                logger.error("Error fetching contributors for %s: %s", repo["full_name"], exc)
                return []

        batches = await self.client.gather_limited(
            repos[: settings.REVIEW_REPO_LIMIT], repo_contributors
        )
        contributors: dict[str, dict[str, Any]] = {}
        for batch in batches:
            for person in batch:
                login = person.get("login")
                if not login or login == username:
                    continue
                entry = contributors.setdefault(login, {
                    "name": login,
                    "contributions": 0,
                    "avatar": person.get("avatar_url"),
                    "status": "active",
                })
                entry["contributions"] += person.get("contributions", 0)

        try:
            events = await self.client.get_user_events(username)
        except GitHubError as exc:
            logger.error("Error fetching user activity for %s: %s", username, exc)
            events = []

        activities = []
        for event in events:
            if event.get("type") not in MENTORING_EVENTS:
                continue
            payload = event.get("payload") or {}
            subject = payload.get("pull_request") or payload.get("issue") or {}
            activities.append({
                "type": "code_review" if event["type"] == "PullRequestReviewEvent" else "guidance",
                "contributor": _login(subject),
                "repo": (event.get("repo") or {}).get("name"),
                "date": (event.get("created_at") or "")[:10],
            })

        ranked = sorted(contributors.values(), key=lambda c: c["contributions"], reverse=True)
        mentees = {a["contributor"] for a in activities if a["contributor"] and a["contributor"] != username}
        return {
            "contributors": ranked[:10],
            "activities": activities,
            "metrics": {
                "totalMentored": len(contributors),
                "activeMentees": len(mentees),
                "successfulContributions": sum(c["contributions"] for c in contributors.values()),
                "averageResponseTime": None,
            },
        }

    # Impact

    async def _unique_contributors(self, username: str, repos: list[dict[str, Any]]) -> dict[str, list]:
        async def repo_contributors(repo: dict[str, Any]) -> list[dict[str, Any]]:
            owner, name = repo["full_name"].split("/", 1)
            try:
                return await self.client.get_repository_contributors(owner, name)
            except GitHubError as exc:
                logger.error("Error fetching contributors for %s: %s", repo["full_name"], exc)
                return []

        batches = await self.client.gather_limited(repos, repo_contributors)
        return {repo["full_name"]: batch for repo, batch in zip(repos, batches)}

    async def get_impact(self, username: str) -> dict[str, Any]:
        user, repos = await self._user_and_repos(username)
        total_stars = sum(r.get("stargazers_count", 0) for r in repos)
        total_forks = sum(r.get("forks_count", 0) for r in repos)
        by_repo = await self._unique_contributors(username, repos[: settings.DASHBOARD_REPO_LIMIT])
        unique = {c.get("login") for batch in by_repo.values() for c in batch if c.get("login")}

        return {
            "metrics": {
                "totalStars": total_stars,
                "totalForks": total_forks,
                "uniqueContributors": len(unique),
                "repositories": len(repos),
                "followers": user.get("followers", 0),
                "following": user.get("following", 0),
            },
            "healthScore": github_health_score(total_stars, total_forks, len(unique)),
            # Growth needs historical snapshots; see the persisted impact analysis
            "trends": {
                "starGrowth": None,
                "contributorGrowth": None,
                "repositoryGrowth": None,
            },
        }

    # Profile

    async def get_profile(self, username: str) -> dict[str, Any]:
        user, repos = await self._user_and_repos(username, per_page=20)
        return {
            "user": {
                "username": user.get("login"),
                "name": user.get("name"),
                "bio": user.get("bio"),
                "avatar": user.get("avatar_url"),
                "location": user.get("location"),
                "company": user.get("company"),
                "blog": user.get("blog"),
                "followers": user.get("followers", 0),
                "following": user.get("following", 0),
            },
            "repositories": [
                {
                    "name": repo.get("name"),
                    "fullName": repo.get("full_name"),
                    "description": repo.get("description"),
                    "stars": repo.get("stargazers_count", 0),
                    "forks": repo.get("forks_count", 0),
                    "language": repo.get("language"),
                    "updatedAt": repo.get("updated_at"),
                }
                for repo in repos[:10]
            ],
            "stats": {
                "totalRepos": len(repos),
                "totalStars": sum(r.get("stargazers_count", 0) for r in repos),
                "totalForks": sum(r.get("forks_count", 0) for r in repos),
            },
        }

    async def public_profile(self, username: str) -> dict[str, Any]:
        """Profile card from cached GitHub data; falls back to bare defaults."""
        user = await self.cache.get(f"user_{username}") or {}
        repos = await self.cache.get(f"repos_{username}") or []
        now = datetime.now(timezone.utc).isoformat()
        return {
            "username": username,
            "name": user.get("name") or username,
            "avatar": user.get("avatar_url") or "",
            "bio": user.get("bio") or "",
            "location": user.get("location") or "",
            "company": user.get("company") or "",
            "publicRepos": len(repos),
            "followers": user.get("followers", 0),
            "following": user.get("following", 0),
            "createdAt": user.get("created_at") or now,
            "lastUpdated": now,
        }

    async def share_profile(self, username: str) -> dict[str, Any]:
        public_url = f"{settings.FRONTEND_URL}/profile/{username}"
        return {
            "username": username,
            "publicUrl": public_url,
            "qrCode": {"url": public_url, "size": 200, "format": "png"},
            "profileData": await self.public_profile(username),
            "shareable": True,
        }

    # Sentiment

    def analyze_text(self, text: str) -> dict[str, Any]:
        return self.lexicon.analyze(text).to_dict()

    async def get_sentiment_analysis(self, username: str) -> Optional[dict[str, Any]]:
        """Trends, heatmap and personality insights over cached reviews; None without data."""
        cached = await self.cache.get(f"reviews_{username}")
        if not cached:
            return None
        reviews = cached.get("reviews", []) if isinstance(cached, dict) else cached
        samples = [
            TextSample(r.get("body") or "", r.get("createdAt"), r.get("repo"))
            for r in reviews
        ]
        heatmap = lexicon_heatmap(samples, self.lexicon)
        return {
            "trends": daily_sentiment_trends(samples, self.lexicon),
            "heatmap": heatmap,
            "personality": personality_insights(samples, self.lexicon),
            "summary": {
                "totalReviews": len(samples),
                "averageSentiment": average_comparative(samples, self.lexicon),
                "mostPositiveRepo": most_positive_repository(heatmap),
                "mostNegativeRepo": most_negative_repository(heatmap),
            },
        }

    async def get_community_impact(self, username: str) -> Optional[dict[str, Any]]:
        """Community impact over cached user/repository data; None when not cached."""
        user = await self.cache.get(f"user_{username}")
        repos = await self.cache.get(f"repos_{username}")
        if not user or repos is None:
            return None

        by_repo = await self._unique_contributors(username, repos[: settings.DASHBOARD_REPO_LIMIT])
        names = {r["full_name"]: r.get("name") for r in repos}

        first_timers = []
        retention: dict[str, dict[str, Any]] = {}
        for full_name, people in by_repo.items():
            others = [p for p in people if p.get("login") and p.get("login") != username]
            returning = [p for p in others if p.get("contributions", 0) > 1]
            for person in others:
                if person.get("contributions", 0) == 1:
                    first_timers.append({
                        "username": person["login"],
                        "repository": names.get(full_name),
                        "contributions": person.get("contributions", 0),
                        "avatar": person.get("avatar_url"),
                    })
            retention[names.get(full_name) or full_name] = {
                "rate": len(returning) / len(others) * 100 if others else 0.0,
                "contributors": len(others),
                "activeContributors": len(returning),
            }

        rates = [r["rate"] for r in retention.values()]
        overall_retention = sum(rates) / len(rates) if rates else 0.0

        health = []
        for repo in repos:
            people = by_repo.get(repo["full_name"], [])
            health.append({
                "name": repo.get("name"),
                "healthScore": github_health_score(
                    repo.get("stargazers_count", 0), repo.get("forks_count", 0), len(people)
                ),
                "stars": repo.get("stargazers_count", 0),
                "forks": repo.get("forks_count", 0),
                "issues": repo.get("open_issues_count", 0),
                "lastActivity": repo.get("updated_at"),
                "contributors": len(people),
            })
        average_health = sum(h["healthScore"] for h in health) / len(health) if health else 0.0

        try:
            events = await self.client.get_user_events(username)
        except GitHubError as exc:
            logger.error("Error fetching user activity for %s: %s", username, exc)
            events = []
        mentoring = [e for e in events if e.get("type") in MENTORING_EVENTS]
        mentorship_score = len(mentoring) / len(events) * 100 if events else 0.0

        overall = community_impact_score(
            len(first_timers), overall_retention, average_health, mentorship_score
        )
        return {
            "firstTimeContributors": {
                "total": len(first_timers),
                "contributors": first_timers,
                "growthRate": None,
            },
            "retentionRates": {
                "overall": overall_retention,
                "byRepository": retention,
                "trend": "stable",
            },
            "repositoryHealth": {
                "improvements": health,
                "averageHealth": average_health,
                "healthTrend": "stable",
            },
            "mentorshipEffectiveness": {
                "score": mentorship_score,
                "metrics": {
                    "mentoringEvents": len(mentoring),
                    "totalEvents": len(events),
                },
                "recommendations": MENTORSHIP_RECOMMENDATIONS,
            },
            "overallImpact": {
                "score": overall,
                "level": impact_level(overall),
            },
        }

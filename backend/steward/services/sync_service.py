import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from steward.analysis.sentiment import get_sentiment_strategy
from steward.analysis.sentiment.lexicon import LexiconSentiment
from steward.analysis.trends import to_datetime
from steward.core.config import settings
from steward.core.database import AsyncSessionLocal
from steward.core.metrics import metrics
from steward.models.issue import Issue
from steward.models.issue_triage import IssueTriage
from steward.models.pr_review import PRReview
from steward.models.base import as_naive_utc, utc_now
from steward.models.repository import Repository
from steward.models.user import User
from steward.services.comment_analysis_service import categorize_lexicon_score
from steward.services.github.client import GitHubClient
from steward.services.maintainer_service import NotMaintainerError, UserNotFoundError

logger = logging.getLogger(__name__)

TRIAGE_COMMENTED = "COMMENTED"


def _naive_utc(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return as_naive_utc(to_datetime(value))


def stored_sentiment(result) -> tuple[str, float]:
    """Three-way label and a score in [-1, 1] for a pr_reviews row."""
    if isinstance(result, LexiconSentiment):
        return categorize_lexicon_score(result.score), max(-1.0, min(1.0, result.comparative))
    return result.sentiment, result.score


def repository_from_api_url(url: str) -> Optional[str]:
    """``owner/name`` from a ``.../repos/{owner}/{name}/(pulls|issues)/{n}`` URL."""
    parts = (url or "").rstrip("/").split("/")
    if len(parts) < 4:
        return None
    return "/".join(parts[-4:-2])


def number_from_api_url(url: str) -> Optional[int]:
    tail = (url or "").rstrip("/").rsplit("/", 1)[-1]
    return int(tail) if tail.isdigit() else None


class SyncService:
    """Pull a maintainer's repositories, reviews and triage comments into the database."""

    def __init__(
        self,
        client: GitHubClient,
        session: Optional[AsyncSession] = None,
        strategy_name: Optional[str] = None,
    ):
        self.client = client
        self.session = session
        self.strategy = get_sentiment_strategy(strategy_name or settings.SENTIMENT_STRATEGY)

    async def sync_user(self, username: str, create_missing: bool = False) -> dict[str, Any]:
        started = time.perf_counter()
        async with self._get_session() as session:
            user = await self._load_user(session, username, create_missing)

            repositories = await self.client.get_user_repositories(username, per_page=100)
            repo_ids = {}
            for payload in repositories:
                repo = await self._upsert_repository(session, user.id, payload)
                repo_ids[repo.full_name] = repo.id

            scanned = [r["full_name"] for r in repositories[: settings.DASHBOARD_REPO_LIMIT]]
            activity = await self.client.get_maintainer_activity(username, scanned)

            reviews = 0
            for review in activity["pr_reviews"]:
                if await self._store_review(session, user.id, review, repo_ids):
                    reviews += 1

            triage = 0
            for comment in activity["issue_triage"]:
                if await self._store_triage(session, user.id, comment, repo_ids):
                    triage += 1

        duration_ms = (time.perf_counter() - started) * 1000
        metrics.sync_completed(username, len(repositories), reviews, triage, duration_ms)
        logger.info(
            "Synced %s: %s repositories, %s reviews, %s triage comments",
            username, len(repositories), reviews, triage,
        )
        return {
            "message": "Data synced successfully",
            "repositories": len(repositories),
            "prReviews": reviews,
            "issueTriage": triage,
        }

    async def _load_user(self, session, username: str, create_missing: bool) -> User:
        user = (
            await session.execute(select(User).where(User.github_username == username))
        ).scalar_one_or_none()
        if user is None:
            if not create_missing:
                raise UserNotFoundError()
            profile = await self.client.get_user(username)
            user = User(
                github_username=username,
                github_id=str(profile.get("id")) if profile.get("id") is not None else None,
                name=profile.get("name"),
                email=profile.get("email"),
                avatar_url=profile.get("avatar_url"),
                bio=profile.get("bio"),
                location=profile.get("location"),
                website=profile.get("blog") or None,
                twitter=profile.get("twitter_username"),
                is_maintainer=True,
            )
            session.add(user)
            await session.flush()
        if not user.is_maintainer:
            raise NotMaintainerError()
        return user

    async def _upsert_repository(self, session, user_id: int, payload: dict) -> Repository:
        repo = (
            await session.execute(
                select(Repository).where(Repository.full_name == payload["full_name"])
            )
        ).scalar_one_or_none()
        if repo is None:
            repo = Repository(
                user_id=user_id,
                full_name=payload["full_name"],
                created_at=_naive_utc(payload.get("created_at")) or utc_now(),
            )
            session.add(repo)
        repo.name = payload.get("name") or payload["full_name"].split("/")[-1]
        repo.description = payload.get("description")
        repo.url = payload.get("html_url")
        repo.language = payload.get("language")
        repo.stars = payload.get("stargazers_count", 0)
        repo.forks = payload.get("forks_count", 0)
        repo.open_issues = payload.get("open_issues_count", 0)
        repo.is_private = bool(payload.get("private", False))
        repo.updated_at = _naive_utc(payload.get("updated_at")) or utc_now()
        await session.flush()
        return repo

    async def _store_review(self, session, user_id: int, review: dict, repo_ids: dict) -> bool:
        review_id = str(review.get("id"))
        exists = (
            await session.execute(
                select(PRReview.id).where(PRReview.github_review_id == review_id)
            )
        ).scalar_one_or_none()
        if exists is not None:
            return False

        pr_url = review.get("pull_request_url", "")
        pr_number = number_from_api_url(pr_url) or 0
        body = review.get("body") or ""
        sentiment, score = stored_sentiment(self.strategy.analyze(body))
        session.add(PRReview(
            user_id=user_id,
            repository_id=repo_ids.get(repository_from_api_url(pr_url)),
            github_review_id=review_id,
            pr_number=pr_number,
            title=f"Review for PR #{pr_number}",
            body=body,
            state=review.get("state"),
            sentiment=sentiment,
            sentiment_score=score,
            url=review.get("html_url"),
            created_at=_naive_utc(review.get("submitted_at")) or utc_now(),
        ))
        await session.flush()
        return True

    async def _store_triage(self, session, user_id: int, comment: dict, repo_ids: dict) -> bool:
        comment_id = str(comment.get("id"))
        exists = (
            await session.execute(
                select(IssueTriage.id).where(IssueTriage.github_comment_id == comment_id)
            )
        ).scalar_one_or_none()
        if exists is not None:
            return False

        issue_url = comment.get("issue_url", "")
        repository_id = repo_ids.get(repository_from_api_url(issue_url))
        number = number_from_api_url(issue_url)
        issue = None
        if repository_id is not None and number is not None:
            issue = await self._ensure_issue(
                session, repository_id, number, (comment.get("html_url") or "").split("#")[0]
            )

        session.add(IssueTriage(
            user_id=user_id,
            issue_id=issue.id if issue else None,
            action=TRIAGE_COMMENTED,
            comment=comment.get("body"),
            github_comment_id=comment_id,
            created_at=_naive_utc(comment.get("created_at")) or utc_now(),
        ))
        await session.flush()
        return True

    async def _ensure_issue(self, session, repository_id: int, number: int, url: str) -> Issue:
        issue = (
            await session.execute(
                select(Issue).where(Issue.repository_id == repository_id, Issue.number == number)
            )
        ).scalar_one_or_none()
        if issue is None:
            issue = Issue(repository_id=repository_id, number=number, url=url or None)
            session.add(issue)
            await session.flush()
        return issue

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

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Iterable, TypeVar

import httpx

from steward.core.config import settings
from steward.core.metrics import metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class GitHubError(Exception):
    """A GitHub API call failed (transport error or non-2xx status)."""

    def __init__(self, endpoint: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"GitHub API request failed for {endpoint}: {message}")
        self.endpoint = endpoint
        self.status_code = status_code


class GitHubNotFoundError(GitHubError):
    pass


class GitHubClient:
    """Thin async wrapper over the GitHub REST v3 API."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout_sec: float | None = None,
        per_page: int | None = None,
        max_pages: int | None = None,
        max_concurrency: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = settings.GITHUB_TOKEN if token is None else token
        self.base_url = (base_url or settings.GITHUB_API_BASE).rstrip("/")
        self.user_agent = user_agent or settings.GITHUB_USER_AGENT
        self.timeout_sec = settings.GITHUB_TIMEOUT_SEC if timeout_sec is None else timeout_sec
        self.per_page = per_page or settings.GITHUB_PER_PAGE
        self.max_pages = max_pages or settings.GITHUB_MAX_PAGES
        self.max_concurrency = max(
            (settings.GITHUB_MAX_CONCURRENCY if max_concurrency is None else max_concurrency) or 1,
            1,
        )
        limits = httpx.Limits(
            max_connections=self.max_concurrency,
            max_keepalive_connections=self.max_concurrency,
        )
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout_sec,
            limits=limits,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.user_agent,
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """GET an endpoint and return the decoded JSON body."""
        started = time.perf_counter()
        try:
            resp = await self._client.get(endpoint, params=params)
        except httpx.HTTPError as exc:
            metrics.github_failure(endpoint, str(exc))
            logger.error("GitHub API error for %s: %s", endpoint, exc)
            raise GitHubError(endpoint, str(exc)) from exc

        metrics.github_request(endpoint, resp.status_code, (time.perf_counter() - started) * 1000)
        if resp.status_code == 404:
            raise GitHubNotFoundError(endpoint, "not found", status_code=404)
        if resp.is_error:
            metrics.github_failure(endpoint, f"HTTP {resp.status_code}")
            logger.error("GitHub API error for %s: %s %s", endpoint, resp.status_code, resp.text[:200])
            raise GitHubError(endpoint, f"HTTP {resp.status_code}", status_code=resp.status_code)
        return resp.json()

    async def paginate(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        max_pages: int | None = None,
    ) -> list[Any]:
        """Walk ``page``/``per_page`` until a short page or the page limit."""
        per_page = int((params or {}).get("per_page", self.per_page))
        limit = max_pages or self.max_pages
        items: list[Any] = []
        for page in range(1, limit + 1):
            page_params = dict(params or {}, per_page=per_page, page=page)
            batch = await self.request(endpoint, page_params)
            if not isinstance(batch, list):
                break
            items.extend(batch)
            if len(batch) < per_page:
                break
        return items

    async def gather_limited(
        self, items: Iterable[T], fn: Callable[[T], Awaitable[R]]
    ) -> list[R]:
        """Run ``fn`` over items concurrently, at most ``max_concurrency`` at once."""
        gate = _AsyncGate(self.max_concurrency)

        async def run(item: T) -> R:
            async with gate:
                return await fn(item)

        return await asyncio.gather(*[run(item) for item in items])

    # Users

    async def get_user(self, username: str) -> dict[str, Any]:
        return await self.request(f"/users/{username}")

    async def get_authenticated_user(self) -> dict[str, Any]:
        return await self.request("/user")

    async def get_user_events(self, username: str, page: int = 1) -> list[dict[str, Any]]:
        return await self.request(
            f"/users/{username}/events", {"page": page, "per_page": self.per_page}
        )

    async def get_contributions(
        self, username: str, since: str | None = None, until: str | None = None
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {}
        if since:
            params["since"] = since
        if until:
            params["until"] = until
        return await self.request(f"/users/{username}/events", params or None)

    # Repositories

    async def get_user_repositories(
        self,
        username: str,
        type: str = "all",
        sort: str = "updated",
        per_page: int | None = None,
        max_pages: int | None = 1,
    ) -> list[dict[str, Any]]:
        return await self.paginate(
            f"/users/{username}/repos",
            {"type": type, "sort": sort, "per_page": per_page or self.per_page},
            max_pages=max_pages,
        )

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        return await self.request(f"/repos/{owner}/{repo}")

    async def get_repository_contributors(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return await self.request(f"/repos/{owner}/{repo}/contributors")

    async def get_repository_events(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return await self.request(f"/repos/{owner}/{repo}/events")

    # Pull requests

    async def get_pull_requests(
        self, owner: str, repo: str, state: str = "all", per_page: int | None = None
    ) -> list[dict[str, Any]]:
        return await self.request(
            f"/repos/{owner}/{repo}/pulls",
            {"state": state, "per_page": per_page or self.per_page},
        )

    async def get_pull_request_reviews(
        self, owner: str, repo: str, number: int
    ) -> list[dict[str, Any]]:
        return await self.request(f"/repos/{owner}/{repo}/pulls/{number}/reviews")

    async def get_pull_request_commits(
        self, owner: str, repo: str, number: int
    ) -> list[dict[str, Any]]:
        return await self.request(f"/repos/{owner}/{repo}/pulls/{number}/commits")

    # Issues

    async def get_issues(
        self, owner: str, repo: str, state: str = "all", per_page: int | None = None
    ) -> list[dict[str, Any]]:
        return await self.request(
            f"/repos/{owner}/{repo}/issues",
            {"state": state, "per_page": per_page or self.per_page},
        )

    async def get_issue_comments(
        self, owner: str, repo: str, number: int
    ) -> list[dict[str, Any]]:
        return await self.request(f"/repos/{owner}/{repo}/issues/{number}/comments")

    # Search

    async def search_issues(self, query: str, sort: str = "created") -> dict[str, Any]:
        return await self.request(
            "/search/issues", {"q": query, "sort": sort, "per_page": self.per_page}
        )

    async def search_pull_requests(self, query: str, sort: str = "created") -> dict[str, Any]:
        return await self.search_issues(f"{query} is:pr", sort)

    # Maintainer activity

    async def get_maintainer_activity(
        self, username: str, repositories: list[str]
    ) -> dict[str, list[dict[str, Any]]]:
        """
        Collect a maintainer's PR reviews and issue comments across repositories.

        Per-repository failures are logged and contribute nothing.
        """

        async def repo_reviews(full_name: str) -> list[dict[str, Any]]:
            owner, name = full_name.split("/", 1)
            try:
                pulls = await self.get_pull_requests(owner, name)
                reviews: list[dict[str, Any]] = []
                for pr in pulls:
                    for review in await self.get_pull_request_reviews(owner, name, pr["number"]):
                        if _login(review) == username:
                            reviews.append(review)
                return reviews
            except GitHubError as exc:
                logger.error("Error fetching PR reviews for %s: %s", full_name, exc)
                return []

        async def repo_comments(full_name: str) -> list[dict[str, Any]]:
            owner, name = full_name.split("/", 1)
            try:
                issues = await self.get_issues(owner, name)
                comments: list[dict[str, Any]] = []
                for issue in issues:
                    for comment in await self.get_issue_comments(owner, name, issue["number"]):
                        if _login(comment) == username:
                            comments.append(comment)
                return comments
            except GitHubError as exc:
                logger.error("Error fetching issue triage for %s: %s", full_name, exc)
                return []

        review_batches = await self.gather_limited(repositories, repo_reviews)
        comment_batches = await self.gather_limited(repositories, repo_comments)

        mentorship: list[dict[str, Any]] = []
        contributions: list[dict[str, Any]] = []
        try:
            contributions = await self.get_user_events(username)
            mentorship = [
                event for event in contributions
                if event.get("type") in ("IssueCommentEvent", "PullRequestReviewEvent")
            ]
        except GitHubError as exc:
            logger.error("Error fetching user activity for %s: %s", username, exc)

        return {
            "pr_reviews": [r for batch in review_batches for r in batch],
            "issue_triage": [c for batch in comment_batches for c in batch],
            "mentorship": mentorship,
            "contributions": contributions,
        }


def _login(payload: dict[str, Any]) -> str | None:
    return (payload.get("user") or {}).get("login")


class _AsyncGate:
    def __init__(self, max_concurrency: int) -> None:
        self._sem = asyncio.Semaphore(max_concurrency)

    async def __aenter__(self) -> None:
        await self._sem.acquire()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._sem.release()

import fnmatch
import os
from datetime import date, datetime, timedelta
from types import SimpleNamespace

# Settings are read at import time; point them at throwaway resources first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("GITHUB_TOKEN", "")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from steward.core.cache import PayloadCache
from steward.core.database import Base
from steward.core.metrics import metrics
from steward.services.github.client import GitHubClient
import steward.models  # noqa: F401


class FakeClock:
    """Controllable wall clock in seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """Dict-backed stand-in for the handful of Redis commands the cache uses."""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value):
        self.store[key] = value
        return True

    async def delete(self, *keys):
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatch.fnmatchcase(key, match):
                yield key


class FakeGitHub:
    """
    MockTransport handler serving canned JSON by request path.

    A payload may be a callable taking the request, which lets a route
    answer differently per page. Unknown paths answer 404.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, path, payload, status=200):
        self.routes[path] = (status, payload)

    def paths(self):
        return [r.url.path for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, payload = self.routes.get(request.url.path, (404, {"message": "Not Found"}))
        if callable(payload):
            payload = payload(request)
        return httpx.Response(status, json=payload)


@pytest.fixture(autouse=True)
def clear_metrics():
    metrics.enable()
    metrics.clear_buffer()
    yield
    metrics.clear_buffer()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def redis_store():
    return FakeRedis()


@pytest.fixture
def payload_cache(redis_store, clock):
    return PayloadCache(redis_store, default_ttl_minutes=60, clock=clock)


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def client_factory(github):
    def factory(token=None):
        return GitHubClient(
            token=token or "",
            base_url="https://api.github.com",
            max_concurrency=2,
            transport=httpx.MockTransport(github),
        )
    return factory


@pytest.fixture
async def github_client(client_factory):
    client = client_factory()
    yield client
    await client.aclose()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def api(session_factory, payload_cache, client_factory):
    """HTTP client bound to the app with database, cache and GitHub swapped out."""
    from steward.api.dependencies import get_github_client_factory, get_payload_cache
    from steward.api.main import app
    from steward.core.database import get_db

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payload_cache] = lambda: payload_cache
    app.dependency_overrides[get_github_client_factory] = lambda: client_factory

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def octo(github):
    """A small GitHub account: two repositories, one authored PR and issue, a few contributors."""
    github.add("/users/octo", {
        "login": "octo",
        "id": 42,
        "name": "Octo Cat",
        "bio": "Maintains things",
        "avatar_url": "https://avatars.example/octo.png",
        "followers": 10,
        "following": 2,
        "created_at": "2020-01-01T00:00:00Z",
    })
    github.add("/users/octo/repos", [
        {
            "name": "a",
            "full_name": "octo/a",
            "stargazers_count": 5000,
            "forks_count": 200,
            "open_issues_count": 3,
            "language": "Python",
            "html_url": "https://github.com/octo/a",
            "created_at": "2021-01-01T00:00:00Z",
            "updated_at": "2024-03-10T00:00:00Z",
        },
        {
            "name": "b",
            "full_name": "octo/b",
            "stargazers_count": 0,
            "forks_count": 0,
            "open_issues_count": 0,
            "language": None,
            "created_at": "2022-01-01T00:00:00Z",
            "updated_at": "2024-01-10T00:00:00Z",
        },
    ])
    github.add("/repos/octo/a/pulls", [
        {
            "number": 1,
            "title": "Add parser",
            "user": {"login": "octo"},
            "state": "closed",
            "merged_at": "2024-03-02T00:00:00Z",
            "labels": [{"name": "priority: high"}],
            "created_at": "2024-03-01T00:00:00Z",
            "updated_at": "2024-03-02T00:00:00Z",
        },
        {
            "number": 2,
            "title": "Someone else's change",
            "user": {"login": "other"},
            "state": "open",
            "labels": [],
            "created_at": "2024-03-03T00:00:00Z",
            "updated_at": "2024-03-03T00:00:00Z",
        },
    ])
    github.add("/repos/octo/a/issues", [
        {
            "number": 5,
            "title": "Crash on empty config",
            "user": {"login": "octo"},
            "state": "open",
            "labels": [{"name": "bug"}, {"name": "P2"}],
            "created_at": "2024-03-05T00:00:00Z",
            "updated_at": "2024-03-06T00:00:00Z",
        },
        {
            "number": 1,
            "title": "Add parser",
            "user": {"login": "octo"},
            "state": "closed",
            "pull_request": {"url": "https://api.github.com/repos/octo/a/pulls/1"},
            "labels": [],
            "created_at": "2024-03-01T00:00:00Z",
            "updated_at": "2024-03-02T00:00:00Z",
        },
    ])
    github.add("/repos/octo/a/issues/1/comments", [
        {"body": "Great work, thanks for the help!"},
        {"body": "Please consider a simpler approach"},
    ])
    github.add("/repos/octo/b/pulls", [])
    github.add("/repos/octo/b/issues", [])
    github.add("/repos/octo/a/contributors", [
        {"login": "octo", "contributions": 50},
        {"login": "alice", "contributions": 3, "avatar_url": "https://avatars.example/alice.png"},
        {"login": "bob", "contributions": 1},
    ])
    github.add("/repos/octo/b/contributors", [
        {"login": "alice", "contributions": 2},
    ])
    github.add("/users/octo/events", [
        {
            "type": "PullRequestReviewEvent",
            "repo": {"name": "octo/a"},
            "created_at": "2024-03-03T10:00:00Z",
            "payload": {"pull_request": {"user": {"login": "alice"}}},
        },
        {
            "type": "IssueCommentEvent",
            "repo": {"name": "octo/a"},
            "created_at": "2024-03-04T10:00:00Z",
            "payload": {"issue": {"user": {"login": "bob"}}},
        },
        {"type": "PushEvent", "repo": {"name": "octo/a"}, "created_at": "2024-03-04T11:00:00Z"},
    ])
    return github


@pytest.fixture
async def maintainer(session_factory):
    """A maintainer with reviews, triage, mentorship, contributors, snapshots and impact history."""
    from steward.models import (
        CommunityImpact,
        Contribution,
        Contributor,
        Issue,
        IssueTriage,
        MentorshipActivity,
        PRReview,
        Repository,
        RepositorySnapshot,
        User,
    )

    now = datetime.utcnow()
    def days(n):
        return now - timedelta(days=n)

    async with session_factory() as session:
        user = User(github_username="maint", name="Mai Ntainer", is_maintainer=True, created_at=days(400))
        casual = User(github_username="casual", name="Casual", is_maintainer=False)
        session.add_all([user, casual])
        await session.flush()

        core = Repository(user_id=user.id, name="core", full_name="maint/core", stars=300, forks=30, language="Python")
        docs = Repository(user_id=user.id, name="docs", full_name="maint/docs", stars=100, forks=5)
        session.add_all([core, docs])
        await session.flush()

        session.add_all([
            RepositorySnapshot(repository_id=core.id, snapshot_date=days(90), stars=150, forks=15,
                               issues=40, pull_requests=10, contributors=5, activity_score=20.0),
            RepositorySnapshot(repository_id=core.id, snapshot_date=days(1), stars=300, forks=30,
                               issues=25, pull_requests=22, contributors=8, activity_score=30.0),
            RepositorySnapshot(repository_id=docs.id, snapshot_date=days(1), stars=100, forks=5),
        ])

        reviews = [
            (core, "POSITIVE", 0.6, 1),
            (core, "POSITIVE", 0.5, 2),
            (docs, "NEGATIVE", -0.4, 3),
            (core, "NEUTRAL", 0.0, 40),
            (docs, None, None, 50),
        ]
        for index, (repo, sentiment, score, age) in enumerate(reviews):
            session.add(PRReview(
                user_id=user.id, repository_id=repo.id, github_review_id=f"seed-{index}",
                pr_number=100 + index, title=f"Review for PR #{100 + index}", body="Looks good",
                state="COMMENTED", sentiment=sentiment, sentiment_score=score, created_at=days(age),
            ))

        issue = Issue(repository_id=core.id, number=7, title="Crash on empty config", state="open",
                      url="https://github.com/maint/core/issues/7")
        session.add(issue)
        await session.flush()
        for action, age in (("COMMENTED", 1), ("LABELED", 2), ("CLOSED", 60)):
            session.add(IssueTriage(user_id=user.id, issue_id=issue.id, action=action, created_at=days(age)))

        alice = Contributor(github_username="alice", name="Alice")
        bob = Contributor(github_username="bob", name="Bob")
        session.add_all([alice, bob])
        await session.flush()
        session.add_all([
            Contribution(contributor_id=alice.id, repository_id=core.id, type="COMMIT", created_at=days(10)),
            Contribution(contributor_id=alice.id, repository_id=core.id, type="PULL_REQUEST", created_at=days(5)),
            Contribution(contributor_id=bob.id, repository_id=docs.id, type="DOCUMENTATION", created_at=days(100)),
            Contribution(user_id=user.id, repository_id=core.id, type="COMMIT", created_at=days(5)),
        ])

        session.add_all([
            MentorshipActivity(user_id=user.id, contributor_id=alice.id, type="CODE_REVIEW",
                               impact="HIGH", description="Reviewed Alice's first PR", created_at=days(1)),
            MentorshipActivity(user_id=user.id, contributor_id=bob.id, type="GUIDANCE",
                               impact="MEDIUM", description="Pointed Bob at the docs guide", created_at=days(10)),
            MentorshipActivity(user_id=user.id, type="COLLABORATION", impact="HIGH",
                               description="Paired on the release", created_at=days(45)),
        ])

        session.add_all([
            CommunityImpact(user_id=user.id, period="MONTHLY", start_date=date(2024, 1, 1),
                            end_date=date(2024, 1, 31), maintainer_score=60.0, community_score=50.0,
                            leadership_score=40.0, created_at=days(60)),
            CommunityImpact(user_id=user.id, period="MONTHLY", start_date=date(2024, 2, 1),
                            end_date=date(2024, 2, 29), maintainer_score=80.0, community_score=70.0,
                            leadership_score=60.0, created_at=days(30)),
            CommunityImpact(user_id=user.id, period="WEEKLY", start_date=date(2024, 2, 5),
                            end_date=date(2024, 2, 11), maintainer_score=10.0, community_score=10.0,
                            leadership_score=10.0, created_at=days(40)),
        ])
        await session.commit()

        return SimpleNamespace(
            now=now,
            user_id=user.id,
            casual_id=casual.id,
            core_id=core.id,
            docs_id=docs.id,
            issue_id=issue.id,
        )

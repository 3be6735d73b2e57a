"""Tests for the GitHub REST client over a mocked transport."""

import asyncio

import httpx
import pytest

from steward.core.metrics import metrics
from steward.services.github.client import GitHubClient, GitHubError, GitHubNotFoundError


async def test_headers_include_token(github, client_factory):
    github.add("/users/octo", {"login": "octo"})
    async with client_factory("secret") as client:
        assert await client.get_user("octo") == {"login": "octo"}

    request = github.requests[0]
    assert request.headers["Authorization"] == "token secret"
    assert request.headers["Accept"] == "application/vnd.github.v3+json"
    assert request.headers["User-Agent"]


async def test_no_authorization_without_token(github, github_client):
    github.add("/users/octo", {"login": "octo"})
    await github_client.get_user("octo")
    assert "Authorization" not in github.requests[0].headers


async def test_not_found_raises_dedicated_error(github_client):
    with pytest.raises(GitHubNotFoundError) as info:
        await github_client.get_user("ghost")
    assert info.value.status_code == 404


async def test_server_error_is_recorded(github, github_client):
    github.add("/users/octo", {"message": "boom"}, status=502)
    with pytest.raises(GitHubError) as info:
        await github_client.get_user("octo")

    assert info.value.status_code == 502
    summary = metrics.get_summary()
    assert summary["github_requests"] == 1
    assert summary["github_failures"] == 1


async def test_transport_error_wrapped():
    def broken(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = GitHubClient(token="", transport=httpx.MockTransport(broken))
    try:
        with pytest.raises(GitHubError):
            await client.get_user("octo")
    finally:
        await client.aclose()
    assert metrics.get_summary()["github_failures"] == 1


async def test_paginate_stops_on_short_page(github, github_client):
    def pages(request):
        page = int(request.url.params["page"])
        return [{"id": i} for i in range(2)] if page < 3 else [{"id": 99}]

    github.add("/users/octo/repos", pages)
    items = await github_client.paginate("/users/octo/repos", {"per_page": 2})

    assert [i["id"] for i in items] == [0, 1, 0, 1, 99]
    assert [r.url.params["page"] for r in github.requests] == ["1", "2", "3"]


async def test_paginate_respects_page_limit(github, github_client):
    github.add("/users/octo/repos", lambda request: [{"id": 1}, {"id": 2}])
    items = await github_client.paginate("/users/octo/repos", {"per_page": 2}, max_pages=2)
    assert len(items) == 4
    assert len(github.requests) == 2


async def test_user_repositories_single_page_by_default(github, github_client):
    github.add("/users/octo/repos", lambda request: [{"full_name": "octo/a"}] * 3)
    repos = await github_client.get_user_repositories("octo", per_page=3)
    assert len(repos) == 3
    assert len(github.requests) == 1
    assert github.requests[0].url.params["sort"] == "updated"


async def test_gather_limited_caps_concurrency(github_client):
    running = 0
    peak = 0

    async def work(item):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return item * 2

    results = await github_client.gather_limited(range(6), work)
    assert results == [0, 2, 4, 6, 8, 10]
    assert peak == 2


async def test_maintainer_activity_filters_by_author(github, github_client):
    github.add("/repos/octo/a/pulls", [{"number": 1}])
    github.add("/repos/octo/a/pulls/1/reviews", [
        {"id": 10, "user": {"login": "octo"}},
        {"id": 11, "user": {"login": "someone"}},
    ])
    github.add("/repos/octo/a/issues", [{"number": 5}])
    github.add("/repos/octo/a/issues/5/comments", [
        {"id": 20, "user": {"login": "octo"}},
    ])
    github.add("/users/octo/events", [
        {"type": "PullRequestReviewEvent"},
        {"type": "PushEvent"},
    ])

    activity = await github_client.get_maintainer_activity("octo", ["octo/a", "octo/missing"])

    assert [r["id"] for r in activity["pr_reviews"]] == [10]
    assert [c["id"] for c in activity["issue_triage"]] == [20]
    assert len(activity["mentorship"]) == 1
    assert len(activity["contributions"]) == 2

"""Tests for pulling GitHub activity into the database."""

import pytest
from sqlalchemy import select

from steward.core.metrics import metrics
from steward.models import Issue, IssueTriage, PRReview, Repository, User
from steward.services.maintainer_service import NotMaintainerError, UserNotFoundError
from steward.services.sync_service import (
    SyncService,
    number_from_api_url,
    repository_from_api_url,
)


@pytest.fixture
def service(github_client, session):
    return SyncService(github_client, session=session, strategy_name="keyword")


def serve_account(github, login, repo="tools"):
    full_name = f"{login}/{repo}"
    github.add(f"/users/{login}/repos", [{
        "name": repo,
        "full_name": full_name,
        "stargazers_count": 12,
        "forks_count": 1,
        "language": "Go",
        "html_url": f"https://github.com/{full_name}",
        "created_at": "2023-05-01T00:00:00Z",
        "updated_at": "2024-03-01T00:00:00Z",
    }])
    github.add(f"/repos/{full_name}/pulls", [{"number": 11}])
    github.add(f"/repos/{full_name}/pulls/11/reviews", [
        {
            "id": 501,
            "user": {"login": login},
            "body": "This is broken and the error handling is wrong",
            "state": "CHANGES_REQUESTED",
            "pull_request_url": f"https://api.github.com/repos/{full_name}/pulls/11",
            "submitted_at": "2024-03-01T09:30:00+02:00",
        },
        {
            "id": 502,
            "user": {"login": "drive-by"},
            "body": "lgtm",
            "pull_request_url": f"https://api.github.com/repos/{full_name}/pulls/11",
        },
    ])
    github.add(f"/repos/{full_name}/issues", [{"number": 4}])
    github.add(f"/repos/{full_name}/issues/4/comments", [{
        "id": 601,
        "user": {"login": login},
        "body": "Thanks for the report",
        "issue_url": f"https://api.github.com/repos/{full_name}/issues/4",
        "html_url": f"https://github.com/{full_name}/issues/4#issuecomment-601",
        "created_at": "2024-03-02T00:00:00Z",
    }])
    github.add(f"/users/{login}/events", [])


@pytest.mark.parametrize("url,repository,number", [
    ("https://api.github.com/repos/octo/a/pulls/12", "octo/a", 12),
    ("https://api.github.com/repos/octo/a/issues/3/", "octo/a", 3),
    ("", None, None),
])
def test_url_parsing(url, repository, number):
    assert repository_from_api_url(url) == repository
    assert number_from_api_url(url) == number


async def test_unknown_user_is_rejected(service):
    with pytest.raises(UserNotFoundError):
        await service.sync_user("nobody")


async def test_non_maintainer_is_rejected(service, maintainer):
    with pytest.raises(NotMaintainerError):
        await service.sync_user("casual")


async def test_create_missing_user_from_profile(service, github, session):
    github.add("/users/newbie", {"login": "newbie", "id": 77, "name": "New Bie", "blog": ""})
    serve_account(github, "newbie")

    result = await service.sync_user("newbie", create_missing=True)
    assert result["repositories"] == 1
    assert result["prReviews"] == 1
    assert result["issueTriage"] == 1

    user = (await session.execute(select(User).where(User.github_username == "newbie"))).scalar_one()
    assert user.is_maintainer is True
    assert user.github_id == "77"
    assert user.website is None

    review = (await session.execute(select(PRReview))).scalar_one()
    assert review.github_review_id == "501"
    assert review.sentiment == "NEGATIVE"
    assert review.title == "Review for PR #11"
    # Offsets are normalized to naive UTC
    assert review.created_at.hour == 7

    issue = (await session.execute(select(Issue))).scalar_one()
    assert issue.number == 4
    assert issue.url == "https://github.com/newbie/tools/issues/4"
    triage = (await session.execute(select(IssueTriage))).scalar_one()
    assert triage.action == "COMMENTED"
    assert triage.issue_id == issue.id


async def test_sync_is_idempotent(service, github, session):
    github.add("/users/newbie", {"login": "newbie", "id": 77})
    serve_account(github, "newbie")

    await service.sync_user("newbie", create_missing=True)
    github.add("/users/newbie/repos", [{
        "name": "tools",
        "full_name": "newbie/tools",
        "stargazers_count": 40,
    }])
    second = await service.sync_user("newbie")

    assert (second["prReviews"], second["issueTriage"]) == (0, 0)
    repos = (await session.execute(select(Repository))).scalars().all()
    assert len(repos) == 1
    assert repos[0].stars == 40


async def test_sync_records_metric(service, github, maintainer):
    serve_account(github, "maint", repo="core")

    await service.sync_user("maint")

    (event,) = [e for e in metrics.get_buffer() if e.category == "sync"]
    assert event.subject == "maint"
    assert event.metadata["pr_reviews"] == 1


@pytest.mark.parametrize("strategy_name", ["keyword", "lexicon"])
async def test_stored_sentiment_is_three_way_for_any_strategy(github_client, session, github, strategy_name):
    github.add("/users/newbie", {"login": "newbie", "id": 77})
    serve_account(github, "newbie")
    service = SyncService(github_client, session=session, strategy_name=strategy_name)

    await service.sync_user("newbie", create_missing=True)

    review = (await session.execute(select(PRReview))).scalar_one()
    assert review.sentiment == "NEGATIVE"
    assert -1.0 <= review.sentiment_score < 0

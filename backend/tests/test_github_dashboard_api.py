"""HTTP tests for the live GitHub dashboard routes."""

import pytest

from steward.core.config import settings


async def test_health(api):
    response = await api.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["version"] == settings.APP_VERSION


@pytest.mark.parametrize("path", [
    "/api/dashboard",
    "/api/reviews",
    "/api/issues",
    "/api/mentorship",
    "/api/impact",
    "/api/sentiment/analysis",
    "/api/community/impact",
])
async def test_username_is_required(api, path):
    response = await api.get(path)
    assert response.status_code == 400
    assert response.json() == {"error": "Username is required"}


async def test_dashboard_envelope(api, octo):
    response = await api.get("/api/dashboard", params={"username": "octo"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["metrics"]["totalPRReviews"] == 1


async def test_unknown_github_user_is_404(api, github):
    response = await api.get("/api/dashboard", params={"username": "ghost"})
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


async def test_github_outage_is_500(api, github):
    github.add("/users/octo", {"message": "unavailable"}, status=503)
    response = await api.get("/api/dashboard", params={"username": "octo"})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch dashboard data"}


async def test_reviews_with_filters(api, octo):
    response = await api.get("/api/reviews", params={"username": "octo", "status": "approved"})
    assert response.status_code == 200
    assert [r["id"] for r in response.json()["data"]["reviews"]] == [1]


async def test_issues_label_filter(api, octo):
    response = await api.get("/api/issues", params={"username": "octo", "labels": "docs, bug"})
    assert [i["id"] for i in response.json()["data"]] == [5]

    response = await api.get("/api/issues", params={"username": "octo", "labels": "docs"})
    assert response.json()["data"] == []


async def test_profile_and_share(api, octo):
    response = await api.get("/api/profile/octo")
    assert response.json()["data"]["user"]["name"] == "Octo Cat"

    response = await api.get("/api/profile/share/octo")
    data = response.json()["data"]
    assert data["shareable"] is True
    assert data["publicUrl"].endswith("/profile/octo")
    assert data["profileData"]["followers"] == 10


async def test_sentiment_analysis_needs_reviews_first(api, octo):
    response = await api.get("/api/sentiment/analysis", params={"username": "octo"})
    assert response.status_code == 404
    assert response.json() == {"error": "No review data found"}

    await api.get("/api/reviews", params={"username": "octo"})
    response = await api.get("/api/sentiment/analysis", params={"username": "octo"})
    assert response.status_code == 200
    assert response.json()["data"]["summary"]["totalReviews"] == 1


async def test_community_impact_needs_cached_profile(api, octo):
    response = await api.get("/api/community/impact", params={"username": "octo"})
    assert response.status_code == 404
    assert response.json() == {"error": "User data not found"}

    await api.get("/api/impact", params={"username": "octo"})
    response = await api.get("/api/community/impact", params={"username": "octo"})
    assert response.status_code == 200
    assert response.json()["data"]["firstTimeContributors"]["total"] == 1


@pytest.mark.parametrize("payload", [None, {}, {"text": ""}])
async def test_analyze_requires_text(api, payload):
    response = await api.post("/api/sentiment/analyze", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "Text is required"}


async def test_analyze_text(api):
    response = await api.post("/api/sentiment/analyze", json={"text": "This is great"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["score"] > 0
    assert data["wordCount"] == 3

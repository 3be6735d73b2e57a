"""HTTP tests for the metrics endpoints."""

from steward.core.metrics import metrics


async def test_summary_counts_recent_events(api):
    metrics.cache_lookup("dashboard_octo", hit=False)
    metrics.cache_lookup("dashboard_octo", hit=True)
    metrics.github_request("/users/octo", 200, 12.5)

    response = await api.get("/api/metrics/summary")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_events"] == 3
    assert data["cache_hit_rate"] == 0.5
    assert data["github_requests"] == 1
    assert data["by_category"] == {"cache": 2, "github": 1}


async def test_events_filtered_and_newest_first(api):
    metrics.github_request("/users/a", 200, 1.0)
    metrics.github_failure("/users/b", "HTTP 502")
    metrics.github_request("/users/c", 200, 1.0)

    response = await api.get("/api/metrics/events", params={"event_type": "request"})
    assert [e["subject"] for e in response.json()["data"]] == ["/users/c", "/users/a"]


async def test_clear(api):
    metrics.sync_completed("maint", 1, 1, 0, 10.0)
    response = await api.post("/api/metrics/clear")
    assert response.json()["data"] == {"status": "cleared", "events_cleared": 1}
    assert metrics.get_buffer() == []

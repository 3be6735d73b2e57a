"""Tests for the scheduled maintainer sync."""

from steward.services.maintainer_service import NotMaintainerError
from steward.tasks import github_sync


class StubSyncService:
    def __init__(self, client):
        self.client = client

    async def sync_user(self, username, create_missing=False):
        assert create_missing
        if username == "casual":
            raise NotMaintainerError()
        return {"message": "Data synced successfully", "repositories": 2, "prReviews": 1, "issueTriage": 0}


async def _noop():
    return None


def test_sync_maintainers_reports_each_user(monkeypatch):
    monkeypatch.setattr(github_sync, "SyncService", StubSyncService)
    monkeypatch.setattr(github_sync, "close_db", _noop)
    monkeypatch.setattr(github_sync.settings, "SYNC_USERNAMES", ["maint", "casual"])

    result = github_sync.sync_maintainers.run()

    assert result["status"] == "completed"
    assert result["synced"] == 1
    assert result["results"]["maint"]["repositories"] == 2
    assert result["results"]["casual"] == {"error": "User is not a maintainer"}


def test_sync_single_maintainer(monkeypatch):
    monkeypatch.setattr(github_sync, "SyncService", StubSyncService)
    monkeypatch.setattr(github_sync, "close_db", _noop)

    assert github_sync.sync_maintainer.run("maint")["prReviews"] == 1

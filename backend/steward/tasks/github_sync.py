import asyncio
import logging

from steward.core.config import settings
from steward.core.database import close_db
from steward.scheduler.celery_app import app
from steward.services.github.client import GitHubClient, GitHubError
from steward.services.maintainer_service import MaintainerLookupError
from steward.services.sync_service import SyncService

logger = logging.getLogger(__name__)


@app.task(name="steward.tasks.github_sync.sync_maintainers")
def sync_maintainers() -> dict[str, object]:
    """Scheduled task to pull every configured maintainer's GitHub activity."""
    results = asyncio.run(_sync_maintainers_async(settings.SYNC_USERNAMES))

    synced = [name for name, result in results.items() if "error" not in result]
    if synced:
        logger.info("Synced %s of %s maintainers", len(synced), len(results))
    else:
        logger.warning("No maintainers synced")

    return {
        "status": "completed",
        "synced": len(synced),
        "results": results,
    }


@app.task(name="steward.tasks.github_sync.sync_maintainer")
def sync_maintainer(username: str) -> dict[str, object]:
    """On-demand sync of a single maintainer."""
    return asyncio.run(_sync_maintainers_async([username]))[username]


async def _sync_maintainers_async(usernames: list[str]) -> dict[str, dict]:
    results: dict[str, dict] = {}
    async with GitHubClient() as client:
        for username in usernames:
            service = SyncService(client)
            try:
                results[username] = await service.sync_user(username, create_missing=True)
            except (GitHubError, MaintainerLookupError) as exc:
                logger.error("Sync failed for %s: %s", username, exc)
                results[username] = {"error": str(exc)}
    # Pooled connections are bound to this event loop
    await close_db()
    return results

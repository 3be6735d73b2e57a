"""
FastAPI dependencies wiring services to shared resources.

Tests swap any of these out through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import AsyncIterator, Callable, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from steward.core.cache import PayloadCache
from steward.core.config import settings
from steward.core.database import get_db
from steward.core.redis import get_async_redis
from steward.services.comment_analysis_service import CommentAnalysisService
from steward.services.github.client import GitHubClient
from steward.services.github_dashboard_service import GitHubDashboardService
from steward.services.impact_service import ImpactService
from steward.services.maintainer_service import MaintainerService

ClientFactory = Callable[[Optional[str]], GitHubClient]


async def get_payload_cache() -> PayloadCache:
    return PayloadCache(
        await get_async_redis(),
        prefix=settings.CACHE_KEY_PREFIX,
        default_ttl_minutes=settings.REVIEWS_CACHE_TTL_MINUTES,
    )


@lru_cache
def get_comment_service() -> CommentAnalysisService:
    return CommentAnalysisService()


def get_github_client_factory() -> ClientFactory:
    return lambda token=None: GitHubClient(token=token)


async def get_github_client(
    factory: ClientFactory = Depends(get_github_client_factory),
) -> AsyncIterator[GitHubClient]:
    client = factory(None)
    try:
        yield client
    finally:
        await client.aclose()


def get_dashboard_service(
    client: GitHubClient = Depends(get_github_client),
    cache: PayloadCache = Depends(get_payload_cache),
) -> GitHubDashboardService:
    return GitHubDashboardService(client, cache)


def get_maintainer_service(db: AsyncSession = Depends(get_db)) -> MaintainerService:
    return MaintainerService(session=db)


def get_impact_service(db: AsyncSession = Depends(get_db)) -> ImpactService:
    return ImpactService(session=db)

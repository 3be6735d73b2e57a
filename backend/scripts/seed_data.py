#!/usr/bin/env python3
"""
Seed a demo maintainer with repositories, reviews, triage and mentorship data.

Usage:
    python scripts/seed_data.py [--username demo-maintainer] [--create-tables]
"""

import asyncio
import logging
import os
import sys
from argparse import ArgumentParser
from datetime import date, timedelta

# Add backend to path
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from steward.analysis.sentiment import get_sentiment_strategy
from steward.core.database import AsyncSessionLocal, Base, close_db, engine
from steward.models.base import utc_now
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

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

REVIEW_BODIES = [
    "Great work, thanks for the clear explanation. Looks good to me!",
    "Please consider a simpler approach here, this is confusing.",
    "Nice improvement. I suggest adding a test for the error path.",
    "This is broken and wrong, the build fails.",
    "Thanks! Could you explain the change to the parser?",
]


async def seed(username: str, create_tables: bool = False) -> None:
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Created tables")

    strategy = get_sentiment_strategy("keyword")
    now = utc_now()

    async with AsyncSessionLocal() as session:
        user = User(github_username=username, name="Demo Maintainer", is_maintainer=True,
                    created_at=now - timedelta(days=400))
        session.add(user)
        await session.flush()

        repos = []
        for index, name in enumerate(["core", "docs", "cli"]):
            repo = Repository(
                user_id=user.id,
                name=name,
                full_name=f"{username}/{name}",
                language="Python",
                stars=100 * (index + 1),
                forks=10 * (index + 1),
            )
            session.add(repo)
            repos.append(repo)
        await session.flush()

        for repo in repos:
            session.add(RepositorySnapshot(
                repository_id=repo.id, snapshot_date=now - timedelta(days=90),
                stars=repo.stars // 2, forks=repo.forks // 2, issues=40,
                pull_requests=10, contributors=5, activity_score=20.0,
            ))
            session.add(RepositorySnapshot(
                repository_id=repo.id, snapshot_date=now,
                stars=repo.stars, forks=repo.forks, issues=25,
                pull_requests=22, contributors=8, activity_score=30.0,
            ))

        for index, body in enumerate(REVIEW_BODIES * 3):
            result = strategy.analyze(body)
            session.add(PRReview(
                user_id=user.id,
                repository_id=repos[index % len(repos)].id,
                github_review_id=f"seed-{index}",
                pr_number=100 + index,
                title=f"Review for PR #{100 + index}",
                body=body,
                state="COMMENTED",
                sentiment=result.sentiment,
                sentiment_score=result.score,
                created_at=now - timedelta(days=index * 3),
            ))

        issue = Issue(repository_id=repos[0].id, number=7, title="Crash on empty config",
                      state="open", labels="bug,priority: high")
        session.add(issue)
        await session.flush()
        for index, action in enumerate(["COMMENTED", "LABELED", "CLOSED"]):
            session.add(IssueTriage(user_id=user.id, issue_id=issue.id, action=action,
                                    created_at=now - timedelta(days=index)))

        for index, login in enumerate(["alice", "bob", "carol"]):
            contributor = Contributor(github_username=f"{username}-{login}", name=login.title())
            session.add(contributor)
            await session.flush()
            for n in range(index + 1):
                session.add(Contribution(
                    contributor_id=contributor.id,
                    repository_id=repos[n % len(repos)].id,
                    type=["COMMIT", "PULL_REQUEST", "DOCUMENTATION"][n],
                    created_at=now - timedelta(days=10 * n),
                ))
            session.add(MentorshipActivity(
                user_id=user.id,
                contributor_id=contributor.id,
                type=["CODE_REVIEW", "GUIDANCE", "COLLABORATION"][index],
                impact=["HIGH", "MEDIUM", "HIGH"][index],
                description=f"Helped {login.title()} land a first change",
            ))

        for months_ago in range(3):
            start = date.today().replace(day=1) - timedelta(days=30 * months_ago)
            session.add(CommunityImpact(
                user_id=user.id, period="MONTHLY",
                start_date=start, end_date=start + timedelta(days=29),
                maintainer_score=70.0 + months_ago, community_score=65.0,
                leadership_score=60.0 - months_ago,
            ))

        await session.commit()

    logger.info("Seeded demo maintainer %s", username)
    await close_db()


if __name__ == "__main__":
    parser = ArgumentParser(description="Seed demo maintainer data")
    parser.add_argument("--username", default="demo-maintainer")
    parser.add_argument("--create-tables", action="store_true",
                        help="Create tables directly instead of relying on Alembic")
    args = parser.parse_args()

    asyncio.run(seed(args.username, args.create_tables))

# Base
from steward.models.base import TimestampMixin, IdMixin

# Accounts & Repositories
from steward.models.user import User
from steward.models.repository import Repository
from steward.models.repository_snapshot import RepositorySnapshot

# Maintainer Activity
from steward.models.pr_review import PRReview
from steward.models.issue import Issue
from steward.models.issue_triage import IssueTriage
from steward.models.mentorship_activity import MentorshipActivity

# Community
from steward.models.contributor import Contributor
from steward.models.contribution import Contribution
from steward.models.community_impact import CommunityImpact
from steward.models.impact_metric import ImpactMetric

__all__ = [
    "TimestampMixin",
    "IdMixin",
    "User",
    "Repository",
    "RepositorySnapshot",
    "PRReview",
    "Issue",
    "IssueTriage",
    "MentorshipActivity",
    "Contributor",
    "Contribution",
    "CommunityImpact",
    "ImpactMetric",
]

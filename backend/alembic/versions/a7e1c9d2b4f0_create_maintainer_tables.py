"""create_maintainer_tables

Revision ID: a7e1c9d2b4f0
Revises:
Create Date: 2026-10-12 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "a7e1c9d2b4f0"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns() -> list:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("github_username", sa.String(length=100), nullable=False),
        sa.Column("github_id", sa.String(length=50), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("website", sa.String(length=500), nullable=True),
        sa.Column("twitter", sa.String(length=100), nullable=True),
        sa.Column("linkedin", sa.String(length=200), nullable=True),
        sa.Column("is_maintainer", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_github_username", "users", ["github_username"], unique=True)

    # Repositories
    op.create_table(
        "repositories",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("full_name", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("url", sa.String(length=500), nullable=True),
        sa.Column("language", sa.String(length=50), nullable=True),
        sa.Column("stars", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("forks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("open_issues", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_repositories_user_id", "repositories", ["user_id"])
    op.create_index("ix_repositories_full_name", "repositories", ["full_name"], unique=True)

    op.create_table(
        "repository_snapshots",
        *_base_columns(),
        sa.Column("repository_id", sa.Integer(), sa.ForeignKey("repositories.id"), nullable=False),
        sa.Column("snapshot_date", sa.DateTime(), nullable=False),
        sa.Column("stars", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("forks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("issues", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pull_requests", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("contributors", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("activity_score", sa.Float(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_repository_snapshots_repository_id", "repository_snapshots", ["repository_id"])
    op.create_index("ix_repository_snapshots_snapshot_date", "repository_snapshots", ["snapshot_date"])

    # Maintainer activity
    op.create_table(
        "pr_reviews",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("repository_id", sa.Integer(), sa.ForeignKey("repositories.id"), nullable=True),
        sa.Column("github_review_id", sa.String(length=50), nullable=True),
        sa.Column("pr_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("state", sa.String(length=30), nullable=True),
        sa.Column("sentiment", sa.String(length=10), nullable=True),
        sa.Column("sentiment_score", sa.Float(), nullable=True),
        sa.Column("url", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("github_review_id", name="uq_pr_reviews_github_review_id"),
    )
    op.create_index("ix_pr_reviews_user_id", "pr_reviews", ["user_id"])
    op.create_index("ix_pr_reviews_repository_id", "pr_reviews", ["repository_id"])
    op.create_index("ix_pr_reviews_sentiment", "pr_reviews", ["sentiment"])

    op.create_table(
        "issues",
        *_base_columns(),
        sa.Column("repository_id", sa.Integer(), sa.ForeignKey("repositories.id"), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("state", sa.String(length=10), nullable=True),
        sa.Column("labels", sa.String(length=500), nullable=True),
        sa.Column("url", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_issues_repository_id", "issues", ["repository_id"])
    op.create_index("ix_issues_url", "issues", ["url"])

    op.create_table(
        "issue_triage",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("issue_id", sa.Integer(), sa.ForeignKey("issues.id"), nullable=True),
        sa.Column("action", sa.String(length=30), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("github_comment_id", sa.String(length=50), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("github_comment_id"),
    )
    op.create_index("ix_issue_triage_user_id", "issue_triage", ["user_id"])
    op.create_index("ix_issue_triage_issue_id", "issue_triage", ["issue_id"])
    op.create_index("ix_issue_triage_action", "issue_triage", ["action"])

    # Community
    op.create_table(
        "contributors",
        *_base_columns(),
        sa.Column("github_username", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("first_contribution", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contributors_github_username", "contributors", ["github_username"], unique=True)

    op.create_table(
        "contributions",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("contributor_id", sa.Integer(), sa.ForeignKey("contributors.id"), nullable=True),
        sa.Column("repository_id", sa.Integer(), sa.ForeignKey("repositories.id"), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("url", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contributions_user_id", "contributions", ["user_id"])
    op.create_index("ix_contributions_contributor_id", "contributions", ["contributor_id"])
    op.create_index("ix_contributions_repository_id", "contributions", ["repository_id"])

    op.create_table(
        "mentorship_activities",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("contributor_id", sa.Integer(), sa.ForeignKey("contributors.id"), nullable=True),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("impact", sa.String(length=10), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("url", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_mentorship_activities_user_id", "mentorship_activities", ["user_id"])
    op.create_index("ix_mentorship_activities_contributor_id", "mentorship_activities", ["contributor_id"])
    op.create_index("ix_mentorship_activities_type", "mentorship_activities", ["type"])
    op.create_index("ix_mentorship_activities_impact", "mentorship_activities", ["impact"])

    op.create_table(
        "community_impact",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("period", sa.String(length=10), nullable=False, server_default="MONTHLY"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("maintainer_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("community_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("leadership_score", sa.Float(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_community_impact_user_id", "community_impact", ["user_id"])

    op.create_table(
        "impact_metrics",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("period", sa.String(length=20), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("new_contributors", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("returning_contributors", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("contributor_retention_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("contributor_growth_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("issues_resolved", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("prs_merged", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("activity_growth", sa.Float(), nullable=False, server_default="0"),
        sa.Column("repository_health_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("mentorship_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("contributor_quality_improvement", sa.Float(), nullable=False, server_default="0"),
        sa.Column("long_term_impact_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("overall_impact_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("predicted_long_term_impact", sa.Float(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_impact_metrics_user_id", "impact_metrics", ["user_id"])
    op.create_index("ix_impact_metrics_start_date", "impact_metrics", ["start_date"])


def downgrade() -> None:
    for table in (
        "impact_metrics",
        "community_impact",
        "mentorship_activities",
        "contributions",
        "contributors",
        "issue_triage",
        "issues",
        "pr_reviews",
        "repository_snapshots",
        "repositories",
        "users",
    ):
        op.drop_table(table)

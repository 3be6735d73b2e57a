from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin

class ImpactMetric(Base, IdMixin, TimestampMixin):
    """
    Timestamped snapshot of a computed impact analysis, used for historical trends.
    """
    __tablename__ = "impact_metrics"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    period = Column(String(20), nullable=False)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)

    new_contributors = Column(Integer, nullable=False, default=0)
    returning_contributors = Column(Integer, nullable=False, default=0)
    contributor_retention_rate = Column(Float, nullable=False, default=0.0)
    contributor_growth_rate = Column(Float, nullable=False, default=0.0)
    issues_resolved = Column(Integer, nullable=False, default=0)
    prs_merged = Column(Integer, nullable=False, default=0)
    activity_growth = Column(Float, nullable=False, default=0.0)
    repository_health_score = Column(Float, nullable=False, default=0.0)
    mentorship_score = Column(Float, nullable=False, default=0.0)
    contributor_quality_improvement = Column(Float, nullable=False, default=0.0)
    long_term_impact_score = Column(Float, nullable=False, default=0.0)
    overall_impact_score = Column(Float, nullable=False, default=0.0)
    predicted_long_term_impact = Column(Float, nullable=False, default=0.0)
